"""
Generic async repository shared by the user, listing, request and image repositories.
Every write commits on success and rolls back on failure.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from house_rental.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type, Iterable
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Common persistence operations for one mapped model.

    Args:
        model: Mapped class handled by this repository
        db: Session scoped to the current request
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        """Equality filters; a list value becomes an IN clause. Unknown keys are ignored."""
        for field, value in (filters or {}).items():
            column = getattr(self.model, field, None)
            if column is None:
                continue
            query = query.where(column.in_(value) if isinstance(value, list) else column == value)
        return query

    def _apply_ordering(self, query, order_by: Optional[str]):
        """``order_by`` names a column, with a leading '-' for descending. Newest first otherwise."""
        if not order_by:
            return query.order_by(self.model.created_at.desc())

        column = getattr(self.model, order_by.lstrip("-"), None)
        if column is None:
            return query
        return query.order_by(column.desc() if order_by.startswith("-") else column.asc())

    async def _commit_refreshing(self, objects: Iterable[ModelType]) -> None:
        await self.db.commit()
        for obj in objects:
            await self.db.refresh(obj)

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Insert one row.

        Returns:
            The persisted instance with defaults and relationships loaded
        """
        db_obj = self.model(**obj_in)
        try:
            self.db.add(db_obj)
            await self._commit_refreshing([db_obj])
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Could not insert {self.model_name}: {e}")
            raise

        logger.debug(f"Inserted {self.model_name} {db_obj.id}")
        return db_obj

    async def bulk_create(self, objects_in: List[Dict[str, Any]]) -> List[ModelType]:
        """Insert several rows in one transaction, preserving input order."""
        db_objects = [self.model(**values) for values in objects_in]
        try:
            self.db.add_all(db_objects)
            await self._commit_refreshing(db_objects)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Could not insert {len(db_objects)} {self.model_name} rows: {e}")
            raise

        logger.debug(f"Inserted {len(db_objects)} {self.model_name} rows")
        return db_objects

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        try:
            result = await self.db.execute(select(self.model).where(self.model.id == id))
        except Exception as e:
            logger.error(f"Lookup of {self.model_name} {id} failed: {e}")
            raise
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None
    ) -> List[ModelType]:
        """
        Page through rows.

        Args:
            skip: Rows to skip
            limit: Maximum rows returned
            filters: Column equality filters
            order_by: Column name, '-' prefix for descending

        Returns:
            Matching instances
        """
        query = self._apply_ordering(self._apply_filters(select(self.model), filters), order_by)
        try:
            result = await self.db.execute(query.offset(skip).limit(limit))
        except Exception as e:
            logger.error(f"Listing {self.model_name} rows failed: {e}")
            raise

        rows = list(result.scalars().all())
        logger.debug(f"Fetched {len(rows)} {self.model_name} rows")
        return rows

    async def update(self, id: uuid.UUID, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Assign the given attributes and commit.

        None values are skipped, so callers cannot null a column through here.

        Returns:
            The refreshed instance, or None when no row has this id
        """
        db_obj = await self.get_by_id(id)
        if db_obj is None:
            return None

        changes = {field: value for field, value in obj_in.items() if value is not None}
        if not changes:
            return db_obj

        try:
            for field, value in changes.items():
                setattr(db_obj, field, value)
            await self._commit_refreshing([db_obj])
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Could not update {self.model_name} {id}: {e}")
            raise

        logger.debug(f"Updated {self.model_name} {id}: {sorted(changes)}")
        return db_obj

    async def delete(self, id: uuid.UUID) -> bool:
        """Hard delete. Returns False when nothing matched."""
        try:
            result = await self.db.execute(delete(self.model).where(self.model.id == id))
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Could not delete {self.model_name} {id}: {e}")
            raise

        return result.rowcount > 0

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        query = self._apply_filters(select(func.count(self.model.id)), filters)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def count_by(self, field: str) -> Dict[str, int]:
        """
        Row counts grouped by one column, keyed by the enum value or lowercased text.
        Used for the admin statistics.
        """
        column = getattr(self.model, field)
        result = await self.db.execute(select(column, func.count(self.model.id)).group_by(column))
        return {
            (value.value if hasattr(value, "value") else str(value).lower()): total
            for value, total in result.all()
        }

    async def exists(self, id: uuid.UUID) -> bool:
        result = await self.db.execute(select(func.count(self.model.id)).where(self.model.id == id))
        return (result.scalar() or 0) > 0
