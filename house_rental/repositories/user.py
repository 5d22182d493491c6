"""
User repository: account creation, email lookup and credential checks.
Emails are stored lowercased, so lookups normalize before querying.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from house_rental.repositories.base import BaseRepository
from house_rental.models.user import User, UserRole
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Accounts for tenants, owners and administrators."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create an account from registration data.

        ``user_data`` holds name, email and the plain password, optionally
        role (default user) and is_active (default true). The password is
        hashed here and never stored as given.

        Raises:
            ValueError: If the email is malformed or already registered, or the password is too short
        """
        email = User.validate_email_format(user_data["email"])
        if await self.get_by_email(email):
            raise ValueError(f"User with email {email} already exists")

        values = {key: value for key, value in user_data.items() if key != "password"}
        values.update(
            email=email,
            hashed_password=User.hash_password(user_data["password"]),
            role=user_data.get("role") or UserRole.USER,
            is_active=user_data.get("is_active", True),
        )

        user = await self.create(values)
        logger.info(f"Created {user.role.value} account {user.email}")
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower().strip()))
        return result.scalar_one_or_none()

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        The active account matching the credentials, or None.
        Unknown email, inactive account and wrong password are indistinguishable to the caller.
        """
        user = await self.get_by_email(email)
        if user is None or not user.is_active or not user.verify_password(password):
            logger.debug(f"Credential check failed for {email}")
            return None
        return user

    async def get_users_by_role(
        self,
        role: Optional[UserRole] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        """Users, optionally of one role, newest first."""
        filters = {"role": role} if role else None
        return await self.get_multi(skip=skip, limit=limit, filters=filters, order_by="-created_at")
