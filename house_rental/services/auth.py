"""
Authentication service for registration, login and token management.
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from house_rental.config import get_settings
from house_rental.repositories.user import UserRepository
from house_rental.models.user import User, UserRole
from house_rental.schemas.user import UserCreate
from house_rental.utils.auth import create_access_token, verify_token
from house_rental.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    ConflictError,
    ValidationError,
    InternalServerError,
    APIException
)
from jose import JWTError, ExpiredSignatureError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing registration, login and the current user.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    @property
    def token_lifetime_seconds(self) -> int:
        return get_settings().access_token_expire_days * 24 * 60 * 60

    def create_token(self, user: User) -> str:
        """Access token carrying id, role, name and email claims."""
        return create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            name=user.name
        )

    async def register(self, user_data: UserCreate) -> Tuple[User, str]:
        """
        Create an account and issue a token.

        Raises:
            ConflictError: If the email is already registered
            ValidationError: If the data fails model validation
        """
        try:
            existing = await self.user_repo.get_by_email(user_data.email)
            if existing:
                raise ConflictError("Email already registered")

            user = await self.user_repo.create_user(user_data.model_dump())
            logger.info(f"Registered user {user.email} with role {user.role.value}")
            return user, self.create_token(user)

        except APIException:
            raise
        except ValueError as e:
            raise ValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to register user {user_data.email}: {e}")
            raise InternalServerError("Failed to register user")

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid
            ValidationError: If input is missing
        """
        try:
            if not email or not email.strip():
                raise ValidationError("Email is required")

            if not password:
                raise ValidationError("Password is required")

            user = await self.user_repo.authenticate_user(email, password)

            if not user:
                logger.warning(f"Failed authentication attempt for email: {email}")
                raise InvalidCredentialsError()

            return user

        except (ValidationError, InvalidCredentialsError):
            raise
        except Exception as e:
            logger.error(f"Authentication error for {email}: {e}")
            raise InvalidCredentialsError()

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """Authenticate and issue a token."""
        user = await self.authenticate_user(email, password)
        return user, self.create_token(user)

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user behind an access token.

        Raises:
            InvalidTokenError: If token is invalid or the user no longer exists
            TokenExpiredError: If token is expired
            InactiveUserError: If user account is inactive
        """
        try:
            token_payload = verify_token(token, token_type="access")
            user = await self.user_repo.get_by_id(uuid.UUID(token_payload.user_id))
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(str(e))

        if not user:
            raise InvalidTokenError("User not found")

        if not user.is_active:
            raise InactiveUserError()

        return user

    async def list_users(self, role: Optional[UserRole] = None, skip: int = 0, limit: int = 100) -> Tuple[list, int]:
        """Users for the admin surface with the matching total."""
        users = await self.user_repo.get_users_by_role(role=role, skip=skip, limit=limit)
        total = await self.user_repo.count({"role": role} if role else None)
        return users, total
