"""
Accounts for tenants, property owners and administrators.
"""

from sqlalchemy import String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from house_rental.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
import enum
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from house_rental.models.listing import Listing

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6


class UserRole(str, enum.Enum):
    """Owners publish listings and review requests; admins see everything."""
    USER = "user"
    OWNER = "owner"
    ADMIN = "admin"


class User(Base):
    """
    Registered account; passwords are stored as bcrypt hashes.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Lowercased login email"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=UserRole.USER,
        index=True,
        comment="user, owner or admin"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Deactivated accounts cannot log in"
    )

    listings: Mapped[List["Listing"]] = relationship(
        "Listing",
        back_populates="owner",
        lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value if self.role else None})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Syntax check through email-validator; deliverability is not checked.

        Returns:
            The normalized address, lowercased

        Raises:
            ValueError: If the address is malformed
        """
        try:
            return validate_email(email, check_deliverability=False).normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {e}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        return pwd_context.verify(password, self.hashed_password)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.OWNER

    def to_dict(self) -> dict:
        """Public profile; the password hash is never included."""
        return {
            **self.to_summary(),
            "role": self.role.value,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def to_summary(self) -> dict:
        """Identity embedded in listings and property requests."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
        }
