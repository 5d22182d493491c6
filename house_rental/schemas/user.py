"""
Pydantic schemas for user requests and responses.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List
from datetime import datetime
from house_rental.models.user import UserRole, MIN_PASSWORD_LENGTH


class UserCreate(BaseModel):
    """Schema for registering a new user."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Display name",
        examples=["Asha Raman"]
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["asha@example.com"]
    )

    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=128,
        description=f"Password (minimum {MIN_PASSWORD_LENGTH} characters)",
        examples=["secret123"]
    )

    role: UserRole = Field(
        ...,
        description="One of user, owner, admin",
        examples=["owner"]
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class UserResponse(BaseModel):
    """User response schema (excluding sensitive data)."""

    id: str = Field(..., description="User's unique identifier")
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="User's email address")
    role: UserRole = Field(..., description="User's role")
    is_active: bool = Field(..., description="Whether the user account is active")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class UserSummary(BaseModel):
    """Compact user representation embedded in other resources."""

    id: str
    name: str
    email: str


class UserListResponse(BaseModel):
    """Paginated list of users."""

    users: List[UserResponse]
    total: int
    page: int
    page_size: int
