"""
Depends() providers: request-scoped services and the authenticated user.
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from house_rental.config import Settings, get_settings
from house_rental.database import get_db
from house_rental.models.user import User
from house_rental.services.auth import AuthService
from house_rental.services.listing import ListingService
from house_rental.services.property_request import PropertyRequestService
from house_rental.services.image import ImageService
from house_rental.services.geolocation import GeolocationService
from house_rental.utils.exceptions import (
    APIException,
    UnauthorizedError,
    InactiveUserError,
    InsufficientPermissionsError,
    InternalServerError
)


security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_listing_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> ListingService:
    return ListingService(db, settings)


async def get_property_request_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> PropertyRequestService:
    return PropertyRequestService(db, settings)


async def get_image_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> ImageService:
    return ImageService(db, settings)


async def get_geolocation_service(request: Request) -> GeolocationService:
    """The shared instance from app.state; it holds the pooled httpx client."""
    service = getattr(request.app.state, "geolocation_service", None)
    if service is None:
        raise InternalServerError("Geolocation service unavailable outside the application lifespan")
    return service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    User behind the bearer token.

    Raises:
        UnauthorizedError: If the header is missing or the token does not verify
        InactiveUserError: If the account is deactivated
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except APIException:
        raise
    except Exception as e:
        raise UnauthorizedError(f"Authentication failed: {str(e)}")


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise InactiveUserError()
    return current_user


async def get_current_admin_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    if not current_user.is_admin:
        raise InsufficientPermissionsError("access admin resources")
    return current_user


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Anonymous-friendly variant: a missing or unverifiable token yields None.

    Raises:
        InactiveUserError: If the token is valid but the account is deactivated
    """
    if not credentials:
        return None

    try:
        user = await auth_service.get_current_user(credentials.credentials)
    except InactiveUserError:
        raise
    except APIException:
        return None

    if not user.is_active:
        raise InactiveUserError()
    return user
