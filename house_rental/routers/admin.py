"""
Admin API endpoints. Every route requires the admin role.
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional

from house_rental.config import Settings, get_settings
from house_rental.models.user import UserRole
from house_rental.services.auth import AuthService
from house_rental.services.listing import ListingService
from house_rental.schemas.listing import ListingResponse, ListingSearchResponse
from house_rental.schemas.user import UserResponse, UserListResponse
from house_rental.schemas.error import get_error_responses
from house_rental.utils.dependencies import get_auth_service, get_current_admin_user, get_listing_service
from house_rental.utils.exceptions import BadRequestError


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(get_current_admin_user)],
    responses=get_error_responses(401, 403)
)


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
    description="All users, optionally filtered by role"
)
async def list_users(
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings)
) -> UserListResponse:
    page_size = page_size or settings.default_page_size
    if page_size > settings.max_page_size:
        raise BadRequestError(f"pageSize must be between 1 and {settings.max_page_size}")

    users, total = await auth_service.list_users(role=role, skip=(page - 1) * page_size, limit=page_size)
    return UserListResponse(
        users=[UserResponse.model_validate(user.to_dict()) for user in users],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get(
    "/listings",
    response_model=ListingSearchResponse,
    summary="List all listings",
    description="Every listing, newest first, verified or not"
)
async def list_listings(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingSearchResponse:
    result = await listing_service.list_all(page=page, page_size=page_size)
    result["items"] = [ListingResponse.model_validate(listing.to_dict()) for listing in result["items"]]
    return ListingSearchResponse(**result)


@router.get(
    "/stats",
    summary="Dashboard statistics",
    description="Listing counts by status and verification, request counts by status, user counts by role",
    responses=get_error_responses(500)
)
async def get_stats(
    listing_service: ListingService = Depends(get_listing_service)
) -> Dict[str, Any]:
    return await listing_service.get_statistics()
