"""
Listing API endpoints: creation, radius queries, search, ownership-checked
updates and admin verification.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional, List
from decimal import Decimal
from uuid import UUID

from house_rental.models.user import User
from house_rental.repositories.listing import ListingSearchFilters
from house_rental.services.listing import ListingService
from house_rental.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingSearchResponse,
    MessageResponse
)
from house_rental.schemas.error import get_error_responses, get_crud_error_responses
from house_rental.utils.dependencies import (
    get_current_active_user,
    get_current_admin_user,
    get_optional_current_user,
    get_listing_service
)


router = APIRouter(prefix="/listings", tags=["Listings"])


@router.get(
    "",
    response_model=List[ListingResponse],
    summary="Query listings",
    description=(
        "With both lat and lng, listings within radius metres sorted nearest first. "
        "Without coordinates, the most recent listings. At most 200 results either way."
    ),
    responses=get_error_responses(400, 500)
)
async def query_listings(
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Centre latitude"),
    lng: Optional[float] = Query(None, ge=-180, le=180, description="Centre longitude"),
    radius: Optional[float] = Query(None, ge=0, description="Radius in metres, default 5000"),
    listing_service: ListingService = Depends(get_listing_service)
) -> List[ListingResponse]:
    listings = await listing_service.query_listings(lat, lng, radius)
    return [ListingResponse.model_validate(listing.to_dict()) for listing in listings]


@router.get(
    "/search",
    response_model=ListingSearchResponse,
    summary="Search listings",
    description="Filtered, paginated search ordered newest first",
    responses=get_error_responses(400, 500)
)
async def search_listings(
    q: Optional[str] = Query(None, description="Text matched against title, address and description"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    category: Optional[str] = Query(None, description="Property type"),
    furnished: Optional[str] = Query(None, description="Furnishing, e.g. Furnished"),
    verified: Optional[bool] = Query(None, description="Only verified listings when true"),
    min_beds: Optional[int] = Query(None, alias="minBeds", ge=0),
    min_baths: Optional[int] = Query(None, alias="minBaths", ge=0),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingSearchResponse:
    filters = ListingSearchFilters(
        q=q,
        min_price=min_price,
        max_price=max_price,
        category=category,
        furnished=furnished,
        verified=verified,
        min_beds=min_beds,
        min_baths=min_baths
    )
    result = await listing_service.search_listings(filters, page=page, page_size=page_size)
    result["items"] = [ListingResponse.model_validate(listing.to_dict()) for listing in result["items"]]
    return ListingSearchResponse(**result)


@router.get(
    "/mine",
    response_model=List[ListingResponse],
    summary="My listings",
    description="Listings owned by the authenticated user, by reference or by owner email",
    responses=get_error_responses(401, 403)
)
async def my_listings(
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> List[ListingResponse]:
    listings = await listing_service.list_for_owner(current_user)
    return [ListingResponse.model_validate(listing.to_dict()) for listing in listings]


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    description=(
        "Create a listing. Signed-in users own the listing; anonymous callers "
        "must provide ownerEmail. Location is GeoJSON or a lat/lng pair."
    ),
    responses=get_error_responses(400, 500)
)
async def create_listing(
    listing_data: ListingCreate,
    current_user: Optional[User] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Create a listing.

    Raises:
        BadRequestError: If no owner identity is available
    """
    listing = await listing_service.create_listing(listing_data, current_user)
    return ListingResponse.model_validate(listing.to_dict())


@router.get(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Get listing",
    description="Listing with its owner summary",
    responses=get_error_responses(404)
)
async def get_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    listing = await listing_service.get_listing(listing_id)
    return ListingResponse.model_validate(listing.to_dict())


@router.patch(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Update listing",
    description="Partial update by the owner or an admin. Coordinates change only as a pair.",
    responses=get_crud_error_responses()
)
async def update_listing(
    listing_data: ListingUpdate,
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Update a listing.

    Raises:
        ListingNotFoundError: If the listing doesn't exist
        ListingOwnershipError: If the user is neither owner nor admin
    """
    listing = await listing_service.update_listing(listing_id, listing_data, current_user)
    return ListingResponse.model_validate(listing.to_dict())


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    summary="Delete listing",
    description="Hard delete by the owner or an admin. Property requests are kept.",
    responses=get_crud_error_responses()
)
async def delete_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> MessageResponse:
    await listing_service.delete_listing(listing_id, current_user)
    return MessageResponse(message="Listing deleted")


@router.patch(
    "/{listing_id}/verify",
    response_model=ListingResponse,
    summary="Verify listing",
    description="Mark a listing as verified. Admin only.",
    responses=get_crud_error_responses()
)
async def verify_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_admin_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    listing = await listing_service.verify_listing(listing_id, current_user)
    return ListingResponse.model_validate(listing.to_dict())
