"""
Property request API endpoints: send a request, list sent and received
requests, approve or reject, withdraw.
"""

from fastapi import APIRouter, Depends, status, Path
from typing import List
from uuid import UUID

from house_rental.models.user import User
from house_rental.services.property_request import PropertyRequestService
from house_rental.schemas.property_request import (
    PropertyRequestCreate,
    PropertyRequestStatusUpdate,
    PropertyRequestResponse
)
from house_rental.schemas.listing import MessageResponse
from house_rental.schemas.error import get_error_responses, get_crud_error_responses
from house_rental.utils.dependencies import get_current_active_user, get_property_request_service


router = APIRouter(prefix="/property-requests", tags=["Property Requests"])


@router.post(
    "",
    response_model=PropertyRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send property request",
    description="Ask the owner about a listing. Only one pending request per listing is allowed.",
    responses=get_error_responses(400, 401, 404, 500)
)
async def create_request(
    request_data: PropertyRequestCreate,
    current_user: User = Depends(get_current_active_user),
    request_service: PropertyRequestService = Depends(get_property_request_service)
) -> PropertyRequestResponse:
    """
    Create a pending request.

    Raises:
        BadRequestError: If the listing id is missing
        ListingNotFoundError: If the listing doesn't exist
        DuplicatePendingRequestError: If a pending request already exists
    """
    property_request = await request_service.create_request(request_data, current_user)
    return PropertyRequestResponse.model_validate(property_request.to_dict())


@router.get(
    "/user",
    response_model=List[PropertyRequestResponse],
    summary="Requests I sent",
    responses=get_error_responses(401)
)
async def list_my_requests(
    current_user: User = Depends(get_current_active_user),
    request_service: PropertyRequestService = Depends(get_property_request_service)
) -> List[PropertyRequestResponse]:
    requests = await request_service.list_for_user(current_user)
    return [PropertyRequestResponse.model_validate(r.to_dict()) for r in requests]


@router.get(
    "/owner",
    response_model=List[PropertyRequestResponse],
    summary="Requests on my listings",
    description="Requests on listings owned by the caller, matched by id or owner email",
    responses=get_error_responses(401)
)
async def list_received_requests(
    current_user: User = Depends(get_current_active_user),
    request_service: PropertyRequestService = Depends(get_property_request_service)
) -> List[PropertyRequestResponse]:
    requests = await request_service.list_for_owner(current_user)
    return [PropertyRequestResponse.model_validate(r.to_dict()) for r in requests]


@router.patch(
    "/{request_id}",
    response_model=PropertyRequestResponse,
    summary="Approve or reject request",
    description="Decide a pending request. Allowed for the listing owner.",
    responses=get_crud_error_responses()
)
async def update_request_status(
    status_data: PropertyRequestStatusUpdate,
    request_id: UUID = Path(..., description="Property request ID"),
    current_user: User = Depends(get_current_active_user),
    request_service: PropertyRequestService = Depends(get_property_request_service)
) -> PropertyRequestResponse:
    property_request = await request_service.update_status(request_id, status_data, current_user)
    return PropertyRequestResponse.model_validate(property_request.to_dict())


@router.delete(
    "/{request_id}",
    response_model=MessageResponse,
    summary="Withdraw request",
    description="Delete a request. Only the requester may withdraw it.",
    responses=get_error_responses(401, 403, 404)
)
async def delete_request(
    request_id: UUID = Path(..., description="Property request ID"),
    current_user: User = Depends(get_current_active_user),
    request_service: PropertyRequestService = Depends(get_property_request_service)
) -> MessageResponse:
    await request_service.delete_request(request_id, current_user)
    return MessageResponse(message="Request deleted")
