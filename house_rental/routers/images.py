"""
Image management API endpoints.
Handles uploads and the per-listing gallery: metadata, ordering and the primary image.
"""

import uuid
from typing import List
from fastapi import APIRouter, Depends, UploadFile, File, Path, status

from house_rental.models.user import User
from house_rental.services.image import ImageService
from house_rental.schemas.image import (
    ListingImageCreate,
    ListingImageUpdate,
    ListingImageResponse,
    ImageReorderRequest,
    ImageUploadResponse
)
from house_rental.schemas.listing import MessageResponse
from house_rental.schemas.error import get_error_responses, get_crud_error_responses
from house_rental.utils.dependencies import get_current_active_user, get_image_service

router = APIRouter(prefix="/images", tags=["Images"])


@router.post(
    "/upload",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload images",
    description="Upload up to 12 JPEG, PNG or WebP files. Returns their public URLs in order.",
    responses=get_error_responses(400, 401, 413)
)
async def upload_images(
    images: List[UploadFile] = File(..., description="Image files"),
    current_user: User = Depends(get_current_active_user),
    image_service: ImageService = Depends(get_image_service)
) -> ImageUploadResponse:
    urls = await image_service.upload_images(images)
    return ImageUploadResponse(urls=urls)


@router.get(
    "/listing/{listing_id}",
    response_model=List[ListingImageResponse],
    summary="Listing gallery",
    description="Images of a listing in display order",
    responses=get_error_responses(404)
)
async def get_listing_images(
    listing_id: uuid.UUID = Path(..., description="Listing ID"),
    image_service: ImageService = Depends(get_image_service)
) -> List[ListingImageResponse]:
    images = await image_service.get_listing_images(listing_id)
    return [ListingImageResponse.model_validate(image.to_dict()) for image in images]


@router.post(
    "/listing/{listing_id}",
    response_model=ListingImageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add image to listing",
    description="Attach image metadata to a listing. Owner or admin only.",
    responses=get_crud_error_responses()
)
async def add_listing_image(
    image_data: ListingImageCreate,
    listing_id: uuid.UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_active_user),
    image_service: ImageService = Depends(get_image_service)
) -> ListingImageResponse:
    image = await image_service.add_image(listing_id, image_data, current_user)
    return ListingImageResponse.model_validate(image.to_dict())


@router.put(
    "/listing/{listing_id}/reorder",
    response_model=List[ListingImageResponse],
    summary="Reorder gallery",
    responses=get_crud_error_responses()
)
async def reorder_listing_images(
    reorder_data: ImageReorderRequest,
    listing_id: uuid.UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_active_user),
    image_service: ImageService = Depends(get_image_service)
) -> List[ListingImageResponse]:
    images = await image_service.reorder_images(listing_id, reorder_data.image_ids, current_user)
    return [ListingImageResponse.model_validate(image.to_dict()) for image in images]


@router.put(
    "/{image_id}",
    response_model=ListingImageResponse,
    summary="Update image",
    description="Update name, sort order or primary flag",
    responses=get_crud_error_responses()
)
async def update_image(
    image_data: ListingImageUpdate,
    image_id: uuid.UUID = Path(..., description="Image ID"),
    current_user: User = Depends(get_current_active_user),
    image_service: ImageService = Depends(get_image_service)
) -> ListingImageResponse:
    image = await image_service.update_image(image_id, image_data, current_user)
    return ListingImageResponse.model_validate(image.to_dict())


@router.delete(
    "/{image_id}",
    response_model=MessageResponse,
    summary="Delete image",
    responses=get_crud_error_responses()
)
async def delete_image(
    image_id: uuid.UUID = Path(..., description="Image ID"),
    current_user: User = Depends(get_current_active_user),
    image_service: ImageService = Depends(get_image_service)
) -> MessageResponse:
    await image_service.delete_image(image_id, current_user)
    return MessageResponse(message="Image deleted")


@router.put(
    "/{image_id}/primary",
    response_model=ListingImageResponse,
    summary="Set primary image",
    description="Make this the only primary image of its listing",
    responses=get_crud_error_responses()
)
async def set_primary_image(
    image_id: uuid.UUID = Path(..., description="Image ID"),
    current_user: User = Depends(get_current_active_user),
    image_service: ImageService = Depends(get_image_service)
) -> ListingImageResponse:
    image = await image_service.set_primary_image(image_id, current_user)
    return ListingImageResponse.model_validate(image.to_dict())
