"""
Image service for listing photo uploads and gallery metadata.
Provides file validation, storage, ordering and the primary image flag.
"""

import io
import uuid
import logging
from pathlib import Path
from typing import List, Optional, Tuple
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from house_rental.config import Settings, get_settings
from house_rental.models.image import ListingImage
from house_rental.models.listing import Listing
from house_rental.models.user import User
from house_rental.repositories.image import ImageRepository
from house_rental.repositories.listing import ListingRepository
from house_rental.schemas.image import ListingImageCreate, ListingImageUpdate
from house_rental.utils.exceptions import (
    ValidationError,
    NotFoundError,
    ListingNotFoundError,
    ListingOwnershipError,
    FileSizeExceededError,
    UnsupportedFileTypeError
)

logger = logging.getLogger(__name__)

# Pillow format names accepted for each declared content type
EXPECTED_FORMATS = {
    "image/jpeg": {"jpeg"},
    "image/jpg": {"jpeg"},
    "image/png": {"png"},
    "image/webp": {"webp"},
}

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


class ImageService:
    """Service for listing image uploads and gallery management."""

    def __init__(self, db_session: AsyncSession, settings: Optional[Settings] = None):
        self.db = db_session
        self.settings = settings or get_settings()
        self.repository = ImageRepository(db_session)
        self.listing_repo = ListingRepository(db_session)
        self.upload_dir = Path(self.settings.upload_dir)
        self.max_file_size = self.settings.max_file_size
        self.allowed_types = self.settings.allowed_file_types

        self.upload_dir.mkdir(parents=True, exist_ok=True)

    # Uploads

    async def validate_image_file(self, file: UploadFile) -> Tuple[bytes, int, int]:
        """
        Validate an uploaded image and return its content and dimensions.

        Raises:
            ValidationError: If the file is not a readable image of the declared type
            UnsupportedFileTypeError: If the content type is not allowed
            FileSizeExceededError: If the file is too large
        """
        if not file.filename:
            raise ValidationError("Filename is required")

        if file.content_type not in self.allowed_types:
            raise UnsupportedFileTypeError(file.content_type or "unknown", self.allowed_types)

        file_ext = Path(file.filename).suffix.lower()
        if file_ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                f"File extension '{file_ext}' not allowed. Allowed extensions: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )

        await file.seek(0)
        content = await file.read()
        if len(content) > self.max_file_size:
            raise FileSizeExceededError(len(content), self.max_file_size)
        if not content:
            raise ValidationError("File is empty")

        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                pil_format = (img.format or "").lower()
                width, height = img.size
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(f"Invalid image file: {str(e)}")

        if pil_format not in EXPECTED_FORMATS.get(file.content_type, set()):
            raise ValidationError(f"File content doesn't match declared type {file.content_type}")

        return content, width, height

    def _generate_file_path(self, filename: str) -> Path:
        file_ext = Path(filename).suffix.lower()
        if file_ext == ".jpeg":
            file_ext = ".jpg"
        return self.upload_dir / f"{uuid.uuid4().hex}{file_ext}"

    async def save_image_file(self, content: bytes, file_path: Path) -> int:
        """Write image bytes to disk; a partial file is removed on failure."""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)
            return len(content)
        except OSError as e:
            if file_path.exists():
                file_path.unlink()
            raise ValidationError(f"Failed to save image file: {str(e)}")

    async def upload_images(self, files: List[UploadFile]) -> List[str]:
        """
        Validate and store uploaded images.

        Every file is validated before any is written, so a bad file rejects the batch.

        Returns:
            Public URLs in the order the files were sent
        """
        if not files:
            raise ValidationError("At least one image is required")
        if len(files) > self.settings.max_upload_files:
            raise ValidationError(f"At most {self.settings.max_upload_files} images can be uploaded at once")

        validated = []
        for file in files:
            content, _, _ = await self.validate_image_file(file)
            validated.append((file.filename, content))

        saved: List[Path] = []
        try:
            for filename, content in validated:
                file_path = self._generate_file_path(filename)
                await self.save_image_file(content, file_path)
                saved.append(file_path)
        except ValidationError:
            for path in saved:
                self.delete_image_file(path)
            raise

        logger.info(f"Stored {len(saved)} uploaded images")
        return [f"/uploads/{path.name}" for path in saved]

    def delete_image_file(self, file_path: Path) -> bool:
        try:
            if file_path.exists():
                file_path.unlink()
                return True
            return False
        except OSError as e:
            logger.warning(f"Failed to delete image file {file_path}: {e}")
            return False

    # Gallery metadata

    async def _get_manageable_listing(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        listing = await self.listing_repo.get_by_id(listing_id)
        if not listing:
            raise ListingNotFoundError()
        if not (current_user.is_admin or listing.is_owned_by(current_user)):
            raise ListingOwnershipError()
        return listing

    async def _get_image(self, image_id: uuid.UUID) -> ListingImage:
        image = await self.repository.get_by_id(image_id)
        if not image:
            raise NotFoundError("Image", detail="Image not found")
        return image

    async def get_listing_images(self, listing_id: uuid.UUID) -> List[ListingImage]:
        """Images of a listing in gallery order."""
        if not await self.listing_repo.exists(listing_id):
            raise ListingNotFoundError()
        return await self.repository.get_by_listing_id(listing_id)

    async def add_image(self, listing_id: uuid.UUID, image_data: ListingImageCreate, current_user: User) -> ListingImage:
        """
        Attach image metadata to a listing.
        Without a sort order the image goes to the end of the gallery.
        """
        await self._get_manageable_listing(listing_id, current_user)

        sort_order = image_data.sort_order
        if sort_order is None:
            sort_order = await self.repository.count_by_listing_id(listing_id)

        image = await self.repository.create({
            "listing_id": listing_id,
            "url": image_data.url,
            "name": image_data.name,
            "size": image_data.size,
            "width": image_data.width,
            "height": image_data.height,
            "is_primary": False,
            "sort_order": sort_order,
        })

        if image_data.is_primary:
            await self.repository.set_primary(listing_id, image.id)
            await self.db.refresh(image)

        logger.info(f"Image {image.id} added to listing {listing_id}")
        return image

    async def update_image(self, image_id: uuid.UUID, image_data: ListingImageUpdate, current_user: User) -> ListingImage:
        image = await self._get_image(image_id)
        await self._get_manageable_listing(image.listing_id, current_user)

        update_data = image_data.model_dump(exclude_unset=True)
        make_primary = update_data.pop("is_primary", None)

        if update_data:
            image = await self.repository.update(image_id, update_data)

        if make_primary is True:
            await self.repository.set_primary(image.listing_id, image_id)
            await self.db.refresh(image)
        elif make_primary is False and image.is_primary:
            image = await self.repository.update(image_id, {"is_primary": False})

        return image

    async def delete_image(self, image_id: uuid.UUID, current_user: User) -> bool:
        image = await self._get_image(image_id)
        await self._get_manageable_listing(image.listing_id, current_user)

        deleted = await self.repository.delete(image_id)
        logger.info(f"Image {image_id} deleted from listing {image.listing_id}")
        return deleted

    async def reorder_images(self, listing_id: uuid.UUID, image_ids: List[uuid.UUID], current_user: User) -> List[ListingImage]:
        """Set the gallery order to the order of ``image_ids``."""
        await self._get_manageable_listing(listing_id, current_user)
        await self.repository.update_sort_orders(listing_id, image_ids)
        return await self.repository.get_by_listing_id(listing_id)

    async def set_primary_image(self, image_id: uuid.UUID, current_user: User) -> ListingImage:
        """Make an image the only primary image of its listing."""
        image = await self._get_image(image_id)
        await self._get_manageable_listing(image.listing_id, current_user)

        if not await self.repository.set_primary(image.listing_id, image_id):
            raise NotFoundError("Image", detail="Image not found")

        await self.db.refresh(image)
        logger.info(f"Image {image_id} set as primary for listing {image.listing_id}")
        return image
