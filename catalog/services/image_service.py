"""Image upload and the batched image lookups used by every aggregate view."""

import logging
import os
import time
import uuid
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from catalog.config import ALLOWED_IMAGE_TYPES
from catalog.db.postgres_bootstrap import utcnow
from catalog.db.postgres_client import db
from catalog.errors import BadRequestError, CatalogError, InternalError, NotFoundError
from catalog.models import Brand, Image, ImageType, ModuleType, Product, ProductReview, ProductVariant, Section
from catalog.services.listing_cache import listing_cache
from catalog.services.storage_service import storage
from catalog.utils.serializers import image_to_dict, image_to_full_dict

logger = logging.getLogger(__name__)

OWNER_MODELS = {
    ModuleType.PRODUCT: Product,
    ModuleType.VARIANT: ProductVariant,
    ModuleType.PRODUCT_REVIEW: ProductReview,
    ModuleType.SECTION: Section,
    ModuleType.BRAND: Brand,
}

# Images on these owners feed product listings
LISTING_OWNERS = (ModuleType.PRODUCT, ModuleType.VARIANT)


@dataclass
class MediaFile:
    filename: str
    content_type: str
    content: bytes


def fetch_images(
    session: Session,
    owners: Iterable[tuple[ModuleType, str]],
    image_type: ImageType | None = None,
) -> dict[tuple[ModuleType, str], list[Image]]:
    """Fetch live images for many owners in one query.

    Returns a mapping of ``(module_type, module_id)`` to images, oldest first.
    Owners without images are absent from the mapping.
    """
    by_type: dict[ModuleType, set[str]] = defaultdict(set)
    for module_type, module_id in owners:
        by_type[ModuleType(module_type)].add(module_id)
    if not by_type:
        return {}

    owner_clause = or_(
        *(
            and_(Image.module_type == module_type, Image.module_id.in_(sorted(ids)))
            for module_type, ids in by_type.items()
        )
    )
    stmt = select(Image).where(owner_clause, Image.deleted_at.is_(None))
    if image_type is not None:
        stmt = stmt.where(Image.type == image_type)
    stmt = stmt.order_by(Image.created_at.asc(), Image.id.asc())

    grouped: dict[tuple[ModuleType, str], list[Image]] = defaultdict(list)
    for image in session.scalars(stmt):
        grouped[(ModuleType(image.module_type), image.module_id)].append(image)
    return grouped


def fetch_primary_urls(session: Session, owners: Iterable[tuple[ModuleType, str]]) -> dict[tuple[ModuleType, str], str]:
    """Resolve the first primary image URL per owner in one query."""
    grouped = fetch_images(session, owners, ImageType.PRIMARY)
    return {owner: images[0].url for owner, images in grouped.items()}


def images_payload(grouped: dict, module_type: ModuleType, module_id: str) -> list[dict[str, Any]]:
    return [image_to_dict(image) for image in grouped.get((module_type, module_id), [])]


def _owner_is_live(session: Session, module_type: ModuleType, module_id: str) -> bool:
    model = OWNER_MODELS[module_type]
    stmt = select(model.id).where(model.id == module_id)
    if hasattr(model, "deleted_at"):
        stmt = stmt.where(model.deleted_at.is_(None))
    return session.execute(stmt).first() is not None


class ImageService:
    def __init__(self, database=None, object_storage=None, cache=None):
        self.db = database or db
        self.storage = object_storage or storage
        self.cache = cache or listing_cache

    @staticmethod
    def _object_key(filename: str) -> str:
        extension = os.path.splitext(filename or "")[1]
        return f"{uuid.uuid4()}-{int(time.time() * 1000)}{extension}"

    def upload_image(
        self,
        media: MediaFile,
        module_type: ModuleType | str,
        module_id: str,
        image_type: ImageType | str,
    ) -> dict[str, Any]:
        """
        Upload an image to object storage and record it against its owner.

        Args:
            media: File name, MIME type and raw bytes
            module_type: Owner kind (product, variant, product_review, section, brand)
            module_id: Owner id
            image_type: Image role (primary, gallery, thumbnail, logo, banner)

        Returns:
            Dict with the new image id and its public URL
        """
        try:
            module_type = ModuleType(module_type)
            image_type = ImageType(image_type)
        except ValueError as e:
            raise BadRequestError(str(e)) from e

        if not media or not media.content:
            raise BadRequestError("Image file is required")
        if media.content_type not in ALLOWED_IMAGE_TYPES:
            raise BadRequestError(f"Invalid file type. Allowed types: {', '.join(ALLOWED_IMAGE_TYPES)}")

        with self.db.session_scope("verify image owner") as session:
            if not _owner_is_live(session, module_type, module_id):
                raise NotFoundError(f"{module_type.value.replace('_', ' ').capitalize()} not found")

        object_key = self._object_key(media.filename)
        try:
            url = self.storage.put(object_key, media.content, media.content_type)
        except CatalogError:
            raise
        except Exception as e:
            logger.error(f"Failed to upload {media.filename} to object storage: {e}")
            raise InternalError("Failed to upload image") from e

        with self.db.session_scope("save image") as session:
            image = Image(
                url=url,
                bucket=self.storage.bucket_name,
                object_key=object_key,
                module_type=module_type,
                module_id=module_id,
                type=image_type,
            )
            session.add(image)
            session.flush()
            result = {"imageId": image.id, "url": image.url}

        if module_type in LISTING_OWNERS:
            self.cache.invalidate()
        return result

    def find_by_module(self, module_type: ModuleType | str, module_id: str, image_type: ImageType | str | None = None):
        """Live images of one owner, newest first."""
        with self.db.session_scope("fetch images") as session:
            stmt = select(Image).where(
                Image.module_type == ModuleType(module_type),
                Image.module_id == module_id,
                Image.deleted_at.is_(None),
            )
            if image_type is not None:
                stmt = stmt.where(Image.type == ImageType(image_type))
            images = session.scalars(stmt.order_by(Image.created_at.desc(), Image.id.desc())).all()
            return [image_to_full_dict(image) for image in images]

    def remove(self, image_id: str) -> dict[str, Any]:
        with self.db.session_scope("delete image") as session:
            image = session.scalars(select(Image).where(Image.id == image_id, Image.deleted_at.is_(None))).first()
            if not image:
                raise NotFoundError("Image not found")
            image.deleted_at = utcnow()
            module_type = ModuleType(image.module_type)

        if module_type in LISTING_OWNERS:
            self.cache.invalidate()
        return {"id": image_id}


# Singleton instance
image_service = ImageService()
