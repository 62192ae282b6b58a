"""Product reviews with attached media."""

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.auth import Caller, ensure_owner_or_admin
from catalog.db.postgres_bootstrap import utcnow
from catalog.db.postgres_client import db
from catalog.errors import BadRequestError, CatalogError, ConflictError, NotFoundError
from catalog.models import Image, ImageType, ModuleType, Product, ProductReview
from catalog.services.image_service import MediaFile, fetch_images, image_service, images_payload
from catalog.utils.serializers import review_to_dict

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
DUPLICATE_REVIEW_MESSAGE = "You have already reviewed this product"


def _validate_rating(rating) -> None:
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        raise BadRequestError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


class ProductReviewService:
    def __init__(self, database=None, images=None):
        self.db = database or db
        self.images = images or image_service

    def _ensure_live_product(self, session: Session, product_id: str) -> None:
        exists = session.execute(
            select(Product.id).where(Product.id == product_id, Product.deleted_at.is_(None))
        ).first()
        if not exists:
            raise NotFoundError("Product not found")

    def _get_live_review(self, session: Session, review_id: str) -> ProductReview:
        review = session.scalars(
            select(ProductReview).where(ProductReview.id == review_id, ProductReview.deleted_at.is_(None))
        ).first()
        if not review:
            raise NotFoundError("Review not found")
        return review

    def create_review(
        self,
        product_id: str,
        user_id: str,
        data: dict[str, Any],
        media: list[MediaFile] | None = None,
    ) -> dict[str, Any]:
        """
        Create the caller's review of a product, with optional media.

        One live review per (product, user): the pre-check gives a friendly
        error, the partial unique index settles races. Media is attached after
        the review is committed and failures are only logged, so a bad file
        never costs the user their review.

        Args:
            product_id: Reviewed product
            user_id: Reviewer
            data: rating (1-5), optional title and comment
            media: Gallery images to attach

        Returns:
            The review with the media that was attached
        """
        _validate_rating(data.get("rating"))

        with self.db.session_scope("create review") as session:
            self._ensure_live_product(session, product_id)

            existing = session.execute(
                select(ProductReview.id).where(
                    ProductReview.product_id == product_id,
                    ProductReview.user_id == user_id,
                    ProductReview.deleted_at.is_(None),
                )
            ).first()
            if existing:
                raise ConflictError(DUPLICATE_REVIEW_MESSAGE)

            review = ProductReview(
                product_id=product_id,
                user_id=user_id,
                rating=data["rating"],
                title=data.get("title"),
                comment=data.get("comment"),
                is_verified_purchase=False,
                is_active=True,
            )
            session.add(review)
            try:
                session.flush()
            except IntegrityError as e:
                raise ConflictError(DUPLICATE_REVIEW_MESSAGE) from e
            result = review_to_dict(review)

        attached = []
        failed = 0
        for file in media or []:
            try:
                uploaded = self.images.upload_image(file, ModuleType.PRODUCT_REVIEW, result["id"], ImageType.GALLERY)
            except CatalogError as e:
                failed += 1
                logger.error(f"Failed to attach {file.filename} to review {result['id']}: {e.msg}")
                continue
            attached.append({"id": uploaded["imageId"], "url": uploaded["url"], "type": ImageType.GALLERY.value})

        if failed:
            logger.warning(f"Review {result['id']} created with {failed} of {len(media)} media files missing")
        result["images"] = attached
        return result

    def get_reviews_by_product(self, product_id: str) -> list[dict[str, Any]]:
        """Active reviews of a product, newest first, media fetched in one query."""
        with self.db.session_scope("fetch reviews") as session:
            self._ensure_live_product(session, product_id)

            reviews = session.scalars(
                select(ProductReview)
                .where(
                    ProductReview.product_id == product_id,
                    ProductReview.is_active.is_(True),
                    ProductReview.deleted_at.is_(None),
                )
                .order_by(ProductReview.created_at.desc(), ProductReview.id.desc())
            ).all()
            if not reviews:
                return []

            grouped = fetch_images(
                session, [(ModuleType.PRODUCT_REVIEW, r.id) for r in reviews], ImageType.GALLERY
            )
            return [
                review_to_dict(r, images_payload(grouped, ModuleType.PRODUCT_REVIEW, r.id)) for r in reviews
            ]

    def update_review(
        self, review_id: str, data: dict[str, Any], caller: Caller
    ) -> dict[str, Any]:
        """Owner or admin may edit; only an admin may toggle ``is_active``."""
        if data.get("rating") is not None:
            _validate_rating(data["rating"])

        with self.db.session_scope("update review") as session:
            review = self._get_live_review(session, review_id)
            ensure_owner_or_admin(review.user_id, caller, "update this review")

            if data.get("rating") is not None:
                review.rating = data["rating"]
            if "title" in data:
                review.title = data["title"]
            if "comment" in data:
                review.comment = data["comment"]
            if data.get("is_active") is not None and caller.is_admin:
                review.is_active = data["is_active"]
            session.flush()
            return review_to_dict(review)

    def delete_review(self, review_id: str, caller: Caller) -> dict[str, Any]:
        """Soft delete a review together with its images."""
        with self.db.session_scope("delete review") as session:
            review = self._get_live_review(session, review_id)
            ensure_owner_or_admin(review.user_id, caller, "delete this review")

            now = utcnow()
            review.deleted_at = now
            session.execute(
                update(Image)
                .where(
                    Image.module_type == ModuleType.PRODUCT_REVIEW,
                    Image.module_id == review_id,
                    Image.deleted_at.is_(None),
                )
                .values(deleted_at=now)
            )
        return {"message": "Review deleted successfully"}

    def verify_ownership(self, review_id: str, user_id: str) -> bool:
        with self.db.session_scope("verify review ownership") as session:
            review = session.scalars(
                select(ProductReview).where(ProductReview.id == review_id, ProductReview.deleted_at.is_(None))
            ).first()
            return review is not None and review.user_id == user_id


# Singleton instance
product_review_service = ProductReviewService()
