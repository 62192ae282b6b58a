"""Review endpoints addressed by review id."""

from fastapi import APIRouter, Depends

from catalog.auth import Caller
from catalog.routes.deps import ok, require_user
from catalog.schemas import ReviewUpdate
from catalog.services.review_service import product_review_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.patch("/{review_id}")
def update_review(review_id: str, body: ReviewUpdate, caller: Caller = Depends(require_user)):
    return ok(product_review_service.update_review(review_id, body.payload(), caller), "Review updated successfully")


@router.delete("/{review_id}")
def delete_review(review_id: str, caller: Caller = Depends(require_user)):
    return ok(product_review_service.delete_review(review_id, caller), "Review deleted successfully")
