"""Product, nested variant and nested review endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from catalog.auth import Caller
from catalog.routes.deps import get_caller, ok, require_seller, require_user, to_media
from catalog.schemas import ProductCreate, ProductStatusUpdate, ProductUpdate, VariantCreate
from catalog.services.product_service import product_service
from catalog.services.review_service import product_review_service
from catalog.services.variant_service import variant_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
def list_products(
    search: Optional[str] = None,
    brand_id: Optional[str] = Query(None, alias="brandId"),
    sub_category_id: Optional[str] = Query(None, alias="subCategoryId"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    status: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    caller: Caller = Depends(get_caller),
):
    filters = {
        "search": search,
        "brand_id": brand_id,
        "sub_category_id": sub_category_id,
        "min_price": min_price,
        "max_price": max_price,
        "status": status,
    }
    result = product_service.list_products(filters, page, limit, is_privileged=caller.is_admin)
    return ok(result, "Products fetched successfully")


@router.get("/{product_id}")
def get_product(product_id: str):
    return ok(product_service.get_product_detail(product_id), "Product fetched successfully")


@router.post("", status_code=201)
def create_product(body: ProductCreate, caller: Caller = Depends(require_seller)):
    return ok(product_service.create(body.payload(), caller.user_id), "Product created successfully")


@router.patch("/{product_id}")
def update_product(product_id: str, body: ProductUpdate, caller: Caller = Depends(require_seller)):
    return ok(product_service.update(product_id, body.payload(), caller), "Product updated successfully")


@router.patch("/{product_id}/status")
def update_product_status(product_id: str, body: ProductStatusUpdate, caller: Caller = Depends(require_seller)):
    return ok(
        product_service.update_status(product_id, body.status, caller), "Product status updated successfully"
    )


@router.delete("/{product_id}")
def delete_product(product_id: str, caller: Caller = Depends(require_seller)):
    return ok(product_service.remove(product_id, caller), "Product deleted successfully")


@router.post("/{product_id}/variants", status_code=201)
def create_variant(product_id: str, body: VariantCreate, caller: Caller = Depends(require_seller)):
    return ok(variant_service.create(product_id, body.payload(), caller), "Variant created successfully")


@router.get("/{product_id}/default-variant")
def get_default_variant(product_id: str):
    return ok(variant_service.get_default_or_promote(product_id), "Default variant fetched successfully")


@router.get("/{product_id}/reviews")
def list_reviews(product_id: str):
    return ok(product_review_service.get_reviews_by_product(product_id), "Reviews fetched successfully")


@router.post("/{product_id}/reviews", status_code=201)
def create_review(
    product_id: str,
    rating: int = Form(...),
    title: Optional[str] = Form(None),
    comment: Optional[str] = Form(None),
    media: List[UploadFile] = File(default=[]),
    caller: Caller = Depends(require_user),
):
    data = {"rating": rating, "title": title, "comment": comment}
    review = product_review_service.create_review(
        product_id, caller.user_id, data, [to_media(upload) for upload in media]
    )
    return ok(review, "Review created successfully")
