"""Variant endpoints addressed by variant id."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from catalog.auth import Caller
from catalog.routes.deps import ok, require_seller
from catalog.schemas import VariantUpdate
from catalog.services.variant_service import variant_service

router = APIRouter(prefix="/variants", tags=["variants"])


# Declared before /{variant_id} so "detail" is not read as an id
@router.get("/detail")
def get_variant_detail(
    product_id: Optional[str] = Query(None, alias="productId"),
    variant_id: Optional[str] = Query(None, alias="variantId"),
):
    detail = variant_service.get_variant_detail(product_id=product_id, variant_id=variant_id)
    return ok(detail, "Variant detail fetched successfully")


@router.get("/{variant_id}")
def get_variant(variant_id: str):
    return ok(variant_service.find_one(variant_id), "Variant fetched successfully")


@router.patch("/{variant_id}")
def update_variant(variant_id: str, body: VariantUpdate, caller: Caller = Depends(require_seller)):
    return ok(variant_service.update(variant_id, body.payload(), caller), "Variant updated successfully")


@router.patch("/{variant_id}/set-default")
def set_default_variant(variant_id: str, caller: Caller = Depends(require_seller)):
    return ok(variant_service.set_default(variant_id, caller), "Default variant updated successfully")


@router.delete("/{variant_id}")
def delete_variant(variant_id: str, caller: Caller = Depends(require_seller)):
    return ok(variant_service.remove(variant_id, caller), "Variant deleted successfully")
