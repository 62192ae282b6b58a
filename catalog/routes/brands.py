"""Brand endpoints; writes are admin-only."""

from fastapi import APIRouter, Depends

from catalog.routes.deps import ok, require_admin
from catalog.schemas import BrandCreate, BrandUpdate
from catalog.services.brand_service import brand_service

router = APIRouter(prefix="/brands", tags=["brands"])


@router.get("")
def list_brands():
    return ok(brand_service.find_all(), "Brands fetched successfully")


@router.get("/{brand_id}")
def get_brand(brand_id: str):
    return ok(brand_service.find_one(brand_id), "Brand fetched successfully")


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_brand(body: BrandCreate):
    return ok(brand_service.create(body.payload()), "Brand created successfully")


@router.patch("/{brand_id}", dependencies=[Depends(require_admin)])
def update_brand(brand_id: str, body: BrandUpdate):
    return ok(brand_service.update(brand_id, body.payload()), "Brand updated successfully")


@router.delete("/{brand_id}", dependencies=[Depends(require_admin)])
def delete_brand(brand_id: str):
    return ok(brand_service.remove(brand_id), "Brand deleted successfully")
