"""Category and sub-category endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from catalog.routes.deps import ok, require_admin
from catalog.schemas import CategoryCreate, CategoryUpdate, SubCategoryCreate, SubCategoryUpdate
from catalog.services.category_service import category_service

router = APIRouter(tags=["categories"])


@router.get("/categories")
def list_categories(search: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None):
    return ok(category_service.find_all(search, page, limit), "Categories fetched successfully")


@router.get("/categories/{category_id}")
def get_category(category_id: str):
    return ok(category_service.find_one(category_id), "Category fetched successfully")


@router.get("/categories/{category_id}/sub-categories")
def list_category_sub_categories(category_id: str, search: Optional[str] = None):
    return ok(
        category_service.find_sub_categories_by_category(category_id, search),
        "Sub-categories fetched successfully",
    )


@router.post("/categories", status_code=201, dependencies=[Depends(require_admin)])
def create_category(body: CategoryCreate):
    return ok(category_service.create(body.payload()), "Category created successfully")


@router.patch("/categories/{category_id}", dependencies=[Depends(require_admin)])
def update_category(category_id: str, body: CategoryUpdate):
    return ok(category_service.update(category_id, body.payload()), "Category updated successfully")


@router.delete("/categories/{category_id}", dependencies=[Depends(require_admin)])
def delete_category(category_id: str):
    return ok(category_service.remove(category_id), "Category deleted successfully")


@router.get("/sub-categories")
def list_sub_categories(
    search: Optional[str] = None,
    category_id: Optional[str] = Query(None, alias="categoryId"),
):
    return ok(category_service.find_all_sub_categories(search, category_id), "Sub-categories fetched successfully")


@router.get("/sub-categories/{sub_category_id}")
def get_sub_category(sub_category_id: str):
    return ok(category_service.find_one_sub_category(sub_category_id), "Sub-category fetched successfully")


@router.post("/sub-categories", status_code=201, dependencies=[Depends(require_admin)])
def create_sub_category(body: SubCategoryCreate):
    return ok(category_service.create_sub_category(body.payload()), "Sub-category created successfully")


@router.patch("/sub-categories/{sub_category_id}", dependencies=[Depends(require_admin)])
def update_sub_category(sub_category_id: str, body: SubCategoryUpdate):
    return ok(
        category_service.update_sub_category(sub_category_id, body.payload()), "Sub-category updated successfully"
    )


@router.delete("/sub-categories/{sub_category_id}", dependencies=[Depends(require_admin)])
def delete_sub_category(sub_category_id: str):
    return ok(category_service.remove_sub_category(sub_category_id), "Sub-category deleted successfully")
