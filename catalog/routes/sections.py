"""Merchandising sections. Reading a section by key is public; curation is admin-only."""

from fastapi import APIRouter, Depends

from catalog.routes.deps import ok, require_admin
from catalog.schemas import SectionCreate, SectionItemCreate, SectionItemUpdate, SectionUpdate
from catalog.services.section_service import section_item_service, section_service

router = APIRouter(tags=["sections"])
admin = [Depends(require_admin)]


@router.get("/sections/{key}")
def resolve_section(key: str):
    return ok(section_service.resolve_section(key), "Section fetched successfully")


@router.get("/admin/sections", dependencies=admin)
def list_sections():
    return ok(section_service.find_all(), "Sections fetched successfully")


@router.get("/admin/sections/{section_id}", dependencies=admin)
def get_section(section_id: str):
    return ok(section_service.find_one(section_id), "Section fetched successfully")


@router.post("/admin/sections", status_code=201, dependencies=admin)
def create_section(body: SectionCreate):
    return ok(section_service.create(body.payload()), "Section created successfully")


@router.patch("/admin/sections/{section_id}", dependencies=admin)
def update_section(section_id: str, body: SectionUpdate):
    return ok(section_service.update(section_id, body.payload()), "Section updated successfully")


@router.delete("/admin/sections/{section_id}", dependencies=admin)
def delete_section(section_id: str):
    return ok(section_service.remove(section_id), "Section deleted successfully")


@router.get("/admin/sections/{section_id}/items", dependencies=admin)
def list_section_items(section_id: str, include_inactive: bool = True):
    return ok(
        section_item_service.find_by_section(section_id, include_inactive), "Section items fetched successfully"
    )


@router.post("/admin/sections/{section_id}/items", status_code=201, dependencies=admin)
def create_section_item(section_id: str, body: SectionItemCreate):
    return ok(section_item_service.create(section_id, body.payload()), "Section item created successfully")


@router.patch("/admin/section-items/{item_id}", dependencies=admin)
def update_section_item(item_id: str, body: SectionItemUpdate):
    return ok(section_item_service.update(item_id, body.payload()), "Section item updated successfully")


@router.delete("/admin/section-items/{item_id}", dependencies=admin)
def delete_section_item(item_id: str):
    return ok(section_item_service.remove(item_id), "Section item deleted successfully")
