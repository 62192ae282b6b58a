"""Standalone product image endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from catalog.routes.deps import ok, require_seller, to_media
from catalog.services.image_service import image_service

router = APIRouter(prefix="/images", tags=["images"])


@router.post("", status_code=201, dependencies=[Depends(require_seller)])
def upload_image(
    file: UploadFile = File(...),
    module_type: str = Form(..., alias="moduleType"),
    module_id: str = Form(..., alias="moduleId"),
    image_type: str = Form(..., alias="type"),
):
    uploaded = image_service.upload_image(to_media(file), module_type, module_id, image_type)
    return ok(uploaded, "Image uploaded successfully")


@router.get("/{module_type}/{module_id}")
def list_images(module_type: str, module_id: str, image_type: Optional[str] = None):
    return ok(image_service.find_by_module(module_type, module_id, image_type), "Images fetched successfully")


@router.delete("/{image_id}", dependencies=[Depends(require_seller)])
def delete_image(image_id: str):
    return ok(image_service.remove(image_id), "Image deleted successfully")
