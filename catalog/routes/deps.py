"""Shared route dependencies: caller identity and the response envelope."""

from typing import Any, Optional

from fastapi import Depends, Header, UploadFile

from catalog.auth import Caller
from catalog.errors import ForbiddenError, UnauthorizedError
from catalog.services.image_service import MediaFile


def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Caller:
    """Identity forwarded by the gateway; anonymous when the headers are absent."""
    return Caller(user_id=x_user_id or None, role=(x_user_role or "user").lower())


def require_user(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.user_id:
        raise UnauthorizedError()
    return caller


def require_seller(caller: Caller = Depends(require_user)) -> Caller:
    if not (caller.is_seller or caller.is_admin):
        raise ForbiddenError("Seller or admin role required")
    return caller


def require_admin(caller: Caller = Depends(require_user)) -> Caller:
    if not caller.is_admin:
        raise ForbiddenError("Admin role required")
    return caller


def ok(data: Any = None, msg: str = "Success") -> dict[str, Any]:
    return {"success": True, "msg": msg, "data": data}


def to_media(upload: UploadFile) -> MediaFile:
    return MediaFile(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        content=upload.file.read(),
    )
