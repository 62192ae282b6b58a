"""Caller identity as handed over by the upstream identity service.

Token issuance and verification happen before a request reaches this service;
the gateway forwards the verified user id and role. The core only ever treats
the user id as an opaque string.
"""

from dataclasses import dataclass

from catalog.errors import ForbiddenError

ADMIN = "admin"
SELLER = "seller"


@dataclass(frozen=True)
class Caller:
    user_id: str | None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    @property
    def is_seller(self) -> bool:
        return self.role == SELLER


def ensure_owner_or_admin(owner_id: str, caller: Caller | None, action: str) -> None:
    """Allow admins and the owner. ``caller=None`` means an internal call."""
    if caller is None or caller.is_admin:
        return
    if caller.user_id is None or caller.user_id != owner_id:
        raise ForbiddenError(f"You do not have permission to {action}")
