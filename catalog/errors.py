"""Typed domain errors.

Every error carries a machine-checkable ``kind`` and the HTTP status the API
layer maps it to. Store and storage failures that are not already one of these
are wrapped as :class:`InternalError` before they leave a service.
"""


class CatalogError(Exception):
    kind = "internal"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, msg: str | None = None):
        self.msg = msg or self.default_message
        super().__init__(self.msg)

    def to_dict(self) -> dict:
        return {"success": False, "msg": self.msg, "kind": self.kind}


class BadRequestError(CatalogError):
    kind = "bad_request"
    status_code = 400
    default_message = "Bad request"


class UnauthorizedError(CatalogError):
    kind = "unauthorized"
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(CatalogError):
    kind = "forbidden"
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFoundError(CatalogError):
    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class ConflictError(CatalogError):
    kind = "conflict"
    status_code = 409
    default_message = "Resource already exists"


class InternalError(CatalogError):
    pass


class ServiceUnavailableError(CatalogError):
    """The backing store did not answer in time; safe to retry."""

    kind = "service_unavailable"
    status_code = 503
    default_message = "Service temporarily unavailable, please retry"
