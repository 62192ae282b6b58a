"""Slug and SKU uniqueness resolution.

Every create and update path asks the same question through
:func:`value_taken`: is this value already used by any row, soft-deleted rows
included, other than the one being edited? Keeping a single predicate means the
create-time and update-time checks cannot drift apart.
"""

import logging
import re
from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.errors import BadRequestError, ConflictError

logger = logging.getLogger(__name__)

SLUG_INSERT_ATTEMPTS = 3

_DISALLOWED = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATORS = re.compile(r"[\s_-]+", re.ASCII)


def generate_slug(name: str) -> str:
    """Normalize a human name into a URL-safe token.

    >>> generate_slug("  iPhone 15 Pro (Black)! ")
    'iphone-15-pro-black'
    """
    slug = (name or "").lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


def value_taken(
    session: Session,
    model,
    field: str,
    value: str,
    exclude_id: str | None = None,
    **scope,
) -> bool:
    """Check whether ``model.field == value`` is used by a row other than ``exclude_id``.

    Soft-deleted rows count: a deleted row still reserves its identifier.
    ``scope`` narrows the check, e.g. ``category_id=...`` for sub-categories.
    """
    column = getattr(model, field)
    stmt = select(model.id).where(column == value)
    for name, scoped_value in scope.items():
        stmt = stmt.where(getattr(model, name) == scoped_value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    return session.execute(stmt.limit(1)).first() is not None


def require_base_slug(name: str, field: str = "Name") -> str:
    base = generate_slug(name)
    if not base:
        raise BadRequestError(f"{field} must contain at least one letter or digit")
    return base


def slug_from(data: dict) -> str:
    """Slug for a payload: the supplied ``slug`` when present, else derived from ``name``."""
    if data.get("slug"):
        return require_base_slug(data["slug"], "Slug")
    return require_base_slug(data["name"])


def unique_slug(session: Session, model, base_slug: str, exclude_id: str | None = None, **scope) -> str:
    """Return ``base_slug`` or the first free ``base_slug-N`` (N = 1, 2, ...)."""
    slug = base_slug
    counter = 1
    while value_taken(session, model, "slug", slug, exclude_id=exclude_id, **scope):
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def ensure_available(
    session: Session,
    model,
    field: str,
    value: str,
    label: str,
    exclude_id: str | None = None,
    **scope,
) -> None:
    """Raise :class:`ConflictError` when ``value`` is already taken."""
    if value_taken(session, model, field, value, exclude_id=exclude_id, **scope):
        raise ConflictError(f"{label} with this {field} already exists")


def insert_with_unique_slug(session: Session, model, base_slug: str, build: Callable[[str], object], **scope):
    """Insert a row built by ``build(slug)``, re-resolving the slug on a lost race.

    Two requests can resolve the same free slug at once; the unique constraint
    rejects the second insert. The insert runs in a savepoint so the outer
    transaction survives, and the slug is resolved again. After
    ``SLUG_INSERT_ATTEMPTS`` losses the caller gets a conflict.
    """
    for attempt in range(1, SLUG_INSERT_ATTEMPTS + 1):
        slug = unique_slug(session, model, base_slug, **scope)
        instance = build(slug)
        try:
            with session.begin_nested():
                session.add(instance)
        except IntegrityError:
            logger.warning(f"Slug '{slug}' for {model.__tablename__} taken concurrently (attempt {attempt})")
            continue
        return instance

    raise ConflictError(f"Could not reserve a unique slug for '{base_slug}', please retry")
