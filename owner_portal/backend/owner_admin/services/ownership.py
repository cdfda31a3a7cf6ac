# backend/owner_admin/services/ownership.py
from __future__ import annotations

import re
from typing import Any, Union

from sqlalchemy.orm import Session

from ..domain.errors import InvalidInput, NotFound
from ..models import Property, User
from .entity_store import EntityStore

_STORAGE_ID = re.compile(r"^[0-9a-fA-F]{24}$")


def is_storage_id(ref: Any) -> bool:
    return isinstance(ref, str) and bool(_STORAGE_ID.match(ref))


def resolve_property_filter(ref: Union[str, int]) -> dict[str, Any]:
    """
    A 24-char hex string is a storage id; anything else must be the
    numeric external property id.
    """
    if is_storage_id(ref):
        return {"id": str(ref).lower()}
    try:
        return {"external_id": int(str(ref).strip())}
    except (TypeError, ValueError):
        raise InvalidInput(f"invalid property id: {ref!r}")


def find_property(db: Session, ref: Union[str, int]) -> Property | None:
    return EntityStore(db, Property).find_one(**resolve_property_filter(ref))


def must_get_property(db: Session, ref: Union[str, int]) -> Property:
    row = find_property(db, ref)
    if not row:
        raise NotFound("Property not found")
    return row


def _must_get_user(db: Session, user_id: str, *, role: str, label: str) -> User:
    row = EntityStore(db, User).find_one(id=str(user_id), role=role)
    if not row:
        raise NotFound(f"{label} not found")
    return row


def must_get_owner(db: Session, owner_id: str) -> User:
    return _must_get_user(db, owner_id, role="owner", label="Owner")


def must_get_accountant(db: Session, accountant_id: str) -> User:
    return _must_get_user(db, accountant_id, role="accountant", label="Accountant")
