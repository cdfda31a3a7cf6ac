# backend/owner_admin/services/relationships.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..domain.ownership import Ownership, is_admin_target
from ..models import OwnerApiKeys, Property, PropertyAccountant, User
from .entity_store import EntityStore
from .ownership import (
    must_get_accountant,
    must_get_owner,
    must_get_property,
    resolve_property_filter,
)

log = logging.getLogger(__name__)

PropertyRef = Union[str, int]


@dataclass(frozen=True)
class OwnerDeletion:
    owner_id: str
    name: str
    email: str
    deleted_properties: int
    deleted_api_keys: int


@dataclass(frozen=True)
class PropertyDeletion:
    storage_id: str
    external_id: int
    name: str
    removed_accountant_links: int
    warnings: list[str] = field(default_factory=list)


# -----------------------------
# Property <-> Owner
# -----------------------------
def assign_property_to_owner(db: Session, *, property_ref: PropertyRef, target: str) -> Property:
    """
    Move a property to the admin pool (target == "admin") or to one owner.
    Accountant memberships are left as they are.
    """
    prop = must_get_property(db, property_ref)

    if is_admin_target(target):
        ownership = Ownership.admin()
    else:
        owner = must_get_owner(db, target)
        ownership = Ownership.owned_by(owner.id)

    prop.ownership = ownership
    prop = EntityStore(db, Property).save(prop)
    log.info(
        "property ownership set to %s",
        "admin" if ownership.is_admin_owned else ownership.owner_id,
        extra={"property_id": prop.external_id, "owner_id": ownership.owner_id},
    )
    return prop


# -----------------------------
# Property <-> Accountants
# -----------------------------
def _property_ids_for(db: Session, refs: Iterable[PropertyRef]) -> list[str]:
    filters = [resolve_property_filter(r) for r in refs]
    store = EntityStore(db, Property)
    out: list[str] = []
    for f in filters:
        row = store.find_one(**f)
        if row is not None and row.id not in out:
            out.append(row.id)
    return out


def _add_to_set(db: Session, *, property_id: str, accountant_id: str) -> bool:
    links = EntityStore(db, PropertyAccountant)
    if links.find_one(property_id=property_id, accountant_id=accountant_id) is not None:
        return False
    try:
        links.create(property_id=property_id, accountant_id=accountant_id)
    except IntegrityError:
        # a concurrent request added the same membership
        return False
    return True


def add_accountant_to_properties(db: Session, *, accountant_id: str, property_refs: Iterable[PropertyRef]) -> int:
    added = 0
    for pid in _property_ids_for(db, property_refs):
        if _add_to_set(db, property_id=pid, accountant_id=accountant_id):
            added += 1
    return added


def remove_accountant_everywhere(db: Session, *, accountant_id: str) -> int:
    return EntityStore(db, PropertyAccountant).delete_many(accountant_id=accountant_id)


def set_accountant_assignments(
    db: Session, *, accountant_id: str, property_refs: Iterable[PropertyRef]
) -> list[Property]:
    """
    Clear-then-set. The accountant is first removed from every property, then
    added to each referenced one. Unknown property refs are ignored.

    Not atomic: a failure between the two phases leaves the accountant with no
    assignments, and calling again with the same refs repairs it.
    """
    accountant = must_get_accountant(db, accountant_id)
    refs = list(property_refs or [])
    # validate ref shapes before touching anything
    for r in refs:
        resolve_property_filter(r)

    removed = remove_accountant_everywhere(db, accountant_id=accountant.id)
    added = add_accountant_to_properties(db, accountant_id=accountant.id, property_refs=refs)
    log.info(
        "accountant assignments replaced (removed=%s added=%s)",
        removed,
        added,
        extra={"accountant_id": accountant.id},
    )
    return assigned_properties(db, accountant_id=accountant.id)


def assigned_properties(db: Session, *, accountant_id: str) -> list[Property]:
    q = (
        select(Property)
        .join(PropertyAccountant, PropertyAccountant.property_id == Property.id)
        .where(PropertyAccountant.accountant_id == str(accountant_id))
        .order_by(Property.external_id)
    )
    return list(db.scalars(q).unique().all())


# -----------------------------
# Cascading deletes
# -----------------------------
def delete_owner(db: Session, *, owner_id: str) -> OwnerDeletion:
    """
    Dependents first, owner record last:
      (a) owned properties (hard delete, with their accountant memberships)
      (b) the owner's Hostkit credentials
      (c) the user row
    Each step is idempotent, so a retry after a partial failure finishes the job.
    """
    owner = must_get_owner(db, owner_id)
    name, email = owner.name, owner.email

    props = EntityStore(db, Property)
    owned_ids = [p.id for p in props.find(owner_id=owner.id)]
    if owned_ids:
        EntityStore(db, PropertyAccountant).delete_many(property_id=owned_ids)
    deleted_properties = props.delete_many(owner_id=owner.id)

    deleted_api_keys = EntityStore(db, OwnerApiKeys).delete_many(owner_id=owner.id)

    EntityStore(db, User).delete_by_id(owner.id)

    log.info(
        "owner deleted with %s properties",
        deleted_properties,
        extra={"owner_id": owner_id, "email": email},
    )
    return OwnerDeletion(
        owner_id=str(owner_id),
        name=name,
        email=email,
        deleted_properties=deleted_properties,
        deleted_api_keys=deleted_api_keys,
    )


def delete_accountant(db: Session, *, accountant_id: str) -> int:
    """Returns how many property memberships were dropped."""
    accountant = must_get_accountant(db, accountant_id)
    removed = remove_accountant_everywhere(db, accountant_id=accountant.id)
    EntityStore(db, User).delete_by_id(accountant.id)
    log.info("accountant deleted", extra={"accountant_id": accountant_id})
    return removed


def delete_property(db: Session, *, property_ref: PropertyRef) -> PropertyDeletion:
    prop = must_get_property(db, property_ref)
    storage_id, external_id, name = prop.id, prop.external_id, prop.name

    warnings: list[str] = []
    removed = 0
    try:
        removed = EntityStore(db, PropertyAccountant).delete_many(property_id=storage_id)
    except Exception as e:
        log.warning(
            "accountant cleanup failed; deleting property anyway",
            exc_info=True,
            extra={"property_id": external_id},
        )
        warnings.append(f"accountant cleanup failed: {e}")

    EntityStore(db, Property).delete_many(id=storage_id)
    log.info("property deleted", extra={"property_id": external_id})

    return PropertyDeletion(
        storage_id=storage_id,
        external_id=external_id,
        name=name,
        removed_accountant_links=removed,
        warnings=warnings,
    )
