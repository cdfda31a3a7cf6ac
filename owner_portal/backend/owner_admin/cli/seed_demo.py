# backend/owner_admin/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from owner_admin.db import SessionLocal
from owner_admin.domain.ownership import Ownership
from owner_admin.models import Property, User
from owner_admin.services.auth_service import hash_password
from owner_admin.services.relationships import add_accountant_to_properties


@dataclass(frozen=True)
class SeedResult:
    admin_email: str
    owner_email: str
    accountant_email: str
    property_ids: list[int]


def _get_or_create_user(db: Session, *, email: str, name: str, role: str, password: str) -> User:
    email = email.strip().lower()
    if role == "admin":
        # single admin: reuse whichever account the setup flow created
        existing_admin = db.query(User).filter(User.role == "admin").first()
        if existing_admin:
            return existing_admin

    row = db.query(User).filter(User.email == email).one_or_none()
    if row:
        if row.role != role:
            raise ValueError(f"{email} already exists with role {row.role!r}, expected {role!r}")
        return row
    row = User(
        email=email,
        name=name,
        role=role,
        password_hash=hash_password(password),
        is_verified=True,
    )
    row.companies = [{"name": f"{name} Lda", "taxId": "500000000"}]
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _get_or_create_property(db: Session, *, external_id: int, name: str, ownership: Ownership) -> Property:
    row = db.query(Property).filter(Property.external_id == int(external_id)).one_or_none()
    if row:
        return row
    row = Property(
        external_id=int(external_id),
        name=name,
        address="Rua Augusta 100, Lisboa",
        type="apartment",
        bedrooms=2,
        bathrooms=1,
        max_guests=4,
    )
    row.amenities = ["wifi", "kitchen"]
    row.ownership = ownership
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def seed_demo(
    *,
    admin_email: str = "admin@demo.local",
    owner_email: str = "owner@demo.local",
    accountant_email: str = "accountant@demo.local",
    password: str = "demo-password",
    create_sample_properties: bool = True,
) -> SeedResult:
    db = SessionLocal()
    try:
        admin = _get_or_create_user(db, email=admin_email, name="Admin", role="admin", password=password)
        owner = _get_or_create_user(db, email=owner_email, name="Demo Owner", role="owner", password=password)
        accountant = _get_or_create_user(
            db, email=accountant_email, name="Demo Accountant", role="accountant", password=password
        )

        property_ids: list[int] = []
        if create_sample_properties:
            owned = _get_or_create_property(db, external_id=1001, name="Alfama Loft", ownership=Ownership.owned_by(owner.id))
            pooled = _get_or_create_property(db, external_id=1002, name="Baixa Studio", ownership=Ownership.admin())
            property_ids = [owned.external_id, pooled.external_id]
            add_accountant_to_properties(db, accountant_id=accountant.id, property_refs=property_ids)

        return SeedResult(
            admin_email=admin.email,
            owner_email=owner.email,
            accountant_email=accountant.email,
            property_ids=property_ids,
        )
    finally:
        db.close()
