# backend/owner_admin/routers/admin.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..clients.hostkit import InvoiceSource, get_invoice_source
from ..db import get_db
from ..schemas import (
    AccountantAssignments,
    AccountantUpdate,
    OwnerApiKeysUpdate,
    PropertyAssign,
    PropertyCreate,
    UserCreate,
    UserUpdate,
)
from ..services import admin_ops
from ..services.notifier import Notifier, get_notifier

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/dashboard-stats")
def dashboard_stats(db: Session = Depends(get_db)):
    return {"success": True, "data": admin_ops.dashboard_stats(db)}


# -------------------- Owners --------------------

@router.get("/owners")
def list_owners(db: Session = Depends(get_db)):
    return {"success": True, "data": admin_ops.list_owners(db)}


@router.post("/owners", status_code=201)
def create_owner(payload: UserCreate, db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)):
    res = admin_ops.create_owner_or_accountant(db, payload=payload, notifier=notifier)
    role = res.data.get("role") or "owner"
    return res.body(success=True, message=f"{role.capitalize()} created successfully")


@router.put("/owners/{owner_id}")
def update_owner(owner_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    res = admin_ops.update_owner(db, owner_id=owner_id, payload=payload)
    return res.body(success=True, message="Owner updated successfully")


@router.delete("/owners/{owner_id}")
def delete_owner(owner_id: str, db: Session = Depends(get_db)):
    res = admin_ops.delete_owner(db, owner_id=owner_id)
    n = res.data["deletedProperties"]
    return res.body(success=True, message=f"Owner and {n} associated properties deleted successfully")


@router.get("/owners/{owner_id}/api-keys")
def get_owner_api_keys(owner_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": admin_ops.get_owner_api_keys(db, owner_id=owner_id)}


@router.put("/owners/{owner_id}/api-keys")
def update_owner_api_keys(owner_id: str, payload: OwnerApiKeysUpdate, db: Session = Depends(get_db)):
    res = admin_ops.update_owner_api_keys(db, owner_id=owner_id, payload=payload)
    return res.body(success=True, message="API keys updated successfully")


# -------------------- Accountants --------------------

@router.get("/accountants")
def list_accountants(db: Session = Depends(get_db)):
    return {"success": True, "data": admin_ops.list_accountants(db)}


@router.put("/accountants/{accountant_id}")
def update_accountant(accountant_id: str, payload: AccountantUpdate, db: Session = Depends(get_db)):
    res = admin_ops.update_accountant(db, accountant_id=accountant_id, payload=payload)
    return res.body(success=True, message="Accountant updated successfully")


@router.put("/accountants/{accountant_id}/properties")
def update_accountant_properties(accountant_id: str, payload: AccountantAssignments, db: Session = Depends(get_db)):
    res = admin_ops.update_accountant_properties(
        db, accountant_id=accountant_id, property_refs=payload.assigned_properties
    )
    return res.body(success=True, message="Accountant properties updated successfully")


@router.get("/accountants/{accountant_id}/companies")
def accountant_companies(accountant_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": admin_ops.accountant_companies(db, accountant_id=accountant_id)}


@router.delete("/accountants/{accountant_id}")
def delete_accountant(accountant_id: str, db: Session = Depends(get_db)):
    res = admin_ops.delete_accountant(db, accountant_id=accountant_id)
    return res.body(success=True, message="Accountant deleted successfully")


# -------------------- Properties --------------------

@router.get("/properties")
def list_properties(owner: Optional[str] = Query(default=None), db: Session = Depends(get_db)):
    return {"success": True, "data": admin_ops.list_properties(db, owner_filter=owner)}


@router.post("/properties", status_code=201)
def create_property(payload: PropertyCreate, db: Session = Depends(get_db)):
    res = admin_ops.create_property(db, payload=payload)
    return res.body(success=True, message="Property created successfully")


@router.put("/owners/{owner_id}/assign-property")
def assign_property(owner_id: str, payload: PropertyAssign, db: Session = Depends(get_db)):
    res = admin_ops.assign_property_to_owner(db, target=owner_id, property_id=payload.property_id)
    return res.body(success=True, message="Property assigned successfully")


@router.delete("/properties/{property_id}")
def delete_property(property_id: str, db: Session = Depends(get_db)):
    res = admin_ops.delete_property(db, property_ref=property_id)
    return res.body(success=True, message="Property deleted successfully")


# -------------------- Statements --------------------

@router.get("/owner-statement")
def owner_statement(
    property_id: Optional[str] = Query(default=None, alias="propertyId"),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
    invoice_source: InvoiceSource = Depends(get_invoice_source),
):
    res = admin_ops.generate_owner_statement(
        db,
        property_id=property_id,
        start_date=start_date,
        end_date=end_date,
        invoice_source=invoice_source,
    )
    return res.body(success=True)
