# backend/owner_admin/services/admin_ops.py
"""
Admin use-cases.

Each operation returns an OperationResult: `data` is the primary outcome, and
`warnings` lists best-effort steps that failed without failing the operation
(api-key creation, inline property creation, accountant assignment, email).
NotFound / Conflict / InvalidInput propagate to the HTTP layer.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional, Union

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..clients.hostkit import InvoiceSource, InvoiceSourceError
from ..config import settings
from ..domain.errors import Conflict, InvalidInput, NotFound, UpstreamUnavailable
from ..domain.ownership import Ownership, is_admin_target
from ..domain.statement import build_owner_statement
from ..models import OwnerApiKeys, Property, User
from ..schemas import (
    AccountantUpdate,
    FirstAdminCreate,
    InlinePropertyIn,
    OwnerApiKeysUpdate,
    PropertyCreate,
    UserCreate,
    UserUpdate,
)
from . import relationships
from .auth_service import hash_password
from .entity_store import EntityStore
from .notifier import Notifier, WelcomeEmail
from .otp_service import send_otp, verify_otp
from .ownership import must_get_accountant, must_get_owner, must_get_property

log = logging.getLogger(__name__)

MANAGED_ROLES = ("owner", "accountant")


@dataclass(frozen=True)
class OperationResult:
    data: dict[str, Any]
    warnings: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.warnings

    def body(self, **extra: Any) -> dict[str, Any]:
        out: dict[str, Any] = dict(extra)
        out["data"] = self.data
        if self.warnings:
            out["warnings"] = list(self.warnings)
        return out


# -----------------------------
# Serializers
# -----------------------------
def _norm_email(v: Optional[str]) -> str:
    return (v or "").strip().lower()


def _int_or_zero(v: Any) -> int:
    try:
        return int(str(v).strip())
    except (TypeError, ValueError):
        return 0


def _split_amenities(v: Union[str, list[str], None]) -> list[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [a.strip() for a in v.split(",") if a.strip()]
    return [str(a).strip() for a in v if str(a).strip()]


def user_out(u: User) -> dict[str, Any]:
    return {
        "_id": u.id,
        "name": u.name,
        "email": u.email,
        "phone": u.phone,
        "role": u.role,
        "isVerified": bool(u.is_verified),
        "companies": u.companies,
        "createdAt": u.created_at,
        "updatedAt": u.updated_at,
    }


def _owner_ref(p: Property) -> Optional[dict[str, Any]]:
    if p.owner is None:
        return None
    return {"_id": p.owner.id, "name": p.owner.name, "email": p.owner.email}


def property_out(p: Property) -> dict[str, Any]:
    """Admin view of a property. The Hostkit API key is never included."""
    return {
        "_id": p.id,
        "id": p.external_id,
        "name": p.name,
        "address": p.address,
        "type": p.type,
        "bedrooms": p.bedrooms,
        "bathrooms": p.bathrooms,
        "maxGuests": p.max_guests,
        "hostkitId": p.hostkit_id,
        "status": p.status,
        "amenities": p.amenities,
        "images": p.images,
        "owner": _owner_ref(p),
        "isAdminOwned": bool(p.is_admin_owned),
        "accountants": p.accountant_ids,
        "createdAt": p.created_at,
        "updatedAt": p.updated_at,
    }


def _assigned_out(p: Property) -> dict[str, Any]:
    return {"_id": p.id, "id": p.external_id, "name": p.name, "owner": _owner_ref(p)}


def accountant_out(db: Session, u: User) -> dict[str, Any]:
    assigned = relationships.assigned_properties(db, accountant_id=u.id)
    out = user_out(u)
    out.pop("companies", None)
    out["assignedProperties"] = [_assigned_out(p) for p in assigned]
    out["assignedPropertiesCount"] = len(assigned)
    return out


# -----------------------------
# Shared writers
# -----------------------------
def upsert_owner_api_keys(db: Session, *, owner_id: str, api_key: str, api_secret: str) -> OwnerApiKeys:
    """One credentials row per owner: a write replaces, never duplicates."""
    store = EntityStore(db, OwnerApiKeys)
    row = store.find_one(owner_id=owner_id)
    patch = {"hostkit_api_key": api_key or "", "hostkit_api_secret": api_secret or "", "is_active": True}
    if row is None:
        return store.create(owner_id=owner_id, **patch)
    return store.update_by_id(row.id, patch)


def _insert_property(
    db: Session,
    *,
    external_id: int,
    name: str,
    ownership: Ownership,
    address: str = "",
    type: str = "",
    bedrooms: Any = 0,
    bathrooms: Any = 0,
    max_guests: Any = 0,
    hostkit_id: str = "",
    hostkit_api_key: str = "",
    status: str = "active",
    amenities: Union[str, list[str], None] = None,
) -> Property:
    store = EntityStore(db, Property)
    if store.find_one(external_id=int(external_id)) is not None:
        raise Conflict("Property with this ID already exists")

    row = Property(
        external_id=int(external_id),
        name=name,
        address=address or "",
        type=type or "",
        bedrooms=_int_or_zero(bedrooms),
        bathrooms=_int_or_zero(bathrooms),
        max_guests=_int_or_zero(max_guests),
        hostkit_id=hostkit_id or "",
        hostkit_api_key=hostkit_api_key or "",
        status=status or "active",
    )
    row.amenities = _split_amenities(amenities)
    row.images = []
    row.ownership = ownership
    try:
        return store.save(row)
    except IntegrityError:
        raise Conflict("Property with this ID already exists")


def _create_user(db: Session, **values: Any) -> User:
    companies = values.pop("companies", None)
    row = User(**values)
    row.companies = companies or []
    try:
        return EntityStore(db, User).save(row)
    except IntegrityError:
        raise Conflict("Email already exists")


# -----------------------------
# First admin bootstrap
# -----------------------------
def admin_exists(db: Session) -> bool:
    return EntityStore(db, User).find_one(role="admin") is not None


def create_first_admin(db: Session, *, payload: FirstAdminCreate, notifier: Notifier) -> OperationResult:
    """
    One-time creation of the single admin. The account starts unverified and
    an OTP is sent to confirm the email.
    """
    users = EntityStore(db, User)
    if users.find_one(role="admin") is not None:
        raise Conflict("Admin user already exists. This endpoint can only be used once.")

    email = _norm_email(payload.email)
    if not (payload.name or "").strip() or not email or not payload.password:
        raise InvalidInput("Name, email, and password are required")

    if users.find_one(email=email) is not None:
        raise Conflict("Email already exists")

    admin = _create_user(
        db,
        name=payload.name.strip(),
        email=email,
        phone=payload.phone or "",
        password_hash=hash_password(payload.password),
        role="admin",
        is_verified=False,
    )
    log.info("first admin created", extra={"email": email, "role": "admin"})

    warnings: list[str] = []
    otp_sent = send_otp(db, email=admin.email, purpose="signup", notifier=notifier)
    if not otp_sent:
        warnings.append("Admin created but failed to send verification OTP")

    return OperationResult(data={"email": admin.email, "otpSent": otp_sent}, warnings=warnings)


def _must_get_admin(db: Session, email: str) -> User:
    admin = EntityStore(db, User).find_one(email=_norm_email(email), role="admin")
    if admin is None:
        raise NotFound("Admin not found")
    return admin


def verify_first_admin(db: Session, *, email: str, code: str) -> OperationResult:
    admin = _must_get_admin(db, email)
    if admin.is_verified:
        return OperationResult(data=user_out(admin))

    if not verify_otp(db, email=admin.email, code=code):
        raise InvalidInput("Invalid or expired OTP")

    admin = EntityStore(db, User).update_by_id(admin.id, {"is_verified": True})
    return OperationResult(data=user_out(admin))


def resend_admin_otp(db: Session, *, email: str, notifier: Notifier) -> OperationResult:
    admin = _must_get_admin(db, email)
    if admin.is_verified:
        raise Conflict("Admin is already verified")
    sent = send_otp(db, email=admin.email, purpose="signup", notifier=notifier)
    return OperationResult(
        data={"email": admin.email, "otpSent": sent},
        warnings=[] if sent else ["failed to send verification OTP"],
    )


# -----------------------------
# Owners / accountants
# -----------------------------
def create_owner_or_accountant(db: Session, *, payload: UserCreate, notifier: Notifier) -> OperationResult:
    """
    The user row is the primary effect. Credentials, the inline property, the
    accountant's property assignments and the welcome email are best-effort:
    their failures become warnings and nothing is rolled back.
    """
    users = EntityStore(db, User)
    role = (payload.role or "owner").strip().lower()
    email = _norm_email(payload.email)

    if not email:
        raise InvalidInput("Email is required")
    if users.find_one(email=email) is not None:
        raise Conflict("Email already exists")
    if not payload.password:
        raise InvalidInput("Password is required")
    if role not in MANAGED_ROLES:
        raise InvalidInput("Role must be 'owner' or 'accountant'")

    user = _create_user(
        db,
        name=(payload.name or "").strip(),
        email=email,
        phone=payload.phone or "",
        password_hash=hash_password(payload.password),
        role=role,
        is_verified=True,  # admin-created accounts skip OTP verification
        companies=[c.as_record() for c in payload.companies],
    )
    log.info("%s created", role, extra={"email": email, "role": role})

    warnings: list[str] = []
    has_api_keys = bool(payload.hostkit_api_id and payload.hostkit_api_key)

    if has_api_keys:
        try:
            upsert_owner_api_keys(
                db,
                owner_id=user.id,
                api_key=payload.hostkit_api_id,
                api_secret=payload.hostkit_api_key,
            )
        except Exception as e:
            log.warning("api key creation failed", exc_info=True, extra={"owner_id": user.id})
            warnings.append(f"api keys not saved: {e}")

    created_property = None
    pd: Optional[InlinePropertyIn] = payload.property_data
    if role == "owner" and pd is not None and pd.name and pd.id:
        try:
            created_property = _insert_property(
                db,
                external_id=int(str(pd.id).strip()),
                name=pd.name,
                ownership=Ownership.owned_by(user.id),
                address=pd.address or "",
                type=pd.type or "",
                bedrooms=pd.bedrooms,
                bathrooms=pd.bathrooms,
                max_guests=pd.max_guests,
                hostkit_id=pd.hostkit_id or "",
                hostkit_api_key=payload.hostkit_api_key or "",
                amenities=pd.amenities,
            )
        except Exception as e:
            log.warning("inline property creation failed", exc_info=True, extra={"owner_id": user.id})
            warnings.append(f"property not created: {e}")

    if role == "accountant" and payload.assigned_properties:
        try:
            relationships.add_accountant_to_properties(
                db, accountant_id=user.id, property_refs=payload.assigned_properties
            )
        except Exception as e:
            log.warning("accountant assignment failed", exc_info=True, extra={"accountant_id": user.id})
            warnings.append(f"property assignment failed: {e}")

    msg = WelcomeEmail(name=user.name, email=user.email, password=payload.password, portal_url=settings.portal_url)
    try:
        if role == "accountant":
            sent = notifier.send_accountant_welcome(msg)
        else:
            sent = notifier.send_owner_welcome(msg)
    except Exception:
        log.warning("welcome email raised", exc_info=True, extra={"email": email})
        sent = False
    if not sent:
        warnings.append("welcome email not sent")

    data = user_out(user)
    data["hasApiKeys"] = has_api_keys
    data["apiKeysActive"] = has_api_keys
    data["property"] = property_out(created_property) if created_property is not None else None
    return OperationResult(data=data, warnings=warnings)


def list_owners(db: Session) -> list[dict[str, Any]]:
    keys = {k.owner_id: k for k in EntityStore(db, OwnerApiKeys).find()}
    out = []
    for o in EntityStore(db, User).find(role="owner", order_by=User.created_at):
        k = keys.get(o.id)
        d = user_out(o)
        d["hasApiKeys"] = k is not None
        d["apiKeysActive"] = bool(k and k.is_active)
        out.append(d)
    return out


def _check_email_free(db: Session, email: str, *, user_id: str) -> None:
    other = EntityStore(db, User).find_one(email=email)
    if other is not None and other.id != user_id:
        raise Conflict("Email already exists")


def update_owner(db: Session, *, owner_id: str, payload: UserUpdate) -> OperationResult:
    owner = must_get_owner(db, owner_id)
    patch: dict[str, Any] = {}

    if payload.name is not None:
        patch["name"] = payload.name.strip()
    if payload.phone is not None:
        patch["phone"] = payload.phone
    if payload.email is not None:
        email = _norm_email(payload.email)
        if not email:
            raise InvalidInput("Email cannot be empty")
        _check_email_free(db, email, user_id=owner.id)
        patch["email"] = email
    if payload.password and payload.password.strip():
        patch["password_hash"] = hash_password(payload.password)
    if payload.role is not None:
        role = payload.role.strip().lower()
        if role not in MANAGED_ROLES:
            raise InvalidInput("Role must be 'owner' or 'accountant'")
        if role != owner.role and EntityStore(db, Property).count(owner_id=owner.id):
            raise Conflict("Owner still holds properties; reassign them first")
        patch["role"] = role
    if payload.companies is not None:
        patch["companies"] = [c.as_record() for c in payload.companies]

    if patch.get("role", owner.role) != "owner":
        # Hostkit credentials belong to owners only
        dropped = EntityStore(db, OwnerApiKeys).delete_many(owner_id=owner.id)
        if dropped:
            log.info("owner api keys dropped on role change", extra={"owner_id": owner.id})

    owner = EntityStore(db, User).update_by_id(owner.id, patch)
    return OperationResult(data=user_out(owner))


def delete_owner(db: Session, *, owner_id: str) -> OperationResult:
    res = relationships.delete_owner(db, owner_id=owner_id)
    return OperationResult(
        data={
            "deletedProperties": res.deleted_properties,
            "deletedApiKeys": res.deleted_api_keys,
            "deletedOwner": {"name": res.name, "email": res.email},
        }
    )


def list_accountants(db: Session) -> list[dict[str, Any]]:
    rows = EntityStore(db, User).find(role="accountant", order_by=User.created_at)
    return [accountant_out(db, a) for a in rows]


def update_accountant(db: Session, *, accountant_id: str, payload: AccountantUpdate) -> OperationResult:
    accountant = must_get_accountant(db, accountant_id)
    patch: dict[str, Any] = {}
    if payload.name is not None:
        patch["name"] = payload.name.strip()
    if payload.phone is not None:
        patch["phone"] = payload.phone
    if payload.email is not None:
        email = _norm_email(payload.email)
        if not email:
            raise InvalidInput("Email cannot be empty")
        _check_email_free(db, email, user_id=accountant.id)
        patch["email"] = email
    if payload.password and payload.password.strip():
        patch["password_hash"] = hash_password(payload.password)

    accountant = EntityStore(db, User).update_by_id(accountant.id, patch)
    return OperationResult(data=accountant_out(db, accountant))


def update_accountant_properties(
    db: Session, *, accountant_id: str, property_refs: Iterable[Union[int, str]]
) -> OperationResult:
    relationships.set_accountant_assignments(db, accountant_id=accountant_id, property_refs=property_refs)
    accountant = must_get_accountant(db, accountant_id)
    return OperationResult(data=accountant_out(db, accountant))


def delete_accountant(db: Session, *, accountant_id: str) -> OperationResult:
    removed = relationships.delete_accountant(db, accountant_id=accountant_id)
    return OperationResult(data={"removedAssignments": removed})


def accountant_companies(db: Session, *, accountant_id: str) -> list[dict[str, Any]]:
    """
    Unique {name, taxId} across the owners of the accountant's properties.
    Admin-owned properties contribute the admin's companies.
    """
    accountant = must_get_accountant(db, accountant_id)
    admin = EntityStore(db, User).find_one(role="admin")

    seen: dict[str, dict[str, Any]] = {}
    for p in relationships.assigned_properties(db, accountant_id=accountant.id):
        holder = p.owner
        if holder is None and p.is_admin_owned:
            holder = admin
        if holder is None:
            continue
        for c in holder.companies:
            name = str(c.get("name") or "")
            tax_id = str(c.get("taxId") or c.get("nif") or "")
            key = f"{name}-{tax_id}"
            if key not in seen:
                seen[key] = {"name": name, "taxId": tax_id, "ownerId": holder.id, "ownerName": holder.name}
    return list(seen.values())


# -----------------------------
# Owner Hostkit credentials
# -----------------------------
def get_owner_api_keys(db: Session, *, owner_id: str) -> Optional[dict[str, Any]]:
    owner = must_get_owner(db, owner_id)
    row = EntityStore(db, OwnerApiKeys).find_one(owner_id=owner.id)
    if row is None:
        return None
    return {"hostkitApiKey": row.hostkit_api_key, "hostkitApiSecret": row.hostkit_api_secret, "isActive": row.is_active}


def update_owner_api_keys(db: Session, *, owner_id: str, payload: OwnerApiKeysUpdate) -> OperationResult:
    owner = must_get_owner(db, owner_id)
    row = upsert_owner_api_keys(
        db, owner_id=owner.id, api_key=payload.hostkit_api_key, api_secret=payload.hostkit_api_secret
    )
    return OperationResult(data={"ownerId": owner.id, "isActive": row.is_active})


# -----------------------------
# Properties
# -----------------------------
def list_properties(db: Session, *, owner_filter: Optional[str] = None) -> list[dict[str, Any]]:
    store = EntityStore(db, Property)
    f = (owner_filter or "").strip()
    if not f or f == "all":
        rows = store.find(order_by=Property.created_at)
    elif is_admin_target(f):
        rows = store.find(is_admin_owned=True, order_by=Property.created_at)
    else:
        rows = store.find(owner_id=f, is_admin_owned=False, order_by=Property.created_at)
    return [property_out(p) for p in rows]


def create_property(db: Session, *, payload: PropertyCreate) -> OperationResult:
    required = {
        "id": payload.id,
        "name": payload.name,
        "address": payload.address,
        "type": payload.type,
        "hostkitId": payload.hostkit_id,
        "hostkitApiKey": payload.hostkit_api_key,
        "owner": payload.owner,
    }
    missing = [k for k, v in required.items() if v is None or str(v).strip() == ""]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

    try:
        external_id = int(str(payload.id).strip())
    except ValueError:
        raise InvalidInput("Property id must be numeric")

    if is_admin_target(payload.owner):
        ownership = Ownership.admin()
    else:
        ownership = Ownership.owned_by(must_get_owner(db, payload.owner).id)

    row = _insert_property(
        db,
        external_id=external_id,
        name=payload.name,
        ownership=ownership,
        address=payload.address,
        type=payload.type,
        bedrooms=payload.bedrooms,
        bathrooms=payload.bathrooms,
        max_guests=payload.max_guests,
        hostkit_id=payload.hostkit_id,
        hostkit_api_key=payload.hostkit_api_key,
        status=payload.status,
        amenities=payload.amenities,
    )
    log.info("property created", extra={"property_id": row.external_id, "owner_id": row.owner_id})
    return OperationResult(data=property_out(row))


def assign_property_to_owner(db: Session, *, target: str, property_id: Any) -> OperationResult:
    if not target or property_id is None or str(property_id).strip() == "":
        raise InvalidInput("Owner ID and Property ID are required")
    prop = relationships.assign_property_to_owner(db, property_ref=property_id, target=target)
    return OperationResult(
        data={
            "id": prop.external_id,
            "name": prop.name,
            "owner": prop.owner_id,
            "isAdminOwned": bool(prop.is_admin_owned),
        }
    )


def delete_property(db: Session, *, property_ref: Any) -> OperationResult:
    if property_ref is None or str(property_ref).strip() == "":
        raise InvalidInput("Property ID is required")
    res = relationships.delete_property(db, property_ref=property_ref)
    return OperationResult(
        data={"deletedProperty": {"id": res.external_id, "name": res.name}},
        warnings=list(res.warnings),
    )


def dashboard_stats(db: Session) -> dict[str, Any]:
    users = EntityStore(db, User)
    props = EntityStore(db, Property)
    recent = props.find(order_by=desc(Property.created_at), limit=5)
    return {
        "totalOwners": users.count(role="owner"),
        "totalAccountants": users.count(role="accountant"),
        "totalProperties": props.count(),
        "ownersWithApiKeys": EntityStore(db, OwnerApiKeys).count(is_active=True),
        "recentProperties": [property_out(p) for p in recent],
    }


# -----------------------------
# Owner statement
# -----------------------------
def _parse_day(v: str, label: str) -> date:
    try:
        return date.fromisoformat(str(v).strip()[:10])
    except ValueError:
        raise InvalidInput(f"{label} must be an ISO date (YYYY-MM-DD)")


def generate_owner_statement(
    db: Session,
    *,
    property_id: Any,
    start_date: Optional[str],
    end_date: Optional[str],
    invoice_source: InvoiceSource,
) -> OperationResult:
    if property_id is None or str(property_id).strip() == "" or not start_date or not end_date:
        raise InvalidInput("Property ID, start date, and end date are required")
    if _parse_day(start_date, "startDate") > _parse_day(end_date, "endDate"):
        raise InvalidInput("startDate must not be after endDate")

    prop = must_get_property(db, property_id)

    try:
        invoices = invoice_source.get_invoices(
            prop.external_id, start_date, end_date, api_key=prop.hostkit_api_key or None
        )
    except InvoiceSourceError as e:
        raise UpstreamUnavailable(str(e))

    statement = build_owner_statement(
        property_external_id=prop.external_id,
        property_name=prop.name,
        is_admin_owned=prop.is_admin_owned,
        owner_name=prop.owner.name if prop.owner is not None else None,
        start_date=start_date,
        end_date=end_date,
        invoices=invoices,
        portal_rate=settings.portal_commission_rate,
        cleaning_fee_per_invoice=settings.cleaning_fee_per_invoice,
        management_rate=settings.management_commission_rate,
    )
    log.info(
        "owner statement generated for %s invoices",
        statement["invoiceCount"],
        extra={"property_id": prop.external_id},
    )
    return OperationResult(data=statement)
