# backend/owner_admin/models.py
from __future__ import annotations

import json
import secrets
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base
from .domain.ownership import Ownership

ROLES = ("admin", "owner", "accountant")
OTP_PURPOSES = ("login", "signup", "forgot-password")


def new_object_id() -> str:
    """24-char lowercase hex storage id (same shape as a Mongo ObjectId)."""
    return secrets.token_hex(12)


def _load_list(raw: Optional[str]) -> list[Any]:
    if not raw:
        return []
    try:
        v = json.loads(raw)
    except ValueError:
        return []
    return v if isinstance(v, list) else []


def _dump_list(v: Optional[list[Any]]) -> str:
    return json.dumps(list(v or []), ensure_ascii=False)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


# -----------------------------
# Users: admin | owner | accountant
# -----------------------------
class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    name: Mapped[str] = mapped_column(String(160), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(40), nullable=False, default="")
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # ordered [{"name": ..., "taxId": ...}] used for tax-statement grouping
    companies_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def companies(self) -> list[dict[str, Any]]:
        return _load_list(self.companies_json)

    @companies.setter
    def companies(self, value: Optional[list[dict[str, Any]]]) -> None:
        self.companies_json = _dump_list(value)


# -----------------------------
# Properties
# -----------------------------
class Property(TimestampMixin, Base):
    __tablename__ = "properties"
    __table_args__ = (
        CheckConstraint(
            "(owner_id IS NULL AND is_admin_owned) OR (owner_id IS NOT NULL AND NOT is_admin_owned)",
            name="ck_properties_single_holder",
        ),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    external_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    type: Mapped[str] = mapped_column(String(60), nullable=False, default="")
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    hostkit_id: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    hostkit_api_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="active")

    amenities_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    images_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    owner_id: Mapped[Optional[str]] = mapped_column(String(24), ForeignKey("users.id"), nullable=True, index=True)
    is_admin_owned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    owner: Mapped[Optional["User"]] = relationship(foreign_keys=[owner_id])
    accountant_links: Mapped[List["PropertyAccountant"]] = relationship(
        back_populates="property", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def ownership(self) -> Ownership:
        return Ownership(owner_id=self.owner_id)

    @ownership.setter
    def ownership(self, value: Ownership) -> None:
        self.owner_id, self.is_admin_owned = value.columns()

    @property
    def amenities(self) -> list[str]:
        return [str(a) for a in _load_list(self.amenities_json)]

    @amenities.setter
    def amenities(self, value: Optional[list[str]]) -> None:
        self.amenities_json = _dump_list(value)

    @property
    def images(self) -> list[Any]:
        return _load_list(self.images_json)

    @images.setter
    def images(self, value: Optional[list[Any]]) -> None:
        self.images_json = _dump_list(value)

    @property
    def accountant_ids(self) -> list[str]:
        return [link.accountant_id for link in self.accountant_links]


class PropertyAccountant(Base):
    """Set membership: accountant <accountant_id> may see property <property_id>."""

    __tablename__ = "property_accountants"
    __table_args__ = (
        UniqueConstraint("property_id", "accountant_id", name="uq_property_accountants_property_accountant"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[str] = mapped_column(
        String(24), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    accountant_id: Mapped[str] = mapped_column(String(24), ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    property: Mapped["Property"] = relationship(back_populates="accountant_links")


# -----------------------------
# Owner Hostkit credentials (1:1 with an owner)
# -----------------------------
class OwnerApiKeys(TimestampMixin, Base):
    __tablename__ = "owner_api_keys"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    owner_id: Mapped[str] = mapped_column(String(24), nullable=False, unique=True, index=True)
    hostkit_api_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    hostkit_api_secret: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


# -----------------------------
# One-time passwords (expiry checked at read time, swept periodically)
# -----------------------------
class OtpToken(Base):
    __tablename__ = "otp_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    code_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    purpose: Mapped[str] = mapped_column(String(30), nullable=False, default="signup")
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
