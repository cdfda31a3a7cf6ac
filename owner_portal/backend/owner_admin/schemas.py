# backend/owner_admin/schemas.py
from __future__ import annotations

from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# property references arrive either as storage ids (24-hex) or external numeric ids
PropertyRef = Union[int, str]


class ApiModel(BaseModel):
    """Request bodies accept camelCase (portal frontend) or snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# -------------------- Users --------------------

class CompanyIn(ApiModel):
    name: str
    tax_id: str = Field(default="", validation_alias=AliasChoices("taxId", "tax_id", "nif"))

    def as_record(self) -> dict[str, str]:
        return {"name": self.name.strip(), "taxId": self.tax_id.strip()}


class InlinePropertyIn(ApiModel):
    id: Optional[PropertyRef] = None
    name: Optional[str] = None
    address: Optional[str] = None
    type: Optional[str] = None
    bedrooms: Optional[Union[int, str]] = None
    bathrooms: Optional[Union[int, str]] = None
    max_guests: Optional[Union[int, str]] = None
    hostkit_id: Optional[str] = None
    amenities: Optional[Union[str, list[str]]] = None


class UserCreate(ApiModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    password: Optional[str] = None
    role: str = "owner"

    # Hostkit credentials: the "API id" is stored as the key, the "API key" as the secret
    hostkit_api_id: Optional[str] = None
    hostkit_api_key: Optional[str] = None

    property_data: Optional[InlinePropertyIn] = None
    assigned_properties: list[PropertyRef] = Field(default_factory=list)
    companies: list[CompanyIn] = Field(default_factory=list)


class UserUpdate(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    companies: Optional[list[CompanyIn]] = None


class AccountantUpdate(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class AccountantAssignments(ApiModel):
    assigned_properties: list[PropertyRef] = Field(default_factory=list)


# -------------------- First admin bootstrap --------------------

class FirstAdminCreate(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: str = ""
    password: Optional[str] = None


class OtpVerify(ApiModel):
    email: str
    otp: str


class OtpResend(ApiModel):
    email: str


# -------------------- Properties --------------------

class PropertyCreate(ApiModel):
    id: Optional[PropertyRef] = None
    name: Optional[str] = None
    address: Optional[str] = None
    type: Optional[str] = None
    bedrooms: Optional[Union[int, str]] = None
    bathrooms: Optional[Union[int, str]] = None
    max_guests: Optional[Union[int, str]] = None
    hostkit_id: Optional[str] = None
    hostkit_api_key: Optional[str] = None
    status: str = "active"
    amenities: Union[str, list[str], None] = None
    owner: Optional[str] = None  # owner storage id or "admin"


class PropertyAssign(ApiModel):
    property_id: Optional[PropertyRef] = None


# -------------------- Owner API keys --------------------

class OwnerApiKeysUpdate(ApiModel):
    hostkit_api_key: str = ""
    hostkit_api_secret: str = ""
