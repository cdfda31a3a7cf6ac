# backend/owner_admin/domain/ownership.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ADMIN_SENTINEL = "admin"


@dataclass(frozen=True)
class Ownership:
    """
    Who holds a property: the admin pool, or exactly one owner.

    Persisted as the (owner_id, is_admin_owned) column pair; this value is the
    only way either column is written.
    """

    owner_id: Optional[str] = None

    @classmethod
    def admin(cls) -> "Ownership":
        return cls(owner_id=None)

    @classmethod
    def owned_by(cls, owner_id: str) -> "Ownership":
        if not owner_id:
            raise ValueError("owner_id is required for owner ownership")
        return cls(owner_id=str(owner_id))

    @property
    def is_admin_owned(self) -> bool:
        return self.owner_id is None

    def columns(self) -> tuple[Optional[str], bool]:
        return self.owner_id, self.is_admin_owned


def is_admin_target(target: str | None) -> bool:
    return str(target or "").strip().lower() == ADMIN_SENTINEL
