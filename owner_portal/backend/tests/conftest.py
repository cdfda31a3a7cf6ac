# backend/tests/conftest.py
from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_owner_admin.db")
os.environ.setdefault("PASSWORD_PBKDF2_ITERS", "1000")
os.environ.setdefault("EMAIL_SERVICE_URL", "")

from typing import Optional

import pytest

from owner_admin.db import Base, SessionLocal, engine
from owner_admin.domain.ownership import Ownership
from owner_admin import models  # noqa: F401
from owner_admin.models import Property, User
from owner_admin.services.auth_service import hash_password


class FakeNotifier:
    """Records every delivery; `fail` makes all sends report failure."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.welcomes: list[tuple[str, str]] = []
        self.otps: list[tuple[str, str, str]] = []

    def send_owner_welcome(self, msg) -> bool:
        self.welcomes.append(("owner", msg.email))
        return not self.fail

    def send_accountant_welcome(self, msg) -> bool:
        self.welcomes.append(("accountant", msg.email))
        return not self.fail

    def send_otp(self, email: str, code: str, purpose: str) -> bool:
        self.otps.append((email, code, purpose))
        return not self.fail

    def last_code(self, email: str) -> str:
        return [c for (e, c, _) in self.otps if e == email][-1]


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def make_user(db):
    def _make(email: str, role: str = "owner", name: str = "", companies: Optional[list] = None) -> User:
        u = User(
            email=email,
            name=name or email.split("@")[0],
            role=role,
            password_hash=hash_password("pw"),
            is_verified=True,
        )
        u.companies = companies or []
        db.add(u)
        db.commit()
        db.refresh(u)
        return u

    return _make


@pytest.fixture()
def make_property(db):
    def _make(external_id: int, owner: Optional[User] = None, name: str = "", api_key: str = "") -> Property:
        p = Property(external_id=external_id, name=name or f"Property {external_id}", hostkit_api_key=api_key)
        p.ownership = Ownership.owned_by(owner.id) if owner is not None else Ownership.admin()
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make
