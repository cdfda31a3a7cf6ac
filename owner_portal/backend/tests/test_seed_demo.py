# backend/tests/test_seed_demo.py
from __future__ import annotations

import pytest

from owner_admin.cli.seed_demo import seed_demo
from owner_admin.models import Property, User
from owner_admin.schemas import FirstAdminCreate
from owner_admin.services import admin_ops


def test_seed_reuses_the_admin_created_by_setup(db, notifier):
    admin_ops.create_first_admin(
        db, payload=FirstAdminCreate(name="Boss", email="boss@x.test", password="pw"), notifier=notifier
    )

    out = seed_demo()

    assert db.query(User).filter(User.role == "admin").count() == 1
    assert out.admin_email == "boss@x.test"
    assert out.property_ids == [1001, 1002]


def test_seed_is_idempotent(db):
    seed_demo()
    seed_demo()
    assert db.query(User).count() == 3
    assert db.query(Property).count() == 2


def test_seed_refuses_an_email_held_by_another_role(db, make_user):
    make_user("acc@x.test", role="accountant")

    with pytest.raises(ValueError):
        seed_demo(owner_email="ACC@x.test")

    assert db.query(Property).count() == 0


def test_seed_lowercases_emails(db):
    out = seed_demo(owner_email="Owner@Demo.Local")
    assert out.owner_email == "owner@demo.local"
    assert db.query(User).filter(User.email == "owner@demo.local").count() == 1
