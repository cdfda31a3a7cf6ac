# backend/tests/test_create_owner_best_effort.py
from __future__ import annotations

import pytest

from owner_admin.domain.errors import Conflict, InvalidInput
from owner_admin.models import OwnerApiKeys, Property, User
from owner_admin.schemas import UserCreate
from owner_admin.services import admin_ops
from owner_admin.services.auth_service import verify_password
from owner_admin.services.relationships import assigned_properties


def _payload(**kw) -> UserCreate:
    base = {"name": "Olga", "email": "Olga@X.test", "password": "s3cret"}
    base.update(kw)
    return UserCreate.model_validate(base)


def test_owner_with_keys_and_inline_property(db, notifier):
    payload = _payload(
        hostkitApiId="api-id",
        hostkitApiKey="api-key",
        companies=[{"name": "Olga Lda", "taxId": "500100200"}],
        propertyData={"id": "1001", "name": "Alfama Loft", "bedrooms": "2", "amenities": "wifi, pool ,"},
    )

    res = admin_ops.create_owner_or_accountant(db, payload=payload, notifier=notifier)

    assert res.clean
    assert res.data["email"] == "olga@x.test"
    assert res.data["isVerified"] is True
    assert res.data["hasApiKeys"] is True and res.data["apiKeysActive"] is True
    assert res.data["companies"] == [{"name": "Olga Lda", "taxId": "500100200"}]

    user = db.query(User).filter(User.email == "olga@x.test").one()
    assert verify_password("s3cret", user.password_hash)

    keys = db.query(OwnerApiKeys).filter(OwnerApiKeys.owner_id == user.id).one()
    assert (keys.hostkit_api_key, keys.hostkit_api_secret) == ("api-id", "api-key")

    prop = db.query(Property).filter(Property.external_id == 1001).one()
    assert prop.owner_id == user.id and prop.is_admin_owned is False
    assert prop.amenities == ["wifi", "pool"]
    assert prop.bedrooms == 2
    assert prop.hostkit_api_key == "api-key"
    assert "hostkitApiKey" not in res.data["property"]

    assert notifier.welcomes == [("owner", "olga@x.test")]


def test_key_failure_is_a_warning_not_an_error(db, notifier, monkeypatch):
    def boom(*a, **kw):
        raise RuntimeError("credentials store down")

    monkeypatch.setattr(admin_ops, "upsert_owner_api_keys", boom)

    res = admin_ops.create_owner_or_accountant(
        db, payload=_payload(hostkitApiId="i", hostkitApiKey="k"), notifier=notifier
    )

    assert db.query(User).filter(User.email == "olga@x.test").count() == 1
    assert any("credentials store down" in w for w in res.warnings)
    # the welcome email still goes out after an earlier best-effort failure
    assert notifier.welcomes == [("owner", "olga@x.test")]


def test_email_failure_keeps_the_user(db, notifier):
    notifier.fail = True

    res = admin_ops.create_owner_or_accountant(db, payload=_payload(), notifier=notifier)
    assert res.warnings == ["welcome email not sent"]
    assert res.data["hasApiKeys"] is False
    assert db.query(User).count() == 1


def test_inline_property_collision_is_a_warning(db, notifier, make_property):
    make_property(1001)
    res = admin_ops.create_owner_or_accountant(
        db, payload=_payload(propertyData={"id": 1001, "name": "dup"}), notifier=notifier
    )
    assert res.data["property"] is None
    assert any("already exists" in w for w in res.warnings)
    assert db.query(Property).filter(Property.external_id == 1001).one().is_admin_owned is True


def test_accountant_gets_assignments_and_accountant_email(db, notifier, make_property):
    make_property(1001)
    make_property(1002)

    res = admin_ops.create_owner_or_accountant(
        db,
        payload=_payload(email="acc@x.test", role="accountant", assignedProperties=[1001, "1002"]),
        notifier=notifier,
    )

    assert res.clean
    assert res.data["role"] == "accountant"
    props = assigned_properties(db, accountant_id=res.data["_id"])
    assert [p.external_id for p in props] == [1001, 1002]
    assert notifier.welcomes == [("accountant", "acc@x.test")]


def test_validation_order(db, notifier, make_user):
    make_user("olga@x.test")
    with pytest.raises(Conflict):
        admin_ops.create_owner_or_accountant(db, payload=_payload(password=None), notifier=notifier)

    with pytest.raises(InvalidInput):
        admin_ops.create_owner_or_accountant(
            db, payload=_payload(email="new@x.test", password=None), notifier=notifier
        )

    with pytest.raises(InvalidInput):
        admin_ops.create_owner_or_accountant(db, payload=_payload(email="new@x.test", role="admin"), notifier=notifier)

    assert notifier.welcomes == []
