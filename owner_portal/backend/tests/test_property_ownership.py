# backend/tests/test_property_ownership.py
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from owner_admin.domain.errors import InvalidInput, NotFound
from owner_admin.domain.ownership import Ownership
from owner_admin.models import Property
from owner_admin.services.ownership import resolve_property_filter
from owner_admin.services.relationships import assign_property_to_owner


def test_property_moves_between_admin_pool_and_owner(db, make_user, make_property):
    owner = make_user("o1@x.test")
    p = make_property(1001)
    assert p.is_admin_owned and p.owner_id is None

    p = assign_property_to_owner(db, property_ref=1001, target=owner.id)
    assert p.owner_id == owner.id
    assert p.is_admin_owned is False

    p = assign_property_to_owner(db, property_ref=p.id, target="admin")
    assert p.owner_id is None
    assert p.is_admin_owned is True


def test_reassigning_to_another_owner_replaces_the_holder(db, make_user, make_property):
    a = make_user("a@x.test")
    b = make_user("b@x.test")
    make_property(1001, owner=a)

    p = assign_property_to_owner(db, property_ref="1001", target=b.id)
    assert p.owner_id == b.id
    assert db.query(Property).filter(Property.owner_id == a.id).count() == 0


def test_assignment_keeps_accountant_memberships(db, make_user, make_property):
    from owner_admin.services.relationships import add_accountant_to_properties

    owner = make_user("o@x.test")
    acc = make_user("acc@x.test", role="accountant")
    make_property(1001)
    add_accountant_to_properties(db, accountant_id=acc.id, property_refs=[1001])

    p = assign_property_to_owner(db, property_ref=1001, target=owner.id)
    assert p.accountant_ids == [acc.id]


def test_unknown_property_or_owner_is_not_found(db, make_user, make_property):
    owner = make_user("o@x.test")
    make_property(1001)

    with pytest.raises(NotFound):
        assign_property_to_owner(db, property_ref=9999, target=owner.id)

    with pytest.raises(NotFound):
        assign_property_to_owner(db, property_ref=1001, target="0" * 24)

    # an accountant is not a valid owner target
    acc = make_user("acc@x.test", role="accountant")
    with pytest.raises(NotFound):
        assign_property_to_owner(db, property_ref=1001, target=acc.id)


def test_property_refs_are_disambiguated_by_shape():
    assert resolve_property_filter("a" * 24) == {"id": "a" * 24}
    assert resolve_property_filter(42) == {"external_id": 42}
    assert resolve_property_filter("42") == {"external_id": 42}
    with pytest.raises(InvalidInput):
        resolve_property_filter("not-an-id")


def test_storage_rejects_owner_and_admin_flag_together(db, make_user):
    owner = make_user("o@x.test")
    p = Property(external_id=2002, name="bad")
    p.owner_id = owner.id
    p.is_admin_owned = True
    db.add(p)
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_ownership_value_requires_an_owner_id():
    with pytest.raises(ValueError):
        Ownership.owned_by("")
    assert Ownership.admin().columns() == (None, True)
    assert Ownership.owned_by("abc").columns() == ("abc", False)
