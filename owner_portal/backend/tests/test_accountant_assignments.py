# backend/tests/test_accountant_assignments.py
from __future__ import annotations

import pytest

from owner_admin.domain.errors import InvalidInput, NotFound
from owner_admin.models import PropertyAccountant
from owner_admin.services.relationships import (
    add_accountant_to_properties,
    assigned_properties,
    set_accountant_assignments,
)


def _links(db, accountant_id: str) -> int:
    return db.query(PropertyAccountant).filter(PropertyAccountant.accountant_id == accountant_id).count()


def test_adding_twice_keeps_one_membership(db, make_user, make_property):
    acc = make_user("acc@x.test", role="accountant")
    p = make_property(1001)

    assert add_accountant_to_properties(db, accountant_id=acc.id, property_refs=[1001]) == 1
    assert add_accountant_to_properties(db, accountant_id=acc.id, property_refs=[p.id, "1001"]) == 0
    assert _links(db, acc.id) == 1


def test_set_replaces_previous_assignments(db, make_user, make_property):
    acc = make_user("acc@x.test", role="accountant")
    other = make_user("other@x.test", role="accountant")
    make_property(1001)
    make_property(1002)
    make_property(1003)

    add_accountant_to_properties(db, accountant_id=acc.id, property_refs=[1001, 1002])
    add_accountant_to_properties(db, accountant_id=other.id, property_refs=[1001])

    props = set_accountant_assignments(db, accountant_id=acc.id, property_refs=[1002, 1003])
    assert [p.external_id for p in props] == [1002, 1003]

    # other accountants keep their memberships
    assert [p.external_id for p in assigned_properties(db, accountant_id=other.id)] == [1001]


def test_set_with_same_refs_is_idempotent(db, make_user, make_property):
    acc = make_user("acc@x.test", role="accountant")
    make_property(1001)

    set_accountant_assignments(db, accountant_id=acc.id, property_refs=[1001])
    set_accountant_assignments(db, accountant_id=acc.id, property_refs=[1001])
    assert _links(db, acc.id) == 1


def test_unknown_property_refs_are_ignored(db, make_user, make_property):
    acc = make_user("acc@x.test", role="accountant")
    make_property(1001)

    props = set_accountant_assignments(db, accountant_id=acc.id, property_refs=[1001, 4242, "f" * 24])
    assert [p.external_id for p in props] == [1001]


def test_empty_list_clears_all_assignments(db, make_user, make_property):
    acc = make_user("acc@x.test", role="accountant")
    make_property(1001)
    add_accountant_to_properties(db, accountant_id=acc.id, property_refs=[1001])

    assert set_accountant_assignments(db, accountant_id=acc.id, property_refs=[]) == []
    assert _links(db, acc.id) == 0


def test_malformed_ref_fails_before_anything_is_cleared(db, make_user, make_property):
    acc = make_user("acc@x.test", role="accountant")
    make_property(1001)
    add_accountant_to_properties(db, accountant_id=acc.id, property_refs=[1001])

    with pytest.raises(InvalidInput):
        set_accountant_assignments(db, accountant_id=acc.id, property_refs=["nope"])
    assert _links(db, acc.id) == 1


def test_owner_is_not_an_accountant(db, make_user):
    owner = make_user("o@x.test")
    with pytest.raises(NotFound):
        set_accountant_assignments(db, accountant_id=owner.id, property_refs=[])
