"""Tests for the soft-delete lifecycle machine."""

from datetime import datetime, timezone

import pytest

from pingcrm.domain import Company, Contact, LifecycleAction, available_actions, can, next_state
from pingcrm.domain.lifecycle import get_machine_path, load_machine, state_of, transition
from pingcrm.errors import LifecycleError

DELETED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _contact(deleted: bool = False) -> Contact:
    return Contact(
        id=1,
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        deleted_at=DELETED_AT if deleted else None,
    )


def test_load_machine():
    path = get_machine_path()
    assert path.name == "record_lifecycle.json"
    machine = load_machine(path)
    assert machine["initial"] == "active"
    assert set(machine["states"]) == {"active", "deleted", "purged"}


def test_load_machine_requires_initial_and_states(tmp_path):
    (tmp_path / "m.json").write_text('{"id": "x"}')
    with pytest.raises(ValueError, match="initial"):
        load_machine(tmp_path / "m.json")


def test_transitions():
    assert transition("active", "SOFT_DELETE") == "deleted"
    assert transition("deleted", "RESTORE") == "active"
    assert transition("deleted", "PURGE") == "purged"


def test_no_direct_purge_or_double_delete():
    assert transition("active", "PURGE") is None
    assert transition("active", "RESTORE") is None
    assert transition("deleted", "SOFT_DELETE") is None


def test_deleted_at_is_the_only_discriminator():
    assert state_of(_contact()) == "active"
    assert state_of(_contact(deleted=True)) == "deleted"


def test_available_actions_for_active_record():
    assert available_actions(_contact()) == [LifecycleAction.EDIT, LifecycleAction.SOFT_DELETE]


def test_available_actions_for_deleted_record():
    assert available_actions(_contact(deleted=True)) == [
        LifecycleAction.RESTORE,
        LifecycleAction.PURGE,
    ]


def test_next_state_rejects_edit_of_deleted_record():
    with pytest.raises(LifecycleError, match="edit"):
        next_state(_contact(deleted=True), LifecycleAction.EDIT)


def test_next_state_rejects_purge_of_active_record():
    company = Company(id=3, name="Acme", email="info@acme.test")
    with pytest.raises(LifecycleError) as excinfo:
        next_state(company, "purge")
    assert excinfo.value.state == "active"
    assert not can(company, LifecycleAction.PURGE)
    assert can(company, LifecycleAction.SOFT_DELETE)
