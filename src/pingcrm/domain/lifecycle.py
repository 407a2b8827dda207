"""
Soft-delete lifecycle shared by contacts and companies, run with xstate-python.

active --SOFT_DELETE--> deleted --RESTORE--> active
                        deleted --PURGE----> purged

There is no edge from active to purged. Editing is only allowed while active.
The machine is standard XState JSON (record_lifecycle.json).
"""

import json
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path

from xstate.machine import Machine

from pingcrm.errors import LifecycleError

STATE_ACTIVE = "active"
STATE_DELETED = "deleted"
STATE_PURGED = "purged"


class LifecycleAction(str, Enum):
    EDIT = "edit"
    SOFT_DELETE = "soft_delete"
    RESTORE = "restore"
    PURGE = "purge"


_EVENTS = {
    LifecycleAction.SOFT_DELETE: "SOFT_DELETE",
    LifecycleAction.RESTORE: "RESTORE",
    LifecycleAction.PURGE: "PURGE",
}


def get_machine_path() -> Path:
    """record_lifecycle.json next to this module, unless PINGCRM_LIFECYCLE_PATH points elsewhere."""
    override = os.environ.get("PINGCRM_LIFECYCLE_PATH", "").strip()
    if override:
        return Path(override).resolve()
    return Path(__file__).resolve().parent / "record_lifecycle.json"


def load_machine(path: Path | None = None) -> dict:
    config = json.loads((path or get_machine_path()).read_text(encoding="utf-8"))
    missing = [key for key in ("initial", "states") if key not in config]
    if missing:
        raise ValueError(f"Lifecycle machine needs {' and '.join(missing)}")
    unknown = set(config["states"]) - {STATE_ACTIVE, STATE_DELETED, STATE_PURGED}
    if unknown:
        raise ValueError(f"Unknown lifecycle states: {', '.join(sorted(unknown))}")
    return config


@lru_cache(maxsize=None)
def _default_machine() -> Machine:
    return Machine(load_machine())


def transition(state_value: str, event: str, machine: Machine | None = None) -> str | None:
    """Return the next state value for (state_value, event), or None if not allowed."""
    if machine is None:
        machine = _default_machine()
    try:
        target = machine.transition(machine.state_from(state_value), event).value
    except (ValueError, KeyError):
        return None
    return None if target == state_value else target


def state_of(record) -> str:
    """Lifecycle state of a record: deleted_at is the only discriminator."""
    return STATE_DELETED if record.deleted_at is not None else STATE_ACTIVE


def next_state(record, action: "LifecycleAction | str") -> str:
    """Return the state `action` leads to, or raise LifecycleError."""
    action = LifecycleAction(action)
    current = state_of(record)
    if action is LifecycleAction.EDIT:
        if current != STATE_ACTIVE:
            raise LifecycleError(action.value, current)
        return current
    target = transition(current, _EVENTS[action])
    if target is None:
        raise LifecycleError(action.value, current)
    return target


def can(record, action: "LifecycleAction | str") -> bool:
    try:
        next_state(record, action)
    except LifecycleError:
        return False
    return True


def available_actions(record) -> list[LifecycleAction]:
    """Actions a UI may offer for this record, in display order."""
    return [action for action in LifecycleAction if can(record, action)]
