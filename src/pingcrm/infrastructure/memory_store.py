"""In-memory record store with soft delete (no DB).

Backs InMemoryResourceGateway and the reference API in api.main. Records are
plain JSON-ready dicts in snake_case. Order preserved by insertion.
"""

import math
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from pingcrm.domain import StatusFilter
from pingcrm.domain.lifecycle import STATE_ACTIVE, STATE_DELETED, transition
from pingcrm.errors import LifecycleError

CONTACT_SEARCH_FIELDS = ("first_name", "last_name", "email", "phone", "city")
COMPANY_SEARCH_FIELDS = ("name", "email", "phone", "city")

SERVER_FIELDS = ("id", "created_at", "updated_at", "deleted_at")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _state(record: dict[str, Any]) -> str:
    return STATE_DELETED if record.get("deleted_at") else STATE_ACTIVE


def paginate(items: list[dict[str, Any]], total: int, *, offset: int, limit: int) -> dict[str, Any]:
    """Wrap one slice as `{items, total, page, pages}`."""
    return {
        "items": items,
        "total": total,
        "page": offset // limit + 1,
        "pages": math.ceil(total / limit),
    }


class InMemoryRecordStore:
    """One collection. Purge is the only operation that removes a record."""

    def __init__(
        self,
        collection: str,
        *,
        search_fields: tuple[str, ...],
        clock: Callable[[], str] = _utcnow,
    ) -> None:
        self.collection = collection
        self._search_fields = search_fields
        self._clock = clock
        self._by_id: dict[int, dict[str, Any]] = {}
        self._order: list[int] = []
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._order)

    def create(self, fields: dict[str, Any]) -> dict[str, Any]:
        now = self._clock()
        record = {k: v for k, v in fields.items() if k not in SERVER_FIELDS}
        record.update(id=self._next_id, created_at=now, updated_at=now, deleted_at=None)
        self._by_id[record["id"]] = record
        self._order.append(record["id"])
        self._next_id += 1
        return dict(record)

    def get(self, record_id: int) -> dict[str, Any] | None:
        record = self._by_id.get(record_id)
        return dict(record) if record is not None else None

    def _matches(
        self,
        record: dict[str, Any],
        needle: str,
        status: StatusFilter,
        filters: dict[str, Any],
    ) -> bool:
        deleted = _state(record) == STATE_DELETED
        if status is StatusFilter.ACTIVE and deleted:
            return False
        if status is StatusFilter.TRASHED and not deleted:
            return False
        for key, value in filters.items():
            if value is None:
                continue
            if str(record.get(key)) != str(value):
                return False
        if not needle:
            return True
        return any(needle in str(record.get(f) or "").lower() for f in self._search_fields)

    def list(
        self,
        *,
        search: str = "",
        status: "StatusFilter | str" = StatusFilter.ACTIVE,
        offset: int = 0,
        limit: int = 10,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return (slice, total matching). Search is case-insensitive and partial."""
        needle = (search or "").strip().lower()
        status = StatusFilter.parse(status)
        matched = [
            self._by_id[rid]
            for rid in self._order
            if self._matches(self._by_id[rid], needle, status, filters or {})
        ]
        return [dict(r) for r in matched[offset : offset + limit]], len(matched)

    def update(self, record_id: int, fields: dict[str, Any]) -> dict[str, Any] | None:
        record = self._by_id.get(record_id)
        if record is None:
            return None
        if _state(record) != STATE_ACTIVE:
            raise LifecycleError("edit", _state(record))
        record.update({k: v for k, v in fields.items() if k not in SERVER_FIELDS})
        record["updated_at"] = self._clock()
        return dict(record)

    def _move(self, record_id: int, event: str, action: str) -> dict[str, Any] | None:
        record = self._by_id.get(record_id)
        if record is None:
            return None
        if transition(_state(record), event) is None:
            raise LifecycleError(action, _state(record))
        return record

    def soft_delete(self, record_id: int) -> dict[str, Any] | None:
        record = self._move(record_id, "SOFT_DELETE", "soft_delete")
        if record is None:
            return None
        record["deleted_at"] = record["updated_at"] = self._clock()
        return dict(record)

    def restore(self, record_id: int) -> dict[str, Any] | None:
        record = self._move(record_id, "RESTORE", "restore")
        if record is None:
            return None
        record["deleted_at"] = None
        record["updated_at"] = self._clock()
        return dict(record)

    def purge(self, record_id: int) -> bool:
        if self._move(record_id, "PURGE", "purge") is None:
            return False
        del self._by_id[record_id]
        self._order.remove(record_id)
        return True


def contact_store(**kwargs) -> InMemoryRecordStore:
    return InMemoryRecordStore("contacts", search_fields=CONTACT_SEARCH_FIELDS, **kwargs)


def company_store(**kwargs) -> InMemoryRecordStore:
    return InMemoryRecordStore("companies", search_fields=COMPANY_SEARCH_FIELDS, **kwargs)
