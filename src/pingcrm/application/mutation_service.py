"""Create, edit, soft-delete, restore and purge, followed by a refetch of the bound view."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from pingcrm.application.detail_controller import DetailController
from pingcrm.application.dto import (
    AlreadyPending,
    Invalid,
    MutationFailed,
    MutationResult,
    MutationSucceeded,
    Rejected,
)
from pingcrm.application.ports import Refreshable, ResourceGateway
from pingcrm.domain import next_state
from pingcrm.domain.lifecycle import LifecycleAction
from pingcrm.errors import ApiError, LifecycleError, ValidationError

logger = logging.getLogger(__name__)

R = TypeVar("R")

CREATE = "create"

_VERBS = {
    CREATE: "create",
    LifecycleAction.EDIT.value: "update",
    LifecycleAction.SOFT_DELETE.value: "delete",
    LifecycleAction.RESTORE.value: "restore",
    LifecycleAction.PURGE.value: "permanently delete",
}


def validate_draft(draft: Any) -> None:
    """Raise ValidationError when a required field is blank."""
    missing = draft.missing_fields()
    if missing:
        raise ValidationError(missing)


class MutationService(Generic[R]):
    """
    Runs one mutation per (action, record id) at a time. On success the bound
    view refetches from the server; on failure nothing local changes.
    """

    def __init__(self, gateway: ResourceGateway[R], *, view: Refreshable | None = None) -> None:
        self._gateway = gateway
        self._view = view
        self._pending: set[tuple[str, int | None]] = set()

    def is_pending(self, action: str, record_id: int | None = None) -> bool:
        return (str(action), record_id) in self._pending

    async def create(self, draft: Any) -> MutationResult:
        try:
            validate_draft(draft)
        except ValidationError as exc:
            return Invalid(reason=str(exc), fields=exc.fields)
        return await self._run(CREATE, None, lambda: self._gateway.create(draft))

    async def update(self, record: R, draft: Any) -> MutationResult:
        try:
            validate_draft(draft)
        except ValidationError as exc:
            return Invalid(reason=str(exc), fields=exc.fields)
        return await self._guarded(
            record,
            LifecycleAction.EDIT,
            lambda: self._gateway.update(record.id, draft),
        )

    async def soft_delete(self, record: R) -> MutationResult:
        return await self._guarded(
            record,
            LifecycleAction.SOFT_DELETE,
            lambda: self._gateway.soft_delete(record.id),
        )

    async def restore(self, record: R) -> MutationResult:
        return await self._guarded(
            record,
            LifecycleAction.RESTORE,
            lambda: self._gateway.restore(record.id),
        )

    async def purge(self, record: R) -> MutationResult:
        return await self._guarded(
            record,
            LifecycleAction.PURGE,
            lambda: self._gateway.purge(record.id),
        )

    async def _guarded(
        self,
        record: R,
        action: LifecycleAction,
        call: Callable[[], Awaitable[Any]],
    ) -> MutationResult:
        try:
            next_state(record, action)
        except LifecycleError as exc:
            return Rejected(action=action.value, record_id=record.id, reason=str(exc))
        return await self._run(action.value, record.id, call)

    async def _run(
        self,
        action: str,
        record_id: int | None,
        call: Callable[[], Awaitable[Any]],
    ) -> MutationResult:
        key = (action, record_id)
        if key in self._pending:
            return AlreadyPending(action=action, record_id=record_id)
        self._pending.add(key)
        try:
            response = await call()
        except ApiError as exc:
            label = self._gateway.kind.label
            logger.warning("Failed to %s %s %s: %s", _VERBS[action], label, record_id, exc)
            return MutationFailed(
                action=action,
                record_id=record_id,
                error=exc,
                message=f"Failed to {_VERBS[action]} {label}. Please try again.",
            )
        finally:
            self._pending.discard(key)

        if record_id is None and response is not None:
            record_id = response.id
        await self._refetch(action)
        return MutationSucceeded(action=action, record_id=record_id, record=response)

    async def _refetch(self, action: str) -> None:
        if self._view is None:
            return
        if action == LifecycleAction.PURGE.value and isinstance(self._view, DetailController):
            self._view.forget()
            return
        await self._view.refresh()
