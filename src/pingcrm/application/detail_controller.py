"""Detail controller: one record by id, plus the contacts of a company."""

import logging
from typing import Any, Generic, TypeVar

from pingcrm.application.dto import DetailView, ViewStatus
from pingcrm.application.ports import ResourceGateway
from pingcrm.domain import ListQueryState, available_actions
from pingcrm.domain.lifecycle import LifecycleAction
from pingcrm.errors import CrmError

logger = logging.getLogger(__name__)

R = TypeVar("R")

RELATED_LIMIT = 100


class DetailController(Generic[R]):
    """Holds its own snapshot of one record. Soft-deleted records load like active ones."""

    def __init__(
        self,
        gateway: ResourceGateway[R],
        record_id: int,
        *,
        related_gateway: ResourceGateway[Any] | None = None,
        related_filter: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._record_id = record_id
        self._related_gateway = related_gateway
        self._related_filter = related_filter
        self._view: DetailView[R] = DetailView()
        self._ticket = 0

    @property
    def record_id(self) -> int:
        return self._record_id

    @property
    def view(self) -> DetailView[R]:
        return self._view

    @property
    def record(self) -> R | None:
        return self._view.record

    @property
    def is_deleted(self) -> bool:
        return self._view.record is not None and self._view.record.is_deleted

    @property
    def can_edit(self) -> bool:
        return self._view.record is not None and LifecycleAction.EDIT in self.actions

    @property
    def actions(self) -> list[LifecycleAction]:
        if self._view.record is None:
            return []
        return available_actions(self._view.record)

    async def load(self) -> None:
        self._ticket += 1
        ticket = self._ticket
        self._view = DetailView(status=ViewStatus.LOADING, record=self._view.record)
        try:
            record = await self._gateway.get_by_id(self._record_id)
        except CrmError as exc:
            if ticket != self._ticket:
                return
            logger.warning(
                "Failed to load %s %s: %s", self._gateway.kind.label, self._record_id, exc
            )
            self._view = DetailView(status=ViewStatus.FAILED, error=exc)
            return
        related, related_error = await self._load_related()
        if ticket != self._ticket:
            return
        self._view = DetailView(
            status=ViewStatus.POPULATED,
            record=record,
            related=related,
            related_error=related_error,
        )

    async def _load_related(self) -> tuple[tuple[Any, ...], CrmError | None]:
        # Independent of the record itself: a failure here leaves the record on screen.
        if self._related_gateway is None or not self._related_filter:
            return (), None
        try:
            page = await self._related_gateway.list(
                ListQueryState(page_size=RELATED_LIMIT),
                {self._related_filter: self._record_id},
            )
        except CrmError as exc:
            logger.warning(
                "Failed to load %s of %s %s: %s",
                self._related_gateway.kind.collection,
                self._gateway.kind.label,
                self._record_id,
                exc,
            )
            return (), exc
        return page.items, None

    async def refresh(self) -> None:
        await self.load()

    def forget(self) -> None:
        """Drop the snapshot after the record was purged."""
        self._ticket += 1
        self._view = DetailView(status=ViewStatus.EMPTY)
