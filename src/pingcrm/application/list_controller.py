"""List controller: search, status filter and page number against one resource gateway.

Only the most recently issued load may update the view. Every load takes a
ticket; a result whose ticket is no longer the latest is dropped.
"""

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pingcrm.application.dto import ListView, ViewStatus
from pingcrm.application.ports import ResourceGateway
from pingcrm.domain import DEFAULT_PAGE_SIZE, ListQueryState, StatusFilter
from pingcrm.errors import CrmError

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ListController(Generic[R]):
    """Idle -> Loading -> Populated | Empty | Failed; any query change re-enters Loading."""

    def __init__(
        self,
        gateway: ResourceGateway[R],
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: dict[str, Any] | None = None,
        on_change: Callable[[ListView[R]], None] | None = None,
    ) -> None:
        self._gateway = gateway
        self._filters = dict(filters or {})
        self._on_change = on_change
        self._query = ListQueryState(page_size=page_size)
        self._view: ListView[R] = ListView()
        self._ticket = 0

    @property
    def query(self) -> ListQueryState:
        return self._query

    @property
    def view(self) -> ListView[R]:
        return self._view

    @property
    def is_loading(self) -> bool:
        return self._view.is_loading

    @property
    def error(self) -> CrmError | None:
        return self._view.error

    @property
    def page(self):
        return self._view.page

    @property
    def known_pages(self) -> int | None:
        """Page count of the result currently on screen, if any."""
        if self._view.page is None:
            return None
        return self._view.page.pages

    async def set_search(self, text: str) -> None:
        self._query = self._query.with_search(text)
        await self._load(keep_page=False)

    async def set_status_filter(self, value: "str | StatusFilter") -> None:
        self._query = self._query.with_status(value)
        await self._load(keep_page=False)

    async def go_to_page(self, page_number: int) -> bool:
        """Load `page_number`. Returns False (and does nothing) when it is out of range."""
        if page_number < 1:
            return False
        pages = self.known_pages
        # Page 1 stays reachable when the result shrank to nothing under a later page.
        if pages is not None and page_number > max(pages, 1):
            return False
        self._query = self._query.with_page(page_number)
        await self._load(keep_page=True)
        return True

    async def next_page(self) -> bool:
        return await self.go_to_page(self._query.page_number + 1)

    async def previous_page(self) -> bool:
        return await self.go_to_page(self._query.page_number - 1)

    async def refresh(self) -> None:
        await self._load(keep_page=True)

    async def reset(self) -> None:
        self._query = self._query.cleared()
        await self._load(keep_page=False)

    def _apply(self, view: ListView[R]) -> None:
        self._view = view
        if self._on_change is not None:
            self._on_change(view)

    async def _load(self, *, keep_page: bool) -> None:
        self._ticket += 1
        ticket = self._ticket
        query = self._query
        # A new search or filter selects a different subset; don't show the old one meanwhile.
        shown = self._view.page if keep_page else None
        self._apply(ListView(status=ViewStatus.LOADING, page=shown))
        try:
            result = await self._gateway.list(query, self._filters or None)
        except CrmError as exc:
            if ticket != self._ticket:
                logger.debug("Discarding stale %s list failure: %s", self._gateway.kind.collection, exc)
                return
            logger.warning("Failed to load %s: %s", self._gateway.kind.collection, exc)
            self._apply(ListView(status=ViewStatus.FAILED, error=exc))
            return
        if ticket != self._ticket:
            logger.debug(
                "Discarding stale %s page %d (ticket %d, latest %d)",
                self._gateway.kind.collection,
                query.page_number,
                ticket,
                self._ticket,
            )
            return
        status = ViewStatus.EMPTY if result.is_empty else ViewStatus.POPULATED
        self._apply(ListView(status=status, page=result))
