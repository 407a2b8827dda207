"""REST implementation of ResourceGateway for one collection."""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from pingcrm.application.ports import Transport
from pingcrm.domain import ListQueryState, PaginatedResult, ResourceKind
from pingcrm.errors import ServerError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PaginationStyle(str, Enum):
    """How a collection expects the page to be addressed.

    OFFSET sends skip (zero-based item offset) and limit.
    PAGE sends page (one-based) and size.
    """

    OFFSET = "offset"
    PAGE = "page"

    @classmethod
    def parse(cls, value: "str | PaginationStyle") -> "PaginationStyle":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown pagination style {value!r} (expected 'offset' or 'page')."
            ) from None


def list_params(query: ListQueryState, style: PaginationStyle) -> dict[str, Any]:
    """Query parameters for a list call. `search` is sent even when empty."""
    params: dict[str, Any] = {"search": query.search_text}
    if style is PaginationStyle.OFFSET:
        params["skip"] = query.offset
        params["limit"] = query.page_size
    else:
        params["page"] = query.page_number
        params["size"] = query.page_size
    params["status"] = query.status_filter.value
    return params


class HttpResourceGateway:
    def __init__(
        self,
        transport: Transport,
        kind: ResourceKind,
        *,
        pagination: PaginationStyle = PaginationStyle.PAGE,
    ) -> None:
        self._transport = transport
        self.kind = kind
        self.pagination = PaginationStyle.parse(pagination)

    def _path(self, record_id: int | None = None, action: str | None = None) -> str:
        parts = [self.kind.collection]
        if record_id is not None:
            parts.append(str(record_id))
        if action:
            parts.append(action)
        return "/".join(parts)

    def _parsed(self, build: Callable[[], T]) -> T:
        """Run `build` over a response payload; a malformed payload is a server error."""
        try:
            return build()
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error("Malformed %s payload: %s", self.kind.label, e)
            raise ServerError(
                "Invalid response body", detail=f"Malformed {self.kind.label} payload: {e}"
            ) from e

    def _record(self, payload: Any) -> Any:
        return self._parsed(lambda: self.kind.parse(payload))

    async def list(
        self, query: ListQueryState, filters: dict[str, Any] | None = None
    ) -> PaginatedResult[Any]:
        params = list_params(query, self.pagination)
        for key, value in (filters or {}).items():
            if value is not None:
                params[key] = value
        payload = await self._transport.request("GET", self._path(), params=params)
        return self._parsed(
            lambda: PaginatedResult.from_payload(
                payload or {},
                self.kind.parse,
                requested_page=query.page_number,
                page_size=query.page_size,
            )
        )

    async def get_by_id(self, record_id: int) -> Any:
        return self._record(await self._transport.request("GET", self._path(record_id)))

    async def create(self, draft: Any) -> Any:
        payload = await self._transport.request("POST", self._path(), body=draft.to_payload())
        return self._record(payload)

    async def update(self, record_id: int, draft: Any) -> Any:
        payload = await self._transport.request(
            "PUT", self._path(record_id), body=draft.to_payload()
        )
        return self._record(payload)

    async def soft_delete(self, record_id: int) -> None:
        await self._transport.request("PATCH", self._path(record_id, "soft-delete"))

    async def restore(self, record_id: int) -> Any:
        payload = await self._transport.request("PATCH", self._path(record_id, "restore"))
        if payload is None:
            return await self.get_by_id(record_id)
        return self._record(payload)

    async def purge(self, record_id: int) -> None:
        await self._transport.request("DELETE", self._path(record_id))
