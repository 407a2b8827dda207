"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Any, Protocol, TypeVar

from pingcrm.domain import ListQueryState, PaginatedResult, ResourceKind

R = TypeVar("R")


class Transport(Protocol):
    """Sends one request to the CRM API and returns the decoded JSON body.

    Raises an ApiError subclass on failure. Never retries.
    """

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        ...


class ResourceGateway(Protocol[R]):
    """Typed operations against one REST collection (contacts or companies)."""

    kind: ResourceKind

    async def list(
        self, query: ListQueryState, filters: dict[str, Any] | None = None
    ) -> PaginatedResult[R]:
        """Return the page selected by `query`. Extra `filters` (e.g. company_id) pass through."""
        ...

    async def get_by_id(self, record_id: int) -> R:
        """Return the record, soft-deleted or not. NotFoundError if absent."""
        ...

    async def create(self, draft: Any) -> R:
        ...

    async def update(self, record_id: int, draft: Any) -> R:
        """Full replace of the editable fields."""
        ...

    async def soft_delete(self, record_id: int) -> None:
        ...

    async def restore(self, record_id: int) -> R:
        ...

    async def purge(self, record_id: int) -> None:
        """Permanent removal. Irreversible."""
        ...


class Refreshable(Protocol):
    """A view that re-reads its data from the server (list or detail)."""

    async def refresh(self) -> None:
        ...
