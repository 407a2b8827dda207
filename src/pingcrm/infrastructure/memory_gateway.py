"""In-memory implementation of ResourceGateway (no network). Mirrors the API's error behavior."""

from typing import Any

from pingcrm.domain import ListQueryState, PaginatedResult, ResourceKind
from pingcrm.errors import ClientError, LifecycleError, NotFoundError
from pingcrm.infrastructure.memory_store import InMemoryRecordStore, paginate


class InMemoryResourceGateway:
    def __init__(self, store: InMemoryRecordStore, kind: ResourceKind) -> None:
        self._store = store
        self.kind = kind

    @property
    def store(self) -> InMemoryRecordStore:
        return self._store

    def _not_found(self, record_id: int) -> NotFoundError:
        return NotFoundError(
            "Resource not found",
            status_code=404,
            detail=f"{self.kind.label.title()} {record_id} not found",
        )

    def _found(self, record: dict[str, Any] | None, record_id: int) -> Any:
        if record is None:
            raise self._not_found(record_id)
        return self.kind.parse(record)

    async def list(
        self, query: ListQueryState, filters: dict[str, Any] | None = None
    ) -> PaginatedResult[Any]:
        items, total = self._store.list(
            search=query.search_text,
            status=query.status_filter,
            offset=query.offset,
            limit=query.page_size,
            filters=filters,
        )
        return PaginatedResult.from_payload(
            paginate(items, total, offset=query.offset, limit=query.page_size),
            self.kind.parse,
            requested_page=query.page_number,
            page_size=query.page_size,
        )

    async def get_by_id(self, record_id: int) -> Any:
        return self._found(self._store.get(record_id), record_id)

    async def create(self, draft: Any) -> Any:
        return self.kind.parse(self._store.create(draft.to_payload()))

    async def update(self, record_id: int, draft: Any) -> Any:
        try:
            record = self._store.update(record_id, draft.to_payload())
        except LifecycleError as exc:
            raise ClientError("Request rejected", status_code=409, detail=str(exc)) from exc
        return self._found(record, record_id)

    async def soft_delete(self, record_id: int) -> None:
        try:
            record = self._store.soft_delete(record_id)
        except LifecycleError as exc:
            raise ClientError("Request rejected", status_code=400, detail=str(exc)) from exc
        self._found(record, record_id)

    async def restore(self, record_id: int) -> Any:
        try:
            record = self._store.restore(record_id)
        except LifecycleError as exc:
            raise ClientError("Request rejected", status_code=400, detail=str(exc)) from exc
        return self._found(record, record_id)

    async def purge(self, record_id: int) -> None:
        try:
            removed = self._store.purge(record_id)
        except LifecycleError as exc:
            raise ClientError("Request rejected", status_code=400, detail=str(exc)) from exc
        if not removed:
            raise self._not_found(record_id)
