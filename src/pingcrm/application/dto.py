"""Application DTOs: view states and mutation results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from pingcrm.domain import PaginatedResult
from pingcrm.errors import CrmError

R = TypeVar("R")


class ViewStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    POPULATED = "populated"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class ListView(Generic[R]):
    """What a list screen renders. `page` is None until a load succeeds and after a failure."""

    status: ViewStatus = ViewStatus.IDLE
    page: PaginatedResult[R] | None = None
    error: CrmError | None = None

    @property
    def is_loading(self) -> bool:
        return self.status is ViewStatus.LOADING

    @property
    def page_numbers(self) -> range:
        """Page buttons to render, taken from the server's page count."""
        if self.page is None:
            return range(0)
        return self.page.page_numbers

    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error is not None else None


@dataclass(frozen=True)
class DetailView(Generic[R]):
    """What a detail screen renders. `related_error` is set when only the related list failed."""

    status: ViewStatus = ViewStatus.IDLE
    record: R | None = None
    error: CrmError | None = None
    related: tuple[Any, ...] = field(default_factory=tuple)
    related_error: CrmError | None = None

    @property
    def is_loading(self) -> bool:
        return self.status is ViewStatus.LOADING


# --- Mutation results ---


@dataclass(frozen=True)
class MutationSucceeded:
    action: str
    record_id: int | None
    record: Any = None


@dataclass(frozen=True)
class MutationFailed:
    action: str
    record_id: int | None
    error: CrmError
    message: str


@dataclass(frozen=True)
class Invalid:
    """Draft rejected locally; the gateway was not called."""

    reason: str
    fields: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Rejected:
    """The record's lifecycle state forbids the action; the gateway was not called."""

    action: str
    record_id: int
    reason: str


@dataclass(frozen=True)
class AlreadyPending:
    action: str
    record_id: int | None


MutationResult = MutationSucceeded | MutationFailed | Invalid | Rejected | AlreadyPending
