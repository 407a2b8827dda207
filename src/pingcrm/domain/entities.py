"""Domain entities: Contact, Company, drafts, list query state and result pages."""

import math
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

DEFAULT_PAGE_SIZE = 10

# Optional address block shared by contacts and companies.
ADDRESS_FIELDS = ("phone", "address", "city", "region", "country", "postal_code")


class StatusFilter(str, Enum):
    """Visibility of soft-deleted records in a listing."""

    ACTIVE = "active"
    TRASHED = "trashed"
    ALL = "all"

    @classmethod
    def parse(cls, value: "str | StatusFilter") -> "StatusFilter":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValueError(
                f"Unknown status filter {value!r} (expected one of: {allowed})."
            ) from None


class RecordStatus(str, Enum):
    ACTIVE = "active"
    DELETED = "deleted"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _pick(payload: dict[str, Any], name: str) -> Any:
    """Read a field by its snake_case name, falling back to camelCase."""
    if name in payload:
        return payload[name]
    return payload.get(_camel(name))


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _record_kwargs(cls: type, payload: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(cls):
        raw = _pick(payload, f.name)
        if f.name == "id":
            out["id"] = int(raw)
        elif f.name.endswith("_at"):
            out[f.name] = parse_datetime(raw)
        elif f.name == "company_id":
            out["company_id"] = _optional_int(raw)
        elif f.name in ADDRESS_FIELDS or f.name == "organization":
            out[f.name] = _optional_text(raw)
        else:
            out[f.name] = "" if raw is None else str(raw)
    return out


class _LifecycleMixin:
    deleted_at: datetime | None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def status(self) -> RecordStatus:
        return RecordStatus.DELETED if self.is_deleted else RecordStatus.ACTIVE


@dataclass(frozen=True)
class Contact(_LifecycleMixin):
    """
    A person in the CRM. Server-owned: id and timestamps are assigned remotely.
    A contact belongs to zero or one company (company_id).
    """

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    postal_code: str | None = None
    company_id: int | None = None
    organization: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Contact":
        return cls(**_record_kwargs(cls, payload))

    def to_draft(self) -> "ContactDraft":
        return ContactDraft(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            company_id=self.company_id,
            **{name: getattr(self, name) for name in ADDRESS_FIELDS},
        )


@dataclass(frozen=True)
class Company(_LifecycleMixin):
    """An organization. Owns zero or more contacts through Contact.company_id."""

    id: int
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    postal_code: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Company":
        return cls(**_record_kwargs(cls, payload))

    def to_draft(self) -> "CompanyDraft":
        return CompanyDraft(
            name=self.name,
            email=self.email,
            **{name: getattr(self, name) for name in ADDRESS_FIELDS},
        )


class _DraftMixin:
    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ()

    def missing_fields(self) -> list[str]:
        return [
            name
            for name in self.REQUIRED_FIELDS
            if not str(getattr(self, name) or "").strip()
        ]

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, str):
                value = value.strip()
                if f.name not in self.REQUIRED_FIELDS:
                    value = value or None
            out[f.name] = value
        return out


@dataclass(frozen=True)
class ContactDraft(_DraftMixin):
    """Creatable/editable contact fields (everything the server does not assign)."""

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("first_name", "last_name", "email")

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    postal_code: str | None = None
    company_id: int | None = None


@dataclass(frozen=True)
class CompanyDraft(_DraftMixin):
    """Creatable/editable company fields."""

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("name", "email")

    name: str = ""
    email: str = ""
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    postal_code: str | None = None


@dataclass(frozen=True)
class ResourceKind:
    """Describes one REST collection: its path segment and record/draft types."""

    collection: str
    label: str
    record_type: type
    draft_type: type

    def parse(self, payload: dict[str, Any]) -> Any:
        return self.record_type.from_payload(payload)


CONTACTS = ResourceKind(
    collection="contacts", label="contact", record_type=Contact, draft_type=ContactDraft
)
COMPANIES = ResourceKind(
    collection="companies", label="company", record_type=Company, draft_type=CompanyDraft
)


@dataclass(frozen=True)
class ListQueryState:
    """
    Everything that determines which page of which subset is requested.
    Changing the search text or the status filter always goes back to page 1.
    """

    search_text: str = ""
    status_filter: StatusFilter = StatusFilter.ACTIVE
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if self.page_number < 1:
            raise ValueError("page_number must be >= 1.")
        if self.page_size < 1:
            raise ValueError("page_size must be a positive integer.")
        object.__setattr__(self, "status_filter", StatusFilter.parse(self.status_filter))
        object.__setattr__(self, "search_text", self.search_text or "")

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size

    def with_search(self, text: str) -> "ListQueryState":
        return replace(self, search_text=text or "", page_number=1)

    def with_status(self, value: "str | StatusFilter") -> "ListQueryState":
        return replace(self, status_filter=StatusFilter.parse(value), page_number=1)

    def with_page(self, page_number: int) -> "ListQueryState":
        return replace(self, page_number=page_number)

    def cleared(self) -> "ListQueryState":
        return ListQueryState(page_size=self.page_size)


T = TypeVar("T")


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One served page. `pages` comes from the server and bounds navigation."""

    items: tuple[T, ...] = field(default_factory=tuple)
    total: int = 0
    page: int = 1
    pages: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def page_numbers(self) -> range:
        return range(1, self.pages + 1)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any],
        parse: Callable[[dict[str, Any]], T],
        *,
        requested_page: int,
        page_size: int,
    ) -> "PaginatedResult[T]":
        """Build a result from `{items, total, page, pages}`.

        `page` falls back to the requested page and `pages` to
        ceil(total / page_size) only when the server omits them.
        """
        items = tuple(parse(item) for item in payload.get("items") or [])
        total = int(payload.get("total", len(items)) or 0)
        page = payload.get("page")
        pages = payload.get("pages")
        if pages is None:
            pages = math.ceil(total / page_size) if page_size else 0
        return cls(
            items=items,
            total=total,
            page=int(page) if page else requested_page,
            pages=int(pages),
        )
