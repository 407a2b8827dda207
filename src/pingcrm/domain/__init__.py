"""Domain layer: entities, query state and the record lifecycle. No outer dependencies."""

from pingcrm.domain.entities import (
    COMPANIES,
    CONTACTS,
    DEFAULT_PAGE_SIZE,
    Company,
    CompanyDraft,
    Contact,
    ContactDraft,
    ListQueryState,
    PaginatedResult,
    RecordStatus,
    ResourceKind,
    StatusFilter,
)
from pingcrm.domain.lifecycle import LifecycleAction, available_actions, can, next_state

__all__ = [
    "COMPANIES",
    "CONTACTS",
    "DEFAULT_PAGE_SIZE",
    "Company",
    "CompanyDraft",
    "Contact",
    "ContactDraft",
    "LifecycleAction",
    "ListQueryState",
    "PaginatedResult",
    "RecordStatus",
    "ResourceKind",
    "StatusFilter",
    "available_actions",
    "can",
    "next_state",
]
