"""
PingCRM client core: clean-architecture layout.

- domain: entities (Contact, Company), list query state, record lifecycle. No outer dependencies.
- application: use cases (ListController, DetailController, MutationService), ports, DTOs.
- infrastructure: adapters (HttpTransport, HttpResourceGateway, InMemoryResourceGateway).
"""

from pingcrm.application import (
    AlreadyPending,
    DetailController,
    Invalid,
    ListController,
    ListView,
    MutationFailed,
    MutationService,
    MutationSucceeded,
    Rejected,
    ResourceGateway,
    ViewStatus,
)
from pingcrm.domain import (
    COMPANIES,
    CONTACTS,
    Company,
    CompanyDraft,
    Contact,
    ContactDraft,
    ListQueryState,
    PaginatedResult,
    StatusFilter,
)
from pingcrm.errors import (
    ApiError,
    AuthError,
    ClientError,
    CrmError,
    LifecycleError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
    ValidationError,
)
from pingcrm.infrastructure import (
    HttpResourceGateway,
    HttpTransport,
    InMemoryResourceGateway,
    PaginationStyle,
    clear_session,
    init_session,
)

__all__ = [
    "COMPANIES",
    "CONTACTS",
    "AlreadyPending",
    "ApiError",
    "AuthError",
    "ClientError",
    "Company",
    "CompanyDraft",
    "Contact",
    "ContactDraft",
    "CrmError",
    "DetailController",
    "HttpResourceGateway",
    "HttpTransport",
    "InMemoryResourceGateway",
    "Invalid",
    "LifecycleError",
    "ListController",
    "ListQueryState",
    "ListView",
    "MutationFailed",
    "MutationService",
    "MutationSucceeded",
    "NetworkError",
    "NotFoundError",
    "PaginatedResult",
    "PaginationStyle",
    "PermissionDeniedError",
    "Rejected",
    "ResourceGateway",
    "ServerError",
    "StatusFilter",
    "ValidationError",
    "ViewStatus",
    "clear_session",
    "init_session",
]
