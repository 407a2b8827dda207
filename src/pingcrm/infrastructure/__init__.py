"""Infrastructure layer: concrete implementations of application ports."""

from pingcrm.infrastructure.http_gateway import HttpResourceGateway, PaginationStyle, list_params
from pingcrm.infrastructure.memory_gateway import InMemoryResourceGateway
from pingcrm.infrastructure.memory_store import (
    InMemoryRecordStore,
    company_store,
    contact_store,
    paginate,
)
from pingcrm.infrastructure.session import clear_session, get_token, init_session
from pingcrm.infrastructure.transport import HttpTransport, classify

__all__ = [
    "HttpResourceGateway",
    "HttpTransport",
    "InMemoryRecordStore",
    "InMemoryResourceGateway",
    "PaginationStyle",
    "classify",
    "clear_session",
    "company_store",
    "contact_store",
    "get_token",
    "init_session",
    "list_params",
    "paginate",
]
