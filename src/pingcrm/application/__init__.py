"""Application layer: controllers, mutation service, ports and DTOs. Depends only on domain."""

from pingcrm.application.detail_controller import DetailController
from pingcrm.application.dto import (
    AlreadyPending,
    DetailView,
    Invalid,
    ListView,
    MutationFailed,
    MutationResult,
    MutationSucceeded,
    Rejected,
    ViewStatus,
)
from pingcrm.application.list_controller import ListController
from pingcrm.application.mutation_service import MutationService, validate_draft
from pingcrm.application.ports import Refreshable, ResourceGateway, Transport

__all__ = [
    "AlreadyPending",
    "DetailController",
    "DetailView",
    "Invalid",
    "ListController",
    "ListView",
    "MutationFailed",
    "MutationResult",
    "MutationService",
    "MutationSucceeded",
    "Refreshable",
    "Rejected",
    "ResourceGateway",
    "Transport",
    "ViewStatus",
    "validate_draft",
]
