"""Wiring: one transport, one gateway per collection, and view factories."""

from dataclasses import dataclass

import httpx

from pingcrm.application import DetailController, ListController, MutationService, Refreshable
from pingcrm.config import Settings
from pingcrm.domain import COMPANIES, CONTACTS, Company, ListQueryState
from pingcrm.infrastructure import HttpResourceGateway, HttpTransport

COMPANY_OPTIONS_LIMIT = 100


@dataclass
class CrmClient:
    transport: HttpTransport
    contacts: HttpResourceGateway
    companies: HttpResourceGateway
    page_size: int

    def contact_list(self, *, company_id: int | None = None) -> ListController:
        filters = {"company_id": company_id} if company_id is not None else None
        return ListController(self.contacts, page_size=self.page_size, filters=filters)

    def company_list(self) -> ListController:
        return ListController(self.companies, page_size=self.page_size)

    def contact_detail(self, contact_id: int) -> DetailController:
        return DetailController(self.contacts, contact_id)

    def company_detail(self, company_id: int) -> DetailController:
        return DetailController(
            self.companies,
            company_id,
            related_gateway=self.contacts,
            related_filter="company_id",
        )

    def contact_mutations(self, view: Refreshable | None = None) -> MutationService:
        return MutationService(self.contacts, view=view)

    def company_mutations(self, view: Refreshable | None = None) -> MutationService:
        return MutationService(self.companies, view=view)

    async def company_options(self) -> list[Company]:
        """Active companies for the contact form's company picker."""
        page = await self.companies.list(ListQueryState(page_size=COMPANY_OPTIONS_LIMIT))
        return list(page.items)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "CrmClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def connect(settings: Settings, *, http_client: httpx.AsyncClient | None = None) -> CrmClient:
    transport = HttpTransport(settings.api_url, timeout=settings.timeout, client=http_client)
    return CrmClient(
        transport=transport,
        contacts=HttpResourceGateway(
            transport, CONTACTS, pagination=settings.contacts_pagination
        ),
        companies=HttpResourceGateway(
            transport, COMPANIES, pagination=settings.companies_pagination
        ),
        page_size=settings.page_size,
    )
