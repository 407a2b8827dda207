"""The HTTP client stack against the reference API, in process (httpx.ASGITransport)."""

import asyncio

import httpx
import pytest

from api.main import create_app
from pingcrm.application import MutationSucceeded, ViewStatus
from pingcrm.client import connect
from pingcrm.config import Settings
from pingcrm.domain import CompanyDraft, ContactDraft
from pingcrm.errors import AuthError, NotFoundError
from pingcrm.infrastructure import clear_session, init_session

API_URL = "http://testserver/api"


@pytest.fixture(autouse=True)
def no_session():
    clear_session()
    yield
    clear_session()


def _client(app, **settings):
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=API_URL)
    return connect(Settings(api_url=API_URL, **settings), http_client=http_client)


def _seed_contacts(app, n, **extra):
    for i in range(n):
        app.state.contacts.create(
            {"first_name": f"P{i:02d}", "last_name": "Person", "email": f"p{i}@example.com", **extra}
        )


def test_twenty_five_contacts_three_pages():
    app = create_app()
    _seed_contacts(app, 25)

    async def scenario():
        async with _client(app) as crm:
            controller = crm.contact_list()
            await controller.refresh()
            pages = controller.page.pages
            out_of_range = await controller.go_to_page(4)
            await controller.go_to_page(3)
            return controller, pages, out_of_range

    controller, pages, out_of_range = asyncio.run(scenario())
    assert pages == 3
    assert out_of_range is False
    assert [c.first_name for c in controller.page.items] == ["P20", "P21", "P22", "P23", "P24"]


def test_companies_use_offset_pagination():
    app = create_app()
    for i in range(12):
        app.state.companies.create({"name": f"Org {i:02d}", "email": f"org{i}@example.com"})

    async def scenario():
        async with _client(app) as crm:
            controller = crm.company_list()
            await controller.go_to_page(2)
            return controller

    controller = asyncio.run(scenario())
    assert controller.page.page == 2
    assert controller.page.pages == 2
    assert [c.name for c in controller.page.items] == ["Org 10", "Org 11"]


def test_create_soft_delete_restore_purge_round_trip():
    app = create_app()

    async def scenario():
        async with _client(app) as crm:
            company = await crm.companies.create(CompanyDraft(name="Acme", email="info@acme.test"))
            controller = crm.contact_list()
            mutations = crm.contact_mutations(view=controller)
            created = await mutations.create(
                ContactDraft(first_name="Ada", last_name="Lovelace", email="ada@example.com", company_id=company.id)
            )
            listed = controller.page.items
            deleted = await mutations.soft_delete(created.record)
            after_delete = controller.view.status
            await controller.set_status_filter("trashed")
            trashed = controller.page.items
            snapshot = await crm.contacts.get_by_id(created.record_id)
            purged = await mutations.purge(snapshot)
            try:
                await crm.contacts.get_by_id(created.record_id)
            except NotFoundError as exc:
                missing = exc
            return created, listed, deleted, after_delete, trashed, purged, missing

    created, listed, deleted, after_delete, trashed, purged, missing = asyncio.run(scenario())
    assert isinstance(created, MutationSucceeded)
    assert listed[0].organization == "Acme"
    assert isinstance(deleted, MutationSucceeded)
    assert after_delete is ViewStatus.EMPTY
    assert [c.is_deleted for c in trashed] == [True]
    assert isinstance(purged, MutationSucceeded)
    assert missing.status_code == 404


def test_company_detail_and_options():
    app = create_app()
    acme = app.state.companies.create({"name": "Acme", "email": "info@acme.test"})
    gone = app.state.companies.create({"name": "Gone", "email": "info@gone.test"})
    app.state.companies.soft_delete(gone["id"])
    _seed_contacts(app, 2, company_id=acme["id"])
    _seed_contacts(app, 1)

    async def scenario():
        async with _client(app) as crm:
            detail = crm.company_detail(acme["id"])
            await detail.load()
            options = await crm.company_options()
            return detail, options

    detail, options = asyncio.run(scenario())
    assert detail.record.name == "Acme"
    assert len(detail.view.related) == 2
    assert [c.name for c in options] == ["Acme"]


def test_bearer_token_from_session():
    app = create_app(api_token="secret")
    _seed_contacts(app, 1)

    async def load():
        async with _client(app) as crm:
            controller = crm.contact_list()
            await controller.refresh()
            return controller

    denied = asyncio.run(load())
    assert denied.view.status is ViewStatus.FAILED
    assert isinstance(denied.error, AuthError)

    init_session("secret")
    allowed = asyncio.run(load())
    assert allowed.view.status is ViewStatus.POPULATED
    assert allowed.page.total == 1
