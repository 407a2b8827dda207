"""Tests for HttpResourceGateway: query parameters, paths and response parsing."""

import asyncio

import httpx
import pytest

from pingcrm.domain import COMPANIES, CONTACTS, Company, Contact, ContactDraft, ListQueryState
from pingcrm.errors import ServerError
from pingcrm.infrastructure import HttpResourceGateway, HttpTransport, PaginationStyle, list_params

BASE_URL = "http://crm.test/api"

CONTACT = {
    "id": 5,
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "companyId": 2,
    "createdAt": "2024-03-01T10:00:00Z",
    "updatedAt": "2024-03-01T10:00:00Z",
    "deletedAt": None,
}


class Recorder:
    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.response is not None:
            return self.response
        return httpx.Response(200, json={"items": [], "total": 0, "page": 1, "pages": 0})


def _gateway(recorder: Recorder, kind=CONTACTS, pagination=PaginationStyle.PAGE) -> HttpResourceGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder), base_url=BASE_URL)
    return HttpResourceGateway(HttpTransport(BASE_URL, client=client), kind, pagination=pagination)


def test_list_params_page_style():
    query = ListQueryState(search_text="ada", status_filter="all", page_number=3, page_size=10)
    assert list_params(query, PaginationStyle.PAGE) == {
        "search": "ada",
        "page": 3,
        "size": 10,
        "status": "all",
    }


def test_list_params_offset_style():
    query = ListQueryState(page_number=3, page_size=10)
    assert list_params(query, PaginationStyle.OFFSET) == {
        "search": "",
        "skip": 20,
        "limit": 10,
        "status": "active",
    }


def test_list_sends_empty_search_and_status():
    recorder = Recorder()
    asyncio.run(_gateway(recorder).list(ListQueryState()))
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/api/contacts"
    assert "search=" in str(request.url)
    assert request.url.params["search"] == ""
    assert request.url.params["status"] == "active"
    assert request.url.params["page"] == "1"
    assert request.url.params["size"] == "10"


def test_companies_offset_pagination_and_trashed_status():
    recorder = Recorder()
    gateway = _gateway(recorder, kind=COMPANIES, pagination="offset")
    asyncio.run(gateway.list(ListQueryState(status_filter="trashed", page_number=2)))
    params = recorder.requests[0].url.params
    assert recorder.requests[0].url.path == "/api/companies"
    assert params["skip"] == "10"
    assert params["limit"] == "10"
    assert params["status"] == "trashed"
    assert "page" not in params


def test_list_passes_company_filter():
    recorder = Recorder()
    asyncio.run(_gateway(recorder).list(ListQueryState(page_size=100), {"company_id": 4}))
    assert recorder.requests[0].url.params["company_id"] == "4"


def test_list_parses_camel_case_page():
    recorder = Recorder(
        httpx.Response(200, json={"items": [CONTACT], "total": 11, "page": 2, "perPage": 10, "pages": 2})
    )
    page = asyncio.run(_gateway(recorder).list(ListQueryState(page_number=2)))
    assert page.total == 11
    assert page.pages == 2
    assert page.page == 2
    assert isinstance(page.items[0], Contact)
    assert page.items[0].company_id == 2


def test_get_by_id_path():
    recorder = Recorder(httpx.Response(200, json=CONTACT))
    contact = asyncio.run(_gateway(recorder).get_by_id(5))
    assert recorder.requests[0].url.path == "/api/contacts/5"
    assert contact.name == "Ada Lovelace"


def test_create_and_update_send_draft_payload():
    recorder = Recorder(httpx.Response(201, json=CONTACT))
    gateway = _gateway(recorder)
    draft = ContactDraft(first_name="Ada", last_name="Lovelace", email="ada@example.com", company_id=2)

    async def scenario():
        await gateway.create(draft)
        await gateway.update(5, draft)

    asyncio.run(scenario())
    create, update = recorder.requests
    assert (create.method, create.url.path) == ("POST", "/api/contacts")
    assert (update.method, update.url.path) == ("PUT", "/api/contacts/5")
    assert b'"first_name":"Ada"' in create.content.replace(b" ", b"")
    assert b'"company_id":2' in update.content.replace(b" ", b"")


def test_lifecycle_paths():
    company = {"id": 3, "name": "Acme", "email": "info@acme.test", "deleted_at": None}
    recorder = Recorder(httpx.Response(200, json=company))
    gateway = _gateway(recorder, kind=COMPANIES, pagination=PaginationStyle.OFFSET)

    async def scenario():
        await gateway.soft_delete(3)
        restored = await gateway.restore(3)
        recorder.response = httpx.Response(204)
        await gateway.purge(3)
        return restored

    restored = asyncio.run(scenario())
    assert [(r.method, r.url.path) for r in recorder.requests] == [
        ("PATCH", "/api/companies/3/soft-delete"),
        ("PATCH", "/api/companies/3/restore"),
        ("DELETE", "/api/companies/3"),
    ]
    assert isinstance(restored, Company)
    assert restored.deleted_at is None


def test_record_without_id_is_server_error():
    recorder = Recorder(httpx.Response(200, json={"first_name": "Ada", "email": "ada@example.com"}))
    with pytest.raises(ServerError) as excinfo:
        asyncio.run(_gateway(recorder).get_by_id(5))
    assert excinfo.value.message == "Invalid response body"
    assert "contact" in excinfo.value.detail


def test_list_payload_of_wrong_shape_is_server_error():
    recorder = Recorder(httpx.Response(200, json=[CONTACT]))
    with pytest.raises(ServerError):
        asyncio.run(_gateway(recorder).list(ListQueryState()))
