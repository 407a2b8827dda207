"""Tests for record parsing, drafts, query state and paginated results."""

from datetime import datetime, timezone

import pytest

from pingcrm.domain import (
    Company,
    CompanyDraft,
    Contact,
    ContactDraft,
    ListQueryState,
    PaginatedResult,
    RecordStatus,
    StatusFilter,
)


def test_contact_from_snake_case_payload():
    contact = Contact.from_payload(
        {
            "id": 7,
            "first_name": "Grace",
            "last_name": "Hopper",
            "email": "grace@navy.test",
            "phone": "",
            "postal_code": "10001",
            "company_id": "3",
            "created_at": "2024-01-02T03:04:05Z",
            "updated_at": "2024-01-02T03:04:05+00:00",
            "deleted_at": None,
        }
    )
    assert contact.id == 7
    assert contact.name == "Grace Hopper"
    assert contact.phone is None
    assert contact.postal_code == "10001"
    assert contact.company_id == 3
    assert contact.created_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert contact.status is RecordStatus.ACTIVE
    assert not contact.is_deleted


def test_contact_from_camel_case_payload():
    contact = Contact.from_payload(
        {
            "id": 1,
            "firstName": "Alan",
            "lastName": "Turing",
            "email": "alan@example.com",
            "postalCode": "CB2",
            "organization": "Bletchley",
            "deletedAt": "2024-02-01T00:00:00Z",
        }
    )
    assert contact.first_name == "Alan"
    assert contact.postal_code == "CB2"
    assert contact.organization == "Bletchley"
    assert contact.is_deleted
    assert contact.status is RecordStatus.DELETED


def test_contact_round_trips_to_draft():
    contact = Contact(id=2, first_name="A", last_name="B", email="a@b.test", city="Oslo", company_id=4)
    draft = contact.to_draft()
    assert draft == ContactDraft(first_name="A", last_name="B", email="a@b.test", city="Oslo", company_id=4)


def test_draft_missing_fields():
    assert ContactDraft(first_name="A", last_name=" ", email="").missing_fields() == [
        "last_name",
        "email",
    ]
    assert CompanyDraft(name="Acme", email="x@acme.test").missing_fields() == []


def test_draft_payload_strips_and_blanks_optional_fields():
    payload = CompanyDraft(name=" Acme ", email="x@acme.test", city="  ").to_payload()
    assert payload["name"] == "Acme"
    assert payload["city"] is None
    assert "id" not in payload


def test_company_from_payload():
    company = Company.from_payload({"id": "5", "name": "Acme", "email": "x@acme.test", "city": "Lima"})
    assert company.id == 5
    assert company.city == "Lima"
    assert company.deleted_at is None


def test_query_state_defaults():
    query = ListQueryState()
    assert query.search_text == ""
    assert query.status_filter is StatusFilter.ACTIVE
    assert query.page_number == 1
    assert query.offset == 0


def test_search_and_status_changes_reset_page():
    query = ListQueryState(page_number=3)
    assert query.with_search("acme").page_number == 1
    assert query.with_status("trashed").page_number == 1
    assert query.with_status("trashed").status_filter is StatusFilter.TRASHED


def test_page_change_keeps_search_and_status():
    query = ListQueryState(search_text="acme", status_filter=StatusFilter.ALL).with_page(4)
    assert query.page_number == 4
    assert query.search_text == "acme"
    assert query.status_filter is StatusFilter.ALL
    assert query.offset == 30


def test_cleared_keeps_page_size():
    query = ListQueryState(search_text="x", status_filter="all", page_number=2, page_size=25)
    assert query.cleared() == ListQueryState(page_size=25)


def test_query_state_rejects_invalid_values():
    with pytest.raises(ValueError):
        ListQueryState(page_number=0)
    with pytest.raises(ValueError):
        ListQueryState(page_size=0)
    with pytest.raises(ValueError, match="status filter"):
        ListQueryState(status_filter="archived")


def test_paginated_result_uses_server_pages():
    result = PaginatedResult.from_payload(
        {"items": [{"id": 1, "name": "A", "email": "a@a.test"}], "total": 25, "page": 3, "pages": 3},
        Company.from_payload,
        requested_page=3,
        page_size=10,
    )
    assert result.pages == 3
    assert result.page == 3
    assert list(result.page_numbers) == [1, 2, 3]
    assert result.has_previous
    assert not result.has_next
    assert isinstance(result.items[0], Company)


def test_paginated_result_falls_back_when_server_omits_page_fields():
    result = PaginatedResult.from_payload(
        {"items": [], "total": 21}, Company.from_payload, requested_page=2, page_size=10
    )
    assert result.page == 2
    assert result.pages == 3
    assert result.is_empty
