"""
Reference CRM backend: contacts and companies with soft delete, kept in memory.
Run with uvicorn: uvicorn api.main:app --reload  (or: pingcrm serve)
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from pingcrm.domain import StatusFilter
from pingcrm.errors import LifecycleError
from pingcrm.infrastructure.memory_store import (
    InMemoryRecordStore,
    company_store,
    contact_store,
    paginate,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class CompanyBody(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    postal_code: str | None = None


class ContactBody(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    postal_code: str | None = None
    company_id: int | None = None


def _require_token(request: Request, authorization: str | None = Header(None)) -> None:
    expected = request.app.state.api_token
    if not expected:
        return
    if authorization != f"Bearer {expected}":
        raise HTTPException(status_code=401, detail="Not authenticated")


def _window(
    skip: int | None, limit: int | None, page: int | None, size: int | None
) -> tuple[int, int]:
    """Accept either skip/limit or page/size. Returns (offset, limit)."""
    per_page = next((v for v in (limit, size) if v is not None), DEFAULT_LIMIT)
    if per_page < 1 or per_page > MAX_LIMIT:
        raise HTTPException(status_code=400, detail=f"limit must be between 1 and {MAX_LIMIT}")
    if skip is not None:
        if skip < 0:
            raise HTTPException(status_code=400, detail="skip must be >= 0")
        return skip, per_page
    if page is not None:
        if page < 1:
            raise HTTPException(status_code=400, detail="page must be >= 1")
        return (page - 1) * per_page, per_page
    return 0, per_page


def _status(value: str) -> StatusFilter:
    try:
        return StatusFilter.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


def _collection_router(
    store: InMemoryRecordStore,
    body_model: type[BaseModel],
    label: str,
    serialize,
    *,
    list_filters: tuple[str, ...] = (),
) -> APIRouter:
    router = APIRouter(prefix=f"/{store.collection}", dependencies=[Depends(_require_token)])

    def found(record: dict[str, Any] | None, record_id: int) -> dict[str, Any]:
        if record is None:
            raise HTTPException(status_code=404, detail=f"{label} {record_id} not found")
        return serialize(record)

    @router.get("")
    def list_records(
        request: Request,
        search: str = "",
        status: str = StatusFilter.ACTIVE.value,
        skip: int | None = None,
        limit: int | None = None,
        page: int | None = None,
        size: int | None = None,
    ):
        offset, per_page = _window(skip, limit, page, size)
        filters = {
            key: request.query_params[key]
            for key in list_filters
            if request.query_params.get(key)
        }
        items, total = store.list(
            search=search,
            status=_status(status),
            offset=offset,
            limit=per_page,
            filters=filters,
        )
        return paginate([serialize(r) for r in items], total, offset=offset, limit=per_page)

    @router.get("/{record_id}")
    def get_record(record_id: int):
        return found(store.get(record_id), record_id)

    @router.post("", status_code=201)
    def create_record(body: body_model):  # type: ignore[valid-type]
        record = store.create(body.model_dump())
        logger.info("Created %s %s", label, record["id"])
        return serialize(record)

    @router.put("/{record_id}")
    def update_record(record_id: int, body: body_model):  # type: ignore[valid-type]
        try:
            record = store.update(record_id, body.model_dump())
        except LifecycleError as e:
            raise HTTPException(status_code=409, detail=str(e)) from None
        return found(record, record_id)

    @router.patch("/{record_id}/soft-delete")
    def soft_delete_record(record_id: int):
        try:
            record = store.soft_delete(record_id)
        except LifecycleError as e:
            raise HTTPException(status_code=400, detail=str(e)) from None
        return found(record, record_id)

    @router.patch("/{record_id}/restore")
    def restore_record(record_id: int):
        try:
            record = store.restore(record_id)
        except LifecycleError as e:
            raise HTTPException(status_code=400, detail=str(e)) from None
        return found(record, record_id)

    @router.delete("/{record_id}", status_code=204)
    def purge_record(record_id: int):
        try:
            removed = store.purge(record_id)
        except LifecycleError as e:
            raise HTTPException(status_code=400, detail=str(e)) from None
        if not removed:
            raise HTTPException(status_code=404, detail=f"{label} {record_id} not found")
        logger.info("Purged %s %s", label, record_id)
        return Response(status_code=204)

    return router


def create_app(
    *,
    api_token: str | None = None,
    contacts: InMemoryRecordStore | None = None,
    companies: InMemoryRecordStore | None = None,
) -> FastAPI:
    contacts = contacts if contacts is not None else contact_store()
    companies = companies if companies is not None else company_store()

    def serialize_contact(record: dict[str, Any]) -> dict[str, Any]:
        company = companies.get(record["company_id"]) if record.get("company_id") else None
        return {**record, "organization": company["name"] if company else None}

    app = FastAPI(title="PingCRM API")
    app.state.api_token = api_token
    app.state.contacts = contacts
    app.state.companies = companies

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(
        _collection_router(
            contacts, ContactBody, "Contact", serialize_contact, list_filters=("company_id",)
        ),
        prefix=API_PREFIX,
    )
    app.include_router(
        _collection_router(companies, CompanyBody, "Company", dict),
        prefix=API_PREFIX,
    )
    return app


app = create_app(api_token=(os.environ.get("PINGCRM_API_TOKEN") or "").strip() or None)
