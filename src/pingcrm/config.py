"""Settings from .env and environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from pingcrm.domain import DEFAULT_PAGE_SIZE
from pingcrm.infrastructure.http_gateway import PaginationStyle
from pingcrm.infrastructure.transport import DEFAULT_TIMEOUT

DEFAULT_API_URL = "http://localhost:8000/api"

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent


def load_env() -> Path | None:
    """Load .env from repo root or current dir. Returns the file used, if any."""
    for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            return path
    return None


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    token: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = DEFAULT_TIMEOUT
    # The two collections are addressed differently by the backend.
    contacts_pagination: PaginationStyle = PaginationStyle.PAGE
    companies_pagination: PaginationStyle = PaginationStyle.OFFSET
    api_token: str | None = None


def _get(environ, name: str) -> str:
    return (environ.get(name) or "").strip()


def _positive_int(environ, name: str, default: int) -> int:
    raw = _get(environ, name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def _positive_float(environ, name: str, default: float) -> float:
    raw = _get(environ, name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")
    return value


def _pagination(environ, name: str, default: PaginationStyle) -> PaginationStyle:
    raw = _get(environ, name)
    if not raw:
        return default
    try:
        return PaginationStyle.parse(raw)
    except ValueError as e:
        raise ValueError(f"{name}: {e}") from None


def load_settings(environ=None) -> Settings:
    """Read PINGCRM_* variables. Pass `environ` to bypass os.environ (tests)."""
    if environ is None:
        load_env()
        environ = os.environ
    return Settings(
        api_url=_get(environ, "PINGCRM_API_URL") or DEFAULT_API_URL,
        token=_get(environ, "PINGCRM_TOKEN") or None,
        page_size=_positive_int(environ, "PINGCRM_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        timeout=_positive_float(environ, "PINGCRM_TIMEOUT", DEFAULT_TIMEOUT),
        contacts_pagination=_pagination(
            environ, "PINGCRM_CONTACTS_PAGINATION", PaginationStyle.PAGE
        ),
        companies_pagination=_pagination(
            environ, "PINGCRM_COMPANIES_PAGINATION", PaginationStyle.OFFSET
        ),
        api_token=_get(environ, "PINGCRM_API_TOKEN") or None,
    )
