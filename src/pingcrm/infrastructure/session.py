"""Process-wide session token. Set on login, cleared on logout or expiry; the transport only reads it."""

_token: str | None = None


def init_session(token: str) -> None:
    global _token
    token = (token or "").strip()
    if not token:
        raise ValueError("Session token must be non-empty.")
    _token = token


def clear_session() -> None:
    global _token
    _token = None


def get_token() -> str | None:
    return _token
