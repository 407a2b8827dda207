"""Error taxonomy shared by every layer.

Transport failures are ApiError subclasses chosen from the HTTP status (or the
absence of a response). ValidationError and LifecycleError are raised locally,
before anything is sent to the server.
"""


class CrmError(Exception):
    """Base class for all pingcrm errors."""


class ApiError(CrmError):
    """A request to the CRM API failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def __str__(self) -> str:
        if self.detail and self.detail != self.message:
            return f"{self.message}: {self.detail}"
        return self.message


class NetworkError(ApiError):
    """No response was received (connection refused, DNS, timeout)."""


class AuthError(ApiError):
    """401: missing or expired credentials."""


class PermissionDeniedError(ApiError):
    """403: authenticated but not allowed."""


class NotFoundError(ApiError):
    """404: no such record or route."""


class ServerError(ApiError):
    """5xx."""


class ClientError(ApiError):
    """Any other 4xx (bad request, conflict, unprocessable entity)."""


class ValidationError(CrmError):
    """Required fields are missing from a draft. Raised before any request."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class LifecycleError(CrmError):
    """The record's lifecycle state does not allow the requested operation."""

    def __init__(self, action: str, state: str) -> None:
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action.replace('_', ' ')} a record that is {state}.")
