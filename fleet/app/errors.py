"""Closed error taxonomy for franchise context resolution and data access."""

from dataclasses import dataclass
from enum import Enum

from fastapi.responses import JSONResponse


class ContextErrorKind(str, Enum):
    """Reasons a request could not be bound to a franchise context."""

    unauthenticated = "unauthenticated"
    profile_not_found = "profile_not_found"
    no_active_membership = "no_active_membership"
    backend_unavailable = "backend_unavailable"


_STATUS_CODES: dict[ContextErrorKind, int] = {
    ContextErrorKind.unauthenticated: 401,
    ContextErrorKind.profile_not_found: 404,
    ContextErrorKind.no_active_membership: 403,
    ContextErrorKind.backend_unavailable: 502,
}

_MESSAGES: dict[ContextErrorKind, str] = {
    ContextErrorKind.unauthenticated: "Not authenticated",
    ContextErrorKind.profile_not_found: "User profile not found",
    ContextErrorKind.no_active_membership: "No active franchise membership",
    ContextErrorKind.backend_unavailable: "Backend unavailable",
}


@dataclass(frozen=True)
class ContextError:
    """Typed failure returned by the franchise context resolver.

    `detail` holds internal information (store error text) for logs only.
    It is never part of a response body.
    """

    kind: ContextErrorKind
    detail: str | None = None

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]

    @property
    def message(self) -> str:
        return _MESSAGES[self.kind]


class BackendUnavailableError(Exception):
    """Raised by the data-access layer when the backing store fails."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_context_error(self) -> ContextError:
        return ContextError(kind=ContextErrorKind.backend_unavailable, detail=self.detail)


def error_response(error: ContextError) -> JSONResponse:
    """Serialize a context error as a safe JSON body."""
    return JSONResponse(status_code=error.status_code, content={"error": error.message})
