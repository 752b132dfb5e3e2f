"""Custom exception hierarchy for the REST client."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .models import ApiData


class RestClientError(RuntimeError):
    """Base error for REST client failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ApiError(RestClientError):
    """Raised by response classification with the HTTP status attached.

    A status of ``-1`` means no response was obtained.
    """

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message, status_code=status)
        self.status = status

    def __str__(self) -> str:
        text = super().__str__()
        if self.status > 0:
            text = f"{text} ({self.status})"
        return text


class ApiDataError(RestClientError):
    """Wrap a pipeline failure together with the call record and response."""

    kind = "api"

    def __init__(
        self,
        error: BaseException,
        data: ApiData,
        response: Any | None = None,
    ) -> None:
        # ApiError.__str__ appends the status, keep the bare message here
        message = str(error.args[0]) if error.args else error.__class__.__name__
        super().__init__(
            message,
            status_code=getattr(error, "status_code", None),
            details=error,
        )
        self.source = error
        self.data = data
        self.response = response
        self.depth = data.depth
        self.__cause__ = error


class FormatError(ApiDataError):
    """Raised when the body or query string cannot be built."""

    kind = "format"


class NetworkError(ApiDataError):
    """Raised when the transport fails before any response is obtained."""

    kind = "network"


class HttpError(ApiDataError):
    """Raised when the server answers with a status outside 200-299."""

    kind = "http"


class ParseError(ApiDataError):
    """Raised when a caller-supplied parser rejects the decoded payload."""

    kind = "parse"


class DecodeError(ApiDataError):
    """Raised when the response body cannot be decoded."""

    kind = "decode"


def error_class_for(depth: int | None, has_response: bool) -> type[ApiDataError]:
    """Return the error subclass matching a pipeline depth."""

    if depth == 0:
        return FormatError
    if depth == 1:
        return HttpError if has_response else NetworkError
    if depth == 2:
        return ParseError
    if depth == 3:
        return DecodeError
    return ApiDataError


__all__ = [
    "RestClientError",
    "ApiError",
    "ApiDataError",
    "FormatError",
    "NetworkError",
    "HttpError",
    "ParseError",
    "DecodeError",
    "error_class_for",
]
