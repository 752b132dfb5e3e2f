"""Typed records shared by the request pipeline and the transports."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, TYPE_CHECKING, Any, Generic, TypeVar, Union

from .utils import UrlSearchParams

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .exceptions import ApiDataError

T = TypeVar("T")

HeaderPairs = list[list[str]]
HeadersAll = Union[HeaderPairs, Mapping[str, str]]
"""Ordered ``[key, value]`` pairs, a map-like container or a plain dict."""

ApiConfig = dict[str, Any]
"""Open option map; the ``headers`` entry holds a header container."""


class ApiMethod(str, Enum):
    """HTTP verbs understood by the pipeline."""

    DELETE = "DELETE"
    GET = "GET"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"
    POST = "POST"
    PUT = "PUT"

    @property
    def has_body(self) -> bool:
        return self in (ApiMethod.PATCH, ApiMethod.POST, ApiMethod.PUT)


class ApiResponseType(str, Enum):
    """Shape the response body should be decoded into."""

    ARRAY_BUFFER = "arraybuffer"
    BLOB = "blob"
    DOCUMENT = "document"
    JSON = "json"
    STREAM = "stream"
    TEXT = "text"


class ApiAuthorizationScheme(str, Enum):
    """Well known ``Authorization`` schemes."""

    BASIC = "Basic"
    BEARER = "Bearer"
    OAUTH = "OAuth"


@dataclass(slots=True)
class FileItem:
    """One file destined for a multipart upload."""

    filename: str
    content: bytes | IO[bytes]
    content_type: str | None = None

    def as_tuple(self) -> tuple[Any, ...]:
        if self.content_type:
            return (self.filename, self.content, self.content_type)
        return (self.filename, self.content)


class FileList(list):
    """A list of `FileItem` objects, posted as ``files`` form fields."""

    def item(self, index: int) -> FileItem | None:
        return self[index] if 0 <= index < len(self) else None


@dataclass(slots=True)
class FormData:
    """Multipart form container passed through to the transport untouched."""

    fields: list[tuple[str, str]] = field(default_factory=list)
    files: list[tuple[str, FileItem]] = field(default_factory=list)

    def append(self, name: str, value: str | FileItem) -> None:
        if isinstance(value, FileItem):
            self.files.append((name, value))
        else:
            self.fields.append((name, str(value)))

    def field_map(self) -> dict[str, str | list[str]]:
        """Return fields as a dict, repeated names collapse into lists."""

        result: dict[str, str | list[str]] = {}
        for name, value in self.fields:
            current = result.get(name)
            if current is None:
                result[name] = value
            elif isinstance(current, list):
                current.append(value)
            else:
                result[name] = [current, value]
        return result

    def file_tuples(self) -> list[tuple[str, tuple[Any, ...]]]:
        return [(name, item.as_tuple()) for name, item in self.files]

    @classmethod
    def from_files(cls, files: Iterable[FileItem], name: str = "files") -> FormData:
        form = cls()
        for item in files:
            if item is not None:
                form.append(name, item)
        return form


@dataclass(slots=True)
class ApiResponse:
    """Transport independent view of a response."""

    headers: Any
    ok: bool
    status: int
    status_text: str = ""

    @classmethod
    def from_status(cls, headers: Any, status: int, status_text: str | None = None) -> ApiResponse:
        return cls(
            headers=headers,
            ok=200 <= status <= 299,
            status=status,
            status_text=status_text or "",
        )


@dataclass(slots=True)
class ApiData:
    """Working state of one call, handed to observers and errors."""

    data: Any
    headers: Any
    method: ApiMethod
    params: UrlSearchParams
    url: str
    response_type: ApiResponseType | None = None
    show_loading: bool | None = None
    depth: int | None = None


ApiErrorHandler = Callable[["ApiDataError"], Union[bool, None]]
ApiRequestHandler = Callable[[ApiData], None]
ApiResponseHandler = Callable[[ApiData, Any], None]
ApiCompleteHandler = Callable[[ApiData, Any], None]
ApiParser = Callable[[Any], "tuple[BaseException | str | None, Any]"]


@dataclass(slots=True)
class ApiPayload(Generic[T]):
    """Per-call options for `ApiBase.request`.

    ``response`` is written back with the raw transport response when
    ``keep_response`` is set.
    """

    content_type: str | None = None
    on_error: ApiErrorHandler | None = None
    config: ApiConfig | None = None
    date_fields: list[str] | None = None
    default_value: T | None = None
    params: Mapping[str, Any] | UrlSearchParams | None = None
    parser: ApiParser | None = None
    response_type: ApiResponseType | str | None = None
    show_loading: bool | None = None
    local: bool = False
    keep_response: bool = False
    response: Any | None = None


@dataclass(slots=True)
class ApiResult(Generic[T]):
    """Outcome of one call: a value or an error, never both."""

    value: T | None = None
    error: ApiDataError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        if self.error is not None:
            raise self.error
        return self.value


__all__ = [
    "ApiAuthorizationScheme",
    "ApiCompleteHandler",
    "ApiConfig",
    "ApiData",
    "ApiErrorHandler",
    "ApiMethod",
    "ApiParser",
    "ApiPayload",
    "ApiRequestHandler",
    "ApiResponse",
    "ApiResponseHandler",
    "ApiResponseType",
    "ApiResult",
    "FileItem",
    "FileList",
    "FormData",
    "HeadersAll",
    "HeaderPairs",
]
