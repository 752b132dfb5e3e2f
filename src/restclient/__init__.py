"""Transport agnostic REST client entrypoints."""
from .adapters import HttpxApi, RequestsApi
from .auth import AuthStrategy, BasicAuth, BearerAuth
from .base import ApiBase
from .client import create_client
from .config import ClientConfig, merge_config
from .content import ContentDisposition
from .exceptions import (
    ApiDataError,
    ApiError,
    DecodeError,
    FormatError,
    HttpError,
    NetworkError,
    ParseError,
    RestClientError,
)
from .models import (
    ApiAuthorizationScheme,
    ApiData,
    ApiMethod,
    ApiPayload,
    ApiResponse,
    ApiResponseType,
    ApiResult,
    FileItem,
    FileList,
    FormData,
)
from .utils import UrlSearchParams

__all__ = [
    "ApiAuthorizationScheme",
    "ApiBase",
    "ApiData",
    "ApiDataError",
    "ApiError",
    "ApiMethod",
    "ApiPayload",
    "ApiResponse",
    "ApiResponseType",
    "ApiResult",
    "AuthStrategy",
    "BasicAuth",
    "BearerAuth",
    "ClientConfig",
    "ContentDisposition",
    "DecodeError",
    "FileItem",
    "FileList",
    "FormData",
    "FormatError",
    "HttpError",
    "HttpxApi",
    "NetworkError",
    "ParseError",
    "RequestsApi",
    "RestClientError",
    "UrlSearchParams",
    "create_client",
    "merge_config",
]
