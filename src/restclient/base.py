"""Transport independent request pipeline."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Generic, TypeVar

from .auth.base import AUTHORIZATION, AuthStrategy
from .config import HEADERS_KEY, ClientConfig, merge_config
from .content import (
    CONTENT_DISPOSITION,
    CONTENT_LANGUAGE,
    ContentDisposition,
    get_content_length,
    get_content_type,
    get_content_type_and_charset,
    parse_content_disposition,
    set_content_type,
)
from .exceptions import ApiDataError, ApiError, error_class_for
from .formatting import format_data
from .headers import get_header, set_header
from .http import NETWORK_ERROR, response_error_message, select_error_message
from .models import (
    ApiAuthorizationScheme,
    ApiCompleteHandler,
    ApiConfig,
    ApiData,
    ApiErrorHandler,
    ApiMethod,
    ApiPayload,
    ApiRequestHandler,
    ApiResponse,
    ApiResponseHandler,
    ApiResponseType,
    ApiResult,
)
from .utils import UrlSearchParams, append_query, build_url, merge_url_search_params

logger = logging.getLogger(__name__)

R = TypeVar("R")
T = TypeVar("T")


class ApiBase(ABC, Generic[R]):
    """Request pipeline shared by every transport.

    Subclasses supply `create_response`, `response_data`,
    `transform_response` and `get_json` for one HTTP stack; everything else
    (configuration merge, body formatting, URL assembly, classification,
    decoding dispatch and error reporting) happens here.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        charset: str = "utf-8",
        default_response_type: ApiResponseType = ApiResponseType.JSON,
        config: ApiConfig | None = None,
        auth_strategy: AuthStrategy | None = None,
        on_error: ApiErrorHandler | None = None,
        on_request: ApiRequestHandler | None = None,
        on_response: ApiResponseHandler | None = None,
        on_complete: ApiCompleteHandler | None = None,
    ) -> None:
        self.config = ClientConfig(
            base_url=base_url,
            charset=charset,
            default_response_type=default_response_type,
            defaults=dict(config or {}),
        )
        self.last_error: ApiDataError | None = None
        self.on_error = on_error
        self.on_request = on_request
        self.on_response = on_response
        self.on_complete = on_complete
        if auth_strategy is not None:
            auth_strategy.apply(self.config.resolved_headers())

    # Context manager helpers -------------------------------------------------
    async def __aenter__(self) -> ApiBase[R]:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        await self.aclose()

    async def aclose(self) -> None:
        """Release transport resources; nothing to do by default."""

    @property
    def base_url(self) -> str | None:
        return self.config.base_url

    @base_url.setter
    def base_url(self, value: str | None) -> None:
        self.config.base_url = value

    @property
    def charset(self) -> str:
        return self.config.charset

    # Transport contract ------------------------------------------------------
    @abstractmethod
    async def create_response(
        self,
        method: ApiMethod,
        url: str,
        headers: Any,
        data: Any,
        response_type: ApiResponseType | None,
        rest: Mapping[str, Any],
    ) -> R:
        """Send the request; raise only for transport failures."""

    @abstractmethod
    async def response_data(
        self,
        response: R,
        response_type: ApiResponseType | None = None,
        date_fields: list[str] | None = None,
        default_value: Any = None,
    ) -> Any:
        """Decode the body of ``response``."""

    @abstractmethod
    def transform_response(self, response: R) -> ApiResponse:
        """Return the transport independent view of ``response``."""

    @abstractmethod
    async def get_json(self, url: str) -> Any | None:
        """Fetch ``url`` and return its JSON body, outside the pipeline."""

    # Headers and content helpers ---------------------------------------------
    def authorize(
        self,
        scheme: ApiAuthorizationScheme | str,
        token: str | None,
        headers: Any | None = None,
    ) -> None:
        """Write ``Authorization: <scheme> <token>``; an empty token removes it.

        Without ``headers`` the client's default headers are updated, which
        every later call picks up.
        """

        target = self.config.resolved_headers() if headers is None else headers
        name = scheme.value if isinstance(scheme, ApiAuthorizationScheme) else scheme
        set_header(target, AUTHORIZATION, f"{name} {token}" if token else None)

    def set_content_language(self, language: str | None, headers: Any | None = None) -> None:
        target = self.config.resolved_headers() if headers is None else headers
        set_header(target, CONTENT_LANGUAGE, language)

    def get_header_value(self, headers: Any, key: str) -> str | None:
        return get_header(headers, key)

    def set_header_value(self, key: str, value: str | None, headers: Any) -> None:
        set_header(headers, key, value)

    def get_content_type(self, headers: Any) -> str | None:
        return get_content_type(headers)

    def set_content_type(self, content_type: str | None, headers: Any) -> None:
        set_content_type(headers, content_type, self.config.charset)

    def get_content_type_and_charset(self, headers: Any) -> tuple[str, str | None]:
        return get_content_type_and_charset(headers)

    def get_content_length(self, headers: Any) -> int | None:
        return get_content_length(headers)

    def get_content_disposition(self, response_or_header: R | str) -> ContentDisposition | None:
        if isinstance(response_or_header, str):
            return parse_content_disposition(response_or_header)
        headers = self.transform_response(response_or_header).headers
        return parse_content_disposition(get_header(headers, CONTENT_DISPOSITION))

    def build_url(self, url: str) -> str:
        return build_url(self.config.base_url, url)

    # Pipeline ----------------------------------------------------------------
    async def execute(
        self,
        method: ApiMethod | str,
        url: str,
        data: Any = None,
        payload: ApiPayload[T] | None = None,
    ) -> ApiResult[T]:
        """Run one call and return its outcome without raising.

        Error handlers are not consulted here; `last_error` is still updated.
        """

        payload = payload or ApiPayload()
        method = ApiMethod(method.upper()) if isinstance(method, str) else method
        response_type = ApiResponseType(payload.response_type or self.config.default_response_type)
        self.last_error = None

        effective = merge_config(self.config.defaults, payload.config)
        headers = effective.pop(HEADERS_KEY)
        params = self._transform_params(payload.params)

        formatted, format_error = format_data(
            method,
            headers,
            params,
            data,
            payload.content_type,
            self.config.charset,
        )

        api_data = ApiData(
            data=formatted,
            headers=headers,
            method=method,
            params=params,
            url=append_query(url, params),
            response_type=response_type,
            show_loading=payload.show_loading,
        )

        if format_error is not None:
            api_data.depth = 0
            return self._fail(format_error, api_data)

        self._notify(self.on_request, api_data)

        target = api_data.url if payload.local else self.build_url(api_data.url)
        self._log_request(method, target)
        response, error = await self._classify(
            self.create_response(method, target, headers, formatted, response_type, effective)
        )

        self._notify(self.on_complete, api_data, response)

        if error is not None or response is None:
            api_data.depth = 1
            return self._fail(error or ApiError("No Response Error", -1), api_data, response)

        if payload.keep_response:
            payload.response = response
        self._notify(self.on_response, api_data, response)

        try:
            raw = await self.response_data(
                response,
                response_type,
                payload.date_fields,
                payload.default_value,
            )
            if raw is None or (isinstance(raw, (str, bytes)) and not raw):
                return ApiResult(value=payload.default_value)

            if payload.parser is None:
                return ApiResult(value=raw)

            parse_error, value = payload.parser(raw)
            if parse_error is not None:
                if not isinstance(parse_error, BaseException):
                    parse_error = ValueError(str(parse_error))
                api_data.depth = 2
                return self._fail(parse_error, api_data, response)
            return ApiResult(value=payload.default_value if value is None else value)
        except Exception as exc:
            api_data.depth = 3
            return self._fail(exc, api_data, response)

    async def request(
        self,
        method: ApiMethod | str,
        url: str,
        data: Any = None,
        payload: ApiPayload[T] | None = None,
        **options: Any,
    ) -> T | None:
        """Run one call, routing failures through the error handlers.

        With no handler registered the error is raised. A per-call
        ``on_error`` returning ``False`` skips the client handler. Once a
        handler ran the call returns ``None``.
        """

        payload = self._payload(payload, options)
        result = await self.execute(method, url, data, payload)
        if result.error is None:
            return result.value
        self.handle_error(result.error, payload.on_error)
        return None

    def handle_error(self, error: ApiDataError, local_handler: ApiErrorHandler | None = None) -> None:
        if local_handler is None and self.on_error is None:
            raise error

        if local_handler is not None and local_handler(error) is False:
            return

        if self.on_error is not None:
            self.on_error(error)

    async def delete(
        self, url: str, data: Any = None, payload: ApiPayload[T] | None = None, **options: Any
    ) -> T | None:
        return await self.request(ApiMethod.DELETE, url, data, payload, **options)

    async def get(
        self, url: str, data: Any = None, payload: ApiPayload[T] | None = None, **options: Any
    ) -> T | None:
        return await self.request(ApiMethod.GET, url, data, payload, **options)

    async def head(
        self, url: str, data: Any = None, payload: ApiPayload[T] | None = None, **options: Any
    ) -> T | None:
        return await self.request(ApiMethod.HEAD, url, data, payload, **options)

    async def options(
        self, url: str, data: Any = None, payload: ApiPayload[T] | None = None, **options: Any
    ) -> T | None:
        return await self.request(ApiMethod.OPTIONS, url, data, payload, **options)

    async def patch(
        self, url: str, data: Any = None, payload: ApiPayload[T] | None = None, **options: Any
    ) -> T | None:
        return await self.request(ApiMethod.PATCH, url, data, payload, **options)

    async def post(
        self, url: str, data: Any = None, payload: ApiPayload[T] | None = None, **options: Any
    ) -> T | None:
        return await self.request(ApiMethod.POST, url, data, payload, **options)

    async def put(
        self, url: str, data: Any = None, payload: ApiPayload[T] | None = None, **options: Any
    ) -> T | None:
        return await self.request(ApiMethod.PUT, url, data, payload, **options)

    # Internal helpers -------------------------------------------------------
    async def _classify(self, pending: Awaitable[R]) -> tuple[R | None, ApiError | None]:
        try:
            response = await pending
        except Exception as exc:
            error = ApiError(str(exc) or NETWORK_ERROR, -1)
            error.__cause__ = exc
            return None, error

        unified = self.transform_response(response)
        if unified.ok:
            return response, None

        body_message: str | None = None
        try:
            body_message = response_error_message(
                await self.response_data(response, ApiResponseType.JSON)
            )
        except Exception:
            logger.debug("Unable to read error body of HTTP %s", unified.status, exc_info=True)
        return response, ApiError(select_error_message(body_message, unified.status_text), unified.status)

    def _fail(self, error: BaseException, data: ApiData, response: R | None = None) -> ApiResult[Any]:
        error_class = error_class_for(data.depth, response is not None)
        data_error = error_class(error, data, response)
        self.last_error = data_error
        logger.warning(
            "API %s error (depth=%s) %s %s: %s",
            data_error.kind,
            data.depth,
            data.method.value,
            data.url,
            data_error,
        )
        return ApiResult(error=data_error)

    @staticmethod
    def _payload(payload: ApiPayload[T] | None, options: Mapping[str, Any]) -> ApiPayload[T]:
        if payload is not None and options:
            raise TypeError("Pass either a payload or keyword options, not both")
        if payload is not None:
            return payload
        return ApiPayload(**options)

    @staticmethod
    def _transform_params(params: Mapping[str, Any] | UrlSearchParams | None) -> UrlSearchParams:
        if params is None:
            return UrlSearchParams()
        if isinstance(params, UrlSearchParams):
            return UrlSearchParams(params)
        return merge_url_search_params(UrlSearchParams(), params)

    @staticmethod
    def _notify(handler: Callable[..., Any] | None, *args: Any) -> None:
        if handler is None:
            return
        try:
            handler(*args)
        except Exception:
            logger.exception("API observer %r failed", handler)

    def _log_request(self, method: ApiMethod, url: str) -> None:
        logger.info("API request %s %s", method.value, url)


__all__ = ["ApiBase"]
