"""Transport backed by `httpx.AsyncClient`."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import httpx

from ..base import ApiBase
from ..headers import headers_to_dict
from ..http import EMPTY, decode_content, is_empty_response
from ..models import ApiMethod, ApiResponse, ApiResponseType, FormData

logger = logging.getLogger(__name__)

REQUEST_OPTIONS = frozenset({"cookies", "extensions", "timeout"})
SEND_OPTIONS = frozenset({"auth", "follow_redirects"})


class HttpxApi(ApiBase[httpx.Response]):
    """Native async transport; pass ``client`` to share or mock one."""

    def __init__(self, *, client: httpx.AsyncClient | None = None, **options: Any) -> None:
        super().__init__(**options)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def create_response(
        self,
        method: ApiMethod,
        url: str,
        headers: Any,
        data: Any,
        response_type: ApiResponseType | None,
        rest: Mapping[str, Any],
    ) -> httpx.Response:
        request_options: dict[str, Any] = {}
        send_options: dict[str, Any] = {}
        for key, value in rest.items():
            if key in REQUEST_OPTIONS:
                request_options[key] = value
            elif key in SEND_OPTIONS:
                send_options[key] = value
            else:
                logger.debug("Ignoring option %s unsupported by httpx", key)

        request = self._client.build_request(
            method.value,
            url,
            headers=httpx.Headers(headers_to_dict(headers)),
            **self._body_options(data),
            **request_options,
        )
        return await self._client.send(
            request,
            stream=response_type is ApiResponseType.STREAM,
            **send_options,
        )

    async def response_data(
        self,
        response: httpx.Response,
        response_type: ApiResponseType | None = None,
        date_fields: list[str] | None = None,
        default_value: Any = None,
    ) -> Any:
        unified = self.transform_response(response)
        if response_type is ApiResponseType.STREAM:
            if is_empty_response(unified):
                await response.aclose()
                return EMPTY
            return response.aiter_bytes()
        content = await response.aread()
        return decode_content(
            unified,
            content,
            response_type=response_type,
            encoding=response.encoding,
            date_fields=date_fields,
            default_value=default_value,
        )

    def transform_response(self, response: httpx.Response) -> ApiResponse:
        return ApiResponse(
            headers=response.headers,
            ok=response.is_success,
            status=response.status_code,
            status_text=response.reason_phrase,
        )

    async def get_json(self, url: str) -> Any | None:
        response = await self._client.get(url)
        if response.status_code == 200 and response.content:
            return response.json()
        return None

    @staticmethod
    def _body_options(data: Any) -> dict[str, Any]:
        if data is None:
            return {}
        if isinstance(data, FormData):
            return {"data": data.field_map(), "files": data.file_tuples()}
        if isinstance(data, Mapping):
            return {"data": dict(data)}
        if isinstance(data, (list, tuple)):
            return {"content": urlencode(list(data))}
        return {"content": data}


__all__ = ["HttpxApi"]
