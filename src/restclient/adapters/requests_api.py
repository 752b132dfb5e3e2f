"""Transport backed by a blocking `requests.Session`."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from ..base import ApiBase
from ..headers import headers_to_dict
from ..http import EMPTY, decode_content, is_empty_response
from ..models import ApiMethod, ApiResponse, ApiResponseType, FormData

logger = logging.getLogger(__name__)

SESSION_OPTIONS = frozenset(
    {"allow_redirects", "auth", "cert", "cookies", "proxies", "timeout", "verify"}
)


class RequestsApi(ApiBase[requests.Response]):
    """Run each call on a worker thread through `requests`.

    HTTP error statuses come back as ordinary responses; only
    `requests.RequestException` signals a transport failure.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        chunk_size: int = 8192,
        **options: Any,
    ) -> None:
        super().__init__(**options)
        self._session = session or requests.Session()
        self._chunk_size = chunk_size

    async def aclose(self) -> None:
        self._session.close()

    async def create_response(
        self,
        method: ApiMethod,
        url: str,
        headers: Any,
        data: Any,
        response_type: ApiResponseType | None,
        rest: Mapping[str, Any],
    ) -> requests.Response:
        kwargs = self._session_options(rest)
        kwargs["headers"] = headers_to_dict(headers)
        kwargs["stream"] = response_type is ApiResponseType.STREAM
        if isinstance(data, FormData):
            kwargs["data"] = data.field_map()
            kwargs["files"] = data.file_tuples()
        elif isinstance(data, str):
            kwargs["data"] = data.encode(self.config.charset)
        elif data is not None:
            kwargs["data"] = data
        return await asyncio.to_thread(self._session.request, method.value, url, **kwargs)

    async def response_data(
        self,
        response: requests.Response,
        response_type: ApiResponseType | None = None,
        date_fields: list[str] | None = None,
        default_value: Any = None,
    ) -> Any:
        unified = self.transform_response(response)
        if response_type is ApiResponseType.STREAM:
            if is_empty_response(unified):
                response.close()
                return EMPTY
            return response.iter_content(chunk_size=self._chunk_size)
        content = await asyncio.to_thread(getattr, response, "content")
        return decode_content(
            unified,
            content or b"",
            response_type=response_type,
            encoding=response.encoding,
            date_fields=date_fields,
            default_value=default_value,
        )

    def transform_response(self, response: requests.Response) -> ApiResponse:
        return ApiResponse.from_status(response.headers, response.status_code, response.reason)

    async def get_json(self, url: str) -> Any | None:
        response = await asyncio.to_thread(self._session.get, url)
        if response.status_code == 200 and response.content:
            return response.json()
        return None

    @staticmethod
    def _session_options(rest: Mapping[str, Any]) -> dict[str, Any]:
        options: dict[str, Any] = {}
        for key, value in rest.items():
            if key in SESSION_OPTIONS:
                options[key] = value
            else:
                logger.debug("Ignoring option %s unsupported by requests", key)
        if options.get("verify") is False:
            urllib3.disable_warnings(InsecureRequestWarning)
        return options


__all__ = ["RequestsApi"]
