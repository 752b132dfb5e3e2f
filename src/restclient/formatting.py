"""Turn caller payloads into wire bodies or query parameters."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .content import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    get_content_type,
    is_json_content_type,
    set_content_type,
)
from .models import ApiMethod, FileList, FormData
from .utils import UrlSearchParams, is_simple_object, merge_url_search_params

FormatResult = tuple[Any, "Exception | None"]


class PayloadKind(Enum):
    STRING = "string"
    BINARY = "binary"
    FORM = "form"
    FILES = "files"
    OBJECT = "object"
    SEARCH_PARAMS = "search_params"
    OTHER = "other"


def classify_payload(data: Any, content_type: str | None = None) -> PayloadKind:
    """Resolve the payload variant; sequences count as objects only for JSON."""

    if isinstance(data, str):
        return PayloadKind.STRING
    if isinstance(data, (bytes, bytearray, memoryview)):
        return PayloadKind.BINARY
    if isinstance(data, FormData):
        return PayloadKind.FORM
    if isinstance(data, FileList):
        return PayloadKind.FILES
    if isinstance(data, UrlSearchParams):
        return PayloadKind.SEARCH_PARAMS
    if type(data) is dict:
        return PayloadKind.OBJECT
    if isinstance(data, (list, tuple)) and is_json_content_type(content_type):
        return PayloadKind.OBJECT
    return PayloadKind.OTHER


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(data: Any) -> str:
    return json.dumps(data, default=_json_default, separators=(",", ":"), ensure_ascii=False)


def is_form_pairs(data: Any) -> bool:
    return all(isinstance(item, (list, tuple)) and len(item) == 2 for item in data)


def format_body(
    headers: Any,
    data: Any,
    content_type: str | None = None,
    charset: str = "utf-8",
) -> FormatResult:
    """Format the body of a PATCH, POST or PUT request."""

    local_type = content_type or get_content_type(headers)
    kind = classify_payload(data, local_type)
    try:
        if kind is PayloadKind.STRING:
            text = data.strip()
            if not local_type:
                if text.startswith("{") and text.endswith("}"):
                    local_type = JSON_CONTENT_TYPE
                elif text.startswith("<") and text.endswith(">"):
                    local_type = XML_CONTENT_TYPE
            set_content_type(headers, local_type, charset)
            return data, None

        if kind is PayloadKind.FORM:
            return data, None

        if kind is PayloadKind.OBJECT or (
            kind is PayloadKind.OTHER and is_json_content_type(local_type)
        ):
            set_content_type(headers, local_type or JSON_CONTENT_TYPE, charset)
            return to_json(data), None

        if kind is PayloadKind.OTHER and isinstance(data, (list, tuple)) and not is_form_pairs(data):
            if local_type:
                raise TypeError(f"Sequence body cannot be sent as {local_type}")
            set_content_type(headers, JSON_CONTENT_TYPE, charset)
            return to_json(data), None

        if kind is PayloadKind.FILES:
            # the transport writes the multipart boundary itself
            return FormData.from_files(data), None

        set_content_type(headers, local_type or FORM_CONTENT_TYPE, charset)
        if kind is PayloadKind.BINARY:
            return bytes(data), None
        return data, None
    except Exception as exc:
        return None, exc


def format_query(params: UrlSearchParams, data: Any) -> Exception | None:
    """Merge the payload of a body-less request into the query parameters."""

    if len(params) > 0:
        return ValueError("URL params should not be combined with data")

    kind = classify_payload(data)
    if kind is PayloadKind.SEARCH_PARAMS:
        for key, value in data.items():
            params.set(key, value)
        return None
    if kind is PayloadKind.OBJECT and is_simple_object(data):
        merge_url_search_params(params, data)
        return None
    return TypeError("Data transforms to params with wrong data type")


def format_data(
    method: ApiMethod,
    headers: Any,
    params: UrlSearchParams,
    data: Any = None,
    content_type: str | None = None,
    charset: str = "utf-8",
) -> FormatResult:
    """Return ``(wire_body, error)`` for the request.

    ``headers`` and ``params`` are updated in place.
    """

    if data is None:
        return None, None
    if method.has_body:
        return format_body(headers, data, content_type, charset)
    return None, format_query(params, data)


__all__ = [
    "PayloadKind",
    "classify_payload",
    "format_body",
    "format_data",
    "format_query",
    "is_form_pairs",
    "to_json",
]
