"""Response classification and body decoding shared by the transports."""

from __future__ import annotations

import codecs
import json
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from .content import (
    get_charset,
    get_content_length,
    get_content_type_and_charset,
    is_json_content_type,
)
from .models import ApiResponse, ApiResponseType
from .utils import parse_date

EMPTY = ""
"""Sentinel for a successful response without content."""

UNKNOWN_ERROR = "Unknown"
NETWORK_ERROR = "Network Error"


def is_response_error_data(data: Any) -> bool:
    return isinstance(data, Mapping) and ("message" in data or "title" in data)


def response_error_message(data: Any) -> str | None:
    """Pull ``message`` (or ``title``) out of a problem-details body."""

    if is_response_error_data(data):
        message = data.get("message") or data.get("title")
        return str(message) if message else None
    if isinstance(data, str) and data.strip():
        return data.strip()
    return None


def select_error_message(body_message: str | None, status_text: str | None) -> str:
    return body_message or status_text or UNKNOWN_ERROR


def is_empty_response(response: ApiResponse) -> bool:
    return response.status == 204 or get_content_length(response.headers) == 0


def get_date_fields(date_fields: Iterable[str] | None, default_value: Any = None) -> list[str]:
    """Return the declared date fields, or infer them from ``default_value``.

    Inference looks at the first record of a list default (or at a dict
    default) and collects the keys holding `datetime.date` values.
    """

    if date_fields:
        return list(date_fields)
    sample = default_value
    if isinstance(sample, (list, tuple)):
        sample = sample[0] if sample else None
    if isinstance(sample, Mapping):
        return [key for key, value in sample.items() if isinstance(value, date)]
    return []


def hydrate_dates(value: Any, fields: Iterable[str]) -> Any:
    """Convert the named string fields into datetimes, at any depth."""

    names = set(fields)
    if not names:
        return value

    def convert(item: Any) -> Any:
        if isinstance(item, str):
            parsed = parse_date(item)
            return item if parsed is None else parsed
        if isinstance(item, list):
            return [convert(entry) for entry in item]
        return walk(item)

    def walk(item: Any) -> Any:
        if isinstance(item, dict):
            return {
                key: convert(entry) if key in names else walk(entry)
                for key, entry in item.items()
            }
        if isinstance(item, list):
            return [walk(entry) for entry in item]
        return item

    return walk(value)


def parse_json(text: str, date_fields: Iterable[str] | None = None) -> Any:
    if text is None or text == "":
        return EMPTY
    data = json.loads(text)
    if date_fields:
        data = hydrate_dates(data, date_fields)
    return data


def parse_document(content: bytes | str) -> ET.Element:
    return ET.fromstring(content)


def resolve_encoding(encoding: str | None) -> str:
    """Return ``encoding`` when Python knows the codec, else UTF-8."""

    if encoding:
        try:
            return codecs.lookup(encoding).name
        except LookupError:
            pass
    return "utf-8"


def decode_content(
    response: ApiResponse,
    content: bytes,
    *,
    response_type: ApiResponseType | None,
    encoding: str | None = None,
    date_fields: Iterable[str] | None = None,
    default_value: Any = None,
) -> Any:
    """Decode a fully read body according to the requested shape.

    Streams are handled by the transports before the body is read.
    ``encoding`` is the transport's own reading of the charset; without it
    the ``charset`` parameter of the content type is used.
    """

    if is_empty_response(response):
        return EMPTY

    content_type, _ = get_content_type_and_charset(response.headers)
    encoding = resolve_encoding(encoding or get_charset(response.headers))

    if response_type is ApiResponseType.JSON or is_json_content_type(content_type):
        fields = get_date_fields(date_fields, default_value)
        return parse_json(content.decode(encoding), fields)

    if response_type in (ApiResponseType.BLOB, ApiResponseType.ARRAY_BUFFER) or (
        content_type.startswith("application/octet-stream")
    ):
        return content

    if response_type is ApiResponseType.DOCUMENT:
        return parse_document(content)

    return content.decode(encoding, errors="replace")


__all__ = [
    "EMPTY",
    "NETWORK_ERROR",
    "UNKNOWN_ERROR",
    "decode_content",
    "get_date_fields",
    "hydrate_dates",
    "is_empty_response",
    "is_response_error_data",
    "parse_document",
    "parse_json",
    "resolve_encoding",
    "response_error_message",
    "select_error_message",
]
