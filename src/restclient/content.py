"""Content-Type, Content-Length and Content-Disposition helpers."""

from __future__ import annotations

from dataclasses import dataclass
from email.message import Message
from email.utils import collapse_rfc2231_value
from typing import Any

from .headers import get_header, set_header

CONTENT_TYPE = "Content-Type"
CONTENT_LENGTH = "Content-Length"
CONTENT_DISPOSITION = "Content-Disposition"
CONTENT_LANGUAGE = "Content-Language"

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(slots=True)
class ContentDisposition:
    """Parsed ``Content-Disposition`` header."""

    type: str
    filename: str | None = None
    name: str | None = None


def get_content_type(headers: Any) -> str | None:
    return get_header(headers, CONTENT_TYPE)


def get_content_type_and_charset(headers: Any) -> tuple[str, str | None]:
    """Split the content type into the MIME type and its ``charset=`` parameter.

    Other parameters, such as ``odata.metadata=minimal``, are skipped.
    """

    content_type = get_content_type(headers)
    if not content_type:
        return "", None
    mime_type, *params = content_type.split(";")
    charset = next(
        (param.strip() for param in params if param.strip().lower().startswith("charset=")),
        None,
    )
    return mime_type.strip(), charset


def get_charset(headers: Any) -> str | None:
    """Return the bare ``charset`` value of the content type, if declared."""

    content_type = get_content_type(headers)
    if not content_type:
        return None
    message = Message()
    message[CONTENT_TYPE] = content_type
    charset = message.get_param("charset")
    if charset is None:
        return None
    return collapse_rfc2231_value(charset).strip().strip('"') or None


def set_content_type(headers: Any, content_type: str | None, charset: str = "utf-8") -> None:
    """Write the content type, appending ``charset`` when none is given."""

    value = content_type
    if value and "charset=" not in value:
        value = f"{value}; charset={charset}"
    set_header(headers, CONTENT_TYPE, value)


def is_json_content_type(content_type: str | None) -> bool:
    # covers application/problem+json, application/vnd.api+json
    if not content_type:
        return False
    content_type = content_type.lower()
    return "json" in content_type or content_type.startswith("application/javascript")


def get_content_length(headers: Any) -> int | None:
    value = get_header(headers, CONTENT_LENGTH)
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_content_disposition(value: str | None) -> ContentDisposition | None:
    """Parse a ``Content-Disposition`` value.

    RFC 2231 / 5987 ``filename*`` takes precedence over the plain
    ``filename`` parameter.
    """

    if not value:
        return None
    message = Message()
    message[CONTENT_DISPOSITION] = value
    disposition = message.get_content_disposition()
    if disposition is None:
        return None
    found: dict[str, str] = {}
    for key, param in message.get_params(header=CONTENT_DISPOSITION)[1:]:
        key = key.lower()
        # extended (tuple) values replace plain ones
        if isinstance(param, tuple) or key not in found:
            found[key] = collapse_rfc2231_value(param).strip('"')
    return ContentDisposition(
        type=disposition,
        filename=found.get("filename"),
        name=found.get("name"),
    )


__all__ = [
    "CONTENT_DISPOSITION",
    "CONTENT_LANGUAGE",
    "CONTENT_LENGTH",
    "CONTENT_TYPE",
    "ContentDisposition",
    "FORM_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "XML_CONTENT_TYPE",
    "get_charset",
    "get_content_length",
    "get_content_type",
    "get_content_type_and_charset",
    "is_json_content_type",
    "parse_content_disposition",
    "set_content_type",
]
