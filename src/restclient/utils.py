"""Small helpers for query strings, URLs and simple values."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from urllib.parse import parse_qsl, urlencode

SimpleType = (str, int, float, bool, Decimal, date, type(None))

_LOOSE_DATE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})"
    r"(?:[T ](?P<hour>\d{1,2}):(?P<minute>\d{1,2})(?::(?P<second>\d{1,2})(?:\.(?P<fraction>\d{1,6}))?)?)?$"
)


class UrlSearchParams:
    """Ordered query parameter set holding one value per key."""

    def __init__(self, init: Mapping[str, Any] | Iterable[tuple[str, Any]] | str | None = None) -> None:
        self._items: dict[str, str] = {}
        if init is None:
            return
        if isinstance(init, str):
            pairs: Iterable[tuple[str, Any]] = parse_qsl(init.lstrip("?"), keep_blank_values=True)
        elif isinstance(init, UrlSearchParams):
            pairs = init.items()
        elif isinstance(init, Mapping):
            pairs = init.items()
        else:
            pairs = init
        for key, value in pairs:
            self.set(key, value)

    def set(self, key: str, value: Any) -> None:
        self._items[str(key)] = stringify(value)

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def delete(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def items(self) -> list[tuple[str, str]]:
        return list(self._items.items())

    def to_string(self) -> str:
        return urlencode(self.items())

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UrlSearchParams):
            return self.items() == other.items()
        return NotImplemented

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"UrlSearchParams({self.to_string()!r})"


def stringify(value: Any) -> str:
    """Render a scalar the way it should appear in a query string."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def is_simple_type(target: Any) -> bool:
    return isinstance(target, SimpleType)


def is_simple_object(target: Any) -> bool:
    """Return True for a plain dict whose values are all simple scalars."""

    return type(target) is dict and all(is_simple_type(item) for item in target.values())


def merge_url_search_params(base: UrlSearchParams, data: Mapping[str, Any]) -> UrlSearchParams:
    """Copy the defined entries of ``data`` into ``base``."""

    for key, value in data.items():
        if value is None:
            continue
        base.set(key, value)
    return base


def append_query(url: str, params: UrlSearchParams) -> str:
    query = params.to_string()
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def build_url(base_url: str | None, path: str) -> str:
    """Prefix ``path`` with ``base_url`` unless it is already absolute."""

    if "://" in path or not base_url:
        return path
    return f"{base_url}{path}"


def parse_date(value: str) -> datetime | None:
    """Parse an ISO-like date string, tolerating unpadded month and day."""

    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    match = _LOOSE_DATE.match(text)
    if not match:
        return None
    parts = match.groupdict()
    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            int((parts["fraction"] or "0").ljust(6, "0")),
        )
    except ValueError:
        return None


__all__ = [
    "UrlSearchParams",
    "append_query",
    "build_url",
    "is_simple_object",
    "is_simple_type",
    "merge_url_search_params",
    "parse_date",
    "stringify",
]
