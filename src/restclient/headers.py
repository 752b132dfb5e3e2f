"""Case-insensitive access to the three supported header shapes.

Headers may arrive as ordered ``[key, value]`` pairs, as a map-like
container that already compares names case-insensitively (``httpx.Headers``,
``requests.structures.CaseInsensitiveDict``) or as a plain ``dict``. Every
other module goes through `get_header` / `set_header` and never inspects the
shape itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class HeaderAccessor(ABC):
    """Read and write one header container."""

    def __init__(self, headers: Any) -> None:
        self.headers = headers

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` in any case."""

    @abstractmethod
    def set(self, key: str, value: str | None) -> None:
        """Write ``value``; an empty value removes the header."""

    @abstractmethod
    def items(self) -> list[tuple[str, str]]:
        """Return the headers as ``(key, value)`` tuples."""


class PairHeaders(HeaderAccessor):
    """Ordered list of ``[key, value]`` pairs."""

    def _index(self, key: str) -> int:
        lowered = key.lower()
        for index, pair in enumerate(self.headers):
            if pair and pair[0] and pair[0].lower() == lowered:
                return index
        return -1

    def get(self, key: str) -> str | None:
        index = self._index(key)
        return None if index == -1 else self.headers[index][1]

    def set(self, key: str, value: str | None) -> None:
        index = self._index(key)
        if value:
            if index == -1:
                self.headers.append([key, value])
            else:
                # tuples are immutable, replace the whole pair
                self.headers[index] = [self.headers[index][0], value]
        elif index != -1:
            del self.headers[index]

    def items(self) -> list[tuple[str, str]]:
        return [(pair[0], pair[1]) for pair in self.headers]


class MapHeaders(HeaderAccessor):
    """Native header container that already ignores case."""

    def get(self, key: str) -> str | None:
        return self.headers.get(key)

    def set(self, key: str, value: str | None) -> None:
        if value:
            self.headers[key] = value
        elif key in self.headers:
            del self.headers[key]

    def items(self) -> list[tuple[str, str]]:
        return list(self.headers.items())


class DictHeaders(HeaderAccessor):
    """Plain ``dict`` keyed by header name."""

    def _match(self, key: str) -> str | None:
        lowered = key.lower()
        for item in self.headers:
            if item.lower() == lowered:
                return item
        return None

    def get(self, key: str) -> str | None:
        match = self._match(key)
        return None if match is None else self.headers[match]

    def set(self, key: str, value: str | None) -> None:
        match = self._match(key) or key
        if value:
            self.headers[match] = value
        else:
            self.headers.pop(match, None)

    def items(self) -> list[tuple[str, str]]:
        return list(self.headers.items())


def accessor_for(headers: Any) -> HeaderAccessor:
    """Pick the accessor matching the runtime shape of ``headers``."""

    if isinstance(headers, list):
        return PairHeaders(headers)
    if isinstance(headers, dict):
        return DictHeaders(headers)
    if isinstance(headers, Mapping):
        return MapHeaders(headers)
    raise TypeError(f"Unsupported header container {type(headers).__name__}")


def get_header(headers: Any, key: str) -> str | None:
    if headers is None:
        return None
    return accessor_for(headers).get(key)


def set_header(headers: Any, key: str, value: str | None) -> None:
    accessor_for(headers).set(key, value)


def headers_to_dict(headers: Any) -> dict[str, str]:
    """Flatten any supported shape into a plain ``dict``."""

    if headers is None:
        return {}
    return dict(accessor_for(headers).items())


def copy_headers(headers: Any) -> Any:
    """Return a shallow copy that keeps the container's shape."""

    if headers is None:
        return {}
    if isinstance(headers, list):
        return [list(pair) for pair in headers]
    if hasattr(headers, "copy"):
        return headers.copy()
    return dict(headers.items())


__all__ = [
    "DictHeaders",
    "HeaderAccessor",
    "MapHeaders",
    "PairHeaders",
    "accessor_for",
    "copy_headers",
    "get_header",
    "headers_to_dict",
    "set_header",
]
