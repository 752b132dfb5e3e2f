"""Configuration helpers for the REST client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .headers import accessor_for, copy_headers, get_header, set_header
from .models import ApiConfig, ApiResponseType

HEADERS_KEY = "headers"


@dataclass(slots=True)
class ClientConfig:
    """Client-wide settings plus the default per-call configuration."""

    base_url: str | None = None
    charset: str = "utf-8"
    default_response_type: ApiResponseType = ApiResponseType.JSON
    defaults: ApiConfig = field(default_factory=dict)

    def resolved_headers(self) -> Any:
        """Return the default header container, creating it when missing."""

        headers = self.defaults.get(HEADERS_KEY)
        if headers is None:
            headers = {}
            self.defaults[HEADERS_KEY] = headers
        return headers


def merge_headers(defaults: Any, override: Any) -> Any:
    """Merge two header containers, override names win in any case.

    The result keeps the shape of ``override`` (or of ``defaults`` when
    there is no override) and shares no container with either input.
    """

    if override is None:
        return copy_headers(defaults)
    merged = copy_headers(override)
    if defaults is None:
        return merged
    for key, value in accessor_for(defaults).items():
        if get_header(merged, key) is None:
            set_header(merged, key, value)
    return merged


def merge_config(defaults: Mapping[str, Any] | None, override: Mapping[str, Any] | None) -> ApiConfig:
    """Return the effective configuration for one call.

    Merging stops two levels down: mapping values are shallow-merged with the
    override winning, other values are copied only where the override has
    none. Header containers merge by case-insensitive name. Neither argument
    is modified.
    """

    defaults = defaults or {}
    effective: ApiConfig = dict(override or {})
    for key, default_value in defaults.items():
        if default_value is None or key == HEADERS_KEY:
            continue
        value = effective.get(key)
        if value is None:
            effective[key] = dict(default_value) if isinstance(default_value, Mapping) else default_value
        elif isinstance(default_value, Mapping) and isinstance(value, Mapping):
            effective[key] = {**default_value, **value}

    effective[HEADERS_KEY] = merge_headers(defaults.get(HEADERS_KEY), effective.get(HEADERS_KEY))
    return effective


__all__ = ["ClientConfig", "HEADERS_KEY", "merge_config", "merge_headers"]
