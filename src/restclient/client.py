"""Client factory."""

from __future__ import annotations

from typing import Any

from .adapters import HttpxApi, RequestsApi
from .base import ApiBase

TRANSPORTS: dict[str, type[ApiBase[Any]]] = {
    "httpx": HttpxApi,
    "requests": RequestsApi,
}


def create_client(transport: str | None = None, **options: Any) -> ApiBase[Any]:
    """Create a REST client on the named transport, httpx by default.

    Keyword options go to the transport's constructor (``base_url``,
    ``config``, ``auth_strategy``, ``session`` / ``client`` ...).
    """

    name = (transport or "httpx").lower()
    try:
        api_class = TRANSPORTS[name]
    except KeyError:
        raise ValueError(
            f"Unknown transport {transport!r}; expected one of {', '.join(sorted(TRANSPORTS))}"
        ) from None
    return api_class(**options)


__all__ = ["TRANSPORTS", "create_client"]
