"""Base abstractions for auth strategies."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..headers import set_header

AUTHORIZATION = "Authorization"


class AuthStrategy(ABC):
    """Interface each authentication mechanism must implement."""

    @abstractmethod
    def credentials(self) -> str | None:
        """Return the ``Authorization`` value, or None to clear it."""

    def apply(self, headers: Any) -> None:
        """Mutate any supported header container in place."""
        set_header(headers, AUTHORIZATION, self.credentials())
