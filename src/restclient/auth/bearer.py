"""Bearer token authentication."""

from __future__ import annotations

from dataclasses import dataclass

from .base import AuthStrategy


@dataclass(slots=True)
class BearerAuth(AuthStrategy):
    """Apply an already issued bearer token."""

    token: str | None

    def credentials(self) -> str | None:
        return f"Bearer {self.token}" if self.token else None

    def update_token(self, token: str | None) -> None:
        self.token = token
