"""HTTP Basic authentication support."""

from __future__ import annotations

from dataclasses import dataclass

from requests.auth import _basic_auth_str

from .base import AuthStrategy


@dataclass(slots=True)
class BasicAuth(AuthStrategy):
    """Apply HTTP Basic auth headers."""

    username: str
    password: str

    def credentials(self) -> str:
        return _basic_auth_str(self.username, self.password)
