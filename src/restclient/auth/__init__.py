"""Authentication strategies for the REST client."""
from .base import AuthStrategy
from .basic import BasicAuth
from .bearer import BearerAuth

__all__ = ["AuthStrategy", "BasicAuth", "BearerAuth"]
