"""Transports plugged into the request pipeline."""
from .httpx_api import HttpxApi
from .requests_api import RequestsApi

__all__ = ["HttpxApi", "RequestsApi"]
