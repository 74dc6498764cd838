# Overview: Python client for the UDH API and the cached dashboard store.

from .api import ApiClient, ApiError
from .store import DashboardStore

__all__ = ["ApiClient", "ApiError", "DashboardStore"]
