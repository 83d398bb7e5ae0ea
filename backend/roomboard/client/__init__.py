"""
Python client for Roomboard: REST calls, a live query cache and the
Socket.IO connection that keeps it current.
"""

from .api import ApiClient, ApiError
from .cache import ClientCache, OptimisticUpdate
from .reconciler import Reconciler
from .realtime import RealtimeClient
from .session import ClientSession

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientCache",
    "OptimisticUpdate",
    "Reconciler",
    "RealtimeClient",
    "ClientSession",
]
