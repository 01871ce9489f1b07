"""
Asynchronous client for the Doshii partner API.
"""

from doshii.clients import DoshiiClient, DoshiiHTTPClient, OrderClient
from doshii.domain.models import OrderRetrievalFilters, OrderStatus, RequestConfig
from doshii.utils.error_handler import AppException, DoshiiAPIException
from doshii.version import __version__

__all__ = [
    "DoshiiClient",
    "DoshiiHTTPClient",
    "OrderClient",
    "OrderRetrievalFilters",
    "OrderStatus",
    "RequestConfig",
    "AppException",
    "DoshiiAPIException",
    "__version__",
]
