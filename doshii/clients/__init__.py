"""
Doshii API clients organized by resource.

The resource clients only build request descriptors; DoshiiHTTPClient sends
them and DoshiiClient ties the two together.
"""

from .base_client import DoshiiHTTPClient
from .order_client import OrderClient
from .unified_client import DoshiiClient

__all__ = [
    "DoshiiHTTPClient",
    "OrderClient",
    "DoshiiClient",
]
