"""
Domain models.
"""

from .order import (
    DATE_FILTER_FIELDS,
    Order,
    OrderRetrievalFilters,
    OrderStatus,
    RequestConfig,
    RequestMaker,
    build_query_params,
    to_unix_seconds,
)

__all__ = [
    "DATE_FILTER_FIELDS",
    "Order",
    "OrderRetrievalFilters",
    "OrderStatus",
    "RequestConfig",
    "RequestMaker",
    "build_query_params",
    "to_unix_seconds",
]
