"""
Order types for the Doshii orders API.

Orders themselves are opaque documents owned by Doshii; the client only
knows the status vocabulary and the filters accepted by ``GET /orders``.
"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Order documents are passed through untouched
Order = Dict[str, Any]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Wire names of the filters sent as Unix timestamps (seconds)
DATE_FILTER_FIELDS = ("from", "to", "updatedFrom", "updatedTo", "posFrom", "posTo")

FilterTimestamp = Union[datetime, date, int]


class OrderStatus(str, Enum):
    """Lifecycle stage of an order on the Doshii side."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETE = "complete"
    VENUE_CANCELLED = "venue_cancelled"


class _RequestConfigBase(TypedDict):
    method: str
    url: str
    headers: Dict[str, str]


class RequestConfig(_RequestConfigBase, total=False):
    """Request descriptor handed to the executor."""

    params: Optional[Dict[str, Any]]
    data: Any


RequestMaker = Callable[[RequestConfig], Awaitable[Any]]


class OrderRetrievalFilters(BaseModel):
    """
    Filters for listing the orders at a location.

    Attributes use snake_case and serialise to the camelCase names the API
    expects (``pos_ref`` -> ``posRef``, ``from_`` -> ``from``). Bounds, sort
    directions and statuses are not checked locally; Doshii rejects values
    it does not accept.

    Attributes:
        status: Statuses to include, defaults to all on the server
        pos_ref: POS reference for the order
        external_order_ref: Reference supplied by the partner at creation
        from_: Orders created at or after this time
        to: Orders created at or before this time
        sort: "asc" or "desc" by creation time (server default desc)
        updated_from: Orders last updated at or after this time
        updated_to: Orders last updated at or before this time
        updated_sort: "asc" or "desc" by last update
        pos_from: Orders created in the POS at or after this time
        pos_to: Orders created in the POS at or before this time
        pos_sort: "asc" or "desc" by POS creation time
        offset: Matching records to skip (server default 0)
        limit: Max records to return. Server default is 50 (max 100), or 200
            (max 1000) on the read-only service with gzip compression enabled
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    status: Optional[Union[List[Union[OrderStatus, str]], str]] = None
    pos_ref: Optional[str] = None
    external_order_ref: Optional[str] = None
    from_: Optional[FilterTimestamp] = Field(default=None, alias="from")
    to: Optional[FilterTimestamp] = None
    sort: Optional[str] = None
    updated_from: Optional[FilterTimestamp] = None
    updated_to: Optional[FilterTimestamp] = None
    updated_sort: Optional[str] = None
    pos_from: Optional[FilterTimestamp] = None
    pos_to: Optional[FilterTimestamp] = None
    pos_sort: Optional[str] = None
    offset: Optional[int] = None
    limit: Optional[int] = None


# Attribute name -> wire name, e.g. pos_from -> posFrom, from_ -> from
_WIRE_NAMES = {name: field.alias or name for name, field in OrderRetrievalFilters.model_fields.items()}


def to_unix_seconds(value: Any) -> Any:
    """
    Convert a filter timestamp to whole seconds since the epoch.

    The value is truncated to milliseconds and then floored to seconds, so
    times before the epoch round down as well. Naive datetimes and dates are
    taken as UTC. Integers are assumed to already be epoch seconds and any
    other value is returned unchanged.

    Args:
        value: datetime, date or epoch seconds

    Returns:
        int seconds for datetimes and dates, otherwise ``value``
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        millis = (value - _EPOCH) // timedelta(milliseconds=1)
        return millis // 1000
    if isinstance(value, date):
        return to_unix_seconds(datetime(value.year, value.month, value.day, tzinfo=timezone.utc))
    return value


def build_query_params(
    filters: Optional[Union[OrderRetrievalFilters, Mapping[str, Any]]],
) -> Optional[Dict[str, Any]]:
    """
    Build the query string parameters for ``GET /orders``.

    A new dict is returned on every call; ``filters`` is never modified.
    Plain mappings may use the API's camelCase names or the attribute names
    of OrderRetrievalFilters (``pos_from``, ``from_``); the latter are
    translated. Other keys are sent as given.

    Args:
        filters: Filter model, mapping of filter names, or None

    Returns:
        Query parameters, or None when no filters were given
    """
    if filters is None:
        return None

    if isinstance(filters, OrderRetrievalFilters):
        raw = filters.model_dump(by_alias=True, exclude_none=True)
    else:
        raw = {_WIRE_NAMES.get(key, key): value for key, value in filters.items() if value is not None}

    params: Dict[str, Any] = {}
    for key, value in raw.items():
        if key in DATE_FILTER_FIELDS:
            value = to_unix_seconds(value)
        params[key] = value
    return params
