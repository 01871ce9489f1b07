"""
Client for the Doshii orders API.

Each method maps onto one endpoint under ``/orders``. The client only builds
request descriptors; sending them is the job of the executor it is given,
and whatever the executor returns or raises reaches the caller as is.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from doshii.domain.models.order import (
    OrderRetrievalFilters,
    RequestConfig,
    RequestMaker,
    build_query_params,
)

logger = logging.getLogger(__name__)

LOCATION_HEADER = "doshii-location-id"


class OrderClient:
    """
    Create, retrieve and update Orders at a Location.

    Args:
        request_maker: Coroutine function that executes a RequestConfig and
            returns the decoded response
    """

    def __init__(self, request_maker: RequestMaker):
        self._request_maker = request_maker

    @property
    def request_maker(self) -> RequestMaker:
        return self._request_maker

    async def _request(
        self,
        method: str,
        url: str,
        location_id: str,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
        include_params: bool = False,
    ) -> Any:
        request: RequestConfig = {
            "method": method,
            "url": url,
            "headers": {LOCATION_HEADER: location_id},
        }
        if include_params:
            request["params"] = params
        if data is not None:
            request["data"] = data

        logger.debug(f"{method} {url} (location={location_id})")
        return await self._request_maker(request)

    async def create_order(self, location_id: str, order_data: Any) -> Any:
        """
        Create a new Order at a Location.

        Args:
            location_id: Hashed ID of the location
            order_data: Order payload

        Returns:
            The order created
        """
        return await self._request("POST", "/orders", location_id, data=order_data)

    async def get(
        self,
        location_id: str,
        order_id: Optional[str] = None,
        filters: Optional[Union[OrderRetrievalFilters, Mapping[str, Any]]] = None,
    ) -> Any:
        """
        Retrieve one Order, or the Orders at a Location.

        Args:
            location_id: Hashed ID of the location
            order_id: Order to retrieve. When omitted every order at the
                location is listed
            filters: Listing filters as an OrderRetrievalFilters or a mapping
                keyed by wire or attribute names. Ignored when ``order_id`` is given

        Returns:
            The order, or the list of orders
        """
        if order_id:
            return await self._request("GET", f"/orders/{order_id}", location_id)

        return await self._request(
            "GET",
            "/orders",
            location_id,
            params=build_query_params(filters),
            include_params=True,
        )

    async def update(self, location_id: str, order_id: str, data: Any) -> Any:
        """
        Update an Order at a Location.

        Returns:
            The order that was updated
        """
        return await self._request("PUT", f"/orders/{order_id}", location_id, data=data)

    async def update_delivery(self, location_id: str, order_id: str, data: Any) -> Any:
        """
        Update the delivery status of an Order.

        Returns:
            The order that was updated
        """
        return await self._request("PUT", f"/orders/{order_id}/delivery", location_id, data=data)

    async def get_logs(self, location_id: str, order_id: str) -> Any:
        """Retrieve the audit logs of an Order."""
        return await self._request("GET", f"/orders/{order_id}/logs", location_id)

    async def add_items(self, location_id: str, order_id: str, data: Any) -> Any:
        """
        Append a list of Items to an Order.

        Returns:
            The order that was updated
        """
        return await self._request("POST", f"/orders/{order_id}/items", location_id, data=data)

    async def remove_items(self, location_id: str, order_id: str, data: Any) -> Any:
        """
        Remove Items from an Order by their hashed IDs.

        Args:
            location_id: Hashed ID of the location
            order_id: Order to update
            data: Payload carrying the item IDs to remove

        Returns:
            The order that was updated
        """
        return await self._request("DELETE", f"/orders/{order_id}/items", location_id, data=data)

    async def preprocess(self, location_id: str, data: Any) -> Any:
        """
        Pre-check an order with the POS before submitting it.

        Returns:
            The preprocess request that was created
        """
        return await self._request("POST", "/orders/preprocess", location_id, data=data)

    async def create_transaction(self, location_id: str, order_id: str, data: Any) -> Any:
        """
        Create a Transaction against an Order.

        Returns:
            The transaction that was created
        """
        return await self._request("POST", f"/orders/{order_id}/transactions", location_id, data=data)

    async def get_transactions(self, location_id: str, order_id: str) -> Any:
        """Retrieve the Transactions associated with an Order."""
        return await self._request("GET", f"/orders/{order_id}/transactions", location_id)

    def __repr__(self):
        return f"OrderClient(request_maker={self._request_maker!r})"
