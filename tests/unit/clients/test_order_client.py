"""Unit tests for OrderClient request building."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from doshii.clients.order_client import LOCATION_HEADER, OrderClient
from doshii.domain.models.order import OrderRetrievalFilters, OrderStatus
from doshii.utils.error_handler import DoshiiAPIException

LOCATION_ID = "xJ9ZpR4V"
ORDER_ID = "12345"


@pytest.fixture
def request_maker():
    return AsyncMock(return_value={"ok": True})


@pytest.fixture
def client(request_maker):
    return OrderClient(request_maker)


def sent_request(request_maker):
    """Return the single descriptor handed to the executor."""
    request_maker.assert_awaited_once()
    return request_maker.await_args.args[0]


ALL_OPERATIONS = [
    ("create_order", (LOCATION_ID, {"table": "5"}), "POST", "/orders"),
    ("get", (LOCATION_ID,), "GET", "/orders"),
    ("get", (LOCATION_ID, ORDER_ID), "GET", f"/orders/{ORDER_ID}"),
    ("update", (LOCATION_ID, ORDER_ID, {"status": "accepted"}), "PUT", f"/orders/{ORDER_ID}"),
    ("update_delivery", (LOCATION_ID, ORDER_ID, {"status": "delivered"}), "PUT", f"/orders/{ORDER_ID}/delivery"),
    ("get_logs", (LOCATION_ID, ORDER_ID), "GET", f"/orders/{ORDER_ID}/logs"),
    ("add_items", (LOCATION_ID, ORDER_ID, {"items": [{"name": "Latte"}]}), "POST", f"/orders/{ORDER_ID}/items"),
    ("remove_items", (LOCATION_ID, ORDER_ID, {"itemIds": ["a1"]}), "DELETE", f"/orders/{ORDER_ID}/items"),
    ("preprocess", (LOCATION_ID, {"items": []}), "POST", "/orders/preprocess"),
    (
        "create_transaction",
        (LOCATION_ID, ORDER_ID, {"amount": 1000}),
        "POST",
        f"/orders/{ORDER_ID}/transactions",
    ),
    ("get_transactions", (LOCATION_ID, ORDER_ID), "GET", f"/orders/{ORDER_ID}/transactions"),
]


class TestRequestShape:
    """Every operation maps onto one request with the location header."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation, args, method, url", ALL_OPERATIONS)
    async def test_operation_builds_expected_request(self, client, request_maker, operation, args, method, url):
        await getattr(client, operation)(*args)

        request = sent_request(request_maker)
        assert request["method"] == method
        assert request["url"] == url
        assert request["headers"] == {LOCATION_HEADER: LOCATION_ID}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation, args, method, url", ALL_OPERATIONS)
    async def test_operation_forwards_body_unchanged(self, client, request_maker, operation, args, method, url):
        await getattr(client, operation)(*args)

        request = sent_request(request_maker)
        body = args[-1] if isinstance(args[-1], dict) else None
        if body is None:
            assert "data" not in request
        else:
            assert request["data"] is body

    @pytest.mark.asyncio
    async def test_location_header_is_verbatim(self, client, request_maker):
        location_id = "  Loc/With Spaces?  "

        await client.get_logs(location_id, ORDER_ID)

        assert sent_request(request_maker)["headers"][LOCATION_HEADER] == location_id


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_returns_executor_result_as_is(self, client, request_maker):
        created = {"id": "99", "status": "pending"}
        request_maker.return_value = created

        result = await client.create_order(LOCATION_ID, {"table": "5"})

        assert result is created
        request = sent_request(request_maker)
        assert request == {
            "method": "POST",
            "url": "/orders",
            "headers": {LOCATION_HEADER: LOCATION_ID},
            "data": {"table": "5"},
        }


class TestGet:
    """Single order retrieval and listing."""

    @pytest.mark.asyncio
    async def test_order_id_ignores_filters(self, client, request_maker):
        filters = {"status": ["pending"], "from": datetime(2021, 1, 1, tzinfo=timezone.utc)}

        await client.get(LOCATION_ID, ORDER_ID, filters)

        request = sent_request(request_maker)
        assert request["method"] == "GET"
        assert request["url"] == f"/orders/{ORDER_ID}"
        assert "params" not in request

    @pytest.mark.asyncio
    async def test_list_without_filters_has_no_params(self, client, request_maker):
        await client.get(LOCATION_ID)

        request = sent_request(request_maker)
        assert request["url"] == "/orders"
        assert request["params"] is None

    @pytest.mark.asyncio
    async def test_empty_order_id_lists_orders(self, client, request_maker):
        await client.get(LOCATION_ID, "", {"limit": 10})

        request = sent_request(request_maker)
        assert request["url"] == "/orders"
        assert request["params"] == {"limit": 10}

    @pytest.mark.asyncio
    async def test_date_filters_converted_to_seconds(self, client, request_maker):
        filters = {
            "from": datetime(2021, 1, 1, tzinfo=timezone.utc),
            "to": datetime(2021, 1, 2, tzinfo=timezone.utc),
        }

        await client.get(LOCATION_ID, filters=filters)

        assert sent_request(request_maker)["params"] == {"from": 1609459200, "to": 1609545600}

    @pytest.mark.asyncio
    async def test_all_date_filters_converted_other_fields_untouched(self, client, request_maker):
        moment = datetime(2021, 1, 1, 0, 0, 0, 999000, tzinfo=timezone.utc)
        filters = OrderRetrievalFilters(
            status=[OrderStatus.PENDING, "accepted"],
            pos_ref="POS-1",
            external_order_ref="EXT-1",
            from_=moment,
            to=moment,
            updated_from=moment,
            updated_to=moment,
            pos_from=moment,
            pos_to=moment,
            sort="asc",
            updated_sort="desc",
            pos_sort="asc",
            offset=0,
            limit=100,
        )

        await client.get(LOCATION_ID, filters=filters)

        assert sent_request(request_maker)["params"] == {
            "status": ["pending", "accepted"],
            "posRef": "POS-1",
            "externalOrderRef": "EXT-1",
            "from": 1609459200,
            "to": 1609459200,
            "sort": "asc",
            "updatedFrom": 1609459200,
            "updatedTo": 1609459200,
            "updatedSort": "desc",
            "posFrom": 1609459200,
            "posTo": 1609459200,
            "posSort": "asc",
            "offset": 0,
            "limit": 100,
        }

    @pytest.mark.asyncio
    async def test_caller_filters_are_not_mutated(self, client, request_maker):
        start = datetime(2021, 1, 1, tzinfo=timezone.utc)
        filters = {"from": start, "posRef": "POS-1"}

        await client.get(LOCATION_ID, filters=filters)

        assert filters == {"from": start, "posRef": "POS-1"}
        assert sent_request(request_maker)["params"] is not filters

    @pytest.mark.asyncio
    async def test_model_filters_are_not_mutated(self, client, request_maker):
        start = datetime(2021, 1, 1, tzinfo=timezone.utc)
        filters = OrderRetrievalFilters(from_=start)

        await client.get(LOCATION_ID, filters=filters)

        assert filters.from_ == start


class TestFailurePropagation:
    """Executor failures reach the caller unchanged and are never retried."""

    @pytest.mark.asyncio
    async def test_remove_items_propagates_not_found(self, client, request_maker):
        error = DoshiiAPIException("Not Found", api_response_code=404)
        request_maker.side_effect = error

        with pytest.raises(DoshiiAPIException) as exc_info:
            await client.remove_items(LOCATION_ID, ORDER_ID, {"itemIds": ["a1"]})

        assert exc_info.value is error
        request_maker.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation, args, method, url", ALL_OPERATIONS)
    async def test_foreign_errors_are_not_wrapped(self, client, request_maker, operation, args, method, url):
        error = ConnectionResetError("peer went away")
        request_maker.side_effect = error

        with pytest.raises(ConnectionResetError) as exc_info:
            await getattr(client, operation)(*args)

        assert exc_info.value is error
        assert request_maker.await_count == 1


def test_request_maker_is_read_only(request_maker):
    client = OrderClient(request_maker)

    assert client.request_maker is request_maker
    with pytest.raises(AttributeError):
        client.request_maker = AsyncMock()


@pytest.mark.asyncio
async def test_snake_case_mapping_filters_are_sent_as_wire_names(client, request_maker):
    filters = {"updated_to": datetime(2021, 1, 2, tzinfo=timezone.utc), "external_order_ref": "EXT-1"}

    await client.get(LOCATION_ID, filters=filters)

    assert sent_request(request_maker)["params"] == {"updatedTo": 1609545600, "externalOrderRef": "EXT-1"}
