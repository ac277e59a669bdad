"""Tests for the Mercado Livre HTTP client."""
import httpx
import pytest

from conftest import BASE_URL, TOKEN, FakeMercadoLivre
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.fetch.tracker import EndpointTracker


@pytest.mark.asyncio
async def test_get_returns_payload_and_records_endpoint():
    """A 2xx JSON response comes back as the payload."""
    fake = FakeMercadoLivre()
    fake.set("/orders/42", {"id": 42, "status": "paid"})
    tracker = EndpointTracker()

    async with fake.client(tracker=tracker) as client:
        payload, error = await client.get(endpoints.ORDER_DETAIL, path_params={"id": 42})

    assert error is None
    assert payload == {"id": 42, "status": "paid"}
    assert endpoints.ORDER_DETAIL in tracker
    assert str(fake.calls[0].url) == f"{BASE_URL}/orders/42"


@pytest.mark.asyncio
async def test_get_sends_bearer_token_and_params():
    """Requests carry the bearer credential and the query string."""
    fake = FakeMercadoLivre()
    fake.set("/orders/search", {"results": []})

    async with fake.client() as client:
        await client.get(
            endpoints.ORDER_SEARCH,
            params={"seller": "222", "sort": "date_desc"},
            headers={"x-format-new": "true"},
        )

    request = fake.calls[0]
    assert request.headers["Authorization"] == f"Bearer {TOKEN}"
    assert request.headers["x-format-new"] == "true"
    assert request.url.params["seller"] == "222"
    assert request.url.params["sort"] == "date_desc"


@pytest.mark.asyncio
async def test_get_non_2xx_returns_upstream_error():
    """HTTP errors are returned, never raised."""
    fake = FakeMercadoLivre()
    fake.fail("/payments/1", status=500, message="boom")

    async with fake.client() as client:
        payload, error = await client.get(endpoints.PAYMENT_DETAIL, path_params={"id": 1})

    assert payload is None
    assert error.status == 500
    assert error.endpoint == endpoints.PAYMENT_DETAIL
    assert "boom" in str(error)


@pytest.mark.asyncio
async def test_get_malformed_body_returns_upstream_error():
    """A 200 with a body that is not JSON is a failure."""
    fake = FakeMercadoLivre()
    fake.set("/items/MLB1", "<html>oops</html>")

    async with fake.client() as client:
        payload, error = await client.get(endpoints.ITEM_DETAIL, path_params={"id": "MLB1"})

    assert payload is None
    assert error.status == 200
    assert "malformed" in error.message


@pytest.mark.asyncio
async def test_get_network_error_returns_upstream_error():
    """Transport failures become an UpstreamError without a status."""
    fake = FakeMercadoLivre()
    fake.network_errors.add("/shipments/9")

    async with fake.client() as client:
        payload, error = await client.get(endpoints.SHIPMENT_DETAIL, path_params={"id": 9})

    assert payload is None
    assert error.status is None
    assert "network error" in error.message


@pytest.mark.asyncio
async def test_get_timeout_returns_upstream_error():
    """Timeouts are reported, not raised."""
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    client = MLClient(TOKEN, base_url=BASE_URL, transport=httpx.MockTransport(handler), max_retries=0)
    async with client:
        payload, error = await client.get(endpoints.ORDER_MESSAGES, path_params={"id": 1})

    assert payload is None
    assert "timeout" in error.message


@pytest.mark.asyncio
async def test_error_message_never_contains_token():
    """Upstream bodies echoing the credential are redacted."""
    fake = FakeMercadoLivre()
    fake.fail("/users/1", status=401, message=f"invalid token Bearer {TOKEN}")

    async with fake.client() as client:
        _, error = await client.get(endpoints.BUYER_DETAIL, path_params={"id": 1})

    assert TOKEN not in str(error)
    assert "[REDACTED]" in str(error)


@pytest.mark.asyncio
async def test_single_attempt_by_default():
    """Without a retry budget a 503 is returned after one call."""
    fake = FakeMercadoLivre()
    fake.fail("/orders/1", status=503)

    async with fake.client() as client:
        _, error = await client.get(endpoints.ORDER_DETAIL, path_params={"id": 1})

    assert error.status == 503
    assert len(fake.calls) == 1


@pytest.mark.asyncio
async def test_retry_budget_recovers_from_transient_status():
    """With max_retries=1 a 503 followed by a 200 succeeds."""
    responses = [httpx.Response(503, json={}), httpx.Response(200, json={"id": 1})]
    calls = []

    def handler(request):
        calls.append(request)
        return responses[len(calls) - 1]

    client = MLClient(TOKEN, base_url=BASE_URL, transport=httpx.MockTransport(handler), max_retries=1)
    async with client:
        payload, error = await client.get(endpoints.ORDER_DETAIL, path_params={"id": 1})

    assert error is None
    assert payload == {"id": 1}
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_bind_shares_pool_but_not_tracker():
    """A bound client records into its own tracker and the parent."""
    fake = FakeMercadoLivre()
    fake.set("/orders/1/feedback", [])
    batch = EndpointTracker()
    order = batch.child()

    async with fake.client(tracker=batch) as client:
        scoped = client.bind(order)
        await scoped.get(endpoints.ORDER_FEEDBACK, path_params={"id": 1})
        assert scoped.client is client.client

    assert order.snapshot() == [endpoints.ORDER_FEEDBACK]
    assert batch.snapshot() == [endpoints.ORDER_FEEDBACK]
