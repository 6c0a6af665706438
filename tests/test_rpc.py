"""
Tests for the Solana RPC gateway client
"""

import json
from unittest.mock import AsyncMock

import aiohttp
import pytest

from sol_crawler.errors import (
    MethodNotSupportedError,
    RateLimitError,
    RetryableError,
    TransportError,
)
from sol_crawler.rpc import SolanaClient

ENDPOINT = "http://localhost:8899"


class FakeResponse:
    def __init__(self, status=200, body=None, error=None):
        self.status = status
        self.body = body
        self.error = error
        self.headers = {"Content-Type": "application/json"}

    async def json(self, content_type=None):
        if self.error is not None:
            raise self.error
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    closed = False

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, json=None):
        self.requests.append(json)
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


def client_with(session):
    client = SolanaClient(ENDPOINT, timeout=5.0)
    client._session = session
    return client


@pytest.mark.asyncio
async def test_get_signatures_for_address_params():
    client = SolanaClient(ENDPOINT)
    client._make_rpc_call = AsyncMock(return_value=[{"signature": "abc"}])

    result = await client.get_signatures_for_address("Addr", before="Sig1", limit=1000, commitment="finalized")

    assert result == [{"signature": "abc"}]
    client._make_rpc_call.assert_awaited_once_with(
        "getSignaturesForAddress",
        ["Addr", {"before": "Sig1", "limit": 1000, "commitment": "finalized"}],
    )


@pytest.mark.asyncio
async def test_get_signatures_for_address_null_result():
    client = SolanaClient(ENDPOINT)
    client._make_rpc_call = AsyncMock(return_value=None)

    assert await client.get_signatures_for_address("Addr") == []


@pytest.mark.asyncio
async def test_get_transaction_params():
    client = SolanaClient(ENDPOINT)
    client._make_rpc_call = AsyncMock(return_value={"slot": 1})

    result = await client.get_transaction("Sig1", encoding="json", commitment="confirmed")

    assert result == {"slot": 1}
    client._make_rpc_call.assert_awaited_once_with(
        "getTransaction",
        ["Sig1", {"encoding": "json", "maxSupportedTransactionVersion": 0, "commitment": "confirmed"}],
    )


@pytest.mark.asyncio
async def test_errors_are_tagged_with_target():
    client = SolanaClient(ENDPOINT)
    client._make_rpc_call = AsyncMock(side_effect=RetryableError("Timeout", target=ENDPOINT))

    with pytest.raises(RetryableError) as exc_info:
        await client.get_transaction("Sig1")
    assert exc_info.value.target == "Sig1"

    with pytest.raises(RetryableError) as exc_info:
        await client.get_signatures_for_address("Addr")
    assert exc_info.value.target == "Addr"


@pytest.mark.asyncio
async def test_make_rpc_call_returns_result():
    session = FakeSession(FakeResponse(body={"jsonrpc": "2.0", "id": "1", "result": {"value": 42}}))
    client = client_with(session)

    assert await client._make_rpc_call("getSlot") == {"value": 42}
    assert session.requests[0]["method"] == "getSlot"
    assert session.requests[0]["params"] == []
    assert client.average_latency >= 0.0


@pytest.mark.asyncio
@pytest.mark.parametrize("status,expected", [
    (429, RateLimitError),
    (503, RetryableError),
    (404, TransportError),
])
async def test_http_status_mapping(status, expected):
    client = client_with(FakeSession(FakeResponse(status=status)))

    with pytest.raises(expected) as exc_info:
        await client._make_rpc_call("getTransaction", ["Sig1"])

    if expected is TransportError:
        assert not isinstance(exc_info.value, RetryableError)


@pytest.mark.asyncio
async def test_invalid_json_is_retryable():
    error = json.JSONDecodeError("Expecting value", "<html>", 0)
    client = client_with(FakeSession(FakeResponse(error=error)))

    with pytest.raises(RetryableError):
        await client._make_rpc_call("getTransaction")


@pytest.mark.asyncio
async def test_connection_error_is_retryable():
    client = client_with(FakeSession(error=aiohttp.ClientConnectionError("refused")))

    with pytest.raises(RetryableError) as exc_info:
        await client._make_rpc_call("getTransaction")
    assert "refused" in str(exc_info.value)


@pytest.mark.asyncio
async def test_non_object_response_is_transport_error():
    client = client_with(FakeSession(FakeResponse(body=["unexpected"])))

    with pytest.raises(TransportError):
        await client._make_rpc_call("getTransaction")


@pytest.mark.parametrize("error,expected", [
    ({"code": -32005, "message": "Node is behind"}, RateLimitError),
    ({"code": -32000, "message": "Rate limit exceeded"}, RateLimitError),
    ({"code": -32601, "message": "Method not found"}, MethodNotSupportedError),
    ({"code": -32603, "message": "Internal error"}, RetryableError),
    ({"code": -32004, "message": "Block not available for slot"}, RetryableError),
    ({"code": -32602, "message": "Invalid param: WrongSize"}, TransportError),
    ("plain string error", TransportError),
])
def test_rpc_error_mapping(error, expected):
    client = SolanaClient(ENDPOINT)

    with pytest.raises(expected) as exc_info:
        client._raise_rpc_error("getTransaction", error)

    assert type(exc_info.value) is expected


@pytest.mark.asyncio
async def test_rpc_error_in_body():
    body = {"jsonrpc": "2.0", "id": "1", "error": {"code": -32601, "message": "Method not found"}}
    client = client_with(FakeSession(FakeResponse(body=body)))

    with pytest.raises(MethodNotSupportedError):
        await client._make_rpc_call("getSignaturesForAddress", ["Addr"])


@pytest.mark.asyncio
async def test_context_manager_closes_session():
    session = FakeSession()
    client = client_with(session)

    async with client as entered:
        assert entered is client

    assert session.closed is True
    assert client._session is None
