"""
Solana JSON-RPC client used as the crawler's gateway.

Any object exposing the two coroutines below can stand in for `SolanaClient`:

    get_signatures_for_address(address, before=None, until=None, limit=None, commitment=None) -> List[Dict]
    get_transaction(signature, encoding="jsonParsed", commitment=None) -> Optional[Dict]
"""
import asyncio
import logging
import time
import uuid
from typing import Any, Dict, List, Optional

import aiohttp

from .config import DEFAULT_COMMITMENT, DEFAULT_TIMEOUT, RPC_URL
from .errors import (
    MethodNotSupportedError,
    RateLimitError,
    RetryableError,
    TransportError,
)

logger = logging.getLogger(__name__)


class SolanaClient:
    """
    Minimal asynchronous Solana RPC client.

    Transient failures (timeouts, connection errors, HTTP 5xx/429, node
    internal errors) surface as RetryableError so callers can apply their own
    retry policy; everything else is a TransportError.
    """

    def __init__(
        self,
        endpoint: str = RPC_URL,
        timeout: float = DEFAULT_TIMEOUT,
        connector_args: Optional[Dict[str, Any]] = None
    ):
        """Initialize the Solana RPC client"""
        self.endpoint = endpoint
        self.timeout = timeout
        self._connector_args = connector_args or {}
        self._session: Optional[aiohttp.ClientSession] = None
        self._latencies: List[float] = []
        self._max_latencies = 100

        logger.debug(f"Initialized SolanaClient for endpoint: {endpoint}")

    async def connect(self) -> None:
        """Open the HTTP session if needed"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=self.timeout,
                    connect=min(5.0, self.timeout / 2),
                ),
                connector=aiohttp.TCPConnector(**self._connector_args),
            )

    async def close(self) -> None:
        """Close the HTTP session"""
        if self._session is not None:
            try:
                await self._session.close()
                logger.debug(f"Closed client for {self.endpoint}")
            finally:
                self._session = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _record_latency(self, latency: float):
        self._latencies.append(latency)
        if len(self._latencies) > self._max_latencies:
            self._latencies.pop(0)

    @property
    def average_latency(self) -> float:
        if not self._latencies:
            return 0.0
        return sum(self._latencies) / len(self._latencies)

    async def _make_rpc_call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Make an RPC call to the Solana node.

        Args:
            method: The RPC method to call
            params: The parameters to pass to the method

        Returns:
            The `result` member of the response

        Raises:
            RetryableError: If the call failed in a way worth retrying
            TransportError: If the call failed permanently
        """
        payload = {
            "jsonrpc": "2.0",
            "id": str(uuid.uuid4()),
            "method": method,
            "params": params or []
        }

        await self.connect()
        start_time = time.time()

        try:
            async with asyncio.timeout(self.timeout):
                async with self._session.post(self.endpoint, json=payload) as response:
                    self._record_latency(time.time() - start_time)

                    if response.status == 429:
                        raise RateLimitError(f"HTTP 429 for {method}", target=self.endpoint)
                    if response.status >= 500:
                        raise RetryableError(f"HTTP error {response.status} for {method}", target=self.endpoint)
                    if response.status >= 400:
                        raise TransportError(f"HTTP error {response.status} for {method}", target=self.endpoint)

                    try:
                        result = await response.json(content_type=None)
                    except ValueError as e:
                        content_type = response.headers.get('Content-Type', 'unknown')
                        raise RetryableError(
                            f"Failed to parse JSON response for {method}. Content-Type: {content_type}",
                            target=self.endpoint,
                            cause=str(e)
                        )
        except asyncio.TimeoutError:
            elapsed = time.time() - start_time
            logger.debug(f"Timeout after {elapsed:.2f}s for {method} on {self.endpoint}")
            raise RetryableError(f"Timeout after {elapsed:.2f}s for {method}", target=self.endpoint)
        except aiohttp.ClientError as e:
            logger.debug(f"Client error in {method}: {str(e)}")
            raise RetryableError(f"Connection error in {method}", target=self.endpoint, cause=str(e))

        if not isinstance(result, dict):
            raise TransportError(f"Unexpected response type for {method}: {type(result).__name__}", target=self.endpoint)
        if "error" in result:
            self._raise_rpc_error(method, result["error"])

        return result.get("result")

    def _raise_rpc_error(self, method: str, error: Any) -> None:
        """Translate a JSON-RPC error object into an exception"""
        if not isinstance(error, dict):
            raise TransportError(f"RPC error in {method}", target=self.endpoint, cause=str(error))

        error_msg = error.get("message", str(error))
        error_code = error.get("code", 0)
        cause = f"{error_code}: {error_msg}"

        if error_code == -32005 or "rate limit" in error_msg.lower():
            raise RateLimitError(f"Rate limited on {method}", target=self.endpoint, cause=cause)
        if error_code == -32601 or "method not found" in error_msg.lower():
            raise MethodNotSupportedError(f"Method {method} not supported", target=self.endpoint, cause=cause)
        if error_code in (-32603, -32002, -32004, -32007, -32014) or "internal error" in error_msg.lower():
            raise RetryableError(f"Retryable RPC error in {method}", target=self.endpoint, cause=cause)
        raise TransportError(f"RPC error in {method}", target=self.endpoint, cause=cause)

    async def get_signatures_for_address(
        self,
        address: str,
        before: Optional[str] = None,
        until: Optional[str] = None,
        limit: Optional[int] = None,
        commitment: Optional[str] = DEFAULT_COMMITMENT
    ) -> List[Dict[str, Any]]:
        """Get signatures for address, newest first"""
        config = {}
        if before:
            config["before"] = before
        if until:
            config["until"] = until
        if limit:
            config["limit"] = limit
        if commitment:
            config["commitment"] = commitment

        params = [address, config] if config else [address]
        try:
            result = await self._make_rpc_call("getSignaturesForAddress", params)
        except TransportError as e:
            e.target = address
            raise
        return result or []

    async def get_transaction(
        self,
        signature: str,
        encoding: str = "jsonParsed",
        commitment: Optional[str] = DEFAULT_COMMITMENT,
        max_supported_transaction_version: int = 0
    ) -> Optional[Dict[str, Any]]:
        """Get transaction details by signature, or None if the node has no record of it"""
        options = {
            "encoding": encoding,
            "maxSupportedTransactionVersion": max_supported_transaction_version
        }
        if commitment:
            options["commitment"] = commitment

        try:
            return await self._make_rpc_call("getTransaction", [signature, options])
        except TransportError as e:
            e.target = signature
            raise
