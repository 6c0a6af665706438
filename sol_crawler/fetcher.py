"""
Resolves signatures to transaction records under a bounded admission gate.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from solders.signature import Signature

from .config import DEFAULT_COMMITMENT, FETCH_ATTEMPTS, FETCH_CONCURRENCY, FETCH_RETRY_DELAY
from .errors import DecodeError, RetryableError, TransportError
from .models import Encoding, FetchFailed, TransactionRecord
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Fetched records, signatures given up on and payloads that were not transactions."""
    records: List[TransactionRecord] = field(default_factory=list)
    failures: List[FetchFailed] = field(default_factory=list)
    decode_errors: List[DecodeError] = field(default_factory=list)


class TransactionFetcher:
    """
    Fetches one transaction per signature concurrently.

    At most `concurrency` requests are in flight at once. The slot is held
    only for the duration of a request attempt, not while sleeping between
    retries. Failures are returned as FetchFailed outcomes instead of being
    raised, so one bad signature never aborts the batch.
    """

    def __init__(
        self,
        client,
        concurrency: int = FETCH_CONCURRENCY,
        retry_policy: Optional[RetryPolicy] = None,
        encoding: Encoding = Encoding.DECODED,
        commitment: Optional[str] = DEFAULT_COMMITMENT
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.client = client
        self.concurrency = concurrency
        self.retry_policy = retry_policy or RetryPolicy(attempts=FETCH_ATTEMPTS, delay=FETCH_RETRY_DELAY)
        self.encoding = Encoding(encoding)
        self.commitment = commitment
        self.in_flight = 0
        self.peak_in_flight = 0

    async def fetch_all(self, signatures: Iterable[Union[Signature, str]]) -> FetchResult:
        """
        Fetch every signature's transaction.

        Returns:
            FetchResult with records in no particular order
        """
        gate = asyncio.Semaphore(self.concurrency)
        outcomes = await asyncio.gather(
            *(self._fetch_one(gate, str(signature)) for signature in signatures)
        )

        result = FetchResult()
        for outcome in outcomes:
            if isinstance(outcome, FetchFailed):
                result.failures.append(outcome)
            elif isinstance(outcome, DecodeError):
                result.decode_errors.append(outcome)
            else:
                result.records.append(outcome)

        if result.failures:
            logger.warning(f"Failed to fetch {len(result.failures)} of {len(outcomes)} transactions")
        logger.info(f"Fetched {len(result.records)} transactions")
        return result

    async def _fetch_one(
        self,
        gate: asyncio.Semaphore,
        signature: str
    ) -> Union[TransactionRecord, FetchFailed, DecodeError]:
        try:
            payload = await self.retry_policy.call(self._request, gate, signature)
            return TransactionRecord.from_rpc(signature, payload)
        except DecodeError as e:
            logger.warning(f"Skipping transaction {signature}: {e}")
            return e
        except TransportError as e:
            logger.warning(f"Giving up on transaction {signature}: {e}")
            return FetchFailed(signature=signature, cause=str(e))
        except Exception as e:
            logger.warning(f"Unexpected error fetching transaction {signature}: {e}", exc_info=True)
            return FetchFailed(signature=signature, cause=f"{type(e).__name__}: {e}")

    async def _request(self, gate: asyncio.Semaphore, signature: str) -> Dict[str, Any]:
        async with gate:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                payload = await self.client.get_transaction(
                    signature,
                    encoding=self.encoding.value,
                    commitment=self.commitment,
                )
            finally:
                self.in_flight -= 1

        # Recently finalized transactions can be briefly missing on some nodes
        if payload is None:
            raise RetryableError("Transaction not available", target=signature)
        return payload
