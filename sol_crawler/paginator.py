"""
Walks the complete signature history of an address, newest to oldest.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from solders.signature import Signature

from .config import DEFAULT_COMMITMENT, SIGNATURE_PAGE_SIZE
from .errors import SignatureParseError, TransportError
from .models import SignatureInfo
from .retry import EmptyPagePolicy, RetryPolicy

logger = logging.getLogger(__name__)


def parse_signature(value: Any) -> Signature:
    """Parse a base58 signature string, raising SignatureParseError on failure."""
    try:
        return Signature.from_string(value)
    except (ValueError, TypeError) as e:
        raise SignatureParseError(f"Failed to parse signature {value!r}: {e}") from e


class SignaturePaginator:
    """
    Cursor-based walk over getSignaturesForAddress.

    A full page moves the `before` cursor to its oldest signature, a short
    page is the last one, and an empty page is re-requested at the same
    cursor until `empty_page_policy` runs out, since nodes occasionally
    return an empty page before the true end of history.
    """

    def __init__(
        self,
        client,
        page_size: int = SIGNATURE_PAGE_SIZE,
        commitment: Optional[str] = DEFAULT_COMMITMENT,
        empty_page_policy: Optional[EmptyPagePolicy] = None,
        transport_policy: Optional[RetryPolicy] = None
    ):
        self.client = client
        self.page_size = page_size
        self.commitment = commitment
        self.empty_page_policy = empty_page_policy or EmptyPagePolicy()
        self.transport_policy = transport_policy or RetryPolicy(attempts=3, delay=1.0)

    async def paginate(self, address: str, until: Optional[str] = None) -> List[Signature]:
        """
        Collect every signature for `address`.

        Args:
            address: Base58 account address
            until: Optional signature to stop at (exclusive)

        Returns:
            Signatures in discovery order (newest first)

        Raises:
            TransportError: If listing fails after the transport retry budget
            SignatureParseError: If the gateway returns a malformed signature
        """
        signatures: List[Signature] = []
        seen = set()
        before: Optional[str] = None
        empty_retries = 0
        pages = 0

        while True:
            page = await self._list_page(address, before, until)

            if not page:
                if empty_retries >= self.empty_page_policy.max_retries:
                    logger.debug(f"Giving up after {empty_retries} empty page retries at cursor {before}")
                    break
                empty_retries += 1
                logger.debug(f"Empty signature page at cursor {before}, retry {empty_retries}/{self.empty_page_policy.max_retries}")
                if self.empty_page_policy.delay:
                    await asyncio.sleep(self.empty_page_policy.delay)
                continue

            pages += 1
            parsed = [parse_signature(SignatureInfo.from_rpc(entry).signature) for entry in page]
            for signature in parsed:
                key = str(signature)
                if key in seen:
                    logger.warning(f"Duplicate signature {key} returned for {address}, skipping")
                    continue
                seen.add(key)
                signatures.append(signature)

            if len(page) < self.page_size:
                break

            before = str(parsed[-1])
            empty_retries = 0
            logger.debug(f"Fetched page {pages} for {address}, {len(signatures)} signatures so far")

        logger.info(f"Found {len(signatures)} signatures for {address} across {pages} pages")
        return signatures

    async def _list_page(self, address: str, before: Optional[str], until: Optional[str]) -> List[Dict[str, Any]]:
        try:
            page = await self.transport_policy.call(
                self.client.get_signatures_for_address,
                address,
                before=before,
                until=until,
                limit=self.page_size,
                commitment=self.commitment,
            )
        except TransportError as e:
            e.target = address
            logger.error(f"Listing signatures for {address} failed: {e}")
            raise
        return page or []
