"""
Crawl engine: signatures -> transactions -> filters -> instructions -> accounts.
"""
import asyncio
import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from solders.pubkey import Pubkey

from .aggregator import ResultAggregator
from .config import CrawlerConfig
from .errors import AmbiguousMatchError, DecodeError, PubkeyParseError
from .extractor import AccountExtractor, ExtractionRule, MultiMatchPolicy
from .fetcher import TransactionFetcher
from .filters import FilterPipeline, InstructionFilter, TxFilter
from .flattener import flatten_instructions
from .models import AmbiguousMatch, CrawlDiagnostics, CrawledAccounts, Encoding, TransactionRecord
from .paginator import SignaturePaginator
from .retry import EmptyPagePolicy, RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class _TxOutcome:
    accepted: bool = False
    matched: int = 0
    decode_error: Optional[DecodeError] = None
    ambiguous: Optional[AmbiguousMatch] = None


def parse_pubkey(address: Union[str, Pubkey]) -> Pubkey:
    """Parse a base58 address, raising PubkeyParseError on failure."""
    if isinstance(address, Pubkey):
        return address
    try:
        return Pubkey.from_string(address)
    except (ValueError, TypeError) as e:
        raise PubkeyParseError(f"Failed to parse {address!r} into a Pubkey: {e}") from e


class Crawler:
    """
    Crawls the full history of one address and extracts labelled accounts.

    Example:
        crawler = Crawler(client, candy_machine_id)
        crawler.add_tx_filter(SuccessfulTxFilter()).add_ix_filter(IxProgramIdFilter(CMV2_PROGRAM_ID))
        crawler.add_rule(ExtractionRule.at_index("mint", 5))
        accounts = await crawler.run()
    """

    def __init__(
        self,
        client,
        address: Union[str, Pubkey],
        config: Optional[CrawlerConfig] = None,
        until: Optional[str] = None
    ):
        """
        Args:
            client: Gateway exposing get_signatures_for_address and get_transaction
            address: Account whose history is crawled
            config: Tunables, defaults come from the environment
            until: Optional signature at which the history walk stops
        """
        self.client = client
        self.address = str(parse_pubkey(address))
        self.config = config or CrawlerConfig()
        self.until = until
        self.encoding = Encoding.DECODED
        self.multi_match_policy = MultiMatchPolicy.REPORT
        self.pipeline = FilterPipeline()
        self.extractor = AccountExtractor()
        self.diagnostics = CrawlDiagnostics()

    def add_tx_filter(self, tx_filter: TxFilter) -> "Crawler":
        self.pipeline.add_tx_filter(tx_filter)
        return self

    def add_ix_filter(self, ix_filter: InstructionFilter) -> "Crawler":
        self.pipeline.add_ix_filter(ix_filter)
        return self

    def add_alternative_ix_filter(self, ix_filter: InstructionFilter) -> "Crawler":
        self.pipeline.add_alternative_ix_filter(ix_filter)
        return self

    def add_rule(self, rule: ExtractionRule) -> "Crawler":
        self.extractor.add_rule(rule)
        return self

    def add_account_index(self, rule: ExtractionRule) -> "Crawler":
        return self.add_rule(rule)

    def account_indices(self, rules: Sequence[ExtractionRule]) -> "Crawler":
        """Replace every extraction rule."""
        self.extractor.rules = list(rules)
        return self

    def with_concurrency(self, limit: int) -> "Crawler":
        self.config = dataclasses.replace(self.config, fetch_concurrency=limit)
        return self

    def with_multi_match_policy(self, policy: MultiMatchPolicy) -> "Crawler":
        self.multi_match_policy = MultiMatchPolicy(policy)
        return self

    def with_encoding(self, encoding: Encoding) -> "Crawler":
        self.encoding = Encoding(encoding)
        return self

    def _paginator(self) -> SignaturePaginator:
        return SignaturePaginator(
            self.client,
            page_size=self.config.page_size,
            commitment=self.config.commitment,
            empty_page_policy=EmptyPagePolicy(
                max_retries=self.config.max_empty_page_retries,
                delay=self.config.empty_page_retry_delay,
            ),
            transport_policy=RetryPolicy(
                attempts=self.config.list_attempts,
                delay=self.config.list_retry_delay,
            ),
        )

    def _fetcher(self) -> TransactionFetcher:
        return TransactionFetcher(
            self.client,
            concurrency=self.config.fetch_concurrency,
            retry_policy=RetryPolicy(
                attempts=self.config.fetch_attempts,
                delay=self.config.fetch_retry_delay,
            ),
            encoding=self.encoding,
            commitment=self.config.commitment,
        )

    async def run(self) -> CrawledAccounts:
        """
        Run one full crawl.

        Returns:
            Mapping of rule label to the set of addresses found

        Raises:
            TransportError: If listing signatures fails
            SignatureParseError: If the gateway returns a malformed signature
            AmbiguousMatchError: Under MultiMatchPolicy.REJECT, on the first ambiguous transaction
        """
        self.diagnostics = diagnostics = CrawlDiagnostics()

        logger.info(f"Getting all signatures for {self.address}")
        signatures = await self._paginator().paginate(self.address, until=self.until)
        diagnostics.signatures_found = len(signatures)

        logger.info(f"Getting transactions from {len(signatures)} signatures")
        fetched = await self._fetcher().fetch_all(signatures)
        diagnostics.transactions_fetched = len(fetched.records)
        diagnostics.fetch_failures = fetched.failures
        diagnostics.decode_errors.extend(fetched.decode_errors)

        logger.info("Filtering transactions and extracting accounts")
        aggregator = ResultAggregator(self.config.aggregator_shards)
        loop = asyncio.get_running_loop()
        outcomes = await loop.run_in_executor(None, self._process_all, fetched.records, aggregator)

        for outcome in outcomes:
            if outcome.accepted:
                diagnostics.transactions_accepted += 1
            diagnostics.instructions_matched += outcome.matched
            if outcome.decode_error is not None:
                diagnostics.decode_errors.append(outcome.decode_error)
            if outcome.ambiguous is not None:
                diagnostics.ambiguous_matches.append(outcome.ambiguous)

        accounts = aggregator.freeze()
        # only SolanaClient tracks latency, other gateways leave it unset
        diagnostics.average_latency = getattr(self.client, 'average_latency', None)
        diagnostics.log_summary(logger)
        return accounts

    def _process_all(self, records: List[TransactionRecord], aggregator: ResultAggregator) -> List[_TxOutcome]:
        if not records:
            return []
        with ThreadPoolExecutor(max_workers=self.config.extract_workers) as pool:
            return list(pool.map(lambda tx: self._process_transaction(tx, aggregator), records))

    def _process_transaction(self, tx: TransactionRecord, aggregator: ResultAggregator) -> _TxOutcome:
        try:
            if not self.pipeline.accepts_transaction(tx):
                return _TxOutcome()
            instructions = flatten_instructions(tx)
        except DecodeError as e:
            if e.signature is None:
                e.signature = tx.signature
            logger.warning(f"Skipping transaction {tx.signature}: {e}")
            return _TxOutcome(decode_error=e)

        matched = self.pipeline.select_instructions(instructions)
        outcome = _TxOutcome(accepted=True, matched=len(matched))

        if len(matched) > 1:
            outcome.ambiguous = self._check_multiple_matches(tx.signature, len(matched))

        aggregator.add_all(self.extractor.extract_all(matched))
        return outcome

    def _check_multiple_matches(self, signature: str, count: int) -> Optional[AmbiguousMatch]:
        if self.multi_match_policy is MultiMatchPolicy.REJECT:
            logger.error(f"Transaction {signature} has {count} qualifying instructions")
            raise AmbiguousMatchError(signature, count)
        if self.multi_match_policy is MultiMatchPolicy.REPORT:
            logger.warning(f"Transaction {signature} has {count} qualifying instructions")
            return AmbiguousMatch(signature=signature, count=count)
        return None
