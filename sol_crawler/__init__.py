"""
sol-crawler - extracts labelled accounts from the transaction history of a Solana address
"""

from .aggregator import ResultAggregator
from .config import CrawlerConfig
from .crawler import Crawler
from .errors import (
    AmbiguousMatchError,
    CrawlError,
    DecodeError,
    PubkeyParseError,
    RetryableError,
    RuleMismatch,
    SignatureParseError,
    TransportError,
)
from .extractor import AccountExtractor, ExtractionRule, IxAccount, MultiMatchPolicy
from .fetcher import FetchResult, TransactionFetcher
from .filters import FilterPipeline
from .flattener import flatten_instructions
from .models import (
    CrawlDiagnostics,
    CrawledAccounts,
    Encoding,
    FetchFailed,
    PositionalInstruction,
    StructuredInstruction,
    TransactionRecord,
)
from .paginator import SignaturePaginator
from .rpc import SolanaClient

__version__ = "0.1.0"

__all__ = [
    'AccountExtractor',
    'AmbiguousMatchError',
    'CrawlDiagnostics',
    'CrawlError',
    'CrawledAccounts',
    'Crawler',
    'CrawlerConfig',
    'DecodeError',
    'Encoding',
    'ExtractionRule',
    'FetchFailed',
    'FetchResult',
    'FilterPipeline',
    'IxAccount',
    'MultiMatchPolicy',
    'PositionalInstruction',
    'PubkeyParseError',
    'ResultAggregator',
    'RetryableError',
    'RuleMismatch',
    'SignatureParseError',
    'SignaturePaginator',
    'SolanaClient',
    'StructuredInstruction',
    'TransactionFetcher',
    'TransactionRecord',
    'TransportError',
    'flatten_instructions',
]
