"""
Configuration module for sol-crawler.
Contains environment variables and crawl defaults.
"""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# RPC Configuration
RPC_URL = os.getenv('SOL_CRAWLER_RPC_URL', 'https://api.mainnet-beta.solana.com')
DEFAULT_TIMEOUT = float(os.getenv('SOL_CRAWLER_TIMEOUT', '30.0'))  # seconds
DEFAULT_COMMITMENT = os.getenv('SOL_CRAWLER_COMMITMENT', 'finalized')

# Pagination
SIGNATURE_PAGE_SIZE = 1000  # getSignaturesForAddress hard limit
MAX_EMPTY_PAGE_RETRIES = int(os.getenv('SOL_CRAWLER_EMPTY_PAGE_RETRIES', '10'))
EMPTY_PAGE_RETRY_DELAY = float(os.getenv('SOL_CRAWLER_EMPTY_PAGE_DELAY', '0.0'))
LIST_ATTEMPTS = int(os.getenv('SOL_CRAWLER_LIST_ATTEMPTS', '3'))
LIST_RETRY_DELAY = float(os.getenv('SOL_CRAWLER_LIST_RETRY_DELAY', '1.0'))

# Transaction fetching
FETCH_CONCURRENCY = int(os.getenv('SOL_CRAWLER_FETCH_CONCURRENCY', '1000'))
FETCH_ATTEMPTS = int(os.getenv('SOL_CRAWLER_FETCH_ATTEMPTS', '10'))
FETCH_RETRY_DELAY = float(os.getenv('SOL_CRAWLER_FETCH_RETRY_DELAY', '0.5'))

# Extraction
EXTRACT_WORKERS = int(os.getenv('SOL_CRAWLER_EXTRACT_WORKERS', str(min(32, (os.cpu_count() or 1) + 4))))
AGGREGATOR_SHARDS = 16


@dataclass
class CrawlerConfig:
    """
    Tunables for one crawl.

    Pagination gap retries and fetch retries are separate policies so either
    can be tuned without touching the other.
    """
    commitment: str = DEFAULT_COMMITMENT
    page_size: int = SIGNATURE_PAGE_SIZE
    max_empty_page_retries: int = MAX_EMPTY_PAGE_RETRIES
    empty_page_retry_delay: float = EMPTY_PAGE_RETRY_DELAY
    list_attempts: int = LIST_ATTEMPTS
    list_retry_delay: float = LIST_RETRY_DELAY
    fetch_concurrency: int = FETCH_CONCURRENCY
    fetch_attempts: int = FETCH_ATTEMPTS
    fetch_retry_delay: float = FETCH_RETRY_DELAY
    extract_workers: int = EXTRACT_WORKERS
    aggregator_shards: int = AGGREGATOR_SHARDS

    def __post_init__(self):
        if self.fetch_concurrency < 1:
            raise ValueError("fetch_concurrency must be at least 1")
        if not 1 <= self.page_size <= SIGNATURE_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {SIGNATURE_PAGE_SIZE}")
        if self.extract_workers < 1 or self.aggregator_shards < 1:
            raise ValueError("extract_workers and aggregator_shards must be at least 1")
        if self.fetch_attempts < 1 or self.list_attempts < 1:
            raise ValueError("retry attempts must be at least 1")

    @classmethod
    def from_env(cls) -> "CrawlerConfig":
        """Build a config from the current environment, re-reading variables."""
        load_dotenv()
        return cls(
            commitment=os.getenv('SOL_CRAWLER_COMMITMENT', DEFAULT_COMMITMENT),
            max_empty_page_retries=int(os.getenv('SOL_CRAWLER_EMPTY_PAGE_RETRIES', MAX_EMPTY_PAGE_RETRIES)),
            empty_page_retry_delay=float(os.getenv('SOL_CRAWLER_EMPTY_PAGE_DELAY', EMPTY_PAGE_RETRY_DELAY)),
            list_attempts=int(os.getenv('SOL_CRAWLER_LIST_ATTEMPTS', LIST_ATTEMPTS)),
            list_retry_delay=float(os.getenv('SOL_CRAWLER_LIST_RETRY_DELAY', LIST_RETRY_DELAY)),
            fetch_concurrency=int(os.getenv('SOL_CRAWLER_FETCH_CONCURRENCY', FETCH_CONCURRENCY)),
            fetch_attempts=int(os.getenv('SOL_CRAWLER_FETCH_ATTEMPTS', FETCH_ATTEMPTS)),
            fetch_retry_delay=float(os.getenv('SOL_CRAWLER_FETCH_RETRY_DELAY', FETCH_RETRY_DELAY)),
            extract_workers=int(os.getenv('SOL_CRAWLER_EXTRACT_WORKERS', EXTRACT_WORKERS)),
        )
