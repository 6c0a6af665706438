"""
Custom error types for crawl operations.
"""
from typing import Optional


class CrawlError(Exception):
    """Base class for crawl errors."""
    pass


class TransportError(CrawlError):
    """Raised when a gateway call fails."""

    def __init__(self, message: str, target: Optional[str] = None, cause: Optional[str] = None):
        super().__init__(message)
        self.target = target
        self.cause = cause

    def __str__(self) -> str:
        text = super().__str__()
        if self.target:
            text = f"{text} (target: {self.target})"
        if self.cause:
            text = f"{text}: {self.cause}"
        return text


class RetryableError(TransportError):
    """Base class for transport errors that can be retried."""
    pass


class RateLimitError(RetryableError):
    """Raised when rate limit is exceeded."""
    pass


class MethodNotSupportedError(TransportError):
    """Raised when the endpoint does not support an RPC method."""
    pass


class DecodeError(CrawlError):
    """Raised when a transaction's message cannot be interpreted."""

    def __init__(self, message: str, signature: Optional[str] = None):
        super().__init__(message)
        self.signature = signature


class RuleMismatch(CrawlError):
    """Raised when an extraction rule does not resolve against an instruction."""
    pass


class SignatureParseError(CrawlError):
    """Raised when the gateway returns a malformed signature."""
    pass


class PubkeyParseError(CrawlError):
    """Raised when an address cannot be parsed into a public key."""
    pass


class AmbiguousMatchError(CrawlError):
    """Raised when a transaction has more than one qualifying instruction."""

    def __init__(self, signature: str, count: int):
        super().__init__(f"Expected zero or one qualifying instruction, got {count} on tx {signature}")
        self.signature = signature
        self.count = count


__all__ = [
    'CrawlError',
    'TransportError',
    'RetryableError',
    'RateLimitError',
    'MethodNotSupportedError',
    'DecodeError',
    'RuleMismatch',
    'SignatureParseError',
    'PubkeyParseError',
    'AmbiguousMatchError',
]
