"""
Models for signatures, transactions and instructions as seen by the crawler.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from .errors import DecodeError, SignatureParseError


class Encoding(str, Enum):
    """Transaction encodings requested from the gateway"""
    RAW = "json"
    DECODED = "jsonParsed"


@dataclass
class SignatureInfo:
    """One entry of a getSignaturesForAddress page."""
    signature: str
    slot: Optional[int] = None
    err: Any = None
    memo: Optional[str] = None
    block_time: Optional[int] = None

    @classmethod
    def from_rpc(cls, entry: Union[Dict[str, Any], str]) -> "SignatureInfo":
        if isinstance(entry, str):
            return cls(signature=entry)
        if not isinstance(entry, dict):
            raise SignatureParseError(f"Unrecognised signature entry: {entry!r}")
        return cls(
            signature=entry.get('signature'),
            slot=entry.get('slot'),
            err=entry.get('err'),
            memo=entry.get('memo'),
            block_time=entry.get('blockTime'),
        )


@dataclass(frozen=True)
class PositionalInstruction:
    """Instruction whose accounts are an ordered list read by index."""
    program_id: str
    accounts: Tuple[str, ...] = ()
    data: str = ""
    stack_height: Optional[int] = None

    def account_at(self, index: int) -> Optional[str]:
        """Account at `index`, or None when out of range."""
        if 0 <= index < len(self.accounts):
            return self.accounts[index]
        return None


@dataclass(frozen=True)
class StructuredInstruction:
    """Instruction decoded into a named field tree by the node's parser."""
    program_id: str
    program: Optional[str] = None
    parsed: Any = None
    stack_height: Optional[int] = None

    @property
    def instruction_type(self) -> Optional[str]:
        if isinstance(self.parsed, dict):
            return self.parsed.get('type')
        return None

    def field(self, path: Sequence[Union[str, int]]) -> Any:
        """
        Walk `path` through the decoded field tree.

        Returns:
            The value found, or None when any segment is missing
        """
        node = self.parsed
        for segment in path:
            if isinstance(node, dict):
                if segment not in node:
                    return None
                node = node[segment]
            elif isinstance(node, list):
                try:
                    node = node[int(segment)]
                except (ValueError, IndexError):
                    return None
            else:
                return None
        return node


Instruction = Union[PositionalInstruction, StructuredInstruction]


@dataclass(frozen=True)
class InnerInstructionGroup:
    """Instructions executed as a side effect of top-level instruction `index`."""
    index: int
    instructions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class TransactionRecord:
    """A fetched transaction plus its execution metadata."""
    signature: str
    slot: Optional[int] = None
    block_time: Optional[int] = None
    meta: Optional[Dict[str, Any]] = None
    transaction: Any = None
    version: Any = None

    @classmethod
    def from_rpc(cls, signature: str, payload: Dict[str, Any]) -> "TransactionRecord":
        """
        Wrap one getTransaction result.

        Raises:
            DecodeError: If the payload or its metadata is not a JSON object
        """
        if not isinstance(payload, dict):
            raise DecodeError(f"Transaction payload is not an object: {type(payload).__name__}", signature)
        meta = payload.get('meta')
        if meta is not None and not isinstance(meta, dict):
            raise DecodeError(f"Transaction meta is not an object: {type(meta).__name__}", signature)
        return cls(
            signature=signature,
            slot=payload.get('slot'),
            block_time=payload.get('blockTime'),
            meta=meta,
            transaction=payload.get('transaction'),
            version=payload.get('version'),
        )

    @property
    def err(self) -> Any:
        return self.meta.get('err') if self.meta else None

    @property
    def succeeded(self) -> bool:
        """True when metadata is present and carries no error."""
        return self.meta is not None and self.meta.get('err') is None

    @property
    def log_messages(self) -> Optional[List[str]]:
        if not self.meta:
            return None
        return self.meta.get('logMessages')

    @property
    def message(self) -> Dict[str, Any]:
        """The transaction message; raises DecodeError if it is not a JSON object."""
        if not isinstance(self.transaction, dict):
            raise DecodeError("Not a JSON encoded transaction", self.signature)
        message = self.transaction.get('message')
        if not isinstance(message, dict):
            raise DecodeError("Transaction has no decodable message", self.signature)
        return message

    @property
    def is_parsed(self) -> bool:
        """True when account keys come back as objects (jsonParsed encoding)."""
        keys = self.message.get('accountKeys') or []
        return bool(keys) and isinstance(keys[0], dict)

    @property
    def account_keys(self) -> List[str]:
        """Static account keys followed by lookup-table addresses for raw messages."""
        raw_keys = self.message.get('accountKeys')
        if not isinstance(raw_keys, list):
            raise DecodeError("Message has no account keys", self.signature)

        keys = []
        for key in raw_keys:
            if isinstance(key, str):
                keys.append(key)
            elif isinstance(key, dict) and isinstance(key.get('pubkey'), str):
                keys.append(key['pubkey'])
            else:
                raise DecodeError(f"Unrecognised account key entry: {key!r}", self.signature)

        # jsonParsed already lists lookup-table accounts inline
        if raw_keys and isinstance(raw_keys[0], str) and self.meta:
            loaded = self.meta.get('loadedAddresses') or {}
            keys.extend(loaded.get('writable', []))
            keys.extend(loaded.get('readonly', []))
        return keys

    @property
    def signers(self) -> List[str]:
        raw_keys = self.message.get('accountKeys') or []
        if self.is_parsed:
            return [key['pubkey'] for key in raw_keys if key.get('signer')]
        header = self.message.get('header') or {}
        required = header.get('numRequiredSignatures', 0)
        return list(raw_keys[:required])

    @property
    def instructions(self) -> List[Any]:
        instructions = self.message.get('instructions', [])
        if not isinstance(instructions, list):
            raise DecodeError("Message instructions are not a list", self.signature)
        return instructions

    @property
    def inner_instruction_groups(self) -> List[InnerInstructionGroup]:
        groups = []
        for group in (self.meta or {}).get('innerInstructions') or []:
            if not isinstance(group, dict):
                raise DecodeError(f"Unrecognised inner instruction group: {group!r}", self.signature)
            groups.append(InnerInstructionGroup(
                index=group.get('index', -1),
                instructions=tuple(group.get('instructions') or ()),
            ))
        return groups


# label -> deduplicated addresses
CrawledAccounts = Dict[str, FrozenSet[str]]


@dataclass
class FetchFailed:
    """A signature whose transaction could not be fetched."""
    signature: str
    cause: str


@dataclass
class AmbiguousMatch:
    """A transaction with more than one qualifying instruction."""
    signature: str
    count: int


@dataclass
class CrawlDiagnostics:
    """Counters and anomalies collected during one crawl"""
    signatures_found: int = 0
    transactions_fetched: int = 0
    transactions_accepted: int = 0
    instructions_matched: int = 0
    fetch_failures: List[FetchFailed] = field(default_factory=list)
    decode_errors: List[DecodeError] = field(default_factory=list)
    ambiguous_matches: List[AmbiguousMatch] = field(default_factory=list)
    average_latency: Optional[float] = None  # seconds per RPC call, when the gateway tracks it

    def log_summary(self, log: logging.Logger) -> None:
        """Log current statistics"""
        log.info("Crawl Stats:")
        log.info(f"  Signatures Found: {self.signatures_found}")
        log.info(f"  Transactions Fetched: {self.transactions_fetched}")
        log.info(f"  Transactions Accepted: {self.transactions_accepted}")
        log.info(f"  Instructions Matched: {self.instructions_matched}")
        if self.fetch_failures:
            log.warning(f"  Fetch Failures: {len(self.fetch_failures)}")
        if self.decode_errors:
            log.warning(f"  Undecodable Transactions: {len(self.decode_errors)}")
        if self.ambiguous_matches:
            log.warning(f"  Transactions With Multiple Matches: {len(self.ambiguous_matches)}")
        if self.average_latency is not None:
            log.info(f"  Average RPC Latency: {self.average_latency:.3f}s")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signatures_found": self.signatures_found,
            "transactions_fetched": self.transactions_fetched,
            "transactions_accepted": self.transactions_accepted,
            "instructions_matched": self.instructions_matched,
            "fetch_failures": [
                {"signature": f.signature, "cause": f.cause} for f in self.fetch_failures
            ],
            "decode_errors": [
                {"signature": e.signature, "error": str(e)} for e in self.decode_errors
            ],
            "ambiguous_matches": [
                {"signature": m.signature, "count": m.count} for m in self.ambiguous_matches
            ],
            "average_latency": self.average_latency,
        }
