"""
Thread-safe label -> address set aggregation.
"""
import threading
from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple

from .config import AGGREGATOR_SHARDS
from .models import CrawledAccounts


class _Shard:
    __slots__ = ('lock', 'accounts')

    def __init__(self):
        self.lock = threading.Lock()
        self.accounts: Dict[str, Set[str]] = defaultdict(set)


class ResultAggregator:
    """
    Collects (label, address) pairs from concurrent extraction workers.

    Labels are hashed onto independently locked shards so workers writing
    different labels do not contend. Once frozen, no further writes are
    accepted.
    """

    def __init__(self, shards: int = AGGREGATOR_SHARDS):
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self._shards = [_Shard() for _ in range(shards)]
        self._frozen = False

    def _shard_for(self, label: str) -> _Shard:
        return self._shards[hash(label) % len(self._shards)]

    def add(self, label: str, address: str) -> None:
        self._check_writable()
        shard = self._shard_for(label)
        with shard.lock:
            shard.accounts[label].add(address)

    def add_all(self, pairs: Iterable[Tuple[str, str]]) -> None:
        """Insert a batch, taking each shard's lock once."""
        self._check_writable()
        batches: Dict[int, List[Tuple[str, str]]] = defaultdict(list)
        for label, address in pairs:
            batches[hash(label) % len(self._shards)].append((label, address))
        for shard_index, batch in batches.items():
            shard = self._shards[shard_index]
            with shard.lock:
                for label, address in batch:
                    shard.accounts[label].add(address)

    def _check_writable(self) -> None:
        if self._frozen:
            raise RuntimeError("ResultAggregator is frozen")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> CrawledAccounts:
        """Stop accepting writes and return the final label -> addresses mapping."""
        self._frozen = True
        result: CrawledAccounts = {}
        for shard in self._shards:
            with shard.lock:
                for label, addresses in shard.accounts.items():
                    result[label] = frozenset(addresses)
        return result
