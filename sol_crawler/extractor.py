"""
Pulls labelled account addresses out of qualifying instructions.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

from .errors import RuleMismatch
from .models import Instruction, PositionalInstruction, StructuredInstruction

# Characters stripped from both ends of a field value
_WRAPPING_CHARS = '"\\'


class MultiMatchPolicy(Enum):
    """What to do when one transaction has more than one qualifying instruction."""
    REJECT = "reject"   # abort the crawl with AmbiguousMatchError
    REPORT = "report"   # keep every match, record an anomaly
    ALLOW = "allow"     # keep every match silently


@dataclass(frozen=True)
class ExtractionRule:
    """
    Locates one address in an instruction.

    A rule carries either a positional `index` (positional instructions only)
    or a field `path` (structured instructions only).
    """
    label: str
    index: Optional[int] = None
    path: Optional[Tuple[Union[str, int], ...]] = None

    def __post_init__(self):
        if (self.index is None) == (self.path is None):
            raise ValueError("ExtractionRule needs exactly one of index or path")
        if self.index is not None and self.index < 0:
            raise ValueError("index must not be negative")
        if self.path is not None and not self.path:
            raise ValueError("path must not be empty")

    @classmethod
    def at_index(cls, label: str, index: int) -> "ExtractionRule":
        return cls(label=label, index=index)

    @classmethod
    def at_path(cls, label: str, path: Union[str, Sequence[Union[str, int]]]) -> "ExtractionRule":
        """`path` is either dotted ("info.mint") or a sequence of keys."""
        if isinstance(path, str):
            path = path.split('.')
        return cls(label=label, path=tuple(path))

    def locate(self, ix: Instruction) -> str:
        """
        Resolve this rule against `ix`.

        Raises:
            RuleMismatch: If the rule does not apply to this shape or the locator is absent
        """
        if self.index is not None:
            if not isinstance(ix, PositionalInstruction):
                raise RuleMismatch(f"{self.label}: positional rule on {type(ix).__name__}")
            address = ix.account_at(self.index)
            if address is None:
                raise RuleMismatch(f"{self.label}: index {self.index} out of range ({len(ix.accounts)} accounts)")
            return address

        if not isinstance(ix, StructuredInstruction):
            raise RuleMismatch(f"{self.label}: field rule on {type(ix).__name__}")
        return _address_from_value(self.label, ix.field(self.path))


def _address_from_value(label: str, value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        raise RuleMismatch(f"{label}: field missing or not a scalar")
    address = str(value).strip(_WRAPPING_CHARS)
    if not address:
        raise RuleMismatch(f"{label}: field is empty")
    return address


class IxAccount(ExtractionRule):
    """Positional rule built from an account name and index."""

    def __init__(self, name: str, index: int):
        super().__init__(label=name, index=index)


class AccountExtractor:
    """Applies every configured rule to an instruction."""

    def __init__(self, rules: Optional[Sequence[ExtractionRule]] = None):
        self.rules: List[ExtractionRule] = list(rules or [])

    def add_rule(self, rule: ExtractionRule) -> "AccountExtractor":
        self.rules.append(rule)
        return self

    def extract(self, ix: Instruction) -> List[Tuple[str, str]]:
        """(label, address) pairs for every rule that resolves against `ix`."""
        pairs = []
        for rule in self.rules:
            try:
                pairs.append((rule.label, rule.locate(ix)))
            except RuleMismatch:
                continue
        return pairs

    def extract_all(self, instructions: Sequence[Instruction]) -> List[Tuple[str, str]]:
        pairs = []
        for ix in instructions:
            pairs.extend(self.extract(ix))
        return pairs
