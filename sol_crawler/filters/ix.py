"""
Instruction-level filters.

Filters that only make sense for one instruction shape pass the other shape
through unchanged, so they never veto instructions another rule cares about.
The exceptions are filters whose purpose is to pick a shape: IxDataFilter and
IxHasAccountAtIndexFilter only accept positional instructions, and
IxParsedTypeFilter only accepts structured ones.
"""
import operator
from enum import Enum

from ..models import Instruction, PositionalInstruction, StructuredInstruction


class Comparison(Enum):
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    EQUAL_TO = "=="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="


_OPERATORS = {
    Comparison.LESS_THAN: operator.lt,
    Comparison.LESS_THAN_OR_EQUAL: operator.le,
    Comparison.EQUAL_TO: operator.eq,
    Comparison.GREATER_THAN: operator.gt,
    Comparison.GREATER_THAN_OR_EQUAL: operator.ge,
}


class IxNumberAccounts:
    """Compares a positional instruction's account count against `n`."""

    def __init__(self, comparison: Comparison, n: int):
        self.comparison = Comparison(comparison)
        self.n = n

    @classmethod
    def less_than(cls, n: int) -> "IxNumberAccounts":
        return cls(Comparison.LESS_THAN, n)

    @classmethod
    def less_than_or_equal(cls, n: int) -> "IxNumberAccounts":
        return cls(Comparison.LESS_THAN_OR_EQUAL, n)

    @classmethod
    def equal_to(cls, n: int) -> "IxNumberAccounts":
        return cls(Comparison.EQUAL_TO, n)

    @classmethod
    def greater_than(cls, n: int) -> "IxNumberAccounts":
        return cls(Comparison.GREATER_THAN, n)

    @classmethod
    def greater_than_or_equal(cls, n: int) -> "IxNumberAccounts":
        return cls(Comparison.GREATER_THAN_OR_EQUAL, n)

    def __call__(self, ix: Instruction) -> bool:
        if isinstance(ix, PositionalInstruction):
            return _OPERATORS[self.comparison](len(ix.accounts), self.n)
        return True

    def __repr__(self) -> str:
        return f"IxNumberAccounts({self.comparison.value} {self.n})"


class IxProgramIdFilter:
    """Passes instructions invoking `program_id`, for either shape."""

    def __init__(self, program_id: str):
        self.program_id = program_id

    def __call__(self, ix: Instruction) -> bool:
        return ix.program_id == self.program_id

    def __repr__(self) -> str:
        return f"IxProgramIdFilter({self.program_id!r})"


class IxDataFilter:
    """Passes positional instructions whose base58 data equals (or starts with) `data`."""

    def __init__(self, data: str, prefix: bool = False):
        self.data = data
        self.prefix = prefix

    def __call__(self, ix: Instruction) -> bool:
        if not isinstance(ix, PositionalInstruction):
            return False
        if self.prefix:
            return ix.data.startswith(self.data)
        return ix.data == self.data

    def __repr__(self) -> str:
        return f"IxDataFilter({self.data!r}, prefix={self.prefix})"


class IxHasData:
    """Passes positional instructions carrying a non-empty payload."""

    def __call__(self, ix: Instruction) -> bool:
        if isinstance(ix, PositionalInstruction):
            return bool(ix.data)
        return True

    def __repr__(self) -> str:
        return "IxHasData()"


class IxParsedTypeFilter:
    """Passes structured instructions whose parsed `type` is `instruction_type`."""

    def __init__(self, instruction_type: str):
        self.instruction_type = instruction_type

    def __call__(self, ix: Instruction) -> bool:
        if not isinstance(ix, StructuredInstruction):
            return False
        return ix.instruction_type == self.instruction_type

    def __repr__(self) -> str:
        return f"IxParsedTypeFilter({self.instruction_type!r})"


class IxMintToFilter(IxParsedTypeFilter):
    """Picks SPL token `mintTo` instructions."""

    def __init__(self):
        super().__init__("mintTo")


class IxHasAccountFilter:
    """Passes positional instructions that reference `account` anywhere."""

    def __init__(self, account: str):
        self.account = account

    def __call__(self, ix: Instruction) -> bool:
        if isinstance(ix, PositionalInstruction):
            return self.account in ix.accounts
        return True

    def __repr__(self) -> str:
        return f"IxHasAccountFilter({self.account!r})"


class IxHasAccountAtIndexFilter:
    """Passes positional instructions with `account` at position `index`."""

    def __init__(self, account: str, index: int):
        self.account = account
        self.index = index

    def __call__(self, ix: Instruction) -> bool:
        if not isinstance(ix, PositionalInstruction):
            return False
        return ix.account_at(self.index) == self.account

    def __repr__(self) -> str:
        return f"IxHasAccountAtIndexFilter({self.account!r}, {self.index})"
