"""
Boolean composition of transaction and instruction filters.
"""
from typing import Callable, List, Optional, Sequence

from ..models import Instruction, TransactionRecord

TxFilter = Callable[[TransactionRecord], bool]
InstructionFilter = Callable[[Instruction], bool]


class FilterPipeline:
    """
    Holds the filters for one crawl.

    Transaction filters are conjunctive. Instruction filters form a required
    group (all must pass) and an alternative group (any must pass, an empty
    group accepts everything), e.g. "program X AND >= 16 accounts AND
    (account A OR account B)".
    """

    def __init__(
        self,
        tx_filters: Optional[Sequence[TxFilter]] = None,
        required: Optional[Sequence[InstructionFilter]] = None,
        alternatives: Optional[Sequence[InstructionFilter]] = None
    ):
        self.tx_filters: List[TxFilter] = list(tx_filters or [])
        self.required: List[InstructionFilter] = list(required or [])
        self.alternatives: List[InstructionFilter] = list(alternatives or [])

    def add_tx_filter(self, tx_filter: TxFilter) -> "FilterPipeline":
        self.tx_filters.append(tx_filter)
        return self

    def add_ix_filter(self, ix_filter: InstructionFilter) -> "FilterPipeline":
        self.required.append(ix_filter)
        return self

    def add_alternative_ix_filter(self, ix_filter: InstructionFilter) -> "FilterPipeline":
        self.alternatives.append(ix_filter)
        return self

    def accepts_transaction(self, tx: TransactionRecord) -> bool:
        return all(tx_filter(tx) for tx_filter in self.tx_filters)

    def accepts_instruction(self, ix: Instruction) -> bool:
        if not all(ix_filter(ix) for ix_filter in self.required):
            return False
        if not self.alternatives:
            return True
        return any(ix_filter(ix) for ix_filter in self.alternatives)

    def select_instructions(self, instructions: Sequence[Instruction]) -> List[Instruction]:
        return [ix for ix in instructions if self.accepts_instruction(ix)]

    def __repr__(self) -> str:
        return (
            f"FilterPipeline(tx={self.tx_filters!r}, required={self.required!r}, "
            f"alternatives={self.alternatives!r})"
        )
