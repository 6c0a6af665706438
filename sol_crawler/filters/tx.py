"""
Transaction-level filters. Each is a predicate over a TransactionRecord.
"""
from ..models import TransactionRecord

# Logged by Candy Machine v2 when a mint is rejected but the transaction still succeeds
CMV2_BOT_TAX_MSG = "Candy Machine Botting is taxed"


class SuccessfulTxFilter:
    """Passes transactions that executed without error; missing metadata fails."""

    def __call__(self, tx: TransactionRecord) -> bool:
        return tx.succeeded

    def __repr__(self) -> str:
        return "SuccessfulTxFilter()"


class TxLogContains:
    """
    Rejects transactions whose log lines contain `marker`.

    Transactions without metadata or logs pass through.
    """

    def __init__(self, marker: str):
        self.marker = marker

    def __call__(self, tx: TransactionRecord) -> bool:
        messages = tx.log_messages
        if not messages:
            return True
        return not any(self.marker in message for message in messages)

    def __repr__(self) -> str:
        return f"TxLogContains({self.marker!r})"


class BotTaxTxFilter(TxLogContains):
    """Drops Candy Machine v2 transactions that succeeded but were bot taxed."""

    def __init__(self, marker: str = CMV2_BOT_TAX_MSG):
        super().__init__(marker)


class TxHasProgramId:
    """Passes transactions that reference `program_id` in their account keys."""

    def __init__(self, program_id: str):
        self.program_id = program_id

    def __call__(self, tx: TransactionRecord) -> bool:
        return self.program_id in tx.account_keys

    def __repr__(self) -> str:
        return f"TxHasProgramId({self.program_id!r})"


class TxHasSigner:
    """Passes transactions where `address` signed."""

    def __init__(self, address: str):
        self.address = address

    def __call__(self, tx: TransactionRecord) -> bool:
        return self.address in tx.signers

    def __repr__(self) -> str:
        return f"TxHasSigner({self.address!r})"
