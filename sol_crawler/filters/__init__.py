"""
Transaction and instruction filters
"""

from .pipeline import FilterPipeline, InstructionFilter, TxFilter
from .tx import (
    CMV2_BOT_TAX_MSG,
    BotTaxTxFilter,
    SuccessfulTxFilter,
    TxHasProgramId,
    TxHasSigner,
    TxLogContains,
)
from .ix import (
    Comparison,
    IxDataFilter,
    IxHasAccountAtIndexFilter,
    IxHasAccountFilter,
    IxHasData,
    IxMintToFilter,
    IxNumberAccounts,
    IxParsedTypeFilter,
    IxProgramIdFilter,
)

__all__ = [
    'FilterPipeline',
    'InstructionFilter',
    'TxFilter',
    'CMV2_BOT_TAX_MSG',
    'BotTaxTxFilter',
    'SuccessfulTxFilter',
    'TxHasProgramId',
    'TxHasSigner',
    'TxLogContains',
    'Comparison',
    'IxDataFilter',
    'IxHasAccountAtIndexFilter',
    'IxHasAccountFilter',
    'IxHasData',
    'IxMintToFilter',
    'IxNumberAccounts',
    'IxParsedTypeFilter',
    'IxProgramIdFilter',
]
