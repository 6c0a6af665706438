"""
Candy Machine mint crawls.

Both versions mint through an instruction whose fifth and sixth accounts are
the new NFT's metadata and mint accounts.
"""
from typing import Optional

from ..config import CrawlerConfig
from ..crawler import Crawler
from ..extractor import IxAccount, MultiMatchPolicy
from ..filters import (
    BotTaxTxFilter,
    IxHasAccountAtIndexFilter,
    IxNumberAccounts,
    IxProgramIdFilter,
    SuccessfulTxFilter,
    TxHasProgramId,
)
from ..models import Encoding

CMV1_PROGRAM_ID = "cndyAnrLdpjq1Ssp1z8xxDsB8dxe7u4HL5Nxi2K5WXZ"
CMV2_PROGRAM_ID = "cndy3Z4yapfJBmL3ShUp5exZKqR3z33thTzeNMm2gRZ"

# Candy Machine v1 mintNft always has 14 accounts
CMV1_MINT_ACCOUNTS = 14
# Candy Machine v2 has at least 16, more with optional settings enabled
CMV2_MIN_MINT_ACCOUNTS = 16

METADATA_INDEX = 4
MINT_INDEX = 5


def mint_rules():
    return [IxAccount("metadata", METADATA_INDEX), IxAccount("mint", MINT_INDEX)]


def candy_machine_v1_crawler(client, candy_machine_id: str, config: Optional[CrawlerConfig] = None) -> Crawler:
    """Metadata and mint accounts created by a Candy Machine v1 instance."""
    crawler = Crawler(client, candy_machine_id, config=config)
    return (
        crawler
        .with_encoding(Encoding.RAW)
        .with_multi_match_policy(MultiMatchPolicy.REJECT)
        .add_tx_filter(TxHasProgramId(CMV1_PROGRAM_ID))
        .add_tx_filter(SuccessfulTxFilter())
        .add_ix_filter(IxProgramIdFilter(CMV1_PROGRAM_ID))
        .add_ix_filter(IxNumberAccounts.equal_to(CMV1_MINT_ACCOUNTS))
        .add_ix_filter(IxHasAccountAtIndexFilter(crawler.address, 1))
        .account_indices(mint_rules())
    )


def candy_machine_v2_crawler(client, candy_machine_id: str, config: Optional[CrawlerConfig] = None) -> Crawler:
    """Metadata and mint accounts created by a Candy Machine v2 instance, skipping bot-taxed mints."""
    return (
        Crawler(client, candy_machine_id, config=config)
        .with_encoding(Encoding.RAW)
        .with_multi_match_policy(MultiMatchPolicy.REJECT)
        .add_tx_filter(TxHasProgramId(CMV2_PROGRAM_ID))
        .add_tx_filter(SuccessfulTxFilter())
        .add_tx_filter(BotTaxTxFilter())
        .add_ix_filter(IxProgramIdFilter(CMV2_PROGRAM_ID))
        .add_ix_filter(IxNumberAccounts.greater_than_or_equal(CMV2_MIN_MINT_ACCOUNTS))
        .account_indices(mint_rules())
    )
