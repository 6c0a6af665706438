"""
SPL token crawls over structured (jsonParsed) instructions.
"""
from typing import Optional

from ..config import CrawlerConfig
from ..crawler import Crawler
from ..extractor import ExtractionRule, MultiMatchPolicy
from ..filters import IxMintToFilter, IxProgramIdFilter, SuccessfulTxFilter
from ..models import Encoding

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"


def token_mint_to_crawler(client, address: str, config: Optional[CrawlerConfig] = None) -> Crawler:
    """
    Mints and destination token accounts of every `mintTo` in the address's
    history, whether issued by the legacy token program or Token-2022.
    """
    return (
        Crawler(client, address, config=config)
        .with_encoding(Encoding.DECODED)
        .with_multi_match_policy(MultiMatchPolicy.ALLOW)
        .add_tx_filter(SuccessfulTxFilter())
        .add_ix_filter(IxMintToFilter())
        .add_alternative_ix_filter(IxProgramIdFilter(TOKEN_PROGRAM_ID))
        .add_alternative_ix_filter(IxProgramIdFilter(TOKEN_2022_PROGRAM_ID))
        .add_rule(ExtractionRule.at_path("mint", "info.mint"))
        .add_rule(ExtractionRule.at_path("account", "info.account"))
    )
