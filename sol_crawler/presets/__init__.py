"""
Ready-made crawler configurations
"""

from .candy_machine import (
    CMV1_PROGRAM_ID,
    CMV2_PROGRAM_ID,
    candy_machine_v1_crawler,
    candy_machine_v2_crawler,
)
from .token import TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID, token_mint_to_crawler

__all__ = [
    'CMV1_PROGRAM_ID',
    'CMV2_PROGRAM_ID',
    'TOKEN_PROGRAM_ID',
    'TOKEN_2022_PROGRAM_ID',
    'candy_machine_v1_crawler',
    'candy_machine_v2_crawler',
    'token_mint_to_crawler',
]
