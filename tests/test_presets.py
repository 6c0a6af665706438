"""
Tests for the ready-made Candy Machine and SPL token crawlers
"""

import pytest

from sol_crawler.extractor import MultiMatchPolicy
from sol_crawler.filters.tx import CMV2_BOT_TAX_MSG
from sol_crawler.models import Encoding
from sol_crawler.presets import (
    CMV1_PROGRAM_ID,
    CMV2_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    candy_machine_v1_crawler,
    candy_machine_v2_crawler,
    token_mint_to_crawler,
)

from .fakes import FakeGateway, make_signatures, new_address, parsed_ix, parsed_tx, raw_tx


def mint_nft_tx(program_id, candy_machine, metadata, mint, n_accounts, logs=None, err=None):
    """A compiled mint transaction whose instruction uses the first `n_accounts` keys."""
    keys = ["Payer", candy_machine, "Wallet", "Config", metadata, mint]
    keys += [f"Extra{i}" for i in range(len(keys), n_accounts)]
    keys = keys[:n_accounts] + [program_id]
    return raw_tx(
        keys,
        [{"programIdIndex": len(keys) - 1, "accounts": list(range(n_accounts)), "data": "mintNft"}],
        logs=logs,
        err=err,
    )


@pytest.mark.asyncio
async def test_candy_machine_v1(target, fast_config):
    other_machine = new_address()
    sig_ok, sig_other, sig_short, sig_failed = make_signatures(4)
    gateway = FakeGateway(
        signatures=[sig_ok, sig_other, sig_short, sig_failed],
        transactions={
            sig_ok: mint_nft_tx(CMV1_PROGRAM_ID, target, "Meta1", "Mint1", 14),
            sig_other: mint_nft_tx(CMV1_PROGRAM_ID, other_machine, "Meta2", "Mint2", 14),
            sig_short: mint_nft_tx(CMV1_PROGRAM_ID, target, "Meta3", "Mint3", 13),
            sig_failed: mint_nft_tx(CMV1_PROGRAM_ID, target, "Meta4", "Mint4", 14, err={"Custom": 1}),
        },
    )
    crawler = candy_machine_v1_crawler(gateway, target, fast_config)

    accounts = await crawler.run()

    assert accounts == {"metadata": frozenset({"Meta1"}), "mint": frozenset({"Mint1"})}
    assert set(gateway.encodings) == {"json"}
    assert crawler.multi_match_policy is MultiMatchPolicy.REJECT


@pytest.mark.asyncio
async def test_candy_machine_v2_skips_bot_tax(target, fast_config):
    sig_ok, sig_taxed, sig_small, sig_v1 = make_signatures(4)
    gateway = FakeGateway(
        signatures=[sig_ok, sig_taxed, sig_small, sig_v1],
        transactions={
            sig_ok: mint_nft_tx(CMV2_PROGRAM_ID, target, "Meta1", "Mint1", 17,
                                logs=["Program log: Instruction: MintNft"]),
            sig_taxed: mint_nft_tx(CMV2_PROGRAM_ID, target, "Meta2", "Mint2", 16,
                                   logs=[f"Program log: {CMV2_BOT_TAX_MSG}"]),
            sig_small: mint_nft_tx(CMV2_PROGRAM_ID, target, "Meta3", "Mint3", 15),
            sig_v1: mint_nft_tx(CMV1_PROGRAM_ID, target, "Meta4", "Mint4", 16),
        },
    )
    crawler = candy_machine_v2_crawler(gateway, target, fast_config)

    accounts = await crawler.run()

    assert accounts == {"metadata": frozenset({"Meta1"}), "mint": frozenset({"Mint1"})}
    assert crawler.encoding is Encoding.RAW


@pytest.mark.asyncio
async def test_token_mint_to(target, fast_config):
    sig_legacy, sig_2022, sig_transfer = make_signatures(3)
    other_program = new_address()
    gateway = FakeGateway(
        signatures=[sig_legacy, sig_2022, sig_transfer],
        transactions={
            sig_legacy: parsed_tx(
                [parsed_ix(TOKEN_PROGRAM_ID, "spl-token",
                           {"type": "mintTo", "info": {"mint": "MintA", "account": "DestA", "amount": "1"}})],
                inner=[{"index": 0, "instructions": [
                    parsed_ix(other_program, "lookalike",
                              {"type": "mintTo", "info": {"mint": "Fake", "account": "Fake"}}),
                ]}],
                account_keys=[target, TOKEN_PROGRAM_ID, other_program],
            ),
            sig_2022: parsed_tx(
                [
                    parsed_ix(TOKEN_2022_PROGRAM_ID, "spl-token",
                              {"type": "mintTo", "info": {"mint": "MintB", "account": "DestB"}}),
                    parsed_ix(TOKEN_2022_PROGRAM_ID, "spl-token",
                              {"type": "mintTo", "info": {"mint": "MintB", "account": "DestC"}}),
                ],
                account_keys=[target, TOKEN_2022_PROGRAM_ID],
            ),
            sig_transfer: parsed_tx(
                [parsed_ix(TOKEN_PROGRAM_ID, "spl-token",
                           {"type": "transfer", "info": {"source": "S", "destination": "D"}})],
                account_keys=[target, TOKEN_PROGRAM_ID],
            ),
        },
    )
    crawler = token_mint_to_crawler(gateway, target, fast_config)

    accounts = await crawler.run()

    assert accounts == {
        "mint": frozenset({"MintA", "MintB"}),
        "account": frozenset({"DestA", "DestB", "DestC"}),
    }
    assert set(gateway.encodings) == {"jsonParsed"}
    assert crawler.diagnostics.ambiguous_matches == []
