"""
Tests for instruction decoding and flattening
"""

import pytest

from sol_crawler.errors import DecodeError
from sol_crawler.flattener import decode_instruction, flatten_instructions
from sol_crawler.models import PositionalInstruction, StructuredInstruction, TransactionRecord

from .fakes import parsed_ix, parsed_tx, partial_ix, raw_tx

PROGRAM = "Prog111111111111111111111111111111111111111"
TOKEN = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def record(payload):
    return TransactionRecord.from_rpc("sig", payload)


def test_top_level_then_inner_in_order():
    top_a = partial_ix(PROGRAM, ["A1"])
    top_b = partial_ix(PROGRAM, ["B1"])
    inner = [
        {"index": 0, "instructions": [partial_ix(PROGRAM, ["A-inner-1"]), partial_ix(PROGRAM, ["A-inner-2"])]},
        {"index": 1, "instructions": [partial_ix(PROGRAM, ["B-inner-1"])]},
    ]
    tx = record(parsed_tx([top_a, top_b], inner=inner))

    flat = flatten_instructions(tx)

    assert [ix.accounts[0] for ix in flat] == ["A1", "B1", "A-inner-1", "A-inner-2", "B-inner-1"]


def test_nested_match_is_indistinguishable_from_top_level():
    """An instruction found only in inner instructions is still returned"""
    tx = record(parsed_tx(
        [partial_ix("Router1111111111111111111111111111111111111", ["X"])],
        inner=[{"index": 0, "instructions": [partial_ix(PROGRAM, ["P", "C", "X", "Y", "M1", "N1"])]}],
    ))

    flat = flatten_instructions(tx)

    assert len(flat) == 2
    assert flat[1] == PositionalInstruction(program_id=PROGRAM, accounts=("P", "C", "X", "Y", "M1", "N1"),
                                            data="3Bxs4h24hBtQy9rw")


def test_parsed_instruction_becomes_structured():
    tx = record(parsed_tx([parsed_ix(TOKEN, "spl-token", {"type": "mintTo", "info": {"mint": "M"}})],
                          account_keys=[TOKEN, "M"]))

    (ix,) = flatten_instructions(tx)

    assert isinstance(ix, StructuredInstruction)
    assert ix.program_id == TOKEN
    assert ix.instruction_type == "mintTo"
    assert ix.field(("info", "mint")) == "M"


def test_raw_instruction_indices_are_resolved():
    tx = record(raw_tx(
        ["Payer", "Acct", PROGRAM],
        [{"programIdIndex": 2, "accounts": [0, 1], "data": "xyz", "stackHeight": None}],
        inner=[{"index": 0, "instructions": [{"programIdIndex": 2, "accounts": [1], "data": ""}]}],
    ))

    flat = flatten_instructions(tx)

    assert flat == [
        PositionalInstruction(program_id=PROGRAM, accounts=("Payer", "Acct"), data="xyz"),
        PositionalInstruction(program_id=PROGRAM, accounts=("Acct",), data=""),
    ]


def test_raw_indices_include_loaded_addresses():
    tx = record(raw_tx(
        ["Payer", PROGRAM],
        [{"programIdIndex": 1, "accounts": [0, 2, 3], "data": ""}],
        loaded={"writable": ["W"], "readonly": ["R"]},
    ))

    (ix,) = flatten_instructions(tx)

    assert ix.accounts == ("Payer", "W", "R")


@pytest.mark.parametrize("compiled", [
    {"programIdIndex": 1, "accounts": [7], "data": ""},
    {"programIdIndex": 1, "accounts": [-1], "data": ""},
    {"programIdIndex": -1, "accounts": [0], "data": ""},
    {"programIdIndex": 5, "accounts": [0], "data": ""},
    {"programIdIndex": True, "accounts": [0], "data": ""},
    {"programIdIndex": 1, "accounts": ["0"], "data": ""},
    {"programIdIndex": 1, "accounts": "0", "data": ""},
])
def test_unknown_account_index_is_decode_error(compiled):
    tx = record(raw_tx(["Payer", PROGRAM], [compiled]))

    with pytest.raises(DecodeError) as exc_info:
        flatten_instructions(tx)
    assert exc_info.value.signature == "sig"


def test_binary_transaction_is_decode_error():
    tx = record({"slot": 1, "meta": {"err": None}, "transaction": ["AQID", "base64"]})

    with pytest.raises(DecodeError):
        flatten_instructions(tx)


def test_message_without_account_keys_is_decode_error():
    tx = record({"slot": 1, "meta": {"err": None}, "transaction": {"message": {"instructions": []}}})

    with pytest.raises(DecodeError):
        flatten_instructions(tx)


@pytest.mark.parametrize("raw", [
    "not-an-object",
    {"data": "abc"},
    {"programId": PROGRAM, "accounts": [1, 2]},
    {"parsed": {"type": "mintTo"}},
])
def test_unrecognised_instruction_forms(raw):
    with pytest.raises(DecodeError):
        decode_instruction(raw, ["Payer"], "sig")


def test_empty_message_flattens_to_nothing():
    tx = record(raw_tx(["Payer"], []))
    assert flatten_instructions(tx) == []
