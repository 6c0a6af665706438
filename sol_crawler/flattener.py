"""
Normalizes a transaction's top-level and inner instructions into one list.
"""
from typing import Any, List, Optional, Sequence

from .errors import DecodeError
from .models import Instruction, PositionalInstruction, StructuredInstruction, TransactionRecord


def _resolve_key(account_keys: Sequence[str], index: Any, signature: Optional[str]) -> str:
    # bool is an int subclass, negative indices would wrap
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(account_keys):
        raise DecodeError(f"Instruction references an unknown account index: {index!r}", signature)
    return account_keys[index]


def decode_instruction(
    raw: Any,
    account_keys: Sequence[str],
    signature: Optional[str] = None
) -> Instruction:
    """
    Convert one RPC instruction entry into a typed instruction.

    Handles the three forms a node can return: compiled (`json` encoding,
    indices into the account keys), partially decoded (`jsonParsed` for
    programs without a parser) and parsed (`jsonParsed` with a field tree).

    Raises:
        DecodeError: If the entry matches none of the known forms
    """
    if not isinstance(raw, dict):
        raise DecodeError(f"Instruction is not an object: {raw!r}", signature)

    stack_height = raw.get('stackHeight')

    if 'parsed' in raw:
        program_id = raw.get('programId')
        if not isinstance(program_id, str):
            raise DecodeError("Parsed instruction has no program id", signature)
        return StructuredInstruction(
            program_id=program_id,
            program=raw.get('program'),
            parsed=raw['parsed'],
            stack_height=stack_height,
        )

    if 'programIdIndex' in raw:
        indices = raw.get('accounts', [])
        if not isinstance(indices, list):
            raise DecodeError("Compiled instruction accounts are not a list", signature)
        program_id = _resolve_key(account_keys, raw['programIdIndex'], signature)
        accounts = tuple(_resolve_key(account_keys, index, signature) for index in indices)
        return PositionalInstruction(
            program_id=program_id,
            accounts=accounts,
            data=raw.get('data') or "",
            stack_height=stack_height,
        )

    if 'programId' in raw:
        accounts = raw.get('accounts', [])
        if not isinstance(accounts, list) or not all(isinstance(a, str) for a in accounts):
            raise DecodeError("Partially decoded instruction has malformed accounts", signature)
        return PositionalInstruction(
            program_id=raw['programId'],
            accounts=tuple(accounts),
            data=raw.get('data') or "",
            stack_height=stack_height,
        )

    raise DecodeError(f"Unrecognised instruction format: {sorted(raw)}", signature)


def flatten_instructions(tx: TransactionRecord) -> List[Instruction]:
    """
    Every top-level instruction followed by every inner instruction.

    Inner groups keep their order and their internal order; nothing records
    whether an instruction was nested.

    Raises:
        DecodeError: If the message or any instruction cannot be interpreted
    """
    account_keys = tx.account_keys
    flat = [decode_instruction(raw, account_keys, tx.signature) for raw in tx.instructions]
    for group in tx.inner_instruction_groups:
        flat.extend(decode_instruction(raw, account_keys, tx.signature) for raw in group.instructions)
    return flat
