"""
registrar.runtime.processor — instruction decoding, dispatch and the tx boundary.

Wire format
-----------
    data = tag (1 byte) ‖ msgpack(params)      # params are positional arrays

    | tag | instruction      | params                                         |
    |-----|------------------|------------------------------------------------|
    | 12  | CreateReverse    | [name, metadata_url?]                          |
    | 13  | Create           | [name, space, referrer_idx?, metadata_url?]    |
    | 14  | UpdateMetadata   | [metadata_url?]                                |
    | 17  | Delete           | []                                             |
    | 18  | CreateWithNft    | [name, space, metadata_url?]                   |
    | 21  | CreateSplitV2    | [name, space, referrer_idx?, metadata_url?]    |

Tags 15, 16, 19 and 20 belong to retired instructions and are refused with
`DeprecatedInstruction`; any other tag is an `InvalidInstruction`.

The ordered account list maps positionally onto the instruction's accounts
dataclass (trailing optional fields may be omitted).

Every instruction runs inside `Host.transaction()`: on any error all ledger,
token and collectible writes of the instruction are reverted and the error is
re-raised to the caller unchanged.
"""

from __future__ import annotations

import dataclasses
import logging
from enum import IntEnum
from typing import Any, Callable, Dict, List, NamedTuple, Sequence, Type, TypeVar

import msgspec

from ..address import ensure_address
from ..errors import DeprecatedInstruction, InvalidInstruction, LedgerError, RegistrarError
from ..metrics import observe_instruction, observe_registration
from .context import Host, TxContext
from .create import CreateAccounts, CreateParams, CreateSplitV2Accounts, Registration, create, create_split_v2
from .create_reverse import CreateReverseAccounts, CreateReverseParams, create_reverse
from .create_with_nft import CreateWithNftAccounts, CreateWithNftParams, create_with_nft
from .delete import DeleteAccounts, DeleteParams, delete
from .update_metadata import UpdateMetadataAccounts, UpdateMetadataParams, update_metadata

log = logging.getLogger(__name__)

A = TypeVar("A")


class Instruction(IntEnum):
    CREATE_REVERSE = 12
    CREATE = 13
    UPDATE_METADATA = 14
    CLAIM = 15
    END_AUCTION = 16
    DELETE = 17
    CREATE_WITH_NFT = 18
    CLOSE_AUCTION_ACCOUNT = 19
    CREATE_SPLIT = 20
    CREATE_SPLIT_V2 = 21


DEPRECATED = frozenset(
    {
        Instruction.CLAIM,
        Instruction.END_AUCTION,
        Instruction.CLOSE_AUCTION_ACCOUNT,
        Instruction.CREATE_SPLIT,
    }
)


class _Route(NamedTuple):
    label: str
    params: Type[msgspec.Struct]
    accounts: type
    handler: Callable[..., Any]


_ROUTES: Dict[Instruction, _Route] = {
    Instruction.CREATE_REVERSE: _Route("create_reverse", CreateReverseParams, CreateReverseAccounts, create_reverse),
    Instruction.CREATE: _Route("create", CreateParams, CreateAccounts, create),
    Instruction.UPDATE_METADATA: _Route(
        "update_metadata", UpdateMetadataParams, UpdateMetadataAccounts, update_metadata
    ),
    Instruction.DELETE: _Route("delete", DeleteParams, DeleteAccounts, delete),
    Instruction.CREATE_WITH_NFT: _Route(
        "create_with_nft", CreateWithNftParams, CreateWithNftAccounts, create_with_nft
    ),
    Instruction.CREATE_SPLIT_V2: _Route("create_split_v2", CreateParams, CreateSplitV2Accounts, create_split_v2),
}

_encoder = msgspec.msgpack.Encoder()


# ----------------------------- encoding -------------------------------------


def encode_instruction(instruction: Instruction, params: msgspec.Struct) -> bytes:
    """Build instruction data: tag byte followed by the msgpack params."""
    return bytes([int(instruction)]) + _encoder.encode(params)


def account_keys(accounts: object) -> List[bytes]:
    """Flatten an accounts dataclass into its ordered key list (omitting trailing Nones)."""
    keys = [getattr(accounts, f.name) for f in dataclasses.fields(accounts)]
    while keys and keys[-1] is None:
        keys.pop()
    if any(k is None for k in keys):
        raise ValueError("only trailing optional accounts may be omitted")
    return keys


# ----------------------------- decoding -------------------------------------


def decode_tag(data: bytes) -> Instruction:
    if not data:
        raise InvalidInstruction("empty instruction data")
    try:
        instruction = Instruction(data[0])
    except ValueError:
        raise InvalidInstruction("unknown instruction tag", data={"tag": data[0]}) from None
    if instruction in DEPRECATED:
        raise DeprecatedInstruction(tag=data[0])
    return instruction


def decode_params(route: _Route, payload: bytes) -> msgspec.Struct:
    try:
        return msgspec.msgpack.decode(payload, type=route.params)
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        raise InvalidInstruction(f"invalid {route.label} params: {e}") from e


def parse_accounts(cls: Type[A], keys: Sequence[bytes]) -> A:
    fields = dataclasses.fields(cls)
    required = sum(1 for f in fields if f.default is dataclasses.MISSING)
    if not required <= len(keys) <= len(fields):
        raise InvalidInstruction(
            "malformed accounts list",
            data={"expected_min": required, "expected_max": len(fields), "got": len(keys)},
        )
    values = {}
    for f, key in zip(fields, keys):
        try:
            values[f.name] = ensure_address(key, name=f.name)
        except (TypeError, ValueError) as e:
            raise InvalidInstruction(str(e)) from e
    return cls(**values)


# ----------------------------- dispatch -------------------------------------


def process_instruction(host: Host, ctx: TxContext, data: bytes, keys: Sequence[bytes]) -> Any:
    """
    Decode, validate and execute one instruction atomically.

    Returns the operation's result (Registration, reverse address, ReverseLookup
    or Deletion). Raises the RegistrarError that aborted it.
    """
    label = "unknown"
    try:
        instruction = decode_tag(data)
        route = _ROUTES[instruction]
        label = route.label
        log.debug("Instruction: %s", label)
        params = decode_params(route, data[1:])
        accounts = parse_accounts(route.accounts, keys)
        with host.transaction():
            result = route.handler(host, ctx, accounts, params)
    except RegistrarError as err:
        status = "ledger_error" if isinstance(err, LedgerError) else "rejected"
        log.warning("instruction %s failed: %s", label, err.code)
        observe_instruction(instruction=label, result=status)
        raise

    observe_instruction(instruction=label, result="success")
    if isinstance(result, Registration):
        fee = result.quote.referral_fee if result.quote is not None else 0
        observe_registration(payment=result.payment, referral_fee=fee)
    return result


__all__ = [
    "Instruction",
    "DEPRECATED",
    "encode_instruction",
    "account_keys",
    "decode_tag",
    "decode_params",
    "parse_accounts",
    "process_instruction",
]
