"""
Instruction decoding, dispatch and the transaction boundary.
"""

from __future__ import annotations

from dataclasses import replace

import msgspec
import pytest

from registrar.constants import MAX_PERMITTED_DATA_LEN, NAME_HEADER_LEN
from registrar.errors import DeprecatedInstruction, InsufficientFunds, InvalidInstruction, error_to_result_fields
from registrar.metrics import generate_latest_text
from registrar.runtime.context import TxContext
from registrar.runtime.create import CreateParams, Registration
from registrar.runtime.create_reverse import CreateReverseAccounts, CreateReverseParams
from registrar.runtime.delete import DeleteParams, Deletion
from registrar.runtime.processor import (
    Instruction,
    account_keys,
    decode_tag,
    encode_instruction,
    parse_accounts,
    process_instruction,
)
from registrar.runtime.update_metadata import UpdateMetadataParams
from registrar.state.records import ReverseLookup, decode_reverse
from registrar.tests import (
    BUYER,
    BUYER_FIDA,
    INITIAL_TOKENS,
    NOW,
    REFERRER_FIDA,
    VAULT_FIDA,
    create_accounts,
    delete_accounts,
    metadata_accounts,
    reverse_accounts,
    split_accounts,
)


def _create(host, ctx, cfg, name="abc", **kw):
    data = encode_instruction(Instruction.CREATE, CreateParams(name, 1_000, **kw))
    keys = account_keys(create_accounts(cfg, name, referrer=REFERRER_FIDA if "referrer_idx" in kw else None))
    return process_instruction(host, ctx, data, keys)


# ----- wire format -----

def test_instruction_tags():
    assert {int(i) for i in Instruction} == {12, 13, 14, 15, 16, 17, 18, 19, 20, 21}
    data = encode_instruction(Instruction.CREATE_SPLIT_V2, CreateParams("abc", 7))
    assert data[0] == 21
    assert msgspec.msgpack.decode(data[1:]) == ["abc", 7, None, None]


@pytest.mark.parametrize("tag", [15, 16, 19, 20])
def test_deprecated_tags(tag):
    with pytest.raises(DeprecatedInstruction) as ei:
        decode_tag(bytes([tag]))
    assert ei.value.data == {"tag": tag}


@pytest.mark.parametrize("data", [b"", b"\x00", b"\x0b", b"\x16", b"\xff"])
def test_unknown_tags(data):
    with pytest.raises(InvalidInstruction):
        decode_tag(data)


@pytest.mark.parametrize(
    "payload",
    [
        b"\xc1",
        msgspec.msgpack.encode(["abc"]),
        msgspec.msgpack.encode(["abc", -1]),
        msgspec.msgpack.encode(["abc", 2**32]),
        msgspec.msgpack.encode(["abc", MAX_PERMITTED_DATA_LEN - NAME_HEADER_LEN + 1]),
        msgspec.msgpack.encode(["abc", 1, 70_000]),
        msgspec.msgpack.encode(["abc", 1, None, None, "extra"]),
    ],
)
def test_bad_params_are_invalid_instructions(host, ctx, cfg, payload):
    keys = account_keys(create_accounts(cfg, "abc"))
    with pytest.raises(InvalidInstruction):
        process_instruction(host, ctx, b"\x0d" + payload, keys)


def test_accounts_list_shape(cfg):
    full = reverse_accounts(cfg, "abc", parent=cfg.root_domain, parent_owner=BUYER)
    keys = account_keys(full)
    assert parse_accounts(CreateReverseAccounts, keys) == full
    short = parse_accounts(CreateReverseAccounts, keys[:6])
    assert short.parent_name is None and short.parent_name_owner is None
    with pytest.raises(InvalidInstruction):
        parse_accounts(CreateReverseAccounts, keys[:5])
    with pytest.raises(InvalidInstruction):
        parse_accounts(CreateReverseAccounts, keys + [BUYER])
    with pytest.raises(InvalidInstruction):
        parse_accounts(CreateReverseAccounts, keys[:5] + [b"\x01" * 31])


def test_account_keys_only_trims_trailing_optionals(cfg):
    assert len(account_keys(create_accounts(cfg, "abc"))) == 12
    assert len(account_keys(create_accounts(cfg, "abc", referrer=REFERRER_FIDA))) == 13
    with pytest.raises(ValueError):
        account_keys(replace(reverse_accounts(cfg, "abc"), parent_name_owner=BUYER))


# ----- end to end -----

def test_create_then_update_then_delete(host, ctx, cfg):
    reg = _create(host, ctx, cfg)
    assert isinstance(reg, Registration)
    assert reg.quote.total == 2_432_000_000
    assert host.tokens.balance(VAULT_FIDA) == 2_432_000_000

    updated = process_instruction(
        host,
        ctx,
        encode_instruction(Instruction.UPDATE_METADATA, UpdateMetadataParams("https://x")),
        account_keys(metadata_accounts(cfg, "abc")),
    )
    assert updated == ReverseLookup("abc", "https://x")

    deletion = process_instruction(
        host,
        ctx,
        encode_instruction(Instruction.DELETE, DeleteParams()),
        account_keys(delete_accounts(cfg, "abc")),
    )
    assert isinstance(deletion, Deletion)
    assert host.ledger.get(reg.name).is_vacant
    assert host.ledger.get(reg.reverse_lookup).is_vacant


def test_create_reverse_instruction(host, ctx, cfg):
    accounts = reverse_accounts(cfg, "abc")
    addr = process_instruction(
        host,
        ctx,
        encode_instruction(Instruction.CREATE_REVERSE, CreateReverseParams("abc")),
        account_keys(accounts),
    )
    assert addr == accounts.reverse_lookup
    assert decode_reverse(host.names.payload(addr)).name == "abc"


def test_split_v2_instruction(host, cfg):
    ctx = TxContext.signed_by(NOW, BUYER, split_accounts(cfg, "abc").fee_payer)
    reg = process_instruction(
        host,
        ctx,
        encode_instruction(Instruction.CREATE_SPLIT_V2, CreateParams("abc", 0)),
        account_keys(split_accounts(cfg, "abc")),
    )
    assert reg.payment == "native"


def test_failure_reverts_all_writes(host, cfg):
    broke = b"\x06" * 32
    accounts = replace(split_accounts(cfg, "abc"), fee_payer=broke)
    ctx = TxContext.signed_by(NOW, BUYER, broke)
    with pytest.raises(InsufficientFunds) as ei:
        process_instruction(
            host,
            ctx,
            encode_instruction(Instruction.CREATE_SPLIT_V2, CreateParams("abc", 0)),
            account_keys(accounts),
        )
    assert error_to_result_fields(ei.value)["status"] == "LEDGER_ERROR"
    assert host.tokens.balance(BUYER_FIDA) == INITIAL_TOKENS
    assert host.tokens.balance(VAULT_FIDA) == 0
    assert host.ledger.get(accounts.name).is_vacant
    assert host.ledger.get(accounts.reverse_lookup).is_vacant
    assert host.journal.depth() == 0


def test_metrics_are_exported(host, ctx, cfg):
    _create(host, ctx, cfg, "metrics", referrer_idx=0)
    with pytest.raises(DeprecatedInstruction):
        process_instruction(host, ctx, b"\x0f", [])
    text = generate_latest_text()
    assert b'registrar_instructions_total{instruction="create",result="success"}' in text
    assert b'registrar_instructions_total{instruction="unknown",result="rejected"}' in text
    assert b'registrar_registrations_total{payment="native"}' in text
    assert b"registrar_referral_fees_total" in text
