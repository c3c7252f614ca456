from __future__ import annotations

from dataclasses import replace

import pytest

from registrar.address import derive_name_address
from registrar.errors import (
    AccountAlreadyInitialized,
    AddressMismatch,
    IllegalOwner,
    InvalidInstruction,
    InvalidName,
    MissingSignature,
)
from registrar.runtime.context import TxContext
from registrar.runtime.create import CreateParams, create
from registrar.runtime.create_reverse import CreateReverseParams, create_reverse
from registrar.state.records import ReverseLookup, decode_reverse
from registrar.tests import BUYER, NOW, STRANGER, create_accounts, reverse_accounts


def test_top_level_reverse(host, ctx, cfg):
    accounts = reverse_accounts(cfg, "abc")
    addr = create_reverse(host, ctx, accounts, CreateReverseParams("abc", "https://x"))
    assert addr == accounts.reverse_lookup
    header = host.names.header(addr)
    assert header.owner == header.name_class == cfg.authority.address
    assert not header.has_parent
    assert decode_reverse(host.names.payload(addr)) == ReverseLookup("abc", "https://x")


def test_existing_reverse_is_refused(host, ctx, cfg):
    accounts = reverse_accounts(cfg, "abc")
    create_reverse(host, ctx, accounts, CreateReverseParams("abc"))
    with pytest.raises(AccountAlreadyInitialized):
        create_reverse(host, ctx, accounts, CreateReverseParams("abc"))


def test_wrong_reverse_address(host, ctx, cfg):
    accounts = reverse_accounts(cfg, "xyz")
    with pytest.raises(AddressMismatch):
        create_reverse(host, ctx, accounts, CreateReverseParams("abc"))


def test_fee_payer_must_sign(host, cfg):
    with pytest.raises(MissingSignature):
        create_reverse(host, TxContext.signed_by(NOW, STRANGER), reverse_accounts(cfg, "abc"), CreateReverseParams("abc"))


# ----- subdomains -----


@pytest.fixture()
def parent(host, ctx, cfg) -> bytes:
    accounts = create_accounts(cfg, "parent")
    create(host, ctx, accounts, CreateParams("parent", 0))
    return accounts.name


def test_subdomain_reverse(host, ctx, cfg, parent):
    accounts = reverse_accounts(cfg, "sub", parent=parent, parent_owner=BUYER)
    addr = create_reverse(host, ctx, accounts, CreateReverseParams("sub"))
    assert host.names.header(addr).parent_name == parent
    assert addr != reverse_accounts(cfg, "sub").reverse_lookup
    assert decode_reverse(host.names.payload(addr)).name == "sub"


def test_parent_and_owner_come_together(host, ctx, cfg, parent):
    accounts = replace(reverse_accounts(cfg, "sub", parent=parent, parent_owner=BUYER), parent_name_owner=None)
    with pytest.raises(InvalidInstruction):
        create_reverse(host, ctx, accounts, CreateReverseParams("sub"))


def test_parent_owner_must_sign(host, cfg, parent):
    ctx = TxContext.signed_by(NOW, BUYER)
    accounts = reverse_accounts(cfg, "sub", parent=parent, parent_owner=STRANGER)
    with pytest.raises(MissingSignature):
        create_reverse(host, ctx, accounts, CreateReverseParams("sub"))


def test_parent_owner_must_own_parent(host, cfg, parent):
    ctx = TxContext.signed_by(NOW, BUYER, STRANGER)
    accounts = reverse_accounts(cfg, "sub", parent=parent, parent_owner=STRANGER)
    with pytest.raises(IllegalOwner):
        create_reverse(host, ctx, accounts, CreateReverseParams("sub"))


def test_parent_must_be_a_name_record(host, ctx, cfg):
    bogus = derive_name_address("ghost", cfg=cfg)
    accounts = reverse_accounts(cfg, "sub", parent=bogus, parent_owner=BUYER)
    with pytest.raises(IllegalOwner):
        create_reverse(host, ctx, accounts, CreateReverseParams("sub"))


def test_parent_must_sit_under_root(host, ctx, cfg):
    # a reverse record is a name-service record whose parent is not the root domain
    rev = reverse_accounts(cfg, "abc").reverse_lookup
    create_reverse(host, ctx, reverse_accounts(cfg, "abc"), CreateReverseParams("abc"))
    accounts = reverse_accounts(cfg, "sub", parent=rev, parent_owner=BUYER)
    with pytest.raises(InvalidName):
        create_reverse(host, ctx, accounts, CreateReverseParams("sub"))
