from __future__ import annotations

from dataclasses import replace

import pytest

from registrar.address import derive_sale_state_address
from registrar.errors import AddressMismatch, IllegalOwner, MissingSignature
from registrar.runtime.context import TxContext
from registrar.runtime.create import CreateParams, create
from registrar.runtime.delete import DeleteParams, delete
from registrar.state.ledger import Resource
from registrar.tests import NOW, STRANGER, TARGET, create_accounts, delete_accounts

STATE_LAMPORTS = 5_000
RESALE_LAMPORTS = 7_000


@pytest.fixture()
def registered(host, ctx, cfg):
    create(host, ctx, create_accounts(cfg, "abc"), CreateParams("abc", 100))
    return delete_accounts(cfg, "abc")


def _seed_states(host, cfg, accounts) -> None:
    host.ledger.set(accounts.state, Resource(STATE_LAMPORTS, b"\x01" * 8, cfg.program_id))
    host.ledger.set(accounts.reselling_state, Resource(RESALE_LAMPORTS, b"\x02" * 8, cfg.program_id))


def test_delete_reclaims_everything(host, ctx, cfg, registered):
    _seed_states(host, cfg, registered)
    name_lamports = host.ledger.get(registered.domain).lamports
    reverse_lamports = host.ledger.get(registered.reverse).lamports

    result = delete(host, ctx, registered, DeleteParams())

    assert result.drained_state and result.drained_resale_state
    expected = name_lamports + reverse_lamports + STATE_LAMPORTS + RESALE_LAMPORTS
    assert result.reclaimed == expected
    assert host.ledger.get(TARGET).lamports == expected
    for addr in (registered.domain, registered.reverse, registered.state, registered.reselling_state):
        assert host.ledger.get(addr).is_vacant


def test_empty_states_are_skipped(host, ctx, cfg, registered):
    result = delete(host, ctx, registered, DeleteParams())
    assert not result.drained_state
    assert not result.drained_resale_state
    assert host.ledger.get(registered.domain).is_vacant
    assert host.ledger.get(registered.reverse).is_vacant


def test_name_can_be_registered_again_after_delete(host, ctx, cfg, registered):
    delete(host, ctx, registered, DeleteParams())
    reg = create(host, ctx, create_accounts(cfg, "abc"), CreateParams("abc", 100))
    assert reg.reverse_created


def test_owner_must_sign(host, cfg, registered):
    with pytest.raises(MissingSignature):
        delete(host, TxContext.signed_by(NOW, STRANGER), registered, DeleteParams())


def test_only_the_record_owner_may_delete(host, cfg, registered):
    accounts = replace(registered, owner=STRANGER)
    with pytest.raises(IllegalOwner):
        delete(host, TxContext.signed_by(NOW, STRANGER), accounts, DeleteParams())


def test_state_owned_by_foreign_program(host, ctx, cfg, registered):
    host.ledger.set(registered.state, Resource(1, b"\x01", STRANGER))
    with pytest.raises(IllegalOwner):
        delete(host, ctx, registered, DeleteParams())


def test_state_address_must_be_derived(host, ctx, cfg, registered):
    accounts = replace(registered, state=derive_sale_state_address(registered.reverse, cfg.program_id))
    with pytest.raises(AddressMismatch):
        delete(host, ctx, accounts, DeleteParams())
    assert not host.ledger.get(registered.domain).is_empty
