from __future__ import annotations

import pytest

from registrar.constants import MAX_PERMITTED_DATA_LEN, SYSTEM_PROGRAM_ID
from registrar.errors import AccountAlreadyInitialized, LedgerError, MissingSignature
from registrar.state.journal import Journal
from registrar.state.ledger import Ledger, minimum_balance

PAYER = b"\x01" * 32
TARGET = b"\x02" * 32
OWNER_PROGRAM = b"\x09" * 32


@pytest.fixture()
def ledger() -> Ledger:
    lg = Ledger(Journal())
    lg.fund(PAYER, 10**12)
    return lg


def _create(ledger: Ledger, space: int, lamports: int = 0) -> None:
    ledger.create(
        TARGET,
        owner_program=OWNER_PROGRAM,
        space=space,
        lamports=lamports,
        payer=PAYER,
        signers={PAYER},
    )


def test_create_allocates_and_funds(ledger):
    _create(ledger, 10, minimum_balance(10))
    res = ledger.get(TARGET)
    assert res.data == bytes(10)
    assert res.owner == OWNER_PROGRAM
    assert res.lamports == minimum_balance(10)
    assert ledger.get(PAYER).lamports == 10**12 - minimum_balance(10)


def test_create_requires_payer_signature(ledger):
    with pytest.raises(MissingSignature):
        ledger.create(TARGET, owner_program=OWNER_PROGRAM, space=1, lamports=0, payer=PAYER, signers=set())


def test_create_refuses_populated_resource(ledger):
    _create(ledger, 1)
    with pytest.raises(AccountAlreadyInitialized):
        _create(ledger, 1)


def test_create_at_size_limit(ledger):
    _create(ledger, MAX_PERMITTED_DATA_LEN)
    assert len(ledger.read(TARGET)) == MAX_PERMITTED_DATA_LEN


@pytest.mark.parametrize("space", [MAX_PERMITTED_DATA_LEN + 1, 2**32 - 1, -1])
def test_create_rejects_oversize_allocation(ledger, space):
    with pytest.raises(LedgerError) as ei:
        _create(ledger, space, minimum_balance(0))
    assert ei.value.code == "INVALID_ACCOUNT_DATA_LEN"
    # nothing was charged or allocated
    assert ledger.get(TARGET).is_vacant
    assert ledger.get(PAYER).lamports == 10**12


def test_resize_is_bounded(ledger):
    _create(ledger, 4)
    ledger.write(TARGET, 0, b"\x07" * 4)
    ledger.resize(TARGET, 6)
    assert ledger.read(TARGET) == b"\x07" * 4 + bytes(2)
    ledger.resize(TARGET, 2)
    assert ledger.read(TARGET) == b"\x07" * 2
    with pytest.raises(LedgerError):
        ledger.resize(TARGET, MAX_PERMITTED_DATA_LEN + 1)
    assert ledger.read(TARGET) == b"\x07" * 2


def test_close_moves_balance(ledger):
    _create(ledger, 1, 5_000)
    assert ledger.close(TARGET, PAYER) == 5_000
    assert ledger.get(TARGET).is_vacant
    assert ledger.get(TARGET).owner == SYSTEM_PROGRAM_ID
    assert ledger.get(PAYER).lamports == 10**12
