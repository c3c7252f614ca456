"""
registrar.state.ledger — resource ledger collaborator.

A resource is ``(lamports, data, owner)``: a balance in the ledger's native unit,
an opaque byte payload and the program that owns it. Every address implicitly
holds an empty, system-owned resource until something is written there.

The ledger is the in-memory host used by tests and simulations; all writes go
through a `JournaledMap`, so an enclosing checkpoint reverts them atomically.

Rent model: a resource of ``size`` data bytes must hold
``(ACCOUNT_STORAGE_OVERHEAD + size) * RENT_LAMPORTS_PER_BYTE_YEAR * RENT_EXEMPTION_YEARS``
lamports to be rent exempt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import AbstractSet, Optional

from ..address import ensure_address, to_base58
from ..constants import (
    ACCOUNT_STORAGE_OVERHEAD,
    MAX_PERMITTED_DATA_LEN,
    RENT_EXEMPTION_YEARS,
    RENT_LAMPORTS_PER_BYTE_YEAR,
    SYSTEM_PROGRAM_ID,
    U64_MAX,
)
from ..errors import AccountAlreadyInitialized, InsufficientFunds, LedgerError, MissingSignature
from .journal import Journal, JournaledMap

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resource:
    lamports: int = 0
    data: bytes = b""
    owner: bytes = SYSTEM_PROGRAM_ID

    @property
    def is_empty(self) -> bool:
        """True when no data is allocated (lamports may still be present)."""
        return len(self.data) == 0

    @property
    def is_vacant(self) -> bool:
        return self.lamports == 0 and not self.data and self.owner == SYSTEM_PROGRAM_ID


def minimum_balance(size: int) -> int:
    return (ACCOUNT_STORAGE_OVERHEAD + int(size)) * RENT_LAMPORTS_PER_BYTE_YEAR * RENT_EXEMPTION_YEARS


class Ledger:
    """Journaled address → Resource store."""

    def __init__(self, journal: Journal) -> None:
        self.journal = journal
        self._resources = JournaledMap(journal, "ledger")

    # ----------------------------- reads ------------------------------------

    def get(self, address: bytes) -> Resource:
        return self._resources.get(ensure_address(address), Resource())

    def read(self, address: bytes) -> bytes:
        return self.get(address).data

    def minimum_balance(self, size: int) -> int:
        return minimum_balance(size)

    # ----------------------------- writes -----------------------------------

    def _check_size(self, address: bytes, size: int) -> int:
        size = int(size)
        if not 0 <= size <= MAX_PERMITTED_DATA_LEN:
            raise LedgerError(
                "invalid resource size",
                code="INVALID_ACCOUNT_DATA_LEN",
                address=to_base58(address),
                data={"size": size, "max": MAX_PERMITTED_DATA_LEN},
            )
        return size

    def _put(self, address: bytes, res: Resource) -> None:
        if res.is_vacant:
            self._resources.pop(address, None)
        else:
            self._resources[address] = res

    def set(self, address: bytes, res: Resource) -> None:
        """Seed a resource directly (bootstrap/test helper)."""
        self._put(ensure_address(address), res)

    def fund(self, address: bytes, lamports: int) -> None:
        res = self.get(address)
        self._put(bytes(address), replace(res, lamports=res.lamports + int(lamports)))

    def transfer_lamports(self, source: bytes, destination: bytes, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must be non-negative")
        src = self.get(source)
        if src.lamports < amount:
            raise InsufficientFunds(
                address=to_base58(source), needed=amount, available=src.lamports
            )
        if source == destination:
            return
        dst = self.get(destination)
        if dst.lamports + amount > U64_MAX:
            raise LedgerError("lamport balance overflow", address=to_base58(destination))
        self._put(bytes(source), replace(src, lamports=src.lamports - amount))
        self._put(bytes(destination), replace(dst, lamports=dst.lamports + amount))

    def create(
        self,
        address: bytes,
        *,
        owner_program: bytes,
        space: int,
        lamports: int,
        payer: bytes,
        signers: AbstractSet[bytes],
    ) -> None:
        """
        Allocate `space` zeroed bytes at `address`, assign it to `owner_program` and
        top its balance up to `lamports` from `payer`.
        """
        address = ensure_address(address)
        if payer not in signers:
            raise MissingSignature(role="payer", address=to_base58(payer))
        res = self.get(address)
        if not res.is_empty or res.owner != SYSTEM_PROGRAM_ID:
            raise AccountAlreadyInitialized(address=to_base58(address))
        space = self._check_size(address, space)
        top_up = max(0, int(lamports) - res.lamports)
        if top_up:
            self.transfer_lamports(payer, address, top_up)
            res = self.get(address)
        self._put(address, replace(res, data=bytes(space), owner=ensure_address(owner_program)))
        log.debug("created resource %s (%d bytes)", to_base58(address), space)

    def write(self, address: bytes, offset: int, data: bytes) -> None:
        res = self.get(address)
        end = int(offset) + len(data)
        if offset < 0 or end > len(res.data):
            raise LedgerError(
                "write exceeds resource size",
                code="ACCOUNT_DATA_TOO_SMALL",
                address=to_base58(address),
                data={"size": len(res.data), "end": end},
            )
        buf = res.data[:offset] + bytes(data) + res.data[end:]
        self._put(bytes(address), replace(res, data=buf))

    def resize(self, address: bytes, size: int) -> None:
        """Truncate or zero-extend the data; balances are settled by the caller."""
        res = self.get(address)
        size = self._check_size(address, size)
        buf = res.data[:size] + bytes(max(0, size - len(res.data)))
        self._put(bytes(address), replace(res, data=buf))

    def close(self, address: bytes, target: bytes) -> int:
        """Move the whole balance to `target` and remove the resource."""
        res = self.get(address)
        moved = res.lamports
        if moved:
            self.transfer_lamports(address, target, moved)
        self._resources.pop(bytes(address), None)
        return moved


__all__ = ["Resource", "Ledger", "minimum_balance"]
