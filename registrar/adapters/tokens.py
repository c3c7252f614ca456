"""
registrar.adapters.tokens — fungible-token transfer primitive.

Token accounts hold ``(mint, owner, amount)``. A transfer moves `amount` units
between two accounts of the same mint and requires the source owner's signature.
Balances live in a `JournaledMap`, so an enclosing checkpoint reverts them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import AbstractSet, Protocol

from ..address import ensure_address, to_base58
from ..constants import U64_MAX
from ..errors import AccountNotFound, IllegalOwner, InsufficientFunds, LedgerError, MissingSignature
from ..state.journal import Journal, JournaledMap

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenAccount:
    mint: bytes
    owner: bytes
    amount: int = 0


class TokenProgram(Protocol):
    def account(self, address: bytes) -> TokenAccount: ...

    def transfer(
        self,
        source: bytes,
        destination: bytes,
        authority: bytes,
        amount: int,
        signers: AbstractSet[bytes],
    ) -> None: ...


class InMemoryTokens:
    def __init__(self, journal: Journal) -> None:
        self._accounts = JournaledMap(journal, "tokens")

    def open_account(self, address: bytes, *, mint: bytes, owner: bytes, amount: int = 0) -> TokenAccount:
        acct = TokenAccount(ensure_address(mint), ensure_address(owner), int(amount))
        self._accounts[ensure_address(address)] = acct
        return acct

    def exists(self, address: bytes) -> bool:
        return bytes(address) in self._accounts

    def account(self, address: bytes) -> TokenAccount:
        try:
            return self._accounts[bytes(address)]
        except KeyError:
            raise AccountNotFound("token account not found", address=to_base58(address)) from None

    def balance(self, address: bytes) -> int:
        return self.account(address).amount

    def transfer(
        self,
        source: bytes,
        destination: bytes,
        authority: bytes,
        amount: int,
        signers: AbstractSet[bytes],
    ) -> None:
        src = self.account(source)
        dst = self.account(destination)
        if src.owner != authority:
            raise IllegalOwner("transfer authority does not own the source", address=to_base58(source))
        if authority not in signers:
            raise MissingSignature(role="token authority", address=to_base58(authority))
        if src.mint != dst.mint:
            raise LedgerError("account mints differ", code="MINT_MISMATCH", address=to_base58(destination))
        if amount < 0:
            raise ValueError("amount must be non-negative")
        if src.amount < amount:
            raise InsufficientFunds(address=to_base58(source), needed=amount, available=src.amount)
        if source == destination:
            return
        if dst.amount + amount > U64_MAX:
            raise LedgerError("token balance overflow", address=to_base58(destination))
        self._accounts[bytes(source)] = replace(src, amount=src.amount - amount)
        self._accounts[bytes(destination)] = replace(dst, amount=dst.amount + amount)
        log.debug("token transfer %d %s → %s", amount, to_base58(source), to_base58(destination))

    def burn(self, address: bytes, owner: bytes, amount: int, signers: AbstractSet[bytes]) -> None:
        acct = self.account(address)
        if acct.owner != owner:
            raise IllegalOwner("burn authority does not own the account", address=to_base58(address))
        if owner not in signers:
            raise MissingSignature(role="token owner", address=to_base58(owner))
        if acct.amount < amount:
            raise InsufficientFunds(address=to_base58(address), needed=amount, available=acct.amount)
        self._accounts[bytes(address)] = replace(acct, amount=acct.amount - amount)


__all__ = ["TokenAccount", "TokenProgram", "InMemoryTokens"]
