"""
registrar.runtime.context — host bundle and per-transaction context.

`Host` wires the collaborators an instruction may touch (resource ledger, name
service, token balances, price oracle, collectible registry) around one shared
`Journal`, so `Host.transaction()` is the atomicity boundary for everything.

`TxContext` carries the transaction clock and the set of addresses that signed.
Program-derived signers are added with `TxContext.with_capability`, which only
honours a capability whose seeds re-derive its address under the registrar's
program id.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import AbstractSet, FrozenSet, Iterator, Optional

from ..address import SigningCapability, create_program_address, to_base58
from ..adapters.collectibles import InMemoryCollectibles
from ..adapters.name_service import NameService
from ..adapters.oracle import InMemoryOracle
from ..adapters.tokens import InMemoryTokens
from ..config import RegistryConfig, get_config
from ..errors import MissingSignature
from ..state.journal import Journal
from ..state.ledger import Ledger


@dataclass(frozen=True)
class TxContext:
    now: int
    signers: FrozenSet[bytes] = field(default_factory=frozenset)

    @classmethod
    def signed_by(cls, now: int, *signers: bytes) -> "TxContext":
        return cls(now=int(now), signers=frozenset(bytes(s) for s in signers))

    def is_signer(self, address: bytes) -> bool:
        return bytes(address) in self.signers

    def require_signer(self, address: bytes, *, role: str) -> None:
        if not self.is_signer(address):
            raise MissingSignature(role=role, address=to_base58(address))

    def with_capability(self, cap: SigningCapability, program_id: bytes) -> "TxContext":
        try:
            derived = create_program_address(cap.seeds, program_id)
        except ValueError as e:
            raise MissingSignature("invalid signer seeds", address=to_base58(cap.address)) from e
        if derived != cap.address:
            raise MissingSignature("signer seeds do not match", address=to_base58(cap.address))
        return replace(self, signers=self.signers | {cap.address})


@dataclass
class Host:
    config: RegistryConfig
    journal: Journal
    ledger: Ledger
    names: NameService
    tokens: InMemoryTokens
    oracle: InMemoryOracle
    collectibles: InMemoryCollectibles

    @classmethod
    def in_memory(cls, config: Optional[RegistryConfig] = None) -> "Host":
        cfg = config or get_config()
        journal = Journal()
        ledger = Ledger(journal)
        tokens = InMemoryTokens(journal)
        return cls(
            config=cfg,
            journal=journal,
            ledger=ledger,
            names=NameService(ledger, program_id=cfg.name_service_id),
            tokens=tokens,
            oracle=InMemoryOracle(),
            collectibles=InMemoryCollectibles(
                journal, tokens, program_id=cfg.network.collectibles_program_id
            ),
        )

    @contextmanager
    def transaction(self) -> Iterator[Journal]:
        """Commit every collaborator write on success, revert all of them on error."""
        with self.journal.checkpoint() as j:
            yield j

    def authority_signers(self, ctx: TxContext) -> AbstractSet[bytes]:
        """`ctx` signers plus the registry authority."""
        return ctx.with_capability(self.config.authority, self.config.program_id).signers


__all__ = ["TxContext", "Host"]
