"""
registrar.adapters.collectibles — collectible (NFT) registry collaborator.

Each collectible is a mint with supply one, a metadata record at an address
derived from the mint, and an optional collection reference that the collection
authority may have verified. Burning destroys the holder's unit and the metadata.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Optional, Protocol

from ..address import ensure_address, find_program_address, to_base58
from ..errors import AccountNotFound, IllegalOwner
from ..state.journal import Journal, JournaledMap
from .tokens import InMemoryTokens

log = logging.getLogger(__name__)

METADATA_SEED = b"metadata"


@dataclass(frozen=True)
class CollectionRef:
    key: bytes
    verified: bool = False


@dataclass(frozen=True)
class CollectibleMetadata:
    mint: bytes
    collection: Optional[CollectionRef] = None


def metadata_address(mint: bytes, program_id: bytes) -> bytes:
    addr, _ = find_program_address(
        [METADATA_SEED, ensure_address(program_id), ensure_address(mint, name="mint")], program_id
    )
    return addr


class CollectibleRegistry(Protocol):
    def metadata(self, mint: bytes) -> CollectibleMetadata: ...

    def verify_membership(self, mint: bytes, collection: bytes) -> bool: ...

    def burn(self, mint: bytes, token_account: bytes, owner: bytes, signers: AbstractSet[bytes]) -> None: ...


class InMemoryCollectibles:
    def __init__(self, journal: Journal, tokens: InMemoryTokens, *, program_id: bytes) -> None:
        self.program_id = ensure_address(program_id, name="program_id")
        self._tokens = tokens
        self._metadata = JournaledMap(journal, "collectibles")

    def mint(
        self,
        mint: bytes,
        *,
        holder_account: bytes,
        owner: bytes,
        collection: Optional[CollectionRef] = None,
    ) -> CollectibleMetadata:
        """Register a collectible and hand its single unit to `owner`."""
        meta = CollectibleMetadata(ensure_address(mint, name="mint"), collection)
        self._metadata[meta.mint] = meta
        self._tokens.open_account(holder_account, mint=meta.mint, owner=owner, amount=1)
        return meta

    def metadata_address(self, mint: bytes) -> bytes:
        return metadata_address(mint, self.program_id)

    def metadata(self, mint: bytes) -> CollectibleMetadata:
        try:
            return self._metadata[bytes(mint)]
        except KeyError:
            raise AccountNotFound("collectible metadata not found", address=to_base58(mint)) from None

    def verify_membership(self, mint: bytes, collection: bytes) -> bool:
        ref = self.metadata(mint).collection
        return ref is not None and ref.verified and ref.key == collection

    def burn(self, mint: bytes, token_account: bytes, owner: bytes, signers: AbstractSet[bytes]) -> None:
        meta = self.metadata(mint)
        holding = self._tokens.account(token_account)
        if holding.mint != meta.mint:
            raise IllegalOwner("token account does not hold this collectible", address=to_base58(token_account))
        self._tokens.burn(token_account, owner, 1, signers)
        del self._metadata[meta.mint]
        log.debug("burned collectible %s", to_base58(mint))


__all__ = [
    "CollectionRef",
    "CollectibleMetadata",
    "CollectibleRegistry",
    "InMemoryCollectibles",
    "metadata_address",
]
