"""
registrar.adapters.name_service — name-service primitives over the resource ledger.

A name record is a ledger resource owned by the name-service program whose data
starts with a `NameRecordHeader` followed by `space` payload bytes.

Authorization rules (as enforced by the name service itself):
- create:  the address must match (hashed name, class, parent); the payer must
           sign; a set class must sign; a set parent must be a live record whose
           header owner is `parent_owner`, and that owner must sign.
- update:  the class signs when set, otherwise the owner signs (the parent owner
           may also write).
- delete:  the header owner signs; all lamports go to the target.
- realloc: the header owner signs; the payer funds growth and receives refunds.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Optional

from ..address import ZERO_ADDRESS, get_seeds_and_key, expect_address, to_base58
from ..errors import AccountAlreadyInitialized, CorruptState, IllegalOwner, MissingSignature
from ..state.ledger import Ledger
from ..state.records import NameRecordHeader

log = logging.getLogger(__name__)


class NameService:
    def __init__(self, ledger: Ledger, *, program_id: bytes) -> None:
        self.ledger = ledger
        self.program_id = bytes(program_id)

    # ----------------------------- reads ------------------------------------

    def is_record(self, address: bytes) -> bool:
        res = self.ledger.get(address)
        return res.owner == self.program_id and len(res.data) >= NameRecordHeader.LEN

    def header(self, address: bytes) -> NameRecordHeader:
        res = self.ledger.get(address)
        if res.owner != self.program_id:
            raise IllegalOwner("not a name-service record", address=to_base58(address))
        return NameRecordHeader.unpack(res.data)

    def payload(self, address: bytes) -> bytes:
        self.header(address)
        return self.ledger.read(address)[NameRecordHeader.LEN:]

    # ----------------------------- writes -----------------------------------

    def create(
        self,
        *,
        address: bytes,
        hashed: bytes,
        lamports: int,
        space: int,
        payer: bytes,
        owner: bytes,
        signers: AbstractSet[bytes],
        name_class: Optional[bytes] = None,
        parent: Optional[bytes] = None,
        parent_owner: Optional[bytes] = None,
    ) -> None:
        expected, _ = get_seeds_and_key(self.program_id, hashed, name_class, parent)
        expect_address(address, expected, role="name record")

        res = self.ledger.get(address)
        if res.owner == self.program_id and not res.is_empty:
            raise AccountAlreadyInitialized("name record already exists", address=to_base58(address))

        if name_class is not None and name_class not in signers:
            raise MissingSignature(role="name class", address=to_base58(name_class))

        if parent is not None:
            parent_header = self.header(parent)
            if parent_owner is None or parent_header.owner != parent_owner:
                raise IllegalOwner("parent owner mismatch", address=to_base58(parent))
            if parent_owner not in signers:
                raise MissingSignature(role="parent owner", address=to_base58(parent_owner))

        self.ledger.create(
            address,
            owner_program=self.program_id,
            space=NameRecordHeader.LEN + int(space),
            lamports=lamports,
            payer=payer,
            signers=signers,
        )
        header = NameRecordHeader(
            parent_name=parent or ZERO_ADDRESS,
            owner=owner,
            name_class=name_class or ZERO_ADDRESS,
        )
        self.ledger.write(address, 0, header.pack())
        log.debug("name record %s created for %s", to_base58(address), to_base58(owner))

    def _check_writer(self, address: bytes, header: NameRecordHeader, signers: AbstractSet[bytes]) -> None:
        if header.has_class:
            if header.name_class in signers:
                return
        elif header.owner in signers:
            return
        if header.has_parent and self.is_record(header.parent_name):
            if self.header(header.parent_name).owner in signers:
                return
        raise MissingSignature(role="name record authority", address=to_base58(address))

    def update(self, address: bytes, offset: int, data: bytes, *, signers: AbstractSet[bytes]) -> None:
        header = self.header(address)
        self._check_writer(address, header, signers)
        self.ledger.write(address, NameRecordHeader.LEN + int(offset), data)

    def realloc(
        self,
        address: bytes,
        space: int,
        *,
        payer: bytes,
        signers: AbstractSet[bytes],
    ) -> int:
        """
        Resize the payload to `space` bytes; returns the lamports moved from the
        payer (negative when the payer was refunded).
        """
        header = self.header(address)
        if header.owner not in signers:
            raise MissingSignature(role="name owner", address=to_base58(header.owner))
        size = NameRecordHeader.LEN + int(space)
        res = self.ledger.get(address)
        if size == len(res.data):
            return 0
        diff = self.ledger.minimum_balance(size) - self.ledger.minimum_balance(len(res.data))
        if diff > 0:
            if payer not in signers:
                raise MissingSignature(role="payer", address=to_base58(payer))
            self.ledger.transfer_lamports(payer, address, diff)
        elif diff < 0:
            self.ledger.transfer_lamports(address, payer, -diff)
        self.ledger.resize(address, size)
        return diff

    def delete(self, address: bytes, *, owner: bytes, target: bytes, signers: AbstractSet[bytes]) -> int:
        header = self.header(address)
        if header.owner != owner:
            raise IllegalOwner("record owner mismatch", address=to_base58(address))
        if owner not in signers:
            raise MissingSignature(role="name owner", address=to_base58(owner))
        return self.ledger.close(address, target)


__all__ = ["NameService"]
