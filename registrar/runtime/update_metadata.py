"""
registrar.runtime.update_metadata — replace the metadata URL of a reverse record.

Only `metadata_url` changes; the stored name is preserved. The reverse address is
re-derived from the stored name (and the record's parent, for subdomains) and
must equal the supplied resource. The rewrite goes through the registry
authority; when the encoded payload changes size the record is reallocated and
the rent difference settled with the signer.

Authorization: the caller only has to be a signer. Nothing ties the signer to the
owner of the corresponding name record; that gap is known and left open until
the intended ownership model is decided.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import msgspec

from ..address import derive_name_address, derive_reverse_address, expect_address, to_base58
from ..errors import CorruptState
from ..state.records import NameRecordHeader, ReverseLookup, decode_reverse, encode_reverse
from .checks import check_fixed_keys, check_owner_in
from .context import Host, TxContext

log = logging.getLogger(__name__)


class UpdateMetadataParams(msgspec.Struct, array_like=True, forbid_unknown_fields=True):
    metadata_url: Optional[str] = None


@dataclass(frozen=True)
class UpdateMetadataAccounts:
    naming_service_program: bytes
    root_domain: bytes
    reverse_lookup: bytes
    system_program: bytes
    registry_authority: bytes
    domain_owner: bytes


def update_metadata(
    host: Host, ctx: TxContext, accounts: UpdateMetadataAccounts, params: UpdateMetadataParams
) -> ReverseLookup:
    cfg = host.config
    check_fixed_keys(host, accounts)
    ctx.require_signer(accounts.domain_owner, role="domain owner")

    res = host.ledger.get(accounts.reverse_lookup)
    if len(res.data) <= NameRecordHeader.LEN:
        raise CorruptState("reverse lookup account is empty", address=to_base58(accounts.reverse_lookup))
    check_owner_in(host, accounts.reverse_lookup, (cfg.name_service_id,), role="reverse lookup")
    header = NameRecordHeader.unpack(res.data)
    current = decode_reverse(res.data[NameRecordHeader.LEN:])

    parent = header.parent_name if header.has_parent else None
    name_address = derive_name_address(current.name, parent, cfg=cfg)
    expect_address(
        accounts.reverse_lookup,
        derive_reverse_address(name_address, cfg.authority.address, parent, cfg=cfg),
        role="reverse lookup",
    )

    updated = ReverseLookup(name=current.name, metadata_url=params.metadata_url)
    payload = encode_reverse(updated)
    signers = host.authority_signers(ctx)
    if len(payload) != len(res.data) - NameRecordHeader.LEN:
        host.names.realloc(accounts.reverse_lookup, len(payload), payer=accounts.domain_owner, signers=signers)
    host.names.update(accounts.reverse_lookup, 0, payload, signers=signers)
    log.info("metadata URL updated for %r", current.name)
    return updated


__all__ = ["UpdateMetadataParams", "UpdateMetadataAccounts", "update_metadata"]
