"""
registrar.runtime.create_reverse — create a reverse-lookup record for a name.

The reverse record maps a name address back to ``{name, metadata_url}``. It is
owned (and classed) by the registry authority, so only the registrar can ever
rewrite it. For subdomains the parent name and its owner are supplied together;
the parent must itself be a direct child of the root domain.

`create_reverse_record` is also the last step of every registration path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import msgspec

from ..address import derive_name_address, derive_reverse_address, expect_address, hashed_name, to_base58
from ..errors import AccountAlreadyInitialized, InvalidInstruction, InvalidName
from ..state.records import NameRecordHeader, ReverseLookup, encode_reverse
from .checks import check_fixed_keys, check_owner_in
from .context import Host, TxContext

log = logging.getLogger(__name__)


class CreateReverseParams(msgspec.Struct, array_like=True, forbid_unknown_fields=True):
    name: str
    metadata_url: Optional[str] = None


@dataclass(frozen=True)
class CreateReverseAccounts:
    naming_service_program: bytes
    root_domain: bytes
    reverse_lookup: bytes
    system_program: bytes
    registry_authority: bytes
    fee_payer: bytes
    parent_name: Optional[bytes] = None
    parent_name_owner: Optional[bytes] = None


def create_reverse_record(
    host: Host,
    ctx: TxContext,
    *,
    reverse: bytes,
    name_address: bytes,
    name: str,
    metadata_url: Optional[str],
    fee_payer: bytes,
    parent: Optional[bytes] = None,
    parent_owner: Optional[bytes] = None,
) -> None:
    """Create the record, then write its payload, both signed by the registry authority."""
    authority = host.config.authority.address
    signers = host.authority_signers(ctx)
    payload = encode_reverse(ReverseLookup(name=name, metadata_url=metadata_url))
    host.names.create(
        address=reverse,
        hashed=hashed_name(to_base58(name_address)),
        lamports=host.ledger.minimum_balance(NameRecordHeader.LEN + len(payload)),
        space=len(payload),
        payer=fee_payer,
        owner=authority,
        signers=signers,
        name_class=authority,
        parent=parent,
        parent_owner=parent_owner,
    )
    host.names.update(reverse, 0, payload, signers=signers)
    log.debug("reverse lookup %s → %r", to_base58(reverse), name)


def create_reverse(
    host: Host, ctx: TxContext, accounts: CreateReverseAccounts, params: CreateReverseParams
) -> bytes:
    cfg = host.config
    check_fixed_keys(host, accounts)
    ctx.require_signer(accounts.fee_payer, role="fee payer")

    parent: Optional[bytes] = None
    if (accounts.parent_name is None) != (accounts.parent_name_owner is None):
        raise InvalidInstruction("parent name and parent name owner must be supplied together")
    if accounts.parent_name is not None:
        check_owner_in(host, accounts.parent_name, (cfg.name_service_id,), role="parent name")
        ctx.require_signer(accounts.parent_name_owner, role="parent name owner")
        if host.names.header(accounts.parent_name).parent_name != cfg.root_domain:
            raise InvalidName("invalid parent name", data={"parent": to_base58(accounts.parent_name)})
        parent = accounts.parent_name

    name_address = derive_name_address(params.name, parent, cfg=cfg)
    expected = derive_reverse_address(name_address, cfg.authority.address, parent, cfg=cfg)
    expect_address(accounts.reverse_lookup, expected, role="reverse lookup")

    if not host.ledger.get(accounts.reverse_lookup).is_empty:
        raise AccountAlreadyInitialized(
            "reverse lookup already exists", address=to_base58(accounts.reverse_lookup)
        )

    create_reverse_record(
        host,
        ctx,
        reverse=accounts.reverse_lookup,
        name_address=name_address,
        name=params.name,
        metadata_url=params.metadata_url,
        fee_payer=accounts.fee_payer,
        parent=parent,
        parent_owner=accounts.parent_name_owner,
    )
    return accounts.reverse_lookup


__all__ = [
    "CreateReverseParams",
    "CreateReverseAccounts",
    "create_reverse_record",
    "create_reverse",
]
