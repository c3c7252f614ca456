"""
registrar.runtime.create_with_nft — register a name by burning a collectible.

Replaces the vault and pricing steps of a token registration with: the
collectible's metadata address must be the one derived from its mint, its
collection must be the configured one and verified, and the buyer burns it.
No fee or discount applies. The buyer pays rent and owns the name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import msgspec

from ..address import expect_address, to_base58
from ..errors import WrongCollection
from .checks import check_fixed_keys, check_name_vacant
from .context import Host, TxContext
from .create import Registration, Space, derive_registration_targets, finish_registration

log = logging.getLogger(__name__)


class CreateWithNftParams(msgspec.Struct, array_like=True, forbid_unknown_fields=True):
    name: str
    space: Space
    metadata_url: Optional[str] = None


@dataclass(frozen=True)
class CreateWithNftAccounts:
    naming_service_program: bytes
    root_domain: bytes
    name: bytes
    reverse_lookup: bytes
    system_program: bytes
    registry_authority: bytes
    buyer: bytes
    nft_source: bytes
    nft_metadata: bytes
    nft_mint: bytes
    token_program: bytes
    state: bytes


def create_with_nft(
    host: Host, ctx: TxContext, accounts: CreateWithNftAccounts, params: CreateWithNftParams
) -> Registration:
    cfg = host.config
    check_fixed_keys(host, accounts)
    ctx.require_signer(accounts.buyer, role="buyer")
    reverse = derive_registration_targets(host, params.name, accounts)
    check_name_vacant(host, accounts.name)

    expect_address(
        accounts.nft_metadata, host.collectibles.metadata_address(accounts.nft_mint), role="collectible metadata"
    )
    if not host.collectibles.verify_membership(accounts.nft_mint, cfg.network.collection):
        raise WrongCollection(data={"mint": to_base58(accounts.nft_mint)})

    host.collectibles.burn(accounts.nft_mint, accounts.nft_source, accounts.buyer, ctx.signers)
    log.info("burned collectible %s for %r", to_base58(accounts.nft_mint), params.name)

    created = finish_registration(
        host,
        ctx,
        name=params.name,
        name_address=accounts.name,
        reverse=reverse,
        space=params.space,
        owner=accounts.buyer,
        fee_payer=accounts.buyer,
        metadata_url=params.metadata_url,
    )
    return Registration(accounts.name, reverse, created, "collectible")


__all__ = ["CreateWithNftParams", "CreateWithNftAccounts", "create_with_nft"]
