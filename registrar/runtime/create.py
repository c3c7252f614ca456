"""
registrar.runtime.create — register a name paid in fungible tokens.

Ordered steps (the order is observable through side effects):

  1. the name must be canonical                                   → InvalidName
  2. the supplied name address must equal the derived one         → AddressMismatch
  3. the sale-state resource derived from it must be empty        → NameAlreadyRegistered
  4. the vault must belong to a recognized vault owner            → UnauthorizedVault
  5. price the name (tiers → oracle → native discount → referral discount),
     pay the referrer fee first, then the net amount to the vault
  6. create the name record (registry authority co-signs as root owner)
  7. create the reverse-lookup record unless one already exists

Payments precede creation; only the enclosing transaction makes the whole thing
atomic. Two entry shapes exist: `Create` (the buyer pays rent and owns the name)
and `CreateSplitV2` (separate domain owner and rent payer).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Optional

import msgspec

from ..address import (
    derive_name_address,
    derive_reverse_address,
    derive_sale_state_address,
    expect_address,
    hashed_name,
    to_base58,
)
from ..constants import MAX_PERMITTED_DATA_LEN, NAME_HEADER_LEN
from ..partners import check_referrer
from ..pricing import Quote, quote, resolve_token
from ..state.records import NameRecordHeader
from .checks import check_fixed_keys, check_name_vacant, check_sale_state_empty, check_vault
from .context import Host, TxContext
from .create_reverse import create_reverse_record

log = logging.getLogger(__name__)

U16 = Annotated[int, msgspec.Meta(ge=0, le=0xFFFF)]
# Data bytes after the name header, bounded by the ledger allocation limit
Space = Annotated[int, msgspec.Meta(ge=0, le=MAX_PERMITTED_DATA_LEN - NAME_HEADER_LEN)]


class CreateParams(msgspec.Struct, array_like=True, forbid_unknown_fields=True):
    name: str
    space: Space
    referrer_idx: Optional[U16] = None
    metadata_url: Optional[str] = None


@dataclass(frozen=True)
class CreateSplitV2Accounts:
    naming_service_program: bytes
    root_domain: bytes
    name: bytes
    reverse_lookup: bytes
    system_program: bytes
    registry_authority: bytes
    buyer: bytes
    domain_owner: bytes
    fee_payer: bytes
    buyer_token_source: bytes
    price_feed: bytes
    vault: bytes
    token_program: bytes
    state: bytes
    referrer_account: Optional[bytes] = None


@dataclass(frozen=True)
class CreateAccounts:
    """`Create` shape: the buyer also pays rent and receives the name."""
    naming_service_program: bytes
    root_domain: bytes
    name: bytes
    reverse_lookup: bytes
    system_program: bytes
    registry_authority: bytes
    buyer: bytes
    buyer_token_source: bytes
    price_feed: bytes
    vault: bytes
    token_program: bytes
    state: bytes
    referrer_account: Optional[bytes] = None

    def split(self) -> CreateSplitV2Accounts:
        return CreateSplitV2Accounts(
            naming_service_program=self.naming_service_program,
            root_domain=self.root_domain,
            name=self.name,
            reverse_lookup=self.reverse_lookup,
            system_program=self.system_program,
            registry_authority=self.registry_authority,
            buyer=self.buyer,
            domain_owner=self.buyer,
            fee_payer=self.buyer,
            buyer_token_source=self.buyer_token_source,
            price_feed=self.price_feed,
            vault=self.vault,
            token_program=self.token_program,
            state=self.state,
            referrer_account=self.referrer_account,
        )


@dataclass(frozen=True)
class Registration:
    name: bytes
    reverse_lookup: bytes
    reverse_created: bool
    payment: str = "token"
    quote: Optional[Quote] = None


# ----------------------------- shared tail ----------------------------------


def create_name_record(
    host: Host,
    ctx: TxContext,
    *,
    name: str,
    name_address: bytes,
    space: int,
    owner: bytes,
    fee_payer: bytes,
) -> None:
    """Step 6: the registry authority co-signs as owner of the root domain."""
    cfg = host.config
    host.names.create(
        address=name_address,
        hashed=hashed_name(name),
        lamports=host.ledger.minimum_balance(NameRecordHeader.LEN + space),
        space=space,
        payer=fee_payer,
        owner=owner,
        signers=host.authority_signers(ctx),
        parent=cfg.root_domain,
        parent_owner=cfg.authority.address,
    )


def finish_registration(
    host: Host,
    ctx: TxContext,
    *,
    name: str,
    name_address: bytes,
    reverse: bytes,
    space: int,
    owner: bytes,
    fee_payer: bytes,
    metadata_url: Optional[str],
) -> bool:
    """Steps 6–7; returns whether a reverse record was created."""
    create_name_record(
        host, ctx, name=name, name_address=name_address, space=space, owner=owner, fee_payer=fee_payer
    )
    if not host.ledger.get(reverse).is_empty:
        log.info("reverse lookup %s already exists, keeping it", to_base58(reverse))
        return False
    create_reverse_record(
        host,
        ctx,
        reverse=reverse,
        name_address=name_address,
        name=name,
        metadata_url=metadata_url,
        fee_payer=fee_payer,
    )
    return True


def derive_registration_targets(host: Host, name: str, accounts) -> bytes:
    """Steps 1–3 plus the reverse address check; returns the reverse address."""
    cfg = host.config
    name_address = derive_name_address(name, cfg=cfg)
    expect_address(accounts.name, name_address, role="name")
    expect_address(accounts.state, derive_sale_state_address(name_address, cfg.program_id), role="sale state")
    check_sale_state_empty(host, accounts.state)
    reverse = derive_reverse_address(name_address, cfg.authority.address, cfg=cfg)
    expect_address(accounts.reverse_lookup, reverse, role="reverse lookup")
    return reverse


# ----------------------------- entry points ---------------------------------


def create_split_v2(
    host: Host, ctx: TxContext, accounts: CreateSplitV2Accounts, params: CreateParams
) -> Registration:
    cfg = host.config
    check_fixed_keys(host, accounts)
    ctx.require_signer(accounts.buyer, role="buyer")
    ctx.require_signer(accounts.fee_payer, role="fee payer")
    reverse = derive_registration_targets(host, params.name, accounts)
    check_name_vacant(host, accounts.name)
    check_vault(host, accounts.vault)

    # Step 5: price and pay
    source = host.tokens.account(accounts.buyer_token_source)
    token = resolve_token(source.mint, accounts.price_feed, cfg)
    reading = host.oracle.read(accounts.price_feed)

    referrer_owner: Optional[bytes] = None
    if accounts.referrer_account is not None:
        referrer = host.tokens.account(accounts.referrer_account)
        if cfg.features.enforce_referrer_whitelist:
            check_referrer(cfg.referrer_whitelist, params.referrer_idx, referrer.owner)
        referrer_owner = referrer.owner

    q = quote(params.name, token, reading, ctx.now, cfg, referrer=referrer_owner)
    if accounts.referrer_account is not None:
        host.tokens.transfer(
            accounts.buyer_token_source, accounts.referrer_account, accounts.buyer, q.referral_fee, ctx.signers
        )
    host.tokens.transfer(accounts.buyer_token_source, accounts.vault, accounts.buyer, q.vault_amount, ctx.signers)

    created = finish_registration(
        host,
        ctx,
        name=params.name,
        name_address=accounts.name,
        reverse=reverse,
        space=params.space,
        owner=accounts.domain_owner,
        fee_payer=accounts.fee_payer,
        metadata_url=params.metadata_url,
    )
    log.info("registered %r for %s", params.name, to_base58(accounts.domain_owner))
    payment = "native" if token.mint == cfg.native_mint else "token"
    return Registration(accounts.name, reverse, created, payment, q)


def create(host: Host, ctx: TxContext, accounts: CreateAccounts, params: CreateParams) -> Registration:
    return create_split_v2(host, ctx, accounts.split(), params)


__all__ = [
    "CreateParams",
    "CreateAccounts",
    "CreateSplitV2Accounts",
    "Registration",
    "create_name_record",
    "finish_registration",
    "derive_registration_targets",
    "create_split_v2",
    "create",
]
