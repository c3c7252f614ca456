"""
registrar.tests helpers

- Deterministic Hypothesis profiles (local / ci).
- Well-known test keys and account builders shared by the operation tests:
    create_accounts(), reverse_accounts(), delete_accounts(), metadata_accounts()
- make_host(): a fully wired in-memory host
"""

from __future__ import annotations

import os
from dataclasses import replace
from typing import Optional

from hypothesis import settings

from registrar.address import (
    ZERO_ADDRESS,
    derive_name_address,
    derive_resale_state_address,
    derive_reverse_address,
    derive_sale_state_address,
)
from registrar.adapters.oracle import OracleReading, price_feed_address
from registrar.config import RegistryConfig
from registrar.constants import MAINNET
from registrar.runtime.context import Host
from registrar.runtime.create import CreateAccounts, CreateSplitV2Accounts
from registrar.runtime.create_reverse import CreateReverseAccounts
from registrar.runtime.delete import DeleteAccounts
from registrar.runtime.update_metadata import UpdateMetadataAccounts
from registrar.state.ledger import Resource, minimum_balance
from registrar.state.records import NameRecordHeader

# ----- Hypothesis -----
settings.register_profile("local", settings(max_examples=60, deadline=None))
settings.register_profile("ci", settings(max_examples=200, deadline=None))
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE") or ("ci" if os.environ.get("CI") else "local"))

# ----- Clock -----
# Inside the 10%/10% window of the first whitelisted partner.
NOW = 1_700_000_000

# ----- Keys -----
BUYER = b"\x01" * 32
DOMAIN_OWNER = b"\x02" * 32
FEE_PAYER = b"\x03" * 32
TARGET = b"\x04" * 32
STRANGER = b"\x05" * 32

FIDA = MAINNET.native_mint
USDC = next(t.mint for t in MAINNET.tokens if t.symbol == "USDC")
SOL = next(t.mint for t in MAINNET.tokens if t.symbol == "SOL")

BUYER_FIDA = b"\x11" * 32
BUYER_USDC = b"\x12" * 32
VAULT_FIDA = b"\x21" * 32
VAULT_USDC = b"\x22" * 32
REFERRER_FIDA = b"\x31" * 32
ROGUE_VAULT = b"\x41" * 32

# whitelist[0] is also a partner with a 10% discount and 10% fee around NOW
REFERRER_OWNER = MAINNET.referrer_whitelist[0]

# 0.25 USD per FIDA, 6 decimals: 2^30 in 32.32 fixed point
FIDA_PRICE_FP32 = 1 << 30
USDC_PRICE_FP32 = 1 << 32

INITIAL_TOKENS = 10**13
INITIAL_LAMPORTS = 10**12


def feed_for(mint: bytes) -> bytes:
    return price_feed_address(mint, MAINNET.oracle_program_id)


# ----- Account builders -----


def create_accounts(
    cfg: RegistryConfig,
    name: str,
    *,
    source: bytes = BUYER_FIDA,
    mint: bytes = FIDA,
    vault: bytes = VAULT_FIDA,
    referrer: Optional[bytes] = None,
) -> CreateAccounts:
    name_address = derive_name_address(name, cfg=cfg)
    return CreateAccounts(
        naming_service_program=cfg.name_service_id,
        root_domain=cfg.root_domain,
        name=name_address,
        reverse_lookup=derive_reverse_address(name_address, cfg.authority.address, cfg=cfg),
        system_program=cfg.system_program_id,
        registry_authority=cfg.authority.address,
        buyer=BUYER,
        buyer_token_source=source,
        price_feed=feed_for(mint),
        vault=vault,
        token_program=cfg.token_program_id,
        state=derive_sale_state_address(name_address, cfg.program_id),
        referrer_account=referrer,
    )


def split_accounts(cfg: RegistryConfig, name: str, **kw) -> CreateSplitV2Accounts:
    return replace(create_accounts(cfg, name, **kw).split(), domain_owner=DOMAIN_OWNER, fee_payer=FEE_PAYER)


def reverse_accounts(
    cfg: RegistryConfig,
    name: str,
    *,
    parent: Optional[bytes] = None,
    parent_owner: Optional[bytes] = None,
) -> CreateReverseAccounts:
    name_address = derive_name_address(name, parent, cfg=cfg)
    return CreateReverseAccounts(
        naming_service_program=cfg.name_service_id,
        root_domain=cfg.root_domain,
        reverse_lookup=derive_reverse_address(name_address, cfg.authority.address, parent, cfg=cfg),
        system_program=cfg.system_program_id,
        registry_authority=cfg.authority.address,
        fee_payer=BUYER,
        parent_name=parent,
        parent_name_owner=parent_owner,
    )


def delete_accounts(cfg: RegistryConfig, name: str, *, owner: bytes = BUYER) -> DeleteAccounts:
    name_address = derive_name_address(name, cfg=cfg)
    return DeleteAccounts(
        naming_service_program=cfg.name_service_id,
        system_program=cfg.system_program_id,
        domain=name_address,
        reverse=derive_reverse_address(name_address, cfg.authority.address, cfg=cfg),
        reselling_state=derive_resale_state_address(name_address, cfg.program_id),
        state=derive_sale_state_address(name_address, cfg.program_id),
        registry_authority=cfg.authority.address,
        owner=owner,
        target=TARGET,
    )


def metadata_accounts(cfg: RegistryConfig, name: str, *, signer: bytes = BUYER) -> UpdateMetadataAccounts:
    name_address = derive_name_address(name, cfg=cfg)
    return UpdateMetadataAccounts(
        naming_service_program=cfg.name_service_id,
        root_domain=cfg.root_domain,
        reverse_lookup=derive_reverse_address(name_address, cfg.authority.address, cfg=cfg),
        system_program=cfg.system_program_id,
        registry_authority=cfg.authority.address,
        domain_owner=signer,
    )


# ----- Host wiring -----


def seed_root_domain(host: Host) -> None:
    """The root domain record is owned by the registry authority."""
    cfg = host.config
    header = NameRecordHeader(parent_name=ZERO_ADDRESS, owner=cfg.authority.address)
    host.ledger.set(
        cfg.root_domain,
        Resource(lamports=minimum_balance(NameRecordHeader.LEN), data=header.pack(), owner=cfg.name_service_id),
    )


def make_host(cfg: RegistryConfig) -> Host:
    """An in-memory host with a funded buyer, payment accounts, vaults and fresh feeds."""
    h = Host.in_memory(cfg)
    seed_root_domain(h)
    h.ledger.fund(BUYER, INITIAL_LAMPORTS)
    h.ledger.fund(FEE_PAYER, INITIAL_LAMPORTS)

    h.tokens.open_account(BUYER_FIDA, mint=FIDA, owner=BUYER, amount=INITIAL_TOKENS)
    h.tokens.open_account(BUYER_USDC, mint=USDC, owner=BUYER, amount=INITIAL_TOKENS)
    h.tokens.open_account(VAULT_FIDA, mint=FIDA, owner=MAINNET.vault_owner)
    h.tokens.open_account(VAULT_USDC, mint=USDC, owner=MAINNET.vault_owner_deprecated)
    h.tokens.open_account(REFERRER_FIDA, mint=FIDA, owner=REFERRER_OWNER)

    h.oracle.publish(feed_for(FIDA), OracleReading(FIDA_PRICE_FP32, NOW))
    h.oracle.publish(feed_for(USDC), OracleReading(USDC_PRICE_FP32, NOW))
    return h
