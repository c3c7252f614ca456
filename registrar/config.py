"""
registrar.config — runtime configuration for the registrar core.

This module centralizes knobs for:
  • Network selection (mainnet/devnet constant bundles: program ids, root domain,
    vault owners, payment tokens, referrer whitelist, USD scale)
  • Referral partner table (built-in per network, optionally overlaid from YAML)
  • Pricing guards (oracle freshness window, default referrer fee)
  • Feature flags (referrer whitelist enforcement)

Configuration may be provided via environment variables. Defaults reproduce the
mainnet deployment.

Environment variables (all optional):
  REGISTRAR_NETWORK           -> mainnet | devnet (default: mainnet)
  REGISTRAR_PARTNERS_FILE     -> path to a YAML partner table (default: built-in only)
  REGISTRAR_ORACLE_MAX_AGE    -> seconds, integer (default: 60)
  REGISTRAR_REFERRER_FEE_PCT  -> integer in [0,100] (default: 5)
  REGISTRAR_REFERRER_CHECK    -> 0/1/true/false (default: 1)

Programmatic usage:
    from registrar.config import get_config
    cfg = get_config()
    if cfg.features.enforce_referrer_whitelist:
        ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .address import SigningCapability, registry_authority, to_base58
from .constants import NETWORKS, ORACLE_MAX_AGE_SECS, REFERRER_FEES_PCT, NetworkConstants, TokenInfo
from .partners import PartnerTable, load_partner_file

# ----------------------------- helpers -------------------------------------


_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "f", "no", "n", "off"}


def _bool_env(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in _BOOL_TRUE:
        return True
    if v in _BOOL_FALSE:
        return False
    return bool(v) if v != "" else default


# ------------------------------ dataclasses ---------------------------------


@dataclass(frozen=True)
class Features:
    enforce_referrer_whitelist: bool = True


@dataclass(frozen=True)
class RegistryConfig:
    network: NetworkConstants
    partners: PartnerTable
    tokens: Mapping[bytes, TokenInfo]
    oracle_max_age: int = ORACLE_MAX_AGE_SECS
    features: Features = Features()

    # Shorthands for the fixed keys every operation checks.

    @property
    def program_id(self) -> bytes:
        return self.network.program_id

    @property
    def name_service_id(self) -> bytes:
        return self.network.name_service_id

    @property
    def system_program_id(self) -> bytes:
        return self.network.system_program_id

    @property
    def token_program_id(self) -> bytes:
        return self.network.token_program_id

    @property
    def root_domain(self) -> bytes:
        return self.network.root_domain

    @property
    def vault_owners(self) -> Tuple[bytes, ...]:
        return self.network.vault_owners

    @property
    def native_mint(self) -> bytes:
        return self.network.native_mint

    @property
    def referrer_whitelist(self) -> Tuple[bytes, ...]:
        return self.network.referrer_whitelist

    @property
    def usd_scale(self) -> int:
        return self.network.usd_scale

    @property
    def authority(self) -> SigningCapability:
        return registry_authority(self.network.program_id)

    def to_dict(self) -> Dict[str, object]:
        return {
            "network": self.network.name,
            "program_id": to_base58(self.program_id),
            "root_domain": to_base58(self.root_domain),
            "tokens": sorted(t.symbol for t in self.tokens.values()),
            "partners": len(self.partners),
            "default_fee_pct": self.partners.default_fee_pct,
            "oracle_max_age": self.oracle_max_age,
            "enforce_referrer_whitelist": self.features.enforce_referrer_whitelist,
        }


# ------------------------------ loader --------------------------------------


def _validate(cfg: RegistryConfig) -> RegistryConfig:
    if cfg.oracle_max_age < 0:
        raise ValueError("oracle_max_age must be ≥ 0")
    if not 0 <= cfg.partners.default_fee_pct <= 100:
        raise ValueError("referrer_fee_pct must be in [0,100]")
    if cfg.native_mint not in cfg.tokens:
        raise ValueError("native mint must be a supported payment token")
    return cfg


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
) -> RegistryConfig:
    """
    Build a RegistryConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides; keys support:
          'network' (name or NetworkConstants), 'partners_file', 'partners'
          (PartnerTable), 'oracle_max_age', 'referrer_fee_pct',
          'enforce_referrer_whitelist'
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    network = overrides.get("network", env.get("REGISTRAR_NETWORK", "mainnet"))
    if not isinstance(network, NetworkConstants):
        key = str(network).strip().lower()
        if key not in NETWORKS:
            raise ValueError(f"unknown network: {network!r} (expected one of {sorted(NETWORKS)})")
        network = NETWORKS[key]

    fee_pct = int(
        overrides.get("referrer_fee_pct", env.get("REGISTRAR_REFERRER_FEE_PCT", REFERRER_FEES_PCT))
    )

    partners = overrides.get("partners")
    if partners is None:
        partners = PartnerTable.from_rows(network.partners, default_fee_pct=fee_pct)
        partners_file = overrides.get("partners_file", env.get("REGISTRAR_PARTNERS_FILE"))
        if partners_file:
            partners = load_partner_file(str(partners_file), partners)
    elif "referrer_fee_pct" in overrides:
        partners = partners.with_default_fee(fee_pct)

    if "enforce_referrer_whitelist" in overrides:
        enforce = bool(overrides["enforce_referrer_whitelist"])
    else:
        enforce = _bool_env(env.get("REGISTRAR_REFERRER_CHECK"), True)
    features = Features(enforce_referrer_whitelist=enforce)

    cfg = RegistryConfig(
        network=network,
        partners=partners,
        tokens=MappingProxyType({t.mint: t for t in network.tokens}),
        oracle_max_age=int(
            overrides.get("oracle_max_age", env.get("REGISTRAR_ORACLE_MAX_AGE", ORACLE_MAX_AGE_SECS))
        ),
        features=features,
    )
    return _validate(cfg)


@lru_cache(maxsize=1)
def get_config() -> RegistryConfig:
    """
    Cached global config. Suitable for application bootstraps and module-level consumers.
    """
    return load_config()


# ----------------------------- pretty-print ---------------------------------


def summary(cfg: Optional[RegistryConfig] = None) -> str:
    """
    Return a human-friendly one-line summary of the most important registrar knobs.
    """
    cfg = cfg or get_config()
    return (
        "registrar{"
        f"net={cfg.network.name}, program={to_base58(cfg.program_id)}, "
        f"tokens={len(cfg.tokens)}, partners={len(cfg.partners)}, "
        f"fee={cfg.partners.default_fee_pct}%, oracle_age={cfg.oracle_max_age}s, "
        f"whitelist={int(cfg.features.enforce_referrer_whitelist)}"
        "}"
    )


__all__ = [
    "Features",
    "RegistryConfig",
    "load_config",
    "get_config",
    "summary",
]
