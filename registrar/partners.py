"""
registrar.partners — referral partner table and referrer whitelist.

A partner may carry two independent, time-windowed terms:

- a *discount* (percent taken off the token price), and
- a *referrer fee* (percent of the discounted price paid to the referrer).

A term is active strictly inside its window (``start < now < end``) and only when
its percent is present. An inactive or absent fee term falls back to the default
referrer fee.

The table is injected through configuration: each network ships a built-in table
(registrar.constants) and operators may overlay or replace it with a YAML file:

    replace: false            # true → ignore the built-in table
    partners:
      3ogYncmMM5CmytsGCqKHydmXmKUZ6sGWvizkzqwT7zb1:
        discount_pct: 10
        discount_start: 1682864495
        discount_end: 1719226965
        fee_pct: 10
        fee_start: 1682864495
        fee_end: 1719226965
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import yaml

from .address import parse_address, to_base58
from .constants import REFERRER_FEES_PCT, U64_MAX, PartnerRow
from .errors import UnauthorizedReferrer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartnerTerms:
    discount_pct: Optional[int] = None
    discount_start: int = 0
    discount_end: int = 0
    fee_pct: Optional[int] = None
    fee_start: int = 0
    fee_end: int = 0

    @classmethod
    def from_row(cls, row: PartnerRow) -> "PartnerTerms":
        d, ds, de, f, fs, fe = row
        return cls(d, int(ds), int(de), f, int(fs), int(fe))

    def active_discount(self, now: int) -> Optional[int]:
        if self.discount_pct is not None and self.discount_start < now < self.discount_end:
            return self.discount_pct
        return None

    def active_fee(self, now: int) -> Optional[int]:
        if self.fee_pct is not None and self.fee_start < now < self.fee_end:
            return self.fee_pct
        return None


class PartnerTable:
    """Read-only mapping partner address → PartnerTerms."""

    def __init__(
        self,
        terms: Optional[Mapping[bytes, PartnerTerms]] = None,
        *,
        default_fee_pct: int = REFERRER_FEES_PCT,
    ) -> None:
        self._terms: Mapping[bytes, PartnerTerms] = MappingProxyType(dict(terms or {}))
        self.default_fee_pct = int(default_fee_pct)

    @classmethod
    def from_rows(
        cls, rows: Mapping[bytes, PartnerRow], *, default_fee_pct: int = REFERRER_FEES_PCT
    ) -> "PartnerTable":
        return cls(
            {k: PartnerTerms.from_row(v) for k, v in rows.items()},
            default_fee_pct=default_fee_pct,
        )

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, referrer: object) -> bool:
        return referrer in self._terms

    def get(self, referrer: bytes) -> Optional[PartnerTerms]:
        return self._terms.get(bytes(referrer))

    def items(self):
        return self._terms.items()

    def resolve(self, referrer: bytes, now: int) -> Tuple[Optional[int], int]:
        """
        Return (discount_pct | None, fee_pct) for `referrer` at time `now`.
        """
        terms = self.get(referrer)
        if terms is None:
            return None, self.default_fee_pct
        discount = terms.active_discount(now)
        fee = terms.active_fee(now)
        return discount, (self.default_fee_pct if fee is None else fee)

    def merged(self, other: Mapping[bytes, PartnerTerms]) -> "PartnerTable":
        terms: Dict[bytes, PartnerTerms] = dict(self._terms)
        terms.update(other)
        return PartnerTable(terms, default_fee_pct=self.default_fee_pct)

    def with_default_fee(self, pct: int) -> "PartnerTable":
        return PartnerTable(self._terms, default_fee_pct=pct)


# ----------------------------- whitelist ------------------------------------


def check_referrer(whitelist: Sequence[bytes], index: Optional[int], owner: bytes) -> None:
    """
    The referrer token account owner must sit at `index` in the whitelist.
    """
    if index is None or not 0 <= index < len(whitelist):
        raise UnauthorizedReferrer(
            "referrer index is missing or out of range", index=index, owner=to_base58(owner)
        )
    if whitelist[index] != owner:
        raise UnauthorizedReferrer(
            "referrer token account owner is not whitelisted",
            index=index,
            owner=to_base58(owner),
        )


# ----------------------------- YAML loader ----------------------------------


def _pct(entry: Mapping[str, Any], key: str, who: str) -> Optional[int]:
    v = entry.get(key)
    if v is None:
        return None
    if not isinstance(v, int) or isinstance(v, bool) or not 0 <= v <= 100:
        raise ValueError(f"partners.{who}.{key} must be an integer in [0,100]")
    return v


def _ts(entry: Mapping[str, Any], key: str, who: str, default: int) -> int:
    v = entry.get(key, default)
    if not isinstance(v, int) or isinstance(v, bool) or not 0 <= v <= U64_MAX:
        raise ValueError(f"partners.{who}.{key} must be a u64 timestamp")
    return v


def _terms_from_entry(who: str, entry: Any) -> PartnerTerms:
    if not isinstance(entry, dict):
        raise ValueError(f"partners.{who} must be a map/object")
    return PartnerTerms(
        discount_pct=_pct(entry, "discount_pct", who),
        discount_start=_ts(entry, "discount_start", who, 0),
        discount_end=_ts(entry, "discount_end", who, 0),
        fee_pct=_pct(entry, "fee_pct", who),
        fee_start=_ts(entry, "fee_start", who, 0),
        fee_end=_ts(entry, "fee_end", who, 0),
    )


def load_partner_file(path: str, base: Optional[PartnerTable] = None) -> PartnerTable:
    """
    Load a YAML partner table, overlaying `base` unless the file sets ``replace: true``.

    Raises ValueError on any validation failure.
    """
    try:
        with open(path, "rb") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ValueError(f"partner file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ValueError(f"partner file is not valid YAML: {path}") from e

    if not isinstance(data, dict):
        raise ValueError("partner YAML must be a mapping at the top level")
    raw = data.get("partners", {}) or {}
    if not isinstance(raw, dict):
        raise ValueError("partners must be a map/object")

    terms: Dict[bytes, PartnerTerms] = {}
    for who, entry in raw.items():
        terms[parse_address(str(who), name=f"partner {who}")] = _terms_from_entry(str(who), entry)

    base = base or PartnerTable()
    if bool(data.get("replace", False)):
        table = PartnerTable(terms, default_fee_pct=base.default_fee_pct)
    else:
        table = base.merged(terms)
    log.info("loaded %d partner entries from %s (table size %d)", len(terms), path, len(table))
    return table


__all__ = [
    "PartnerTerms",
    "PartnerTable",
    "check_referrer",
    "load_partner_file",
]
