"""
registrar.pricing — USD tiering, oracle conversion and discount/fee arithmetic.

All quantities are unsigned 64-bit integers. Every operation that can exceed the
u64 range raises `Overflow` instead of wrapping, and the multiply-then-divide
ordering below is part of the price contract (changing it changes rounding):

    token_price  = fp32_div(usd_price, oracle_price_fp32)      # (a << 32) // b
    native       = token_price * 95 // 100
    discounted   = (100 - discount_pct) * price // 100
    referral_fee = price * fee_pct // 100
    vault_amount = price - referral_fee

Name length is counted in extended grapheme clusters, so "🏳️‍🌈" is one
character and prices like a one-letter name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

import regex

from .address import expect_address, to_base58
from .adapters.oracle import OracleReading, price_feed_address
from .constants import NATIVE_DISCOUNT_PCT, ORACLE_MAX_AGE_SECS, U64_MAX, TokenInfo
from .errors import Overflow, StaleOracle, UnsupportedToken

if TYPE_CHECKING:  # pragma: no cover
    from .config import RegistryConfig

log = logging.getLogger(__name__)

# (max grapheme length, USD multiplier); lengths above the last row cost 1
_USD_TIERS: Tuple[Tuple[int, int], ...] = (
    (1, 750),
    (2, 700),
    (3, 640),
    (4, 160),
    (9, 20),
)

_GRAPHEME = regex.compile(r"\X")


def grapheme_len(name: str) -> int:
    return len(_GRAPHEME.findall(name))


def usd_multiplier(length: int) -> int:
    for bound, mult in _USD_TIERS:
        if length <= bound:
            return mult
    return 1


def price_usd(length: int, scale: int) -> int:
    """USD price of a name of `length` graphemes, in `scale` units per dollar."""
    return checked_mul(usd_multiplier(length), scale, op="price_usd")


# ----------------------------- u64 arithmetic --------------------------------


def _u64(value: int, op: str) -> int:
    if value < 0 or value > U64_MAX:
        raise Overflow(op=op, data={"value": str(value)})
    return value


def checked_mul(a: int, b: int, *, op: str = "mul") -> int:
    return _u64(a * b, op)


def checked_sub(a: int, b: int, *, op: str = "sub") -> int:
    return _u64(a - b, op)


def fp32_div(a: int, b: int) -> int:
    """(a << 32) // b, refusing b == 0 and results beyond u64."""
    if b == 0:
        raise Overflow("division by zero", op="fp32_div")
    return _u64((a << 32) // b, "fp32_div")


# ----------------------------- conversion -----------------------------------


def resolve_token(mint: bytes, feed: bytes, cfg: "RegistryConfig") -> TokenInfo:
    """
    The payment token for `mint`; `feed` must be that token's configured price feed.
    """
    token = cfg.tokens.get(bytes(mint))
    if token is None:
        raise UnsupportedToken(mint=to_base58(mint))
    expect_address(feed, price_feed_address(token.mint, cfg.network.oracle_program_id), role="price feed")
    return token


def price_in_token(
    usd_price: int, reading: OracleReading, now: int, max_age: int = ORACLE_MAX_AGE_SECS
) -> int:
    age = int(now) - int(reading.as_of)
    if age > max_age:
        raise StaleOracle(age=age, max_age=max_age)
    return fp32_div(usd_price, reading.price_fp32)


def apply_native_discount(price: int) -> int:
    return checked_mul(price, 100 - NATIVE_DISCOUNT_PCT, op="native_discount") // 100


def apply_discount(price: int, pct: int) -> int:
    return checked_mul(checked_sub(100, pct, op="discount"), price, op="discount") // 100


def split_fee(price: int, fee_pct: int) -> Tuple[int, int]:
    """Return (referral_fee, vault_amount)."""
    fee = checked_mul(price, fee_pct, op="referral_fee") // 100
    return fee, checked_sub(price, fee, op="vault_amount")


# ----------------------------- quote ----------------------------------------


@dataclass(frozen=True)
class Quote:
    usd_price: int
    token_price: int
    discount_pct: Optional[int]
    fee_pct: int
    referral_fee: int
    vault_amount: int

    @property
    def total(self) -> int:
        return self.referral_fee + self.vault_amount


def quote(
    name: str,
    token: TokenInfo,
    reading: OracleReading,
    now: int,
    cfg: "RegistryConfig",
    *,
    referrer: Optional[bytes] = None,
) -> Quote:
    """
    Full price of `name` paid with `token`, optionally through `referrer`
    (the referrer token-account owner, already whitelisted by the caller).
    """
    usd = price_usd(grapheme_len(name), cfg.usd_scale)
    price = price_in_token(usd, reading, now, cfg.oracle_max_age)
    if token.mint == cfg.native_mint:
        price = apply_native_discount(price)

    discount: Optional[int] = None
    fee_pct = 0
    fee, net = 0, price
    if referrer is not None:
        discount, fee_pct = cfg.partners.resolve(referrer, now)
        if discount is not None:
            price = apply_discount(price, discount)
        fee, net = split_fee(price, fee_pct)

    log.info(
        "registering %r for %d usd units (%d %s units, discount=%s, fee=%d%%)",
        name, usd, price, token.symbol, discount, fee_pct,
    )
    return Quote(usd, price, discount, fee_pct, fee, net)


__all__ = [
    "grapheme_len",
    "usd_multiplier",
    "price_usd",
    "checked_mul",
    "checked_sub",
    "fp32_div",
    "resolve_token",
    "price_in_token",
    "apply_native_discount",
    "apply_discount",
    "split_fee",
    "Quote",
    "quote",
]
