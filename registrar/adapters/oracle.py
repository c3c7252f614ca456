"""
registrar.adapters.oracle — price-feed collaborator.

A reading is the token's USD price as a 32.32 fixed-point number expressed in
USD micro-units per smallest token unit, plus the time it was published.

Each payment mint has exactly one feed, derived from the mint under the oracle
program id; the registrar refuses any other feed for that mint.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Protocol, Union

from ..address import ensure_address, find_program_address, to_base58
from ..errors import AccountNotFound

QUOTE_DECIMALS = 6
FEED_SHARD = b"\x00\x00"


@dataclass(frozen=True)
class OracleReading:
    price_fp32: int
    as_of: int

    @classmethod
    def from_decimal(
        cls,
        price: Union[Decimal, str, int],
        decimals: int,
        as_of: int,
        *,
        quote_decimals: int = QUOTE_DECIMALS,
    ) -> "OracleReading":
        """Build a reading from a human USD price for one whole token."""
        scaled = Decimal(price) * (Decimal(10) ** quote_decimals) / (Decimal(10) ** decimals)
        return cls(price_fp32=int(scaled * (1 << 32)), as_of=int(as_of))


def price_feed_address(mint: bytes, oracle_program_id: bytes) -> bytes:
    addr, _ = find_program_address([FEED_SHARD, ensure_address(mint, name="mint")], oracle_program_id)
    return addr


class PriceOracle(Protocol):
    def read(self, feed: bytes) -> OracleReading: ...


class InMemoryOracle:
    """Feeds are host-published and never written by instructions."""

    def __init__(self) -> None:
        self._feeds: Dict[bytes, OracleReading] = {}

    def publish(self, feed: bytes, reading: OracleReading) -> None:
        self._feeds[ensure_address(feed, name="feed")] = reading

    def read(self, feed: bytes) -> OracleReading:
        try:
            return self._feeds[bytes(feed)]
        except KeyError:
            raise AccountNotFound("price feed not found", address=to_base58(feed)) from None


__all__ = ["OracleReading", "PriceOracle", "InMemoryOracle", "price_feed_address", "QUOTE_DECIMALS"]
