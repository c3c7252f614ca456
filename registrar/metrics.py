"""
registrar.metrics — Prometheus counters for the registrar core.

Centralized registry: consumers call `get_registry()` and `generate_latest_text()`
to expose metrics via HTTP.

Exposed metrics (names are prefixed with `registrar_`):
  - instructions_total{instruction,result} : Counter — processed instructions by outcome
  - registrations_total{payment}           : Counter — names created, by payment path
  - referral_fees_total                    : Counter — token units paid to referrers

Labels:
  - instruction ∈ {create, create_split_v2, create_reverse, update_metadata, delete,
                   create_with_nft, unknown}
  - result      ∈ {success, rejected, ledger_error}
  - payment     ∈ {token, native, collectible}
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

_PREFIX = "registrar_"

# ------------------------------ registry & ctor ------------------------------

_registry: Optional[CollectorRegistry] = None

INSTRUCTIONS_TOTAL: Counter
REGISTRATIONS_TOTAL: Counter
REFERRAL_FEES_TOTAL: Counter


def get_registry() -> CollectorRegistry:
    """
    Return the metrics registry, creating one on first use.
    """
    global _registry
    if _registry is None:
        _registry = CollectorRegistry()
        _build_metrics()
    return _registry


def _build_metrics() -> None:
    global INSTRUCTIONS_TOTAL, REGISTRATIONS_TOTAL, REFERRAL_FEES_TOTAL
    reg = _registry
    INSTRUCTIONS_TOTAL = Counter(
        _PREFIX + "instructions_total",
        "Instructions processed (by instruction and result).",
        labelnames=("instruction", "result"),
        registry=reg,
    )
    REGISTRATIONS_TOTAL = Counter(
        _PREFIX + "registrations_total",
        "Names registered (by payment path).",
        labelnames=("payment",),
        registry=reg,
    )
    REFERRAL_FEES_TOTAL = Counter(
        _PREFIX + "referral_fees_total",
        "Token units transferred to referrers.",
        registry=reg,
    )


# ------------------------------ helpers -------------------------------------


def observe_instruction(*, instruction: str, result: str) -> None:
    get_registry()
    INSTRUCTIONS_TOTAL.labels(instruction=instruction, result=result).inc()


def observe_registration(*, payment: str, referral_fee: int = 0) -> None:
    get_registry()
    REGISTRATIONS_TOTAL.labels(payment=payment).inc()
    if referral_fee > 0:
        REFERRAL_FEES_TOTAL.inc(referral_fee)


# ------------------------------ exposition ----------------------------------


def generate_latest_text() -> bytes:
    """
    Return Prometheus exposition format for the current registry.
    """
    return generate_latest(get_registry())


__all__ = [
    "get_registry",
    "generate_latest_text",
    "observe_instruction",
    "observe_registration",
    "CONTENT_TYPE_LATEST",
]
