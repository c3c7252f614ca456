"""
registrar.constants — per-network constant bundles.

Two bundles are shipped, ``MAINNET`` and ``DEVNET``. They carry every fixed key the
registrar compares against (program ids, root domain, vault owners, payment mints, the
referrer whitelist) plus the built-in partner campaign table and the USD scale used by
the price tiers.

Keys are stored as raw 32-byte values; the base58 text form only exists in this file
and at the edges (logs, YAML, error payloads).
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import base58

U64_MAX = (1 << 64) - 1

HASH_PREFIX = "SPL Name Service"
PDA_MARKER = b"ProgramDerivedAddress"

# Name-record header: parent_name ‖ owner ‖ class
NAME_HEADER_LEN = 96

# Largest data payload the host ledger will allocate for one resource
MAX_PERMITTED_DATA_LEN = 10 * 1024 * 1024

REFERRER_FEES_PCT = 5
NATIVE_DISCOUNT_PCT = 5
ORACLE_MAX_AGE_SECS = 60

# Rent model of the host ledger
RENT_LAMPORTS_PER_BYTE_YEAR = 3480
RENT_EXEMPTION_YEARS = 2
ACCOUNT_STORAGE_OVERHEAD = 128

RESALE_STATE_SEED = b"\x01\x01"


def _k(text: str) -> bytes:
    raw = base58.b58decode(text)
    if len(raw) != 32:
        raise ValueError(f"constant key {text!r} is not 32 bytes")
    return raw


@dataclass(frozen=True)
class TokenInfo:
    symbol: str
    mint: bytes
    decimals: int


# (discount_pct, discount_start, discount_end, fee_pct, fee_start, fee_end)
PartnerRow = Tuple[Optional[int], int, int, Optional[int], int, int]


@dataclass(frozen=True)
class NetworkConstants:
    name: str
    program_id: bytes
    name_service_id: bytes
    system_program_id: bytes
    token_program_id: bytes
    oracle_program_id: bytes
    collectibles_program_id: bytes
    root_domain: bytes
    vault_owner: bytes
    vault_owner_deprecated: bytes
    native_mint: bytes
    collection: bytes
    usd_scale: int
    tokens: Tuple[TokenInfo, ...]
    referrer_whitelist: Tuple[bytes, ...]
    partners: Mapping[bytes, PartnerRow]

    @property
    def vault_owners(self) -> Tuple[bytes, ...]:
        return (self.vault_owner, self.vault_owner_deprecated)


# ------------------------------ shared keys ---------------------------------

NAME_SERVICE_ID = _k("namesLPneVptA9Z5rqUDD9tMTWEJwofgaYwp8cawRkX")
SYSTEM_PROGRAM_ID = _k("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = _k("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ORACLE_PROGRAM_ID = _k("pythWSnswVUd12oZpeFP8e9CVaEqJg25g1Vtc2biRsT")
COLLECTIBLES_PROGRAM_ID = _k("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
COLLECTION = _k("Dw74YSxTKVXsztPm3TmwbnfLK8KVaCZw69jVu4LE6uJe")

_SHARED_WHITELIST_HEAD = (
    "3ogYncmMM5CmytsGCqKHydmXmKUZ6sGWvizkzqwT7zb1",  # test wallet
    "DM1jJCkZZEwY5tmWbgvKRxsDFzXCdbfrYCCH1CtwguEs",
    "ADCp4QXFajHrhy4f43pD6GJFtQLkdBY2mjS9DfCk7tNW",
    "2XTgjw8yi1E3Etgj4CUyRD7Zk49gynH2U9gA5N2MY4NP",
)


def _partners(rows: Dict[str, PartnerRow]) -> Mapping[bytes, PartnerRow]:
    return MappingProxyType({_k(k): v for k, v in rows.items()})


# -------------------------------- mainnet -----------------------------------

MAINNET = NetworkConstants(
    name="mainnet",
    program_id=_k("jCebN34bUfdeUYJT13J1yG16XWQpt5PDx6Mse9GUqhR"),
    name_service_id=NAME_SERVICE_ID,
    system_program_id=SYSTEM_PROGRAM_ID,
    token_program_id=TOKEN_PROGRAM_ID,
    oracle_program_id=ORACLE_PROGRAM_ID,
    collectibles_program_id=COLLECTIBLES_PROGRAM_ID,
    root_domain=_k("58PwtjSDuFHuUkYjH9BYnnQKHfwo9reZhC2zMJv9JPkx"),
    vault_owner=_k("5D2zKog251d6KPCyFyLMt3KroWwXXPWSgTPyhV22K2gR"),
    vault_owner_deprecated=_k("GcWEQ9K78FV7LEHteFVciYApERk5YvQuFDQPk1yYJVXi"),
    native_mint=_k("EchesyfXePKdLtoiZSL8pBe8Myagyy8ZRqsACNCFGnvp"),
    collection=COLLECTION,
    usd_scale=1_000_000,
    tokens=(
        TokenInfo("USDC", _k("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"), 6),
        TokenInfo("USDT", _k("Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"), 6),
        TokenInfo("SOL", _k("So11111111111111111111111111111111111111112"), 9),
        TokenInfo("FIDA", _k("EchesyfXePKdLtoiZSL8pBe8Myagyy8ZRqsACNCFGnvp"), 6),
        TokenInfo("MSOL", _k("mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So"), 9),
        TokenInfo("BONK", _k("DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"), 5),
        TokenInfo("BAT", _k("EPeUFDgHRxs9xxEPVaL6kfGQvCon7jmAWKVUHuux1Tpz"), 8),
        TokenInfo("PYTH", _k("HZ1JovNiVvGrGNiiYvEozEVgZ58xaU3RKwX8eACQBCt3"), 6),
        TokenInfo("BSOL", _k("bSo13r4TkiE4KumL71LsHTPpL2euBYLFx6h9HP3piy1"), 9),
        TokenInfo("INJ", _k("6McPRfPV6bY1e9hLxWyG54W9i9Epq75QBvXg2oetBVTB"), 8),
    ),
    referrer_whitelist=tuple(
        _k(k)
        for k in _SHARED_WHITELIST_HEAD
        + (
            "5PwNeqQPiygQks9R17jUAodZQNuhvCqqkrxSaeNE8qTR",
            "8kJqxAbqbPLGLMgB6FhLcnw2SiUEavx2aEGM3WQGhtJF",
            "HemvJzwxvVpWBjPETpaseAH395WAxb2G73MeUfjVkK1u",
            "7hMiiUtkH4StMPJxyAtvzXTUjecTniQ8czkCPusf5eSW",
            "DGpjHo4yYA3NgHvhHTp3XfBFrESsx1DnhfTr8D881ZBM",
            "7vWSqSw1eCXZXXUubuHWssXELNQ8MLaDgAs2ErEfCKxn",
            "5F6gcdzpw7wUjNEugdsD4aLJdEQ4Wt8d6E85vaQXZQSJ",
            "XEy9o73JBN2pEuN7aspe8mVLaWbL4ozjJs1tNRxx8bL",
            "D5cLoAGjNTHKU1UGv2bYwbnyRoGTMe3sbpLtJW3fRq91",
            "FePcCmrr7vgjeFXcXtJHqShSXydaTrga2wfHRt9RrYvP",
            "5D2zKog251d6KPCyFyLMt3KroWwXXPWSgTPyhV22K2gR",
            "452cMqDHe5cf1Z96HxUNaQjiLckhMiZdZ5abe7oQ2iRB",
            "J8wRRXstYZRMVtj9eCvZw1oAmPQpe2UAhY2wcxiKWktZ",
        )
    ),
    partners=_partners(
        {
            "3ogYncmMM5CmytsGCqKHydmXmKUZ6sGWvizkzqwT7zb1": (10, 1682864495, 1719226965, 10, 1682864495, 1719226965),
            "5PwNeqQPiygQks9R17jUAodZQNuhvCqqkrxSaeNE8qTR": (None, 0, 0, 20, 0, U64_MAX),
            "8kJqxAbqbPLGLMgB6FhLcnw2SiUEavx2aEGM3WQGhtJF": (20, 1691544598, 1692072000, 15, 0, U64_MAX),
            "HemvJzwxvVpWBjPETpaseAH395WAxb2G73MeUfjVkK1u": (None, 0, 0, 15, 1695942000, U64_MAX),
            "DGpjHo4yYA3NgHvhHTp3XfBFrESsx1DnhfTr8D881ZBM": (None, 0, 0, 20, 0, U64_MAX),
            "7vWSqSw1eCXZXXUubuHWssXELNQ8MLaDgAs2ErEfCKxn": (None, 0, 0, 20, 0, U64_MAX),
            "5F6gcdzpw7wUjNEugdsD4aLJdEQ4Wt8d6E85vaQXZQSJ": (None, 0, 0, 20, 0, U64_MAX),
            "D5cLoAGjNTHKU1UGv2bYwbnyRoGTMe3sbpLtJW3fRq91": (20, 0, 1730311200, None, 0, 0),
            "FePcCmrr7vgjeFXcXtJHqShSXydaTrga2wfHRt9RrYvP": (20, 0, 1731636000, None, 0, 0),
            "5D2zKog251d6KPCyFyLMt3KroWwXXPWSgTPyhV22K2gR": (50, 1737266400, 1737608460, None, 0, 0),
            "J8wRRXstYZRMVtj9eCvZw1oAmPQpe2UAhY2wcxiKWktZ": (None, 0, 0, 100, 0, U64_MAX),
        }
    ),
)


# -------------------------------- devnet ------------------------------------

_DEVNET_VAULT = _k("SNSaTJbEv2iT3CUrCQYa9zpGjbBVWhFCPaSJHkaJX34")

DEVNET = NetworkConstants(
    name="devnet",
    program_id=_k("CySCGJK9kNNqM2eQSW9hGQ1FCZ51ZHetRfGsTLY1TTe9"),
    name_service_id=NAME_SERVICE_ID,
    system_program_id=SYSTEM_PROGRAM_ID,
    token_program_id=TOKEN_PROGRAM_ID,
    oracle_program_id=ORACLE_PROGRAM_ID,
    collectibles_program_id=COLLECTIBLES_PROGRAM_ID,
    root_domain=_k("5eoDkP6vCQBXqDV9YN2NdUs3nmML3dMRNmEYpiyVNBm2"),
    vault_owner=_DEVNET_VAULT,
    vault_owner_deprecated=_DEVNET_VAULT,
    native_mint=_k("fidaWCioBQjieRrUQDxxS5Uxmq1CLi2VuVRyv4dEBey"),
    collection=COLLECTION,
    usd_scale=1_000,
    tokens=(
        TokenInfo("USDC", _k("4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU"), 6),
        TokenInfo("USDT", _k("EJwZgeZrdC8TXTQbQBoL6bfuAnFUUy1PVCMB4DYPzVaS"), 6),
        TokenInfo("SOL", _k("So11111111111111111111111111111111111111112"), 9),
        TokenInfo("FIDA", _k("fidaWCioBQjieRrUQDxxS5Uxmq1CLi2VuVRyv4dEBey"), 6),
        TokenInfo("INJ", _k("DL4ivZm3NVHWk9ZvtcqTchxoKArDK4rT3vbDx2gYVr7P"), 8),
    ),
    referrer_whitelist=tuple(
        _k(k) for k in _SHARED_WHITELIST_HEAD + ("5oDWj8vr3vbcq9JZTtwXqrkCMZggMsDzNietvbr1BNfe",)
    ),
    partners=_partners(
        {
            "3ogYncmMM5CmytsGCqKHydmXmKUZ6sGWvizkzqwT7zb1": (10, 1682864495, 1779756628, 10, 1682864495, 1779756628),
            "ADCp4QXFajHrhy4f43pD6GJFtQLkdBY2mjS9DfCk7tNW": (20, 1686700800, 1687046399, 0, 0, U64_MAX),
            "5oDWj8vr3vbcq9JZTtwXqrkCMZggMsDzNietvbr1BNfe": (None, 0, 0, 20, 0, U64_MAX),
        }
    ),
)

NETWORKS: Mapping[str, NetworkConstants] = MappingProxyType(
    {MAINNET.name: MAINNET, DEVNET.name: DEVNET}
)


__all__ = [
    "U64_MAX",
    "HASH_PREFIX",
    "PDA_MARKER",
    "NAME_HEADER_LEN",
    "MAX_PERMITTED_DATA_LEN",
    "REFERRER_FEES_PCT",
    "NATIVE_DISCOUNT_PCT",
    "ORACLE_MAX_AGE_SECS",
    "RESALE_STATE_SEED",
    "TokenInfo",
    "PartnerRow",
    "NetworkConstants",
    "MAINNET",
    "DEVNET",
    "NETWORKS",
]
