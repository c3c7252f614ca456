"""
registrar.address — deterministic derivation of every registry identifier.

Provides:
- Address parsing/rendering (raw 32-byte values ⇄ base58 text).
- Program-derived addresses: ``create_program_address`` / ``find_program_address``.
  A derived address must not be a valid ed25519 point, so derivation walks the
  bump seed from 255 down to 0 and keeps the first off-curve result.
- Name-service derivation: salted name hash + (class, parent) seeds.
- Registry-specific wrappers: name, reverse-lookup, sale-state and resale-state
  addresses, and the registry authority signing capability.

Every operation re-derives the addresses it is given and compares them byte for
byte (see ``expect_address``); a mismatch is always fatal.

Notes
-----
* Addresses are raw bytes everywhere inside the package. The base58 form is
  only used as the *string form* of a name address (reverse-lookup salt) and at
  the edges (logs, error payloads, YAML).
* The on-curve test is the decompression check for an Edwards25519 point: the
  y-coordinate is read little-endian with the sign bit cleared and the point is
  valid iff (y² − 1)/(d·y² + 1) is a square mod p.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple, Union

import base58

from .constants import HASH_PREFIX, PDA_MARKER, RESALE_STATE_SEED
from .errors import AddressMismatch, InvalidName

if TYPE_CHECKING:  # pragma: no cover
    from .config import RegistryConfig

ADDRESS_SIZE: int = 32
ZERO_ADDRESS: bytes = b"\x00" * ADDRESS_SIZE

MAX_SEED_LEN = 32
MAX_SEEDS = 16

AddressLike = Union[str, bytes, bytearray]

# --------------------------------------------------------------------------------------
# Address model
# --------------------------------------------------------------------------------------


def ensure_address(addr: bytes, *, name: str = "address") -> bytes:
    """Validate that `addr` is a 32-byte value and return it as immutable bytes."""
    if not isinstance(addr, (bytes, bytearray)):
        raise TypeError(f"{name} must be bytes, got {type(addr).__name__}")
    b = bytes(addr)
    if len(b) != ADDRESS_SIZE:
        raise ValueError(f"{name} must be {ADDRESS_SIZE} bytes, got {len(b)}")
    return b


def parse_address(value: AddressLike, *, name: str = "address") -> bytes:
    """
    Parse an address from base58 text, '0x'-prefixed hex, or pass-through bytes.
    """
    if isinstance(value, (bytes, bytearray)):
        return ensure_address(value, name=name)
    if not isinstance(value, str):
        raise TypeError(f"{name} must be str or bytes, got {type(value).__name__}")
    s = value.strip()
    if s.startswith(("0x", "0X")):
        try:
            raw = bytes.fromhex(s[2:])
        except ValueError as e:
            raise ValueError(f"{name} is not valid hex: {value!r}") from e
    else:
        try:
            raw = base58.b58decode(s)
        except ValueError as e:
            raise ValueError(f"{name} is not valid base58: {value!r}") from e
    return ensure_address(raw, name=name)


def to_base58(addr: bytes) -> str:
    """String form of an address."""
    return base58.b58encode(ensure_address(addr)).decode("ascii")


def expect_address(got: bytes, expected: bytes, *, role: str) -> None:
    """Raise AddressMismatch unless `got` equals the re-derived `expected`."""
    if bytes(got) != bytes(expected):
        raise AddressMismatch(
            f"provided wrong {role} account",
            role=role,
            expected=to_base58(expected),
            got=to_base58(got) if len(got) == ADDRESS_SIZE else bytes(got).hex(),
        )


# --------------------------------------------------------------------------------------
# Edwards25519 point test
# --------------------------------------------------------------------------------------

_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P


def is_on_curve(data: bytes) -> bool:
    """True iff `data` decompresses to a point on the ed25519 curve."""
    y = int.from_bytes(ensure_address(data, name="point"), "little") & ((1 << 255) - 1)
    y %= _P
    y2 = (y * y) % _P
    u = (y2 - 1) % _P
    v = (_D * y2 + 1) % _P
    x2 = (u * pow(v, _P - 2, _P)) % _P
    if x2 == 0:
        return True
    return pow(x2, (_P - 1) // 2, _P) == 1


# --------------------------------------------------------------------------------------
# Program-derived addresses
# --------------------------------------------------------------------------------------


def _check_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) > MAX_SEEDS:
        raise ValueError(f"at most {MAX_SEEDS} seeds allowed, got {len(seeds)}")
    for s in seeds:
        if len(s) > MAX_SEED_LEN:
            raise ValueError(f"seed longer than {MAX_SEED_LEN} bytes")


def _hash_seeds(seeds: Iterable[bytes], program_id: bytes) -> bytes:
    h = hashlib.sha256()
    for s in seeds:
        h.update(bytes(s))
    h.update(program_id)
    h.update(PDA_MARKER)
    return h.digest()


def create_program_address(seeds: Sequence[bytes], program_id: bytes) -> bytes:
    """
    Hash seeds under `program_id`. Raises ValueError when the result lands on the
    curve (such an address could have a private key).
    """
    _check_seeds(seeds)
    addr = _hash_seeds(seeds, ensure_address(program_id, name="program_id"))
    if is_on_curve(addr):
        raise ValueError("derived address is on the ed25519 curve")
    return addr


def find_program_address(seeds: Sequence[bytes], program_id: bytes) -> Tuple[bytes, int]:
    """Return (address, bump) for the first off-curve bump, 255 → 0."""
    _check_seeds(list(seeds) + [b""])
    program_id = ensure_address(program_id, name="program_id")
    for bump in range(255, -1, -1):
        addr = _hash_seeds(list(seeds) + [bytes([bump])], program_id)
        if not is_on_curve(addr):
            return addr, bump
    raise ValueError("unable to find a viable program address bump seed")


# --------------------------------------------------------------------------------------
# Name-service derivation
# --------------------------------------------------------------------------------------


def hashed_name(name: str) -> bytes:
    """sha256 over the salted name."""
    return hashlib.sha256((HASH_PREFIX + name).encode("utf-8")).digest()


def get_seeds_and_key(
    program_id: bytes,
    hashed: bytes,
    name_class: Optional[bytes] = None,
    parent: Optional[bytes] = None,
) -> Tuple[bytes, int]:
    """
    Name-service address for (hashed name, class, parent). Absent class/parent
    contribute 32 zero bytes each.
    """
    seed = bytes(hashed) + (name_class or ZERO_ADDRESS) + (parent or ZERO_ADDRESS)
    chunks = [seed[i : i + MAX_SEED_LEN] for i in range(0, len(seed), MAX_SEED_LEN)]
    return find_program_address(chunks, program_id)


def check_canonical_name(name: str) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidName("domain names must not be empty", name=name if isinstance(name, str) else None)
    if name != name.strip().lower():
        raise InvalidName("domain names must be lower case and have no space", name=name)
    if "." in name:
        raise InvalidName("domain names must not contain '.'", name=name)
    return name


def derive_name_address(
    name: str, parent: Optional[bytes] = None, *, cfg: "RegistryConfig"
) -> bytes:
    """Name Resource address; the parent defaults to the root domain."""
    check_canonical_name(name)
    addr, _ = get_seeds_and_key(
        cfg.name_service_id,
        hashed_name(name),
        None,
        cfg.root_domain if parent is None else parent,
    )
    return addr


def derive_reverse_address(
    name_address: bytes,
    authority: bytes,
    parent: Optional[bytes] = None,
    *,
    cfg: "RegistryConfig",
) -> bytes:
    """Reverse-lookup address, salted by the base58 string form of the name address."""
    addr, _ = get_seeds_and_key(
        cfg.name_service_id,
        hashed_name(to_base58(name_address)),
        authority,
        parent,
    )
    return addr


def derive_sale_state_address(name_address: bytes, program_id: bytes) -> bytes:
    addr, _ = find_program_address([ensure_address(name_address)], program_id)
    return addr


def derive_resale_state_address(name_address: bytes, program_id: bytes) -> bytes:
    addr, _ = find_program_address([ensure_address(name_address), RESALE_STATE_SEED], program_id)
    return addr


# --------------------------------------------------------------------------------------
# Registry authority
# --------------------------------------------------------------------------------------


@dataclass(frozen=True)
class SigningCapability:
    """
    Proof that the registrar may sign as `address`: the host recomputes
    ``create_program_address(seeds, registrar_program_id)`` before honouring it.
    """
    address: bytes
    seeds: Tuple[bytes, ...]


def authority_for(program_id: bytes, nonce: int) -> SigningCapability:
    seeds = (ensure_address(program_id, name="program_id"), bytes([nonce]))
    return SigningCapability(address=create_program_address(seeds, program_id), seeds=seeds)


@lru_cache(maxsize=8)
def registry_authority(program_id: bytes) -> SigningCapability:
    """
    Authority capability for `program_id`; the nonce is the first viable bump of
    ``find_program_address([program_id], program_id)``.
    """
    _, nonce = find_program_address([program_id], program_id)
    return authority_for(program_id, nonce)


__all__ = [
    "ADDRESS_SIZE",
    "ZERO_ADDRESS",
    "ensure_address",
    "parse_address",
    "to_base58",
    "expect_address",
    "is_on_curve",
    "create_program_address",
    "find_program_address",
    "hashed_name",
    "get_seeds_and_key",
    "check_canonical_name",
    "derive_name_address",
    "derive_reverse_address",
    "derive_sale_state_address",
    "derive_resale_state_address",
    "SigningCapability",
    "authority_for",
    "registry_authority",
]
