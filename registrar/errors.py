"""
registrar.errors — typed exceptions for the registrar core.

Every failure inside an instruction is raised as a `RegistrarError` subclass and is
terminal for the transaction: the processor reverts the host journal and re-raises.
Nothing in this package catches and retries these errors.

Hierarchy
---------
RegistrarError (base)
 ├─ InvalidName            : non-canonical or malformed name / parent
 ├─ AddressMismatch        : supplied address differs from the re-derived one
 ├─ NameAlreadyRegistered  : name record or sale-state resource already populated
 ├─ UnauthorizedVault      : vault token account not owned by a recognized vault owner
 ├─ UnauthorizedReferrer   : referrer owner not whitelisted at the declared index
 ├─ StaleOracle            : price reading older than the freshness window
 ├─ UnsupportedToken       : payment mint has no configured price feed
 ├─ WrongCollection        : collectible is not a verified member of the collection
 ├─ CorruptState           : resource data missing or undecodable
 ├─ Overflow               : u64 arithmetic overflow / division by zero in pricing
 ├─ InvalidInstruction     : undecodable instruction or malformed accounts list
 ├─ DeprecatedInstruction  : retired instruction tag
 ├─ MissingSignature       : a required signer did not sign
 └─ LedgerError            : failures raised by the host collaborators
     ├─ AccountAlreadyInitialized
     ├─ AccountNotFound
     ├─ IllegalOwner
     └─ InsufficientFunds

These classes import nothing from the rest of the package so that low-level modules
(address derivation, journal) can raise them without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class RegistrarError(Exception):
    """
    Base registrar error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INVALID_NAME').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "registrar error"
    code: str = "REGISTRAR_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for results/logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _merge(data: Optional[Dict[str, Any]], **extra: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if data:
        d.update(data)
    for k, v in extra.items():
        if v is not None:
            d.setdefault(k, v)
    return d or None


class InvalidName(RegistrarError):
    """Name is empty, contains the separator, or is not lower-case/trimmed."""
    def __init__(self, message: str = "invalid name", *, name: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_NAME", data=_merge(data, name=name))


class AddressMismatch(RegistrarError):
    """
    A caller-supplied address does not match the re-derived one.

    Always fatal; the supplied value is never corrected.
    """
    def __init__(
        self,
        message: str = "address mismatch",
        *,
        role: Optional[str] = None,
        expected: Optional[str] = None,
        got: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="ADDRESS_MISMATCH",
            data=_merge(data, role=role, expected=expected, got=got),
        )


class NameAlreadyRegistered(RegistrarError):
    def __init__(self, message: str = "the domain name is already registered", *,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NAME_ALREADY_REGISTERED", data=data)


class UnauthorizedVault(RegistrarError):
    def __init__(self, message: str = "vault owner is not recognized", *,
                 owner: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNAUTHORIZED_VAULT", data=_merge(data, owner=owner))


class UnauthorizedReferrer(RegistrarError):
    """Referrer token-account owner is not whitelisted at the declared index (IllegalOwner)."""
    def __init__(self, message: str = "referrer is not whitelisted", *,
                 index: Optional[int] = None, owner: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="UNAUTHORIZED_REFERRER",
            data=_merge(data, index=index, owner=owner),
        )


class StaleOracle(RegistrarError):
    def __init__(self, message: str = "oracle price is stale", *,
                 age: Optional[int] = None, max_age: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message, code="STALE_ORACLE", data=_merge(data, age=age, max_age=max_age)
        )


class UnsupportedToken(RegistrarError):
    def __init__(self, message: str = "payment token is not supported", *,
                 mint: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNSUPPORTED_TOKEN", data=_merge(data, mint=mint))


class WrongCollection(RegistrarError):
    def __init__(self, message: str = "wrong collection", *,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="WRONG_COLLECTION", data=data)


class CorruptState(RegistrarError):
    def __init__(self, message: str = "corrupt resource state", *,
                 address: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="CORRUPT_STATE", data=_merge(data, address=address))


class Overflow(RegistrarError):
    def __init__(self, message: str = "numerical overflow", *,
                 op: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="OVERFLOW", data=_merge(data, op=op))


class InvalidInstruction(RegistrarError):
    def __init__(self, message: str = "invalid instruction data", *,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_INSTRUCTION", data=data)


class DeprecatedInstruction(RegistrarError):
    def __init__(self, message: str = "the instruction is deprecated", *,
                 tag: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="DEPRECATED_INSTRUCTION", data=_merge(data, tag=tag))


class MissingSignature(RegistrarError):
    def __init__(self, message: str = "missing required signature", *,
                 role: Optional[str] = None, address: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="MISSING_SIGNATURE",
            data=_merge(data, role=role, address=address),
        )


# -------- host collaborator failures ------------------------------------------


class LedgerError(RegistrarError):
    """Failure reported by the ledger, token or collectible collaborators."""
    def __init__(self, message: str = "ledger error", *, code: str = "LEDGER_ERROR",
                 address: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code=code, data=_merge(data, address=address))


class AccountAlreadyInitialized(LedgerError):
    def __init__(self, message: str = "account already initialized", *,
                 address: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="ACCOUNT_ALREADY_INITIALIZED", address=address, data=data)


class AccountNotFound(LedgerError):
    def __init__(self, message: str = "account not found", *,
                 address: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="ACCOUNT_NOT_FOUND", address=address, data=data)


class IllegalOwner(LedgerError):
    def __init__(self, message: str = "illegal owner", *,
                 address: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="ILLEGAL_OWNER", address=address, data=data)


class InsufficientFunds(LedgerError):
    def __init__(self, message: str = "insufficient funds", *,
                 address: Optional[str] = None, needed: Optional[int] = None,
                 available: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            code="INSUFFICIENT_FUNDS",
            address=address,
            data=_merge(data, needed=needed, available=available),
        )


# -------- helper utilities ------------------------------------------------------


def error_to_result_fields(err: RegistrarError) -> Dict[str, Any]:
    """
    Map a RegistrarError to canonical result fields.

    Returns:
        {
          "status": "LEDGER_ERROR" | "REJECTED",
          "error":  {code, message, data?}
        }
    """
    status = "LEDGER_ERROR" if isinstance(err, LedgerError) else "REJECTED"
    return {"status": status, "error": err.to_dict()}


__all__ = [
    "RegistrarError",
    "InvalidName",
    "AddressMismatch",
    "NameAlreadyRegistered",
    "UnauthorizedVault",
    "UnauthorizedReferrer",
    "StaleOracle",
    "UnsupportedToken",
    "WrongCollection",
    "CorruptState",
    "Overflow",
    "InvalidInstruction",
    "DeprecatedInstruction",
    "MissingSignature",
    "LedgerError",
    "AccountAlreadyInitialized",
    "AccountNotFound",
    "IllegalOwner",
    "InsufficientFunds",
    "error_to_result_fields",
]
