"""
registrar.runtime — instruction execution over the in-memory host.

Submodules (thin overview)
--------------------------
- context          : Host bundle (ledger, names, tokens, oracle, collectibles) + TxContext
- checks           : fixed-key, owner, vacancy and vault checks shared by operations
- create           : Create / CreateSplitV2 (token payment)
- create_with_nft  : CreateWithNft (collectible burn)
- create_reverse   : CreateReverse
- update_metadata  : UpdateMetadata
- delete           : Delete
- processor        : tag + msgpack decoding, dispatch, transaction boundary

Re-exports
----------
    from registrar.runtime import Host, TxContext, process_instruction

These are lazily loaded; importing this package does not import the operation
modules until the attributes are first accessed.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

from ..version import __version__ as __version__  # re-export

__all__ = (
    "context",
    "checks",
    "create",
    "create_with_nft",
    "create_reverse",
    "update_metadata",
    "delete",
    "processor",
)

_EXPORTS: Dict[str, Tuple[str, str]] = {
    "Host": ("context", "Host"),
    "TxContext": ("context", "TxContext"),
    "Instruction": ("processor", "Instruction"),
    "encode_instruction": ("processor", "encode_instruction"),
    "process_instruction": ("processor", "process_instruction"),
}


def __getattr__(name: str) -> Any:  # PEP 562 lazy attribute access
    if name in __all__:
        return import_module(f".{name}", __name__)
    target = _EXPORTS.get(name)
    if target:
        mod, attr = target
        return getattr(import_module(f".{mod}", __name__), attr)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(__all__) + list(_EXPORTS) + ["__version__"])
