"""
registrar.adapters — collaborator contracts consumed by the registrar.

  • name_service  — name-record create/update/realloc/delete over the ledger
  • tokens        — fungible-token accounts and the transfer primitive
  • oracle        — price feeds (32.32 fixed-point USD readings)
  • collectibles  — collectible metadata, collection membership, burn

Each module defines the contract the registrar relies on plus an in-memory
implementation journaled alongside the resource ledger.

All submodules are imported lazily (PEP 562).
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, List

__all__ = [
    "name_service",
    "tokens",
    "oracle",
    "collectibles",
]


def __getattr__(name: str) -> Any:  # PEP 562 lazy import
    if name in __all__:
        return import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> List[str]:
    return sorted(list(globals().keys()) + __all__)
