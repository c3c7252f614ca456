"""
Name registrar core — deterministic name/reverse-lookup creation, pricing, referral
fees, deletion and metadata updates over a pluggable resource ledger.

This package exposes only lightweight metadata at import time. Operations live in
`registrar.runtime`; collaborators (ledger, tokens, oracle, collectibles) live in
`registrar.state` and `registrar.adapters`.
"""

from .version import __version__

__all__ = ["__version__"]
