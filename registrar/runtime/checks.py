"""
registrar.runtime.checks — structural checks shared by the operations.

Every operation validates its typed accounts struct before touching state:
fixed keys must equal the configured ones, resource owners must be the expected
programs, and required signers must have signed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from ..address import expect_address, to_base58
from ..adapters.tokens import TokenAccount
from ..errors import IllegalOwner, NameAlreadyRegistered, UnauthorizedVault

if TYPE_CHECKING:  # pragma: no cover
    from .context import Host


_FIXED_KEYS = (
    ("naming_service_program", "name_service_id"),
    ("root_domain", "root_domain"),
    ("system_program", "system_program_id"),
    ("token_program", "token_program_id"),
)


def check_fixed_keys(host: "Host", accounts: object) -> None:
    """Compare every well-known key the accounts struct carries with the config."""
    cfg = host.config
    for field_name, cfg_name in _FIXED_KEYS:
        got = getattr(accounts, field_name, None)
        if got is not None:
            expect_address(got, getattr(cfg, cfg_name), role=field_name.replace("_", " "))
    authority = getattr(accounts, "registry_authority", None)
    if authority is not None:
        expect_address(authority, cfg.authority.address, role="registry authority")


def check_owner_in(host: "Host", address: bytes, programs: Iterable[bytes], *, role: str) -> None:
    owner = host.ledger.get(address).owner
    allowed = tuple(programs)
    if owner not in allowed:
        raise IllegalOwner(f"{role} has an unexpected owner program", address=to_base58(address))


def check_name_vacant(host: "Host", name: bytes) -> None:
    res = host.ledger.get(name)
    if res.owner != host.config.system_program_id or not res.is_empty:
        raise NameAlreadyRegistered(data={"name": to_base58(name)})


def check_sale_state_empty(host: "Host", state: bytes) -> None:
    if not host.ledger.get(state).is_empty:
        raise NameAlreadyRegistered(
            "the name auctioning state account is not empty", data={"state": to_base58(state)}
        )


def check_vault(host: "Host", vault: bytes) -> TokenAccount:
    acct = host.tokens.account(vault)
    if acct.owner not in host.config.vault_owners:
        raise UnauthorizedVault(owner=to_base58(acct.owner))
    return acct


__all__ = [
    "check_fixed_keys",
    "check_owner_in",
    "check_name_vacant",
    "check_sale_state_empty",
    "check_vault",
]
