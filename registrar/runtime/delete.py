"""
registrar.runtime.delete — delete a name and reclaim its balances.

  1. the reverse record must be the one derived from the name address
  2. the sale-state and resale-state resources must be the derived ones
  3. delete the name record (its owner signs) and the reverse record
     (the registry authority signs, it owns that record)
  4. drain the sale-state and resale-state resources into the target when they
     hold data; empty ones are skipped
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import msgspec

from ..address import (
    derive_resale_state_address,
    derive_reverse_address,
    derive_sale_state_address,
    expect_address,
)
from .checks import check_fixed_keys, check_owner_in
from .context import Host, TxContext

log = logging.getLogger(__name__)


class DeleteParams(msgspec.Struct, array_like=True, forbid_unknown_fields=True):
    pass


@dataclass(frozen=True)
class DeleteAccounts:
    naming_service_program: bytes
    system_program: bytes
    domain: bytes
    reverse: bytes
    reselling_state: bytes
    state: bytes
    registry_authority: bytes
    owner: bytes
    target: bytes


@dataclass(frozen=True)
class Deletion:
    reclaimed: int
    drained_state: bool
    drained_resale_state: bool


def delete(host: Host, ctx: TxContext, accounts: DeleteAccounts, params: DeleteParams) -> Deletion:
    cfg = host.config
    check_fixed_keys(host, accounts)
    records = (cfg.name_service_id, cfg.program_id)
    states = (cfg.system_program_id, cfg.program_id)
    check_owner_in(host, accounts.domain, records, role="domain")
    check_owner_in(host, accounts.reverse, records, role="reverse lookup")
    check_owner_in(host, accounts.reselling_state, states, role="resale state")
    check_owner_in(host, accounts.state, states, role="sale state")
    ctx.require_signer(accounts.owner, role="owner")

    authority = cfg.authority.address
    expect_address(
        accounts.reverse, derive_reverse_address(accounts.domain, authority, cfg=cfg), role="reverse lookup"
    )
    expect_address(accounts.state, derive_sale_state_address(accounts.domain, cfg.program_id), role="sale state")
    expect_address(
        accounts.reselling_state,
        derive_resale_state_address(accounts.domain, cfg.program_id),
        role="resale state",
    )

    log.info("[+] Deleting domain")
    reclaimed = host.names.delete(accounts.domain, owner=accounts.owner, target=accounts.target, signers=ctx.signers)

    log.info("[+] Deleting reverse")
    reclaimed += host.names.delete(
        accounts.reverse, owner=authority, target=accounts.target, signers=host.authority_signers(ctx)
    )

    drained_resale = not host.ledger.get(accounts.reselling_state).is_empty
    if drained_resale:
        log.info("[+] Deleting reselling state")
        reclaimed += host.ledger.close(accounts.reselling_state, accounts.target)

    drained_state = not host.ledger.get(accounts.state).is_empty
    if drained_state:
        log.info("[+] Deleting state")
        reclaimed += host.ledger.close(accounts.state, accounts.target)

    return Deletion(reclaimed, drained_state, drained_resale)


__all__ = ["DeleteParams", "DeleteAccounts", "Deletion", "delete"]
