"""
namereg.access.ownable
======================

Single-administrator ownership for registry components.

This module provides a focused owner storage and control surface:
- read the current owner (`owner`)
- initialize the owner once, at construction (`Ownable(host, deployer)`)
- check that a caller is the owner (`require_owner`)
- transfer ownership to a new identity (`transfer`)

State machine: there is one state, "has-owner", with a self-transition on
`transfer`. There is no renounce path and `transfer` rejects the zero
identity, so an ownerless registry is unreachable.

Conventions
-----------
- Identities are `bytes`; hex strings are accepted and normalized.
- The owner is stored at a deterministic key (`OWNER_KEY = b"access:owner"`),
  so every component built on the same host shares one owner.
- Events:
    - "OwnershipTransferred" args: {"previous": bytes, "new": bytes}
"""

from __future__ import annotations

from typing import Optional, Union

from ..errors import InvalidOwner, Unauthorized
from ..runtime.host import Host
from ..runtime.identity import CallContext, IdentityLike, is_zero, to_hex, to_identity

OWNER_KEY: bytes = b"access:owner"

EV_OWNERSHIP_TRANSFERRED = b"OwnershipTransferred"

Caller = Union[CallContext, IdentityLike]


class Ownable:
    """
    Owner record bound to a host's storage.

    If the host already holds an owner (e.g. state loaded from disk) the
    stored owner wins and `deployer` is ignored.
    """

    def __init__(self, host: Host, deployer: Optional[IdentityLike] = None) -> None:
        self._host = host
        if host.read(self._stored_owner) is not None:
            return
        if deployer is None or is_zero(deployer):
            raise InvalidOwner(data={"where": "init"})
        owner = to_identity(deployer)
        host.call(CallContext(owner), "init_owner", host.storage.set, OWNER_KEY, owner)

    @property
    def host(self) -> Host:
        return self._host

    def _stored_owner(self) -> Optional[bytes]:
        v = self._host.storage.get(OWNER_KEY)
        return v if v else None

    # --- queries ---

    def owner(self) -> bytes:
        """Return the current owner identity."""
        current = self._host.read(self._stored_owner)
        # Unreachable once constructed; guards a backend wiped underneath us.
        if current is None:
            raise InvalidOwner("owner is not initialized", data={"where": "owner"})
        return current

    current_owner = owner

    def is_owner(self, caller: Caller) -> bool:
        return CallContext.of(caller).caller == self.owner()

    def require_owner(self, caller: Caller) -> None:
        """Raise Unauthorized unless `caller` equals the current owner."""
        ctx = CallContext.of(caller)
        if ctx.caller != self.owner():
            raise Unauthorized(data={"caller": to_hex(ctx.caller)})

    # --- mutations ---

    def transfer(self, caller: Caller, new_owner: IdentityLike) -> None:
        """
        Owner-only: hand ownership to `new_owner` (must not be the zero identity).

        Emits:
            - "OwnershipTransferred" with {"previous": <old>, "new": <new_owner>}
        """
        ctx = CallContext.of(caller)
        self._host.call(ctx, "transfer", self._transfer, ctx, new_owner)

    transfer_ownership = transfer

    def _transfer(self, ctx: CallContext, new_owner: IdentityLike) -> None:
        self.require_owner(ctx)
        if is_zero(new_owner):
            raise InvalidOwner(data={"new": to_hex(to_identity(new_owner))})

        nxt = to_identity(new_owner)
        previous = self.owner()
        self._host.storage.set(OWNER_KEY, nxt)
        self._host.events.emit(EV_OWNERSHIP_TRANSFERRED, {"previous": previous, "new": nxt})


__all__ = [
    "OWNER_KEY",
    "EV_OWNERSHIP_TRANSFERRED",
    "Ownable",
]
