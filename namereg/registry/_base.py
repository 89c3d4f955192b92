"""
Shared plumbing for the registry variants: host binding, the shared owner and
the authorization gate applied to every mutation.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from ..access.ownable import Caller, Ownable
from ..runtime.host import Host
from ..runtime.identity import CallContext, IdentityLike

T = TypeVar("T")


class OwnedRegistry:
    """Base class: one host, one Ownable, owner-gated mutations."""

    def __init__(
        self,
        host: Optional[Host] = None,
        deployer: Optional[IdentityLike] = None,
        *,
        ownable: Optional[Ownable] = None,
    ) -> None:
        if ownable is not None:
            if host is not None and host is not ownable.host:
                raise ValueError("ownable is bound to a different host")
            self._host = ownable.host
            self._ownable = ownable
        else:
            self._host = host if host is not None else Host()
            self._ownable = Ownable(self._host, deployer)

    @property
    def host(self) -> Host:
        return self._host

    @property
    def ownable(self) -> Ownable:
        return self._ownable

    # --- ownership surface ---

    def current_owner(self) -> bytes:
        return self._ownable.owner()

    def transfer(self, caller: Caller, new_owner: IdentityLike) -> None:
        self._ownable.transfer(caller, new_owner)

    # --- helpers ---

    def _mutate(self, caller: Caller, op: str, fn: Callable[..., T], *args: Any) -> T:
        """Run `fn` atomically for an owner-only operation."""
        ctx = CallContext.of(caller)

        def _guarded() -> T:
            self._ownable.require_owner(ctx)
            return fn(*args)

        return self._host.call(ctx, op, _guarded)

    def _read(self, fn: Callable[..., T], *args: Any) -> T:
        return self._host.read(fn, *args)
