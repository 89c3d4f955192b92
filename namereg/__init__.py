"""
namereg — access-controlled name registry with an auditable event log.

Two registry variants share one owner and one host:

- `KeyRegistry`    : domain name → opaque bytes, enumerable (tombstones kept)
- `HashedRegistry` : keccak256(domain name) → string, not enumerable

Every mutation is owner-gated, atomic and publishes exactly one event.

    from namereg import Host, Ownable, KeyRegistry, HashedRegistry

    host = Host()
    own = Ownable(host, deployer)
    keys = KeyRegistry(ownable=own)
    keys.create(deployer, "waku.eth", pubkey)
"""

from __future__ import annotations

from . import errors
from .access import Ownable
from .registry import HashedRegistry, KeyRegistry, canonicalize
from .runtime import CallContext, Host
from .version import __version__


def version() -> str:
    """Return the namereg version string."""
    return __version__


__all__ = [
    "__version__",
    "version",
    "errors",
    "Host",
    "CallContext",
    "Ownable",
    "KeyRegistry",
    "HashedRegistry",
    "canonicalize",
]
