"""
namereg.registry
================

The two registry variants. Both are owner-gated, route every mutation through
the host (atomic, single writer) and publish one event per successful
mutation.

- `KeyRegistry`    : domain → bytes, explicit existence flag, enumeration log
                     (`list_all`) that keeps removed domains as tombstones.
- `HashedRegistry` : keccak256(domain) → str, existence == non-empty value,
                     no enumeration.

Several registries may share one owner by passing the same `Ownable`:

    own = Ownable(host, deployer)
    keys = KeyRegistry(ownable=own)
    addrs = HashedRegistry(ownable=own)
"""

from __future__ import annotations

from .hashed_registry import HashedRegistry, canonicalize
from .key_registry import KeyRegistry

__all__ = ["KeyRegistry", "HashedRegistry", "canonicalize"]
