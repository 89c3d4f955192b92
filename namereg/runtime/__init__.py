"""
namereg runtime — host-facing building blocks.

This package contains the pieces that stand in for a ledger environment:
identity coercion, hashing, journaled storage, the append-only event log and
the `Host` that ties them together.

    from namereg.runtime import Host, CallContext
    from namereg.runtime import hashing, storage, events   # module namespaces
"""

from __future__ import annotations

from . import events_api as events
from . import hash_api as hashing  # avoid shadowing builtin `hash`
from . import identity as identity
from . import storage_api as storage
from .events_api import CanonicalEvent, Event, EventSink
from .host import Host
from .identity import CallContext, is_zero, to_hex, to_identity
from .storage_api import JournaledStorage, MemoryBackend, StorageBackend

__all__ = [
    "Host",
    "CallContext",
    "Event",
    "CanonicalEvent",
    "EventSink",
    "JournaledStorage",
    "MemoryBackend",
    "StorageBackend",
    "is_zero",
    "to_hex",
    "to_identity",
    "events",
    "hashing",
    "identity",
    "storage",
]
