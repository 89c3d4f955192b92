"""
namereg.runtime.host — the trusted call boundary.

A `Host` stands in for the ledger environment: it owns the storage and the
event log, serializes calls (single writer at a time) and makes every call
atomic. Components never write to storage outside `Host.call`.

    host = Host()
    reg = KeyRegistry(host, deployer)
    reg.create(CallContext(deployer), "waku.eth", pubkey)  # routed through host.call

Call semantics
--------------
- The host lock is re-entrant, so a call may invoke helpers that themselves
  go through `call`; each level checkpoints independently.
- On success, the storage checkpoint and the event checkpoint are committed.
  When the outermost checkpoint commits, staged writes reach the backend and
  staged events become visible (and are delivered to subscribers).
- On any exception, both checkpoints are reverted and the exception
  propagates unchanged.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, TypeVar

from ..errors import RegistryError
from .events_api import EventSink
from .identity import CallContext, to_hex
from .storage_api import JournaledStorage, StorageBackend

log = logging.getLogger(__name__)

T = TypeVar("T")


class Host:
    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        *,
        sink: Optional[EventSink] = None,
    ) -> None:
        self._storage = JournaledStorage(backend)
        self._events = sink if sink is not None else EventSink()
        self._lock = threading.RLock()

    @property
    def storage(self) -> JournaledStorage:
        return self._storage

    @property
    def events(self) -> EventSink:
        return self._events

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def call(self, ctx: Optional[CallContext], op: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run `fn(*args, **kwargs)` as one atomic call on behalf of `ctx`.
        """
        caller = to_hex(ctx.caller) if ctx is not None else None
        with self._lock:
            self._storage.begin()
            self._events.begin()
            log.debug("call", extra={"op": op, "caller": caller, "depth": self._storage.depth()})
            try:
                result = fn(*args, **kwargs)
            except RegistryError as e:
                self._storage.revert()
                self._events.revert()
                log.info("call reverted", extra={"op": op, "caller": caller, "code": e.code})
                raise
            except BaseException:
                self._storage.revert()
                self._events.revert()
                log.exception("call failed", extra={"op": op, "caller": caller})
                raise
            self._storage.commit()
            self._events.commit()
            return result

    def read(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a query under the host lock so it never observes a partial call."""
        with self._lock:
            return fn(*args, **kwargs)


__all__ = ["Host"]
