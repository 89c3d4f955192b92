"""
namereg.runtime.storage_api — key/value storage for registry state.

Design goals
------------
- Deterministic: pure functions over (key, value) with no wall-clock or I/O.
- Simple default: in-process memory backend for local runs & tests.
- Pluggable: a tiny backend interface so a host can swap in a real state DB.
- Atomic calls: `JournaledStorage` stages writes in checkpoint overlays that
  are committed or discarded as a unit.
- Safe: strict byte-length caps; typed helpers for common int ↔ bytes use.

Public API
----------
JournaledStorage(backend)
  .get(key) -> Optional[bytes]        .set(key, value)        .delete(key)
  .exists(key) -> bool                .get_int(key)           .set_int(key, value)
  .begin() -> int                     .commit()               .revert()
  .depth() -> int                     .items() (committed state, sorted by key)

Length caps are read from namereg.config.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

from ..config import load_config
from ..errors import StorageError

# Deletion marker inside an overlay.
_DELETED = None


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for registry storage."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...
    def items(self) -> Iterator[Tuple[bytes, bytes]]: ...


class MemoryBackend:
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self, initial: Optional[Dict[bytes, bytes]] = None) -> None:
        self._store: Dict[bytes, bytes] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[key] = value

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return key in self._store

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        with self._lock:
            snapshot = sorted(self._store.items())
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


# --------------------------- Validation helpers --------------------------- #


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise StorageError("storage key must be bytes", data={"py_type": type(key).__name__})
    if len(key) == 0:
        raise StorageError("storage key must be non-empty")
    max_len = load_config().max_key_bytes
    if len(key) > max_len:
        raise StorageError(f"storage key too long (>{max_len} bytes)", data={"len": len(key)})
    return bytes(key)


def _check_value(value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise StorageError("storage value must be bytes", data={"py_type": type(value).__name__})
    max_len = load_config().max_value_bytes
    if len(value) > max_len:
        raise StorageError(f"storage value too large (>{max_len} bytes)", data={"len": len(value)})
    return bytes(value)


# ------------------------------ Journal ------------------------------ #


@dataclass
class _Overlay:
    """A single checkpoint layer. `None` means deletion for that key."""

    writes: Dict[bytes, Optional[bytes]] = field(default_factory=dict)


class JournaledStorage:
    """
    Copy-on-write view over a backend with nested checkpoints.

    Reads consult overlays from top to bottom and then the backend. Writes
    always target the top overlay when a checkpoint is open, otherwise they go
    straight to the backend. `commit()` merges the top overlay into its parent
    (or flushes it to the backend); `revert()` discards it.
    """

    def __init__(self, backend: Optional[StorageBackend] = None) -> None:
        self._backend: StorageBackend = backend if backend is not None else MemoryBackend()
        for attr in ("get", "set", "delete", "exists", "items"):
            if not callable(getattr(self._backend, attr, None)):
                raise StorageError(f"backend missing method: {attr}")
        self._layers: List[_Overlay] = []

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    # --- checkpointing ---

    def depth(self) -> int:
        return len(self._layers)

    def begin(self) -> int:
        """Open a checkpoint. Returns the new depth marker."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        if not self._layers:
            raise StorageError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].writes.update(top.writes)
            return
        for k, v in top.writes.items():
            if v is _DELETED:
                self._backend.delete(k)
            else:
                self._backend.set(k, v)

    def revert(self) -> None:
        if not self._layers:
            raise StorageError("revert without an open checkpoint")
        self._layers.pop()

    # --- contract-facing API ---

    def get(self, key: bytes) -> Optional[bytes]:
        """Return the value for `key`, or None if not set."""
        k = _check_key(key)
        for layer in reversed(self._layers):
            if k in layer.writes:
                return layer.writes[k]
        return self._backend.get(k)

    def set(self, key: bytes, value: bytes) -> None:
        """Set `key` to `value` (overwrites existing)."""
        k = _check_key(key)
        v = _check_value(value)
        if self._layers:
            self._layers[-1].writes[k] = v
        else:
            self._backend.set(k, v)

    def delete(self, key: bytes) -> None:
        """Delete `key` if present (no-op otherwise)."""
        k = _check_key(key)
        if self._layers:
            self._layers[-1].writes[k] = _DELETED
        else:
            self._backend.delete(k)

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        """Committed (backend) state only, sorted by key."""
        return iter(sorted(self._backend.items()))

    # --- typed helpers ---

    def get_int(self, key: bytes) -> int:
        """
        Read a big-endian unsigned integer at `key`. Missing or empty → 0.
        """
        raw = self.get(key)
        if not raw:
            return 0
        return int.from_bytes(raw, byteorder="big", signed=False)

    def set_int(self, key: bytes, value: int) -> None:
        if not isinstance(value, int) or value < 0:
            raise StorageError("set_int value must be a non-negative int")
        if value == 0:
            encoded = b"\x00"
        else:
            encoded = value.to_bytes((value.bit_length() + 7) // 8, "big")
        self.set(key, encoded)


__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "JournaledStorage",
]
