"""
namereg.registry.hashed_registry
================================

Domain name → string registry keyed by the Keccak-256 hash of the name.

Names are canonicalized into a fixed 32-byte key before any storage access,
so the registry never stores the human-readable name and cannot enumerate
what it holds. Values are non-empty strings (typically an IP address);
emptiness is the absence sentinel, which is why every write path rejects an
empty value.

Storage layout
--------------
    "hr:val:" + keccak256(utf8(domain))   -> utf8(value), empty once removed

Events
------
- b"Registered" {key: bytes32, value}
- b"Updated"    {key: bytes32, old_value, new_value}
- b"Removed"    {key: bytes32}
"""

from __future__ import annotations

from typing import Final, Union

from ..access.ownable import Caller
from ..errors import AlreadyExists, EmptyKey, EmptyValue, NotFound
from ..runtime.hash_api import keccak256
from ._base import OwnedRegistry

_P_VAL: Final[bytes] = b"hr:val:"

HASH_LEN: Final[int] = 32

EV_REGISTERED: Final[bytes] = b"Registered"
EV_UPDATED: Final[bytes] = b"Updated"
EV_REMOVED: Final[bytes] = b"Removed"


def canonicalize(key: str) -> bytes:
    """
    Deterministic 32-byte storage key for a domain name.

    The domain is hashed as its exact UTF-8 bytes (no case folding).
    Raises EmptyKey for an empty domain.
    """
    if not isinstance(key, str):
        raise TypeError(f"domain must be str, got {type(key).__name__}")
    if not key:
        raise EmptyKey()
    return keccak256(key.encode("utf-8"))


def _check_value(value: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"value must be str, got {type(value).__name__}")
    return value


def _as_hash(h: Union[bytes, bytearray, memoryview]) -> bytes:
    if not isinstance(h, (bytes, bytearray, memoryview)):
        raise TypeError(f"canonical key must be bytes, got {type(h).__name__}")
    return bytes(h)


class HashedRegistry(OwnedRegistry):
    """
    Owner-controlled `keccak256(domain) → str` registry.

        reg = HashedRegistry(host, deployer)
        reg.create(deployer, "waku.eth", "10.0.0.1")
        reg.get("waku.eth")                      # "10.0.0.1"
        reg.get_by_hash(reg.canonicalize("waku.eth"))
    """

    canonicalize = staticmethod(canonicalize)

    def _load(self, h: bytes) -> str:
        raw = self._host.storage.get(_P_VAL + h)
        return raw.decode("utf-8") if raw else ""

    # --- mutations ---

    def create(self, caller: Caller, key: str, value: str) -> bool:
        """Register `key` → `value`. Emits Registered(hash, value)."""
        return self._mutate(caller, "create", self._create, key, value)

    def _create(self, key: str, value: str) -> bool:
        h = canonicalize(key)
        if not _check_value(value):
            raise EmptyValue(data={"key": key})
        if self._load(h):
            raise AlreadyExists(data={"key": key})

        self._host.storage.set(_P_VAL + h, value.encode("utf-8"))
        self._host.events.emit(EV_REGISTERED, {"key": h, "value": value})
        return True

    def update(self, caller: Caller, key: str, value: str) -> bool:
        """Replace the value of a live `key`. Emits Updated(hash, old, new)."""
        return self._mutate(caller, "update", self._update, key, value)

    def _update(self, key: str, value: str) -> bool:
        h = canonicalize(key)
        old = self._load(h)
        if not old:
            raise NotFound(data={"key": key})
        if not _check_value(value):
            raise EmptyValue(data={"key": key})

        self._host.storage.set(_P_VAL + h, value.encode("utf-8"))
        self._host.events.emit(EV_UPDATED, {"key": h, "old_value": old, "new_value": value})
        return True

    def remove(self, caller: Caller, key: str) -> bool:
        """Overwrite the value of a live `key` with the empty sentinel. Emits Removed(hash)."""
        return self._mutate(caller, "remove", self._remove, key)

    def _remove(self, key: str) -> bool:
        h = canonicalize(key)
        if not self._load(h):
            raise NotFound(data={"key": key})

        self._host.storage.set(_P_VAL + h, b"")
        self._host.events.emit(EV_REMOVED, {"key": h})
        return True

    # --- queries ---

    def get(self, key: str) -> str:
        return self.get_by_hash(canonicalize(key))

    def exists(self, key: str) -> bool:
        """Never raises for a str domain; the empty domain is never registered."""
        if isinstance(key, str) and not key:
            return False
        return self.exists_by_hash(canonicalize(key))

    def get_by_hash(self, h: Union[bytes, bytearray, memoryview]) -> str:
        """Lookup by a precomputed canonical key (see `canonicalize`)."""
        hb = _as_hash(h)
        value = self._read(self._load, hb) if len(hb) == HASH_LEN else ""
        if not value:
            raise NotFound(data={"key": "0x" + hb.hex()})
        return value

    def exists_by_hash(self, h: Union[bytes, bytearray, memoryview]) -> bool:
        hb = _as_hash(h)
        if len(hb) != HASH_LEN:
            return False
        return bool(self._read(self._load, hb))


__all__ = [
    "HashedRegistry",
    "canonicalize",
    "HASH_LEN",
    "EV_REGISTERED",
    "EV_UPDATED",
    "EV_REMOVED",
]
