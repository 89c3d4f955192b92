"""
namereg.registry.key_registry
=============================

Domain name → opaque bytes registry with an append-only enumeration log.

Each domain maps to a non-empty byte string (typically a public key).
Existence is tracked by an explicit flag, decoupled from the value slot, and
every domain ever passed to `create` is appended to an index-stable log that
is never compacted. Removed domains stay in the log as tombstones; consumers
pair each listed domain with `exists` before trusting it.

Domains are case- and byte-sensitive: the UTF-8 bytes of the string are the
key, without any normalization.

Storage layout
--------------
    "kr:ok:"  + keccak256(domain) -> b"\\x01" if live, empty otherwise
    "kr:val:" + keccak256(domain) -> value bytes (empty once removed)
    "kr:ni"                       -> u256 log length (monotonic)
    "kr:k:"   + uvar(i)           -> domain at log index i

Events
------
- b"Registered" {key, value}
- b"Updated"    {key, new_value}
- b"Removed"    {key}

Reverts
-------
Unauthorized, EmptyKey, EmptyValue, AlreadyExists, NotFound (namereg.errors).
"""

from __future__ import annotations

from typing import Final, List, Tuple, Union

from ..access.ownable import Caller
from ..errors import AlreadyExists, EmptyKey, EmptyValue, NotFound
from ..runtime.hash_api import keccak256
from ._base import OwnedRegistry

_P_OK: Final[bytes] = b"kr:ok:"
_P_VAL: Final[bytes] = b"kr:val:"
_P_K: Final[bytes] = b"kr:k:"
_K_NI: Final[bytes] = b"kr:ni"

EV_REGISTERED: Final[bytes] = b"Registered"
EV_UPDATED: Final[bytes] = b"Updated"
EV_REMOVED: Final[bytes] = b"Removed"

BytesLike = Union[bytes, bytearray, memoryview]


def _domain_bytes(key: str) -> bytes:
    if not isinstance(key, str):
        raise TypeError(f"domain must be str, got {type(key).__name__}")
    return key.encode("utf-8")


def _value_bytes(value: BytesLike) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"value must be bytes, got {type(value).__name__}")
    return bytes(value)


def _slot(k: bytes) -> bytes:
    """32-byte storage slot of a domain: keccak256 of its UTF-8 bytes."""
    return keccak256(k)


def _ki(i: int) -> bytes:
    if i == 0:
        return _P_K + b"\x00"
    return _P_K + i.to_bytes((i.bit_length() + 7) // 8, "big")


class KeyRegistry(OwnedRegistry):
    """
    Owner-controlled `domain → bytes` registry with enumeration.

        reg = KeyRegistry(host, deployer)
        reg.create(deployer, "waku.eth", pubkey)
        for d in reg.list_all():
            if reg.exists(d):
                ...
    """

    # --- internal state access (inside a host call or under the host lock) ---

    def _live(self, k: bytes) -> bool:
        return self._host.storage.get(_P_OK + _slot(k)) == b"\x01"

    def _log_len(self) -> int:
        return self._host.storage.get_int(_K_NI)

    # --- mutations ---

    def create(self, caller: Caller, key: str, value: BytesLike) -> bool:
        """
        Register `key` → `value`. Emits Registered(key, value).
        """
        return self._mutate(caller, "create", self._create, key, value)

    def _create(self, key: str, value: BytesLike) -> bool:
        k = _domain_bytes(key)
        v = _value_bytes(value)
        if not k:
            raise EmptyKey()
        if not v:
            raise EmptyValue(data={"key": key})
        if self._live(k):
            raise AlreadyExists(data={"key": key})

        st = self._host.storage
        st.set(_P_VAL + _slot(k), v)
        st.set(_P_OK + _slot(k), b"\x01")
        i = self._log_len()
        st.set(_ki(i), k)
        st.set_int(_K_NI, i + 1)

        self._host.events.emit(EV_REGISTERED, {"key": key, "value": v})
        return True

    def update(self, caller: Caller, key: str, value: BytesLike) -> bool:
        """
        Overwrite the value of a live `key`. Emits Updated(key, new_value).
        """
        return self._mutate(caller, "update", self._update, key, value)

    def _update(self, key: str, value: BytesLike) -> bool:
        k = _domain_bytes(key)
        v = _value_bytes(value)
        if not self._live(k):
            raise NotFound(data={"key": key})
        if not v:
            raise EmptyValue(data={"key": key})

        self._host.storage.set(_P_VAL + _slot(k), v)
        self._host.events.emit(EV_UPDATED, {"key": key, "new_value": v})
        return True

    def remove(self, caller: Caller, key: str) -> bool:
        """
        Clear the value and existence flag of `key`. The enumeration log keeps
        its slot. Emits Removed(key).
        """
        return self._mutate(caller, "remove", self._remove, key)

    def _remove(self, key: str) -> bool:
        k = _domain_bytes(key)
        if not self._live(k):
            raise NotFound(data={"key": key})

        st = self._host.storage
        st.set(_P_VAL + _slot(k), b"")
        st.set(_P_OK + _slot(k), b"")
        self._host.events.emit(EV_REMOVED, {"key": key})
        return True

    # --- queries ---

    def get(self, key: str) -> bytes:
        """Return the value of a live `key`; NotFound otherwise."""
        return self._read(self._get, key)

    def _get(self, key: str) -> bytes:
        k = _domain_bytes(key)
        if not self._live(k):
            raise NotFound(data={"key": key})
        return self._host.storage.get(_P_VAL + _slot(k)) or b""

    def exists(self, key: str) -> bool:
        return self._read(self._live, _domain_bytes(key))

    def count(self) -> int:
        """Length of the enumeration log (tombstones included)."""
        return self._read(self._log_len)

    def list_all(self) -> List[str]:
        """Every domain ever created, in creation order, tombstones included."""
        return self._read(self._page, 0, None)[0]

    def list_page(self, start: int = 0, limit: int = 100) -> Tuple[List[str], int]:
        """
        Return up to `limit` log entries from index `start`, plus the cursor
        for the next page (equal to `count()` once exhausted).
        """
        if start < 0 or limit < 0:
            raise ValueError("start and limit must be non-negative")
        return self._read(self._page, start, limit)

    def _page(self, start: int, limit: Union[int, None]) -> Tuple[List[str], int]:
        n = self._log_len()
        end = n if limit is None else min(n, start + limit)
        st = self._host.storage
        out: List[str] = []
        for i in range(start, end):
            raw = st.get(_ki(i)) or b""
            out.append(raw.decode("utf-8"))
        return out, end


__all__ = [
    "KeyRegistry",
    "EV_REGISTERED",
    "EV_UPDATED",
    "EV_REMOVED",
]
