"""
namereg.runtime.hash_api — deterministic hashing wrappers.

Strictly bytes-in, bytes-out; text is encoded explicitly by callers.

- keccak256(data) -> 32 bytes  domain-name slots and canonical keys (PyCryptodome)
- sha3_256(data)  -> 32 bytes  snapshot digests (hashlib)
"""

from __future__ import annotations

import hashlib

from Crypto.Hash import keccak as _keccak

from ..errors import RegistryError


def _ensure_bytes(buf: object) -> bytes:
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    raise RegistryError(
        f"hash input must be bytes-like (got {type(buf).__name__})",
        code="HASH_INPUT",
    )


def sha3_256(data: bytes | bytearray | memoryview) -> bytes:
    return hashlib.sha3_256(_ensure_bytes(data)).digest()


def keccak256(data: bytes | bytearray | memoryview) -> bytes:
    """
    Keccak-256 (pre-standard SHA3 padding) as used by Ethereum-style ledgers.
    """
    h = _keccak.new(digest_bits=256)
    h.update(_ensure_bytes(data))
    return h.digest()


__all__ = ["sha3_256", "keccak256"]
