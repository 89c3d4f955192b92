"""
namereg.runtime.identity — caller identities and the per-call context.

The host boundary authenticates callers; the registry only compares values.
An identity is a raw byte string. Hex text (with or without "0x") is accepted
by the helpers here and normalized to bytes so the CLI and tests can pass
either form.

The absent/zero identity is the empty byte string or any all-zero byte
string. It can never become the owner through `transfer`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..errors import InvalidIdentity

IdentityLike = Union[bytes, bytearray, memoryview, str]

ZERO_IDENTITY = b"\x00" * 20


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_identity(value: IdentityLike) -> bytes:
    """
    Coerce `value` to identity bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise InvalidIdentity(data={"reason": "odd-length hex", "len": len(h)})
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise InvalidIdentity(data={"reason": "invalid hex"}) from e
    raise InvalidIdentity(data={"py_type": type(value).__name__})


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def is_zero(identity: IdentityLike) -> bool:
    """True for the absent identity: empty or all zero bytes."""
    return not any(to_identity(identity))


@dataclass(frozen=True)
class CallContext:
    """
    Authenticated caller for one operation, supplied by the host boundary.
    """

    caller: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "caller", to_identity(self.caller))

    @classmethod
    def of(cls, caller: Union["CallContext", IdentityLike]) -> "CallContext":
        if isinstance(caller, CallContext):
            return caller
        return cls(caller=caller)  # type: ignore[arg-type]

    def to_dict(self) -> dict:
        return {"caller": to_hex(self.caller)}


__all__ = [
    "IdentityLike",
    "ZERO_IDENTITY",
    "to_identity",
    "to_hex",
    "is_zero",
    "CallContext",
]
