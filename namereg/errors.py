"""
namereg.errors — registry exceptions.

Every failing operation raises a subclass of `RegistryError`. A failure is
permanent for the inputs of that call: there is no retry policy and no
transient/permanent split. The host reverts all staged writes and events of
the failing call before the exception reaches the caller.

Hierarchy
---------
RegistryError (base)
 ├─ Unauthorized     : caller is not the current owner
 ├─ AlreadyExists    : create on a live key
 ├─ NotFound         : update/remove/get on a non-live key
 ├─ EmptyValue       : empty value where a non-empty one is required
 ├─ EmptyKey         : empty domain name
 ├─ InvalidOwner     : zero/absent identity passed to transfer
 ├─ InvalidIdentity  : identity that is not bytes or valid hex
 ├─ StorageError     : storage backend contract violation (types, size caps)
 └─ EventError       : malformed event name/args

Reasons are fixed strings suitable for showing to the caller verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class RegistryError(Exception):
    """
    Base registry error.

    Attributes:
        message: Human-readable reason.
        code:    Stable machine code string (e.g., 'NOT_FOUND').
        data:    Optional structured details (kept JSON-serializable).
    """

    message: str = "registry error"
    code: str = "REGISTRY_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs and CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class Unauthorized(RegistryError):
    def __init__(self, message: str = "caller is not the owner", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNAUTHORIZED", data=data)


class AlreadyExists(RegistryError):
    def __init__(self, message: str = "domain already registered", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ALREADY_EXISTS", data=data)


class NotFound(RegistryError):
    def __init__(self, message: str = "domain not registered", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_FOUND", data=data)


class EmptyValue(RegistryError):
    def __init__(self, message: str = "value must not be empty", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="EMPTY_VALUE", data=data)


class EmptyKey(RegistryError):
    def __init__(self, message: str = "domain must not be empty", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="EMPTY_KEY", data=data)


class InvalidOwner(RegistryError):
    def __init__(self, message: str = "new owner is the zero identity", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_OWNER", data=data)


class InvalidIdentity(RegistryError):
    def __init__(self, message: str = "identity is not valid bytes or hex", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_IDENTITY", data=data)


class StorageError(RegistryError):
    def __init__(self, message: str = "storage error", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="STORAGE_ERROR", data=data)


class EventError(RegistryError):
    def __init__(self, message: str = "invalid event", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="EVENT_INVALID", data=data)


__all__ = [
    "RegistryError",
    "Unauthorized",
    "AlreadyExists",
    "NotFound",
    "EmptyValue",
    "EmptyKey",
    "InvalidOwner",
    "InvalidIdentity",
    "StorageError",
    "EventError",
]
