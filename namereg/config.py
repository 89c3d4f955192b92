"""
namereg.config — runtime caps, CLI defaults and logging knobs.

This module centralizes configuration for the registry. It has NO third-party
deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (NAMEREG_*)
  2) Hardcoded safe defaults below

Key env vars:
  - NAMEREG_STATE_PATH       (path)   default: ./namereg-state.json
  - NAMEREG_CALLER           (hex)    default: unset
  - NAMEREG_LOG_LEVEL        (str)    default: INFO
  - NAMEREG_LOG_FORMAT       (str)    json|text, default: auto (tty → text)
  - NAMEREG_MAX_KEY_BYTES    (int)    default: 256
  - NAMEREG_MAX_VALUE_BYTES  (int)    default: 65_536   (64 KiB)

Usage:
    from namereg.config import load_config
    CFG = load_config()
    if len(value) > CFG.max_value_bytes: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_STATE_FILE = "namereg-state.json"


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if not raw:
        return default
    return Path(raw).expanduser()


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


@dataclass(frozen=True)
class RegistryConfig:
    # CLI host
    state_path: Path
    default_caller: Optional[str]

    # Logging
    log_level: str
    log_format: Optional[str]

    # Storage caps (enforced by the storage backend)
    max_key_bytes: int
    max_value_bytes: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "state_path": str(self.state_path),
            "default_caller": self.default_caller,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "max_key_bytes": self.max_key_bytes,
            "max_value_bytes": self.max_value_bytes,
        }


@lru_cache(maxsize=1)
def load_config() -> RegistryConfig:
    """
    Build and cache a RegistryConfig from environment + safe defaults.
    Call `load_config.cache_clear()` after changing the environment.
    """
    fmt = _env_str("NAMEREG_LOG_FORMAT")
    if fmt is not None:
        fmt = fmt.lower()
        if fmt not in ("json", "text"):
            fmt = None

    return RegistryConfig(
        state_path=_env_path("NAMEREG_STATE_PATH", Path.cwd() / DEFAULT_STATE_FILE),
        default_caller=_env_str("NAMEREG_CALLER"),
        log_level=(_env_str("NAMEREG_LOG_LEVEL") or "INFO").upper(),
        log_format=fmt,
        # Storage keys carry a short namespace prefix on top of the domain bytes.
        max_key_bytes=_env_int("NAMEREG_MAX_KEY_BYTES", 256, min_v=1, max_v=4096),
        max_value_bytes=_env_int("NAMEREG_MAX_VALUE_BYTES", 65_536, min_v=32, max_v=1_048_576),
    )


__all__ = ["RegistryConfig", "load_config", "DEFAULT_STATE_FILE"]
