# -*- coding: utf-8 -*-
"""
Shared fixtures for the namereg test-suite.

- Deterministic identities derived with SHA3 from a label (no `random`).
- A fresh `Host` per test, with both registry variants sharing one owner.
- Config cache reset around every test so env overrides never leak.
"""
from __future__ import annotations

import hashlib
import os

import pytest

from namereg.access import Ownable
from namereg.config import load_config
from namereg.registry import HashedRegistry, KeyRegistry
from namereg.runtime import Host

os.environ.setdefault("TZ", "UTC")

_CONFIG_ENV = (
    "NAMEREG_STATE_PATH",
    "NAMEREG_CALLER",
    "NAMEREG_LOG_LEVEL",
    "NAMEREG_LOG_FORMAT",
    "NAMEREG_MAX_KEY_BYTES",
    "NAMEREG_MAX_VALUE_BYTES",
)


def det_identity(label: str) -> bytes:
    """20-byte identity derived from `label`."""
    return hashlib.sha3_256(b"namereg-test|" + label.encode("utf-8")).digest()[:20]


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch):
    for name in _CONFIG_ENV:
        monkeypatch.delenv(name, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def owner() -> bytes:
    return det_identity("owner")


@pytest.fixture
def stranger() -> bytes:
    return det_identity("stranger")


@pytest.fixture
def host() -> Host:
    return Host()


@pytest.fixture
def ownable(host: Host, owner: bytes) -> Ownable:
    return Ownable(host, owner)


@pytest.fixture
def key_reg(ownable: Ownable) -> KeyRegistry:
    return KeyRegistry(ownable=ownable)


@pytest.fixture
def hashed_reg(ownable: Ownable) -> HashedRegistry:
    return HashedRegistry(ownable=ownable)


@pytest.fixture
def make_identity():
    return det_identity
