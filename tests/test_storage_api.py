# -*- coding: utf-8 -*-
"""JournaledStorage: checkpoints, typed helpers, and configured size caps."""
from __future__ import annotations

import pytest

from namereg.config import load_config
from namereg.errors import StorageError
from namereg.runtime.storage_api import JournaledStorage, MemoryBackend, StorageBackend


def test_memory_backend_satisfies_protocol():
    assert isinstance(MemoryBackend(), StorageBackend)


def test_writes_without_checkpoint_go_to_backend():
    be = MemoryBackend()
    st = JournaledStorage(be)
    st.set(b"a", b"1")
    assert be.get(b"a") == b"1"
    st.delete(b"a")
    assert not be.exists(b"a")


def test_commit_and_revert():
    be = MemoryBackend({b"a": b"0"})
    st = JournaledStorage(be)

    st.begin()
    st.set(b"a", b"1")
    st.set(b"b", b"2")
    assert st.get(b"a") == b"1"
    assert be.get(b"a") == b"0"
    st.revert()
    assert st.get(b"a") == b"0"
    assert st.get(b"b") is None

    st.begin()
    st.delete(b"a")
    st.set(b"b", b"2")
    assert not st.exists(b"a")
    st.commit()
    assert be.get(b"a") is None
    assert be.get(b"b") == b"2"


def test_nested_commit_merges_into_parent():
    be = MemoryBackend()
    st = JournaledStorage(be)
    st.begin()
    st.begin()
    st.set(b"k", b"v")
    st.commit()
    assert st.depth() == 1
    assert be.get(b"k") is None
    assert st.get(b"k") == b"v"
    st.revert()
    assert st.get(b"k") is None


def test_items_shows_committed_state_only():
    st = JournaledStorage()
    st.set(b"b", b"2")
    st.set(b"a", b"1")
    st.begin()
    st.set(b"c", b"3")
    assert list(st.items()) == [(b"a", b"1"), (b"b", b"2")]
    st.revert()


def test_unbalanced_checkpoints_raise():
    st = JournaledStorage()
    with pytest.raises(StorageError):
        st.commit()
    with pytest.raises(StorageError):
        st.revert()


def test_int_helpers():
    st = JournaledStorage()
    assert st.get_int(b"n") == 0
    st.set_int(b"n", 0)
    assert st.get(b"n") == b"\x00"
    st.set_int(b"n", 258)
    assert st.get(b"n") == b"\x01\x02"
    assert st.get_int(b"n") == 258
    with pytest.raises(StorageError):
        st.set_int(b"n", -1)


def test_key_and_value_validation():
    st = JournaledStorage()
    with pytest.raises(StorageError):
        st.set(b"", b"1")
    with pytest.raises(StorageError):
        st.set("a", b"1")
    with pytest.raises(StorageError):
        st.set(b"a", "1")


def test_caps_follow_config(monkeypatch):
    monkeypatch.setenv("NAMEREG_MAX_KEY_BYTES", "8")
    monkeypatch.setenv("NAMEREG_MAX_VALUE_BYTES", "40")
    load_config.cache_clear()

    st = JournaledStorage()
    st.set(b"k" * 8, b"v" * 40)
    with pytest.raises(StorageError):
        st.set(b"k" * 9, b"v")
    with pytest.raises(StorageError):
        st.set(b"k", b"v" * 41)


def test_backend_must_implement_interface():
    with pytest.raises(StorageError):
        JournaledStorage(object())
