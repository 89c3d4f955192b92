# -*- coding: utf-8 -*-
"""
HashedRegistry (keccak256(domain) → str) tests
- canonicalization is deterministic, exact-bytes and 32 bytes long
- create/update/remove semantics with the empty-string absence sentinel
- lookups by precomputed hash
"""
from __future__ import annotations

import pytest

from namereg.errors import AlreadyExists, EmptyKey, EmptyValue, NotFound, Unauthorized
from namereg.registry import canonicalize
from namereg.registry.hashed_registry import EV_REGISTERED, EV_REMOVED, EV_UPDATED, HASH_LEN
from namereg.runtime.hash_api import keccak256

KECCAK_EMPTY = "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


def test_keccak_known_vector():
    assert keccak256(b"").hex() == KECCAK_EMPTY


def test_canonicalize_is_keccak_of_utf8():
    h = canonicalize("waku.eth")
    assert len(h) == HASH_LEN
    assert h == keccak256("waku.eth".encode("utf-8"))
    assert canonicalize("waku.eth") == h


def test_canonicalize_distinguishes_case():
    assert canonicalize("Waku.eth") != canonicalize("waku.eth")


def test_canonicalize_rejects_bad_input():
    with pytest.raises(EmptyKey):
        canonicalize("")
    with pytest.raises(TypeError):
        canonicalize(b"waku.eth")


def test_create_get_by_name_and_hash(hashed_reg, owner):
    hashed_reg.create(owner, "waku.eth", "10.0.0.1")
    assert hashed_reg.get("waku.eth") == "10.0.0.1"
    assert hashed_reg.get_by_hash(canonicalize("waku.eth")) == "10.0.0.1"
    assert hashed_reg.exists_by_hash(hashed_reg.canonicalize("waku.eth"))

    ev = hashed_reg.host.events.last()
    assert ev.name == EV_REGISTERED
    assert ev.args == {"key": canonicalize("waku.eth"), "value": "10.0.0.1"}


def test_update_emits_old_and_new(hashed_reg, owner):
    hashed_reg.create(owner, "waku.eth", "10.0.0.1")
    hashed_reg.update(owner, "waku.eth", "10.0.0.2")
    assert hashed_reg.get("waku.eth") == "10.0.0.2"

    ev = hashed_reg.host.events.last()
    assert ev.name == EV_UPDATED
    assert ev.args == {
        "key": canonicalize("waku.eth"),
        "old_value": "10.0.0.1",
        "new_value": "10.0.0.2",
    }


def test_remove_then_recreate(hashed_reg, owner):
    hashed_reg.create(owner, "waku.eth", "10.0.0.1")
    hashed_reg.remove(owner, "waku.eth")
    assert not hashed_reg.exists("waku.eth")
    with pytest.raises(NotFound):
        hashed_reg.get("waku.eth")
    assert hashed_reg.host.events.last().name == EV_REMOVED

    hashed_reg.create(owner, "waku.eth", "10.0.0.9")
    assert hashed_reg.get("waku.eth") == "10.0.0.9"


def test_rejections_leave_no_trace(hashed_reg, owner, stranger):
    hashed_reg.create(owner, "waku.eth", "10.0.0.1")
    with pytest.raises(AlreadyExists):
        hashed_reg.create(owner, "waku.eth", "10.0.0.2")
    with pytest.raises(EmptyValue):
        hashed_reg.create(owner, "other.eth", "")
    with pytest.raises(EmptyValue):
        hashed_reg.update(owner, "waku.eth", "")
    with pytest.raises(NotFound):
        hashed_reg.update(owner, "other.eth", "1.1.1.1")
    with pytest.raises(NotFound):
        hashed_reg.remove(owner, "other.eth")
    with pytest.raises(Unauthorized):
        hashed_reg.update(stranger, "waku.eth", "6.6.6.6")
    with pytest.raises(EmptyKey):
        hashed_reg.create(owner, "", "1.1.1.1")

    assert hashed_reg.get("waku.eth") == "10.0.0.1"
    assert not hashed_reg.exists("other.eth")
    assert len(hashed_reg.host.events) == 1


def test_exists_edge_cases(hashed_reg):
    assert hashed_reg.exists("") is False
    assert hashed_reg.exists("nope.eth") is False
    assert hashed_reg.exists_by_hash(b"\x01" * 5) is False
    with pytest.raises(NotFound):
        hashed_reg.get_by_hash(b"\x01" * 5)
    with pytest.raises(TypeError):
        hashed_reg.get_by_hash("waku.eth")


def test_value_must_be_str(hashed_reg, owner):
    with pytest.raises(TypeError):
        hashed_reg.create(owner, "waku.eth", b"10.0.0.1")
    assert not hashed_reg.exists("waku.eth")


def test_variants_do_not_share_entries(key_reg, hashed_reg, owner):
    key_reg.create(owner, "waku.eth", b"\x01")
    assert not hashed_reg.exists("waku.eth")
    hashed_reg.create(owner, "waku.eth", "10.0.0.1")
    assert key_reg.get("waku.eth") == b"\x01"
    assert hashed_reg.get("waku.eth") == "10.0.0.1"


def test_exists_is_stable_without_mutation(hashed_reg, owner):
    hashed_reg.create(owner, "live.eth", "1.1.1.1")
    hashed_reg.create(owner, "gone.eth", "2.2.2.2")
    hashed_reg.remove(owner, "gone.eth")
    for d, expected in (("live.eth", True), ("gone.eth", False), ("absent.eth", False)):
        assert hashed_reg.exists(d) is expected
        assert hashed_reg.exists(d) is expected


def test_max_length_dns_name(hashed_reg, owner):
    domain = "x" * 249 + ".eth"
    hashed_reg.create(owner, domain, "10.0.0.1")
    assert hashed_reg.exists(domain)
    assert hashed_reg.get(domain) == "10.0.0.1"
