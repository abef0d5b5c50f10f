"""
Tests for deterministic event id derivation
"""

import hashlib

from drains_api.event_keys import canonical_json, content_hash, media_type, stable_event_id


def test_layout_is_documented_join():
    expected = hashlib.sha256("a\x1f1\x1f\x1ftrue".encode("utf-8")).hexdigest()
    assert stable_event_id(["a", 1, None, True]) == expected


def test_same_parts_same_id():
    parts = ["2026-10-01T12:00:00.000Z", "LCP", 1200.5, "/", "/", "42"]
    assert stable_event_id(parts) == stable_event_id(list(parts))


def test_integral_float_matches_int():
    assert stable_event_id(["x", 2.0]) == stable_event_id(["x", 2])


def test_part_boundaries_matter():
    assert stable_event_id(["ab", "c"]) != stable_event_id(["a", "bc"])


def test_order_matters():
    assert stable_event_id(["a", "b"]) != stable_event_id(["b", "a"])


def test_id_is_sha256_hex():
    event_id = stable_event_id(["x"])
    assert len(event_id) == 64
    int(event_id, 16)


def test_content_hash():
    assert content_hash(b"\x00\x01") == hashlib.sha256(b"\x00\x01").hexdigest()


def test_media_type():
    assert media_type("Application/JSON; charset=utf-8") == "application/json"
    assert media_type("") == ""


def test_canonical_json_is_key_order_independent():
    assert canonical_json({"b": 1, "a": [1, 2]}) == canonical_json({"a": [1, 2], "b": 1})
    assert canonical_json({"a": "é"}) == '{"a":"é"}'


def test_lone_surrogate_is_hashable_and_stable():
    a = stable_event_id(["/\ud800"])
    assert a == stable_event_id(["/\ud800"])
    assert a != stable_event_id(["/\udc00"])
