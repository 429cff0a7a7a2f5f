from __future__ import annotations

from custom_components.fitflow.normalize import normalize_document, normalize_documents


def test_mongo_id_is_promoted_and_removed() -> None:
    doc = {"_id": 42, "name": "Bench"}
    out = normalize_document(doc)
    assert out == {"id": "42", "name": "Bench"}
    assert doc == {"_id": 42, "name": "Bench"}


def test_existing_id_wins_over_mongo_id() -> None:
    assert normalize_document({"id": 7, "_id": "abc"}) == {"id": "7"}


def test_user_reference_collapses_to_id() -> None:
    assert normalize_document({"id": "a", "user": {"_id": "u-1", "email": "x@y"}})["user"] == "u-1"
    assert normalize_document({"id": "a", "user": 99})["user"] == "99"


def test_user_mapping_without_id_is_stringified() -> None:
    out = normalize_document({"id": "a", "user": {"email": "x@y"}})
    assert isinstance(out["user"], str)
    assert "x@y" in out["user"]


def test_normalization_is_idempotent() -> None:
    samples = [
        {"_id": 1, "user": {"_id": 2}, "nested": {"_id": "stays"}},
        {"id": "x", "user": "u"},
        {"name": "no id at all"},
    ]
    for doc in samples:
        once = normalize_document(doc)
        assert normalize_document(once) == once


def test_none_and_non_mapping_entries() -> None:
    assert normalize_document(None) is None
    assert normalize_documents([{"_id": 1}, "junk", None]) == [{"id": "1"}]
