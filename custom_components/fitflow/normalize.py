"""Reconcile remote document shapes with the local record shape."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def normalize_document(doc: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Return ``doc`` in the local shape.

    - ``id`` wins over ``_id``; either way it ends up a string under ``id``
    - ``_id`` is dropped
    - an embedded ``user`` collapses to its id string
    """
    if doc is None:
        return None
    normalized = dict(doc)
    identifier = normalized.get("id")
    if identifier is None:
        identifier = normalized.get("_id")
    normalized.pop("_id", None)
    if identifier is not None:
        normalized["id"] = str(identifier)

    user = normalized.get("user")
    if isinstance(user, Mapping):
        user_id = user.get("_id")
        normalized["user"] = str(user_id) if user_id is not None else str(dict(user))
    elif user is not None:
        normalized["user"] = str(user)
    return normalized


def normalize_documents(docs: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    return [normalize_document(doc) for doc in (docs or []) if isinstance(doc, Mapping)]
