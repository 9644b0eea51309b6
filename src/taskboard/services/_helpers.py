"""Shared service-layer helper functions."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel


def dump(entity: BaseModel) -> dict[str, Any]:
    """JSON-ready dict for a single entity."""
    return entity.model_dump(mode="json")


def dump_all(entities: Iterable[BaseModel]) -> list[dict[str, Any]]:
    return [dump(e) for e in entities]


def merge_patch(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only the fields a partial update actually supplies.

    ``None`` and empty strings mean "leave unchanged". Empty lists are kept
    so a caller can clear tags explicitly.

    Examples:
        >>> merge_patch({"title": "x", "description": "", "due_date": None})
        {'title': 'x'}
        >>> merge_patch({"tags": []})
        {'tags': []}
    """
    return {k: v for k, v in fields.items() if v is not None and v != ""}


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Strip whitespace and drop blanks and repeats, keeping first-seen order.

    Examples:
        >>> normalize_tags([" ui ", "bug", "", "ui"])
        ['ui', 'bug']
    """
    seen: dict[str, None] = {}
    for tag in tags or []:
        cleaned = tag.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)
