"""Tests for ID generation and validation."""

from __future__ import annotations

import pytest

from taskboard.domain.ids import TYPE_PREFIXES, new_id, validate_id


class TestNewId:
    @pytest.mark.parametrize("kind", sorted(TYPE_PREFIXES))
    def test_generated_ids_validate(self, kind: str) -> None:
        entity_id = new_id(kind)
        assert entity_id.startswith(TYPE_PREFIXES[kind])
        assert validate_id(entity_id, kind)

    def test_ids_are_unique(self) -> None:
        assert len({new_id("task") for _ in range(200)}) == 200

    def test_unknown_kind(self) -> None:
        with pytest.raises(KeyError):
            new_id("sprint")


class TestValidateId:
    def test_wrong_prefix(self) -> None:
        assert not validate_id(new_id("board"), "task")

    def test_unknown_kind(self) -> None:
        assert not validate_id("brd_0123456789", "sprint")

    def test_malformed(self) -> None:
        assert not validate_id("brd_XYZ", "board")
