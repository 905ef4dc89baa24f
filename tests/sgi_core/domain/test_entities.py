"""Unit tests for EntityKind and EntityRef."""

from __future__ import annotations

import uuid

import pytest

from sgi_core.domain.entities import EntityKind, EntityRef
from sgi_core.runtime.errors import BadRequestError, ErrorCode


class TestEntityKind:
    def test_from_segment_resolves_route_segments(self):
        assert EntityKind.from_segment("personas") is EntityKind.PERSONA
        assert EntityKind.from_segment("iios") is EntityKind.IIO

    def test_from_segment_rejects_unknown_kinds(self):
        with pytest.raises(BadRequestError) as exc_info:
            EntityKind.from_segment("usuarios")

        assert exc_info.value.code == ErrorCode.UNSUPPORTED_ENTITY
        assert exc_info.value.to_dict() == {"error": "Unsupported entity type"}

    def test_every_kind_has_table_and_display_name(self):
        for kind in EntityKind:
            assert kind.table
            assert kind.display_name

    def test_nine_kinds(self):
        assert len(EntityKind) == 9

    def test_display_names(self):
        assert EntityKind.CASO.display_name == "Caso"
        assert EntityKind.IIO.display_name == "IIO"


class TestEntityRef:
    def test_parsed_id_for_uuid(self):
        entity_id = uuid.uuid4()

        assert EntityRef(EntityKind.VISA, str(entity_id)).parsed_id() == entity_id

    def test_parsed_id_for_garbage_is_none(self):
        assert EntityRef(EntityKind.VISA, "not-a-uuid").parsed_id() is None

    def test_str(self):
        assert str(EntityRef(EntityKind.PERSONA, "abc")) == "personas#abc"
