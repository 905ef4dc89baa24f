"""Unit tests for AccessDecisionEngine."""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest

from sgi_core.access.engine import AccessDecisionEngine
from sgi_core.domain.auth import AccessBasis, Principal
from sgi_core.domain.entities import EntityKind, EntityRef
from sgi_core.runtime.errors import ForbiddenError, NotFoundError, UnauthorizedError


@pytest.fixture
def engine(entities, grants, now):
    return AccessDecisionEngine(entity_lookup=entities, grant_store=grants, clock=lambda: now)


def analyst(area: str = "CI2") -> Principal:
    return Principal(user_id=str(uuid.uuid4()), role="analyst", area=area)


class TestMissingEntity:
    """The 404 check runs before any other rule."""

    def test_unknown_id_is_not_found(self, engine):
        with pytest.raises(NotFoundError) as exc_info:
            engine.decide(analyst(), EntityKind.PERSONA, str(uuid.uuid4()))

        assert exc_info.value.status_code == 404
        assert exc_info.value.to_dict() == {"error": "Entity not found"}

    def test_unknown_id_is_not_found_for_admin(self, engine):
        """Admins do not bypass the existence check."""
        admin = Principal(user_id=str(uuid.uuid4()), role="admin", area="TIC")

        with pytest.raises(NotFoundError):
            engine.decide(admin, EntityKind.CASO, str(uuid.uuid4()))

    def test_unknown_id_skips_grant_lookup(self, engine, grants):
        with pytest.raises(NotFoundError):
            engine.decide(analyst(), EntityKind.VISA, str(uuid.uuid4()))

        assert grants.lookups == 0

    def test_same_id_other_kind_is_not_found(self, engine, entities):
        """Ids are scoped to their kind."""
        entity_id = entities.seed(EntityKind.PERSONA, "CI2")

        with pytest.raises(NotFoundError):
            engine.decide(analyst("CI2"), EntityKind.VEHICULO, entity_id)


class TestAdminRule:
    def test_admin_passes_any_area(self, engine, entities, grants):
        entity_id = entities.seed(EntityKind.PERSONA, "SEP")
        admin = Principal(user_id=str(uuid.uuid4()), role="admin", area="TIC")

        context = engine.decide(admin, EntityKind.PERSONA, entity_id)

        assert context.basis is AccessBasis.ADMIN
        assert context.entity_area == "SEP"
        assert grants.lookups == 0

    def test_admin_role_is_case_insensitive(self, engine, entities):
        entity_id = entities.seed(EntityKind.EMPRESA, "SEP")
        admin = Principal(user_id=str(uuid.uuid4()), role="ADMIN", area="TIC")

        assert engine.decide(admin, EntityKind.EMPRESA, entity_id).basis is AccessBasis.ADMIN


class TestAreaRule:
    def test_matching_area_passes(self, engine, entities):
        entity_id = entities.seed(EntityKind.DOCUMENTO, "CI2")

        context = engine.decide(analyst("CI2"), EntityKind.DOCUMENTO, entity_id)

        assert context.basis is AccessBasis.AREA_MATCH
        assert context.entity_id == entity_id
        assert context.entity_name == "Documento"

    def test_area_match_is_exact(self, engine, entities):
        """Area comparison is case-sensitive."""
        entity_id = entities.seed(EntityKind.DOCUMENTO, "CI2")

        with pytest.raises(ForbiddenError):
            engine.decide(analyst("ci2"), EntityKind.DOCUMENTO, entity_id)

    def test_other_area_is_forbidden_with_context(self, engine, entities):
        entity_id = entities.seed(EntityKind.PERSONA, "SEP")

        with pytest.raises(ForbiddenError) as exc_info:
            engine.decide(analyst("CI2"), EntityKind.PERSONA, entity_id)

        body = exc_info.value.to_dict()
        assert exc_info.value.status_code == 403
        assert body["entityArea"] == "SEP"
        assert body["entityName"] == "Persona"

    def test_iio_display_name(self, engine, entities):
        entity_id = entities.seed(EntityKind.IIO, "SEP")

        with pytest.raises(ForbiddenError) as exc_info:
            engine.decide(analyst("CI2"), EntityKind.IIO, entity_id)

        assert exc_info.value.entity_name == "IIO"


class TestTemporaryGrantRule:
    """A grant admits its user to its record only while unexpired."""

    def test_grant_admits_before_expiry(self, engine, entities, grants, now):
        entity_id = entities.seed(EntityKind.PERSONA, "SEP")
        caller = analyst("CI2")
        ref = EntityRef(EntityKind.PERSONA, entity_id)
        grants.create(caller.user_id, ref, now + timedelta(hours=1), now=now)

        context = engine.decide(caller, EntityKind.PERSONA, entity_id)

        assert context.basis is AccessBasis.TEMPORARY_GRANT
        assert context.entity_area == "SEP"

    def test_grant_lapses_at_expiry(self, engine, entities, grants, now):
        entity_id = entities.seed(EntityKind.PERSONA, "SEP")
        caller = analyst("CI2")
        expires_at = now + timedelta(hours=1)
        grants.create(caller.user_id, EntityRef(EntityKind.PERSONA, entity_id), expires_at, now=now)

        with pytest.raises(ForbiddenError):
            engine.decide(caller, EntityKind.PERSONA, entity_id, now=expires_at)
        with pytest.raises(ForbiddenError):
            engine.decide(caller, EntityKind.PERSONA, entity_id, now=expires_at + timedelta(seconds=1))

    def test_grant_is_bound_to_user(self, engine, entities, grants, now):
        entity_id = entities.seed(EntityKind.PERSONA, "SEP")
        ref = EntityRef(EntityKind.PERSONA, entity_id)
        grants.create(str(uuid.uuid4()), ref, now + timedelta(hours=1), now=now)

        with pytest.raises(ForbiddenError):
            engine.decide(analyst("CI2"), EntityKind.PERSONA, entity_id)

    def test_grant_is_bound_to_record(self, engine, entities, grants, now):
        granted = entities.seed(EntityKind.PERSONA, "SEP")
        other = entities.seed(EntityKind.PERSONA, "SEP")
        caller = analyst("CI2")
        grants.create(
            caller.user_id, EntityRef(EntityKind.PERSONA, granted), now + timedelta(hours=1), now=now
        )

        with pytest.raises(ForbiddenError):
            engine.decide(caller, EntityKind.PERSONA, other)

    def test_grant_is_bound_to_kind(self, engine, entities, grants, now):
        persona_id = entities.seed(EntityKind.PERSONA, "SEP")
        caller = analyst("CI2")
        grants.create(
            caller.user_id, EntityRef(EntityKind.PERSONA, persona_id), now + timedelta(hours=1), now=now
        )
        entities.records[(EntityKind.VISA, persona_id)] = dict(
            entities.records[(EntityKind.PERSONA, persona_id)]
        )

        with pytest.raises(ForbiddenError):
            engine.decide(caller, EntityKind.VISA, persona_id)


class TestCollectionAndContract:
    def test_collection_decision_has_no_entity(self, engine, entities):
        context = engine.decide(analyst(), EntityKind.CASO, None)

        assert context.basis is AccessBasis.COLLECTION
        assert context.has_entity is False
        assert entities.area_lookups == 0

    def test_missing_principal_is_unauthorized(self, engine):
        with pytest.raises(UnauthorizedError) as exc_info:
            engine.decide(None, EntityKind.CASO, str(uuid.uuid4()))

        assert exc_info.value.status_code == 401

    def test_decision_is_repeatable(self, engine, entities):
        """Same inputs give the same outcome; the engine keeps no state."""
        entity_id = entities.seed(EntityKind.PASAPORTE, "TIC")
        caller = analyst("TIC")

        first = engine.decide(caller, EntityKind.PASAPORTE, entity_id)
        second = engine.decide(caller, EntityKind.PASAPORTE, entity_id)

        assert first == second
