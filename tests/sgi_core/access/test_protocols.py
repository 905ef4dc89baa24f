"""The production repositories and the test fakes satisfy the store protocols."""

from __future__ import annotations

from sgi_core.access.protocols import EntityAreaLookup, GrantStore
from sgi_core.repositories import EntityRepository, GrantRepository
from tests.fakes import FakeEntityRepository, FakeGrantRepository


def test_repositories_satisfy_protocols():
    assert isinstance(EntityRepository(dsn="mock://"), EntityAreaLookup)
    assert isinstance(GrantRepository(dsn="mock://"), GrantStore)


def test_fakes_satisfy_protocols():
    assert isinstance(FakeEntityRepository(), EntityAreaLookup)
    assert isinstance(FakeGrantRepository(), GrantStore)
