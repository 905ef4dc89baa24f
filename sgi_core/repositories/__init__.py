"""PostgreSQL repositories for records, grants and areas."""

from sgi_core.repositories.area_repository import AreaRepository
from sgi_core.repositories.entity_repository import EntityRepository
from sgi_core.repositories.grant_repository import GrantRepository

__all__ = ["AreaRepository", "EntityRepository", "GrantRepository"]
