"""
Management reporting routes.

- POST /gestion/por-area   record counts per area and kind for a date range
"""

from datetime import date, datetime, time, timedelta, timezone

from fastapi import APIRouter, Body, Depends
from loguru import logger
from pydantic import BaseModel

from sgi_core.auth import require_roles
from sgi_core.auth.dependencies import get_entity_repository
from sgi_core.domain.auth import Principal, Role
from sgi_core.repositories.entity_repository import EntityRepository
from sgi_core.runtime.errors import BadRequestError

router = APIRouter(prefix="/gestion", tags=["gestion"])


class PeriodRequest(BaseModel):
    """Inclusive date range, both ends as YYYY-MM-DD."""

    start_date: date
    end_date: date


class AreaCount(BaseModel):
    area: str
    counts: dict[str, int]
    total: int


@router.post("/por-area", response_model=list[AreaCount])
async def count_by_area(
    period: PeriodRequest = Body(...),
    principal: Principal = Depends(require_roles(Role.ADMIN, Role.SUPERUSER)),
    entities: EntityRepository = Depends(get_entity_repository),
):
    """Count records created in the period, per area and kind.

    Admins see every area; superusers only their own.
    """
    if period.start_date > period.end_date:
        raise BadRequestError("start_date no puede ser posterior a end_date")

    start = datetime.combine(period.start_date, time.min, tzinfo=timezone.utc)
    end = datetime.combine(period.end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
    area = None if principal.is_admin else principal.area

    counts = entities.count_by_area(start, end, area=area)
    logger.info(
        f"Area counts {period.start_date}..{period.end_date} "
        f"for {principal.user_id}: {len(counts)} area(s)"
    )
    return [
        AreaCount(area=name, counts=row, total=sum(row.values()))
        for name, row in sorted(counts.items())
    ]
