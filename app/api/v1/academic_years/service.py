import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.terms.schemas import TermResponse
from app.calendar import CalendarRuleEngine
from app.core.exceptions import LockedError, NotFoundError
from app.core.models import AcademicYear, Term
from app.db.unit_of_work import UnitOfWork

from .schemas import AcademicYearCreate, AcademicYearResponse, AcademicYearUpdate, AcademicYearWithTerms

logger = logging.getLogger("records.calendar")


def _to_response(ay: AcademicYear) -> AcademicYearResponse:
    return AcademicYearResponse(
        id=ay.id,
        tenant_id=ay.tenant_id,
        name=ay.name,
        start_date=ay.start_date,
        end_date=ay.end_date,
        is_current=ay.is_current,
        is_locked=ay.is_locked,
        created_at=ay.created_at,
        updated_at=ay.updated_at,
    )


async def create_academic_year(
    uow: UnitOfWork,
    tenant_id: UUID,
    payload: AcademicYearCreate,
) -> AcademicYearResponse:
    """Create academic year. If is_current=true, unset current on all other years in the same unit."""

    async def _create(db: AsyncSession) -> AcademicYearResponse:
        rules = CalendarRuleEngine(db)
        await rules.check_academic_year_write(tenant_id, payload.start_date, payload.end_date)
        if payload.is_current and payload.is_locked:
            raise LockedError("A locked academic year cannot be set as current")
        if payload.is_current:
            await rules.enforce_single_current(tenant_id)
        ay = AcademicYear(
            tenant_id=tenant_id,
            name=payload.name,
            start_date=payload.start_date,
            end_date=payload.end_date,
            is_current=payload.is_current,
            is_locked=payload.is_locked,
        )
        db.add(ay)
        await db.flush()
        return _to_response(ay)

    created = await uow.run(_create, tenant_id=tenant_id)
    logger.info("Created academic year %s for tenant %s", created.id, tenant_id)
    return created


async def list_academic_years(db: AsyncSession, tenant_id: UUID) -> List[AcademicYearWithTerms]:
    """List academic years for tenant, newest first, each with its terms."""
    result = await db.execute(
        select(AcademicYear)
        .where(AcademicYear.tenant_id == tenant_id)
        .options(selectinload(AcademicYear.terms))
        .order_by(AcademicYear.start_date.desc())
    )
    return [
        AcademicYearWithTerms(
            **_to_response(ay).model_dump(),
            terms=[TermResponse.model_validate(t) for t in ay.terms],
        )
        for ay in result.scalars().all()
    ]


async def get_academic_year(
    db: AsyncSession,
    tenant_id: UUID,
    academic_year_id: UUID,
) -> Optional[AcademicYearResponse]:
    """Get one academic year by id (tenant-scoped)."""
    result = await db.execute(
        select(AcademicYear).where(
            AcademicYear.id == academic_year_id,
            AcademicYear.tenant_id == tenant_id,
        )
    )
    ay = result.scalar_one_or_none()
    return _to_response(ay) if ay else None


async def get_current_academic_year(
    db: AsyncSession,
    tenant_id: UUID,
) -> Optional[AcademicYearResponse]:
    """Get the current academic year (is_current=true) for tenant."""
    result = await db.execute(
        select(AcademicYear).where(
            AcademicYear.tenant_id == tenant_id,
            AcademicYear.is_current.is_(True),
        )
    )
    ay = result.scalar_one_or_none()
    return _to_response(ay) if ay else None


async def update_academic_year(
    uow: UnitOfWork,
    tenant_id: UUID,
    academic_year_id: UUID,
    payload: AcademicYearUpdate,
) -> AcademicYearResponse:
    """Update academic year. Refused while locked; dates are re-validated against siblings and terms."""

    async def _update(db: AsyncSession) -> AcademicYearResponse:
        rules = CalendarRuleEngine(db)
        ay = await rules.get_academic_year(tenant_id, academic_year_id)
        start_date = payload.start_date if payload.start_date is not None else ay.start_date
        end_date = payload.end_date if payload.end_date is not None else ay.end_date
        await rules.check_academic_year_write(tenant_id, start_date, end_date, target=ay)

        if payload.name is not None:
            ay.name = payload.name
        ay.start_date = start_date
        ay.end_date = end_date
        if payload.is_current and not ay.is_current:
            await rules.make_current(ay)
        elif payload.is_current is False:
            ay.is_current = False
        await db.flush()
        return _to_response(ay)

    return await uow.run(_update, tenant_id=tenant_id)


async def set_academic_year_current(
    uow: UnitOfWork,
    tenant_id: UUID,
    academic_year_id: UUID,
) -> AcademicYearResponse:
    """Set this academic year as current. All others for tenant become is_current=false in the same unit."""

    async def _set_current(db: AsyncSession) -> AcademicYearResponse:
        rules = CalendarRuleEngine(db)
        ay = await rules.get_academic_year(tenant_id, academic_year_id)
        await rules.make_current(ay)
        await db.flush()
        return _to_response(ay)

    current = await uow.run(_set_current, tenant_id=tenant_id)
    logger.info("Academic year %s is now current for tenant %s", academic_year_id, tenant_id)
    return current


async def lock_academic_year(
    uow: UnitOfWork,
    tenant_id: UUID,
    academic_year_id: UUID,
) -> AcademicYearResponse:
    """Administrative close-out: the year and all of its terms become read-only."""

    async def _lock(db: AsyncSession) -> AcademicYearResponse:
        rules = CalendarRuleEngine(db)
        ay = await rules.get_academic_year(tenant_id, academic_year_id)
        rules.lock_academic_year(ay)
        await db.flush()
        return _to_response(ay)

    return await uow.run(_lock, tenant_id=tenant_id)


async def unlock_academic_year(
    uow: UnitOfWork,
    tenant_id: UUID,
    academic_year_id: UUID,
) -> AcademicYearResponse:
    async def _unlock(db: AsyncSession) -> AcademicYearResponse:
        rules = CalendarRuleEngine(db)
        ay = await rules.get_academic_year(tenant_id, academic_year_id)
        rules.unlock_academic_year(ay)
        await db.flush()
        return _to_response(ay)

    return await uow.run(_unlock, tenant_id=tenant_id)


async def delete_academic_year(
    uow: UnitOfWork,
    tenant_id: UUID,
    academic_year_id: UUID,
) -> None:
    """Delete an unlocked academic year together with all of its terms."""

    async def _delete(db: AsyncSession) -> None:
        rules = CalendarRuleEngine(db)
        ay = await rules.get_academic_year(tenant_id, academic_year_id)
        rules.guard_year_unlocked(ay)
        # Term locks are not consulted here: the year-level decision covers its terms.
        await db.execute(delete(Term).where(Term.academic_year_id == ay.id))
        result = await db.execute(delete(AcademicYear).where(AcademicYear.id == ay.id))
        if result.rowcount != 1:
            raise NotFoundError("Academic year not found")

    await uow.run(_delete, tenant_id=tenant_id)
    logger.info("Deleted academic year %s of tenant %s", academic_year_id, tenant_id)
