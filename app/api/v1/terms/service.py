from typing import List
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.calendar import CalendarRuleEngine
from app.core.exceptions import NotFoundError
from app.core.models import AcademicYear, Term
from app.db.unit_of_work import UnitOfWork

from .schemas import TermCreate, TermResponse, TermUpdate


def _to_response(term: Term) -> TermResponse:
    return TermResponse(
        id=term.id,
        academic_year_id=term.academic_year_id,
        name=term.name,
        start_date=term.start_date,
        end_date=term.end_date,
        is_locked=term.is_locked,
        created_at=term.created_at,
        updated_at=term.updated_at,
    )


async def list_terms(db: AsyncSession, tenant_id: UUID, academic_year_id: UUID) -> List[TermResponse]:
    """Terms of one academic year of the tenant, in calendar order."""
    year = await db.execute(
        select(AcademicYear.id).where(
            AcademicYear.id == academic_year_id,
            AcademicYear.tenant_id == tenant_id,
        )
    )
    if year.scalar_one_or_none() is None:
        raise NotFoundError("Academic year not found")
    result = await db.execute(
        select(Term).where(Term.academic_year_id == academic_year_id).order_by(Term.start_date.asc())
    )
    return [_to_response(t) for t in result.scalars().all()]


async def get_term(db: AsyncSession, tenant_id: UUID, term_id: UUID) -> TermResponse:
    term, _ = await CalendarRuleEngine(db).get_term(tenant_id, term_id)
    return _to_response(term)


async def create_term(uow: UnitOfWork, tenant_id: UUID, payload: TermCreate) -> TermResponse:
    """Create a term: dates valid, parent unlocked, inside the parent year, no overlap with sibling terms."""

    async def _create(db: AsyncSession) -> TermResponse:
        rules = CalendarRuleEngine(db)
        parent = await rules.get_academic_year(tenant_id, payload.academic_year_id)
        await rules.check_term_write(parent, payload.start_date, payload.end_date)
        term = Term(
            academic_year_id=parent.id,
            name=payload.name,
            start_date=payload.start_date,
            end_date=payload.end_date,
            is_locked=payload.is_locked,
        )
        db.add(term)
        await db.flush()
        return _to_response(term)

    return await uow.run(_create, tenant_id=tenant_id)


async def update_term(uow: UnitOfWork, tenant_id: UUID, term_id: UUID, payload: TermUpdate) -> TermResponse:
    async def _update(db: AsyncSession) -> TermResponse:
        rules = CalendarRuleEngine(db)
        term, parent = await rules.get_term(tenant_id, term_id)
        start_date = payload.start_date if payload.start_date is not None else term.start_date
        end_date = payload.end_date if payload.end_date is not None else term.end_date
        await rules.check_term_write(parent, start_date, end_date, target=term)
        if payload.name is not None:
            term.name = payload.name
        term.start_date = start_date
        term.end_date = end_date
        await db.flush()
        return _to_response(term)

    return await uow.run(_update, tenant_id=tenant_id)


async def delete_term(uow: UnitOfWork, tenant_id: UUID, term_id: UUID) -> None:
    """Delete a term unless it or its academic year is locked."""

    async def _delete(db: AsyncSession) -> None:
        rules = CalendarRuleEngine(db)
        term, parent = await rules.get_term(tenant_id, term_id)
        rules.guard_term_unlocked(term, parent)
        await db.execute(delete(Term).where(Term.id == term.id))

    await uow.run(_delete, tenant_id=tenant_id)


async def lock_term(uow: UnitOfWork, tenant_id: UUID, term_id: UUID) -> TermResponse:
    async def _lock(db: AsyncSession) -> TermResponse:
        rules = CalendarRuleEngine(db)
        term, parent = await rules.get_term(tenant_id, term_id)
        rules.lock_term(term, parent)
        await db.flush()
        return _to_response(term)

    return await uow.run(_lock, tenant_id=tenant_id)


async def unlock_term(uow: UnitOfWork, tenant_id: UUID, term_id: UUID) -> TermResponse:
    async def _unlock(db: AsyncSession) -> TermResponse:
        rules = CalendarRuleEngine(db)
        term, parent = await rules.get_term(tenant_id, term_id)
        rules.unlock_term(term, parent)
        await db.flush()
        return _to_response(term)

    return await uow.run(_unlock, tenant_id=tenant_id)
