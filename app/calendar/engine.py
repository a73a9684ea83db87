"""
CalendarRuleEngine: the invariants of academic years and terms, checked against the session of the unit
of work that will perform the write.

Write ordering: date range -> lock guard (target, then parent for terms) -> containment (terms, and the
terms of a year whose dates move) -> overlap with siblings -> single-current enforcement. Callers persist
only after every check passed; a failure raises and the unit rolls back.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.calendar.rules import find_overlap, is_contained, validate_containment, validate_date_range
from app.core.enums import RuleKind
from app.core.exceptions import CalendarValidationError, LockedError, NotFoundError
from app.core.models import AcademicYear, Term

logger = logging.getLogger("records.calendar")


class CalendarRuleEngine:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ----- Loading -----
    async def get_academic_year(self, tenant_id: UUID, academic_year_id: UUID) -> AcademicYear:
        result = await self.db.execute(
            select(AcademicYear).where(
                AcademicYear.id == academic_year_id,
                AcademicYear.tenant_id == tenant_id,
            )
        )
        ay = result.scalar_one_or_none()
        if not ay:
            raise NotFoundError("Academic year not found")
        return ay

    async def get_term(self, tenant_id: UUID, term_id: UUID) -> Tuple[Term, AcademicYear]:
        """Load a term together with its parent year; terms of other tenants are not found."""
        result = await self.db.execute(
            select(Term, AcademicYear)
            .join(AcademicYear, AcademicYear.id == Term.academic_year_id)
            .where(Term.id == term_id, AcademicYear.tenant_id == tenant_id)
        )
        row = result.one_or_none()
        if not row:
            raise NotFoundError("Term not found")
        return row[0], row[1]

    async def _year_siblings(self, tenant_id: UUID, exclude_id: Optional[UUID]) -> List[AcademicYear]:
        stmt = select(AcademicYear).where(AcademicYear.tenant_id == tenant_id)
        if exclude_id is not None:
            stmt = stmt.where(AcademicYear.id != exclude_id)
        result = await self.db.execute(stmt.order_by(AcademicYear.start_date))
        return list(result.scalars().all())

    async def _term_siblings(self, academic_year_id: UUID, exclude_id: Optional[UUID]) -> List[Term]:
        stmt = select(Term).where(Term.academic_year_id == academic_year_id)
        if exclude_id is not None:
            stmt = stmt.where(Term.id != exclude_id)
        result = await self.db.execute(stmt.order_by(Term.start_date))
        return list(result.scalars().all())

    # ----- LockGuard -----
    @staticmethod
    def guard_year_unlocked(ay: AcademicYear) -> None:
        if ay.is_locked:
            raise LockedError(f'Academic year "{ay.name}" is locked and cannot be modified')

    @classmethod
    def guard_term_unlocked(cls, term: Term, parent: AcademicYear) -> None:
        if term.is_locked:
            raise LockedError(f'Term "{term.name}" is locked and cannot be modified')
        # Year locks cascade down to every term for writes.
        cls.guard_year_unlocked(parent)

    # ----- Write checks -----
    async def check_academic_year_write(
        self,
        tenant_id: UUID,
        start_date: date,
        end_date: date,
        target: Optional[AcademicYear] = None,
    ) -> None:
        """Validate a create (target=None) or an update of target to [start_date, end_date]."""
        validate_date_range(start_date, end_date, "Academic year")
        if target is not None:
            self.guard_year_unlocked(target)
            if (start_date, end_date) != (target.start_date, target.end_date):
                await self._check_terms_stay_contained(target, start_date, end_date)
        siblings = await self._year_siblings(tenant_id, target.id if target is not None else None)
        clash = find_overlap(start_date, end_date, siblings)
        if clash is not None:
            raise CalendarValidationError(
                RuleKind.OVERLAP,
                f'Academic year dates overlap with existing year "{clash.name}"',
            )

    async def _check_terms_stay_contained(self, ay: AcademicYear, start_date: date, end_date: date) -> None:
        for term in await self._term_siblings(ay.id, exclude_id=None):
            if not is_contained(term.start_date, term.end_date, start_date, end_date):
                raise CalendarValidationError(
                    RuleKind.OUT_OF_BOUNDS,
                    f'Term "{term.name}" would fall outside academic year "{ay.name}"',
                )

    async def check_term_write(
        self,
        parent: AcademicYear,
        start_date: date,
        end_date: date,
        target: Optional[Term] = None,
    ) -> None:
        validate_date_range(start_date, end_date, "Term")
        if target is not None:
            self.guard_term_unlocked(target, parent)
        else:
            self.guard_year_unlocked(parent)
        validate_containment(start_date, end_date, parent)
        siblings = await self._term_siblings(parent.id, target.id if target is not None else None)
        clash = find_overlap(start_date, end_date, siblings)
        if clash is not None:
            raise CalendarValidationError(
                RuleKind.OVERLAP,
                f'Term dates overlap with existing term "{clash.name}"',
            )

    # ----- SingleCurrentEnforcer -----
    async def enforce_single_current(self, tenant_id: UUID, keep_id: Optional[UUID] = None) -> None:
        """Clear is_current on every year of the tenant except keep_id. Must run before the flag is set."""
        stmt = update(AcademicYear).execution_options(synchronize_session="fetch").where(
            AcademicYear.tenant_id == tenant_id,
            AcademicYear.is_current.is_(True),
        )
        if keep_id is not None:
            stmt = stmt.where(AcademicYear.id != keep_id)
        result = await self.db.execute(stmt.values(is_current=False))
        if result.rowcount:
            logger.info("Cleared current flag on %d academic year(s) of tenant %s", result.rowcount, tenant_id)

    async def make_current(self, ay: AcademicYear) -> None:
        self.guard_year_unlocked(ay)
        await self.enforce_single_current(ay.tenant_id, keep_id=ay.id)
        ay.is_current = True

    # ----- Lock state machine -----
    def lock_academic_year(self, ay: AcademicYear) -> None:
        if ay.is_locked:
            raise LockedError(f'Academic year "{ay.name}" is already locked')
        ay.is_locked = True

    def unlock_academic_year(self, ay: AcademicYear) -> None:
        if not ay.is_locked:
            raise LockedError(f'Academic year "{ay.name}" is not locked')
        ay.is_locked = False

    def lock_term(self, term: Term, parent: AcademicYear) -> None:
        self.guard_year_unlocked(parent)
        if term.is_locked:
            raise LockedError(f'Term "{term.name}" is already locked')
        term.is_locked = True

    def unlock_term(self, term: Term, parent: AcademicYear) -> None:
        self.guard_year_unlocked(parent)
        if not term.is_locked:
            raise LockedError(f'Term "{term.name}" is not locked')
        term.is_locked = False
