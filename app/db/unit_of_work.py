"""
UnitOfWork: run read-validate-write steps against one transaction and commit them as a whole.

Each attempt opens a fresh session, locks the tenant row when a tenant is given, runs every step with the
same session and commits once. Any exception rolls the attempt back completely. Conflicts reported by the
database (serialization failures, the single-current unique index) re-run the steps on a fresh snapshot.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.exceptions import NotFoundError, SystemFailure
from app.core.models import Tenant
from app.db.session import get_session_factory

logger = logging.getLogger("records.db")

Step = Callable[[AsyncSession], Awaitable[Any]]

_RETRYABLE_SQLSTATES = {"40001", "40P01"}  # serialization_failure, deadlock_detected


def _is_conflict(exc: DBAPIError) -> bool:
    if isinstance(exc, IntegrityError):
        return True
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code in _RETRYABLE_SQLSTATES


async def lock_tenant(db: AsyncSession, tenant_id: UUID) -> Tenant:
    """Row-lock the tenant so calendar writers of one tenant run one at a time."""
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id).with_for_update())
    tenant = result.scalar_one_or_none()
    if not tenant:
        raise NotFoundError("Tenant not found")
    return tenant


class UnitOfWork:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        max_retries: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._session_factory = session_factory
        self._max_retries = max_retries if max_retries is not None else settings.transaction_max_retries
        self._timeout = timeout_seconds if timeout_seconds is not None else settings.transaction_timeout_seconds

    async def run(self, *steps: Step, tenant_id: Optional[UUID] = None) -> Any:
        """Execute steps in order inside one transaction; return the last step's result."""
        attempts = max(1, self._max_retries)
        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(self._attempt(steps, tenant_id), timeout=self._timeout)
            except DBAPIError as e:
                if _is_conflict(e) and attempt < attempts:
                    logger.warning("Transaction conflict (attempt %d/%d): %s", attempt, attempts, e.orig)
                    continue
                logger.exception("Transaction failed after %d attempt(s)", attempt)
                raise SystemFailure(cause=e) from e
            except asyncio.TimeoutError as e:
                logger.error("Transaction exceeded %.1fs and was rolled back", self._timeout)
                raise SystemFailure(cause=e) from e
            except SQLAlchemyError as e:
                logger.exception("Transaction failed")
                raise SystemFailure(cause=e) from e

    async def _attempt(self, steps, tenant_id: Optional[UUID]) -> Any:
        result: Any = None
        async with self._session_factory() as db:
            async with db.begin():
                if tenant_id is not None:
                    await lock_tenant(db, tenant_id)
                for step in steps:
                    result = await step(db)
                # Surface constraint violations before commit so they roll back like any other failure.
                await db.flush()
        return result


def get_unit_of_work(session_factory: async_sessionmaker = Depends(get_session_factory)) -> UnitOfWork:
    return UnitOfWork(session_factory)
