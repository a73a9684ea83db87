import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./records-dev.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import uuid
from datetime import date
from typing import AsyncGenerator, Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from app.auth.models import User
from app.auth.security import create_access_token
from app.core.enums import Role
from app.core.models import AcademicYear, Tenant, Term
from app.db.session import Base, build_engine, build_session_factory, get_session_factory
from app.db.unit_of_work import UnitOfWork
from app.main import app


@pytest.fixture()
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite database per test so separate connections see each other's commits."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'records.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return build_session_factory(engine)


@pytest.fixture()
def uow(session_factory: async_sessionmaker) -> UnitOfWork:
    return UnitOfWork(session_factory)


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, using the per-test database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class Seeder:
    """Writes fixture rows in their own committed transactions and reads state back the same way."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def add(self, *objs):
        async with self._session_factory() as db:
            async with db.begin():
                db.add_all(objs)
        return objs[0] if len(objs) == 1 else objs

    async def tenant(self, name: str = "Acme School") -> Tenant:
        return await self.add(Tenant(name=name))

    async def user(self, tenant: Tenant, role: Role, external_identity_id: Optional[str] = None) -> User:
        return await self.add(
            User(
                tenant_id=tenant.id,
                external_identity_id=external_identity_id or f"idp|{uuid.uuid4().hex}",
                role=role.value,
                status="ACTIVE",
            )
        )

    async def year(
        self,
        tenant: Tenant,
        name: str,
        start_date: date,
        end_date: date,
        is_current: bool = False,
        is_locked: bool = False,
    ) -> AcademicYear:
        return await self.add(
            AcademicYear(
                tenant_id=tenant.id,
                name=name,
                start_date=start_date,
                end_date=end_date,
                is_current=is_current,
                is_locked=is_locked,
            )
        )

    async def term(
        self,
        year: AcademicYear,
        name: str,
        start_date: date,
        end_date: date,
        is_locked: bool = False,
    ) -> Term:
        return await self.add(
            Term(
                academic_year_id=year.id,
                name=name,
                start_date=start_date,
                end_date=end_date,
                is_locked=is_locked,
            )
        )

    async def get(self, model, obj_id):
        async with self._session_factory() as db:
            return await db.get(model, obj_id)

    async def current_count(self, tenant: Tenant) -> int:
        async with self._session_factory() as db:
            return await db.scalar(
                select(func.count())
                .select_from(AcademicYear)
                .where(AcademicYear.tenant_id == tenant.id, AcademicYear.is_current.is_(True))
            )

    async def count(self, model, *criteria) -> int:
        async with self._session_factory() as db:
            return await db.scalar(select(func.count()).select_from(model).where(*criteria))


@pytest.fixture()
def seed(session_factory: async_sessionmaker) -> Seeder:
    return Seeder(session_factory)


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(subject={"sub": user.external_identity_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def tenant(seed: Seeder) -> Tenant:
    return await seed.tenant()


@pytest.fixture()
async def admin(seed: Seeder, tenant: Tenant) -> User:
    return await seed.user(tenant, Role.ADMIN)


@pytest.fixture()
async def teacher(seed: Seeder, tenant: Tenant) -> User:
    return await seed.user(tenant, Role.TEACHER)


@pytest.fixture()
def admin_headers(admin: User) -> Dict[str, str]:
    return auth_headers(admin)


@pytest.fixture()
def teacher_headers(teacher: User) -> Dict[str, str]:
    return auth_headers(teacher)


@pytest.fixture()
def headers_for():
    """Bearer headers for any seeded user."""
    return auth_headers
