"""
Shared test fixtures — async DB, services pinned to a fixed date, FastAPI test client.
"""

from datetime import date, timedelta

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

import contract_tracker.models  # noqa: F401
from contract_tracker.database import Base, get_db
from contract_tracker.main import app
from contract_tracker.models.contract import Contract
from contract_tracker.models.user import User
from contract_tracker.routes import get_attachment_service, get_contract_service
from contract_tracker.services.attachments import AttachmentService
from contract_tracker.services.contract_service import ContractService


# All date-derived rules are evaluated against this day
TODAY = date(2026, 6, 15)


# ── Test Database (SQLite in-memory) ────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def admin(db_session):
    user = User(name="Ada Admin", email="ada@example.com", role="admin")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def service(db_session):
    return ContractService(db_session, window_days=30, today=TODAY)


@pytest.fixture
def upload_dir(tmp_path):
    d = tmp_path / "uploads"
    d.mkdir()
    return str(d)


@pytest_asyncio.fixture()
async def client(session_factory, upload_dir):
    """FastAPI test client with test DB and a pinned 'today' injected."""

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    def _override_contract_service(db: AsyncSession = Depends(get_db)):
        return ContractService(db, window_days=30, today=TODAY)

    def _override_attachment_service(db: AsyncSession = Depends(get_db)):
        return AttachmentService(db, upload_dir=upload_dir)

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_contract_service] = _override_contract_service
    app.dependency_overrides[get_attachment_service] = _override_attachment_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def auth_headers(admin):
    return {"X-User-Id": str(admin.id)}


# ── Sample data ─────────────────────────────────────────

SAMPLE_CONTRACT = {
    "name": "Office Lease",
    "partner": "Acme Properties",
    "sign_date": "2025-01-10",
    "expire_date": "2027-01-10",
    "custom_data": {"amount": 12000, "owner": "Facilities"},
}


@pytest.fixture
def sample_contract():
    return dict(SAMPLE_CONTRACT, custom_data=dict(SAMPLE_CONTRACT["custom_data"]))


@pytest.fixture
def make_contract(db_session, admin):
    """Insert a contract row directly, bypassing the service and its audit trail."""

    async def _make(
        name: str = "Contract",
        partner: str = "Partner",
        expires_in: int = 100,
        status: str = "active",
        is_processed: bool = False,
        **extra,
    ) -> Contract:
        contract = Contract(
            name=name,
            partner=partner,
            sign_date=TODAY - timedelta(days=365),
            expire_date=TODAY + timedelta(days=expires_in),
            status=status,
            is_processed=is_processed,
            custom_data=extra.pop("custom_data", {}),
            created_by_id=admin.id,
            **extra,
        )
        db_session.add(contract)
        await db_session.commit()
        result = await db_session.execute(
            select(Contract)
            .where(Contract.id == contract.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    return _make
