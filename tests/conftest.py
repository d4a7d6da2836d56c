import os

TEST_KEY_HEX = "6b" * 32

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("FINGERPRINT_ENCRYPTION_KEY", TEST_KEY_HEX)

import base64
import secrets
from datetime import datetime, timedelta, timezone

import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies import get_audit_sink, get_template_cipher
from app.core.audit import InMemoryAuditSink
from app.core.config import settings
from app.core.database import get_async_session
from app.models.base import Base
from app.models import Employee, FingerprintTemplate  # noqa: F401  registers tables
from app.services.biometric.fingerprint_service import FingerprintService
from app.utils.template_crypto import TemplateCipher
from main import app

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def cipher() -> TemplateCipher:
    return TemplateCipher(bytes.fromhex(TEST_KEY_HEX))


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def service(session, cipher, audit_sink) -> FingerprintService:
    return FingerprintService(session, cipher=cipher, audit_sink=audit_sink)


async def create_employee(session: AsyncSession, employee_id: str, name: str, **extra) -> Employee:
    employee = Employee(
        employee_id=employee_id,
        name=name,
        job_role=extra.pop("job_role", "Technician"),
        department=extra.pop("department", "Operations"),
        created_by="admin",
        **extra
    )
    session.add(employee)
    await session.commit()
    await session.refresh(employee)
    return employee


@pytest.fixture
async def employee(session) -> Employee:
    return await create_employee(session, "EMP001", "Asha Rahman")


@pytest.fixture
async def other_employee(session) -> Employee:
    return await create_employee(session, "EMP002", "Karim Uddin")


def make_token(username: str = "hr.admin", role: str = "admin", expires_in: int = 30, **claims) -> str:
    payload = {
        "username": username,
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_in),
        **claims,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def auth(role: str = "admin", username: str = "hr.admin") -> dict:
    return {"Authorization": f"Bearer {make_token(username=username, role=role)}"}


def template_b64(size: int = 1200) -> str:
    return base64.b64encode(secrets.token_bytes(size)).decode()


@pytest.fixture
async def client(session_maker, cipher, audit_sink) -> AsyncGenerator[AsyncClient, None]:
    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_template_cipher] = lambda: cipher
    app.dependency_overrides[get_audit_sink] = lambda: audit_sink

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
