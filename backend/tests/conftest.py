# tests/conftest.py

import copy
import os
import uuid
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from classroom_api.database import Base, get_db
from classroom_api.main import app
from classroom_api.models.user import User, UserRole
from classroom_api.schemas.classroom import ClassroomResponse, ClassroomSummaryResponse
from classroom_api.services.auth_service import create_access_token
from classroom_api.services.classroom_service import ClassroomService
from classroom_api.services.user_service import create_user


class InMemoryClassroomStore:
    """Dict-backed stand-in for ClassroomStore with the same contract."""

    def __init__(self):
        self.documents = {}

    async def insert(self, document):
        now = datetime.now(timezone.utc)
        classroom_id = uuid.uuid4().hex
        self.documents[classroom_id] = {
            **copy.deepcopy(document),
            "id": classroom_id,
            "students": copy.deepcopy(document.get("students") or []),
            "attendance_records": [],
            "created_at": now,
            "updated_at": now,
        }
        return await self.find_by_id(classroom_id)

    async def find_by_id(self, classroom_id):
        document = self.documents.get(classroom_id)
        if document is None:
            return None
        return ClassroomResponse.model_validate(copy.deepcopy(document))

    async def find_by_owner(self, owner_id, sort_by="end_year", descending=True):
        owned = [d for d in self.documents.values() if d["created_by"] == owner_id]
        owned.sort(key=lambda d: d[sort_by], reverse=descending)
        return [ClassroomSummaryResponse.model_validate(d) for d in owned]

    async def replace_fields(self, classroom_id, fields):
        document = self.documents.get(classroom_id)
        if document is None:
            return None
        document.update(copy.deepcopy(fields))
        document["updated_at"] = datetime.now(timezone.utc)
        return await self.find_by_id(classroom_id)

    async def remove(self, classroom_id):
        self.documents.pop(classroom_id, None)

    async def append_to_sequence(self, classroom_id, field, item):
        self.documents[classroom_id][field].append(copy.deepcopy(item))

    async def update_matching_in_sequence(self, classroom_id, field, match_id, fields):
        matched = 0
        for element in self.documents.get(classroom_id, {}).get(field, []):
            if element["id"] == match_id:
                element.update(fields)
                matched += 1
        return matched

    async def remove_matching_from_sequence(self, classroom_id, field, match_id):
        document = self.documents.get(classroom_id)
        if document is None:
            return 0
        before = len(document[field])
        document[field] = [e for e in document[field] if e["id"] != match_id]
        return before - len(document[field])


# ─── Service fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def memory_store():
    return InMemoryClassroomStore()


@pytest.fixture
def service(memory_store):
    return ClassroomService(memory_store)


@pytest.fixture
def owner():
    return User(id=1, role=UserRole.USER)


@pytest.fixture
def stranger():
    return User(id=2, role=UserRole.USER)


@pytest.fixture
def admin():
    return User(id=99, role=UserRole.ADMIN)


# ─── Database fixtures ───────────────────────────────────────────────────────

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Create a persisted user and return (user, Authorization headers)."""
    async def _make_user(email, role=UserRole.USER):
        async with session_factory() as session:
            user = await create_user(session, name=email.split("@")[0], email=email, password="password123", role=role)
            await session.commit()
        token = create_access_token(user.id, user.role.value)
        return user, {"Authorization": f"Bearer {token}"}
    return _make_user
