# tests/conftest.py
import os

# Settings are read at import time; prime the environment first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LONG_TOKEN_SECRET", "test-long-token-secret")
os.environ.setdefault("SHORT_TOKEN_SECRET", "test-short-token-secret")
os.environ.setdefault("ADMIN_SIGNUP_KEY", "test-admin-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_MAX_REQUESTS", "10000")
os.environ.setdefault("SECURITY_LIMIT_MAX_REQUESTS", "10000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from school_mgmt import create_app  # noqa: E402
from school_mgmt.core.config import settings  # noqa: E402
from school_mgmt.core.security import TokenHandler, get_password_hash  # noqa: E402
from school_mgmt.models import Base, Classroom, Personnel, School, Student, User  # noqa: E402

DEFAULT_PASSWORD = "password123"


# Make anyio run on asyncio (so our async fixtures work everywhere)
@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def app_settings():
    return settings


@pytest.fixture
async def app(session_factory, app_settings):
    app = create_app(app_settings)
    # Requests share the per-test engine instead of the app's own
    await app.state.engine.dispose()
    app.state.session_factory = session_factory
    return app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


class Seed:
    """Writes fixtures straight to the database and mints tokens for them."""

    def __init__(self, session_factory, config):
        self.session_factory = session_factory
        self.tokens = TokenHandler(config)
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def school(self, name: Optional[str] = None) -> School:
        n = self._next()
        return await self._save(School(
            name=name or f"School {n}",
            address=f"{n} Main Street",
            school_owner="Owner"
        ))

    async def user(self, role: str, school_id: Optional[int] = None, email: Optional[str] = None,
                   password: str = DEFAULT_PASSWORD) -> User:
        n = self._next()
        return await self._save(User(
            name=f"{role.title()} {n}",
            email=email or f"{role}{n}@example.com",
            password_hash=get_password_hash(password),
            role=role,
            school_id=school_id
        ))

    async def superadmin(self) -> User:
        return await self.user("superadmin")

    async def school_admin(self, school_id: int) -> User:
        return await self.user("school_admin", school_id=school_id)

    async def teacher(self, school_id: int) -> User:
        user = await self.user("teacher", school_id=school_id)
        await self._save(Personnel(
            user_id=user.id,
            school_id=school_id,
            employee_id=f"EMP-{user.id}",
            joining_date=date(2024, 1, 1)
        ))
        return user

    async def classroom(self, school_id: int, name: Optional[str] = None, capacity: int = 30,
                        created_by: int = 1) -> Classroom:
        n = self._next()
        return await self._save(Classroom(
            school_id=school_id,
            name=name or f"Room {n}",
            capacity=capacity,
            resources=[],
            created_by=created_by
        ))

    async def student(self, school_id: int, classroom_id: Optional[int] = None,
                      student_id: Optional[str] = None) -> Student:
        n = self._next()
        return await self._save(Student(
            school_id=school_id,
            classroom_id=classroom_id,
            name=f"Student {n}",
            student_id=student_id or f"STU-{n}",
            date_of_birth=date(2012, 5, 17),
            gender="female",
            parent_contact={"name": "Parent", "phone": "555-0100"},
            created_by=1
        ))

    def headers(self, user: User) -> dict:
        token = self.tokens.create_access_token(user.id, user.role, user.school_id)
        return {"token": token}


@pytest.fixture
def seed(session_factory, app_settings):
    return Seed(session_factory, app_settings)


@pytest.fixture
async def tenant(seed):
    """A school with its admin, a classroom and a teacher."""
    school = await seed.school()
    admin = await seed.school_admin(school.id)
    classroom = await seed.classroom(school.id, created_by=admin.id)
    teacher = await seed.teacher(school.id)
    return {
        "school": school,
        "admin": admin,
        "classroom": classroom,
        "teacher": teacher,
    }
