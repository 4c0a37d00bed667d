import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="yogaschool-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP}/unused.db"
os.environ["CACHE_ENABLED"] = "false"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")

import pytest
from anyio.from_thread import start_blocking_portal
from fastapi.testclient import TestClient
from passlib.hash import pbkdf2_sha256
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from yogaschool.core.database import get_db, init_models
from yogaschool.main import app
from yogaschool.models.user import User, UserRole

SECURITY_QUESTION = "Which pose do you start with?"
SECURITY_ANSWER = "tadasana"


def build_user(name: str, role: UserRole, password: str = "secret") -> User:
    return User(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        hashed_password=pbkdf2_sha256.hash(password),
        role=role.value,
        security_question=SECURITY_QUESTION,
        hashed_security_answer=pbkdf2_sha256.hash(SECURITY_ANSWER),
    )


def _engine(tmp_path):
    # NullPool: every session opens its own connection on whichever loop is running
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}", poolclass=NullPool)


def _session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession, autoflush=False)


# Service-level fixtures

@pytest.fixture
async def db(tmp_path):
    engine = _engine(tmp_path)
    await init_models(engine)
    async with _session_factory(engine)() as session:
        yield session
    await engine.dispose()


@pytest.fixture
async def users(db):
    """admin, two teachers, two students"""
    created = {
        "admin": build_user("Asha Admin", UserRole.ADMIN),
        "teacher": build_user("Tara Teacher", UserRole.TEACHER),
        "teacher2": build_user("Tom Teacher", UserRole.TEACHER),
        "student": build_user("Sam Student", UserRole.STUDENT),
        "student2": build_user("Sia Student", UserRole.STUDENT),
    }
    db.add_all(created.values())
    await db.commit()
    return created


# API-level fixtures

@pytest.fixture
def session_factory(tmp_path):
    engine = _engine(tmp_path)
    with start_blocking_portal() as portal:
        portal.call(init_models, engine)
    yield _session_factory(engine)


@pytest.fixture
def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Insert a user with an explicit role; returns its id"""
    def _make(name: str, role: UserRole) -> str:
        async def _insert():
            async with session_factory() as session:
                user = build_user(name, role)
                session.add(user)
                await session.commit()
                return user.id

        with start_blocking_portal() as portal:
            return portal.call(_insert)
    return _make


@pytest.fixture
def api_users(make_user):
    return {
        "admin": make_user("Asha Admin", UserRole.ADMIN),
        "teacher": make_user("Tara Teacher", UserRole.TEACHER),
        "teacher2": make_user("Tom Teacher", UserRole.TEACHER),
        "student": make_user("Sam Student", UserRole.STUDENT),
        "student2": make_user("Sia Student", UserRole.STUDENT),
    }
