# tests/conftest.py — Shared test fixtures
import os
from typing import List, Tuple

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Use SQLite for tests
TEST_DB_URL = "sqlite+aiosqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-unit-tests-only-min-32-chars"
os.environ["ENVIRONMENT"] = "test"

from models import (
    Base, Board, Company, Project, ProjectMember, ProjectRole, User, UserRole,
)
from auth import AuthService
from board_registry import create_default_boards, project_boards
from card_store import board_cards
from database import get_db_session
from main import app


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory):
    """HTTP test client with overridden DB dependency"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ============================================================
# TENANTS & USERS
# ============================================================

async def _make_user(db, company, email, name, role=UserRole.STAFF, password=None) -> User:
    user = User(
        email=email,
        name=name,
        password_hash=AuthService.hash_password(password) if password else None,
        company_id=company.id,
        role=role,
        is_active=True,
        soft_delete=False,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def company(db_session):
    company = Company(name="Acme Plumbing")
    db_session.add(company)
    await db_session.commit()
    await db_session.refresh(company)
    return company


@pytest_asyncio.fixture
async def other_company(db_session):
    company = Company(name="Rival Roofing")
    db_session.add(company)
    await db_session.commit()
    await db_session.refresh(company)
    return company


@pytest_asyncio.fixture
async def company_admin(db_session, company):
    """Company-level admin, not a member of any project"""
    return await _make_user(db_session, company, "owner@acmeplumbing.com", "Olive Owner", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def project_admin(db_session, company):
    return await _make_user(db_session, company, "lead@acmeplumbing.com", "Lee Lead", password="LeadPassword123!")


@pytest_asyncio.fixture
async def member_user(db_session, company):
    return await _make_user(db_session, company, "tech@acmeplumbing.com", "Tam Tech")


@pytest_asyncio.fixture
async def viewer_user(db_session, company):
    return await _make_user(db_session, company, "books@acmeplumbing.com", "Bo Books", role=UserRole.ACCOUNTANT)


@pytest_asyncio.fixture
async def outsider(db_session, company):
    """Same company, no membership in the project"""
    return await _make_user(db_session, company, "temp@acmeplumbing.com", "Tia Temp")


@pytest_asyncio.fixture
async def foreign_user(db_session, other_company):
    return await _make_user(db_session, other_company, "spy@rivalroofing.com", "Rex Rival", role=UserRole.ADMIN)


# ============================================================
# PROJECT WITH DEFAULT BOARDS
# ============================================================

@pytest_asyncio.fixture
async def project(db_session, company, project_admin, member_user, viewer_user):
    """Project with an admin, a member, a viewer and the default To Do / In Progress / Done boards"""
    project = Project(company_id=company.id, title="Kitchen refit", soft_delete=False)
    db_session.add(project)
    await db_session.flush()
    db_session.add_all([
        ProjectMember(project_id=project.id, user_id=project_admin.id, role=ProjectRole.ADMIN),
        ProjectMember(project_id=project.id, user_id=member_user.id, role=ProjectRole.MEMBER),
        ProjectMember(project_id=project.id, user_id=viewer_user.id, role=ProjectRole.VIEWER),
    ])
    create_default_boards(db_session, project)
    await db_session.commit()
    await db_session.refresh(project)
    return project


@pytest_asyncio.fixture
async def boards(db_session, project) -> List[Board]:
    """[To Do, In Progress, Done]"""
    return await project_boards(db_session, project.id)


def get_auth_headers(user: User) -> dict:
    """Generate auth headers for a user"""
    token = AuthService.create_token_for(user)
    return {"Authorization": f"Bearer {token}"}


async def card_positions(db, board_id: int) -> List[Tuple[int, int]]:
    """[(card_id, position), ...] of a board's live cards, read fresh from the database"""
    return [(c.id, c.position) for c in await board_cards(db, board_id)]
