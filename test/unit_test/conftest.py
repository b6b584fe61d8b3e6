"""Database fixtures and entity factories shared by the unit tests."""

from typing import AsyncGenerator, List, Optional, Tuple

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from diligence_labs.core.database import create_all, create_engine, create_sessionmaker, utc_now
from diligence_labs.core.database.entities.admins import AdminUser
from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.projects import Project
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.security import create_access_token, create_admin_token, hash_password

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

STRONG_PASSWORD = "Tr1cky!Horizon9"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database per test."""
    engine = create_engine(TEST_DATABASE_URL)
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async_session_maker = create_sessionmaker(test_engine)
    async with async_session_maker() as session:
        yield session


@pytest.fixture
def make_user(session: AsyncSession):
    """Factory persisting a user with a known password."""

    async def _make(
        email: str = "client@example.com",
        name: str = "Test Client",
        password: str = STRONG_PASSWORD,
        **fields,
    ) -> User:
        user = User(name=name, email=email, password_hash=hash_password(password), **fields)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_admin(session: AsyncSession):
    async def _make(
        email: str = "admin@example.com",
        role: str = "ADMIN",
        password: str = STRONG_PASSWORD,
        is_active: bool = True,
    ) -> AdminUser:
        admin = AdminUser(
            email=email,
            name=f"{role.title()} Admin",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        session.add(admin)
        await session.commit()
        await session.refresh(admin)
        return admin

    return _make


@pytest.fixture
def make_expert(session: AsyncSession, make_user):
    """Factory persisting a user together with an expert profile."""

    async def _make(
        email: str = "expert@example.com",
        name: str = "Test Expert",
        tier: str = "BRONZE",
        verification_status: str = "VERIFIED",
        primary_expertise: Optional[List[str]] = None,
        user: Optional[User] = None,
        **fields,
    ) -> Tuple[User, ExpertProfile]:
        if user is None:
            user = await make_user(email=email, name=name)
        profile = ExpertProfile(
            user_id=user.id,
            expert_tier=tier,
            verification_status=verification_status,
            verified_at=utc_now() if verification_status == "VERIFIED" else None,
            **fields,
        )
        profile.set_primary_expertise_list(primary_expertise or ["defi"])
        profile.set_secondary_expertise_list([])
        session.add(profile)
        await session.commit()
        await session.refresh(profile)
        return user, profile

    return _make


@pytest.fixture
def make_project(session: AsyncSession):
    async def _make(
        submitter: User,
        name: str = "Test Protocol",
        status: str = "EXPERT_ASSIGNMENT",
        category: str = "DeFi",
        technology_stack: Optional[List[str]] = None,
        **fields,
    ) -> Project:
        project = Project(
            name=name,
            description="A lending protocol",
            category=category,
            submitter_id=submitter.id,
            status=status,
            **fields,
        )
        project.set_technology_stack_list(technology_stack or [])
        session.add(project)
        await session.commit()
        await session.refresh(project)
        return project

    return _make


@pytest.fixture
def user_headers():
    """Bearer headers for a client user."""

    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest.fixture
def admin_headers():
    """Bearer headers for an admin."""

    def _headers(admin: AdminUser) -> dict:
        token = create_admin_token(admin.id, admin.email, admin.name, admin.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def strong_password() -> str:
    return STRONG_PASSWORD
