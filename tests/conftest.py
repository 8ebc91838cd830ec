"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the database, sessions and the
sample member/team data used across the test suite.
"""

import os

import pytest
import pytest_asyncio

# Set required environment variables for testing before importing package modules
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_USER", "test-user")
os.environ.setdefault("DB_PASSWORD", "test-password")


@pytest_asyncio.fixture
async def sqlite_engine(monkeypatch):
    """
    Provides a fresh in-memory SQLite engine with all tables created.

    The engine and session factory in member_search.storage.db are
    replaced for the duration of the test, so read_session() and the
    search facade run against this database.

    Yields:
        AsyncEngine: Engine bound to the in-memory database
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from sqlmodel import SQLModel
    from sqlmodel.ext.asyncio.session import AsyncSession

    import member_search.models  # noqa: F401
    from member_search.storage import db
    from member_search.utils.query_monitor import enable_query_monitoring

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db.enable_sqlite_transactions(engine.sync_engine)
    enable_query_monitoring(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(
        db,
        "async_session",
        sessionmaker(engine, expire_on_commit=False, class_=AsyncSession),
    )

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(sqlite_engine):
    """
    Provides a read-write session on the test database.

    Yields:
        AsyncSession: Session bound to the in-memory database
    """
    from member_search.storage import db

    async with db.async_session() as session:
        yield session


@pytest_asyncio.fixture
async def sample_members(sqlite_engine):
    """
    Seeds teamA/teamB with member1..member4.

    member1/10/teamA, member2/20/teamA, member3/30/teamB, member4/40/teamB

    Returns:
        dict: Created teams keyed by name
    """
    return await seed_members(
        [
            ("member1", 10, "teamA"),
            ("member2", 20, "teamA"),
            ("member3", 30, "teamB"),
            ("member4", 40, "teamB"),
        ]
    )


@pytest.fixture
def mock_db_session():
    """
    Provides a mock database session for testing.

    Returns:
        AsyncMock: Mock AsyncSession instance
    """
    from unittest.mock import AsyncMock, MagicMock

    from sqlmodel.ext.asyncio.session import AsyncSession

    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.exec = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.get = AsyncMock()
    session.delete = AsyncMock()
    return session


# Fixture Factories
async def seed_members(rows):
    """
    Insert members (and their teams) in the given order and commit.

    Args:
        rows: Iterable of (username, age, team_name) tuples; team_name
            may be None for a member without a team.

    Returns:
        dict: Created teams keyed by name
    """
    from member_search.models.member import Member
    from member_search.models.team import Team
    from member_search.storage import db

    teams = {}
    async with db.async_session() as session:
        for username, age, team_name in rows:
            if team_name is not None and team_name not in teams:
                team = Team(name=team_name)
                session.add(team)
                await session.flush()
                teams[team_name] = team

            team = teams.get(team_name)
            session.add(
                Member(
                    username=username,
                    age=age,
                    team_id=team.id if team else None,
                )
            )
            await session.flush()
        await session.commit()
    return teams


def create_member_team_dto_fixture(
    member_id: int = 1,
    username: str | None = "member1",
    age: int = 10,
    team_id: int | None = 1,
    team_name: str | None = "teamA",
):
    """
    Factory function to create MemberTeamDto instances for testing.

    Returns:
        MemberTeamDto: Projection instance
    """
    from member_search.schemas.member_team import MemberTeamDto

    return MemberTeamDto(
        member_id=member_id,
        username=username,
        age=age,
        team_id=team_id,
        team_name=team_name,
    )


@pytest.fixture
def member_seeder(sqlite_engine):
    """
    Provides seed_members() bound to the test database.

    Returns:
        Callable: Async function inserting (username, age, team_name) rows
    """
    return seed_members
