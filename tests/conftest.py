"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- SQLite in-memory database for testing
- TestClient setup
- One user per role, a region with two areas and a few members
- Dependency overrides for database session
"""

import os
import tempfile
import uuid
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Set testing environment before importing app modules
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-min-32-chars"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Disable rate limiting in tests
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="flock-uploads-")

from app.db.base import Base
from app.db.session import get_db
from app.models.area import Area
from app.models.member import Member
from app.models.region import Region
from app.models.role_enum import Role
from app.models.user import User
from app.services.auth_service import AuthService
from app.main import app as main_app

TEST_PASSWORD = "Password123!"


# =====================================
# Database Configuration
# =====================================

# StaticPool keeps the same connection so the in-memory database survives
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =====================================
# Database Fixtures
# =====================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Creates all tables before each test and drops them after.

    Yields:
        SQLAlchemy Session object
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a TestClient with database dependency override.

    Yields:
        TestClient instance
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    main_app.dependency_overrides[get_db] = override_get_db

    with TestClient(main_app) as test_client:
        yield test_client

    main_app.dependency_overrides.clear()


# =====================================
# Factories
# =====================================

def create_user(
    db: Session,
    role: Role,
    email: str,
    area: Area | None = None,
    first_name: str = "Test",
    last_name: str = "User",
    is_active: bool = True,
) -> User:
    user = User(
        id=uuid.uuid4(),
        email=email,
        hashed_password=AuthService.hash_password(TEST_PASSWORD),
        first_name=first_name,
        last_name=last_name,
        role=role.value,
        area_id=area.id if area else None,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_member(
    db: Session,
    leader: User,
    area: Area,
    first_name: str = "John",
    last_name: str = "Doe",
    phone: str = "+237600000000",
) -> Member:
    member = Member(
        first_name=first_name,
        last_name=last_name,
        phone_primary=phone,
        gender="M",
        leader_id=leader.id,
        area_id=area.id,
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def headers_for(user: User) -> dict:
    """Authorization header carrying a fresh token for `user`."""
    return {"Authorization": f"Bearer {AuthService.create_access_token(user)}"}


# =====================================
# Church Structure Fixtures
# =====================================

@pytest.fixture
def governor(db_session: Session) -> User:
    return create_user(db_session, Role.GOVERNOR, "governor@example.com", first_name="Grace")


@pytest.fixture
def region(db_session: Session, governor: User) -> Region:
    """Region governed by the `governor` fixture."""
    region = Region(name="Centre", governor_id=governor.id)
    db_session.add(region)
    db_session.commit()
    db_session.refresh(region)
    return region


@pytest.fixture
def area(db_session: Session, region: Region) -> Area:
    """Area 1, inside the governor's region."""
    area = Area(name="Area One", number=1, region_id=region.id)
    db_session.add(area)
    db_session.commit()
    db_session.refresh(area)
    return area


@pytest.fixture
def second_area(db_session: Session) -> Area:
    """Area 2, outside any region."""
    area = Area(name="Area Two", number=2)
    db_session.add(area)
    db_session.commit()
    db_session.refresh(area)
    return area


# =====================================
# User Fixtures
# =====================================

@pytest.fixture
def bishop(db_session: Session) -> User:
    return create_user(db_session, Role.BISHOP, "bishop@example.com", first_name="Bishop")


@pytest.fixture
def overseer(db_session: Session, area: Area) -> User:
    return create_user(db_session, Role.ASSISTING_OVERSEER, "overseer@example.com", area=area)


@pytest.fixture
def area_pastor(db_session: Session, area: Area) -> User:
    return create_user(db_session, Role.AREA_PASTOR, "pastor@example.com", area=area)


@pytest.fixture
def data_clerk(db_session: Session) -> User:
    return create_user(db_session, Role.DATA_CLERK, "clerk@example.com")


@pytest.fixture
def leader(db_session: Session, area: Area) -> User:
    """Bacenta leader in area 1."""
    return create_user(
        db_session, Role.BACENTA_LEADER, "leader@example.com",
        area=area, first_name="Lydia", last_name="Leader",
    )


@pytest.fixture
def other_leader(db_session: Session, second_area: Area) -> User:
    """Bacenta leader in area 2."""
    return create_user(
        db_session, Role.BACENTA_LEADER, "other.leader@example.com",
        area=second_area, first_name="Oscar", last_name="Leader",
    )


@pytest.fixture
def inactive_user(db_session: Session, area: Area) -> User:
    return create_user(
        db_session, Role.BACENTA_LEADER, "inactive@example.com", area=area, is_active=False,
    )


# =====================================
# Member Fixtures
# =====================================

@pytest.fixture
def member(db_session: Session, leader: User, area: Area) -> Member:
    """Member of area 1 led by `leader`."""
    return create_member(db_session, leader, area)


@pytest.fixture
def other_member(db_session: Session, other_leader: User, second_area: Area) -> Member:
    """Member of area 2 led by `other_leader`."""
    return create_member(
        db_session, other_leader, second_area,
        first_name="Jane", last_name="Roe", phone="+237611111111",
    )


# =====================================
# Auth Header Fixtures
# =====================================

@pytest.fixture
def bishop_headers(bishop: User) -> dict:
    return headers_for(bishop)


@pytest.fixture
def overseer_headers(overseer: User) -> dict:
    return headers_for(overseer)


@pytest.fixture
def governor_headers(governor: User) -> dict:
    return headers_for(governor)


@pytest.fixture
def pastor_headers(area_pastor: User) -> dict:
    return headers_for(area_pastor)


@pytest.fixture
def clerk_headers(data_clerk: User) -> dict:
    return headers_for(data_clerk)


@pytest.fixture
def leader_headers(leader: User) -> dict:
    return headers_for(leader)


@pytest.fixture
def other_leader_headers(other_leader: User) -> dict:
    return headers_for(other_leader)
