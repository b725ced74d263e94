import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./kingdom_access_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-kingdom-access")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from kingdom_access.database import get_db
from kingdom_access.models.base import Base
from kingdom_access.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from kingdom_access.models.role import Role
from kingdom_access.models.tenant import Tenant, TenantStatus
from kingdom_access.models.user import User
from kingdom_access.models.session_record import SessionRecord  # noqa: F401
from kingdom_access.models.effective_identity import EffectiveIdentity
# Import FastAPI app AFTER model imports
from kingdom_access.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: str = "auth-participant", expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: Principal id to embed in 'sub' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(user: User) -> dict:
    """Authorization headers for a user fixture"""
    return {"Authorization": f"Bearer {create_test_token(user.auth_user_id)}"}


def make_user(db, user_id: str, role: Role, tenant_id: str | None, **kwargs) -> User:
    user = User(
        id=user_id,
        auth_user_id=f"auth-{user_id}",
        email=f"{user_id}@example.org",
        display_name=user_id.replace("-", " ").title(),
        role=role,
        tenant_id=tenant_id,
        **kwargs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def identity_for(user: User) -> EffectiveIdentity:
    """Effective identity of a user with no view-as context"""
    return EffectiveIdentity(
        user_id=user.id,
        role=user.role,
        tenant_id=user.tenant_id,
        real_role=user.role,
        real_tenant_id=user.tenant_id,
    )


@pytest.fixture
def church_1(db_session):
    tenant = Tenant(id="church-1", name="Grace Community Church")
    db_session.add(tenant)
    db_session.commit()
    db_session.refresh(tenant)
    return tenant


@pytest.fixture
def church_7(db_session):
    tenant = Tenant(id="church-7", name="Hope Fellowship")
    db_session.add(tenant)
    db_session.commit()
    db_session.refresh(tenant)
    return tenant


@pytest.fixture
def inactive_church(db_session):
    tenant = Tenant(id="church-9", name="Closed Chapel", status=TenantStatus.INACTIVE)
    db_session.add(tenant)
    db_session.commit()
    db_session.refresh(tenant)
    return tenant


@pytest.fixture
def super_admin(db_session):
    return make_user(db_session, "super-admin", Role.SUPER_ADMIN, None)


@pytest.fixture
def owner(db_session, church_1):
    return make_user(db_session, "owner", Role.ORG_OWNER, church_1.id)


@pytest.fixture
def org_admin(db_session, church_1):
    return make_user(db_session, "org-admin", Role.ORG_ADMIN, church_1.id)


@pytest.fixture
def leader(db_session, church_1):
    return make_user(db_session, "leader", Role.ORG_LEADER, church_1.id)


@pytest.fixture
def participant(db_session, church_1):
    return make_user(db_session, "participant", Role.PARTICIPANT, church_1.id)


@pytest.fixture
def other_admin(db_session, church_7):
    return make_user(db_session, "other-admin", Role.ORG_ADMIN, church_7.id)


@pytest.fixture
def other_participant(db_session, church_7):
    return make_user(db_session, "other-participant", Role.PARTICIPANT, church_7.id)


@pytest.fixture
def super_admin_headers(super_admin):
    return headers_for(super_admin)


@pytest.fixture
def owner_headers(owner):
    return headers_for(owner)


@pytest.fixture
def admin_headers(org_admin):
    return headers_for(org_admin)


@pytest.fixture
def leader_headers(leader):
    return headers_for(leader)


@pytest.fixture
def participant_headers(participant):
    return headers_for(participant)
