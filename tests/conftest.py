import os

# Point the app at SQLite before any clinic module builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from clinic.database import get_db
from clinic.models.all_models import Base, User, Profile, UserRole
from clinic.utils.auth import hash_password, issue_tokens

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"


def make_staff(session, email, role, full_name, is_active=True, specialization=None):
    """Create a User + Profile pair and return ids and bearer headers for it."""
    user = User(email=email, password=hash_password(PASSWORD), is_active=True)
    user.profile = Profile(
        email=email,
        full_name=full_name,
        role=role,
        is_active=is_active,
        specialization=specialization,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    tokens = issue_tokens(user)
    return SimpleNamespace(
        user_id=user.id,
        profile_id=user.profile.id,
        email=email,
        headers={"Authorization": f"Bearer {tokens['access_token']}"},
        refresh_token=tokens["refresh_token"],
    )


@pytest.fixture()
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def admin(db_session):
    return make_staff(db_session, "admin@clinic.rs", UserRole.ADMIN, "Ana Admin")


@pytest.fixture()
def doctor(db_session):
    return make_staff(
        db_session, "doctor@clinic.rs", UserRole.DOCTOR, "Dr Petar Jovanovic",
        specialization="Cardiology",
    )


@pytest.fixture()
def receptionist(db_session):
    return make_staff(db_session, "desk@clinic.rs", UserRole.RECEPTIONIST, "Mila Desk")
