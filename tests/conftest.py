"""
Pytest configuration and fixtures for the pharmacy backend tests.
"""
import os
from decimal import Decimal

import pytest

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-only"
os.environ["BUSINESS_TIMEZONE"] = "Asia/Karachi"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from pharmacy.database import get_db, init_db  # noqa: E402
from pharmacy.main import app  # noqa: E402
from pharmacy.models.medicine import Medicine  # noqa: E402
from pharmacy.schemas.user import SignupRequest  # noqa: E402
from pharmacy.services import auth_service  # noqa: E402


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_medicine(db):
    """Insert a medicine row and return it."""

    def _make(name="Panadol", clinic="Clinic1", quantity=100, purchase_price="5", **kwargs) -> Medicine:
        medicine = Medicine(
            name=name,
            clinic=clinic,
            quantity=quantity,
            purchase_price=Decimal(purchase_price),
            **kwargs,
        )
        db.add(medicine)
        db.commit()
        db.refresh(medicine)
        return medicine

    return _make


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_user(db, email, role, clinic=None, name=None):
    return auth_service.create_user(
        db,
        SignupRequest(name=name or email.split("@")[0].title(), email=email, password="secret123", role=role, clinic=clinic),
    )


@pytest.fixture
def admin_user(db):
    return _create_user(db, "admin@test.local", "admin", name="Admin")


@pytest.fixture
def worker_user(db):
    return _create_user(db, "alice@test.local", "worker", clinic="Clinic1", name="Alice")


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {auth_service.create_access_token(admin_user)}"}


@pytest.fixture
def worker_headers(worker_user):
    return {"Authorization": f"Bearer {auth_service.create_access_token(worker_user)}"}
