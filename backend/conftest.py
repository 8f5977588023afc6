"""
Pytest configuration file for backend testing.
"""
import os
import sys
import tempfile
from pathlib import Path

# Tests run against an in-memory database and never touch the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOADS_DIR", os.path.join(tempfile.gettempdir(), "sportevents-uploads"))
os.environ.setdefault("ENVIRONMENT", "test")

# Add the backend directory to Python path so imports work correctly
backend_dir = Path(__file__).parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest
from fastapi.testclient import TestClient

from core.auth import create_access_token, token_claims_for
from core.clock import FixedClock, get_clock, utcnow
from core.config import settings
from core.database import Base, engine, SessionLocal, get_db

# Import all models to register them with SQLAlchemy
from modules.auth.models import User, RefreshToken  # noqa: F401
from modules.reference.models import Sport, SportGoal, EventStyle, Facility, Salon  # noqa: F401
from modules.profiles.models import ParticipantProfile, CoachProfile  # noqa: F401
from modules.events.models import Event, EventInvite  # noqa: F401
from modules.reservations.models import Reservation, ReservationAuditLog  # noqa: F401

from tests.factories import BaseFactory

CSRF_TOKEN = "test-csrf-token"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    BaseFactory.bind_session(db)
    try:
        yield db
    finally:
        BaseFactory.reset_session()
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fixed_clock():
    """A clock frozen at the start of the test; advance it explicitly."""
    return FixedClock(utcnow().replace(microsecond=0))


@pytest.fixture(scope="function")
def client(db_session, fixed_clock):
    """Test client with database and clock overrides and a valid CSRF pair."""
    from app.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock

    with TestClient(app) as test_client:
        test_client.cookies.set(settings.csrf_cookie_name, CSRF_TOKEN)
        test_client.headers[settings.csrf_header_name] = CSRF_TOKEN
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user row."""

    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(token_claims_for(user))}"}

    return _headers
