"""
Crisis Reporting API - Test Configuration and Fixtures

Every test gets its own SQLite file so that the aggregation worker threads
each open a real connection to the same data.
"""
import os
import sys
import tempfile
import threading
import time
from datetime import datetime
from unittest.mock import patch
from uuid import uuid4

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set testing environment before the app reads its configuration
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="crisis-uploads-"))
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-for-testing"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from crisis_api.main import app
from crisis_api.database import Base, get_db, get_session_factory
from crisis_api.auth import ROLE_ADMIN, ROLE_USER, create_access_token, hash_password
from crisis_api.models import (
    AccountStatus, AdminDB, AgeGroup, County, CrisisCallDB, CrisisStabilizationDB,
    CrisisType, MilitaryServiceStatus, MobileCrisisDB, MobileCrisisOutcome,
    MobileCrisisReferralSource, PrimaryInsurance, StabilizationOutcome,
    StabilizationReferralSource, UserDB, VeteranStatus,
)
from crisis_api.services.aggregation import AggregationEngine


@pytest.fixture
def session_factory(tmp_path):
    """Fresh database file with all tables, and a session factory bound to it."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """Test client with the app's database swapped for the test database."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    yield TestClient(app)

    app.dependency_overrides.clear()


# =============================================================================
# RECORD FACTORIES
# =============================================================================

@pytest.fixture
def make_user(db):
    def _make(email=None, name="Field Worker", password="password123",
              status=AccountStatus.ACTIVE, verified=True, created_at=None):
        user = UserDB(
            id=str(uuid4()),
            name=name,
            email=email or f"{uuid4().hex[:8]}@example.org",
            password_hash=hash_password(password) if password else None,
            status=status,
            is_otp_verified=verified,
        )
        if created_at is not None:
            user.created_at = created_at
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_admin(db):
    def _make(email="admin@example.org", name="Site Admin", password="adminpass"):
        admin = AdminDB(
            id=str(uuid4()),
            name=name,
            email=email,
            password_hash=hash_password(password),
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin
    return _make


@pytest.fixture
def make_crisis_call(db):
    def _make(county=County.MARION, crisis_type=CrisisType.SUICIDE_RISK,
              created_at=datetime(2025, 10, 10, 9, 0), user_id=None):
        record = CrisisCallDB(
            id=str(uuid4()),
            user_id=user_id,
            call_by_county=county,
            crisis_type=crisis_type,
            created_at=created_at,
        )
        db.add(record)
        db.commit()
        return record
    return _make


@pytest.fixture
def make_mobile_crisis(db):
    def _make(created_at=datetime(2025, 10, 10, 9, 0), user_id=None, **fields):
        values = dict(
            referral_source=MobileCrisisReferralSource.EMS,
            total_dispatches=1,
            dispatch_county=County.MARION,
            crisis_type=CrisisType.ADULT_MENTAL_HEALTH,
            outcome=MobileCrisisOutcome.STABILIZED_IN_COMMUNITY,
            total_response_time=30,
            mean_response_time=30,
            total_on_scene_time=60,
            mean_on_scene_time=60,
            referrals_given=0,
            referral_type=None,
            naloxone_dispensations=0,
            follow_up_contacts=0,
            individuals_served=1,
            primary_insurance=PrimaryInsurance.MEDICAID,
            age_group=AgeGroup.AGE_25_44,
            veteran_status=VeteranStatus.NO,
            serving_in_military=MilitaryServiceStatus.NO,
        )
        values.update(fields)
        record = MobileCrisisDB(id=str(uuid4()), user_id=user_id, created_at=created_at, **values)
        db.add(record)
        db.commit()
        return record
    return _make


@pytest.fixture
def make_stabilization(db):
    def _make(created_at=datetime(2025, 10, 10, 9, 0), user_id=None, **fields):
        values = dict(
            referrals_to_crisis_stabilization=StabilizationReferralSource.MOBILE_CRISIS_TEAM,
            number_of_visits=1,
            crisis_types=CrisisType.SUBSTANCE_USE,
            outcome=StabilizationOutcome.STABILIZED_IN_COMMUNITY,
            total_stabilization_time=120,
            mean_stabilization_time=120,
            referrals_given=0,
            referrals_by_type=None,
            naloxone_dispensations=0,
            follow_up_contacts=0,
            individuals_served=1,
            client_county_of_residence=County.MARION,
            client_primary_insurance=PrimaryInsurance.MEDICAID,
            client_age_groups=AgeGroup.AGE_25_44,
            client_veteran_status=VeteranStatus.NO,
            client_serving_in_military=MilitaryServiceStatus.NO,
        )
        values.update(fields)
        record = CrisisStabilizationDB(id=str(uuid4()), user_id=user_id, created_at=created_at, **values)
        db.add(record)
        db.commit()
        return record
    return _make


# =============================================================================
# AUTH HEADERS
# =============================================================================

def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(make_user):
    user = make_user(email="worker@example.org")
    return bearer(create_access_token(user.id, user.email, ROLE_USER))


@pytest.fixture
def admin_headers(make_admin):
    admin = make_admin()
    return bearer(create_access_token(admin.id, admin.email, ROLE_ADMIN))


# =============================================================================
# QUERY CONCURRENCY
# =============================================================================

@pytest.fixture
def in_flight():
    """
    Record how many aggregation queries run at the same time.

    Each query is held for a few milliseconds so that overlapping queries are
    observed; yields a dict whose "peak" is the most seen at once.
    """
    original = AggregationEngine._execute
    lock = threading.Lock()
    seen = {"current": 0, "peak": 0, "total": 0}

    def tracking_execute(self, query_fn):
        with lock:
            seen["current"] += 1
            seen["total"] += 1
            seen["peak"] = max(seen["peak"], seen["current"])
        try:
            time.sleep(0.02)
            return original(self, query_fn)
        finally:
            with lock:
                seen["current"] -= 1

    with patch.object(AggregationEngine, "_execute", tracking_execute):
        yield seen
