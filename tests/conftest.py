"""Pytest configuration for KaamLink backend tests."""

import os
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CUSTOM_DATABASE_URL", "sqlite:///:memory:")

# Configure Hypothesis before importing test modules
from tests.property_based.config import PropertyTestConfig
PropertyTestConfig.configure_hypothesis()

from kaamlink_backend.core.base import Base
from kaamlink_backend.models.application import Application, ApplicationStatus
from kaamlink_backend.models.job import Job
from kaamlink_backend.models.profile import Profile, ProfileRole

T0 = datetime(2026, 3, 2, 9, 0, 0)


class FakeClock:
    """Settable clock injected into services."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across connections."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import kaamlink_backend.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Create a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


def make_profile(db, role: ProfileRole, name: str = None, **overrides) -> Profile:
    profile = Profile(
        user_id=uuid4(),
        name=name or f"{role.value}-{uuid4().hex[:6]}",
        phone=overrides.pop("phone", "9876543210"),
        role=role.value,
        **overrides
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def make_job(db, contractor: Profile, title: str = "Brick laying", created_at: datetime = None) -> Job:
    job = Job(
        id=uuid4(),
        contractor_id=contractor.user_id,
        title=title,
        location="Pune",
        wage=Decimal("600"),
    )
    if created_at is not None:
        job.created_at = created_at
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def make_application(
    db,
    worker: Profile,
    job: Job,
    status: ApplicationStatus = ApplicationStatus.ACCEPTED
) -> Application:
    application = Application(
        id=uuid4(),
        worker_id=worker.user_id,
        contractor_id=job.contractor_id,
        job_id=job.id,
        status=status.value,
        offered_wage=Decimal("500"),
        contractor_wage=Decimal("650"),
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


@pytest.fixture
def marketplace(db_session):
    """Contractor C, worker W, job J and W's accepted application to J."""
    contractor = make_profile(db_session, ProfileRole.CONTRACTOR, name="C")
    worker = make_profile(db_session, ProfileRole.WORKER, name="W", skill="mason")
    job = make_job(db_session, contractor)
    application = make_application(db_session, worker, job)
    return SimpleNamespace(
        contractor=contractor,
        worker=worker,
        job=job,
        application=application,
    )


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "property_test: mark test as a property-based test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "property_based" in str(item.fspath):
            item.add_marker(pytest.mark.property_test)
        if "api" in item.fspath.basename:
            item.add_marker(pytest.mark.integration)
