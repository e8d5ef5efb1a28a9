"""
Test configuration and fixtures
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from livestock_service.app import app
from livestock_service.database import get_db
from livestock_service.models import Base
from livestock_service.repositories.sqlalchemy_repository import (
    SqlAlchemyLivestockRepository,
)
from livestock_service.services.livestock_service import LivestockService

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repository(db_session):
    """Repository bound to the test session"""
    return SqlAlchemyLivestockRepository(db_session)


@pytest.fixture
def service(repository):
    """Service over the real repository, without retries"""
    return LivestockService(repository, retry_attempts=1)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Mock init_db to prevent creating the development database file
    with patch("livestock_service.app.init_db"):
        app.dependency_overrides[get_db] = override_get_db
        with TestClient(app) as test_client:
            yield test_client
        app.dependency_overrides.clear()


@pytest.fixture
def sample_livestock_data():
    """Complete livestock payload"""
    return {
        "name": "Daisy",
        "type": "cow",
        "tag_number": "UK-0001",
        "breed": "Holstein",
        "sex": "female",
        "birth_date": "2021-04-12",
        "weight_kg": "612.50",
        "status": "active",
        "notes": "Calm temperament",
    }
