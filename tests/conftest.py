"""
Shared test fixtures — in-memory SQLite database, a fresh store per test,
and a test client wired to that store.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Point the app at a throwaway database before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ESTIMATE_STORAGE_KEY"] = "test-estimate"

from estimator.database import Base
from estimator.main import app
from estimator.persistence import EstimateRepository
from estimator.pricing_engine import PricingEngine
from estimator.routers.estimate import get_store
from estimator.store import ConfigurationStore


# One in-memory database shared across connections for the test session
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repository():
    """Persistence adapter backed by the test database."""
    return EstimateRepository(TestingSessionLocal, "test-estimate")


@pytest.fixture
def store(repository):
    """Fresh store with default rates and SQL persistence."""
    return ConfigurationStore(engine=PricingEngine(), persistence=repository)


@pytest.fixture
def client(store):
    """FastAPI test client whose requests all hit the `store` fixture."""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app_database(monkeypatch):
    """Point the app's own startup wiring at the test database."""
    monkeypatch.setattr("estimator.main.SessionLocal", TestingSessionLocal)
    return TestingSessionLocal
