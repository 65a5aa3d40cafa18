"""
Shared test fixtures — SQLite test database, test client, store and catalogue helpers.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set DATABASE_URL before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test_gypquote.db"

from gypquote.catalog import AdditionalOption, Catalog, MaterialOption, ThicknessTier
from gypquote.database import Base, get_db
from gypquote.main import app
from gypquote.storage import RecordStore


TEST_DATABASE_URL = "sqlite:///./test_gypquote.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return RecordStore(db)


@pytest.fixture
def flat_catalog():
    """Synthetic price list with round numbers."""
    return Catalog(
        materials=(
            MaterialOption(name="Board A", rate=100),
            MaterialOption(name="Board B", rate=50, show_thickness=True),
        ),
        thicknesses=(
            ThicknessTier(mm=9, extra_rate=0),
            ThicknessTier(mm=15, extra_rate=10),
        ),
        additionals=(
            AdditionalOption(key="edging", label="Edging", rate=2),
        ),
    )
