"""
Shared test fixtures — SQLite test database, test client, sample records.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Point the app at the test database before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from quotedesk.database import Base, get_db
from quotedesk.main import app


TEST_DATABASE_URL = "sqlite:///./test.db"
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
def customer_id(client):
    """Create a customer and return its id."""
    response = client.post("/api/customers/", json={
        "name": "Dana Whitfield",
        "company": "Whitfield Homes",
        "email": "dana@whitfieldhomes.com",
    })
    assert response.status_code == 200
    return response.json()["id"]


@pytest.fixture
def category_id(client):
    """Create the Lumber product category and return its id."""
    response = client.post("/api/product-categories/", json={
        "name": "Lumber",
        "description": "Boards, posts, framing",
    })
    assert response.status_code == 200
    return response.json()["id"]


@pytest.fixture
def product_id(client, category_id):
    """Catalog product priced at a half cent (25.505) to exercise line rounding."""
    response = client.post("/api/products/", json={
        "name": "Cedar fence board 6ft",
        "category_id": category_id,
        "unit_price": 25.505,
        "unit": "ea",
        "sku": "CED-6",
    })
    assert response.status_code == 200
    return response.json()["id"]
