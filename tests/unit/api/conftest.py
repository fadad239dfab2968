"""
Router test fixtures: the real application on an in-memory database.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from resourcehub.api.dependencies import get_db
from resourcehub.api.main import app


@pytest.fixture
def client(db_engine):
    SessionLocal = sessionmaker(bind=db_engine, expire_on_commit=False)

    def override_get_db():
        session = SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def people(client):
    """One department, two employees and two projects created through the API."""
    department = client.post("/api/v1/departments/", json={"name": "Engineering"}).json()
    alice = client.post("/api/v1/employees/", json={
        "first_name": "Alice",
        "last_name": "Smith",
        "email": "alice@example.com",
        "department_id": department["id"],
    }).json()
    bob = client.post("/api/v1/employees/", json={
        "first_name": "Bob",
        "last_name": "Jones",
        "email": "bob@example.com",
        "weekly_capacity": 20,
    }).json()
    apollo = client.post("/api/v1/projects/", json={"name": "Apollo"}).json()
    gemini = client.post("/api/v1/projects/", json={"name": "Gemini"}).json()
    return {
        "department": department,
        "alice": alice,
        "bob": bob,
        "apollo": apollo,
        "gemini": gemini,
    }
