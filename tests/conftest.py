"""Pytest fixtures for the API tests.

The application database is replaced by an in-memory mongomock database and
settings by a fixed test configuration, so tests never touch a real MongoDB.
"""

from datetime import date, timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings, get_settings
from database import get_db
from main import app

TEST_SETTINGS = Settings(jwt_secret="test-jwt-secret-for-testing-only", jwt_expires_seconds=3600)


def leaving_date(days_from_today: int = 7) -> str:
    """A MM/DD/YYYY string relative to today."""
    return (date.today() + timedelta(days=days_from_today)).strftime("%m/%d/%Y")


def auth_headers(token: str) -> dict:
    return {"x-auth-token": token}


def register(client: TestClient, name: str, email: str, phone: str = "5551234567", password: str = "secret123") -> dict:
    """Register a user and return {"token", "id", "headers"}."""
    response = client.post(
        "/api/users",
        json={"name": name, "email": email, "phone": phone, "password": password},
    )
    assert response.status_code == 200, response.text
    token = response.json()["token"]
    me = client.get("/api/auth", headers=auth_headers(token)).json()
    return {"token": token, "id": me["id"], "headers": auth_headers(token), "name": name}


def make_profile(client: TestClient, account: dict, **fields) -> dict:
    body = {"grade": "12", "type": "skier", "exp": "advanced", "skills": ["navigation", "first aid"]}
    body.update(fields)
    response = client.post("/api/profile", json=body, headers=account["headers"])
    assert response.status_code == 200, response.text
    return response.json()


def drive_body(**overrides) -> dict:
    body = {
        "leavingDate": leaving_date(7),
        "leavingTime": "7:30 AM",
        "hike": "Mount Tam",
        "seats": 2,
        "description": "Carpool to the trailhead",
    }
    body.update(overrides)
    return body


@pytest.fixture
def db():
    return mongomock.MongoClient()["carpool_test"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def driver(client):
    account = register(client, "Dana Driver", "dana@example.com")
    make_profile(client, account)
    return account


@pytest.fixture
def rider(client):
    account = register(client, "Riley Rider", "riley@example.com", phone="555-987-6543")
    make_profile(client, account, grade="11", type="hiker", exp="beginner", skills="maps, snacks")
    return account


@pytest.fixture
def drive(client, driver):
    response = client.post("/api/drives", json=drive_body(), headers=driver["headers"])
    assert response.status_code == 200, response.text
    return response.json()
