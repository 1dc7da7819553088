import os

os.environ["APP_ENV"] = "test"

import pytest
from fastapi.testclient import TestClient

from atsboost.libs import database as database_module
from atsboost.libs.analysis_cache import get_analysis_cache
from atsboost.libs.database import MemoryDatabase
from atsboost.main import app


SAMPLE_CV = """Thandi Nkosi
Johannesburg, Gauteng | thandi@example.com

PROFILE
Project manager with leadership and communication strengths. B-BBEE level 1 contributor.

SKILLS
Python, SQL, Excel, teamwork, problem solving, stakeholder management, budgeting, reporting

EDUCATION
BCom Honours, NQF level 8, University of Johannesburg
"""


@pytest.fixture
def db(monkeypatch):
    database = MemoryDatabase()
    monkeypatch.setattr(database_module, "_database", database)
    get_analysis_cache().clear()
    return database


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


def signup(client, username="thandi", email="thandi@example.com", password="s3cret-pass"):
    response = client.post(
        "/api/auth/signup",
        json={"username": username, "email": email, "password": password, "name": "Thandi"},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def user_auth(client):
    body = signup(client)
    return {"user": body["user"], "headers": {"Authorization": f"Bearer {body['token']}"}}


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/admin/login",
        json={"email": "admin@example.com", "password": "admin-test-password"},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def upload_text_cv(client, headers=None, content=SAMPLE_CV, **form):
    response = client.post(
        "/api/upload",
        files={"file": ("cv.txt", content.encode("utf-8"), "text/plain")},
        data=form,
        headers=headers or {},
    )
    assert response.status_code == 201, response.text
    return response.json()["cv"]
