from conftest import signup


def _plan_id(client, name):
    return next(plan["id"] for plan in client.get("/api/plans").json() if plan["name"] == name)


def test_list_plans(client):
    response = client.get("/api/plans")

    assert response.status_code == 200
    plans = response.json()
    assert [plan["name"] for plan in plans] == ["Free", "Essential", "Premium", "Professional"]
    assert plans[1]["price"] == 9900
    assert plans[2]["scan_limit"] is None


def test_plan_features_for_guest(client):
    response = client.get("/api/plan-features")

    assert response.status_code == 200
    assert response.json()["plan"] == "Free"
    assert response.json()["features"]["scan_limit"] == 1
    assert response.json()["features"]["deep_analysis"] is False


def test_scans_remaining_for_guest(client):
    assert client.get("/api/scans-remaining").json() == {"scans_remaining": 1, "unlimited": False}


def test_subscribe_to_plan(client, user_auth):
    headers = user_auth["headers"]

    response = client.post("/api/subscriptions", json={"plan_id": _plan_id(client, "Professional")}, headers=headers)

    assert response.status_code == 201
    assert response.json()["plan"] == "Professional"
    assert response.json()["subscription"]["status"] == "active"
    assert client.get("/api/plan-features", headers=headers).json()["features"]["interview_practice"] is True
    assert client.get("/api/scans-remaining", headers=headers).json() == {"scans_remaining": None, "unlimited": True}


def test_subscribe_requires_auth_and_known_plan(client, user_auth):
    assert client.post("/api/subscriptions", json={"plan_id": 1}).status_code == 401

    response = client.post("/api/subscriptions", json={"plan_id": 999}, headers=user_auth["headers"])
    assert response.status_code == 404
    assert response.json()["error"] == "Plan not found"


def test_create_employer_promotes_user(client, user_auth):
    headers = user_auth["headers"]

    response = client.post(
        "/api/employers",
        json={"company_name": "Acme Mining", "industry": "Mining", "location": "Johannesburg"},
        headers=headers,
    )

    assert response.status_code == 201
    assert response.json()["company_name"] == "Acme Mining"
    assert response.json()["is_verified"] is False
    assert client.get("/api/auth/me", headers=headers).json()["role"] == "employer"
    assert client.get("/api/employers/me", headers=headers).json()["id"] == response.json()["id"]

    duplicate = client.post("/api/employers", json={"company_name": "Acme again"}, headers=headers)
    assert duplicate.status_code == 409


def test_employer_profile_missing(client, user_auth):
    response = client.get("/api/employers/me", headers=user_auth["headers"])

    assert response.status_code == 404
    assert response.json()["error"] == "Employer not found"


def test_list_employers_filters(client, user_auth):
    client.post("/api/employers", json={"company_name": "Acme", "industry": "Mining"}, headers=user_auth["headers"])
    other = signup(client, username="retailer", email="retail@example.com")
    client.post(
        "/api/employers",
        json={"company_name": "ShopRite", "industry": "Retail"},
        headers={"Authorization": f"Bearer {other['token']}"},
    )

    assert len(client.get("/api/employers").json()) == 2
    mining = client.get("/api/employers", params={"industry": "Mining"}).json()
    assert [employer["company_name"] for employer in mining] == ["Acme"]


def test_job_postings_require_employer_profile(client, user_auth):
    response = client.post(
        "/api/job-postings",
        json={"title": "Data Analyst", "description": "SQL and Excel"},
        headers=user_auth["headers"],
    )

    assert response.status_code == 403


def test_create_and_list_job_postings(client, user_auth):
    headers = user_auth["headers"]
    employer = client.post("/api/employers", json={"company_name": "Acme"}, headers=headers).json()

    created = client.post(
        "/api/job-postings",
        json={
            "title": "Data Analyst",
            "description": "SQL and Excel reporting",
            "location": "Cape Town",
            "required_skills": ["sql", "excel"],
        },
        headers=headers,
    )
    assert created.status_code == 201
    posting = created.json()
    assert posting["employer_id"] == employer["id"]
    assert posting["employment_type"] == "full-time"

    assert client.get(f"/api/job-postings/{posting['id']}").json()["title"] == "Data Analyst"
    assert len(client.get("/api/job-postings", params={"location": "Cape Town"}).json()) == 1
    assert client.get("/api/job-postings", params={"location": "Durban"}).json() == []
    assert client.get("/api/job-postings/999").status_code == 404
