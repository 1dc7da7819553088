from conftest import upload_text_cv


def _subscribe(client, headers, plan_name):
    plan = next(plan for plan in client.get("/api/plans").json() if plan["name"] == plan_name)
    response = client.post("/api/subscriptions", json={"plan_id": plan["id"]}, headers=headers)
    assert response.status_code == 201, response.text


def _post_jobs(db):
    recruiter = db.create_user("acme", "hr@acme.co.za", "hash")
    employer = db.create_employer(recruiter.id, "Acme Analytics")
    analyst = db.create_job_posting(
        employer.id,
        "Data Analyst",
        "SQL and Excel reporting. B-BBEE employer.",
        location="Johannesburg",
        required_skills=["Python", "SQL", "Excel"],
    )
    db.create_job_posting(employer.id, "Welder", "Fabrication shop", location="London", required_skills=["MIG"])
    return analyst


def test_job_matches_require_auth(client):
    cv = upload_text_cv(client)

    response = client.get(f"/api/job-matches/{cv['id']}")

    assert response.status_code == 401


def test_job_matches_require_upgrade(client, user_auth):
    headers = user_auth["headers"]
    cv = upload_text_cv(client, headers)

    response = client.get(f"/api/job-matches/{cv['id']}", headers=headers)

    assert response.status_code == 403
    assert response.json()["error"] == "Upgrade required"


def test_job_matches_for_premium_user(client, user_auth, db):
    headers = user_auth["headers"]
    analyst = _post_jobs(db)
    cv = upload_text_cv(client, headers)
    _subscribe(client, headers, "Premium")

    response = client.get(f"/api/job-matches/{cv['id']}", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["notified"] is False
    [match] = body["matches"]
    assert match["job_posting_id"] == analyst.id
    assert match["company"] == "Acme Analytics"
    assert match["skills_match_score"] == 100
    assert match["location_score"] == 100
    assert match["match_score"] == 94


def test_strong_match_sends_whatsapp_alert(client, user_auth, db):
    headers = user_auth["headers"]
    db.upsert_sa_profile(
        user_auth["user"]["id"], whatsapp_number="+27821234567", whatsapp_enabled=True, whatsapp_verified=True
    )
    _post_jobs(db)
    cv = upload_text_cv(client, headers)
    _subscribe(client, headers, "Professional")

    response = client.get(f"/api/job-matches/{cv['id']}", headers=headers)

    assert response.status_code == 200
    assert response.json()["notified"] is True


def test_job_matches_for_unknown_cv(client, user_auth):
    _subscribe(client, user_auth["headers"], "Premium")

    response = client.get("/api/job-matches/999", headers=user_auth["headers"])

    assert response.status_code == 404
    assert response.json()["error"] == "CV not found"
