from conftest import signup, upload_text_cv


def test_health_reports_database(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["environment"] == "test"


def test_signup_signin_and_me(client):
    body = signup(client)
    assert body["user"]["email"] == "thandi@example.com"
    assert "password_hash" not in body["user"]

    response = client.post("/api/auth/signin", json={"email": "THANDI@example.com", "password": "s3cret-pass"})
    assert response.status_code == 200
    token = response.json()["token"]
    assert response.json()["user"]["last_login"] is not None

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "thandi"


def test_signup_rejects_duplicates_and_bad_input(client):
    signup(client)

    duplicate = client.post(
        "/api/auth/signup",
        json={"username": "other", "email": "thandi@example.com", "password": "s3cret-pass"},
    )
    assert duplicate.status_code == 409

    bad_email = client.post(
        "/api/auth/signup",
        json={"username": "other", "email": "not-an-email", "password": "s3cret-pass"},
    )
    assert bad_email.status_code == 400
    assert bad_email.json()["error"] == "Invalid email"

    short_password = client.post(
        "/api/auth/signup",
        json={"username": "other", "email": "other@example.com", "password": "short"},
    )
    assert short_password.status_code == 400
    assert short_password.json()["error"] == "Validation failed"


def test_signin_with_wrong_password(client):
    signup(client)

    response = client.post("/api/auth/signin", json={"email": "thandi@example.com", "password": "wrong-pass"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized", "message": "Invalid email or password"}


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    invalid = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert invalid.status_code == 401
    assert invalid.json()["message"] == "Invalid authentication token"


def test_admin_login_and_me(client, admin_headers):
    response = client.get("/api/admin/me", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["email"] == "admin@example.com"
    assert response.json()["id"] == 0


def test_admin_login_with_wrong_password(client):
    response = client.post("/api/admin/login", json={"email": "admin@example.com", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_admin_routes_reject_regular_users(client, user_auth):
    assert client.get("/api/admin/stats").status_code == 401
    response = client.get("/api/admin/stats", headers=user_auth["headers"])

    assert response.status_code == 403
    assert response.json()["message"] == "Admin access required"


def test_admin_stats_and_listings(client, admin_headers, user_auth):
    upload_text_cv(client, user_auth["headers"])
    upload_text_cv(client)
    client.post("/api/newsletter/subscribe", json={"email": "news@example.com"})

    stats = client.get("/api/admin/stats", headers=admin_headers).json()
    assert stats["total_users"] == 1
    assert stats["total_cvs"] == 2
    assert stats["newsletter_subscribers"] == 1
    assert len(stats["recent_cvs"]) == 2

    users = client.get("/api/admin/users", params={"page": 1, "limit": 10}, headers=admin_headers).json()
    assert users["pagination"] == {"total": 1, "page": 1, "limit": 10, "total_pages": 1}
    assert users["users"][0]["email"] == "thandi@example.com"

    cvs = client.get("/api/admin/cvs", params={"page": 2, "limit": 1}, headers=admin_headers).json()
    assert cvs["pagination"]["total_pages"] == 2
    assert len(cvs["cvs"]) == 1
    assert "content" not in cvs["cvs"][0]


def test_admin_updates_user(client, admin_headers, user_auth):
    user_id = user_auth["user"]["id"]

    response = client.put(f"/api/admin/users/{user_id}", json={"is_active": False}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    signin = client.post("/api/auth/signin", json={"email": "thandi@example.com", "password": "s3cret-pass"})
    assert signin.status_code == 401
    assert client.get("/api/auth/me", headers=user_auth["headers"]).status_code == 401


def test_admin_update_unknown_user(client, admin_headers):
    response = client.put("/api/admin/users/999", json={"role": "admin"}, headers=admin_headers)

    assert response.status_code == 404


def test_promoted_admin_cannot_demote_self(client, admin_headers, user_auth):
    user_id = user_auth["user"]["id"]
    client.put(f"/api/admin/users/{user_id}", json={"role": "admin"}, headers=admin_headers)

    login = client.post("/api/admin/login", json={"email": "thandi@example.com", "password": "s3cret-pass"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    response = client.put(f"/api/admin/users/{user_id}", json={"role": "user"}, headers=headers)
    assert response.status_code == 403
