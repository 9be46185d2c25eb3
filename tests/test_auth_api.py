from tests.fixtures_data import OWNER_A, auth_headers, build_client, register


def test_register_returns_user_and_token():
    ctx = build_client()

    body = register(ctx.client, {**OWNER_A, "email": "Ana@Example.com"})

    assert body["message"] == "User registered successfully"
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["display_name"] == "Ana"
    assert body["user"]["company_id"] is None
    assert body["user"]["company_name"] is None
    assert body["user"]["is_first_login"] is True
    assert body["user"]["subscription_tier"] == "Free"
    claims = ctx.tokens.verify(body["token"])
    assert claims["user_id"] == body["user"]["id"]
    assert claims["company_id"] is None


def test_register_duplicate_email_is_conflict():
    ctx = build_client()
    register(ctx.client)

    response = ctx.client.post("/api/auth/register", json={**OWNER_A, "email": "ANA@example.com"})

    assert response.status_code == 409
    assert response.json() == {"error": "conflict", "message": "User with this email already exists"}


def test_register_rejects_short_password_and_blank_name():
    ctx = build_client()

    response = ctx.client.post(
        "/api/auth/register",
        json={"email": "ana@example.com", "password": "123", "display_name": "   "},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_failed"
    fields = {detail["field"] for detail in body["details"]}
    assert {"password", "display_name"}.issubset(fields)


def test_login_unknown_email_and_wrong_password_look_identical():
    ctx = build_client()
    register(ctx.client)

    unknown = ctx.client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever"})
    wrong = ctx.client.post("/api/auth/login", json={"email": OWNER_A["email"], "password": "not-the-password"})

    assert unknown.status_code == 401
    assert wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"error": "unauthorized", "message": "Invalid email or password"}


def test_login_success_is_case_insensitive_on_email():
    ctx = build_client()
    registered = register(ctx.client)

    response = ctx.client.post("/api/auth/login", json={"email": "ANA@EXAMPLE.COM", "password": OWNER_A["password"]})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == registered["user"]["id"]
    assert ctx.tokens.verify(body["token"])["email"] == "ana@example.com"


def test_token_endpoint_accepts_oauth2_form():
    ctx = build_client()
    register(ctx.client)

    response = ctx.client.post(
        "/api/auth/token",
        data={"username": OWNER_A["email"], "password": OWNER_A["password"]},
    )

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert ctx.tokens.verify(response.json()["access_token"])["email"] == OWNER_A["email"]


def test_profile_requires_token():
    ctx = build_client()

    missing = ctx.client.get("/api/auth/profile")
    garbage = ctx.client.get("/api/auth/profile", headers=auth_headers("not-a-jwt"))

    assert missing.status_code == 401
    assert missing.json() == {"error": "unauthorized", "message": "Access token required"}
    assert missing.headers["WWW-Authenticate"] == "Bearer"
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Invalid or expired token"


def test_profile_returns_company_name_after_company_creation():
    ctx = build_client()
    registered = register(ctx.client)
    headers = auth_headers(registered["token"])
    ctx.client.post("/api/companies", json={"name": "Cafe Central"}, headers=headers)

    response = ctx.client.get("/api/auth/profile", headers=headers)

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["company_name"] == "Cafe Central"
    assert user["company_id"] is not None
    assert user["is_first_login"] is False


def test_token_for_deleted_user_is_rejected():
    ctx = build_client()
    token = ctx.tokens.sign({"sub": "999", "user_id": 999})

    response = ctx.client.get("/api/auth/profile", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_logout_is_advisory_and_token_keeps_working():
    ctx = build_client()
    registered = register(ctx.client)
    headers = auth_headers(registered["token"])

    logout = ctx.client.post("/api/auth/logout", headers=headers)
    profile = ctx.client.get("/api/auth/profile", headers=headers)

    assert logout.status_code == 200
    assert logout.json() == {"message": "Logout successful"}
    assert profile.status_code == 200
