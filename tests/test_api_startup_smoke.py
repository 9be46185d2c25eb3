from fastapi.testclient import TestClient


REQUIRED_ROUTES = {
    "/api/auth/register",
    "/api/auth/login",
    "/api/auth/profile",
    "/api/auth/logout",
    "/api/companies",
    "/api/companies/my/company",
    "/api/companies/{company_id}",
    "/api/companies/{company_id}/regenerate-qr",
    "/api/companies/{company_id}/qr-code",
    "/api/companies/{company_id}/menu-link",
    "/api/companies/{company_id}/logo",
    "/api/menu-items",
    "/api/menu-items/company/{company_id}",
    "/api/menu-items/{item_id}",
    "/api/menu-items/{item_id}/image",
    "/api/public/{company_id}",
    "/api/public/link/{token}",
    "/api/public/{company_id}/categories",
    "/api/public/{company_id}/category/{category}",
    "/api/public/{company_id}/search",
    "/api/public/{company_id}/info",
}


def test_api_startup_and_router_registration(monkeypatch):
    from menu_builder import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        response = client.get("/")
        health = client.get("/health")
        docs_response = client.get("/docs")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert health.json() == {"status": "healthy"}
    assert docs_response.status_code == 200
    assert openapi_response.status_code == 200

    paths = {getattr(route, "path", None) for route in main.app.routes}
    assert REQUIRED_ROUTES.issubset(paths)


def test_responses_carry_request_id(monkeypatch):
    from menu_builder import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        generated = client.get("/health")
        echoed = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert generated.headers["X-Request-ID"]
    assert echoed.headers["X-Request-ID"] == "req-123"


def test_unknown_route_uses_error_shape(monkeypatch):
    from menu_builder import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "message": "Not Found"}
