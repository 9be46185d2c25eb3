from menu_builder.models.menu_item import MenuItem
from tests.fixtures_data import (
    BISTRO_COMPANY,
    CAFE_COMPANY,
    OWNER_A,
    OWNER_B,
    auth_headers,
    build_client,
    create_item,
    register,
    register_with_company,
)


def test_create_item_defaults_category_and_availability():
    ctx = build_client()
    owner = register_with_company(ctx.client)

    item = create_item(ctx.client, owner, name="Croissant", price=4.25)

    assert item["company_id"] == owner.company["id"]
    assert item["category"] == "General"
    assert item["available"] is True
    assert item["price"] == 4.25


def test_blank_category_falls_back_to_general():
    ctx = build_client()
    owner = register_with_company(ctx.client)

    item = create_item(ctx.client, owner, category="   ")

    assert item["category"] == "General"


def test_negative_price_is_rejected_without_write():
    ctx = build_client()
    owner = register_with_company(ctx.client)

    response = ctx.client.post(
        "/api/menu-items",
        json={"company_id": owner.company["id"], "name": "Refund", "price": -1},
        headers=owner.headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_failed"
    assert body["details"][0]["field"] == "price"
    assert ctx.db.query(MenuItem).count() == 0


def test_price_with_more_than_two_decimals_is_rejected():
    ctx = build_client()
    owner = register_with_company(ctx.client)

    response = ctx.client.post(
        "/api/menu-items",
        json={"company_id": owner.company["id"], "name": "Tea", "price": 1.999},
        headers=owner.headers,
    )

    assert response.status_code == 400


def test_token_issued_before_company_creation_still_authorizes():
    ctx = build_client()
    owner = register_with_company(ctx.client)

    response = ctx.client.post(
        "/api/menu-items",
        json={"company_id": owner.company["id"], "name": "Latte", "price": 4},
        headers=auth_headers(owner.first_token),
    )

    assert response.status_code == 201


def test_create_item_for_foreign_or_missing_company():
    ctx = build_client()
    owner_a = register_with_company(ctx.client, OWNER_A, CAFE_COMPANY)
    owner_b = register_with_company(ctx.client, OWNER_B, BISTRO_COMPANY)

    foreign = ctx.client.post(
        "/api/menu-items",
        json={"company_id": owner_a.company["id"], "name": "Intruder", "price": 1},
        headers=owner_b.headers,
    )
    missing = ctx.client.post(
        "/api/menu-items",
        json={"company_id": 9999, "name": "Ghost", "price": 1},
        headers=owner_b.headers,
    )

    assert foreign.status_code == 403
    assert missing.status_code == 404
    assert ctx.db.query(MenuItem).count() == 0


def test_cross_owner_item_access_is_forbidden():
    ctx = build_client()
    owner_a = register_with_company(ctx.client, OWNER_A, CAFE_COMPANY)
    owner_b = register_with_company(ctx.client, OWNER_B, BISTRO_COMPANY)
    item = create_item(ctx.client, owner_a)
    url = f"/api/menu-items/{item['id']}"

    read = ctx.client.get(url, headers=owner_b.headers)
    update = ctx.client.put(url, json={"price": 0}, headers=owner_b.headers)
    delete = ctx.client.delete(url, headers=owner_b.headers)

    assert read.status_code == 403
    assert update.status_code == 403
    assert delete.status_code == 403
    assert read.json()["message"] == "Access denied. You can only manage menu items from your own company."
    assert ctx.client.get(url, headers=owner_a.headers).json()["menu_item"]["price"] == 3.5


def test_list_items_filters_and_orders():
    ctx = build_client()
    owner = register_with_company(ctx.client)
    create_item(ctx.client, owner, name="Muffin", category="Pastries")
    create_item(ctx.client, owner, name="Americano", category="Coffee")
    create_item(ctx.client, owner, name="Cortado", category="Coffee", available=False)

    everything = ctx.client.get("/api/menu-items", params={"company_id": owner.company["id"]}, headers=owner.headers)
    coffee_available = ctx.client.get(
        "/api/menu-items",
        params={"company_id": owner.company["id"], "category": "Coffee", "available": "true"},
        headers=owner.headers,
    )
    by_path = ctx.client.get(f"/api/menu-items/company/{owner.company['id']}", headers=owner.headers)

    assert [item["name"] for item in everything.json()["menu_items"]] == ["Americano", "Cortado", "Muffin"]
    assert everything.json()["total"] == 3
    assert [item["name"] for item in coffee_available.json()["menu_items"]] == ["Americano"]
    assert by_path.json() == everything.json()


def test_list_items_of_foreign_company_is_forbidden():
    ctx = build_client()
    owner_a = register_with_company(ctx.client, OWNER_A, CAFE_COMPANY)
    owner_b = register_with_company(ctx.client, OWNER_B, BISTRO_COMPANY)

    response = ctx.client.get(f"/api/menu-items/company/{owner_a.company['id']}", headers=owner_b.headers)

    assert response.status_code == 403


def test_partial_update_and_alias_for_availability():
    ctx = build_client()
    owner = register_with_company(ctx.client)
    item = create_item(ctx.client, owner, description="Double shot")

    response = ctx.client.put(
        f"/api/menu-items/{item['id']}",
        json={"price": 3.8, "is_available": False},
        headers=owner.headers,
    )

    assert response.status_code == 200
    updated = response.json()["menu_item"]
    assert updated["price"] == 3.8
    assert updated["available"] is False
    assert updated["description"] == "Double shot"
    assert updated["name"] == "Espresso"


def test_update_rejects_empty_body_and_null_price():
    ctx = build_client()
    owner = register_with_company(ctx.client)
    item = create_item(ctx.client, owner)
    url = f"/api/menu-items/{item['id']}"

    empty = ctx.client.put(url, json={}, headers=owner.headers)
    null_price = ctx.client.put(url, json={"price": None}, headers=owner.headers)
    unknown = ctx.client.put(url, json={"company_id": 2}, headers=owner.headers)

    assert empty.status_code == 400
    assert empty.json()["message"] == "No fields to update"
    assert null_price.status_code == 400
    assert unknown.status_code == 400


def test_delete_twice_second_is_not_found():
    ctx = build_client()
    owner = register_with_company(ctx.client)
    item = create_item(ctx.client, owner)
    url = f"/api/menu-items/{item['id']}"

    first = ctx.client.delete(url, headers=owner.headers)
    second = ctx.client.delete(url, headers=owner.headers)

    assert first.status_code == 200
    assert first.json() == {"message": "Menu item deleted successfully"}
    assert second.status_code == 404
    assert second.json() == {"error": "not_found", "message": "Menu item not found"}


def test_item_routes_require_authentication():
    ctx = build_client()
    register(ctx.client)

    response = ctx.client.get("/api/menu-items/1")

    assert response.status_code == 401


def test_free_tier_limit_is_enforced_when_configured(monkeypatch):
    from menu_builder.routers import menu_items as menu_items_router

    monkeypatch.setattr(menu_items_router, "FREE_TIER_MENU_ITEM_LIMIT", 1)
    ctx = build_client()
    owner = register_with_company(ctx.client)
    create_item(ctx.client, owner)

    response = ctx.client.post(
        "/api/menu-items",
        json={"company_id": owner.company["id"], "name": "Second", "price": 2},
        headers=owner.headers,
    )

    assert response.status_code == 403
    assert "Free plan is limited to 1 menu items" in response.json()["message"]
    assert ctx.db.query(MenuItem).count() == 1


def test_item_image_upload(tmp_path):
    ctx = build_client(upload_dir=tmp_path)
    owner = register_with_company(ctx.client)
    item = create_item(ctx.client, owner)

    response = ctx.client.post(
        f"/api/menu-items/{item['id']}/image",
        files={"file": ("photo.jpg", b"jpeg-bytes", "image/jpeg")},
        headers=owner.headers,
    )

    assert response.status_code == 200
    assert response.json()["menu_item"]["image_url"].endswith(".jpg")
    assert len(list(tmp_path.iterdir())) == 1


def _race_on_item_check(monkeypatch, concurrent_write):
    from menu_builder.services import menu_items as menu_items_service

    real_check = menu_items_service.ensure_menu_item_owner

    def check_then_write(db, user_id, item_id):
        real_check(db, user_id, item_id)
        concurrent_write(db, item_id)
        db.commit()

    monkeypatch.setattr(menu_items_service, "ensure_menu_item_owner", check_then_write)


def test_update_of_item_deleted_after_check_is_not_found(monkeypatch):
    from sqlalchemy import delete

    ctx = build_client()
    owner = register_with_company(ctx.client)
    item = create_item(ctx.client, owner)
    _race_on_item_check(monkeypatch, lambda db, item_id: db.execute(delete(MenuItem).where(MenuItem.id == item_id)))

    response = ctx.client.put(f"/api/menu-items/{item['id']}", json={"price": 9}, headers=owner.headers)

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "message": "Menu item not found"}
    assert ctx.db.query(MenuItem).count() == 0


def test_update_of_item_moved_to_other_company_after_check_is_not_found(monkeypatch):
    from sqlalchemy import update

    ctx = build_client()
    owner_a = register_with_company(ctx.client, OWNER_A, CAFE_COMPANY)
    owner_b = register_with_company(ctx.client, OWNER_B, BISTRO_COMPANY)
    item = create_item(ctx.client, owner_a)
    target_company = owner_b.company["id"]
    _race_on_item_check(
        monkeypatch,
        lambda db, item_id: db.execute(update(MenuItem).where(MenuItem.id == item_id).values(company_id=target_company)),
    )

    response = ctx.client.put(
        f"/api/menu-items/{item['id']}",
        json={"price": 9, "name": "Hijacked"},
        headers=owner_a.headers,
    )

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
    stored = ctx.db.get(MenuItem, item["id"])
    ctx.db.refresh(stored)
    assert stored.company_id == target_company
    assert stored.name == "Espresso"
    assert float(stored.price) == 3.5


def test_delete_of_item_removed_after_check_is_not_found(monkeypatch):
    from sqlalchemy import delete

    ctx = build_client()
    owner = register_with_company(ctx.client)
    item = create_item(ctx.client, owner)
    _race_on_item_check(monkeypatch, lambda db, item_id: db.execute(delete(MenuItem).where(MenuItem.id == item_id)))

    response = ctx.client.delete(f"/api/menu-items/{item['id']}", headers=owner.headers)

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "message": "Menu item not found"}


def test_delete_of_item_moved_to_other_company_after_check_keeps_row(monkeypatch):
    from sqlalchemy import update

    ctx = build_client()
    owner_a = register_with_company(ctx.client, OWNER_A, CAFE_COMPANY)
    owner_b = register_with_company(ctx.client, OWNER_B, BISTRO_COMPANY)
    item = create_item(ctx.client, owner_a)
    target_company = owner_b.company["id"]
    _race_on_item_check(
        monkeypatch,
        lambda db, item_id: db.execute(update(MenuItem).where(MenuItem.id == item_id).values(company_id=target_company)),
    )

    response = ctx.client.delete(f"/api/menu-items/{item['id']}", headers=owner_a.headers)

    assert response.status_code == 404
    stored = ctx.db.get(MenuItem, item["id"])
    assert stored is not None
    ctx.db.refresh(stored)
    assert stored.company_id == target_company
