"""End-to-end flows through the HTTP API against an in-memory database."""
import pytest

from app.models.truck import Truck, TruckStatus
from app.models.user import UserRole


async def _register_and_login(client, email="mona@example.com", password="pw-1234"):
    response = await client.post(
        "/api/v1/auth/register", json={"name": "Mona", "email": email, "password": password}
    )
    assert response.status_code == 201
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response


@pytest.mark.asyncio
async def test_register_login_and_profile(client):
    response = await _register_and_login(client)

    set_cookie = response.headers["set-cookie"]
    assert "session_token=" in set_cookie
    assert "httponly" in set_cookie.lower()
    assert "max-age=" in set_cookie.lower()

    token = response.json()["data"]["token"]
    profile = await client.get("/api/v1/account", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    assert profile.json()["data"]["email"] == "mona@example.com"
    assert profile.json()["data"]["role"] == "customer"

    logout = await client.post("/api/v1/account/logout", headers={"Authorization": f"Bearer {token}"})
    assert logout.status_code == 200
    again = await client.get("/api/v1/account", headers={"Authorization": f"Bearer {token}"})
    assert again.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_registration_conflicts(client):
    await _register_and_login(client)

    response = await client.post(
        "/api/v1/auth/register", json={"name": "Mona", "email": "MONA@example.com", "password": "x"}
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_order_flow(client, customer, owner, truck, auth_headers):
    owner_h = await auth_headers(owner)
    customer_h = await auth_headers(customer)

    # Owner adds an item with five in stock
    response = await client.post(
        "/api/v1/menu-items",
        json={"truck_id": str(truck.id), "name": "Koshary Box", "price": "10.00", "initial_quantity": 5},
        headers=owner_h,
    )
    assert response.status_code == 201
    item_id = response.json()["data"]["id"]

    # Customer browses and fills the cart
    menu = await client.get(f"/api/v1/trucks/{truck.id}")
    assert [m["name"] for m in menu.json()["data"]["menu"]] == ["Koshary Box"]
    response = await client.post("/api/v1/cart", json={"menu_item_id": item_id, "quantity": 2}, headers=customer_h)
    assert response.status_code == 201
    response = await client.post("/api/v1/cart", json={"menu_item_id": item_id, "quantity": 1}, headers=customer_h)
    assert response.status_code == 200
    cart = (await client.get("/api/v1/cart", headers=customer_h)).json()["data"]
    assert cart["total_price"] == "30.00"
    assert cart["grouped_by_truck"][0]["truck_name"] == "Koshary Express"

    # Checkout
    response = await client.post("/api/v1/orders", json={"truck_id": str(truck.id)}, headers=customer_h)
    assert response.status_code == 201
    order = response.json()["data"]
    assert order["total_price"] == "30.00"
    assert order["status"] == "pending"
    assert (await client.get("/api/v1/cart", headers=customer_h)).json()["data"]["items"] == []

    stock = (await client.get(f"/api/v1/inventory/{item_id}", headers=owner_h)).json()["data"]
    assert stock["quantity"] == 2
    assert stock["low_stock"] is True

    notes = (await client.get("/api/v1/notifications", headers=owner_h)).json()["data"]
    assert "new_order" in [n["type"] for n in notes["notifications"]]

    # Pay, then the owner moves it along
    response = await client.post(
        "/api/v1/payments", json={"order_id": order["id"], "payment_method": "cash"}, headers=customer_h
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "completed"

    response = await client.patch(
        f"/api/v1/orders/{order['id']}/status", json={"status": "preparing"}, headers=owner_h
    )
    assert response.json()["data"]["status"] == "preparing"
    response = await client.patch(
        f"/api/v1/orders/{order['id']}/status", json={"status": "completed"}, headers=owner_h
    )
    assert response.status_code == 409

    # The customer can no longer cancel; the owner can
    response = await client.post(f"/api/v1/orders/{order['id']}/cancel", headers=customer_h)
    assert response.status_code == 409
    response = await client.post(f"/api/v1/orders/{order['id']}/cancel", headers=owner_h)
    assert response.json()["data"]["status"] == "cancelled"

    stock = (await client.get(f"/api/v1/inventory/{item_id}", headers=owner_h)).json()["data"]
    assert stock["quantity"] == 5
    payment = (await client.get(f"/api/v1/payments/{order['id']}", headers=customer_h)).json()["data"]
    assert payment["status"] == "refunded"


@pytest.mark.asyncio
async def test_sold_out_item_cannot_be_added(client, customer, make_item, auth_headers):
    item = await make_item(quantity=0)

    response = await client.post(
        "/api/v1/cart", json={"menu_item_id": str(item.id)}, headers=await auth_headers(customer)
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "item_unavailable"


@pytest.mark.asyncio
async def test_order_detail_access(client, customer, make_user, make_item, auth_headers):
    item = await make_item()
    customer_h = await auth_headers(customer)
    await client.post("/api/v1/cart", json={"menu_item_id": str(item.id)}, headers=customer_h)
    order = (await client.post("/api/v1/orders", json={"truck_id": str(item.truck_id)}, headers=customer_h)).json()["data"]
    stranger = await make_user()

    mine = await client.get(f"/api/v1/orders/{order['id']}", headers=customer_h)
    theirs = await client.get(f"/api/v1/orders/{order['id']}", headers=await auth_headers(stranger))

    assert mine.status_code == 200
    assert mine.json()["data"]["items"][0]["quantity"] == 1
    assert theirs.status_code == 403


@pytest.mark.asyncio
async def test_owner_inventory_endpoints(client, owner, make_item, auth_headers):
    item = await make_item(quantity=1, threshold=2)
    owner_h = await auth_headers(owner)

    listing = (await client.get("/api/v1/inventory", headers=owner_h)).json()["data"]
    assert listing["stats"] == {"total_items": 1, "low_stock_items": 1, "out_of_stock_items": 0}

    response = await client.put(f"/api/v1/inventory/{item.id}", json={"adjustment": 9}, headers=owner_h)
    assert response.json()["data"]["quantity"] == 10

    response = await client.put(f"/api/v1/inventory/{item.id}", json={}, headers=owner_h)
    assert response.status_code == 422

    response = await client.post(
        "/api/v1/inventory/restock", json={"items": [{"menu_item_id": str(item.id), "quantity": 25}]}, headers=owner_h
    )
    assert response.json()["data"]["items"][0]["quantity"] == 25
    alerts = (await client.get("/api/v1/inventory/alerts/low-stock", headers=owner_h)).json()["data"]
    assert alerts == []


@pytest.mark.asyncio
async def test_admin_creates_truck_for_customer(client, make_user, customer, auth_headers):
    admin = await make_user(role=UserRole.ADMIN)
    admin_h = await auth_headers(admin)

    response = await client.post(
        "/api/v1/admin/trucks", json={"name": "Feteer Wagon", "owner_id": str(customer.id)}, headers=admin_h
    )
    assert response.status_code == 201
    assert response.json()["data"]["owner_email"] == customer.email

    users = (await client.get("/api/v1/admin/users", headers=admin_h)).json()["data"]
    assert {u["email"]: u["role"] for u in users}[customer.email] == "truck_owner"

    duplicate = await client.post(
        "/api/v1/admin/trucks", json={"name": "feteer wagon", "owner_id": str(customer.id)}, headers=admin_h
    )
    assert duplicate.status_code == 409
    stats = (await client.get("/api/v1/admin/stats", headers=admin_h)).json()["data"]
    assert stats["total_trucks"] == 1


@pytest.mark.asyncio
async def test_public_browsing_hides_parked_trucks_and_sold_out_items(client, owner, truck, make_item):
    parked = await Truck.create(name="Parked Wagon", owner=owner, truck_status=TruckStatus.UNAVAILABLE)
    await make_item(name="Falafel Wrap", quantity=5)
    await make_item(name="Sold Out Soup", quantity=0, category="soup")
    await make_item(name="Parked Wrap", on_truck=parked)

    trucks = (await client.get("/api/v1/trucks")).json()["data"]
    assert [t["name"] for t in trucks] == ["Koshary Express"]

    detail = (await client.get(f"/api/v1/trucks/{truck.id}")).json()["data"]
    assert [item["name"] for item in detail["menu"]] == ["Falafel Wrap"]

    full_menu = (await client.get(f"/api/v1/trucks/{truck.id}/menu")).json()["data"]
    assert [(item["name"], item["status"]) for item in full_menu] == [
        ("Falafel Wrap", "available"),
        ("Sold Out Soup", "unavailable"),
    ]

    categories = (await client.get("/api/v1/categories")).json()["data"]
    assert categories == ["main"]

    search = (await client.get("/api/v1/search", params={"q": "wrap"})).json()["data"]
    assert [item["name"] for item in search["menu_items"]] == ["Falafel Wrap"]
    assert search["menu_items"][0]["truck_name"] == "Koshary Express"
    assert search["total_results"] == 1

    too_short = await client.get("/api/v1/search", params={"q": "w"})
    assert too_short.status_code == 400
    assert too_short.json()["error"]["code"] == "validation_error"


@pytest.mark.asyncio
async def test_habits_endpoints(client, customer, make_item, auth_headers):
    item = await make_item(name="Koshary Box", price="10.00", quantity=10)
    customer_h = await auth_headers(customer)
    await client.post("/api/v1/cart", json={"menu_item_id": str(item.id), "quantity": 2}, headers=customer_h)
    await client.post("/api/v1/orders", json={"truck_id": str(item.truck_id)}, headers=customer_h)

    popular = (await client.get("/api/v1/popular")).json()["data"]
    assert [(p["name"], p["order_count"]) for p in popular] == [("Koshary Box", 1)]

    habits = (await client.get("/api/v1/habits", headers=customer_h)).json()["data"]
    assert habits["has_history"] is True
    assert habits["favourite_items"][0]["total_ordered"] == 2
    assert habits["favourite_trucks"][0]["total_spent"] == "20.00"
    assert habits["favourite_category"] == "main"

    reorder = (await client.get("/api/v1/habits/quick-reorder", headers=customer_h)).json()["data"]
    assert reorder["last_order"]["items"][0]["status"] == "available"
    assert reorder["frequent_items"][0]["name"] == "Koshary Box"

    history = (await client.get("/api/v1/habits/history", params={"limit": 5}, headers=customer_h)).json()["data"]
    assert history["stats"] == {"total_orders": 1, "total_spent": "20.00", "avg_order_value": "20.00"}
    assert history["pagination"]["total_pages"] == 1
    assert history["orders"][0]["items"][0]["quantity"] == 2

    top = (await client.get("/api/v1/habits/top-items", headers=customer_h)).json()["data"]
    assert [(t["name"], t["order_count"]) for t in top] == [("Koshary Box", 1)]

    assert (await client.get("/api/v1/habits")).status_code == 401
