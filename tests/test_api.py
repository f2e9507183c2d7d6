"""HTTP surface: catalog, cart, checkout, orders, login and payment routes"""
import pytest
from fastapi.testclient import TestClient

from storefront.auth_service import MockAuthProvider
from storefront.main import create_app
from storefront.state import AppState

SESSION = "s1"

ORDER_DOC = {
    "_id": "65f1c0ffee",
    "orderNumber": 42,
    "customer": {"name": "Lakshmi Rao", "email": "lakshmi@example.com",
                 "phone": "9876543210", "address": "12 Temple Street"},
    "items": [{"name": "Mango Pickle", "price": 500, "quantity": 1}],
    "totalAmount": 500,
    "paymentMethod": "ONLINE",
    "paymentStatus": "COMPLETED",
    "status": "DELIVERED",
    "createdAt": "2026-10-01T10:00:00Z"
}


@pytest.fixture
def client(tmp_path, order_service, notifier):
    state = AppState(order_service=order_service, notifier=notifier, auth_provider=MockAuthProvider())
    with TestClient(create_app(state, db_path=tmp_path / "api.db")) as client:
        yield client


@pytest.fixture
def checkout_form(valid_form):
    return valid_form.model_dump()


def add(client, item_id, quantity=1, **customization):
    return client.post("/api/cart/add", json={
        "session_id": SESSION, "item_id": item_id, "quantity": quantity, **customization
    })


def test_health(client):
    assert client.get("/api/health").json()["status"] == "healthy"


def test_menu(client):
    body = client.get("/api/menu").json()
    assert any(item["id"] == "sambar-powder" for item in body["items"])
    assert body["categories"]

    pickles = client.get("/api/menu/category/homemade-pickles").json()["items"]
    assert all(item["category"] == "homemade-pickles" for item in pickles)

    assert client.get("/api/menu/category/nothing").status_code == 404
    assert client.get("/api/menu/item/ragi-malt").json()["name"] == "Ragi Malt"
    assert client.get("/api/menu/item/nothing").status_code == 404


def test_cart_flow(client):
    first = add(client, "sambar-powder", 2, spice_level="Medium Spicy")
    assert first.status_code == 200
    line_id = first.json()["cart_item_id"]
    assert line_id == "sambar-powder-Medium Spicy"

    add(client, "sambar-powder", 1, spice_level="Medium Spicy")
    cart = add(client, "ragi-malt", 1, sugar_option="With Jaggery").json()["cart"]
    assert len(cart["items"]) == 2
    assert cart["total_items"] == 4
    assert cart["total_price"] == 2500.0
    assert cart["items"][0]["customization"] == {"kind": "spice", "level": "Medium Spicy"}

    cart = client.put(f"/api/cart/item/{SESSION}/{line_id}", json={"quantity": 1}).json()["cart"]
    assert cart["total_price"] == 1300.0

    pricing = client.get(f"/api/cart/{SESSION}/pricing").json()
    assert pricing["subtotal"] == pricing["total"] == 1300.0

    cart = client.delete(f"/api/cart/item/{SESSION}/{line_id}").json()["cart"]
    assert [item["id"] for item in cart["items"]] == ["ragi-malt"]

    cart = client.delete(f"/api/cart/{SESSION}").json()["cart"]
    assert cart["items"] == []
    assert client.get(f"/api/cart/{SESSION}").json()["total_price"] == 0.0


def test_add_rejects_wrong_customization(client):
    response = add(client, "ragi-malt", 1, spice_level="Extra Spicy")
    assert response.status_code == 400
    assert add(client, "nothing").status_code == 404
    assert add(client, "ragi-malt", 0).status_code == 422


def test_checkout_success(client, backend, checkout_form):
    add(client, "sambar-powder", 2, spice_level="Low Spicy")
    assert client.get(f"/api/checkout/{SESSION}/saved-address").json()["status"] == "empty"

    response = client.post("/api/checkout", json={
        "session_id": SESSION, "form": checkout_form, "confirmed": True
    })

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "completed"
    assert body["order_id"] == "ORD-1001"
    assert body["redirect_to"] == "/order-success?orderId=ORD-1001"
    assert backend.last_json["totalAmount"] == 1200.0
    assert client.get(f"/api/cart/{SESSION}").json()["items"] == []

    saved = client.get(f"/api/checkout/{SESSION}/saved-address").json()
    assert saved["status"] == "success"
    assert saved["form"] == checkout_form
    assert client.get("/api/checkout/other/saved-address").json()["status"] == "empty"


def test_checkout_empty_cart(client, backend, checkout_form):
    response = client.post("/api/checkout", json={
        "session_id": SESSION, "form": checkout_form, "confirmed": True
    })
    assert response.status_code == 400
    assert response.json()["error_kind"] == "empty_cart"
    assert backend.requests == []


def test_checkout_validation_errors(client, checkout_form):
    add(client, "mango-pickle", 1)
    checkout_form["pincode"] = "12"

    response = client.post("/api/checkout", json={
        "session_id": SESSION, "form": checkout_form, "confirmed": True
    })
    assert response.status_code == 422
    assert response.json()["errors"] == {"pincode": "Pincode must be exactly 6 digits"}


def test_checkout_unconfirmed(client, backend, checkout_form):
    add(client, "mango-pickle", 1)

    body = client.post("/api/checkout", json={"session_id": SESSION, "form": checkout_form}).json()
    assert body["state"] == "idle"
    assert body["message"] == "Order cancelled"
    assert backend.requests == []


def test_checkout_backend_failure_keeps_cart(client, backend, checkout_form):
    add(client, "mango-pickle", 1)
    backend.status_code = 500
    backend.body = {"success": False}

    response = client.post("/api/checkout", json={
        "session_id": SESSION, "form": checkout_form, "confirmed": True
    })
    assert response.status_code == 502
    assert response.json()["message"] == "Server error. Please try again later."
    assert client.get(f"/api/cart/{SESSION}").json()["total_items"] == 1


def test_get_order(client, backend):
    backend.status_code = 200
    backend.body = {"success": True, "data": ORDER_DOC}

    order = client.get("/api/orders/65f1c0ffee").json()["order"]
    assert order["_id"] == "65f1c0ffee"
    assert order["orderNumber"] == 42
    assert order["status"] == "DELIVERED"


def test_list_orders(client, backend):
    backend.status_code = 200
    backend.body = {"success": True, "data": [ORDER_DOC]}

    listing = client.get("/api/orders").json()
    assert listing["order_count"] == 1
    assert listing["orders"][0]["paymentStatus"] == "COMPLETED"


def test_get_order_not_found(client, backend):
    backend.status_code = 404
    response = client.get("/api/orders/unknown")
    assert response.status_code == 404
    assert response.json() == {"status": "error", "kind": "retrieval", "message": "Order not found"}


def test_login_and_logout(client):
    assert not client.get(f"/api/auth/{SESSION}").json()["is_authenticated"]

    user = client.post("/api/auth/login", json={"session_id": SESSION, "phone_number": "+919876543210"})
    assert user.json()["user"]["phone_number"] == "+919876543210"
    assert client.get(f"/api/auth/{SESSION}").json() == {
        "is_authenticated": True, "phone_number": "+919876543210"
    }

    client.post("/api/auth/logout", json={"session_id": SESSION})
    assert not client.get(f"/api/auth/{SESSION}").json()["is_authenticated"]


def test_otp_login(client):
    sent = client.post("/api/auth/otp/send", json={"session_id": SESSION, "phone_number": "+919876543210"})
    assert sent.json()["status"] == "sent"

    bad = client.post("/api/auth/otp/verify", json={"session_id": SESSION, "code": "12"})
    assert bad.status_code == 401
    assert bad.json()["kind"] == "auth"

    ok = client.post("/api/auth/otp/verify", json={"session_id": SESSION, "code": "123456"})
    assert ok.json()["status"] == "success"


def test_payment_flow(client, checkout_form):
    assert client.post("/api/payments/options", json={"session_id": SESSION}).status_code == 402

    add(client, "mango-pickle", 2, spice_level="Extra Spicy")
    options = client.post("/api/payments/options", json={"session_id": SESSION, "form": checkout_form}).json()
    assert options["amount"] == 100000
    assert options["prefill"]["contact"] == "98765 43210"

    done = client.post("/api/payments/complete", json={"session_id": SESSION, "razorpay_payment_id": "pay_9"})
    assert done.json() == {"status": "paid", "payment_id": "pay_9"}

    dismissed = client.post("/api/payments/complete", json={"session_id": SESSION, "dismissed": True})
    assert dismissed.json() == {"status": "dismissed", "payment_id": None}
