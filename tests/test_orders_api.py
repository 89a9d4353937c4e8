from __future__ import annotations

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session


def _place(client, headers, products):
    return client.post("/orders", headers=headers, json={"products": products})


def test_order_endpoints_require_bearer_token(client):
    assert client.get("/orders").status_code == 401
    assert client.post("/orders", json={"products": [{"product_id": 1, "quantity": 1}]}).status_code == 401

    bad = client.get("/orders", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401
    assert bad.headers["WWW-Authenticate"] == "Bearer"
    assert bad.json()["status"] == 401


def test_place_list_and_cancel_order(client, make_user, make_product, auth_headers):
    user = make_user()
    headers = auth_headers(user)
    p1 = make_product("Lamp", 1200)
    p2 = make_product("Bulb", 300)

    placed = _place(
        client,
        headers,
        [{"product_id": p1.id, "quantity": 1}, {"product_id": p2.id, "quantity": 4}],
    )
    assert placed.status_code == 201
    body = placed.json()
    assert body["message"] == "Order placed successfully"
    order = body["data"]
    assert order["status"] == "pending"
    assert order["user_id"] == user.id
    assert {"id", "created_at", "updated_at", "deleted_at", "lines"} <= set(order)
    assert sorted((line["product_id"], line["quantity"]) for line in order["lines"]) == sorted(
        [(p1.id, 1), (p2.id, 4)]
    )

    listed = client.get("/orders", headers=headers)
    assert listed.status_code == 200
    rows = listed.json()["data"]
    assert {row["product_name"]: row["total_price"] for row in rows} == {"Lamp": 1200, "Bulb": 1200}
    assert set(rows[0]) == {"id", "product_name", "description", "product_price", "quantity", "total_price"}

    cancelled = client.put(f"/orders/{order['id']}/cancel", headers=headers)
    assert cancelled.status_code == 200
    assert cancelled.json() == {"status": 200, "message": "Order canceled successfully"}

    again = client.put(f"/orders/{order['id']}/cancel", headers=headers)
    assert again.status_code == 400
    assert again.json()["message"] == "Order cannot be canceled"


def test_place_order_with_unknown_product_returns_404(client, make_user, auth_headers):
    headers = auth_headers(make_user())

    resp = _place(client, headers, [{"product_id": 999, "quantity": 1}])
    assert resp.status_code == 404
    assert resp.json()["message"] == "One or more products do not exist"

    listed = client.get("/orders", headers=headers)
    assert listed.status_code == 404
    assert listed.json()["message"] == "No orders found"


def test_place_order_validates_body(client, make_user, make_product, auth_headers):
    headers = auth_headers(make_user())
    product = make_product()

    assert _place(client, headers, []).status_code == 422
    assert _place(client, headers, [{"product_id": product.id, "quantity": 0}]).status_code == 422
    assert _place(client, headers, [{"product_id": 0, "quantity": 1}]).status_code == 422
    resp = client.post("/orders", headers=headers, json={})
    assert resp.status_code == 422
    assert resp.json()["message"] == "Invalid input"


def test_cancel_other_users_order_is_indistinguishable_from_missing(
    client, make_user, make_product, auth_headers
):
    owner = make_user()
    other = make_user()
    product = make_product()
    order = _place(client, auth_headers(owner), [{"product_id": product.id, "quantity": 1}]).json()["data"]

    foreign = client.put(f"/orders/{order['id']}/cancel", headers=auth_headers(other))
    missing = client.put("/orders/424242/cancel", headers=auth_headers(other))

    assert foreign.status_code == missing.status_code == 400
    assert foreign.json() == missing.json()
    assert client.put("/orders/abc/cancel", headers=auth_headers(other)).status_code == 422
    assert client.put("/orders/0/cancel", headers=auth_headers(other)).status_code == 422


def test_update_status_requires_admin(client, make_user, make_product, auth_headers):
    customer = make_user()
    admin = make_user(is_admin=True)
    product = make_product()
    order = _place(client, auth_headers(customer), [{"product_id": product.id, "quantity": 1}]).json()["data"]

    denied = client.put(
        f"/orders/{order['id']}/status",
        headers=auth_headers(customer),
        json={"status": "shipped"},
    )
    assert denied.status_code == 403
    assert denied.json()["message"] == "Admin privileges required"

    shipped = client.put(
        f"/orders/{order['id']}/status",
        headers=auth_headers(admin),
        json={"status": "shipped"},
    )
    assert shipped.status_code == 200
    assert shipped.json()["data"]["status"] == "shipped"
    assert shipped.json()["data"]["lines"][0]["product_id"] == product.id

    invalid = client.put(
        f"/orders/{order['id']}/status",
        headers=auth_headers(admin),
        json={"status": "teleported"},
    )
    assert invalid.status_code == 422

    missing = client.put("/orders/55555/status", headers=auth_headers(admin), json={"status": "pending"})
    assert missing.status_code == 404
    assert missing.json()["message"] == "Order not found"


def test_admin_can_reopen_cancelled_order(client, make_user, make_product, auth_headers):
    customer = make_user()
    admin = make_user(is_admin=True)
    product = make_product()
    headers = auth_headers(customer)
    order = _place(client, headers, [{"product_id": product.id, "quantity": 1}]).json()["data"]
    assert client.put(f"/orders/{order['id']}/cancel", headers=headers).status_code == 200

    reopened = client.put(
        f"/orders/{order['id']}/status",
        headers=auth_headers(admin),
        json={"status": "pending"},
    )
    assert reopened.status_code == 200
    assert reopened.json()["data"]["status"] == "pending"
    assert client.put(f"/orders/{order['id']}/cancel", headers=headers).status_code == 200


def test_update_status_requires_exact_enum_value(client, make_user, make_product, auth_headers):
    customer = make_user()
    admin = auth_headers(make_user(is_admin=True))
    product = make_product()
    order = _place(client, auth_headers(customer), [{"product_id": product.id, "quantity": 1}]).json()["data"]

    for value in ("SHIPPED", "  SHIPPED ", "Delivered"):
        resp = client.put(f"/orders/{order['id']}/status", headers=admin, json={"status": value})
        assert resp.status_code == 422, value

    listed = client.get("/orders", headers=auth_headers(customer))
    assert listed.status_code == 200
    cancel = client.put(f"/orders/{order['id']}/cancel", headers=auth_headers(customer))
    assert cancel.status_code == 200


def test_store_failure_maps_to_opaque_500(client, make_user, make_product, auth_headers, monkeypatch):
    user = make_user()
    headers = auth_headers(user)
    product = make_product()
    order = _place(client, headers, [{"product_id": product.id, "quantity": 1}]).json()["data"]

    def broken_execute(self, *args, **kwargs):
        raise OperationalError("UPDATE orders", {}, Exception("connection reset"))

    monkeypatch.setattr(Session, "execute", broken_execute)

    resp = client.put(f"/orders/{order['id']}/cancel", headers=headers)
    assert resp.status_code == 500
    assert resp.json() == {
        "status": 500,
        "message": "Internal server error",
        "error": "failed to cancel order",
    }
