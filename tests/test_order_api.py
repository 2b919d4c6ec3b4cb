import jwt

from conftest import TEST_CONFIG, bearer, create_franchise, create_store, register


def _store(client, admin_token):
    franchise = create_franchise(client, admin_token)
    store = create_store(client, admin_token, franchise["id"])
    return franchise, store


def _order(client, token, store_id, menu_ids, **extra):
    payload = {"storeId": store_id, "items": [{"menuId": menu_id} for menu_id in menu_ids]}
    payload.update(extra)
    return client.post("/api/order", json=payload, headers=bearer(token))


def test_order_total_uses_menu_prices(client, admin_token, diner):
    franchise, store = _store(client, admin_token)
    user, token = diner

    response = client.post(
        "/api/order",
        json={
            "franchiseId": franchise["id"],
            "storeId": store["id"],
            "items": [
                {"menuId": 1, "description": "Veggie", "price": 100},
                {"menuId": 2, "description": "Pepperoni", "price": 0},
            ],
        },
        headers=bearer(token),
    )

    assert response.status_code == 200
    body = response.get_json()
    order = body["order"]
    assert order["total"] == 0.008
    assert [item["price"] for item in order["items"]] == [0.0038, 0.0042]
    assert [item["description"] for item in order["items"]] == ["Veggie", "Pepperoni"]
    assert order["franchiseId"] == franchise["id"]
    assert order["storeId"] == store["id"]

    claims = jwt.decode(body["jwt"], TEST_CONFIG["fulfillment_secret"], algorithms=["HS256"])
    assert claims["diner"] == {"id": user["id"], "name": user["name"], "email": user["email"]}
    assert claims["order"] == order


def test_order_requires_session(client, admin_token):
    _, store = _store(client, admin_token)

    response = client.post("/api/order", json={"storeId": store["id"], "items": [{"menuId": 1}]})

    assert response.status_code == 401


def test_empty_order_is_rejected_without_consuming_an_id(client, admin_token, diner):
    _, store = _store(client, admin_token)
    _, token = diner

    assert _order(client, token, store["id"], []).status_code == 400
    assert _order(client, token, store["id"], [1, 999]).status_code == 400
    assert _order(client, token, 9999, [1]).status_code == 404

    first = _order(client, token, store["id"], [1]).get_json()["order"]
    assert first["id"] == 1
    history = client.get("/api/order", headers=bearer(token)).get_json()
    assert [order["id"] for order in history["orders"]] == [1]


def test_store_must_belong_to_given_franchise(client, admin_token, diner):
    _, store = _store(client, admin_token)
    other = create_franchise(client, admin_token)
    _, token = diner

    response = _order(client, token, store["id"], [1], franchiseId=other["id"])

    assert response.status_code == 404


def test_order_history_is_per_diner_and_paginated(client, app, admin_token, diner):
    app.config["ORDER_PAGE_SIZE"] = 2
    _, store = _store(client, admin_token)
    user, token = diner
    _, other_token = register(client)

    for menu_id in (1, 2, 3):
        assert _order(client, token, store["id"], [menu_id]).status_code == 200
    _order(client, other_token, store["id"], [4])

    first = client.get("/api/order", headers=bearer(token)).get_json()
    second = client.get("/api/order?page=2", headers=bearer(token)).get_json()

    assert first["dinerId"] == user["id"]
    assert first["page"] == 1
    assert first["more"] is True
    assert [o["items"][0]["menuId"] for o in first["orders"]] == [1, 2]
    assert [o["items"][0]["menuId"] for o in second["orders"]] == [3]
    assert second["more"] is False


def test_diner_cannot_read_other_history(client, admin_token, diner):
    user, _ = diner
    _, other_token = register(client)

    response = client.get(f"/api/order?dinerId={user['id']}", headers=bearer(other_token))

    assert response.status_code == 403
    admin_view = client.get(f"/api/order?dinerId={user['id']}", headers=bearer(admin_token))
    assert admin_view.status_code == 200
    assert admin_view.get_json()["dinerId"] == user["id"]


def test_order_history_survives_franchise_close(client, admin_token, diner):
    franchise, store = _store(client, admin_token)
    _, token = diner
    _order(client, token, store["id"], [5])

    client.delete(f"/api/franchise/{franchise['id']}", headers=bearer(admin_token))

    history = client.get("/api/order", headers=bearer(token)).get_json()
    assert history["orders"][0]["storeId"] == store["id"]
    assert history["orders"][0]["total"] == 0.0099

    # A new store never takes over the closed store's id.
    _, new_store = _store(client, admin_token)
    assert new_store["id"] != history["orders"][0]["storeId"]


def test_store_revenue_is_not_changed_by_orders(client, admin_token):
    owner, owner_token = register(client)
    franchise = create_franchise(client, admin_token, admin_email=owner["email"])
    store = create_store(client, owner_token, franchise["id"])
    _order(client, owner_token, store["id"], [1, 2])

    [mine] = client.get(f"/api/franchise/{owner['id']}", headers=bearer(owner_token)).get_json()

    assert mine["stores"][0]["totalRevenue"] == 0


def test_verify_fulfillment_token(client, admin_token, diner):
    _, store = _store(client, admin_token)
    _, token = diner
    body = _order(client, token, store["id"], [1]).get_json()

    valid = client.post("/api/order/verify", json={"jwt": body["jwt"]})
    assert valid.status_code == 200
    assert valid.get_json()["payload"]["order"] == body["order"]

    # Session tokens are not fulfillment tokens.
    assert client.post("/api/order/verify", json={"jwt": token}).status_code == 401
    assert client.post("/api/order/verify", json={}).status_code == 400
