def _create(client, listing, buyer):
    return client.post("/orders/sell", params={"user_id": buyer.user_id}, json={"listing_id": listing.id})


def _set_status(client, order_id, actor, status):
    return client.patch(
        f"/orders/{order_id}/status",
        params={"user_id": actor.user_id},
        json={"status": status},
    )


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_create_sell_order(client, listing, buyer, seller):
    resp = _create(client, listing, buyer)

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "PENDING"
    assert body["seller_id"] == seller.id
    assert body["buyer"]["id"] == buyer.id
    assert body["listing"]["is_available"] is True


def test_create_rejects_bad_listing_id(client, buyer):
    resp = client.post("/orders/sell", params={"user_id": buyer.user_id}, json={"listing_id": 0})
    assert resp.status_code == 422


def test_duplicate_order_is_conflict(client, listing, buyer):
    _create(client, listing, buyer)
    resp = _create(client, listing, buyer)

    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "DUPLICATE_ACTIVE_ORDER"


def test_self_trade_is_bad_request(client, listing, seller):
    resp = _create(client, listing, seller)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "SELF_TRADE"


def test_invalid_transition_echoes_allowed(client, listing, buyer):
    order_id = _create(client, listing, buyer).json()["id"]

    resp = _set_status(client, order_id, buyer, "PAID")

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["code"] == "INVALID_TRANSITION"
    assert detail["current_status"] == "PENDING"
    assert detail["requested_status"] == "PAID"
    assert detail["allowed"] == ["CANCELLED", "NEGOTIATING"]


def test_unknown_status_value_fails_validation(client, listing, buyer):
    order_id = _create(client, listing, buyer).json()["id"]
    assert _set_status(client, order_id, buyer, "SHIPPED").status_code == 422


def test_buyer_cannot_approve(client, listing, buyer):
    order_id = _create(client, listing, buyer).json()["id"]
    _set_status(client, order_id, buyer, "NEGOTIATING")

    resp = _set_status(client, order_id, buyer, "APPROVED")

    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_AUTHORIZED"


def test_unknown_order_is_not_found(client, buyer):
    assert _set_status(client, 999, buyer, "NEGOTIATING").status_code == 404


def test_full_lifecycle_marks_listing_sold(client, listing, buyer, seller):
    order_id = _create(client, listing, buyer).json()["id"]

    for actor, status in [
        (seller, "NEGOTIATING"),
        (seller, "APPROVED"),
        (buyer, "PAYMENT_PENDING"),
        (buyer, "PAID"),
        (seller, "COMPLETED"),
    ]:
        resp = _set_status(client, order_id, actor, status)
        assert resp.status_code == 200, resp.json()
        assert resp.json()["status"] == status

    assert resp.json()["listing"]["is_available"] is False

    # ogloszenie sprzedane, kolejny kupujacy dostaje blad
    other = client.post("/orders/sell", params={"user_id": buyer.user_id}, json={"listing_id": listing.id})
    assert other.json()["detail"]["code"] == "LISTING_UNAVAILABLE"


def test_cancel_and_listing_views(client, listing, buyer, seller):
    order_id = _create(client, listing, buyer).json()["id"]

    resp = client.patch(f"/orders/{order_id}/cancel", params={"user_id": buyer.user_id})
    assert resp.status_code == 200
    assert resp.json()["status"] == "CANCELLED"

    again = client.patch(f"/orders/{order_id}/cancel", params={"user_id": buyer.user_id})
    assert again.status_code == 400
    assert again.json()["detail"]["code"] == "CANCELLATION_NOT_ALLOWED"

    bought = client.get("/orders/buyer", params={"user_id": buyer.user_id}).json()
    sold = client.get("/orders/seller", params={"user_id": seller.user_id}).json()
    assert [o["id"] for o in bought] == [order_id]
    assert [o["id"] for o in sold] == [order_id]


def test_views_require_student(client):
    resp = client.get("/orders/buyer", params={"user_id": 12345})
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_A_PARTICIPANT"
