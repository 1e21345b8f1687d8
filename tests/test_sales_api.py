from decimal import Decimal

from app.main import app
from app.shared.database.models import Notification
from app.shared.services.notification_hub import NotificationHub


def sale_payload(*lines, **extra):
    payload = {
        "customer": "ACME",
        "payment_method": "Cash",
        "items": [{"item_id": item_id, "quantity": qty, "price": price} for item_id, qty, price in lines],
    }
    payload.update(extra)
    return payload


def test_create_sale(client, seller, seller_headers, make_item, stock):
    item = make_item(quantity=10)

    response = client.post("/api/v1/sales/", json=sale_payload((item.id, 4, 5)), headers=seller_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert Decimal(str(data["total"])) == Decimal("20")
    assert data["status"] == "Pending"
    assert data["user_id"] == seller.id
    assert data["items"][0]["item_name"] == "Widget"
    assert stock(item.id) == 6


def test_create_sale_ignores_client_total(client, seller_headers, make_item):
    item = make_item(quantity=10)

    response = client.post(
        "/api/v1/sales/", json=sale_payload((item.id, 2, 3), total=1), headers=seller_headers
    )

    assert response.status_code == 201
    assert Decimal(str(response.json()["data"]["total"])) == Decimal("6")


def test_insufficient_stock_error_body(client, seller_headers, make_item, stock):
    x = make_item(name="X", quantity=10)
    y = make_item(name="Y", quantity=0)

    response = client.post(
        "/api/v1/sales/", json=sale_payload((x.id, 2, 1), (y.id, 1, 1)), headers=seller_headers
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["error_code"] == "insufficient_stock"
    assert detail["item_id"] == y.id
    assert detail["available"] == 0
    assert stock(x.id) == 10


def test_unknown_item(client, seller_headers):
    response = client.post("/api/v1/sales/", json=sale_payload((999, 1, 1)), headers=seller_headers)

    assert response.status_code == 404
    assert response.json()["detail"]["error_code"] == "item_not_found"


def test_empty_sale_rejected(client, seller_headers):
    response = client.post("/api/v1/sales/", json=sale_payload(), headers=seller_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "invalid_argument"


def test_price_with_more_than_two_decimals_is_validation_error(client, seller_headers, make_item, stock):
    item = make_item(quantity=10)

    response = client.post("/api/v1/sales/", json=sale_payload((item.id, 3, "0.333")), headers=seller_headers)

    assert response.status_code == 422
    assert stock(item.id) == 10


def test_zero_quantity_is_validation_error(client, seller_headers, make_item):
    item = make_item(quantity=10)

    response = client.post("/api/v1/sales/", json=sale_payload((item.id, 0, 1)), headers=seller_headers)

    assert response.status_code == 422


def test_requires_authentication(client):
    response = client.get("/api/v1/sales/")

    assert response.status_code in (401, 403)


def test_list_and_filter_sales(client, seller_headers, make_item):
    item = make_item(quantity=10)
    first = client.post("/api/v1/sales/", json=sale_payload((item.id, 1, 1)), headers=seller_headers).json()
    second = client.post(
        "/api/v1/sales/", json=sale_payload((item.id, 1, 1), status="Completed"), headers=seller_headers
    ).json()

    response = client.get("/api/v1/sales/", headers=seller_headers)
    assert response.json()["count"] == 2
    assert [s["id"] for s in response.json()["data"]] == [second["data"]["id"], first["data"]["id"]]

    response = client.get("/api/v1/sales/", params={"sale_status": "Completed"}, headers=seller_headers)
    assert [s["id"] for s in response.json()["data"]] == [second["data"]["id"]]


def test_get_missing_sale(client, seller_headers):
    response = client.get("/api/v1/sales/404", headers=seller_headers)

    assert response.status_code == 404
    assert response.json()["detail"]["error_code"] == "not_found"


def test_update_status(client, seller_headers, make_item):
    item = make_item(quantity=10)
    sale_id = client.post("/api/v1/sales/", json=sale_payload((item.id, 1, 1)), headers=seller_headers).json()["data"]["id"]

    response = client.put(f"/api/v1/sales/{sale_id}", json={"status": "Completed"}, headers=seller_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Completed"

    response = client.put(f"/api/v1/sales/{sale_id}", json={"status": "Cancelled"}, headers=seller_headers)
    assert response.status_code == 400


def test_update_items_rejected(client, seller_headers, make_item, stock):
    item = make_item(quantity=10)
    sale_id = client.post("/api/v1/sales/", json=sale_payload((item.id, 1, 1)), headers=seller_headers).json()["data"]["id"]

    response = client.put(
        f"/api/v1/sales/{sale_id}",
        json={"items": [{"item_id": item.id, "quantity": 5, "price": 1}]},
        headers=seller_headers
    )

    assert response.status_code == 400
    assert stock(item.id) == 9


def test_delete_sale(client, seller_headers, make_item, stock):
    item = make_item(quantity=10)
    sale_id = client.post("/api/v1/sales/", json=sale_payload((item.id, 4, 1)), headers=seller_headers).json()["data"]["id"]

    response = client.delete(f"/api/v1/sales/{sale_id}", headers=seller_headers)

    assert response.status_code == 200
    assert stock(item.id) == 10
    assert client.get(f"/api/v1/sales/{sale_id}", headers=seller_headers).status_code == 404


def test_delete_other_users_sale_forbidden(client, seller_headers, make_user, headers_for, make_item, stock):
    item = make_item(quantity=10)
    sale_id = client.post("/api/v1/sales/", json=sale_payload((item.id, 4, 1)), headers=seller_headers).json()["data"]["id"]
    other = make_user("user")

    response = client.delete(f"/api/v1/sales/{sale_id}", headers=headers_for(other))

    assert response.status_code == 403
    assert response.json()["detail"]["error_code"] == "forbidden"
    assert stock(item.id) == 6


def test_stats_require_manager(client, seller_headers, manager_headers):
    assert client.get("/api/v1/sales/stats/daily", headers=seller_headers).status_code == 403

    response = client.get("/api/v1/sales/stats/monthly", headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["period"] == "monthly"


def test_stats_invalid_period(client, manager_headers):
    assert client.get("/api/v1/sales/stats/weekly", headers=manager_headers).status_code == 422


def test_sale_generates_stock_alerts(client, seller_headers, db_session, make_item):
    low = make_item(name="Low", quantity=10, reorder_level=8)
    out = make_item(name="Out", quantity=2)

    client.post("/api/v1/sales/", json=sale_payload((low.id, 4, 1), (out.id, 2, 1)), headers=seller_headers)

    alerts = {(n.item_id, n.type) for n in db_session.query(Notification).all()}
    assert alerts == {(low.id, "low_stock"), (out.id, "out_of_stock")}

    # Sin alertas duplicadas mientras la anterior siga sin leer
    client.post("/api/v1/sales/", json=sale_payload((low.id, 1, 1)), headers=seller_headers)
    assert db_session.query(Notification).count() == 2


def test_sale_alert_is_published(client, seller_headers, make_item):
    item = make_item(quantity=1)
    hub = NotificationHub()
    queue = hub.subscribe()
    app.state.notification_hub = hub
    try:
        client.post("/api/v1/sales/", json=sale_payload((item.id, 1, 1)), headers=seller_headers)
    finally:
        del app.state.notification_hub

    event = queue.get_nowait()
    assert event["event"] == "notification"
    assert event["data"]["type"] == "out_of_stock"
    assert event["data"]["item_id"] == item.id


def test_sales_health(client):
    assert client.get("/api/v1/sales/health").json()["status"] == "healthy"
