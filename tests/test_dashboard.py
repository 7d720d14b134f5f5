# tests/test_dashboard.py
from datetime import datetime, timezone
from decimal import Decimal

from tests.conftest import SHIPPING, auth_headers, make_product, make_user


def place_order(client, headers, product_id, quantity):
    client.post("/api/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    res = client.post(
        "/api/orders/", json={"shipping_address": SHIPPING, "payment_method": "cash"}, headers=headers
    )
    assert res.status_code == 201
    return res.json()


def test_dashboard_requires_admin(client, user_headers):
    assert client.get("/api/dashboard/summary", headers=user_headers).status_code == 403


def test_summary_top_products_and_sales(client, admin_headers):
    whey = make_product(name="Whey", price="50.00", stock=20)
    bcaa = make_product(name="BCAA", price="10.00", stock=20)
    buyer = auth_headers(make_user(email="buyer@supergains.com"))

    first = place_order(client, buyer, whey, 1)
    place_order(client, buyer, bcaa, 3)
    cancelled = place_order(client, buyer, whey, 5)
    client.patch(f"/api/orders/{cancelled['id']}/cancel", headers=buyer)

    summary = client.get("/api/dashboard/summary", headers=admin_headers).json()
    assert summary["total_orders"] == 2
    assert summary["items_sold"] == 4
    assert summary["orders_by_status"] == {"pending": 2, "cancelled": 1}
    assert Decimal(str(summary["total_revenue"])) > Decimal(str(first["total"]))

    top = client.get("/api/dashboard/top-products?limit=1", headers=admin_headers).json()
    assert top == [{"product_id": bcaa, "product_name": "BCAA", "quantity_sold": 3, "revenue": top[0]["revenue"]}]
    assert Decimal(str(top[0]["revenue"])) == Decimal("30.00")

    sales = client.get("/api/dashboard/sales?group_by=month", headers=admin_headers).json()
    assert len(sales) == 1
    assert sales[0]["period"] == datetime.now(timezone.utc).strftime("%Y-%m")
    assert sales[0]["orders"] == 2


def test_sales_rejects_unknown_grouping(client, admin_headers):
    res = client.get("/api/dashboard/sales?group_by=week", headers=admin_headers)
    assert res.status_code == 400
