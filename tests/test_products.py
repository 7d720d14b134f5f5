# tests/test_products.py
from decimal import Decimal

from tests.conftest import inventory_for, make_product

WHEY = {
    "name": "Whey Isolate 5lb",
    "brand": "Dymatize",
    "price": "129.90",
    "description": "Hydrolyzed whey isolate",
    "image_url": "https://cdn.supergains.com/whey.png",
    "categories": ["protein", "isolate"],
    "stock": 12,
}


def test_create_product_creates_inventory(client, admin_headers):
    res = client.post("/api/products/", json=WHEY, headers=admin_headers)
    assert res.status_code == 201
    body = res.json()
    assert Decimal(str(body["price"])) == Decimal("129.90")
    assert body["stock"] == 12

    inventory = inventory_for(body["id"])
    assert inventory.current_stock == 12
    assert inventory.min_stock == 5
    assert inventory.status == "active"


def test_create_product_requires_admin(client, user_headers):
    assert client.post("/api/products/", json=WHEY).status_code == 401
    assert client.post("/api/products/", json=WHEY, headers=user_headers).status_code == 403


def test_create_product_validation(client, admin_headers):
    bad = dict(WHEY, price="-1", image_url="ftp://nope", categories=[str(i) for i in range(11)])
    res = client.post("/api/products/", json=bad, headers=admin_headers)
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert {"price", "image_url", "categories"} <= fields

    res = client.post("/api/products/", json=dict(WHEY, price="10000.01"), headers=admin_headers)
    assert res.status_code == 400


def test_list_and_filter_products(client):
    make_product(name="Whey Protein", brand="Optimum", price="50.00", categories=["protein"])
    make_product(name="Creatine", brand="MuscleTech", price="20.00", categories=["creatine"])
    make_product(name="Casein", brand="Optimum", price="60.00", categories=["protein"])

    def names(res):
        return sorted(p["name"] for p in res.json())

    assert names(client.get("/api/products/")) == ["Casein", "Creatine", "Whey Protein"]
    assert names(client.get("/api/products/?q=whey")) == ["Whey Protein"]
    assert names(client.get("/api/products/?brand=optimum")) == ["Casein", "Whey Protein"]
    assert names(client.get("/api/products/?category=Protein&max_price=55")) == ["Whey Protein"]
    assert len(client.get("/api/products/?limit=2").json()) == 2


def test_update_product(client, admin_headers):
    product_id = make_product()
    res = client.put(f"/api/products/{product_id}", json={"price": "45.00", "brand": "ON"}, headers=admin_headers)
    assert res.status_code == 200
    assert Decimal(str(res.json()["price"])) == Decimal("45.00")
    assert res.json()["brand"] == "ON"
    assert res.json()["name"] == "Whey Protein 2lb"


def test_delete_is_soft(client, admin_headers):
    product_id = make_product()
    res = client.delete(f"/api/products/{product_id}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["success"] is True

    assert client.get(f"/api/products/{product_id}").status_code == 404
    assert client.get("/api/products/").json() == []
    assert inventory_for(product_id).status == "discontinued"


def test_unknown_product(client):
    res = client.get("/api/products/404")
    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Product not found"}
