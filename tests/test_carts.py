# tests/test_carts.py
from decimal import Decimal

import pytest

from supergains.data.models import CartModel
from supergains.domain.errors import ConflictError
from supergains.repos.cart_repo import CartRepo
from supergains.services.cart_service import CartService
from tests.conftest import inventory_for, make_product


def stock_snapshot(product_id):
    inventory = inventory_for(product_id)
    return (inventory.current_stock, inventory.reserved_stock, inventory.total_sold, inventory.status)


def money(value) -> Decimal:
    return Decimal(str(value))


def test_empty_cart_without_creating_one(client, user_headers, db):
    res = client.get("/api/cart/", headers=user_headers)
    assert res.status_code == 200
    assert res.json()["items"] == []
    assert money(res.json()["total"]) == 0
    assert db.query(CartModel).count() == 0


def test_cart_requires_token(client):
    res = client.get("/api/cart/")
    assert res.status_code == 401
    assert res.json() == {"success": False, "error": "Access token required. Format: Bearer <token>"}


def test_add_product_creates_cart_lazily(client, user_headers):
    product_id = make_product(price="25.50", stock=10)

    res = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 2}, headers=user_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["item_count"] == 2
    assert money(body["total"]) == Decimal("51.00")
    assert body["items"][0]["name"] == "Whey Protein 2lb"
    assert money(body["items"][0]["subtotal"]) == Decimal("51.00")


def test_adding_same_product_merges_line(client, user_headers):
    product_id = make_product(stock=10)

    client.post("/api/cart/items", json={"product_id": product_id, "quantity": 3}, headers=user_headers)
    res = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 4}, headers=user_headers)
    body = res.json()
    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 7


def test_merged_quantity_is_checked_against_stock(client, user_headers):
    product_id = make_product(stock=5)

    client.post("/api/cart/items", json={"product_id": product_id, "quantity": 3}, headers=user_headers)
    res = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 3}, headers=user_headers)
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["details"] == [
        {"product_id": product_id, "requested": 6, "available": 5, "shortfall": 1, "product": "Whey Protein 2lb"}
    ]

    cart = client.get("/api/cart/", headers=user_headers).json()
    assert cart["items"][0]["quantity"] == 3
    assert stock_snapshot(product_id) == (5, 0, 0, "active")


def test_insufficient_stock_on_first_add_creates_nothing(client, user_headers, db):
    product_id = make_product(stock=1)
    res = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 2}, headers=user_headers)
    assert res.status_code == 400
    assert db.query(CartModel).count() == 0
    assert stock_snapshot(product_id) == (1, 0, 0, "active")


def test_add_unknown_or_inactive_product(client, user_headers):
    assert client.post("/api/cart/items", json={"product_id": 42}, headers=user_headers).status_code == 404


def test_add_validates_payload(client, user_headers):
    product_id = make_product()
    res = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 0}, headers=user_headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid input data"

    res = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 101}, headers=user_headers)
    assert res.status_code == 400


def test_update_quantity_recomputes_total(client, user_headers):
    whey = make_product(price="10.00", stock=20)
    creatine = make_product(name="Creatine", price="4.25", stock=20)
    client.post("/api/cart/items", json={"product_id": whey, "quantity": 1}, headers=user_headers)
    client.post("/api/cart/items", json={"product_id": creatine, "quantity": 2}, headers=user_headers)

    res = client.put(f"/api/cart/items/{whey}", json={"quantity": 5}, headers=user_headers)
    assert res.status_code == 200
    assert money(res.json()["total"]) == Decimal("58.50")


def test_update_quantity_zero_removes_item(client, user_headers):
    product_id = make_product()
    client.post("/api/cart/items", json={"product_id": product_id}, headers=user_headers)

    res = client.put(f"/api/cart/items/{product_id}", json={"quantity": 0}, headers=user_headers)
    assert res.status_code == 200
    assert res.json()["items"] == []
    assert money(res.json()["total"]) == 0


def test_update_quantity_negative_and_over_stock(client, user_headers):
    product_id = make_product(stock=3)
    client.post("/api/cart/items", json={"product_id": product_id}, headers=user_headers)

    assert client.put(f"/api/cart/items/{product_id}", json={"quantity": -1}, headers=user_headers).status_code == 400
    assert client.put(f"/api/cart/items/{product_id}", json={"quantity": 4}, headers=user_headers).status_code == 400


def test_remove_and_clear(client, user_headers):
    a = make_product(name="A")
    b = make_product(name="B")
    client.post("/api/cart/items", json={"product_id": a}, headers=user_headers)
    client.post("/api/cart/items", json={"product_id": b}, headers=user_headers)

    res = client.delete(f"/api/cart/items/{a}", headers=user_headers)
    assert [i["product_id"] for i in res.json()["items"]] == [b]
    assert client.delete(f"/api/cart/items/{a}", headers=user_headers).status_code == 404

    res = client.delete("/api/cart/", headers=user_headers)
    assert res.json()["items"] == []
    assert res.json()["item_count"] == 0


def test_cart_version_increases_on_every_change(client, user_headers, user, db):
    product_id = make_product()
    client.post("/api/cart/items", json={"product_id": product_id}, headers=user_headers)
    client.put(f"/api/cart/items/{product_id}", json={"quantity": 3}, headers=user_headers)

    cart = CartRepo(db).get_cart_by_user(user.id)
    assert cart.version == 3
    assert cart.total == Decimal("150.00")


def test_stale_version_raises_conflict(user, db, monkeypatch):
    product_id = make_product()
    service = CartService(db)
    service.add_product(user.id, product_id, 1)

    #another writer bumped the version first
    monkeypatch.setattr(CartRepo, "update_cart_version", lambda self, **kwargs: 0)
    with pytest.raises(ConflictError):
        service.add_product(user.id, product_id, 1)

    monkeypatch.undo()
    assert service.get_cart(user.id)["items"][0]["quantity"] == 1


def test_concurrent_first_add_reuses_existing_cart(user, db, monkeypatch):
    product_id = make_product()
    other = CartService(db)
    other.repo.create_cart(CartModel(user_id=user.id, total=Decimal("0.00"), version=1))

    #this request looked up the cart before the other one committed it
    original = CartRepo.get_cart_by_user
    calls = []

    def stale_first_lookup(self, user_id):
        calls.append(user_id)
        if len(calls) == 1:
            return None
        return original(self, user_id)

    monkeypatch.setattr(CartRepo, "get_cart_by_user", stale_first_lookup)

    cart = CartService(db).add_product(user.id, product_id, 2)
    assert cart["item_count"] == 2
    assert db.query(CartModel).filter_by(user_id=user.id).count() == 1
