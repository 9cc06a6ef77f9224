from decimal import Decimal

from app.models.base import LifecycleState
from tests.factories import add_to_cart, auth_headers, make_category, make_product


def test_public_listing_hides_deleted_and_sold_out(client, session, category):
    make_product(session, category, name="Yamaha F310", stock=3)
    make_product(session, category, name="Cort AD810", stock=0)
    gone = make_product(session, category, name="Fender CD60", stock=2)
    gone.lifecycle = LifecycleState.DELETED
    session.add(gone)
    session.commit()

    data = client.get("/products/").json()

    assert [p["name"] for p in data["results"]] == ["Yamaha F310"]
    assert data["total_items"] == 1


def test_listing_sort_search_and_limit_clamp(client, session, category):
    make_product(session, category, name="Yamaha F310", price="1500000")
    make_product(session, category, name="Yamaha APX600", price="3200000")
    make_product(session, category, name="Cort AD810", price="1300000")

    data = client.get("/products/?sort=price-asc&search=yamaha&limit=500").json()

    assert [p["name"] for p in data["results"]] == ["Yamaha F310", "Yamaha APX600"]
    assert data["limit"] == 100


def test_product_by_slug_and_related(client, session, category):
    make_product(session, category, name="Yamaha F310")
    make_product(session, category, name="Cort AD810")

    assert client.get("/products/yamaha-f310").json()["name"] == "Yamaha F310"
    assert client.get("/products/tidak-ada").status_code == 404
    related = client.get("/products/yamaha-f310/related").json()
    assert [p["name"] for p in related] == ["Cort AD810"]


def test_landing_features_most_expensive_products(client, session, category):
    for i, price in enumerate(["1000000", "2000000", "3000000", "4000000", "5000000"]):
        make_product(session, category, name=f"Gitar {i}", price=price)

    data = client.get("/products/landing").json()

    assert [p["name"] for p in data["featured_products"]] == ["Gitar 4", "Gitar 3", "Gitar 2", "Gitar 1"]
    assert data["popular_categories"][0]["id"] == category.id


def test_cart_add_checks_existing_quantity(client, session, customer, category):
    guitar = make_product(session, category, stock=3)
    headers = auth_headers(customer)

    assert client.post("/cart/add", json={"product_id": guitar.id, "quantity": 2}, headers=headers).status_code == 200
    res = client.post("/cart/add", json={"product_id": guitar.id, "quantity": 2}, headers=headers)
    assert res.status_code == 400

    cart = client.get("/cart/", headers=headers).json()
    assert cart["summary"]["item_count"] == 2
    assert cart["summary"]["total_weight"] == 5000
    assert Decimal(cart["summary"]["subtotal"]) == Decimal("3000000")


def test_cart_update_to_zero_removes_item(client, session, customer, category):
    guitar = make_product(session, category)
    add_to_cart(session, customer, guitar, 1)
    headers = auth_headers(customer)
    item_id = client.get("/cart/", headers=headers).json()["items"][0]["item_id"]

    client.put(f"/cart/update/{item_id}", json={"quantity": 0}, headers=headers)

    assert client.get("/cart/count", headers=headers).json() == {"count": 0}


def test_cart_drops_deleted_products(client, session, customer, category):
    guitar = make_product(session, category)
    add_to_cart(session, customer, guitar, 1)
    guitar.lifecycle = LifecycleState.DELETED
    session.add(guitar)
    session.commit()

    cart = client.get("/cart/", headers=auth_headers(customer)).json()

    assert cart["items"] == []


def test_admin_product_crud(client, session, admin, category):
    headers = auth_headers(admin)
    res = client.post("/admin/products/", json={
        "name": "Ibanez GRX70",
        "price": "2750000",
        "weight": 3500,
        "stock": 4,
        "category_id": category.id,
    }, headers=headers)
    assert res.status_code == 201, res.text
    product = res.json()
    assert product["slug"] == "ibanez-grx70"

    # same name gets a distinct slug
    res = client.post("/admin/products/", json={
        "name": "Ibanez GRX70",
        "price": "2750000",
        "weight": 3500,
        "category_id": category.id,
    }, headers=headers)
    assert res.json()["slug"] == "ibanez-grx70-2"

    res = client.post("/admin/products/", json={
        "name": "Gratis",
        "price": "0",
        "weight": 100,
        "category_id": category.id,
    }, headers=headers)
    assert res.status_code == 422

    res = client.put(f"/admin/products/{product['id']}", json={"stock": 10}, headers=headers)
    assert res.json()["stock"] == 10

    assert client.delete(f"/admin/products/{product['id']}", headers=headers).status_code == 200
    assert client.get("/products/ibanez-grx70").status_code == 404


def test_category_with_products_cannot_be_deleted(client, session, admin, category):
    make_product(session, category)
    empty = make_category(session, name="Bass Elektrik")
    headers = auth_headers(admin)

    assert client.delete(f"/admin/categories/{category.id}", headers=headers).status_code == 400
    assert client.delete(f"/admin/categories/{empty.id}", headers=headers).status_code == 200
    assert [c["name"] for c in client.get("/categories/").json()] == ["Gitar Akustik"]


def test_category_slug_must_be_unique(client, admin, category):
    res = client.post("/admin/categories/", json={"name": "Gitar  Akustik"}, headers=auth_headers(admin))
    assert res.status_code == 400
