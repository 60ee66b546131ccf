"""
Customer, product, category, settings and dashboard API tests.

Tests:
1-5.   Customers — CRUD, search, delete guard, quote list
6-9.   Products — CRUD, filters, delete unlinks material lines
10-11. Dashboard and health
12-16. Product categories — CRUD, unique names, counts, products by category
17-19. Shop settings — seeded from env, partial update, new-quote defaults
"""

from quotedesk import models
from quotedesk.config import settings


def _quote(client, customer_id, price=350.00, estimate=150.00):
    resp = client.post("/api/quotes/", json={
        "customer_id": customer_id,
        "title": "Deck",
        "complexity_percentage": 10,
        "markup_percentage": 15,
        "tasks": [{"description": "Deck", "price": price, "lump_sum_estimate": estimate}],
    })
    assert resp.status_code == 200
    return resp.json()


# ============================================================
# 1-5. Customers
# ============================================================

def test_create_and_get_customer(client, customer_id):
    resp = client.get(f"/api/customers/{customer_id}")
    assert resp.status_code == 200
    assert resp.json()["company"] == "Whitfield Homes"
    assert client.get("/api/customers/999").status_code == 404


def test_update_customer(client, customer_id):
    resp = client.patch(f"/api/customers/{customer_id}", json={"phone": "555-0142"})
    assert resp.status_code == 200
    assert resp.json()["phone"] == "555-0142"
    assert resp.json()["name"] == "Dana Whitfield"


def test_search_customers(client, customer_id):
    client.post("/api/customers/", json={"name": "Ray Ortega", "email": "ray@ortega.net"})
    assert [c["name"] for c in client.get("/api/customers/").json()] == ["Dana Whitfield", "Ray Ortega"]
    assert [c["name"] for c in client.get("/api/customers/", params={"q": "ortega"}).json()] == ["Ray Ortega"]
    assert [c["name"] for c in client.get("/api/customers/", params={"q": "homes"}).json()] == ["Dana Whitfield"]


def test_delete_customer_with_quotes_is_refused(client, customer_id):
    quote = _quote(client, customer_id)
    assert client.delete(f"/api/customers/{customer_id}").status_code == 409

    client.delete(f"/api/quotes/{quote['id']}")
    assert client.delete(f"/api/customers/{customer_id}").status_code == 200
    assert client.get(f"/api/customers/{customer_id}").status_code == 404


def test_customer_quotes(client, customer_id):
    first = _quote(client, customer_id)
    second = _quote(client, customer_id, price=100, estimate=0)
    quotes = client.get(f"/api/customers/{customer_id}/quotes").json()
    assert [q["id"] for q in quotes] == [second["id"], first["id"]]
    assert quotes[1]["grand_total"] == 632.5
    assert quotes[1]["customer_name"] == "Dana Whitfield"
    assert client.get("/api/customers/999/quotes").status_code == 404


# ============================================================
# 6-9. Products
# ============================================================

def test_create_and_update_product(client, product_id):
    data = client.get(f"/api/products/{product_id}").json()
    assert data["unit_price"] == 25.505
    assert data["sku"] == "CED-6"

    resp = client.patch(f"/api/products/{product_id}", json={"unit_price": 27.00})
    assert resp.status_code == 200
    assert resp.json()["unit_price"] == 27.0
    assert client.patch("/api/products/999", json={"unit_price": 1}).status_code == 404


def test_negative_product_price_rejected(client):
    resp = client.post("/api/products/", json={"name": "Refund", "unit_price": -4})
    assert resp.status_code == 422


def test_filter_products(client, category_id, product_id):
    client.post("/api/products/", json={"name": "Deck screws 3in", "unit_price": 12.99})
    lumber = client.get("/api/products/", params={"category_id": category_id}).json()
    assert [p["id"] for p in lumber] == [product_id]
    screws = client.get("/api/products/", params={"q": "screw"}).json()
    assert [p["name"] for p in screws] == ["Deck screws 3in"]
    assert screws[0]["category_id"] is None


def test_product_with_unknown_category(client):
    resp = client.post("/api/products/", json={"name": "Orphan", "category_id": 999, "unit_price": 1})
    assert resp.status_code == 404


def test_product_price_change_does_not_reprice_lines(client, db, customer_id, product_id):
    quote = client.post("/api/quotes/", json={
        "customer_id": customer_id,
        "title": "Fence",
        "complexity_percentage": 0,
        "markup_percentage": 0,
        "tasks": [{"description": "Fence", "price": 0, "material_costing_mode": "itemized",
                   "materials": [{"product_id": product_id, "quantity": 2}]}],
    }).json()
    assert quote["totals"]["grand_total"] == 51.01

    client.patch(f"/api/products/{product_id}", json={"unit_price": 99.00})
    assert client.get(f"/api/quotes/{quote['id']}").json()["totals"]["grand_total"] == 51.01

    assert client.delete(f"/api/products/{product_id}").status_code == 200
    material = db.query(models.Material).first()
    assert material.product_id is None
    assert material.name == "Cedar fence board 6ft"
    assert material.unit_price == 25.505


# ============================================================
# 10-11. Dashboard and health
# ============================================================

def test_dashboard_stats(client, customer_id):
    accepted = _quote(client, customer_id)
    _quote(client, customer_id, price=100, estimate=0)
    client.put(f"/api/quotes/{accepted['id']}/status", json={"status": "accepted"})

    data = client.get("/api/dashboard/stats").json()
    assert data["total_quotes"] == 2
    assert data["quotes_by_status"]["accepted"] == 1
    assert data["quotes_by_status"]["draft"] == 1
    assert data["quotes_by_status"]["rejected"] == 0
    assert data["customers_with_quotes"] == 1
    assert data["accepted_revenue"] == 632.5
    assert len(data["recent_quotes"]) == 2


def test_dashboard_empty_and_health(client):
    data = client.get("/api/dashboard/stats").json()
    assert data["total_quotes"] == 0
    assert data["accepted_revenue"] == 0
    assert data["recent_quotes"] == []
    assert client.get("/health").json()["status"] == "ok"


# ============================================================
# 12-16. Product categories
# ============================================================

def test_category_crud(client, category_id):
    data = client.get(f"/api/product-categories/{category_id}").json()
    assert data["name"] == "Lumber"
    assert data["product_count"] == 0

    resp = client.patch(f"/api/product-categories/{category_id}", json={"description": "Dimensional lumber"})
    assert resp.status_code == 200
    assert resp.json()["description"] == "Dimensional lumber"
    assert resp.json()["name"] == "Lumber"

    assert client.get("/api/product-categories/999").status_code == 404
    assert client.patch("/api/product-categories/999", json={"name": "X"}).status_code == 404
    assert client.delete("/api/product-categories/999").status_code == 404


def test_category_names_are_unique(client, category_id):
    assert client.post("/api/product-categories/", json={"name": "lumber"}).status_code == 409
    other = client.post("/api/product-categories/", json={"name": "Fasteners"}).json()
    resp = client.patch(f"/api/product-categories/{other['id']}", json={"name": "LUMBER"})
    assert resp.status_code == 409
    assert client.post("/api/product-categories/", json={"name": ""}).status_code == 422


def test_list_categories_with_product_counts(client, category_id, product_id):
    fasteners = client.post("/api/product-categories/", json={"name": "Fasteners"}).json()
    client.post("/api/products/", json={"name": "Post", "category_id": category_id, "unit_price": 18})

    listed = client.get("/api/product-categories/").json()
    assert [(c["name"], c["product_count"]) for c in listed] == [("Fasteners", 0), ("Lumber", 2)]
    searched = client.get("/api/product-categories/", params={"q": "fast"}).json()
    assert [c["id"] for c in searched] == [fasteners["id"]]


def test_products_by_category(client, category_id, product_id):
    newer = client.post("/api/products/", json={"name": "Post", "category_id": category_id, "unit_price": 18}).json()
    client.post("/api/products/", json={"name": "Screws", "unit_price": 9})

    products = client.get(f"/api/product-categories/{category_id}/products").json()
    assert [p["id"] for p in products] == [newer["id"], product_id]
    assert client.get("/api/product-categories/999/products").status_code == 404


def test_delete_category_keeps_products(client, db, category_id, product_id):
    resp = client.delete(f"/api/product-categories/{category_id}")
    assert resp.status_code == 200
    assert resp.json()["products_unlinked"] == 1

    product = client.get(f"/api/products/{product_id}").json()
    assert product["category_id"] is None
    assert product["unit_price"] == 25.505
    assert db.query(models.ProductCategory).count() == 0


# ============================================================
# 17-19. Shop settings
# ============================================================

def test_settings_created_from_environment_defaults(client):
    data = client.get("/api/settings/").json()
    assert data["currency"] == settings.DEFAULT_CURRENCY
    assert data["default_markup_percentage"] == settings.DEFAULT_MARKUP_PCT
    assert data["default_complexity_percentage"] == settings.DEFAULT_COMPLEXITY_PCT
    assert data["default_task_price"] == settings.DEFAULT_TASK_PRICE


def test_update_settings_only_changes_sent_fields(client):
    resp = client.put("/api/settings/", json={"default_markup_percentage": 20, "currency_symbol": "€"})
    assert resp.status_code == 200
    assert resp.json()["default_markup_percentage"] == 20
    assert resp.json()["currency_symbol"] == "€"
    assert resp.json()["currency"] == settings.DEFAULT_CURRENCY

    assert client.put("/api/settings/", json={"default_markup_percentage": -1}).status_code == 422
    assert client.get("/api/settings/").json()["default_markup_percentage"] == 20


def test_new_quotes_use_settings_defaults(client, customer_id):
    client.put("/api/settings/", json={"default_complexity_percentage": 10, "default_markup_percentage": 15})
    data = client.post("/api/quotes/", json={
        "customer_id": customer_id,
        "title": "Deck",
        "tasks": [{"description": "Deck", "price": 350, "lump_sum_estimate": 150}],
    }).json()
    assert data["complexity_percentage"] == 10
    assert data["markup_percentage"] == 15
    assert data["totals"]["grand_total"] == 632.5

    # Existing quotes keep the percentages they were created with
    client.put("/api/settings/", json={"default_markup_percentage": 50})
    assert client.get(f"/api/quotes/{data['id']}").json()["markup_percentage"] == 15
