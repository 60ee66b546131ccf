"""
Task and material API tests — every mutation returns the recomputed totals.

Tests:
1-3.   Tasks — add, update price, delete
4-6.   Costing mode switches — data of the mode being left is dropped
7-11.  Materials — add (incl. product defaults), update, delete, lump-sum guard, re-link
12-13. Not found
"""

from quotedesk import models


def _create_quote(client, customer_id, tasks=None, complexity=10, markup=15):
    """Quote with the 350 labor + 150 lump-sum task unless tasks are given."""
    if tasks is None:
        tasks = [{
            "description": "Frame and deck",
            "price": 350.00,
            "material_costing_mode": "lump_sum",
            "lump_sum_estimate": 150.00,
        }]
    resp = client.post("/api/quotes/", json={
        "customer_id": customer_id,
        "title": "Garden works",
        "complexity_percentage": complexity,
        "markup_percentage": markup,
        "tasks": tasks,
    })
    assert resp.status_code == 200
    return resp.json()


def _itemized_quote(client, customer_id):
    return _create_quote(client, customer_id, tasks=[{
        "description": "Fence run",
        "price": 100.00,
        "material_costing_mode": "itemized",
        "materials": [{"name": "Post", "quantity": 2, "unit_price": 50.00}],
    }], complexity=0, markup=0)


# ============================================================
# 1-3. Tasks
# ============================================================

def test_add_task_recomputes_quote(client, customer_id):
    quote = _create_quote(client, customer_id)
    resp = client.post(f"/api/quotes/{quote['id']}/tasks", json={
        "description": "Fence run",
        "price": 100.00,
        "material_costing_mode": "itemized",
        "materials": [{"name": "Post", "quantity": 2, "unit_price": 50.00}],
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["task"]["task_total"] == 200.0
    assert data["task"]["position"] == 1
    assert data["task"]["lump_sum_estimate"] is None
    # 700 combined, 70 complexity, 15% of 770 = 115.50
    assert data["totals"]["subtotal_combined"] == 700.0
    assert data["totals"]["complexity_charge"] == 70.0
    assert data["totals"]["markup_charge"] == 115.5
    assert data["totals"]["grand_total"] == 885.5


def test_update_task_price(client, customer_id):
    quote = _create_quote(client, customer_id, complexity=0, markup=0)
    task_id = quote["tasks"][0]["id"]
    resp = client.patch(f"/api/tasks/{task_id}", json={"price": 400.00, "description": "Deck"})
    assert resp.status_code == 200
    assert resp.json()["task"]["description"] == "Deck"
    assert resp.json()["totals"]["grand_total"] == 550.0


def test_delete_task(client, db, customer_id):
    quote = _create_quote(client, customer_id)
    extra = client.post(f"/api/quotes/{quote['id']}/tasks", json={
        "description": "Cleanup", "price": 60, "lump_sum_estimate": 0,
    }).json()
    resp = client.delete(f"/api/tasks/{extra['task']['id']}")
    assert resp.status_code == 200
    assert resp.json()["totals"]["grand_total"] == 632.5
    assert db.query(models.Task).count() == 1


# ============================================================
# 4-6. Costing mode switches
# ============================================================

def test_switch_itemized_to_lump_sum_drops_materials(client, db, customer_id):
    quote = _itemized_quote(client, customer_id)
    task_id = quote["tasks"][0]["id"]
    assert db.query(models.Material).count() == 1

    resp = client.patch(f"/api/tasks/{task_id}", json={
        "material_costing_mode": "lump_sum",
        "lump_sum_estimate": 80.00,
    })
    assert resp.status_code == 200
    task = resp.json()["task"]
    assert task["material_costing_mode"] == "lump_sum"
    assert task["materials"] == []
    assert task["materials_total"] == 80.0
    assert resp.json()["totals"]["grand_total"] == 180.0
    assert db.query(models.Material).count() == 0


def test_switch_lump_sum_to_itemized_drops_estimate(client, db, customer_id):
    quote = _create_quote(client, customer_id, complexity=0, markup=0)
    task_id = quote["tasks"][0]["id"]

    resp = client.patch(f"/api/tasks/{task_id}", json={"material_costing_mode": "itemized"})
    assert resp.status_code == 200
    task = resp.json()["task"]
    assert task["material_costing_mode"] == "itemized"
    assert task["lump_sum_estimate"] is None
    assert task["materials_total"] == 0.0
    assert resp.json()["totals"]["grand_total"] == 350.0

    row = db.query(models.Task).filter(models.Task.id == task_id).first()
    assert row.lump_sum_estimate is None


def test_lump_sum_estimate_rejected_on_itemized_task(client, customer_id):
    quote = _itemized_quote(client, customer_id)
    task_id = quote["tasks"][0]["id"]
    resp = client.patch(f"/api/tasks/{task_id}", json={"lump_sum_estimate": 500})
    assert resp.status_code == 400
    assert client.get(f"/api/quotes/{quote['id']}").json()["totals"]["grand_total"] == 200.0


# ============================================================
# 7-11. Materials
# ============================================================

def test_add_material_recomputes(client, customer_id):
    quote = _itemized_quote(client, customer_id)
    task_id = quote["tasks"][0]["id"]
    resp = client.post(f"/api/tasks/{task_id}/materials", json={
        "name": "Rail", "quantity": 12.5, "unit_price": 3.33,
    })
    assert resp.status_code == 200
    assert resp.json()["material"]["line_total"] == 41.63
    assert resp.json()["totals"]["subtotal_materials"] == 141.63
    assert resp.json()["totals"]["grand_total"] == 241.63


def test_add_material_from_product_defaults(client, customer_id, product_id):
    quote = _itemized_quote(client, customer_id)
    task_id = quote["tasks"][0]["id"]
    resp = client.post(f"/api/tasks/{task_id}/materials", json={"product_id": product_id, "quantity": 1})
    assert resp.status_code == 200
    material = resp.json()["material"]
    assert material["name"] == "Cedar fence board 6ft"
    assert material["unit_price"] == 25.505
    assert material["line_total"] == 25.51
    assert resp.json()["totals"]["subtotal_materials"] == 125.51

    # Explicit price wins over the catalog price
    resp = client.post(f"/api/tasks/{task_id}/materials", json={
        "product_id": product_id, "quantity": 1, "unit_price": 20.00,
    })
    assert resp.json()["material"]["unit_price"] == 20.0


def test_update_material(client, customer_id):
    quote = _itemized_quote(client, customer_id)
    material_id = quote["tasks"][0]["materials"][0]["id"]
    resp = client.patch(f"/api/materials/{material_id}", json={"quantity": 3})
    assert resp.status_code == 200
    assert resp.json()["material"]["line_total"] == 150.0
    assert resp.json()["totals"]["grand_total"] == 250.0


def test_delete_material(client, customer_id):
    quote = _itemized_quote(client, customer_id)
    material_id = quote["tasks"][0]["materials"][0]["id"]
    resp = client.delete(f"/api/materials/{material_id}")
    assert resp.status_code == 200
    assert resp.json()["totals"]["subtotal_materials"] == 0
    assert resp.json()["totals"]["grand_total"] == 100.0


def test_cannot_add_material_to_lump_sum_task(client, customer_id):
    quote = _create_quote(client, customer_id)
    task_id = quote["tasks"][0]["id"]
    resp = client.post(f"/api/tasks/{task_id}/materials", json={"name": "Nails", "quantity": 1, "unit_price": 9})
    assert resp.status_code == 400


def test_negative_material_quantity_rejected(client, customer_id):
    quote = _itemized_quote(client, customer_id)
    task_id = quote["tasks"][0]["id"]
    resp = client.post(f"/api/tasks/{task_id}/materials", json={"name": "Post", "quantity": -1, "unit_price": 9})
    assert resp.status_code == 422


# ============================================================
# 12-13. Not found
# ============================================================

def test_unknown_task_and_material(client):
    assert client.patch("/api/tasks/999", json={"price": 1}).status_code == 404
    assert client.delete("/api/tasks/999").status_code == 404
    assert client.post("/api/tasks/999/materials", json={"quantity": 1}).status_code == 404
    assert client.patch("/api/materials/999", json={"quantity": 1}).status_code == 404
    assert client.post("/api/quotes/999/tasks", json={"description": "X"}).status_code == 404


def test_unknown_product_on_material(client, customer_id):
    quote = _itemized_quote(client, customer_id)
    task_id = quote["tasks"][0]["id"]
    resp = client.post(f"/api/tasks/{task_id}/materials", json={"product_id": 999, "quantity": 1})
    assert resp.status_code == 404


def test_relinking_material_copies_new_product(client, customer_id, category_id, product_id):
    post = client.post("/api/products/", json={
        "name": "Cedar post 4x4", "category_id": category_id, "unit_price": 18.25,
    }).json()
    quote = _itemized_quote(client, customer_id)
    task_id = quote["tasks"][0]["id"]
    material = client.post(f"/api/tasks/{task_id}/materials", json={"product_id": product_id, "quantity": 2}).json()["material"]

    resp = client.patch(f"/api/materials/{material['id']}", json={"product_id": post["id"]})
    assert resp.status_code == 200
    relinked = resp.json()["material"]
    assert relinked["name"] == "Cedar post 4x4"
    assert relinked["unit_price"] == 18.25
    assert relinked["line_total"] == 36.5
    assert resp.json()["totals"]["subtotal_materials"] == 136.5

    # Values sent with the re-link win over the product's
    resp = client.patch(f"/api/materials/{material['id']}", json={
        "product_id": product_id, "name": "Cedar board (seconds)", "unit_price": 20,
    })
    assert resp.json()["material"]["name"] == "Cedar board (seconds)"
    assert resp.json()["material"]["unit_price"] == 20.0

    # Same product again: copied values stay as they are
    resp = client.patch(f"/api/materials/{material['id']}", json={"product_id": product_id})
    assert resp.json()["material"]["name"] == "Cedar board (seconds)"
