def test_sku_must_be_unique(client, make_product):
    first = make_product(sku="HVF-001")
    resp = client.post("/api/products", json={"name": "Dup", "sku": "HVF-001", "unit_price": 1})
    assert resp.status_code == 409
    other = make_product(sku="THR-001")
    resp = client.patch(f"/api/products/{other['id']}", json={"sku": "HVF-001"})
    assert resp.status_code == 409
    # Re-sending its own SKU is not a conflict
    resp = client.patch(f"/api/products/{first['id']}", json={"sku": "HVF-001", "unit_price": 19.5})
    assert resp.status_code == 200
    assert resp.json()["unit_price"] == 19.5


def test_low_stock_scenario(client, make_task, make_product):
    task = make_task()
    filters = make_product(name="HVAC Air Filter", stock_quantity=2, low_stock_threshold=5)
    thermostat = make_product(name="Thermostat", stock_quantity=15, low_stock_threshold=3)

    resp = client.post("/api/product-usage", json={"task_id": task["id"], "product_id": thermostat["id"], "quantity": 2})
    assert resp.status_code == 201
    body = resp.json()
    assert body["product"]["stock_quantity"] == 13

    low = client.get("/api/products", params={"low_stock": "true"}).json()
    assert [p["id"] for p in low] == [filters["id"]]
    assert len(client.get("/api/products").json()) == 2


def test_insufficient_stock_is_rejected_without_changes(client, store, make_task, make_product):
    task = make_task()
    product = make_product(stock_quantity=3)
    resp = client.post("/api/product-usage", json={"task_id": task["id"], "product_id": product["id"], "quantity": 4})
    assert resp.status_code == 400
    body = resp.json()
    assert body["kind"] == "insufficient_stock"
    assert body["detail"]["available_quantity"] == 3
    assert client.get(f"/api/products/{product['id']}").json()["stock_quantity"] == 3
    assert store.get_product_usages() == []


def test_usage_for_unknown_product_is_404(client, make_task):
    task = make_task()
    resp = client.post("/api/product-usage", json={"task_id": task["id"], "product_id": 99, "quantity": 1})
    assert resp.status_code == 404


def test_usage_quantity_must_be_positive(client, make_task, make_product):
    task = make_task()
    product = make_product()
    resp = client.post("/api/product-usage", json={"task_id": task["id"], "product_id": product["id"], "quantity": 0})
    assert resp.status_code == 422


def test_usage_patch_and_delete_keep_stock_in_step(client, make_task, make_product):
    task = make_task()
    product = make_product(stock_quantity=10)
    other = make_product(stock_quantity=5)
    usage = client.post("/api/product-usage", json={"task_id": task["id"], "product_id": product["id"], "quantity": 3}).json()

    resp = client.patch(f"/api/product-usage/{usage['id']}", json={"quantity": 6})
    assert resp.status_code == 200
    assert resp.json()["product"]["stock_quantity"] == 4

    resp = client.patch(f"/api/product-usage/{usage['id']}", json={"quantity": 11})
    assert resp.status_code == 400
    assert resp.json()["detail"]["available_quantity"] == 4

    resp = client.patch(f"/api/product-usage/{usage['id']}", json={"product_id": other["id"], "quantity": 2})
    assert resp.status_code == 200
    assert resp.json()["product"]["id"] == other["id"]
    assert resp.json()["product"]["stock_quantity"] == 3
    assert client.get(f"/api/products/{product['id']}").json()["stock_quantity"] == 10

    listed = client.get(f"/api/tasks/{task['id']}/products").json()
    assert [(u["product_id"], u["quantity"]) for u in listed] == [(other["id"], 2)]
    assert listed[0]["product"]["name"] == other["name"]

    assert client.delete(f"/api/product-usage/{usage['id']}").status_code == 204
    assert client.get(f"/api/products/{other['id']}").json()["stock_quantity"] == 5
    assert client.delete(f"/api/product-usage/{usage['id']}").status_code == 404
    assert client.patch(f"/api/product-usage/{usage['id']}", json={"quantity": 1}).status_code == 404


def test_product_crud(client, make_product):
    product = make_product(description="  ", category="HVAC")
    assert product["description"] is None
    resp = client.patch(f"/api/products/{product['id']}", json={"category": None, "stock_quantity": 20})
    assert resp.json()["category"] is None
    assert resp.json()["stock_quantity"] == 20
    assert client.delete(f"/api/products/{product['id']}").status_code == 204
    assert client.get(f"/api/products/{product['id']}").status_code == 404


def test_usage_for_unknown_task_is_404_and_keeps_stock(client, store, make_task, make_product):
    product = make_product(stock_quantity=10)
    resp = client.post("/api/product-usage", json={"task_id": 999, "product_id": product["id"], "quantity": 4})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Task not found"
    assert client.get(f"/api/products/{product['id']}").json()["stock_quantity"] == 10
    assert store.get_product_usages() == []

    task = make_task()
    usage = client.post("/api/product-usage", json={"task_id": task["id"], "product_id": product["id"], "quantity": 4}).json()
    resp = client.patch(f"/api/product-usage/{usage['id']}", json={"task_id": 999, "quantity": 6})
    assert resp.status_code == 404
    assert client.get(f"/api/products/{product['id']}").json()["stock_quantity"] == 6
    assert store.get_product_usage(usage["id"]).task_id == task["id"]


def test_blank_sku_rejected_on_update(client, make_product):
    product = make_product(sku="HVF-001")
    resp = client.patch(f"/api/products/{product['id']}", json={"sku": "  "})
    assert resp.status_code == 422
    resp = client.patch(f"/api/products/{product['id']}", json={"sku": " HVF-002 "})
    assert resp.json()["sku"] == "HVF-002"
