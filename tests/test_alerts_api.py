from stockflow.domain.errors import AlertComputationError
from stockflow.application import service as service_module


def create_product(client, warehouse_id, sku, quantity, threshold=10):
    resp = client.post("/products/", json={
        "name": f"Product {sku}",
        "sku": sku,
        "price": "9.99",
        "warehouse_id": warehouse_id,
        "initial_quantity": quantity,
        "low_stock_threshold": threshold,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def sell(client, product_id, warehouse_id, units):
    resp = client.post("/inventory/adjustments", json={
        "product_id": product_id,
        "warehouse_id": warehouse_id,
        "quantity_change": -units,
        "change_type": "sale",
    })
    assert resp.status_code == 201, resp.text


def test_company_without_warehouses_has_no_alerts(client, company):
    resp = client.get(f"/companies/{company['id']}/alerts/low-stock")
    assert resp.status_code == 200
    assert resp.json() == {"alerts": [], "total_alerts": 0}


def test_unknown_company_is_404(client):
    resp = client.get("/companies/424242/alerts/low-stock")
    assert resp.status_code == 404


def test_low_stock_product_with_recent_sales_is_reported(client, company, warehouse):
    product = create_product(client, warehouse["id"], "lo-1", quantity=35)
    sell(client, product["id"], warehouse["id"], 30)  # 5 left, 1/day

    resp = client.get(f"/companies/{company['id']}/alerts/low-stock")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_alerts"] == 1
    assert body["alerts"][0] == {
        "product_id": product["id"],
        "product_name": "Product lo-1",
        "sku": "LO-1",
        "warehouse_id": warehouse["id"],
        "warehouse_name": "Main",
        "current_stock": 5,
        "threshold": 10,
        "days_until_stockout": 5,
    }


def test_products_without_sales_or_with_enough_stock_are_skipped(client, company, warehouse):
    create_product(client, warehouse["id"], "IDLE-1", quantity=3)
    plenty = create_product(client, warehouse["id"], "PLENTY-1", quantity=42)
    sell(client, plenty["id"], warehouse["id"], 30)  # 12 left

    body = client.get(f"/companies/{company['id']}/alerts/low-stock").json()
    assert body == {"alerts": [], "total_alerts": 0}


def test_supplier_details_included(client, company, warehouse):
    product = create_product(client, warehouse["id"], "SUP-1", quantity=4)
    sell(client, product["id"], warehouse["id"], 2)
    supplier = client.post("/suppliers/", json={"name": "Parts Co", "contact_email": "buy@parts.test"}).json()
    assert client.post(f"/suppliers/{supplier['id']}/products", json={"product_id": product["id"]}).status_code == 201

    alert = client.get(f"/companies/{company['id']}/alerts/low-stock").json()["alerts"][0]
    assert alert["supplier"] == {"id": supplier["id"], "name": "Parts Co", "contact_email": "buy@parts.test"}
    # 2 left at 2/30 per day
    assert alert["days_until_stockout"] == 30


def test_alerts_grouped_by_warehouse_in_id_order(client, company, warehouse):
    second = client.post(f"/companies/{company['id']}/warehouses", json={"name": "Overflow"}).json()
    a = create_product(client, second["id"], "A-1", quantity=3)
    b = create_product(client, warehouse["id"], "B-1", quantity=3)
    sell(client, a["id"], second["id"], 1)
    sell(client, b["id"], warehouse["id"], 1)

    alerts = client.get(f"/companies/{company['id']}/alerts/low-stock").json()["alerts"]
    assert [(x["warehouse_name"], x["sku"]) for x in alerts] == [("Main", "B-1"), ("Overflow", "A-1")]


def test_computation_failure_returns_generic_500(client, company, monkeypatch):
    def explode(*args, **kwargs):
        raise AlertComputationError("corrupt snapshot: SELECT * FROM inventory")

    monkeypatch.setattr(service_module, "compute_low_stock_alerts", explode)
    resp = client.get(f"/companies/{company['id']}/alerts/low-stock")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Unable to compute low-stock alerts"}
    assert "SELECT" not in resp.text
