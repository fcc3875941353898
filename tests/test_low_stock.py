"""Unit tests for the pure low-stock computation."""

import logging

import pytest

from stockflow.core.logging_config import request_id_var
from stockflow.domain.entities import InventoryRecord, Product, Supplier, Warehouse
from stockflow.domain.errors import AlertComputationError, DataSourceError
from stockflow.domain.low_stock import (
    UNKNOWN_STOCKOUT, compute_low_stock_alerts, days_until_stockout,
)

WIDGET = Product(id=1, sku="WID-001", name="Widget", low_stock_threshold=10)
GADGET = Product(id=2, sku="GAD-001", name="Gadget", low_stock_threshold=5)
NORTH = Warehouse(id=10, company_id=1, name="North")
SOUTH = Warehouse(id=20, company_id=1, name="South")
ACME = Supplier(id=7, name="Acme Supply", contact_email="orders@acme.test")


def run(warehouses, inventory, sales, suppliers=None):
    suppliers = suppliers or {}
    return compute_low_stock_alerts(
        1, warehouses, inventory, lambda pid: sales.get(pid, 0), suppliers.get,
    )


def test_worked_example_included():
    report = run([NORTH], {10: [InventoryRecord(WIDGET, 10, 5)]}, {1: 30})
    assert report.total_alerts == 1
    alert = report.alerts[0]
    assert alert.days_until_stockout == 5
    assert alert.current_stock == 5
    assert alert.threshold == 10
    assert (alert.warehouse_id, alert.warehouse_name) == (10, "North")
    assert (alert.product_id, alert.product_name, alert.sku) == (1, "Widget", "WID-001")


def test_stock_above_threshold_excluded():
    report = run([NORTH], {10: [InventoryRecord(WIDGET, 10, 12)]}, {1: 30})
    assert report.alerts == ()
    assert report.total_alerts == 0


def test_stock_equal_to_threshold_included():
    report = run([NORTH], {10: [InventoryRecord(WIDGET, 10, 10)]}, {1: 30})
    assert report.total_alerts == 1


@pytest.mark.parametrize("stock", [0, 3])
def test_no_recent_sales_excluded(stock):
    report = run([NORTH], {10: [InventoryRecord(WIDGET, 10, stock)]}, {1: 0})
    assert report.total_alerts == 0


def test_zero_stock_projects_zero_days():
    report = run([NORTH], {10: [InventoryRecord(WIDGET, 10, 0)]}, {1: 12})
    assert report.alerts[0].days_until_stockout == 0


def test_days_until_stockout_rounds_up():
    # 7 sold over 30 days -> 0.2333/day; 4 / 0.2333 = 17.14
    assert days_until_stockout(4, 7) == 18
    assert days_until_stockout(5, 30) == 5
    assert days_until_stockout(0, 1) == 0


def test_days_until_stockout_unknown_without_sales():
    assert days_until_stockout(5, 0) == UNKNOWN_STOCKOUT


def test_no_warehouses_gives_empty_report():
    report = run([], {}, {1: 30})
    assert report.to_dict() == {"alerts": [], "total_alerts": 0}


def test_warehouse_without_inventory_contributes_nothing():
    report = run([NORTH, SOUTH], {20: [InventoryRecord(WIDGET, 20, 1)]}, {1: 30})
    assert [a.warehouse_id for a in report.alerts] == [20]


def test_ordering_is_warehouse_then_record_order():
    inventory = {
        20: [InventoryRecord(GADGET, 20, 1), InventoryRecord(WIDGET, 20, 2)],
        10: [InventoryRecord(WIDGET, 10, 9), InventoryRecord(GADGET, 10, 0)],
    }
    report = run([SOUTH, NORTH], inventory, {1: 30, 2: 30})
    assert [(a.warehouse_id, a.product_id) for a in report.alerts] == [
        (20, 2), (20, 1), (10, 1), (10, 2),
    ]


def test_inventory_source_may_be_callable():
    records = {10: [InventoryRecord(WIDGET, 10, 1)]}
    report = compute_low_stock_alerts(1, [NORTH], lambda wid: records[wid], lambda pid: 3, lambda pid: None)
    assert report.total_alerts == 1


def test_supplier_attached_when_present():
    report = run([NORTH], {10: [InventoryRecord(WIDGET, 10, 1)]}, {1: 30}, {1: ACME})
    assert report.alerts[0].supplier == ACME
    assert report.to_dict()["alerts"][0]["supplier"] == {
        "id": 7, "name": "Acme Supply", "contact_email": "orders@acme.test",
    }


def test_missing_supplier_omitted_but_alert_kept():
    report = run([NORTH], {10: [InventoryRecord(WIDGET, 10, 1)]}, {1: 30})
    assert report.alerts[0].supplier is None
    assert "supplier" not in report.to_dict()["alerts"][0]


def test_total_matches_alert_count():
    inventory = {10: [InventoryRecord(WIDGET, 10, 1), InventoryRecord(GADGET, 10, 50)]}
    report = run([NORTH], inventory, {1: 30, 2: 30})
    assert report.to_dict()["total_alerts"] == len(report.to_dict()["alerts"]) == 1


def test_failed_sales_lookup_skips_only_that_product(caplog):
    def sales(pid):
        if pid == 1:
            raise DataSourceError("sales")
        return 30

    inventory = {10: [InventoryRecord(WIDGET, 10, 1), InventoryRecord(GADGET, 10, 1)]}
    with caplog.at_level(logging.WARNING, logger="stockflow.domain.low_stock"):
        report = compute_low_stock_alerts(1, [NORTH], inventory, sales, lambda pid: None)
    assert [a.product_id for a in report.alerts] == [2]
    assert "Recent sales lookup failed" in caplog.text


def test_failed_supplier_lookup_keeps_alert():
    def supplier(pid):
        raise DataSourceError("supplier")

    report = compute_low_stock_alerts(
        1, [NORTH], {10: [InventoryRecord(WIDGET, 10, 1)]}, lambda pid: 30, supplier,
    )
    assert report.total_alerts == 1
    assert report.alerts[0].supplier is None


def test_negative_quantity_is_a_computation_error():
    with pytest.raises(AlertComputationError):
        run([NORTH], {10: [InventoryRecord(WIDGET, 10, -1)]}, {1: 30})


def test_unexpected_lookup_failure_is_a_computation_error():
    def broken(pid):
        raise RuntimeError("boom")

    with pytest.raises(AlertComputationError) as excinfo:
        compute_low_stock_alerts(1, [NORTH], {10: [InventoryRecord(WIDGET, 10, 1)]}, broken, lambda pid: None)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_inputs_are_not_mutated():
    inventory = {10: [InventoryRecord(WIDGET, 10, 1)]}
    first = run([NORTH], inventory, {1: 30})
    second = run([NORTH], inventory, {1: 30})
    assert first == second
    assert inventory == {10: [InventoryRecord(WIDGET, 10, 1)]}


def test_degradation_warnings_carry_request_context(caplog):
    def supplier_for(pid):
        raise DataSourceError("supplier")

    token = request_id_var.set("req-42")
    try:
        with caplog.at_level(logging.WARNING, logger="stockflow.domain.low_stock"):
            report = compute_low_stock_alerts(
                1, [NORTH], {10: [InventoryRecord(WIDGET, 10, 1)]}, lambda pid: 30, supplier_for,
            )
    finally:
        request_id_var.reset(token)
    assert report.total_alerts == 1
    record = next(r for r in caplog.records if r.levelno == logging.WARNING)
    assert record.request_id == "req-42"
    assert record.extra_fields == {"product_id": 1}
