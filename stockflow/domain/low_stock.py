"""
Low-stock alert computation

Walks a company's warehouses in the order given and, within each warehouse,
its inventory records in the order given. A (product, warehouse) pair is
reported when the product sold at least once in the trailing sales window
and the stock on hand is at or below the product's threshold.
"""

from typing import Callable, Iterable, Mapping, Optional, Sequence, Union

from stockflow.core import get_logger

from .entities import Alert, InventoryRecord, LowStockReport, Supplier, Warehouse
from .errors import AlertComputationError, DataSourceError

logger = get_logger(__name__)

SALES_WINDOW_DAYS = 30
UNKNOWN_STOCKOUT = -1

InventorySource = Union[
    Mapping[int, Sequence[InventoryRecord]],
    Callable[[int], Iterable[InventoryRecord]],
]


def days_until_stockout(current_stock: int, recent_sales: int, window_days: int = SALES_WINDOW_DAYS) -> int:
    """Whole days until `current_stock` runs out at the window's average daily rate.

    Returns UNKNOWN_STOCKOUT when there is no sales velocity to project from.
    """
    average_daily_sales = recent_sales / float(window_days)
    if average_daily_sales <= 0:
        return UNKNOWN_STOCKOUT
    # ceil(stock / (sales / window)) in integers, so 5 / (30 / 30) is exactly 5
    return -(-current_stock * window_days // recent_sales)


def _records_for(inventory: InventorySource, warehouse_id: int) -> Iterable[InventoryRecord]:
    if callable(inventory):
        return inventory(warehouse_id)
    return inventory.get(warehouse_id, ())


def _safe_sales_count(recent_sales_count: Callable[[int], int], product_id: int) -> int:
    try:
        count = recent_sales_count(product_id)
    except DataSourceError:
        logger.warning(
            "Recent sales lookup failed; treating as no recent sales",
            exc_info=True,
            extra={'extra_fields': {'product_id': product_id}},
        )
        return 0
    if count is None:
        return 0
    if count < 0:
        raise AlertComputationError(f"negative sales count for product {product_id}")
    return count


def _safe_supplier(supplier_for: Callable[[int], Optional[Supplier]], product_id: int) -> Optional[Supplier]:
    try:
        return supplier_for(product_id)
    except DataSourceError:
        logger.warning(
            "Supplier lookup failed; reporting alert without supplier",
            exc_info=True,
            extra={'extra_fields': {'product_id': product_id}},
        )
        return None


def compute_low_stock_alerts(
    company_id: int,
    warehouses: Sequence[Warehouse],
    inventory_by_warehouse: InventorySource,
    recent_sales_count: Callable[[int], int],
    supplier_for: Callable[[int], Optional[Supplier]],
    window_days: int = SALES_WINDOW_DAYS,
) -> LowStockReport:
    """
    Build the low-stock report for one company.

    Args:
        company_id: Company the warehouses belong to (used for logging only)
        warehouses: The company's warehouses, in report order
        inventory_by_warehouse: warehouse id -> inventory records, as a mapping or a callable
        recent_sales_count: product id -> units sold within the trailing window
        supplier_for: product id -> the product's supplier, or None

    Raises:
        AlertComputationError: the inputs violate an invariant or a lookup failed
            in a way that cannot be degraded per product
    """
    alerts = []
    try:
        for warehouse in warehouses:
            for record in _records_for(inventory_by_warehouse, warehouse.id):
                product = record.product
                if record.quantity < 0 or product.low_stock_threshold < 0:
                    raise AlertComputationError(
                        f"negative stock or threshold for product {product.id} "
                        f"in warehouse {warehouse.id}"
                    )

                sales = _safe_sales_count(recent_sales_count, product.id)
                if sales == 0:
                    continue
                if record.quantity > product.low_stock_threshold:
                    continue

                alerts.append(Alert(
                    product_id=product.id,
                    product_name=product.name,
                    sku=product.sku,
                    warehouse_id=warehouse.id,
                    warehouse_name=warehouse.name,
                    current_stock=record.quantity,
                    threshold=product.low_stock_threshold,
                    days_until_stockout=days_until_stockout(record.quantity, sales, window_days),
                    supplier=_safe_supplier(supplier_for, product.id),
                ))
    except AlertComputationError:
        raise
    except Exception as e:
        raise AlertComputationError(f"low-stock computation failed for company {company_id}") from e

    logger.info(
        f"Computed {len(alerts)} low-stock alerts",
        extra={'extra_fields': {'company_id': company_id, 'warehouses': len(warehouses)}},
    )
    return LowStockReport(alerts=tuple(alerts))
