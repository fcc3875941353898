"""SQL-backed lookups feeding the low-stock analyzer.

Every method maps ORM rows to the immutable records in
`stockflow.domain.entities`; SQLAlchemy errors surface as DataSourceError.
"""

import functools
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockflow.core import get_logger
from stockflow.domain import entities
from stockflow.domain.errors import DataSourceError
from stockflow.domain.models import (
    Inventory, InventoryHistory, Product, Supplier, SupplierProduct, Warehouse,
)

logger = get_logger(__name__)

SALE = "sale"


def _wrap_errors(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"{method.__name__} failed: {e.__class__.__name__}")
            # Postgres rejects every later statement in an aborted transaction
            self.db.rollback()
            raise DataSourceError(method.__name__) from e
    return wrapper


class SqlInventoryRepository:
    def __init__(self, db: Session):
        self.db = db

    @_wrap_errors
    def list_warehouses(self, company_id: int) -> list[entities.Warehouse]:
        rows = self.db.scalars(
            select(Warehouse).where(Warehouse.company_id == company_id).order_by(Warehouse.id)
        )
        return [entities.Warehouse(id=w.id, company_id=w.company_id, name=w.name) for w in rows]

    @_wrap_errors
    def list_inventory(self, warehouse_id: int) -> list[entities.InventoryRecord]:
        rows = self.db.execute(
            select(Inventory, Product)
            .join(Product, Inventory.product_id == Product.id)
            .where(Inventory.warehouse_id == warehouse_id)
            .order_by(Inventory.id)
        )
        return [
            entities.InventoryRecord(
                product=entities.Product(
                    id=product.id,
                    sku=product.sku,
                    name=product.name,
                    low_stock_threshold=product.low_stock_threshold,
                ),
                warehouse_id=inventory.warehouse_id,
                quantity=inventory.quantity,
            )
            for inventory, product in rows
        ]

    @_wrap_errors
    def count_recent_sales(self, product_id: int, window_days: int = 30, now: Optional[datetime] = None) -> int:
        """Units sold across all warehouses since `now - window_days`."""
        since = (now or datetime.now(timezone.utc)) - timedelta(days=window_days)
        total = self.db.scalar(
            select(func.coalesce(func.sum(-InventoryHistory.quantity_change), 0))
            .where(
                InventoryHistory.product_id == product_id,
                InventoryHistory.change_type == SALE,
                InventoryHistory.created_at >= since,
            )
        )
        return int(total or 0)

    @_wrap_errors
    def find_supplier(self, product_id: int) -> Optional[entities.Supplier]:
        """The product's supplier with the lowest id, if any."""
        supplier = self.db.scalars(
            select(Supplier)
            .join(SupplierProduct, SupplierProduct.supplier_id == Supplier.id)
            .where(SupplierProduct.product_id == product_id)
            .order_by(Supplier.id)
            .limit(1)
        ).first()
        if supplier is None:
            return None
        return entities.Supplier(id=supplier.id, name=supplier.name, contact_email=supplier.contact_email)
