"""Immutable value records handed to the low-stock analyzer."""

from dataclasses import dataclass, asdict
from typing import Any, Optional


@dataclass(frozen=True)
class Warehouse:
    id: int
    company_id: int
    name: str


@dataclass(frozen=True)
class Product:
    id: int
    sku: str
    name: str
    low_stock_threshold: int = 10


@dataclass(frozen=True)
class InventoryRecord:
    product: Product
    warehouse_id: int
    quantity: int


@dataclass(frozen=True)
class Supplier:
    id: int
    name: str
    contact_email: Optional[str] = None


@dataclass(frozen=True)
class Alert:
    product_id: int
    product_name: str
    sku: str
    warehouse_id: int
    warehouse_name: str
    current_stock: int
    threshold: int
    days_until_stockout: int
    supplier: Optional[Supplier] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict; the `supplier` key is left out when there is none."""
        data = asdict(self)
        if self.supplier is None:
            del data["supplier"]
        return data


@dataclass(frozen=True)
class LowStockReport:
    alerts: tuple[Alert, ...]

    @property
    def total_alerts(self) -> int:
        return len(self.alerts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "alerts": [alert.to_dict() for alert in self.alerts],
            "total_alerts": self.total_alerts,
        }
