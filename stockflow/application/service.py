from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from decimal import Decimal
from functools import partial
from typing import Optional

from stockflow.core import get_logger
from stockflow.core_settings import get_settings
from stockflow.domain.low_stock import compute_low_stock_alerts
from stockflow.domain.entities import LowStockReport
from stockflow.domain.errors import AlertComputationError, DataSourceError
from stockflow.domain.models import (
    Company, Warehouse, Product, Inventory, InventoryHistory,
    Supplier, SupplierProduct, ProductBundle,
)
from stockflow.domain.results import Ok, Err, ErrorKind, Result
from stockflow.infrastructure.repository import SqlInventoryRepository
from .schemas import (
    CompanyCreate, WarehouseCreate, ProductCreate, BundleItemCreate,
    SupplierCreate, SupplierLinkCreate, InventoryAdjustment,
)

logger = get_logger(__name__)

MAX_PRICE = Decimal("9999999999.99")


def product_view(product: Product) -> dict:
    """Product fields plus its stock level in every warehouse."""
    return {
        "id": product.id,
        "sku": product.sku,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "low_stock_threshold": product.low_stock_threshold,
        "is_bundle": product.is_bundle,
        "stock": [
            {"warehouse_id": inv.warehouse_id, "quantity": inv.quantity}
            for inv in product.inventory
        ],
    }


class CompanyService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, company_id: int) -> Optional[Company]:
        return self.db.get(Company, company_id)

    def create(self, data: CompanyCreate) -> Company:
        obj = Company(name=data.name.strip())
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def create_warehouse(self, company_id: int, data: WarehouseCreate) -> Result[Warehouse]:
        if self.get(company_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Company not found")
        obj = Warehouse(company_id=company_id, name=data.name.strip(), location=data.location)
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return Ok(obj)

    def list_warehouses(self, company_id: int) -> Result[list[Warehouse]]:
        if self.get(company_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Company not found")
        rows = self.db.scalars(
            select(Warehouse).where(Warehouse.company_id == company_id).order_by(Warehouse.id)
        )
        return Ok(list(rows))


class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def _validate(self, data: ProductCreate) -> Optional[Err]:
        if data.price < 0:
            return Err(ErrorKind.INVALID_INPUT, "Price cannot be negative")
        # Numeric(12, 2) bound; must precede quantize, which raises past 28 digits
        if data.price > MAX_PRICE:
            return Err(ErrorKind.INVALID_INPUT, f"Price cannot exceed {MAX_PRICE}")
        if data.price != data.price.quantize(Decimal("0.01")):
            return Err(ErrorKind.INVALID_INPUT, "Price cannot have more than 2 decimal places")
        if data.initial_quantity < 0:
            return Err(ErrorKind.INVALID_INPUT, "Initial quantity cannot be negative")
        if data.low_stock_threshold < 0:
            return Err(ErrorKind.INVALID_INPUT, "Low stock threshold cannot be negative")
        if not data.name.strip() or not data.sku.strip():
            return Err(ErrorKind.INVALID_INPUT, "Name and SKU cannot be blank")
        return None

    def create(self, data: ProductCreate) -> Result[Product]:
        """Create a product with its initial stock in one warehouse, atomically."""
        invalid = self._validate(data)
        if invalid is not None:
            return invalid

        sku = data.sku.strip().upper()
        if self.db.get(Warehouse, data.warehouse_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Warehouse not found")
        if self.db.scalar(select(Product.id).where(Product.sku == sku)) is not None:
            return Err(ErrorKind.CONFLICT, f"SKU {sku} already exists")

        product = Product(
            sku=sku,
            name=data.name.strip(),
            description=data.description,
            price=data.price,
            low_stock_threshold=data.low_stock_threshold,
            is_bundle=data.is_bundle,
        )
        inventory = Inventory(product=product, warehouse_id=data.warehouse_id, quantity=data.initial_quantity)
        self.db.add_all([product, inventory])
        try:
            self.db.flush()  # assign ids
            self.db.add(InventoryHistory(
                inventory_id=inventory.id,
                product_id=product.id,
                change_type="initial",
                quantity_change=data.initial_quantity,
                quantity_after=data.initial_quantity,
            ))
            self.db.commit()
        except IntegrityError:
            # Lost a race on the unique SKU
            self.db.rollback()
            logger.warning(f"Product insert conflicted for sku {sku}")
            return Err(ErrorKind.CONFLICT, f"SKU {sku} already exists")

        self.db.refresh(product)
        logger.info(
            "Product created",
            extra={'extra_fields': {'product_id': product.id, 'sku': sku, 'warehouse_id': data.warehouse_id}}
        )
        return Ok(product)

    def add_bundle_item(self, bundle_id: int, data: BundleItemCreate) -> Result[ProductBundle]:
        bundle = self.get(bundle_id)
        if bundle is None or self.get(data.component_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Product not found")
        if not bundle.is_bundle:
            return Err(ErrorKind.INVALID_INPUT, "Product is not a bundle")
        if bundle_id == data.component_id:
            return Err(ErrorKind.INVALID_INPUT, "A bundle cannot contain itself")

        obj = ProductBundle(bundle_id=bundle_id, component_id=data.component_id, quantity=data.quantity)
        self.db.add(obj)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return Err(ErrorKind.CONFLICT, "Component already in bundle")
        self.db.refresh(obj)
        return Ok(obj)


class SupplierService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, data: SupplierCreate) -> Supplier:
        obj = Supplier(name=data.name.strip(), contact_email=data.contact_email)
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def link_product(self, supplier_id: int, data: SupplierLinkCreate) -> Result[SupplierProduct]:
        if self.db.get(Supplier, supplier_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Supplier not found")
        if self.db.get(Product, data.product_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Product not found")

        obj = SupplierProduct(supplier_id=supplier_id, product_id=data.product_id)
        self.db.add(obj)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return Err(ErrorKind.CONFLICT, "Supplier already linked to product")
        self.db.refresh(obj)
        return Ok(obj)


class InventoryService:
    def __init__(self, db: Session):
        self.db = db

    def adjust(self, data: InventoryAdjustment) -> Result[Inventory]:
        """Apply a stock movement and record it in the inventory history."""
        if self.db.get(Product, data.product_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Product not found")
        if self.db.get(Warehouse, data.warehouse_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Warehouse not found")

        inventory = self.db.scalars(
            select(Inventory).where(
                Inventory.product_id == data.product_id,
                Inventory.warehouse_id == data.warehouse_id,
            )
        ).first()
        if data.change_type == "sale" and data.quantity_change >= 0:
            return Err(ErrorKind.INVALID_INPUT, "A sale must decrease stock")
        current = inventory.quantity if inventory else 0
        new_quantity = current + data.quantity_change
        if new_quantity < 0:
            return Err(ErrorKind.INVALID_INPUT, f"Insufficient stock: {current} on hand")

        if inventory is None:
            inventory = Inventory(product_id=data.product_id, warehouse_id=data.warehouse_id, quantity=0)
            self.db.add(inventory)
            self.db.flush()
        inventory.quantity = new_quantity
        self.db.add(InventoryHistory(
            inventory_id=inventory.id,
            product_id=data.product_id,
            change_type=data.change_type,
            quantity_change=data.quantity_change,
            quantity_after=new_quantity,
            reference=data.reference,
        ))
        self.db.commit()
        self.db.refresh(inventory)
        return Ok(inventory)


class AlertService:
    def __init__(self, db: Session, repository: Optional[SqlInventoryRepository] = None):
        self.db = db
        self.repository = repository or SqlInventoryRepository(db)
        self.window_days = get_settings().SALES_WINDOW_DAYS

    def low_stock_report(self, company_id: int, now: Optional[datetime] = None) -> Result[LowStockReport]:
        """Low-stock alerts across every warehouse of the company.

        Raises AlertComputationError when the report cannot be built.
        """
        if self.db.get(Company, company_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Company not found")

        try:
            warehouses = self.repository.list_warehouses(company_id)
        except DataSourceError as e:
            raise AlertComputationError(f"could not load warehouses for company {company_id}") from e

        now = now or datetime.now(timezone.utc)
        report = compute_low_stock_alerts(
            company_id,
            warehouses,
            self.repository.list_inventory,
            partial(self._sales_in_window, now=now),
            self.repository.find_supplier,
            window_days=self.window_days,
        )
        return Ok(report)

    def _sales_in_window(self, product_id: int, now: datetime) -> int:
        return self.repository.count_recent_sales(product_id, window_days=self.window_days, now=now)
