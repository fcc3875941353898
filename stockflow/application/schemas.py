from pydantic import BaseModel, Field
from typing import Literal, Optional
from decimal import Decimal

ChangeType = Literal["initial", "sale", "restock", "adjustment", "transfer"]


class CompanyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)

class CompanyRead(BaseModel):
    id: int
    name: str
    class Config:
        from_attributes = True


class WarehouseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location: Optional[str] = None

class WarehouseRead(BaseModel):
    id: int
    company_id: int
    name: str
    location: Optional[str] = None
    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    sku: str = Field(min_length=1, max_length=50)
    price: Decimal
    warehouse_id: int
    initial_quantity: int
    low_stock_threshold: int = 10
    description: Optional[str] = None
    is_bundle: bool = False

class StockLevel(BaseModel):
    warehouse_id: int
    quantity: int
    class Config:
        from_attributes = True

class ProductRead(BaseModel):
    id: int
    sku: str
    name: str
    description: Optional[str] = None
    price: Decimal
    low_stock_threshold: int
    is_bundle: bool
    stock: list[StockLevel] = []


class BundleItemCreate(BaseModel):
    component_id: int
    quantity: int = Field(default=1, gt=0)

class BundleItemRead(BaseModel):
    id: int
    bundle_id: int
    component_id: int
    quantity: int
    class Config:
        from_attributes = True


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    contact_email: Optional[str] = None

class SupplierRead(BaseModel):
    id: int
    name: str
    contact_email: Optional[str] = None
    class Config:
        from_attributes = True

class SupplierLinkCreate(BaseModel):
    product_id: int

class SupplierLinkRead(BaseModel):
    id: int
    supplier_id: int
    product_id: int
    class Config:
        from_attributes = True


class InventoryAdjustment(BaseModel):
    product_id: int
    warehouse_id: int
    quantity_change: int
    change_type: ChangeType
    reference: Optional[str] = Field(default=None, max_length=100)

class InventoryRead(BaseModel):
    id: int
    product_id: int
    warehouse_id: int
    quantity: int
    class Config:
        from_attributes = True


class AlertSupplier(BaseModel):
    id: int
    name: str
    contact_email: Optional[str] = None

class LowStockAlertRead(BaseModel):
    product_id: int
    product_name: str
    sku: str
    warehouse_id: int
    warehouse_name: str
    current_stock: int
    threshold: int
    days_until_stockout: int
    # Left unset (and dropped from the response) when the product has no supplier
    supplier: Optional[AlertSupplier] = None

class LowStockReportRead(BaseModel):
    alerts: list[LowStockAlertRead]
    total_alerts: int
