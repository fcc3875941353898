from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from stockflow.core import get_logger
from stockflow.infrastructure.db import get_db
from stockflow.application.service import (
    AlertService, CompanyService, InventoryService, ProductService, SupplierService, product_view,
)
from stockflow.application.schemas import (
    BundleItemCreate, BundleItemRead, CompanyCreate, CompanyRead, InventoryAdjustment, InventoryRead,
    LowStockReportRead, ProductCreate, ProductRead, SupplierCreate, SupplierLinkCreate, SupplierLinkRead,
    SupplierRead, WarehouseCreate, WarehouseRead,
)
from stockflow.domain.errors import AlertComputationError
from stockflow.domain.results import Err, ErrorKind

logger = get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INVALID_INPUT: 400,
}

def unwrap(result):
    """Return the Ok value or raise the HTTP error matching the Err kind."""
    if isinstance(result, Err):
        raise HTTPException(status_code=STATUS_BY_KIND[result.kind], detail=result.message)
    return result.value


companies_router = APIRouter(prefix="/companies", tags=["companies"])

@companies_router.post("/", response_model=CompanyRead, status_code=201)
def create_company(payload: CompanyCreate, db: Session = Depends(get_db)):
    return CompanyService(db).create(payload)

@companies_router.get("/{company_id}", response_model=CompanyRead)
def get_company(company_id: int, db: Session = Depends(get_db)):
    company = CompanyService(db).get(company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company

@companies_router.post("/{company_id}/warehouses", response_model=WarehouseRead, status_code=201)
def create_warehouse(company_id: int, payload: WarehouseCreate, db: Session = Depends(get_db)):
    return unwrap(CompanyService(db).create_warehouse(company_id, payload))

@companies_router.get("/{company_id}/warehouses", response_model=list[WarehouseRead])
def list_warehouses(company_id: int, db: Session = Depends(get_db)):
    return unwrap(CompanyService(db).list_warehouses(company_id))

@companies_router.get(
    "/{company_id}/alerts/low-stock",
    response_model=LowStockReportRead,
    response_model_exclude_unset=True,
)
def get_low_stock_alerts(company_id: int, db: Session = Depends(get_db)):
    """Products at or below their threshold, grouped by warehouse, for products with recent sales."""
    try:
        report = unwrap(AlertService(db).low_stock_report(company_id))
    except AlertComputationError:
        logger.error(f"Low-stock report failed for company {company_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Unable to compute low-stock alerts")
    return report.to_dict()


products_router = APIRouter(prefix="/products", tags=["products"])

@products_router.post("/", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return product_view(unwrap(ProductService(db).create(payload)))

@products_router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = ProductService(db).get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product_view(product)

@products_router.post("/{product_id}/bundle-items", response_model=BundleItemRead, status_code=201)
def add_bundle_item(product_id: int, payload: BundleItemCreate, db: Session = Depends(get_db)):
    return unwrap(ProductService(db).add_bundle_item(product_id, payload))


suppliers_router = APIRouter(prefix="/suppliers", tags=["suppliers"])

@suppliers_router.post("/", response_model=SupplierRead, status_code=201)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)):
    return SupplierService(db).create(payload)

@suppliers_router.post("/{supplier_id}/products", response_model=SupplierLinkRead, status_code=201)
def link_supplier_product(supplier_id: int, payload: SupplierLinkCreate, db: Session = Depends(get_db)):
    return unwrap(SupplierService(db).link_product(supplier_id, payload))


inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])

@inventory_router.post("/adjustments", response_model=InventoryRead, status_code=201)
def adjust_inventory(payload: InventoryAdjustment, db: Session = Depends(get_db)):
    return unwrap(InventoryService(db).adjust(payload))
