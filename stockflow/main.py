"""
StockFlow inventory service
Companies, warehouses, products, suppliers and low-stock alerting
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
import subprocess

from stockflow.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from stockflow.core_settings import get_settings
from stockflow.api.routes import companies_router, products_router, suppliers_router, inventory_router
from stockflow.infrastructure.db import engine, init_models

settings = get_settings()
SERVICE_DESCRIPTION = "Inventory management service"
PROJECT_ROOT = Path(__file__).resolve().parent.parent

setup_logging(
    service_name=settings.SERVICE_NAME,
    level=settings.LOG_LEVEL,
    enable_file=bool(settings.LOG_FILE),
    log_file=settings.LOG_FILE
)

logger = get_logger(__name__)

def run_migrations() -> None:
    logger.info("Running database migrations")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            check=False
        )
    except OSError as e:
        logger.warning(f"Could not run alembic: {e}")
        return
    if result.returncode != 0:
        logger.warning(f"Migration output: {result.stderr}")
    else:
        logger.info("Database migrations completed")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    logger.info(f"Starting {settings.SERVICE_NAME} version {settings.SERVICE_VERSION}")

    if settings.RUN_MIGRATIONS:
        run_migrations()

    try:
        init_models()
        logger.info("Database models initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database models: {e}")
        raise

    logger.info(f"{settings.SERVICE_NAME} started successfully")
    yield
    logger.info(f"Shutting down {settings.SERVICE_NAME}")

app = FastAPI(
    title=settings.SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

health_service = ServiceHealth(settings.SERVICE_NAME, settings.SERVICE_VERSION, engine)
app.include_router(health_service.create_health_router())

app.include_router(companies_router)
app.include_router(products_router)
app.include_router(suppliers_router)
app.include_router(inventory_router)

@app.get("/")
async def root():
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }

@app.get("/info")
async def info():
    """Service information endpoint"""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "description": SERVICE_DESCRIPTION,
        "environment": settings.ENVIRONMENT,
        "endpoints": {
            "health": "/health",
            "ready": "/health/ready",
            "live": "/health/live",
            "metrics": "/metrics",
            "docs": "/api/docs",
            "low_stock_alerts": "/companies/{company_id}/alerts/low-stock"
        }
    }
