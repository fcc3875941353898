"""
Health checks in the shape of the "Health Check Response Format for HTTP APIs"
draft, with Kubernetes-style liveness / readiness / startup checks
"""

import os
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

import psutil
import redis
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from .logging_config import get_logger

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


class ServiceHealth:
    """Builds the health router for one service bound to one database engine"""

    def __init__(self, service_name: str, version: str, engine: Engine):
        self.service_name = service_name
        self.version = version
        self.engine = engine
        self.start_time = time.time()
        self.checks_performed = 0
        self.last_check_time = None

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health", status_code=status.HTTP_200_OK)
        async def health_check() -> Dict[str, Any]:
            """Basic liveness check, no dependencies touched"""
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "releaseId": os.getenv("RELEASE_ID", "unknown"),
                "timestamp": _now()
            }

        @router.get("/health/live", status_code=status.HTTP_200_OK)
        async def liveness() -> Dict[str, Any]:
            return {"status": "alive"}

        @router.get("/health/ready")
        async def readiness() -> JSONResponse:
            """Readiness check across every dependency"""
            checks = self._perform_readiness_checks()
            overall_status = self._calculate_overall_status(checks)
            status_code = (
                status.HTTP_200_OK
                if overall_status != HealthStatus.FAIL
                else status.HTTP_503_SERVICE_UNAVAILABLE
            )
            return JSONResponse(
                status_code=status_code,
                content={
                    "status": overall_status,
                    "version": self.version,
                    "releaseId": os.getenv("RELEASE_ID", "unknown"),
                    "checks": checks,
                    "serviceId": self.service_name,
                    "description": f"{self.service_name} service",
                    "timestamp": _now()
                }
            )

        @router.get("/health/startup")
        async def startup() -> JSONResponse:
            checks = {"database:migrations": self._check_migrations()}
            if self._calculate_overall_status(checks) == HealthStatus.FAIL:
                return JSONResponse(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    content={"status": "starting", "checks": checks}
                )
            return JSONResponse(content={"status": "started", "checks": checks})

        @router.get("/metrics")
        async def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            memory = process.memory_info()
            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": time.time() - self.start_time,
                "checks_performed": self.checks_performed,
                "timestamp": _now(),
                "system": {
                    "memory_rss_bytes": memory.rss,
                    "memory_vms_bytes": memory.vms,
                    "cpu_percent": process.cpu_percent(),
                    "num_threads": process.num_threads()
                }
            }

        return router

    def _perform_readiness_checks(self) -> Dict[str, Dict[str, Any]]:
        self.checks_performed += 1
        self.last_check_time = time.time()

        checks = {"database:connectivity": self._check_database()}
        if os.getenv("REDIS_URL"):
            checks["cache:connectivity"] = self._check_redis()
        checks["storage:disk_space"] = self._check_disk_space()
        checks["system:memory"] = self._check_memory()
        return checks

    def _check_database(self) -> Dict[str, Any]:
        try:
            start_time = time.time()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            response_time = (time.time() - start_time) * 1000
            return {
                "status": HealthStatus.PASS,
                "componentType": "datastore",
                "observedValue": f"{response_time:.2f}",
                "observedUnit": "ms",
                "time": _now()
            }
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": HealthStatus.FAIL,
                "componentType": "datastore",
                "output": "database unreachable",
                "time": _now()
            }

    def _check_redis(self) -> Dict[str, Any]:
        try:
            start_time = time.time()
            client = redis.from_url(os.getenv("REDIS_URL"), socket_connect_timeout=1)
            client.ping()
            response_time = (time.time() - start_time) * 1000
            return {
                "status": HealthStatus.PASS,
                "componentType": "cache",
                "observedValue": f"{response_time:.2f}",
                "observedUnit": "ms",
                "time": _now()
            }
        except redis.RedisError as e:
            # Cache is optional
            logger.warning(f"Redis health check failed: {e}")
            return {
                "status": HealthStatus.WARN,
                "componentType": "cache",
                "output": "cache unreachable",
                "time": _now()
            }

    def _check_disk_space(self) -> Dict[str, Any]:
        free_gb = psutil.disk_usage('/').free / (1024 ** 3)
        if free_gb < 1:
            status_val = HealthStatus.FAIL
        elif free_gb < 5:
            status_val = HealthStatus.WARN
        else:
            status_val = HealthStatus.PASS
        return {
            "status": status_val,
            "componentType": "system",
            "observedValue": f"{free_gb:.2f}",
            "observedUnit": "GB",
            "time": _now()
        }

    def _check_memory(self) -> Dict[str, Any]:
        available_mb = psutil.virtual_memory().available / (1024 ** 2)
        if available_mb < 100:
            status_val = HealthStatus.FAIL
        elif available_mb < 500:
            status_val = HealthStatus.WARN
        else:
            status_val = HealthStatus.PASS
        return {
            "status": status_val,
            "componentType": "system",
            "observedValue": f"{available_mb:.2f}",
            "observedUnit": "MB",
            "time": _now()
        }

    def _check_migrations(self) -> Dict[str, Any]:
        """Checks that alembic has stamped the database"""
        try:
            exists = inspect(self.engine).has_table("alembic_version")
        except Exception as e:
            logger.error(f"Migration check failed: {e}")
            return {"status": HealthStatus.FAIL, "componentType": "datastore", "time": _now()}
        if exists:
            return {"status": HealthStatus.PASS, "componentType": "datastore", "time": _now()}
        return {
            "status": HealthStatus.WARN,
            "componentType": "datastore",
            "output": "Migrations table not found",
            "time": _now()
        }

    def _calculate_overall_status(self, checks: Dict[str, Dict[str, Any]]) -> HealthStatus:
        statuses = [check.get("status", HealthStatus.PASS) for check in checks.values()]
        if HealthStatus.FAIL in statuses:
            return HealthStatus.FAIL
        if HealthStatus.WARN in statuses:
            return HealthStatus.WARN
        return HealthStatus.PASS
