"""
Structured logging configuration
JSON records with request context, suitable for ELK / CloudWatch Insights
"""

import json
import logging
import logging.handlers
import os
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

# Context variables for request tracking
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


class StructuredFormatter(logging.Formatter):
    """JSON structured logging formatter"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "@timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": os.getenv('SERVICE_NAME', 'stockflow'),
            "environment": os.getenv('ENVIRONMENT', 'development'),
            "version": os.getenv('SERVICE_VERSION', '1.0.0'),
        }

        trace_context = self._get_trace_context()
        if trace_context:
            log_obj["trace"] = trace_context

        log_obj["location"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
            "module": record.module
        }

        if record.exc_info:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info)
            }

        # Custom fields passed via extra={'extra_fields': {...}}
        if hasattr(record, 'extra_fields'):
            log_obj["custom"] = record.extra_fields

        if hasattr(record, 'duration_ms'):
            log_obj["performance"] = {
                "duration_ms": record.duration_ms
            }

        return json.dumps(log_obj, default=str)

    def _get_trace_context(self) -> Optional[Dict[str, Any]]:
        context = {}
        request_id = request_id_var.get()
        if request_id:
            context["request_id"] = request_id
        correlation_id = correlation_id_var.get()
        if correlation_id:
            context["correlation_id"] = correlation_id
        return context or None


class PerformanceFilter(logging.Filter):
    """Converts a `duration` attribute (seconds) into `duration_ms`"""

    def filter(self, record: logging.LogRecord) -> bool:
        if hasattr(record, 'duration'):
            record.duration_ms = record.duration * 1000
        return True


class SecurityFilter(logging.Filter):
    """Redacts sensitive keywords from log messages"""

    SENSITIVE_FIELDS = [
        'password', 'token', 'api_key', 'secret',
        'authorization', 'cookie', 'session'
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if not isinstance(record.msg, str):
            return True
        lowered = record.msg.lower()
        for field in self.SENSITIVE_FIELDS:
            if f"{field}=" in lowered:
                record.msg = record.msg.replace(f"{field}=", f"{field}=***REDACTED*** ")
        return True


def setup_logging(
    service_name: str,
    level: str = "INFO",
    enable_console: bool = True,
    enable_file: bool = False,
    log_file: str = None
) -> None:
    """
    Setup structured logging for the service

    Args:
        service_name: Name reported in every record
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Enable stdout output
        enable_file: Enable rotating file output
        log_file: Path to log file
    """
    os.environ['SERVICE_NAME'] = service_name

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = []

    formatter = StructuredFormatter()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(PerformanceFilter())
        console_handler.addFilter(SecurityFilter())
        root_logger.addHandler(console_handler)

    if enable_file and log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(PerformanceFilter())
        file_handler.addFilter(SecurityFilter())
        root_logger.addHandler(file_handler)

    logging.getLogger('uvicorn').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={
            'extra_fields': {
                'service': service_name,
                'level': level,
                'handlers': {
                    'console': enable_console,
                    'file': enable_file
                }
            }
        }
    )


class LoggerAdapter(logging.LoggerAdapter):
    """Injects the current request context into every record"""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra', {})

        request_id = request_id_var.get()
        if request_id:
            extra['request_id'] = request_id

        correlation_id = correlation_id_var.get()
        if correlation_id:
            extra['correlation_id'] = correlation_id

        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: str) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name), {})


def set_request_context(
    request_id: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> None:
    if request_id:
        request_id_var.set(request_id)
    if correlation_id:
        correlation_id_var.set(correlation_id)


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request and response
    Assigns a request ID (or reuses X-Request-ID) and tracks duration
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        correlation_id = request.headers.get('X-Correlation-ID')

        set_request_context(
            request_id=request_id,
            correlation_id=correlation_id
        )

        logger = get_logger(__name__)
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                'extra_fields': {
                    'method': request.method,
                    'path': request.url.path,
                    'client_host': request.client.host if request.client else None
                }
            }
        )

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                exc_info=True,
                extra={
                    'duration': time.time() - start_time,
                    'extra_fields': {
                        'method': request.method,
                        'path': request.url.path
                    }
                }
            )
            raise

        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                'duration': time.time() - start_time,
                'extra_fields': {
                    'method': request.method,
                    'path': request.url.path,
                    'status_code': response.status_code
                }
            }
        )
        response.headers['X-Request-ID'] = request_id
        return response
