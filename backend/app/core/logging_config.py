"""
Centralized logging configuration for Vodichron HRMS.

JSON lines in production, colored single-line output in development, and an
optional daily-rotated log file when LOG_DIR is configured.
"""

import json
import logging
import logging.handlers
import os
import sys
import time
import traceback
import uuid
from datetime import datetime
from typing import Optional

from app.core.config import settings

_RESERVED_RECORD_KEYS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName",
}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    One object per line so log shippers can parse it without multiline rules.
    """

    def __init__(self, service_name: str = "vodichron-hrms"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": settings.ENVIRONMENT,
            "source": {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for development console output."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        message = f"{color}{timestamp} | {record.levelname:8} | {record.name} | {record.getMessage()}{self.RESET}"

        if record.exc_info:
            message += f"\n{color}{''.join(traceback.format_exception(*record.exc_info)).rstrip()}{self.RESET}"

        return message


def setup_logging(
    service_name: str = "vodichron-hrms",
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    log_dir: Optional[str] = None,
) -> None:
    """
    Configure application logging.

    Args:
        service_name: Name of the service for log identification
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Override JSON logging (True for production, False for development)
        log_dir: Directory for a daily rotated JSON log file; console only when unset
    """
    level = (log_level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)).upper()
    use_json = json_logs if json_logs is not None else (settings.ENVIRONMENT.lower() == "production")
    log_dir = log_dir if log_dir is not None else settings.LOG_DIR

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level))
    if use_json:
        console_handler.setFormatter(JSONFormatter(service_name))
    else:
        console_handler.setFormatter(ColoredFormatter())
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            os.path.join(log_dir, "application.log"),
            when="midnight",
            backupCount=settings.LOG_RETENTION_DAYS,
            encoding="utf-8",
        )
        file_handler.setLevel(getattr(logging, level))
        file_handler.setFormatter(JSONFormatter(service_name))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger("vodichron.logging").info(
        f"Logging configured: level={level}, format={'JSON' if use_json else 'colored'}, "
        f"environment={settings.ENVIRONMENT}"
    )


def generate_request_id() -> str:
    """Generate a short request ID for tracing."""
    return str(uuid.uuid4())[:8]


def _header(scope, name: bytes) -> Optional[str]:
    for key, value in scope.get("headers") or []:
        if key.lower() == name:
            return value.decode("latin-1")
    return None


class RequestLoggingMiddleware:
    """
    ASGI middleware logging every request with status, timing, client IP and user agent.
    """

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger("vodichron.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = generate_request_id()
        started = time.perf_counter()

        scope["state"] = scope.get("state", {})
        scope["state"]["request_id"] = request_id

        response_status = 0

        async def send_wrapper(message):
            nonlocal response_status
            if message["type"] == "http.response.start":
                response_status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            response_status = 500
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            method = scope.get("method", "UNKNOWN")
            path = scope.get("path", "/")

            if path != "/health":
                if response_status >= 500:
                    log_level = logging.ERROR
                elif response_status >= 400:
                    log_level = logging.WARNING
                else:
                    log_level = logging.INFO
                client = scope.get("client")
                self.logger.log(
                    log_level,
                    f"{method} {path} {response_status} {duration_ms:.1f}ms",
                    extra={
                        "request_id": request_id,
                        "method": method,
                        "path": path,
                        "status": response_status,
                        "duration_ms": round(duration_ms, 1),
                        "ip": _header(scope, b"x-forwarded-for") or (client[0] if client else None),
                        "user_agent": _header(scope, b"user-agent"),
                    },
                )
