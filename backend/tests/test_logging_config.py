"""
Tests for app/core/logging_config.py - formatters, setup and request logging.
"""
import json
import logging
import sys
from unittest.mock import patch

import pytest


def _record(msg="Leave applied", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="vodichron.leaves",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:

    def test_formats_one_json_object(self):
        from app.core.logging_config import JSONFormatter

        data = json.loads(JSONFormatter("hrms-test").format(_record(request_id="abc123")))

        assert data["level"] == "INFO"
        assert data["logger"] == "vodichron.leaves"
        assert data["message"] == "Leave applied"
        assert data["service"] == "hrms-test"
        assert data["source"]["line"] == 10
        assert data["extra"] == {"request_id": "abc123"}

    def test_includes_exception_details(self):
        from app.core.logging_config import JSONFormatter

        try:
            raise ValueError("bad allocation")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(_record(level=logging.ERROR, exc_info=exc_info)))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad allocation"
        assert "extra" not in data


class TestColoredFormatter:

    def test_wraps_line_in_level_color(self):
        from app.core.logging_config import ColoredFormatter

        line = ColoredFormatter().format(_record(level=logging.WARNING))

        assert line.startswith(ColoredFormatter.COLORS["WARNING"])
        assert line.endswith(ColoredFormatter.RESET)
        assert "WARNING" in line and "vodichron.leaves | Leave applied" in line


class TestSetupLogging:

    def test_json_console_and_rotating_file(self, restore_root_logger, tmp_path):
        from app.core.logging_config import JSONFormatter, setup_logging

        setup_logging(log_level="warning", json_logs=True, log_dir=str(tmp_path))

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert len(root.handlers) == 2
        assert all(isinstance(h.formatter, JSONFormatter) for h in root.handlers)
        assert (tmp_path / "application.log").exists()

    def test_colored_console_only(self, restore_root_logger):
        from app.core.logging_config import ColoredFormatter, setup_logging

        setup_logging(log_level="DEBUG", json_logs=False, log_dir="")

        root = restore_root_logger
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ColoredFormatter)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestRequestLoggingMiddleware:

    @staticmethod
    def _scope(path):
        return {
            "type": "http",
            "method": "GET",
            "path": path,
            "headers": [(b"user-agent", b"pytest"), (b"x-forwarded-for", b"10.0.0.7")],
            "client": ("127.0.0.1", 5000),
        }

    @staticmethod
    def _app(status):
        async def app(scope, receive, send):
            await send({"type": "http.response.start", "status": status, "headers": []})
            await send({"type": "http.response.body", "body": b""})
        return app

    @staticmethod
    async def _noop_send(message):
        return None

    @pytest.mark.asyncio
    async def test_logs_client_errors_as_warning(self):
        from app.core.logging_config import RequestLoggingMiddleware

        middleware = RequestLoggingMiddleware(self._app(404))
        scope = self._scope("/api/leaves/missing")
        with patch.object(middleware.logger, "log") as log:
            await middleware(scope, None, self._noop_send)

        level, message = log.call_args.args
        extra = log.call_args.kwargs["extra"]
        assert level == logging.WARNING
        assert message.startswith("GET /api/leaves/missing 404")
        assert extra["ip"] == "10.0.0.7"
        assert extra["user_agent"] == "pytest"
        assert scope["state"]["request_id"] == extra["request_id"]

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self):
        from app.core.logging_config import RequestLoggingMiddleware

        middleware = RequestLoggingMiddleware(self._app(200))
        with patch.object(middleware.logger, "log") as log:
            await middleware(self._scope("/health"), None, self._noop_send)

        log.assert_not_called()

    @pytest.mark.asyncio
    async def test_exception_logged_as_server_error(self):
        from app.core.logging_config import RequestLoggingMiddleware

        async def failing(scope, receive, send):
            raise RuntimeError("boom")

        middleware = RequestLoggingMiddleware(failing)
        with patch.object(middleware.logger, "log") as log:
            with pytest.raises(RuntimeError):
                await middleware(self._scope("/api/employees"), None, self._noop_send)

        assert log.call_args.args[0] == logging.ERROR
        assert log.call_args.kwargs["extra"]["status"] == 500
