"""
Tests for logging setup driven by the logging view.
"""

import io
import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from fuco.config import ConfigResolver, LoggingConfig
from fuco.observability import (
    JsonFormatter,
    PrettyColoredFormatter,
    build_formatter,
    resolve_level,
    setup_logging
)


class TestResolveLevel:

    @pytest.mark.parametrize("name, level", [
        ("info", logging.INFO),
        ("DEBUG", logging.DEBUG),
        ("warn", logging.WARNING),
        ("error", logging.ERROR),
    ])
    def test_known_levels(self, name, level):
        assert resolve_level(name) == level

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            resolve_level("chatty")


class TestFormatters:

    def _record(self, message="line stopped", **extra):
        record = logging.LogRecord("fuco.test", logging.INFO, __file__, 10, message, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter_includes_extra(self):
        output = JsonFormatter().format(self._record(station="WS-03"))
        data = json.loads(output)

        assert data["level"] == "INFO"
        assert data["logger"] == "fuco.test"
        assert data["msg"] == "line stopped"
        assert data["station"] == "WS-03"

    def test_pretty_formatter_without_colors(self):
        output = PrettyColoredFormatter(use_colors=False).format(self._record())

        assert "\033[" not in output
        assert "| INFO     |" in output
        assert output.endswith("line stopped")

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            build_formatter("xml")


class TestSetupLogging:

    def test_console_only(self, reset_fuco_logger):
        stream = io.StringIO()
        config = LoggingConfig(level="debug", file="", console=True, format="simple")

        logger = setup_logging(config, stream=stream)
        logging.getLogger("fuco.config").debug("resolving sources")

        assert logger is reset_fuco_logger
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert "resolving sources" in stream.getvalue()

    def test_rotating_file_handler(self, reset_fuco_logger, tmp_path):
        log_file = tmp_path / "logs" / "fuco.log"
        config = LoggingConfig(level="info", file=str(log_file), console=False,
                               format="json", maxFiles=3, maxSize="1m")

        logger = setup_logging(config)
        logging.getLogger("fuco.server").info("server started", extra={"port": 8847})

        handler = logger.handlers[0]
        assert isinstance(handler, RotatingFileHandler)
        assert handler.maxBytes == 1024 * 1024
        assert handler.backupCount == 3
        entry = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert entry["msg"] == "server started"
        assert entry["port"] == 8847

    def test_from_resolved_configuration(self, reset_fuco_logger, project_dir, production_environ):
        log_file = project_dir / "var" / "fuco.log"
        resolver = ConfigResolver(base_dir=project_dir, environ={**production_environ, "LOG_FILE": str(log_file)})

        logger = setup_logging(resolver.logging_config())

        assert logger.level == logging.WARNING
        assert [type(h) for h in logger.handlers] == [RotatingFileHandler]
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_reconfigure_replaces_handlers(self, reset_fuco_logger):
        config = LoggingConfig(file="", console=True)

        setup_logging(config, stream=io.StringIO())
        logger = setup_logging(config, stream=io.StringIO())

        assert len(logger.handlers) == 1
