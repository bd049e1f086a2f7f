import json
import logging

import pytest
import structlog

from termlauncher.config.models import LoggingConfig
from termlauncher.utils.structlog_configurator import (
    _add_static_context,
    _get_environment_config,
    _use_json,
    configure_structlog,
    get_logger,
)


@pytest.fixture(autouse=True)
def restore_logging():
    """Restore root logger handlers and structlog defaults after each test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()


class TestEnvironmentDetection:
    """Test environment detection functions."""

    def test_development_environment(self, mocker, monkeypatch):
        """Should detect development mode from TERMLAUNCHER_ENV."""
        monkeypatch.setenv("TERMLAUNCHER_ENV", "development")
        mock_sys = mocker.patch("termlauncher.utils.structlog_configurator.sys")
        mock_sys.stderr.isatty.return_value = True

        assert _get_environment_config() == (True, True)

    def test_production_by_default(self, mocker):
        """Should default to production when TERMLAUNCHER_ENV is unset."""
        mock_sys = mocker.patch("termlauncher.utils.structlog_configurator.sys")
        mock_sys.stderr.isatty.return_value = False

        assert _get_environment_config() == (False, False)


class TestOutputFormat:
    """Test JSON versus console rendering selection."""

    @pytest.mark.parametrize(
        "json_logs,is_interactive,expected",
        [
            pytest.param(None, True, False, id="auto-terminal"),
            pytest.param(None, False, True, id="auto-captured"),
            pytest.param(True, True, True, id="forced-json"),
            pytest.param(False, False, False, id="forced-console"),
        ],
    )
    def test_use_json(self, json_logs, is_interactive, expected):
        """Should auto-detect unless the config says which to use."""
        config = LoggingConfig(json_logs=json_logs)

        assert _use_json(config, False, is_interactive) is expected

    def test_development_json_override(self, monkeypatch):
        """Should force JSON in development when TERMLAUNCHER_JSON_LOGS is true."""
        monkeypatch.setenv("TERMLAUNCHER_JSON_LOGS", "true")

        assert _use_json(LoggingConfig(json_logs=False), True, True) is True
        assert _use_json(LoggingConfig(json_logs=False), False, True) is False


class TestConfigureStructlog:
    """Test the full logging setup."""

    def test_add_static_context(self):
        """Should add the static fields to every event."""
        processor = _add_static_context({"service": "termlauncher"})

        event = processor(None, "info", {"event": "hello"})

        assert event == {"event": "hello", "service": "termlauncher"}

    def test_stdlib_records_rendered_as_json(self, capsys, mocker):
        """Should route standard library loggers through the JSON renderer."""
        mocker.patch(
            "termlauncher.utils.structlog_configurator.get_package_version", return_value="2.3.0"
        )
        configure_structlog(LoggingConfig(level="INFO", json_logs=True))

        logging.getLogger("termlauncher.test").info("Configuration saved to %s", "/tmp/c.json")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Configuration saved to /tmp/c.json"
        assert record["level"] == "info"
        assert record["service"] == "termlauncher"
        assert record["version"] == "2.3.0"
        assert record["logger"] == "termlauncher.test"

    def test_level_filters_records(self, capsys):
        """Should drop records below the configured level."""
        configure_structlog(LoggingConfig(level="WARNING", json_logs=True))

        logging.getLogger("termlauncher.test").info("hidden")
        logging.getLogger("termlauncher.test").warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_replaces_existing_handlers(self):
        """Should leave exactly one handler on the root logger."""
        configure_structlog(LoggingConfig(json_logs=True))
        configure_structlog(LoggingConfig(json_logs=True))

        assert len(logging.getLogger().handlers) == 1

    def test_get_logger(self):
        """Should return a structlog logger."""
        configure_structlog(LoggingConfig(json_logs=True))

        logger = get_logger("termlauncher.test")

        assert hasattr(logger, "info")
