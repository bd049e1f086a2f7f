"""Structlog-based logging configuration for TermLauncher.

Standard library loggers used across the package are routed through structlog
so every record carries the same static context. Output is human-readable on a
terminal and JSON otherwise, unless the logging config says which to use.
"""

import logging
import os
import sys
from collections.abc import Callable
from typing import Any

import structlog

from termlauncher.config.models import LoggingConfig
from termlauncher.releases.version import get_package_version


def _add_static_context(extra_fields: dict[str, str]) -> Callable:
    """Processor to add static context fields to all log entries."""

    def processor(
        logger: structlog.BoundLogger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.update(extra_fields)
        return event_dict

    return processor


def _get_environment_config() -> tuple[bool, bool]:
    """Return (is_development, is_interactive) for the current process."""
    is_development = os.environ.get("TERMLAUNCHER_ENV", "production") == "development"
    is_interactive = sys.stderr.isatty()
    return is_development, is_interactive


def _use_json(config: LoggingConfig, is_development: bool, is_interactive: bool) -> bool:
    use_json = config.json_logs
    if use_json is None:
        # Auto-detect: human-readable on a terminal, JSON when captured
        use_json = not is_interactive

    if is_development and os.environ.get("TERMLAUNCHER_JSON_LOGS", "false").lower() == "true":
        use_json = True
    return use_json


def _shared_processors(config: LoggingConfig) -> list:
    extra_fields = {"version": get_package_version(), **config.extra_fields}

    processors = [
        structlog.contextvars.merge_contextvars,
        _add_static_context(extra_fields),
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]

    if config.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())
    return processors


def _configure_handlers(config: LoggingConfig, renderer: Any, shared: list) -> None:
    """Route standard library loggers through a structlog formatter on stderr."""
    root_logger = logging.getLogger()
    log_level = getattr(logging, config.level.upper(), logging.INFO)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(log_level)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def configure_structlog(config: LoggingConfig | None = None) -> None:
    """Configure structlog-based logging system.

    Args:
        config: Logging settings. If None, uses LoggingConfig defaults.
    """
    config = config or LoggingConfig()
    is_development, is_interactive = _get_environment_config()
    use_json = _use_json(config, is_development, is_interactive)

    shared = _shared_processors(config)
    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=is_interactive)
    )

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.level.upper(), logging.INFO)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configure_handlers(config, renderer, shared)

    logger = structlog.get_logger(__name__)
    logger.debug(
        "Structured logging configured",
        log_level=config.level,
        development=is_development,
        json_output=use_json,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)
