"""Central structlog configuration for applications embedding the factory."""

import logging
from typing import Literal

import structlog
from structlog.typing import Processor

__all__ = ["setup_logging"]


def setup_logging(
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    show_timestamp: bool = True,
) -> None:
    """Configure structlog and route its output through the standard logging module.

    Args:
        log_level: The minimum level logged by ``beanfactory`` loggers.
        log_format: ``console`` for human readable output, ``json`` for machine readable output.
        show_timestamp: Whether to add a timestamp to each entry.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if show_timestamp:
        processors.insert(
            4,
            structlog.processors.TimeStamper(
                fmt="iso" if log_format == "json" else "%Y-%m-%d %H:%M:%S",
                utc=log_format == "json",
            ),
        )

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger("beanfactory")
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.get_logger(__name__).debug(
        "logging_configured", log_format=log_format, log_level=log_level.upper()
    )
