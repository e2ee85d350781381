"""Structured logging for blob_files.

Loggers are structlog wrappers around stdlib loggers under the
``blob_files`` namespace, so a host application that never configures
logging sees nothing: stdlib filters by level and the package logger
carries a ``NullHandler``. :func:`configure_logging` attaches a rendering
handler for scripts and services that want blob_files output.
"""

import logging
import logging.config
import sys

import structlog

PACKAGE_LOGGER = "blob_files"

# Run inside every blob_files logger, before the record reaches stdlib
SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="ISO"),
]

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Send blob_files logs to stdout, rendered by structlog.

    Only the ``blob_files`` logger and the noisy SDK loggers are touched;
    the root logger is left to the host application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Whether to output logs in JSON format
    """
    level = level.upper()
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                # Records from non-structlog loggers (azure, httpx)
                "foreign_pre_chain": [
                    structlog.stdlib.add_logger_name,
                    structlog.stdlib.add_log_level,
                    structlog.processors.TimeStamper(fmt="ISO"),
                ],
            },
        },
        "handlers": {
            "default": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            PACKAGE_LOGGER: {
                "handlers": ["default"],
                "level": level,
                "propagate": False,
            },
            # The Azure SDK logs every HTTP request at INFO
            "azure": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False,
            },
            "httpx": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)

    logger = get_logger("blob_files.logging")
    logger.info("Logging configured", level=level, json_logs=json_logs)


def reset_logging() -> None:
    """Undo :func:`configure_logging`, back to the silent library default."""
    for name in (PACKAGE_LOGGER, "azure", "httpx"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
    logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a specific module.

    The processor chain is bound here rather than through
    ``structlog.configure`` so the host's global structlog setup is
    neither required nor overridden.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger backed by the stdlib logger ``name``
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )
