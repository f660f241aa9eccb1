import logging
import sys
from typing import Optional

import structlog

from bosonnlp.core.config import get_settings

# Chatty transport loggers that only matter when debugging the HTTP stack itself.
NOISY_LOGGERS = ("httpx", "httpcore")


def _shared_processors(level: str) -> list:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if level == "DEBUG":
        processors.append(structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ))
    return processors


def _has_stdout_handler(logger: logging.Logger) -> bool:
    return any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stdout
        for h in logger.handlers
    )


def setup_logging(log_level: Optional[str] = None, json_logs: bool = True) -> None:
    """Configures structlog on top of stdlib logging for applications using the SDK.

    The library itself never calls this. ``json_logs=False`` switches to
    structlog's console renderer for local runs.
    """
    level = (log_level or get_settings().LOG_LEVEL).upper()
    processors = _shared_processors(level)

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    if not _has_stdout_handler(root_logger):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
            ],
        ))
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger("bosonnlp").info("Logging configured", log_level=level, json_logs=json_logs)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """structlog logger backed by the stdlib logger ``name``.

    Output follows whatever the host application configured (or
    :func:`setup_logging`); unconfigured applications see nothing.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)
