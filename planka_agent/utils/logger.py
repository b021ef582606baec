"""Logging utilities for the Planka agent.

This module centralizes logger configuration for the application. Verbosity
is decided once by the entry points through configure_logging(); components
receive a logger instead of consulting global flags.
"""

import json
import logging
import uuid
from typing import Optional


ROOT_LOGGER_NAME = "planka_agent"

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Install the console handler and set the package log level.

    Returns the package root logger so callers can hand it to components.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format=_LOG_FORMAT)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger below the package namespace.

    ``get_logger("create_flow")`` and ``get_logger("planka_agent.create_flow")``
    return the same logger.
    """

    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def generate_run_id() -> str:
    """Generate a unique identifier for correlating the logs of one invocation."""

    return str(uuid.uuid4())


def _format_structured_message(
    message: str,
    run_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> str:
    """Format a log message as a JSON-like structured string."""

    payload: dict = {"message": message}
    if run_id is not None:
        payload["run_id"] = run_id
    if extra:
        payload["extra"] = extra
    return json.dumps(payload, default=str)


def log_info(
    msg: str,
    logger: Optional[logging.Logger] = None,
    run_id: Optional[str] = None,
    **extra: object,
) -> None:
    """Log an informational message with structured context."""

    (logger or get_logger()).info(_format_structured_message(msg, run_id=run_id, extra=extra or None))


def log_warn(
    msg: str,
    logger: Optional[logging.Logger] = None,
    run_id: Optional[str] = None,
    **extra: object,
) -> None:
    """Log a warning with structured context."""

    (logger or get_logger()).warning(_format_structured_message(msg, run_id=run_id, extra=extra or None))


def log_error(
    msg: str,
    logger: Optional[logging.Logger] = None,
    run_id: Optional[str] = None,
    **extra: object,
) -> None:
    """Log an error with structured context."""

    (logger or get_logger()).error(_format_structured_message(msg, run_id=run_id, extra=extra or None))
