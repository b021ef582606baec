"""Utility helpers for the Planka agent."""

from planka_agent.utils.logger import (
    configure_logging,
    generate_run_id,
    get_logger,
    log_error,
    log_info,
    log_warn,
)

__all__ = [
    "configure_logging",
    "generate_run_id",
    "get_logger",
    "log_error",
    "log_info",
    "log_warn",
]
