"""Configuration package for the Planka agent."""

from planka_agent.config.defaults import (
    DEFAULT_LABEL_COLOR,
    DEFAULT_LOCALE,
    DEFAULT_TASK_LIST_NAME,
    IDEMPOTENCY_KEY_LENGTH,
)
from planka_agent.config.settings import PlankaSettings, load_settings

__all__ = [
    "DEFAULT_LABEL_COLOR",
    "DEFAULT_LOCALE",
    "DEFAULT_TASK_LIST_NAME",
    "IDEMPOTENCY_KEY_LENGTH",
    "PlankaSettings",
    "load_settings",
]
