"""Wiring shared by the CLI and the HTTP API.

Builds the Planka client and the local task store from PlankaSettings, and
turns package errors into the result dicts both surfaces report.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from planka_agent.config.settings import PlankaSettings
from planka_agent.core.errors import PlankaAgentError
from planka_agent.services.planka import PlankaClient
from planka_agent.services.task_store import TaskStore


logger = logging.getLogger("planka_agent.runtime")


async def open_board(settings: PlankaSettings, log: Optional[logging.Logger] = None) -> PlankaClient:
    """Return an authenticated client for the configured board."""

    log = log or logger
    client = PlankaClient.from_settings(settings, log=log)
    if settings.username and settings.password:
        await client.authenticate()
    else:
        log.warning("No Planka credentials configured, calling the API unauthenticated")
    return client


def open_store(settings: PlankaSettings, log: Optional[logging.Logger] = None) -> TaskStore:
    return TaskStore(settings.tasks_path, board_id=settings.board_id, log=log)


def error_result(exc: PlankaAgentError) -> Dict[str, Any]:
    result: Dict[str, Any] = {"success": False, "error": exc.code, "message": str(exc)}
    for attr in ("field", "entity", "operation", "status_code"):
        value = getattr(exc, attr, None)
        if value is not None:
            result[attr] = value
    return result
