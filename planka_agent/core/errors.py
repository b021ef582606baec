"""Exception types raised by the Planka agent.

ValidationError and ResolutionNotFoundError stop a creation before anything
is written. RemoteCallError comes from the Planka client and is passed up
unchanged; when it is raised after the card was created, the card exists and
its subtasks may be incomplete.
"""

from __future__ import annotations

from typing import Optional


class PlankaAgentError(Exception):
    """Base class for all errors raised by this package."""

    code = "PLANKA_AGENT_ERROR"


class ValidationError(PlankaAgentError):
    """A proposal field is missing or has the wrong type."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class ResolutionNotFoundError(PlankaAgentError):
    """A named list or label does not exist and creating it is not allowed."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, value: Optional[str], message: Optional[str] = None) -> None:
        if message is None:
            message = f"{entity.capitalize()} not found: {value}"
        super().__init__(message)
        self.entity = entity
        self.value = value
        self.message = message


class RemoteCallError(PlankaAgentError):
    """The Planka API could not be reached or answered with an error."""

    code = "REMOTE_ERROR"

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message
        self.status_code = status_code
        self.body = body


class ConfigError(PlankaAgentError):
    """Configuration is missing or unreadable."""

    code = "CONFIG_ERROR"
