"""Data models for the Planka agent."""

from planka_agent.models.task import (
    BoardCard,
    CatalogEntity,
    ExistingCard,
    LocalSubtask,
    LocalTask,
    ResolutionResult,
    TaskItem,
    TaskProposal,
)

__all__ = [
    "BoardCard",
    "CatalogEntity",
    "ExistingCard",
    "LocalSubtask",
    "LocalTask",
    "ResolutionResult",
    "TaskItem",
    "TaskProposal",
]
