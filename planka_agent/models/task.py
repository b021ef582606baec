"""Task and board models for the Planka agent.

Proposals describe what should be created; catalog entities and board cards
are read-only snapshots of the remote board, fetched fresh per invocation.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskProposal(BaseModel):
    """A task to be created, before any board resolution.

    ``list_id`` takes precedence over ``list_name`` when both are set.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    list_name: Optional[str] = None
    list_id: Optional[str] = None
    labels: List[str] = Field(default_factory=list)
    subtasks: List[str] = Field(default_factory=list)
    due_date: Optional[str] = None


class CatalogEntity(BaseModel):
    """A list or label on the board."""

    id: str
    name: str
    position: float = 0
    color: Optional[str] = None


class TaskItem(BaseModel):
    name: str
    is_completed: bool = False


class BoardCard(BaseModel):
    """An active card on the board together with the name of its list."""

    id: str
    name: str = ""
    description: str = ""
    list_id: Optional[str] = None
    list_name: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    task_items: List[TaskItem] = Field(default_factory=list)


class ResolutionResult(BaseModel):
    """Outcome of resolving a list or label name.

    ``id`` is None only for entities a dry run would create.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    was_created: bool = False


class ExistingCard(BaseModel):
    """A card found by the duplicate check."""

    card_id: str
    local_task_id: Optional[str] = None


class LocalSubtask(BaseModel):
    id: str
    title: str
    completed: bool = False
    created_at: str


class LocalTask(BaseModel):
    """A task record kept in the local tasks.json file."""

    id: str
    title: str
    description: str = ""
    category: str = "backend"
    priority: str = "normal"
    status: str = "pending"
    labels: List[str] = Field(default_factory=list)
    subtasks: List[LocalSubtask] = Field(default_factory=list)
    created_at: str
    updated_at: str
    planka_card_id: Optional[str] = None
    synced: bool = False
