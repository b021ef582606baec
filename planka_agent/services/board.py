"""Board gateway interface for the Planka agent.

The creation and interpret flows only talk to the board through this
contract, so they can run against the real Planka API or a test double.

Implementations:
- return catalog entities sorted by position,
- return only active (non-archived) cards from fetch_all_cards(),
- raise RemoteCallError for transport and API failures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from planka_agent.models.task import BoardCard, CatalogEntity


class BoardGateway(ABC):
    """Reads and additive writes on a single board."""

    @property
    @abstractmethod
    def board_id(self) -> str:
        """Return the id of the board this gateway works on."""

    @abstractmethod
    async def fetch_lists(self) -> List[CatalogEntity]:
        """Return the lists of the board."""

    @abstractmethod
    async def fetch_labels(self) -> List[CatalogEntity]:
        """Return the labels of the board."""

    @abstractmethod
    async def fetch_all_cards(self) -> List[BoardCard]:
        """Return the active cards of the board with their list names."""

    @abstractmethod
    async def create_list(self, name: str) -> CatalogEntity:
        """Create a list at the end of the board."""

    @abstractmethod
    async def create_label(self, name: str, color: Optional[str]) -> CatalogEntity:
        """Create a board label."""

    @abstractmethod
    async def create_card(self, list_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a card in a list.

        ``payload`` holds ``title``, ``description`` and optionally
        ``labelIds`` and ``dueDate``. Returns the created card as sent back
        by the server (at least an ``id``).
        """

    @abstractmethod
    async def create_task_list(self, card_id: str, name: str) -> Dict[str, Any]:
        """Create a task list on a card."""

    @abstractmethod
    async def create_task_item(self, task_list_id: str, title: str, completed: bool = False) -> Dict[str, Any]:
        """Create a task in a task list."""
