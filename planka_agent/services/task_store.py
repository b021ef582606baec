"""Local task records for the Planka agent.

Tasks created through the agent (or imported from the board) are kept in a
tasks.json file next to the project, together with the id of the Planka
card they were synced to. The file is rewritten on every change.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

from planka_agent.models.task import BoardCard, LocalSubtask, LocalTask, TaskProposal


logger = logging.getLogger("planka_agent.task_store")

FILE_VERSION = "1.0.0"


def _now_iso() -> str:
    return datetime.now().isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


def _subtasks(titles: Iterable[str], completed: Optional[Iterable[bool]] = None) -> List[LocalSubtask]:
    flags = list(completed) if completed is not None else []
    created = _now_iso()
    return [
        LocalSubtask(id=_new_id(), title=title, completed=flags[i] if i < len(flags) else False, created_at=created)
        for i, title in enumerate(titles)
    ]


class TaskStore:
    """JSON-file backed list of LocalTask records."""

    def __init__(self, path: str, board_id: Optional[str] = None, log: Optional[logging.Logger] = None) -> None:
        if not path:
            raise ValueError("Invalid file path for tasks.json")
        self.path = Path(path)
        self.board_id = board_id
        self.tasks: List[LocalTask] = []
        self.last_sync: Optional[str] = None
        self._lock = Lock()
        self._loaded = False
        self._log = log or logger

    def _load_from_disk(self) -> None:
        if not self.path.exists():
            # Written on the first change only.
            self.tasks = []
            self.last_sync = None
            return

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")

        self.tasks = [LocalTask.model_validate(entry) for entry in data.get("tasks") or []]
        self.last_sync = data.get("lastSync")

    def _save_to_disk(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data: Dict[str, Any] = {
            "tasks": [task.model_dump() for task in self.tasks],
            "lastSync": self.last_sync,
            "metadata": {
                "version": FILE_VERSION,
                "description": "Task management for Planka integration",
                "boardId": self.board_id or os.getenv("PLANKA_BOARD_ID"),
            },
        }
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    async def load(self) -> List[LocalTask]:
        with self._lock:
            self._load_from_disk()
            self._loaded = True
            return list(self.tasks)

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.load()

    def _find(self, task_id: str) -> LocalTask:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise KeyError(f"Task with ID {task_id} not found")

    async def find_by_remote_id(self, card_id: str) -> Optional[LocalTask]:
        await self._ensure_loaded()
        for task in self.tasks:
            if task.planka_card_id and str(task.planka_card_id) == str(card_id):
                return task
        return None

    async def record_task(self, proposal: TaskProposal) -> LocalTask:
        """Store a new, not yet synced task for ``proposal``."""

        await self._ensure_loaded()
        now = _now_iso()
        task = LocalTask(
            id=_new_id(),
            title=proposal.title,
            description=proposal.description or "",
            labels=list(proposal.labels),
            subtasks=_subtasks(proposal.subtasks),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self.tasks.append(task)
            self._save_to_disk()
        self._log.info(f"Task added: '{task.title}'")
        if task.subtasks:
            self._log.info(f"With {len(task.subtasks)} subtasks")
        return task

    async def mark_synced(self, task_id: str, card_id: str) -> LocalTask:
        await self._ensure_loaded()
        with self._lock:
            task = self._find(task_id)
            task.planka_card_id = str(card_id)
            task.synced = True
            task.updated_at = _now_iso()
            self.last_sync = task.updated_at
            self._save_to_disk()
        return task

    async def add_imported_card(self, card: BoardCard) -> LocalTask:
        """Store a board card that has no local record yet, already synced."""

        await self._ensure_loaded()
        list_name = card.list_name or "Unknown"
        task = LocalTask(
            id=_new_id(),
            title=card.name,
            description=card.description or "",
            category=list_name.lower(),
            priority="medium",
            status="todo",
            subtasks=_subtasks(
                [item.name for item in card.task_items],
                [item.is_completed for item in card.task_items],
            ),
            created_at=card.created_at or _now_iso(),
            updated_at=card.updated_at or _now_iso(),
            planka_card_id=card.id,
            synced=True,
        )
        with self._lock:
            self.tasks.append(task)
            self._save_to_disk()
        return task

    async def list_tasks(self) -> List[LocalTask]:
        await self._ensure_loaded()
        return list(self.tasks)

    async def pending_tasks(self) -> List[LocalTask]:
        """Tasks not yet synced to Planka."""

        await self._ensure_loaded()
        return [task for task in self.tasks if not task.synced]
