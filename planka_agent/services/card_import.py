"""Import board cards that have no local task record yet."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from planka_agent.models.task import BoardCard, TaskItem
from planka_agent.services.board import BoardGateway
from planka_agent.services.task_store import TaskStore


logger = logging.getLogger("planka_agent.card_import")

_CHECKLIST_RE = re.compile(r"^\s*[-*]\s*\[([ xX])\]\s+(.+)$", re.MULTILINE)


def checklist_items(description: Optional[str]) -> List[TaskItem]:
    """Markdown checkboxes (``- [ ] foo``, ``* [x] bar``) found in a description."""

    return [
        TaskItem(name=title.strip(), is_completed=mark.lower() == "x")
        for mark, title in _CHECKLIST_RE.findall(description or "")
    ]


def group_by_list(cards: List[BoardCard]) -> Dict[str, List[BoardCard]]:
    grouped: Dict[str, List[BoardCard]] = {}
    for card in cards:
        grouped.setdefault(card.list_name or "Unknown", []).append(card)
    return grouped


async def import_missing_cards(
    board: BoardGateway,
    store: TaskStore,
    *,
    dry_run: bool = False,
    log: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """Add a local task for every active card the store does not know yet.

    Cards without task items get subtasks from the markdown checklist in
    their description. A card that fails to import is counted and logged;
    the remaining cards are still imported.
    """

    log = log or logger
    known = await store.list_tasks()
    known_ids = {task.planka_card_id for task in known if task.planka_card_id}

    cards = [card for card in await board.fetch_all_cards() if not card.is_archived]
    missing = [card for card in cards if card.id not in known_ids]
    grouped = group_by_list(missing)

    result: Dict[str, Any] = {
        "total": len(cards),
        "existing": len(known),
        "missing": len(missing),
        "imported": 0,
        "errors": 0,
        "by_list": {name: [card.name for card in entries] for name, entries in grouped.items()},
        "dry_run": dry_run,
    }
    log.info(f"Board cards: {len(cards)}, local tasks: {len(known)}, to import: {len(missing)}")

    if dry_run or not missing:
        return result

    for list_name, entries in grouped.items():
        log.info(f"Importing from {list_name} ({len(entries)} cards)...")
        for card in entries:
            if not card.task_items:
                items = checklist_items(card.description)
                if items:
                    card = card.model_copy(update={"task_items": items})
            try:
                await store.add_imported_card(card)
            except (OSError, ValueError) as exc:
                result["errors"] += 1
                log.error(f"Failed to import '{card.name}': {exc}")
                continue
            result["imported"] += 1
            log.info(f"Imported '{card.name}'")

    return result
