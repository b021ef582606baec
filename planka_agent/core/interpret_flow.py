"""Turn a free-text request into a creation payload, optionally creating it.

The board's lists and labels are used to pick a target list and to map
guessed labels onto existing label names. Both lookups are best effort: an
unreachable catalog only means nothing is matched.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from planka_agent.config.defaults import DEFAULT_LOCALE, FALLBACK_INTERPRET_LIST_NAME
from planka_agent.core.create_flow import create_task, to_iso_utc
from planka_agent.core.date_interpreter import end_of_day, end_of_next_week, parse_date
from planka_agent.core.errors import ValidationError
from planka_agent.core.extractor import END_OF_NEXT_WEEK, extract, extract_date_phrase
from planka_agent.core.idempotency import make_idempotency_key
from planka_agent.core.resolver import find_entity
from planka_agent.models.task import CatalogEntity
from planka_agent.services.board import BoardGateway
from planka_agent.services.task_store import TaskStore


logger = logging.getLogger("planka_agent.interpret_flow")


def due_date_from_text(
    text: str,
    locale: str = DEFAULT_LOCALE,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Due date mentioned in ``text``, at the end of that day."""

    phrase = extract_date_phrase(text)
    if not phrase:
        return None
    if phrase == END_OF_NEXT_WEEK:
        return end_of_next_week(now)
    parsed = parse_date(phrase, locale, now=now)
    return end_of_day(parsed) if parsed is not None else None


def pick_list_name(lists: List[CatalogEntity], text: str) -> Optional[str]:
    found = find_entity(lists, text) if lists else None
    if found is None:
        found = find_entity(lists, FALLBACK_INTERPRET_LIST_NAME)
    return found.name if found is not None else None


def map_labels(labels: List[CatalogEntity], guessed: List[str]) -> List[str]:
    mapped = []
    for name in guessed:
        found = find_entity(labels, name)
        mapped.append(found.name if found is not None else name)
    return mapped


async def _fetch_catalog(fetch, what: str, log: logging.Logger) -> List[CatalogEntity]:
    try:
        return await fetch()
    except Exception as exc:  # noqa: BLE001
        log.warning(f"Could not fetch {what} for interpret: {exc}")
        return []


async def interpret_text(
    text: str,
    board: BoardGateway,
    store: TaskStore,
    *,
    board_id: Optional[str] = None,
    dry_run: bool = True,
    create: bool = False,
    no_create: bool = False,
    locale: str = DEFAULT_LOCALE,
    log: Optional[logging.Logger] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Infer a creation payload from ``text``.

    Without ``create`` the payload is only returned as
    ``{"simulated": True, "payload": ...}``. With ``create`` it is handed to
    create_task together with its idempotency key, so repeating the same
    request finds the card created the first time.
    """

    log = log or logger
    if not text or not str(text).strip():
        raise ValidationError("text", "No text provided to interpret")

    lists = await _fetch_catalog(board.fetch_lists, "lists", log)
    labels = await _fetch_catalog(board.fetch_labels, "labels", log)

    extracted = extract(text)
    list_name = pick_list_name(lists, text)
    due = due_date_from_text(text, locale, now=now)

    key = make_idempotency_key(extracted.title, board_id or board.board_id, list_name)
    payload: Dict[str, Any] = {
        "title": extracted.title,
        "description": extracted.description,
        "list_name": list_name,
        "labels": map_labels(labels, extracted.labels),
        "subtasks": [],
        "due_date": to_iso_utc(due) if due is not None else None,
        "idempotency_key": key,
    }
    log.debug(f"Interpreted payload: {payload}")

    if not create:
        return {"simulated": True, "payload": payload}

    return await create_task(
        payload,
        board,
        store,
        dry_run=dry_run,
        no_create=no_create,
        idempotency_key=key,
        locale=locale,
        log=log,
        now=now,
    )
