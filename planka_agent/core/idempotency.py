"""Duplicate detection for card creation.

A creation carries a short key derived from (title, board id, list name).
The key is written into the card description as a marker, so a retried or
repeated run can find the card it already created. Cards created without a
marker are caught by comparing normalized titles within the same list.

Two different titles may hash to the same key; that risk is accepted in
exchange for a short marker.
"""

from __future__ import annotations

import hashlib
import logging
import re
from typing import Iterable, Optional

from planka_agent.config.defaults import (
    IDEMPOTENCY_FIELD_SEPARATOR,
    IDEMPOTENCY_KEY_LENGTH,
    IDEMPOTENCY_MARKER_PREFIX,
    IDEMPOTENCY_MARKER_SUFFIX,
)
from planka_agent.models.task import BoardCard, ExistingCard
from planka_agent.services.board import BoardGateway
from planka_agent.services.task_store import TaskStore


logger = logging.getLogger("planka_agent.idempotency")


def make_idempotency_key(title: Optional[str], board_id: Optional[str], list_name: Optional[str]) -> str:
    h = hashlib.sha256()
    h.update(str(title or "").encode("utf-8"))
    h.update(IDEMPOTENCY_FIELD_SEPARATOR.encode("utf-8"))
    h.update(str(board_id or "").encode("utf-8"))
    h.update(IDEMPOTENCY_FIELD_SEPARATOR.encode("utf-8"))
    h.update(str(list_name or "").encode("utf-8"))
    return h.hexdigest()[:IDEMPOTENCY_KEY_LENGTH]


def idempotency_marker(key: str) -> str:
    return f"{IDEMPOTENCY_MARKER_PREFIX}{key}{IDEMPOTENCY_MARKER_SUFFIX}"


def append_marker(description: str, key: str) -> str:
    return f"{description}\n\n{idempotency_marker(key)}"


def normalize_for_match(text: Optional[str]) -> str:
    """Lowercase, collapse whitespace and keep only ``[a-z0-9 ]``."""

    t = re.sub(r"\s+", " ", str(text or "").lower())
    return re.sub(r"[^a-z0-9 ]", "", t).strip()


def find_existing_card(
    cards: Iterable[BoardCard],
    key: Optional[str],
    title: str,
    list_id: Optional[str],
    list_name: Optional[str],
) -> Optional[BoardCard]:
    """Return a card that a previous run already created, if any.

    The embedded key marker is checked on all cards first; only then are
    titles compared, restricted to cards in the resolved list (by id) or in
    a list with the requested name.
    """

    cards = list(cards or [])

    if key:
        marker = idempotency_marker(key)
        for card in cards:
            if card.description and marker in card.description:
                return card

    target = normalize_for_match(title)
    wanted_list_name = (list_name or "").lower()
    for card in cards:
        if normalize_for_match(card.name) != target:
            continue
        same_list_id = list_id is not None and card.list_id == list_id
        same_list_name = (card.list_name or "").lower() == wanted_list_name
        if same_list_id or same_list_name:
            return card
    return None


async def check_existing(
    board: BoardGateway,
    store: TaskStore,
    key: Optional[str],
    title: str,
    list_id: Optional[str],
    list_name: Optional[str],
    log: Optional[logging.Logger] = None,
) -> Optional[ExistingCard]:
    """Look for an earlier creation of this task on the board.

    Failures while checking are logged and reported as "nothing found";
    the check must never block a creation.
    """

    log = log or logger
    try:
        cards = await board.fetch_all_cards()
        found = find_existing_card(cards, key, title, list_id, list_name)
        if found is None:
            return None

        local = await store.find_by_remote_id(found.id)
        how = "idempotency key" if key and idempotency_marker(key) in (found.description or "") else "title"
        log.info(f"Found existing card by {how}: {found.id}")
        return ExistingCard(card_id=found.id, local_task_id=local.id if local else None)
    except Exception as exc:  # noqa: BLE001
        log.warning(f"Idempotency check failed: {exc!r}")
        return None
