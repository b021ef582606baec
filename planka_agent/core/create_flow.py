"""Non-interactive task creation for agents and scripts.

Input is a proposal-shaped mapping::

    {"title": ..., "description": ..., "listName" | "listId": ...,
     "labels": [name | id, ...], "subtasks": [str, ...], "dueDate": str}

The flow runs strictly in order: validate, resolve the list, resolve the
labels, attach the due date, then either return the dry-run payload or check
for an earlier creation and create the card with its subtasks. Every board
call is awaited before the next one starts. Nothing on the board is ever
modified or deleted, and nothing is rolled back: if a subtask call fails the
card stays on the board.
"""

from __future__ import annotations

import functools
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from planka_agent.config.defaults import DEFAULT_LABEL_COLOR, DEFAULT_LOCALE, DEFAULT_TASK_LIST_NAME
from planka_agent.core.date_interpreter import parse_date, parse_timestamp
from planka_agent.core.errors import RemoteCallError, ResolutionNotFoundError, ValidationError
from planka_agent.core.idempotency import append_marker, check_existing
from planka_agent.core.resolver import resolve_or_create
from planka_agent.models.task import CatalogEntity, ResolutionResult, TaskProposal
from planka_agent.services.board import BoardGateway
from planka_agent.services.task_store import TaskStore


logger = logging.getLogger("planka_agent.create_flow")

# camelCase keys used by JSON callers.
_FIELD_ALIASES = {
    "listName": "list_name",
    "listId": "list_id",
    "dueDate": "due_date",
}


def _canonical_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for key, value in data.items():
        fields[_FIELD_ALIASES.get(key, key)] = value
    return fields


def validate_proposal(data: Union[TaskProposal, Mapping[str, Any], None]) -> TaskProposal:
    """Check the input shape and build a TaskProposal.

    Raises ValidationError naming the first offending field.
    """

    if isinstance(data, TaskProposal):
        data = data.model_dump()
    if not isinstance(data, Mapping):
        raise ValidationError("input", "Input must be an object")

    fields = _canonical_fields(data)

    title = fields.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title", 'Field "title" is required and must be a non-empty string')

    for name in ("description", "list_name", "list_id"):
        value = fields.get(name)
        if value is not None and not isinstance(value, str):
            raise ValidationError(name, f'Field "{name}" must be a string')

    for name, item_label in (("labels", "label"), ("subtasks", "subtask")):
        value = fields.get(name)
        if value is None:
            continue
        if not isinstance(value, (list, tuple)):
            raise ValidationError(name, f'Field "{name}" must be an array of strings')
        for entry in value:
            if not isinstance(entry, str) or not entry.strip():
                raise ValidationError(name, f"Each {item_label} must be a non-empty string")

    due = fields.get("due_date")
    if due is not None and not isinstance(due, str):
        raise ValidationError("due_date", 'Field "due_date" must be a string (ISO or natural language)')

    return TaskProposal(
        title=title,
        description=fields.get("description") or "",
        list_name=fields.get("list_name") or None,
        list_id=fields.get("list_id") or None,
        labels=list(fields.get("labels") or []),
        subtasks=list(fields.get("subtasks") or []),
        due_date=due or None,
    )


def to_iso_utc(value: datetime) -> str:
    """Format like ``2025-10-30T21:59:59.999Z``; naive values are local time."""

    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_due_date(
    due_date: Optional[str],
    locale: str = DEFAULT_LOCALE,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Timestamp first, then the date interpreter; None when neither works."""

    if not due_date:
        return None
    return parse_timestamp(due_date) or parse_date(due_date, locale, now=now)


def _entity_id(entity: Any) -> Optional[str]:
    if isinstance(entity, dict):
        value = entity.get("id") or entity.get("_id")
        return str(value) if value else None
    return str(entity) if entity else None


async def _planned_entity(name: str) -> CatalogEntity:
    # Dry runs report what would be created without calling the board.
    return CatalogEntity(id="", name=name)


async def _resolve_list(
    proposal: TaskProposal,
    board: BoardGateway,
    *,
    allow_create: bool,
    dry_run: bool,
    log: logging.Logger,
) -> ResolutionResult:
    lists = await board.fetch_lists()
    create_fn = _planned_entity if dry_run else board.create_list

    if proposal.list_id:
        return await resolve_or_create(
            lists, proposal.list_id, entity="list", allow_create=allow_create, create_fn=create_fn, log=log
        )

    if proposal.list_name:
        return await resolve_or_create(
            lists,
            proposal.list_name,
            entity="list",
            allow_create=allow_create,
            create_fn=create_fn,
            accept_ids=False,
            log=log,
        )

    if lists:
        return ResolutionResult(id=lists[0].id, name=lists[0].name, was_created=False)

    raise ResolutionNotFoundError(
        "list", None, "This board has no lists. Provide a list name so one can be created."
    )


async def _resolve_labels(
    proposal: TaskProposal,
    board: BoardGateway,
    *,
    allow_create: bool,
    dry_run: bool,
    log: logging.Logger,
) -> List[ResolutionResult]:
    if not proposal.labels:
        return []

    existing = list(await board.fetch_labels())
    if dry_run:
        create_fn = _planned_entity
    else:
        create_fn = functools.partial(board.create_label, color=DEFAULT_LABEL_COLOR)

    results = []
    for label in proposal.labels:
        result = await resolve_or_create(
            existing, label, entity="label", allow_create=allow_create, create_fn=create_fn, log=log
        )
        if result.was_created:
            # Repeated names in one proposal reuse the label just created.
            existing.append(CatalogEntity(id=result.id or "", name=result.name or label))
        results.append(result)
    return results


async def create_task(
    data: Union[TaskProposal, Mapping[str, Any]],
    board: BoardGateway,
    store: TaskStore,
    *,
    dry_run: bool = False,
    no_create: bool = False,
    idempotency_key: Optional[str] = None,
    locale: str = DEFAULT_LOCALE,
    log: Optional[logging.Logger] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Create a card for ``data`` unless it already exists.

    Returns one of:

    - ``{"simulated": True, "payload": {...}}`` for dry runs,
    - ``{"existed": True, "card_id": ..., "local_task_id": ...}`` when an
      earlier creation was found,
    - ``{"card_id": ..., "task_id": ..., "created": {...}}`` otherwise.

    ``no_create`` turns missing lists and labels into ResolutionNotFoundError
    instead of creating them.
    """

    log = log or logger
    proposal = validate_proposal(data)
    allow_create = not no_create

    list_result = await _resolve_list(proposal, board, allow_create=allow_create, dry_run=dry_run, log=log)
    label_results = await _resolve_labels(proposal, board, allow_create=allow_create, dry_run=dry_run, log=log)

    card_data: Dict[str, Any] = {
        "title": proposal.title,
        "description": proposal.description or proposal.title,
        "labelIds": list(dict.fromkeys(r.id for r in label_results if r.id)),
    }
    if idempotency_key:
        card_data["description"] = append_marker(card_data["description"], idempotency_key)

    due = resolve_due_date(proposal.due_date, locale, now=now)
    if due is not None:
        card_data["dueDate"] = to_iso_utc(due)
    elif proposal.due_date:
        log.debug(f"Could not parse due date '{proposal.due_date}', creating card without one")

    if dry_run:
        payload = {
            "list_id": list_result.id,
            "card_data": card_data,
            "subtasks": list(proposal.subtasks),
            "pending_creations": {
                "list": list_result.name if list_result.was_created else None,
                "labels": [r.name for r in label_results if r.was_created],
            },
        }
        log.info(f"Dry run, would create card '{proposal.title}' in list {list_result.id or list_result.name}")
        return {"simulated": True, "payload": payload}

    if idempotency_key:
        existing = await check_existing(
            board, store, idempotency_key, proposal.title, list_result.id, proposal.list_name, log=log
        )
        if existing is not None:
            return {"existed": True, "card_id": existing.card_id, "local_task_id": existing.local_task_id}

    created_card = await board.create_card(list_result.id, card_data)
    card_id = _entity_id(created_card)
    if not card_id:
        raise RemoteCallError("create_card", "response did not contain a card id")

    if proposal.subtasks:
        task_list = await board.create_task_list(card_id, DEFAULT_TASK_LIST_NAME)
        task_list_id = _entity_id(task_list)
        if not task_list_id:
            raise RemoteCallError("create_task_list", "response did not contain a task list id")
        for subtask in proposal.subtasks:
            await board.create_task_item(task_list_id, subtask, False)

    local_task = await store.record_task(proposal)
    await store.mark_synced(local_task.id, card_id)

    log.info(f"Created card {card_id} and saved local task {local_task.id}")
    return {
        "card_id": card_id,
        "task_id": local_task.id,
        "created": {
            "list_created": list_result.was_created,
            "labels_created": [{"id": r.id, "name": r.name} for r in label_results if r.was_created],
            "card_created": True,
        },
    }
