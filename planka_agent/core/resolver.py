"""Name resolution for board lists and labels.

Names given by a user or guessed from text rarely match the board exactly,
so lookups go through tiers that get looser until something matches:

  1. id equals the needle, or name equals it exactly
  2. name equals it ignoring case and surrounding whitespace
  3. name contains it (case-insensitive)
  4. name starts with it (case-insensitive)
"""

from __future__ import annotations

import logging
import re
from typing import Awaitable, Callable, Iterable, Optional

from planka_agent.core.errors import ResolutionNotFoundError
from planka_agent.models.task import CatalogEntity, ResolutionResult


logger = logging.getLogger("planka_agent.resolver")

_ID_LIKE_RE = re.compile(r"^[0-9a-fA-F\-]{6,}$")

CreateFn = Callable[[str], Awaitable[CatalogEntity]]


def looks_like_id(value: Optional[str]) -> bool:
    """True for strings that look like an opaque board id rather than a name."""

    return bool(value) and bool(_ID_LIKE_RE.match(value))


def _normalize_match_text(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def find_entity(catalog: Iterable[CatalogEntity], needle: Optional[str]) -> Optional[CatalogEntity]:
    """Return the first catalog entry matching ``needle``, tier by tier."""

    if not needle:
        return None
    items = [item for item in catalog or [] if item is not None]
    req = _normalize_match_text(needle)

    for item in items:
        if item.id == needle or item.name == needle:
            return item

    if not req:
        return None

    for item in items:
        if item.name and _normalize_match_text(item.name) == req:
            return item

    for item in items:
        if item.name and req in item.name.lower():
            return item

    for item in items:
        if item.name and item.name.lower().startswith(req):
            return item

    return None


async def resolve_or_create(
    catalog: Iterable[CatalogEntity],
    needle: str,
    *,
    entity: str,
    allow_create: bool,
    create_fn: CreateFn,
    accept_ids: bool = True,
    log: Optional[logging.Logger] = None,
) -> ResolutionResult:
    """Resolve ``needle`` to an entity id, creating the entity when allowed.

    With ``accept_ids`` an id-looking needle is returned as-is without a
    lookup. Raises ResolutionNotFoundError when nothing matches and
    ``allow_create`` is False.
    """

    log = log or logger

    if accept_ids and looks_like_id(needle):
        return ResolutionResult(id=needle, name=None, was_created=False)

    found = find_entity(catalog, needle)
    if found is not None:
        log.debug(f"Resolved {entity} '{needle}' to '{found.name}' ({found.id})")
        return ResolutionResult(id=found.id, name=found.name, was_created=False)

    if not allow_create:
        raise ResolutionNotFoundError(entity, needle)

    created = await create_fn(needle)
    log.info(f"Created {entity} '{needle}'")
    return ResolutionResult(id=created.id or None, name=created.name or needle, was_created=True)
