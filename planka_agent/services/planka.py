"""Planka REST API client for the Planka agent.

Async helpers for the handful of Planka endpoints the agent needs. Every
call opens a short-lived httpx client; transport errors and non-2xx answers
are raised as RemoteCallError so the flows above can pass them through.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from planka_agent.config.defaults import DEFAULT_HTTP_TIMEOUT, DEFAULT_POSITION
from planka_agent.config.settings import PlankaSettings
from planka_agent.core.errors import RemoteCallError
from planka_agent.models.task import BoardCard, CatalogEntity, TaskItem
from planka_agent.services.board import BoardGateway


logger = logging.getLogger("planka_agent.planka")


def _item(body: Any) -> Any:
    """Unwrap Planka's ``{"item": ...}`` envelope."""

    if isinstance(body, dict) and "item" in body:
        return body["item"]
    return body


def _as_id(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _sorted_entities(raw: List[Dict[str, Any]], with_color: bool = False) -> List[CatalogEntity]:
    entities = []
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        entities.append(
            CatalogEntity(
                id=str(entry.get("id")),
                name=str(entry.get("name")),
                position=entry.get("position") or 0,
                color=entry.get("color") if with_color else None,
            )
        )
    return sorted(entities, key=lambda e: e.position)


class PlankaClient(BoardGateway):
    """Board gateway backed by the Planka REST API."""

    def __init__(
        self,
        base_url: str,
        board_id: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._board_id = board_id
        self.username = username
        self.password = password
        self.timeout = timeout
        self.token: Optional[str] = None
        self._transport = transport
        self._log = log or logger

    @classmethod
    def from_settings(cls, settings: PlankaSettings, log: Optional[logging.Logger] = None) -> "PlankaClient":
        return cls(
            base_url=settings.base_url,
            board_id=settings.board_id,
            username=settings.username,
            password=settings.password,
            timeout=settings.http_timeout,
            log=log,
        )

    @property
    def board_id(self) -> str:
        return self._board_id

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method, f"{self.base_url}{path}", json=json_body, headers=self._headers())
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            self._log.error(f"{operation} failed: HTTP {status}")
            raise RemoteCallError(operation, f"HTTP {status}", status_code=status, body=exc.response.text) from exc
        except httpx.RequestError as exc:
            self._log.error(f"{operation} failed: {exc!r}")
            raise RemoteCallError(operation, f"HTTP_ERROR: {exc!r}") from exc

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteCallError(operation, "response is not JSON", status_code=resp.status_code) from exc

    async def authenticate(self) -> bool:
        """Request an access token and attach it to subsequent calls.

        A 2xx answer without a token still counts as success; some servers
        hand out a cookie instead.
        """

        if not self.username or not self.password:
            raise RemoteCallError("authenticate", "No username/password provided for authentication")

        self._log.info("Authenticating with Planka...")
        body = await self._request(
            "authenticate",
            "POST",
            "/access-tokens?withHttpOnlyToken=false",
            {"emailOrUsername": self.username, "password": self.password},
        )

        token = None
        if isinstance(body, dict):
            token = body.get("item") or body.get("accessToken") or body.get("token")
        if isinstance(token, str) and token:
            self.token = token
            self._log.info("Authentication successful (token attached)")
        else:
            self._log.info("Authentication successful (no token returned)")
        return True

    async def get_board(self) -> Dict[str, Any]:
        body = await self._request("get_board", "GET", f"/boards/{self.board_id}")
        return body if isinstance(body, dict) else {}

    async def _included(self) -> Dict[str, Any]:
        board = await self.get_board()
        included = board.get("included")
        return included if isinstance(included, dict) else {}

    async def fetch_lists(self) -> List[CatalogEntity]:
        included = await self._included()
        return _sorted_entities(included.get("lists") or [])

    async def fetch_labels(self) -> List[CatalogEntity]:
        included = await self._included()
        return _sorted_entities(included.get("labels") or [], with_color=True)

    async def fetch_all_cards(self) -> List[BoardCard]:
        included = await self._included()
        lists = {str(item.get("id")): item for item in included.get("lists") or [] if isinstance(item, dict)}
        task_lists = [tl for tl in included.get("taskLists") or [] if isinstance(tl, dict)]
        tasks = [t for t in included.get("tasks") or [] if isinstance(t, dict)]

        cards: List[BoardCard] = []
        for card in included.get("cards") or []:
            if not isinstance(card, dict) or card.get("isArchived"):
                continue
            card_id = str(card.get("id"))
            list_id = _as_id(card.get("listId"))
            list_entry = lists.get(list_id or "") or {}
            card_task_list_ids = {str(tl.get("id")) for tl in task_lists if str(tl.get("cardId")) == card_id}
            items = [
                TaskItem(name=str(t.get("name") or ""), is_completed=bool(t.get("isCompleted")))
                for t in tasks
                if str(t.get("taskListId")) in card_task_list_ids
            ]
            cards.append(
                BoardCard(
                    id=card_id,
                    name=str(card.get("name") or ""),
                    description=str(card.get("description") or ""),
                    list_id=list_id,
                    list_name=list_entry.get("name"),
                    is_archived=False,
                    created_at=card.get("createdAt"),
                    updated_at=card.get("updatedAt"),
                    task_items=items,
                )
            )
        return cards

    async def create_list(self, name: str) -> CatalogEntity:
        body = await self._request(
            "create_list",
            "POST",
            f"/boards/{self.board_id}/lists",
            {"type": "active", "position": DEFAULT_POSITION, "name": name},
        )
        item = _item(body) or {}
        self._log.info(f"Created list '{name}' in board {self.board_id}")
        return CatalogEntity(id=str(item.get("id")), name=str(item.get("name") or name), position=item.get("position") or 0)

    async def create_label(self, name: str, color: Optional[str]) -> CatalogEntity:
        body = await self._request(
            "create_label",
            "POST",
            f"/boards/{self.board_id}/labels",
            {"name": name, "color": color, "position": DEFAULT_POSITION},
        )
        item = _item(body) or {}
        return CatalogEntity(
            id=str(item.get("id")),
            name=str(item.get("name") or name),
            position=item.get("position") or 0,
            color=item.get("color") or color,
        )

    async def create_card(self, list_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "type": "project",
            "name": payload.get("title"),
            "description": payload.get("description") or payload.get("title"),
            "position": payload.get("position") or DEFAULT_POSITION,
        }
        body.update(payload)
        result = await self._request("create_card", "POST", f"/lists/{list_id}/cards", body)
        return _item(result) or {}

    async def create_task_list(self, card_id: str, name: str) -> Dict[str, Any]:
        result = await self._request(
            "create_task_list",
            "POST",
            f"/cards/{card_id}/task-lists",
            {"name": name, "position": DEFAULT_POSITION, "isShownOnCard": True},
        )
        return _item(result) or {}

    async def create_task_item(self, task_list_id: str, title: str, completed: bool = False) -> Dict[str, Any]:
        result = await self._request(
            "create_task_item",
            "POST",
            f"/task-lists/{task_list_id}/tasks",
            {"name": title, "isCompleted": completed, "position": DEFAULT_POSITION},
        )
        return _item(result) or {}
