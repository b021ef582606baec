"""Main entrypoint for the Planka agent FastAPI application.

Exposes task creation, interpretation, listing and import over HTTP. Package
errors are mapped to JSON error responses; anything else falls through to
the global handler and becomes a 500.
"""

from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Body
from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from planka_agent.config.settings import load_settings
from planka_agent.core.create_flow import create_task
from planka_agent.core.errors import ConfigError
from planka_agent.core.errors import PlankaAgentError
from planka_agent.core.errors import RemoteCallError
from planka_agent.core.errors import ResolutionNotFoundError
from planka_agent.core.errors import ValidationError
from planka_agent.core.interpret_flow import interpret_text
from planka_agent.runtime import error_result
from planka_agent.runtime import open_board
from planka_agent.runtime import open_store
from planka_agent.services.card_import import import_missing_cards
from planka_agent.utils.logger import configure_logging
from planka_agent.utils.logger import generate_run_id
from planka_agent.utils.logger import log_error
from planka_agent.utils.logger import log_info


load_dotenv()

log = configure_logging()

app = FastAPI(title="Planka Agent", version="0.1.0")

_STATUS_BY_ERROR = {
    ValidationError: 422,
    ResolutionNotFoundError: status.HTTP_404_NOT_FOUND,
    RemoteCallError: status.HTTP_502_BAD_GATEWAY,
    ConfigError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class InterpretRequest(BaseModel):
    text: str
    create: bool = False
    dry_run: bool = True
    no_create: bool = False
    locale: Optional[str] = None


def _start_request(request: Request, action: str) -> str:
    run_id = generate_run_id()
    request.state.run_id = run_id
    log_info(f"Handling {action}", logger=log, run_id=run_id)
    return run_id


@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict:
    """Health check endpoint to verify that the service is running."""

    return {"status": "ok"}


@app.post("/tasks", status_code=status.HTTP_200_OK)
async def create_task_endpoint(
    request: Request,
    proposal: Dict[str, Any] = Body(...),
    dry_run: bool = False,
    no_create: bool = False,
    idempotency_key: Optional[str] = None,
) -> dict:
    _start_request(request, "task creation")
    settings = load_settings()
    board = await open_board(settings, log)
    return await create_task(
        proposal,
        board,
        open_store(settings, log),
        dry_run=dry_run,
        no_create=no_create,
        idempotency_key=idempotency_key,
        locale=settings.locale,
        log=log,
    )


@app.post("/tasks/interpret", status_code=status.HTTP_200_OK)
async def interpret_endpoint(request: Request, body: InterpretRequest) -> dict:
    _start_request(request, "interpret")
    settings = load_settings()
    board = await open_board(settings, log)
    return await interpret_text(
        body.text,
        board,
        open_store(settings, log),
        board_id=settings.board_id,
        dry_run=body.dry_run,
        create=body.create,
        no_create=body.no_create,
        locale=body.locale or settings.locale,
        log=log,
    )


@app.get("/tasks", status_code=status.HTTP_200_OK)
async def list_tasks_endpoint(pending: bool = False) -> dict:
    settings = load_settings()
    store = open_store(settings, log)
    tasks = await store.pending_tasks() if pending else await store.list_tasks()
    return {"success": True, "tasks": [task.model_dump() for task in tasks]}


@app.post("/tasks/import", status_code=status.HTTP_200_OK)
async def import_endpoint(request: Request, dry_run: bool = False) -> dict:
    _start_request(request, "card import")
    settings = load_settings()
    board = await open_board(settings, log)
    return await import_missing_cards(board, open_store(settings, log), dry_run=dry_run, log=log)


@app.exception_handler(PlankaAgentError)
async def planka_agent_error_handler(request: Request, exc: PlankaAgentError):
    run_id = getattr(request.state, "run_id", None)
    log_error("Request failed", logger=log, run_id=run_id, error=str(exc), code=exc.code)

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            status_code = code
            break
    return JSONResponse(status_code=status_code, content=error_result(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for uncaught exceptions.

    Ensures the service returns a 500 JSON error rather than crashing, and
    logs the error together with any run_id associated with the request.
    """

    run_id = getattr(request.state, "run_id", None)
    log_error("Unhandled exception", logger=log, run_id=run_id, error=str(exc))

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )
