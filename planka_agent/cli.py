"""Command line interface for the Planka agent.

    planka-agent test
    planka-agent list [--pending]
    planka-agent ai-create [-i FILE] [--dry-run] [--no-create] [--idempotency-key KEY]
    planka-agent interpret TEXT [--create] [--no-create] [--locale LOCALE] [--json]
    planka-agent import [--dry-run]

Results are printed to stdout as JSON. Errors go to stderr and the process
exits with status 1.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from planka_agent.config.settings import PlankaSettings, load_settings
from planka_agent.core.create_flow import create_task
from planka_agent.core.errors import PlankaAgentError, ValidationError
from planka_agent.core.interpret_flow import interpret_text
from planka_agent.runtime import open_board, open_store
from planka_agent.services.card_import import import_missing_cards
from planka_agent.utils.logger import configure_logging, generate_run_id, log_info


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _read_input(path: Optional[str]) -> Dict[str, Any]:
    if path and path != "-":
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    else:
        raw = sys.stdin.read()
    if not raw.strip():
        raise ValidationError("input", "No JSON input provided")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError("input", f"Input is not valid JSON: {exc}") from exc


async def _cmd_test(args, settings: PlankaSettings, log) -> Dict[str, Any]:
    board = await open_board(settings, log)
    lists = await board.fetch_lists()
    labels = await board.fetch_labels()
    return {
        "success": True,
        "board_id": settings.board_id,
        "lists": [entry.name for entry in lists],
        "labels": [entry.name for entry in labels],
    }


async def _cmd_list(args, settings: PlankaSettings, log) -> Dict[str, Any]:
    store = open_store(settings, log)
    tasks = await store.pending_tasks() if args.pending else await store.list_tasks()
    return {"success": True, "tasks": [task.model_dump() for task in tasks]}


async def _cmd_ai_create(args, settings: PlankaSettings, log) -> Dict[str, Any]:
    data = _read_input(args.input)
    board = await open_board(settings, log)
    return await create_task(
        data,
        board,
        open_store(settings, log),
        dry_run=args.dry_run,
        no_create=args.no_create,
        idempotency_key=args.idempotency_key,
        locale=settings.locale,
        log=log,
    )


async def _cmd_interpret(args, settings: PlankaSettings, log) -> Dict[str, Any]:
    board = await open_board(settings, log)
    return await interpret_text(
        " ".join(args.text),
        board,
        open_store(settings, log),
        board_id=settings.board_id,
        dry_run=not args.create,
        create=args.create,
        no_create=args.no_create,
        locale=args.locale or settings.locale,
        log=log,
    )


async def _cmd_import(args, settings: PlankaSettings, log) -> Dict[str, Any]:
    board = await open_board(settings, log)
    return await import_missing_cards(board, open_store(settings, log), dry_run=args.dry_run, log=log)


COMMANDS = {
    "test": _cmd_test,
    "list": _cmd_list,
    "ai-create": _cmd_ai_create,
    "interpret": _cmd_interpret,
    "import": _cmd_import,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planka-agent", description="Create Planka cards from agents and scripts.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("test", help="Check the connection to the configured board")

    list_p = subparsers.add_parser("list", help="List local tasks")
    list_p.add_argument("--pending", action="store_true", help="Only tasks not yet synced")

    create_p = subparsers.add_parser("ai-create", help="Create a card from a JSON proposal")
    create_p.add_argument("-i", "--input", help="JSON file with the proposal (default: stdin)")
    create_p.add_argument("--dry-run", action="store_true", help="Show the payload without creating anything")
    create_p.add_argument("--no-create", action="store_true", help="Fail instead of creating missing lists or labels")
    create_p.add_argument("--idempotency-key", help="Key used to detect an earlier creation")

    interpret_p = subparsers.add_parser("interpret", help="Infer a proposal from free text")
    interpret_p.add_argument("text", nargs="+")
    interpret_p.add_argument("--create", action="store_true", help="Create the card instead of only showing the payload")
    interpret_p.add_argument("--no-create", action="store_true", help="Fail instead of creating missing lists or labels")
    interpret_p.add_argument("--locale", help="Locale for numeric dates, e.g. de-DE")
    interpret_p.add_argument("--json", action="store_true", help="Print compact JSON")

    import_p = subparsers.add_parser("import", help="Import board cards missing from tasks.json")
    import_p.add_argument("--dry-run", action="store_true", help="Only report what would be imported")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log = configure_logging(args.verbose)
    run_id = generate_run_id()
    log_info("Running command", logger=log, run_id=run_id, command=args.command)

    try:
        settings = load_settings()
        result = asyncio.run(COMMANDS[args.command](args, settings, log))
    except PlankaAgentError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if getattr(args, "json", False):
        print(json.dumps(result, ensure_ascii=False, default=str))
    else:
        _print_json(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
