"""Configuration loading for the Planka agent.

Settings come from the global config file written by ``planka config``
(``~/.planka-cli/config.json``) and can be overridden by environment
variables, which ``load_dotenv`` may populate from a ``.env`` file.

The config file looks like::

    {
      "authorization": {"PLANKA_API_URL": "...", "PLANKA_USERNAME": "...", "PLANKA_PASSWORD": "..."},
      "default": {"PLANKA_BOARD_ID": "..."},
      "projects": {"/home/me/code/app": {"PLANKA_BOARD_ID": "..."}}
    }

A project entry applies when the working directory lies inside it; the
longest matching directory wins and its ``tasks.json`` is used.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from planka_agent.config.defaults import DEFAULT_HTTP_TIMEOUT, DEFAULT_LOCALE
from planka_agent.core.errors import ConfigError


logger = logging.getLogger("planka_agent.config")

CONFIG_DIR_NAME = ".planka-cli"
CONFIG_FILE_NAME = "config.json"
TASKS_FILE_NAME = "tasks.json"


class PlankaSettings(BaseModel):
    """Resolved settings for one invocation."""

    base_url: str
    username: Optional[str] = None
    password: Optional[str] = None
    board_id: str
    tasks_path: str
    locale: str = DEFAULT_LOCALE
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def default_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def normalize_api_url(url: str) -> str:
    """Strip trailing slashes and make sure the URL ends with ``/api``."""

    base = (url or "").strip().rstrip("/")
    if not base:
        return base
    return base if base.endswith("/api") else f"{base}/api"


def _is_within(cwd: Path, project_dir: Path) -> bool:
    try:
        cwd.relative_to(project_dir)
    except ValueError:
        return False
    return True


def find_matching_project(cfg: Optional[Mapping[str, Any]], cwd: str) -> Optional[str]:
    """Return the configured project directory that best contains ``cwd``.

    Chooses the longest matching directory, so a nested project beats its
    parent.
    """

    if not cfg or not isinstance(cfg.get("projects"), dict):
        return None

    cwd_path = Path(cwd).resolve()
    matches = []
    for project_dir in cfg["projects"]:
        resolved = Path(project_dir).resolve()
        if _is_within(cwd_path, resolved):
            matches.append((len(str(resolved)), project_dir))

    if not matches:
        return None
    matches.sort(reverse=True)
    return matches[0][1]


def find_matching_project_board(cfg: Optional[Mapping[str, Any]], cwd: str) -> Optional[str]:
    """Return the PLANKA_BOARD_ID of the best matching project, if any."""

    project_dir = find_matching_project(cfg, cwd)
    if project_dir is None:
        return None
    entry = cfg["projects"].get(project_dir) or {}
    board_id = entry.get("PLANKA_BOARD_ID")
    return str(board_id) if board_id else None


def load_raw_config(path: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """Read the global config file; None when it is missing."""

    config_path = path or default_config_path()
    if not config_path.exists():
        return None
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {config_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")
    return data


def load_settings(
    cwd: Optional[str] = None,
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> PlankaSettings:
    """Build PlankaSettings from the config file and the environment.

    Raises ConfigError when no API URL or board id can be determined.
    """

    if env is None:
        load_dotenv()
        env = os.environ

    if config_path is None and env.get("PLANKA_CONFIG_PATH"):
        config_path = Path(env["PLANKA_CONFIG_PATH"]).expanduser()
    config_path = config_path or default_config_path()

    raw = load_raw_config(config_path) or {}
    auth = raw.get("authorization") or {}
    default_cfg = raw.get("default") or {}

    working_dir = cwd or os.getcwd()
    project_dir = find_matching_project(raw, working_dir)

    if project_dir is not None:
        board_id = find_matching_project_board(raw, working_dir)
        tasks_path = str(Path(project_dir) / TASKS_FILE_NAME)
        logger.debug(f"Using project board for {project_dir}")
    else:
        board_id = default_cfg.get("PLANKA_BOARD_ID")
        tasks_path = str(config_path.parent / TASKS_FILE_NAME)

    base_url = env.get("PLANKA_API_URL") or auth.get("PLANKA_API_URL") or ""
    board_id = env.get("PLANKA_BOARD_ID") or board_id
    tasks_path = env.get("PLANKA_TASKS_PATH") or tasks_path

    if not base_url:
        raise ConfigError("No Planka API URL configured. Run `planka config` or set PLANKA_API_URL.")
    if not board_id:
        raise ConfigError("No Planka board configured. Set PLANKA_BOARD_ID or add a project entry.")

    timeout_raw = env.get("PLANKA_HTTP_TIMEOUT")
    try:
        http_timeout = float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT
    except ValueError as exc:
        raise ConfigError(f"PLANKA_HTTP_TIMEOUT must be a number, got {timeout_raw!r}") from exc

    return PlankaSettings(
        base_url=normalize_api_url(base_url),
        username=env.get("PLANKA_USERNAME") or auth.get("PLANKA_USERNAME"),
        password=env.get("PLANKA_PASSWORD") or auth.get("PLANKA_PASSWORD"),
        board_id=str(board_id),
        tasks_path=tasks_path,
        locale=env.get("PLANKA_LOCALE") or DEFAULT_LOCALE,
        http_timeout=http_timeout,
    )
