"""Minimal .env loader.

API keys (CONNECTED_PAPERS_API_KEY, SEMANTIC_SCHOLAR_API_KEY) are read from
os.environ; this lets a project-local `.env` supply them without exporting
them in the shell.

Policy:
- No external dependency (no python-dotenv).
- Never overrides already-set environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path


def _find_project_root(start: Path) -> Path:
    cur = start
    while True:
        if (cur / "pyproject.toml").exists():
            return cur
        if cur.parent == cur:
            return Path.cwd()
        cur = cur.parent


def parse_dotenv(text: str) -> dict[str, str]:
    """Parse dotenv text into a dict.

    Rules:
    - Ignores blank lines and comments.
    - Supports optional leading `export `.
    - Supports single/double quoted values (no escape processing beyond stripping quotes).
    """
    values: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if len(value) >= 2 and (
            (value[0] == value[-1] == '"') or (value[0] == value[-1] == "'")
        ):
            value = value[1:-1]
        values[key] = value
    return values


def load_dotenv_if_present(*, dotenv_path: Path | None = None) -> bool:
    """Load `.env` into os.environ.

    Does NOT overwrite existing os.environ entries.

    Returns:
        True if a dotenv file existed and was parsed, else False.
    """
    if dotenv_path is None:
        root = _find_project_root(Path(__file__).resolve())
        dotenv_path = root / ".env"

    if not dotenv_path.is_file():
        return False

    for key, value in parse_dotenv(dotenv_path.read_text(encoding="utf-8")).items():
        os.environ.setdefault(key, value)
    return True
