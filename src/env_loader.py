from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"

_QUOTE_CHARS = {"'", '"'}


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTE_CHARS


def _parse_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export ") :].lstrip()
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    value = value.strip()
    if _is_quoted(value):
        return key, value[1:-1]
    # Unquoted values may carry an inline comment.
    if " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return key, value


def load_env_file(path: Path | None = None, *, override: bool = False) -> list[str]:
    """Load ``KEY=value`` lines from a .env file into ``os.environ``.

    Variables already set in the environment win unless ``override`` is set.
    Returns the keys that were applied; a missing file is not an error.
    """

    env_path = path or DEFAULT_ENV_PATH
    try:
        content = env_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []

    applied: list[str] = []
    for raw_line in content.splitlines():
        parsed = _parse_line(raw_line)
        if parsed is None:
            continue
        key, value = parsed
        if not override and key in os.environ:
            continue
        os.environ[key] = value
        applied.append(key)
    return applied
