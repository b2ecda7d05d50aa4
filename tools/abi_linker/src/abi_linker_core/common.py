from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from .errors import InputParseError, SerializationError


def load_json_object(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InputParseError(f"Unable to read JSON file '{path}': {exc}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InputParseError(f"Invalid JSON in '{path}': {exc}") from exc
    if not isinstance(payload, dict):
        raise InputParseError(f"JSON root in '{path}' must be an object")
    return payload


def render_json(value: dict[str, Any]) -> str:
    return json.dumps(value, indent=2, sort_keys=True) + "\n"


def current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_text_atomic(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` through a sibling temp file.

    The destination is only replaced once the whole payload is on disk, so a
    failure never leaves a truncated file behind.
    """
    temp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        # mkstemp creates 0600; give the result the mode a plain open() would.
        os.chmod(temp_name, 0o666 & ~current_umask())
        os.replace(temp_name, path)
        temp_name = None
    except OSError as exc:
        raise SerializationError(f"Unable to write '{path}': {exc}") from exc
    finally:
        if temp_name is not None and os.path.exists(temp_name):
            os.unlink(temp_name)


def normalize_path(value: str | Path) -> str:
    return str(Path(value).resolve())
