from __future__ import annotations

import os
from pathlib import Path

from .common import normalize_path
from .errors import ResolutionError

SKIPPED_SUFFIXES = ("~", ".orig", ".rej", ".swp")


def should_skip_name(name: str) -> bool:
    if not name or name.startswith("."):
        return True
    return name.endswith(SKIPPED_SUFFIXES)


def _raise_walk_error(exc: OSError) -> None:
    raise ResolutionError(f"Unable to read export include directory '{exc.filename}': {exc}") from exc


def collect_exported_headers(export_dirs: list[str]) -> frozenset[str]:
    headers: set[str] = set()
    for entry in export_dirs:
        root = Path(entry)
        if not root.is_dir():
            raise ResolutionError(f"Export include directory '{entry}' does not exist or is not a directory.")
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            dirnames[:] = sorted(name for name in dirnames if not should_skip_name(name))
            for filename in filenames:
                if should_skip_name(filename):
                    continue
                candidate = Path(dirpath) / filename
                if candidate.is_file():
                    headers.add(normalize_path(candidate))
    return frozenset(headers)
