from __future__ import annotations

import re
from pathlib import Path

from .errors import ConfigurationError, InputParseError

FUTURE_API_LEVEL = 10000
KNOWN_ARCHES = frozenset({"arm", "arm64", "x86", "x86_64", "mips", "mips64", "riscv64"})
SKIPPED_NODE_SUFFIXES = ("_PRIVATE", "_PLATFORM")

_RE_TOKEN = re.compile(r'"[^"]*"|[{};:]|[^\s{};:"]+')


def parse_api_level(value: str | None) -> int:
    text = (value or "").strip()
    if not text or text in {"current", "future"}:
        return FUTURE_API_LEVEL
    try:
        return int(text)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid API level '{value}': expected an integer, 'current' or 'future'.") from exc


def split_line(line: str) -> tuple[str, list[str]]:
    code, _, comment = line.partition("#")
    return code, comment.split()


def _introduced_level(tag: str, path: Path, line_no: int) -> int:
    raw = tag.split("=", 1)[1]
    try:
        return int(raw)
    except ValueError as exc:
        raise InputParseError(f"{path}:{line_no}: invalid introduced tag '{tag}'") from exc


def symbol_exported(tags: list[str], arch: str, api: int, path: Path, line_no: int) -> bool:
    arch_tags = [tag for tag in tags if tag in KNOWN_ARCHES]
    if arch and arch_tags and arch not in arch_tags:
        return False
    if "future" in tags:
        return api == FUTURE_API_LEVEL

    introduced: int | None = None
    arch_introduced: int | None = None
    for tag in tags:
        if tag.startswith("introduced="):
            introduced = _introduced_level(tag, path, line_no)
        elif arch and tag.startswith(f"introduced-{arch}="):
            arch_introduced = _introduced_level(tag, path, line_no)
    if arch_introduced is not None:
        introduced = arch_introduced
    return introduced is None or api >= introduced


class VersionScriptParser:
    """Reads exported names and glob patterns from a linker version script.

    Nodes named ``*_PRIVATE``/``*_PLATFORM`` and everything under ``local:``
    are not part of the exported surface. ``extern "C++"`` blocks are skipped.
    Per-symbol ``#`` tags select the kind (``var``), architecture and API
    level; tags written on a node's opening line apply to all of its symbols.
    """

    def __init__(self, path: Path, arch: str = "", api: str = "") -> None:
        self.path = Path(path)
        self.arch = arch.strip()
        self.api = parse_api_level(api)
        self.functions: set[str] = set()
        self.global_vars: set[str] = set()
        self.function_patterns: set[str] = set()
        self.global_var_patterns: set[str] = set()

    def parse(self) -> None:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InputParseError(f"Unable to read version script '{self.path}': {exc}") from exc
        self.parse_text(text)

    def parse_text(self, text: str) -> None:
        depth = 0
        skip_node = False
        node_tags: list[str] = []
        section = "global"
        pending: list[str] = []
        line_no = 0

        for line_no, line in enumerate(text.splitlines(), start=1):
            code, line_tags = split_line(line)
            for token in _RE_TOKEN.findall(code):
                if token == "{":
                    if depth == 0:
                        name = pending[-1] if pending else ""
                        skip_node = name.endswith(SKIPPED_NODE_SUFFIXES)
                        node_tags = line_tags
                        section = "global"
                    depth += 1
                    pending = []
                elif token == "}":
                    depth -= 1
                    if depth < 0:
                        raise InputParseError(f"{self.path}:{line_no}: unbalanced '}}' in version script")
                    pending = []
                elif token == ":":
                    if depth == 1 and pending in (["global"], ["local"]):
                        section = pending[0]
                    pending = []
                elif token == ";":
                    if depth == 1 and pending and section == "global" and not skip_node:
                        self._add_symbol(pending[-1], node_tags + line_tags, line_no)
                    pending = []
                else:
                    pending.append(token)

        if depth != 0:
            raise InputParseError(f"{self.path}:{line_no}: unterminated version node in version script")

    def _add_symbol(self, symbol: str, tags: list[str], line_no: int) -> None:
        if not symbol_exported(tags, self.arch, self.api, self.path, line_no):
            return
        is_var = "var" in tags
        if "*" in symbol:
            (self.global_var_patterns if is_var else self.function_patterns).add(symbol)
        else:
            (self.global_vars if is_var else self.functions).add(symbol)
