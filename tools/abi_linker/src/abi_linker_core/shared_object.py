from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path

from .errors import ResolutionError

ELF_MAGIC = b"\x7fELF"

FUNCTION_TYPES = frozenset({"FUNC", "IFUNC"})
OBJECT_TYPES = frozenset({"OBJECT", "TLS", "COMMON"})
EXPORTED_BINDINGS = frozenset({"GLOBAL", "WEAK", "GNU_UNIQUE", "UNIQUE"})
HIDDEN_VISIBILITIES = frozenset({"HIDDEN", "INTERNAL"})

NM_FUNCTION_CODES = frozenset({"T", "W", "i"})
NM_OBJECT_CODES = frozenset({"D", "B", "R", "V", "G", "S", "u"})

_RE_VERSION_INDEX = re.compile(r"^\(\d+\)$")


def strip_symbol_version(name: str) -> str:
    return name.split("@", 1)[0]


def parse_readelf_symbols(output: str) -> tuple[set[str], set[str]]:
    functions: set[str] = set()
    objects: set[str] = set()
    for raw_line in output.splitlines():
        parts = raw_line.split()
        if len(parts) < 8:
            continue
        number_token = parts[0]
        if not number_token.endswith(":") or not number_token[:-1].isdigit():
            continue
        while parts and _RE_VERSION_INDEX.match(parts[-1]):
            parts.pop()
        if len(parts) < 8:
            continue
        symbol_type = parts[3].upper()
        bind = parts[4].upper()
        visibility = parts[5].upper()
        section = parts[-2].upper()
        name = strip_symbol_version(parts[-1])
        # ABS entries are version definitions, not code or data.
        if section in {"UND", "ABS"} or not name:
            continue
        if bind not in EXPORTED_BINDINGS or visibility in HIDDEN_VISIBILITIES:
            continue
        if symbol_type in FUNCTION_TYPES:
            functions.add(name)
        elif symbol_type in OBJECT_TYPES:
            objects.add(name)
    return functions, objects


def parse_nm_symbols(output: str) -> tuple[set[str], set[str]]:
    functions: set[str] = set()
    objects: set[str] = set()
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line or line.endswith(":"):
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        type_code = parts[-2]
        name = strip_symbol_version(parts[-1])
        if len(type_code) != 1 or not name:
            continue
        if type_code in NM_FUNCTION_CODES:
            functions.add(name)
        elif type_code in NM_OBJECT_CODES:
            objects.add(name)
    return functions, objects


def build_symbol_command_specs(binary_path: Path) -> list[tuple[str, list[str], str]]:
    return [
        ("readelf", ["readelf", "--dyn-syms", "-W", str(binary_path)], "readelf"),
        ("llvm-readelf", ["llvm-readelf", "--dyn-syms", "-W", str(binary_path)], "readelf"),
        ("nm", ["nm", "-D", "--defined-only", str(binary_path)], "nm"),
        ("llvm-nm", ["llvm-nm", "-D", "--defined-only", str(binary_path)], "nm"),
    ]


def parse_symbols_with_format(output: str, parse_format: str) -> tuple[set[str], set[str]]:
    if parse_format == "readelf":
        return parse_readelf_symbols(output)
    return parse_nm_symbols(output)


class SharedObjectParser:
    """Exported functions and objects of an ELF shared object's dynamic symbol table."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.functions: set[str] = set()
        self.global_vars: set[str] = set()
        self.tool: str | None = None

    @classmethod
    def create(cls, path: Path) -> SharedObjectParser | None:
        try:
            with path.open("rb") as handle:
                magic = handle.read(len(ELF_MAGIC))
        except OSError as exc:
            raise ResolutionError(f"Unable to read shared object '{path}': {exc}") from exc
        if magic != ELF_MAGIC:
            return None
        return cls(path)

    def extract_symbols(self) -> None:
        tool_errors: list[str] = []
        for tool_name, command, parse_format in build_symbol_command_specs(self.path):
            if shutil.which(command[0]) is None:
                continue
            try:
                proc = subprocess.run(command, check=True, capture_output=True, text=True)
            except subprocess.CalledProcessError as exc:
                message = exc.stderr.strip() or exc.stdout.strip() or "unknown command failure"
                tool_errors.append(f"{' '.join(command)}: {message}")
                continue
            # First successful tool wins; mixing symbol table readers is not allowed.
            self.functions, self.global_vars = parse_symbols_with_format(proc.stdout, parse_format)
            self.tool = tool_name
            return

        if tool_errors:
            raise ResolutionError("Failed to read dynamic symbols. " + " | ".join(tool_errors))
        raise ResolutionError(
            "No symbol table tool found. Install one of: readelf, llvm-readelf, nm, llvm-nm."
        )
