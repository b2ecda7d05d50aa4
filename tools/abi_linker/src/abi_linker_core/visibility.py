from __future__ import annotations

from dataclasses import dataclass

from .config import LinkerConfig
from .errors import ResolutionError
from .headers import collect_exported_headers
from .shared_object import SharedObjectParser
from .version_script import VersionScriptParser

SOURCE_SHARED_OBJECT = "shared_object"
SOURCE_VERSION_SCRIPT = "version_script"


@dataclass(frozen=True)
class ResolvedVisibility:
    source: str
    exported_headers: frozenset[str]
    functions: frozenset[str]
    global_vars: frozenset[str]
    function_patterns: frozenset[str] = frozenset()
    global_var_patterns: frozenset[str] = frozenset()


def resolve_from_version_script(config: LinkerConfig, exported_headers: frozenset[str]) -> ResolvedVisibility:
    if config.version_script is None:
        raise ResolutionError("Version script mode selected but no version script was given.")
    parser = VersionScriptParser(config.version_script, arch=config.arch, api=config.api)
    parser.parse()
    return ResolvedVisibility(
        source=SOURCE_VERSION_SCRIPT,
        exported_headers=exported_headers,
        functions=frozenset(parser.functions),
        global_vars=frozenset(parser.global_vars),
        function_patterns=frozenset(parser.function_patterns),
        global_var_patterns=frozenset(parser.global_var_patterns),
    )


def resolve_from_shared_object(config: LinkerConfig, exported_headers: frozenset[str]) -> ResolvedVisibility:
    if config.so_file is None:
        raise ResolutionError("Shared object mode selected but no shared object was given.")
    parser = SharedObjectParser.create(config.so_file)
    if parser is None:
        raise ResolutionError(f"'{config.so_file}' is not an ELF object file.")
    parser.extract_symbols()
    return ResolvedVisibility(
        source=SOURCE_SHARED_OBJECT,
        exported_headers=exported_headers,
        functions=frozenset(parser.functions),
        global_vars=frozenset(parser.global_vars),
    )


def resolve_visibility(config: LinkerConfig) -> ResolvedVisibility:
    exported_headers = collect_exported_headers(list(config.export_dirs))
    if config.use_version_script:
        return resolve_from_version_script(config, exported_headers)
    return resolve_from_shared_object(config, exported_headers)
