from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import LinkerConfig
from .descriptor import parse_descriptor, serialize_descriptor
from .linker import LinkState
from .visibility import ResolvedVisibility, resolve_visibility


@dataclass(frozen=True)
class LinkResult:
    output_path: Path
    input_count: int
    visibility_source: str
    stats: dict[str, Any]

    def summary(self) -> str:
        accepted = sum(int(item["accepted"]) for item in self.stats.values())
        rejected = sum(sum(item["rejected"].values()) for item in self.stats.values())
        return (
            f"Linked {self.input_count} dump(s) into '{self.output_path}' using {self.visibility_source} "
            f"visibility: {accepted} declarations kept, {rejected} filtered."
        )


def link_dumps(config: LinkerConfig, visibility: ResolvedVisibility) -> LinkState:
    state = LinkState.from_visibility(visibility, use_symbol_matching=config.use_symbol_matching)
    for dump_path in config.dump_files:
        tu = parse_descriptor(dump_path)
        state.link_translation_unit(tu)
    return state


def link_and_dump(config: LinkerConfig) -> LinkResult:
    visibility = resolve_visibility(config)
    state = link_dumps(config, visibility)
    serialize_descriptor(state.linked, config.output_path)
    return LinkResult(
        output_path=config.output_path,
        input_count=len(config.dump_files),
        visibility_source=visibility.source,
        stats=state.stats_as_dict(),
    )
