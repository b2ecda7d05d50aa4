from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .common import normalize_path
from .descriptor import (
    ELF_FUNCTION_CATEGORY,
    ELF_OBJECT_CATEGORY,
    FUNCTION_CATEGORY,
    GLOBAL_VAR_CATEGORY,
    TYPE_CATEGORIES,
    AbiEntity,
    LinkedDescriptor,
    TranslationUnitDescriptor,
)
from .errors import LinkError
from .patterns import WildcardMatcher
from .visibility import ResolvedVisibility

REJECT_NOT_EXPORTED_HEADER = "not_exported_header"
REJECT_DUPLICATE = "duplicate"
REJECT_NOT_EXPORTED_SYMBOL = "not_exported_symbol"

# All type categories dedup against one key space.
TYPES_SEEN_GROUP = "types"


@dataclass
class CategoryStats:
    accepted: int = 0
    rejected: dict[str, int] = field(default_factory=dict)

    def reject(self, reason: str) -> None:
        self.rejected[reason] = self.rejected.get(reason, 0) + 1

    def as_dict(self) -> dict[str, Any]:
        return {
            "accepted": self.accepted,
            "rejected": dict(sorted(self.rejected.items())),
        }


def synthesize_symbols(linked: LinkedDescriptor, visibility: ResolvedVisibility) -> None:
    for name in sorted(visibility.functions):
        linked.add_symbol(ELF_FUNCTION_CATEGORY, name)
    for name in sorted(visibility.global_vars):
        linked.add_symbol(ELF_OBJECT_CATEGORY, name)


@dataclass
class LinkState:
    """Everything the linker mutates while folding inputs into one descriptor.

    ``exact_symbols`` start as copies of the resolved name sets and shrink as
    names are consumed; ``seen`` holds the plain-dedup keys.
    """

    exported_headers: frozenset[str]
    use_symbol_matching: bool
    linked: LinkedDescriptor = field(default_factory=LinkedDescriptor)
    seen: dict[str, set[str]] = field(default_factory=dict)
    exact_symbols: dict[str, set[str]] = field(default_factory=dict)
    matchers: dict[str, WildcardMatcher] = field(default_factory=dict)
    stats: dict[str, CategoryStats] = field(default_factory=dict)
    _normalized_sources: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_visibility(cls, visibility: ResolvedVisibility, use_symbol_matching: bool) -> LinkState:
        state = cls(
            exported_headers=visibility.exported_headers,
            use_symbol_matching=use_symbol_matching,
        )
        synthesize_symbols(state.linked, visibility)
        state.exact_symbols = {
            FUNCTION_CATEGORY: set(visibility.functions),
            GLOBAL_VAR_CATEGORY: set(visibility.global_vars),
        }
        state.matchers = {
            FUNCTION_CATEGORY: WildcardMatcher(visibility.function_patterns),
            GLOBAL_VAR_CATEGORY: WildcardMatcher(visibility.global_var_patterns),
        }
        return state

    def _seen_for(self, category: str) -> set[str]:
        group = TYPES_SEEN_GROUP if category in TYPE_CATEGORIES else category
        return self.seen.setdefault(group, set())

    def _stats_for(self, category: str) -> CategoryStats:
        return self.stats.setdefault(category, CategoryStats())

    def _in_exported_headers(self, source_file: str) -> bool:
        normalized = self._normalized_sources.get(source_file)
        if normalized is None:
            normalized = normalize_path(source_file)
            self._normalized_sources[source_file] = normalized
        return normalized in self.exported_headers

    def _admit(self, category: str, key: str, use_symbol_matching: bool) -> str | None:
        if not use_symbol_matching:
            seen = self._seen_for(category)
            if key in seen:
                return REJECT_DUPLICATE
            seen.add(key)
            return None

        exact = self.exact_symbols.setdefault(category, set())
        if key in exact:
            exact.discard(key)
            return None
        matcher = self.matchers.setdefault(category, WildcardMatcher())
        if key in matcher.matched:
            return REJECT_DUPLICATE
        if matcher.claim(key):
            return None
        return REJECT_NOT_EXPORTED_SYMBOL

    def link_decls(self, category: str, entities: list[AbiEntity], use_symbol_matching: bool) -> None:
        stats = self._stats_for(category)
        for entity in entities:
            source_file = entity.source_file
            if self.exported_headers and source_file and not self._in_exported_headers(source_file):
                stats.reject(REJECT_NOT_EXPORTED_HEADER)
                continue
            key = entity.linkage_key
            reason = self._admit(category, key, use_symbol_matching)
            if reason is not None:
                stats.reject(reason)
                continue
            try:
                self.linked.append(category, entity)
            except MemoryError as exc:
                raise LinkError(f"Failed to add '{key}' to linked {category}.") from exc
            stats.accepted += 1

    def link_translation_unit(self, tu: TranslationUnitDescriptor) -> None:
        # Types are linked even when symbols are filtered: an exported symbol
        # may reference a type that is not itself a versioned symbol.
        for category in TYPE_CATEGORIES:
            self.link_decls(category, tu.category(category), use_symbol_matching=False)
        self.link_decls(FUNCTION_CATEGORY, tu.category(FUNCTION_CATEGORY), self.use_symbol_matching)
        self.link_decls(GLOBAL_VAR_CATEGORY, tu.category(GLOBAL_VAR_CATEGORY), self.use_symbol_matching)

    def stats_as_dict(self) -> dict[str, Any]:
        return {name: self.stats[name].as_dict() for name in sorted(self.stats)}
