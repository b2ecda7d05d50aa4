from __future__ import annotations

import re
from collections.abc import Iterable


def glob_to_regex(pattern: str) -> str:
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return rf"(\b{body}\b)"


def compile_patterns(patterns: Iterable[str]) -> re.Pattern[str] | None:
    alternatives = [glob_to_regex(pattern) for pattern in sorted(set(patterns)) if pattern]
    if not alternatives:
        return None
    return re.compile("|".join(alternatives))


class WildcardMatcher:
    """Combined glob matcher that accepts each symbol name at most once."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self.patterns = frozenset(patterns)
        self.regex = compile_patterns(self.patterns)
        self.matched: set[str] = set()

    def matches(self, symbol: str) -> bool:
        return self.regex is not None and self.regex.search(symbol) is not None

    def claim(self, symbol: str) -> bool:
        if symbol in self.matched:
            return False
        if self.matches(symbol):
            self.matched.add(symbol)
            return True
        return False
