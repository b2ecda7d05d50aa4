from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from abi_linker_core.patterns import WildcardMatcher, compile_patterns, glob_to_regex  # noqa: E402


class PatternCompilerTests(unittest.TestCase):
    def test_star_matches_any_run_of_characters(self) -> None:
        matcher = WildcardMatcher({"foo_*"})
        self.assertTrue(matcher.matches("foo_"))
        self.assertTrue(matcher.matches("foo_bar_baz"))
        self.assertFalse(matcher.matches("bar_foo"))

    def test_patterns_are_anchored_at_word_boundaries(self) -> None:
        matcher = WildcardMatcher({"open"})
        self.assertTrue(matcher.matches("open"))
        self.assertFalse(matcher.matches("reopen"))
        self.assertFalse(matcher.matches("opened"))

    def test_other_characters_are_literal(self) -> None:
        matcher = WildcardMatcher({"a.b*"})
        self.assertTrue(matcher.matches("a.bc"))
        self.assertFalse(matcher.matches("axbc"))
        self.assertEqual(glob_to_regex("x*y"), r"(\bx.*y\b)")

    def test_alternation_of_all_patterns(self) -> None:
        regex = compile_patterns(["zeta_*", "alpha_*"])
        self.assertIsNotNone(regex)
        assert regex is not None
        self.assertEqual(regex.pattern, r"(\balpha_.*\b)|(\bzeta_.*\b)")
        self.assertTrue(regex.search("zeta_1"))
        self.assertTrue(regex.search("alpha_1"))

    def test_empty_pattern_set_never_matches(self) -> None:
        self.assertIsNone(compile_patterns([]))
        matcher = WildcardMatcher()
        self.assertFalse(matcher.matches("anything"))
        self.assertFalse(matcher.claim("anything"))

    def test_claim_accepts_each_symbol_once(self) -> None:
        matcher = WildcardMatcher({"qux_*"})
        self.assertTrue(matcher.claim("qux_init"))
        self.assertFalse(matcher.claim("qux_init"))
        self.assertTrue(matcher.claim("qux_stop"))
        self.assertEqual(matcher.matched, {"qux_init", "qux_stop"})


if __name__ == "__main__":
    unittest.main()
