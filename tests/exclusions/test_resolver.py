import unittest

from mkcommit.exclusions.patterns import DEFAULT_EXCLUDES, FIXED_EXCLUDE_PATTERNS
from mkcommit.exclusions.resolver import add_pattern, default_patterns, remove_pattern, resolve


class TestResolve(unittest.TestCase):
    def test_lockfile_is_skipped_with_defaults(self) -> None:
        result = resolve(["src/a.js", "package-lock.json"], DEFAULT_EXCLUDES, FIXED_EXCLUDE_PATTERNS)
        self.assertEqual(result.to_analyze, ["src/a.js"])
        self.assertEqual(result.to_skip, ["package-lock.json"])

    def test_fixed_patterns_apply_without_configured_excludes(self) -> None:
        result = resolve(["dist/bundle.js", "src/main.py"], [], FIXED_EXCLUDE_PATTERNS)
        self.assertEqual(result.to_analyze, ["src/main.py"])
        self.assertEqual(result.to_skip, ["dist/bundle.js"])

    def test_partition_is_total_and_disjoint(self) -> None:
        staged = [
            "src/app.py",
            "yarn.lock",
            "web/static/app.min.js",
            "docs/index.md",
            "build/out.o",
            "nested/dir/Cargo.lock",
            "custom/secret.json",
        ]
        result = resolve(staged, DEFAULT_EXCLUDES + ["custom/*"], FIXED_EXCLUDE_PATTERNS)
        self.assertEqual(sorted(result.to_analyze + result.to_skip), sorted(staged))
        self.assertFalse(set(result.to_analyze) & set(result.to_skip))
        self.assertEqual(result.to_analyze, ["src/app.py", "docs/index.md"])

    def test_order_is_preserved(self) -> None:
        staged = ["z.py", "a.py", "m.py"]
        self.assertEqual(resolve(staged, [], []).to_analyze, staged)

    def test_empty_input(self) -> None:
        result = resolve([], DEFAULT_EXCLUDES)
        self.assertEqual(result.to_analyze, [])
        self.assertEqual(result.to_skip, [])


class TestPatternEditing(unittest.TestCase):
    def test_add_is_idempotent(self) -> None:
        patterns, changed = add_pattern(["yarn.lock"], "yarn.lock")
        self.assertFalse(changed)
        self.assertEqual(patterns, ["yarn.lock"])

    def test_add_new_pattern(self) -> None:
        patterns, changed = add_pattern(["yarn.lock"], "*.snap")
        self.assertTrue(changed)
        self.assertEqual(patterns, ["yarn.lock", "*.snap"])

    def test_remove_absent_pattern_is_noop(self) -> None:
        original = ["yarn.lock"]
        patterns, changed = remove_pattern(original, "missing")
        self.assertFalse(changed)
        self.assertEqual(patterns, original)

    def test_remove_present_pattern(self) -> None:
        patterns, changed = remove_pattern(["yarn.lock", "*.snap"], "yarn.lock")
        self.assertTrue(changed)
        self.assertEqual(patterns, ["*.snap"])

    def test_default_patterns_returns_copy(self) -> None:
        defaults = default_patterns()
        defaults.append("extra")
        self.assertNotIn("extra", DEFAULT_EXCLUDES)


if __name__ == "__main__":
    unittest.main()
