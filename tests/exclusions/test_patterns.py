import unittest

from mkcommit.exclusions.patterns import (
    DEFAULT_EXCLUDES,
    FIXED_EXCLUDE_PATTERNS,
    compile_glob,
    matches,
)


class TestPlainNames(unittest.TestCase):
    def test_exact_match(self) -> None:
        self.assertTrue(matches("package-lock.json", "package-lock.json"))

    def test_match_after_slash(self) -> None:
        self.assertTrue(matches("sub/package-lock.json", "package-lock.json"))
        self.assertTrue(matches("a/b/c/yarn.lock", "yarn.lock"))

    def test_partial_name_does_not_match(self) -> None:
        self.assertFalse(matches("my-package-lock.json", "package-lock.json"))
        self.assertFalse(matches("package-lock.json.bak", "package-lock.json"))

    def test_case_sensitive(self) -> None:
        self.assertFalse(matches("Yarn.lock", "yarn.lock"))

    def test_empty_pattern_never_matches(self) -> None:
        self.assertFalse(matches("anything", ""))


class TestGlobs(unittest.TestCase):
    def test_directory_glob_matches_direct_child(self) -> None:
        self.assertTrue(matches("dist/app.js", "dist/*"))

    def test_directory_glob_is_anchored_at_root(self) -> None:
        self.assertFalse(matches("src/dist/app.js", "dist/*"))

    def test_single_star_does_not_cross_separator(self) -> None:
        self.assertFalse(matches("dist/js/app.js", "dist/*"))

    def test_double_star_crosses_separators(self) -> None:
        self.assertTrue(matches("dist/js/app.js", "dist/**"))
        self.assertTrue(matches(".yarn/cache/pkg/a.zip", ".yarn/cache/**"))
        self.assertFalse(matches("src/dist/app.js", "dist/**"))

    def test_basename_glob_matches_at_any_depth(self) -> None:
        self.assertTrue(matches("app.min.js", "*.min.js"))
        self.assertTrue(matches("static/js/app.min.js", "*.min.js"))
        self.assertFalse(matches("static/js/app.js", "*.min.js"))

    def test_dots_are_literal(self) -> None:
        self.assertFalse(matches("appXminXjs", "*.min.js"))

    def test_generated_marker(self) -> None:
        self.assertTrue(matches("src/schema.generated.ts", "*.generated.*"))

    def test_regex_metacharacters_are_escaped(self) -> None:
        self.assertTrue(matches("a+b(1).txt", "a+b(*).txt"))
        self.assertFalse(matches("aab1.txt", "a+b(*).txt"))

    def test_compiled_pattern_is_cached(self) -> None:
        self.assertIs(compile_glob("*.map"), compile_glob("*.map"))


class TestBuiltInLists(unittest.TestCase):
    def test_default_excludes_are_lockfiles(self) -> None:
        self.assertIn("package-lock.json", DEFAULT_EXCLUDES)
        self.assertIn("poetry.lock", DEFAULT_EXCLUDES)
        self.assertEqual(len(DEFAULT_EXCLUDES), len(set(DEFAULT_EXCLUDES)))

    def test_fixed_patterns_cover_build_output(self) -> None:
        for path in ("dist/index.js", "build/lib/x.py", ".next/cache/a", "assets/app.css.map", "font.woff2"):
            with self.subTest(path=path):
                self.assertTrue(any(matches(path, p) for p in FIXED_EXCLUDE_PATTERNS))

    def test_fixed_patterns_leave_sources_alone(self) -> None:
        for path in ("src/index.js", "README.md", "src/build_helpers.py"):
            with self.subTest(path=path):
                self.assertFalse(any(matches(path, p) for p in FIXED_EXCLUDE_PATTERNS))


if __name__ == "__main__":
    unittest.main()
