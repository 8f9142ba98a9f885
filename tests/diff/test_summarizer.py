import unittest

from mkcommit.diff.summarizer import MAX_DIFF_LENGTH, TRUNCATION_MARKER, summarize


def make_file_diff(path: str, added: int, width: int = 40) -> str:
    lines = [
        f"diff --git a/{path} b/{path}",
        "index 1111111..2222222 100644",
        f"--- a/{path}",
        f"+++ b/{path}",
        f"@@ -1,1 +1,{added + 1} @@",
        " unchanged context line",
    ]
    lines.extend(f"+{path} line {i} ".ljust(width, "x") for i in range(added))
    return "\n".join(lines) + "\n"


class TestSummarize(unittest.TestCase):
    def test_short_diff_is_returned_unchanged(self) -> None:
        diff = make_file_diff("src/a.py", 3)
        self.assertEqual(summarize(diff), diff)

    def test_exact_budget_is_returned_unchanged(self) -> None:
        diff = "x" * MAX_DIFF_LENGTH
        self.assertEqual(summarize(diff), diff)

    def test_result_is_bounded(self) -> None:
        diff = "".join(make_file_diff(f"pkg/file{i}.py", 400) for i in range(5))
        for budget in (200, 1000, 6000):
            with self.subTest(budget=budget):
                result = summarize(diff, budget)
                self.assertLessEqual(len(result), budget + len(TRUNCATION_MARKER))

    def test_context_and_index_lines_are_dropped(self) -> None:
        diff = make_file_diff("src/big.py", 500)
        result = summarize(diff, 3000)
        self.assertNotIn("unchanged context line", result)
        self.assertNotIn("index 1111111", result)
        self.assertIn("diff --git a/src/big.py b/src/big.py", result)
        self.assertIn("@@ -1,1 +1,501 @@", result)

    def test_per_file_omission_marker(self) -> None:
        diff = make_file_diff("src/big.py", 500)
        result = summarize(diff, 3000)
        self.assertRegex(result, r"\.\.\. \(\d+ more lines in src/big\.py\)")

    def test_every_file_gets_a_share(self) -> None:
        diff = make_file_diff("src/huge.py", 1000) + make_file_diff("src/small.py", 5)
        result = summarize(diff, MAX_DIFF_LENGTH)
        self.assertIn("diff --git a/src/small.py b/src/small.py", result)
        self.assertIn("+src/small.py line 4", result)

    def test_global_marker_when_files_are_dropped(self) -> None:
        diff = "".join(make_file_diff(f"f{i}.py", 20) for i in range(50))
        result = summarize(diff, 500)
        self.assertTrue(result.endswith(TRUNCATION_MARKER))
        self.assertNotIn("f49.py", result)

    def test_is_deterministic(self) -> None:
        diff = "".join(make_file_diff(f"m{i}.py", 150) for i in range(4))
        self.assertEqual(summarize(diff, 2500), summarize(diff, 2500))

    def test_binary_notice_is_kept(self) -> None:
        binary = (
            "diff --git a/logo.png b/logo.png\n"
            "new file mode 100644\n"
            "Binary files /dev/null and b/logo.png differ\n"
        )
        diff = make_file_diff("src/a.py", 300) + binary
        result = summarize(diff, 4000)
        self.assertIn("Binary files /dev/null and b/logo.png differ", result)


if __name__ == "__main__":
    unittest.main()
