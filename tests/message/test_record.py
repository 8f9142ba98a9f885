import unittest

from mkcommit.message.normalizer import normalize
from mkcommit.message.record import CommitRecord, format_commit_message


class TestFormatCommitMessage(unittest.TestCase):
    def test_without_scope_or_body(self) -> None:
        self.assertEqual(format_commit_message(CommitRecord("chore", "bump deps")), "chore: bump deps")

    def test_with_scope(self) -> None:
        self.assertEqual(format_commit_message(CommitRecord("fix", "handle null", "auth")), "fix(auth): handle null")

    def test_with_body(self) -> None:
        message = format_commit_message(CommitRecord("feat", "add export", None, ["add csv writer", "add flag"]))
        self.assertEqual(message, "feat: add export\n\n- add csv writer\n- add flag")

    def test_formatted_message_parses_back(self) -> None:
        record = CommitRecord("refactor", "split parser", "core", ["move tokenizer", "rename helpers"])
        self.assertEqual(normalize(format_commit_message(record)), record)


if __name__ == "__main__":
    unittest.main()
