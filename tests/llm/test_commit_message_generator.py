import unittest
from unittest.mock import MagicMock

from mkcommit.diff.acquirer import DiffPayload
from mkcommit.llm.commit_message_generator import CommitMessageGenerator
from mkcommit.llm.ollama_client import EndpointUnreachableError, OllamaClient
from mkcommit.message.normalizer import Heuristic, Structured
from mkcommit.vcs.git_client import StagedFile


def make_payload(diff: str = "diff --git a/src/a.js b/src/a.js\n+const a = 1;\n") -> DiffPayload:
    files = [StagedFile("src/a.js", "M", "modified")]
    return DiffPayload(
        raw_diff=diff,
        staged_files=files,
        excluded_files=["package-lock.json"],
        analyzed_files=files,
        stats="src/a.js | 1 +",
    )


class TestCommitMessageGenerator(unittest.TestCase):
    def setUp(self) -> None:
        self.client = MagicMock(spec=OllamaClient)

    def test_generate_structured(self) -> None:
        self.client.chat.return_value = '{"type": "feat", "scope": "core", "subject": "Add constant", "body": ["define a"]}'
        message = CommitMessageGenerator(self.client).generate(make_payload())
        self.assertEqual(message, "feat(core): add constant\n\n- define a")

    def test_user_prompt_contains_only_analyzed_data(self) -> None:
        self.client.chat.return_value = '{"type": "fix", "subject": "x"}'
        CommitMessageGenerator(self.client).generate(make_payload())
        system_prompt, user_prompt = self.client.chat.call_args[0]
        self.assertIn("RULES:", system_prompt)
        self.assertIn("M src/a.js", user_prompt)
        self.assertIn("+const a = 1;", user_prompt)
        self.assertNotIn("package-lock.json", user_prompt)

    def test_large_diff_is_condensed(self) -> None:
        big = "diff --git a/a.py b/a.py\n" + "".join(f"+line {i}\n" for i in range(2000))
        self.client.chat.return_value = '{"type": "chore", "subject": "x"}'
        CommitMessageGenerator(self.client, max_diff_length=500).generate(make_payload(big))
        user_prompt = self.client.chat.call_args[0][1]
        self.assertLess(len(user_prompt), len(big))

    def test_plain_text_reply_is_tagged(self) -> None:
        self.client.chat.return_value = "fix(ui): Align button"
        result = CommitMessageGenerator(self.client).generate_record(make_payload())
        self.assertIsInstance(result, Heuristic)
        self.assertEqual(result.record.subject, "align button")

    def test_json_reply_is_tagged(self) -> None:
        self.client.chat.return_value = '{"type": "docs", "subject": "x"}'
        self.assertIsInstance(CommitMessageGenerator(self.client).generate_record(make_payload()), Structured)

    def test_llm_errors_propagate(self) -> None:
        self.client.chat.side_effect = EndpointUnreachableError("down")
        with self.assertRaises(EndpointUnreachableError):
            CommitMessageGenerator(self.client).generate(make_payload())


if __name__ == "__main__":
    unittest.main()
