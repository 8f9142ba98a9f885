import json
import unittest

from mkcommit.llm.prompts import COMMIT_SCHEMA, build_system_prompt, build_user_prompt
from mkcommit.message.record import COMMIT_TYPES
from mkcommit.vcs.git_client import StagedFile


class TestSystemPrompt(unittest.TestCase):
    def test_lists_every_commit_type(self) -> None:
        prompt = build_system_prompt()
        for commit_type in COMMIT_TYPES:
            with self.subTest(commit_type=commit_type):
                self.assertIn(f"- {commit_type}: ", prompt)

    def test_embeds_schema(self) -> None:
        prompt = build_system_prompt()
        self.assertIn(json.dumps(COMMIT_SCHEMA, indent=2), prompt)
        self.assertEqual(COMMIT_SCHEMA["required"], ["type", "subject"])
        self.assertEqual(COMMIT_SCHEMA["properties"]["type"]["enum"], list(COMMIT_TYPES))

    def test_examples_are_valid_json(self) -> None:
        outputs = [line[len("Output: "):] for line in build_system_prompt().splitlines() if line.startswith("Output: ")]
        self.assertEqual(len(outputs), 3)
        for output in outputs:
            self.assertIn(json.loads(output)["type"], COMMIT_TYPES)

    def test_is_stable(self) -> None:
        self.assertEqual(build_system_prompt(), build_system_prompt())


class TestUserPrompt(unittest.TestCase):
    def test_sections(self) -> None:
        files = [StagedFile("src/a.js", "M", "modified"), StagedFile("b.md", "A", "added")]
        prompt = build_user_prompt(files, "2 files changed", "diff --git a/src/a.js b/src/a.js")
        self.assertTrue(prompt.startswith("FILES CHANGED (2):\nM src/a.js\nA b.md\n\n"))
        self.assertIn("STATISTICS:\n2 files changed\n\n", prompt)
        self.assertIn("GIT DIFF:\ndiff --git a/src/a.js b/src/a.js\n\n", prompt)
        self.assertTrue(prompt.endswith("Respond with JSON only."))


if __name__ == "__main__":
    unittest.main()
