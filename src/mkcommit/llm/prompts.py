"""
Prompt construction for commit message generation.

The system prompt is fixed: it lists the rules, the commit types, the
JSON schema of the expected answer and a few worked examples. The user
prompt carries the per-request data: file statuses, ``--stat`` output
and the (already condensed) diff.
"""

from __future__ import annotations

import json
from textwrap import dedent
from typing import Any, Dict, Sequence

from mkcommit.message.record import COMMIT_TYPES, MAX_SUBJECT_LENGTH
from mkcommit.vcs.git_client import StagedFile


COMMIT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {
            "type": "string",
            "enum": list(COMMIT_TYPES),
            "description": "The type of change according to conventional commits",
        },
        "scope": {
            "type": "string",
            "description": "The scope of the change (component, file, or module name). Optional.",
        },
        "subject": {
            "type": "string",
            "description": f"A short imperative description of the change (max {MAX_SUBJECT_LENGTH} chars)",
        },
        "body": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Detailed bullet points explaining individual changes. Optional for simple changes.",
        },
    },
    "required": ["type", "subject"],
}

TYPE_DESCRIPTIONS = {
    "feat": "New feature for the user",
    "fix": "Bug fix for the user",
    "docs": "Documentation only changes",
    "style": "Formatting, missing semicolons, etc (no code change)",
    "refactor": "Code change that neither fixes a bug nor adds a feature",
    "perf": "Performance improvement",
    "test": "Adding or updating tests",
    "build": "Changes to build system or dependencies",
    "ci": "Changes to CI configuration",
    "chore": "Other changes that don't modify src or test files",
    "revert": "Reverts a previous commit",
}

_EXAMPLES = (
    (
        "Modified src/auth/login.ts to add password validation",
        {
            "type": "feat",
            "scope": "auth",
            "subject": "add password validation to login",
            "body": ["implement minimum length check", "add special character requirement"],
        },
    ),
    ("Fixed typo in README.md", {"type": "docs", "subject": "fix typo in readme"}),
    ("Updated package.json dependencies", {"type": "build", "scope": "deps", "subject": "update dependencies"}),
)


def build_system_prompt() -> str:
    """Return the fixed instructions sent as the system message."""
    types = "\n".join(f"- {name}: {TYPE_DESCRIPTIONS[name]}" for name in COMMIT_TYPES)
    examples = "\n\n".join(
        f"Input: {description}\nOutput: {json.dumps(output, separators=(',', ':'))}"
        for description, output in _EXAMPLES
    )
    rules = dedent(
        f"""
        You are a commit message generator. Analyze git diffs and generate conventional commit messages.

        RULES:
        1. Use conventional commit format: type(scope): subject
        2. Subject must be imperative mood ("add" not "added"), lowercase, no period, max {MAX_SUBJECT_LENGTH} chars
        3. Scope is optional but recommended when changes are focused on a specific component
        4. Body bullet points should explain WHAT changed and WHY, not HOW
        """
    ).strip()
    return (
        f"{rules}\n\n"
        f"COMMIT TYPES:\n{types}\n\n"
        "OUTPUT FORMAT:\n"
        "Respond ONLY with a valid JSON object matching this schema:\n"
        f"{json.dumps(COMMIT_SCHEMA, indent=2)}\n\n"
        f"EXAMPLES:\n\n{examples}"
    )


def build_user_prompt(files_with_status: Sequence[StagedFile], stats: str, truncated_diff: str) -> str:
    """Return the per-request user message."""
    files_summary = "\n".join(f"{item.status_code} {item.path}" for item in files_with_status)
    return (
        f"FILES CHANGED ({len(files_with_status)}):\n{files_summary}\n\n"
        f"STATISTICS:\n{stats}\n\n"
        f"GIT DIFF:\n{truncated_diff}\n\n"
        "Generate a commit message for these changes. Respond with JSON only."
    )
