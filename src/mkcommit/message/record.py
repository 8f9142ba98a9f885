"""
Data model for a conventional commit message.

The :class:`CommitRecord` is the structured form of a commit message:
a Conventional Commit type, an optional scope, a short subject and a list
of bullet points. :func:`format_commit_message` renders it into the
literal text handed to ``git commit``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


COMMIT_TYPES = (
    "feat",      # New feature
    "fix",       # Bug fix
    "docs",      # Documentation
    "style",     # Formatting, no logic change
    "refactor",  # Neither a fix nor a feature
    "perf",      # Performance improvement
    "test",      # Tests
    "build",     # Build system or dependencies
    "ci",        # CI configuration
    "chore",     # Maintenance
    "revert",    # Reverts a previous commit
)

TYPE_SYNONYMS = {
    "feature": "feat",
    "bugfix": "fix",
    "bug": "fix",
    "doc": "docs",
    "documentation": "docs",
    "tests": "test",
    "testing": "test",
    "performance": "perf",
    "maintenance": "chore",
    "update": "chore",
    "wip": "chore",
}

DEFAULT_TYPE = "chore"
MAX_SUBJECT_LENGTH = 50


@dataclass
class CommitRecord:
    """Structured commit message.

    Attributes
    ----------
    type : str
        One of :data:`COMMIT_TYPES`.
    subject : str
        Short lowercase description without trailing period.
    scope : Optional[str]
        Component the change is focused on, if any.
    body : List[str]
        Bullet points, rendered as ``- item`` lines.
    """

    type: str
    subject: str
    scope: Optional[str] = None
    body: List[str] = field(default_factory=list)


def format_commit_message(record: CommitRecord) -> str:
    """Render ``record`` as commit message text.

    >>> format_commit_message(CommitRecord("fix", "handle null token", "auth"))
    'fix(auth): handle null token'
    """
    if record.scope:
        message = f"{record.type}({record.scope}): {record.subject}"
    else:
        message = f"{record.type}: {record.subject}"
    if record.body:
        message += "\n\n" + "\n".join(f"- {item}" for item in record.body)
    return message
