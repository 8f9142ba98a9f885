"""
Version control system (VCS) integration.

This package contains the Git client used to inspect the staged changes
of a repository and to create the final commit.
"""

from .git_client import (  # noqa: F401
    DiffTooLargeError,
    GitClient,
    GitError,
    NotAGitRepositoryError,
    StagedFile,
)
