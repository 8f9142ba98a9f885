"""
Collecting the staged diff that is sent to the model.

The :class:`DiffAcquirer` asks the Git client for the staged files,
applies the exclusion rules, and requests a diff restricted to the files
that survive. Excluded files are never passed to Git as exclusion
pathspecs; the files to include are listed explicitly instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from mkcommit.exclusions.patterns import FIXED_EXCLUDE_PATTERNS
from mkcommit.exclusions.resolver import Resolution, resolve
from mkcommit.vcs.git_client import GitClient, GitError, NotAGitRepositoryError, StagedFile


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


STATS_UNAVAILABLE = "(stats unavailable)"


@dataclass
class DiffPayload:
    """Snapshot of the staged changes for one invocation.

    Attributes
    ----------
    raw_diff : str
        Unified diff of the analysed files only.
    staged_files : List[StagedFile]
        Every staged file with its status.
    excluded_files : List[str]
        Staged paths skipped by the exclusion rules.
    analyzed_files : List[StagedFile]
        ``staged_files`` minus ``excluded_files``.
    stats : str
        Condensed ``--stat`` summary, or a placeholder if unavailable.
    """

    raw_diff: str
    staged_files: List[StagedFile] = field(default_factory=list)
    excluded_files: List[str] = field(default_factory=list)
    analyzed_files: List[StagedFile] = field(default_factory=list)
    stats: str = STATS_UNAVAILABLE


class DiffAcquirer:
    """Build a :class:`DiffPayload` from the repository's staged changes.

    After :meth:`acquire` returns ``None``, :attr:`skipped` tells the
    caller whether nothing was staged (empty) or everything staged was
    excluded (non-empty).
    """

    def __init__(
        self,
        client: GitClient,
        configured_excludes: Sequence[str],
        fixed_patterns: Sequence[str] = FIXED_EXCLUDE_PATTERNS,
    ) -> None:
        self.client = client
        self.configured_excludes = list(configured_excludes)
        self.fixed_patterns = list(fixed_patterns)
        self.resolution: Optional[Resolution] = None

    @property
    def skipped(self) -> List[str]:
        """Staged paths excluded during the last :meth:`acquire` call."""
        return list(self.resolution.to_skip) if self.resolution else []

    def acquire(self) -> Optional[DiffPayload]:
        """Collect the staged diff.

        Returns
        -------
        Optional[DiffPayload]
            ``None`` if nothing is staged, if every staged file is
            excluded, or if the resulting diff is blank.

        Raises
        ------
        NotAGitRepositoryError
            If the working directory is not inside a Git work tree.
        DiffTooLargeError
            If the diff exceeds the capture ceiling.
        GitError
            For any other Git failure.
        """
        self.resolution = None
        if not self.client.is_repo():
            raise NotAGitRepositoryError(
                "You are not in a git repository. Run this command from within a git project."
            )
        logger.debug("Git root: %s", self.client.get_repo_root())

        staged = self.client.list_staged()
        logger.debug("Staged files: %s", staged)
        if not staged:
            return None

        self.resolution = resolve(staged, self.configured_excludes, self.fixed_patterns)
        if not self.resolution.to_analyze:
            logger.debug("All staged files are excluded: %s", self.resolution.to_skip)
            return None

        raw_diff = self.client.diff(self.resolution.to_analyze)
        if not raw_diff.strip():
            return None

        staged_files = self.client.list_staged_with_status()
        skipped = set(self.resolution.to_skip)
        analyzed_files = [item for item in staged_files if item.path not in skipped]
        return DiffPayload(
            raw_diff=raw_diff,
            staged_files=staged_files,
            excluded_files=list(self.resolution.to_skip),
            analyzed_files=analyzed_files,
            stats=self._stats(),
        )

    def _stats(self) -> str:
        try:
            return self.client.stats() or STATS_UNAVAILABLE
        except GitError as exc:
            logger.debug("Error getting diff stats: %s", exc)
            return STATS_UNAVAILABLE
