"""
Git client implementation for mkcommit.

This module wraps the Git operations required by the commit assistant:
checking for a working tree, listing staged files, producing the staged
diff for an explicit list of files, and committing from a message file.
All subprocess calls go through :meth:`GitClient._run` so that unit
tests can mock them easily. Arguments are always passed as a list and
never through a shell.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs reach the root once the CLI configures logging.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# Hard ceiling on captured diff output.
MAX_BUFFER_SIZE = 5 * 1024 * 1024
_READ_CHUNK_SIZE = 64 * 1024

LITERAL_PATHSPEC = ":(literal)"

STATUS_LABELS = {
    "A": "added",
    "M": "modified",
    "D": "deleted",
    "R": "renamed",
    "C": "copied",
}


@dataclass(frozen=True)
class StagedFile:
    """A staged file and its one-letter status.

    For renames and copies ``path`` is the destination and
    ``original_path`` the source.
    """

    path: str
    status_code: str
    status: str
    original_path: Optional[str] = None


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class NotAGitRepositoryError(GitError):
    """Raised when the working directory is not inside a Git work tree."""

    pass


class DiffTooLargeError(GitError):
    """Raised when the staged diff exceeds :data:`MAX_BUFFER_SIZE`."""

    pass


class GitClient:
    """Client for the staged state of a Git repository."""

    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the working directory.

        Raises
        ------
        NotAGitRepositoryError
            If Git reports that the directory is not a repository.
        GitError
            If the command exits with a non-zero status when ``check`` is
            True, or if the ``git`` executable cannot be started.
        """
        full_cmd = ["git", "-c", "core.quotePath=false"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.error("Could not execute git: %s", exc)
            raise GitError(f"Could not execute git: {exc}") from exc

        if check and result.returncode != 0:
            self._raise_failure(full_cmd, result.stdout, result.stderr)
        return result

    def _run_capped(self, args: List[str], limit: int) -> str:
        """Run a Git command and return its stdout, reading at most ``limit`` bytes.

        The process is killed as soon as its output passes ``limit``.

        Raises
        ------
        DiffTooLargeError
            If the output exceeds ``limit`` bytes.
        GitError
            As for :meth:`_run` with ``check`` set.
        """
        full_cmd = ["git", "-c", "core.quotePath=false"] + args
        logger.debug("Executing Git command (capped at %d bytes): %s", limit, " ".join(full_cmd))
        try:
            proc = subprocess.Popen(full_cmd, cwd=self.cwd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except OSError as exc:
            logger.error("Could not execute git: %s", exc)
            raise GitError(f"Could not execute git: {exc}") from exc

        chunks: List[bytes] = []
        size = 0
        with proc:
            while True:
                chunk = proc.stdout.read(_READ_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > limit:
                    proc.kill()
                    raise DiffTooLargeError(
                        f"The staged diff is larger than the {limit} byte limit. "
                        "Consider making smaller commits."
                    )
                chunks.append(chunk)
            stderr = proc.stderr.read()
            returncode = proc.wait()

        stdout_text = b"".join(chunks).decode("utf-8", errors="replace")
        if returncode != 0:
            self._raise_failure(full_cmd, stdout_text, stderr.decode("utf-8", errors="replace"))
        return stdout_text

    @staticmethod
    def _raise_failure(full_cmd: List[str], stdout: str, stderr: str) -> None:
        logger.debug(
            "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
            " ".join(full_cmd),
            stdout,
            stderr,
        )
        message = stderr.strip() or stdout.strip()
        if "not a git repository" in message.lower():
            raise NotAGitRepositoryError(message)
        raise GitError(message)

    # ------------------------------------------------------------------
    # Repository context
    # ------------------------------------------------------------------
    def is_repo(self) -> bool:
        """Return True if the working directory is inside a Git work tree."""
        try:
            result = self._run(["rev-parse", "--is-inside-work-tree"], check=False)
        except GitError:
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def get_repo_root(self) -> Optional[Path]:
        """Return the top-level directory of the work tree, if any."""
        result = self._run(["rev-parse", "--show-toplevel"], check=False)
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    # ------------------------------------------------------------------
    # Staged changes
    # ------------------------------------------------------------------
    def list_staged(self) -> List[str]:
        """Return the staged paths relative to the repository root."""
        result = self._run(["diff", "--cached", "--name-only"])
        return [line for line in result.stdout.splitlines() if line.strip()]

    def list_staged_with_status(self) -> List[StagedFile]:
        """Return the staged files with their one-letter status codes.

        ``git diff --name-status`` prints ``<status>\\t<path>``; renames
        and copies print a similarity score after the letter and two
        paths, ``R100\\told\\tnew``.
        """
        result = self._run(["diff", "--cached", "--name-status"])
        files: List[StagedFile] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            fields = line.split("\t")
            if len(fields) < 2:
                logger.debug("Skipping unparsable status line: %r", line)
                continue
            code = fields[0][:1]
            status = STATUS_LABELS.get(code, fields[0])
            if code in {"R", "C"} and len(fields) >= 3:
                files.append(StagedFile(fields[-1], code, status, original_path=fields[1]))
            else:
                files.append(StagedFile(fields[1], code, status))
        return files

    def diff(self, paths: Sequence[str]) -> str:
        """Return the staged, uncoloured unified diff for ``paths`` only.

        Every path is passed with the ``:(literal)`` pathspec prefix so that
        names such as ``[ab].txt`` cannot match other files.

        Raises
        ------
        DiffTooLargeError
            If the output exceeds :data:`MAX_BUFFER_SIZE` bytes.
        """
        pathspecs = [LITERAL_PATHSPEC + path for path in paths]
        return self._run_capped(["diff", "--cached", "--no-color", "--"] + pathspecs, MAX_BUFFER_SIZE)

    def stats(self) -> str:
        """Return the ``--stat`` summary of the staged changes."""
        result = self._run(["diff", "--cached", "--stat"])
        return result.stdout.strip()

    # ------------------------------------------------------------------
    # Committing
    # ------------------------------------------------------------------
    def commit(self, message_file: Path) -> str:
        """Create a commit using the message stored in ``message_file``.

        Returns the output of ``git commit``. If the commit fails, a
        GitError is raised.
        """
        result = self._run(["commit", "-F", str(message_file)])
        return result.stdout.strip()

    def commit_with_message(self, message: str) -> str:
        """Write ``message`` to a unique temporary file and commit with it.

        The temporary file is removed whether or not the commit succeeds.
        """
        message_file = Path(tempfile.gettempdir()) / f"mkcommit-{uuid.uuid4()}.txt"
        message_file.write_text(message, encoding="utf-8")
        try:
            return self.commit(message_file)
        finally:
            try:
                message_file.unlink()
            except OSError as exc:
                logger.debug("Could not remove temporary message file %s: %s", message_file, exc)
