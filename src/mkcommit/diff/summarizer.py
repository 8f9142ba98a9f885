"""
Bounding a unified diff to a size budget.

Local models have small context windows, so large diffs are condensed
before they are put into the prompt. The diff is split into one chunk
per file. Each chunk keeps its header, hunk and file-mode lines, but only
the insertion and deletion lines, never the surrounding context. The
number of change lines a file may keep is an even share of whatever
budget is left when the file is reached, with a floor so that small
files listed after a large one still get some lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


MAX_DIFF_LENGTH = 6000
MIN_LINES_PER_FILE = 10
TRUNCATION_MARKER = "\n[... diff truncated for length ...]"

_FILE_HEADER = "diff --git"
_META_PREFIXES = (
    "---",
    "+++",
    "@@",
    "new file mode",
    "deleted file mode",
    "rename from",
    "rename to",
    "Binary files",
)


@dataclass
class _FileChunk:
    header: str
    # (line, is_change) pairs in diff order
    lines: List[Tuple[str, bool]] = field(default_factory=list)

    @property
    def path(self) -> str:
        if " b/" in self.header:
            return self.header.rsplit(" b/", 1)[1]
        return self.header[len(_FILE_HEADER):].strip() or "unknown file"

    @property
    def fixed_length(self) -> int:
        fixed = [line for line, is_change in self.lines if not is_change]
        if self.header:
            fixed.append(self.header)
        return sum(len(line) + 1 for line in fixed)

    def change_cap(self, allowance: int) -> int:
        """Number of change lines that fit in ``allowance`` characters."""
        cap = 0
        used = 0
        for line, is_change in self.lines:
            if not is_change:
                continue
            used += len(line) + 1
            if used > allowance:
                break
            cap += 1
        return max(cap, MIN_LINES_PER_FILE)

    def render(self, cap: int) -> List[str]:
        rendered = [self.header] if self.header else []
        kept = 0
        omitted = 0
        for line, is_change in self.lines:
            if is_change:
                if kept >= cap:
                    omitted += 1
                    continue
                kept += 1
            rendered.append(line)
        if omitted:
            rendered.append(f"... ({omitted} more lines in {self.path})")
        return rendered


def _split_chunks(diff_text: str) -> List[_FileChunk]:
    chunks: List[_FileChunk] = []
    current = None
    for line in diff_text.splitlines():
        if line.startswith(_FILE_HEADER):
            current = _FileChunk(line)
            chunks.append(current)
            continue
        if current is None:
            current = _FileChunk("")
            chunks.append(current)
        if line.startswith(_META_PREFIXES):
            current.lines.append((line, False))
        elif line.startswith(("+", "-")):
            current.lines.append((line, True))
    return [chunk for chunk in chunks if chunk.header or chunk.lines]


def summarize(diff_text: str, max_length: int = MAX_DIFF_LENGTH) -> str:
    """Return ``diff_text`` condensed to at most ``max_length`` characters.

    A diff already within budget is returned unchanged. Otherwise the
    result never exceeds ``max_length`` plus :data:`TRUNCATION_MARKER`,
    which is appended once when whole files had to be dropped.

    Parameters
    ----------
    diff_text : str
        Unified diff as produced by ``git diff``.
    max_length : int, optional
        Character budget, 6000 by default.
    """
    if len(diff_text) <= max_length:
        return diff_text

    chunks = _split_chunks(diff_text)
    output: List[str] = []
    length = 0
    for index, chunk in enumerate(chunks):
        share = (max_length - length) // (len(chunks) - index)
        cap = chunk.change_cap(share - chunk.fixed_length)
        for line in chunk.render(cap):
            added = len(line) + (1 if output else 0)
            if length + added > max_length:
                return "\n".join(output) + TRUNCATION_MARKER
            output.append(line)
            length += added
    return "\n".join(output)
