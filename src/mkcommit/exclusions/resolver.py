"""
Splitting staged files into those sent to the model and those skipped.

The resolver is a pure function of its inputs: the staged paths, the
user-configured exclusions and the fixed built-in patterns. The helpers
for editing the configured list return a new list together with a flag
telling the caller whether anything actually changed, so that no-op
edits can be reported to the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

from mkcommit.exclusions.patterns import DEFAULT_EXCLUDES, FIXED_EXCLUDE_PATTERNS, matches


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class Resolution:
    """Result of applying exclusion rules to a list of staged paths.

    Attributes
    ----------
    to_analyze : List[str]
        Paths whose changes are sent to the model, in input order.
    to_skip : List[str]
        Paths matched by at least one exclusion pattern, in input order.
    """

    to_analyze: List[str] = field(default_factory=list)
    to_skip: List[str] = field(default_factory=list)


def resolve(
    staged_paths: Sequence[str],
    configured_excludes: Iterable[str],
    fixed_patterns: Iterable[str] = FIXED_EXCLUDE_PATTERNS,
) -> Resolution:
    """Partition ``staged_paths`` into paths to analyse and paths to skip."""
    patterns = list(dict.fromkeys(list(configured_excludes) + list(fixed_patterns)))
    resolution = Resolution()
    for path in staged_paths:
        matched = next((pattern for pattern in patterns if matches(path, pattern)), None)
        if matched is None:
            resolution.to_analyze.append(path)
        else:
            logger.debug("Excluding %s (matched %r)", path, matched)
            resolution.to_skip.append(path)
    return resolution


def add_pattern(patterns: Sequence[str], pattern: str) -> Tuple[List[str], bool]:
    """Append ``pattern`` unless it is already present."""
    if pattern in patterns:
        return list(patterns), False
    return list(patterns) + [pattern], True


def remove_pattern(patterns: Sequence[str], pattern: str) -> Tuple[List[str], bool]:
    """Remove ``pattern`` if present."""
    if pattern not in patterns:
        return list(patterns), False
    return [existing for existing in patterns if existing != pattern], True


def default_patterns() -> List[str]:
    """Return a fresh copy of the default configured exclusions."""
    return list(DEFAULT_EXCLUDES)
