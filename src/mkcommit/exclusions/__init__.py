"""
File exclusion rules for mkcommit.

Staged files matching either the user-configured exclusions or the
built-in fixed patterns are kept out of the diff sent to the model. See
:mod:`mkcommit.exclusions.patterns` and :mod:`mkcommit.exclusions.resolver`.
"""

from .patterns import DEFAULT_EXCLUDES, FIXED_EXCLUDE_PATTERNS, matches  # noqa: F401
from .resolver import Resolution, add_pattern, default_patterns, remove_pattern, resolve  # noqa: F401
