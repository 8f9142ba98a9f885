"""
Path pattern matching for exclusion rules.

Two kinds of patterns are supported:

* Plain names, e.g. ``package-lock.json``. These match the exact path or
  any path ending in ``/<name>``, so nested lockfiles are caught too.
* Globs containing ``*``. A single ``*`` matches a run of characters that
  does not cross a ``/``; ``**`` matches anything, separators included.
  A glob without a ``/`` (``*.min.js``) is tested against the full path
  and against every suffix following a ``/``. A glob with a ``/``
  (``dist/*``) is anchored at the repository root, so ``dist/*`` matches
  ``dist/app.js`` but not ``src/dist/app.js`` or ``dist/js/app.js``.

Matching is case-sensitive and never raises.
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Optional, Pattern


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# Lockfiles excluded by default. Users may remove these from their list.
DEFAULT_EXCLUDES = [
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "bun.lockb",
    "composer.lock",
    "Gemfile.lock",
    "poetry.lock",
    "Cargo.lock",
    "pubspec.lock",
    "packages.lock.json",
    "gradle.lockfile",
    "flake.lock",
]

# Always applied, not user-editable.
FIXED_EXCLUDE_PATTERNS = [
    # Minified and bundled files
    "*.min.js",
    "*.min.css",
    "*.bundle.js",
    "*.chunk.js",
    # Build output
    "dist/**",
    "build/**",
    ".next/**",
    ".nuxt/**",
    ".output/**",
    # Source maps
    "*.map",
    # Generated files
    "*.generated.*",
    # Fonts and icons
    "*.woff",
    "*.woff2",
    "*.ttf",
    "*.eot",
    "*.ico",
    # Yarn PnP
    ".pnp.cjs",
    ".pnp.loader.mjs",
    ".yarn/cache/**",
    ".yarn/install-state.gz",
]


def is_glob(pattern: str) -> bool:
    """Return True if ``pattern`` contains a glob metacharacter."""
    return "*" in pattern


@functools.lru_cache(maxsize=256)
def compile_glob(pattern: str) -> Optional[Pattern[str]]:
    """Compile a glob pattern into an anchored regular expression.

    Returns ``None`` when the pattern cannot be compiled; such patterns
    never match anything.
    """
    parts = []
    for index, piece in enumerate(pattern.split("**")):
        if index:
            parts.append(".*")
        parts.append("[^/]*".join(re.escape(literal) for literal in piece.split("*")))
    try:
        return re.compile("^" + "".join(parts) + "$")
    except re.error as exc:
        logger.debug("Ignoring invalid exclusion pattern %r: %s", pattern, exc)
        return None


def _path_suffixes(path: str):
    """Yield ``path`` followed by every suffix that starts after a ``/``."""
    yield path
    index = path.find("/")
    while index != -1:
        yield path[index + 1:]
        index = path.find("/", index + 1)


def matches(path: str, pattern: str) -> bool:
    """Return True if ``path`` is matched by the exclusion ``pattern``.

    Parameters
    ----------
    path : str
        Repository-relative path using ``/`` separators.
    pattern : str
        Plain file name or glob pattern.
    """
    if not pattern:
        return False
    if not is_glob(pattern):
        return path == pattern or path.endswith("/" + pattern)
    regex = compile_glob(pattern)
    if regex is None:
        return False
    if "/" in pattern:
        return regex.match(path) is not None
    return any(regex.match(candidate) for candidate in _path_suffixes(path))
