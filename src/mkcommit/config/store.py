"""
Persisted configuration for mkcommit.

Settings live in a JSON file named ``config.json`` inside the
per-user application directory returned by :func:`click.get_app_dir`.
A missing file means "all defaults". The file is read once per
invocation by :meth:`ConfigStore.load`, which returns a :class:`Settings`
handle that is passed explicitly to the components that need it.

Each mutation re-reads the file, updates a single key and writes the
result atomically through a temporary file and :func:`os.replace`.
Concurrent invocations are not coordinated: the last writer wins.

If the file is malformed or holds values of the wrong type, a
:class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import click

from mkcommit.exclusions.resolver import add_pattern, default_patterns, remove_pattern


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


APP_NAME = "mkcommit"
CONFIG_FILENAME = "config.json"

DEFAULT_PORT = 11434
DEFAULT_MODEL = "llama3.2"

KEY_PORT = "ollamaPort"
KEY_MODEL = "ollamaModel"
KEY_EXCLUDES = "excludeFiles"
KEY_DEBUG = "debug"


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or invalid."""

    pass


class InvalidPortError(ConfigError):
    """Raised when a port is not an integer between 1 and 65535."""

    pass


@dataclass
class Settings:
    """Effective configuration for one invocation."""

    ollama_port: int = DEFAULT_PORT
    ollama_model: str = DEFAULT_MODEL
    exclude_files: List[str] = field(default_factory=default_patterns)
    debug: bool = False


def _get_config_directory() -> Path:
    """Return the directory where the configuration file is stored."""
    return Path(click.get_app_dir(APP_NAME))


def validate_port(value: Union[int, str]) -> int:
    """Return ``value`` as a port number.

    Raises
    ------
    InvalidPortError
        If ``value`` is not an integer between 1 and 65535.
    """
    if isinstance(value, bool):
        raise InvalidPortError("Invalid port. Must be a number between 1 and 65535.")
    try:
        port = int(str(value).strip())
    except ValueError:
        raise InvalidPortError("Invalid port. Must be a number between 1 and 65535.") from None
    if not 1 <= port <= 65535:
        raise InvalidPortError("Invalid port. Must be a number between 1 and 65535.")
    return port


def _defaults() -> Dict[str, Any]:
    return {
        KEY_PORT: DEFAULT_PORT,
        KEY_MODEL: DEFAULT_MODEL,
        KEY_EXCLUDES: default_patterns(),
        KEY_DEBUG: False,
    }


def _validate(data: Dict[str, Any]) -> None:
    port = data[KEY_PORT]
    if not isinstance(port, int) or isinstance(port, bool):
        raise ConfigError(f"'{KEY_PORT}' must be an integer")
    if not isinstance(data[KEY_MODEL], str):
        raise ConfigError(f"'{KEY_MODEL}' must be a string")
    excludes = data[KEY_EXCLUDES]
    if not isinstance(excludes, list) or not all(isinstance(item, str) for item in excludes):
        raise ConfigError(f"'{KEY_EXCLUDES}' must be a list of strings")
    if not isinstance(data[KEY_DEBUG], bool):
        raise ConfigError(f"'{KEY_DEBUG}' must be a boolean")


class ConfigStore:
    """Read and update the persisted configuration file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or _get_config_directory() / CONFIG_FILENAME

    def _read(self) -> Dict[str, Any]:
        data = _defaults()
        if not self.path.exists():
            logger.debug("No configuration file at %s; using defaults", self.path)
            return data
        try:
            stored = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.debug("Failed to read or parse configuration file: %s", exc)
            raise ConfigError(f"Invalid configuration file {self.path}: {exc}") from exc
        if not isinstance(stored, dict):
            raise ConfigError(f"Invalid configuration file {self.path}: expected a JSON object")
        data.update(stored)
        _validate(data)
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".config-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise ConfigError(f"Could not write configuration file {self.path}: {exc}") from exc

    def load(self) -> Settings:
        """Return the current settings, filling in defaults."""
        data = self._read()
        logger.debug("Loaded configuration from %s: %s", self.path, data)
        return Settings(
            ollama_port=data[KEY_PORT],
            ollama_model=data[KEY_MODEL],
            exclude_files=list(data[KEY_EXCLUDES]),
            debug=data[KEY_DEBUG],
        )

    def set(self, key: str, value: Any) -> None:
        """Persist a single configuration value."""
        data = self._read()
        data[key] = value
        _validate(data)
        self._write(data)
        logger.debug("Saved %s=%r to %s", key, value, self.path)

    # ------------------------------------------------------------------
    # Typed setters
    # ------------------------------------------------------------------
    def set_port(self, value: Union[int, str]) -> int:
        port = validate_port(value)
        self.set(KEY_PORT, port)
        return port

    def set_model(self, model: str) -> None:
        self.set(KEY_MODEL, model)

    def set_debug(self, enabled: bool) -> None:
        self.set(KEY_DEBUG, enabled)

    # ------------------------------------------------------------------
    # Exclusion list
    # ------------------------------------------------------------------
    def add_exclude(self, pattern: str) -> bool:
        """Add ``pattern`` to the exclusion list; False if already present."""
        patterns, changed = add_pattern(self._read()[KEY_EXCLUDES], pattern)
        if changed:
            self.set(KEY_EXCLUDES, patterns)
        return changed

    def remove_exclude(self, pattern: str) -> bool:
        """Remove ``pattern`` from the exclusion list; False if absent."""
        patterns, changed = remove_pattern(self._read()[KEY_EXCLUDES], pattern)
        if changed:
            self.set(KEY_EXCLUDES, patterns)
        return changed

    def reset_excludes(self) -> None:
        """Restore the default exclusion list."""
        self.set(KEY_EXCLUDES, default_patterns())
