"""
Configuration storage for mkcommit.

Provides the persisted settings store (Ollama port and model, exclusion
list, debug flag). See :mod:`mkcommit.config.store` for implementation
details.
"""

from .store import ConfigError, ConfigStore, InvalidPortError, Settings, validate_port  # noqa: F401
