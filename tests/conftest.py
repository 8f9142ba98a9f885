import logging
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolate_config_dir(tmp_path, monkeypatch):
    """Point the configuration store at a temporary directory.

    Tests must never read or overwrite the user's real mkcommit settings.
    """
    config_dir = Path(tmp_path) / "mkcommit-config"
    monkeypatch.setattr("mkcommit.config.store._get_config_directory", lambda: config_dir)
    yield config_dir


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo ``logging.basicConfig(force=True)`` calls made by the CLI.

    Handlers installed during a ``CliRunner`` invocation hold on to the
    runner's stream, which is closed once the invocation ends.
    """
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler and handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
