"""
Top-level package for mkcommit.

mkcommit drafts conventional commit messages for the staged changes of a
Git repository using a locally running Ollama model. The command line
entry point lives in :mod:`mkcommit.cli`.
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
