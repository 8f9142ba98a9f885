"""
Commit message generation using an LLM.

This module provides the :class:`CommitMessageGenerator` class, which
condenses the staged diff, builds the prompts, asks the Ollama model
(via :class:`OllamaClient`) for a reply and normalises that reply into a
conventional commit message.

All commit messages follow the format::

  type(scope): subject

  - bullet
  - bullet
"""

from __future__ import annotations

import logging

from mkcommit.diff.acquirer import DiffPayload
from mkcommit.diff.summarizer import MAX_DIFF_LENGTH, summarize
from mkcommit.llm.ollama_client import OllamaClient
from mkcommit.llm.prompts import build_system_prompt, build_user_prompt
from mkcommit.message.normalizer import ParsedResponse, Structured, parse_response
from mkcommit.message.record import format_commit_message


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class CommitMessageGenerator:
    """Generate conventional commit messages for a diff payload."""

    def __init__(self, ollama_client: OllamaClient, max_diff_length: int = MAX_DIFF_LENGTH) -> None:
        self.ollama_client = ollama_client
        self.max_diff_length = max_diff_length

    def generate_record(self, payload: DiffPayload) -> ParsedResponse:
        """Ask the model for a commit message and normalise its reply.

        Raises
        ------
        LLMError
            If the model could not be queried. Malformed replies never
            raise; they degrade to a heuristic record.
        """
        truncated_diff = summarize(payload.raw_diff, self.max_diff_length)
        if len(truncated_diff) < len(payload.raw_diff):
            logger.debug("Diff condensed from %d to %d chars", len(payload.raw_diff), len(truncated_diff))
        user_prompt = build_user_prompt(payload.analyzed_files, payload.stats, truncated_diff)
        raw_message = self.ollama_client.chat(build_system_prompt(), user_prompt)
        result = parse_response(raw_message)
        if not isinstance(result, Structured):
            logger.warning("Could not parse the model reply as JSON; used %s extraction.", type(result).__name__)
        return result

    def generate(self, payload: DiffPayload) -> str:
        """Return the formatted commit message for ``payload``."""
        return format_commit_message(self.generate_record(payload).record)
