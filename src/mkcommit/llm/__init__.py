"""
Language model integration for mkcommit.

This package contains the :class:`OllamaClient` for communicating with
an Ollama LLM server, the prompt builders, and the
:class:`CommitMessageGenerator` which turns a staged diff into a commit
message.
"""

from .ollama_client import (  # noqa: F401
    EndpointError,
    EndpointUnreachableError,
    LLMError,
    ModelInfo,
    ModelNotFoundError,
    OllamaClient,
    RequestTimeoutError,
)
from .commit_message_generator import CommitMessageGenerator  # noqa: F401
