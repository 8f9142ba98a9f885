"""
Client for interacting with an Ollama LLM server.

This client wraps HTTP requests to the Ollama REST API. Chat completions
go through ``/api/chat`` and the installed models are listed through
``/api/tags``. Failures are raised as subclasses of :class:`LLMError`
so that callers can tell an unreachable server from a slow model or a
server-side error.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. Messages still propagate to the root logger once configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# Local inference is slow; anything longer than this is treated as a hang.
DEFAULT_REQUEST_TIMEOUT = 120.0
LIST_MODELS_TIMEOUT = 10.0


class LLMError(Exception):
    """Raised when communication with the LLM server fails."""

    pass


class EndpointUnreachableError(LLMError):
    """Raised when no connection to the Ollama server can be made."""

    pass


class RequestTimeoutError(LLMError):
    """Raised when the Ollama server does not answer within the timeout."""

    pass


class EndpointError(LLMError):
    """Raised when the Ollama server answers with an error or an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ModelNotFoundError(LLMError):
    """Raised when a requested model is not installed on the server."""

    def __init__(self, model: str, available: List[str]) -> None:
        super().__init__(f'Model "{model}" is not available.')
        self.model = model
        self.available = available


def strip_thinking_tags(text: str) -> str:
    """Remove thinking process tags from LLM responses.

    Many modern LLMs with reasoning capabilities output their thinking
    process in XML-like tags such as <think>, <thinking>, <thought>,
    or <reasoning>. This function strips these tags and their contents
    from the response, leaving only the actual output.

    Examples
    --------
    >>> strip_thinking_tags("<think>reasoning...</think>Answer")
    'Answer'
    """
    thinking_patterns = [
        r"<think>.*?</think>",
        r"<thinking>.*?</thinking>",
        r"<thought>.*?</thought>",
        r"<reasoning>.*?</reasoning>",
    ]

    result = text
    for pattern in thinking_patterns:
        result = re.sub(pattern, "", result, flags=re.DOTALL | re.IGNORECASE)
    return result.strip()


@dataclass
class ModelInfo:
    """An installed model as reported by ``/api/tags``."""

    name: str
    size: Optional[int] = None


@dataclass
class OllamaClient:
    """Client for interacting with an Ollama server.

    Parameters
    ----------
    model : str
        Name of the model to use for generation, e.g. ``"llama3.2"``.
    port : int, optional
        Port number of the Ollama server. Defaults to ``11434``.
    base_url : str, optional
        Base URL of the Ollama server. Defaults to ``"http://localhost"``.
    request_timeout : float, optional
        Timeout in seconds for chat requests. Defaults to 120 seconds.
    max_tokens : int, optional
        Maximum number of tokens to generate (``num_predict``).
    temperature : float, optional
        Sampling temperature.
    top_p : float, optional
        Nucleus sampling parameter.
    """

    model: str
    port: int = 11434
    base_url: str = "http://localhost"
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_tokens: Optional[int] = 500
    temperature: float = 0.2
    top_p: float = 0.9

    def _endpoint(self, path: str) -> str:
        return f"{self.base_url}:{self.port}{path}"

    def _request(self, method: str, path: str, timeout: float, **kwargs: Any) -> Dict[str, Any]:
        """Send a request and return the decoded JSON body.

        Raises
        ------
        EndpointUnreachableError
            If the connection cannot be established.
        RequestTimeoutError
            If the server does not answer within ``timeout`` seconds.
        EndpointError
            On a non-200 status or a body that is not a JSON object.
        """
        url = self._endpoint(path)
        try:
            response = requests.request(method, url, timeout=timeout, **kwargs)
        except requests.ConnectionError as exc:
            # Includes ConnectTimeout: the server was never reached.
            logger.debug("Failed to connect to %s: %s", url, exc)
            raise EndpointUnreachableError(
                f"Could not connect to Ollama at {self.base_url}:{self.port}"
            ) from exc
        except requests.Timeout as exc:
            logger.debug("Request to %s timed out: %s", url, exc)
            raise RequestTimeoutError(
                f"Request timeout after {timeout:g}s. The model may be too slow or Ollama is unresponsive."
            ) from exc
        except requests.RequestException as exc:
            logger.debug("Failed to connect to %s: %s", url, exc)
            raise EndpointUnreachableError(
                f"Could not connect to Ollama at {self.base_url}:{self.port}"
            ) from exc
        if response.status_code != 200:
            logger.debug("LLM returned non-200 status %s: %s", response.status_code, response.text)
            raise EndpointError(
                f"Ollama error ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.debug("Failed to parse LLM response: %s", exc)
            raise EndpointError("Failed to parse LLM response", status_code=200, body=response.text) from exc
        if not isinstance(data, dict):
            raise EndpointError("Unexpected response structure from LLM", status_code=200, body=response.text)
        return data

    def chat(self, system_prompt: str, user_prompt: str) -> str:
        """Generate a reply to the given system and user messages.

        The server is asked for JSON output (``format: "json"``), but this
        is only a hint; the returned text may be anything.

        Returns
        -------
        str
            The generated text with thinking tags removed.

        Raises
        ------
        LLMError
            If the request fails or the server returns an error.
        """
        options: Dict[str, Any] = {"temperature": self.temperature, "top_p": self.top_p}
        if self.max_tokens is not None:
            options["num_predict"] = self.max_tokens
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "stream": False,
            "format": "json",
            "options": options,
        }
        logger.debug(
            "Sending chat request (model %s, %d prompt chars) to %s",
            self.model,
            len(system_prompt) + len(user_prompt),
            self._endpoint("/api/chat"),
        )
        data = self._request("POST", "/api/chat", self.request_timeout, json=payload)
        # /api/chat puts the reply under 'message'; /api/generate used a
        # top-level 'response' field.
        message = data.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            raw_response = message["content"]
        elif isinstance(data.get("response"), str):
            raw_response = data["response"]
        else:
            raise EndpointError("Unexpected response structure from LLM", status_code=200, body=json.dumps(data))
        logger.debug("Raw response: %s", raw_response)
        return strip_thinking_tags(raw_response)

    def list_models(self) -> List[ModelInfo]:
        """Return the models installed on the server."""
        data = self._request("GET", "/api/tags", LIST_MODELS_TIMEOUT)
        models: List[ModelInfo] = []
        for entry in data.get("models") or []:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name") or entry.get("model")
            if not name:
                continue
            size = entry.get("size")
            models.append(ModelInfo(name=name, size=size if isinstance(size, int) else None))
        return models

    def check_model_exists(self, name: str) -> bool:
        """Return True if ``name`` is installed on the server."""
        return name in [model.name for model in self.list_models()]

    def resolve_model(self, name: str) -> str:
        """Return the installed model name matching ``name``.

        An exact match wins; otherwise a tagged variant such as
        ``llama3.2:latest`` for ``llama3.2`` is accepted.

        Raises
        ------
        ModelNotFoundError
            If no installed model matches.
        """
        names = [model.name for model in self.list_models()]
        if name in names:
            return name
        for candidate in names:
            if candidate.startswith(name + ":") or candidate.split(":")[0] == name:
                return candidate
        raise ModelNotFoundError(name, names)
