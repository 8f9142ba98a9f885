"""
Turning a raw model reply into a valid :class:`CommitRecord`.

The model is asked for a JSON object, but local models regularly wrap it
in prose or code fences, use type synonyms, or ignore the format
altogether. :func:`parse_response` therefore tries three strategies in
order and reports which one produced the record:

* :class:`Structured` - a JSON object was found and repaired field by
  field.
* :class:`Heuristic` - no usable JSON, but the first line follows the
  ``type(scope): subject`` grammar.
* :class:`LastResort` - neither; the first line becomes a ``chore``
  subject.

Parsing never raises, so the interactive loop always has a message to
show.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from mkcommit.message.record import (
    COMMIT_TYPES,
    DEFAULT_TYPE,
    MAX_SUBJECT_LENGTH,
    TYPE_SYNONYMS,
    CommitRecord,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


PLACEHOLDER_SUBJECT = "update files"

_OPENING_FENCE = re.compile(r"^```[\w+-]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")
_CONVENTIONAL_LINE = re.compile(
    r"^(" + "|".join(COMMIT_TYPES) + r")(?:\(([^)]+)\))?:\s*(.+)$",
    re.IGNORECASE,
)
_BULLET = re.compile(r"^[-*]\s*")


@dataclass(frozen=True)
class ParsedResponse:
    """A normalised commit record tagged with how it was obtained."""

    record: CommitRecord


@dataclass(frozen=True)
class Structured(ParsedResponse):
    """Record parsed from a JSON object."""


@dataclass(frozen=True)
class Heuristic(ParsedResponse):
    """Record extracted from a conventional-commit first line."""


@dataclass(frozen=True)
class LastResort(ParsedResponse):
    """Record built from the first line of unstructured text."""


def clean_subject(subject: str) -> str:
    """Lower-case, drop one trailing period and cut to 50 characters."""
    cleaned = " ".join(subject.split()).lower()
    if cleaned.endswith("."):
        cleaned = cleaned[:-1]
    cleaned = cleaned[:MAX_SUBJECT_LENGTH].strip()
    return cleaned or PLACEHOLDER_SUBJECT


def normalize_type(value: str) -> str:
    """Map ``value`` onto one of the canonical commit types."""
    lowered = value.strip().lower()
    if lowered in COMMIT_TYPES:
        return lowered
    return TYPE_SYNONYMS.get(lowered, DEFAULT_TYPE)


def _strip_fences(text: str) -> str:
    text = _OPENING_FENCE.sub("", text.strip())
    return _CLOSING_FENCE.sub("", text).strip()


def _json_candidate(text: str) -> str:
    if text.startswith("{") and text.endswith("}"):
        return text
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text


def _clean_body(body: Any) -> List[str]:
    if isinstance(body, str):
        body = [body]
    if not isinstance(body, list):
        return []
    return [item.strip() for item in body if isinstance(item, str) and item.strip()]


def _from_json(text: str) -> Optional[CommitRecord]:
    try:
        data: Dict[str, Any] = json.loads(_json_candidate(text))
    except (ValueError, RecursionError) as exc:
        logger.debug("Reply is not valid JSON: %s", exc)
        return None
    if not isinstance(data, dict):
        logger.debug("Reply JSON is not an object: %r", data)
        return None
    commit_type = data.get("type")
    subject = data.get("subject")
    if not isinstance(commit_type, str) or not commit_type.strip():
        logger.debug("Missing or invalid 'type' field")
        return None
    if not isinstance(subject, str) or not subject.strip():
        logger.debug("Missing or invalid 'subject' field")
        return None

    scope = data.get("scope")
    if not isinstance(scope, str) or not scope.strip():
        scope = None
    return CommitRecord(
        type=normalize_type(commit_type),
        subject=clean_subject(subject),
        scope=scope.strip() if scope else None,
        body=_clean_body(data.get("body")),
    )


def _from_text(text: str) -> ParsedResponse:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    match = _CONVENTIONAL_LINE.match(lines[0]) if lines else None
    if match:
        body = [_BULLET.sub("", line) for line in lines[1:] if line.startswith(("-", "*"))]
        scope = (match.group(2) or "").strip()
        return Heuristic(
            CommitRecord(
                type=match.group(1).lower(),
                subject=clean_subject(match.group(3)),
                scope=scope or None,
                body=[item for item in body if item],
            )
        )
    subject = clean_subject(lines[0]) if lines else PLACEHOLDER_SUBJECT
    return LastResort(CommitRecord(type=DEFAULT_TYPE, subject=subject))


def parse_response(raw: str) -> ParsedResponse:
    """Parse a model reply into a tagged commit record. Never raises."""
    text = _strip_fences(raw or "")
    record = _from_json(text)
    if record is not None:
        result: ParsedResponse = Structured(record)
    else:
        result = _from_text(text)
    logger.debug("Normalised reply as %s: %s", type(result).__name__, result.record)
    return result


def normalize(raw: str) -> CommitRecord:
    """Return the commit record for a model reply. Never raises."""
    return parse_response(raw).record
