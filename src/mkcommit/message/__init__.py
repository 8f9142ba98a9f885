"""
Commit message model, reply normalisation and formatting.
"""

from .normalizer import Heuristic, LastResort, ParsedResponse, Structured, normalize, parse_response  # noqa: F401
from .record import COMMIT_TYPES, CommitRecord, format_commit_message  # noqa: F401
