"""
Staged diff handling for mkcommit.

:mod:`mkcommit.diff.acquirer` collects the staged diff after applying the
exclusion rules, and :mod:`mkcommit.diff.summarizer` condenses it to fit
the model's prompt budget.
"""

from .acquirer import DiffAcquirer, DiffPayload  # noqa: F401
from .summarizer import MAX_DIFF_LENGTH, summarize  # noqa: F401
