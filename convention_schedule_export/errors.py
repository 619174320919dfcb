"""
Exceptions raised while decoding a schedule page.

Nothing here is recovered from: the page layout is assumed fixed, so any
structural drift aborts the whole run.
"""
from __future__ import annotations


class ScheduleFormatError(ValueError):
    """The schedule markup does not match the expected layout."""


class EnrichmentError(RuntimeError):
    """A per-event detail page could not be fetched or understood."""
