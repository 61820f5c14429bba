# src/collection_ballot/db/time.py
"""Time and cycle label utilities for database models."""

import re
from datetime import UTC, datetime

MONTHS_PER_YEAR = 12
CYCLE_LABEL_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def cycle_label(moment: datetime) -> str:
    """Return the ``YYYY-MM`` cycle label for ``moment``."""
    return f"{moment.year:04d}-{moment.month:02d}"


def is_cycle_label(label: str) -> bool:
    """Return True if ``label`` is a ``YYYY-MM`` label with a real month."""
    match = CYCLE_LABEL_PATTERN.fullmatch(label)
    return match is not None and 1 <= int(match.group(2)) <= MONTHS_PER_YEAR


def next_cycle_label(label: str) -> str:
    """Return the label of the calendar month following ``label``.

    Args:
        label: A ``YYYY-MM`` cycle label.

    Raises:
        ValueError: If ``label`` is not a ``YYYY-MM`` string.
    """
    if not is_cycle_label(label):
        raise ValueError(f"Invalid cycle label: {label!r}")
    year, month = int(label[:4]), int(label[5:])
    if month == MONTHS_PER_YEAR:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{month + 1:02d}"
