"""
Application statistics: counts by status and by month of application.
"""

from collections import Counter, defaultdict
from typing import Iterable

from application_tracking.models.application import Application

MONTH_NAMES = (
    "JANUARY", "FEBRUARY", "MARCH", "APRIL", "MAY", "JUNE",
    "JULY", "AUGUST", "SEPTEMBER", "OCTOBER", "NOVEMBER", "DECEMBER",
)


def count_by_status(applications: Iterable[Application]) -> dict[str, int]:
    """Count applications per status."""
    return dict(Counter(app.application_status for app in applications))


def count_by_year_and_month(applications: Iterable[Application]) -> dict[int, dict[str, int]]:
    """
    Count applications per calendar year and month of ``time_of_application``.

    Applications without a timestamp are skipped.

    Returns:
        ``{year: {"JANUARY": n, ...}}``, only months that occur are present.
    """
    counts: dict[int, Counter] = defaultdict(Counter)
    for app in applications:
        applied_at = app.time_of_application
        if applied_at is None:
            continue
        counts[applied_at.year][MONTH_NAMES[applied_at.month - 1]] += 1
    return {year: dict(months) for year, months in counts.items()}


def group_by_status_and_month(applications: list[Application]) -> dict:
    """Build the ``{"status": ..., "date": ...}`` statistics document."""
    return {
        "status": count_by_status(applications),
        "date": count_by_year_and_month(applications),
    }
