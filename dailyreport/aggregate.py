"""Monthly work-hour totals."""

from __future__ import annotations

from collections.abc import Iterable

from dailyreport.models import DailyReport
from dailyreport.store import ReportStore
from dailyreport.timeutils import elapsed_minutes, format_duration, month_bounds


def total_minutes(reports: Iterable[DailyReport]) -> int:
    """Sum of worked minutes, re-derived from each report's start/end.

    The cached ``work_hours.total`` string is ignored.
    """
    return sum(elapsed_minutes(r.work_hours.start, r.work_hours.end) for r in reports)


def monthly_range(year_month: str) -> tuple[str, str]:
    """``("YYYY-MM-01", "YYYY-MM-<last day>")`` for a ``YYYY-MM`` month."""
    return month_bounds(year_month)


def monthly_reports(store: ReportStore, year_month: str) -> list[DailyReport]:
    start, end = monthly_range(year_month)
    return store.list_by_date_range(start, end)


def monthly_total_hours(store: ReportStore, year_month: str) -> str:
    """Formatted total (e.g. ``17h00m``) for every stored report in the month."""
    return format_duration(total_minutes(monthly_reports(store, year_month)))
