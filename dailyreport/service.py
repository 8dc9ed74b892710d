"""Caller-facing operations on daily reports, monthly reports and templates."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Final

from dailyreport.aggregate import monthly_reports, monthly_total_hours
from dailyreport.exceptions import (
    DuplicateReportError,
    EmptyReportSetError,
    TemplateNotFoundError,
    ValidationError,
)
from dailyreport.models import (
    DEFAULT_TEMPLATE_TYPE,
    DailyReport,
    DailyReportInput,
    Template,
    WorkHours,
    apply_update,
    create_daily_report,
    validate_report,
)
from dailyreport.renderer import ReportRenderer
from dailyreport.store import ReportStore
from dailyreport.templates import TemplateStore
from dailyreport.timeutils import current_date, current_timestamp, is_valid_date, is_valid_month

TEMPLATE_OPERATIONS: Final[tuple[str, ...]] = ("list", "show", "create", "edit", "delete", "set-default")


@dataclass
class ReportFilter:
    """Optional filters for ``ReportService.list_reports``."""

    month: str | None = None
    start: str | None = None
    end: str | None = None
    location: str | None = None

    def validate(self) -> None:
        errors = []
        if self.month and not is_valid_month(self.month):
            errors.append(f"invalid month {self.month!r} (expected YYYY-MM)")
        for label, value in (("start", self.start), ("end", self.end)):
            if value and not is_valid_date(value):
                errors.append(f"invalid {label} date {value!r} (expected YYYY-MM-DD)")
        if errors:
            raise ValidationError("Invalid report filter: " + "; ".join(errors), errors=errors)


class ReportService:
    """Ties the report store, template store and renderer together."""

    def __init__(self, store: ReportStore, renderer: ReportRenderer | None = None) -> None:
        self.store = store
        self.templates = TemplateStore(store)
        self.renderer = renderer or ReportRenderer(self.templates)
        self.logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Daily reports
    # ------------------------------------------------------------------

    def create_report(self, data: DailyReportInput, *, replace_existing: bool = False) -> DailyReport:
        """Validate and store a new report.

        A second report for an existing date raises ``DuplicateReportError``
        unless ``replace_existing`` is set, in which case the stored report
        keeps its id and creation time and takes the new contents.
        """
        report = create_daily_report(data)

        existing = self.store.find_by_date(report.date)
        if existing is not None:
            if not replace_existing:
                raise DuplicateReportError(f"A report for {report.date} already exists", date=report.date)
            report = replace(report, id=existing.id, created_at=existing.created_at)

        self.store.upsert(report)
        self._refresh_month(report.date[:7])
        report = self.store.find_by_id(report.id)
        self.logger.info("Saved report for %s (%s)", report.date, report.work_hours.total)
        return report

    def update_report(self, report: DailyReport) -> DailyReport:
        """Store a full replacement of an existing report.

        The work-hour total is re-derived and ``updated_at`` refreshed; the
        caller's ``total`` is never trusted. Moving a report onto a date that
        already has another report raises ``DuplicateReportError``.
        """
        errors = validate_report(report)
        if errors:
            raise ValidationError("Invalid daily report: " + "; ".join(errors), errors=errors)
        previous = self.store.find_by_id(report.id)
        if previous is None:
            raise ValidationError(f"No report with id {report.id}", errors=[report.id])
        if report.date != previous.date:
            clash = self.store.find_by_date(report.date)
            if clash is not None and clash.id != report.id:
                raise DuplicateReportError(f"A report for {report.date} already exists", date=report.date)

        report = replace(
            report,
            work_hours=WorkHours(start=report.work_hours.start, end=report.work_hours.end),
            updated_at=current_timestamp(),
        )
        self.store.upsert(report)
        self._refresh_month(report.date[:7])
        if previous.date[:7] != report.date[:7]:
            self._refresh_month(previous.date[:7])
        return self.store.find_by_id(report.id)

    def edit_report(self, report_id: str, changes: dict[str, Any]) -> DailyReport:
        """Apply a partial update to the report with ``report_id``."""
        report = self.store.find_by_id(report_id)
        if report is None:
            raise ValidationError(f"No report with id {report_id}", errors=[report_id])
        return self.update_report(apply_update(report, changes))

    def get_report(self, report_id: str) -> DailyReport | None:
        return self.store.find_by_id(report_id)

    def delete_report(self, report_id: str) -> bool:
        report = self.store.find_by_id(report_id)
        if report is None or not self.store.delete(report_id):
            return False
        self._refresh_month(report.date[:7])
        return True

    def today_report_exists(self) -> bool:
        return self.store.find_by_date(current_date()) is not None

    def list_reports(self, report_filter: ReportFilter | None = None) -> list[DailyReport]:
        """Reports matching ``report_filter``, newest first."""
        report_filter = report_filter or ReportFilter()
        report_filter.validate()

        if report_filter.start or report_filter.end:
            reports = self.store.list_by_date_range(
                report_filter.start or "0000-01-01",
                report_filter.end or current_date(),
            )
        else:
            reports = self.store.list_all()

        if report_filter.month:
            reports = [r for r in reports if r.date[:7] == report_filter.month]
        if report_filter.location:
            needle = report_filter.location.lower()
            reports = [r for r in reports if needle in r.location.lower()]

        return sorted(reports, key=lambda r: r.date, reverse=True)

    def _refresh_month(self, year_month: str) -> None:
        """Rewrite ``monthlyTotalHours`` on every report of ``year_month``."""
        total = monthly_total_hours(self.store, year_month)
        for report in monthly_reports(self.store, year_month):
            if report.monthly_total_hours != total:
                self.store.upsert(replace(report, monthly_total_hours=total))

    # ------------------------------------------------------------------
    # Monthly reports
    # ------------------------------------------------------------------

    def generate_monthly_report(self, year_month: str, template_name: str | None = None) -> str:
        """Monthly report text for ``YYYY-MM``.

        Raises:
            ValidationError: If ``year_month`` is malformed.
            EmptyReportSetError: If no reports exist for the month.
        """
        reports = monthly_reports(self.store, year_month)
        if not reports:
            raise EmptyReportSetError(f"No daily reports for {year_month}", year_month=year_month)

        self.logger.info("Found %d daily reports for %s", len(reports), year_month)
        return self.renderer.render_enhanced(reports, template_name)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def manage_template(self, op: str, data: dict[str, Any] | None = None) -> Any:
        """Dispatch a template operation.

        ``list`` -> list of templates; ``show`` -> template; ``create``/``edit``/
        ``set-default`` -> saved template; ``delete`` -> bool. Operations that
        name a template (``data["name"]``) raise ``TemplateNotFoundError`` when
        it does not exist.
        """
        data = data or {}
        if op not in TEMPLATE_OPERATIONS:
            raise ValidationError(
                f"Unknown template operation {op!r}, must be one of {list(TEMPLATE_OPERATIONS)}",
                errors=[op],
            )

        if op == "list":
            return self.templates.list()

        if op == "create":
            template = Template.new(
                data.get("name", ""),
                data.get("content", ""),
                type=data.get("type") or DEFAULT_TEMPLATE_TYPE,
                is_default=bool(data.get("is_default", False)),
            )
            self.templates.save(template)
            self.logger.info("Created template %s", template.name)
            return template

        if op == "set-default":
            return self.templates.set_default(data.get("name", ""))

        name = data.get("name", "")
        template = self.templates.find_by_name(name)
        if template is None:
            raise TemplateNotFoundError(f"Template not found: {name}", name=name)

        if op == "show":
            return template

        if op == "delete":
            return self.templates.delete(template.id)

        # edit
        updated = Template.new(
            data.get("new_name") or template.name,
            data.get("content") or template.content,
            type=data.get("type") or template.type,
            is_default=bool(data.get("is_default", template.is_default)),
        )
        updated = replace(updated, id=template.id)
        self.templates.save(updated)
        return updated
