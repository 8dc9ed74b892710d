"""Daily report and template records.

Records are plain dataclasses; ``to_dict``/``from_dict`` translate them to the
camelCase shape persisted in the store document.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import Any, Final

from dailyreport.exceptions import ValidationError
from dailyreport.timeutils import (
    current_timestamp,
    is_valid_date,
    is_valid_time,
    work_total,
)

DEFAULT_TEMPLATE_TYPE: Final = "月報"

# Field -> message shown when a required value is missing
REQUIRED_FIELDS: Final[dict[str, str]] = {
    "date": "date is required",
    "start": "work start time is required",
    "end": "work end time is required",
    "location": "location is required",
    "task_status": "task status is required",
    "tasks": "tasks are required",
    "next_day_location": "next day location is required",
}


@dataclass
class WorkHours:
    start: str
    end: str
    total: str = ""

    def __post_init__(self) -> None:
        # total is always derived, never taken from the caller
        if is_valid_time(self.start) and is_valid_time(self.end):
            self.total = work_total(self.start, self.end)


@dataclass
class DailyReport:
    """A single day's work record."""

    id: str
    date: str
    created_at: str
    updated_at: str
    work_hours: WorkHours
    location: str
    task_status: str
    tasks: str
    next_day_location: str
    monthly_total_hours: str = "0h00m"
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "workHours": {
                "start": self.work_hours.start,
                "end": self.work_hours.end,
                "total": self.work_hours.total,
            },
            "location": self.location,
            "taskStatus": self.task_status,
            "tasks": self.tasks,
            "nextDayLocation": self.next_day_location,
            "monthlyTotalHours": self.monthly_total_hours,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DailyReport:
        hours = data.get("workHours") or {}
        return cls(
            id=data["id"],
            date=data["date"],
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            work_hours=WorkHours(
                start=hours.get("start", ""),
                end=hours.get("end", ""),
                total=hours.get("total", ""),
            ),
            location=data.get("location", ""),
            task_status=data.get("taskStatus", ""),
            tasks=data.get("tasks", ""),
            next_day_location=data.get("nextDayLocation", ""),
            monthly_total_hours=data.get("monthlyTotalHours", "0h00m"),
            notes=data.get("notes") or "",
        )


@dataclass
class Template:
    """A named render template containing ``{{variable}}`` placeholders."""

    id: str
    name: str
    content: str
    type: str = DEFAULT_TEMPLATE_TYPE
    is_default: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "content": self.content,
            "isDefault": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Template:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            content=data.get("content", ""),
            type=data.get("type") or DEFAULT_TEMPLATE_TYPE,
            is_default=bool(data.get("isDefault", False)),
        )

    @classmethod
    def new(cls, name: str, content: str, *, type: str = DEFAULT_TEMPLATE_TYPE, is_default: bool = False) -> Template:
        errors = []
        if not name or not name.strip():
            errors.append("template name is required")
        if not content or not content.strip():
            errors.append("template content is required")
        if errors:
            raise ValidationError("Invalid template: " + "; ".join(errors), errors=errors)
        return cls(id=str(uuid.uuid4()), name=name.strip(), content=content, type=type, is_default=is_default)


@dataclass
class DailyReportInput:
    """Caller-supplied fields for a new report."""

    date: str
    start: str
    end: str
    location: str
    task_status: str
    tasks: str
    next_day_location: str
    notes: str = ""


def validate_report_fields(
    *,
    date: str | None,
    start: str | None,
    end: str | None,
    location: str | None,
    task_status: str | None,
    tasks: str | None,
    next_day_location: str | None,
) -> list[str]:
    """Return a list of problems with the given report fields (empty when valid)."""
    values = {
        "date": date,
        "start": start,
        "end": end,
        "location": location,
        "task_status": task_status,
        "tasks": tasks,
        "next_day_location": next_day_location,
    }
    errors = [msg for key, msg in REQUIRED_FIELDS.items() if not (values[key] or "").strip()]

    if start and not is_valid_time(start):
        errors.append(f"invalid start time {start!r} (expected HH:MM)")
    if end and not is_valid_time(end):
        errors.append(f"invalid end time {end!r} (expected HH:MM)")
    if date and not is_valid_date(date):
        errors.append(f"invalid date {date!r} (expected YYYY-MM-DD)")
    return errors


def validate_report(report: DailyReport) -> list[str]:
    return validate_report_fields(
        date=report.date,
        start=report.work_hours.start,
        end=report.work_hours.end,
        location=report.location,
        task_status=report.task_status,
        tasks=report.tasks,
        next_day_location=report.next_day_location,
    )


def generate_report_id(date: str) -> str:
    """Date-prefixed identifier, e.g. ``20240601-1a2b3c4d``."""
    return f"{date.replace('-', '')}-{uuid.uuid4().hex[:8]}"


def create_daily_report(data: DailyReportInput) -> DailyReport:
    """Build a new, validated report from caller input."""
    errors = validate_report_fields(
        date=data.date,
        start=data.start,
        end=data.end,
        location=data.location,
        task_status=data.task_status,
        tasks=data.tasks,
        next_day_location=data.next_day_location,
    )
    if errors:
        raise ValidationError("Invalid daily report: " + "; ".join(errors), errors=errors)

    now = current_timestamp()
    return DailyReport(
        id=generate_report_id(data.date),
        date=data.date,
        created_at=now,
        updated_at=now,
        work_hours=WorkHours(start=data.start, end=data.end),
        location=data.location,
        task_status=data.task_status,
        tasks=data.tasks,
        next_day_location=data.next_day_location,
        notes=data.notes or "",
    )


# Keys accepted by apply_update; anything else is rejected
_UPDATABLE: Final[set[str]] = {
    "date",
    "start",
    "end",
    "location",
    "task_status",
    "tasks",
    "next_day_location",
    "notes",
}


def apply_update(report: DailyReport, changes: dict[str, Any]) -> DailyReport:
    """Return a copy of ``report`` with ``changes`` applied and totals re-derived.

    ``id`` and ``created_at`` are carried over unchanged; ``updated_at`` is
    refreshed.
    """
    unknown = sorted(set(changes) - _UPDATABLE)
    if unknown:
        raise ValidationError(f"Unknown report fields: {', '.join(unknown)}", errors=unknown)

    hours = WorkHours(
        start=changes.get("start", report.work_hours.start),
        end=changes.get("end", report.work_hours.end),
    )
    updated = replace(
        report,
        date=changes.get("date", report.date),
        work_hours=hours,
        location=changes.get("location", report.location),
        task_status=changes.get("task_status", report.task_status),
        tasks=changes.get("tasks", report.tasks),
        next_day_location=changes.get("next_day_location", report.next_day_location),
        notes=changes.get("notes", report.notes) or "",
        updated_at=current_timestamp(),
    )
    errors = validate_report(updated)
    if errors:
        raise ValidationError("Invalid daily report: " + "; ".join(errors), errors=errors)
    return updated
