"""Tests for models.py records, validation and update helpers."""

import re

import pytest

from dailyreport.exceptions import ValidationError
from dailyreport.models import (
    DailyReport,
    DailyReportInput,
    Template,
    WorkHours,
    apply_update,
    create_daily_report,
    generate_report_id,
    validate_report_fields,
)


def _input(**overrides):
    """Create a minimal valid DailyReportInput."""
    defaults = {
        "date": "2024-06-01",
        "start": "09:00",
        "end": "18:00",
        "location": "リモート",
        "task_status": "順調",
        "tasks": "設計レビュー\n実装",
        "next_day_location": "リモート",
    }
    defaults.update(overrides)
    return DailyReportInput(**defaults)


class TestWorkHours:
    """Tests for the derived total."""

    def test_total_is_derived(self):
        assert WorkHours("09:00", "18:00").total == "9h00m"

    def test_supplied_total_is_ignored(self):
        assert WorkHours("09:00", "18:00", total="1h00m").total == "9h00m"

    def test_overnight(self):
        assert WorkHours("23:30", "00:30").total == "1h00m"


class TestCreateDailyReport:
    """Tests for create_daily_report."""

    def test_builds_report(self):
        report = create_daily_report(_input())
        assert report.date == "2024-06-01"
        assert report.work_hours.total == "9h00m"
        assert report.created_at == report.updated_at
        assert report.notes == ""

    def test_id_is_date_prefixed(self):
        report = create_daily_report(_input())
        assert re.fullmatch(r"20240601-[0-9a-f]{8}", report.id)

    def test_ids_are_unique(self):
        assert generate_report_id("2024-06-01") != generate_report_id("2024-06-01")

    def test_missing_fields_collected(self):
        with pytest.raises(ValidationError) as exc_info:
            create_daily_report(_input(location="", tasks="  "))
        assert "location is required" in exc_info.value.errors
        assert "tasks are required" in exc_info.value.errors

    def test_bad_time_rejected(self):
        with pytest.raises(ValidationError, match="start time"):
            create_daily_report(_input(start="9:00"))

    def test_bad_date_rejected(self):
        with pytest.raises(ValidationError, match="invalid date"):
            create_daily_report(_input(date="2024/06/01"))


class TestValidateReportFields:
    """Tests for validate_report_fields."""

    def test_valid_returns_empty(self):
        errors = validate_report_fields(
            date="2024-06-01",
            start="09:00",
            end="18:00",
            location="x",
            task_status="x",
            tasks="x",
            next_day_location="x",
        )
        assert errors == []

    def test_none_values(self):
        errors = validate_report_fields(
            date=None,
            start=None,
            end=None,
            location=None,
            task_status=None,
            tasks=None,
            next_day_location=None,
        )
        assert len(errors) == 7


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_report_camel_case_shape(self):
        data = create_daily_report(_input(notes="メモ")).to_dict()
        assert set(data) == {
            "id",
            "date",
            "createdAt",
            "updatedAt",
            "workHours",
            "location",
            "taskStatus",
            "tasks",
            "nextDayLocation",
            "monthlyTotalHours",
            "notes",
        }
        assert data["workHours"] == {"start": "09:00", "end": "18:00", "total": "9h00m"}

    def test_from_dict_rederives_stale_total(self):
        data = create_daily_report(_input()).to_dict()
        data["workHours"]["total"] = "99h99m"
        assert DailyReport.from_dict(data).work_hours.total == "9h00m"

    def test_from_dict_missing_notes(self):
        data = create_daily_report(_input()).to_dict()
        data["notes"] = None
        assert DailyReport.from_dict(data).notes == ""

    def test_template_shape(self):
        t = Template.new("standard", "{{month}}", is_default=True)
        assert t.to_dict() == {
            "id": t.id,
            "name": "standard",
            "type": "月報",
            "content": "{{month}}",
            "isDefault": True,
        }
        assert Template.from_dict(t.to_dict()) == t


class TestTemplateNew:
    """Tests for Template.new validation."""

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError, match="name"):
            Template.new("  ", "content")

    def test_empty_content_rejected(self):
        with pytest.raises(ValidationError, match="content"):
            Template.new("name", "")

    def test_name_is_stripped(self):
        assert Template.new(" weekly ", "x").name == "weekly"


class TestApplyUpdate:
    """Tests for apply_update."""

    def test_changing_hours_rederives_total(self):
        report = create_daily_report(_input())
        updated = apply_update(report, {"end": "20:15"})
        assert updated.work_hours.total == "11h15m"
        assert updated.id == report.id
        assert updated.created_at == report.created_at

    def test_original_unchanged(self):
        report = create_daily_report(_input())
        apply_update(report, {"location": "大門"})
        assert report.location == "リモート"

    def test_unknown_field_rejected(self):
        report = create_daily_report(_input())
        with pytest.raises(ValidationError, match="id"):
            apply_update(report, {"id": "other"})

    def test_invalid_change_rejected(self):
        report = create_daily_report(_input())
        with pytest.raises(ValidationError):
            apply_update(report, {"start": "25:00"})
