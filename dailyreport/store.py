"""JSON-document store for daily reports and settings.

The whole document lives in one file:

    {
      "reports": [ ...daily reports... ],
      "settings": {
        "userName": "", "defaultLocation": "...",
        "defaultWorkHours": {"start": "09:30", "end": "18:30"},
        "api": {"apiKey": "", "model": "gpt-4o"},
        "templates": [ ...templates... ]
      }
    }

Every operation reads the full document, mutates it in memory and writes the
full document back through a temporary file + ``os.replace``. There is no
locking: one process, one command at a time.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Final

from dailyreport.exceptions import StoreUninitializedError
from dailyreport.models import DailyReport

DEFAULT_SETTINGS: Final[dict[str, Any]] = {
    "userName": "",
    "defaultLocation": "リモート",
    "defaultWorkHours": {"start": "09:30", "end": "18:30"},
    "api": {"apiKey": "", "model": "gpt-4o"},
    "templates": [],
}


def default_document() -> dict[str, Any]:
    return {"reports": [], "settings": copy.deepcopy(DEFAULT_SETTINGS)}


def _atomic_write(path: Path, content: str) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


class ReportStore:
    """Daily reports persisted in a single JSON document at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)
        self._initialized = False

    # ------------------------------------------------------------------
    # Document I/O
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Create the document with default contents if it does not exist yet."""
        if self._initialized:
            return
        try:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                _atomic_write(self.path, json.dumps(default_document(), ensure_ascii=False, indent=2))
                self.logger.info("Created report store at %s", self.path)
        except OSError as e:
            raise StoreUninitializedError(
                f"Could not create report store at {self.path}: {e}", path=str(self.path), cause=e
            ) from e
        self._initialized = True

    def read_document(self) -> dict[str, Any]:
        """Load the full document, creating it on first access."""
        self.initialize()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUninitializedError(
                f"Could not load report store at {self.path}: {e}", path=str(self.path), cause=e
            ) from e

        if not isinstance(data, dict):
            raise StoreUninitializedError(
                f"Report store at {self.path} is not a JSON object", path=str(self.path)
            )

        # Fill in anything missing from older or hand-edited documents
        data.setdefault("reports", [])
        settings = data.setdefault("settings", {})
        for key, value in DEFAULT_SETTINGS.items():
            settings.setdefault(key, copy.deepcopy(value))
        return data

    def write_document(self, data: dict[str, Any]) -> None:
        """Replace the full document on disk."""
        self.initialize()
        try:
            _atomic_write(self.path, json.dumps(data, ensure_ascii=False, indent=2))
        except (OSError, TypeError, ValueError) as e:
            raise StoreUninitializedError(
                f"Could not write report store at {self.path}: {e}", path=str(self.path), cause=e
            ) from e

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def upsert(self, report: DailyReport) -> None:
        """Replace the report with the same id in place, or append it."""
        data = self.read_document()
        reports = data["reports"]
        record = report.to_dict()

        for i, existing in enumerate(reports):
            if existing.get("id") == report.id:
                reports[i] = record
                break
        else:
            reports.append(record)

        self.write_document(data)

    def find_by_id(self, report_id: str) -> DailyReport | None:
        for record in self.read_document()["reports"]:
            if record.get("id") == report_id:
                return DailyReport.from_dict(record)
        return None

    def find_by_date(self, date: str) -> DailyReport | None:
        """First report recorded for ``date`` in insertion order."""
        for record in self.read_document()["reports"]:
            if record.get("date") == date:
                return DailyReport.from_dict(record)
        return None

    def list_all(self) -> list[DailyReport]:
        """All reports in insertion order."""
        return [DailyReport.from_dict(r) for r in self.read_document()["reports"]]

    def list_by_date_range(self, start_date: str, end_date: str) -> list[DailyReport]:
        """Reports with ``start_date <= date <= end_date``.

        ``YYYY-MM-DD`` is fixed-width and zero-padded, so plain string
        comparison is chronological.
        """
        return [
            DailyReport.from_dict(r)
            for r in self.read_document()["reports"]
            if start_date <= r.get("date", "") <= end_date
        ]

    def delete(self, report_id: str) -> bool:
        """Remove a report; ``False`` if no report has that id."""
        data = self.read_document()
        before = len(data["reports"])
        data["reports"] = [r for r in data["reports"] if r.get("id") != report_id]
        if len(data["reports"]) == before:
            return False
        self.write_document(data)
        return True

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self) -> dict[str, Any]:
        return self.read_document()["settings"]

    def update_settings(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Shallow-merge ``changes`` into the settings; templates are left alone."""
        data = self.read_document()
        changes = {k: v for k, v in changes.items() if k != "templates"}
        data["settings"] = {**data["settings"], **changes}
        self.write_document(data)
        return data["settings"]

    def reset_settings(self) -> dict[str, Any]:
        """Restore default settings, keeping stored templates."""
        data = self.read_document()
        templates = data["settings"].get("templates", [])
        data["settings"] = {**copy.deepcopy(DEFAULT_SETTINGS), "templates": templates}
        self.write_document(data)
        return data["settings"]
