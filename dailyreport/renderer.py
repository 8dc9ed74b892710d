"""Monthly report rendering.

Two stages:

1. ``render_basic`` – deterministic markdown, either the built-in layout or a
   stored template with ``{{month}}``, ``{{total_days}}`` and
   ``{{total_hours}}`` substituted. No other placeholder is touched.
2. ``ReportRenderer.render_enhanced`` – asks the language model to write the
   report from the template (or a default outline) and the raw entries. Any
   failure falls back to stage 1 under a header marking it as a basic render.

Both stages refuse an empty report list; callers check before rendering.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Final

from dailyreport.aggregate import total_minutes
from dailyreport.exceptions import GenerationError, PromptError, ValidationError
from dailyreport.models import DailyReport, Template
from dailyreport.templates import TemplateStore
from dailyreport.timeutils import format_duration, format_month_jp

PROMPTS_DIR: Final = Path(__file__).parent / "prompts"
FALLBACK_HEADER: Final = "# {month}の月報 (簡易生成)"

Generator = Callable[..., str]


def load_prompt(name: str) -> str:
    path = PROMPTS_DIR / f"{name}.md"
    if not path.exists():
        raise PromptError(f"Prompt file not found: {path}", prompt_name=name)
    return path.read_text(encoding="utf-8")


def sort_reports(reports: Sequence[DailyReport]) -> list[DailyReport]:
    """Ascending by date; same-date reports keep their store order."""
    return sorted(reports, key=lambda r: r.date)


def target_month(reports: Sequence[DailyReport]) -> str:
    """``YYYY年MM月`` label taken from the earliest report."""
    return format_month_jp(sort_reports(reports)[0].date)


def fill_template(template: str, reports: Sequence[DailyReport]) -> str:
    """Substitute the three recognised placeholders in ``template``."""
    return (
        template.replace("{{month}}", target_month(reports))
        .replace("{{total_days}}", str(len(reports)))
        .replace("{{total_hours}}", format_duration(total_minutes(reports)))
    )


def render_basic(reports: Sequence[DailyReport], template: str | None = None) -> str:
    """Deterministic monthly report."""
    if not reports:
        raise ValueError("Cannot render a monthly report without daily reports")

    ordered = sort_reports(reports)
    if template:
        return fill_template(template, ordered)

    month = target_month(ordered)
    lines = [
        f"# {month}の業務報告",
        "",
        "## 業務サマリー",
        f"- 勤務日数: {len(ordered)}日",
        f"- 合計勤務時間: {format_duration(total_minutes(ordered))}",
        "",
        "## 日次業務報告",
        "",
    ]
    for report in ordered:
        lines.extend(_entry_lines(report))
    return "\n".join(lines)


def _entry_lines(report: DailyReport) -> list[str]:
    hours = report.work_hours
    lines = [
        f"### {report.date} ({report.location})",
        f"- 勤務時間: {hours.start}〜{hours.end} ({hours.total or '-'})",
        f"- タスク状況: {report.task_status}",
        "- 実施タスク:",
    ]
    lines.extend(f"  - {task.strip()}" for task in (report.tasks or "").splitlines() if task.strip())
    if report.notes:
        lines.append(f"- 特記事項: {report.notes}")
    lines.append("")
    return lines


def render_entries(reports: Sequence[DailyReport]) -> str:
    """Stored values of each report as-is, with no re-derived totals.

    Last resort for documents holding entries that ``render_basic`` rejects.
    """
    return "\n".join(line for report in sort_reports(reports) for line in _entry_lines(report))


def fallback_month(reports: Sequence[DailyReport]) -> str:
    """``target_month`` or, for a malformed date, its raw ``YYYY-MM`` prefix."""
    try:
        return target_month(reports)
    except ValidationError:
        return sort_reports(reports)[0].date[:7]


def format_report_entry(report: DailyReport) -> str:
    """Plain-text rendition of one report for the model prompt."""
    hours = report.work_hours
    return (
        f"日付: {report.date}\n"
        f"勤務時間: {hours.start}〜{hours.end} ({hours.total})\n"
        f"勤務場所: {report.location}\n"
        f"タスク状況: {report.task_status}\n"
        f"実施タスク:\n{report.tasks}\n"
        f"特記事項: {report.notes or 'なし'}\n"
    )


def build_messages(reports: Sequence[DailyReport], template: Template | None) -> list[dict[str, str]]:
    ordered = sort_reports(reports)
    if template is not None and template.content:
        instructions = f"以下のテンプレートに基づいて生成してください：\n\n{template.content}"
    else:
        instructions = f"次の形式で生成してください：\n\n{load_prompt('default_outline').strip()}"

    user_prompt = load_prompt("monthly_report.user_prompt").format(
        month=target_month(ordered),
        instructions=instructions,
        reports="\n---\n\n".join(format_report_entry(r) for r in ordered),
    )
    return [
        {"role": "system", "content": load_prompt("monthly_report.system_prompt").strip()},
        {"role": "user", "content": user_prompt},
    ]


class ReportRenderer:
    """Renders monthly reports, rewriting them through ``llm`` when available."""

    def __init__(
        self,
        templates: TemplateStore,
        llm: Generator | None = None,
        *,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> None:
        self.templates = templates
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.logger = logging.getLogger(__name__)

    def resolve_template(self, template_name: str | None = None) -> Template | None:
        """Named template, else the default one, else ``None``."""
        if template_name:
            template = self.templates.find_by_name(template_name)
            if template is None:
                self.logger.warning("Template %r not found, using built-in layout", template_name)
            return template
        return self.templates.find_default()

    def render_enhanced(self, reports: Sequence[DailyReport], template_name: str | None = None) -> str:
        """Model-written monthly report; falls back to ``render_basic`` on any failure."""
        if not reports:
            raise ValueError("Cannot render a monthly report without daily reports")

        ordered = sort_reports(reports)
        template: Template | None = None
        try:
            template = self.resolve_template(template_name)
            return self._generate(ordered, template)
        except Exception as e:  # noqa: BLE001
            self.logger.warning("Monthly report generation failed, using basic rendering: %s", e)

        header = FALLBACK_HEADER.format(month=fallback_month(ordered))
        try:
            body = render_basic(ordered, template.content if template else None)
        except ValidationError as e:
            self.logger.warning("Basic rendering failed, listing stored entries: %s", e)
            body = render_entries(ordered)
        return f"{header}\n\n{body}"

    def _generate(self, reports: list[DailyReport], template: Template | None) -> str:
        if self.llm is None:
            raise GenerationError("No API key configured")

        self.logger.info("Generating monthly report from %d daily reports...", len(reports))
        text = self.llm(
            build_messages(reports, template),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        if not text or not text.strip():
            raise GenerationError("Model returned an empty report")
        return text
