"""Command-line entry point for the daily report converter.

Records daily work reports and turns a month of them into a monthly report:

    daily-report create --date 2024-06-01 --start 09:00 --end 18:00 --tasks "..."
    daily-report edit --date 2024-06-01 --end 19:00
    daily-report list --month 2024-06
    daily-report generate --month 2024-06 --template standard --output june.md
    daily-report template list | show NAME | create NAME --file F | edit NAME [--file F] [--rename N]
                          | delete NAME | set-default NAME
    daily-report config show | set KEY VALUE | reset

Configuration comes from an optional ``--profile`` YAML/JSON file and these
environment variables (a local ``.env`` is loaded first):
    DAILY_REPORT_DATA_PATH   – (optional) store document (default ~/.daily-report-converter/db.json)
    OPENAI_API_KEY           – (optional) enables the model-written monthly report
    OPENAI_BASE_URL          – (optional) alternative OpenAI-compatible endpoint
    MODEL_ID                 – (optional) model override (default: settings, then gpt-4o)
    REQUEST_TIMEOUT          – (optional) seconds per model request (default 60)
"""

from __future__ import annotations

import argparse
import copy
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from dailyreport.config import Config, ProfileConfig
from dailyreport.exceptions import DailyReportError, ValidationError
from dailyreport.llm import build_llm
from dailyreport.models import DEFAULT_TEMPLATE_TYPE, DailyReport, DailyReportInput
from dailyreport.renderer import ReportRenderer
from dailyreport.service import ReportFilter, ReportService
from dailyreport.store import ReportStore
from dailyreport.templates import TemplateStore
from dailyreport.timeutils import current_date, current_month

logger = logging.getLogger(__name__)

# Settings keys that `config set` may change, mapped to their path in the document
SETTABLE_KEYS = {
    "user-name": ("userName",),
    "default-location": ("defaultLocation",),
    "default-start": ("defaultWorkHours", "start"),
    "default-end": ("defaultWorkHours", "end"),
    "api-key": ("api", "apiKey"),
    "model": ("api", "model"),
}

# --------------------------------------------------------------------------------------
# Logging helpers
# --------------------------------------------------------------------------------------


def setup_logging(verbose: bool = False) -> None:
    """Configure a root logger that prints to stdout and also persists errors."""
    fmt = "%(asctime)s | %(levelname)-8s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    out_hdlr = logging.StreamHandler(sys.stdout)
    out_hdlr.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    logs_dir = Path("logs")
    logs_dir.mkdir(exist_ok=True)
    err_hdlr = logging.FileHandler(logs_dir / "error.log", encoding="utf-8")
    err_hdlr.setLevel(logging.ERROR)
    err_hdlr.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root.handlers = [out_hdlr, err_hdlr]

    # Quiet noisy deps
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


# --------------------------------------------------------------------------------------
# Output helpers
# --------------------------------------------------------------------------------------


def reports_frame(reports: list[DailyReport]) -> pd.DataFrame:
    """Tabular view of reports for the ``list`` command."""
    rows = [
        {
            "date": r.date,
            "hours": f"{r.work_hours.start}-{r.work_hours.end}",
            "total": r.work_hours.total,
            "location": r.location,
            "status": r.task_status,
            "tasks": (r.tasks[:30] + "...") if len(r.tasks) > 30 else r.tasks,
        }
        for r in reports
    ]
    df = pd.DataFrame(rows, columns=["date", "hours", "total", "location", "status", "tasks"])
    df["tasks"] = df["tasks"].str.replace("\n", " ", regex=False)
    return df


def masked_settings(settings: dict) -> dict:
    shown = copy.deepcopy(settings)
    api = shown.get("api") or {}
    if api.get("apiKey"):
        api["apiKey"] = "********"
    return shown


# --------------------------------------------------------------------------------------
# Commands
# --------------------------------------------------------------------------------------


def cmd_create(service: ReportService, args: argparse.Namespace) -> int:
    settings = service.store.get_settings()
    hours = settings.get("defaultWorkHours") or {}
    location = args.location or settings.get("defaultLocation", "")
    report = service.create_report(
        DailyReportInput(
            date=args.date or current_date(),
            start=args.start or hours.get("start", ""),
            end=args.end or hours.get("end", ""),
            location=location,
            task_status=args.status,
            tasks=args.tasks.replace("\\n", "\n"),
            next_day_location=args.next_location or location,
            notes=args.notes or "",
        ),
        replace_existing=args.replace,
    )
    print(f"Saved report {report.id} for {report.date} ({report.work_hours.total}, month {report.monthly_total_hours})")
    return 0


def cmd_edit(service: ReportService, args: argparse.Namespace) -> int:
    if args.id:
        report = service.get_report(args.id)
        target = args.id
    else:
        target = args.date or current_date()
        report = service.store.find_by_date(target)
    if report is None:
        raise ValidationError(f"No report found for {target}", errors=[target])

    flags = {
        "date": args.new_date,
        "start": args.start,
        "end": args.end,
        "location": args.location,
        "task_status": args.status,
        "tasks": args.tasks.replace("\\n", "\n") if args.tasks is not None else None,
        "next_day_location": args.next_location,
        "notes": args.notes,
    }
    changes = {key: value for key, value in flags.items() if value is not None}
    if not changes:
        print("Nothing to change")
        return 0

    report = service.edit_report(report.id, changes)
    print(f"Updated report {report.id} for {report.date} ({report.work_hours.total}, month {report.monthly_total_hours})")
    return 0


def cmd_list(service: ReportService, args: argparse.Namespace) -> int:
    reports = service.list_reports(
        ReportFilter(month=args.month, start=args.start, end=args.end, location=args.location)
    )
    if not reports:
        print("No matching reports")
        return 0
    if args.json:
        print(json.dumps([r.to_dict() for r in reports], ensure_ascii=False, indent=2))
    else:
        print(reports_frame(reports).to_string(index=False))
        print(f"\nTotal: {len(reports)} reports")
    return 0


def cmd_generate(service: ReportService, args: argparse.Namespace) -> int:
    month = args.month or current_month()
    text = service.generate_monthly_report(month, args.template)
    if args.output == "-":
        print(text)
        return 0
    output = Path(args.output or f"{month}_monthly_report.md")
    output.write_text(text, encoding="utf-8")
    logger.info("Saved monthly report to %s", output)
    return 0


def cmd_template(service: ReportService, args: argparse.Namespace) -> int:
    if args.op == "list":
        templates = service.manage_template("list")
        if not templates:
            print("No templates")
        for i, t in enumerate(templates, 1):
            print(f"{i}. {t.name} ({t.type}){' [default]' if t.is_default else ''}")
        return 0

    if args.op == "create":
        content = Path(args.file).read_text(encoding="utf-8")
        t = service.manage_template(
            "create",
            {"name": args.name, "content": content, "type": args.type, "is_default": args.default},
        )
        print(f"Created template {t.name}")
        return 0

    if args.op == "edit":
        data = {"name": args.name, "new_name": args.rename, "type": args.type}
        if args.file:
            data["content"] = Path(args.file).read_text(encoding="utf-8")
        if args.default:
            data["is_default"] = True
        t = service.manage_template("edit", data)
        print(f"Updated template {t.name}")
        return 0

    result = service.manage_template(args.op, {"name": args.name})
    if args.op == "show":
        print(f"{result.name} ({result.type}){' [default]' if result.is_default else ''}")
        print("----------")
        print(result.content)
        print("----------")
    elif args.op == "delete":
        print(f"Deleted template {args.name}")
    else:
        print(f"Template {result.name} is now the default")
    return 0


def cmd_config(service: ReportService, args: argparse.Namespace) -> int:
    store = service.store
    if args.op == "reset":
        store.reset_settings()
        print("Settings reset")
        return 0
    if args.op == "set":
        path = SETTABLE_KEYS[args.key]
        settings = store.get_settings()
        if len(path) == 1:
            store.update_settings({path[0]: args.value})
        else:
            nested = dict(settings.get(path[0]) or {})
            nested[path[1]] = args.value
            store.update_settings({path[0]: nested})
        print(f"Set {args.key}")
        return 0
    print(json.dumps(masked_settings(store.get_settings()), ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="daily-report", description="Daily and monthly work reports")
    parser.add_argument("--profile", type=Path, help="YAML/JSON profile file")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create", help="record a daily report")
    p.add_argument("--date", help="YYYY-MM-DD (default: today)")
    p.add_argument("--start", help="HH:MM (default: settings)")
    p.add_argument("--end", help="HH:MM (default: settings)")
    p.add_argument("--location")
    p.add_argument("--status", default="順調")
    p.add_argument("--tasks", required=True, help="task lines, separated by \\n")
    p.add_argument("--next-location")
    p.add_argument("--notes")
    p.add_argument("--replace", action="store_true", help="replace an existing report for the date")
    p.set_defaults(func=cmd_create)

    p = sub.add_parser("edit", help="change a recorded daily report")
    target = p.add_mutually_exclusive_group()
    target.add_argument("--id", help="report id")
    target.add_argument("--date", help="YYYY-MM-DD of the report (default: today)")
    p.add_argument("--new-date", help="move the report to YYYY-MM-DD")
    p.add_argument("--start", help="HH:MM")
    p.add_argument("--end", help="HH:MM")
    p.add_argument("--location")
    p.add_argument("--status")
    p.add_argument("--tasks", help="task lines, separated by \\n")
    p.add_argument("--next-location")
    p.add_argument("--notes")
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("list", help="list daily reports")
    p.add_argument("--month", help="YYYY-MM")
    p.add_argument("--start", help="YYYY-MM-DD")
    p.add_argument("--end", help="YYYY-MM-DD")
    p.add_argument("--location")
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("generate", help="generate a monthly report")
    p.add_argument("--month", help="YYYY-MM (default: current month)")
    p.add_argument("--template", help="template name (default: the default template)")
    p.add_argument("--output", help="output file, '-' for stdout")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("template", help="manage templates")
    p.add_argument("op", choices=["list", "show", "create", "edit", "delete", "set-default"])
    p.add_argument("name", nargs="?")
    p.add_argument("--file", help="template content file (create, edit)")
    p.add_argument("--type", help=f"template type (default: {DEFAULT_TEMPLATE_TYPE})")
    p.add_argument("--rename", help="new template name (edit)")
    p.add_argument("--default", action="store_true")
    p.set_defaults(func=cmd_template)

    p = sub.add_parser("config", help="show or change settings")
    p.add_argument("op", choices=["show", "set", "reset"], nargs="?", default="show")
    p.add_argument("key", nargs="?", choices=sorted(SETTABLE_KEYS))
    p.add_argument("value", nargs="?")
    p.set_defaults(func=cmd_config)

    return parser


# --------------------------------------------------------------------------------------
# CLI entry point
# --------------------------------------------------------------------------------------


def build_service(config: Config) -> ReportService:
    store = ReportStore(config.data_path)
    config = config.with_settings(store.get_settings())
    renderer = ReportRenderer(
        TemplateStore(store),
        build_llm(config),
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )
    return ReportService(store, renderer)


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load configuration and run one command."""
    load_dotenv(override=True)
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "template" and args.op != "list" and not args.name:
        parser.error(f"template {args.op} requires a NAME")
    if args.command == "template" and args.op == "create" and not args.file:
        parser.error("template create requires --file")
    if args.command == "config" and args.op == "set" and (not args.key or args.value is None):
        parser.error("config set requires KEY and VALUE")

    start = datetime.now()
    try:
        profile = ProfileConfig.from_file(args.profile) if args.profile else ProfileConfig(name="default")
        service = build_service(Config.from_profile(profile))
        status = args.func(service, args)
    except (DailyReportError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    logger.debug("Finished in %.1fs", (datetime.now() - start).total_seconds())
    return status


if __name__ == "__main__":
    raise SystemExit(main())
