# src/jira_worklog_report/main.py
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path

from .aggregate import count_issues_by_status, filter_rows
from .config import ConfigurationError, Settings
from .extract import fetch_project_issues
from .jira_api import JiraTransportError
from .logging_setup import setup_logging_from_env
from .parse import ReportRow, normalize_issues
from .report import write_report

log = logging.getLogger(__name__)


def load_rows(settings: Settings) -> list[ReportRow]:
    team_field_id, issues = fetch_project_issues(settings=settings)
    rows = normalize_issues(issues, team_field_id)
    log.info("Rows normalized", extra={"issues": len(issues), "rows": len(rows)})
    return rows


def cmd_generate(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    if args.output:
        settings = dataclasses.replace(settings, output_path=Path(args.output))
    rows = load_rows(settings)
    write_report(rows, settings.output_path, settings.project_key)
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    rows = filter_rows(load_rows(settings), team=args.team, statuses=args.status)
    breakdown = count_issues_by_status(rows)
    if args.print_json:
        print(json.dumps({"counts": breakdown.counts, "total": breakdown.total}, ensure_ascii=False))
    else:
        for status, count in sorted(breakdown.counts.items()):
            print(f"{status}\t{count}")
        print(f"Total\t{breakdown.total}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="jira-worklog-report")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_gen = sub.add_parser("generate", help="HTML-Report mit Worklogs des Projekts erzeugen")
    p_gen.add_argument("--output", help="Zieldatei; Standard: rapport_client.html im Arbeitsverzeichnis")
    p_gen.set_defaults(func=cmd_generate)

    p_sum = sub.add_parser("summary", help="Anzahl eindeutiger Tickets pro Status ausgeben")
    p_sum.add_argument("--team", help="nur dieses Team (Standard: alle)")
    p_sum.add_argument("--status", action="append", help="Status einschließen; mehrfach angebbar")
    p_sum.add_argument("--json", dest="print_json", action="store_true", help="Ergebnis als JSON auf stdout")
    p_sum.set_defaults(func=cmd_summary)

    args = parser.parse_args(argv)
    setup_logging_from_env()
    try:
        return args.func(args)
    except (ConfigurationError, JiraTransportError, OSError) as e:
        log.error("Run aborted, no report written: %s", e)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
