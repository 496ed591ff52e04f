# scripts/dump_rows.py
from pathlib import Path
import json

from jira_worklog_report.config import Settings
from jira_worklog_report.jira_api import JiraClient
from jira_worklog_report.extract import fetch_project_issues
from jira_worklog_report.parse import normalize_issues


def main() -> None:
    # Konfig aus Umgebungsvariablen (oder .env) laden
    s = Settings.from_env()

    with JiraClient(s) as client:
        team_field_id, issues = fetch_project_issues(settings=s, client=client)
    print(f"Fetched {len(issues)} issues (team field: {team_field_id or 'n/a'})")

    rows = normalize_issues(issues, team_field_id)

    out = Path("out/rows.ndjson")
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as fh:
        for row in rows:
            fh.write(json.dumps(row.to_dict(), ensure_ascii=False) + "\n")

    print(f"Wrote {len(rows)} rows to {out.resolve()}")


if __name__ == "__main__":
    main()
