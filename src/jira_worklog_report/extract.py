# src/jira_worklog_report/extract.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .config import Settings
from .jira_api import JiraClient, quote_jql_str

log = logging.getLogger(__name__)

TEAM_FIELD_NAME = "Team"

BASE_FIELDS = [
    "summary",
    "status",
    "assignee",
    "worklog",
]


def project_jql(project_key: str) -> str:
    return f"project = {quote_jql_str(project_key)}"


def fetch_project_issues(
    *,
    settings: Settings,
    client: JiraClient | None = None,
) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """
    Resolves the "Team" field id, then fetches the project's issues
    (first page only, capped at settings.result_cap).
    Returns (team_field_id, issues).
    """
    owns = client is None
    client = client or JiraClient(settings)
    try:
        team_field_id = client.find_field_id(TEAM_FIELD_NAME)

        fields = list(BASE_FIELDS)
        if team_field_id:
            fields.append(team_field_id)

        issues = client.search_issues(
            jql=project_jql(settings.project_key),
            fields=fields,
            max_results=settings.result_cap,
        )
        log.info("Issues fetched", extra={"count": len(issues), "project": settings.project_key})
        return team_field_id, issues
    finally:
        if owns:
            client.close()
