from __future__ import annotations
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

log = logging.getLogger(__name__)

UNSPECIFIED_TEAM = "unspecified"
UNASSIGNED = "unassigned"
PLACEHOLDER = "-"
RICH_TEXT_FALLBACK = "Rich Text"
DATE_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class ReportRow:
    key: str
    summary: str
    status: str
    team: str
    log_date: str
    author: str
    duration: str
    comment: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class TextTeam:
    text: str


@dataclass(frozen=True)
class ObjectTeam:
    title: Optional[str]
    value: Optional[str]
    raw: Any


TeamValue = Union[TextTeam, ObjectTeam]


@dataclass(frozen=True)
class FlattenedText:
    text: str
    degraded: bool = False


def _get(d: Dict[str, Any], *path: str, default=None):
    cur: Any = d
    for p in path:
        if not isinstance(cur, dict) or p not in cur:
            return default
        cur = cur[p]
    return cur


def team_value(raw: Any) -> TeamValue:
    if isinstance(raw, dict):
        return ObjectTeam(title=raw.get("title"), value=raw.get("value"), raw=raw)
    if isinstance(raw, str):
        return TextTeam(raw)
    return ObjectTeam(title=None, value=None, raw=raw)


def team_name(value: TeamValue) -> str:
    """title wins over value; anything else is stringified as-is."""
    if isinstance(value, TextTeam):
        return value.text
    if value.title:
        return str(value.title)
    if value.value:
        return str(value.value)
    return str(value.raw)


def resolve_team(fields: Dict[str, Any], team_field_id: Optional[str]) -> str:
    if not team_field_id:
        return UNSPECIFIED_TEAM
    raw = fields.get(team_field_id)
    if raw is None or raw == "":
        return UNSPECIFIED_TEAM
    return team_name(team_value(raw))


def flatten_rich_text(comment: Any) -> FlattenedText:
    """
    Plain text from a worklog comment: None, a plain string (Server), or an
    ADF document (Cloud). Malformed documents yield the "Rich Text" fallback.
    """
    if comment is None:
        return FlattenedText("")
    if isinstance(comment, str):
        return FlattenedText(comment)

    fallback = FlattenedText(RICH_TEXT_FALLBACK, degraded=True)
    if not isinstance(comment, dict) or not isinstance(comment.get("content"), list):
        return fallback

    paragraphs: List[str] = []
    for para in comment["content"]:
        if not isinstance(para, dict) or not isinstance(para.get("content"), list):
            return fallback
        texts: List[str] = []
        for run in para["content"]:
            if not isinstance(run, dict):
                return fallback
            if "text" not in run:
                # hardBreak, mention, emoji ...
                continue
            if not isinstance(run["text"], str):
                return fallback
            texts.append(run["text"])
        paragraphs.append(" ".join(texts))
    return FlattenedText(" ".join(paragraphs))


def comment_text(comment: Any) -> str:
    return flatten_rich_text(comment).text


def format_log_date(started: Any) -> str:
    """dd/mm/yyyy; unparseable strings are kept, anything else is "-"."""
    if not started or not isinstance(started, str):
        return PLACEHOLDER
    for parse in (
        lambda s: datetime.strptime(s, "%Y-%m-%dT%H:%M:%S.%f%z"),
        lambda s: datetime.fromisoformat(s.replace("Z", "+00:00")),
    ):
        try:
            return parse(started).strftime(DATE_FORMAT)
        except ValueError:
            continue
    return started


def iter_worklogs(fields: Dict[str, Any]) -> List[Dict[str, Any]]:
    worklogs = _get(fields, "worklog", "worklogs", default=None) or []
    return [w for w in worklogs if isinstance(w, dict)]


def issue_to_rows(issue: Dict[str, Any], team_field_id: Optional[str] = None) -> List[ReportRow]:
    """
    One row per worklog, or a single placeholder row when there are none.
    Raises ValueError for an issue without a key.
    """
    key = str(issue.get("key") or "")
    if not key:
        raise ValueError("issue has no key")
    f = issue.get("fields", {}) or {}
    summary = f.get("summary") or ""
    status = _get(f, "status", "name", default="") or ""
    team = resolve_team(f, team_field_id)
    assignee = _get(f, "assignee", "displayName") or UNASSIGNED

    worklogs = iter_worklogs(f)
    if not worklogs:
        return [
            ReportRow(
                key=key,
                summary=summary,
                status=status,
                team=team,
                log_date=PLACEHOLDER,
                author=assignee,
                duration=PLACEHOLDER,
                comment="",
            )
        ]

    return [
        ReportRow(
            key=key,
            summary=summary,
            status=status,
            team=team,
            log_date=format_log_date(w.get("started")),
            author=_get(w, "author", "displayName") or assignee,
            duration=w.get("timeSpent") or PLACEHOLDER,
            comment=comment_text(w.get("comment")),
        )
        for w in worklogs
    ]


def normalize_issues(issues: Iterable[Dict[str, Any]], team_field_id: Optional[str] = None) -> List[ReportRow]:
    rows: List[ReportRow] = []
    for issue in issues:
        if not issue.get("key"):
            log.warning("Skipping issue without key", extra={"issue_id": issue.get("id")})
            continue
        rows.extend(issue_to_rows(issue, team_field_id))
    return rows
