from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .parse import ReportRow

ALL_TEAMS = "all"


@dataclass(frozen=True)
class StatusBreakdown:
    counts: Dict[str, int] = field(default_factory=dict)
    total: int = 0


def filter_rows(
    rows: Iterable[ReportRow],
    team: Optional[str] = None,
    statuses: Optional[Iterable[str]] = None,
) -> List[ReportRow]:
    """Same predicates as the report's team dropdown and status checkboxes."""
    wanted = set(statuses) if statuses is not None else None
    return [
        r
        for r in rows
        if (team is None or team == ALL_TEAMS or r.team == team)
        and (wanted is None or r.status in wanted)
    ]


def count_issues_by_status(rows: Iterable[ReportRow]) -> StatusBreakdown:
    """
    Distinct issues per status. An issue with several worklog rows is
    counted once, under the status of its first row.
    """
    seen: set[str] = set()
    counts: Dict[str, int] = {}
    for r in rows:
        if r.key in seen:
            continue
        seen.add(r.key)
        counts[r.status] = counts.get(r.status, 0) + 1
    return StatusBreakdown(counts=counts, total=len(seen))
