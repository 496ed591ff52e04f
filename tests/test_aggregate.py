from jira_worklog_report.aggregate import count_issues_by_status, filter_rows
from jira_worklog_report.parse import ReportRow


def row(key, status, team="unspecified", author="x"):
    return ReportRow(
        key=key, summary="", status=status, team=team,
        log_date="-", author=author, duration="-", comment="",
    )


ROWS = [
    row("UNIS-1", "Done", "Platform", "a"),
    row("UNIS-1", "Done", "Platform", "b"),
    row("UNIS-2", "Done", "Core"),
    row("UNIS-3", "Done", "Platform", "a"),
    row("UNIS-3", "Done", "Platform", "c"),
    row("UNIS-4", "To Do", "Core"),
    row("UNIS-5", "In Progress", "Platform"),
]


def test_distinct_issues_not_rows():
    done = filter_rows(ROWS, statuses={"Done"})
    assert len(done) == 5
    breakdown = count_issues_by_status(done)
    assert breakdown.counts == {"Done": 3}
    assert breakdown.total == 3


def test_counts_sum_to_distinct_keys():
    breakdown = count_issues_by_status(ROWS)
    assert breakdown.counts == {"Done": 3, "To Do": 1, "In Progress": 1}
    assert sum(breakdown.counts.values()) == breakdown.total == len({r.key for r in ROWS})


def test_filter_by_team():
    rows = filter_rows(ROWS, team="Core")
    assert {r.key for r in rows} == {"UNIS-2", "UNIS-4"}
    assert filter_rows(ROWS, team="all") == ROWS
    assert filter_rows(ROWS) == ROWS


def test_filter_team_and_status():
    rows = filter_rows(ROWS, team="Platform", statuses=["Done", "In Progress"])
    breakdown = count_issues_by_status(rows)
    assert breakdown.counts == {"Done": 2, "In Progress": 1}
    assert breakdown.total == 3


def test_empty_selection():
    assert filter_rows(ROWS, statuses=[]) == []
    breakdown = count_issues_by_status([])
    assert breakdown.counts == {}
    assert breakdown.total == 0
