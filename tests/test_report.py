import json
import os
import re
import stat
import sys

import pytest

from jira_worklog_report.parse import ReportRow
from jira_worklog_report.report import render_report, write_report

ROWS = [
    ReportRow("UNIS-1", "Set up CI", "Done", "Platform", "05/01/2024", "Alice", "2h", "pipeline"),
    ReportRow("UNIS-2", "Docs <b>", "To Do", "unspecified", "-", "Carol", "-", "</script><script>alert(1)"),
]


def embedded_rows(html: str):
    m = re.search(r"const rawData = (.*?);\n", html)
    assert m, "row data not embedded"
    return json.loads(m.group(1))


def test_render_embeds_all_rows():
    html = render_report(ROWS, "UNIS")
    data = embedded_rows(html)
    assert [d["key"] for d in data] == ["UNIS-1", "UNIS-2"]
    assert data[0] == ROWS[0].to_dict()
    assert data[1]["comment"] == "</script><script>alert(1)"


def test_render_cannot_close_script_early():
    html = render_report(ROWS, "UNIS")
    assert "</script><script>alert(1)" not in html


def test_render_export_headers_and_filename():
    html = render_report(ROWS, "UNIS")
    for header in ["Ticket Key", "Team", "Summary", "Current Status", "Log Date", "Author", "Duration", "Comment"]:
        assert header in html
    assert '"Report_UNIS.xlsx"' in html
    assert "<title>Report - UNIS</title>" in html


def test_write_report_overwrites(tmp_path):
    out = tmp_path / "rapport_client.html"
    out.write_text("old", encoding="utf-8")

    written = write_report(ROWS, out, "UNIS")

    assert written == out
    assert embedded_rows(out.read_text(encoding="utf-8"))[0]["key"] == "UNIS-1"
    assert [p.name for p in tmp_path.iterdir()] == ["rapport_client.html"]


def test_write_report_failure_leaves_no_artifact(tmp_path, monkeypatch):
    out = tmp_path / "rapport_client.html"

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("jira_worklog_report.report.os.replace", boom)
    with pytest.raises(OSError):
        write_report(ROWS, out, "UNIS")
    assert list(tmp_path.iterdir()) == []


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
@pytest.mark.parametrize("umask, expected", [(0o022, 0o644), (0o002, 0o664), (0o077, 0o600)])
def test_write_report_honours_umask(tmp_path, umask, expected):
    out = tmp_path / "rapport_client.html"
    previous = os.umask(umask)
    try:
        write_report(ROWS, out, "UNIS")
    finally:
        os.umask(previous)
    assert stat.S_IMODE(out.stat().st_mode) == expected
