from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Sequence

from jinja2 import Environment

from .parse import ReportRow

log = logging.getLogger(__name__)

EXPORT_HEADERS = [
    ("key", "Ticket Key"),
    ("team", "Team"),
    ("summary", "Summary"),
    ("status", "Current Status"),
    ("log_date", "Log Date"),
    ("author", "Author"),
    ("duration", "Duration"),
    ("comment", "Comment"),
]


_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Report - {{ project_key }}</title>
    <script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
    <script src="https://cdn.jsdelivr.net/npm/chartjs-plugin-datalabels@2"></script>
    <link rel="stylesheet" href="https://cdn.datatables.net/1.13.4/css/jquery.dataTables.css" />
    <script src="https://code.jquery.com/jquery-3.6.0.min.js"></script>
    <script src="https://cdn.datatables.net/1.13.4/js/jquery.dataTables.js"></script>
    <script src="https://cdn.sheetjs.com/xlsx-latest/package/dist/xlsx.full.min.js"></script>
    <style>
      body { font-family: "Segoe UI", sans-serif; background: #f4f5f7; color: #172b4d; padding: 20px; }
      .container { max-width: 1200px; margin: auto; }
      .card { background: #fff; padding: 20px; border-radius: 8px; box-shadow: 0 2px 5px rgba(0,0,0,0.1); margin-bottom: 20px; }
      .header-row { display: flex; justify-content: space-between; align-items: center; margin-bottom: 20px; }
      h1 { color: #0052cc; margin: 0; }
      .btn-excel { background: #36b37e; color: #fff; border: none; padding: 10px 20px; border-radius: 5px; cursor: pointer; font-weight: bold; }
      .filters { display: flex; gap: 30px; flex-wrap: wrap; margin-bottom: 20px; padding-bottom: 15px; border-bottom: 1px solid #eee; }
      select { padding: 8px; border: 1px solid #dfe1e6; border-radius: 4px; }
      .checkbox-group { display: flex; gap: 10px; flex-wrap: wrap; }
      .checkbox-item { background: #ebecf0; padding: 5px 12px; border-radius: 15px; cursor: pointer; font-size: 0.9em; }
      .checkbox-item.checked { background: #deebff; color: #0052cc; font-weight: bold; }
      .checkbox-item input { display: none; }
      .chart-wrapper { width: 350px; margin: 0 auto; }
      table.dataTable thead th { background: #0052cc; color: #fff; }
      .tag { padding: 2px 6px; border-radius: 3px; font-size: 0.85em; font-weight: bold; }
      .tag-team { background: #eae6ff; color: #403294; }
      .tag-status { background: #dfe1e6; color: #42526e; }
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header-row">
        <h1>Work log: {{ project_key }}</h1>
        <button class="btn-excel" onclick="exportToExcel()">Export to Excel</button>
      </div>

      <div class="card">
        <div class="filters">
          <div>
            <label><b>Team:</b></label><br />
            <select id="teamFilter"><option value="ALL">All</option></select>
          </div>
          <div>
            <label><b>Status:</b></label><br />
            <div class="checkbox-group" id="statusFilterContainer"></div>
          </div>
        </div>
        <div class="chart-wrapper"><canvas id="statusChart"></canvas></div>
      </div>

      <div class="card">
        <table id="mainTable" class="display" style="width:100%">
          <thead>
            <tr>{% for _, header in headers %}<th>{{ header }}</th>{% endfor %}</tr>
          </thead>
          <tbody></tbody>
        </table>
      </div>
    </div>

    <script>
      const rawData = {{ rows_json | safe }};
      const exportHeaders = {{ headers_json | safe }};
      let statusChart = null;
      let dataTable = null;
      let currentFilteredData = [];

      function esc(s) {
        return String(s).replace(/[&<>"']/g, c => ({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}[c]));
      }

      $(document).ready(function () {
        initFilters();
        updateDashboard();
        $("#teamFilter").on("change", updateDashboard);
        $(document).on("click", ".checkbox-item", function () {
          const checkbox = $(this).find("input");
          checkbox.prop("checked", !checkbox.prop("checked"));
          $(this).toggleClass("checked", checkbox.is(":checked"));
          updateDashboard();
        });
      });

      function initFilters() {
        [...new Set(rawData.map(d => d.team))].sort().forEach(t => {
          $("#teamFilter").append($("<option>").val(t).text(t));
        });
        [...new Set(rawData.map(d => d.status))].sort().forEach(s => {
          const item = $('<label class="checkbox-item checked">');
          item.append($('<input type="checkbox" checked>').val(s)).append(document.createTextNode(" " + s));
          $("#statusFilterContainer").append(item);
        });
      }

      function updateDashboard() {
        const team = $("#teamFilter").val();
        const statuses = $("#statusFilterContainer input:checked").map(function () { return this.value; }).get();
        currentFilteredData = rawData.filter(d => (team === "ALL" || d.team === team) && statuses.includes(d.status));

        if (dataTable) dataTable.destroy();
        $("#mainTable tbody").html(currentFilteredData.map(d => `
          <tr>
            <td><b>${esc(d.key)}</b></td>
            <td><span class="tag tag-team">${esc(d.team)}</span></td>
            <td>${esc(d.summary)}</td>
            <td><span class="tag tag-status">${esc(d.status)}</span></td>
            <td>${esc(d.log_date)}</td>
            <td>${esc(d.author)}</td>
            <td>${esc(d.duration)}</td>
            <td><small>${esc(d.comment)}</small></td>
          </tr>`).join(""));
        dataTable = $("#mainTable").DataTable({ pageLength: 10 });

        updateChart(currentFilteredData);
      }

      function countIssuesByStatus(rows) {
        const counts = {};
        const seen = new Set();
        rows.forEach(d => {
          if (seen.has(d.key)) return;
          seen.add(d.key);
          counts[d.status] = (counts[d.status] || 0) + 1;
        });
        return { counts: counts, total: seen.size };
      }

      function updateChart(rows) {
        const stats = countIssuesByStatus(rows);
        const pct = v => stats.total ? Math.round((v / stats.total) * 100) + "%" : "0%";
        const ctx = document.getElementById("statusChart").getContext("2d");
        if (statusChart) statusChart.destroy();
        statusChart = new Chart(ctx, {
          type: "doughnut",
          data: {
            labels: Object.keys(stats.counts),
            datasets: [{
              data: Object.values(stats.counts),
              backgroundColor: ["#0052CC", "#36B37E", "#FFAB00", "#FF5630", "#6554C0", "#00B8D9"],
              borderWidth: 1
            }]
          },
          options: {
            responsive: true,
            plugins: {
              legend: { position: "right" },
              title: { display: true, text: "Distinct issues by status (" + stats.total + ")" },
              tooltip: { callbacks: { label: c => c.label + ": " + c.raw + " (" + pct(c.raw) + ")" } },
              datalabels: { color: "#fff", formatter: v => pct(v), font: { weight: "bold" } }
            }
          },
          plugins: [ChartDataLabels]
        });
      }

      function exportToExcel() {
        const rows = currentFilteredData.map(d => {
          const out = {};
          exportHeaders.forEach(([field, header]) => { out[header] = d[field]; });
          return out;
        });
        const worksheet = XLSX.utils.json_to_sheet(rows);
        const workbook = XLSX.utils.book_new();
        XLSX.utils.book_append_sheet(workbook, worksheet, "Jira Export");
        XLSX.writeFile(workbook, {{ export_filename_json | safe }});
      }
    </script>
  </body>
</html>
"""

_env = Environment(autoescape=True)


def _script_json(obj) -> str:
    # JSON literal safe inside a <script> element
    return json.dumps(obj, ensure_ascii=False).replace("</", "<\\/")


def render_report(rows: Sequence[ReportRow], project_key: str) -> str:
    template = _env.from_string(_HTML_TEMPLATE)
    return template.render(
        project_key=project_key,
        headers=EXPORT_HEADERS,
        rows_json=_script_json([r.to_dict() for r in rows]),
        headers_json=_script_json(EXPORT_HEADERS),
        export_filename_json=_script_json(f"Report_{project_key}.xlsx"),
    )


def _file_mode() -> int:
    # mode open() would give a new file under the current umask
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_report(rows: Sequence[ReportRow], path: str | Path, project_key: str) -> Path:
    """
    Renders and writes the report, replacing any previous file at path.
    The file only appears once fully written.
    """
    out = Path(path)
    html = render_report(rows, project_key)
    out.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp = tempfile.mkstemp(prefix=f".{out.name}.", suffix=".tmp", dir=out.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(html)
        # mkstemp creates 0600
        os.chmod(tmp, _file_mode())
        os.replace(tmp, out)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise

    log.info("Report written", extra={"path": str(out.resolve()), "rows": len(rows)})
    return out
