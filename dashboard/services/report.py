"""Outage report: report model, display formatting and PDF/CSV/TXT/HTML rendering."""

import csv
import html
import io
import math
from collections.abc import Sequence
from datetime import date, datetime, timedelta

from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from dashboard.schemas.dashboard import DisplayStats
from dashboard.schemas.report import ReportModel
from dashboard.schemas.status import OutageInterval, SummaryStats

REPORT_TITLE = "Internet Outage Report"
FILENAME_PREFIX = "connectivity-report"
EXPORT_FORMATS = {
    "pdf": "application/pdf",
    "csv": "text/csv; charset=utf-8",
    "txt": "text/plain; charset=utf-8",
    "html": "text/html; charset=utf-8",
}

HEADER_BG_HEX = "#3498DB"
ROW_ALT_HEX = "#F9F9F9"
BORDER_HEX = "#DDDDDD"

_BOM = "\ufeff"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_duration(duration: timedelta) -> str:
    """Human-readable duration: seconds under a minute, minutes under an hour, else hours and minutes.

    Rounding happens before the unit is picked, so 59.6 s reads "1 min"
    and 119.6 min reads "2 h 0 min".
    """
    seconds = _round_half_up(duration.total_seconds())
    if seconds < 60:
        return f"{seconds} sec"
    minutes = _round_half_up(duration.total_seconds() / 60.0)
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours} h {mins} min"


def format_datetime(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def display_stats(stats: SummaryStats) -> DisplayStats:
    return DisplayStats(
        outage_count=str(stats.outage_count),
        total_outage_duration=format_duration(stats.total_outage_duration),
        average_outage_duration=format_duration(stats.average_outage_duration),
        average_latency=f"{_round_half_up(stats.average_latency)} ms",
    )


def build_report(
    stats: SummaryStats,
    intervals: Sequence[OutageInterval],
    generated_at: datetime,
) -> ReportModel:
    return ReportModel(generated_at=generated_at, stats=display_stats(stats), intervals=list(intervals))


def export_filename(fmt: str, today: date) -> str:
    return f"{FILENAME_PREFIX}-{today.isoformat()}.{fmt}"


def _rows(report: ReportModel) -> list[list[str]]:
    return [
        [format_datetime(i.start), format_datetime(i.end), format_duration(i.duration)]
        for i in report.intervals
    ]


def _summary_lines(report: ReportModel) -> list[str]:
    return [
        f"Total Outages: {report.stats.outage_count}",
        f"Total Outage Time: {report.stats.total_outage_duration}",
        f"Average Outage Time: {report.stats.average_outage_duration}",
        f"Average Latency: {report.stats.average_latency}",
    ]


def render_csv(report: ReportModel) -> bytes:
    """CSV with a UTF-8 BOM so spreadsheet tools detect the encoding."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Start", "End", "Duration"])
    writer.writerows(_rows(report))
    return (_BOM + buf.getvalue()).encode("utf-8")


def render_txt(report: ReportModel) -> bytes:
    lines = [
        REPORT_TITLE.upper(),
        "=" * len(REPORT_TITLE),
        "",
        f"Report Date: {format_datetime(report.generated_at)}",
        "",
        "SUMMARY",
        "-------",
        *_summary_lines(report),
        "",
        "OUTAGE DETAILS",
        "--------------",
        f"{'Start':<22} {'End':<22} Duration",
        "-" * 56,
    ]
    for start, end, duration in _rows(report):
        lines.append(f"{start:<22} {end:<22} {duration}")
    return (_BOM + "\n".join(lines) + "\n").encode("utf-8")


def render_pdf(report: ReportModel) -> bytes:
    """A4 report with title, summary block and an outage table."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=REPORT_TITLE,
    )

    styles = getSampleStyleSheet()
    style_title = ParagraphStyle("ReportTitle", parent=styles["Title"], fontName="Helvetica-Bold", fontSize=20)
    style_date = ParagraphStyle("ReportDate", parent=styles["Normal"], fontName="Helvetica", fontSize=12, alignment=1)
    style_heading = ParagraphStyle(
        "ReportHeading", parent=styles["Heading2"], fontName="Helvetica-Bold", fontSize=14, spaceBefore=12
    )
    style_body = ParagraphStyle("ReportBody", parent=styles["Normal"], fontName="Helvetica", fontSize=12, leading=16)

    story = [
        Paragraph(REPORT_TITLE, style_title),
        Paragraph(f"Report Date: {format_datetime(report.generated_at)}", style_date),
        Spacer(1, 8 * mm),
        Paragraph("Summary:", style_heading),
    ]
    story.extend(Paragraph(line, style_body) for line in _summary_lines(report))
    story.append(Spacer(1, 8 * mm))

    table = Table([["Start", "End", "Duration"], *_rows(report)], repeatRows=1, hAlign="LEFT")
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HexColor(HEADER_BG_HEX)),
        ("TEXTCOLOR", (0, 0), (-1, 0), white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("GRID", (0, 0), (-1, -1), 0.5, HexColor(BORDER_HEX)),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [white, HexColor(ROW_ALT_HEX)]),
    ]))
    story.append(table)

    doc.build(story)
    return buf.getvalue()


_PRINT_CSS = """
body { font-family: Arial, sans-serif; line-height: 1.6; margin: 20px; }
.report-header { text-align: center; margin-bottom: 30px; }
.report-title { font-size: 24px; margin-bottom: 10px; }
.report-date { color: #666; font-size: 14px; }
.stats-container { margin-bottom: 20px; padding: 15px; background-color: #f5f5f5; border-radius: 5px; }
.stats-title { font-weight: bold; margin-bottom: 10px; }
table { width: 100%; border-collapse: collapse; margin-top: 20px; }
th, td { border: 1px solid #ddd; padding: 12px; text-align: left; }
th { background-color: #f5f5f5; }
tr:nth-child(even) { background-color: #f9f9f9; }
@media print {
  .stats-container, th { -webkit-print-color-adjust: exact; print-color-adjust: exact; }
}
"""


def render_html(report: ReportModel) -> bytes:
    """Standalone print-ready page with the summary block and every outage."""
    esc = html.escape
    report_date = esc(format_datetime(report.generated_at))
    parts = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{esc(REPORT_TITLE)} - {report_date}</title>",
        f"<style>{_PRINT_CSS}</style>",
        "</head>",
        "<body>",
        '<div class="report-header">',
        f'<div class="report-title">{esc(REPORT_TITLE)}</div>',
        f'<div class="report-date">Report Date: {report_date}</div>',
        "</div>",
        '<div class="stats-container">',
        '<div class="stats-title">Summary</div>',
    ]
    parts.extend(f"<div>{esc(line)}</div>" for line in _summary_lines(report))
    parts.append("</div>")
    parts.append("<table><thead><tr><th>Start</th><th>End</th><th>Duration</th></tr></thead><tbody>")
    rows = _rows(report)
    if not rows:
        parts.append('<tr><td colspan="3">No outages recorded.</td></tr>')
    for row in rows:
        parts.append("<tr>" + "".join(f"<td>{esc(cell)}</td>" for cell in row) + "</tr>")
    parts.extend(["</tbody></table>", "</body>", "</html>"])
    return ("\n".join(parts) + "\n").encode("utf-8")


_RENDERERS = {"pdf": render_pdf, "csv": render_csv, "txt": render_txt, "html": render_html}


def render(report: ReportModel, fmt: str) -> bytes:
    """Render ``report`` in one of EXPORT_FORMATS. Raises KeyError for unknown formats."""
    return _RENDERERS[fmt](report)
