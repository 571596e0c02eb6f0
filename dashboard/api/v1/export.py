import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from dashboard.core.exceptions import NotFoundError
from dashboard.dependencies import get_refresh_controller
from dashboard.schemas.status import SummaryStats
from dashboard.services.refresh import RefreshController
from dashboard.services.report import EXPORT_FORMATS, build_report, export_filename, render

logger = structlog.get_logger()

router = APIRouter()


@router.get("/dashboard/export/{fmt}")
async def export_report(
    fmt: str,
    controller: RefreshController = Depends(get_refresh_controller),
) -> Response:
    """Download the outage report as PDF, CSV, TXT or a print-ready HTML page."""
    if fmt not in EXPORT_FORMATS:
        raise NotFoundError(f"Unknown export format: {fmt}", details={"formats": sorted(EXPORT_FORMATS)})

    result = controller.session.result
    generated_at = controller.now()
    if result is None:
        report = build_report(SummaryStats(), [], generated_at)
    else:
        report = build_report(result.stats, result.intervals, generated_at)

    content = render(report, fmt)
    filename = export_filename(fmt, generated_at.date())
    logger.info("report_exported", format=fmt, outages=len(report.intervals), bytes=len(content))

    return Response(
        content=content,
        media_type=EXPORT_FORMATS[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
