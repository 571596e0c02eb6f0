from datetime import datetime

from pydantic import BaseModel

from dashboard.schemas.dashboard import DisplayStats
from dashboard.schemas.status import OutageInterval


class ReportModel(BaseModel):
    """Everything the export surface needs to render a report."""

    generated_at: datetime
    stats: DisplayStats
    intervals: list[OutageInterval]
