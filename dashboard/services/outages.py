"""Outage reconstruction: turns a probe stream into outage intervals."""

from collections.abc import Sequence
from datetime import datetime

from dashboard.schemas.status import OutageInterval, Sample


def extract_outages(samples: Sequence[Sample], now: datetime) -> list[OutageInterval]:
    """Return outage intervals, most recent first.

    An outage opens at the first offline sample and closes at the next online
    sample. One still open after the last sample ends at ``now``.
    """
    outages: list[OutageInterval] = []
    open_start: datetime | None = None

    for sample in samples:
        if not sample.is_online and open_start is None:
            open_start = sample.timestamp
        elif sample.is_online and open_start is not None:
            outages.append(OutageInterval(start=open_start, end=sample.timestamp))
            open_start = None

    if open_start is not None:
        outages.append(OutageInterval(start=open_start, end=max(now, open_start), is_open=True))

    outages.sort(key=lambda o: o.start, reverse=True)
    return outages
