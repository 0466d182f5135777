# backend/honeypot_intel/services/aggregation/time_series.py
from datetime import datetime, timezone
from typing import Dict, List, Optional

from honeypot_intel.schemas.aggregates import TimeSeriesPoint
from honeypot_intel.schemas.events import Event
from honeypot_intel.schemas.filters import Filters, TimeRange
from honeypot_intel.services.filtering.filter_engine import filter_events
from honeypot_intel.services.normalize.timestamps import format_instant, parse_instant
from honeypot_intel.utils.time_ranges import all_time_range

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


def bucket_seconds(span_seconds: float) -> int:
    """Bucket width for a window: 5m up to 1h, 1h up to 24h, 6h up to 7d, else 1d."""
    if span_seconds <= HOUR:
        return 5 * MINUTE
    if span_seconds <= DAY:
        return HOUR
    if span_seconds <= 7 * DAY:
        return 6 * HOUR
    return DAY


def bucket_counts(events: List[Event], width: int) -> List[TimeSeriesPoint]:
    """Epoch-aligned buckets, oldest first, with a per-sensor breakdown."""
    buckets: Dict[int, TimeSeriesPoint] = {}
    for event in events:
        epoch = parse_instant(event.timestamp).timestamp()
        start = int(epoch // width) * width
        point = buckets.get(start)
        if point is None:
            ts = format_instant(datetime.fromtimestamp(start, tz=timezone.utc))
            point = buckets[start] = TimeSeriesPoint(ts=ts, count=0)
        point.count += 1
        point.by_sensor[event.sensor] = point.by_sensor.get(event.sensor, 0) + 1

    return [buckets[k] for k in sorted(buckets)]


def attacks_over_time(
    events: List[Event],
    time_range: TimeRange,
    filters: Filters,
    now: Optional[datetime] = None,
) -> List[TimeSeriesPoint]:
    """
    Bucketed counts for the window. An empty window is retried over all
    time so the chart is never blank while any matching data exists; the
    bucket width still follows the requested window.
    """
    filtered = filter_events(events, time_range, filters)
    if not filtered:
        filtered = filter_events(events, all_time_range(now), filters)
    return bucket_counts(filtered, bucket_seconds(time_range.span_seconds))
