# backend/honeypot_intel/services/aggregation/sensor_stats.py
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional

from honeypot_intel.core.config import settings
from honeypot_intel.schemas.aggregates import PortCount, SensorStats
from honeypot_intel.schemas.events import Event
from honeypot_intel.services.normalize.timestamps import parse_instant

TOP_PORTS_PER_SENSOR = 3


def sensor_stats(
    events: List[Event],
    now: Optional[datetime] = None,
    online_window_seconds: Optional[int] = None,
) -> List[SensorStats]:
    """Per-sensor activity, busiest sensor first."""
    now = now or datetime.now(timezone.utc)
    window = settings.SENSOR_ONLINE_WINDOW_SECONDS if online_window_seconds is None else online_window_seconds

    by_sensor: Dict[str, List[Event]] = {}
    for event in events:
        by_sensor.setdefault(event.sensor, []).append(event)

    stats: List[SensorStats] = []
    for sensor, sensor_events in by_sensor.items():
        last_seen = max(sensor_events, key=lambda e: parse_instant(e.timestamp)).timestamp
        ports = Counter(e.dst_port for e in sensor_events).most_common(TOP_PORTS_PER_SENSOR)
        # a group always holds at least one event
        [(top_type, _)] = Counter(e.event_type for e in sensor_events).most_common(1)
        age = (now - parse_instant(last_seen)).total_seconds()

        stats.append(
            SensorStats(
                sensor=sensor,
                total_events=len(sensor_events),
                last_seen=last_seen,
                top_ports=[PortCount(port=port, count=count) for port, count in ports],
                top_event_type=top_type,
                status="healthy" if age < window else "idle",
            )
        )

    stats.sort(key=lambda s: s.total_events, reverse=True)
    return stats
