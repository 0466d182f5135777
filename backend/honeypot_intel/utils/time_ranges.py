# backend/honeypot_intel/utils/time_ranges.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from honeypot_intel.schemas.filters import TimePreset, TimeRange

ALL_TIME_FROM = datetime(1970, 1, 1, tzinfo=timezone.utc)

PRESET_DURATIONS = {
    TimePreset.LAST_15M: timedelta(minutes=15),
    TimePreset.LAST_1H: timedelta(hours=1),
    TimePreset.LAST_24H: timedelta(hours=24),
    TimePreset.LAST_7D: timedelta(days=7),
    TimePreset.LAST_14D: timedelta(days=14),
    TimePreset.LAST_30D: timedelta(days=30),
}
DEFAULT_DURATION = PRESET_DURATIONS[TimePreset.LAST_30D]


def time_range_from_preset(
    preset: Union[TimePreset, str], now: Optional[datetime] = None
) -> TimeRange:
    """Window ending at `now`. Unknown presets (incl. custom) span 30 days."""
    now = now or datetime.now(timezone.utc)
    try:
        preset = TimePreset(preset)
    except ValueError:
        preset = TimePreset.CUSTOM

    if preset is TimePreset.ALL:
        start = ALL_TIME_FROM
    else:
        start = now - PRESET_DURATIONS.get(preset, DEFAULT_DURATION)
    return TimeRange(from_=start, to=now, preset=preset)


def all_time_range(now: Optional[datetime] = None) -> TimeRange:
    return TimeRange(
        from_=ALL_TIME_FROM, to=now or datetime.now(timezone.utc), preset=TimePreset.CUSTOM
    )
