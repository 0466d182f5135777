# backend/honeypot_intel/api/v1/dependencies.py
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Query

from honeypot_intel.core.config import settings
from honeypot_intel.schemas.filters import Filters, TimePreset, TimeRange
from honeypot_intel.services.adapters.base import HoneypotDataAdapter
from honeypot_intel.services.adapters.registry import get_adapter
from honeypot_intel.utils.time_ranges import time_range_from_preset


def get_time_range(
    preset: Optional[TimePreset] = Query(None, description="15m/1h/24h/7d/14d/30d/all"),
    from_: Optional[datetime] = Query(None, alias="from"),
    to: Optional[datetime] = Query(None),
) -> TimeRange:
    """Explicit `from`/`to` win over `preset`; default is the last 30 days."""
    if from_ is not None:
        return TimeRange(
            from_=from_,
            to=to or datetime.now(timezone.utc),
            preset=preset or TimePreset.CUSTOM,
        )
    return time_range_from_preset(preset or TimePreset.LAST_30D, now=to)


def get_filters(
    sensors: List[str] = Query(default=[]),
    protocols: List[str] = Query(default=[]),
    countries: List[str] = Query(default=[]),
    event_types: List[str] = Query(default=[]),
    ip: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    credentials: Optional[str] = Query(None, deprecated=True),
    q: Optional[str] = None,
) -> Filters:
    return Filters(
        sensors=sensors,
        protocols=protocols,
        countries=countries,
        event_types=event_types,
        ip_address=ip,
        username_query=username,
        password_query=password,
        credentials_query=credentials,
        query=q,
    )


def get_dashboard_adapter() -> HoneypotDataAdapter:
    return get_adapter(settings.DEFAULT_ADAPTER)
