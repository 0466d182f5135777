# backend/honeypot_intel/api/v1/routes_dashboard.py

from typing import List

from fastapi import APIRouter, Depends, Query

from honeypot_intel.api.v1.dependencies import get_dashboard_adapter, get_filters, get_time_range
from honeypot_intel.schemas.aggregates import (
    KPISummary,
    MapPoint,
    PaginatedResponse,
    SensorStats,
    TimeSeriesPoint,
    TISummary,
    TopItem,
)
from honeypot_intel.schemas.events import Event
from honeypot_intel.schemas.filters import Filters, TimeRange
from honeypot_intel.services.adapters.base import HoneypotDataAdapter, call_optional

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
)

# Every route is a thin wrapper: resolve range + filters, await the adapter.


@router.get("/summary", response_model=KPISummary, summary="KPI summary")
async def summary(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> KPISummary:
    return await adapter.get_summary(time_range, filters)


@router.get("/attacks-over-time", response_model=List[TimeSeriesPoint])
async def attacks_over_time(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[TimeSeriesPoint]:
    return await adapter.get_attacks_over_time(time_range, filters)


@router.get("/top-ports", response_model=List[TopItem])
async def top_ports(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[TopItem]:
    return await adapter.get_top_ports(time_range, filters)


@router.get("/top-ips", response_model=List[TopItem])
async def top_ips(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[TopItem]:
    return await adapter.get_top_ips(time_range, filters)


@router.get("/event-types", response_model=List[TopItem])
async def event_types(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[TopItem]:
    return await adapter.get_event_types(time_range, filters)


@router.get("/top-countries", response_model=List[TopItem])
async def top_countries(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[TopItem]:
    return await adapter.get_top_countries(time_range, filters)


@router.get(
    "/recent-events",
    response_model=PaginatedResponse[Event],
    summary="Paginated events, newest first",
)
async def recent_events(
    page: int = Query(0, ge=0),
    page_size: int = Query(25, ge=1, le=1000),
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> PaginatedResponse[Event]:
    return await adapter.get_recent_events(time_range, filters, page, page_size)


@router.get("/map-points", response_model=List[MapPoint])
async def map_points(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[MapPoint]:
    return await adapter.get_map_points(time_range, filters)


# ---- optional capabilities: empty defaults when the adapter lacks them ----


@router.get("/ssh-usernames", response_model=List[TopItem])
async def ssh_usernames(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[TopItem]:
    return await call_optional(adapter, "get_top_ssh_usernames", time_range, filters)


@router.get("/ssh-passwords", response_model=List[TopItem])
async def ssh_passwords(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[TopItem]:
    return await call_optional(adapter, "get_top_ssh_passwords", time_range, filters)


@router.get("/ti-summary", response_model=TISummary)
async def threat_intel_summary(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> TISummary:
    return await call_optional(adapter, "get_ti_summary", time_range, filters)


@router.get("/sensors", response_model=List[SensorStats])
async def sensors(
    time_range: TimeRange = Depends(get_time_range),
    filters: Filters = Depends(get_filters),
    adapter: HoneypotDataAdapter = Depends(get_dashboard_adapter),
) -> List[SensorStats]:
    return await call_optional(adapter, "get_sensor_stats", time_range, filters)
