# backend/honeypot_intel/services/adapters/local_adapter.py
from typing import List, Optional

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
from honeypot_intel.services.adapters.base import HoneypotDataAdapter
from honeypot_intel.services.aggregation import rankings
from honeypot_intel.services.aggregation.kpi_summary import summarize
from honeypot_intel.services.aggregation.listing import paginate
from honeypot_intel.services.aggregation.map_points import map_points
from honeypot_intel.services.aggregation.sensor_stats import sensor_stats
from honeypot_intel.services.aggregation.ti_summary import ti_summary
from honeypot_intel.services.aggregation.time_series import attacks_over_time
from honeypot_intel.services.events.event_store_service import (
    EventStoreService,
    event_store_service,
)
from honeypot_intel.services.filtering.filter_engine import filter_events


class LocalAdapter(HoneypotDataAdapter):
    """
    Answers every query in-process from the cached event snapshot.
    Aggregates are recomputed per call.
    """
    name = "local"

    def __init__(self, store: Optional[EventStoreService] = None) -> None:
        self._store = store or event_store_service

    def _filtered(self, time_range: TimeRange, filters: Filters) -> List[Event]:
        return filter_events(self._store.list_events(), time_range, filters)

    async def get_summary(self, time_range: TimeRange, filters: Filters) -> KPISummary:
        snapshot = self._store.get_snapshot()
        filtered = filter_events(snapshot.events, time_range, filters)
        return summarize(filtered, snapshot.context.attempt_counts)

    async def get_attacks_over_time(
        self, time_range: TimeRange, filters: Filters
    ) -> List[TimeSeriesPoint]:
        return attacks_over_time(self._store.list_events(), time_range, filters)

    async def get_top_ports(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return rankings.top_ports(self._filtered(time_range, filters))

    async def get_top_ips(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return rankings.top_ips(self._filtered(time_range, filters))

    async def get_event_types(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return rankings.event_types(self._filtered(time_range, filters))

    async def get_top_countries(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return rankings.top_countries(self._filtered(time_range, filters))

    async def get_recent_events(
        self, time_range: TimeRange, filters: Filters, page: int, page_size: int
    ) -> PaginatedResponse[Event]:
        return paginate(self._filtered(time_range, filters), page, page_size)

    async def get_map_points(self, time_range: TimeRange, filters: Filters) -> List[MapPoint]:
        events = self._store.list_events()
        return map_points(events, filter_events(events, time_range, filters), filters)

    async def get_top_ssh_usernames(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return rankings.top_ssh_usernames(self._filtered(time_range, filters))

    async def get_top_ssh_passwords(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return rankings.top_ssh_passwords(self._filtered(time_range, filters))

    async def get_ti_summary(self, time_range: TimeRange, filters: Filters) -> TISummary:
        return ti_summary(self._filtered(time_range, filters))

    async def get_sensor_stats(self, time_range: TimeRange, filters: Filters) -> List[SensorStats]:
        return sensor_stats(self._filtered(time_range, filters))


local_adapter = LocalAdapter()
