# backend/honeypot_intel/services/adapters/base.py
"""
The contract between the presentation layer and a data backend.

Required operations are abstract. Optional ones raise NotImplementedError by
default; callers go through `call_optional` which substitutes an empty
result, so an adapter may simply not offer them.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

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

logger = logging.getLogger(__name__)


class AdapterError(Exception):
    """A backend could not answer (e.g. unreachable after retries)."""


class HoneypotDataAdapter(ABC):
    name: str = "abstract"

    @abstractmethod
    async def get_summary(self, time_range: TimeRange, filters: Filters) -> KPISummary: ...

    @abstractmethod
    async def get_attacks_over_time(
        self, time_range: TimeRange, filters: Filters
    ) -> List[TimeSeriesPoint]: ...

    @abstractmethod
    async def get_top_ports(self, time_range: TimeRange, filters: Filters) -> List[TopItem]: ...

    @abstractmethod
    async def get_top_ips(self, time_range: TimeRange, filters: Filters) -> List[TopItem]: ...

    @abstractmethod
    async def get_event_types(self, time_range: TimeRange, filters: Filters) -> List[TopItem]: ...

    @abstractmethod
    async def get_top_countries(self, time_range: TimeRange, filters: Filters) -> List[TopItem]: ...

    @abstractmethod
    async def get_recent_events(
        self, time_range: TimeRange, filters: Filters, page: int, page_size: int
    ) -> PaginatedResponse[Event]: ...

    @abstractmethod
    async def get_map_points(self, time_range: TimeRange, filters: Filters) -> List[MapPoint]: ...

    # ---- optional capabilities ----
    async def get_top_ssh_usernames(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        raise NotImplementedError

    async def get_top_ssh_passwords(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        raise NotImplementedError

    async def get_ti_summary(self, time_range: TimeRange, filters: Filters) -> TISummary:
        raise NotImplementedError

    async def get_sensor_stats(self, time_range: TimeRange, filters: Filters) -> List[SensorStats]:
        raise NotImplementedError


OPTIONAL_DEFAULTS: Dict[str, Callable[[], Any]] = {
    "get_top_ssh_usernames": list,
    "get_top_ssh_passwords": list,
    "get_ti_summary": TISummary,
    "get_sensor_stats": list,
}


async def call_optional(
    adapter: HoneypotDataAdapter, method: str, time_range: TimeRange, filters: Filters
) -> Any:
    """Call an optional capability, or return its empty default."""
    if method not in OPTIONAL_DEFAULTS:
        raise ValueError(f"{method} is not an optional adapter capability")
    try:
        return await getattr(adapter, method)(time_range, filters)
    except NotImplementedError:
        logger.debug("Adapter %s does not provide %s; using default", adapter.name, method)
        return OPTIONAL_DEFAULTS[method]()
