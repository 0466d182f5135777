# backend/honeypot_intel/services/adapters/remote_adapter.py
"""
Adapter backed by the HTTP API (`/api/v1/dashboard/*`) of another
honeypot-intel instance. Same contract and filter semantics as the local
adapter; the range and filters travel as query parameters.
"""
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter

from honeypot_intel.core.config import settings
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
from honeypot_intel.services.adapters.base import AdapterError, HoneypotDataAdapter
from honeypot_intel.services.core_service.retry import async_retry
from honeypot_intel.services.normalize.timestamps import format_instant

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# routes of the optional capabilities; a 404 there means "not offered"
OPTIONAL_PATHS = {"ssh-usernames", "ssh-passwords", "ti-summary", "sensors"}


def to_query_params(time_range: TimeRange, filters: Filters) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "from": format_instant(time_range.from_),
        "to": format_instant(time_range.to),
        "sensors": filters.sensors,
        "protocols": filters.protocols,
        "countries": filters.countries,
        "event_types": filters.event_types,
        "ip": filters.ip_address,
        "username": filters.username_query,
        "password": filters.password_query,
        "credentials": filters.credentials_query,
        "q": filters.query,
    }
    if time_range.preset is not None:
        params["preset"] = time_range.preset.value
    return {k: v for k, v in params.items() if v not in (None, "", [])}


class RemoteAdapter(HoneypotDataAdapter):
    name = "remote"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        attempts: int = 3,
    ) -> None:
        self._base_url = (base_url or settings.REMOTE_API_BASE_URL).rstrip("/")
        self._timeout = settings.REMOTE_TIMEOUT_SECONDS if timeout is None else timeout
        self._transport = transport
        self._attempts = attempts

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self._base_url}/dashboard/{path}"

        async def _call() -> Any:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
                return resp.json()

        try:
            return await async_retry(_call, attempts=self._attempts, base_delay=0.5)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404 and path in OPTIONAL_PATHS:
                raise NotImplementedError(path) from e
            raise AdapterError(f"{url} returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("Remote adapter request to %s failed: %s", url, e)
            raise AdapterError(f"{url} unreachable: {type(e).__name__}: {e}") from e

    async def _one(self, path: str, time_range: TimeRange, filters: Filters, model: Type[M]) -> M:
        return model.model_validate(await self._get(path, to_query_params(time_range, filters)))

    async def _many(
        self, path: str, time_range: TimeRange, filters: Filters, model: Type[M]
    ) -> List[M]:
        data = await self._get(path, to_query_params(time_range, filters))
        return TypeAdapter(List[model]).validate_python(data)

    async def get_summary(self, time_range: TimeRange, filters: Filters) -> KPISummary:
        return await self._one("summary", time_range, filters, KPISummary)

    async def get_attacks_over_time(
        self, time_range: TimeRange, filters: Filters
    ) -> List[TimeSeriesPoint]:
        return await self._many("attacks-over-time", time_range, filters, TimeSeriesPoint)

    async def get_top_ports(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return await self._many("top-ports", time_range, filters, TopItem)

    async def get_top_ips(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return await self._many("top-ips", time_range, filters, TopItem)

    async def get_event_types(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return await self._many("event-types", time_range, filters, TopItem)

    async def get_top_countries(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return await self._many("top-countries", time_range, filters, TopItem)

    async def get_recent_events(
        self, time_range: TimeRange, filters: Filters, page: int, page_size: int
    ) -> PaginatedResponse[Event]:
        params = to_query_params(time_range, filters)
        params.update(page=page, page_size=page_size)
        return PaginatedResponse[Event].model_validate(await self._get("recent-events", params))

    async def get_map_points(self, time_range: TimeRange, filters: Filters) -> List[MapPoint]:
        return await self._many("map-points", time_range, filters, MapPoint)

    async def get_top_ssh_usernames(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return await self._many("ssh-usernames", time_range, filters, TopItem)

    async def get_top_ssh_passwords(self, time_range: TimeRange, filters: Filters) -> List[TopItem]:
        return await self._many("ssh-passwords", time_range, filters, TopItem)

    async def get_ti_summary(self, time_range: TimeRange, filters: Filters) -> TISummary:
        return await self._one("ti-summary", time_range, filters, TISummary)

    async def get_sensor_stats(self, time_range: TimeRange, filters: Filters) -> List[SensorStats]:
        return await self._many("sensors", time_range, filters, SensorStats)
