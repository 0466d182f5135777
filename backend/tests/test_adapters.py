"""Tests for the data adapters."""

import httpx
import pytest

from honeypot_intel.api.v1.dependencies import get_dashboard_adapter
from honeypot_intel.main import app
from honeypot_intel.schemas.aggregates import TISummary
from honeypot_intel.schemas.filters import Filters
from honeypot_intel.services.adapters.base import (
    AdapterError,
    HoneypotDataAdapter,
    call_optional,
)
from honeypot_intel.services.adapters.local_adapter import LocalAdapter, local_adapter
from honeypot_intel.services.adapters.registry import get_adapter
from honeypot_intel.services.adapters.remote_adapter import RemoteAdapter, to_query_params
from honeypot_intel.services.core_service import retry


class MinimalAdapter(HoneypotDataAdapter):
    """Only the required operations, all empty."""
    name = "minimal"

    async def get_summary(self, time_range, filters):
        raise AssertionError("not used")

    async def get_attacks_over_time(self, time_range, filters):
        return []

    async def get_top_ports(self, time_range, filters):
        return []

    async def get_top_ips(self, time_range, filters):
        return []

    async def get_event_types(self, time_range, filters):
        return []

    async def get_top_countries(self, time_range, filters):
        return []

    async def get_recent_events(self, time_range, filters, page, page_size):
        raise AssertionError("not used")

    async def get_map_points(self, time_range, filters):
        return []


@pytest.fixture
def no_sleep(monkeypatch):
    """Skip retry backoff; records the requested delays."""
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(retry.asyncio, "sleep", fake_sleep)
    return delays


class TestLocalAdapter:
    """Test the in-process adapter."""

    @pytest.mark.asyncio
    async def test_summary(self, adapter, window, no_filters):
        """Test the summary uses declared attempt totals."""
        summary = await adapter.get_summary(window, no_filters)
        assert summary.total_attacks == 4
        assert summary.total_attempts == 60

    @pytest.mark.asyncio
    async def test_filtered_rankings(self, adapter, window):
        """Test filters apply to every ranking."""
        filters = Filters(countries=["OM"])
        ports = await adapter.get_top_ports(window, filters)
        countries = await adapter.get_top_countries(window, filters)

        assert [(p.label, p.count) for p in ports] == [("22", 8)]
        assert [(c.label, c.count) for c in countries] == [("OM", 8)]

    @pytest.mark.asyncio
    async def test_recent_events(self, adapter, window, no_filters):
        """Test the listing is newest first and paginated."""
        page = await adapter.get_recent_events(window, no_filters, page=0, page_size=3)
        assert page.total == 11
        assert [e.id for e in page.rows] == ["att-300-3-1", "att-300-3-0", "sess-200-2-4"]

    @pytest.mark.asyncio
    async def test_map_points_home_outside_window(self, adapter, empty_window):
        """Test the home marker survives an empty window when filtered for."""
        points = await adapter.get_map_points(empty_window, Filters(countries=["oman"]))
        assert [(p.country, p.count) for p in points] == [("OM", 8)]

    @pytest.mark.asyncio
    async def test_optional_capabilities(self, adapter, window, no_filters):
        """Test the local adapter offers every optional capability."""
        usernames = await adapter.get_top_ssh_usernames(window, no_filters)
        ti = await adapter.get_ti_summary(window, no_filters)
        sensors = await adapter.get_sensor_stats(window, no_filters)

        assert usernames[0].label == "root"
        assert ti.malicious_ips == 2
        assert len(sensors) == 3


class TestCallOptional:
    """Test optional capability dispatch."""

    @pytest.mark.asyncio
    async def test_missing_capability_defaults(self, window, no_filters):
        """Test unimplemented capabilities return empty defaults."""
        adapter = MinimalAdapter()

        assert await call_optional(adapter, "get_top_ssh_usernames", window, no_filters) == []
        assert await call_optional(adapter, "get_sensor_stats", window, no_filters) == []
        assert await call_optional(adapter, "get_ti_summary", window, no_filters) == TISummary()

    @pytest.mark.asyncio
    async def test_implemented_capability(self, adapter, window, no_filters):
        """Test implemented capabilities are called through."""
        passwords = await call_optional(adapter, "get_top_ssh_passwords", window, no_filters)
        assert len(passwords) == 4

    @pytest.mark.asyncio
    async def test_unknown_method(self, window, no_filters):
        """Test only optional capabilities may be called this way."""
        with pytest.raises(ValueError):
            await call_optional(MinimalAdapter(), "get_summary", window, no_filters)


class TestRegistry:
    """Test adapter lookup."""

    def test_names(self):
        """Test local and demo share the local adapter."""
        assert get_adapter("local") is local_adapter
        assert get_adapter("demo") is local_adapter
        assert isinstance(get_adapter("remote"), RemoteAdapter)

    def test_unknown_falls_back(self):
        """Test unknown names get the local adapter."""
        assert get_adapter("elastic") is local_adapter


class TestQueryParams:
    """Test range and filter encoding."""

    def test_encoding(self, window):
        """Test empty filters are left out and the range is canonical."""
        params = to_query_params(window, Filters(countries=["OM", "DE"], username_query="root"))
        assert params == {
            "from": "2024-05-01T00:00:00.000Z",
            "to": "2024-05-02T00:00:00.000Z",
            "countries": ["OM", "DE"],
            "username": "root",
            "preset": "custom",
        }


class TestRemoteAdapter:
    """Test the HTTP-backed adapter against mock transports."""

    @pytest.mark.asyncio
    async def test_parses_response(self, window, no_filters):
        """Test a JSON response is validated into models."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, json=[{"label": "22", "count": 9}])

        adapter = RemoteAdapter(base_url="http://intel.test/api/v1/", transport=httpx.MockTransport(handler))
        ports = await adapter.get_top_ports(window, no_filters)

        assert [(p.label, p.count) for p in ports] == [("22", 9)]
        assert seen[0].path == "/api/v1/dashboard/top-ports"
        assert seen[0].params["from"] == "2024-05-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_404_is_missing_capability(self, window, no_filters):
        """Test a missing route reads as an unimplemented capability."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"detail": "Not Found"})

        adapter = RemoteAdapter(base_url="http://intel.test/api/v1", transport=httpx.MockTransport(handler))

        with pytest.raises(NotImplementedError):
            await adapter.get_top_ssh_usernames(window, no_filters)
        assert await call_optional(adapter, "get_top_ssh_usernames", window, no_filters) == []

    @pytest.mark.asyncio
    async def test_404_on_required_route(self, window, no_filters):
        """Test a missing required route is a backend failure, not a missing capability."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"detail": "Not Found"})

        adapter = RemoteAdapter(base_url="http://intel.test/api/v1", transport=httpx.MockTransport(handler))

        with pytest.raises(AdapterError):
            await adapter.get_summary(window, no_filters)
        with pytest.raises(AdapterError):
            await adapter.get_top_ports(window, no_filters)

    @pytest.mark.asyncio
    async def test_unreachable_raises_adapter_error(self, window, no_filters, no_sleep):
        """Test connection failures are retried, then surface as AdapterError."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        adapter = RemoteAdapter(base_url="http://intel.test/api/v1", transport=httpx.MockTransport(handler))

        with pytest.raises(AdapterError):
            await adapter.get_summary(window, no_filters)
        assert len(calls) == 3
        assert len(no_sleep) == 2

    @pytest.mark.asyncio
    async def test_server_error_retried(self, window, no_filters, no_sleep):
        """Test a transient 5xx is retried until it succeeds."""
        responses = [httpx.Response(503), httpx.Response(200, json=[])]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        adapter = RemoteAdapter(base_url="http://intel.test/api/v1", transport=httpx.MockTransport(handler))

        assert await adapter.get_map_points(window, no_filters) == []
        assert responses == []

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, window, no_filters, no_sleep):
        """Test a 4xx fails at once as AdapterError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"detail": "bad"})

        adapter = RemoteAdapter(base_url="http://intel.test/api/v1", transport=httpx.MockTransport(handler))

        with pytest.raises(AdapterError):
            await adapter.get_top_ips(window, no_filters)
        assert no_sleep == []


class TestRemoteAgainstApi:
    """Test the remote adapter end to end against the local API."""

    @pytest.fixture
    def remote(self, adapter):
        app.dependency_overrides[get_dashboard_adapter] = lambda: adapter
        yield RemoteAdapter(base_url="http://testserver/api/v1", transport=httpx.ASGITransport(app=app))
        app.dependency_overrides.clear()

    @pytest.mark.asyncio
    async def test_same_answers(self, remote, adapter, window):
        """Test remote and local adapters agree for the same query."""
        filters = Filters(countries=["OM"], protocols=["ssh"])

        assert await remote.get_summary(window, filters) == await adapter.get_summary(window, filters)
        assert await remote.get_event_types(window, filters) == await adapter.get_event_types(window, filters)
        assert await remote.get_ti_summary(window, filters) == await adapter.get_ti_summary(window, filters)

    @pytest.mark.asyncio
    async def test_recent_events_round_trip(self, remote, adapter, window, no_filters):
        """Test paginated events survive the wire."""
        remote_page = await remote.get_recent_events(window, no_filters, page=1, page_size=5)
        local_page = await adapter.get_recent_events(window, no_filters, page=1, page_size=5)
        assert remote_page == local_page
