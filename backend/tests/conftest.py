"""Pytest configuration and fixtures for honeypot-intel tests."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from honeypot_intel.schemas.filters import Filters, TimePreset, TimeRange
from honeypot_intel.services.adapters.local_adapter import LocalAdapter
from honeypot_intel.services.events.event_store_service import EventStoreService


@pytest.fixture
def probe_record() -> Dict[str, Any]:
    """A single opencanary probe with string-typed port and upper-case protocol."""
    return {
        "id": "p1",
        "timestamp": "2024-05-01 10:00:00",
        "sensor": "canary-1",
        "sensor_type": "opencanary",
        "src_ip": "203.0.113.5",
        "dst_port": "22",
        "protocol": "SSH",
        "event_type": "ssh_probe",
        "geoip": {"country_iso_code": "USA", "country": "United States"},
    }


@pytest.fixture
def campaign_record() -> Dict[str, Any]:
    """A cowrie brute-force campaign declaring more attempts than it recorded."""
    return {
        "doc_type": "bruteforce_campaign",
        "attack_id": "bf-100",
        "start_time": "2024-05-01T09:00:00Z",
        "sensor": "cowrie-1",
        "src_ip": "198.51.100.7",
        "total_login_attempts": 50,
        "geoip": {"country": "Oman"},
        "abuseipdb": {"abuseConfidenceScore": 90},
        "raw_events": [
            {
                "eventid": "cowrie.login.failed",
                "timestamp": "2024-05-01T09:10:00.000000Z",
                "username": "root",
                "password": "123456",
            },
            {
                "eventid": "cowrie.login.failed",
                "timestamp": "2024-05-01T09:20:00.000000Z",
                "username": "admin",
                "password": "admin",
            },
            {
                "eventid": "cowrie.login.failed",
                "timestamp": "2024-05-01T09:30:00.000000Z",
                "username": "root",
                "password": "password",
            },
            {"eventid": "cowrie.session.closed", "timestamp": "2024-05-01T09:31:00Z"},
        ],
    }


@pytest.fixture
def session_record() -> Dict[str, Any]:
    """An interactive cowrie session: login, commands and a file download."""
    return {
        "doc_type": "session",
        "attack_id": "sess-200",
        "start_time": "2024-05-01T11:00:00Z",
        "sensor": "cowrie-1",
        "src_ip": "192.0.2.44",
        "total_login_attempts": 1,
        "total_commands": 2,
        "attack_types": ["recon", "malware_download"],
        "mitre": {"ids": ["T1082"], "names": ["Discovery:System Information Discovery"]},
        "geoip": {"country_iso_code": "OMN", "lat": 23.6, "lon": 58.5},
        "abuseipdb": {"abuseConfidenceScore": 75},
        "downloads": [
            {
                "url": "http://malware.example/x.sh",
                "sha256": "abc123",
                "virustotal": {"malicious": 3, "suspicious": 1, "undetected": 50},
            }
        ],
        "raw_events": [
            {
                "eventid": "cowrie.login.success",
                "timestamp": "2024-05-01T11:00:00Z",
                "username": "root",
                "password": "toor",
            },
            {
                "eventid": "cowrie.command.input",
                "timestamp": "2024-05-01T11:01:00Z",
                "input": "uname -a",
                "attack_types": ["recon"],
            },
            {
                "eventid": "cowrie.command.input",
                "timestamp": "2024-05-01T11:02:00Z",
                "input": "ls",
            },
            {
                "eventid": "cowrie.session.file_download",
                "timestamp": "2024-05-01T11:03:00Z",
                "url": "http://malware.example/x.sh",
                "sha256": "abc123",
            },
            {
                "eventid": "cowrie.client.version",
                "timestamp": "2024-05-01T11:04:00Z",
                "version": "SSH-2.0-Go",
            },
            {"eventid": "cowrie.session.closed", "timestamp": "2024-05-01T11:05:00Z"},
        ],
    }


@pytest.fixture
def attempts_record() -> Dict[str, Any]:
    """A dionaea HTTP record carrying a list of login attempts."""
    return {
        "attack_id": "att-300",
        "sensor": "dionaea-1",
        "sensor_type": "dionaea",
        "src_ip": "192.0.2.99",
        "dst_port": 443,
        "protocol": "HTTP",
        "total_attempts": 7,
        "geoip": {"country_iso_code": "DE"},
        "raw": {"dst_host": "portal.example.org", "logdata": {"PATH": "/admin"}},
        "attempts": [
            {
                "timestamp": "2024-05-01T12:00:00Z",
                "event_type": "http_login",
                "username": "admin",
                "password": "admin",
            },
            {"timestamp": "2024-05-01T12:05:00Z", "event_type": "http_login", "path": "/login"},
        ],
    }


@pytest.fixture
def sample_records(probe_record, campaign_record, session_record, attempts_record) -> List[Dict[str, Any]]:
    return [probe_record, campaign_record, session_record, attempts_record]


@pytest.fixture
def sample_ndjson(sample_records) -> str:
    """The sample records as one export file, with a corrupt line in the middle."""
    lines = [json.dumps(r) for r in sample_records]
    lines.insert(2, "{not json")
    return "\n".join(lines) + "\n"


@pytest.fixture
def store(sample_ndjson) -> EventStoreService:
    """Event store over the sample export; no placeholder, long TTL."""
    return EventStoreService(
        loader=lambda: [("sample.ndjson", sample_ndjson)],
        ttl_seconds=3600,
        placeholder_count=0,
    )


@pytest.fixture
def events(store):
    return store.list_events()


@pytest.fixture
def adapter(store) -> LocalAdapter:
    return LocalAdapter(store=store)


@pytest.fixture
def window() -> TimeRange:
    """The whole sample day, 2024-05-01 UTC."""
    return TimeRange(
        from_=datetime(2024, 5, 1, tzinfo=timezone.utc),
        to=datetime(2024, 5, 2, tzinfo=timezone.utc),
        preset=TimePreset.CUSTOM,
    )


@pytest.fixture
def empty_window() -> TimeRange:
    """A window with no sample events in it."""
    return TimeRange(
        from_=datetime(2023, 1, 1, tzinfo=timezone.utc),
        to=datetime(2023, 1, 2, tzinfo=timezone.utc),
        preset=TimePreset.CUSTOM,
    )


@pytest.fixture
def no_filters() -> Filters:
    return Filters()
