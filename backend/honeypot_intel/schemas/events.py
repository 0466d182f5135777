# backend/honeypot_intel/schemas/events.py
from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SensorType(str, Enum):
    COWRIE = "cowrie"
    DIONAEA = "dionaea"
    OPENCANARY = "opencanary"


class GeoLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class GeoIP(BaseModel):
    """Normalized geo facet. `country_iso_code` is ISO alpha-2 when known."""
    model_config = ConfigDict(frozen=True)

    country_iso_code: Optional[str] = None
    country: Optional[str] = None  # free-text name as reported by the sensor
    city_name: Optional[str] = None
    location: Optional[GeoLocation] = None
    asn: Optional[str] = None
    asn_org: Optional[str] = None


class SSHCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    password: Optional[str] = None


class AuthInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    password: Optional[str] = None
    result: Optional[str] = None


class HTTPInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None


class CommandInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: Optional[str] = None
    category: Optional[str] = None


class AbuseIPDBIntel(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = 0  # abuseConfidenceScore 0–100


class VirusTotalIntel(BaseModel):
    model_config = ConfigDict(frozen=True)

    reputation: int = 0
    detections: int = 0  # malicious + suspicious engines


class MalwareBazaarIntel(BaseModel):
    model_config = ConfigDict(frozen=True)

    family: Optional[str] = None
    hash: Optional[str] = None
    last_seen: Optional[str] = None


class MitreEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    tactic: str
    technique: str
    id: Optional[str] = None


class ThreatIntel(BaseModel):
    model_config = ConfigDict(frozen=True)

    abuseipdb: Optional[AbuseIPDBIntel] = None
    virustotal: Optional[VirusTotalIntel] = None
    malwarebazaar: Optional[MalwareBazaarIntel] = None
    mitre: List[MitreEntry] = Field(default_factory=list)


class Event(BaseModel):
    """
    Canonical honeypot event: one atomic observable action.

    Several events may share an `original_id` when they were exploded out of
    the same campaign/session record; `id` is always unique.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    original_id: Optional[str] = None
    timestamp: str = Field(..., description="Canonical UTC ISO-8601 instant.")

    sensor: str = "unknown"
    sensor_type: str = "unknown"
    src_ip: str = "unknown"
    dst_port: int = Field(0, ge=0)
    protocol: str = "unknown"
    event_type: str = "unknown"

    geoip: Optional[GeoIP] = None
    ssh: Optional[SSHCredentials] = None
    http: Optional[HTTPInfo] = None
    auth: Optional[AuthInfo] = None
    command: Optional[CommandInfo] = None
    attack: Optional[str] = None
    ti: Optional[ThreatIntel] = None

    # Original sub-record, passed through untouched for detail views
    raw: Optional[Dict[str, Any]] = None
