# backend/honeypot_intel/schemas/aggregates.py
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class TopItem(BaseModel):
    label: str
    count: int


class TimeSeriesPoint(BaseModel):
    ts: str  # bucket start, canonical UTC ISO
    count: int
    by_sensor: Dict[str, int] = Field(default_factory=dict)


class MapPoint(BaseModel):
    lat: float
    lon: float
    count: int
    country: Optional[str] = None


class KPISummary(BaseModel):
    total_attacks: int = 0   # distinct source records / sessions
    total_attempts: int = 0  # declared attempts (login attempts, commands)
    unique_ips: int = 0
    unique_sensors: int = 0
    unique_countries: int = 0


class MalwareFamilyCount(BaseModel):
    family: str
    count: int


class MaliciousIp(BaseModel):
    ip: str
    count: int
    abuse_score: Optional[int] = None
    vt_detections: Optional[int] = None
    malware_family: Optional[str] = None
    mitre_tactics: List[str] = Field(default_factory=list)


class UploadedFile(BaseModel):
    hash: str
    url: Optional[str] = None
    detections: Optional[int] = None
    count: int = 0


class TISummary(BaseModel):
    malicious_ips: int = 0
    avg_vt_detections: float = 0.0
    top_malware_families: List[MalwareFamilyCount] = Field(default_factory=list)
    top_malicious_ips: List[MaliciousIp] = Field(default_factory=list)
    top_uploads: List[UploadedFile] = Field(default_factory=list)


class PaginatedResponse(BaseModel, Generic[T]):
    rows: List[T]
    total: int
    page: int
    page_size: int


class PortCount(BaseModel):
    port: int
    count: int


class SensorStats(BaseModel):
    sensor: str
    total_events: int
    last_seen: str
    top_ports: List[PortCount] = Field(default_factory=list)
    top_event_type: str
    status: str = "idle"  # healthy | idle | down
