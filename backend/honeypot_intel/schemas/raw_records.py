# backend/honeypot_intel/schemas/raw_records.py
"""
Typed views over untrusted sensor export lines.

Every field is optional and coerced leniently: a value of the wrong type is
dropped (becomes None / empty) instead of failing validation, because the
export schema is advisory only. Unknown fields are kept (extra="allow").
"""

import math
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PrivateAttr, model_validator

CAMPAIGN_DOC_TYPE = "bruteforce_campaign"
CAMPAIGN_ID_PREFIX = "bf-"
SESSION_DOC_TYPE = "session"
SESSION_ID_PREFIX = "sess-"


def _loose_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _loose_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number)


def _loose_float(value: Any) -> Optional[float]:
    # coordinates must already be numeric, strings are not trusted
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def _loose_dict(value: Any) -> Optional[Dict[str, Any]]:
    return value if isinstance(value, dict) else None


def _loose_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _dict_items(value: Any) -> List[Dict[str, Any]]:
    return [v for v in _loose_list(value) if isinstance(v, dict)]


def _str_items(value: Any) -> List[str]:
    return [v for v in _loose_list(value) if isinstance(v, str)]


LooseStr = Annotated[Optional[str], BeforeValidator(_loose_str)]
LooseInt = Annotated[Optional[int], BeforeValidator(_loose_int)]
LooseFloat = Annotated[Optional[float], BeforeValidator(_loose_float)]
LooseDict = Annotated[Optional[Dict[str, Any]], BeforeValidator(_loose_dict)]
StrList = Annotated[List[str], BeforeValidator(_str_items)]


class _Loose(BaseModel):
    model_config = ConfigDict(extra="allow")


class RawLocation(_Loose):
    lat: LooseFloat = None
    lon: LooseFloat = None


class RawGeo(_Loose):
    country: LooseStr = None
    country_iso_code: LooseStr = None
    city: LooseStr = None
    city_name: LooseStr = None
    location: Annotated[Optional[RawLocation], BeforeValidator(_loose_dict)] = None
    lat: LooseFloat = None
    lon: LooseFloat = None
    asn: LooseStr = None
    asn_org: LooseStr = None


class RawCredentials(_Loose):
    username: LooseStr = None
    password: LooseStr = None
    result: LooseStr = None


class RawHTTP(_Loose):
    url: LooseStr = None
    path: LooseStr = None
    hostname: LooseStr = None
    useragent: LooseStr = None


class RawCommand(_Loose):
    raw: LooseStr = None
    category: LooseStr = None


class RawAbuseIPDB(_Loose):
    abuseConfidenceScore: LooseInt = None


class RawMitre(_Loose):
    ids: StrList = Field(default_factory=list)
    names: StrList = Field(default_factory=list)


class RawVirusTotalStats(_Loose):
    malicious: LooseInt = None
    suspicious: LooseInt = None
    undetected: LooseInt = None
    harmless: LooseInt = None
    timeout: LooseInt = None

    @property
    def detections(self) -> int:
        return (self.malicious or 0) + (self.suspicious or 0)


class RawSubEvent(_Loose):
    """One cowrie sub-event (login, command, download, ...)."""
    eventid: LooseStr = None
    timestamp: LooseStr = None
    username: LooseStr = None
    password: LooseStr = None
    session_id: LooseStr = None
    command: LooseStr = None
    input: LooseStr = None
    url: LooseStr = None
    shasum: LooseStr = None
    sha256: LooseStr = None
    attack_types: StrList = Field(default_factory=list)

    _source: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_source(cls, data: Any, handler: Any) -> "RawSubEvent":
        event = handler(data)
        if isinstance(data, dict):
            event._source = dict(data)
        return event

    def passthrough(self) -> Dict[str, Any]:
        """The sub-event exactly as the sensor wrote it."""
        return dict(self._source)


class RawDownload(_Loose):
    url: LooseStr = None
    shasum: LooseStr = None
    sha256: LooseStr = None
    virustotal: Annotated[Optional[RawVirusTotalStats], BeforeValidator(_loose_dict)] = None
    vt: Annotated[Optional[RawVirusTotalStats], BeforeValidator(_loose_dict)] = None

    @property
    def scan(self) -> Optional[RawVirusTotalStats]:
        return self.virustotal or self.vt


class RawAttempt(_Loose):
    timestamp: LooseStr = None
    event_type: LooseStr = None
    username: LooseStr = None
    password: LooseStr = None
    path: LooseStr = None
    hostname: LooseStr = None
    useragent: LooseStr = None


def _models(model):
    def _coerce(value: Any) -> List[Any]:
        return [model.model_validate(v) for v in _dict_items(value)]
    return BeforeValidator(_coerce)


class RecordKind(str, Enum):
    PROBE = "probe"
    CAMPAIGN = "campaign"
    SESSION = "session"
    ATTEMPT_LIST = "attempt_list"


class RawRecordBase(_Loose):
    id: LooseStr = None
    attack_id: LooseStr = None
    doc_type: LooseStr = None
    timestamp: LooseStr = None
    start_time: LooseStr = None
    end_time: LooseStr = None

    sensor: LooseStr = None
    sensor_type: LooseStr = None
    src_ip: LooseStr = None
    dst_port: LooseInt = None
    protocol: LooseStr = None
    event_type: LooseStr = None

    geoip: Annotated[Optional[RawGeo], BeforeValidator(_loose_dict)] = None
    ssh: Annotated[Optional[RawCredentials], BeforeValidator(_loose_dict)] = None
    http: Annotated[Optional[RawHTTP], BeforeValidator(_loose_dict)] = None
    auth: Annotated[Optional[RawCredentials], BeforeValidator(_loose_dict)] = None
    command: Annotated[Optional[RawCommand], BeforeValidator(_loose_dict)] = None
    abuseipdb: Annotated[Optional[RawAbuseIPDB], BeforeValidator(_loose_dict)] = None
    attack: LooseStr = None
    raw: LooseDict = None

    @property
    def source_id(self) -> Optional[str]:
        return self.attack_id or self.id

    def raw_value(self, *path: str) -> Any:
        """Walk into the opaque `raw` block, returning None on any miss."""
        node: Any = self.raw
        for key in path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node


class ProbeRecord(RawRecordBase):
    kind: Literal[RecordKind.PROBE] = RecordKind.PROBE


class CampaignRecord(RawRecordBase):
    kind: Literal[RecordKind.CAMPAIGN] = RecordKind.CAMPAIGN
    events: Annotated[List[RawSubEvent], _models(RawSubEvent)] = Field(default_factory=list)
    raw_events: Annotated[List[RawSubEvent], _models(RawSubEvent)] = Field(default_factory=list)
    total_login_attempts: LooseInt = None


class SessionRecord(RawRecordBase):
    kind: Literal[RecordKind.SESSION] = RecordKind.SESSION
    raw_events: Annotated[List[RawSubEvent], _models(RawSubEvent)] = Field(default_factory=list)
    downloads: Annotated[List[RawDownload], _models(RawDownload)] = Field(default_factory=list)
    total_login_attempts: LooseInt = None
    total_commands: LooseInt = None
    attack_types: StrList = Field(default_factory=list)
    mitre: Annotated[Optional[RawMitre], BeforeValidator(_loose_dict)] = None


class AttemptListRecord(RawRecordBase):
    kind: Literal[RecordKind.ATTEMPT_LIST] = RecordKind.ATTEMPT_LIST
    attempts: Annotated[List[RawAttempt], _models(RawAttempt)] = Field(default_factory=list)
    total_attempts: LooseInt = None


RawRecord = Union[ProbeRecord, CampaignRecord, SessionRecord, AttemptListRecord]


def record_kind(data: Dict[str, Any]) -> RecordKind:
    doc_type = data.get("doc_type")
    attack_id = _loose_str(data.get("attack_id")) or ""

    if doc_type == CAMPAIGN_DOC_TYPE or attack_id.startswith(CAMPAIGN_ID_PREFIX):
        return RecordKind.CAMPAIGN
    if (doc_type == SESSION_DOC_TYPE or attack_id.startswith(SESSION_ID_PREFIX)) and _dict_items(
        data.get("raw_events")
    ):
        return RecordKind.SESSION
    if _dict_items(data.get("attempts")):
        return RecordKind.ATTEMPT_LIST
    return RecordKind.PROBE


_VARIANTS = {
    RecordKind.PROBE: ProbeRecord,
    RecordKind.CAMPAIGN: CampaignRecord,
    RecordKind.SESSION: SessionRecord,
    RecordKind.ATTEMPT_LIST: AttemptListRecord,
}


def parse_raw_record(data: Dict[str, Any]) -> RawRecord:
    """Pick the record variant from its markers and validate it."""
    # `kind` is ours; a sensor field of the same name must not clash with it
    payload = {k: v for k, v in data.items() if k != "kind"}
    return _VARIANTS[record_kind(data)].model_validate(payload)
