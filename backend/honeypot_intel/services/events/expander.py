# backend/honeypot_intel/services/events/expander.py
"""
Raw sensor record -> canonical events.

Sensors report at different granularities (one probe, one brute-force
campaign, one interactive session). Expansion brings everything down to one
Event per observable action. Declared attempt totals that are larger than
what was recorded are kept in the LoadContext side-table for the KPIs.

Each record kind has its own expander in `_EXPANDERS`; a new sensor shape is
a new entry there.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from honeypot_intel.schemas.events import (
    AbuseIPDBIntel,
    AuthInfo,
    CommandInfo,
    Event,
    HTTPInfo,
    MitreEntry,
    SSHCredentials,
    SensorType,
    ThreatIntel,
    VirusTotalIntel,
)
from honeypot_intel.schemas.raw_records import (
    AttemptListRecord,
    CampaignRecord,
    ProbeRecord,
    RawDownload,
    RawRecord,
    RawRecordBase,
    RawSubEvent,
    RecordKind,
    SessionRecord,
)
from honeypot_intel.services.events.load_context import LoadContext
from honeypot_intel.services.normalize.geo import map_geo

logger = logging.getLogger(__name__)

SSH_PORT = 22

# cowrie event ids
SESSION_CLOSED = "cowrie.session.closed"
LOGIN_SUCCESS = "cowrie.login.success"
COMMAND_INPUT = "cowrie.command.input"
FILE_DOWNLOAD = "cowrie.session.file_download"

# canonical event types / labels
EVENT_SSH_BRUTEFORCE = "ssh_bruteforce"
EVENT_SSH_LOGIN_ATTEMPT = "ssh_login_attempt"
EVENT_SSH_LOGIN_SUCCESS = "ssh_login_success"
EVENT_SSH_COMMAND = "ssh_command"
EVENT_FILE_DOWNLOAD = "file_download"
ATTACK_SSH_BRUTEFORCE = "ssh bruteforce"
ATTACK_INTERACTIVE_SESSION = "ssh interactive session"

BRUTE_FORCE_MITRE = MitreEntry(tactic="Credential Access", technique="Brute Force", id="T1110")
SESSION_FALLBACK_MITRE = MitreEntry(tactic="Execution", technique="Command and Control")


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------
def _raw_str(record: RawRecordBase, *path: str) -> Optional[str]:
    value = record.raw_value(*path)
    return value if isinstance(value, str) and value else None


def _abuse_intel(record: RawRecordBase) -> Optional[AbuseIPDBIntel]:
    if record.abuseipdb is None or record.abuseipdb.abuseConfidenceScore is None:
        return None
    return AbuseIPDBIntel(score=record.abuseipdb.abuseConfidenceScore)


def _compose_url(host: Optional[str], path: Optional[str], scheme: str) -> Optional[str]:
    if not host:
        return None
    base = host if host.startswith("http") else f"{scheme}://{host}"
    return f"{base}{path or ''}"


def _map_http(record: RawRecordBase) -> Optional[HTTPInfo]:
    if record.http is not None and record.http.url:
        return HTTPInfo(url=record.http.url)

    host = (
        (record.http.hostname if record.http else None)
        or _raw_str(record, "dst_host")
        or _raw_str(record, "logdata", "HOSTNAME")
    )
    path = (record.http.path if record.http else None) or _raw_str(record, "logdata", "PATH")
    scheme = "https" if record.protocol == "https" or record.raw_value("dst_port") == 443 else "http"

    url = _compose_url(host, path, scheme)
    return HTTPInfo(url=url) if url else None


def _port(record: RawRecordBase) -> int:
    return max(record.dst_port or 0, 0)


def _protocol(record: RawRecordBase) -> str:
    return record.protocol.lower() if record.protocol else "unknown"


def _fallback_event_type(record: RawRecordBase) -> str:
    return record.event_type or _raw_str(record, "eventid") or "unknown"


def _credentials(username: Optional[str], password: Optional[str]) -> Optional[SSHCredentials]:
    if username or password:
        return SSHCredentials(username=username, password=password)
    return None


def _record_ssh(record: RawRecordBase) -> Optional[SSHCredentials]:
    if record.ssh is None:
        return None
    return SSHCredentials(username=record.ssh.username, password=record.ssh.password)


def _record_auth(record: RawRecordBase) -> Optional[AuthInfo]:
    if record.auth is None:
        return None
    return AuthInfo(
        username=record.auth.username,
        password=record.auth.password,
        result=record.auth.result,
    )


def _record_command(record: RawRecordBase) -> Optional[CommandInfo]:
    if record.command is None:
        return None
    return CommandInfo(raw=record.command.raw, category=record.command.category)


# ---------------------------------------------------------------------------
# Single probe
# ---------------------------------------------------------------------------
def _expand_probe(record: ProbeRecord, index: int, ctx: LoadContext) -> List[Event]:
    abuse = _abuse_intel(record)
    base_id = record.id or f"evt-{index}"
    return [
        Event(
            id=f"{base_id}-{index}",
            original_id=record.id,
            timestamp=ctx.timestamp(record.timestamp),
            sensor=record.sensor or "unknown",
            sensor_type=record.sensor_type or "unknown",
            src_ip=record.src_ip or "unknown",
            dst_port=_port(record),
            protocol=_protocol(record),
            event_type=_fallback_event_type(record),
            geoip=map_geo(record.geoip),
            ssh=_record_ssh(record),
            http=_map_http(record),
            auth=_record_auth(record),
            command=_record_command(record),
            attack=record.attack,
            ti=ThreatIntel(abuseipdb=abuse) if abuse else None,
            raw=record.raw,
        )
    ]


# ---------------------------------------------------------------------------
# Brute-force campaign
# ---------------------------------------------------------------------------
def _cowrie_fields(record: RawRecordBase) -> Dict[str, Any]:
    """Fields shared by every event exploded from a cowrie campaign/session."""
    return {
        "sensor": record.sensor or SensorType.COWRIE.value,
        "sensor_type": SensorType.COWRIE.value,
        "src_ip": record.src_ip or "unknown",
        "dst_port": SSH_PORT,
        "protocol": "ssh",
        "geoip": map_geo(record.geoip),
    }


def _expand_campaign(record: CampaignRecord, index: int, ctx: LoadContext) -> List[Event]:
    attack_id = record.source_id or f"bf-{index}"
    sub_events = [
        ev for ev in (*record.events, *record.raw_events) if ev.eventid != SESSION_CLOSED
    ]
    ti = ThreatIntel(abuseipdb=_abuse_intel(record), mitre=[BRUTE_FORCE_MITRE])

    if not sub_events:
        # nothing recorded per attempt: one synthetic event for the campaign
        ctx.record_attempts(attack_id, record.total_login_attempts)
        return [
            Event(
                id=f"{attack_id}-{index}",
                original_id=attack_id,
                timestamp=ctx.timestamp(record.start_time or record.timestamp),
                event_type=EVENT_SSH_LOGIN_ATTEMPT,
                attack=ATTACK_SSH_BRUTEFORCE,
                ti=ti,
                raw=record.raw,
                **_cowrie_fields(record),
            )
        ]

    ctx.record_attempts(attack_id, record.total_login_attempts or len(sub_events))

    events: List[Event] = []
    for i, ev in enumerate(sub_events):
        events.append(
            Event(
                id=f"{attack_id}-{index}-{i}",
                original_id=attack_id,
                timestamp=ctx.timestamp(ev.timestamp or record.start_time or record.timestamp),
                event_type=EVENT_SSH_BRUTEFORCE,
                ssh=_credentials(ev.username, ev.password),
                command=CommandInfo(raw=ev.command, category="ssh") if ev.command else None,
                attack=ATTACK_SSH_BRUTEFORCE,
                ti=ti,
                raw=record.raw,
                **_cowrie_fields(record),
            )
        )
    return events


# ---------------------------------------------------------------------------
# Interactive session
# ---------------------------------------------------------------------------
def _session_mitre(record: SessionRecord) -> List[MitreEntry]:
    if record.mitre is None or not record.mitre.names:
        return [SESSION_FALLBACK_MITRE]

    entries: List[MitreEntry] = []
    for i, name in enumerate(record.mitre.names):
        tactic, _, technique = name.partition(":")
        entries.append(
            MitreEntry(
                tactic=tactic.strip() or name,
                technique=technique.strip() or name,
                id=record.mitre.ids[i] if i < len(record.mitre.ids) else None,
            )
        )
    return entries


def _download_index(downloads: List[RawDownload]) -> Dict[str, RawDownload]:
    index: Dict[str, RawDownload] = {}
    for dl in downloads:
        for key in (dl.sha256, dl.shasum, dl.url):
            if key:
                index[key] = dl
    return index


def _login_success(ev: RawSubEvent, base: Dict[str, Any], downloads: Dict[str, RawDownload]) -> Dict[str, Any]:
    return {
        "event_type": EVENT_SSH_LOGIN_SUCCESS,
        "ssh": SSHCredentials(username=ev.username, password=ev.password),
        "auth": AuthInfo(username=ev.username, password=ev.password, result="success"),
    }


def _command_input(ev: RawSubEvent, base: Dict[str, Any], downloads: Dict[str, RawDownload]) -> Dict[str, Any]:
    return {
        "event_type": ev.attack_types[0] if ev.attack_types else EVENT_SSH_COMMAND,
        "command": CommandInfo(raw=ev.input or ev.command or "", category="ssh"),
    }


def _file_download(ev: RawSubEvent, base: Dict[str, Any], downloads: Dict[str, RawDownload]) -> Dict[str, Any]:
    dl = next(
        (downloads[key] for key in (ev.sha256, ev.shasum, ev.url) if key and key in downloads),
        None,
    )
    ti: ThreatIntel = base["ti"]
    if dl is not None and dl.scan is not None:
        ti = ti.model_copy(update={"virustotal": VirusTotalIntel(detections=dl.scan.detections)})
    else:
        logger.debug("No scan result for download %s", ev.sha256 or ev.shasum or ev.url)

    return {
        "event_type": EVENT_FILE_DOWNLOAD,
        "http": HTTPInfo(url=ev.url) if ev.url else None,
        "ti": ti,
    }


_SubEventHandler = Callable[[RawSubEvent, Dict[str, Any], Dict[str, RawDownload]], Dict[str, Any]]

_SESSION_SUBEVENTS: Dict[str, _SubEventHandler] = {
    LOGIN_SUCCESS: _login_success,
    COMMAND_INPUT: _command_input,
    FILE_DOWNLOAD: _file_download,
}


def _expand_session(record: SessionRecord, index: int, ctx: LoadContext) -> List[Event]:
    attack_id = record.source_id or f"sess-{index}"
    sub_events = [ev for ev in record.raw_events if ev.eventid != SESSION_CLOSED]

    ctx.record_attempts(
        attack_id, (record.total_login_attempts or 0) + (record.total_commands or 0)
    )

    downloads = _download_index(record.downloads)
    ti = ThreatIntel(abuseipdb=_abuse_intel(record), mitre=_session_mitre(record))
    attack = ", ".join(record.attack_types) if record.attack_types else ATTACK_INTERACTIVE_SESSION

    events: List[Event] = []
    for i, ev in enumerate(sub_events):
        fields: Dict[str, Any] = {
            "id": f"{attack_id}-{index}-{i}",
            "original_id": attack_id,
            "timestamp": ctx.timestamp(ev.timestamp or record.start_time or record.timestamp),
            "event_type": EVENT_SSH_COMMAND,
            "attack": attack,
            "ti": ti,
            "raw": ev.passthrough(),
            **_cowrie_fields(record),
        }
        handler = _SESSION_SUBEVENTS.get(ev.eventid or "")
        if handler is not None:
            fields.update(handler(ev, fields, downloads))
        events.append(Event(**fields))
    return events


# ---------------------------------------------------------------------------
# Generic attempt lists (dionaea / opencanary)
# ---------------------------------------------------------------------------
def _expand_attempts(record: AttemptListRecord, index: int, ctx: LoadContext) -> List[Event]:
    protocol = _protocol(record)
    port = _port(record)
    scheme = "https" if protocol == "https" or port == 443 else "http"
    source_id = record.source_id

    if source_id:
        declared = record.total_attempts if record.total_attempts and record.total_attempts > 0 else None
        ctx.record_attempts(source_id, declared or len(record.attempts))

    abuse = _abuse_intel(record)
    events: List[Event] = []
    for i, att in enumerate(record.attempts):
        host = att.hostname or _raw_str(record, "dst_host") or _raw_str(record, "logdata", "HOSTNAME")
        path = att.path or _raw_str(record, "logdata", "PATH")
        url = _compose_url(host, path, scheme)

        has_creds = bool(att.username or att.password)
        if protocol == "ssh":
            ssh = _credentials(att.username, att.password) or _record_ssh(record)
            auth = None
        else:
            ssh = _record_ssh(record)
            auth = AuthInfo(username=att.username, password=att.password) if has_creds else None

        events.append(
            Event(
                id=f"{source_id or 'evt'}-{index}-{i}",
                original_id=source_id,
                timestamp=ctx.timestamp(att.timestamp),
                sensor=record.sensor or "unknown",
                sensor_type=record.sensor_type or "unknown",
                src_ip=record.src_ip or "unknown",
                dst_port=port,
                protocol=protocol,
                event_type=att.event_type or _raw_str(record, "eventid") or "unknown",
                geoip=map_geo(record.geoip),
                ssh=ssh,
                auth=auth,
                http=HTTPInfo(url=url) if url else None,
                command=_record_command(record),
                attack=record.attack,
                ti=ThreatIntel(abuseipdb=abuse) if abuse else None,
                raw=record.raw,
            )
        )
    return events


_EXPANDERS: Dict[RecordKind, Callable[[Any, int, LoadContext], List[Event]]] = {
    RecordKind.PROBE: _expand_probe,
    RecordKind.CAMPAIGN: _expand_campaign,
    RecordKind.SESSION: _expand_session,
    RecordKind.ATTEMPT_LIST: _expand_attempts,
}


def expand_record(record: RawRecord, index: int, ctx: LoadContext) -> List[Event]:
    """Expand one parsed record into zero or more events."""
    return _EXPANDERS[record.kind](record, index, ctx)
