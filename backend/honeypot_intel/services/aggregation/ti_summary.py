# backend/honeypot_intel/services/aggregation/ti_summary.py
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from honeypot_intel.core.config import settings
from honeypot_intel.schemas.aggregates import (
    MaliciousIp,
    MalwareFamilyCount,
    TISummary,
    UploadedFile,
)
from honeypot_intel.schemas.events import Event
from honeypot_intel.services.events.expander import EVENT_FILE_DOWNLOAD

TOP_FAMILIES_LIMIT = 5
TOP_IPS_LIMIT = 10
TOP_UPLOADS_LIMIT = 10


@dataclass
class _IpIntel:
    count: int = 0
    abuse_score: Optional[int] = None
    vt_detections: Optional[int] = None
    malware_family: Optional[str] = None
    mitre_tactics: Dict[str, None] = field(default_factory=dict)  # ordered set


def _round1(value: float) -> float:
    # half-up, not banker's rounding
    return math.floor(value * 10 + 0.5) / 10


def _per_ip(events: List[Event]) -> Dict[str, _IpIntel]:
    # events are newest first, so the first family seen is the most recent
    by_ip: Dict[str, _IpIntel] = {}
    for event in events:
        entry = by_ip.setdefault(event.src_ip, _IpIntel())
        entry.count += 1

        ti = event.ti
        if ti is None:
            continue
        if ti.abuseipdb is not None:
            entry.abuse_score = max(entry.abuse_score or 0, ti.abuseipdb.score)
        if ti.virustotal is not None:
            entry.vt_detections = max(entry.vt_detections or 0, ti.virustotal.detections)
        if ti.malwarebazaar is not None and ti.malwarebazaar.family and entry.malware_family is None:
            entry.malware_family = ti.malwarebazaar.family
        for mitre in ti.mitre:
            entry.mitre_tactics[mitre.tactic] = None
    return by_ip


def _uploads(events: List[Event]) -> List[UploadedFile]:
    uploads: Dict[str, UploadedFile] = {}
    for event in events:
        if event.event_type != EVENT_FILE_DOWNLOAD or not event.raw:
            continue
        file_hash = event.raw.get("sha256") or event.raw.get("shasum")
        if not isinstance(file_hash, str) or not file_hash:
            continue

        detections = event.ti.virustotal.detections if event.ti and event.ti.virustotal else None
        entry = uploads.setdefault(file_hash, UploadedFile(hash=file_hash))
        entry.count += 1
        if event.http and event.http.url:
            entry.url = event.http.url
        if detections is not None:
            entry.detections = max(entry.detections or 0, detections)

    ranked = sorted(uploads.values(), key=lambda u: (-(u.detections or 0), -u.count))
    return ranked[:TOP_UPLOADS_LIMIT]


def ti_summary(events: List[Event], malicious_score: Optional[int] = None) -> TISummary:
    """Threat-intel rollup; an IP is malicious at AbuseIPDB score >= threshold."""
    threshold = settings.MALICIOUS_ABUSE_SCORE if malicious_score is None else malicious_score

    malicious_ips = {
        e.src_ip
        for e in events
        if e.ti and e.ti.abuseipdb and e.ti.abuseipdb.score >= threshold
    }

    detections = [e.ti.virustotal.detections for e in events if e.ti and e.ti.virustotal]
    avg_detections = sum(detections) / len(detections) if detections else 0.0

    families = Counter(
        e.ti.malwarebazaar.family
        for e in events
        if e.ti and e.ti.malwarebazaar and e.ti.malwarebazaar.family
    )

    ranked_ips = sorted(
        (
            (ip, intel)
            for ip, intel in _per_ip(events).items()
            if intel.abuse_score is not None and intel.abuse_score >= threshold
        ),
        key=lambda item: -item[1].count,
    )

    return TISummary(
        malicious_ips=len(malicious_ips),
        avg_vt_detections=_round1(avg_detections),
        top_malware_families=[
            MalwareFamilyCount(family=family, count=count)
            for family, count in families.most_common(TOP_FAMILIES_LIMIT)
        ],
        top_malicious_ips=[
            MaliciousIp(
                ip=ip,
                count=intel.count,
                abuse_score=intel.abuse_score,
                vt_detections=intel.vt_detections,
                malware_family=intel.malware_family,
                mitre_tactics=list(intel.mitre_tactics),
            )
            for ip, intel in ranked_ips[:TOP_IPS_LIMIT]
        ],
        top_uploads=_uploads(events),
    )
