# backend/honeypot_intel/services/aggregation/rankings.py
from collections import Counter
from typing import Iterable, List, Optional

from honeypot_intel.schemas.aggregates import TopItem
from honeypot_intel.schemas.events import Event
from honeypot_intel.services.events.expander import ATTACK_INTERACTIVE_SESSION, EVENT_FILE_DOWNLOAD
from honeypot_intel.services.normalize.geo import event_country

TOP_LIMIT = 10
TOP_COUNTRIES_LIMIT = 15

# structural label of exploded sessions, not an attack type
NOISE_LABELS = {ATTACK_INTERACTIVE_SESSION}


def top_n(labels: Iterable[str], limit: Optional[int] = TOP_LIMIT) -> List[TopItem]:
    """Count, sort descending (stable on ties), then truncate."""
    ranked = Counter(labels).most_common()
    if limit is not None:
        ranked = ranked[:limit]
    return [TopItem(label=label, count=count) for label, count in ranked]


def top_ports(events: List[Event]) -> List[TopItem]:
    return top_n(str(e.dst_port) for e in events)


def top_ips(events: List[Event]) -> List[TopItem]:
    return top_n(e.src_ip for e in events)


def top_countries(events: List[Event]) -> List[TopItem]:
    countries = (event_country(e.geoip) for e in events)
    return top_n((c for c in countries if c), TOP_COUNTRIES_LIMIT)


def top_ssh_usernames(events: List[Event]) -> List[TopItem]:
    return top_n(e.ssh.username for e in events if e.ssh and e.ssh.username)


def top_ssh_passwords(events: List[Event]) -> List[TopItem]:
    return top_n(e.ssh.password for e in events if e.ssh and e.ssh.password)


def _event_labels(event: Event) -> List[str]:
    raw_types = event.raw.get("attack_types") if event.raw else None
    if isinstance(raw_types, list):
        tags = [t for t in raw_types if isinstance(t, str)]
        if tags:
            return tags
    if event.attack and "," in event.attack:
        return event.attack.split(",")
    if event.event_type == EVENT_FILE_DOWNLOAD:
        return [EVENT_FILE_DOWNLOAD]
    return [event.attack or event.event_type]


def event_types(events: List[Event]) -> List[TopItem]:
    """Attack/event type distribution. Multi-valued tags count once each."""
    def labels():
        for event in events:
            for label in _event_labels(event):
                label = label.strip()
                if label and label.lower() not in NOISE_LABELS:
                    yield label

    return top_n(labels(), limit=None)
