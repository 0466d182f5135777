# backend/honeypot_intel/services/filtering/filter_engine.py
"""
Time-window + field predicate filtering over canonical events.

Every predicate must pass (AND). Inside a set-valued predicate any value
may match (OR). An empty/absent predicate never excludes anything. String
matching is case-insensitive.
"""
from typing import Callable, Iterable, List, Optional, Set

from honeypot_intel.schemas.events import Event
from honeypot_intel.schemas.filters import Filters, TimeRange
from honeypot_intel.services.normalize.geo import event_country, normalize_filter_country
from honeypot_intel.services.normalize.timestamps import parse_instant

Predicate = Callable[[Event], bool]


def _joined(values: Iterable[Optional[str]]) -> str:
    return " ".join(str(v) for v in values if v).lower()


def usernames(event: Event) -> str:
    return _joined(
        [event.ssh.username if event.ssh else None, event.auth.username if event.auth else None]
    )


def passwords(event: Event) -> str:
    return _joined(
        [event.ssh.password if event.ssh else None, event.auth.password if event.auth else None]
    )


def credentials(event: Event) -> str:
    ssh, auth = event.ssh, event.auth
    return _joined(
        [
            ssh.username if ssh else None,
            ssh.password if ssh else None,
            auth.username if auth else None,
            auth.password if auth else None,
        ]
    )


def searchable_text(event: Event) -> str:
    """The identifying fields free-text search looks at."""
    return _joined(
        [
            event.src_ip,
            event.ssh.username if event.ssh else None,
            event.ssh.password if event.ssh else None,
            event.http.url if event.http else None,
            event.event_type,
            event.protocol,
            event.sensor_type,
            str(event.dst_port),
            event.geoip.country_iso_code if event.geoip else None,
            event.attack,
        ]
    )


def _in_window(time_range: TimeRange) -> Predicate:
    def check(event: Event) -> bool:
        ts = parse_instant(event.timestamp)
        return time_range.from_ <= ts <= time_range.to
    return check


def _sensor_in(sensors: Set[str]) -> Predicate:
    return lambda e: e.sensor.lower() in sensors or e.sensor_type.lower() in sensors


def _protocol_in(protocols: Set[str]) -> Predicate:
    return lambda e: e.protocol.lower() in protocols


def _country_in(countries: Set[str]) -> Predicate:
    def check(event: Event) -> bool:
        iso = event_country(event.geoip)
        return iso is not None and iso in countries
    return check


def _labels_match(labels: List[str]) -> Predicate:
    def check(event: Event) -> bool:
        fields = [f.lower() for f in (event.event_type, event.attack, event.protocol) if f]
        return any(label in f for label in labels for f in fields)
    return check


def _contains(extract: Callable[[Event], str], needle: str) -> Predicate:
    return lambda e: needle in extract(e)


def build_predicates(time_range: TimeRange, filters: Filters) -> List[Predicate]:
    predicates: List[Predicate] = [_in_window(time_range)]

    if filters.sensors:
        predicates.append(_sensor_in({s.lower() for s in filters.sensors}))
    if filters.protocols:
        predicates.append(_protocol_in({p.lower() for p in filters.protocols}))
    if filters.countries:
        predicates.append(_country_in({normalize_filter_country(c) for c in filters.countries}))

    labels = [t.lower() for t in filters.event_types if t]
    if labels:
        predicates.append(_labels_match(labels))

    ip = (filters.ip_address or "").strip().lower()
    if ip:
        predicates.append(_contains(lambda e: e.src_ip.lower(), ip))

    if filters.username_query:
        predicates.append(_contains(usernames, filters.username_query.lower()))
    if filters.password_query:
        predicates.append(_contains(passwords, filters.password_query.lower()))
    if filters.credentials_query:
        predicates.append(_contains(credentials, filters.credentials_query.lower()))

    if filters.query:
        predicates.append(_contains(searchable_text, filters.query.lower()))

    return predicates


def filter_events(events: List[Event], time_range: TimeRange, filters: Filters) -> List[Event]:
    """Filtered subset, in the input order."""
    predicates = build_predicates(time_range, filters)
    return [e for e in events if all(p(e) for p in predicates)]
