# backend/honeypot_intel/services/aggregation/map_points.py
from typing import Dict, List, Tuple

from honeypot_intel.schemas.aggregates import MapPoint
from honeypot_intel.schemas.events import Event
from honeypot_intel.schemas.filters import Filters
from honeypot_intel.services.normalize.geo import (
    HOME_COORDINATES,
    HOME_COUNTRY,
    event_country,
    is_home_country,
    normalize_filter_country,
    resolve_coordinates,
)

COORDINATE_PRECISION = 4


def _key(lat: float, lon: float) -> Tuple[float, float]:
    return round(lat, COORDINATE_PRECISION), round(lon, COORDINATE_PRECISION)


def map_points(all_events: List[Event], filtered: List[Event], filters: Filters) -> List[MapPoint]:
    """
    Event counts per map coordinate.

    With no user filters an empty window falls back to all events. When the
    home country is filtered for explicitly it always gets a marker, counted
    over every loaded event regardless of the time window.
    """
    source = filtered
    if not filtered and not filters.has_user_filters:
        source = all_events

    points: Dict[Tuple[float, float], MapPoint] = {}
    for event in source:
        coords = resolve_coordinates(event.geoip)
        if coords is None:
            continue
        key = _key(*coords)
        point = points.get(key)
        if point is None:
            if is_home_country(event.geoip):
                country = HOME_COUNTRY
            else:
                country = event_country(event.geoip) or (event.geoip.country if event.geoip else None)
            point = points[key] = MapPoint(lat=key[0], lon=key[1], count=0, country=country)
        point.count += 1

    home_key = _key(*HOME_COORDINATES)
    wants_home = HOME_COUNTRY in {normalize_filter_country(c) for c in filters.countries}
    if wants_home and home_key not in points:
        home_total = sum(1 for e in all_events if event_country(e.geoip) == HOME_COUNTRY)
        points[home_key] = MapPoint(
            lat=home_key[0], lon=home_key[1], count=home_total, country=HOME_COUNTRY
        )

    return list(points.values())
