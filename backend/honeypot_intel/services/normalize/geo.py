# backend/honeypot_intel/services/normalize/geo.py
"""
Country and coordinate normalization.

The lookup tables only cover the countries that show up in our sensor
exports; anything else falls through as the upper-cased input.
"""
from typing import Dict, Optional, Tuple

from honeypot_intel.schemas.events import GeoIP, GeoLocation
from honeypot_intel.schemas.raw_records import RawGeo

ISO3_TO_ISO2: Dict[str, str] = {
    "USA": "US",
    "GBR": "GB",
    "DEU": "DE",
    "FRA": "FR",
    "CHN": "CN",
    "RUS": "RU",
    "IND": "IN",
    "ARE": "AE",
    "SAU": "SA",
    "EGY": "EG",
    "IRQ": "IQ",
    "TUR": "TR",
    "OMN": "OM",
}

NAME_TO_ISO2: Dict[str, str] = {
    "united states": "US",
    "united states of america": "US",
    "usa": "US",
    "united kingdom": "GB",
    "uk": "GB",
    "germany": "DE",
    "france": "FR",
    "china": "CN",
    "russia": "RU",
    "india": "IN",
    "united arab emirates": "AE",
    "saudi arabia": "SA",
    "egypt": "EG",
    "iraq": "IQ",
    "turkey": "TR",
    "oman": "OM",
}

COUNTRY_CENTROIDS: Dict[str, Tuple[float, float]] = {
    "US": (39.78, -98.57),
    "GB": (55.38, -3.44),
    "DE": (51.16, 10.45),
    "FR": (46.23, 2.21),
    "CN": (35.86, 104.19),
    "RU": (61.52, 105.32),
    "IN": (20.59, 78.96),
    "AE": (23.42, 53.85),
    "SA": (23.88, 45.07),
    "EG": (26.82, 30.8),
    "IQ": (33.22, 43.68),
    "TR": (38.96, 35.24),
}

# Sensors are deployed in Oman: always pin it to the site, never a centroid
HOME_COUNTRY = "OM"
HOME_COORDINATES: Tuple[float, float] = (23.5880, 58.3829)


def normalize_iso2(iso: Optional[str] = None, name: Optional[str] = None) -> Optional[str]:
    """Best-effort ISO alpha-2 from an alpha-2/alpha-3 code and/or a name."""
    if iso:
        up = iso.upper()
        if len(up) == 2:
            return up
        if len(up) == 3 and up in ISO3_TO_ISO2:
            return ISO3_TO_ISO2[up]
    if name:
        key = name.strip().lower()
        if key in NAME_TO_ISO2:
            return NAME_TO_ISO2[key]
    return iso.upper() if iso else None


def normalize_filter_country(value: str) -> str:
    """Same rules as `normalize_iso2` for one user-supplied filter value."""
    up = value.upper()
    if len(up) == 2:
        return up
    if len(up) == 3 and up in ISO3_TO_ISO2:
        return ISO3_TO_ISO2[up]
    return NAME_TO_ISO2.get(value.strip().lower(), up)


def event_country(geo: Optional[GeoIP]) -> Optional[str]:
    if geo is None:
        return None
    return normalize_iso2(geo.country_iso_code, geo.country)


def is_home_country(geo: Optional[GeoIP]) -> bool:
    if geo is None:
        return False
    if event_country(geo) == HOME_COUNTRY:
        return True
    return bool(geo.country) and geo.country.strip().lower() == "oman"


def resolve_coordinates(geo: Optional[GeoIP]) -> Optional[Tuple[float, float]]:
    """
    Map position for an event: the home site for Oman, else the explicit
    location, else the country centroid, else None.
    """
    if geo is None:
        return None
    if is_home_country(geo):
        return HOME_COORDINATES
    if geo.location is not None:
        return geo.location.lat, geo.location.lon
    iso = event_country(geo)
    if iso and iso in COUNTRY_CENTROIDS:
        return COUNTRY_CENTROIDS[iso]
    return None


def map_geo(geo: Optional[RawGeo]) -> Optional[GeoIP]:
    """Raw geo block -> GeoIP facet, or None when the block carries nothing."""
    if geo is None:
        return None

    location = None
    if geo.location is not None and geo.location.lat is not None and geo.location.lon is not None:
        location = GeoLocation(lat=geo.location.lat, lon=geo.location.lon)
    elif geo.lat is not None and geo.lon is not None:
        location = GeoLocation(lat=geo.lat, lon=geo.lon)

    if not any(
        (geo.country, geo.country_iso_code, geo.city, geo.city_name, location, geo.asn, geo.asn_org)
    ):
        return None

    iso2 = normalize_iso2(geo.country_iso_code, geo.country)
    return GeoIP(
        country_iso_code=iso2 or geo.country_iso_code or geo.country,
        country=geo.country,
        city_name=geo.city_name or geo.city,
        location=location,
        asn=geo.asn,
        asn_org=geo.asn_org,
    )
