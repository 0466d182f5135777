"""Tests for country and coordinate normalization."""

import pytest

from honeypot_intel.schemas.events import GeoIP, GeoLocation
from honeypot_intel.schemas.raw_records import RawGeo
from honeypot_intel.services.normalize.geo import (
    COUNTRY_CENTROIDS,
    HOME_COORDINATES,
    is_home_country,
    map_geo,
    normalize_filter_country,
    normalize_iso2,
    resolve_coordinates,
)


class TestNormalizeIso2:
    """Test ISO alpha-2 resolution."""

    @pytest.mark.parametrize(
        "iso,name,expected",
        [
            ("us", None, "US"),
            ("OMN", None, "OM"),
            ("deu", None, "DE"),
            (None, "Oman", "OM"),
            (None, "  United Kingdom ", "GB"),
            ("XYZ", None, "XYZ"),
            (None, "Atlantis", None),
            (None, None, None),
        ],
    )
    def test_resolution(self, iso, name, expected):
        """Test codes and names map to alpha-2, unknown codes fall through upper-cased."""
        assert normalize_iso2(iso, name) == expected

    def test_code_wins_over_name(self):
        """Test a valid code is preferred to the name."""
        assert normalize_iso2("DE", "France") == "DE"

    @pytest.mark.parametrize("value,expected", [("om", "OM"), ("OMN", "OM"), ("oman", "OM"), ("narnia", "NARNIA")])
    def test_filter_values(self, value, expected):
        """Test user filter values use the same rules."""
        assert normalize_filter_country(value) == expected


class TestCoordinates:
    """Test map position resolution."""

    def test_home_country_pinned(self):
        """Test Oman always resolves to the site, even with explicit coordinates."""
        geo = GeoIP(country_iso_code="OM", location=GeoLocation(lat=1.0, lon=2.0))
        assert resolve_coordinates(geo) == HOME_COORDINATES

    def test_home_by_name(self):
        """Test a free-text Oman country is home."""
        assert is_home_country(GeoIP(country="oman"))

    def test_explicit_location(self):
        """Test explicit coordinates are used for other countries."""
        geo = GeoIP(country_iso_code="US", location=GeoLocation(lat=40.7, lon=-74.0))
        assert resolve_coordinates(geo) == (40.7, -74.0)

    def test_centroid_fallback(self):
        """Test known countries without location use the centroid."""
        assert resolve_coordinates(GeoIP(country_iso_code="FRA")) == COUNTRY_CENTROIDS["FR"]

    def test_unplaceable(self):
        """Test unknown countries without location have no position."""
        assert resolve_coordinates(GeoIP(country_iso_code="ZZ")) is None
        assert resolve_coordinates(None) is None


class TestMapGeo:
    """Test raw geo block mapping."""

    def test_iso3_and_flat_coordinates(self):
        """Test alpha-3 codes are normalized and flat lat/lon become a location."""
        geo = map_geo(RawGeo.model_validate({"country_iso_code": "OMN", "lat": 23.6, "lon": 58.5, "city": "Muscat"}))
        assert geo.country_iso_code == "OM"
        assert geo.city_name == "Muscat"
        assert geo.location == GeoLocation(lat=23.6, lon=58.5)

    def test_country_name_only(self):
        """Test a name-only block gets an alpha-2 code."""
        geo = map_geo(RawGeo.model_validate({"country": "Oman"}))
        assert geo.country_iso_code == "OM"
        assert geo.country == "Oman"

    def test_string_coordinates_ignored(self):
        """Test non-numeric coordinates are not trusted."""
        geo = map_geo(RawGeo.model_validate({"country_iso_code": "US", "lat": "40.7", "lon": "-74"}))
        assert geo.location is None

    def test_empty_block(self):
        """Test a block with nothing usable maps to None."""
        assert map_geo(RawGeo.model_validate({})) is None
        assert map_geo(None) is None
