"""Tests for the city models and codec."""

import json

import pydantic
import pytest

from cityatlas.cities import City, decode_cities, encode_cities, haversine
from cityatlas.cities.city import with_distances
from tests.common import ALABAMA_ID, SAMPLE_JSON, make_city


class TestDecode:
    def test_numeric_ids_become_strings(self, sample_cities):
        assert sample_cities[0].id == ALABAMA_ID
        assert all(isinstance(c.id, str) for c in sample_cities)

    def test_fields(self, sample_cities):
        alabama = sample_cities[0]
        assert alabama.name == "Alabama"
        assert alabama.country == "US"
        assert alabama.latitude == pytest.approx(32.750408)
        assert alabama.longitude == pytest.approx(-86.750259)
        assert alabama.state is None
        assert not alabama.is_favorite
        assert alabama.distance is None

    def test_optional_fields(self):
        raw = json.dumps(
            [{"_id": "x1", "name": "Kyiv", "country": "UA", "coord": {"lon": 30.5, "lat": 50.4}, "subcountry": "Kyiv City"}]
        )
        (city,) = decode_cities(raw)
        assert city.id == "x1"
        assert city.subcountry == "Kyiv City"

    def test_malformed_json(self):
        with pytest.raises(pydantic.ValidationError):
            decode_cities(b"[{not json")

    def test_missing_field(self):
        with pytest.raises(pydantic.ValidationError):
            decode_cities(b'[{"_id": 1, "name": "Nowhere"}]')

    def test_empty_list(self):
        assert decode_cities(b"[]") == []


class TestEncode:
    def test_round_trip_through_cache_file(self, sample_cities, city_cache):
        city_cache.write(encode_cities(sample_cities))
        decoded = decode_cities(city_cache.read())
        assert decoded == sample_cities

    def test_uses_source_field_names(self, sample_cities):
        data = json.loads(encode_cities(sample_cities[:1]))
        assert data == [{"_id": ALABAMA_ID, "name": "Alabama", "country": "US", "coord": {"lat": 32.750408, "lon": -86.750259}}]

    def test_derived_fields_are_not_written(self):
        city = make_city("Oslo", is_favorite=True, distance=12.5)
        (record,) = json.loads(encode_cities([city]))
        assert "is_favorite" not in record
        assert "distance" not in record


class TestCity:
    def test_display_name(self):
        assert make_city("Springfield", state="IL").display_name == "Springfield, IL"
        assert make_city("Springfield").display_name == "Springfield, XX"

    def test_coordinates(self):
        assert make_city("Oslo", latitude=59.91273, longitude=10.74609).coordinates == "59.9127, 10.7461"

    def test_frozen(self):
        city = make_city("Oslo")
        with pytest.raises(pydantic.ValidationError):
            city.name = "Bergen"


class TestDistance:
    def test_same_point(self):
        assert haversine(10, 20, 10, 20) == 0

    def test_equator_to_pole(self):
        assert haversine(0, 0, 90, 0) == pytest.approx(10007.543, abs=0.01)

    def test_antipodes(self):
        assert haversine(0, 0, 0, 180) == pytest.approx(20015.087, abs=0.01)

    def test_known_pair(self):
        # Paris to London
        assert haversine(48.8566, 2.3522, 51.5074, -0.1278) == pytest.approx(343.5, abs=1)

    def test_with_distances_copies(self):
        city = make_city("North Pole", latitude=90.0, longitude=0.0)
        (updated,) = with_distances([city], 0.0, 0.0)
        assert updated.distance == pytest.approx(10007.5, abs=0.1)
        assert city.distance is None
        assert updated.id == city.id
