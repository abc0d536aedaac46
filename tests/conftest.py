"""Pytest configuration and fixtures."""

import pytest

from cityatlas.cities import CityCache, decode_cities
from tests.common import SAMPLE_JSON


@pytest.fixture
def sample_cities():
    """The five sample cities, in source order."""
    return decode_cities(SAMPLE_JSON)


@pytest.fixture
def city_cache(tmp_path):
    """A cache file location that doesn't exist yet."""
    return CityCache(tmp_path / "cities.json")
