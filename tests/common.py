"""
Shared test data and fakes.
"""
import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

from cityatlas.cities import City
from cityatlas.utils.broadcast import Broadcaster

SAMPLE_RECORDS = [
    {"country": "US", "name": "Alabama", "_id": 4829764, "coord": {"lon": -86.750259, "lat": 32.750408}},
    {"country": "US", "name": "Albuquerque", "_id": 5454711, "coord": {"lon": -106.651138, "lat": 35.084492}},
    {"country": "US", "name": "Anaheim", "_id": 5323810, "coord": {"lon": -117.914497, "lat": 33.835289}},
    {"country": "US", "name": "Arizona", "_id": 5551752, "coord": {"lon": -111.500977, "lat": 34.500298}},
    {"country": "AU", "name": "Sydney", "_id": 2147714, "coord": {"lon": 151.207321, "lat": -33.867851}},
]
SAMPLE_JSON = json.dumps(SAMPLE_RECORDS).encode()

ALABAMA_ID = "4829764"
SYDNEY_ID = "2147714"


def make_city(name: str, city_id: str = None, latitude: float = 0.0, longitude: float = 0.0, **kwargs) -> City:
    return City(
        id=city_id or name.lower(), name=name, country="XX", latitude=latitude, longitude=longitude, **kwargs
    )


def make_source(*results) -> MagicMock:
    """
    A city source whose fetch_cities returns (or raises) each of *results* in turn, yielding to the event loop first
    so concurrent callers really overlap.
    """
    remaining = list(results) if results else [SAMPLE_JSON]

    async def fetch():
        await asyncio.sleep(0.01)
        result = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(result, BaseException):
            raise result
        return result

    source = MagicMock()
    source.fetch_cities = AsyncMock(side_effect=fetch)
    return source


class FakeFavoritesStore:
    def __init__(self, ids=()):
        self.ids = set(ids)
        self.changes = Broadcaster()

    async def is_favorite(self, city_id: str) -> bool:
        return city_id in self.ids

    async def get_favorite_ids(self) -> frozenset[str]:
        return frozenset(self.ids)

    async def toggle(self, city_id: str) -> bool:
        if city_id in self.ids:
            self.ids.remove(city_id)
            is_favorite = False
        else:
            self.ids.add(city_id)
            is_favorite = True
        self.changes.publish(city_id)
        return is_favorite
