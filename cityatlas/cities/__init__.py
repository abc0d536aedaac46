from .cache import CityCache
from .city import City, CityRecord, LatLon, decode_cities, encode_cities, haversine
from .client import CitySourceClient
from .favorites import FavoritesStore
from .index import CityIndex
from .repository import CityRepository, LoadState
