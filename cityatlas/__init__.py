import datetime

import aiohttp

from . import config, constants, db
from .cities import CityCache, CityRepository, CitySourceClient, FavoritesStore
from .weather import WeatherClient, WeatherRepository


class CityAtlas:
    """
    Owns every long-lived component: the HTTP session, the database engine, and the repositories built on them.
    Construct one per process, inside a running event loop, and close it when done.
    """

    def __init__(
        self,
        db_uri: str = config.DB_URI,
        cities_url: str = config.CITIES_URL,
        cache_path: str = config.CITIES_CACHE_PATH,
        weather_api_key: str = config.WEATHER_API_KEY,
        cache_expiry_days: int = config.CACHE_EXPIRY_DAYS,
    ):
        timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=constants.HTTP_CONNECT_TIMEOUT, sock_read=constants.HTTP_READ_TIMEOUT
        )
        self.http = aiohttp.ClientSession(timeout=timeout)
        self.engine = db.create_engine(db_uri)
        self.async_session = db.create_sessionmaker(self.engine)

        self.favorites = FavoritesStore(self.async_session)
        self.cities = CityRepository(
            source=CitySourceClient(self.http, cities_url),
            cache=CityCache(cache_path),
            favorites=self.favorites,
            cache_expiry=datetime.timedelta(days=cache_expiry_days),
        )
        self.weather = WeatherRepository(WeatherClient(self.http, weather_api_key))

    async def init(self):
        await db.init_db(self.engine)

    async def close(self):
        await self.http.close()
        await self.engine.dispose()

    async def __aenter__(self):
        await self.init()
        return self

    async def __aexit__(self, *exc_info):
        await self.close()
