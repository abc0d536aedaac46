"""
The city repository: single source of truth for the city list.

Loading is single-flight. The first caller that finds the repository empty starts the one load task (cache file
if it is fresh enough, otherwise a download that refreshes the cache), and every other caller awaits that same
task. The collection, its id lookup, the in-flight task and the search index are only read or replaced while
holding ``_lock``; decoding, index building and distance computation happen in an executor with the lock
released, and only the finished result is swapped in.

Favorite status is never stored on the collection. It is merged in from the favorites store on every call.
"""
import asyncio
import datetime
import enum
import functools
import logging
from concurrent.futures import Executor
from typing import AsyncIterator, Awaitable, Callable, Iterable, Optional

from cityatlas.errors import CityLoadError
from cityatlas.utils import run_blocking
from cityatlas.utils.broadcast import Broadcaster, drain
from cityatlas.utils.httpclient import HTTPException
from .cache import CityCache
from .city import City, decode_cities, with_distances
from .client import CitySourceClient
from .favorites import FavoritesStore
from .index import CityIndex

log = logging.getLogger(__name__)

DEFAULT_CACHE_EXPIRY = datetime.timedelta(days=7)


class LoadState(enum.Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"


def _by_id(cities: Iterable[City]) -> dict[str, City]:
    return {c.id: c for c in cities}


def _merge_favorites(cities: Iterable[City], favorite_ids: frozenset[str]) -> list[City]:
    # cities in the collection always carry is_favorite=False, so only favorites need a copy
    return [c.model_copy(update={"is_favorite": True}) if c.id in favorite_ids else c for c in cities]


class CityRepository:
    def __init__(
        self,
        source: CitySourceClient,
        cache: CityCache,
        favorites: FavoritesStore,
        cache_expiry: datetime.timedelta = DEFAULT_CACHE_EXPIRY,
        executor: Optional[Executor] = None,
    ):
        self.source = source
        self.cache = cache
        self.favorites = favorites
        self.cache_expiry = cache_expiry
        self.executor = executor
        # announces every replacement of the collection
        self.changes = Broadcaster()

        self._lock = asyncio.Lock()
        self._index_lock = asyncio.Lock()
        self._distance_lock = asyncio.Lock()

        # guarded by _lock
        self._cities: list[City] = []
        self._cities_by_id: dict[str, City] = {}
        self._index = CityIndex()
        self._loaded = False
        self._load_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> LoadState:
        if self._load_task is not None:
            return LoadState.LOADING
        if self._loaded:
            return LoadState.LOADED
        return LoadState.EMPTY

    # ==== public ====
    async def get_cities(self) -> list[City]:
        """Every loaded city with its current favorite status. Loads the collection first if needed."""
        cities = await self._ensure_loaded()
        return _merge_favorites(cities, await self._favorite_ids())

    async def search_cities(self, query: str) -> list[City]:
        """
        Cities whose name starts with *query*, case-insensitively, sorted by name. An empty query returns the whole
        collection in its stored order. Never raises; failures are logged and give an empty list.
        """
        try:
            cities = await self._ensure_loaded()
            if not cities:
                return []
            if not query:
                results = cities
            else:
                index = await self._ensure_index()
                results = await run_blocking(index.search, query, executor=self.executor)
        except Exception:
            log.exception(f"Search for {query!r} failed")
            return []
        return _merge_favorites(results, await self._favorite_ids())

    async def get_favorites(self) -> list[City]:
        """The loaded cities currently marked as favorites, sorted by name."""
        cities = await self._ensure_loaded()
        favorite_ids = await self._favorite_ids()
        favorites = sorted((c for c in cities if c.id in favorite_ids), key=lambda c: c.name)
        return _merge_favorites(favorites, favorite_ids)

    async def toggle_favorite(self, city_id: str) -> bool:
        """
        Flips the favorite status of a city and returns the new status.

        :raises Exception: whatever the favorites store raised; there is no safe fallback for a write
        """
        return await self.favorites.toggle(city_id)

    async def get_city_by_id(self, city_id: str) -> Optional[City]:
        """Looks up an already-loaded city. Never triggers a load; returns None if the city isn't in memory."""
        async with self._lock:
            city = self._cities_by_id.get(city_id)
        if city is None:
            return None
        try:
            is_favorite = await self.favorites.is_favorite(city_id)
        except Exception:
            log.warning(f"Could not read favorite status of city {city_id!r}", exc_info=True)
            is_favorite = False
        if is_favorite:
            return city.model_copy(update={"is_favorite": True})
        return city

    async def update_distances(self, latitude: float, longitude: float):
        """
        Annotates every city with its great-circle distance to the given point. Best effort: on failure the
        distances are left as they were and the error is logged.
        """
        try:
            async with self._distance_lock:
                async with self._lock:
                    cities = self._cities
                    had_index = self._index.is_built
                if not cities:
                    log.debug("No cities loaded, skipping distance update")
                    return
                updated = await run_blocking(with_distances, cities, latitude, longitude, executor=self.executor)
                updated_by_id = await run_blocking(_by_id, updated, executor=self.executor)
                async with self._lock:
                    if self._cities is not cities:
                        log.info("City collection was replaced during the distance update, discarding distances")
                        return
                    self._replace_collection(updated, updated_by_id)
                if had_index:
                    await self._ensure_index()
        except Exception:
            log.exception(f"Failed to update city distances from ({latitude}, {longitude})")
            return
        log.debug(f"Updated distances of {len(updated)} cities from ({latitude}, {longitude})")
        self.changes.publish()

    # ---- watching ----
    def watch_cities(self) -> AsyncIterator[list[City]]:
        """Yields :meth:`get_cities` now and again whenever the collection or the favorites change."""
        return self._watch(self.get_cities)

    def watch_search(self, query: str) -> AsyncIterator[list[City]]:
        return self._watch(functools.partial(self.search_cities, query))

    def watch_favorites(self) -> AsyncIterator[list[City]]:
        return self._watch(self.get_favorites)

    async def _watch(self, compute: Callable[[], Awaitable[list[City]]]):
        # subscribe before the first computation so no change can slip in between
        with self.changes.subscribe() as queue, self.favorites.changes.subscribe(queue):
            while True:
                yield await compute()
                await queue.get()
                drain(queue)

    # ==== loading ====
    async def _ensure_loaded(self) -> list[City]:
        async with self._lock:
            if self._loaded:
                return self._cities
            if self._load_task is None:
                self._load_task = asyncio.ensure_future(self._load())
            task = self._load_task
        # a caller that goes away must not cancel the load for everyone else
        await asyncio.shield(task)
        async with self._lock:
            return self._cities

    async def _load(self):
        try:
            log.info("Loading cities...")
            cities = await self._read_cities()
            cities_by_id = await run_blocking(_by_id, cities, executor=self.executor)
            async with self._lock:
                self._replace_collection(cities, cities_by_id)
                self._loaded = True
            await self._ensure_index()
            log.info(f"Loaded {len(cities)} cities")
        except CityLoadError as e:
            log.error(f"Failed to load cities: {e}")
            return
        except Exception:
            log.exception("Unexpected error while loading cities")
            return
        finally:
            async with self._lock:
                self._load_task = None
        self.changes.publish()

    async def _read_cities(self) -> list[City]:
        """
        Reads the cache file if it is younger than the expiry, otherwise downloads the list and rewrites the cache.

        :raises CityLoadError: if the data can't be read, downloaded, or decoded
        """
        try:
            cache_valid = await run_blocking(self.cache.is_valid, self.cache_expiry, executor=self.executor)
        except OSError as e:
            raise CityLoadError(f"Could not inspect the cache file: {e}") from e

        if cache_valid:
            log.info(f"Reading cities from cache at {self.cache.path}")
            try:
                raw = await run_blocking(self.cache.read, executor=self.executor)
                return await run_blocking(decode_cities, raw, executor=self.executor)
            except ValueError as e:
                # an unreadable cache would otherwise be trusted until it expires
                log.warning(f"Discarding unreadable cache file {self.cache.path}")
                await run_blocking(self.cache.clear, executor=self.executor)
                raise CityLoadError(f"Cached city list could not be decoded: {e}") from e
            except OSError as e:
                raise CityLoadError(f"Could not read the cache file: {e}") from e

        log.info("Downloading fresh city data...")
        try:
            raw = await self.source.fetch_cities()
        except HTTPException as e:
            raise CityLoadError(f"Could not download cities: {e}") from e
        log.info(f"Downloaded {len(raw)} bytes")
        try:
            await run_blocking(self.cache.write, raw, executor=self.executor)
        except OSError as e:
            raise CityLoadError(f"Could not write the cache file: {e}") from e
        try:
            return await run_blocking(decode_cities, raw, executor=self.executor)
        except ValueError as e:
            raise CityLoadError(f"Downloaded city list could not be decoded: {e}") from e

    # ==== index ====
    def _replace_collection(self, cities: list[City], cities_by_id: dict[str, City]):
        # caller holds _lock; the old index describes the old collection, so drop it
        self._cities = cities
        self._cities_by_id = cities_by_id
        self._index = CityIndex()

    async def _ensure_index(self) -> CityIndex:
        """Returns a fully built index of the current collection, building it first if needed (one builder at a time)."""
        async with self._lock:
            if self._index.is_built:
                return self._index
        async with self._index_lock:
            while True:
                async with self._lock:
                    if self._index.is_built:
                        return self._index
                    cities = self._cities
                log.debug(f"Building search index for {len(cities)} cities...")
                index = CityIndex()
                await run_blocking(index.build, cities, executor=self.executor)
                async with self._lock:
                    if self._cities is cities:
                        self._index = index
                        return index
                log.debug("City collection was replaced during the index build, rebuilding")

    # ==== favorites ====
    async def _favorite_ids(self) -> frozenset[str]:
        try:
            return await self.favorites.get_favorite_ids()
        except Exception:
            log.warning("Could not read favorites, merging every city as non-favorite", exc_info=True)
            return frozenset()
