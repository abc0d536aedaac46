import asyncio
import logging
import weakref
from typing import AsyncIterator

from sqlalchemy import select

from cityatlas import models
from cityatlas.utils.broadcast import Broadcaster, drain

log = logging.getLogger(__name__)


# ==== queries ====
async def get_favorite_ids(session) -> frozenset[str]:
    result = await session.execute(select(models.FavoriteCity.city_id))
    return frozenset(result.scalars().all())


async def get_favorite(session, city_id: str) -> models.FavoriteCity | None:
    return await session.get(models.FavoriteCity, city_id)


# ==== store ====
class FavoritesStore:
    """
    The persisted set of favorite city ids.

    Toggles of the same id are serialised and each runs in its own transaction; toggles of different ids run
    concurrently. Every committed toggle is announced on :attr:`changes`.
    """

    def __init__(self, async_session):
        self.async_session = async_session
        self.changes = Broadcaster()
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, city_id: str) -> asyncio.Lock:
        lock = self._locks.get(city_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[city_id] = lock
        return lock

    async def is_favorite(self, city_id: str) -> bool:
        async with self.async_session() as session:
            return await get_favorite(session, city_id) is not None

    async def get_favorite_ids(self) -> frozenset[str]:
        async with self.async_session() as session:
            return await get_favorite_ids(session)

    async def toggle(self, city_id: str) -> bool:
        """Flips the favorite status of *city_id* and returns the new status (True = now a favorite)."""
        async with self._lock_for(city_id):
            async with self.async_session() as session:
                async with session.begin():
                    existing = await get_favorite(session, city_id)
                    if existing is not None:
                        await session.delete(existing)
                        is_favorite = False
                    else:
                        session.add(models.FavoriteCity(city_id=city_id))
                        is_favorite = True
        log.debug(f"Toggled favorite {city_id!r} -> {is_favorite}")
        self.changes.publish(city_id)
        return is_favorite

    async def watch(self) -> AsyncIterator[frozenset[str]]:
        """Yields the current favorite ids, then the new set after every change that altered it."""
        with self.changes.subscribe() as queue:
            last = None
            while True:
                ids = await self.get_favorite_ids()
                if ids != last:
                    last = ids
                    yield ids
                await queue.get()
                drain(queue)
