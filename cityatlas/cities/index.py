import logging
from typing import Sequence

from cityatlas.constants import CHUNK_SIZE, PREFIX_LENGTH
from cityatlas.utils import chunked
from .city import City

log = logging.getLogger(__name__)


def prefix_key(text: str, length: int = PREFIX_LENGTH) -> str:
    """
    The bucket key for *text*: its first *length* characters after lowercasing. Shorter strings (including the
    empty string) are their own key.
    """
    return text.lower()[:length]


class CityIndex:
    """
    Buckets cities by the lowercase prefix of their name so a search only has to scan the cities that share the
    query's prefix. Bucket order is insignificant; results are sorted at query time.

    An index is built once and then only read. To pick up a new collection, build a new index and swap it in.
    """

    def __init__(self, prefix_length: int = PREFIX_LENGTH, chunk_size: int = CHUNK_SIZE):
        self.prefix_length = prefix_length
        self.chunk_size = chunk_size
        self._buckets: dict[str, list[City]] = {}
        self._built = False
        self._size = 0

    def __len__(self):
        return self._size

    @property
    def is_built(self) -> bool:
        return self._built

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def build(self, cities: Sequence[City]):
        self._buckets.clear()
        self._built = False
        self._size = 0
        for chunk in chunked(cities, self.chunk_size):
            for city in chunk:
                self._buckets.setdefault(prefix_key(city.name, self.prefix_length), []).append(city)
            self._size += len(chunk)
        self._built = True
        log.debug(f"Indexed {self._size} cities into {len(self._buckets)} buckets")

    def search(self, query: str) -> list[City]:
        """Returns the indexed cities whose name starts with *query* (case-insensitive), sorted by name."""
        lowered = query.lower()
        key = prefix_key(query, self.prefix_length)
        if len(key) == self.prefix_length:
            candidates = self._buckets.get(key, ())
        else:
            # a short key is a prefix of several full-length keys
            candidates = [city for k, bucket in self._buckets.items() if k.startswith(key) for city in bucket]
        matches = [city for city in candidates if city.name.lower().startswith(lowered)]
        return sorted(matches, key=lambda c: c.name)
