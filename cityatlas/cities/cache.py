import datetime
import logging
import os
import pathlib
import time
from typing import Optional

log = logging.getLogger(__name__)


class CityCache:
    """The last successfully downloaded city list, stored verbatim in a single file."""

    def __init__(self, path: str | os.PathLike):
        self.path = pathlib.Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def modified_at(self) -> Optional[float]:
        """The file's modification time as a unix timestamp, or None if there is no cache file."""
        try:
            return self.path.stat().st_mtime
        except FileNotFoundError:
            return None

    def age(self, now: float = None) -> Optional[datetime.timedelta]:
        mtime = self.modified_at()
        if mtime is None:
            return None
        if now is None:
            now = time.time()
        return datetime.timedelta(seconds=now - mtime)

    def is_valid(self, expiry: datetime.timedelta, now: float = None) -> bool:
        age = self.age(now)
        if age is None:
            log.debug(f"No cache file at {self.path}")
            return False
        valid = age < expiry
        log.debug(f"Cache age: {age.total_seconds() / 3600:.1f} hours, valid: {valid}")
        return valid

    def read(self) -> bytes:
        return self.path.read_bytes()

    def write(self, data: bytes):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # write next to the target and swap it in so a reader never sees a half-written file
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, self.path)
        log.debug(f"Cached {len(data)} bytes to {self.path}")

    def clear(self):
        self.path.unlink(missing_ok=True)
