import aiohttp

from cityatlas.utils.httpclient import BaseClient


class CitySourceClient(BaseClient):
    """Downloads the whole city list in one request; the dataset is neither paginated nor authenticated."""

    def __init__(self, http: aiohttp.ClientSession, url: str):
        super().__init__(http)
        # the source is one absolute URL, so it doubles as the service base
        self.SERVICE_BASE = url

    async def fetch_cities(self) -> bytes:
        """
        Returns the raw JSON body, undecoded, so it can be cached byte for byte.

        :raises HTTPException: on a non-2xx status, an empty body, a timeout, or a connection failure
        """
        return await self.get("", response_as_bytes=True)
