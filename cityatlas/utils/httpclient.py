import abc
import logging

import aiohttp

from cityatlas.errors import CityAtlasError


class HTTPException(CityAtlasError):
    pass


class HTTPTimeout(HTTPException):
    pass


class HTTPStatusException(HTTPException):
    def __init__(self, status_code: int, msg: str):
        super().__init__(msg)
        self.status_code = status_code


class BaseClient(abc.ABC):
    SERVICE_BASE: str = ...
    logger: logging.Logger = logging.getLogger(__name__)

    def __init__(self, http: aiohttp.ClientSession):
        self.http = http

    async def request(self, method: str, route: str, response_as_bytes=False, **kwargs):
        url = f"{self.SERVICE_BASE}{route}"
        try:
            async with self.http.request(method, url, **kwargs) as resp:
                self.logger.debug(f"{method} {url} returned {resp.status}")
                if not 199 < resp.status < 300:
                    data = await resp.text()
                    self.logger.warning(f"{method} {url} returned {resp.status} {resp.reason}\n{data}")
                    raise HTTPStatusException(resp.status, f"Request returned an error: {resp.status}: {resp.reason}")
                if response_as_bytes:
                    data = await resp.read()
                    if not data:
                        raise HTTPException(f"Empty response body from {method} {url}")
                    self.logger.debug(f"{method} {url} returned {len(data)} bytes")
                    return data
                try:
                    data = await resp.json(content_type=None)
                    self.logger.debug(data)
                except (aiohttp.ContentTypeError, ValueError, TypeError):
                    data = await resp.text()
                    self.logger.warning(f"{method} {url} response could not be deserialized:\n{data}")
                    raise HTTPException(f"Could not deserialize response: {data}")
                if data is None:
                    raise HTTPException(f"Empty response body from {method} {url}")
        except aiohttp.ServerTimeoutError:
            self.logger.warning(f"Request timeout: {method} {url}")
            raise HTTPTimeout("Timed out connecting. Please try again in a few minutes.")
        except aiohttp.ClientConnectionError as e:
            self.logger.warning(f"Connection error: {method} {url}: {e}")
            raise HTTPException(f"Could not connect: {e}") from e
        return data

    async def get(self, route: str, **kwargs):
        return await self.request("GET", route, **kwargs)

    async def post(self, route: str, **kwargs):
        return await self.request("POST", route, **kwargs)

    async def close(self):
        await self.http.close()
