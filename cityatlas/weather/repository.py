import datetime
import logging

import pydantic
from pydantic import BaseModel

from cityatlas.utils.httpclient import HTTPException
from .client import CurrentWeather, WeatherClient

log = logging.getLogger(__name__)


class Weather(BaseModel):
    city_id: str
    temperature: float  # degrees Celsius
    description: str
    humidity: int  # percent
    wind_speed: float  # m/s
    icon: str
    timestamp: datetime.datetime

    @classmethod
    def from_current_weather(cls, city_id: str, current: CurrentWeather, timestamp: datetime.datetime = None):
        detail = current.weather[0] if current.weather else None
        return cls(
            city_id=city_id,
            temperature=current.main.temp,
            description=detail.description if detail else "",
            humidity=current.main.humidity,
            wind_speed=current.wind.speed,
            icon=detail.icon if detail else "",
            timestamp=timestamp or datetime.datetime.now(datetime.timezone.utc),
        )


class WeatherRepository:
    """Current weather by coordinates. Stateless: every call goes to the API."""

    def __init__(self, client: WeatherClient):
        self.client = client

    async def get_weather(self, latitude: float, longitude: float) -> Weather:
        """
        :raises HTTPException: if the request fails or the response doesn't look like current weather
        """
        try:
            current = await self.client.get_current_weather(latitude, longitude)
        except pydantic.ValidationError as e:
            log.warning(f"Unexpected weather response for ({latitude}, {longitude}): {e}")
            raise HTTPException(f"Could not deserialize weather response: {e}") from e
        return Weather.from_current_weather(f"{latitude}_{longitude}", current)
