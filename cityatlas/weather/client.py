import datetime
from typing import Dict, List, Optional

import aiohttp
from pydantic import BaseModel

from cityatlas.cities.city import LatLon
from cityatlas.utils.httpclient import BaseClient


# ==== response models ====
class _WeatherDetail(BaseModel):
    id: int
    main: str
    description: str
    icon: str


class _WeatherMain(BaseModel):
    temp: float
    humidity: int
    pressure: Optional[int] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None


class _WeatherWind(BaseModel):
    speed: float
    deg: Optional[int] = None


class CurrentWeather(BaseModel):
    coord: Optional[LatLon] = None
    weather: List[_WeatherDetail]
    main: _WeatherMain
    wind: _WeatherWind
    visibility: Optional[int] = None
    clouds: Optional[Dict[str, int]] = None
    dt: Optional[datetime.datetime] = None
    name: str = ""


# ==== client ===
class WeatherClient(BaseClient):
    SERVICE_BASE = "https://api.openweathermap.org/data/2.5"

    def __init__(self, http: aiohttp.ClientSession, api_key: Optional[str], units: str = "metric"):
        super().__init__(http)
        self.api_key = api_key
        self.units = units

    async def get_current_weather(self, latitude: float, longitude: float) -> CurrentWeather:
        params = {"lat": latitude, "lon": longitude, "units": self.units}
        # without a key the service answers 401, which surfaces as an HTTPStatusException
        if self.api_key:
            params["appid"] = self.api_key
        data = await self.get("/weather", params=params)
        return CurrentWeather.model_validate(data)
