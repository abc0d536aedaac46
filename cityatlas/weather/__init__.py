from .client import CurrentWeather, WeatherClient
from .repository import Weather, WeatherRepository
