from cityatlas.constants import WEATHER_ICON_URL
from .repository import Weather


def c_to_f(deg_c: float):
    """Celsius to Fahrenheit"""
    return deg_c * 1.8 + 32


def ms_to_kmh(ms: float):
    """m/s to km/h"""
    return ms * 3.6


def wind_desc(speed: float) -> str:
    """A word for a wind speed in m/s."""
    if speed < 0.2:
        return "calm"
    elif speed < 4.4:
        return "light"
    elif speed < 6:
        return "moderate"
    elif speed < 8:
        return "blustery"
    elif speed < 10:
        return "gusty"
    elif speed < 14:
        return "strong"
    elif speed < 20:
        return "a gale"
    elif speed < 32:
        return "violent"
    return "hurricane-like"


def icon_url(weather: Weather) -> str:
    return WEATHER_ICON_URL.format(icon=weather.icon)


def weather_desc(weather: Weather) -> str:
    return (
        f"{weather.temperature:.1f}°C ({c_to_f(weather.temperature):.0f}°F)"
        f"{', ' + weather.description if weather.description else ''}. "
        f"The wind is {wind_desc(weather.wind_speed)}, at {ms_to_kmh(weather.wind_speed):.0f} km/h. "
        f"The humidity is {weather.humidity}%."
    )
