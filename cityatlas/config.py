import os

DB_URI = os.getenv("DB_URI", "sqlite+aiosqlite:///data/cityatlas.db")
WEATHER_API_KEY = os.getenv("WEATHER_API_KEY")
CITIES_URL = os.getenv(
    "CITIES_URL",
    "https://gist.githubusercontent.com/hernan-uala/dce8843a8edbe0b0018b32e137bc2b3a/raw/"
    "0996accf70cb0ca0e16f9a99e0ee185fafca7af1/cities.json",
)
CITIES_CACHE_PATH = os.getenv("CITIES_CACHE_PATH", "data/cities.json")
CACHE_EXPIRY_DAYS = int(os.getenv("CACHE_EXPIRY_DAYS", "7"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
