# ==== search index ====
PREFIX_LENGTH = 3
CHUNK_SIZE = 1000

# ==== geo ====
EARTH_RADIUS_KM = 6371.0

# ==== http ====
# connect/read timeouts in seconds; the city list is a single large response
HTTP_CONNECT_TIMEOUT = 30
HTTP_READ_TIMEOUT = 120

# ==== weather ====
WEATHER_ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"
