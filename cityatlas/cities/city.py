import math
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from cityatlas.constants import EARTH_RADIUS_KM


# ==== wire models ====
class LatLon(BaseModel):
    lat: float
    lon: float


class CityRecord(BaseModel):
    """One element of the city list JSON, as served remotely and stored in the cache file."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    country: str
    coord: LatLon
    state: Optional[str] = None
    subcountry: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        # the published dataset uses numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


# ==== domain model ====
class City(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    country: str
    latitude: float
    longitude: float
    state: Optional[str] = None
    subcountry: Optional[str] = None
    is_favorite: bool = False
    distance: Optional[float] = None  # km from the last reference point

    @property
    def display_name(self) -> str:
        if self.state is not None:
            return f"{self.name}, {self.state}"
        return f"{self.name}, {self.country}"

    @property
    def coordinates(self) -> str:
        return f"{self.latitude:.4f}, {self.longitude:.4f}"

    @classmethod
    def from_record(cls, record: CityRecord) -> "City":
        return cls(
            id=record.id,
            name=record.name,
            country=record.country,
            latitude=record.coord.lat,
            longitude=record.coord.lon,
            state=record.state,
            subcountry=record.subcountry,
        )

    def to_record(self) -> CityRecord:
        return CityRecord(
            id=self.id,
            name=self.name,
            country=self.country,
            coord=LatLon(lat=self.latitude, lon=self.longitude),
            state=self.state,
            subcountry=self.subcountry,
        )


# ==== codec ====
_records_adapter = TypeAdapter(List[CityRecord])


def decode_cities(raw: bytes | str) -> list[City]:
    """
    Decodes a JSON array of city records.

    :raises pydantic.ValidationError: if the JSON is malformed or a record is missing fields
    """
    return [City.from_record(r) for r in _records_adapter.validate_json(raw)]


def encode_cities(cities: Iterable[City]) -> bytes:
    """Encodes cities in the same format :func:`decode_cities` reads. Derived fields are not written."""
    return _records_adapter.dump_json([c.to_record() for c in cities], by_alias=True, exclude_none=True)


# ==== geo ====
def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two points given in decimal degrees."""
    lon1, lat1, lon2, lat2 = map(math.radians, [lon1, lat1, lon2, lat2])
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # clamp against floating-point drift past 1.0 for antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return c * EARTH_RADIUS_KM


def with_distances(cities: Iterable[City], latitude: float, longitude: float) -> list[City]:
    return [
        c.model_copy(update={"distance": haversine(latitude, longitude, c.latitude, c.longitude)}) for c in cities
    ]
