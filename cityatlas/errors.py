class CityAtlasError(Exception):
    """Base class for all errors raised by this package."""

    pass


class CityLoadError(CityAtlasError):
    """The city collection could not be fetched, read, or decoded."""

    pass
