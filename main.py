import argparse
import asyncio
import logging
import sys

from cityatlas import CityAtlas, config, errors
from cityatlas.cities import City, encode_cities
from cityatlas.weather import utils as weather_utils


def format_city(city: City) -> str:
    star = "*" if city.is_favorite else " "
    out = f"{star} {city.id:>10}  {city.display_name} ({city.coordinates})"
    if city.distance is not None:
        out += f" - {city.distance:.1f} km"
    return out


def print_cities(cities: list[City], limit: int = None):
    shown = cities if limit is None else cities[:limit]
    for city in shown:
        print(format_city(city))
    if len(shown) < len(cities):
        print(f"... and {len(cities) - len(shown)} more")


# ==== commands ====
async def cmd_cities(atlas: CityAtlas, args):
    print_cities(await atlas.cities.get_cities(), args.limit)


async def cmd_search(atlas: CityAtlas, args):
    query = args.query.strip()
    if not query:
        cities = sorted(await atlas.cities.get_cities(), key=lambda c: c.name)
    else:
        cities = await atlas.cities.search_cities(query)
    if not cities:
        print(f"No cities match {query!r}")
        return
    print_cities(cities, args.limit)


async def cmd_city(atlas: CityAtlas, args):
    await atlas.cities.get_cities()
    city = await atlas.cities.get_city_by_id(args.city_id)
    if city is None:
        print(f"No city with ID {args.city_id}")
        return 1
    print(format_city(city))


async def cmd_favorite(atlas: CityAtlas, args):
    await atlas.cities.get_cities()
    city = await atlas.cities.get_city_by_id(args.city_id)
    if city is None:
        print(f"No city with ID {args.city_id}")
        return 1
    is_favorite = await atlas.cities.toggle_favorite(city.id)
    print(f"{city.display_name} is {'now' if is_favorite else 'no longer'} a favorite")


async def cmd_favorites(atlas: CityAtlas, args):
    favorites = await atlas.cities.get_favorites()
    if not favorites:
        print("You have no favorite cities. Add some with `favorite <city id>`.")
        return
    print_cities(favorites, args.limit)


async def cmd_near(atlas: CityAtlas, args):
    await atlas.cities.get_cities()
    await atlas.cities.update_distances(args.latitude, args.longitude)
    cities = [c for c in await atlas.cities.get_cities() if c.distance is not None]
    cities.sort(key=lambda c: c.distance)
    print_cities(cities, args.limit)


async def cmd_weather(atlas: CityAtlas, args):
    if not config.WEATHER_API_KEY:
        print("Set WEATHER_API_KEY to an OpenWeatherMap API key first", file=sys.stderr)
        return 1
    await atlas.cities.get_cities()
    city = await atlas.cities.get_city_by_id(args.city_id)
    if city is None:
        print(f"No city with ID {args.city_id}")
        return 1
    weather = await atlas.weather.get_weather(city.latitude, city.longitude)
    print(f"Current weather in {city.display_name}: {weather_utils.weather_desc(weather)}")
    print(weather_utils.icon_url(weather))


async def cmd_export(atlas: CityAtlas, args):
    if args.favorites:
        cities = await atlas.cities.get_favorites()
    else:
        cities = await atlas.cities.get_cities()
    with open(args.path, "wb") as f:
        f.write(encode_cities(cities))
    print(f"Wrote {len(cities)} cities to {args.path}")


# ==== entrypoint ====
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search cities, keep favorites, and check the weather.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("cities", help="List every city")
    p.add_argument("--limit", type=int, default=50)
    p.set_defaults(func=cmd_cities)

    p = subparsers.add_parser("search", help="Find cities whose name starts with QUERY")
    p.add_argument("query")
    p.add_argument("--limit", type=int, default=50)
    p.set_defaults(func=cmd_search)

    p = subparsers.add_parser("city", help="Show one city")
    p.add_argument("city_id")
    p.set_defaults(func=cmd_city)

    p = subparsers.add_parser("favorite", help="Toggle a city's favorite status")
    p.add_argument("city_id")
    p.set_defaults(func=cmd_favorite)

    p = subparsers.add_parser("favorites", help="List favorite cities")
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=cmd_favorites)

    p = subparsers.add_parser("near", help="List the cities closest to a point")
    p.add_argument("latitude", type=float)
    p.add_argument("longitude", type=float)
    p.add_argument("--limit", type=int, default=10)
    p.set_defaults(func=cmd_near)

    p = subparsers.add_parser("weather", help="Show the current weather in a city")
    p.add_argument("city_id")
    p.set_defaults(func=cmd_weather)

    p = subparsers.add_parser("export", help="Write cities to a JSON file in the source format")
    p.add_argument("path")
    p.add_argument("--favorites", action="store_true", help="Only export favorite cities")
    p.set_defaults(func=cmd_export)
    return parser


async def run(args) -> int:
    async with CityAtlas() as atlas:
        try:
            return await args.func(atlas, args) or 0
        except errors.CityAtlasError as e:
            print(f"Error: {e!s}", file=sys.stderr)
            return 1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else getattr(logging, config.LOG_LEVEL.upper()))
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
