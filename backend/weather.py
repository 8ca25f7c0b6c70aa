# file: backend/weather.py

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp
import pytz

from backend import config
from backend.cache import ResultCache
from backend.errors import ProviderFailure, UpstreamError
from backend.models import Coordinate, ForecastDay, ForecastTemperature, WeatherSnapshot
from backend.providers import get_json
from backend.utils import day_name, format_date_time, format_short_date, format_time

OPENMETEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_FIELDS = ("temperature_2m,relative_humidity_2m,apparent_temperature,is_day,precipitation,rain,showers,"
                  "snowfall,weather_code,cloud_cover,pressure_msl,surface_pressure,wind_speed_10m,"
                  "wind_direction_10m,wind_gusts_10m")
HOURLY_FIELDS = ("temperature_2m,relative_humidity_2m,apparent_temperature,precipitation_probability,precipitation,"
                 "weather_code,visibility,wind_speed_10m,wind_direction_10m,uv_index,is_day")
DAILY_FIELDS = ("weather_code,temperature_2m_max,temperature_2m_min,apparent_temperature_max,"
                "apparent_temperature_min,sunrise,sunset,uv_index_max,precipitation_sum,precipitation_hours,"
                "precipitation_probability_max,wind_speed_10m_max,wind_gusts_10m_max,wind_direction_10m_dominant")

# WMO weather interpretation codes: (condition, icon)
WEATHER_CODES = {
    0: ("Clear Sky", "sun"),
    1: ("Mainly Clear", "sun"),
    2: ("Partly Cloudy", "cloud-sun"),
    3: ("Overcast", "cloud"),
    45: ("Fog", "cloud-fog"),
    48: ("Depositing Rime Fog", "cloud-fog"),
    51: ("Light Drizzle", "cloud-drizzle"),
    53: ("Moderate Drizzle", "cloud-drizzle"),
    55: ("Dense Drizzle", "cloud-drizzle"),
    56: ("Light Freezing Drizzle", "cloud-drizzle"),
    57: ("Dense Freezing Drizzle", "cloud-drizzle"),
    61: ("Slight Rain", "cloud-rain"),
    63: ("Moderate Rain", "cloud-rain"),
    65: ("Heavy Rain", "cloud-rain"),
    66: ("Light Freezing Rain", "cloud-rain"),
    67: ("Heavy Freezing Rain", "cloud-rain"),
    71: ("Slight Snow Fall", "cloud-snow"),
    73: ("Moderate Snow Fall", "cloud-snow"),
    75: ("Heavy Snow Fall", "cloud-snow"),
    77: ("Snow Grains", "cloud-snow"),
    80: ("Slight Rain Showers", "cloud-rain"),
    81: ("Moderate Rain Showers", "cloud-rain"),
    82: ("Violent Rain Showers", "cloud-rain"),
    85: ("Slight Snow Showers", "cloud-snow"),
    86: ("Heavy Snow Showers", "cloud-snow"),
    95: ("Thunderstorm", "cloud-lightning"),
    96: ("Thunderstorm with Slight Hail", "cloud-lightning"),
    99: ("Thunderstorm with Heavy Hail", "cloud-lightning"),
}
UNKNOWN_WEATHER = ("Unknown", "cloud-question")

REGIONS = (
    ("Asia/Kolkata", "INDIA"),
    ("America", "US"),
    ("Europe", "EU"),
    ("Asia", "ASIA"),
    ("Africa", "AFRICA"),
    ("Australia", "AUSTRALIA"),
    ("Pacific", "PACIFIC"),
)


def weather_info(code: Optional[int]) -> tuple:
    return WEATHER_CODES.get(code, UNKNOWN_WEATHER)


def country_from_timezone(timezone: str) -> str:
    """Coarse region label from an IANA timezone name."""
    for prefix, region in REGIONS:
        if timezone.startswith(prefix):
            return region
    return "UNKNOWN"


def location_from_timezone(timezone: str) -> str:
    return timezone.split("/")[-1].replace("_", " ").upper()


def local_now(timezone: str) -> datetime:
    try:
        return datetime.now(pytz.timezone(timezone)).replace(tzinfo=None)
    except pytz.UnknownTimeZoneError:
        logging.warning(f"Unknown timezone '{timezone}', using UTC")
        return datetime.now(pytz.utc).replace(tzinfo=None)


def _at(series: Dict[str, Any], key: str, index: int) -> Optional[float]:
    values = series.get(key) or []
    return values[index] if index < len(values) else None


def _round1(value: Optional[float]) -> float:
    return round(value or 0, 1)


def process_weather_data(data: Dict[str, Any], now: Optional[datetime] = None) -> WeatherSnapshot:
    """Turn an Open-Meteo forecast response into the dashboard's weather snapshot."""
    current = data["current"]
    daily = data["daily"]
    hourly = data.get("hourly") or {}
    timezone = data.get("timezone") or "UTC"
    now = now or local_now(timezone)

    condition, icon = weather_info(current.get("weather_code"))

    forecast: List[ForecastDay] = []
    for i, day in enumerate(daily["time"]):
        date = datetime.fromisoformat(day)
        day_condition, day_icon = weather_info(daily["weather_code"][i])
        forecast.append(ForecastDay(
            date=format_short_date(date),
            day=day_name(date, today=now),
            temperature=ForecastTemperature(
                max=round(daily["temperature_2m_max"][i]),
                min=round(daily["temperature_2m_min"][i]),
            ),
            condition=day_condition,
            icon=day_icon,
            precipitation_probability=_at(daily, "precipitation_probability_max", i),
            precipitation_sum=_at(daily, "precipitation_sum", i),
            wind_speed=_at(daily, "wind_speed_10m_max", i),
            uv_index=_at(daily, "uv_index_max", i),
        ))

    hour_prefix = now.strftime("%Y-%m-%dT%H")
    hour_index = next((i for i, t in enumerate(hourly.get("time", [])) if t.startswith(hour_prefix)), None)
    if hour_index is not None:
        uv_index = hourly["uv_index"][hour_index] or 0
        visibility = round((hourly["visibility"][hour_index] or 0) / 1000)
    else:
        uv_index, visibility = 0, 10

    return WeatherSnapshot(
        temperature=round(current["temperature_2m"]),
        condition=condition,
        icon=icon,
        windSpeed=_round1(current.get("wind_speed_10m")),
        windDirection=current.get("wind_direction_10m"),
        humidity=round(current["relative_humidity_2m"]),
        uvIndex=_round1(uv_index),
        feelsLike=round(current["apparent_temperature"]),
        visibility=visibility,
        sunrise=format_time(datetime.fromisoformat(daily["sunrise"][0])),
        sunset=format_time(datetime.fromisoformat(daily["sunset"][0])),
        location=location_from_timezone(timezone),
        country=country_from_timezone(timezone),
        date=format_date_time(now),
        pressure=current.get("pressure_msl"),
        cloudCover=current.get("cloud_cover"),
        precipitation=current.get("precipitation"),
        isDay=current.get("is_day") == 1,
        forecast=forecast,
    )


async def fetch_weather(session: aiohttp.ClientSession, coord: Coordinate,
                        timeout: float = config.PROVIDER_TIMEOUT) -> WeatherSnapshot:
    logging.info(f"Fetching weather data from Open-Meteo for coordinates: {coord.latitude}, {coord.longitude}")
    params = {
        "latitude": str(coord.latitude),
        "longitude": str(coord.longitude),
        "current": CURRENT_FIELDS,
        "hourly": HOURLY_FIELDS,
        "daily": DAILY_FIELDS,
        "timezone": "auto",
    }
    try:
        data = await get_json(session, OPENMETEO_FORECAST_URL, "Open-Meteo", timeout, params=params)
    except ProviderFailure as e:
        raise UpstreamError(str(e))
    if not data:
        raise UpstreamError("Open-Meteo: empty response")
    try:
        return process_weather_data(data)
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise UpstreamError(f"Open-Meteo: malformed response: {e}")


async def get_weather(session: aiohttp.ClientSession, cache: ResultCache, coord: Coordinate) -> WeatherSnapshot:
    """Cached weather lookup keyed like the live AQI cache."""
    cached = cache.lookup(coord.key)
    if cached is not None:
        return cached
    snapshot = await fetch_weather(session, coord)
    cache.put(coord.key, snapshot)
    return snapshot
