# file: backend/historical.py

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp

from backend import config
from backend.aqi import compute_aqi
from backend.cache import ResultCache
from backend.errors import ProviderFailure, UpstreamError
from backend.models import Coordinate, HistoricalAQIPoint, HistoricalWeatherPoint
from backend.providers import OPENMETEO_AIR_URL, get_json
from backend.utils import format_point_label, period_range

OPENMETEO_ARCHIVE_URL = "https://archive-api.open-meteo.com/v1/archive"

AQI_HOURLY_FIELDS = "pm10,pm2_5,carbon_monoxide,nitrogen_dioxide,sulphur_dioxide,ozone,european_aqi,us_aqi"
WEATHER_HOURLY_FIELDS = "temperature_2m,relativehumidity_2m"

# response field -> point field
AQI_FIELD_MAPPING = {
    "pm10": "pm10",
    "pm2_5": "pm2_5",
    "carbon_monoxide": "co",
    "nitrogen_dioxide": "no2",
    "sulphur_dioxide": "so2",
    "ozone": "o3",
    "european_aqi": "aqi_eu",
    "us_aqi": "aqi_us",
}


def history_cache_key(lat_raw: str, lon_raw: str, period: str) -> str:
    return f"{lat_raw}-{lon_raw}-{period}"


def _hourly(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    hourly = (data or {}).get("hourly") or {}
    times = hourly.get("time")
    if not isinstance(times, list) or not times:
        raise UpstreamError("Invalid data format from Open-Meteo API")
    return hourly


def _value(hourly: Dict[str, Any], field: str, index: int) -> Optional[float]:
    values = hourly.get(field)
    if not values or index >= len(values):
        return None
    return values[index]


def process_historical_aqi(data: Dict[str, Any]) -> List[HistoricalAQIPoint]:
    """Hourly pollutant series; hours without any provider index are dropped."""
    hourly = _hourly(data)
    logging.info(f"Processing {len(hourly['time'])} AQI data points from Open-Meteo API")
    points = []
    for i, timestamp in enumerate(hourly["time"]):
        values = {target: _value(hourly, source, i) or 0 for source, target in AQI_FIELD_MAPPING.items()}
        if values["aqi_eu"] <= 0 and values["aqi_us"] <= 0:
            continue
        points.append(HistoricalAQIPoint(
            date=format_point_label(datetime.fromisoformat(timestamp)),
            timestamp=timestamp,
            aqi=compute_aqi(values["pm2_5"], values["pm10"]).aqi,
            **values,
        ))
    return points


def process_historical_weather(data: Dict[str, Any]) -> List[HistoricalWeatherPoint]:
    hourly = _hourly(data)
    logging.info(f"Processing {len(hourly['time'])} weather data points from Open-Meteo API")
    return [
        HistoricalWeatherPoint(
            date=format_point_label(datetime.fromisoformat(timestamp)),
            timestamp=timestamp,
            temperature=_value(hourly, "temperature_2m", i),
            humidity=_value(hourly, "relativehumidity_2m", i),
        )
        for i, timestamp in enumerate(hourly["time"])
    ]


async def _fetch_hourly(session: aiohttp.ClientSession, url: str, coord: Coordinate, period: str,
                        fields: str, timeout: float) -> Dict[str, Any]:
    start_date, end_date = period_range(period)
    logging.info(f"Fetching historical data from {start_date} to {end_date} "
                 f"for coordinates: {coord.latitude}, {coord.longitude}")
    params = {
        "latitude": str(coord.latitude),
        "longitude": str(coord.longitude),
        "start_date": start_date,
        "end_date": end_date,
        "hourly": fields,
        "timezone": "auto",
    }
    try:
        return await get_json(session, url, "Open-Meteo", timeout, params=params)
    except ProviderFailure as e:
        raise UpstreamError(str(e))


async def get_historical_aqi(session: aiohttp.ClientSession, cache: ResultCache, coord: Coordinate,
                             key: str, period: str,
                             timeout: float = config.HISTORICAL_TIMEOUT) -> List[HistoricalAQIPoint]:
    cached = cache.lookup(key)
    if cached is not None:
        return cached
    data = await _fetch_hourly(session, OPENMETEO_AIR_URL, coord, period, AQI_HOURLY_FIELDS, timeout)
    try:
        points = process_historical_aqi(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise UpstreamError(f"Malformed historical AQI data: {e}")
    cache.put(key, points)
    return points


async def get_historical_weather(session: aiohttp.ClientSession, cache: ResultCache, coord: Coordinate,
                                 key: str, period: str,
                                 timeout: float = config.HISTORICAL_TIMEOUT) -> List[HistoricalWeatherPoint]:
    cached = cache.lookup(key)
    if cached is not None:
        return cached
    data = await _fetch_hourly(session, OPENMETEO_ARCHIVE_URL, coord, period, WEATHER_HOURLY_FIELDS, timeout)
    try:
        points = process_historical_weather(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise UpstreamError(f"Malformed historical weather data: {e}")
    cache.put(key, points)
    return points
