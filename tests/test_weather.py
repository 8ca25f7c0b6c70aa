import re
from datetime import datetime

import aiohttp
import pytest
from aioresponses import aioresponses

from backend.cache import ResultCache
from backend.errors import UpstreamError
from backend.weather import country_from_timezone, get_weather, location_from_timezone, process_weather_data

FORECAST_PATTERN = re.compile(r"^https://api\.open-meteo\.com/v1/forecast.*$")

NOW = datetime(2024, 6, 8, 15, 5)

FORECAST_BODY = {
    "timezone": "Asia/Kolkata",
    "current": {
        "temperature_2m": 34.6, "relative_humidity_2m": 41.2, "apparent_temperature": 37.4, "is_day": 1,
        "precipitation": 0.0, "weather_code": 2, "cloud_cover": 40, "pressure_msl": 1002.1,
        "wind_speed_10m": 12.34, "wind_direction_10m": 280,
    },
    "hourly": {
        "time": ["2024-06-08T14:00", "2024-06-08T15:00", "2024-06-08T16:00"],
        "uv_index": [7.1, 6.24, 5.0],
        "visibility": [24000.0, 18400.0, 20000.0],
    },
    "daily": {
        "time": ["2024-06-08", "2024-06-09", "2024-06-10"],
        "weather_code": [2, 61, 1234],
        "temperature_2m_max": [39.6, 36.2, 35.0],
        "temperature_2m_min": [29.1, 28.4, 27.7],
        "sunrise": ["2024-06-08T05:23", "2024-06-09T05:23", "2024-06-10T05:23"],
        "sunset": ["2024-06-08T19:18", "2024-06-09T19:19", "2024-06-10T19:19"],
        "uv_index_max": [9.1, 8.0, 8.5],
        "precipitation_sum": [0.0, 4.2, 0.0],
        "precipitation_probability_max": [5, 70, 10],
        "wind_speed_10m_max": [18.0, 22.5, 15.1],
    },
}


def test_process_weather_data():
    snapshot = process_weather_data(FORECAST_BODY, now=NOW)

    assert snapshot.temperature == 35
    assert snapshot.condition == "Partly Cloudy"
    assert snapshot.icon == "cloud-sun"
    assert snapshot.windSpeed == 12.3
    assert snapshot.humidity == 41
    assert snapshot.feelsLike == 37
    assert snapshot.uvIndex == 6.2
    assert snapshot.visibility == 18
    assert snapshot.sunrise == "5:23 AM"
    assert snapshot.sunset == "7:18 PM"
    assert snapshot.location == "KOLKATA"
    assert snapshot.country == "INDIA"
    assert snapshot.date == "June 8, 2024, 3:05 PM"
    assert snapshot.isDay is True


def test_forecast_days():
    forecast = process_weather_data(FORECAST_BODY, now=NOW).forecast

    assert [day.day for day in forecast] == ["Today", "Tomorrow", "Monday"]
    assert [day.date for day in forecast] == ["Jun 8", "Jun 9", "Jun 10"]
    assert forecast[0].temperature.max == 40
    assert forecast[1].condition == "Slight Rain"
    assert forecast[1].precipitation_probability == 70
    assert (forecast[2].condition, forecast[2].icon) == ("Unknown", "cloud-question")


def test_current_hour_missing_uses_defaults():
    snapshot = process_weather_data(FORECAST_BODY, now=datetime(2024, 6, 8, 22, 0))
    assert snapshot.uvIndex == 0
    assert snapshot.visibility == 10


@pytest.mark.parametrize("timezone, country", [
    ("Asia/Kolkata", "INDIA"),
    ("America/New_York", "US"),
    ("Europe/Warsaw", "EU"),
    ("Asia/Tokyo", "ASIA"),
    ("Africa/Lagos", "AFRICA"),
    ("Australia/Sydney", "AUSTRALIA"),
    ("Pacific/Auckland", "PACIFIC"),
    ("GMT", "UNKNOWN"),
])
def test_country_from_timezone(timezone, country):
    assert country_from_timezone(timezone) == country


def test_location_from_timezone():
    assert location_from_timezone("America/New_York") == "NEW YORK"


async def test_get_weather_caches_result(coord):
    cache = ResultCache(1800, name="weather")
    with aioresponses() as mocked:
        mocked.get(FORECAST_PATTERN, payload=FORECAST_BODY)
        async with aiohttp.ClientSession() as session:
            first = await get_weather(session, cache, coord)
            second = await get_weather(session, cache, coord)
        assert len(mocked.requests) == 1
    assert second is first


async def test_get_weather_upstream_failure(coord):
    cache = ResultCache(1800, name="weather")
    with aioresponses() as mocked:
        mocked.get(FORECAST_PATTERN, status=500)
        async with aiohttp.ClientSession() as session:
            with pytest.raises(UpstreamError):
                await get_weather(session, cache, coord)
    assert cache.get(coord.key) is None


async def test_get_weather_malformed_body(coord):
    cache = ResultCache(1800, name="weather")
    with aioresponses() as mocked:
        mocked.get(FORECAST_PATTERN, payload={"timezone": "UTC", "current": {}})
        async with aiohttp.ClientSession() as session:
            with pytest.raises(UpstreamError, match="malformed"):
                await get_weather(session, cache, coord)
