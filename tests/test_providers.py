import asyncio
import re

import aiohttp
import pytest
from aioresponses import aioresponses

from backend.errors import ProviderFailure
from backend.providers import (OpenAQAdapter, OpenMeteoAirAdapter, OpenWeatherAdapter, build_providers)

OPENWEATHER_PATTERN = re.compile(r"^https://api\.openweathermap\.org/data/2\.5/air_pollution.*$")
OPENAQ_PATTERN = re.compile(r"^https://api\.openaq\.org/v2/locations.*$")
OPENMETEO_PATTERN = re.compile(r"^https://air-quality-api\.open-meteo\.com/v1/air-quality.*$")

OPENWEATHER_BODY = {"list": [{"main": {"aqi": 2}, "components": {"pm2_5": 8.5, "pm10": 15.2, "no2": 3.1}}]}

OPENAQ_BODY = {
    "results": [
        {"name": "Empty station", "distance": 900.0,
         "parameters": [{"parameter": "pm25", "lastValue": None}, {"parameter": "no2", "lastValue": 12}]},
        {"name": "Anand Vihar", "distance": 4200.5,
         "parameters": [{"parameter": "pm25", "lastValue": 22.0}, {"parameter": "o3", "lastValue": 30}]},
        {"name": "Far station", "distance": 9000.0,
         "parameters": [{"parameter": "pm10", "lastValue": 80}]},
    ]
}


def test_openweather_parses_flat_components():
    result = OpenWeatherAdapter(api_key="key").parse(OPENWEATHER_BODY)
    assert (result.pm25, result.pm10) == (8.5, 15.2)
    assert result.provider_aqi_index == 2
    assert result.source == "OpenWeather"


def test_openweather_empty_list_is_failure():
    with pytest.raises(ProviderFailure):
        OpenWeatherAdapter(api_key="key").parse({"list": []})


def test_openaq_takes_first_station_with_particulates():
    result = OpenAQAdapter().parse(OPENAQ_BODY)
    assert result.station_name == "Anand Vihar"
    assert result.distance == 4200.5
    assert (result.pm25, result.pm10) == (22.0, 0)
    assert result.provider_aqi_index is None


def test_openaq_skips_station_with_negative_value():
    body = {"results": [
        {"name": "Broken station", "distance": 500.0,
         "parameters": [{"parameter": "pm25", "lastValue": -999}, {"parameter": "pm10", "lastValue": -999}]},
        {"name": "Good station", "distance": 1500.0,
         "parameters": [{"parameter": "pm25", "lastValue": 22.0}, {"parameter": "pm10", "lastValue": -999}]},
    ]}
    result = OpenAQAdapter().parse(body)
    assert result.station_name == "Good station"
    assert (result.pm25, result.pm10) == (22.0, 0)


def test_openaq_without_stations_is_failure():
    with pytest.raises(ProviderFailure):
        OpenAQAdapter().parse({"results": []})


def test_openmeteo_parses_current_values():
    result = OpenMeteoAirAdapter().parse({"current": {"pm2_5": 31.4, "pm10": 40.0, "us_aqi": 91.6}})
    assert (result.pm25, result.pm10) == (31.4, 40.0)
    assert result.provider_aqi_index == 92


async def test_openweather_without_key_is_skipped(coord):
    with aioresponses() as mocked:
        async with aiohttp.ClientSession() as session:
            with pytest.raises(ProviderFailure, match="API key not set"):
                await OpenWeatherAdapter(api_key=None).fetch(session, coord)
        assert not mocked.requests


async def test_fetch_success(coord):
    with aioresponses() as mocked:
        mocked.get(OPENWEATHER_PATTERN, payload=OPENWEATHER_BODY)
        async with aiohttp.ClientSession() as session:
            result = await OpenWeatherAdapter(api_key="key").fetch(session, coord)
    assert result.pm25 == 8.5


async def test_non_success_status_is_failure(coord):
    with aioresponses() as mocked:
        mocked.get(OPENAQ_PATTERN, status=503)
        async with aiohttp.ClientSession() as session:
            with pytest.raises(ProviderFailure, match="HTTP 503"):
                await OpenAQAdapter().fetch(session, coord)


async def test_timeout_is_failure(coord):
    with aioresponses() as mocked:
        mocked.get(OPENMETEO_PATTERN, exception=asyncio.TimeoutError())
        async with aiohttp.ClientSession() as session:
            with pytest.raises(ProviderFailure, match="timed out"):
                await OpenMeteoAirAdapter(timeout=1).fetch(session, coord)


async def test_connection_error_is_failure(coord):
    with aioresponses() as mocked:
        mocked.get(OPENAQ_PATTERN, exception=aiohttp.ClientConnectionError("refused"))
        async with aiohttp.ClientSession() as session:
            with pytest.raises(ProviderFailure, match="request failed"):
                await OpenAQAdapter().fetch(session, coord)


async def test_malformed_body_is_failure(coord):
    with aioresponses() as mocked:
        mocked.get(OPENWEATHER_PATTERN, payload={"list": [{"components": {"pm2_5": "lots", "pm10": 4}}]})
        async with aiohttp.ClientSession() as session:
            with pytest.raises(ProviderFailure, match="malformed response"):
                await OpenWeatherAdapter(api_key="key").fetch(session, coord)


def test_build_providers_follows_order_and_skips_unknown():
    adapters = build_providers(["openaq", "nope", "openweather"])
    assert [adapter.name for adapter in adapters] == ["OpenAQ", "OpenWeather"]
