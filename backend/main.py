# file : backend/main.py

import ssl
import json
import logging
import certifi
import aiohttp
import uvicorn
from fastapi import Depends, FastAPI, Query, Request, HTTPException
from contextlib import asynccontextmanager
from typing import List, Optional

from backend import config
from backend.cache import ResultCache
from backend.errors import NoDataAvailable, UpstreamError, ValidationError
from backend.historical import get_historical_aqi, get_historical_weather, history_cache_key
from backend.models import (AQIResult, Coordinate, CoordinatesBody, HistoricalAQIPoint, HistoricalWeatherPoint,
                            WeatherSnapshot)
from backend.providers import build_providers
from backend.resolver import AQIResolver
from backend.validation import validate_coordinates
from backend.weather import get_weather

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared HTTP session and build the caches and resolver."""
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    session = aiohttp.ClientSession(connector=aiohttp.TCPConnector(ssl=ssl_context))
    app.state.session = session
    app.state.aqi_cache = ResultCache(config.AQI_CACHE_TTL, name="aqi")
    app.state.weather_cache = ResultCache(config.WEATHER_CACHE_TTL, name="weather")
    app.state.history_aqi_cache = ResultCache(config.HISTORICAL_CACHE_TTL, name="historical-aqi")
    app.state.history_weather_cache = ResultCache(config.HISTORICAL_CACHE_TTL, name="historical-weather")
    providers = build_providers(config.AQI_PROVIDER_ORDER)
    app.state.resolver = AQIResolver(app.state.aqi_cache, providers, session)
    logging.info(f"AQI provider order: {[p.name for p in providers]}")
    yield
    await session.close()


app = FastAPI(
    title = "Environmental Dashboard API",
    description = "Air quality index and weather data for a location, resolved from public providers.",
    version = "0.1",
    lifespan = lifespan
)


def get_resolver(request: Request) -> AQIResolver:
    return request.app.state.resolver


def get_session(request: Request) -> aiohttp.ClientSession:
    return request.app.state.session


def get_weather_cache(request: Request) -> ResultCache:
    return request.app.state.weather_cache


def get_history_aqi_cache(request: Request) -> ResultCache:
    return request.app.state.history_aqi_cache


def get_history_weather_cache(request: Request) -> ResultCache:
    return request.app.state.history_weather_cache


def parse_coordinates(lat: Optional[str], lon: Optional[str]) -> Coordinate:
    try:
        return validate_coordinates(lat, lon)
    except ValidationError as e:
        logging.warning(f"Rejected coordinates {lat!r}, {lon!r}: {e}")
        raise HTTPException(status_code = 400, detail = str(e))


async def resolve_aqi(resolver: AQIResolver, coord: Coordinate) -> AQIResult:
    try:
        return await resolver.resolve(coord)
    except NoDataAvailable as e:
        logging.info(str(e))
        raise HTTPException(status_code = 404, detail = "No AQI data available for this location")
    except Exception as e:
        logging.error(f"Error processing AQI request: {e}", exc_info = True)
        raise HTTPException(status_code = 500, detail = "Failed to process AQI request")


@app.get("/aqi", response_model=AQIResult)
async def aqi(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees"),
    resolver: AQIResolver = Depends(get_resolver)
):
    """Current AQI for a location, computed from the first provider with data."""
    logging.info(f"AQI request received for coordinates: {lat}, {lon}")
    coord = parse_coordinates(lat, lon)
    return await resolve_aqi(resolver, coord)


@app.post("/aqi", response_model=AQIResult)
async def aqi_from_body(request: Request, resolver: AQIResolver = Depends(get_resolver)):
    """Same as GET /aqi with coordinates in a JSON body {"lat": ..., "lon": ...}."""
    try:
        body = CoordinatesBody(**await request.json())
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logging.error(f"Error parsing AQI request body: {e}")
        raise HTTPException(status_code = 400, detail = "Invalid request body")
    logging.info(f"AQI POST request body - lat: {body.lat}, lon: {body.lon}")
    coord = parse_coordinates(body.lat, body.lon)
    return await resolve_aqi(resolver, coord)


@app.get("/weather", response_model=WeatherSnapshot)
async def weather(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees"),
    session: aiohttp.ClientSession = Depends(get_session),
    cache: ResultCache = Depends(get_weather_cache)
):
    """Current weather and the daily forecast from Open-Meteo."""
    logging.info(f"Weather request received for coordinates: {lat}, {lon}")
    coord = parse_coordinates(lat, lon)
    try:
        return await get_weather(session, cache, coord)
    except UpstreamError as e:
        logging.warning(f"No weather data for {coord.key}: {e}")
        raise HTTPException(status_code = 404, detail = "No weather data available for this location")
    except Exception as e:
        logging.error(f"Error processing weather request: {e}", exc_info = True)
        raise HTTPException(status_code = 500, detail = "Failed to process weather request")


def history_params(latitude: Optional[str], longitude: Optional[str], period: Optional[str]) -> Coordinate:
    if not latitude or not longitude or not period:
        raise HTTPException(status_code = 400, detail = "Missing latitude, longitude, or period")
    return parse_coordinates(latitude, longitude)


@app.get("/historical-aqi", response_model=List[HistoricalAQIPoint])
async def historical_aqi(
    latitude: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    longitude: Optional[str] = Query(None, description="Longitude in decimal degrees"),
    period: Optional[str] = Query(None, description="daily, weekly or monthly"),
    session: aiohttp.ClientSession = Depends(get_session),
    cache: ResultCache = Depends(get_history_aqi_cache)
):
    """Hourly pollutant and AQI series for the requested period."""
    logging.info(f"Historical AQI request for {latitude}, {longitude}, period {period}")
    coord = history_params(latitude, longitude, period)
    try:
        return await get_historical_aqi(session, cache, coord, history_cache_key(latitude, longitude, period), period)
    except Exception as e:
        logging.error(f"Error fetching historical AQI data: {e}", exc_info = not isinstance(e, UpstreamError))
        raise HTTPException(status_code = 500, detail = "Failed to fetch historical AQI data")


@app.get("/historical-weather", response_model=List[HistoricalWeatherPoint])
async def historical_weather(
    latitude: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    longitude: Optional[str] = Query(None, description="Longitude in decimal degrees"),
    period: Optional[str] = Query(None, description="daily, weekly or monthly"),
    session: aiohttp.ClientSession = Depends(get_session),
    cache: ResultCache = Depends(get_history_weather_cache)
):
    """Hourly temperature and humidity series for the requested period."""
    logging.info(f"Historical weather request for {latitude}, {longitude}, period {period}")
    coord = history_params(latitude, longitude, period)
    try:
        return await get_historical_weather(session, cache, coord,
                                            history_cache_key(latitude, longitude, period), period)
    except Exception as e:
        logging.error(f"Error fetching historical weather data: {e}", exc_info = not isinstance(e, UpstreamError))
        raise HTTPException(status_code = 500, detail = "Failed to fetch historical weather data")


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__" :
    uvicorn.run(app, host = "0.0.0.0", port = 8000, log_level="info")
