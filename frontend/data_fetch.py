#file: frontend/data_fetch.py

import os
import aiohttp
import logging

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")


async def _get(path, params):
    url = f"{BACKEND_URL}{path}"
    async with aiohttp.ClientSession() as session:
        try:
            async with session.get(url, params = params) as response:
                if response.status == 404:
                    logging.warning(f"No data at {path} for {params}")
                    return None
                response.raise_for_status()
                return await response.json()
        except aiohttp.ClientResponseError as e:
            logging.error(f"[ERROR] HTTP {e.status} from {path}: {e.message}")
        except aiohttp.ClientError as e:
            logging.error(f"[ERROR] Network request failed: {e}")
    return None


async def fetch_aqi(lat, lon):
    """Fetch the current AQI for a location from FastAPI asynchronously."""
    return await _get("/aqi", {"lat": str(lat), "lon": str(lon)})


async def fetch_weather(lat, lon):
    """Fetch current weather and forecast from FastAPI asynchronously."""
    return await _get("/weather", {"lat": str(lat), "lon": str(lon)})


async def fetch_historical_aqi(lat, lon, period = "daily"):
    data = await _get("/historical-aqi", {"latitude": str(lat), "longitude": str(lon), "period": period})
    return data or []


async def fetch_historical_weather(lat, lon, period = "daily"):
    data = await _get("/historical-weather", {"latitude": str(lat), "longitude": str(lon), "period": period})
    return data or []
