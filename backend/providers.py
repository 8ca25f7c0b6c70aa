# file: backend/providers.py

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from backend import config
from backend.errors import ProviderFailure
from backend.models import Coordinate, PollutantReading
from backend.utils import get_current_time

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/air_pollution"
OPENAQ_URL = "https://api.openaq.org/v2/locations"
OPENMETEO_AIR_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"


async def get_json(session: aiohttp.ClientSession, url: str, source: str, timeout: float,
                   params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Any:
    """GET `url` and decode JSON, turning transport errors, timeouts and non-200 replies into ProviderFailure."""
    try:
        async with session.get(url, params=params, headers=headers,
                               timeout=aiohttp.ClientTimeout(total=timeout)) as response:
            if response.status != 200:
                raise ProviderFailure(source, f"HTTP {response.status}")
            return await response.json(content_type=None)
    except asyncio.TimeoutError:
        raise ProviderFailure(source, f"timed out after {timeout}s")
    except aiohttp.ClientError as e:
        raise ProviderFailure(source, f"request failed: {e}")
    except ValueError as e:
        raise ProviderFailure(source, f"invalid JSON: {e}")


class ProviderAdapter:
    """One upstream pollutant source. `fetch` returns a reading or raises ProviderFailure."""

    name = "provider"

    def __init__(self, timeout: float = config.PROVIDER_TIMEOUT):
        self.timeout = timeout

    async def fetch(self, session: aiohttp.ClientSession, coord: Coordinate) -> PollutantReading:
        data = await self.request(session, coord)
        try:
            return self.parse(data)
        except ProviderFailure:
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProviderFailure(self.name, f"malformed response: {e}")

    async def request(self, session: aiohttp.ClientSession, coord: Coordinate) -> Any:
        raise NotImplementedError

    def parse(self, data: Any) -> PollutantReading:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class OpenWeatherAdapter(ProviderAdapter):
    name = "OpenWeather"

    def __init__(self, api_key: Optional[str] = config.OPENWEATHER_API_KEY, timeout: float = config.PROVIDER_TIMEOUT):
        super().__init__(timeout)
        self.api_key = api_key

    async def request(self, session: aiohttp.ClientSession, coord: Coordinate) -> Any:
        if not self.api_key:
            raise ProviderFailure(self.name, "API key not set, skipping")
        logging.info(f"Fetching OpenWeather data for {coord.latitude}, {coord.longitude} "
                     f"(key {config.mask_key(self.api_key)})")
        params = {"lat": str(coord.latitude), "lon": str(coord.longitude), "appid": self.api_key}
        return await get_json(session, OPENWEATHER_URL, self.name, self.timeout, params=params)

    def parse(self, data: Dict[str, Any]) -> PollutantReading:
        entries = data.get("list") or []
        if not entries:
            raise ProviderFailure(self.name, "no data in response")
        air = entries[0]
        components = air.get("components") or {}
        return PollutantReading(
            pm25=components.get("pm2_5") or 0,
            pm10=components.get("pm10") or 0,
            source=self.name,
            observed_at=get_current_time(),
            provider_aqi_index=(air.get("main") or {}).get("aqi"),
        )


class OpenAQAdapter(ProviderAdapter):
    name = "OpenAQ"

    def __init__(self, api_key: str = config.OPENAQ_API_KEY, radius: int = config.OPENAQ_RADIUS,
                 timeout: float = config.PROVIDER_TIMEOUT):
        super().__init__(timeout)
        self.api_key = api_key
        self.radius = radius

    async def request(self, session: aiohttp.ClientSession, coord: Coordinate) -> Any:
        logging.info(f"Fetching OpenAQ stations near {coord.latitude}, {coord.longitude} "
                     f"(key {config.mask_key(self.api_key)})")
        params = {
            "coordinates": f"{coord.latitude},{coord.longitude}",
            "radius": str(self.radius),
            "limit": "5",
            "order_by": "distance",
        }
        return await get_json(session, OPENAQ_URL, self.name, self.timeout,
                              params=params, headers={"X-API-Key": self.api_key})

    def parse(self, data: Dict[str, Any]) -> PollutantReading:
        stations: List[Dict[str, Any]] = data.get("results") or []
        logging.info(f"OpenAQ found {len(stations)} stations")
        for station in stations:
            # negative lastValue (usually -999) means no measurement
            values = {
                param["parameter"]: param["lastValue"]
                for param in station.get("parameters") or []
                if param.get("parameter") in ("pm25", "pm10")
                and param.get("lastValue") is not None and param["lastValue"] >= 0
            }
            if values:
                logging.info(f"OpenAQ station with data: {station.get('name')} at {station.get('distance')}m")
                return PollutantReading(
                    pm25=values.get("pm25", 0),
                    pm10=values.get("pm10", 0),
                    source=self.name,
                    observed_at=get_current_time(),
                    station_name=station.get("name"),
                    distance=station.get("distance"),
                )
        raise ProviderFailure(self.name, "no stations with PM2.5 or PM10 data")


class OpenMeteoAirAdapter(ProviderAdapter):
    name = "OpenMeteo"

    async def request(self, session: aiohttp.ClientSession, coord: Coordinate) -> Any:
        logging.info(f"Fetching Open-Meteo air quality for {coord.latitude}, {coord.longitude}")
        params = {"latitude": str(coord.latitude), "longitude": str(coord.longitude), "current": "pm10,pm2_5,us_aqi"}
        return await get_json(session, OPENMETEO_AIR_URL, self.name, self.timeout, params=params)

    def parse(self, data: Dict[str, Any]) -> PollutantReading:
        current = data.get("current")
        if not current:
            raise ProviderFailure(self.name, "no current values in response")
        us_aqi = current.get("us_aqi")
        return PollutantReading(
            pm25=current.get("pm2_5") or 0,
            pm10=current.get("pm10") or 0,
            source=self.name,
            observed_at=get_current_time(),
            provider_aqi_index=round(us_aqi) if us_aqi is not None else None,
        )


PROVIDERS = {
    "openweather": OpenWeatherAdapter,
    "openaq": OpenAQAdapter,
    "openmeteo": OpenMeteoAirAdapter,
}


def build_providers(order: List[str] = config.AQI_PROVIDER_ORDER) -> List[ProviderAdapter]:
    """Instantiate adapters in the configured priority order."""
    adapters = []
    for name in order:
        if name not in PROVIDERS:
            logging.warning(f"Unknown AQI provider '{name}' in provider order, ignoring")
            continue
        adapters.append(PROVIDERS[name]())
    return adapters
