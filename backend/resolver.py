# file: backend/resolver.py

import logging
from typing import List, Optional, Sequence

import aiohttp

from backend.aqi import compute_aqi
from backend.cache import ResultCache
from backend.errors import NoDataAvailable, ProviderFailure
from backend.models import AQIResult, Coordinate, PollutantReading
from backend.providers import ProviderAdapter
from backend.utils import get_current_time


def is_usable_reading(reading: Optional[PollutantReading]) -> bool:
    """A reading with both PM2.5 and PM10 at zero counts as "no data", not clean air."""
    return reading is not None and (reading.pm25 > 0 or reading.pm10 > 0)


class AQIResolver:
    """Resolve a coordinate to an AQIResult through the cache and a provider fallback chain.

    Providers are tried one after another; the first usable reading wins and
    nothing is retried against the same provider.
    """

    def __init__(self, cache: ResultCache, providers: Sequence[ProviderAdapter], session: aiohttp.ClientSession):
        self.cache = cache
        self.providers = list(providers)
        self.session = session

    async def first_usable_reading(self, coord: Coordinate,
                                   providers: Sequence[ProviderAdapter]) -> PollutantReading:
        for provider in providers:
            try:
                reading = await provider.fetch(self.session, coord)
            except ProviderFailure as e:
                logging.warning(f"Provider failed for {coord.key}: {e}")
                continue
            if not is_usable_reading(reading):
                logging.warning(f"{provider.name} returned zero PM2.5 and PM10 for {coord.key}, trying next provider")
                continue
            logging.info(f"{provider.name} values for {coord.key} - PM2.5: {reading.pm25}, PM10: {reading.pm10}")
            return reading
        raise NoDataAvailable(f"No AQI data available for {coord.key}")

    async def resolve(self, coord: Coordinate, providers: Optional[List[ProviderAdapter]] = None) -> AQIResult:
        """`providers` overrides the configured priority order for this call."""
        cached = self.cache.lookup(coord.key)
        if cached is not None:
            return cached

        reading = await self.first_usable_reading(coord, self.providers if providers is None else providers)
        category = compute_aqi(reading.pm25, reading.pm10)
        result = AQIResult(
            aqi=category.aqi,
            level=category.level,
            recommendation=category.recommendation,
            pm25=reading.pm25,
            pm10=reading.pm10,
            source=reading.source,
            timestamp=get_current_time(),
            location=coord,
        )
        self.cache.put(coord.key, result)
        logging.info(f"AQI for {coord.key}: {result.aqi} ({result.level.value}) from {result.source}")
        return result
