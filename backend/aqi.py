#file: backend/aqi.py

import math
import logging
from typing import NamedTuple, Optional, Sequence, Tuple

from backend.models import AQILevel

# (concentration low, concentration high, index low, index high)
Breakpoint = Tuple[float, float, int, int]

PM25_BREAKPOINTS: Sequence[Breakpoint] = (
    (0.0, 12.0, 0, 50),
    (12.1, 35.4, 51, 100),
    (35.5, 55.4, 101, 150),
    (55.5, 150.4, 151, 200),
    (150.5, 250.4, 201, 300),
    (250.5, 500.4, 301, 500),
)

PM10_BREAKPOINTS: Sequence[Breakpoint] = (
    (0, 54, 0, 50),
    (55, 154, 51, 100),
    (155, 254, 101, 150),
    (255, 354, 151, 200),
    (355, 424, 201, 300),
    (425, 604, 301, 500),
)

MAX_INDEX = 500

# Descending lower bounds, first match wins
LEVELS = (
    (300, AQILevel.HAZARDOUS, "Avoid all outdoor activities. Stay indoors with windows closed."),
    (200, AQILevel.VERY_UNHEALTHY, "Avoid outdoor activities. Use air purifier if available."),
    (150, AQILevel.UNHEALTHY, "Limit outdoor activities. Consider wearing a mask."),
    (100, AQILevel.UNHEALTHY_FOR_SENSITIVE_GROUPS,
     "Members of sensitive groups may experience health effects. The general public is less likely to be affected."),
    (50, AQILevel.MODERATE, "Air quality is acceptable. Sensitive groups should take precautions."),
)
GOOD_RECOMMENDATION = "Air quality is good. Enjoy your outdoor activities!"


class AQICategory(NamedTuple):
    aqi: int
    level: AQILevel
    recommendation: str


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def sub_index(concentration: Optional[float], breakpoints: Sequence[Breakpoint]) -> int:
    """Interpolate one pollutant concentration against its breakpoint table.

    A missing value yields 0. Values in the gap between two brackets (e.g.
    12.05 for PM2.5) are interpolated on the upper bracket, and anything
    above the last bracket is clamped to 500.
    """
    if concentration is None:
        return 0
    for c_lo, c_hi, i_lo, i_hi in breakpoints:
        if concentration <= c_hi:
            return _round_half_up((i_hi - i_lo) / (c_hi - c_lo) * (concentration - c_lo) + i_lo)
    return MAX_INDEX


def classify(aqi: int) -> Tuple[AQILevel, str]:
    for threshold, level, recommendation in LEVELS:
        if aqi > threshold:
            return level, recommendation
    return AQILevel.GOOD, GOOD_RECOMMENDATION


def compute_aqi(pm25: Optional[float], pm10: Optional[float]) -> AQICategory:
    """Combined index: the worse of the PM2.5 and PM10 sub-indices."""
    aqi = max(sub_index(pm25, PM25_BREAKPOINTS), sub_index(pm10, PM10_BREAKPOINTS))
    level, recommendation = classify(aqi)
    logging.debug(f"AQI from PM2.5={pm25}, PM10={pm10}: {aqi} ({level.value})")
    return AQICategory(aqi=aqi, level=level, recommendation=recommendation)
