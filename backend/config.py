#file: backend/config.py

import os
from dotenv import load_dotenv
from typing import List

load_dotenv()

OPENWEATHER_API_KEY = os.getenv("OPENWEATHER_API_KEY")
OPENAQ_API_KEY = os.getenv("OPENAQ_API_KEY", "demo")
OPENAQ_RADIUS = int(os.getenv("OPENAQ_RADIUS", "50000"))

AQI_PROVIDER_ORDER: List[str] = [
    name.strip().lower()
    for name in os.getenv("AQI_PROVIDER_ORDER", "openweather,openaq,openmeteo").split(",")
    if name.strip()
]

PROVIDER_TIMEOUT = float(os.getenv("PROVIDER_TIMEOUT", "10"))
HISTORICAL_TIMEOUT = float(os.getenv("HISTORICAL_TIMEOUT", "15"))

AQI_CACHE_TTL = float(os.getenv("AQI_CACHE_TTL", "300"))
WEATHER_CACHE_TTL = float(os.getenv("WEATHER_CACHE_TTL", "1800"))
HISTORICAL_CACHE_TTL = float(os.getenv("HISTORICAL_CACHE_TTL", "1800"))

# Validate environment variables
if not AQI_PROVIDER_ORDER:
    raise ValueError("AQI_PROVIDER_ORDER must name at least one provider")
if min(PROVIDER_TIMEOUT, HISTORICAL_TIMEOUT) <= 0:
    raise ValueError("Provider timeouts must be positive")


def mask_key(key: str | None) -> str:
    """Show only the start of an API key in logs."""
    return f"{key[:5]}..." if key else "Not set"
