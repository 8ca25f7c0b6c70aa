#file: backend/validation.py

import math
from typing import Any, Optional

from backend.errors import MissingParameter, NotANumber, OutOfRange
from backend.models import Coordinate


def _parse(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise NotANumber(f"Invalid {name} value: {raw!r}")
    if not math.isfinite(value):
        raise NotANumber(f"Invalid {name} value: {raw!r}")
    return value


def validate_coordinates(lat_raw: Optional[Any], lon_raw: Optional[Any]) -> Coordinate:
    """Parse and range-check a raw latitude/longitude pair.

    The parsed floats keep full precision. The cache key is built from the raw
    text, so callers should send the same formatting for the same place.
    """
    if lat_raw is None or lon_raw is None or str(lat_raw).strip() == "" or str(lon_raw).strip() == "":
        raise MissingParameter("Latitude and longitude are required")

    lat_raw, lon_raw = str(lat_raw), str(lon_raw)
    latitude = _parse("latitude", lat_raw)
    longitude = _parse("longitude", lon_raw)

    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise OutOfRange("Latitude must be between -90 and 90, longitude between -180 and 180")

    return Coordinate(latitude=latitude, longitude=longitude, raw_key=f"{lat_raw},{lon_raw}")
