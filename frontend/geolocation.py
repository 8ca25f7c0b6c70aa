#file: frontend/geolocation.py

import logging
import requests
from typing import Dict, Any

IP_GEOLOCATION_URL = "http://ip-api.com/json/"
# New Delhi
DEFAULT_LOCATION = {"lat": 28.6139, "lon": 77.209, "name": "New Delhi"}


def approximate_location() -> Dict[str, Any]:
    """Approximate the user's location from their IP address, falling back to a default city."""
    try:
        response = requests.get(IP_GEOLOCATION_URL, timeout = 5)
        response.raise_for_status()
        data = response.json()
        if data.get("status") != "success":
            logging.warning(f"IP geolocation failed: {data.get('message', 'unknown error')}")
            return dict(DEFAULT_LOCATION)
        return {
            "lat": float(data["lat"]),
            "lon": float(data["lon"]),
            "name": ", ".join(filter(None, [data.get("city"), data.get("country")])) or "Current location"
        }
    except (requests.RequestException, KeyError, ValueError) as e:
        logging.error(f"Error looking up location from IP: {e}")
        return dict(DEFAULT_LOCATION)
