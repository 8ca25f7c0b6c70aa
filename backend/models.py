#file: backend/models.py

from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, StrictFloat, StrictInt, StrictStr
from typing import Optional, List, Union


class AQILevel(str, Enum):
    GOOD = "Good"
    MODERATE = "Moderate"
    UNHEALTHY_FOR_SENSITIVE_GROUPS = "Unhealthy for Sensitive Groups"
    UNHEALTHY = "Unhealthy"
    VERY_UNHEALTHY = "Very Unhealthy"
    HAZARDOUS = "Hazardous"


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    # raw "lat,lon" text as received, used for cache keys
    raw_key: Optional[str] = Field(None, exclude=True)

    @property
    def key(self) -> str:
        return self.raw_key or f"{self.latitude},{self.longitude}"


class PollutantReading(BaseModel):
    pm25: float = Field(0.0, ge=0, description="PM2.5 concentration (µg/m³)")
    pm10: float = Field(0.0, ge=0, description="PM10 concentration (µg/m³)")
    source: str = Field(..., description="Name of the provider that produced the reading")
    observed_at: str = Field(..., description="Timestamp in ISO format")
    provider_aqi_index: Optional[int] = Field(None, description="Provider's own index, if it reports one")
    station_name: Optional[str] = None
    distance: Optional[float] = Field(None, description="Distance to the station in metres")


class AQIResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    aqi: int = Field(..., ge=0, le=500)
    level: AQILevel
    recommendation: str
    pm25: float
    pm10: float
    source: str
    timestamp: str = Field(..., description="Timestamp in ISO format")
    location: Coordinate


class CoordinatesBody(BaseModel):
    # strict so JSON booleans are rejected instead of read as 0/1
    lat: Optional[Union[StrictStr, StrictInt, StrictFloat]] = None
    lon: Optional[Union[StrictStr, StrictInt, StrictFloat]] = None


class ForecastTemperature(BaseModel):
    max: int
    min: int


class ForecastDay(BaseModel):
    date: str
    day: str
    temperature: ForecastTemperature
    condition: str
    icon: str
    precipitation_probability: Optional[float] = None
    precipitation_sum: Optional[float] = None
    wind_speed: Optional[float] = None
    uv_index: Optional[float] = None


class WeatherSnapshot(BaseModel):
    temperature: int
    condition: str
    icon: str
    windSpeed: float
    windDirection: Optional[float] = None
    humidity: int
    uvIndex: float
    feelsLike: int
    visibility: int
    sunrise: str
    sunset: str
    location: str
    country: str
    date: str
    pressure: Optional[float] = None
    cloudCover: Optional[float] = None
    precipitation: Optional[float] = None
    isDay: bool
    forecast: List[ForecastDay] = []


class HistoricalAQIPoint(BaseModel):
    date: str
    timestamp: str
    pm10: float = 0
    pm2_5: float = 0
    co: float = 0
    no2: float = 0
    so2: float = 0
    o3: float = 0
    aqi_eu: float = 0
    aqi_us: float = 0
    aqi: int = Field(0, description="Index computed from this hour's PM2.5 and PM10")


class HistoricalWeatherPoint(BaseModel):
    date: str
    timestamp: str
    temperature: Optional[float] = None
    humidity: Optional[float] = None
