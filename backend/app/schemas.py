from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class PlaceAddress(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    city: str | None = None
    town: str | None = None
    village: str | None = None
    hamlet: str | None = None
    municipality: str | None = None
    county: str | None = None
    state: str | None = None
    region: str | None = None
    country: str | None = None


class PlaceCandidate(BaseModel):
    """One raw result record from the geocoding search."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    address: PlaceAddress = Field(default_factory=PlaceAddress)
    display_name: str | None = None
    type: str | None = None
    lat: float | None = None
    lon: float | None = None

    @field_validator("address", mode="before")
    @classmethod
    def default_missing_address(cls, value: object) -> object:
        return value if value is not None else {}


class Coordinates(BaseModel):
    lat: float | None = None
    lon: float | None = None

    @model_validator(mode="after")
    def validate_pair(self) -> "Coordinates":
        if (self.lat is None) != (self.lon is None):
            raise ValueError("Latitude and longitude must be provided together.")
        for value in (self.lat, self.lon):
            if value is not None and not math.isfinite(value):
                raise ValueError("Coordinates must be finite numbers.")
        return self

    @property
    def is_resolved(self) -> bool:
        return bool(self.lat) and bool(self.lon)


class DailyForecastSample(BaseModel):
    date: str
    precipitation_mm: float
    max_temp_c: float
    mean_humidity_pct: float


class ForecastSummary(BaseModel):
    rain: str
    temp: str
    humidity: str


class ForecastRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    location: str = Field(default="", max_length=200, description="Free-text place name used for the advisory.")
    coordinates: Coordinates = Field(default_factory=Coordinates)
