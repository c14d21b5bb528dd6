"""Application state and transitions behind the place search widget.

One ``LookupSession`` backs one widget: keystrokes are debounced into
suggestion lookups, a picked suggestion becomes the location, and a search
fills the rain, temperature and humidity summaries plus the travel advisory.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Awaitable, Callable

import httpx

from app.config import Settings
from app.schemas import Coordinates
from app.services.advisory_client import ADVISORY_UNAVAILABLE_MESSAGE, AdvisoryClient, AdvisoryUnavailableError
from app.services.debounce import DebounceScheduler
from app.services.forecast_summary import forecast_date_range, samples_from_daily_payload, summarize_forecast
from app.services.place_labels import format_place_label
from app.services.text_normalizer import deduplicate_labels, normalize_for_query, should_fetch_suggestions
from app.services.weather_client import WeatherClient

logger = logging.getLogger(__name__)

LOCATION_NOT_SELECTED_MESSAGE = "Please select a location first."


class LocationNotSelectedError(ValueError):
    def __init__(self, message: str = LOCATION_NOT_SELECTED_MESSAGE) -> None:
        super().__init__(message)


@dataclass
class SuggestionResult:
    normalized: str
    suggestions: list[str] = field(default_factory=list)
    coordinates: Coordinates | None = None


@dataclass
class WeatherResult:
    start_date: str
    end_date: str
    rain: str = ""
    temp: str = ""
    humidity: str = ""
    advisory: str = ""
    forecast_error: str | None = None


@dataclass
class LookupState:
    location: str = ""
    coordinates: Coordinates = field(default_factory=Coordinates)
    suggestions: list[str] = field(default_factory=list)
    rain: str = ""
    temp: str = ""
    humidity: str = ""
    advisory: str = ""
    generation: int = 0

    def to_dict(self, display_limit: int = 5) -> dict:
        return {
            "location": self.location,
            "coordinates": self.coordinates.model_dump(),
            "suggestions": self.suggestions[:display_limit],
            "rain": self.rain,
            "temp": self.temp,
            "humidity": self.humidity,
            "advisory": self.advisory,
        }


async def lookup_suggestions(
    weather_client: WeatherClient,
    query: str,
    *,
    min_length: int = 3,
) -> SuggestionResult:
    """Normalize, geocode, label and deduplicate. Short queries never hit the network."""
    normalized = normalize_for_query(query)
    if not should_fetch_suggestions(query, min_length=min_length):
        return SuggestionResult(normalized=normalized)

    candidates = await weather_client.search_places(normalized)
    labels = deduplicate_labels(format_place_label(candidate) for candidate in candidates)

    coordinates = None
    if candidates and candidates[0].lat is not None and candidates[0].lon is not None:
        coordinates = Coordinates(lat=candidates[0].lat, lon=candidates[0].lon)
    return SuggestionResult(normalized=normalized, suggestions=labels, coordinates=coordinates)


async def lookup_weather(
    weather_client: WeatherClient,
    advisory_client: AdvisoryClient,
    *,
    location: str,
    coordinates: Coordinates,
    today: date | None = None,
) -> WeatherResult:
    """Fetch forecast and advisory as independent tasks, each failing on its own."""
    if not coordinates.is_resolved:
        raise LocationNotSelectedError()

    start_date, end_date = forecast_date_range(today)
    result = WeatherResult(start_date=start_date, end_date=end_date)

    async def forecast() -> None:
        try:
            payload = await weather_client.fetch_daily_forecast(coordinates, start_date, end_date)
            summary = summarize_forecast(samples_from_daily_payload(payload))
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching weather for %s: %s", location or coordinates, exc)
            result.forecast_error = str(exc) or exc.__class__.__name__
            return
        result.rain, result.temp, result.humidity = summary.rain, summary.temp, summary.humidity

    async def advisory() -> None:
        try:
            result.advisory = await advisory_client.generate_advisory(location)
        except AdvisoryUnavailableError as exc:
            logger.info("Travel advisory skipped: %s", exc)
            result.advisory = ADVISORY_UNAVAILABLE_MESSAGE
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching travel advisory for %s: %s", location, exc)
            result.advisory = ADVISORY_UNAVAILABLE_MESSAGE

    await asyncio.gather(forecast(), advisory())
    return result


Listener = Callable[[LookupState], Awaitable[None]]


class LookupSession:
    def __init__(
        self,
        settings: Settings,
        weather_client: WeatherClient,
        advisory_client: AdvisoryClient,
        *,
        listener: Listener | None = None,
        scheduler: DebounceScheduler | None = None,
    ) -> None:
        self.settings = settings
        self.weather_client = weather_client
        self.advisory_client = advisory_client
        self.listener = listener
        self.scheduler = scheduler or DebounceScheduler()
        self.state = LookupState()

    async def close(self) -> None:
        await self.scheduler.close()

    def on_location_change(self, text: str) -> None:
        self.state.location = text
        self.scheduler.schedule(
            self.settings.suggestion_debounce_seconds,
            lambda: self.refresh_suggestions(text),
        )

    async def refresh_suggestions(self, text: str) -> None:
        self.state.generation += 1
        generation = self.state.generation

        try:
            result = await lookup_suggestions(
                self.weather_client,
                text,
                min_length=self.settings.min_query_length,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching suggestions for %r: %s", text, exc)
            result = SuggestionResult(normalized=normalize_for_query(text))

        if generation != self.state.generation:
            logger.debug("Dropping stale suggestions for %r (generation %d)", text, generation)
            return

        self.state.suggestions = result.suggestions
        if result.coordinates is not None:
            self.state.coordinates = result.coordinates
        await self._notify()

    async def select_suggestion(self, label: str) -> None:
        # Any suggestion fetch still in flight belongs to the text being replaced.
        self.state.generation += 1
        self.state.location = label
        self.state.suggestions = []
        await self._notify()

    async def fetch_weather(self, today: date | None = None) -> WeatherResult:
        result = await lookup_weather(
            self.weather_client,
            self.advisory_client,
            location=self.state.location,
            coordinates=self.state.coordinates,
            today=today,
        )
        self.state.rain, self.state.temp, self.state.humidity = result.rain, result.temp, result.humidity
        self.state.advisory = result.advisory
        await self._notify()
        return result

    async def _notify(self) -> None:
        if self.listener is not None:
            await self.listener(self.state)
