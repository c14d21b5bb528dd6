from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from app.config import Settings
from app.schemas import Coordinates, PlaceCandidate

logger = logging.getLogger(__name__)

DAILY_FORECAST_FIELDS = "precipitation_sum,temperature_2m_max,relative_humidity_2m_mean"


@dataclass
class WeatherClient:
    settings: Settings
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(timeout=self.settings.request_timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def search_places(self, query: str) -> list[PlaceCandidate]:
        """Look up place candidates for an already normalized query."""
        query = query.strip()
        if not query:
            return []

        payload = await self._get_json(
            url=self.settings.nominatim_search_url,
            params={
                "format": "json",
                "addressdetails": 1,
                "limit": self.settings.suggestion_fetch_limit,
                "q": query,
            },
            headers={"User-Agent": self.settings.nominatim_user_agent},
        )
        if not isinstance(payload, list):
            raise ValueError("Geocoding response is not a list of places.")

        candidates: list[PlaceCandidate] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            candidates.append(PlaceCandidate.model_validate(item))
        logger.debug("Geocoding %r returned %d candidates", query, len(candidates))
        return candidates

    async def fetch_daily_forecast(self, coordinates: Coordinates, start_date: str, end_date: str) -> dict:
        payload = await self._get_json(
            url=self.settings.open_meteo_forecast_url,
            params={
                "latitude": coordinates.lat,
                "longitude": coordinates.lon,
                "daily": DAILY_FORECAST_FIELDS,
                "timezone": "auto",
                "start_date": start_date,
                "end_date": end_date,
            },
        )
        if not isinstance(payload, dict):
            raise ValueError("Forecast response is not an object.")
        return payload

    async def _get_json(
        self,
        *,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self._client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()
