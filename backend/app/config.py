from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    app_name: str = "Wayfarer Weather API"
    app_version: str = "1.0.0"
    nominatim_search_url: str = "https://nominatim.openstreetmap.org/search"
    nominatim_user_agent: str = "wayfarer-weather/1.0"
    open_meteo_forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    advisory_api_url: str = "https://generativelanguage.googleapis.com/v1beta"
    advisory_model: str = "gemini-1.5-flash"
    advisory_api_key: str | None = None
    suggestion_fetch_limit: int = 10
    suggestion_display_limit: int = 5
    min_query_length: int = 3
    suggestion_debounce_seconds: float = 0.26
    request_timeout_seconds: float = 12.0
    frontend_origins: tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")
    log_level: str = "INFO"


def get_settings() -> Settings:
    origins_raw = os.getenv("FRONTEND_ORIGINS", "").strip()
    debounce_raw = os.getenv("SUGGESTION_DEBOUNCE_MS", "").strip()
    timeout_raw = os.getenv("REQUEST_TIMEOUT_SECONDS", "").strip()
    api_key_raw = (os.getenv("ADVISORY_API_KEY") or os.getenv("GEMINI_API_KEY") or "").strip()
    log_level_raw = os.getenv("LOG_LEVEL", "").strip().upper()

    parsed_origins = tuple(item.strip() for item in origins_raw.split(",") if item.strip())

    try:
        debounce_ms = int(debounce_raw) if debounce_raw else 260
    except ValueError:
        debounce_ms = 260

    try:
        request_timeout_seconds = float(timeout_raw) if timeout_raw else 12.0
    except ValueError:
        request_timeout_seconds = 12.0

    return Settings(
        app_name=os.getenv("APP_NAME", "").strip() or Settings.app_name,
        nominatim_search_url=os.getenv("NOMINATIM_SEARCH_URL", "").strip() or Settings.nominatim_search_url,
        nominatim_user_agent=os.getenv("NOMINATIM_USER_AGENT", "").strip() or Settings.nominatim_user_agent,
        open_meteo_forecast_url=os.getenv("OPEN_METEO_FORECAST_URL", "").strip() or Settings.open_meteo_forecast_url,
        advisory_api_url=os.getenv("ADVISORY_API_URL", "").strip().rstrip("/") or Settings.advisory_api_url,
        advisory_model=os.getenv("ADVISORY_MODEL", "").strip() or Settings.advisory_model,
        advisory_api_key=api_key_raw or None,
        suggestion_debounce_seconds=max(0, debounce_ms) / 1000,
        request_timeout_seconds=max(1.0, request_timeout_seconds),
        frontend_origins=parsed_origins or Settings.frontend_origins,
        log_level=log_level_raw or Settings.log_level,
    )
