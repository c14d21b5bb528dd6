from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.schemas import ForecastRequest
from app.services.advisory_client import AdvisoryClient
from app.services.lookup_session import (
    LocationNotSelectedError,
    LookupSession,
    LookupState,
    lookup_suggestions,
    lookup_weather,
)
from app.services.text_normalizer import normalize_for_query
from app.services.weather_client import WeatherClient


settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

weather_client = WeatherClient(settings=settings)
advisory_client = AdvisoryClient(settings=settings)

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

if not settings.advisory_api_key:
    logger.warning("ADVISORY_API_KEY not set; travel advisories will report as unavailable.")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await weather_client.close()
    await advisory_client.close()


@app.get("/api/health")
async def health() -> dict:
    return {
        "status": "ok",
        "service": settings.app_name,
        "advisory_configured": bool(settings.advisory_api_key),
        "timestamp_utc": datetime.now(tz=timezone.utc).isoformat(),
    }


@app.get("/api/suggestions")
async def suggestions(query: str = Query(default="", max_length=200)) -> dict:
    try:
        result = await lookup_suggestions(weather_client, query, min_length=settings.min_query_length)
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Error fetching suggestions for %r: %s", query, exc)
        return {"query": query, "normalized": normalize_for_query(query), "suggestions": [], "coordinates": None}

    return {
        "query": query,
        "normalized": result.normalized,
        "suggestions": result.suggestions[: settings.suggestion_display_limit],
        "coordinates": result.coordinates.model_dump() if result.coordinates else None,
    }


@app.post("/api/forecast")
async def forecast(payload: ForecastRequest) -> dict:
    try:
        result = await lookup_weather(
            weather_client,
            advisory_client,
            location=payload.location,
            coordinates=payload.coordinates,
        )
    except LocationNotSelectedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "location": payload.location,
        "coordinates": payload.coordinates.model_dump(),
        "start_date": result.start_date,
        "end_date": result.end_date,
        "rain": result.rain,
        "temp": result.temp,
        "humidity": result.humidity,
        "advisory": result.advisory,
        "forecast_error": result.forecast_error,
    }


@app.websocket("/api/ws/lookup")
async def lookup_socket(websocket: WebSocket) -> None:
    await websocket.accept()

    async def push_state(state: LookupState) -> None:
        await websocket.send_json({"type": "state", **state.to_dict(settings.suggestion_display_limit)})

    session = LookupSession(settings, weather_client, advisory_client, listener=push_state)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                await websocket.send_json({"type": "error", "detail": "Messages must be JSON objects."})
                continue
            kind = message.get("type") if isinstance(message, dict) else None
            if kind == "input":
                session.on_location_change(str(message.get("text") or ""))
            elif kind == "select":
                await session.select_suggestion(str(message.get("label") or ""))
            elif kind == "search":
                try:
                    await session.fetch_weather()
                except LocationNotSelectedError as exc:
                    await websocket.send_json({"type": "error", "detail": str(exc)})
            else:
                await websocket.send_json({"type": "error", "detail": f"Unsupported message type: {kind}"})
    except WebSocketDisconnect:
        logger.debug("Lookup socket closed")
    finally:
        await session.close()
