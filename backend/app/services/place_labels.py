from __future__ import annotations

from typing import Any, Mapping

from app.schemas import PlaceCandidate

UNKNOWN_PLACE_LABEL = "Unknown place"
_CITY_FIELDS = ("city", "town", "village", "hamlet", "municipality")
_STATE_FIELDS = ("state", "region")


def _first_present(address: Mapping[str, Any], fields: tuple[str, ...]) -> str | None:
    for name in fields:
        value = address.get(name)
        if value:
            return str(value)
    return None


def _as_candidate(place: PlaceCandidate | Mapping[str, Any]) -> PlaceCandidate:
    if isinstance(place, PlaceCandidate):
        return place
    return PlaceCandidate.model_validate(place or {})


def format_place_label(place: PlaceCandidate | Mapping[str, Any]) -> str:
    """Reduce a geocoding record to a short "City, State, Country" style label."""
    candidate = _as_candidate(place)
    address = candidate.address.model_dump()

    city = _first_present(address, _CITY_FIELDS)
    state = _first_present(address, _STATE_FIELDS)
    county = address.get("county") or None
    country = address.get("country") or None

    if city and state:
        return f"{city}, {state}, {country}" if country else f"{city}, {state}"
    if city and country:
        return f"{city}, {country}"
    if city and county:
        return f"{city}, {county}, {country}" if country else f"{city}, {county}"
    if state and country:
        return f"{state}, {country}"
    if county and country:
        return f"{county}, {country}"

    if candidate.display_name:
        parts = [part.strip() for part in candidate.display_name.split(",")]
        return ", ".join([part for part in parts if part][:3])

    if candidate.type:
        return candidate.type
    return UNKNOWN_PLACE_LABEL
