import asyncio
from datetime import date

import pytest

from app.config import Settings
from app.schemas import Coordinates
from app.services.advisory_client import ADVISORY_UNAVAILABLE_MESSAGE
from app.services.lookup_session import LocationNotSelectedError, LookupSession, lookup_suggestions

from fakes import FakeAdvisoryClient, FakeWeatherClient

SETTINGS = Settings(suggestion_debounce_seconds=0.01)


def _session(weather=None, advisory=None, listener=None) -> LookupSession:
    return LookupSession(
        SETTINGS,
        weather or FakeWeatherClient(),
        advisory or FakeAdvisoryClient(),
        listener=listener,
    )


def test_lookup_suggestions_formats_and_deduplicates() -> None:
    weather = FakeWeatherClient()
    result = asyncio.run(lookup_suggestions(weather, "Paris!!"))

    assert weather.search_calls == ["Paris"]
    assert result.normalized == "Paris"
    assert result.suggestions == ["Paris, Île-de-France, France", "Paris, Texas, United States"]
    assert result.coordinates == Coordinates(lat=48.8588897, lon=2.3200410)


def test_lookup_suggestions_skips_short_queries_without_network() -> None:
    weather = FakeWeatherClient()
    for query in ("ab", "  ab ", "a.,;"):
        result = asyncio.run(lookup_suggestions(weather, query))
        assert result.suggestions == []
    assert weather.search_calls == []


def test_debounced_input_fetches_once_for_latest_text() -> None:
    weather = FakeWeatherClient()
    session = _session(weather=weather)

    async def scenario() -> None:
        for text in ("Par", "Pari", "Paris"):
            session.on_location_change(text)
        await asyncio.sleep(0.05)
        await session.scheduler.wait_idle()
        await session.close()

    asyncio.run(scenario())
    assert weather.search_calls == ["Paris"]
    assert session.state.location == "Paris"
    assert len(session.state.suggestions) == 2
    assert session.state.coordinates.lat == pytest.approx(48.8588897)


def test_stale_suggestion_responses_are_dropped() -> None:
    weather = FakeWeatherClient(delays={"Berl": 0.05})
    weather.results = [{"lat": "52.52", "lon": "13.40", "address": {"city": "Berlin", "country": "Germany"}}]
    session = _session(weather=weather)

    async def scenario() -> None:
        slow = asyncio.create_task(session.refresh_suggestions("Berl"))
        await asyncio.sleep(0)
        weather.results = [{"lat": "52.52", "lon": "13.40", "address": {"city": "Berlin", "state": "Berlin"}}]
        await session.refresh_suggestions("Berlin")
        await slow

    asyncio.run(scenario())
    assert session.state.suggestions == ["Berlin, Berlin"]


def test_suggestion_failure_degrades_to_empty_list() -> None:
    session = _session(weather=FakeWeatherClient(fail_search=True))
    session.state.suggestions = ["Old, Suggestion"]
    asyncio.run(session.refresh_suggestions("Lisbon"))
    assert session.state.suggestions == []


def test_select_suggestion_clears_list_and_notifies() -> None:
    seen: list[str] = []

    async def listener(state) -> None:
        seen.append(state.location)

    session = _session(listener=listener)
    session.state.suggestions = ["Paris, France"]
    asyncio.run(session.select_suggestion("Paris, France"))

    assert session.state.location == "Paris, France"
    assert session.state.suggestions == []
    assert seen == ["Paris, France"]


def test_fetch_weather_requires_selected_coordinates() -> None:
    weather = FakeWeatherClient()
    advisory = FakeAdvisoryClient()
    session = _session(weather=weather, advisory=advisory)

    with pytest.raises(LocationNotSelectedError, match="Please select a location first."):
        asyncio.run(session.fetch_weather())

    session.state.coordinates = Coordinates(lat=0.0, lon=12.5)
    with pytest.raises(LocationNotSelectedError):
        asyncio.run(session.fetch_weather())

    assert weather.forecast_calls == []
    assert advisory.locations == []


def test_fetch_weather_fills_summaries_and_advisory() -> None:
    weather = FakeWeatherClient()
    session = _session(weather=weather)
    session.state.location = "Paris, France"
    session.state.coordinates = Coordinates(lat=48.85, lon=2.35)

    result = asyncio.run(session.fetch_weather(today=date(2026, 10, 18)))

    assert weather.forecast_calls[0][1:] == ("2026-10-18", "2026-10-24")
    assert session.state.rain == "Expect dry day(s). It is expected to rain on: 2026-10-20."
    assert session.state.temp == "Expect cool day(s). Average temperature: 16.7°C (62.1°F)."
    assert session.state.humidity == "Expect humid day(s). Average humidity: 71%."
    assert session.state.advisory == "Pack an umbrella and a light jacket."
    assert result.forecast_error is None


def test_weather_and_advisory_fail_independently() -> None:
    session = _session(weather=FakeWeatherClient(fail_forecast=True))
    session.state.coordinates = Coordinates(lat=48.85, lon=2.35)
    result = asyncio.run(session.fetch_weather())

    assert result.forecast_error
    assert session.state.rain == ""
    assert session.state.advisory == "Pack an umbrella and a light jacket."

    session = _session(advisory=FakeAdvisoryClient(fail=True))
    session.state.coordinates = Coordinates(lat=48.85, lon=2.35)
    asyncio.run(session.fetch_weather())

    assert session.state.rain.startswith("Expect dry day(s).")
    assert session.state.advisory == ADVISORY_UNAVAILABLE_MESSAGE


def test_selecting_a_suggestion_discards_in_flight_fetch() -> None:
    weather = FakeWeatherClient(delays={"Paris": 0.05})
    session = _session(weather=weather)
    session.state.coordinates = Coordinates(lat=45.76, lon=4.83)

    async def scenario() -> None:
        pending = asyncio.create_task(session.refresh_suggestions("Paris"))
        await asyncio.sleep(0)
        await session.select_suggestion("Lyon, France")
        await pending

    asyncio.run(scenario())
    assert weather.search_calls == ["Paris"]
    assert session.state.location == "Lyon, France"
    assert session.state.suggestions == []
    assert session.state.coordinates == Coordinates(lat=45.76, lon=4.83)
