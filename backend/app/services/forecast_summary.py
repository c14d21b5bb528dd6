from __future__ import annotations

import math
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Sequence

from app.schemas import DailyForecastSample, ForecastSummary

FORECAST_DAYS = 7
RAINY_DAY_THRESHOLD_MM = 2.5
RAINY_WEEK_MIN_DAYS = 4
WARM_THRESHOLD_C = 26.6  # ~80°F
HUMID_THRESHOLD_PCT = 50.0
DAILY_VARIABLES = ("precipitation_sum", "temperature_2m_max", "relative_humidity_2m_mean")


class ForecastShapeError(ValueError):
    """Raised when forecast data does not have 7 complete, finite daily samples."""


def forecast_date_range(today: date | None = None) -> tuple[str, str]:
    start = today or date.today()
    end = start + timedelta(days=FORECAST_DAYS - 1)
    return start.isoformat(), end.isoformat()


def samples_from_daily_payload(payload: Any) -> list[DailyForecastSample]:
    daily = payload.get("daily") if isinstance(payload, dict) else None
    if not isinstance(daily, dict):
        raise ForecastShapeError("Forecast payload has no daily section.")

    columns: dict[str, list] = {}
    for key in ("time", *DAILY_VARIABLES):
        values = daily.get(key)
        if not isinstance(values, list) or len(values) != FORECAST_DAYS:
            raise ForecastShapeError(f"Daily field '{key}' must contain {FORECAST_DAYS} values.")
        columns[key] = values

    samples: list[DailyForecastSample] = []
    for idx in range(FORECAST_DAYS):
        numbers = [columns[key][idx] for key in DAILY_VARIABLES]
        if not all(_is_number(value) for value in numbers):
            raise ForecastShapeError(f"Daily values for {columns['time'][idx]} are incomplete.")
        samples.append(
            DailyForecastSample(
                date=str(columns["time"][idx]),
                precipitation_mm=float(numbers[0]),
                max_temp_c=float(numbers[1]),
                mean_humidity_pct=float(numbers[2]),
            )
        )
    return samples


def summarize_forecast(samples: Sequence[DailyForecastSample]) -> ForecastSummary:
    if len(samples) != FORECAST_DAYS:
        raise ForecastShapeError(f"Expected {FORECAST_DAYS} daily samples, got {len(samples)}.")
    for sample in samples:
        values = (sample.precipitation_mm, sample.max_temp_c, sample.mean_humidity_pct)
        if not all(math.isfinite(value) for value in values):
            raise ForecastShapeError(f"Daily sample for {sample.date} has non-finite values.")

    return ForecastSummary(
        rain=_rain_summary(samples),
        temp=_temperature_summary(samples),
        humidity=_humidity_summary(samples),
    )


def _rain_summary(samples: Sequence[DailyForecastSample]) -> str:
    rainy_dates = [sample.date for sample in samples if sample.precipitation_mm >= RAINY_DAY_THRESHOLD_MM]
    headline = "Expect rainy day(s)." if len(rainy_dates) >= RAINY_WEEK_MIN_DAYS else "Expect dry day(s)."
    if rainy_dates:
        detail = f" It is expected to rain on: {', '.join(rainy_dates)}."
    else:
        detail = " No relevant rain is expected for the week."
    return headline + detail


def _temperature_summary(samples: Sequence[DailyForecastSample]) -> str:
    avg_temp = sum(sample.max_temp_c for sample in samples) / len(samples)
    feel = "warm" if avg_temp > WARM_THRESHOLD_C else "cool"
    celsius = _fixed(avg_temp, 1)
    fahrenheit = _fixed(avg_temp * 1.8 + 32, 1)
    return f"Expect {feel} day(s). Average temperature: {celsius}°C ({fahrenheit}°F)."


def _humidity_summary(samples: Sequence[DailyForecastSample]) -> str:
    avg_humidity = sum(sample.mean_humidity_pct for sample in samples) / len(samples)
    feel = "humid" if avg_humidity > HUMID_THRESHOLD_PCT else "dry"
    return f"Expect {feel} day(s). Average humidity: {_fixed(avg_humidity, 0)}%."


def _fixed(value: float, digits: int) -> str:
    # Half-up on the exact binary value, so 0.25 -> "0.3" and 62.5 -> "63".
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
