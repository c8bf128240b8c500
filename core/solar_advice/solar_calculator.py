"""
Solar generation calculator.

Turns one day's forecast description and the static system configuration into
an estimated daily total and a 24 point hourly generation curve.

MODEL OVERVIEW:
The daily total is driven by "effective peak sun hours", the number of hours of
standard peak irradiance the day is equivalent to:

    daily_kwh = kWp x peak_sun_hours x orientation_factor x system_efficiency

How peak sun hours are estimated depends on the forecast variant:
- Telemetry source, provider record with a sunshine duration: measured
  sunshine hours, refined by the classified weather condition (rain, overcast
  and cloud reduce the yield).
- Manual input: an ideal summer day of 5 peak sun hours scaled by a condition
  factor and, when the configured source is manual, the month's seasonal
  factor.
- Anything else: half of an ideal day.

The daily total is then spread over the daylight hours with a bell shaped
weight centred on solar noon, and normalised so the hourly values add up to
the rounded daily total. A window too short for any hour centre to fall
under the curve leaves every hour at zero.
"""

__all__ = [
    "calculate_solar_generation",
]

import logging
from datetime import date, datetime

import numpy as np

from .exceptions import InvalidTimeFormatError
from .models import (
    HOURS_PER_DAY,
    CalculatedForecast,
    DayForecastInput,
    ErrorKind,
    ForecastCondition,
    HourlyForecast,
)
from .settings import ForecastSource, SystemConfiguration
from .time_utils import hour_label, parse_clock_time
from .weather_codes import classify_weather_code, weather_code_label

logger = logging.getLogger(__name__)

# Algorithm parameters
IDEAL_PEAK_SUN_HOURS = 5.0  # Perfect, long summer day
NEUTRAL_MONTHLY_FACTOR = 1.0
FALLBACK_CONDITION_FACTOR = 0.5
UNMAPPED_CONDITION_FACTOR = 0.6
CURVE_EXPONENT = 1.5
MIN_WEIGHT_SUM = 1e-9

CONDITION_FACTORS = {
    ForecastCondition.SUNNY: 1.0,
    ForecastCondition.PARTLY_CLOUDY: 0.75,
    ForecastCondition.CLOUDY: 0.5,
    ForecastCondition.OVERCAST: 0.25,
    ForecastCondition.RAINY: 0.15,
}

# Applied on top of measured sunshine hours
SUNSHINE_REFINEMENT_FACTORS = {
    ForecastCondition.RAINY: 0.4,
    ForecastCondition.OVERCAST: 0.6,
    ForecastCondition.CLOUDY: 0.8,
}


def _date_string(value: date | str) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _month_of(value: date | str) -> int | None:
    if isinstance(value, date):
        return value.month
    try:
        return datetime.fromisoformat(str(value)).month
    except ValueError:
        logger.warning("Could not determine month from forecast date %r", value)
        return None


def _condition_label(day_input: DayForecastInput) -> str:
    match day_input.kind:
        case "manual":
            condition = getattr(day_input.condition, "value", day_input.condition)
            return str(condition).replace("_", " ")
        case "telemetry":
            return weather_code_label(day_input.condition_code)
    return "unknown"


def _error_forecast(
    day_input: DayForecastInput, error_kind: ErrorKind, message: str
) -> CalculatedForecast:
    logger.warning("Solar calculation for %s failed: %s", day_input.date, message)
    return CalculatedForecast(
        date=_date_string(day_input.date),
        weather_condition_label=_condition_label(day_input),
        daily_total_generation_kwh=0.0,
        hourly_forecast=(),
        error_kind=error_kind,
        error_message=message,
    )


def _effective_peak_sun_hours(
    day_input: DayForecastInput, config: SystemConfiguration
) -> tuple[float, float | None]:
    """Estimate effective peak sun hours for the day.

    Returns:
        Tuple of (peak_sun_hours, sunshine_duration_hours or None)
    """
    match day_input.kind:
        case "telemetry" if (
            config.forecast_source == ForecastSource.TELEMETRY
            and day_input.sunshine_duration_seconds is not None
        ):
            sunshine_hours = max(0.0, day_input.sunshine_duration_seconds / 3600)
            condition = classify_weather_code(day_input.condition_code)
            refinement = SUNSHINE_REFINEMENT_FACTORS.get(condition, 1.0)
            return sunshine_hours * refinement, sunshine_hours

        case "manual":
            month = _month_of(day_input.date)
            # Seasonal factors only apply to the manual source
            if config.forecast_source == ForecastSource.MANUAL and month:
                monthly_factor = config.monthly_factor(month)
            else:
                monthly_factor = NEUTRAL_MONTHLY_FACTOR
            condition_factor = CONDITION_FACTORS.get(
                day_input.condition, UNMAPPED_CONDITION_FACTOR
            )
            return IDEAL_PEAK_SUN_HOURS * monthly_factor * condition_factor, None

    return (
        IDEAL_PEAK_SUN_HOURS * NEUTRAL_MONTHLY_FACTOR * FALLBACK_CONDITION_FACTOR,
        None,
    )


def _hourly_weights(sunrise_hour: float, sunset_hour: float) -> np.ndarray:
    """Bell shaped weights for each clock hour, zero outside daylight."""
    daylight_hours = sunset_hour - sunrise_hour
    solar_noon = sunrise_hour + daylight_hours / 2

    hours = np.arange(HOURS_PER_DAY, dtype=float)
    in_daylight = (hours + 1 > sunrise_hour) & (hours < sunset_hour)

    proximity = 1 - np.abs(hours + 0.5 - solar_noon) / (daylight_hours / 2)
    return np.where(
        in_daylight, np.power(np.clip(proximity, 0.0, None), CURVE_EXPONENT), 0.0
    )


def calculate_solar_generation(
    day_input: DayForecastInput, config: SystemConfiguration
) -> CalculatedForecast:
    """Estimate hourly and daily solar generation for one day.

    Args:
        day_input: Manual or telemetry forecast for the day
        config: Static system configuration

    Returns:
        CalculatedForecast with 24 hourly entries, or an empty curve and an
        ``error_kind`` when the inputs cannot support a calculation
    """
    if not config.total_system_kwp or config.total_system_kwp <= 0:
        return _error_forecast(
            day_input,
            ErrorKind.MISSING_SYSTEM_POWER,
            "Total system power (kWp) not configured or invalid in settings.",
        )

    if not day_input.sunrise or not day_input.sunset:
        return _error_forecast(
            day_input,
            ErrorKind.INVALID_DAYLIGHT_WINDOW,
            "Sunrise or sunset time not set in forecast.",
        )

    try:
        sunrise_minutes = parse_clock_time(day_input.sunrise)
        sunset_minutes = parse_clock_time(day_input.sunset)
    except InvalidTimeFormatError:
        return _error_forecast(
            day_input,
            ErrorKind.INVALID_DAYLIGHT_WINDOW,
            "Invalid sunrise or sunset time format.",
        )

    if sunset_minutes <= sunrise_minutes:
        return _error_forecast(
            day_input,
            ErrorKind.INVALID_DAYLIGHT_WINDOW,
            "Sunset time must be after sunrise time.",
        )

    peak_sun_hours, sunshine_hours = _effective_peak_sun_hours(day_input, config)

    daily_total_kwh = max(
        0.0,
        config.total_system_kwp
        * peak_sun_hours
        * config.orientation_factor
        * config.system_efficiency,
    )
    daily_total_kwh = round(daily_total_kwh, 2)

    weights = _hourly_weights(sunrise_minutes / 60, sunset_minutes / 60)
    weight_sum = float(weights.sum())
    if weight_sum > MIN_WEIGHT_SUM and daily_total_kwh > 0:
        hourly_wh = weights / weight_sum * daily_total_kwh * 1000
    else:
        if weight_sum <= MIN_WEIGHT_SUM:
            logger.warning(
                "Daylight window %s - %s too short to spread generation",
                day_input.sunrise,
                day_input.sunset,
            )
        hourly_wh = np.zeros(HOURS_PER_DAY)

    hourly_forecast = tuple(
        HourlyForecast(
            time=hour_label(hour),
            estimated_generation_wh=round(float(hourly_wh[hour]), 3),
        )
        for hour in range(HOURS_PER_DAY)
    )

    logger.debug(
        "Solar forecast for %s: %.2f kWh (%.2f peak sun hours)",
        day_input.date,
        daily_total_kwh,
        peak_sun_hours,
    )

    telemetry = day_input if day_input.kind == "telemetry" else None
    return CalculatedForecast(
        date=_date_string(day_input.date),
        weather_condition_label=_condition_label(day_input),
        daily_total_generation_kwh=daily_total_kwh,
        hourly_forecast=hourly_forecast,
        sunshine_duration_hours=sunshine_hours,
        temp_max=telemetry.temp_max if telemetry else None,
        temp_min=telemetry.temp_min if telemetry else None,
        precipitation_sum=telemetry.precipitation_sum if telemetry else None,
    )
