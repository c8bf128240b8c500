# core/solar_advice/models.py
"""
Data models for the solar advice system.

This module contains dataclasses representing the data structures exchanged
between the solar generation calculator, the charging advice simulator and
their callers. Every result type is immutable and produced fresh per call.

"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .settings import SystemConfiguration

logger = logging.getLogger(__name__)

__all__ = [
    "AdviceType",
    "CalculatedForecast",
    "ChargingAdvice",
    "ChargingAdviceRequest",
    "DayForecastInput",
    "EVChargeNeed",
    "ErrorKind",
    "ForecastCondition",
    "HourlyForecast",
    "ManualDayForecast",
    "SimulationResult",
    "SimulationStep",
    "TariffPeriod",
    "TelemetryDayForecast",
]

HOURS_PER_DAY = 24


class ForecastCondition(Enum):
    """Simplified weather condition categories used by the calculator."""

    SUNNY = "sunny"
    PARTLY_CLOUDY = "partly_cloudy"
    CLOUDY = "cloudy"
    OVERCAST = "overcast"
    RAINY = "rainy"


class ErrorKind(Enum):
    """Problems signalled through result fields instead of exceptions."""

    MISSING_SYSTEM_POWER = "MissingSystemPower"
    INVALID_DAYLIGHT_WINDOW = "InvalidDaylightWindow"
    MISSING_BATTERY_CAPACITY = "MissingBatteryCapacity"
    FORECAST_UNAVAILABLE = "ForecastUnavailable"


class AdviceType(Enum):
    """Which planning window the simulator runs over."""

    TODAY = "today"  # Starts at the current hour of today
    OVERNIGHT = "overnight"  # Starts at 00:00 of the planned day


@dataclass(frozen=True)
class ManualDayForecast:
    """User-entered forecast for one day."""

    date: date | str
    sunrise: str  # HH:MM
    sunset: str  # HH:MM
    condition: ForecastCondition
    kind: str = field(default="manual", init=False)

    def __post_init__(self):
        # Accept plain strings such as "partly_cloudy"; unknown values are kept
        # and later fall back to the unmapped condition factor
        if not isinstance(self.condition, ForecastCondition):
            try:
                object.__setattr__(self, "condition", ForecastCondition(self.condition))
            except ValueError:
                logger.warning("Unmapped forecast condition %r", self.condition)


@dataclass(frozen=True)
class TelemetryDayForecast:
    """Forecast record supplied by a weather provider."""

    date: date | str
    sunrise: str | None  # ISO datetime
    sunset: str | None  # ISO datetime
    sunshine_duration_seconds: float | None = None
    condition_code: int | None = None  # WMO weather interpretation code

    # Passed through to the calculated forecast for display
    temp_max: float | None = None
    temp_min: float | None = None
    precipitation_sum: float | None = None
    kind: str = field(default="telemetry", init=False)


DayForecastInput = ManualDayForecast | TelemetryDayForecast


@dataclass(frozen=True)
class HourlyForecast:
    """Estimated generation for one clock hour."""

    time: str  # HH:00
    estimated_generation_wh: float


@dataclass(frozen=True)
class CalculatedForecast:
    """Result of a solar generation calculation."""

    date: str
    weather_condition_label: str
    daily_total_generation_kwh: float
    hourly_forecast: tuple[HourlyForecast, ...] = ()
    error_kind: ErrorKind | None = None
    error_message: str | None = None

    # Optional display context
    sunshine_duration_hours: float | None = None
    temp_max: float | None = None
    temp_min: float | None = None
    precipitation_sum: float | None = None

    @property
    def is_error(self) -> bool:
        """True when the calculation failed."""
        return self.error_kind is not None

    def generation_kwh_by_hour(self) -> dict[int, float]:
        """Map clock hour (0-23) to estimated generation in kWh."""
        result = {}
        for entry in self.hourly_forecast:
            hour = int(entry.time.split(":")[0])
            result[hour] = entry.estimated_generation_wh / 1000
        return result


@dataclass(frozen=True)
class TariffPeriod:
    """A named daily time window with a grid import rate."""

    id: str
    name: str
    start_time: str  # HH:MM
    end_time: str  # HH:MM, earlier than start_time when wrapping midnight
    is_cheap: bool
    rate: float | None = None  # pence/kWh


@dataclass(frozen=True)
class EVChargeNeed:
    """Energy an electric vehicle needs before a deadline."""

    charge_required_kwh: float = 0.0
    charge_by_hour: int = 7
    max_charge_rate_kwh: float = 7.0


@dataclass(frozen=True)
class ChargingAdviceRequest:
    """Snapshot of everything the simulator needs for one run."""

    forecast: CalculatedForecast
    configuration: SystemConfiguration
    tariff_periods: list[TariffPeriod]
    current_battery_level_kwh: float
    hourly_consumption_profile: list[float]
    current_hour: int = 0
    ev_need: EVChargeNeed = field(default_factory=EVChargeNeed)
    advice_type: AdviceType = AdviceType.TODAY
    preferred_overnight_battery_charge_percent: float = 100.0


@dataclass(frozen=True)
class SimulationStep:
    """Energy flows for one simulated hour."""

    offset: int  # Steps since planning start
    absolute_hour: int  # planning start + offset, keeps counting past midnight
    hour: int  # Clock hour 0-23
    solar_kwh: float
    consumption_kwh: float
    battery_start_kwh: float
    battery_end_kwh: float
    ev_from_solar_kwh: float = 0.0
    ev_from_battery_kwh: float = 0.0
    ev_from_grid_kwh: float = 0.0
    battery_from_grid_kwh: float = 0.0
    cost_pence: float = 0.0
    is_cheap: bool = False
    forced_ev_charge: bool = False


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of the hour-by-hour energy balance simulation."""

    planning_start_hour: int
    target_battery_level_kwh: float
    ev_deadline_hour: int
    steps: tuple[SimulationStep, ...]
    grid_charge_for_battery_kwh: float
    grid_charge_for_ev_kwh: float
    cost_pence: float
    remaining_ev_charge_kwh: float
    battery_charge_hours: tuple[int, ...]  # Absolute hours
    ev_charge_hours: tuple[int, ...]  # Absolute hours

    @property
    def final_battery_kwh(self) -> float:
        """Battery level after the last simulated hour."""
        if not self.steps:
            return 0.0
        return self.steps[-1].battery_end_kwh


@dataclass(frozen=True)
class ChargingAdvice:
    """Actionable recommendation produced by the simulator."""

    recommend_charge_now: bool
    recommend_charge_later: bool
    reason: str
    details: str | None = None
    charge_needed_kwh: float | None = None  # Battery grid charge estimate
    charge_window: str | None = None  # e.g. "01:00 - 04:00 (Tomorrow)"
    potential_savings_kwh: float | None = None
    ev_recommendation: str | None = None
    ev_charge_window: str | None = None
    charge_cost_pence: float | None = None  # Battery + EV grid charge
    error_kind: ErrorKind | None = None
