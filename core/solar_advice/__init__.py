"""Solar generation forecasting and grid charging advice package."""

# Define public API - only include what users should directly access
__all__ = [
    "AdviceType",
    "Advisory",
    "CalculatedForecast",
    "ChargingAdvice",
    "ChargingAdviceRequest",
    "EVChargeNeed",
    "ErrorKind",
    "ForecastCondition",
    "ForecastSource",
    "HomeSettings",
    "ManualDayForecast",
    "SystemConfiguration",
    "TariffPeriod",
    "TelemetryDayForecast",
    "calculate_solar_generation",
    "generate_advisory",
    "get_charging_advice",
    "simulate_charging_plan",
]

from .settings import (  # noqa: I001
    ForecastSource,
    HomeSettings,
    SystemConfiguration,
)

from .models import (
    AdviceType,
    CalculatedForecast,
    ChargingAdvice,
    ChargingAdviceRequest,
    EVChargeNeed,
    ErrorKind,
    ForecastCondition,
    ManualDayForecast,
    TariffPeriod,
    TelemetryDayForecast,
)

from .solar_calculator import calculate_solar_generation
from .charging_advisor import get_charging_advice, simulate_charging_plan

# Orchestration used by the backend (the primary entry point for callers)
from .advisory import Advisory, generate_advisory
