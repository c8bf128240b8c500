"""Shared test fixtures and utilities for solar advice tests."""

import logging
import os
import sys

import pytest

# Add the project root to Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../.."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from core.solar_advice.models import (  # noqa: E402
    AdviceType,
    CalculatedForecast,
    ChargingAdviceRequest,
    EVChargeNeed,
    HourlyForecast,
    TariffPeriod,
)
from core.solar_advice.settings import ForecastSource, SystemConfiguration  # noqa: E402


def make_forecast(hourly_kwh: list[float], date: str = "2025-06-15") -> CalculatedForecast:
    """Build a CalculatedForecast from 24 hourly kWh values."""
    hourly = tuple(
        HourlyForecast(time=f"{hour:02d}:00", estimated_generation_wh=kwh * 1000)
        for hour, kwh in enumerate(hourly_kwh)
    )
    return CalculatedForecast(
        date=date,
        weather_condition_label="sunny",
        daily_total_generation_kwh=round(sum(hourly_kwh), 2),
        hourly_forecast=hourly,
    )


def make_request(
    forecast: CalculatedForecast,
    configuration: SystemConfiguration,
    tariffs: list[TariffPeriod],
    battery_level: float,
    consumption: list[float] | None = None,
    current_hour: int = 0,
    ev_need: EVChargeNeed | None = None,
    advice_type: AdviceType = AdviceType.OVERNIGHT,
    target_percent: float = 100,
) -> ChargingAdviceRequest:
    """Assemble a ChargingAdviceRequest with sensible defaults."""
    return ChargingAdviceRequest(
        forecast=forecast,
        configuration=configuration,
        tariff_periods=tariffs,
        current_battery_level_kwh=battery_level,
        hourly_consumption_profile=consumption if consumption is not None else [0.5] * 24,
        current_hour=current_hour,
        ev_need=ev_need or EVChargeNeed(charge_required_kwh=0.0),
        advice_type=advice_type,
        preferred_overnight_battery_charge_percent=target_percent,
    )


@pytest.fixture
def forecast_factory():
    """Factory for CalculatedForecast objects built from hourly kWh values."""
    return make_forecast


@pytest.fixture
def request_factory():
    """Factory for ChargingAdviceRequest objects."""
    return make_request


@pytest.fixture
def solar_config():
    """4 kWp south-facing array with neutral seasonal factors."""
    return SystemConfiguration(
        total_system_kwp=4.0,
        system_efficiency=0.85,
        orientation_factor=1.0,
        monthly_generation_factors=[1.0] * 12,
        battery_capacity_kwh=10.0,
        battery_max_charge_rate_kwh=10.0,
        forecast_source=ForecastSource.MANUAL,
    )


@pytest.fixture
def telemetry_config(solar_config):
    """The same array, forecasting from weather provider records."""
    solar_config.update(forecast_source=ForecastSource.TELEMETRY)
    return solar_config


@pytest.fixture
def battery_config():
    """10 kWh battery that can charge fully in one hour."""
    return SystemConfiguration(
        total_system_kwp=4.0,
        battery_capacity_kwh=10.0,
        battery_max_charge_rate_kwh=10.0,
    )


@pytest.fixture
def night_tariffs():
    """Cheap night rate 00:00-05:00 and a standard day rate."""
    return [
        TariffPeriod(
            id="night",
            name="Night",
            start_time="00:00",
            end_time="05:00",
            is_cheap=True,
            rate=10.0,
        ),
        TariffPeriod(
            id="day",
            name="Day",
            start_time="05:00",
            end_time="00:00",
            is_cheap=False,
            rate=30.0,
        ),
    ]


@pytest.fixture
def no_sun_forecast():
    """Forecast with no generation at all."""
    return make_forecast([0.0] * 24)
