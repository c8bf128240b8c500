"""Advisory orchestration: today's advice and the overnight plan together."""

import logging
from dataclasses import dataclass

from .charging_advisor import get_charging_advice
from .models import (
    AdviceType,
    CalculatedForecast,
    ChargingAdvice,
    ChargingAdviceRequest,
    DayForecastInput,
    EVChargeNeed,
    TariffPeriod,
)
from .settings import HomeSettings, SystemConfiguration
from .solar_calculator import calculate_solar_generation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Advisory:
    """Forecasts and advice for one recomputation cycle."""

    today_forecast: CalculatedForecast
    tomorrow_forecast: CalculatedForecast
    today_advice: ChargingAdvice
    overnight_advice: ChargingAdvice


def ev_charge_need_from(home_settings: HomeSettings) -> EVChargeNeed:
    """Build the EV need from the household's saved EV preferences."""
    return EVChargeNeed(
        charge_required_kwh=max(0.0, home_settings.ev_charge_required_kwh or 0.0),
        charge_by_hour=home_settings.ev_charge_by_hour,
        max_charge_rate_kwh=home_settings.ev_max_charge_rate_kwh,
    )


def generate_advisory(
    today_input: DayForecastInput,
    tomorrow_input: DayForecastInput,
    config: SystemConfiguration,
    tariff_periods: list[TariffPeriod],
    home_settings: HomeSettings,
    current_battery_level_kwh: float,
    current_hour: int,
) -> Advisory:
    """Calculate both days' forecasts and run the simulator for each window.

    Today's advice plans from the current hour using today's forecast. The
    overnight plan starts at 00:00 and uses tomorrow's forecast.
    """
    today_forecast = calculate_solar_generation(today_input, config)
    tomorrow_forecast = calculate_solar_generation(tomorrow_input, config)

    profile = home_settings.consumption_profile()
    ev_need = ev_charge_need_from(home_settings)
    target_percent = home_settings.preferred_overnight_battery_charge_percent

    today_advice = get_charging_advice(
        ChargingAdviceRequest(
            forecast=today_forecast,
            configuration=config,
            tariff_periods=tariff_periods,
            current_battery_level_kwh=current_battery_level_kwh,
            hourly_consumption_profile=profile,
            current_hour=current_hour,
            ev_need=ev_need,
            advice_type=AdviceType.TODAY,
            preferred_overnight_battery_charge_percent=target_percent,
        )
    )
    overnight_advice = get_charging_advice(
        ChargingAdviceRequest(
            forecast=tomorrow_forecast,
            configuration=config,
            tariff_periods=tariff_periods,
            current_battery_level_kwh=current_battery_level_kwh,
            hourly_consumption_profile=profile,
            current_hour=0,
            ev_need=ev_need,
            advice_type=AdviceType.OVERNIGHT,
            preferred_overnight_battery_charge_percent=target_percent,
        )
    )

    logger.info(
        "Advisory generated: today %.2f kWh, tomorrow %.2f kWh",
        today_forecast.daily_total_generation_kwh,
        tomorrow_forecast.daily_total_generation_kwh,
    )

    return Advisory(
        today_forecast=today_forecast,
        tomorrow_forecast=tomorrow_forecast,
        today_advice=today_advice,
        overnight_advice=overnight_advice,
    )
