"""
API endpoints for solar forecasts, charging advice and settings.

Request and response bodies use camelCase keys. Calculation problems such as
a missing system power are part of a successful response (``errorKind``);
only malformed payloads are rejected with 400.
"""

from dataclasses import asdict
from datetime import datetime

from api_conversion import convert_keys_to_camel_case
from api_dataclasses import (
    APICalculatedForecast,
    APIDayForecast,
    APIEVChargeNeed,
    APIHomeSettings,
    APISystemConfiguration,
    APITariffPeriod,
    parse_advice_type,
    parse_system_configuration,
    parse_tariffs,
)
from fastapi import APIRouter, HTTPException
from loguru import logger

from core.solar_advice import (
    ChargingAdviceRequest,
    calculate_solar_generation,
    generate_advisory,
    get_charging_advice,
)
from core.solar_advice.advisory import ev_charge_need_from
from core.solar_advice.exceptions import SolarAdviceException

router = APIRouter()

# Payload problems that map to 400 Bad Request
PAYLOAD_ERRORS = (KeyError, TypeError, ValueError, SolarAdviceException)


def _bad_request(error: Exception) -> HTTPException:
    if isinstance(error, KeyError):
        detail = f"Missing required field: {error.args[0]}"
    else:
        detail = str(error)
    logger.warning(f"Rejected request payload: {detail}")
    return HTTPException(status_code=400, detail=detail)


def _configuration_from(payload: dict, controller):
    if "configuration" in payload:
        return parse_system_configuration(payload["configuration"])
    return controller.system_config


def _tariffs_from(payload: dict, controller):
    if "tariffs" in payload:
        return parse_tariffs(payload["tariffs"])
    return controller.tariffs


def _home_settings_from(payload: dict, controller):
    if "homeSettings" in payload:
        return APIHomeSettings(**payload["homeSettings"]).to_internal()
    return controller.home_settings


def _current_hour_from(payload: dict) -> int:
    current_hour = int(payload.get("currentHour", datetime.now().hour))
    if not 0 <= current_hour <= 23:
        raise ValueError(f"currentHour must be 0-23, got {current_hour}")
    return current_hour


def _consumption_profile_from(payload: dict, home_settings) -> list[float]:
    profile = payload.get("hourlyConsumptionProfile")
    if profile is None:
        return home_settings.consumption_profile()
    if len(profile) != 24:
        raise ValueError(
            f"hourlyConsumptionProfile must have 24 entries, got {len(profile)}"
        )
    return [float(value) for value in profile]


@router.post("/api/forecast")
async def calculate_forecast(payload: dict):
    """Calculate the hourly solar generation forecast for one day."""
    from app import advice_controller

    try:
        day_input = APIDayForecast(**payload["dayInput"]).to_internal()
        config = _configuration_from(payload, advice_controller)
    except PAYLOAD_ERRORS as e:
        raise _bad_request(e) from e

    forecast = calculate_solar_generation(day_input, config)
    logger.debug(
        f"Forecast for {forecast.date}: {forecast.daily_total_generation_kwh} kWh"
    )
    return convert_keys_to_camel_case(forecast)


@router.post("/api/advice")
async def calculate_advice(payload: dict):
    """Charging advice from a calculated forecast or a day forecast input."""
    from app import advice_controller

    try:
        config = _configuration_from(payload, advice_controller)
        home_settings = _home_settings_from(payload, advice_controller)

        if "forecast" in payload:
            forecast = APICalculatedForecast(**payload["forecast"]).to_internal()
        else:
            day_input = APIDayForecast(**payload["dayInput"]).to_internal()
            forecast = calculate_solar_generation(day_input, config)

        if "evNeed" in payload:
            ev_need = APIEVChargeNeed(**payload["evNeed"]).to_internal()
        else:
            ev_need = ev_charge_need_from(home_settings)

        request = ChargingAdviceRequest(
            forecast=forecast,
            configuration=config,
            tariff_periods=_tariffs_from(payload, advice_controller),
            current_battery_level_kwh=float(payload["currentBatteryLevelKwh"]),
            hourly_consumption_profile=_consumption_profile_from(
                payload, home_settings
            ),
            current_hour=_current_hour_from(payload),
            ev_need=ev_need,
            advice_type=parse_advice_type(payload.get("adviceType")),
            preferred_overnight_battery_charge_percent=float(
                payload.get(
                    "preferredOvernightBatteryChargePercent",
                    home_settings.preferred_overnight_battery_charge_percent,
                )
            ),
        )
    except PAYLOAD_ERRORS as e:
        raise _bad_request(e) from e

    advice = get_charging_advice(request)
    return convert_keys_to_camel_case(advice)


@router.post("/api/advisory")
async def calculate_advisory(payload: dict):
    """Today's and tomorrow's forecasts with today's and overnight advice."""
    from app import advice_controller

    try:
        today_input = APIDayForecast(**payload["todayInput"]).to_internal()
        tomorrow_input = APIDayForecast(**payload["tomorrowInput"]).to_internal()
        config = _configuration_from(payload, advice_controller)
        tariffs = _tariffs_from(payload, advice_controller)
        home_settings = _home_settings_from(payload, advice_controller)
        battery_level = float(payload["currentBatteryLevelKwh"])
        current_hour = _current_hour_from(payload)
    except PAYLOAD_ERRORS as e:
        raise _bad_request(e) from e

    advisory = generate_advisory(
        today_input,
        tomorrow_input,
        config,
        tariffs,
        home_settings,
        current_battery_level_kwh=battery_level,
        current_hour=current_hour,
    )
    return convert_keys_to_camel_case(advisory)


@router.get("/api/settings")
async def get_settings():
    """Get current system, home and tariff settings in camelCase."""
    from app import advice_controller

    settings = advice_controller.get_settings()
    return {
        "system": asdict(APISystemConfiguration.from_internal(settings["system"])),
        "home": asdict(APIHomeSettings.from_internal(settings["home"])),
        "tariffs": [
            asdict(APITariffPeriod.from_internal(period))
            for period in settings["tariffs"]
        ],
    }


@router.post("/api/settings")
async def update_settings(settings: dict):
    """Update settings in memory from (partial) camelCase input."""
    from app import advice_controller

    current = advice_controller.get_settings()
    updates = {}
    try:
        if "system" in settings:
            merged = asdict(APISystemConfiguration.from_internal(current["system"]))
            merged.update(settings["system"])
            api_system = APISystemConfiguration(**merged)
            api_system.to_internal()  # Validate before touching live settings
            updates["system"] = api_system.to_internal_update()
        if "home" in settings:
            merged = asdict(APIHomeSettings.from_internal(current["home"]))
            merged.update(settings["home"])
            updates["home"] = APIHomeSettings(**merged).to_internal_update()
        if "tariffs" in settings:
            updates["tariffs"] = parse_tariffs(settings["tariffs"])
    except PAYLOAD_ERRORS as e:
        raise _bad_request(e) from e

    advice_controller.update_settings(updates)
    return {"message": "Settings updated successfully"}
