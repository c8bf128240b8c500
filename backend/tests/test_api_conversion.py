"""Tests for API conversion functionality.

This test validates the backend API layer conversion between core models and
camelCase API payloads. This is separate from core tests to maintain proper
architecture boundaries.
"""

import pytest
from api_conversion import convert_keys_to_camel_case, snake_to_camel
from api_dataclasses import (
    APICalculatedForecast,
    APIDayForecast,
    APIHomeSettings,
    APISystemConfiguration,
    APITariffPeriod,
    parse_advice_type,
    parse_system_configuration,
)

from core.solar_advice.exceptions import InvalidTimeFormatError, SystemConfigurationError
from core.solar_advice.models import (
    AdviceType,
    CalculatedForecast,
    ChargingAdvice,
    ErrorKind,
    ForecastCondition,
    HourlyForecast,
    ManualDayForecast,
    TelemetryDayForecast,
)
from core.solar_advice.settings import ForecastSource, HomeSettings, SystemConfiguration


class TestKeyConversion:
    """snake_case to camelCase key conversion."""

    def test_snake_and_camel(self):
        assert snake_to_camel("daily_total_generation_kwh") == "dailyTotalGenerationKwh"
        assert snake_to_camel("date") == "date"
        assert snake_to_camel("preferred_overnight_battery_charge_percent") == (
            "preferredOvernightBatteryChargePercent"
        )

    def test_dataclass_with_enums_and_tuples(self):
        """Nested dataclasses, enums and tuples become plain JSON values."""
        forecast = CalculatedForecast(
            date="2025-06-15",
            weather_condition_label="sunny",
            daily_total_generation_kwh=0.0,
            hourly_forecast=(HourlyForecast(time="00:00", estimated_generation_wh=0.0),),
            error_kind=ErrorKind.MISSING_SYSTEM_POWER,
        )

        result = convert_keys_to_camel_case(forecast)

        assert result["dailyTotalGenerationKwh"] == 0.0
        assert result["errorKind"] == "MissingSystemPower"
        assert result["hourlyForecast"] == [{"time": "00:00", "estimatedGenerationWh": 0.0}]
        assert result["sunshineDurationHours"] is None

    def test_advice_keys(self):
        advice = ChargingAdvice(
            recommend_charge_now=False,
            recommend_charge_later=True,
            reason="Grid charging is recommended overnight.",
            charge_cost_pence=80.0,
        )
        result = convert_keys_to_camel_case(advice)

        assert result["recommendChargeLater"] is True
        assert result["chargeCostPence"] == 80.0
        assert result["errorKind"] is None


class TestAPIDataclasses:
    """camelCase request dataclasses to core models."""

    def test_system_configuration_round_trip(self):
        config = SystemConfiguration(
            total_system_kwp=4.2, battery_capacity_kwh=9.5, forecast_source="manual"
        )
        api_config = APISystemConfiguration.from_internal(config)

        assert api_config.totalSystemKwp == 4.2
        assert api_config.forecastSource == "manual"
        assert api_config.to_internal() == config

    def test_system_configuration_rejects_unknown_fields(self):
        with pytest.raises(SystemConfigurationError):
            parse_system_configuration({"totalSystemKwp": 4.0, "panelColour": "black"})

    def test_system_configuration_rejects_unknown_source(self):
        with pytest.raises(SystemConfigurationError):
            parse_system_configuration({"forecastSource": "satellite"})

    def test_home_settings(self):
        home = APIHomeSettings(dailyConsumptionKwh=9.6, evChargeByTime="06:00").to_internal()

        assert isinstance(home, HomeSettings)
        assert home.ev_charge_by_hour == 6
        assert APIHomeSettings.from_internal(home).dailyConsumptionKwh == 9.6

    def test_manual_day_forecast(self):
        day = APIDayForecast(
            kind="manual", date="2025-06-15", sunrise="06:00", sunset="18:00", condition="cloudy"
        ).to_internal()

        assert isinstance(day, ManualDayForecast)
        assert day.condition == ForecastCondition.CLOUDY

    def test_telemetry_day_forecast(self):
        day = APIDayForecast(
            kind="telemetry",
            date="2025-06-15",
            sunrise="2025-06-15T04:43",
            sunset="2025-06-15T21:21",
            sunshineDurationSeconds=30000,
            conditionCode=3,
        ).to_internal()

        assert isinstance(day, TelemetryDayForecast)
        assert day.sunshine_duration_seconds == 30000

    def test_unknown_forecast_kind(self):
        with pytest.raises(ValueError, match="Unknown forecast kind"):
            APIDayForecast(kind="satellite", date="2025-06-15").to_internal()

    def test_tariff_period_validates_times(self):
        period = APITariffPeriod(
            id="night", name="Night", startTime="00:30", endTime="04:30", isCheap=True, rate=7.5
        ).to_internal()
        assert period.start_time == "00:30"
        assert period.is_cheap

        with pytest.raises(InvalidTimeFormatError):
            APITariffPeriod(
                id="bad", name="Bad", startTime="25:00", endTime="04:30", isCheap=True
            ).to_internal()

    def test_calculated_forecast_from_payload(self):
        forecast = APICalculatedForecast(
            date="2025-06-15",
            weatherConditionLabel="sunny",
            dailyTotalGenerationKwh=1.5,
            hourlyForecast=[{"time": "12:00", "estimatedGenerationWh": 1500.0}],
        ).to_internal()

        assert forecast.generation_kwh_by_hour() == {12: 1.5}
        assert not forecast.is_error

    def test_advice_type(self):
        assert parse_advice_type(None) == AdviceType.TODAY
        assert parse_advice_type("overnight") == AdviceType.OVERNIGHT
        with pytest.raises(ValueError):
            parse_advice_type("weekly")

    def test_forecast_source_enum_value(self):
        api_config = APISystemConfiguration.from_internal(
            SystemConfiguration(forecast_source=ForecastSource.TELEMETRY)
        )
        assert api_config.forecastSource == "telemetry"
