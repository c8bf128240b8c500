"""API DataClasses with canonical camelCase field names."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.solar_advice.exceptions import SystemConfigurationError
from core.solar_advice.models import (
    AdviceType,
    CalculatedForecast,
    DayForecastInput,
    ErrorKind,
    EVChargeNeed,
    HourlyForecast,
    ManualDayForecast,
    TariffPeriod,
    TelemetryDayForecast,
)
from core.solar_advice.settings import (
    DEFAULT_MONTHLY_FACTORS,
    EV_CHARGE_BY_TIME,
    EV_MAX_CHARGE_RATE_KWH,
    PREFERRED_OVERNIGHT_BATTERY_CHARGE_PERCENT,
    SYSTEM_EFFICIENCY,
    HomeSettings,
    SystemConfiguration,
)
from core.solar_advice.time_utils import parse_time


@dataclass
class APISystemConfiguration:
    """Solar array and battery configuration."""

    totalSystemKwp: float | None = None  # kWp
    systemEfficiency: float = SYSTEM_EFFICIENCY  # 0.1-1.0
    orientationFactor: float = 1.0
    monthlyGenerationFactors: list[float] = field(
        default_factory=lambda: list(DEFAULT_MONTHLY_FACTORS)
    )
    batteryCapacityKwh: float = 0.0  # kWh, 0 = no battery
    batteryMaxChargeRateKwh: float | None = None  # kWh per hour
    forecastSource: str = "telemetry"

    @classmethod
    def from_internal(cls, config: SystemConfiguration) -> APISystemConfiguration:
        """Convert from internal snake_case to canonical camelCase."""
        return cls(
            totalSystemKwp=config.total_system_kwp,
            systemEfficiency=config.system_efficiency,
            orientationFactor=config.orientation_factor,
            monthlyGenerationFactors=list(config.monthly_generation_factors),
            batteryCapacityKwh=config.battery_capacity_kwh,
            batteryMaxChargeRateKwh=config.battery_max_charge_rate_kwh,
            forecastSource=config.forecast_source.value,
        )

    def to_internal(self) -> SystemConfiguration:
        """Build the core configuration; unknown forecast sources raise."""
        return SystemConfiguration(
            total_system_kwp=self.totalSystemKwp,
            system_efficiency=self.systemEfficiency,
            orientation_factor=self.orientationFactor,
            monthly_generation_factors=list(self.monthlyGenerationFactors),
            battery_capacity_kwh=self.batteryCapacityKwh,
            battery_max_charge_rate_kwh=self.batteryMaxChargeRateKwh,
            forecast_source=self.forecastSource,
        )

    def to_internal_update(self) -> dict:
        """Convert to internal snake_case update dict."""
        return {
            "total_system_kwp": self.totalSystemKwp,
            "system_efficiency": self.systemEfficiency,
            "orientation_factor": self.orientationFactor,
            "monthly_generation_factors": list(self.monthlyGenerationFactors),
            "battery_capacity_kwh": self.batteryCapacityKwh,
            "battery_max_charge_rate_kwh": self.batteryMaxChargeRateKwh,
            "forecast_source": self.forecastSource,
        }


@dataclass
class APIHomeSettings:
    """Household consumption and EV preferences."""

    hourlyUsageProfile: list[float] | None = None  # 24 kWh values
    dailyConsumptionKwh: float | None = None
    avgHourlyConsumptionKwh: float | None = None
    preferredOvernightBatteryChargePercent: float = (
        PREFERRED_OVERNIGHT_BATTERY_CHARGE_PERCENT
    )
    evChargeRequiredKwh: float = 0.0
    evChargeByTime: str = EV_CHARGE_BY_TIME  # HH:MM
    evMaxChargeRateKwh: float = EV_MAX_CHARGE_RATE_KWH

    @classmethod
    def from_internal(cls, home: HomeSettings) -> APIHomeSettings:
        return cls(
            hourlyUsageProfile=home.hourly_usage_profile,
            dailyConsumptionKwh=home.daily_consumption_kwh,
            avgHourlyConsumptionKwh=home.avg_hourly_consumption_kwh,
            preferredOvernightBatteryChargePercent=home.preferred_overnight_battery_charge_percent,
            evChargeRequiredKwh=home.ev_charge_required_kwh,
            evChargeByTime=home.ev_charge_by_time,
            evMaxChargeRateKwh=home.ev_max_charge_rate_kwh,
        )

    def to_internal(self) -> HomeSettings:
        return HomeSettings(**self.to_internal_update())

    def to_internal_update(self) -> dict:
        """Convert to internal snake_case update dict."""
        return {
            "hourly_usage_profile": self.hourlyUsageProfile,
            "daily_consumption_kwh": self.dailyConsumptionKwh,
            "avg_hourly_consumption_kwh": self.avgHourlyConsumptionKwh,
            "preferred_overnight_battery_charge_percent": self.preferredOvernightBatteryChargePercent,
            "ev_charge_required_kwh": self.evChargeRequiredKwh,
            "ev_charge_by_time": self.evChargeByTime,
            "ev_max_charge_rate_kwh": self.evMaxChargeRateKwh,
        }


@dataclass
class APITariffPeriod:
    """Named tariff window, times as HH:MM."""

    id: str
    name: str
    startTime: str
    endTime: str
    isCheap: bool
    rate: float | None = None  # pence/kWh

    @classmethod
    def from_internal(cls, period: TariffPeriod) -> APITariffPeriod:
        return cls(
            id=period.id,
            name=period.name,
            startTime=period.start_time,
            endTime=period.end_time,
            isCheap=period.is_cheap,
            rate=period.rate,
        )

    def to_internal(self) -> TariffPeriod:
        """Build the core tariff period, rejecting malformed times."""
        parse_time(self.startTime)
        parse_time(self.endTime)
        return TariffPeriod(
            id=self.id,
            name=self.name,
            start_time=self.startTime,
            end_time=self.endTime,
            is_cheap=bool(self.isCheap),
            rate=self.rate,
        )


@dataclass
class APIDayForecast:
    """Forecast for one day, either manual or from telemetry."""

    kind: str
    date: str
    sunrise: str | None = None
    sunset: str | None = None

    # Manual
    condition: str | None = None

    # Telemetry
    sunshineDurationSeconds: float | None = None
    conditionCode: int | None = None
    tempMax: float | None = None
    tempMin: float | None = None
    precipitationSum: float | None = None

    def to_internal(self) -> DayForecastInput:
        """Build the matching tagged forecast input."""
        if self.kind == "manual":
            if self.condition is None:
                raise ValueError("Manual forecasts require a condition")
            return ManualDayForecast(
                date=self.date,
                sunrise=self.sunrise,
                sunset=self.sunset,
                condition=self.condition,
            )
        if self.kind == "telemetry":
            return TelemetryDayForecast(
                date=self.date,
                sunrise=self.sunrise,
                sunset=self.sunset,
                sunshine_duration_seconds=self.sunshineDurationSeconds,
                condition_code=self.conditionCode,
                temp_max=self.tempMax,
                temp_min=self.tempMin,
                precipitation_sum=self.precipitationSum,
            )
        raise ValueError(f"Unknown forecast kind: {self.kind!r}")


@dataclass
class APIHourlyForecast:
    time: str
    estimatedGenerationWh: float


@dataclass
class APICalculatedForecast:
    """Previously calculated forecast sent back by a client."""

    date: str
    weatherConditionLabel: str
    dailyTotalGenerationKwh: float
    hourlyForecast: list[dict] = field(default_factory=list)
    errorKind: str | None = None
    errorMessage: str | None = None
    sunshineDurationHours: float | None = None
    tempMax: float | None = None
    tempMin: float | None = None
    precipitationSum: float | None = None

    def to_internal(self) -> CalculatedForecast:
        hourly = tuple(
            HourlyForecast(
                time=entry.time, estimated_generation_wh=entry.estimatedGenerationWh
            )
            for entry in (APIHourlyForecast(**item) for item in self.hourlyForecast)
        )
        return CalculatedForecast(
            date=self.date,
            weather_condition_label=self.weatherConditionLabel,
            daily_total_generation_kwh=self.dailyTotalGenerationKwh,
            hourly_forecast=hourly,
            error_kind=ErrorKind(self.errorKind) if self.errorKind else None,
            error_message=self.errorMessage,
            sunshine_duration_hours=self.sunshineDurationHours,
            temp_max=self.tempMax,
            temp_min=self.tempMin,
            precipitation_sum=self.precipitationSum,
        )


@dataclass
class APIEVChargeNeed:
    chargeRequiredKwh: float = 0.0
    chargeByHour: int = 7
    maxChargeRateKwh: float = EV_MAX_CHARGE_RATE_KWH

    def to_internal(self) -> EVChargeNeed:
        if not 0 <= self.chargeByHour <= 23:
            raise ValueError(f"chargeByHour must be 0-23, got {self.chargeByHour}")
        return EVChargeNeed(
            charge_required_kwh=self.chargeRequiredKwh,
            charge_by_hour=self.chargeByHour,
            max_charge_rate_kwh=self.maxChargeRateKwh,
        )


def parse_advice_type(value: str | None) -> AdviceType:
    """Advice type from its API value, ``today`` when absent."""
    if value is None:
        return AdviceType.TODAY
    try:
        return AdviceType(value)
    except ValueError as e:
        raise ValueError(f"Unknown advice type: {value!r}") from e


def parse_tariffs(items: list[dict]) -> list[TariffPeriod]:
    return [APITariffPeriod(**item).to_internal() for item in items]


def parse_system_configuration(data: dict) -> SystemConfiguration:
    """Build a SystemConfiguration from a camelCase payload.

    Raises:
        SystemConfigurationError: If the payload has unknown fields or values
    """
    try:
        return APISystemConfiguration(**data).to_internal()
    except TypeError as e:
        raise SystemConfigurationError(component="configuration", message=str(e)) from e
