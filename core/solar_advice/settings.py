"""Core configuration values and types for solar advice using dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import InvalidTimeFormatError, SystemConfigurationError
from .time_utils import parse_time

# Solar system defaults
SYSTEM_EFFICIENCY = 0.85
MIN_SYSTEM_EFFICIENCY = 0.1
MAX_SYSTEM_EFFICIENCY = 1.0
ORIENTATION_FACTOR_SOUTH = 1.0

# Seasonal derate per calendar month, January first
DEFAULT_MONTHLY_FACTORS = [0.4, 0.5, 0.7, 0.9, 1.0, 1.1, 1.0, 0.9, 0.7, 0.5, 0.4, 0.3]

# Panel compass direction -> generation multiplier (south = optimum)
PROPERTY_DIRECTION_FACTORS = {
    "South": 1.00,
    "South-West": 0.95,
    "South-East": 0.95,
    "West": 0.82,
    "East": 0.82,
    "North-West": 0.60,
    "North-East": 0.60,
    "North": 0.43,
    "Flat Roof": 0.90,  # Assumes panels angled towards south
}

# Home defaults
HOME_HOURLY_CONSUMPTION_KWH = 0.5
PREFERRED_OVERNIGHT_BATTERY_CHARGE_PERCENT = 100
EV_CHARGE_BY_TIME = "07:00"
EV_MAX_CHARGE_RATE_KWH = 7.0


class ForecastSource(Enum):
    """Where day forecasts come from."""

    TELEMETRY = "telemetry"
    MANUAL = "manual"


def orientation_factor_for(direction: str | None) -> float:
    """Look up the generation multiplier for a panel direction.

    Unknown or missing directions are treated as south-facing.
    """
    if not direction:
        return ORIENTATION_FACTOR_SOUTH
    return PROPERTY_DIRECTION_FACTORS.get(direction, ORIENTATION_FACTOR_SOUTH)


def _parse_forecast_source(value: Any) -> ForecastSource:
    if isinstance(value, ForecastSource):
        return value
    try:
        return ForecastSource(value)
    except ValueError as e:
        raise SystemConfigurationError(
            component="forecast_source",
            message=f"Unknown forecast source: {value!r}",
        ) from e


@dataclass
class SystemConfiguration:
    """Static description of the solar array and battery."""

    total_system_kwp: float | None = None
    system_efficiency: float = SYSTEM_EFFICIENCY
    orientation_factor: float = ORIENTATION_FACTOR_SOUTH
    monthly_generation_factors: list[float] = field(
        default_factory=lambda: list(DEFAULT_MONTHLY_FACTORS)
    )
    battery_capacity_kwh: float = 0.0
    battery_max_charge_rate_kwh: float | None = None
    forecast_source: ForecastSource = ForecastSource.TELEMETRY

    def __post_init__(self):
        self.system_efficiency = min(
            MAX_SYSTEM_EFFICIENCY, max(MIN_SYSTEM_EFFICIENCY, self.system_efficiency)
        )
        if len(self.monthly_generation_factors) != 12:
            self.monthly_generation_factors = [1.0] * 12
        if self.battery_capacity_kwh is None or self.battery_capacity_kwh < 0:
            self.battery_capacity_kwh = 0.0
        self.forecast_source = _parse_forecast_source(self.forecast_source)

    @property
    def has_battery(self) -> bool:
        """True when a battery subsystem is configured."""
        return self.battery_capacity_kwh > 0

    @property
    def effective_max_charge_rate_kwh(self) -> float:
        """Charge ceiling per hour, full capacity when unset."""
        if self.battery_max_charge_rate_kwh and self.battery_max_charge_rate_kwh > 0:
            return self.battery_max_charge_rate_kwh
        return self.battery_capacity_kwh

    def monthly_factor(self, month: int) -> float:
        """Seasonal factor for a calendar month (1-12)."""
        return self.monthly_generation_factors[month - 1]

    def update(self, **kwargs: Any) -> None:
        """Update settings from dict."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

        self.__post_init__()

    @classmethod
    def from_config(cls, config: dict) -> "SystemConfiguration":
        """Create instance from the ``system`` section of an options dict."""
        system_config = config.get("system", config)

        total_kwp = system_config.get("total_kwp")
        panel_count = system_config.get("panel_count")
        panel_watts = system_config.get("panel_watts")
        if total_kwp is None and panel_count and panel_watts:
            total_kwp = round(panel_count * panel_watts / 1000, 2)

        orientation = system_config.get("orientation_factor")
        if orientation is None:
            orientation = orientation_factor_for(system_config.get("property_direction"))

        return cls(
            total_system_kwp=total_kwp,
            system_efficiency=system_config.get("system_efficiency", SYSTEM_EFFICIENCY),
            orientation_factor=orientation,
            monthly_generation_factors=list(
                system_config.get("monthly_generation_factors", DEFAULT_MONTHLY_FACTORS)
            ),
            battery_capacity_kwh=system_config.get("battery_capacity_kwh", 0.0),
            battery_max_charge_rate_kwh=system_config.get("battery_max_charge_rate_kwh"),
            forecast_source=system_config.get(
                "forecast_source", ForecastSource.TELEMETRY.value
            ),
        )


@dataclass
class HomeSettings:
    """Household consumption and EV preferences."""

    hourly_usage_profile: list[float] | None = None
    daily_consumption_kwh: float | None = None
    avg_hourly_consumption_kwh: float | None = None
    preferred_overnight_battery_charge_percent: float = (
        PREFERRED_OVERNIGHT_BATTERY_CHARGE_PERCENT
    )
    ev_charge_required_kwh: float = 0.0
    ev_charge_by_time: str = EV_CHARGE_BY_TIME
    ev_max_charge_rate_kwh: float = EV_MAX_CHARGE_RATE_KWH

    def consumption_profile(self) -> list[float]:
        """Expected household consumption in kWh for each hour 0-23.

        An explicit 24 entry profile wins, then a daily total spread evenly,
        then an average hourly figure, then the default.
        """
        if self.hourly_usage_profile and len(self.hourly_usage_profile) == 24:
            return [max(0.0, value) for value in self.hourly_usage_profile]
        if self.daily_consumption_kwh:
            return [self.daily_consumption_kwh / 24] * 24
        if self.avg_hourly_consumption_kwh:
            return [self.avg_hourly_consumption_kwh] * 24
        return [HOME_HOURLY_CONSUMPTION_KWH] * 24

    @property
    def ev_charge_by_hour(self) -> int:
        """Hour part of the EV deadline, falling back to the default time."""
        try:
            return parse_time(self.ev_charge_by_time) // 60
        except InvalidTimeFormatError:
            return parse_time(EV_CHARGE_BY_TIME) // 60

    def update(self, **kwargs: Any) -> None:
        """Update settings from dict."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    @classmethod
    def from_config(cls, config: dict) -> "HomeSettings":
        """Create instance from the ``home`` section of an options dict."""
        home_config = config.get("home", {})
        return cls(
            hourly_usage_profile=home_config.get("hourly_usage_profile"),
            daily_consumption_kwh=home_config.get("daily_consumption_kwh"),
            avg_hourly_consumption_kwh=home_config.get("avg_hourly_consumption_kwh"),
            preferred_overnight_battery_charge_percent=home_config.get(
                "preferred_overnight_battery_charge_percent",
                PREFERRED_OVERNIGHT_BATTERY_CHARGE_PERCENT,
            ),
            ev_charge_required_kwh=home_config.get("ev_charge_required_kwh", 0.0),
            ev_charge_by_time=home_config.get("ev_charge_by_time") or EV_CHARGE_BY_TIME,
            ev_max_charge_rate_kwh=home_config.get(
                "ev_max_charge_rate_kwh", EV_MAX_CHARGE_RATE_KWH
            ),
        )
