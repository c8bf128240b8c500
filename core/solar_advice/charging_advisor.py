"""
Charging advice simulator.

Runs an hour-by-hour energy balance over a 24 hour planning window and turns
the outcome into a recommendation on whether to charge the home battery and
an electric vehicle from the grid now, later, or not at all.

SIMULATION OVERVIEW:
The simulation is a greedy single pass. Each hour is settled once, in this
order, and earlier hours are never revisited:

1. Net solar = forecast generation - household consumption
2. EV demand (before its deadline) takes positive net solar, then battery
3. Remaining net solar charges the battery, a deficit discharges it
4. EV grid charging in cheap hours, or outside them (overnight only) when the
   deadline could otherwise not be met at the EV's maximum rate
5. Battery grid charging towards the target level, in cheap hours only

During a cheap hour the battery is not discharged below its target level: the
grid supplies whatever the battery would otherwise have given up.

PLANNING WINDOW:
- today: starts at the current hour and runs through to the same hour tomorrow
- overnight: starts at 00:00 of the planned day

Hours are tracked both as clock hours (0-23) and as absolute hours counted
from 00:00 of the planning day, so deadlines and charge windows that cross
midnight compare correctly.
"""

__all__ = [
    "get_charging_advice",
    "simulate_charging_plan",
]

import logging

from .models import (
    HOURS_PER_DAY,
    AdviceType,
    ChargingAdvice,
    ChargingAdviceRequest,
    ErrorKind,
    SimulationResult,
    SimulationStep,
    TariffPeriod,
)
from .time_utils import (
    find_cheap_period,
    find_tariff_period,
    day_label,
    format_charge_window,
    format_time,
    hour_label,
    parse_time,
)

logger = logging.getLogger(__name__)

# Fallback rate if a tariff period has no rate (pence/kWh, price cap unit rate)
DEFAULT_RATE_PENCE = 28.62

# An overnight EV deadline at or before this hour means "tomorrow morning"
EARLY_MORNING_DEADLINE_HOUR = 6

# Thresholds for "today" advice
TOP_UP_TARGET_FRACTION = 0.5
TOP_UP_CAPACITY_FRACTION = 0.7
CRITICAL_BATTERY_FRACTION = 0.3

ENERGY_EPSILON = 1e-9


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _consumption_for_hour(profile: list[float], hour: int) -> float:
    if hour < len(profile) and profile[hour] is not None:
        return max(0.0, float(profile[hour]))
    return 0.0


def _rate_for(period: TariffPeriod | None) -> float:
    if period is not None and period.rate is not None:
        return period.rate
    return DEFAULT_RATE_PENCE


def simulate_charging_plan(request: ChargingAdviceRequest) -> SimulationResult:
    """Simulate battery and EV energy flows across the planning window.

    Args:
        request: Snapshot of forecast, configuration, tariffs and current state

    Returns:
        SimulationResult with one step per simulated hour and totals
    """
    config = request.configuration
    tariffs = request.tariff_periods
    capacity = config.battery_capacity_kwh
    battery_max_rate = config.effective_max_charge_rate_kwh
    target_percent = _clamp(request.preferred_overnight_battery_charge_percent, 0, 100)
    target_level = capacity * target_percent / 100

    is_overnight = request.advice_type == AdviceType.OVERNIGHT
    current_hour = int(_clamp(request.current_hour, 0, HOURS_PER_DAY - 1))
    planning_start = 0 if is_overnight else current_hour

    ev_need = request.ev_need
    ev_rate = max(0.0, ev_need.max_charge_rate_kwh)
    ev_deadline = ev_need.charge_by_hour
    if is_overnight and ev_need.charge_by_hour <= EARLY_MORNING_DEADLINE_HOUR:
        ev_deadline = ev_need.charge_by_hour + HOURS_PER_DAY

    solar_by_hour = request.forecast.generation_kwh_by_hour()

    battery = _clamp(request.current_battery_level_kwh, 0.0, capacity)
    remaining_ev = max(0.0, ev_need.charge_required_kwh)
    grid_for_battery = 0.0
    grid_for_ev = 0.0
    total_cost = 0.0
    battery_charge_hours = []
    ev_charge_hours = []
    steps = []

    for offset in range(HOURS_PER_DAY):
        absolute_hour = planning_start + offset
        hour = absolute_hour % HOURS_PER_DAY

        solar = solar_by_hour.get(hour, 0.0)
        consumption = _consumption_for_hour(request.hourly_consumption_profile, hour)
        cheap_period = find_cheap_period(hour, tariffs)
        battery_start = battery
        battery_floor = min(battery, target_level) if cheap_period else 0.0

        net_energy = solar - consumption
        ev_from_solar = 0.0
        ev_from_battery = 0.0
        ev_from_grid = 0.0
        battery_from_grid = 0.0
        step_cost = 0.0
        forced = False

        # EV first: surplus solar, then stored energy
        if remaining_ev > ENERGY_EPSILON and absolute_hour < ev_deadline and ev_rate > 0:
            ev_wanted = min(remaining_ev, ev_rate)
            ev_from_solar = min(max(net_energy, 0.0), ev_wanted)
            net_energy -= ev_from_solar
            ev_from_battery = min(ev_wanted - ev_from_solar, battery - battery_floor)
            battery -= ev_from_battery
            remaining_ev -= ev_from_solar + ev_from_battery

        if net_energy >= 0:
            battery = min(capacity, battery + net_energy)
        else:
            battery = max(battery_floor, battery + net_energy)
        battery = _clamp(battery, 0.0, capacity)

        # EV from grid: cheap hours, or forced to make an overnight deadline
        if remaining_ev > ENERGY_EPSILON and absolute_hour < ev_deadline and ev_rate > 0:
            hours_to_deadline = ev_deadline - absolute_hour
            forced = hours_to_deadline > 0 and remaining_ev / ev_rate >= hours_to_deadline
            if cheap_period or (forced and is_overnight):
                headroom = ev_rate - ev_from_solar - ev_from_battery
                ev_from_grid = min(remaining_ev, headroom)
                if ev_from_grid > ENERGY_EPSILON:
                    period = cheap_period or find_tariff_period(hour, tariffs)
                    remaining_ev -= ev_from_grid
                    grid_for_ev += ev_from_grid
                    step_cost += ev_from_grid * _rate_for(period)
                    ev_charge_hours.append(absolute_hour)
                else:
                    ev_from_grid = 0.0
            forced = forced and not cheap_period and ev_from_grid > 0

        # Battery from grid: cheap hours only, never forced
        if cheap_period and battery < target_level - ENERGY_EPSILON:
            battery_from_grid = min(
                target_level - battery, battery_max_rate, capacity - battery
            )
            if battery_from_grid > ENERGY_EPSILON:
                battery += battery_from_grid
                grid_for_battery += battery_from_grid
                step_cost += battery_from_grid * _rate_for(cheap_period)
                battery_charge_hours.append(absolute_hour)
            else:
                battery_from_grid = 0.0

        total_cost += step_cost
        logger.debug(
            "Hour %s: solar=%.2f load=%.2f battery %.2f -> %.2f, "
            "EV solar/battery/grid=%.2f/%.2f/%.2f, battery grid=%.2f",
            hour_label(hour),
            solar,
            consumption,
            battery_start,
            battery,
            ev_from_solar,
            ev_from_battery,
            ev_from_grid,
            battery_from_grid,
        )

        steps.append(
            SimulationStep(
                offset=offset,
                absolute_hour=absolute_hour,
                hour=hour,
                solar_kwh=solar,
                consumption_kwh=consumption,
                battery_start_kwh=battery_start,
                battery_end_kwh=battery,
                ev_from_solar_kwh=ev_from_solar,
                ev_from_battery_kwh=ev_from_battery,
                ev_from_grid_kwh=ev_from_grid,
                battery_from_grid_kwh=battery_from_grid,
                cost_pence=step_cost,
                is_cheap=cheap_period is not None,
                forced_ev_charge=forced,
            )
        )

    return SimulationResult(
        planning_start_hour=planning_start,
        target_battery_level_kwh=target_level,
        ev_deadline_hour=ev_deadline,
        steps=tuple(steps),
        grid_charge_for_battery_kwh=grid_for_battery,
        grid_charge_for_ev_kwh=grid_for_ev,
        cost_pence=total_cost,
        remaining_ev_charge_kwh=max(0.0, remaining_ev),
        battery_charge_hours=tuple(battery_charge_hours),
        ev_charge_hours=tuple(ev_charge_hours),
    )


def _potential_savings_kwh(request: ChargingAdviceRequest) -> float:
    """Solar surplus over household consumption across the day, never negative."""
    solar_by_hour = request.forecast.generation_kwh_by_hour()
    surplus = sum(
        solar_by_hour.get(hour, 0.0)
        - _consumption_for_hour(request.hourly_consumption_profile, hour)
        for hour in range(HOURS_PER_DAY)
    )
    return max(0.0, surplus)


def _today_advice(request: ChargingAdviceRequest, result: SimulationResult) -> dict:
    config = request.configuration
    capacity = config.battery_capacity_kwh
    level = _clamp(request.current_battery_level_kwh, 0.0, capacity)
    target = result.target_battery_level_kwh
    current_hour = result.planning_start_hour
    soc_percent = level / capacity * 100

    advice = {
        "recommend_charge_now": False,
        "recommend_charge_later": False,
        "details": None,
        "charge_needed_kwh": result.grid_charge_for_battery_kwh,
        "charge_window": format_charge_window(result.battery_charge_hours),
        "ev_recommendation": None,
    }

    current_cheap = find_cheap_period(current_hour, request.tariff_periods)
    if (
        current_cheap
        and level < target * TOP_UP_TARGET_FRACTION
        and level < capacity * TOP_UP_CAPACITY_FRACTION
    ):
        advice["reason"] = (
            f"Battery is at {soc_percent:.0f}%. A cheap tariff ('{current_cheap.name}') "
            f"is available now ({current_cheap.start_time}-{current_cheap.end_time}). "
            "Consider topping up."
        )
        advice["recommend_charge_now"] = True
        advice["charge_needed_kwh"] = max(0.0, target - level)
        # A period that wrapped midnight ends tomorrow; an end of 00:00 is tonight
        end_minutes = parse_time(current_cheap.end_time)
        ends_tomorrow = 0 < end_minutes <= current_hour * 60
        advice["charge_window"] = (
            f"{hour_label(current_hour)} - {current_cheap.end_time} "
            f"({day_label(1 if ends_tomorrow else 0)})"
        )
    elif level < capacity * CRITICAL_BATTERY_FRACTION:
        advice["reason"] = (
            f"Battery is very low ({soc_percent:.0f}%). Prioritize charging during "
            "the next available cheap tariff."
        )
        advice["recommend_charge_later"] = True
    else:
        advice["reason"] = (
            "Battery level appears sufficient for now. Rely on solar and current charge."
        )

    ev_need = request.ev_need
    if ev_need.charge_required_kwh > 0:
        ev_window = format_charge_window(result.ev_charge_hours)
        if result.grid_charge_for_ev_kwh > 0:
            advice["ev_recommendation"] = (
                f"EV requires {ev_need.charge_required_kwh:.1f} kWh. "
                f"Consider charging from grid during {ev_window}."
            )
            if result.planning_start_hour in result.ev_charge_hours:
                advice["recommend_charge_now"] = True
            else:
                advice["recommend_charge_later"] = True
        elif result.remaining_ev_charge_kwh <= ENERGY_EPSILON:
            advice["ev_recommendation"] = (
                "EV charging needs appear to be met by solar/battery based on forecast."
            )
        else:
            advice["ev_recommendation"] = (
                f"EV requires {result.remaining_ev_charge_kwh:.1f} kWh. Charge before "
                f"{hour_label(ev_need.charge_by_hour)}. Consider next cheap tariff."
            )
            advice["recommend_charge_later"] = True

    return advice


def _overnight_advice(request: ChargingAdviceRequest, result: SimulationResult) -> dict:
    grid_for_battery = result.grid_charge_for_battery_kwh
    grid_for_ev = result.grid_charge_for_ev_kwh
    target_percent = _clamp(request.preferred_overnight_battery_charge_percent, 0, 100)

    advice = {
        "recommend_charge_now": False,
        "recommend_charge_later": False,
        "details": None,
        "charge_needed_kwh": grid_for_battery,
        "charge_window": format_charge_window(result.battery_charge_hours, day_offset=1),
        "ev_recommendation": None,
    }

    if grid_for_battery > 0 or grid_for_ev > 0:
        reason = "Grid charging is recommended overnight."
        if grid_for_battery > 0:
            reason += (
                f" Battery needs ~{grid_for_battery:.1f}kWh to reach "
                f"{target_percent:.0f}% target."
            )
        if grid_for_ev > 0:
            reason += f" EV needs ~{grid_for_ev:.1f}kWh."
        details = "This utilizes forecasted cheap tariff periods."
        if any(step.forced_ev_charge for step in result.steps):
            details += " Some EV charging falls outside cheap periods to meet the deadline."
        advice["reason"] = reason
        advice["details"] = details
        advice["recommend_charge_later"] = True
    else:
        advice["reason"] = (
            "Sufficient solar/battery expected for tomorrow's needs. "
            "Overnight grid charging may not be essential."
        )

    if request.ev_need.charge_required_kwh > 0:
        if grid_for_ev > 0:
            ev_window = format_charge_window(result.ev_charge_hours, day_offset=1)
            advice["ev_recommendation"] = (
                f"Charge EV with {grid_for_ev:.1f}kWh from grid during {ev_window}."
            )
        elif result.remaining_ev_charge_kwh <= ENERGY_EPSILON:
            advice["ev_recommendation"] = (
                "EV charging needs for tomorrow morning should be met by solar/battery."
            )
        else:
            advice["ev_recommendation"] = (
                f"EV still needs {result.remaining_ev_charge_kwh:.1f}kWh by "
                f"{format_time(result.ev_deadline_hour * 60)}. "
                "Solar may not cover this; ensure charging."
            )

    return advice


def get_charging_advice(request: ChargingAdviceRequest) -> ChargingAdvice:
    """Produce charging advice for the requested planning window.

    Args:
        request: Snapshot of forecast, configuration, tariffs and current state

    Returns:
        ChargingAdvice; precondition failures are reported through
        ``reason``/``details`` and ``error_kind`` rather than raised
    """
    if not request.configuration.has_battery:
        logger.warning("Charging advice requested without battery capacity")
        return ChargingAdvice(
            recommend_charge_now=False,
            recommend_charge_later=False,
            reason=(
                "Battery capacity not set in settings. Battery capacity is required "
                "to provide charging advice."
            ),
            error_kind=ErrorKind.MISSING_BATTERY_CAPACITY,
        )

    forecast = request.forecast
    if forecast.is_error or not forecast.hourly_forecast:
        logger.warning(
            "Charging advice requested for unavailable forecast (%s)",
            forecast.error_message,
        )
        return ChargingAdvice(
            recommend_charge_now=False,
            recommend_charge_later=False,
            reason="Hourly solar forecast data is unavailable.",
            details=forecast.error_message or "No hourly forecast to base advice on.",
            error_kind=ErrorKind.FORECAST_UNAVAILABLE,
        )

    result = simulate_charging_plan(request)

    if request.advice_type == AdviceType.OVERNIGHT:
        advice = _overnight_advice(request, result)
        day_offset = 1
    else:
        advice = _today_advice(request, result)
        day_offset = 0

    ev_charge_window = None
    if result.grid_charge_for_ev_kwh > 0:
        ev_charge_window = format_charge_window(result.ev_charge_hours, day_offset)

    logger.info(
        "%s advice: now=%s later=%s battery grid=%.2f kWh EV grid=%.2f kWh cost=%.2fp",
        request.advice_type.value,
        advice["recommend_charge_now"],
        advice["recommend_charge_later"],
        result.grid_charge_for_battery_kwh,
        result.grid_charge_for_ev_kwh,
        result.cost_pence,
    )

    return ChargingAdvice(
        recommend_charge_now=advice["recommend_charge_now"],
        recommend_charge_later=advice["recommend_charge_later"],
        reason=advice["reason"],
        details=advice["details"],
        charge_needed_kwh=round(advice["charge_needed_kwh"], 1) or None,
        charge_window=advice["charge_window"],
        potential_savings_kwh=round(_potential_savings_kwh(request), 1),
        ev_recommendation=advice["ev_recommendation"],
        ev_charge_window=ev_charge_window,
        charge_cost_pence=round(result.cost_pence, 2) or None,
    )
