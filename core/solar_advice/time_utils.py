"""Time and tariff utilities.

KEY PRINCIPLE: clock times are handled as minutes since midnight and hours
as integers 0-23. Simulations count "absolute" hours from the start of the
planning day, so 24 is 00:00 of the following day.
"""

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING

from .exceptions import InvalidTimeFormatError

if TYPE_CHECKING:
    from .models import TariffPeriod

logger = logging.getLogger(__name__)

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

DAY_LABELS = ("Today", "Tomorrow", "Day After Tomorrow")

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_time(value: str) -> int:
    """Convert ``HH:MM`` into minutes since midnight.

    Raises:
        InvalidTimeFormatError: If value is not a valid 24-hour ``HH:MM`` time
    """
    if not isinstance(value, str):
        raise InvalidTimeFormatError(value)
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormatError(value)
    return int(match.group(1)) * MINUTES_PER_HOUR + int(match.group(2))


def parse_clock_time(value: str) -> int:
    """Minutes since midnight from either ``HH:MM`` or an ISO datetime.

    Raises:
        InvalidTimeFormatError: If value is neither
    """
    try:
        return parse_time(value)
    except InvalidTimeFormatError:
        pass

    # fromisoformat only accepts a "Z" suffix from Python 3.11
    iso_value = value
    if isinstance(value, str) and value.endswith("Z"):
        iso_value = value[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(iso_value)
    except (TypeError, ValueError) as e:
        raise InvalidTimeFormatError(value) from e
    return dt.hour * MINUTES_PER_HOUR + dt.minute


def format_time(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``, wrapping at 24 hours."""
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // MINUTES_PER_HOUR:02d}:{minutes % MINUTES_PER_HOUR:02d}"


def hour_label(hour: int) -> str:
    """Label for the start of a clock hour, e.g. ``07:00``."""
    return format_time(hour * MINUTES_PER_HOUR)


def is_hour_in_period(hour: int, period: "TariffPeriod") -> bool:
    """Check whether the start of ``hour`` falls inside a tariff period.

    Periods whose start is later than their end wrap past midnight.
    """
    period_start = parse_time(period.start_time)
    period_end = parse_time(period.end_time)
    hour_start = (hour % 24) * MINUTES_PER_HOUR

    if period_start <= period_end:
        return period_start <= hour_start < period_end
    return hour_start >= period_start or hour_start < period_end


def find_tariff_period(
    hour: int, periods: list["TariffPeriod"]
) -> "TariffPeriod | None":
    """Find the tariff period that applies to an hour.

    When periods overlap, cheap periods win over non-cheap ones, then the
    lowest rate wins (periods without a rate sort last), then list order.
    """
    matching = [
        (index, period)
        for index, period in enumerate(periods)
        if is_hour_in_period(hour, period)
    ]
    if not matching:
        return None

    def sort_key(item):
        index, period = item
        return (
            not period.is_cheap,
            period.rate is None,
            period.rate if period.rate is not None else 0.0,
            index,
        )

    return min(matching, key=sort_key)[1]


def find_cheap_period(
    hour: int, periods: list["TariffPeriod"]
) -> "TariffPeriod | None":
    """Return the applicable period if it is a cheap one."""
    period = find_tariff_period(hour, periods)
    if period is not None and period.is_cheap:
        return period
    return None


def day_label(day_index: int) -> str:
    """Human label for a day offset from today."""
    return DAY_LABELS[min(max(day_index, 0), len(DAY_LABELS) - 1)]


def format_charge_window(absolute_hours, day_offset: int = 0) -> str | None:
    """Collapse recorded charge hours into a single window string.

    Args:
        absolute_hours: Hours counted from 00:00 of the planning day
        day_offset: 0 when the planning day is today, 1 when it is tomorrow

    Returns:
        e.g. ``"01:00 - 05:00 (Tomorrow)"``, or None when nothing was recorded
    """
    hours = sorted(set(absolute_hours))
    if not hours:
        return None

    first, last = hours[0], hours[-1]
    start = format_time(first * MINUTES_PER_HOUR)
    end = format_time((last + 1) * MINUTES_PER_HOUR)
    label = day_label(day_offset + first // 24)
    return f"{start} - {end} ({label})"
