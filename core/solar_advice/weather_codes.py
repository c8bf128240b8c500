"""WMO weather interpretation codes as reported by telemetry providers."""

from .models import ForecastCondition

UNKNOWN_CONDITION_LABEL = "Unknown"

WMO_CODE_MAP = {
    0: "Sunny",  # Clear sky
    1: "Mainly Sunny",
    2: "Partly Cloudy",
    3: "Cloudy",  # Overcast sky
    45: "Cloudy+",  # Fog
    48: "Cloudy+",  # Depositing rime fog
    51: "Light Drizzle",
    53: "Moderate Drizzle",
    55: "Dense Drizzle",
    56: "Light Freezing Drizzle",
    57: "Dense Freezing Drizzle",
    61: "Slight Rain",
    63: "Moderate Rain",
    65: "Heavy Rain",
    66: "Light Freezing Rain",
    67: "Heavy Freezing Rain",
    71: "Slight Snowfall",
    73: "Moderate Snowfall",
    75: "Heavy Snowfall",
    77: "Snow Grains",
    80: "Slight Rain Showers",
    81: "Moderate Rain Showers",
    82: "Violent Rain Showers",
    85: "Slight Snow Showers",
    86: "Heavy Snow Showers",
    95: "Thunderstorm",
    96: "Thunderstorm with Slight Hail",
    99: "Thunderstorm with Heavy Hail",
}


def weather_code_label(code: int | None) -> str:
    """Display label for a WMO code."""
    if code is None:
        return UNKNOWN_CONDITION_LABEL
    return WMO_CODE_MAP.get(int(code), UNKNOWN_CONDITION_LABEL)


def classify_weather_code(code: int | None) -> ForecastCondition:
    """Map a WMO code onto the calculator's condition categories.

    A missing code is treated as clear sky. Fog counts as overcast, and
    drizzle, rain, snow and thunderstorms all count as rainy.
    """
    if code is None:
        return ForecastCondition.SUNNY

    code = int(code)
    if code == 0:
        return ForecastCondition.SUNNY
    if code in (1, 2):
        return ForecastCondition.PARTLY_CLOUDY
    if code == 3:
        return ForecastCondition.CLOUDY
    if code in (45, 48):
        return ForecastCondition.OVERCAST
    if 51 <= code <= 82 or 95 <= code <= 99:
        return ForecastCondition.RAINY
    return ForecastCondition.CLOUDY
