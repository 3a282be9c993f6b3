"""Mapping of provider fields onto the display config, per unit system."""

from typing import Any

METRIC = "metric"
IMPERIAL = "imperial"

# config field -> (metric source, imperial source)
UNIT_FIELDS: dict[str, tuple[str, str]] = {
    "temp": ("temp_c", "temp_f"),
    "wind_chill": ("feelslike_c", "feelslike_f"),
    "wind_speed": ("wind_kph", "wind_mph"),
    "precipitation": ("precip_mm", "precip_in"),
    "visibility": ("vis_km", "vis_miles"),
}

# config field -> source, same in both systems
COMMON_FIELDS: dict[str, str] = {
    "wind_dir": "wind_dir",
    "wind_degree": "wind_degree",
    "humidity": "humidity",
}


def apply_weather(current: dict[str, Any], unit_system: str) -> dict[str, Any]:
    """Config fields for a provider ``current`` block.

    Anything other than "metric" is treated as imperial.

    Returns:
        snake_case GlobalConfig fields; missing source values map to None
    """
    index = 0 if unit_system == METRIC else 1
    fields: dict[str, Any] = {
        target: current.get(sources[index]) for target, sources in UNIT_FIELDS.items()
    }
    fields.update({target: current.get(source) for target, source in COMMON_FIELDS.items()})

    condition = current.get("condition")
    fields["condition"] = condition.get("text") if isinstance(condition, dict) else condition
    return fields
