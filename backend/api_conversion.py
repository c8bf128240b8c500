"""Unified API conversion system - snake_case to camelCase."""

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def snake_to_camel(snake_str: str) -> str:
    """Convert snake_case to camelCase."""
    components = snake_str.split("_")
    return components[0] + "".join(word.capitalize() for word in components[1:])


def convert_keys_to_camel_case(data: Any) -> Any:
    """Recursively convert all dict keys from snake_case to camelCase.

    Dataclass instances become dicts, enums become their values and tuples
    become lists, so the result can be returned as JSON directly.
    """
    if isinstance(data, dict):
        return {
            snake_to_camel(key): convert_keys_to_camel_case(value)
            for key, value in data.items()
        }
    if isinstance(data, list | tuple):
        return [convert_keys_to_camel_case(item) for item in data]
    if is_dataclass(data) and not isinstance(data, type):
        # Shallow field walk keeps nested enums intact for the branch below
        return convert_keys_to_camel_case(
            {f.name: getattr(data, f.name) for f in fields(data)}
        )
    if isinstance(data, Enum):
        return data.value
    return data
