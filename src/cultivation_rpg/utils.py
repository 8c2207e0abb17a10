"""Shared utility functions for the cultivation RPG."""
from __future__ import annotations

import json
import re

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def safe_json(value, default=None):
    """Deserialize a JSON string if needed, or return default.

    Handles the common pattern where SQLite columns may contain JSON strings,
    Python objects, or NULL values.
    """
    if value is None:
        return default if default is not None else {}
    if isinstance(value, str):
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return default if default is not None else {}
    return value


def to_key(name: str) -> str:
    """Turn a display name into a snake_case catalog key.

    "Spirit-Eye Flower" -> "spirit_eye_flower", "GoldenDantian Fruit" -> "golden_dantian_fruit".
    """
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", name.strip())
    words = [w.lower() for w in _NON_ALNUM.split(spaced) if w]
    return "_".join(words)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
