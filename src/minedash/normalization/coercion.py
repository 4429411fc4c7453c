"""Primitive coercion helpers for loosely-typed webhook values.

Webhook payloads deliver numbers as numbers or numeric strings, and nested
collections as real JSON values or JSON-encoded strings. The helpers below
turn any of those shapes into a predictable Python value and never raise:
malformed input degrades to the supplied fallback.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, List

LOGGER = logging.getLogger(__name__)

# Leading-prefix parsing: trailing garbage after the number is ignored.
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Wrapper objects seen around array payloads, e.g. {"transactions": [...]}.
_ARRAY_WRAPPER_KEYS = ("transactions",)


def coerce_int(value: Any, fallback: int = 0) -> int:
    """Coerce a number or numeric string to ``int``.

    Floats are truncated toward zero. Strings are parsed as base-10 integers
    from their leading digits, so ``"12abc"`` and ``"3.9"`` give ``12`` and
    ``3``. ``None``, booleans, non-finite floats and unparsable strings all
    return ``fallback``.
    """

    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return fallback
        return int(value)
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if match is None:
            return fallback
        return int(match.group(1))
    return fallback


def coerce_float(value: Any, fallback: float = 0.0) -> float:
    """Coerce a number or numeric string to a finite ``float``.

    Same contract as :func:`coerce_int` using floating-point parsing; results
    that are not finite (``nan``, ``inf``) are replaced by ``fallback``.
    """

    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        try:
            result = float(value)
        except OverflowError:
            return fallback
    elif isinstance(value, str):
        match = _FLOAT_PREFIX.match(value)
        if match is None:
            return fallback
        result = float(match.group(1))
    else:
        return fallback
    if not math.isfinite(result):
        return fallback
    return result


def coerce_str(value: Any, fallback: str = "") -> str:
    """Return ``value`` as a string, or ``fallback`` when it is ``None``."""

    if value is None:
        return fallback
    if isinstance(value, str):
        return value
    return str(value)


def coerce_optional_str(value: Any) -> str | None:
    """Return ``value`` as a string, keeping ``None`` and ``""`` as ``None``."""

    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text or None


def coerce_array(value: Any) -> List[Any]:
    """Coerce a list, JSON-encoded list, or ``{"transactions": [...]}`` wrapper to a list.

    Anything else (including malformed JSON) yields an empty list.
    """

    if isinstance(value, list):
        return value
    if isinstance(value, str):
        parsed = _parse_json(value)
        return parsed if isinstance(parsed, list) else []
    if isinstance(value, dict):
        for key in _ARRAY_WRAPPER_KEYS:
            nested = value.get(key)
            if isinstance(nested, list):
                return nested
    return []


def coerce_map(value: Any) -> Dict[str, Any]:
    """Coerce a dict or JSON-encoded object to a dict; anything else yields ``{}``."""

    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        parsed = _parse_json(value)
        return parsed if isinstance(parsed, dict) else {}
    return {}


def coerce_bool(value: Any, alt_value: Any = None) -> bool:
    """Resolve a flag delivered as ``True``, ``"true"``, or ``True`` on an alternate field."""

    return value is True or value == "true" or alt_value is True


def coerce_percentage(value: Any) -> str:
    """Render ``12.5``, ``"12.5"`` or ``"12.5%"`` as ``"12.50%"``; unparsable input gives ``"0.00%"``."""

    if isinstance(value, str):
        value = value.replace("%", "").strip()
    return f"{coerce_float(value, 0.0):.2f}%"


def _parse_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, RecursionError):
        LOGGER.debug("Discarding malformed JSON payload (%d chars)", len(raw))
        return None


__all__ = [
    "coerce_array",
    "coerce_bool",
    "coerce_float",
    "coerce_int",
    "coerce_map",
    "coerce_optional_str",
    "coerce_percentage",
    "coerce_str",
]
