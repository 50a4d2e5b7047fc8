"""Lightweight parsing helpers for permissive type coercion."""

from __future__ import annotations

import math


def parse_boolish(value: object, default: bool = False) -> bool:
    """Parse a truthy/falsey value from common representations."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default


def coerce_int_text(value: object) -> object:
    """Turn a textual integer (e.g. ``"4096"``) into an ``int``.

    Non-string values pass through untouched so the schema can judge them.
    Text that is not a whole number raises ``ValueError``.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        raise ValueError("empty string is not a number")
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"{value!r} is not a whole number") from None


def coerce_float_text(value: object) -> object:
    """Turn a textual numeral (e.g. ``"1.5"``) into a finite ``float``."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        raise ValueError("empty string is not a number")
    try:
        parsed = float(text)
    except ValueError:
        raise ValueError(f"{value!r} is not a number") from None
    if not math.isfinite(parsed):
        raise ValueError(f"{value!r} is not a finite number")
    return parsed
