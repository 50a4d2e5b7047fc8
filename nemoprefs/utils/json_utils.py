"""JSON helper utilities for Nemoprefs."""

from __future__ import annotations

import json
from typing import Any, Optional

from nemoprefs.utils.log import get_logger


logger = get_logger()


def safe_parse_json(json_text: Optional[str], log_error: bool = True) -> Optional[Any]:
    """Best-effort JSON.parse wrapper that returns None on failure."""
    if not json_text:
        return None
    try:
        return json.loads(json_text)
    except (json.JSONDecodeError, TypeError, ValueError) as exc:
        if log_error:
            logger.debug(
                "[json_utils] Failed to parse JSON: %s: %s",
                type(exc).__name__,
                exc,
                extra={"length": len(json_text)},
            )
        return None


def parse_json_payload(raw: Any) -> Any:
    """Decode ``raw`` when it is JSON text; hand other values back unchanged.

    Raises ``ValueError`` (``json.JSONDecodeError`` included) for text that is
    not valid JSON, so callers can tell corruption apart from absence.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        return json.loads(raw)
    return raw
