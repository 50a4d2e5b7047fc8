"""Failure kinds met while looking up persisted provider settings.

None of these escape the settings reader; each carries the log level used
to report it so absence and corruption stay distinguishable in the logs.
"""

from __future__ import annotations

import logging
from typing import Optional


class SettingsResolutionError(Exception):
    """Lookup failure with a stable error code."""

    def __init__(
        self,
        error_code: str,
        message: str,
        *,
        source: Optional[str] = None,
        log_level: int = logging.WARNING,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.source = source
        self.log_level = log_level


class SourceUnavailableError(SettingsResolutionError):
    """The host does not provide the capability at all."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__("source_unavailable", message, source=source, log_level=logging.DEBUG)


class PreferenceNotFoundError(SettingsResolutionError):
    """The source answered but holds nothing under the key."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__("not_found", message, source=source, log_level=logging.INFO)


class MalformedPayloadError(SettingsResolutionError):
    """Stored value is not JSON or does not satisfy the schema."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__("malformed_payload", message, source=source, log_level=logging.WARNING)


class HostError(SettingsResolutionError):
    """The host capability reported an internal error."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__("host_error", message, source=source, log_level=logging.ERROR)
