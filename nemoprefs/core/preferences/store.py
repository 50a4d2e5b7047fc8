"""Read-only access to persisted provider settings.

Sources are tried in order. Each attempt either yields a parsed payload or
raises a ``SettingsResolutionError``; the adapter records the failure and
moves on to the next source. Payloads are returned unvalidated.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Protocol, Sequence, Tuple

from nemoprefs.core.preferences.errors import (
    HostError,
    MalformedPayloadError,
    PreferenceNotFoundError,
    SettingsResolutionError,
    SourceUnavailableError,
)
from nemoprefs.core.preferences.hosts import KeyValueHost, PreferenceHost
from nemoprefs.core.providers.validation import validate_pref_object
from nemoprefs.utils.json_utils import parse_json_payload
from nemoprefs.utils.log import get_logger

logger = get_logger()


async def call_with_callback(func: Callable[..., Any], *args: Any) -> Any:
    """Invoke a callback-style host function and await the value it reports."""
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def _settle(value: Any) -> None:
        if not future.done():
            future.set_result(value)

    def _callback(value: Any = None) -> None:
        # Hosts may answer from another thread.
        loop.call_soon_threadsafe(_settle, value)

    try:
        func(*args, _callback)
    except Exception as exc:
        raise HostError(f"{type(exc).__name__}: {exc}") from exc
    return await future


def _decode(raw: Any, source: str) -> Any:
    try:
        return parse_json_payload(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise MalformedPayloadError(
            f"Stored value is not valid JSON: {exc}", source=source
        ) from exc


class PreferenceSource(Protocol):
    name: str

    async def fetch(self, key: str) -> Any: ...


class HostPreferenceSource:
    """Primary source: the host's structured preference API."""

    name = "preferences"

    def __init__(self, host: Optional[PreferenceHost]) -> None:
        self._host = host

    async def fetch(self, key: str) -> Any:
        get_pref = getattr(self._host, "get_pref", None)
        if not callable(get_pref):
            raise SourceUnavailableError("Preference API is not available", source=self.name)

        pref = await call_with_callback(get_pref, key)
        last_error = getattr(self._host, "last_error", None)
        if last_error:
            raise HostError(f"Failed to read preference: {last_error}", source=self.name)
        if pref is None:
            raise PreferenceNotFoundError("No providers configuration found", source=self.name)

        envelope = validate_pref_object(pref)
        if not envelope.ok:
            raise MalformedPayloadError(
                f"Unexpected preference object: {envelope.reason}", source=self.name
            )
        value = envelope.value.value
        if value is None or value == "":
            raise PreferenceNotFoundError("No providers configuration found", source=self.name)
        return _decode(value, self.name)


class KeyValueStoreSource:
    """Fallback source: generic key-value storage holding JSON text or objects."""

    name = "storage"

    def __init__(self, host: Optional[KeyValueHost]) -> None:
        self._host = host

    async def fetch(self, key: str) -> Any:
        get = getattr(self._host, "get", None)
        if not callable(get):
            raise SourceUnavailableError("Key-value storage is not available", source=self.name)

        stored = await call_with_callback(get, key)
        raw = stored.get(key) if isinstance(stored, Mapping) else None
        if raw is None or raw == "":
            raise PreferenceNotFoundError("No stored providers found", source=self.name)
        return _decode(raw, self.name)


@dataclass(frozen=True)
class LookupResult:
    """Payload from the first source that answered, plus earlier failures."""

    payload: Any = None
    source: Optional[str] = None
    failures: Tuple[SettingsResolutionError, ...] = ()

    @property
    def found(self) -> bool:
        return self.source is not None


class PreferenceStoreAdapter:
    """Uniform read access over an ordered list of preference sources."""

    def __init__(self, key: str, sources: Sequence[PreferenceSource]) -> None:
        self.key = key
        self.sources: List[PreferenceSource] = list(sources)

    @classmethod
    def from_hosts(
        cls,
        key: str,
        preference_host: Optional[PreferenceHost] = None,
        storage_host: Optional[KeyValueHost] = None,
    ) -> "PreferenceStoreAdapter":
        return cls(key, [HostPreferenceSource(preference_host), KeyValueStoreSource(storage_host)])

    async def lookup(self) -> LookupResult:
        failures: List[SettingsResolutionError] = []
        for source in self.sources:
            try:
                payload = await source.fetch(self.key)
            except SettingsResolutionError as exc:
                if exc.source is None:
                    exc.source = source.name
                failures.append(exc)
                logger.log(
                    exc.log_level,
                    "[preference_store] %s: %s",
                    source.name,
                    exc,
                    extra={"key": self.key, "error_code": exc.error_code},
                )
                continue
            logger.debug(
                "[preference_store] Found providers configuration",
                extra={"key": self.key, "source": source.name},
            )
            return LookupResult(payload=payload, source=source.name, failures=tuple(failures))

        return LookupResult(failures=tuple(failures))

    async def read_default_provider(self) -> LookupResult:
        """Payload holding the default provider.

        The default provider lives inside the providers config, so this is the
        same lookup; picking the entry happens after validation.
        """
        return await self.lookup()

    async def read_providers_config(self) -> LookupResult:
        return await self.lookup()
