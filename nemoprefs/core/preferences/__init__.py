"""Preference store access: host capabilities, sources and the adapter."""

from nemoprefs.core.preferences.hosts import (
    InMemoryKeyValueHost,
    InMemoryPreferenceHost,
    JsonKeyValueFile,
    JsonPreferencesFile,
    KeyValueHost,
    PreferenceHost,
)
from nemoprefs.core.preferences.store import LookupResult, PreferenceStoreAdapter

__all__ = [
    "InMemoryKeyValueHost",
    "InMemoryPreferenceHost",
    "JsonKeyValueFile",
    "JsonPreferencesFile",
    "KeyValueHost",
    "LookupResult",
    "PreferenceHost",
    "PreferenceStoreAdapter",
]
