"""Host capabilities the preference store reads from.

Both capabilities are callback based, like the browser APIs they stand in
for. The in-memory hosts back embedding and tests; the JSON file hosts let
the CLI inspect a profile directory on disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

from nemoprefs.utils.json_utils import safe_parse_json
from nemoprefs.utils.log import get_logger

logger = get_logger()

PrefCallback = Callable[[Optional[Dict[str, Any]]], None]
StorageCallback = Callable[[Dict[str, Any]], None]


@runtime_checkable
class PreferenceHost(Protocol):
    """Structured preference API keyed by preference name."""

    last_error: Optional[str]

    def get_pref(self, name: str, callback: PrefCallback) -> None: ...


@runtime_checkable
class KeyValueHost(Protocol):
    """Generic key-value storage used when preferences are unavailable."""

    def get(self, key: str, callback: StorageCallback) -> None: ...


def _pref_envelope(name: str, value: Any) -> Dict[str, Any]:
    pref_type = "string" if isinstance(value, str) else type(value).__name__
    return {"key": name, "type": pref_type, "value": value}


class InMemoryPreferenceHost:
    """Preference host over a plain dict; ``error`` simulates a last-error signal."""

    def __init__(self, prefs: Optional[Mapping[str, Any]] = None, error: Optional[str] = None) -> None:
        self.prefs: Dict[str, Any] = dict(prefs or {})
        self.error = error
        self.last_error: Optional[str] = None

    def get_pref(self, name: str, callback: PrefCallback) -> None:
        self.last_error = self.error
        if self.error or name not in self.prefs:
            callback(None)
            return
        callback(_pref_envelope(name, self.prefs[name]))


class InMemoryKeyValueHost:
    def __init__(self, items: Optional[Mapping[str, Any]] = None) -> None:
        self.items: Dict[str, Any] = dict(items or {})

    def get(self, key: str, callback: StorageCallback) -> None:
        callback({key: self.items[key]} if key in self.items else {})


class JsonPreferencesFile:
    """Chromium-style ``Preferences`` file.

    Dotted names are looked up as nested objects (``{"nemo": {"providers": ...}}``)
    with a flat ``{"nemo.providers": ...}`` entry as a fallback.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.last_error: Optional[str] = None

    def get_pref(self, name: str, callback: PrefCallback) -> None:
        self.last_error = None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self.last_error = f"{type(exc).__name__}: {exc}"
            callback(None)
            return
        if not isinstance(data, dict):
            self.last_error = "preferences file does not contain a JSON object"
            callback(None)
            return

        found, value = _lookup_dotted(data, name)
        if not found and name in data:
            found, value = True, data[name]
        callback(_pref_envelope(name, value) if found else None)


def _lookup_dotted(data: Dict[str, Any], name: str) -> tuple[bool, Any]:
    node: Any = data
    for part in name.split("."):
        if not isinstance(node, dict) or part not in node:
            return False, None
        node = node[part]
    return True, node


class JsonKeyValueFile:
    """Flat JSON object on disk; a missing or unreadable file reads as empty."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def get(self, key: str, callback: StorageCallback) -> None:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            callback({})
            return
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug(
                "[hosts] Failed to read storage file: %s: %s",
                type(exc).__name__,
                exc,
                extra={"path": str(self.path)},
            )
            callback({})
            return

        data = safe_parse_json(text)
        if not isinstance(data, dict) or key not in data:
            callback({})
            return
        callback({key: data[key]})
