"""Built-in and development-only provider factories."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

from nemoprefs.core.config import DEFAULT_PRODUCT, RuntimeSettings
from nemoprefs.core.providers.types import (
    ModelConfig,
    Provider,
    ProviderCapabilities,
    ProviderType,
)
from nemoprefs.core.providers.validation import validate_provider
from nemoprefs.utils.log import get_logger

logger = get_logger()

DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_OPENAI_COMPATIBLE_MODEL = "llama-3.1-8b-instruct"
DEFAULT_ANTHROPIC_MODEL = "claude-3-5-sonnet-latest"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_OLLAMA_MODEL = "qwen3:4b"
DEFAULT_OPENROUTER_MODEL = "openai/gpt-4o"
DEFAULT_CUSTOM_MODEL = "custom-model"
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
MOCK_API_KEY = "mock-key"

# Type hints accepted from MOCK_PROVIDER_TYPE besides the enum values.
_MOCK_TYPE_ALIASES = {
    "nemo": ProviderType.BUILTIN.value,
    "gemini": ProviderType.GOOGLE_GEMINI.value,
    "openai-compatible": ProviderType.OPENAI_COMPATIBLE.value,
}


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_default_provider(product: str = DEFAULT_PRODUCT) -> Provider:
    """Synthesize the zero-configuration built-in provider.

    Pure and infallible: no credentials, no base URL, fresh timestamps.
    """
    timestamp = utc_timestamp()
    return Provider(
        id=product,
        name=product[:1].upper() + product[1:],
        type=ProviderType.BUILTIN,
        is_default=True,
        is_built_in=True,
        created_at=timestamp,
        updated_at=timestamp,
    )


@dataclass(frozen=True)
class MockCatalogEntry:
    """Representative settings for one provider type."""

    provider_type: ProviderType
    name: str
    model_id: str
    context_window: int
    supports_images: bool
    base_url: Optional[str] = None
    api_key_env: Optional[str] = None
    requires_api_key: bool = True
    temperature: float = 0.7

    @property
    def provider_id(self) -> str:
        return f"mock_{self.provider_type.value}"


MOCK_CATALOG: Dict[str, MockCatalogEntry] = {
    entry.provider_type.value: entry
    for entry in (
        MockCatalogEntry(
            provider_type=ProviderType.OPENAI,
            name="Mock OpenAI",
            model_id=DEFAULT_OPENAI_MODEL,
            base_url="https://api.openai.com/v1",
            api_key_env="OPENAI_API_KEY",
            supports_images=True,
            context_window=128000,
        ),
        MockCatalogEntry(
            provider_type=ProviderType.OPENAI_COMPATIBLE,
            name="Mock OpenAI Compatible",
            model_id=DEFAULT_OPENAI_COMPATIBLE_MODEL,
            base_url="http://localhost:8000/v1",
            api_key_env="OPENAI_COMPATIBLE_API_KEY",
            supports_images=False,
            context_window=8192,
        ),
        MockCatalogEntry(
            provider_type=ProviderType.ANTHROPIC,
            name="Mock Anthropic",
            model_id=DEFAULT_ANTHROPIC_MODEL,
            base_url="https://api.anthropic.com",
            api_key_env="ANTHROPIC_API_KEY",
            supports_images=True,
            context_window=200000,
        ),
        MockCatalogEntry(
            provider_type=ProviderType.GOOGLE_GEMINI,
            name="Mock Gemini",
            model_id=DEFAULT_GEMINI_MODEL,
            api_key_env="GOOGLE_API_KEY",
            supports_images=True,
            context_window=1000000,
        ),
        MockCatalogEntry(
            provider_type=ProviderType.OLLAMA,
            name="Mock Ollama",
            model_id=DEFAULT_OLLAMA_MODEL,
            base_url=DEFAULT_OLLAMA_BASE_URL,
            requires_api_key=False,
            supports_images=False,
            context_window=4096,
        ),
        MockCatalogEntry(
            provider_type=ProviderType.OPENROUTER,
            name="Mock OpenRouter",
            model_id=DEFAULT_OPENROUTER_MODEL,
            base_url="https://openrouter.ai/api/v1",
            api_key_env="OPENROUTER_API_KEY",
            supports_images=True,
            context_window=128000,
        ),
        MockCatalogEntry(
            provider_type=ProviderType.CUSTOM,
            name="Mock Custom",
            model_id=DEFAULT_CUSTOM_MODEL,
            base_url="http://localhost:8080/v1",
            supports_images=False,
            context_window=8192,
        ),
    )
}


def normalize_mock_type(type_hint: Optional[str]) -> str:
    """Map an environment type hint onto a catalog key (``builtin`` when unset)."""
    if not type_hint:
        return ProviderType.BUILTIN.value
    normalized = type_hint.strip().lower()
    return _MOCK_TYPE_ALIASES.get(normalized, normalized)


class MockProviderFactory:
    """Builds synthetic providers for development runs.

    Every entry point refuses (returns ``None`` and logs a warning) unless
    the settings carry an explicit development-mode switch.
    """

    def __init__(
        self,
        settings: RuntimeSettings,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.settings = settings
        self._environ = environ

    @property
    def enabled(self) -> bool:
        return self.settings.development_mode

    def _refuse_unless_enabled(self, action: str) -> bool:
        if self.enabled:
            return False
        logger.warning(
            "[mock_provider] %s is only available in development mode",
            action,
        )
        return True

    def _env(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        environ = os.environ if self._environ is None else self._environ
        return environ.get(name) or None

    def from_catalog(self, type_hint: Optional[str] = None) -> Optional[Provider]:
        """Return the catalog provider for ``type_hint`` (or the configured hint)."""
        if self._refuse_unless_enabled("Mock catalog lookup"):
            return None

        key = normalize_mock_type(type_hint if type_hint is not None else self.settings.mock_provider_type)
        entry = MOCK_CATALOG.get(key)
        if entry is None:
            if key != ProviderType.BUILTIN.value:
                logger.warning(
                    "[mock_provider] Unknown mock provider type; using built-in provider",
                    extra={"mock_provider_type": key},
                )
            return build_default_provider(self.settings.product)
        return self._build_entry(entry)

    def _build_entry(self, entry: MockCatalogEntry) -> Provider:
        timestamp = utc_timestamp()
        api_key = None
        if entry.requires_api_key:
            api_key = self._env(entry.api_key_env) or MOCK_API_KEY
        return Provider(
            id=entry.provider_id,
            name=entry.name,
            type=entry.provider_type,
            is_default=True,
            is_built_in=False,
            base_url=entry.base_url,
            api_key=api_key,
            model_id=entry.model_id,
            capabilities=ProviderCapabilities(supports_images=entry.supports_images),
            model_settings=ModelConfig(
                context_window=entry.context_window,
                temperature=entry.temperature,
            ),
            created_at=timestamp,
            updated_at=timestamp,
        )

    def from_override(self, override: Union[Provider, Mapping[str, Any]]) -> Optional[Provider]:
        """Merge a partial provider over the built-in default.

        Keys may use either the persisted camelCase spelling or attribute
        names. Raises ``ValueError`` when the merged provider is invalid.
        """
        if self._refuse_unless_enabled("setMockProvider"):
            return None

        if isinstance(override, Provider):
            return override.model_copy()

        updates = _to_field_names(override)
        base = build_default_provider(self.settings.product).model_dump()
        provider_type = updates.get("type", base["type"])
        if provider_type not in (ProviderType.BUILTIN, ProviderType.BUILTIN.value, "nemo"):
            # A non-builtin type cannot inherit the built-in identity.
            base["is_built_in"] = False
            base["id"] = f"mock_{getattr(provider_type, 'value', provider_type)}"
        validated = validate_provider({**base, **updates})
        if not validated.ok:
            raise ValueError(f"Invalid mock provider: {validated.reason}")
        return validated.value


def _to_field_names(override: Mapping[str, Any]) -> Dict[str, Any]:
    by_alias = {
        (field.alias or name): name for name, field in Provider.model_fields.items()
    }
    updates: Dict[str, Any] = {}
    unknown = []
    for key, value in override.items():
        if key in Provider.model_fields:
            updates[key] = value
        elif key in by_alias:
            updates[by_alias[key]] = value
        else:
            unknown.append(str(key))
    if unknown:
        raise ValueError(f"Unknown provider fields: {', '.join(sorted(unknown))}")
    return updates
