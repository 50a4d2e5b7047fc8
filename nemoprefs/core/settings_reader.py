"""Resolve which provider configuration is authoritative.

The reader asks the preference store for the persisted providers config,
validates it, and degrades to a mock (development only) or the built-in
provider when anything along the way is missing or malformed. Neither read
operation raises; why a fallback was taken is only visible in the logs.
"""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Optional, Union

from nemoprefs.core.config import RuntimeSettings, load_runtime_settings
from nemoprefs.core.preferences.hosts import (
    JsonKeyValueFile,
    JsonPreferencesFile,
    KeyValueHost,
    PreferenceHost,
)
from nemoprefs.core.preferences.store import LookupResult, PreferenceStoreAdapter
from nemoprefs.core.providers.defaults import MockProviderFactory, build_default_provider
from nemoprefs.core.providers.types import Provider, ProvidersConfig
from nemoprefs.core.providers.validation import validate_providers_config
from nemoprefs.utils.log import get_logger

logger = get_logger()


class ProviderSettingsReader:
    """Reads provider settings with deterministic fallbacks."""

    # Process-wide development override; only set_mock_provider writes it.
    _mock_provider: ClassVar[Optional[Provider]] = None

    def __init__(
        self,
        store: PreferenceStoreAdapter,
        settings: Optional[RuntimeSettings] = None,
        mock_factory: Optional[MockProviderFactory] = None,
    ) -> None:
        self.store = store
        self.settings = settings or load_runtime_settings()
        self.mock_factory = mock_factory or MockProviderFactory(self.settings)

    @classmethod
    def from_hosts(
        cls,
        settings: RuntimeSettings,
        preference_host: Optional[PreferenceHost] = None,
        storage_host: Optional[KeyValueHost] = None,
    ) -> "ProviderSettingsReader":
        store = PreferenceStoreAdapter.from_hosts(
            settings.preference_key,
            preference_host=preference_host,
            storage_host=storage_host,
        )
        return cls(store, settings)

    @classmethod
    def from_settings(cls, settings: RuntimeSettings) -> "ProviderSettingsReader":
        """Reader over the on-disk Preferences and storage files named in ``settings``."""
        preference_host = (
            JsonPreferencesFile(settings.preferences_path)
            if settings.preferences_path.exists()
            else None
        )
        return cls.from_hosts(
            settings,
            preference_host=preference_host,
            storage_host=JsonKeyValueFile(settings.storage_path),
        )

    # ------------------------------------------------------------------
    # Mock override
    # ------------------------------------------------------------------

    def set_mock_provider(self, override: Union[Provider, Mapping[str, Any]]) -> bool:
        """Install a development mock merged over the built-in provider.

        Outside development mode this is a logged no-op and returns False.
        """
        provider = self.mock_factory.from_override(override)
        if provider is None:
            return False
        ProviderSettingsReader._mock_provider = provider
        logger.info(
            "[settings_reader] Mock provider set: %s",
            provider.name or provider.type.value,
        )
        return True

    def get_mock_provider(self) -> Optional[Provider]:
        """Current mock: the override if one was set, else the catalog entry."""
        if not self.settings.development_mode:
            return None
        override = ProviderSettingsReader._mock_provider
        if override is not None:
            return override.model_copy()
        return self.mock_factory.from_catalog()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_default_provider(self) -> Provider:
        """Return the provider to use; never raises."""
        try:
            logger.debug("[settings_reader] Reading provider settings from preferences")
            result = await self.store.read_default_provider()
            provider = self._resolve_default_provider(result)
            if provider is not None:
                logger.info(
                    "[settings_reader] Provider loaded: %s (%s)",
                    provider.name,
                    provider.type.value,
                    extra={"source": result.source},
                )
                return provider
        except Exception as exc:
            logger.error(
                "[settings_reader] Failed to read settings: %s: %s",
                type(exc).__name__,
                exc,
            )

        return self._fallback_provider()

    async def read_all_providers(self) -> ProvidersConfig:
        """Return every configured provider with ``is_default`` recomputed; never raises."""
        try:
            result = await self.store.read_providers_config()
            config = self._resolve_providers_config(result)
            if config is not None:
                logger.info(
                    "[settings_reader] Loaded %d providers",
                    len(config.providers),
                    extra={"source": result.source, "default_provider_id": config.default_provider_id},
                )
                return config
        except Exception as exc:
            logger.error(
                "[settings_reader] Failed to read providers: %s: %s",
                type(exc).__name__,
                exc,
            )

        return self.default_config()

    def default_provider(self) -> Provider:
        return build_default_provider(self.settings.product)

    def default_config(self) -> ProvidersConfig:
        """Single-provider config holding only the built-in provider."""
        provider = self.default_provider()
        return ProvidersConfig(default_provider_id=provider.id, providers=[provider])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validated_config(self, result: LookupResult) -> Optional[ProvidersConfig]:
        if not result.found:
            return None
        validated = validate_providers_config(result.payload)
        if not validated.ok:
            logger.warning(
                "[settings_reader] Failed to parse providers config: %s",
                validated.reason,
                extra={"source": result.source},
            )
            return None
        return validated.value

    def _resolve_default_provider(self, result: LookupResult) -> Optional[Provider]:
        config = self._validated_config(result)
        if config is None:
            return None
        config = config.with_default(config.default_provider_id)
        provider = config.default_provider
        if provider is None:
            logger.warning(
                "[settings_reader] Default provider not found in config",
                extra={"default_provider_id": config.default_provider_id},
            )
        return provider

    def _resolve_providers_config(self, result: LookupResult) -> Optional[ProvidersConfig]:
        config = self._validated_config(result)
        if config is None:
            return None

        built_in = config.built_in_provider
        if built_in is None:
            built_in = self.default_provider()
            if config.find(built_in.id) is not None:
                # A user provider holds the reserved id; pick a free one.
                base_id = f"{built_in.id}_builtin"
                candidate, suffix = base_id, 2
                while config.find(candidate) is not None:
                    candidate, suffix = f"{base_id}_{suffix}", suffix + 1
                built_in = built_in.model_copy(update={"id": candidate})
            config = config.model_copy(update={"providers": [built_in, *config.providers]})
            logger.debug(
                "[settings_reader] Added missing built-in provider",
                extra={"provider_id": built_in.id},
            )

        default_id = config.default_provider_id
        if config.find(default_id) is None:
            logger.warning(
                "[settings_reader] Default provider not found in config; using %s",
                built_in.id,
                extra={"default_provider_id": default_id},
            )
            default_id = built_in.id
        return config.with_default(default_id)

    def _fallback_provider(self) -> Provider:
        mock = self.get_mock_provider()
        if mock is not None:
            logger.warning("[settings_reader] Using mock provider: %s", mock.name)
            return mock
        logger.info("[settings_reader] Using default built-in provider")
        return self.default_provider()


# Global instance, built lazily from the environment.
_settings_reader: Optional[ProviderSettingsReader] = None


def get_settings_reader() -> ProviderSettingsReader:
    global _settings_reader
    if _settings_reader is None:
        _settings_reader = ProviderSettingsReader.from_settings(load_runtime_settings())
    return _settings_reader


async def read_default_provider() -> Provider:
    """Convenience wrapper around the global reader."""
    return await get_settings_reader().read_default_provider()


async def read_all_providers() -> ProvidersConfig:
    """Convenience wrapper around the global reader."""
    return await get_settings_reader().read_all_providers()


def set_mock_provider(override: Union[Provider, Mapping[str, Any]]) -> bool:
    """Set the development mock on the global reader."""
    return get_settings_reader().set_mock_provider(override)


def reset_mock_provider_for_testing() -> None:
    """Forget any mock override. Process restart does this in production."""
    ProviderSettingsReader._mock_provider = None
