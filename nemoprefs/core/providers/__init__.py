"""Provider settings schema, validation and factories."""

from nemoprefs.core.providers.types import (
    ModelConfig,
    PrefObject,
    Provider,
    ProviderCapabilities,
    ProvidersConfig,
    ProviderType,
)
from nemoprefs.core.providers.validation import (
    Validated,
    validate_provider,
    validate_providers_config,
)

__all__ = [
    "ModelConfig",
    "PrefObject",
    "Provider",
    "ProviderCapabilities",
    "ProvidersConfig",
    "ProviderType",
    "Validated",
    "validate_provider",
    "validate_providers_config",
]
