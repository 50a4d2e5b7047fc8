"""Schema for persisted provider settings.

The JSON written by the settings UI uses camelCase keys; the models expose
snake_case attributes and accept either spelling on input. Numeric tuning
fields may arrive as text from UI controls and are coerced before their
type and range checks run.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from nemoprefs.utils.coerce import coerce_float_text, coerce_int_text


class ProviderType(str, Enum):
    """Provider backends a settings entry can point at."""

    BUILTIN = "builtin"
    OPENAI = "openai"
    OPENAI_COMPATIBLE = "openai_compatible"
    ANTHROPIC = "anthropic"
    GOOGLE_GEMINI = "google_gemini"
    OLLAMA = "ollama"
    OPENROUTER = "openrouter"
    CUSTOM = "custom"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ProviderType"]:
        """Accept the product name that older builds stored for the built-in provider."""
        if value == "nemo":
            return cls.BUILTIN
        return None


class _SettingsModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    def to_payload(self) -> Dict[str, Any]:
        """Dump to the persisted JSON shape (camelCase, unset optionals omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProviderCapabilities(_SettingsModel):
    """Optional feature flags of a provider."""

    supports_images: Optional[StrictBool] = None


class ModelConfig(_SettingsModel):
    """Per-provider model tuning."""

    context_window: Optional[int] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2, allow_inf_nan=False)

    @field_validator("context_window", mode="before")
    @classmethod
    def _coerce_context_window(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("contextWindow must be a number, not a boolean")
        return coerce_int_text(value)

    @field_validator("temperature", mode="before")
    @classmethod
    def _coerce_temperature(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("temperature must be a number, not a boolean")
        return coerce_float_text(value)


class Provider(_SettingsModel):
    """One configured provider instance."""

    id: str
    name: str
    type: ProviderType
    is_default: StrictBool
    is_built_in: StrictBool
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    model_id: Optional[str] = None
    capabilities: Optional[ProviderCapabilities] = None
    model_settings: Optional[ModelConfig] = Field(default=None, alias="modelConfig")
    created_at: str
    updated_at: str


class ProvidersConfig(_SettingsModel):
    """All configured providers plus the id of the default one."""

    default_provider_id: str
    providers: List[Provider]

    @model_validator(mode="after")
    def _check_collection(self) -> "ProvidersConfig":
        seen: set[str] = set()
        duplicates: list[str] = []
        for provider in self.providers:
            if provider.id in seen and provider.id not in duplicates:
                duplicates.append(provider.id)
            seen.add(provider.id)
        if duplicates:
            raise ValueError(f"duplicate provider ids: {', '.join(duplicates)}")

        built_in = [provider.id for provider in self.providers if provider.is_built_in]
        if len(built_in) > 1:
            raise ValueError(f"more than one built-in provider: {', '.join(built_in)}")
        return self

    def find(self, provider_id: str) -> Optional[Provider]:
        for provider in self.providers:
            if provider.id == provider_id:
                return provider
        return None

    @property
    def default_provider(self) -> Optional[Provider]:
        return self.find(self.default_provider_id)

    @property
    def built_in_provider(self) -> Optional[Provider]:
        for provider in self.providers:
            if provider.is_built_in:
                return provider
        return None

    def with_default(self, provider_id: str) -> "ProvidersConfig":
        """Return a copy whose ``is_default`` flags are derived from ``provider_id``."""
        providers = [
            provider.model_copy(update={"is_default": provider.id == provider_id})
            for provider in self.providers
        ]
        return self.model_copy(update={"default_provider_id": provider_id, "providers": providers})


class PrefObject(BaseModel):
    """Envelope returned by the host preference API."""

    key: str
    type: str
    value: Any = None
