"""Runtime configuration for Nemoprefs.

This module reads the environment-controlled switches that shape provider
resolution: the product name behind the preference key, the development-mode
gate for mock providers, and where the file-backed host stores live.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nemoprefs.utils.coerce import parse_boolish
from nemoprefs.utils.log import get_logger


logger = get_logger()

DEFAULT_PRODUCT = "nemo"
PROVIDERS_PREFERENCE_SUFFIX = "providers"


def _default_home() -> Path:
    return Path.home() / f".{DEFAULT_PRODUCT}"


class RuntimeSettings(BaseModel):
    """Settings that decide where provider configuration is looked up."""

    model_config = ConfigDict(frozen=True)

    product: str = DEFAULT_PRODUCT
    # Mock providers are only ever served when this is explicitly switched on.
    development_mode: bool = False
    mock_provider_type: Optional[str] = None
    preferences_path: Path = Field(default_factory=lambda: _default_home() / "Preferences")
    storage_path: Path = Field(default_factory=lambda: _default_home() / "storage.json")
    log_dir: Optional[Path] = None

    @field_validator("product")
    @classmethod
    def _product_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("product name must not be empty")
        return value

    @field_validator("mock_provider_type")
    @classmethod
    def _normalize_mock_type(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        normalized = value.strip().lower()
        return normalized or None

    @property
    def preference_key(self) -> str:
        """Well-known key shared by the preference store and the fallback store."""
        return f"{self.product}.{PROVIDERS_PREFERENCE_SUFFIX}"


def load_runtime_settings(environ: Optional[Mapping[str, str]] = None) -> RuntimeSettings:
    """Build settings from environment variables, falling back to defaults."""
    env = os.environ if environ is None else environ
    values: dict = {
        "development_mode": parse_boolish(env.get("NEMO_DEV_MODE"), default=False),
        "mock_provider_type": env.get("MOCK_PROVIDER_TYPE"),
    }
    if env.get("NEMO_PRODUCT", "").strip():
        values["product"] = env["NEMO_PRODUCT"]
    if env.get("NEMO_PREFERENCES_FILE"):
        values["preferences_path"] = Path(env["NEMO_PREFERENCES_FILE"]).expanduser()
    if env.get("NEMO_STORAGE_FILE"):
        values["storage_path"] = Path(env["NEMO_STORAGE_FILE"]).expanduser()
    if env.get("NEMO_LOG_DIR"):
        values["log_dir"] = Path(env["NEMO_LOG_DIR"]).expanduser()

    settings = RuntimeSettings(**values)
    logger.debug(
        "[config] Loaded runtime settings",
        extra={
            "product": settings.product,
            "development_mode": settings.development_mode,
            "mock_provider_type": settings.mock_provider_type,
        },
    )
    return settings
