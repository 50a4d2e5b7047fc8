"""Schema validation for untyped preference payloads.

Everything read from a preference or storage backend is treated as unknown
until it passes through here. Validation never raises and never mutates its
input; failures come back as a human-readable reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from nemoprefs.core.providers.types import PrefObject, Provider, ProvidersConfig

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class Validated(Generic[ModelT]):
    """Outcome of a validation: either ``value`` or ``reason`` is set."""

    value: Optional[ModelT] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def format_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into ``path: message`` pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or str(exc)


def _validate(model: Type[ModelT], raw: Any) -> Validated[ModelT]:
    try:
        return Validated(value=model.model_validate(raw))
    except ValidationError as exc:
        return Validated(reason=format_validation_error(exc))


def validate_provider(raw: Any) -> Validated[Provider]:
    return _validate(Provider, raw)


def validate_providers_config(raw: Any) -> Validated[ProvidersConfig]:
    """Validate a full ``{"defaultProviderId", "providers"}`` payload."""
    return _validate(ProvidersConfig, raw)


def validate_pref_object(raw: Any) -> Validated[PrefObject]:
    return _validate(PrefObject, raw)
