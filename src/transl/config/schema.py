"""
Pydantic models for transl configuration.

Defines the configuration schemas using Pydantic v2 for validation,
defaults, and serialization.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Strategy = Literal["independent", "unified"]


class TranslatorConfig(BaseModel):
    """Language negotiation settings.

    strategy:
    - "independent": every localized field is negotiated on its own, so a
      record may mix languages when a preferred language covers only some
      fields.
    - "unified": one language is negotiated for the whole record from the
      union of its available languages, and every field is read at it.
    """

    default_language: str = Field(
        default="en",
        description="Fallback language code, used when no preference matches.",
    )
    strategy: Strategy = "independent"
    strict: bool = Field(
        default=False,
        description=(
            "If True, translating a record type without localized fields or "
            "translations field raises UnsupportedShapeError instead of being a no-op."
        ),
    )

    model_config = {"extra": "forbid"}

    @field_validator("default_language", mode="before")
    @classmethod
    def _coerce_yaml_bool(cls, v: object) -> object:
        """YAML 1.1 parses an unquoted `no` (Norwegian) as False. Convert it back."""
        if v is False:
            return "no"
        return v

    @field_validator("default_language")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("default_language cannot be empty")
        return v


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "warn", "error"] = "warn"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Complete configuration.

    This is the root of the configuration tree and the entry point for
    validation.
    """

    translator: TranslatorConfig = Field(default_factory=TranslatorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "forbid"}
