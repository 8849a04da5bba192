"""Pydantic contracts for configuration writes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lingo_bolt.bot.locales import LocaleResolver


_LOCALES = LocaleResolver()


def canonical_locale(value: str | None) -> str | None:
    if value is None:
        return None
    code = _LOCALES.resolve(value)
    if not _LOCALES.is_supported(code):
        raise ValueError(f"unsupported_locale:{value}")
    return code


class InstallationSettingsUpdate(BaseModel):
    """Partial update of installation defaults; omitted fields stay unchanged."""

    model_config = ConfigDict(extra="forbid")

    locale: str | None = Field(default=None, min_length=1, max_length=10)
    auto_translate: bool | None = None
    auto_label: bool | None = None

    @field_validator("locale")
    @classmethod
    def _canonical_locale(cls, value: str | None) -> str | None:
        return canonical_locale(value)


class RepoConfigUpdate(BaseModel):
    """Full override for one repository; ``None`` inherits the installation value."""

    model_config = ConfigDict(extra="forbid")

    locale: str | None = Field(default=None, min_length=1, max_length=10)
    auto_translate: bool | None = None
    auto_label: bool | None = None

    @field_validator("locale")
    @classmethod
    def _canonical_locale(cls, value: str | None) -> str | None:
        return canonical_locale(value)
