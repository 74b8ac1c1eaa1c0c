"""
Core data structures for NLS resolution.

This module contains the language pack manifest entry model, the resolution
context handed in by the application and the configuration handed back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class LanguagePackEntry(BaseModel):
    """One locale entry of ``languagepacks.json``."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="allow")

    hash: StrictStr = Field(
        ...,
        description="Content fingerprint of the installed pack",
    )
    translations: dict[str, object] = Field(
        ...,
        description="Component id to absolute path of that component's translation JSON",
    )

    def core_translation_path(self, component_id: str) -> str | None:
        """Return the translation file of ``component_id`` if it is a string."""
        path = self.translations.get(component_id)
        return path if isinstance(path, str) else None


@dataclass(frozen=True)
class NLSResolveContext:
    """Inputs of a single resolution."""

    user_locale: str
    os_locale: str
    user_data_path: Path
    commit: str | None
    nls_metadata_path: Path


@dataclass
class NLSConfiguration:
    """Configuration describing which messages the application should use."""

    user_locale: str
    os_locale: str
    available_languages: dict[str, str] = field(default_factory=dict)
    pseudo: bool | None = None

    @property
    def is_default(self) -> bool:
        """Whether no language pack is in use."""
        return not self.available_languages

    def to_dict(self) -> dict[str, object]:
        """Render the configuration with the names consumers read from JSON."""
        data: dict[str, object] = {
            "userLocale": self.user_locale,
            "osLocale": self.os_locale,
            "availableLanguages": dict(self.available_languages),
        }
        if self.pseudo is not None:
            data["pseudo"] = self.pseudo
        return data


@dataclass
class InternalNLSConfiguration(NLSConfiguration):
    """Resolved configuration, including the cache locations of the pack."""

    language_pack_id: str = ""
    translations_config_file: Path = Path()
    cache_root: Path = Path()
    resolved_language_pack_core_location: Path = Path()
    corrupted_file: Path = Path()

    @property
    def messages_file(self) -> Path:
        """The materialized ``nls.messages.json`` of this build."""
        return self.resolved_language_pack_core_location / "nls.messages.json"

    def to_dict(self) -> dict[str, object]:
        data = super().to_dict()
        data.update(
            {
                "_languagePackId": self.language_pack_id,
                "_translationsConfigFile": str(self.translations_config_file),
                "_cacheRoot": str(self.cache_root),
                "_resolvedLanguagePackCoreLocation": str(
                    self.resolved_language_pack_core_location
                ),
                "_corruptedFile": str(self.corrupted_file),
            }
        )
        return data
