"""Configuration schema for the NLS resolver using Pydantic models."""

from pathlib import Path
from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResolverConfig(BaseModel):
    """Settings controlling locale resolution and the translation cache."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )

    core_component_id: str = Field(
        default="vscode",
        description="Component id whose translation file must exist for a pack to be usable",
        min_length=1,
    )
    pseudo_locale: str = Field(
        default="pseudo",
        description="Locale that enables pseudo-localization instead of a pack",
        min_length=1,
    )
    default_locales: list[str] = Field(
        default_factory=lambda: ["en", "en-us"],
        description="Locales served by the built-in messages without any pack",
    )
    dev_mode_env_var: str = Field(
        default="VSCODE_DEV",
        description="Environment variable that forces the default configuration when set",
        min_length=1,
    )
    manifest_file_name: str = Field(
        default="languagepacks.json",
        description="Name of the language pack manifest inside the user data folder",
        min_length=1,
    )
    cache_dir_name: str = Field(
        default="clp",
        description="Name of the translation cache folder inside the user data folder",
        min_length=1,
    )
    touch_on_cache_hit: bool = Field(
        default=True,
        description="Refresh the modification time of reused cache entries",
    )
    cleanup_max_retries: Annotated[int, Field(ge=1, le=10)] = Field(
        default=3,
        description="Attempts made when deleting a corrupted cache folder",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional rotating log file receiving the resolver's own records",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum level written to log_file",
    )

    @field_validator("default_locales")
    @classmethod
    def normalize_default_locales(cls, v: list[str]) -> list[str]:
        """Drop surrounding whitespace and empty entries."""
        return [locale.strip() for locale in v if locale.strip()]

    @field_validator("manifest_file_name", "cache_dir_name")
    @classmethod
    def validate_plain_name(cls, v: str) -> str:
        """Reject names that would escape the user data folder."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"'{v}' must be a plain file or folder name")
        return v

    def is_default_locale(self, locale: str) -> bool:
        """Whether ``locale`` is served by the built-in messages (exact match)."""
        return locale in self.default_locales
