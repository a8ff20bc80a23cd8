"""Process-wide settings.

Settings are read once (by the CLI or an embedding agent) and passed
explicitly to whatever needs them; nothing in filemeta looks them up on
its own.

Configuration is stored in ~/.config/filemeta/settings.toml
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from filemeta.core.checksums import CHECKSUMS, DEFAULT_DIGEST_ALGORITHM
from filemeta.core.paths import get_settings_path
from filemeta.metadata.models import LinkHandling, SourcePermissions


class Settings(BaseModel):
    """Settings for metadata collection.

    Attributes:
        digest_algorithm: Checksum type used when none is given explicitly.
        source_permissions: Default permission policy (None = unset).
        links: Default link handling.
    """

    model_config = ConfigDict(extra="forbid")

    digest_algorithm: Annotated[
        str,
        Field(description="Default checksum algorithm"),
    ] = DEFAULT_DIGEST_ALGORITHM
    source_permissions: Annotated[
        SourcePermissions | None,
        Field(description="Default source permissions policy"),
    ] = None
    links: Annotated[
        LinkHandling,
        Field(description="Default link handling"),
    ] = LinkHandling.MANAGE

    @field_validator("digest_algorithm")
    @classmethod
    def validate_digest_algorithm(cls, v: str) -> str:
        """Require a registered checksum type."""
        return CHECKSUMS.validate(v)


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsNotFoundError(SettingsError):
    """Raised when the settings file is not found."""


class SettingsParseError(SettingsError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated Settings object.

    Raises:
        SettingsNotFoundError: If the file doesn't exist.
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the content doesn't match the schema.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        raise SettingsNotFoundError(f"Settings not found: {settings_path}")

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings content: {e}") from e


def get_settings(path: Path | None = None) -> Settings:
    """Load settings, falling back to defaults if no file exists.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Loaded settings, or default Settings when the file is absent.

    Raises:
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the content doesn't match the schema.
    """
    try:
        return load_settings(path)
    except SettingsNotFoundError:
        return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: The Settings object to save.
        path: Path to save the settings. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    data = _settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path


def _settings_to_dict(settings: Settings) -> dict[str, object]:
    """Convert Settings to a dictionary for TOML serialization.

    TOML has no null, so an unset permission policy is omitted.
    """
    result: dict[str, object] = {
        "digest_algorithm": settings.digest_algorithm,
        "links": settings.links.value,
    }
    if settings.source_permissions is not None:
        result["source_permissions"] = settings.source_permissions.value
    return result
