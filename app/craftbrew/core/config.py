"""Configuration file support.

This module provides the configuration model and loader for the optional
craftbrew config file.

Configuration is stored in ~/.config/craftbrew/config.toml, for example:

    manifest_dir = "~/dotfiles/brewfiles"
    default_system = "dev"
    skip_mas = true
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from craftbrew.core.errors import ConfigError
from craftbrew.core.paths import get_config_path, get_default_manifest_dir, get_log_dir
from craftbrew.models.system import SystemType

logger = logging.getLogger(__name__)


class CraftbrewConfig(BaseModel):
    """Settings read from config.toml.

    Attributes:
        manifest_dir: Directory bare manifest names are resolved against.
        manifest_suffix: File suffix appended to preset manifest names.
        default_system: System type used when neither --system nor --manifests is given.
        log_dir: Directory for per-run log files.
        skip_mas: Leave App Store entries out of merged manifests by default.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    manifest_dir: Annotated[
        Path | None,
        Field(description="Manifest directory (None = XDG default)"),
    ] = None
    manifest_suffix: Annotated[
        str,
        Field(min_length=1, description="Suffix for preset manifest files"),
    ] = ".brewfile"
    default_system: Annotated[
        SystemType,
        Field(description="System type used when none is given"),
    ] = SystemType.BASE
    log_dir: Annotated[
        Path | None,
        Field(description="Log directory (None = XDG state default)"),
    ] = None
    skip_mas: Annotated[
        bool,
        Field(description="Skip App Store entries"),
    ] = False

    @field_validator("manifest_dir", "log_dir", mode="after")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        """Expand '~' in configured directories."""
        return v.expanduser() if v is not None else None

    @property
    def effective_manifest_dir(self) -> Path:
        """Configured manifest directory, or the environment/XDG default."""
        return self.manifest_dir or get_default_manifest_dir()

    @property
    def effective_log_dir(self) -> Path:
        """Configured log directory, or the XDG state default."""
        return self.log_dir or get_log_dir()


def load_config(path: Path | None = None) -> CraftbrewConfig:
    """Load configuration from a TOML file.

    A missing file is not an error: defaults are returned.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated CraftbrewConfig object.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return CraftbrewConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return CraftbrewConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e
