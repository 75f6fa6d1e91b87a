"""XDG-compliant path management for craftbrew.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage.

XDG defaults:
- Config: ~/.config/craftbrew/
- State: ~/.local/state/craftbrew/
"""

import os
from datetime import datetime
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "craftbrew"

# Environment variable overriding the manifest directory
MANIFEST_DIR_ENV = "CRAFTBREW_MANIFEST_DIR"

# Timestamp format shared by log files and backup manifests
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/craftbrew/ (or XDG_CONFIG_HOME/craftbrew/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes per-run log files that should persist between
    runs but is not configuration.

    Returns:
        Path to ~/.local/state/craftbrew/ (or XDG_STATE_HOME/craftbrew/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the configuration file path.

    Returns:
        Path to ~/.config/craftbrew/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/craftbrew/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_default_manifest_dir() -> Path:
    """Get the directory bare manifest names are resolved against.

    The CRAFTBREW_MANIFEST_DIR environment variable takes precedence
    over the XDG default.

    Returns:
        Path to the manifest directory (default ~/.config/craftbrew/manifests/).
    """
    override = os.environ.get(MANIFEST_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / "manifests"


def get_log_dir() -> Path:
    """Get the per-run log directory path.

    Returns:
        Path to ~/.local/state/craftbrew/logs/.
    """
    return get_state_dir() / "logs"


def get_run_log_path(started_at: datetime, log_dir: Path | None = None) -> Path:
    """Get the log file path for a single invocation.

    Args:
        started_at: Start time of the run, used in the file name.
        log_dir: Directory for log files. If None, uses the default log dir.

    Returns:
        Path like <log_dir>/craftbrew-20240101-120000.log.
    """
    directory = log_dir or get_log_dir()
    return directory / f"{APP_NAME}-{started_at.strftime(TIMESTAMP_FORMAT)}.log"


def get_default_backup_path(created_at: datetime) -> Path:
    """Get the timestamp-derived backup manifest path.

    Args:
        created_at: Time the backup is taken.

    Returns:
        Relative path like craftbrew-backup-20240101-120000.brewfile.
    """
    return Path(f"{APP_NAME}-backup-{created_at.strftime(TIMESTAMP_FORMAT)}.brewfile")


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_log_dir(log_dir: Path | None = None) -> Path:
    """Create the log directory if it doesn't exist.

    Args:
        log_dir: Directory to create. If None, uses the default log dir.

    Returns:
        Path to the log directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(log_dir or get_log_dir(), "log")
