"""Configuration management module.

Settings are read from a TOML file (default ~/.azteardown/config.toml) and can
be overridden with environment variables:

    AZURE_SUBSCRIPTION_ID          Subscription to operate on
    AZTEARDOWN_SUBSCRIPTION_ID     Same, takes precedence over AZURE_SUBSCRIPTION_ID
    AZTEARDOWN_CREDENTIAL          "default" or "cli"
    AZTEARDOWN_DELETION_TIMEOUT    Seconds to wait for each deletion
    AZTEARDOWN_POLLING_INTERVAL    Seconds between provider status polls
    AZTEARDOWN_OWNERSHIP_TAG_KEY   Tag key marking resources this tool owns
    AZTEARDOWN_OWNERSHIP_TAG_VALUE Tag value marking resources this tool owns
    AZTEARDOWN_NAMING_PREFIX       Prefix of shared resource names
    AZTEARDOWN_RETRY_MAX_ATTEMPTS  Attempts for transient read failures
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import tomli

logger = logging.getLogger(__name__)

CREDENTIAL_TYPES = ("default", "cli")


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


@dataclass
class TeardownConfig:
    """azteardown configuration data."""

    subscription_id: str | None = None
    credential: str = "default"
    deletion_timeout: float = 600.0
    polling_interval: float = 15.0
    ownership_tag_key: str = "managed-by"
    ownership_tag_value: str = "azteardown"
    naming_prefix: str = "azteardown"
    naming_delimiter: str = "-"
    retry_max_attempts: int = 3
    retry_initial_delay: float = 1.0
    retry_max_delay: float = 30.0

    def __post_init__(self) -> None:
        if self.credential not in CREDENTIAL_TYPES:
            raise ConfigError(
                f"Invalid credential type: {self.credential}. "
                f"Expected one of: {', '.join(CREDENTIAL_TYPES)}"
            )
        if self.deletion_timeout <= 0:
            raise ConfigError("deletion_timeout must be positive")
        if self.polling_interval <= 0:
            raise ConfigError("polling_interval must be positive")
        if self.retry_max_attempts < 1:
            raise ConfigError("retry_max_attempts must be at least 1")
        if not self.ownership_tag_key:
            raise ConfigError("ownership_tag_key cannot be empty")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeardownConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

        values = {k: v for k, v in data.items() if k in known}
        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


class ConfigManager:
    """Load azteardown configuration."""

    DEFAULT_CONFIG_DIR = Path.home() / ".azteardown"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    # Environment variable -> (config field, converter)
    ENV_OVERRIDES: dict[str, tuple[str, Any]] = {
        "AZURE_SUBSCRIPTION_ID": ("subscription_id", str),
        "AZTEARDOWN_SUBSCRIPTION_ID": ("subscription_id", str),
        "AZTEARDOWN_CREDENTIAL": ("credential", str),
        "AZTEARDOWN_DELETION_TIMEOUT": ("deletion_timeout", float),
        "AZTEARDOWN_POLLING_INTERVAL": ("polling_interval", float),
        "AZTEARDOWN_OWNERSHIP_TAG_KEY": ("ownership_tag_key", str),
        "AZTEARDOWN_OWNERSHIP_TAG_VALUE": ("ownership_tag_value", str),
        "AZTEARDOWN_NAMING_PREFIX": ("naming_prefix", str),
        "AZTEARDOWN_RETRY_MAX_ATTEMPTS": ("retry_max_attempts", int),
    }

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If a custom path is given and does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def _read_file(cls, path: Path) -> dict[str, Any]:
        if not path.exists():
            logger.debug(f"No config file at {path}, using defaults")
            return {}

        try:
            with open(path, "rb") as f:
                return tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e

    @classmethod
    def _read_environment(cls) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        # Dict order puts AZTEARDOWN_SUBSCRIPTION_ID after AZURE_SUBSCRIPTION_ID
        for env_var, (key, convert) in cls.ENV_OVERRIDES.items():
            raw = os.getenv(env_var)
            if raw is None or raw == "":
                continue
            try:
                overrides[key] = convert(raw)
            except ValueError as e:
                raise ConfigError(f"Invalid value for {env_var}: {raw}") from e
        return overrides

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> TeardownConfig:
        """Load configuration from file, then apply environment overrides.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            TeardownConfig

        Raises:
            ConfigError: If the file is unreadable or values are invalid
        """
        data = cls._read_file(cls.get_config_path(custom_path))
        data.update(cls._read_environment())
        return TeardownConfig.from_dict(data)


__all__ = ["ConfigError", "ConfigManager", "TeardownConfig"]
