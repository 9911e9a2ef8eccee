"""Pytest configuration for azteardown tests.

CRITICAL: Tests must never read the real ~/.azteardown/config.toml or act on a
real subscription taken from the environment.
"""

import pytest

ENVIRONMENT_VARIABLES = (
    "AZURE_SUBSCRIPTION_ID",
    "AZTEARDOWN_SUBSCRIPTION_ID",
    "AZTEARDOWN_CREDENTIAL",
    "AZTEARDOWN_DELETION_TIMEOUT",
    "AZTEARDOWN_POLLING_INTERVAL",
    "AZTEARDOWN_OWNERSHIP_TAG_KEY",
    "AZTEARDOWN_OWNERSHIP_TAG_VALUE",
    "AZTEARDOWN_NAMING_PREFIX",
    "AZTEARDOWN_RETRY_MAX_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Remove azteardown and subscription variables inherited from the shell."""
    for name in ENVIRONMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the default config file at tmp_path instead of ~/.azteardown.

    Example:
        def test_something(isolated_config):
            isolated_config.write_text('deletion_timeout = 30')
    """
    from azteardown.config import ConfigManager

    config_dir = tmp_path / ".azteardown"
    config_dir.mkdir(parents=True)
    config_file = config_dir / "config.toml"

    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", config_dir)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", config_file)

    return config_file
