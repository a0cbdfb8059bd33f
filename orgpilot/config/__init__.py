"""Configuration management.

Usage:
    from orgpilot.config import get_config
    config = get_config()

The YAML location defaults to ~/.orgpilot/orgpilot.yml and can be overridden
with ORGPILOT_CONFIG. A .env file (ORGPILOT_ENV_PATH or ./.env) is loaded
first so ${VAR} references in the YAML can resolve against it.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from orgpilot.config.loader import load_config
from orgpilot.config.schema import ApiConfig, OrgPilotConfig, StorageConfig, ViewModeConfig
from orgpilot.paths import CONFIG_PATH

__all__ = [
    "ApiConfig",
    "OrgPilotConfig",
    "StorageConfig",
    "ViewModeConfig",
    "get_config",
    "load_config",
    "reset_config",
]

_config: Optional[OrgPilotConfig] = None


def _load_env() -> None:
    env_path = os.getenv("ORGPILOT_ENV_PATH")
    dotenv_path = Path(env_path).expanduser() if env_path else Path.cwd() / ".env"
    load_dotenv(dotenv_path)


def get_config(path: Optional[Path] = None) -> OrgPilotConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if path is not None:
        _load_env()
        _config = load_config(path)
        return _config
    if _config is None:
        _load_env()
        config_path = os.getenv("ORGPILOT_CONFIG")
        _config = load_config(Path(config_path) if config_path else CONFIG_PATH)
    return _config


def reset_config() -> None:
    """Forget the cached config (tests)."""
    global _config
    _config = None
