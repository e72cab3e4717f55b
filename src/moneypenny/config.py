"""
Application configuration loading and validation.

The config file is JSON and is grouped per service::

    {
      "ynab": {"api_key": "...", "budget_id": "..."}
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class YNABConfig:
    """Credentials and defaults for the YNAB API."""

    api_key: str = ""
    budget_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "YNABConfig":
        return cls(
            api_key=data.get("api_key", "") or "",
            budget_id=data.get("budget_id", "") or "",
        )

    def validate(self, require_budget: bool = True) -> None:
        """Check that all required fields are set."""
        if not self.api_key:
            raise ConfigError("api_key is required")
        if require_budget and not self.budget_id:
            raise ConfigError("budget_id is required")


@dataclass
class Config:
    """Top-level application configuration."""

    ynab: YNABConfig = field(default_factory=YNABConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        ynab_data = data.get("ynab") or {}
        if not isinstance(ynab_data, dict):
            raise ConfigError("ynab section must be an object")
        return cls(ynab=YNABConfig.from_dict(ynab_data))

    def validate(self) -> None:
        try:
            self.ynab.validate()
        except ConfigError as e:
            raise ConfigError(f"ynab config: {e}") from e


def load_config(config_file: str | Path) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        config_file: Path to the JSON config file

    Returns:
        Parsed Config (not yet validated)

    Raises:
        ConfigError: If the file cannot be read or is not valid JSON
    """
    config_path = Path(config_file)
    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"reading config file {config_file}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"parsing config file {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_file} must contain a JSON object")

    logger.debug(f"Loaded config from {config_file}")
    return Config.from_dict(data)
