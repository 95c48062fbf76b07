"""Runtime configuration: API credentials and local paths."""
import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from ledgerflow.utils.exceptions import ConfigError
from ledgerflow.utils.logger import get_home_dir
from .settings import get_settings

ENV_OVERRIDES = {
    "gemini_api_key": "GEMINI_API_KEY",
    "database_path": "LEDGERFLOW_DB",
    "log_level": "LEDGERFLOW_LOG_LEVEL",
}


@dataclass
class Config:
    """System configuration."""
    gemini_api_key: Optional[str] = None
    database_path: Optional[str] = None
    log_level: str = "INFO"


class ConfigManager:
    """Loads configuration from config.json with environment overrides."""

    def __init__(self):
        self.config_dir = get_home_dir()
        self.config_file = self.config_dir / get_settings().config_file
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_config(self) -> Config:
        """Load configuration from file, then apply environment variables."""
        config_dict = {}

        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config_dict = json.load(f)
            except Exception as e:
                raise ConfigError(f"Failed to load configuration: {e}")

        for field_name, env_var in ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if value:
                config_dict[field_name] = value

        config = Config(**config_dict)
        if not config.database_path:
            config.database_path = str(self.config_dir / get_settings().database_file)
        return config

    def save_config(self, config: Config) -> None:
        """Save configuration to config.json."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(asdict(config), f, indent=2)
        except Exception as e:
            raise ConfigError(f"Failed to save configuration: {e}")

    def validate_config(self, config: Config, require_api_key: bool = True) -> tuple[bool, str]:
        """Validate configuration values."""
        if require_api_key and not config.gemini_api_key:
            return False, "Gemini API key is required (set GEMINI_API_KEY)"

        if not isinstance(logging.getLevelName(config.log_level.upper()), int):
            return False, f"Unknown log level: {config.log_level}"

        if config.database_path and not Path(config.database_path).parent.exists():
            return False, f"Database directory does not exist: {Path(config.database_path).parent}"

        return True, "Configuration is valid"
