"""
Configuration management for puckforge.

This module handles configuration loading, validation, and management
using YAML files and environment variables.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from platformdirs import user_config_dir, user_data_dir

from ..constants import (
    DEFAULT_BASE_PORT, DEFAULT_INSTALL_DIRECTORY, DEFAULT_MONITORING_PACKAGE,
    DEFAULT_SERVER_EXECUTABLE, DEFAULT_SERVICE_USER,
    DEFAULT_SWAP_PATH, DEFAULT_SWAP_SIZE_MB, DEFAULT_UNIT_NAME, FSTAB_PATH,
    PUCK_APP_ID, STEAMCMD_PATH, SYSTEMD_UNIT_DIRECTORY
)

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "PUCKFORGE_CONFIG_DIR"
DATA_DIR_ENV = "PUCKFORGE_DATA_DIR"


class Config:
    """Configuration manager for puckforge."""

    def __init__(self, config_dir: Optional[Path] = None, data_dir: Optional[Path] = None) -> None:
        self.app_name = "puckforge"
        self.config_dir = Path(config_dir or os.environ.get(CONFIG_DIR_ENV) or user_config_dir(self.app_name))
        self.data_dir = Path(data_dir or os.environ.get(DATA_DIR_ENV) or user_data_dir(self.app_name))
        self.config_file = self.config_dir / "config.yaml"

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # Default configuration
        self._defaults = {
            "install": {
                "directory": DEFAULT_INSTALL_DIRECTORY,
                "service_user": DEFAULT_SERVICE_USER,
                "server_executable": DEFAULT_SERVER_EXECUTABLE,
            },
            "steam": {
                "steamcmd_path": STEAMCMD_PATH,
                "app_id": PUCK_APP_ID,
                "validate": False,
            },
            "swap": {
                "enabled": True,
                "path": DEFAULT_SWAP_PATH,
                "size_mb": DEFAULT_SWAP_SIZE_MB,
                "fstab_path": FSTAB_PATH,
            },
            "systemd": {
                "unit_name": DEFAULT_UNIT_NAME,
                "unit_directory": SYSTEMD_UNIT_DIRECTORY,
            },
            "servers": {
                "base_port": DEFAULT_BASE_PORT,
            },
            "monitoring": {
                "package": DEFAULT_MONITORING_PACKAGE,
            },
            "logging": {
                "level": "INFO",
                "file_logging": True,
                "log_file": str(self.data_dir / "logs" / "puckforge.log"),
                "max_log_size": "10MB",
                "backup_count": 5,
            },
            "ui": {
                "colored_output": True,
                "rich_logging": True,
            }
        }

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or create default."""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    config = yaml.safe_load(f) or {}

                # Merge with defaults
                merged_config = self._merge_configs(self._defaults, config)

                logger.info(f"Loaded configuration from {self.config_file}")
                return merged_config

            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config file: {e}. Using defaults.")
                return copy.deepcopy(self._defaults)
        else:
            # Create default config file
            self.save_config(self._defaults)
            return copy.deepcopy(self._defaults)

    def _merge_configs(self, defaults: Dict, user_config: Dict) -> Dict:
        """Recursively merge user config with defaults."""
        result = copy.deepcopy(defaults)

        for key, value in user_config.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key.split('.')
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def save_config(self, config: Optional[Dict] = None) -> bool:
        """Save configuration to file."""
        try:
            config_to_save = config or self._config

            with open(self.config_file, 'w') as f:
                yaml.dump(config_to_save, f, default_flow_style=False, indent=2)

            logger.info(f"Configuration saved to {self.config_file}")
            return True

        except OSError as e:
            logger.error(f"Failed to save configuration: {e}")
            return False

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self._config = copy.deepcopy(self._defaults)
        self.save_config()
        logger.info("Configuration reset to defaults")

    def get_log_directory(self) -> Path:
        """Get the log directory."""
        log_file = Path(self.get("logging.log_file"))
        log_dir = log_file.parent
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir


# Global configuration instance
config = Config()
