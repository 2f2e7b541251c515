"""
Configuration Loader

Handles loading, parsing, and merging configuration from YAML files and
environment variables.

Author: titlesync Project
License: MIT
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from .schema import Config

DEFAULT_CONFIG_PATH = "~/.config/titlesync/config.yaml"


class ConfigLoader:
    """
    Configuration loader and manager.
    
    Loads configuration from YAML file, merges with environment variables
    and validates the structure.
    """
    
    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.
        
        Args:
            config_path: Path to the configuration file. If None, uses
                TITLESYNC_CONFIG or the default location.
        """
        # Load environment variables from .env if present
        load_dotenv()
        
        self.config_path = str(Path(
            config_path or os.getenv("TITLESYNC_CONFIG", DEFAULT_CONFIG_PATH)
        ).expanduser())
        self._config: Optional[Config] = None
    
    def load(self) -> Config:
        """
        Load and validate configuration.
        
        Returns:
            Validated Config object
            
        Raises:
            ValueError: If YAML parsing or validation fails
        """
        config_data = self._load_yaml()
        config_data = self._merge_env_vars(config_data)
        
        self._config = Config(**config_data)
        return self._config
    
    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load YAML configuration file.
        
        Returns:
            Dictionary with configuration data
        """
        config_file = Path(self.config_path)
        
        if not config_file.exists():
            return self._create_default_config()
        
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {e}")
        
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_file}")
        return data
    
    def _create_default_config(self) -> Dict[str, Any]:
        """
        Create default configuration structure.
        
        Returns:
            Default configuration dictionary
        """
        return {
            "app": {
                "log_level": "INFO",
                "log_to_file": False
            },
            "sync": {
                "compare_tolerance_bytes": 3000,
                "copy_buffer_size": 1024 * 1024,
                "skip_empty_files": True
            },
            "device": {
                "mount_root": None,
                "device_name": None,
                "installed_path": "4: Installed games",
                "listing_timeout": 30
            },
            "trash": {
                "enabled": True,
                "path": "~/.titlesync/trash"
            }
        }
    
    def _merge_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge environment variables into configuration.
        
        Environment variables override config file values.
        Naming convention: SECTION_KEY (e.g., APP_LOG_LEVEL, DEVICE_NAME)
        
        Args:
            config_data: Configuration dictionary from file
            
        Returns:
            Merged configuration dictionary
        """
        # App settings
        if os.getenv("APP_LOG_LEVEL"):
            config_data.setdefault("app", {})["log_level"] = os.getenv("APP_LOG_LEVEL").upper()
        if os.getenv("APP_LOG_TO_FILE"):
            config_data.setdefault("app", {})["log_to_file"] = os.getenv("APP_LOG_TO_FILE").lower() == "true"
        
        # Sync settings
        if os.getenv("SYNC_COMPARE_TOLERANCE"):
            config_data.setdefault("sync", {})["compare_tolerance_bytes"] = int(os.getenv("SYNC_COMPARE_TOLERANCE"))
        
        # Device settings
        if os.getenv("DEVICE_MOUNT_ROOT"):
            config_data.setdefault("device", {})["mount_root"] = os.getenv("DEVICE_MOUNT_ROOT")
        if os.getenv("DEVICE_NAME"):
            config_data.setdefault("device", {})["device_name"] = os.getenv("DEVICE_NAME")
        if os.getenv("DEVICE_LISTING_TIMEOUT"):
            config_data.setdefault("device", {})["listing_timeout"] = float(os.getenv("DEVICE_LISTING_TIMEOUT"))
        
        # Trash
        if os.getenv("TRASH_ENABLED"):
            config_data.setdefault("trash", {})["enabled"] = os.getenv("TRASH_ENABLED").lower() == "true"
        if os.getenv("TRASH_PATH"):
            config_data.setdefault("trash", {})["path"] = os.getenv("TRASH_PATH")
        
        return config_data
    
    def save(self, config: Config, path: Optional[str] = None) -> None:
        """
        Save configuration to YAML file.
        
        Args:
            config: Config object to save
            path: Path to save to (uses default if None)
        """
        save_path = Path(path or self.config_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        
        config_dict = config.model_dump(mode="json")
        
        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)
    
    @property
    def config(self) -> Optional[Config]:
        """Get the current configuration object."""
        return self._config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Convenience function to load configuration.
    
    Args:
        config_path: Optional path to config file
        
    Returns:
        Loaded and validated Config object
    """
    loader = ConfigLoader(config_path)
    return loader.load()
