"""
titlesync Configuration Module

Handles configuration loading, validation, and management. Supports
YAML-based configuration with environment variable overrides.

Author: titlesync Project
License: MIT
"""

from .schema import Config
from .config_loader import ConfigLoader, load_config

__version__ = "0.1.0"
__all__ = ['Config', 'ConfigLoader', 'load_config']
