"""
Configuration Schema and Models

Defines Pydantic models for the configuration schema, providing validation,
default values, and type checking for all configuration options.

Author: titlesync Project
License: MIT
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AppConfig(BaseModel):
    """Logging and general application settings."""
    
    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
    
    log_level: LogLevel = Field(
        default=LogLevel.INFO.value,
        description="Application logging level"
    )
    log_to_file: bool = Field(
        default=False,
        description="Enable logging to file"
    )
    log_file_path: str = Field(
        default="~/.titlesync/logs/titlesync.log",
        description="Log file location"
    )
    log_rotation_size: int = Field(
        default=10485760,  # 10MB
        description="Log file size before rotation (bytes)"
    )
    log_retention_count: int = Field(
        default=5,
        description="Number of rotated log files to keep"
    )
    json_logs: bool = Field(
        default=False,
        description="Emit logs as JSON"
    )


class SyncConfig(BaseModel):
    """Synchronization behaviour."""
    
    compare_tolerance_bytes: int = Field(
        default=3000,
        description="Size difference above which compare mode replaces a file"
    )
    copy_buffer_size: int = Field(
        default=1024 * 1024,
        description="Buffer size for stream copies (bytes)"
    )
    skip_empty_files: bool = Field(
        default=True,
        description="Never transfer zero-length source files"
    )
    
    @field_validator("compare_tolerance_bytes")
    @classmethod
    def validate_tolerance(cls, v):
        """Tolerance cannot be negative."""
        if v < 0:
            raise ValueError(f"compare_tolerance_bytes must be >= 0: {v}")
        return v
    
    @field_validator("copy_buffer_size")
    @classmethod
    def validate_buffer(cls, v):
        """Buffer must hold at least one byte."""
        if v <= 0:
            raise ValueError(f"copy_buffer_size must be positive: {v}")
        return v


class DeviceConfig(BaseModel):
    """Removable device (mounted media) settings."""
    
    mount_root: Optional[str] = Field(
        default=None,
        description="Directory whose subfolders are mounted devices (None = /run/user/<uid>/gvfs)"
    )
    device_name: Optional[str] = Field(
        default=None,
        description="Substring of the device name to use (None = first device)"
    )
    installed_path: str = Field(
        default="4: Installed games",
        description="Device folder scanned to find installed titles"
    )
    listing_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for a device directory listing"
    )
    path_prefixes: List[str] = Field(
        default=["\\", "mtp:"],
        description="Path prefixes that mark a path as a device path"
    )
    
    @field_validator("listing_timeout")
    @classmethod
    def validate_timeout(cls, v):
        """Ensure timeout is positive."""
        if v <= 0:
            raise ValueError(f"listing_timeout must be positive: {v}")
        return v
    
    @field_validator("installed_path", mode="before")
    @classmethod
    def normalize_installed_path(cls, v):
        """Strip device path separators from the reference path."""
        if isinstance(v, str):
            return v.strip("\\/")
        return v


class TrashConfig(BaseModel):
    """Where removed files go."""
    
    enabled: bool = Field(
        default=True,
        description="Move removed files to the trash directory instead of deleting"
    )
    path: str = Field(
        default="~/.titlesync/trash",
        description="Trash directory"
    )


class Config(BaseModel):
    """
    Root configuration model for titlesync.
    
    Loaded from config.yaml and overridden by environment variables.
    """
    
    app: AppConfig = Field(default_factory=AppConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    device: DeviceConfig = Field(default_factory=DeviceConfig)
    trash: TrashConfig = Field(default_factory=TrashConfig)
    
    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
    
    @property
    def trash_dir(self) -> Optional[str]:
        """Trash directory to recycle into, or None when trash is disabled."""
        return self.trash.path if self.trash.enabled else None
