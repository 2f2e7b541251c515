"""
Unit Tests for Configuration Module

Tests configuration loading, validation, environment variable merging,
and error handling.

Author: titlesync Project
License: MIT
"""

import warnings

import pytest

from titlesync.config.config_loader import ConfigLoader, load_config
from titlesync.config.schema import Config, DeviceConfig, SyncConfig, TrashConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove overrides that may leak in from the environment."""
    for name in (
        "APP_LOG_LEVEL", "APP_LOG_TO_FILE", "SYNC_COMPARE_TOLERANCE",
        "DEVICE_MOUNT_ROOT", "DEVICE_NAME", "DEVICE_LISTING_TIMEOUT",
        "TRASH_ENABLED", "TRASH_PATH", "TITLESYNC_CONFIG"
    ):
        monkeypatch.delenv(name, raising=False)


class TestConfigLoader:
    """Test suite for ConfigLoader class."""
    
    def test_create_default_config(self):
        """Test default configuration creation."""
        loader = ConfigLoader()
        default_config = loader._create_default_config()
        
        assert "app" in default_config
        assert "sync" in default_config
        assert "device" in default_config
        assert default_config["sync"]["compare_tolerance_bytes"] == 3000
        assert default_config["app"]["log_level"] == "INFO"
    
    def test_load_nonexistent_config_creates_default(self, tmp_path):
        """Test that loading non-existent config creates defaults."""
        loader = ConfigLoader(str(tmp_path / "config.yaml"))
        
        config = loader.load()
        
        assert isinstance(config, Config)
        assert config.sync.compare_tolerance_bytes == 3000
        assert config.device.listing_timeout == 30
        assert loader.config is config
    
    def test_load_yaml_file(self, tmp_path):
        """Test values are read from the YAML file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "sync:\n"
            "  compare_tolerance_bytes: 100\n"
            "device:\n"
            "  device_name: Switch\n"
            "  installed_path: '\\\\4: Installed games'\n"
        )
        
        config = load_config(str(config_path))
        
        assert config.sync.compare_tolerance_bytes == 100
        assert config.device.device_name == "Switch"
        assert config.device.installed_path == "4: Installed games"
    
    def test_config_path_from_env(self, tmp_path, monkeypatch):
        """Test TITLESYNC_CONFIG selects the file."""
        config_path = tmp_path / "other.yaml"
        config_path.write_text("trash:\n  enabled: false\n")
        monkeypatch.setenv("TITLESYNC_CONFIG", str(config_path))
        
        config = ConfigLoader().load()
        
        assert config.trash_dir is None
    
    def test_invalid_yaml_raises_error(self, tmp_path):
        """Test broken YAML is reported as ValueError."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("sync: [unclosed\n")
        
        with pytest.raises(ValueError, match="Failed to parse YAML"):
            ConfigLoader(str(config_path)).load()
    
    def test_non_mapping_raises_error(self, tmp_path):
        """Test a YAML list is rejected."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- one\n- two\n")
        
        with pytest.raises(ValueError, match="mapping"):
            ConfigLoader(str(config_path)).load()
    
    def test_env_var_override(self, tmp_path, monkeypatch):
        """Test environment variable overrides."""
        monkeypatch.setenv("APP_LOG_LEVEL", "debug")
        monkeypatch.setenv("SYNC_COMPARE_TOLERANCE", "10")
        monkeypatch.setenv("DEVICE_NAME", "Switch")
        monkeypatch.setenv("DEVICE_LISTING_TIMEOUT", "2.5")
        monkeypatch.setenv("TRASH_PATH", str(tmp_path / "bin"))
        
        config = ConfigLoader(str(tmp_path / "config.yaml")).load()
        
        assert config.app.log_level == "DEBUG"
        assert config.sync.compare_tolerance_bytes == 10
        assert config.device.device_name == "Switch"
        assert config.device.listing_timeout == 2.5
        assert config.trash_dir == str(tmp_path / "bin")
    
    def test_trash_disabled_from_env(self, tmp_path, monkeypatch):
        """Test TRASH_ENABLED=false turns recycling into deletion."""
        monkeypatch.setenv("TRASH_ENABLED", "false")
        
        config = ConfigLoader(str(tmp_path / "config.yaml")).load()
        
        assert config.trash_dir is None
    
    def test_save_and_reload(self, tmp_path):
        """Test a saved configuration loads back unchanged."""
        config_path = tmp_path / "nested" / "config.yaml"
        loader = ConfigLoader(str(config_path))
        config = Config(sync={"compare_tolerance_bytes": 42})
        
        loader.save(config)
        reloaded = ConfigLoader(str(config_path)).load()
        
        assert reloaded.sync.compare_tolerance_bytes == 42
        assert reloaded.app.log_level == "INFO"
    
    def test_save_loaded_config(self, tmp_path):
        """Test a config read from YAML, enum fields included, saves and reloads."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("app:\n  log_level: DEBUG\n")
        loader = ConfigLoader(str(config_path))
        
        loader.save(loader.load())
        reloaded = ConfigLoader(str(config_path)).load()
        
        assert "log_level: DEBUG" in config_path.read_text()
        assert reloaded.app.log_level == "DEBUG"
    
    def test_save_defaults_from_missing_file(self, tmp_path):
        """Test the defaults used for a missing file can be written out."""
        config_path = tmp_path / "config.yaml"
        loader = ConfigLoader(str(config_path))
        
        loader.save(loader.load())
        
        assert load_config(str(config_path)).sync.compare_tolerance_bytes == 3000
    
    def test_no_deprecated_pydantic_api(self, tmp_path):
        """Test loading and saving use the current pydantic API only."""
        loader = ConfigLoader(str(tmp_path / "config.yaml"))
        
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            config = loader.load()
            config.app.log_level = "WARNING"
            loader.save(config)
        
        assert ConfigLoader(str(tmp_path / "config.yaml")).load().app.log_level == "WARNING"


class TestConfigSchema:
    """Test suite for configuration schema models."""
    
    def test_device_config_defaults(self):
        """Test DeviceConfig default values."""
        config = DeviceConfig()
        
        assert config.mount_root is None
        assert config.installed_path == "4: Installed games"
        assert config.path_prefixes == ["\\", "mtp:"]
    
    def test_negative_tolerance_rejected(self):
        """Test compare tolerance validation."""
        with pytest.raises(ValueError):
            SyncConfig(compare_tolerance_bytes=-1)
    
    def test_zero_buffer_rejected(self):
        """Test copy buffer validation."""
        with pytest.raises(ValueError):
            SyncConfig(copy_buffer_size=0)
    
    def test_timeout_must_be_positive(self):
        """Test listing timeout validation."""
        with pytest.raises(ValueError):
            DeviceConfig(listing_timeout=0)
    
    def test_invalid_log_level_rejected(self):
        """Test unknown log levels fail validation."""
        with pytest.raises(ValueError):
            Config(app={"log_level": "LOUD"})
    
    def test_trash_dir_property(self):
        """Test trash_dir follows the enabled flag."""
        assert Config(trash=TrashConfig(path="/tmp/bin")).trash_dir == "/tmp/bin"
        assert Config(trash=TrashConfig(enabled=False)).trash_dir is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
