"""
Unit Tests for the Command-Line Interface

Author: titlesync Project
License: MIT
"""

import logging

import pytest
from click.testing import CliRunner

from titlesync.cli import main


def make_file(folder, name, size=10):
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / name
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture
def runner():
    yield CliRunner()
    # Handlers point at the runner's captured stdout
    logging.getLogger("titlesync").handlers.clear()


@pytest.fixture
def config_args(tmp_path, monkeypatch):
    """Point configuration and trash at the test directory."""
    for name in ("APP_LOG_LEVEL", "APP_LOG_TO_FILE", "TRASH_ENABLED", "DEVICE_MOUNT_ROOT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TRASH_PATH", str(tmp_path / "trash"))
    return ["--config", str(tmp_path / "config.yaml")]


@pytest.fixture
def collection(tmp_path):
    """Origin with one newer update for a game in the destination."""
    origin = tmp_path / "origin"
    destination = tmp_path / "destination"
    make_file(destination / "GameA", "GameA [0100000000000000][v0].nsp")
    make_file(origin / "GameA", "GameA Update [0100000000000800][v65536].nsp")
    return origin, destination


class TestCli:
    """Test suite for the titlesync command."""
    
    def test_help(self, runner):
        """Test -h shows options and the naming convention."""
        result = runner.invoke(main, ["-h"])
        
        assert result.exit_code == 0
        assert "--compare" in result.output
        assert "File naming convention" in result.output
    
    def test_local_sync_with_options(self, runner, config_args, collection):
        """Test -o/-d run a local sync and print the summary."""
        origin, destination = collection
        
        result = runner.invoke(main, ["-o", str(origin), "-d", str(destination)] + config_args)
        
        assert result.exit_code == 0, result.output
        assert "1 copied" in result.output
        assert (destination / "GameA" / "GameA Update [0100000000000800][v65536].nsp").exists()
    
    def test_positional_paths(self, runner, config_args, collection):
        """Test origin and destination can be given positionally."""
        origin, destination = collection
        
        result = runner.invoke(main, [str(origin), str(destination)] + config_args)
        
        assert result.exit_code == 0, result.output
        assert "1 copied" in result.output
    
    def test_prompts_for_missing_destination(self, runner, config_args, collection):
        """Test a missing path is asked for interactively."""
        origin, destination = collection
        
        result = runner.invoke(
            main, ["-o", str(origin)] + config_args, input=f"{destination}\n"
        )
        
        assert result.exit_code == 0, result.output
        assert "destination folder path" in result.output
    
    def test_compare_reports_mismatches(self, runner, config_args, collection):
        """Test compare mode adds the mismatch count."""
        origin, destination = collection
        
        result = runner.invoke(main, ["-c", str(origin), str(destination)] + config_args)
        
        assert result.exit_code == 0, result.output
        assert "1 mismatch(es)" in result.output
    
    def test_missing_origin_exits_with_error(self, runner, config_args, tmp_path):
        """Test a nonexistent origin exits with status 1."""
        result = runner.invoke(main, [str(tmp_path / "nope"), str(tmp_path)] + config_args)
        
        assert result.exit_code == 1
        assert "does not exist" in result.output
    
    def test_invalid_config_exits_with_error(self, runner, tmp_path, collection):
        """Test a broken config file exits with status 1."""
        origin, destination = collection
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("sync: [unclosed\n")
        
        result = runner.invoke(main, [str(origin), str(destination), "--config", str(config_path)])
        
        assert result.exit_code == 1
        assert "invalid configuration" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
