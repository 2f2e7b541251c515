"""
Unit Tests for the Orchestrator

Tests workflow dispatch and the device pull/push workflows against a
device mounted in a temporary directory.

Author: titlesync Project
License: MIT
"""

import shutil
import pytest

from titlesync.config.schema import Config
from titlesync.core.orchestrator import Orchestrator
from titlesync.exceptions import DeviceNotFoundError, InvalidPathError

INSTALLED = "4: Installed games"
SD_INSTALL = "5: SD Card install"


def make_file(folder, name, size=10):
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / name
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture
def mount(tmp_path):
    """A device mounted below a temporary gvfs root."""
    device = tmp_path / "gvfs" / "mtp:host=Nintendo_Switch"
    (device / INSTALLED).mkdir(parents=True)
    return device


@pytest.fixture
def orchestrator(tmp_path, mount):
    config = Config(
        device={"mount_root": str(tmp_path / "gvfs"), "listing_timeout": 5},
        trash={"path": str(tmp_path / "trash")},
    )
    return Orchestrator(config)


class TestDispatch:
    """Test suite for workflow selection."""
    
    def test_both_device_paths_rejected(self, orchestrator):
        """Test two device paths are refused."""
        with pytest.raises(InvalidPathError):
            orchestrator.run("\\" + INSTALLED, "mtp:\\" + SD_INSTALL)
    
    def test_missing_local_origin(self, orchestrator, tmp_path):
        """Test a missing origin is reported."""
        with pytest.raises(InvalidPathError, match="Origin"):
            orchestrator.run(str(tmp_path / "missing"), str(tmp_path))
    
    def test_missing_local_destination(self, orchestrator, tmp_path):
        """Test a missing destination is reported."""
        with pytest.raises(InvalidPathError, match="Destination"):
            orchestrator.run(str(tmp_path), str(tmp_path / "missing"))
    
    def test_same_local_path_rejected(self, orchestrator, tmp_path):
        """Test syncing a collection into itself is refused and nothing is removed."""
        collection = tmp_path / "collection"
        game = make_file(collection / "GameA", "GameA [0100000000000000][v0].nsp")
        
        with pytest.raises(InvalidPathError, match="contain each other"):
            orchestrator.run(str(collection), str(collection))
        
        assert game.exists()
        assert not (tmp_path / "trash").exists()
    
    @pytest.mark.parametrize("origin_name, destination_name", [
        ("collection/new", "collection"),
        ("collection", "collection/new"),
    ])
    def test_nested_local_paths_rejected(self, orchestrator, tmp_path, origin_name, destination_name):
        """Test a tree nested inside the other is refused in both directions."""
        (tmp_path / "collection" / "new").mkdir(parents=True)
        
        with pytest.raises(InvalidPathError):
            orchestrator.run(str(tmp_path / origin_name), str(tmp_path / destination_name), compare=True)
    
    def test_sibling_with_shared_name_prefix_allowed(self, orchestrator, tmp_path):
        """Test paths that only share a name prefix are not treated as nested."""
        (tmp_path / "games").mkdir()
        (tmp_path / "games-new").mkdir()
        
        report = orchestrator.run(str(tmp_path / "games-new"), str(tmp_path / "games"))
        
        assert report.errors == 0
    
    def test_no_device_connected(self, tmp_path):
        """Test device workflows need a mounted device."""
        (tmp_path / "empty").mkdir()
        orchestrator = Orchestrator(Config(device={"mount_root": str(tmp_path / "empty")}))
        
        with pytest.raises(DeviceNotFoundError):
            orchestrator.run("\\" + INSTALLED, str(tmp_path))
    
    def test_local_paths_run_local_sync(self, orchestrator, tmp_path):
        """Test plain paths pick the local workflow."""
        origin = tmp_path / "origin"
        destination = tmp_path / "destination"
        make_file(destination / "GameA", "GameA [0100000000000000][v0].nsp")
        make_file(origin / "GameA", "GameA Update [0100000000000800][v65536].nsp")
        
        report = orchestrator.run(str(origin), str(destination))
        
        assert report.copied == 1
        assert (destination / "GameA" / "GameA Update [0100000000000800][v65536].nsp").exists()


class TestDevicePull:
    """Test suite for downloads from the device."""
    
    def test_pull_newer_update(self, orchestrator, mount, tmp_path):
        """Test a newer update is copied down and the device is left intact."""
        destination = tmp_path / "collection"
        make_file(destination / "GameA", "GameA [0100000000000000][v0].nsp")
        stale = make_file(destination / "GameA", "GameA Update [0100000000000800][v65536].nsp")
        game = mount / INSTALLED / "GameA [0100000000000000] [v0]"
        remote = make_file(game, "GameA Update [0100000000000800][v131072].nsp", size=20)
        
        report = orchestrator.run("\\" + INSTALLED, str(destination))
        
        assert report.copied == 1
        assert report.removed == 1
        assert remote.exists()
        assert not stale.exists()
        assert (destination / "GameA" / remote.name).stat().st_size == 20
    
    def test_pull_ignores_size_on_tie(self, orchestrator, mount, tmp_path):
        """Test a larger device copy at the same version is not downloaded."""
        destination = tmp_path / "collection"
        local = make_file(destination / "GameA", "GameA [0100000000000000][v0].nsp", size=5)
        make_file(mount / INSTALLED / "GameA", "GameA [0100000000000000][v0].nsp", size=50)
        
        report = orchestrator.run("\\" + INSTALLED, str(destination))
        
        assert report.copied == 0
        assert report.tidied == 0
        assert local.stat().st_size == 5


class TestDevicePush:
    """Test suite for uploads to the device."""
    
    @pytest.fixture
    def origin(self, mount, tmp_path):
        game = mount / INSTALLED / "GameA [0100000000000000] [v0]"
        make_file(game, "GameA Update [0100000000000800][v65536].nsp")
        
        origin = tmp_path / "origin"
        make_file(origin, "GameA Update [0100000000000800][v131072].nsp")
        make_file(origin / "old", "GameA Update [0100000000000800][v65536].nsp")
        make_file(origin, "GameB DLC [0100000000010001][v0].nsp")
        make_file(origin, "GameA [0100000000000000].nsp")
        make_file(origin, "GameC [0100000000020000].nsp")
        return origin
    
    def test_push_updates_only(self, orchestrator, mount, origin):
        """Test only the newer update of the installed game is uploaded."""
        report = orchestrator.run(str(origin), "\\" + SD_INSTALL)
        
        uploaded = sorted(p.name for p in (mount / SD_INSTALL).iterdir())
        assert uploaded == ["GameA Update [0100000000000800][v131072].nsp"]
        assert report.copied == 1
        assert (origin / uploaded[0]).exists()
    
    def test_push_all_adds_missing_bases(self, orchestrator, mount, origin):
        """Test upload_all also sends base titles the device lacks."""
        orchestrator.run(str(origin), "\\" + SD_INSTALL, upload_all=True)
        
        uploaded = sorted(p.name for p in (mount / SD_INSTALL).iterdir())
        assert uploaded == [
            "GameA Update [0100000000000800][v131072].nsp",
            "GameC [0100000000020000].nsp",
        ]
    
    def test_push_without_installed_folder(self, orchestrator, mount, origin):
        """Test an unreadable installed folder aborts the upload."""
        shutil.rmtree(mount / INSTALLED)
        
        report = orchestrator.run(str(origin), "\\" + SD_INSTALL)
        
        assert report.errors == 1
        assert report.copied == 0
        assert not (mount / SD_INSTALL).exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
