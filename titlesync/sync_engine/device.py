"""
Device Access

Removable devices (for example a console exposed over MTP) are used
through a filesystem mount. Listings on such mounts can hang when the
device stops responding, so DeviceReader bounds every listing with a
timeout and reports the folder as unavailable instead of blocking.

Author: titlesync Project
License: MIT
"""

import os
from dataclasses import dataclass
from pathlib import Path
from queue import Queue, Empty
from threading import Thread
from typing import List, Optional, Sequence

from ..exceptions import DeviceNotFoundError
from ..utils.logger import get_logger
from .readers import ListingResult, LocalReader, scan_folder

logger = get_logger(__name__)

DEFAULT_PATH_PREFIXES = ("\\", "mtp:")


class DeviceReader(LocalReader):
    """
    Reader for a mounted device.
    
    Each listing runs in a daemon thread. When it does not finish within
    ``timeout`` seconds the folder is reported unavailable and the thread
    is abandoned. Other listing errors are raised to the caller.
    """
    
    def __init__(self, timeout: float = 30.0):
        """
        Initialize device reader.
        
        Args:
            timeout: Seconds to wait for one directory listing
        """
        self.timeout = timeout
    
    def _list(self, folder: str, want_dirs: bool) -> ListingResult:
        results: Queue = Queue(maxsize=1)
        
        def worker():
            try:
                results.put((scan_folder(folder, want_dirs), None))
            except OSError as e:
                results.put((None, e))
        
        Thread(target=worker, daemon=True, name="device-listing").start()
        
        try:
            entries, error = results.get(timeout=self.timeout)
        except Empty:
            kind = "directories" if want_dirs else "files"
            logger.warning(f"Timeout ({self.timeout:g}s) listing {kind} in: {folder} - skipping.")
            return ListingResult.unavailable()
        
        if error is not None:
            raise error
        return ListingResult(entries=entries)


@dataclass(frozen=True)
class MountedDevice:
    """A device reachable through a mount point."""
    name: str
    mount_path: str
    
    def resolve(self, device_path: str, prefixes: Sequence[str] = DEFAULT_PATH_PREFIXES) -> str:
        """
        Turn a device path such as ``\\4: Installed games`` into a local path.
        
        Args:
            device_path: Path on the device, with or without a device prefix
            prefixes: Prefixes that mark device paths
            
        Returns:
            Path below the mount point
        """
        relative = strip_device_prefix(device_path, prefixes)
        parts = [p for p in relative.replace("\\", "/").split("/") if p]
        return str(Path(self.mount_path, *parts))


def is_device_path(path: str, prefixes: Sequence[str] = DEFAULT_PATH_PREFIXES) -> bool:
    """Check whether ``path`` refers to a location on a device."""
    return any(path.lower().startswith(p.lower()) for p in prefixes if p)


def strip_device_prefix(path: str, prefixes: Sequence[str] = DEFAULT_PATH_PREFIXES) -> str:
    """Remove the device prefix (longest match first) from ``path``."""
    for prefix in sorted((p for p in prefixes if p), key=len, reverse=True):
        if path.lower().startswith(prefix.lower()):
            return path[len(prefix):]
    return path


def default_mount_root() -> str:
    """Where the desktop mounts MTP devices (gvfs)."""
    uid = os.getuid() if hasattr(os, "getuid") else 0
    return f"/run/user/{uid}/gvfs"


def discover_devices(mount_root: Optional[str] = None) -> List[MountedDevice]:
    """
    List the devices mounted below ``mount_root``.
    
    Every immediate subfolder of the mount root is a device; its folder
    name doubles as the device name.
    
    Args:
        mount_root: Folder holding device mounts (gvfs root by default)
        
    Returns:
        Devices sorted by name
    """
    root = Path(mount_root or default_mount_root()).expanduser()
    if not root.is_dir():
        logger.debug(f"Mount root does not exist: {root}")
        return []
    
    devices = []
    try:
        for item in sorted(root.iterdir(), key=lambda p: p.name):
            if item.is_dir():
                devices.append(MountedDevice(name=item.name, mount_path=str(item)))
    except OSError as e:
        logger.error(f"Cannot list mount root {root}: {e}")
    
    return devices


def select_device(devices: List[MountedDevice], name: Optional[str] = None) -> MountedDevice:
    """
    Pick the device to use.
    
    Args:
        devices: Connected devices
        name: Case-insensitive substring of the device name, or None for the first
        
    Returns:
        The selected device
        
    Raises:
        DeviceNotFoundError: If there are no devices or none matches ``name``
    """
    if not devices:
        raise DeviceNotFoundError(
            "No devices found. Make sure the device is connected and its storage is mounted."
        )
    
    if not name:
        return devices[0]
    
    for device in devices:
        if name.lower() in device.name.lower():
            return device
    
    connected = ", ".join(d.name for d in devices)
    raise DeviceNotFoundError(f"Device '{name}' not found. Connected devices: {connected}")
