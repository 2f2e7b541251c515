"""
Sync Engine I/O Module

Tree readers, device access and the transfer executor used by the
synchronization loop.

Author: titlesync Project
License: MIT
"""

from .readers import FileEntry, ListingResult, LocalReader
from .device import DeviceReader, MountedDevice, discover_devices, select_device
from .file_mover import FileMover, MoveResult, TransferMode

__all__ = [
    'FileEntry', 'ListingResult', 'LocalReader',
    'DeviceReader', 'MountedDevice', 'discover_devices', 'select_device',
    'FileMover', 'MoveResult', 'TransferMode'
]
