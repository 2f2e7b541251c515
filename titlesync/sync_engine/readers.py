"""
Tree Readers

Enumerate files and folders of a collection. Listings are returned as a
ListingResult, which is either a list of entries or an explicit
"unavailable" marker, so callers can skip a subtree without handling
exceptions.

Author: titlesync Project
License: MIT
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List

from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """A file or folder found while listing a tree."""
    path: str
    name: str
    size: int = 0


@dataclass
class ListingResult:
    """Entries of one folder, or the marker that the folder could not be listed."""
    entries: List[FileEntry] = field(default_factory=list)
    available: bool = True
    
    @classmethod
    def unavailable(cls) -> "ListingResult":
        return cls(entries=[], available=False)
    
    def __iter__(self) -> Iterator[FileEntry]:
        return iter(self.entries)
    
    def __len__(self) -> int:
        return len(self.entries)


class LocalReader:
    """
    Reader for a local filesystem tree.
    
    Access-denied and not-found conditions make the affected folder
    unavailable instead of raising.
    """
    
    def list_files(self, folder: str) -> ListingResult:
        """List the files directly inside ``folder``, sorted by name."""
        return self._list(folder, want_dirs=False)
    
    def list_dirs(self, folder: str) -> ListingResult:
        """List the subfolders directly inside ``folder``, sorted by name."""
        return self._list(folder, want_dirs=True)
    
    def walk_files(self, root: str) -> Iterator[FileEntry]:
        """
        Yield every file under ``root``.
        
        The files of a folder come before the files of its subfolders.
        Folders that cannot be listed are skipped.
        """
        files = self.list_files(root)
        for entry in files:
            yield entry
        
        for subfolder in self.list_dirs(root):
            yield from self.walk_files(subfolder.path)
    
    def _list(self, folder: str, want_dirs: bool) -> ListingResult:
        try:
            return ListingResult(entries=scan_folder(folder, want_dirs))
        except PermissionError as e:
            logger.warning(f"Access denied: {folder} - {e}")
        except FileNotFoundError as e:
            logger.warning(f"Directory not found: {folder} - {e}")
        except OSError as e:
            logger.warning(f"I/O error in {folder} - {e}")
        return ListingResult.unavailable()


def scan_folder(folder: str, want_dirs: bool) -> List[FileEntry]:
    """
    List one folder level.
    
    Args:
        folder: Folder to list
        want_dirs: Return subfolders instead of files
        
    Returns:
        Entries sorted by name
        
    Raises:
        OSError: If the folder cannot be listed
    """
    entries = []
    with os.scandir(folder) as it:
        for item in it:
            try:
                is_dir = item.is_dir()
                if want_dirs != is_dir:
                    continue
                if not is_dir and not item.is_file():
                    continue
                size = 0 if is_dir else item.stat().st_size
            except OSError as e:
                logger.warning(f"Cannot read {item.path}: {e}")
                continue
            entries.append(FileEntry(path=str(Path(item.path)), name=item.name, size=size))
    
    entries.sort(key=lambda e: e.name)
    return entries
