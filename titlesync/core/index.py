"""
Destination Index

Maps every title id found in a destination tree to the folder that holds
it. The index is built once per run and never refreshed, so removals and
transfers made during the run are not reflected in it.

Author: titlesync Project
License: MIT
"""

import os
from typing import Dict, Iterator, Optional, Tuple

from ..utils.logger import get_logger
from ..sync_engine.readers import FileEntry, LocalReader
from .identity import extract_id

logger = get_logger(__name__)


class DestinationIndex:
    """
    Case-insensitive mapping of title id -> folder path.
    
    The first folder recorded for an id wins; later occurrences are ignored.
    Iteration follows insertion order.
    """
    
    def __init__(self):
        self._entries: Dict[str, Tuple[str, str]] = {}  # ID -> (id, folder)
    
    def add(self, title_id: str, folder: str) -> bool:
        """
        Record ``title_id`` unless it is already present.
        
        Returns:
            True if the id was added
        """
        key = title_id.upper()
        if not title_id or key in self._entries:
            return False
        self._entries[key] = (title_id, folder)
        return True
    
    def get(self, title_id: str) -> Optional[str]:
        entry = self._entries.get(title_id.upper())
        return entry[1] if entry else None
    
    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._entries.values())
    
    def __contains__(self, title_id: str) -> bool:
        return title_id.upper() in self._entries
    
    def __len__(self) -> int:
        return len(self._entries)
    
    def __repr__(self) -> str:
        return f"DestinationIndex(ids={len(self)})"


def build_index(dest_root: str, reader: Optional[LocalReader] = None) -> DestinationIndex:
    """
    Scan every immediate subfolder of ``dest_root`` recursively.
    
    Files at the root itself are not indexed. Each file with a bracketed id
    records ``id -> containing folder``, first occurrence wins.
    
    Args:
        dest_root: Destination root folder
        reader: Tree reader (local filesystem by default)
        
    Returns:
        DestinationIndex
    """
    reader = reader or LocalReader()
    index = DestinationIndex()
    
    logger.info(f"Indexing destination: {dest_root}")
    
    for dest_folder in reader.list_dirs(dest_root):
        for entry in reader.walk_files(dest_folder.path):
            title_id = extract_id(entry.name)
            if title_id:
                index.add(title_id, os.path.dirname(entry.path))
    
    logger.info(f"Indexed {len(index)} title id(s) in {dest_root}")
    return index


def find_file_by_id(
    root: str,
    title_id: str,
    reader: Optional[LocalReader] = None
) -> Optional[FileEntry]:
    """
    Find the first file under ``root`` whose name contains ``title_id``.
    
    Files of a folder are checked before its subfolders. Unreadable
    subtrees are skipped.
    
    Args:
        root: Folder to search
        title_id: Id to look for (case-insensitive substring)
        reader: Tree reader (local filesystem by default)
        
    Returns:
        The matching FileEntry, or None
    """
    reader = reader or LocalReader()
    needle = title_id.upper()
    
    for entry in reader.walk_files(root):
        if needle in entry.name.upper():
            return entry
    
    return None
