"""
Installed Content

Scans what a device already has installed and applies the push policy:
updates and DLC are pushed only for installed games and only when newer,
base titles only on request and only when missing.

Author: titlesync Project
License: MIT
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..utils.logger import get_logger
from ..sync_engine.readers import FileEntry
from .identity import parse_name
from .decision import CandidateItem, CopyAction, Decision, decide

logger = get_logger(__name__)


@dataclass
class InstalledContent:
    """
    Titles present on a device.
    
    ``prefixes`` holds the family prefixes of installed games and
    ``versions`` the highest version seen per exact id. Keys are upper-case.
    """
    prefixes: Set[str] = field(default_factory=set)
    versions: Dict[str, int] = field(default_factory=dict)
    
    def record(self, name: str) -> bool:
        """
        Record the id and version carried by a folder or file name.
        
        Returns:
            True if the name carried an id
        """
        identity = parse_name(name)
        if not identity.has_id:
            return False
        
        key = identity.title_id.upper()
        self.prefixes.add(identity.prefix.upper())
        if key not in self.versions or identity.version > self.versions[key]:
            self.versions[key] = identity.version
        return True
    
    def is_installed(self, title_id: str) -> bool:
        return title_id.upper() in self.versions
    
    def family_installed(self, prefix: str) -> bool:
        return prefix.upper() in self.prefixes
    
    def entries_for(self, title_id: str) -> List[FileEntry]:
        """Installed versions of ``title_id`` shaped as destination listing entries."""
        key = title_id.upper()
        if key not in self.versions:
            return []
        name = f"[{key}][v{self.versions[key]}]"
        return [FileEntry(path=name, name=name)]
    
    def __len__(self) -> int:
        return len(self.prefixes)


def scan_installed(reader, reference_path: str) -> Optional[InstalledContent]:
    """
    Scan a device folder for installed titles.
    
    Installed games may show up as folders named with their id (for
    example ``Game [01004D300C5C6000] [v0]``) or as package files, so
    folder names, the files inside each folder and the files at the root
    are all recorded. Errors inside one folder are logged and skipped.
    
    Args:
        reader: Device reader (anything with list_dirs/list_files)
        reference_path: Folder to scan
        
    Returns:
        InstalledContent, or None when the reference folder cannot be listed
    """
    logger.info(f"Scanning installed games at {reference_path}...")
    installed = InstalledContent()
    
    try:
        folders = reader.list_dirs(reference_path)
    except OSError as e:
        logger.error(f"Error scanning '{reference_path}': {e}")
        return None
    
    if not folders.available:
        logger.error(f"Could not list '{reference_path}'")
        return None
    
    for game_folder in folders:
        try:
            installed.record(os.path.basename(game_folder.path))
            for entry in reader.list_files(game_folder.path):
                installed.record(entry.name)
        except OSError as e:
            logger.warning(f"Error scanning {game_folder.path}: {e}")
    
    try:
        for entry in reader.list_files(reference_path):
            installed.record(entry.name)
    except OSError as e:
        logger.warning(f"Error scanning files in '{reference_path}': {e}")
    
    logger.info(f"{len(installed)} game(s) found on device.")
    return installed


def plan_push(
    candidate: CandidateItem,
    installed: InstalledContent,
    upload_all: bool = False
) -> Decision:
    """
    Decide whether a local file should be pushed to the device.
    
    Args:
        candidate: Local file
        installed: Result of scan_installed
        upload_all: Also push base titles that are not installed
        
    Returns:
        Decision; removals are always empty because installed content
        is managed by the device itself
    """
    if candidate.size == 0:
        return Decision(CopyAction.SKIP, "empty file")
    
    identity = parse_name(candidate.name)
    if not identity.has_id:
        return Decision(CopyAction.SKIP, "no id")
    
    if identity.is_base:
        if not upload_all:
            return Decision(CopyAction.SKIP, "base title")
        if installed.is_installed(identity.title_id):
            return Decision(CopyAction.SKIP, "base title already installed")
        return Decision(CopyAction.COPY, "base title not installed")
    
    if not installed.family_installed(identity.prefix):
        return Decision(CopyAction.SKIP, "game not installed")
    
    decision = decide(
        candidate.name,
        installed.entries_for(identity.title_id),
        candidate.size,
        skip_size_tie=True,
    )
    decision.removals = []
    return decision
