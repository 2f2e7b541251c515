"""
Family Matcher

Resolves which destination folder a title belongs to: an exact id hit in
the destination index, otherwise any indexed id from the same family
(same 12-character prefix).

Author: titlesync Project
License: MIT
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..utils.logger import get_logger
from .identity import extract_id, family_prefix, matches_prefix
from .index import DestinationIndex

logger = get_logger(__name__)


class MatchType(Enum):
    """How a destination folder was found."""
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True)
class FolderMatch:
    """Destination folder resolved for a source id."""
    folder: str
    source_id: str
    matched_id: str
    match_type: MatchType
    
    @property
    def expected_prefix(self) -> str:
        """Family prefix that files synced into this folder must share."""
        return family_prefix(self.source_id)


def resolve_folder(index: DestinationIndex, title_id: str) -> Optional[FolderMatch]:
    """
    Resolve the destination folder for ``title_id``.
    
    An exact id always wins. Otherwise the index is scanned in insertion
    order for the first key sharing the family prefix; this accepts any
    sibling (base, update or DLC) as the anchor folder.
    
    Returns None when nothing matches. Creating a folder for an unknown
    title is left to the caller.
    """
    if not title_id:
        return None
    
    folder = index.get(title_id)
    if folder is not None:
        return FolderMatch(
            folder=folder,
            source_id=title_id,
            matched_id=title_id,
            match_type=MatchType.EXACT,
        )
    
    prefix = family_prefix(title_id)
    for indexed_id, indexed_folder in index.items():
        if matches_prefix(indexed_id, prefix):
            logger.debug(f"[{title_id}] resolved through sibling [{indexed_id}]")
            return FolderMatch(
                folder=indexed_folder,
                source_id=title_id,
                matched_id=indexed_id,
                match_type=MatchType.PREFIX,
            )
    
    return None


def match_source_folder(
    index: DestinationIndex,
    file_names: Iterable[str]
) -> Optional[FolderMatch]:
    """
    Resolve a whole source folder from the names of its files.
    
    Names are tried in order and the first one whose id resolves decides
    the folder. Names without an id are ignored.
    
    Args:
        index: Destination index
        file_names: Top-level file names of the source folder
        
    Returns:
        FolderMatch for the first resolvable name, or None
    """
    for name in file_names:
        title_id = extract_id(name)
        if not title_id:
            continue
        match = resolve_folder(index, title_id)
        if match is not None:
            return match
    return None
