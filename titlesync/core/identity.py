"""
Title Identity

Parses package display names such as
``Game [0100ABCDEF120000][v65536].nsp`` into a title id, a version,
the family prefix shared by a base title and its updates/DLC, and
whether the id names a base title.

Author: titlesync Project
License: MIT
"""

from dataclasses import dataclass

PREFIX_LENGTH = 12
BASE_ID_LENGTH = 16
BASE_ID_SUFFIX = "0000"

# Versions are parsed into a signed 32-bit range, anything else reads as 0
_MAX_VERSION = 2**31 - 1


def extract_id(name: str) -> str:
    """
    Return the text between the first ``[`` and the next ``]``.
    
    No validation of the content is done here, so malformed tags yield
    whatever lies between the brackets.
    
    Args:
        name: File or folder name
        
    Returns:
        The bracketed id, or an empty string when there is no bracket pair
    """
    start = name.find("[")
    if start < 0:
        return ""
    end = name.find("]", start + 1)
    if end < 0:
        return ""
    return name[start + 1:end]


def extract_version(name: str) -> int:
    """
    Return the integer inside the first ``[v...]`` tag.
    
    Args:
        name: File or folder name
        
    Returns:
        The version, or 0 when the tag is missing or not a valid number
    """
    start = name.find("[v")
    if start < 0:
        return 0
    start += 2
    end = name.find("]", start)
    if end <= start:
        return 0
    
    number = name[start:end].strip()
    if not number.lstrip("+-").isdigit():
        return 0
    try:
        value = int(number)
    except ValueError:
        return 0
    
    if value < 0 or value > _MAX_VERSION:
        return 0
    return value


def is_base_item(title_id: str) -> bool:
    """
    Base titles are 16 hex characters ending in ``0000``.
    
    Updates end in ``0800`` and DLC in ``0001``-``07FF``.
    """
    return (
        bool(title_id)
        and len(title_id) == BASE_ID_LENGTH
        and title_id.upper().endswith(BASE_ID_SUFFIX)
    )


def family_prefix(title_id: str) -> str:
    """First 12 characters of an id, or the whole id when shorter."""
    if not title_id:
        return ""
    return title_id[:PREFIX_LENGTH]


def matches_prefix(title_id: str, prefix: str) -> bool:
    """Case-insensitive check that ``title_id`` starts with ``prefix``."""
    return title_id.upper().startswith(prefix.upper())


@dataclass(frozen=True)
class TitleIdentity:
    """Identity recovered from a display name."""
    title_id: str
    version: int
    prefix: str
    is_base: bool
    
    @property
    def has_id(self) -> bool:
        return bool(self.title_id)


def parse_name(name: str) -> TitleIdentity:
    """
    Parse a display name into its identity.
    
    Args:
        name: File or folder name
        
    Returns:
        TitleIdentity; ``title_id`` is empty when none could be recovered
    """
    title_id = extract_id(name)
    return TitleIdentity(
        title_id=title_id,
        version=extract_version(name),
        prefix=family_prefix(title_id),
        is_base=is_base_item(title_id),
    )
