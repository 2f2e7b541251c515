"""
Copy/Purge Decision Engine

Decides whether a candidate package must be copied into a destination
folder and which stale destination files must be removed first. The
engine does no I/O: it works on the listing of the destination folder
and returns a Decision for the caller to execute.

Author: titlesync Project
License: MIT
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from ..sync_engine.readers import FileEntry
from .identity import extract_id, extract_version


class CopyAction(Enum):
    """Outcome of a copy decision."""
    COPY = "copy"
    SKIP = "skip"


@dataclass(frozen=True)
class CandidateItem:
    """A source file being considered for transfer."""
    name: str
    size: int
    path: str = ""


@dataclass
class Decision:
    """
    Result of a copy decision.
    
    ``removals`` lists destination files that must be purged before the
    candidate is transferred. It is only non-empty for COPY decisions.
    """
    action: CopyAction
    reason: str
    removals: List[FileEntry] = field(default_factory=list)
    
    @property
    def should_copy(self) -> bool:
        return self.action == CopyAction.COPY
    
    def __repr__(self) -> str:
        return f"Decision(action={self.action.value}, removals={len(self.removals)}, reason={self.reason!r})"


def decide(
    candidate_name: str,
    dest_files: Iterable[FileEntry],
    candidate_size: int,
    skip_size_tie: bool = False
) -> Decision:
    """
    Decide whether ``candidate_name`` must be copied into a folder.
    
    Without an id the decision falls back to plain existence of the same
    name in the folder. Otherwise every destination file whose name
    contains the id (case-insensitive substring) is a match:
    
    - no match: copy
    - candidate newer than every match: copy after removing the older ones
    - same version as the newest match: skip when ``skip_size_tie`` is set,
      otherwise copy only if the candidate is strictly larger than the
      first match at that version
    - candidate older: skip
    
    Args:
        candidate_name: File name (or relative path) of the candidate
        dest_files: Files currently in the destination folder
        candidate_size: Candidate size in bytes
        skip_size_tie: Do not compare sizes on a version tie (used when
            the source size cannot be trusted)
        
    Returns:
        Decision
    """
    dest_files = list(dest_files)
    title_id = extract_id(candidate_name)
    version = extract_version(candidate_name)
    
    if not title_id:
        base_name = candidate_name.replace("\\", "/").rsplit("/", 1)[-1]
        if any(f.name == base_name for f in dest_files):
            return Decision(CopyAction.SKIP, "no id, file exists")
        return Decision(CopyAction.COPY, "no id, file missing")
    
    needle = title_id.upper()
    matches = [f for f in dest_files if needle in f.name.upper()]
    
    if not matches:
        return Decision(CopyAction.COPY, "not in destination")
    
    max_version = max(extract_version(f.name) for f in matches)
    
    if version > max_version:
        stale = [f for f in matches if extract_version(f.name) < version]
        return Decision(
            CopyAction.COPY,
            f"newer version v{version} > v{max_version}",
            removals=stale,
        )
    
    if version < max_version:
        return Decision(CopyAction.SKIP, f"destination has newer v{max_version}")
    
    if skip_size_tie:
        return Decision(CopyAction.SKIP, f"same version v{version}")
    
    same_version = next(f for f in matches if extract_version(f.name) == max_version)
    if candidate_size > same_version.size:
        return Decision(
            CopyAction.COPY,
            f"same version v{version}, larger ({candidate_size} > {same_version.size} bytes)",
        )
    return Decision(CopyAction.SKIP, f"same version v{version}, not larger")


def should_copy(
    candidate_name: str,
    dest_files: Iterable[FileEntry],
    candidate_size: int,
    skip_size_tie: bool = False
) -> bool:
    """Boolean shorthand for ``decide(...).should_copy``."""
    return decide(candidate_name, dest_files, candidate_size, skip_size_tie).should_copy
