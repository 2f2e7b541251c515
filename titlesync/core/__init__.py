"""
titlesync Core Module

Identity parsing, destination index, family matching, the copy/purge
decision engine and the synchronization workflows.

Author: titlesync Project
License: MIT
"""

from .identity import (
    TitleIdentity,
    extract_id,
    extract_version,
    family_prefix,
    is_base_item,
    parse_name
)
from .index import DestinationIndex, build_index, find_file_by_id
from .matcher import FolderMatch, MatchType, match_source_folder, resolve_folder
from .decision import CandidateItem, CopyAction, Decision, decide, should_copy
from .sync_engine import SyncContext, SyncEngine, SyncReport, SyncResult, SyncStatus
from .orchestrator import Orchestrator

__version__ = "0.1.0"
__all__ = [
    'TitleIdentity', 'extract_id', 'extract_version', 'family_prefix',
    'is_base_item', 'parse_name',
    'DestinationIndex', 'build_index', 'find_file_by_id',
    'FolderMatch', 'MatchType', 'match_source_folder', 'resolve_folder',
    'CandidateItem', 'CopyAction', 'Decision', 'decide', 'should_copy',
    'SyncContext', 'SyncEngine', 'SyncReport', 'SyncResult', 'SyncStatus',
    'Orchestrator'
]
