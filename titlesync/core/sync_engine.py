"""
Sync Engine

One synchronization loop shared by every transport. It walks a source
collection, resolves a destination folder for each item, asks the
decision engine what to do, then hands removals and transfers to the
file mover. Transports differ only in the readers, the mover and a few
flags carried by SyncContext.

Author: titlesync Project
License: MIT
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from ..utils.logger import get_logger
from ..sync_engine.readers import FileEntry, LocalReader
from ..sync_engine.file_mover import FileMover, TransferMode
from .identity import extract_id, matches_prefix
from .index import DestinationIndex
from .matcher import resolve_folder
from .decision import CopyAction, Decision, decide

logger = get_logger(__name__)


class SyncStatus(Enum):
    """Outcome for one source item."""
    COPIED = "copied"
    SKIPPED = "skipped"
    TIDIED = "tidied"
    EMPTY = "empty"
    NO_ID = "no_id"
    NO_MATCH = "no_match"
    PREFIX_MISMATCH = "prefix_mismatch"
    MATCHED = "matched"
    REPAIRED = "repaired"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Result of processing one source item."""
    source_path: str
    status: SyncStatus
    destination_path: Optional[str] = None
    removed: List[str] = field(default_factory=list)
    reason: str = ""
    error_message: Optional[str] = None
    
    def __repr__(self) -> str:
        return f"SyncResult(source={self.source_path}, status={self.status.value})"


@dataclass
class SyncReport:
    """Counters for a whole run."""
    processed: int = 0
    copied: int = 0
    skipped: int = 0
    removed: int = 0
    tidied: int = 0
    no_match: int = 0
    mismatches: int = 0
    errors: int = 0
    results: List[SyncResult] = field(default_factory=list)
    
    def add(self, result: SyncResult) -> SyncResult:
        """Count one item result."""
        self.results.append(result)
        self.processed += 1
        self.removed += len(result.removed)
        
        if result.status == SyncStatus.COPIED:
            self.copied += 1
        elif result.status == SyncStatus.TIDIED:
            self.tidied += 1
        elif result.status == SyncStatus.NO_MATCH:
            self.no_match += 1
        elif result.status == SyncStatus.REPAIRED:
            self.mismatches += 1
        elif result.status == SyncStatus.FAILED:
            self.errors += 1
        else:
            self.skipped += 1
        return result
    
    def merge(self, other: "SyncReport") -> "SyncReport":
        """Fold another report into this one."""
        self.processed += other.processed
        self.copied += other.copied
        self.skipped += other.skipped
        self.removed += other.removed
        self.tidied += other.tidied
        self.no_match += other.no_match
        self.mismatches += other.mismatches
        self.errors += other.errors
        self.results.extend(other.results)
        return self
    
    def summary(self) -> Dict[str, int]:
        return {
            "processed": self.processed,
            "copied": self.copied,
            "skipped": self.skipped,
            "removed": self.removed,
            "tidied": self.tidied,
            "no_match": self.no_match,
            "mismatches": self.mismatches,
            "errors": self.errors,
        }


# Planner signature: (source entry, destination folder) -> Decision
Planner = Callable[[FileEntry, str], Decision]


@dataclass
class SyncContext:
    """
    Capabilities of one transport.
    
    Attributes:
        source_reader: Lists the source collection
        mover: Executes transfers and removals
        dest_reader: Lists destination folders for the decision engine
        tidy_source: Recycle source items the destination already satisfies
        skip_size_tie: Skip on a version tie instead of comparing sizes
        skip_empty: Never transfer zero-length files
        planner: Replaces the default list-and-decide step
        label: Verb used in transfer log lines
    """
    source_reader: LocalReader
    mover: FileMover
    dest_reader: LocalReader = field(default_factory=LocalReader)
    tidy_source: bool = False
    skip_size_tie: bool = False
    skip_empty: bool = True
    planner: Optional[Planner] = None
    label: str = ""
    
    def __post_init__(self):
        if not self.label:
            self.label = "MOVE" if self.mover.mode == TransferMode.MOVE else "COPY"


class SyncEngine:
    """
    Generic synchronization loop.
    
    Every item goes through resolve -> decide -> execute on its own; a
    failure on one item is logged and counted without stopping the loop.
    """
    
    def __init__(self, context: SyncContext):
        """
        Initialize sync engine.
        
        Args:
            context: Transport capabilities
        """
        self.context = context
    
    def plan(self, entry: FileEntry, dest_dir: str) -> Decision:
        """
        Decide what to do with ``entry`` in ``dest_dir``.
        
        Raises:
            OSError: If an existing destination folder cannot be listed
        """
        if self.context.planner is not None:
            return self.context.planner(entry, dest_dir)
        
        dest_files: List[FileEntry] = []
        if os.path.isdir(dest_dir):
            listing = self.context.dest_reader.list_files(dest_dir)
            if not listing.available:
                raise OSError(f"Cannot list destination folder {dest_dir}")
            dest_files = listing.entries
        
        return decide(entry.name, dest_files, entry.size, self.context.skip_size_tie)
    
    def sync_item(self, entry: FileEntry, dest_dir: str) -> SyncResult:
        """
        Decide and execute for one source file.
        
        Args:
            entry: Source file
            dest_dir: Destination folder resolved for it
            
        Returns:
            SyncResult
        """
        try:
            decision = self.plan(entry, dest_dir)
            
            if decision.action == CopyAction.SKIP:
                return self._handle_skip(entry, decision)
            
            if self.context.skip_empty and entry.size == 0:
                return SyncResult(entry.path, SyncStatus.EMPTY, reason="empty file")
            
            removed = []
            for stale in decision.removals:
                if self.context.mover.purge(stale.path):
                    logger.info(f"RECYCLED (older version): {stale.name}")
                    removed.append(stale.path)
            
            target = os.path.join(dest_dir, entry.name)
            logger.info(f"{self.context.label} -> {target}")
            
            result = self.context.mover.transfer(entry.path, dest_dir)
            if not result.success:
                logger.error(f"Error transferring file: {result.error_message}")
                logger.error(f"  {entry.path}")
                logger.error(f"  {target}")
                return SyncResult(
                    entry.path,
                    SyncStatus.FAILED,
                    destination_path=target,
                    removed=removed,
                    reason=decision.reason,
                    error_message=result.error_message,
                )
            
            return SyncResult(
                entry.path,
                SyncStatus.COPIED,
                destination_path=result.destination_path,
                removed=removed,
                reason=decision.reason,
            )
            
        except OSError as e:
            logger.error(f"Error processing: {e}")
            logger.error(f"  {entry.path}")
            return SyncResult(entry.path, SyncStatus.FAILED, error_message=str(e))
    
    def _handle_skip(self, entry: FileEntry, decision: Decision) -> SyncResult:
        if self.context.tidy_source and extract_id(entry.name):
            if self.context.mover.purge(entry.path):
                logger.info(f"REMOVED (already in dest): {entry.name}")
                return SyncResult(entry.path, SyncStatus.TIDIED, reason=decision.reason)
            return SyncResult(
                entry.path,
                SyncStatus.FAILED,
                reason=decision.reason,
                error_message="could not remove source",
            )
        
        logger.debug(f"SKIP ({decision.reason}): {entry.name}")
        return SyncResult(entry.path, SyncStatus.SKIPPED, reason=decision.reason)
    
    def sync_items(
        self,
        entries: Iterable[FileEntry],
        resolve: Callable[[FileEntry], Optional[str]],
        expected_prefix: Optional[str] = None,
        report: Optional[SyncReport] = None
    ) -> SyncReport:
        """
        The loop: filter by family, resolve a destination, decide, execute.
        
        Args:
            entries: Source files
            resolve: Returns the destination folder for an entry, or None
            expected_prefix: Family prefix every identified entry must share
            report: Report to add results to (a new one by default)
            
        Returns:
            SyncReport
        """
        if report is None:
            report = SyncReport()
        
        for entry in entries:
            title_id = extract_id(entry.name)
            
            if expected_prefix and title_id and not matches_prefix(title_id, expected_prefix):
                logger.info(f"SKIP (ID prefix mismatch): {entry.name}")
                report.add(SyncResult(entry.path, SyncStatus.PREFIX_MISMATCH))
                continue
            
            dest_dir = resolve(entry)
            if dest_dir is None:
                logger.warning(f"NO MATCH: {entry.path}")
                report.add(SyncResult(entry.path, SyncStatus.NO_MATCH))
                continue
            
            report.add(self.sync_item(entry, dest_dir))
        
        return report
    
    def sync_folder(
        self,
        source_folder: str,
        dest_folder: str,
        expected_prefix: Optional[str] = None
    ) -> SyncReport:
        """
        Synchronize every file under ``source_folder`` into ``dest_folder``.
        
        Sub-paths relative to the source folder are preserved.
        """
        def resolve(entry: FileEntry) -> str:
            relative_dir = os.path.dirname(os.path.relpath(entry.path, source_folder))
            return os.path.join(dest_folder, relative_dir) if relative_dir else dest_folder
        
        report = SyncReport()
        try:
            self.sync_items(
                self.context.source_reader.walk_files(source_folder),
                resolve,
                expected_prefix,
                report,
            )
        except OSError as e:
            logger.error(f"Error syncing folder {source_folder}: {e}")
            report.errors += 1
        return report
    
    def sync_loose_files(self, source_root: str, index: DestinationIndex) -> SyncReport:
        """
        Synchronize the files sitting directly in ``source_root``.
        
        Each file is matched on its own id. Files without an id are left alone.
        """
        def resolve(entry: FileEntry) -> Optional[str]:
            match = resolve_folder(index, extract_id(entry.name))
            return match.folder if match else None
        
        try:
            entries = [
                e for e in self.context.source_reader.list_files(source_root)
                if extract_id(e.name)
            ]
        except OSError as e:
            logger.error(f"Error listing files in {source_root}: {e}")
            report = SyncReport()
            report.errors += 1
            return report
        
        return self.sync_items(entries, resolve)
    
    def repair_item(
        self,
        entry: FileEntry,
        counterpart: Optional[FileEntry],
        tolerance: int
    ) -> SyncResult:
        """
        Compare a source file with its destination counterpart.
        
        A missing counterpart is a NO_MATCH. A non-empty source whose size
        differs by more than ``tolerance`` bytes replaces the counterpart.
        """
        if counterpart is None:
            logger.warning(f"NO MATCH: {entry.path}")
            return SyncResult(entry.path, SyncStatus.NO_MATCH)
        
        if entry.size == 0 or abs(entry.size - counterpart.size) <= tolerance:
            return SyncResult(entry.path, SyncStatus.MATCHED, destination_path=counterpart.path)
        
        logger.warning(f"Size mismatch for [{extract_id(entry.name)}]")
        logger.warning(f"  Origin:      {entry.path} ({entry.size} bytes)")
        logger.warning(f"  Destination: {counterpart.path} ({counterpart.size} bytes)")
        
        result = SyncResult(
            entry.path,
            SyncStatus.REPAIRED,
            destination_path=counterpart.path,
            reason="size mismatch",
        )
        
        dest_dir = os.path.dirname(counterpart.path)
        if not self.context.mover.purge(counterpart.path):
            result.error_message = "could not remove destination file"
            return result
        result.removed.append(counterpart.path)
        
        moved = self.context.mover.transfer(entry.path, dest_dir)
        if moved.success:
            logger.info("  Replaced.")
            result.destination_path = moved.destination_path
        else:
            logger.error(f"  Error replacing: {moved.error_message}")
            result.error_message = moved.error_message
        return result
