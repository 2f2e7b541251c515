"""
Orchestrator

Wires configuration, readers, the destination index and the sync engine
together for the four workflows: local sync, compare/repair, device pull
and device push.

Author: titlesync Project
License: MIT
"""

import os
from typing import Optional

from ..utils.logger import get_logger
from ..config.schema import Config
from ..exceptions import InvalidPathError
from ..sync_engine.readers import FileEntry, LocalReader
from ..sync_engine.device import (
    DeviceReader,
    MountedDevice,
    discover_devices,
    is_device_path,
    select_device
)
from ..sync_engine.file_mover import FileMover, TransferMode
from .decision import CandidateItem
from .identity import extract_id
from .index import DestinationIndex, build_index, find_file_by_id
from .installed import plan_push, scan_installed
from .matcher import MatchType, match_source_folder
from .sync_engine import SyncContext, SyncEngine, SyncReport

logger = get_logger(__name__)


class Orchestrator:
    """
    Runs one synchronization workflow.
    
    The destination index is built once at the start of a workflow and
    passed explicitly to every step; it is not refreshed mid-run.
    """
    
    def __init__(self, config: Optional[Config] = None):
        """
        Initialize orchestrator.
        
        Args:
            config: Application configuration (defaults when None)
        """
        self.config = config or Config()
        self.local_reader = LocalReader()
    
    def run(
        self,
        origin: str,
        destination: str,
        compare: bool = False,
        upload_all: bool = False
    ) -> SyncReport:
        """
        Pick the workflow from the shape of the paths.
        
        A device origin pulls from the device, a device destination pushes
        to it, anything else is a local sync (or compare).
        
        Raises:
            InvalidPathError: If a local path does not exist
            DeviceNotFoundError: If a device is needed but not available
        """
        prefixes = self.config.device.path_prefixes
        origin_on_device = is_device_path(origin, prefixes)
        destination_on_device = is_device_path(destination, prefixes)
        
        if origin_on_device and destination_on_device:
            raise InvalidPathError("Origin and destination cannot both be device paths")
        
        if origin_on_device:
            destination = self._require_dir(destination, "Destination")
            return self.run_device_pull(self.connect_device(), origin, destination)
        
        if destination_on_device:
            origin = self._require_dir(origin, "Origin")
            return self.run_device_push(self.connect_device(), origin, destination, upload_all)
        
        origin = self._require_dir(origin, "Origin")
        destination = self._require_dir(destination, "Destination")
        self._require_separate(origin, destination)
        
        if compare:
            return self.run_compare(origin, destination)
        return self.run_local_sync(origin, destination)
    
    def connect_device(self) -> MountedDevice:
        """Select the configured device among the mounted ones."""
        devices = discover_devices(self.config.device.mount_root)
        device = select_device(devices, self.config.device.device_name)
        logger.info(f"Connected to: {device.name}")
        return device
    
    def _require_dir(self, path: str, label: str) -> str:
        full_path = os.path.abspath(os.path.expanduser(path))
        if not os.path.isdir(full_path):
            raise InvalidPathError(f"{label} directory does not exist: {full_path}")
        return full_path
    
    def _require_separate(self, origin: str, destination: str):
        # Origin and destination trees must be disjoint
        real_origin = os.path.realpath(origin)
        real_destination = os.path.realpath(destination)
        if os.path.commonpath([real_origin, real_destination]) in (real_origin, real_destination):
            raise InvalidPathError(
                f"Origin and destination must not contain each other: {origin}, {destination}"
            )
    
    def _mover(self, mode: TransferMode) -> FileMover:
        return FileMover(
            mode=mode,
            trash_dir=self.config.trash_dir,
            buffer_size=self.config.sync.copy_buffer_size
        )
    
    def run_local_sync(self, origin: str, destination: str) -> SyncReport:
        """
        Move newer packages from ``origin`` into ``destination``.
        
        Source files the destination already satisfies are recycled from
        the origin.
        """
        index = build_index(destination, self.local_reader)
        context = SyncContext(
            source_reader=self.local_reader,
            mover=self._mover(TransferMode.MOVE),
            tidy_source=True,
            skip_empty=self.config.sync.skip_empty_files,
        )
        report = self.sync_collection(SyncEngine(context), origin, index)
        self._log_summary("Sync", report)
        return report
    
    def sync_collection(
        self,
        engine: SyncEngine,
        source_root: str,
        index: DestinationIndex
    ) -> SyncReport:
        """
        Synchronize a source collection organized in per-game folders.
        
        Each source folder is matched to a destination folder through the
        ids of its top-level files, then synchronized with the family
        prefix of the matching id as filter. Loose files at the source root
        are matched one by one afterwards.
        """
        report = SyncReport()
        reader = engine.context.source_reader
        
        try:
            folders = reader.list_dirs(source_root)
        except OSError as e:
            logger.error(f"Error listing '{source_root}': {e}")
            report.errors += 1
            return report
        
        if not folders.available:
            report.errors += 1
            return report
        
        total = len(folders)
        if total == 0:
            logger.info(f"No folders found in {source_root}.")
        
        for position, folder in enumerate(folders, start=1):
            logger.debug(f"[{position}/{total}] {folder.path}")
            try:
                names = [entry.name for entry in reader.list_files(folder.path)]
            except OSError as e:
                logger.error(f"Error scanning {folder.path}: {e}")
                report.errors += 1
                continue
            
            match = match_source_folder(index, names)
            if match is None:
                logger.info(f"NO MATCH: {folder.path}")
                report.no_match += 1
                continue
            
            suffix = " (prefix)" if match.match_type == MatchType.PREFIX else ""
            logger.info(f"Match found{suffix} for {folder.path}")
            report.merge(engine.sync_folder(folder.path, match.folder, match.expected_prefix))
        
        report.merge(engine.sync_loose_files(source_root, index))
        return report
    
    def run_compare(self, origin: str, destination: str) -> SyncReport:
        """
        Find origin files whose destination copy is missing or differs in size.
        
        Mismatched destination files are replaced by the origin file.
        """
        context = SyncContext(
            source_reader=self.local_reader,
            mover=self._mover(TransferMode.MOVE),
        )
        engine = SyncEngine(context)
        tolerance = self.config.sync.compare_tolerance_bytes
        report = SyncReport()
        
        folders = self.local_reader.list_dirs(origin)
        if not folders.available:
            report.errors += 1
            return report
        
        for folder in folders:
            for entry in self.local_reader.walk_files(folder.path):
                title_id = extract_id(entry.name)
                if not title_id:
                    continue
                counterpart = find_file_by_id(destination, title_id, self.local_reader)
                report.add(engine.repair_item(entry, counterpart, tolerance))
        
        report.mismatches += report.no_match
        if report.mismatches == 0:
            logger.info("All files are an exact match.")
        self._log_summary("Compare", report)
        return report
    
    def run_device_pull(
        self,
        device: MountedDevice,
        device_origin: str,
        destination: str
    ) -> SyncReport:
        """
        Download newer packages from a device into the local collection.
        
        Sizes reported by the device are not trusted, so a version tie
        never triggers a download. The device is never modified.
        """
        index = build_index(destination, self.local_reader)
        context = SyncContext(
            source_reader=DeviceReader(timeout=self.config.device.listing_timeout),
            mover=self._mover(TransferMode.COPY),
            skip_size_tie=True,
            skip_empty=True,
            label="DOWNLOAD",
        )
        source_root = device.resolve(device_origin, self.config.device.path_prefixes)
        report = self.sync_collection(SyncEngine(context), source_root, index)
        self._log_summary("Download", report)
        return report
    
    def run_device_push(
        self,
        device: MountedDevice,
        origin: str,
        device_destination: str,
        upload_all: bool = False
    ) -> SyncReport:
        """
        Upload updates and DLC for games installed on the device.
        
        Base titles are uploaded only with ``upload_all`` and only when the
        device does not have them yet.
        """
        prefixes = self.config.device.path_prefixes
        device_reader = DeviceReader(timeout=self.config.device.listing_timeout)
        reference = device.resolve(self.config.device.installed_path, prefixes)
        
        installed = scan_installed(device_reader, reference)
        if installed is None:
            report = SyncReport()
            report.errors += 1
            return report
        
        def planner(entry: FileEntry, dest_dir: str):
            decision = plan_push(CandidateItem(entry.name, entry.size, entry.path), installed, upload_all)
            logger.debug(f"{entry.name}: {decision.reason}")
            return decision
        
        context = SyncContext(
            source_reader=self.local_reader,
            mover=self._mover(TransferMode.COPY),
            dest_reader=device_reader,
            planner=planner,
            label="UPLOAD",
        )
        dest_dir = device.resolve(device_destination, prefixes)
        report = SyncEngine(context).sync_items(
            self.local_reader.walk_files(origin),
            lambda entry: dest_dir,
        )
        logger.info(f"{report.copied} file(s) uploaded to {device_destination}.")
        self._log_summary("Upload", report)
        return report
    
    def _log_summary(self, workflow: str, report: SyncReport):
        logger.info(f"{workflow} finished: {report.summary()}")
