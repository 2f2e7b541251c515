"""
File Mover

Executes the transfers and removals decided by the sync engine. Local
syncs move files; transfers from or to a device use buffered stream copies.
Replaced and stale files are sent to the trash directory.

Author: titlesync Project
License: MIT
"""

from pathlib import Path
from typing import Optional
from dataclasses import dataclass
from enum import Enum

from ..utils.logger import get_logger
from ..utils.file_ops import (
    COPY_BUFFER_SIZE,
    ensure_directory,
    recycle_file,
    safe_move_file,
    stream_copy_file
)

logger = get_logger(__name__)


class TransferMode(Enum):
    """How bytes are moved."""
    MOVE = "move"
    COPY = "copy"


@dataclass
class MoveResult:
    """Result of a transfer."""
    success: bool
    source_path: str
    destination_path: Optional[str] = None
    error_message: Optional[str] = None
    was_replaced: bool = False


class FileMover:
    """
    Transfer executor.
    
    Owns overwrite semantics: a file already sitting at the target path is
    recycled before the new one is written.
    """
    
    def __init__(
        self,
        mode: TransferMode = TransferMode.MOVE,
        trash_dir: Optional[str] = None,
        buffer_size: int = COPY_BUFFER_SIZE
    ):
        """
        Initialize file mover.
        
        Args:
            mode: MOVE for local renames/moves, COPY for stream copies
            trash_dir: Where removed files go (None deletes them)
            buffer_size: Buffer size for stream copies
        """
        self.mode = mode
        self.trash_dir = trash_dir
        self.buffer_size = buffer_size
        
        logger.debug(f"FileMover initialized (mode: {mode.value}, trash: {trash_dir})")
    
    def transfer(self, source_file: str, destination_dir: str) -> MoveResult:
        """
        Move or copy ``source_file`` into ``destination_dir``.
        
        Args:
            source_file: Source file path
            destination_dir: Target folder, created when missing
        
        Returns:
            MoveResult with operation details
        """
        target = Path(destination_dir) / Path(source_file).name
        
        if not ensure_directory(destination_dir):
            return MoveResult(
                success=False,
                source_path=source_file,
                error_message=f"Cannot create directory {destination_dir}"
            )
        
        was_replaced = False
        if target.exists():
            if not self.purge(str(target)):
                return MoveResult(
                    success=False,
                    source_path=source_file,
                    error_message=f"Cannot replace existing file {target}"
                )
            was_replaced = True
        
        if self.mode == TransferMode.MOVE:
            success, dest_path, error = safe_move_file(source_file, destination_dir)
        else:
            success, error = stream_copy_file(source_file, str(target), self.buffer_size)
            dest_path = str(target) if success else None
        
        return MoveResult(
            success=success,
            source_path=source_file,
            destination_path=dest_path,
            error_message=error,
            was_replaced=was_replaced
        )
    
    def purge(self, path: str) -> bool:
        """
        Recycle a file.
        
        Returns:
            True if the file is gone
        """
        success, trash_path, error = recycle_file(path, self.trash_dir)
        if not success:
            logger.error(f"Could not remove {path}: {error}")
        return success

