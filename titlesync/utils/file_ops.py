"""
File Operation Utilities

Provides safe file operations: moving, buffered stream copies that work on
device mounts, and recycling files into a trash directory instead of
deleting them.

Author: titlesync Project
License: MIT
"""

import os
import shutil
from pathlib import Path
from typing import Optional, Tuple
from datetime import datetime

from .logger import get_logger

logger = get_logger(__name__)

COPY_BUFFER_SIZE = 1024 * 1024  # 1MB


def safe_move_file(
    source: str,
    destination_dir: str
) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Move a file into a destination directory.
    
    An existing file with the same name is left alone and the move fails;
    replacing it is the caller's job.
    
    Args:
        source: Source file path
        destination_dir: Destination directory path
            
    Returns:
        Tuple of (success: bool, destination_path: str, error_message: str)
    """
    try:
        source_path = Path(source)
        dest_dir = Path(destination_dir)
        
        if not source_path.is_file():
            return False, None, f"Source file not found: {source}"
        
        dest_dir.mkdir(parents=True, exist_ok=True)
        dest_path = dest_dir / source_path.name
        
        if dest_path.exists():
            logger.info(f"Skipping existing file: {dest_path}")
            return False, None, "File already exists (skipped)"
        
        shutil.move(str(source_path), str(dest_path))
        logger.debug(f"Moved: {source} -> {dest_path}")
        
        return True, str(dest_path), None
        
    except PermissionError as e:
        logger.error(f"Permission error moving file: {e}")
        return False, None, f"Permission denied: {e}"
    except OSError as e:
        logger.error(f"OS error moving file: {e}")
        return False, None, f"OS error: {e}"


def stream_copy_file(
    source: str,
    destination_path: str,
    buffer_size: int = COPY_BUFFER_SIZE
) -> Tuple[bool, Optional[str]]:
    """
    Copy a file with a fixed-size buffer.
    
    Plain buffered reads and writes are the only operations some device
    mounts support, so this avoids ``shutil.copy2`` metadata calls. The
    target must not exist. A partially written target is removed when the
    copy fails.
    
    Args:
        source: Source file path
        destination_path: Full destination file path
        buffer_size: Bytes per read
        
    Returns:
        Tuple of (success: bool, error_message: str)
    """
    dest = Path(destination_path)
    try:
        with open(source, 'rb') as src, open(dest, 'xb') as dst:
            while chunk := src.read(buffer_size):
                dst.write(chunk)
        return True, None
    except OSError as e:
        logger.error(f"Error copying {source} -> {dest}: {e}")
        if not isinstance(e, FileExistsError):
            try:
                if dest.exists():
                    dest.unlink()
            except OSError as cleanup_error:
                logger.warning(f"Could not remove partial file {dest}: {cleanup_error}")
        return False, str(e)


def recycle_file(
    source: str,
    trash_dir: Optional[str] = None
) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Send a file to the trash directory.
    
    The file keeps its parent folder name inside the trash, and a timestamp
    is appended when the name is already taken. Without a trash directory
    the file is deleted.
    
    Args:
        source: File to recycle
        trash_dir: Trash directory, or None to delete permanently
        
    Returns:
        Tuple of (success: bool, trash_path: str, error_message: str)
    """
    source_path = Path(source)
    try:
        if not source_path.exists():
            return False, None, f"File not found: {source}"
        
        if trash_dir is None:
            source_path.unlink()
            logger.debug(f"Deleted: {source}")
            return True, None, None
        
        trash_path = Path(trash_dir).expanduser() / source_path.parent.name / source_path.name
        trash_path.parent.mkdir(parents=True, exist_ok=True)
        
        if trash_path.exists():
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            trash_path = trash_path.parent / f"{trash_path.stem}_{timestamp}{trash_path.suffix}"
            counter = 1
            while trash_path.exists():
                trash_path = trash_path.parent / f"{source_path.stem}_{timestamp}_{counter}{source_path.suffix}"
                counter += 1
        
        shutil.move(str(source_path), str(trash_path))
        logger.debug(f"Recycled: {source} -> {trash_path}")
        
        return True, str(trash_path), None
        
    except OSError as e:
        logger.error(f"Error recycling file {source}: {e}")
        return False, None, f"Recycle error: {e}"


def ensure_directory(directory: str) -> bool:
    """
    Ensure a directory exists, creating it if necessary.
    
    Args:
        directory: Directory path
        
    Returns:
        True if directory exists or was created
    """
    try:
        Path(directory).mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        logger.error(f"Failed to create directory {directory}: {e}")
        return False
