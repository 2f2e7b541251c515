"""
Logging Configuration

Console output is one line per processed item (``MOVE -> path``,
``SKIP (ID prefix mismatch): name``, ...). The console formatter colors
the level and that leading outcome word so a long run can be skimmed.
A rotating log file and JSON output can be enabled from the config.

Author: titlesync Project
License: MIT
"""

import logging
import re
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional
from pythonjsonlogger import jsonlogger

ROOT_LOGGER = "titlesync"

CONSOLE_FORMAT = '[%(asctime)s] %(levelname)s - %(message)s'
FILE_FORMAT = '[%(asctime)s] %(levelname)s - %(name)s:%(lineno)d - %(message)s'
JSON_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

RESET = '\033[0m'
LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
OUTCOME_COLORS = {
    'MOVE': '\033[1;32m',
    'COPY': '\033[1;32m',
    'DOWNLOAD': '\033[1;32m',
    'UPLOAD': '\033[1;32m',
    'RECYCLED': '\033[1;33m',
    'REMOVED': '\033[1;33m',
    'SKIP': '\033[2m',
    'NO MATCH': '\033[1;31m',
}
_OUTCOME = re.compile(r'^(%s)\b' % '|'.join(re.escape(w) for w in OUTCOME_COLORS))


class ConsoleFormatter(logging.Formatter):
    """Colors the level name and the outcome word opening an item line."""
    
    def format(self, record):
        # Other handlers share the record, color a copy
        record = logging.makeLogRecord(record.__dict__)
        color = LEVEL_COLORS.get(record.levelname)
        if color:
            record.levelname = f"{color}{record.levelname}{RESET}"
        
        message = record.getMessage()
        match = _OUTCOME.match(message)
        if match:
            word = match.group(1)
            message = f"{OUTCOME_COLORS[word]}{word}{RESET}{message[len(word):]}"
        record.msg, record.args = message, None
        return super().format(record)


def _console_handler(level: int, json_format: bool, use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
    elif use_colors:
        handler.setFormatter(ConsoleFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(
    log_path: Path,
    level: int,
    rotation_size: int,
    retention_count: int,
    json_format: bool
) -> logging.Handler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=rotation_size,
        backupCount=retention_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_file_path: str = "~/.titlesync/logs/titlesync.log",
    log_rotation_size: int = 10485760,  # 10MB
    log_retention_count: int = 5,
    json_format: bool = False,
    use_colors: bool = True
) -> logging.Logger:
    """
    Configure the ``titlesync`` logger for one run.
    
    Calling it again replaces the handlers of the previous call.
    
    Args:
        log_level: Logging level name
        log_to_file: Also write to a rotating log file
        log_file_path: Log file location (``~`` is expanded)
        log_rotation_size: Bytes before the log file rotates
        log_retention_count: Rotated files to keep
        json_format: One JSON object per line instead of text
        use_colors: Color console output (ignored for JSON)
    
    Returns:
        The configured logger
    """
    level = getattr(logging, log_level.upper())
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False
    
    logger.addHandler(_console_handler(level, json_format, use_colors))
    
    log_path: Optional[Path] = None
    if log_to_file:
        log_path = Path(log_file_path).expanduser()
        logger.addHandler(_file_handler(
            log_path, level, log_rotation_size, log_retention_count, json_format
        ))
    
    logger.debug(f"Logging initialized at {log_level} level")
    if log_path is not None:
        logger.debug(f"File logging enabled: {log_path}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger below ``titlesync`` for a module (``__name__``) or a short name."""
    if name.startswith(ROOT_LOGGER + "."):
        name = name[len(ROOT_LOGGER) + 1:]
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
