"""
Command-line interface for titlesync.

Usage:
    titlesync -o <origin> -d <destination> [-c] [--all]
    titlesync <origin> <destination>

Paths starting with a backslash (``\\4: Installed games``) or ``mtp:``
refer to the connected device: a device origin downloads from it, a
device destination uploads to it.

Author: titlesync Project
License: MIT
"""

import sys
from typing import Optional

import click

from .config.config_loader import ConfigLoader
from .core.orchestrator import Orchestrator
from .exceptions import TitleSyncError
from .utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

EPILOG = """\b
Sync mode (default):
  Matches each origin subfolder to a destination subfolder by shared file ID.
  A file is copied when no file with the same ID exists in the destination,
  or when the source version [vN] is higher than all destination versions.
  Older destination versions are sent to the trash before copying.
  Empty files are skipped.

\b
Compare mode (-c):
  Locates every origin file's counterpart in the destination by ID.
  Reports files with no match or a size difference above the tolerance
  (3000 bytes by default) and replaces mismatched files.

\b
File naming convention:
  Game Title [0100XXXXXXXX0000][v131072].nsp

\b
Examples:
  titlesync -o "\\4: Installed games" -d ~/Backup     (download from device)
  titlesync -o ~/NewGames -d "\\5: SD Card install"   (upload to device)
  titlesync -o ~/NewGames -d ~/AllMyGames             (local)
"""


@click.command(epilog=EPILOG, context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("origin_arg", required=False, metavar="[ORIGIN]")
@click.argument("destination_arg", required=False, metavar="[DESTINATION]")
@click.option("-o", "--origin", help="Origin folder (contains subfolders of game files).")
@click.option("-d", "--destination", help="Destination folder (contains subfolders of game files).")
@click.option("-c", "--compare", is_flag=True, help="Scan for missing or size-mismatched files and replace them.")
@click.option("-all", "--all", "upload_all", is_flag=True,
              help="Upload base games to the device too, only when not already installed.")
@click.option("--device-name", help="Substring of the device name to use (default: first device).")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Path to config.yaml.")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Override the configured log level.")
@click.version_option(package_name="titlesync")
def main(
    origin_arg: Optional[str],
    destination_arg: Optional[str],
    origin: Optional[str],
    destination: Optional[str],
    compare: bool,
    upload_all: bool,
    device_name: Optional[str],
    config_path: Optional[str],
    log_level: Optional[str]
) -> None:
    """Keep game package collections in sync by title ID and version."""
    try:
        config = ConfigLoader(config_path).load()
    except ValueError as e:
        click.echo(f"Error: invalid configuration: {e}", err=True)
        sys.exit(1)
    
    if log_level:
        config.app.log_level = log_level.upper()
    if device_name:
        config.device.device_name = device_name
    
    setup_logging(
        log_level=config.app.log_level,
        log_to_file=config.app.log_to_file,
        log_file_path=config.app.log_file_path,
        log_rotation_size=config.app.log_rotation_size,
        log_retention_count=config.app.log_retention_count,
        json_format=config.app.json_logs,
        use_colors=sys.stdout.isatty()
    )
    
    origin = origin or origin_arg
    destination = destination or destination_arg
    
    if not origin:
        origin = click.prompt("Enter the origin folder path").strip()
    if not destination:
        destination = click.prompt("Enter the destination folder path").strip()
    
    try:
        report = Orchestrator(config).run(origin, destination, compare=compare, upload_all=upload_all)
    except TitleSyncError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Error occurred: {e}")
        sys.exit(1)
    
    click.echo(
        f"{report.copied} copied, {report.skipped} skipped, {report.tidied} removed from origin, "
        f"{report.no_match} without match, {report.errors} error(s)"
        + (f", {report.mismatches} mismatch(es)" if compare else "")
    )


if __name__ == "__main__":
    main()
