"""
File Utilities Module

Filesystem helpers shared by the exporter and the batch pipeline.
"""

import re
from pathlib import Path
from typing import Iterable, List, Union
import logging

logger = logging.getLogger(__name__)

# Windows has a 260 character path limit; leave room for the extension
# and a few directory levels.
MAX_SEGMENT_LENGTH = 180

_INVALID_PATH_CHARS = re.compile(r'[<>:"/\\|?*]')


def sanitize_path_segment(value: str, replacement: str = '_') -> str:
    """
    Make a display string safe to use as a single path segment.

    Args:
        value: Folder name, subject, contact name or attachment filename
        replacement: Character substituted for each invalid character

    Returns:
        String without ``< > : " / \\ | ? *`` and at most 180 characters long
    """
    sanitized = _INVALID_PATH_CHARS.sub(replacement, value or '')
    return sanitized[:MAX_SEGMENT_LENGTH]


def ensure_dir(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_file(path: Union[str, Path], content: Union[str, bytes]) -> Path:
    """
    Write a whole file in one call. Text is stored as UTF-8.

    Args:
        path: Destination file
        content: Text or raw bytes

    Returns:
        Path object for the written file
    """
    path = Path(path)
    if isinstance(content, str):
        content = content.encode('utf-8')
    path.write_bytes(content)
    return path


def find_files_by_extension(
    directory: Union[str, Path],
    extensions: Iterable[str]
) -> List[Path]:
    """
    List the files directly inside a directory with one of the given extensions.

    Matching is case-insensitive; subdirectories are not searched.

    Args:
        directory: Directory to scan
        extensions: Extensions including the leading dot, e.g. ``('.ost',)``

    Returns:
        Sorted list of matching files
    """
    directory = Path(directory)
    wanted = {ext.lower() for ext in extensions}

    if not directory.is_dir():
        logger.warning(f"Input directory does not exist: {directory}")
        return []

    return sorted(
        item for item in directory.iterdir()
        if item.is_file() and item.suffix.lower() in wanted
    )
