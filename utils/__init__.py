"""
Utilities Package
"""

from .file_utils import (
    sanitize_path_segment,
    ensure_dir,
    write_file,
    find_files_by_extension,
)

__all__ = [
    'sanitize_path_segment',
    'ensure_dir',
    'write_file',
    'find_files_by_extension',
]
