"""
Mailbox Inspector Module

Read-only listing of a mailbox's folder tree and message subjects,
for checking what a file contains before exporting it.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from .folder_walker import SKIPPED, isolate
from .pff_reader import open_mailbox

logger = logging.getLogger(__name__)

INDENT = '  '


def inspect_folder(
    folder,
    depth: int = 0,
    log: Optional[logging.Logger] = None
) -> List[str]:
    """
    List a folder's subjects and subfolders, recursively.

    The root folder's own name is not listed. Unreadable items and folders
    are logged and left out.

    Args:
        folder: Reader folder handle
        depth: Nesting level of ``folder``
        log: Logger for skipped items

    Returns:
        Indented lines, one per folder and per item
    """
    log = log or logger
    indent = INDENT * depth
    lines: List[str] = []

    if depth > 0:
        lines.append(f"{indent}[{folder.display_name}]")

    def list_contents():
        item = folder.get_next_child()
        while item is not None:
            subject = isolate(log, "Error reading item", lambda: item.subject or '(No Subject)')
            if subject is not SKIPPED:
                lines.append(f"{indent}{INDENT}{subject}")
            item = isolate(log, "Error getting next item", folder.get_next_child)
            if item is SKIPPED:
                break

    if folder.content_count > 0:
        isolate(log, "Error processing folder content", list_contents)

    if folder.has_subfolders:
        children = isolate(log, "Error getting subfolders", folder.get_sub_folders)
        if children is not SKIPPED:
            for child in children:
                child_lines = isolate(log, "Error processing subfolder", inspect_folder, child, depth + 1, log)
                if child_lines is not SKIPPED:
                    lines.extend(child_lines)

    return lines


def inspect_mailbox(path: Union[str, Path]) -> List[str]:
    """
    Describe a PST/OST file: store name followed by the folder listing.

    Raises:
        ExportError: If the file cannot be opened
    """
    with open_mailbox(path) as mailbox:
        lines = [f"Message Store: {mailbox.store_name}"]
        lines.extend(inspect_folder(mailbox.get_root_folder()))
    return lines
