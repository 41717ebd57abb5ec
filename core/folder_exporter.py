"""
Folder Exporter Module

Materializes a FolderAggregate as a directory tree of interchange files:

    <folder>/Emails/<timestamp>_<subject>.eml
    <folder>/Emails/Attachments/<subject>/<filename>
    <folder>/Contacts/<full name>.vcf
    <folder>/Calendar/<timestamp>_<subject>.ics
    <folder>/<subfolder>/...

Writes happen one at a time. A file that cannot be written is logged and
skipped; a directory that cannot be created aborts the export.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Set, Union

from utils.file_utils import ensure_dir, sanitize_path_segment, write_file
from .records import FolderAggregate, MessageRecord
from .serializers import (
    create_eml_content,
    create_ical_content,
    create_vcard_content,
    format_timestamp,
    new_boundary,
)

logger = logging.getLogger(__name__)

EMAILS_DIR = 'Emails'
ATTACHMENTS_DIR = 'Attachments'
CONTACTS_DIR = 'Contacts'
CALENDAR_DIR = 'Calendar'


@dataclass
class ExportStats:
    """Files written during an export"""
    folders: int = 0
    messages: int = 0
    attachments: int = 0
    contacts: int = 0
    appointments: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def files_written(self) -> int:
        return self.messages + self.attachments + self.contacts + self.appointments


class FolderExporter:
    """
    Writes extracted folders to disk.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        boundary_factory: Callable[[], str] = new_boundary
    ):
        """
        Initialize the exporter.

        Args:
            logger: Logger for skipped files (defaults to this module's logger)
            boundary_factory: Produces MIME boundaries for multipart messages
        """
        self.logger = logger or logging.getLogger(__name__)
        self.boundary_factory = boundary_factory
        self.stats = ExportStats()
        self._written: Set[Path] = set()

    def _skip(self, message: str):
        self.logger.warning(message)
        self.stats.errors.append(message)

    def _target(self, directory: Path, stem: str, extension: str) -> Path:
        # The stem is capped on its own so the extension always survives
        path = directory / (sanitize_path_segment(stem) + extension)
        if path in self._written:
            message = f"Overwriting {path.name}, another item has the same name"
            self.logger.warning(message)
            self.stats.warnings.append(message)
        self._written.add(path)
        return path

    def export(self, folder: FolderAggregate, base_dir: Union[str, Path]) -> ExportStats:
        """
        Export a folder and its subfolders below ``base_dir``.

        Args:
            folder: Extracted folder tree
            base_dir: Directory the folder's own directory is created in

        Returns:
            ExportStats for everything written so far by this exporter

        Raises:
            OSError: If a directory cannot be created
        """
        folder_path = Path(base_dir) / sanitize_path_segment(folder.name)

        try:
            ensure_dir(folder_path)
            self.stats.folders += 1

            if folder.messages:
                self._export_messages(folder, folder_path / EMAILS_DIR)
            if folder.contacts:
                self._export_contacts(folder, folder_path / CONTACTS_DIR)
            if folder.appointments:
                self._export_appointments(folder, folder_path / CALENDAR_DIR)

            for subfolder in folder.subfolders:
                self.export(subfolder, folder_path)
        except OSError as e:
            self.logger.error(f"Error exporting folder {folder.name}: {e}")
            raise

        return self.stats

    def _export_messages(self, folder: FolderAggregate, emails_path: Path):
        ensure_dir(emails_path)

        for message in folder.messages:
            target = self._target(
                emails_path, f"{format_timestamp(message.sent_date)}_{message.subject}", '.eml'
            )
            try:
                content = create_eml_content(message, self.boundary_factory())
                write_file(target, content)
                self.stats.messages += 1
            except Exception as e:
                self._skip(f"Error saving message {target.name}: {e}")
                continue

            if message.attachments:
                self._export_attachments(message, emails_path / ATTACHMENTS_DIR)

    def _export_attachments(self, message: MessageRecord, attachments_root: Path):
        try:
            attachments_path = ensure_dir(attachments_root / sanitize_path_segment(message.subject))
        except OSError as e:
            self._skip(f"Error creating attachment directory for {message.subject}: {e}")
            return

        for attachment in message.attachments:
            try:
                write_file(attachments_path / sanitize_path_segment(attachment.filename), attachment.data)
                self.stats.attachments += 1
            except Exception as e:
                self._skip(f"Error saving attachment {attachment.filename}: {e}")

    def _export_contacts(self, folder: FolderAggregate, contacts_path: Path):
        ensure_dir(contacts_path)

        for contact in folder.contacts:
            target = self._target(contacts_path, contact.full_name, '.vcf')
            try:
                write_file(target, create_vcard_content(contact))
                self.stats.contacts += 1
            except Exception as e:
                self._skip(f"Error saving contact {target.name}: {e}")

    def _export_appointments(self, folder: FolderAggregate, calendar_path: Path):
        ensure_dir(calendar_path)

        for appointment in folder.appointments:
            target = self._target(
                calendar_path, f"{format_timestamp(appointment.start_time)}_{appointment.subject}", '.ics'
            )
            try:
                write_file(target, create_ical_content(appointment))
                self.stats.appointments += 1
            except Exception as e:
                self._skip(f"Error saving appointment {target.name}: {e}")
