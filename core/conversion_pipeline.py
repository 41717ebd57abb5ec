"""
Conversion Pipeline Module

Orchestrates the export of every mailbox file found in a directory.

Each file is processed completely (open, extract, export) before the next
one starts. A file that fails is recorded and skipped; the batch goes on.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime

from utils.file_utils import ensure_dir, find_files_by_extension
from .exceptions import ExportError, MailboxNotFoundError, MailboxOpenError, NoDataFoundError
from .folder_exporter import FolderExporter
from .folder_walker import MailboxTreeWalker
from .mailbox_inspector import inspect_mailbox
from .pff_reader import open_mailbox
from .records import FolderAggregate
from .serializers import new_boundary

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = ('.ost', '.pst')
DEFAULT_OUTPUT_DIRNAME = 'outlook_export'


@dataclass
class ExportConfig:
    """Configuration for a batch export"""
    input_dir: str
    output_dir: Optional[str] = None  # defaults to <input_dir>/outlook_export
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    inspect_only: bool = False  # list folder trees instead of exporting

    @property
    def output_base(self) -> Path:
        if self.output_dir:
            return Path(self.output_dir)
        return Path(self.input_dir) / DEFAULT_OUTPUT_DIRNAME


@dataclass
class FileResult:
    """Result of exporting one mailbox file"""
    input_path: Path
    output_dir: Path
    success: bool = False
    items_extracted: int = 0
    files_written: int = 0
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class BatchResult:
    """Result of a batch run"""
    files_found: int = 0
    results: List[FileResult] = field(default_factory=list)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def succeeded(self) -> List[FileResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[FileResult]:
        return [r for r in self.results if not r.success]

    @property
    def duration_seconds(self) -> float:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0


class MailboxConversion:
    """
    Extracts and exports a single mailbox file.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        opener: Callable = open_mailbox,
        boundary_factory: Callable[[], str] = new_boundary
    ):
        """
        Initialize the conversion.

        Args:
            logger: Logger handed to the walker and exporter
            opener: Opens a mailbox path and returns a context manager with
                ``get_root_folder()``
            boundary_factory: MIME boundary generator for the exporter
        """
        self.logger = logger or logging.getLogger(__name__)
        self.opener = opener
        self.boundary_factory = boundary_factory

    def extract(self, root_folder) -> FolderAggregate:
        """
        Walk a root folder.

        Raises:
            NoDataFoundError: If nothing was extracted from the whole tree
        """
        walker = MailboxTreeWalker(logger=self.logger)
        aggregate = walker.walk(root_folder)
        stats = walker.stats
        self.logger.info(
            f"Extracted {stats.messages} messages, {stats.contacts} contacts, "
            f"{stats.appointments} appointments, {stats.attachments} attachments "
            f"({stats.skipped_items} items skipped, {stats.errors} errors)"
        )
        if aggregate.is_empty:
            raise NoDataFoundError("No data found in mailbox")
        return aggregate

    def convert_file(self, mailbox_path, output_dir) -> FileResult:
        """
        Export one mailbox file into ``output_dir``.

        Raises:
            ExportError: If the file is missing, unreadable or empty
            OSError: If an output directory cannot be created
        """
        mailbox_path = Path(mailbox_path)
        output_dir = Path(output_dir)
        result = FileResult(input_path=mailbox_path, output_dir=output_dir)

        if not mailbox_path.is_file():
            raise MailboxNotFoundError(f"Mailbox file not found: {mailbox_path}")

        self.logger.info(f"Creating output directory: {output_dir}")
        ensure_dir(output_dir)

        self.logger.info(f"Reading mailbox {mailbox_path}...")
        with self.opener(mailbox_path) as mailbox:
            root_folder = mailbox.get_root_folder()
            if root_folder is None:
                raise MailboxOpenError(f"No root folder found in {mailbox_path}")
            aggregate = self.extract(root_folder)

        result.items_extracted = aggregate.item_count

        self.logger.info("Exporting to files...")
        exporter = FolderExporter(logger=self.logger, boundary_factory=self.boundary_factory)
        stats = exporter.export(aggregate, output_dir)

        result.files_written = stats.files_written
        result.warnings.extend(stats.errors)
        result.success = True
        self.logger.info(f"Export completed: {stats.files_written} files written to {output_dir}")
        return result


class ConversionPipeline:
    """
    Finds mailbox files and exports them one after another.
    """

    def __init__(
        self,
        config: ExportConfig,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
        conversion: Optional[MailboxConversion] = None
    ):
        """
        Initialize the pipeline.

        Args:
            config: Batch configuration
            progress_callback: Optional callback(current, total, message)
            conversion: Per-file converter (a default one is created if omitted)
        """
        self.config = config
        self.progress_callback = progress_callback
        self.conversion = conversion or MailboxConversion()

    def _report_progress(self, current: int, total: int, message: str):
        """Report progress to callback if set."""
        if self.progress_callback:
            self.progress_callback(current, total, message)

    def find_input_files(self) -> List[Path]:
        """Mailbox files directly inside the input directory."""
        return find_files_by_extension(self.config.input_dir, self.config.extensions)

    def run(self) -> BatchResult:
        """
        Export every mailbox file in the input directory.

        Returns:
            BatchResult with one FileResult per file attempted
        """
        batch = BatchResult(start_time=datetime.now())
        files = self.find_input_files()
        batch.files_found = len(files)

        if not files:
            logger.info(f"No mailbox files found in {self.config.input_dir}")
            batch.end_time = datetime.now()
            return batch

        output_base = ensure_dir(self.config.output_base)
        logger.info(f"{len(files)} mailbox file(s) found. Starting conversion...")

        for index, mailbox_path in enumerate(files):
            output_dir = output_base / mailbox_path.stem
            self._report_progress(index, len(files), f"Processing {mailbox_path.name}")

            try:
                file_result = self.conversion.convert_file(mailbox_path, output_dir)
                logger.info(f"Conversion of {mailbox_path.name} finished")
            except ExportError as e:
                logger.error(f"Conversion of {mailbox_path.name} failed: {e}")
                file_result = FileResult(mailbox_path, output_dir, error=str(e))
            except Exception as e:
                logger.exception(f"Conversion of {mailbox_path.name} failed: {e}")
                file_result = FileResult(mailbox_path, output_dir, error=str(e))

            batch.results.append(file_result)

        self._report_progress(len(files), len(files), "All conversions finished")
        batch.end_time = datetime.now()
        logger.info(
            f"All conversions finished: {len(batch.succeeded)} succeeded, "
            f"{len(batch.failed)} failed"
        )
        return batch

    def inspect(self) -> List[Tuple[Path, List[str]]]:
        """
        List the folder tree of every mailbox file without exporting.

        Files that cannot be opened are logged and left out.
        """
        listings = []
        for mailbox_path in self.find_input_files():
            try:
                listings.append((mailbox_path, inspect_mailbox(mailbox_path)))
            except ExportError as e:
                logger.error(f"Could not read {mailbox_path.name}: {e}")
        return listings
