"""
Outlook Exporter Core Package
"""

from .records import (
    FolderAggregate,
    MessageRecord,
    ContactRecord,
    AppointmentRecord,
    AttachmentRecord,
)
from .item_classifier import ItemCategory, classify_item
from .attachment_drain import drain_stream, drain_attachment
from .serializers import create_eml_content, create_vcard_content, create_ical_content
from .folder_walker import MailboxTreeWalker, WalkStats
from .folder_exporter import FolderExporter, ExportStats
from .pff_reader import open_mailbox
from .mailbox_inspector import inspect_folder, inspect_mailbox
from .conversion_pipeline import (
    ConversionPipeline,
    MailboxConversion,
    ExportConfig,
    FileResult,
    BatchResult,
)
from .exceptions import (
    ExportError,
    MailboxNotFoundError,
    MailboxOpenError,
    NoDataFoundError,
    DependencyError,
)

__all__ = [
    'FolderAggregate',
    'MessageRecord',
    'ContactRecord',
    'AppointmentRecord',
    'AttachmentRecord',
    'ItemCategory',
    'classify_item',
    'drain_stream',
    'drain_attachment',
    'create_eml_content',
    'create_vcard_content',
    'create_ical_content',
    'MailboxTreeWalker',
    'WalkStats',
    'FolderExporter',
    'ExportStats',
    'open_mailbox',
    'inspect_folder',
    'inspect_mailbox',
    'ConversionPipeline',
    'MailboxConversion',
    'ExportConfig',
    'FileResult',
    'BatchResult',
    # Errors
    'ExportError',
    'MailboxNotFoundError',
    'MailboxOpenError',
    'NoDataFoundError',
    'DependencyError',
]
