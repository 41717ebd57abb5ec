"""
Exceptions raised at the per-mailbox-file boundary.
"""


class ExportError(Exception):
    """Base class for errors that abort the export of one mailbox file."""


class MailboxNotFoundError(ExportError):
    """The input mailbox file does not exist."""


class MailboxOpenError(ExportError):
    """The mailbox file could not be opened or has no root folder."""


class NoDataFoundError(ExportError):
    """Extraction produced no messages, contacts or appointments."""


class DependencyError(ExportError):
    """The libpff bindings (pypff) are not installed."""
