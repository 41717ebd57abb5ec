"""
PFF Reader Module

Presents PST/OST files opened with the libpff bindings (``pypff``) through
the folder/item/attachment interface the walker and inspector consume.

Properties that pypff does not expose as attributes are read from the
item's MAPI record sets by property tag.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from .exceptions import DependencyError, MailboxNotFoundError, MailboxOpenError

logger = logging.getLogger(__name__)

try:
    import pypff
    PYPFF_AVAILABLE = True
except ImportError:
    pypff = None
    PYPFF_AVAILABLE = False
    logger.debug("libpff (pypff) bindings are not available")


# MAPI property tags (property id only, without the type)
PR_MESSAGE_CLASS = 0x001A
PR_SUBJECT = 0x0037
PR_START_DATE = 0x0060
PR_END_DATE = 0x0061
PR_SENDER_EMAIL_ADDRESS = 0x0C1F
PR_DISPLAY_TO = 0x0E04
PR_ATTACH_SIZE = 0x0E20
PR_DISPLAY_NAME = 0x3001
PR_EMAIL_ADDRESS = 0x3003
PR_ATTACH_FILENAME = 0x3704
PR_ATTACH_LONG_FILENAME = 0x3707
PR_ATTACH_MIME_TAG = 0x370E
PR_BUSINESS_TELEPHONE_NUMBER = 0x3A08
PR_HOME_TELEPHONE_NUMBER = 0x3A09
PR_POSTAL_ADDRESS = 0x3A15
PR_COMPANY_NAME = 0x3A16
PR_TITLE = 0x3A17
PR_MOBILE_TELEPHONE_NUMBER = 0x3A1C


def require_pypff():
    """Raise DependencyError when pypff cannot be imported."""
    if not PYPFF_AVAILABLE:
        raise DependencyError(
            "pypff library not found. Install libpff-python-ratom to read PST/OST files."
        )


def _decode(value) -> str:
    if value is None:
        return ''
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    return str(value)


class _PropertyTable:
    """Lazy lookup of MAPI record entries by property id."""

    def __init__(self, pff_object):
        self._pff_object = pff_object
        self._entries: Optional[Dict[int, object]] = None

    def _load(self) -> Dict[int, object]:
        entries: Dict[int, object] = {}
        for index in range(getattr(self._pff_object, 'number_of_record_sets', 0) or 0):
            record_set = self._pff_object.get_record_set(index)
            for entry_index in range(record_set.number_of_entries):
                entry = record_set.get_entry(entry_index)
                entries.setdefault(entry.entry_type, entry)
        return entries

    def get(self, tag: int):
        if self._entries is None:
            self._entries = self._load()
        return self._entries.get(tag)

    def string(self, tag: int) -> str:
        entry = self.get(tag)
        if entry is None:
            return ''
        try:
            return _decode(entry.get_data_as_string())
        except Exception as e:
            logger.debug(f"Property 0x{tag:04X} is not a string: {e}")
            return ''

    def datetime(self, tag: int) -> Optional[datetime]:
        entry = self.get(tag)
        if entry is None:
            return None
        try:
            return entry.get_data_as_datetime()
        except Exception as e:
            logger.debug(f"Property 0x{tag:04X} is not a timestamp: {e}")
            return None

    def integer(self, tag: int) -> Optional[int]:
        entry = self.get(tag)
        if entry is None:
            return None
        try:
            return entry.get_data_as_integer()
        except Exception as e:
            logger.debug(f"Property 0x{tag:04X} is not an integer: {e}")
            return None


class PffAttachmentStream:
    """File-like view of a pypff attachment's data."""

    def __init__(self, pff_attachment):
        self._attachment = pff_attachment

    def readinto(self, buffer) -> int:
        data = self._attachment.read_buffer(len(buffer))
        buffer[:len(data)] = data
        return len(data)

    def read(self, size: int = 1) -> bytes:
        return self._attachment.read_buffer(size)

    def seek(self, offset: int, whence: int = os.SEEK_SET):
        self._attachment.seek_offset(offset, whence)


class PffAttachment:
    """A message attachment."""

    def __init__(self, pff_attachment):
        self._attachment = pff_attachment
        self._properties = _PropertyTable(pff_attachment)

    @property
    def filename(self) -> str:
        return self._properties.string(PR_ATTACH_FILENAME) or _decode(getattr(self._attachment, 'name', None))

    @property
    def long_filename(self) -> str:
        return self._properties.string(PR_ATTACH_LONG_FILENAME)

    @property
    def mime_tag(self) -> str:
        return self._properties.string(PR_ATTACH_MIME_TAG)

    @property
    def size(self) -> Optional[int]:
        size = getattr(self._attachment, 'size', None)
        if size is None:
            size = self._properties.integer(PR_ATTACH_SIZE)
        return size

    @property
    def file_input_stream(self) -> PffAttachmentStream:
        return PffAttachmentStream(self._attachment)


class PffItem:
    """
    A folder child: message, contact, appointment or anything else.

    Every accessor returns an empty value when the item lacks the property.
    """

    def __init__(self, pff_message):
        self._message = pff_message
        self._properties = _PropertyTable(pff_message)

    @property
    def message_class(self) -> str:
        return self._properties.string(PR_MESSAGE_CLASS)

    @property
    def subject(self) -> str:
        return _decode(getattr(self._message, 'subject', None)) or self._properties.string(PR_SUBJECT)

    @property
    def display_name(self) -> str:
        return self._properties.string(PR_DISPLAY_NAME)

    @property
    def sender_email_address(self) -> str:
        return self._properties.string(PR_SENDER_EMAIL_ADDRESS)

    @property
    def display_to(self) -> str:
        return self._properties.string(PR_DISPLAY_TO)

    @property
    def body(self) -> str:
        return _decode(getattr(self._message, 'plain_text_body', None))

    @property
    def body_html(self) -> str:
        return _decode(getattr(self._message, 'html_body', None))

    @property
    def body_rtf(self) -> Optional[bytes]:
        return getattr(self._message, 'rtf_body', None)

    @property
    def client_submit_time(self) -> Optional[datetime]:
        return getattr(self._message, 'client_submit_time', None)

    @property
    def message_delivery_time(self) -> Optional[datetime]:
        return getattr(self._message, 'delivery_time', None)

    @property
    def transport_message_headers(self) -> str:
        return _decode(getattr(self._message, 'transport_headers', None))

    @property
    def number_of_attachments(self) -> int:
        return getattr(self._message, 'number_of_attachments', 0) or 0

    def get_attachment(self, index: int) -> PffAttachment:
        return PffAttachment(self._message.get_attachment(index))

    # Contact properties

    @property
    def email_address(self) -> str:
        return self._properties.string(PR_EMAIL_ADDRESS)

    @property
    def business_phone(self) -> str:
        return self._properties.string(PR_BUSINESS_TELEPHONE_NUMBER)

    @property
    def mobile_phone(self) -> str:
        return self._properties.string(PR_MOBILE_TELEPHONE_NUMBER)

    @property
    def home_phone(self) -> str:
        return self._properties.string(PR_HOME_TELEPHONE_NUMBER)

    @property
    def postal_address(self) -> str:
        return self._properties.string(PR_POSTAL_ADDRESS)

    @property
    def company_name(self) -> str:
        return self._properties.string(PR_COMPANY_NAME)

    @property
    def job_title(self) -> str:
        return self._properties.string(PR_TITLE)

    # Appointment properties

    @property
    def start_time(self) -> Optional[datetime]:
        return self._properties.datetime(PR_START_DATE)

    @property
    def end_time(self) -> Optional[datetime]:
        return self._properties.datetime(PR_END_DATE)


class PffFolder:
    """
    A mailbox folder with a sequential child cursor.

    ``get_next_child`` hands out children in stored order and returns None
    once they are exhausted.
    """

    def __init__(self, pff_folder):
        self._folder = pff_folder
        self._cursor = 0

    @property
    def display_name(self) -> str:
        return _decode(getattr(self._folder, 'name', None))

    @property
    def content_count(self) -> int:
        return getattr(self._folder, 'number_of_sub_messages', 0) or 0

    @property
    def has_subfolders(self) -> bool:
        return (getattr(self._folder, 'number_of_sub_folders', 0) or 0) > 0

    def get_next_child(self) -> Optional[PffItem]:
        if self._cursor >= self.content_count:
            return None
        item = self._folder.get_sub_message(self._cursor)
        self._cursor += 1
        return PffItem(item)

    def get_sub_folders(self) -> List['PffFolder']:
        return [
            PffFolder(self._folder.get_sub_folder(index))
            for index in range(self._folder.number_of_sub_folders)
        ]


class PffMailbox:
    """
    An open PST/OST file.

    Use as a context manager so the underlying file is always closed.
    """

    def __init__(self, path: Union[str, Path]):
        require_pypff()
        self.path = Path(path)
        if not self.path.is_file():
            raise MailboxNotFoundError(f"Mailbox file not found: {self.path}")

        self._file = pypff.file()
        try:
            self._file.open(str(self.path))
        except Exception as e:
            raise MailboxOpenError(f"Unable to open {self.path}: {e}") from e

    def get_root_folder(self) -> PffFolder:
        """
        Raises:
            MailboxOpenError: If the file has no root folder
        """
        try:
            root = self._file.get_root_folder()
        except Exception as e:
            raise MailboxOpenError(f"Unable to read root folder of {self.path}: {e}") from e
        if root is None:
            raise MailboxOpenError(f"No root folder found in {self.path}")
        return PffFolder(root)

    @property
    def store_name(self) -> str:
        """Display name of the message store, or the file name."""
        try:
            store = self._file.get_message_store()
            name = _PropertyTable(store).string(PR_DISPLAY_NAME) if store is not None else ''
        except Exception as e:
            logger.debug(f"Could not read message store of {self.path}: {e}")
            name = ''
        return name or self.path.name

    def close(self):
        self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def open_mailbox(path: Union[str, Path]) -> PffMailbox:
    """
    Open a PST or OST file.

    Raises:
        DependencyError: If pypff is not installed
        MailboxNotFoundError: If the file does not exist
        MailboxOpenError: If libpff cannot open the file
    """
    return PffMailbox(path)
