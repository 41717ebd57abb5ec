"""
Mailbox Tree Walker

Recursively extracts a mailbox folder into a FolderAggregate.

The reader's child cursor is stateful and not re-entrant, so folders are
visited strictly one at a time, depth-first, in delivery order. Faults are
absorbed at three levels (item, folder contents, folder subtree) by the
``isolate`` combinator: a bad item is skipped, a broken cursor ends that
folder's enumeration, a failing subfolder is left out.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .attachment_drain import drain_attachment
from .item_classifier import ItemCategory, classify_item
from .records import (
    AppointmentRecord,
    AttachmentRecord,
    ContactRecord,
    FolderAggregate,
    MessageRecord,
)
from .rtf_converter import rtf_to_html

logger = logging.getLogger(__name__)

DEFAULT_FOLDER_NAME = 'Unnamed Folder'
DEFAULT_SUBJECT = '(No Subject)'


class _Skipped:
    def __repr__(self):
        return 'SKIPPED'

    def __bool__(self):
        return False


SKIPPED = _Skipped()


def isolate(log: logging.Logger, description: str, func: Callable, *args, **kwargs) -> Any:
    """
    Call ``func`` and absorb any exception it raises.

    Returns:
        The call's result, or ``SKIPPED`` after logging the error
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        log.warning(f"{description}: {e}")
        return SKIPPED


@dataclass
class WalkStats:
    """Counters collected during one walk"""
    folders: int = 0
    messages: int = 0
    contacts: int = 0
    appointments: int = 0
    attachments: int = 0
    skipped_items: int = 0
    errors: int = 0


def _text(item, name: str) -> str:
    value = getattr(item, name, None)
    if value is None:
        return ''
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    return str(value)


def split_recipients(display_to: str) -> List[str]:
    """Split a ``;``-delimited display-to string into trimmed names."""
    if not display_to:
        return []
    return [part.strip() for part in display_to.split(';') if part.strip()]


class MailboxTreeWalker:
    """
    Extracts messages, contacts and appointments from a folder tree.

    ``walk`` never raises; everything that goes wrong is logged through the
    injected logger and counted in ``stats``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the walker.

        Args:
            logger: Logger for skipped items and errors (defaults to this
                module's logger)
        """
        self.logger = logger or logging.getLogger(__name__)
        self.stats = WalkStats()

    def _isolate(self, description: str, func: Callable, *args) -> Any:
        result = isolate(self.logger, description, func, *args)
        if result is SKIPPED:
            self.stats.errors += 1
        return result

    def _read(self, obj, name: str, default):
        """Read a reader property that may raise."""
        value = self._isolate(f"Error reading {name}", getattr, obj, name)
        if value is SKIPPED or value is None:
            return default
        return value

    def walk(self, folder) -> FolderAggregate:
        """
        Extract a folder and its non-empty subfolders.

        Args:
            folder: Reader folder handle

        Returns:
            FolderAggregate for the folder
        """
        self.stats.folders += 1
        aggregate = FolderAggregate(name=self._read(folder, 'display_name', '') or DEFAULT_FOLDER_NAME)

        if self._read(folder, 'content_count', 0) > 0:
            self._isolate(
                f"Error processing folder content of {aggregate.name}",
                self._walk_contents, folder, aggregate
            )

        if self._read(folder, 'has_subfolders', False):
            children = self._isolate(
                f"Error getting subfolders of {aggregate.name}",
                lambda: list(folder.get_sub_folders())
            )
            if children is not SKIPPED:
                for child in children:
                    subfolder = self._isolate("Error processing subfolder", self.walk, child)
                    if subfolder is not SKIPPED and not subfolder.is_empty:
                        aggregate.subfolders.append(subfolder)

        return aggregate

    def _walk_contents(self, folder, aggregate: FolderAggregate):
        item = folder.get_next_child()
        while item is not None:
            self._isolate("Error processing item", self._extract_item, item, aggregate)

            item = self._isolate("Error getting next item", folder.get_next_child)
            if item is SKIPPED:
                self.logger.warning(f"Stopped enumerating {aggregate.name} early")
                break

    def _extract_item(self, item, aggregate: FolderAggregate):
        message_class = getattr(item, 'message_class', None)
        category = classify_item(message_class)

        if category == ItemCategory.MESSAGE:
            aggregate.messages.append(self._extract_message(item))
            self.stats.messages += 1
        elif category == ItemCategory.CONTACT:
            aggregate.contacts.append(self._extract_contact(item))
            self.stats.contacts += 1
        elif category == ItemCategory.APPOINTMENT:
            aggregate.appointments.append(self._extract_appointment(item))
            self.stats.appointments += 1
        else:
            self.logger.info(f"Skipping unknown message type: {message_class}")
            self.stats.skipped_items += 1

    def _extract_body(self, item) -> str:
        rtf = getattr(item, 'body_rtf', None)
        if rtf:
            html = self._isolate("Error converting RTF body", rtf_to_html, rtf)
            if html:
                return html
        return _text(item, 'body_html') or _text(item, 'body')

    def _extract_attachments(self, item) -> List[AttachmentRecord]:
        attachments = []
        count = getattr(item, 'number_of_attachments', 0) or 0
        for index in range(count):
            attachment = self._isolate(
                f"Error extracting attachment {index}",
                lambda: drain_attachment(item.get_attachment(index), self.logger)
            )
            if attachment:
                attachments.append(attachment)
        self.stats.attachments += len(attachments)
        return attachments

    def _extract_message(self, item) -> MessageRecord:
        delivery_time = getattr(item, 'message_delivery_time', None)
        return MessageRecord(
            subject=_text(item, 'subject') or DEFAULT_SUBJECT,
            sender=_text(item, 'sender_email_address'),
            recipients=split_recipients(_text(item, 'display_to')),
            body=self._extract_body(item),
            sent_date=getattr(item, 'client_submit_time', None) or delivery_time,
            received_date=delivery_time,
            headers=_text(item, 'transport_message_headers'),
            attachments=self._extract_attachments(item),
        )

    def _extract_contact(self, item) -> ContactRecord:
        return ContactRecord(
            full_name=_text(item, 'display_name'),
            email=_text(item, 'email_address'),
            business_phone=_text(item, 'business_phone'),
            mobile_phone=_text(item, 'mobile_phone'),
            home_phone=_text(item, 'home_phone'),
            address=_text(item, 'postal_address'),
            company=_text(item, 'company_name'),
            job_title=_text(item, 'job_title'),
        )

    def _extract_appointment(self, item) -> AppointmentRecord:
        return AppointmentRecord(
            subject=_text(item, 'subject'),
            location=_text(item, 'location'),
            start_time=getattr(item, 'start_time', None),
            end_time=getattr(item, 'end_time', None),
            body=_text(item, 'body'),
        )
