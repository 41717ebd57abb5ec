"""
Extracted Records

In-memory representation of a mailbox folder tree after extraction.
The walker builds these bottom-up; the exporter only reads them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class AttachmentRecord:
    """One attachment's bytes, owned by a single message."""
    filename: str  # already sanitized
    data: bytes
    content_type: Optional[str] = None


@dataclass
class MessageRecord:
    """An extracted email message."""
    subject: str
    sender: str
    recipients: List[str] = field(default_factory=list)
    body: str = ""  # HTML or plain text
    sent_date: Optional[datetime] = None
    received_date: Optional[datetime] = None
    headers: str = ""  # raw transport headers
    attachments: List[AttachmentRecord] = field(default_factory=list)


@dataclass
class ContactRecord:
    """An extracted contact. Missing fields are empty strings."""
    full_name: str
    email: str = ""
    business_phone: str = ""
    mobile_phone: str = ""
    home_phone: str = ""
    address: str = ""
    company: str = ""
    job_title: str = ""


@dataclass
class AppointmentRecord:
    """An extracted calendar appointment."""
    subject: str
    location: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    body: str = ""


@dataclass
class FolderAggregate:
    """
    One folder and its pruned descendant subtree.

    Subfolders are only attached when they are non-empty, so an aggregate
    reachable from a parent always holds content somewhere below it.
    """
    name: str
    messages: List[MessageRecord] = field(default_factory=list)
    contacts: List[ContactRecord] = field(default_factory=list)
    appointments: List[AppointmentRecord] = field(default_factory=list)
    subfolders: List['FolderAggregate'] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the folder has no items and no subfolders."""
        return not (self.messages or self.contacts or self.appointments or self.subfolders)

    @property
    def item_count(self) -> int:
        """Messages, contacts and appointments in this folder and below."""
        own = len(self.messages) + len(self.contacts) + len(self.appointments)
        return own + sum(sub.item_count for sub in self.subfolders)
