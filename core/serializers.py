"""
Format Serializers

Pure functions turning extracted records into interchange text:
EML messages, vCard 3.0 contacts and iCalendar 2.0 events.
All output uses CRLF line endings.
"""

import base64
import uuid
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import List, Optional

from .records import AppointmentRecord, ContactRecord, MessageRecord

CRLF = '\r\n'
MAILER = 'pst-extractor'
BASE64_LINE_LENGTH = 76
DEFAULT_ATTACHMENT_TYPE = 'application/octet-stream'


def _as_utc(value: datetime) -> datetime:
    # The reader hands out naive datetimes that are already UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> str:
    """
    Format a timestamp for file names and calendar fields.

    ``2024-01-15 10:30:00`` becomes ``2024-01-15T10-30-00-000Z``.
    Returns an empty string for None.
    """
    if value is None:
        return ''
    value = _as_utc(value)
    return value.strftime('%Y-%m-%dT%H-%M-%S-') + f'{value.microsecond // 1000:03d}Z'


def format_rfc2822_date(value: datetime) -> str:
    """``Mon, 15 Jan 2024 10:30:00 GMT``"""
    return format_datetime(_as_utc(value), usegmt=True)


def is_html(body: str) -> bool:
    """True when the body contains an HTML root tag."""
    return '<html' in body or '<body' in body


def _body_content_type(body: str) -> str:
    if is_html(body):
        return 'Content-Type: text/html; charset=utf-8'
    return 'Content-Type: text/plain; charset=utf-8'


def new_boundary() -> str:
    return 'boundary_' + uuid.uuid4().hex


def wrap_base64(data: bytes, line_length: int = BASE64_LINE_LENGTH) -> str:
    """Base64-encode bytes as CRLF-separated lines of at most 76 characters."""
    encoded = base64.b64encode(data).decode('ascii')
    lines = [encoded[i:i + line_length] for i in range(0, len(encoded), line_length)]
    return CRLF.join(lines)


def _header(name: str, value: str) -> str:
    return f'{name}: {value}' if value else ''


def create_eml_content(message: MessageRecord, boundary: Optional[str] = None) -> str:
    """
    Serialize a message as an RFC 822 document.

    Messages with attachments become ``multipart/mixed``: the body is the
    first part and each attachment follows as a base64 part.

    Args:
        message: Extracted message
        boundary: MIME boundary to use; a random one is generated if omitted

    Returns:
        The EML text
    """
    date = message.sent_date or message.received_date
    has_attachments = bool(message.attachments)
    if has_attachments and not boundary:
        boundary = new_boundary()

    if has_attachments:
        content_type = f'Content-Type: multipart/mixed; boundary="{boundary}"'
    else:
        content_type = _body_content_type(message.body)

    headers = [
        _header('From', message.sender),
        _header('To', ', '.join(message.recipients)),
        _header('Subject', message.subject),
        _header('Date', format_rfc2822_date(date) if date else ''),
        'MIME-Version: 1.0',
        content_type,
        f'X-Mailer: {MAILER}',
        (message.headers or '').rstrip('\r\n'),
    ]
    header_block = CRLF.join(line for line in headers if line)

    if not has_attachments:
        return header_block + CRLF + CRLF + message.body

    parts: List[str] = [
        header_block,
        '',
        f'--{boundary}',
        _body_content_type(message.body),
        '',
        message.body,
    ]

    for attachment in message.attachments:
        filename = attachment.filename.replace('"', '')
        parts.extend([
            f'--{boundary}',
            f'Content-Type: {attachment.content_type or DEFAULT_ATTACHMENT_TYPE}',
            f'Content-Disposition: attachment; filename="{filename}"',
            'Content-Transfer-Encoding: base64',
            '',
            wrap_base64(attachment.data),
        ])

    parts.append(f'--{boundary}--')
    return CRLF.join(parts)


def create_vcard_content(contact: ContactRecord) -> str:
    """Serialize a contact as a vCard 3.0 card."""
    lines = [
        'BEGIN:VCARD',
        'VERSION:3.0',
        f'FN:{contact.full_name}' if contact.full_name else '',
        f'EMAIL:{contact.email}' if contact.email else '',
        f'TEL;TYPE=WORK:{contact.business_phone}' if contact.business_phone else '',
        f'TEL;TYPE=CELL:{contact.mobile_phone}' if contact.mobile_phone else '',
        f'TEL;TYPE=HOME:{contact.home_phone}' if contact.home_phone else '',
        f'ADR:;;{contact.address}' if contact.address else '',
        f'ORG:{contact.company}' if contact.company else '',
        f'TITLE:{contact.job_title}' if contact.job_title else '',
        'END:VCARD',
    ]
    return CRLF.join(line for line in lines if line)


def create_ical_content(appointment: AppointmentRecord) -> str:
    """Serialize an appointment as a single-event iCalendar document."""
    lines = [
        'BEGIN:VCALENDAR',
        'VERSION:2.0',
        'BEGIN:VEVENT',
        f'SUMMARY:{appointment.subject}' if appointment.subject else '',
        f'LOCATION:{appointment.location}' if appointment.location else '',
        f'DTSTART:{format_timestamp(appointment.start_time)}' if appointment.start_time else '',
        f'DTEND:{format_timestamp(appointment.end_time)}' if appointment.end_time else '',
        f'DESCRIPTION:{appointment.body}' if appointment.body else '',
        'END:VEVENT',
        'END:VCALENDAR',
    ]
    return CRLF.join(line for line in lines if line)
