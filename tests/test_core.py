"""
Tests for the extraction and serialization building blocks.
"""

import base64
import io
import string
from datetime import datetime, timedelta, timezone

import pytest

from fakes import BrokenStream, ChunkedStream, FailingStream, FakeAttachment


# Test Item Classifier
class TestItemClassifier:
    """Tests for message class classification."""

    def test_message_classes(self):
        """Test IPM.Note and its dotted subclasses are messages."""
        from core.item_classifier import classify_item, ItemCategory

        assert classify_item('IPM.Note') == ItemCategory.MESSAGE
        assert classify_item('IPM.Note.SMIME.MultipartSigned') == ItemCategory.MESSAGE
        assert classify_item('IPM.Notes') == ItemCategory.UNRECOGNIZED

    def test_contact_and_appointment(self):
        """Test contact and appointment classes."""
        from core.item_classifier import classify_item, ItemCategory

        assert classify_item('IPM.Contact') == ItemCategory.CONTACT
        assert classify_item('IPM.Appointment') == ItemCategory.APPOINTMENT
        assert classify_item('IPM.Appointment.Occurrence') == ItemCategory.APPOINTMENT

    def test_unrecognized(self):
        """Test everything else is unrecognized, without raising."""
        from core.item_classifier import classify_item, ItemCategory

        for message_class in (None, '', 'IPM.Task', 'IPM.StickyNote', 'REPORT.IPM.Note.NDR', 'ipm.note'):
            assert classify_item(message_class) == ItemCategory.UNRECOGNIZED


# Test Path Sanitizer
class TestPathSanitizer:
    """Tests for path segment sanitization."""

    def test_invalid_characters_replaced(self):
        """Test each invalid character becomes an underscore."""
        from utils.file_utils import sanitize_path_segment

        assert sanitize_path_segment('a<b>c:d"e/f\\g|h?i*j') == 'a_b_c_d_e_f_g_h_i_j'
        assert sanitize_path_segment('Re: Meeting?') == 'Re_ Meeting_'

    def test_output_bounds(self):
        """Test no invalid characters and at most 180 characters for any input."""
        from utils.file_utils import sanitize_path_segment

        samples = [
            '',
            string.printable * 10,
            '<>:"/\\|?*' * 50,
            'ü' * 500,
            'x' * 179,
        ]
        for sample in samples:
            result = sanitize_path_segment(sample)
            assert len(result) <= 180
            assert not any(char in result for char in '<>:"/\\|?*')

    def test_truncation(self):
        """Test long names are cut to 180 characters."""
        from utils.file_utils import sanitize_path_segment

        assert sanitize_path_segment('a' * 300) == 'a' * 180
        assert sanitize_path_segment(None) == ''


# Test Attachment Drain
class TestAttachmentDrain:
    """Tests for reading attachment streams."""

    @pytest.mark.parametrize('size', [1, 100, 8175, 8176, 8177, 8176 * 3 + 5])
    def test_reads_exact_bytes(self, size):
        """Test the result is exactly the stream's bytes."""
        from core.attachment_drain import drain_stream

        data = bytes(i % 251 for i in range(size))
        assert drain_stream(io.BytesIO(data), size) == data

    def test_chunks_concatenated_in_order(self):
        """Test chunk boundaries neither drop nor duplicate bytes."""
        from core.attachment_drain import drain_stream, CHUNK_SIZE

        stream = ChunkedStream([b'a' * CHUNK_SIZE, b'b' * CHUNK_SIZE, b'c' * 10])
        result = drain_stream(stream)

        assert result == b'a' * CHUNK_SIZE + b'b' * CHUNK_SIZE + b'c' * 10
        assert stream.calls == 4

    def test_short_reads_do_not_end_stream(self):
        """Test chunks smaller than the buffer are all collected."""
        from core.attachment_drain import drain_stream

        stream = ChunkedStream([b'a' * 100, b'b' * 100, b'c' * 50])

        assert drain_stream(stream, 250) == b'a' * 100 + b'b' * 100 + b'c' * 50

    def test_empty_stream_dropped(self):
        """Test zero bytes yields nothing."""
        from core.attachment_drain import drain_stream

        assert drain_stream(io.BytesIO(b''), 0) is None

    def test_fallback_for_small_attachment(self):
        """Test byte-wise fallback when chunked reading fails."""
        from core.attachment_drain import drain_stream

        assert drain_stream(FailingStream(b'hello world'), 11) == b'hello world'

    def test_fallback_rewinds_partial_read(self):
        """Test a partially read stream is re-read from the start."""
        from core.attachment_drain import drain_stream

        data = bytes(i % 256 for i in range(20000))
        assert drain_stream(FailingStream(data, fail_after=1), len(data)) == data

    def test_no_partial_buffer_when_not_rewindable(self):
        """Test a consumed, non-seekable stream is dropped."""
        from core.attachment_drain import drain_stream

        data = b'x' * 20000
        assert drain_stream(FailingStream(data, fail_after=1, seekable=False), len(data)) is None

    def test_fallback_without_seek_when_nothing_consumed(self):
        """Test fallback still runs when the first chunked read fails."""
        from core.attachment_drain import drain_stream

        assert drain_stream(FailingStream(b'abc', seekable=False), 3) == b'abc'

    def test_no_fallback_for_large_or_unknown_size(self):
        """Test fallback is skipped at 1 MiB and for unknown sizes."""
        from core.attachment_drain import drain_stream

        assert drain_stream(FailingStream(b'abc'), 1024 * 1024) is None
        assert drain_stream(FailingStream(b'abc'), None) is None

    def test_both_strategies_fail(self):
        """Test an unreadable stream is dropped."""
        from core.attachment_drain import drain_stream

        assert drain_stream(BrokenStream(), 10) is None

    def test_attachment_record(self):
        """Test filename, long filename and content type handling."""
        from core.attachment_drain import drain_attachment

        record = drain_attachment(FakeAttachment(
            'REPORT~1.PDF', b'%PDF-1.4', long_filename='report: final.pdf', mime_tag='application/pdf'
        ))
        assert record.filename == 'report_ final.pdf'
        assert record.data == b'%PDF-1.4'
        assert record.content_type == 'application/pdf'

        record = drain_attachment(FakeAttachment('data.bin', b'\x00\x01'))
        assert record.filename == 'data.bin'
        assert record.content_type == 'application/octet-stream'

    def test_invalid_attachments_skipped(self):
        """Test attachments without filename, stream or data are dropped."""
        from core.attachment_drain import drain_attachment

        assert drain_attachment(FakeAttachment('', b'abc')) is None
        assert drain_attachment(FakeAttachment('empty.txt', b'')) is None

        no_stream = FakeAttachment('a.txt', b'abc')
        no_stream.file_input_stream = None
        assert drain_attachment(no_stream) is None


# Test RTF Converter
class TestRtfConverter:
    """Tests for RTF body conversion."""

    def test_encapsulated_html(self):
        """Test HTML wrapped by Outlook is recovered."""
        from core.rtf_converter import rtf_to_html

        rtf = (
            rb"{\rtf1\ansi\ansicpg1252\fromhtml1"
            rb"{\*\htmltag64 <html>}{\*\htmltag64 <body>}"
            rb"\htmlrtf Ignored\htmlrtf0 Hello"
            rb"{\*\htmltag64 </body>}{\*\htmltag64 </html>}}"
        )
        assert rtf_to_html(rtf) == '<html><body>Hello</body></html>'

    def test_plain_rtf_wrapped_as_html(self):
        """Test native RTF becomes escaped text in an HTML document."""
        from core.rtf_converter import rtf_to_html

        html = rtf_to_html(rb"{\rtf1\ansi{\fonttbl\f0 Arial;}\f0 Hello plain & simple\par}")
        assert html.startswith('<html><body><pre>')
        assert 'Hello plain &amp; simple' in html

    def test_empty(self):
        """Test empty input gives an empty body."""
        from core.rtf_converter import rtf_to_html

        assert rtf_to_html(b'') == ''
        assert rtf_to_html(None) == ''


# Test Format Serializers
class TestSerializers:
    """Tests for EML, vCard and iCalendar output."""

    def test_format_timestamp(self):
        """Test colons and periods become hyphens."""
        from core.serializers import format_timestamp

        assert format_timestamp(datetime(2024, 1, 15, 10, 30, 0, 123456)) == '2024-01-15T10-30-00-123Z'
        cest = timezone(timedelta(hours=2))
        assert format_timestamp(datetime(2024, 1, 15, 12, 0, tzinfo=cest)) == '2024-01-15T10-00-00-000Z'
        assert format_timestamp(None) == ''

    def test_plain_single_part(self):
        """Test a plain message without attachments and with empty fields."""
        from core.records import MessageRecord
        from core.serializers import create_eml_content

        message = MessageRecord(
            subject='Hello', sender='', recipients=[], body='Hi',
            sent_date=datetime(2024, 1, 15, 10, 30)
        )
        assert create_eml_content(message) == (
            'Subject: Hello\r\n'
            'Date: Mon, 15 Jan 2024 10:30:00 GMT\r\n'
            'MIME-Version: 1.0\r\n'
            'Content-Type: text/plain; charset=utf-8\r\n'
            'X-Mailer: pst-extractor\r\n'
            '\r\n'
            'Hi'
        )

    def test_no_date_header_without_dates(self):
        """Test a message without dates has no Date header and is stable."""
        from core.records import MessageRecord
        from core.serializers import create_eml_content

        message = MessageRecord(subject='Draft', sender='a@x.com', body='text')
        content = create_eml_content(message)

        assert 'Date:' not in content
        assert content == create_eml_content(message)

    def test_headers_and_html_body(self):
        """Test recipients, transport headers and HTML detection."""
        from core.records import MessageRecord
        from core.serializers import create_eml_content

        message = MessageRecord(
            subject='Report', sender='john@x.com', recipients=['Jane Doe', 'bob@x.com'],
            body='<html><body>Hi</body></html>',
            received_date=datetime(2024, 3, 1, 8, 0),
            headers='Message-ID: <1@x.com>\r\n\r\n'
        )
        content = create_eml_content(message)
        header_block, body = content.split('\r\n\r\n', 1)
        lines = header_block.split('\r\n')

        assert lines[0] == 'From: john@x.com'
        assert lines[1] == 'To: Jane Doe, bob@x.com'
        assert 'Date: Fri, 01 Mar 2024 08:00:00 GMT' in lines
        assert 'Content-Type: text/html; charset=utf-8' in lines
        assert lines[-1] == 'Message-ID: <1@x.com>'
        assert body == '<html><body>Hi</body></html>'

    def test_multipart_structure(self):
        """Test one part per attachment plus the body, and one closing boundary."""
        from core.records import MessageRecord, AttachmentRecord
        from core.serializers import create_eml_content

        message = MessageRecord(
            subject='Files', sender='john@x.com', body='See attached',
            sent_date=datetime(2024, 1, 15, 10, 30),
            attachments=[
                AttachmentRecord('a.txt', b'first', 'text/plain'),
                AttachmentRecord('b"quoted".bin', b'second'),
            ]
        )
        lines = create_eml_content(message, boundary='b1').split('\r\n')

        assert 'Content-Type: multipart/mixed; boundary="b1"' in lines
        assert lines.count('--b1') == 3
        assert lines.count('--b1--') == 1
        assert lines[-1] == '--b1--'
        assert 'Content-Disposition: attachment; filename="bquoted.bin"' in lines
        assert 'Content-Type: application/octet-stream' in lines

    def test_random_boundary(self):
        """Test a boundary is generated when none is given."""
        from core.records import MessageRecord, AttachmentRecord
        from core.serializers import create_eml_content

        message = MessageRecord(
            subject='x', sender='', sent_date=datetime(2024, 1, 1),
            attachments=[AttachmentRecord('a', b'a')]
        )
        content = create_eml_content(message)
        boundary = content.split('boundary="', 1)[1].split('"', 1)[0]

        assert boundary.startswith('boundary_')
        assert content.endswith(f'--{boundary}--')

    def test_base64_wrapped_at_76(self):
        """Test attachment data is base64 in lines of at most 76 characters."""
        from core.records import MessageRecord, AttachmentRecord
        from core.serializers import create_eml_content

        data = bytes(range(256)) * 3
        message = MessageRecord(
            subject='x', sender='', body='', sent_date=datetime(2024, 1, 1),
            attachments=[AttachmentRecord('blob.bin', data)]
        )
        lines = create_eml_content(message, boundary='b1').split('\r\n')
        start = lines.index('Content-Transfer-Encoding: base64') + 2
        encoded = lines[start:lines.index('--b1--')]

        assert all(len(line) == 76 for line in encoded[:-1])
        assert 0 < len(encoded[-1]) <= 76
        assert base64.b64decode(''.join(encoded)) == data

    def test_vcard(self):
        """Test populated contact fields only."""
        from core.records import ContactRecord
        from core.serializers import create_vcard_content

        card = create_vcard_content(ContactRecord(
            full_name='Jane Doe', email='jane@x.com', mobile_phone='+1 555', company='ACME'
        ))
        assert card == (
            'BEGIN:VCARD\r\n'
            'VERSION:3.0\r\n'
            'FN:Jane Doe\r\n'
            'EMAIL:jane@x.com\r\n'
            'TEL;TYPE=CELL:+1 555\r\n'
            'ORG:ACME\r\n'
            'END:VCARD'
        )

    def test_ical(self):
        """Test optional calendar fields are omitted when empty."""
        from core.records import AppointmentRecord
        from core.serializers import create_ical_content

        full = create_ical_content(AppointmentRecord(
            subject='Standup', location='Room 1',
            start_time=datetime(2024, 1, 15, 9, 0), end_time=datetime(2024, 1, 15, 9, 15),
            body='Daily'
        )).split('\r\n')
        assert full == [
            'BEGIN:VCALENDAR', 'VERSION:2.0', 'BEGIN:VEVENT',
            'SUMMARY:Standup', 'LOCATION:Room 1',
            'DTSTART:2024-01-15T09-00-00-000Z', 'DTEND:2024-01-15T09-15-00-000Z',
            'DESCRIPTION:Daily', 'END:VEVENT', 'END:VCALENDAR',
        ]

        bare = create_ical_content(AppointmentRecord(subject='Standup'))
        assert 'DTSTART' not in bare
        assert 'LOCATION' not in bare
        assert 'DESCRIPTION' not in bare


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
