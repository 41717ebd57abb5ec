"""
Attachment Drain Module

Reads one attachment's bytes out of the reader's stream handle.

The primary strategy reads fixed-size chunks until a read returns no bytes.
Some streams hand out less than a full buffer mid-stream, so a short read
does not end it. If reading raises, small attachments get a second chance
with a byte-at-a-time loop. Either a complete buffer is returned or nothing.
"""

import logging
from typing import List, Optional

from utils.file_utils import sanitize_path_segment
from .records import AttachmentRecord

logger = logging.getLogger(__name__)

# Matches the block payload size used by the PST reader
CHUNK_SIZE = 8176

# Byte-wise fallback is only attempted below this declared size
FALLBACK_SIZE_LIMIT = 1024 * 1024

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


def _read_chunks(stream, chunks: List[bytes]):
    buffer = bytearray(CHUNK_SIZE)
    while True:
        bytes_read = stream.readinto(buffer) or 0
        if bytes_read <= 0:
            return
        chunks.append(bytes(buffer[:bytes_read]))


def _read_bytewise(stream) -> bytes:
    raw = bytearray()
    byte = stream.read(1)
    while byte:
        raw += byte
        byte = stream.read(1)
    return bytes(raw)


def _rewind(stream) -> bool:
    seek = getattr(stream, 'seek', None)
    if seek is None:
        return False
    try:
        seek(0)
        return True
    except Exception as e:
        logger.debug(f"Attachment stream is not seekable: {e}")
        return False


def drain_stream(
    stream,
    declared_size: Optional[int] = None,
    log: Optional[logging.Logger] = None
) -> Optional[bytes]:
    """
    Read a stream to the end.

    Args:
        stream: Object with ``readinto(buffer)`` and ``read(1)``; ``seek(0)``
            is used when present
        declared_size: Size reported by the mailbox, if known
        log: Logger for skipped reads (defaults to this module's logger)

    Returns:
        The complete, non-empty byte string, or None if nothing usable was read
    """
    log = log or logger
    chunks: List[bytes] = []

    try:
        _read_chunks(stream, chunks)
        return b''.join(chunks) or None
    except Exception as stream_error:
        log.warning(f"Error reading attachment stream: {stream_error}")

    if not declared_size or declared_size >= FALLBACK_SIZE_LIMIT:
        return None

    # A partially consumed stream can only be re-read from the start
    if not _rewind(stream) and chunks:
        log.warning("Attachment stream cannot be rewound, skipping fallback read")
        return None

    try:
        return _read_bytewise(stream) or None
    except Exception as fallback_error:
        log.warning(f"Fallback read failed: {fallback_error}")
        return None


def drain_attachment(
    attachment,
    log: Optional[logging.Logger] = None
) -> Optional[AttachmentRecord]:
    """
    Build an AttachmentRecord from a reader attachment.

    Attachments without a filename, without a stream, or whose stream yields
    no bytes are dropped.

    Args:
        attachment: Object exposing ``filename``, ``long_filename``,
            ``mime_tag``, ``size`` and ``file_input_stream``
        log: Logger for skipped attachments

    Returns:
        AttachmentRecord or None
    """
    log = log or logger

    filename = getattr(attachment, 'filename', None)
    if not filename:
        log.warning("Skipping attachment without a filename")
        return None

    stream = getattr(attachment, 'file_input_stream', None)
    if stream is None:
        log.warning(f"No stream available for attachment: {filename}")
        return None

    data = drain_stream(stream, getattr(attachment, 'size', None), log)
    if not data:
        log.warning(f"No data read for attachment: {filename}")
        return None

    return AttachmentRecord(
        filename=sanitize_path_segment(getattr(attachment, 'long_filename', None) or filename),
        data=data,
        content_type=getattr(attachment, 'mime_tag', None) or DEFAULT_CONTENT_TYPE
    )
