"""
In-memory stand-ins for the mailbox reader, used by the tests.
"""

import io


class ChunkedStream:
    """Hands out pre-cut chunks, one per readinto call."""

    def __init__(self, chunks):
        self.chunks = list(chunks)
        self.calls = 0

    def readinto(self, buffer):
        self.calls += 1
        if not self.chunks:
            return 0
        chunk = self.chunks.pop(0)
        buffer[:len(chunk)] = chunk
        return len(chunk)

    def read(self, size=1):
        raise AssertionError("byte-wise read not expected")


class FailingStream(io.BytesIO):
    """Chunked reads fail after ``fail_after`` successful calls; read(1) works."""

    def __init__(self, data, fail_after=0, seekable=True):
        super().__init__(data)
        self.fail_after = fail_after
        self._seekable = seekable

    def readinto(self, buffer):
        if self.fail_after <= 0:
            raise IOError("stream corrupted")
        self.fail_after -= 1
        return super().readinto(buffer)

    def seek(self, offset, whence=0):
        if not self._seekable:
            raise io.UnsupportedOperation("not seekable")
        return super().seek(offset, whence)


class BrokenStream:
    def readinto(self, buffer):
        raise IOError("chunked read failed")

    def read(self, size=1):
        raise IOError("byte read failed")


class FakeAttachment:
    def __init__(self, filename, data=b'', long_filename='', mime_tag='', size=None, stream=None):
        self.filename = filename
        self.long_filename = long_filename
        self.mime_tag = mime_tag
        self.size = len(data) if size is None else size
        self.file_input_stream = stream if stream is not None else io.BytesIO(data)


class FakeItem:
    """A folder child; keyword arguments become reader properties."""

    def __init__(self, message_class, attachments=None, **properties):
        self.message_class = message_class
        self.attachments = list(attachments or [])
        self.number_of_attachments = len(self.attachments)
        for name, value in properties.items():
            setattr(self, name, value)

    def get_attachment(self, index):
        attachment = self.attachments[index]
        if isinstance(attachment, Exception):
            raise attachment
        return attachment


class ExplodingItem:
    """An item whose message class cannot be read."""

    @property
    def message_class(self):
        raise RuntimeError("corrupt item")


def message(subject='Hello', body='Hi', **properties):
    properties.setdefault('sender_email_address', 'john@x.com')
    properties.setdefault('display_to', 'Jane Doe; bob@x.com')
    return FakeItem('IPM.Note', subject=subject, body=body, **properties)


def contact(name='Jane Doe', **properties):
    return FakeItem('IPM.Contact', display_name=name, **properties)


class FakeFolder:
    """
    Folder with a sequential cursor.

    Args:
        cursor_fails_after: get_next_child raises after this many items
        subfolders_error: get_sub_folders raises this exception
        name_error: reading display_name raises this exception
    """

    def __init__(self, name, items=(), subfolders=(), cursor_fails_after=None,
                 subfolders_error=None, name_error=None):
        self._name = name
        self.items = list(items)
        self.subfolders = list(subfolders)
        self.cursor_fails_after = cursor_fails_after
        self.subfolders_error = subfolders_error
        self.name_error = name_error
        self._cursor = 0

    @property
    def display_name(self):
        if self.name_error:
            raise self.name_error
        return self._name

    @property
    def content_count(self):
        return len(self.items)

    @property
    def has_subfolders(self):
        return bool(self.subfolders) or self.subfolders_error is not None

    def get_next_child(self):
        if self.cursor_fails_after is not None and self._cursor >= self.cursor_fails_after:
            raise IOError("cursor lost")
        if self._cursor >= len(self.items):
            return None
        item = self.items[self._cursor]
        self._cursor += 1
        return item

    def get_sub_folders(self):
        if self.subfolders_error:
            raise self.subfolders_error
        return list(self.subfolders)


class FakeMailbox:
    def __init__(self, root):
        self.root = root
        self.closed = False

    def get_root_folder(self):
        return self.root

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True
        return False
