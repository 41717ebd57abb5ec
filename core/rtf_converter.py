"""
RTF Converter Module

Turns an Outlook RTF message body into HTML.

When Outlook stores an email that was composed in HTML, it wraps the
HTML inside RTF using special control words (``\\fromhtml1``,
``\\*\\htmltag``, ``\\htmlrtf`` … ``\\htmlrtf0``). That HTML is recovered
as-is [MS-OXRTFEX]. Any other RTF is reduced to text with striprtf and
wrapped in a minimal HTML document.
"""

import html
import re
import logging
from typing import List, Optional, Tuple, Union

from striprtf.striprtf import rtf_to_text

logger = logging.getLogger(__name__)

_TOKEN = re.compile(
    rb"\\'(?P<hex>[0-9a-fA-F]{2})"
    rb"|\\(?P<word>[a-zA-Z]+)(?P<param>-?\d+)? ?"
    rb"|\\(?P<symbol>[^a-zA-Z])"
    rb"|(?P<brace>[{}])"
    rb"|(?P<newline>[\r\n]+)"
    rb"|(?P<text>[^\\{}\r\n]+)"
)

# Destination groups holding RTF bookkeeping, not body content
_SKIP_DESTINATIONS = frozenset([
    'fonttbl', 'colortbl', 'stylesheet', 'listtable', 'listoverridetable',
    'info', 'pgdsctbl', 'revtbl',
])

_HTML_DESTINATIONS = frozenset(['htmltag', 'mhtmltag'])

_CONTROL_TEXT = {
    'par': '\r\n',
    'line': '<br>',
    'tab': '\t',
    'lquote': '‘',
    'rquote': '’',
    'ldblquote': '“',
    'rdblquote': '”',
    'bullet': '•',
}


def _codepage_for(param: Optional[bytes]) -> str:
    try:
        codepage = f'cp{int(param)}'
        b'x'.decode(codepage)
        return codepage
    except (TypeError, ValueError, LookupError):
        return 'cp1252'


def _deencapsulate_html(rtf_data: bytes) -> Optional[str]:
    """Recover the HTML carried by ``\\fromhtml1`` RTF."""
    codepage = 'cp1252'
    parts: List[str] = []
    stack: List[Tuple[bool, bool]] = []
    in_htmlrtf = False
    skip = False
    group_start = False
    starred = False
    uc_skip = 1
    pending_skip = 0

    def emit(text: str):
        if not in_htmlrtf and not skip:
            parts.append(text)

    for match in _TOKEN.finditer(rtf_data):
        brace = match.group('brace')
        if brace == b'{':
            stack.append((in_htmlrtf, skip))
            group_start, starred = True, False
            continue
        if brace == b'}':
            if stack:
                in_htmlrtf, skip = stack.pop()
            group_start = False
            continue

        symbol = match.group('symbol')
        if symbol is not None:
            if symbol == b'*' and group_start:
                starred = True
                continue
            group_start = False
            if symbol in (b'\\', b'{', b'}'):
                emit(symbol.decode('ascii'))
            elif symbol == b'~':
                emit('\xa0')
            continue

        word = match.group('word')
        if word is not None:
            word = word.decode('ascii')
            param = match.group('param')
            if group_start:
                group_start = False
                if starred:
                    if word not in _HTML_DESTINATIONS:
                        skip = True
                    continue
                if word in _SKIP_DESTINATIONS:
                    skip = True
                    continue

            if word == 'htmlrtf':
                in_htmlrtf = param != b'0'
            elif word == 'ansicpg':
                codepage = _codepage_for(param)
            elif word == 'uc' and param is not None:
                uc_skip = int(param)
            elif word == 'u' and param is not None:
                code = int(param)
                emit(chr(code + 65536 if code < 0 else code))
                pending_skip = uc_skip
            elif word in _CONTROL_TEXT:
                emit(_CONTROL_TEXT[word])
            continue

        hex_value = match.group('hex')
        if hex_value is not None:
            group_start = False
            if pending_skip:
                pending_skip -= 1
                continue
            emit(bytes([int(hex_value, 16)]).decode(codepage, errors='replace'))
            continue

        text = match.group('text')
        if text is not None:
            if group_start and not text.strip():
                continue
            group_start = False
            if pending_skip:
                dropped = min(pending_skip, len(text))
                text = text[dropped:]
                pending_skip -= dropped
            emit(text.decode(codepage, errors='replace'))

    result = ''.join(parts).strip()
    if '<' not in result:
        return None
    return result


def rtf_to_html(rtf_data: Union[bytes, str]) -> str:
    """
    Convert an RTF body to HTML.

    Args:
        rtf_data: Decompressed RTF as bytes or text

    Returns:
        HTML string, or "" when the RTF carries no text
    """
    if not rtf_data:
        return ""
    if isinstance(rtf_data, str):
        rtf_data = rtf_data.encode('utf-8')

    if b'\\fromhtml' in rtf_data:
        logger.debug("Detected Outlook RTF-encapsulated HTML")
        encapsulated = _deencapsulate_html(rtf_data)
        if encapsulated:
            return encapsulated

    text = rtf_to_text(rtf_data.decode('cp1252', errors='replace'), errors='replace')
    if not text or not text.strip():
        return ""
    return f"<html><body><pre>{html.escape(text.strip())}</pre></body></html>"
