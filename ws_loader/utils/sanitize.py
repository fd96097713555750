"""
Response body sanitizing.

Splits the raw transport output into headers and body and strips control
bytes and a leading UTF-8 byte-order mark from the body.
"""

from typing import Tuple

from ws_loader.utils.headers import ResponseHeaders, parse_response_headers

UTF8_BOM = b'\xef\xbb\xbf'
CONTROL_BYTES = bytes(range(32)) + b'\x7f'
# Whitespace trimmed around the body after the header block is cut off
BODY_TRIM = b' \t\n\r\x00\x0b'


def clean_response(body: bytes) -> bytes:
    """Remove control bytes 0-31 and 127, then a leading BOM once."""
    body = body.translate(None, CONTROL_BYTES)
    if body.startswith(UTF8_BOM):
        body = body[len(UTF8_BOM):]
    return body


def separate_response_headers(
    raw: bytes,
    header_size: int,
    capture_headers: bool = True,
) -> Tuple[ResponseHeaders, bytes]:
    """Split a raw response into parsed headers and body.

    Args:
        raw: Every received header block followed by the body
        header_size: Byte length of the header blocks at the start of ``raw``
        capture_headers: Whether ``raw`` carries headers at all

    Returns:
        Tuple of (headers, body)
    """
    if not capture_headers:
        return {}, raw

    header_block = raw[:header_size].decode('utf-8', errors='replace')
    body = raw[header_size:].strip(BODY_TRIM)
    return parse_response_headers(header_block), body
