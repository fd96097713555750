"""
Header and cookie helpers.

Formatting of outgoing request headers and parsing of the response header
block into a mapping, with ``Set-Cookie`` attributes split out individually.
"""

import re
from typing import Dict, List, Mapping, Union

SET_COOKIE = 'set-cookie'

ResponseHeaders = Dict[str, Union[str, Dict[str, str]]]

_LINE_SPLIT = re.compile(r'\r\n|\r|\n')


def cookie_build_query(cookies: Mapping[str, str]) -> str:
    """Build a ``Cookie`` header value: ``name=value; name2=value2``."""
    return '; '.join(f"{name}={value}" for name, value in cookies.items())


def format_headers(defaults: Mapping[str, str], headers: Mapping[str, str]) -> List[str]:
    """Merge caller headers over defaults and render them as ``Name: Value`` lines."""
    merged = {**defaults, **headers}
    return [f"{name}: {value}" for name, value in merged.items()]


def parse_response_headers(block: str) -> ResponseHeaders:
    """Parse a raw response header block.

    Lines without a colon (status lines, garbage) are skipped. Later
    occurrences of a header overwrite earlier ones, except ``Set-Cookie``
    whose ``;``-separated attributes accumulate in a nested mapping.

    Args:
        block: Header block text, possibly spanning several responses

    Returns:
        Mapping of header name to value, or to a cookie mapping for ``Set-Cookie``
    """
    headers: ResponseHeaders = {}

    for line in _LINE_SPLIT.split(block.strip()):
        line = line.strip()
        if not line:
            continue

        name, sep, value = line.partition(':')
        if not sep:
            continue
        name = name.strip()
        value = value.strip()

        if name.lower() != SET_COOKIE:
            headers[name] = value
            continue

        cookies = headers.get(name)
        if not isinstance(cookies, dict):
            cookies = {}
        for segment in value.split(';'):
            segment = segment.strip()
            if not segment:
                continue
            cookie_name, eq, cookie_value = segment.partition('=')
            if not eq:
                cookies[segment] = ''
                continue
            cookies[cookie_name.strip()] = cookie_value.strip()
        if cookies:
            headers[name] = cookies

    return headers
