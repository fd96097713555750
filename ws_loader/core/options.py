"""
Request options and defaults.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union

DEFAULT_HEADERS: Dict[str, str] = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/95.0.4638.69 Safari/537.36'
    ),
}

# Pause after a successful request, in microseconds
DEFAULT_PAUSE_MICROS = 500000

HTTP_METHODS = frozenset({
    'GET', 'HEAD', 'POST', 'PUT', 'DELETE', 'CONNECT', 'OPTIONS', 'TRACE', 'PATCH',
})

Params = Union[Mapping[str, Any], str]


@dataclass
class RequestOptions:
    """Optional parts of a request.

    Attributes:
        headers: Request headers, merged over ``DEFAULT_HEADERS``
        cookies: Cookies sent as a single ``Cookie`` header
        transport: Transport setting overrides, applied last
        post_params: POST body, a mapping to form-encode or a pre-encoded string
        get_params: Query parameters, a mapping or a pre-encoded string
    """

    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    transport: Dict[str, Any] = field(default_factory=dict)
    post_params: Params = field(default_factory=dict)
    get_params: Params = field(default_factory=dict)
