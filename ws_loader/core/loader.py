"""
Request executor.

The loader turns an address, a method and a ``RequestOptions`` into merged
transport settings, runs one exchange on a transport, and builds a
``LoaderResponse`` from the raw result.
"""

import asyncio
import time
import urllib.parse
from typing import Any, Callable, Dict, Optional, Tuple

from ws_loader.clients.base import (
    BaseTransport,
    DEFAULT_TRANSPORT_SETTINGS,
    OPT_HEADER,
    OPT_HTTP_HEADER,
    OPT_METHOD,
    OPT_POST_FIELDS,
    OPT_URL,
)
from ws_loader.clients.http1 import HTTP1Transport
from ws_loader.core.options import (
    DEFAULT_HEADERS,
    DEFAULT_PAUSE_MICROS,
    HTTP_METHODS,
    Params,
    RequestOptions,
)
from ws_loader.core.response import LoaderResponse
from ws_loader.utils.headers import cookie_build_query, format_headers
from ws_loader.utils.logging import get_logger
from ws_loader.utils.sanitize import clean_response, separate_response_headers

TransportFactory = Callable[[Dict[str, Any]], BaseTransport]

# Everything a transport may raise for a failed exchange
TRANSPORT_ERRORS = (OSError, EOFError, ValueError, asyncio.LimitOverrunError)


def encode_params(params: Params) -> str:
    """Form-encode a mapping; pass a pre-encoded string through unchanged."""
    if isinstance(params, str):
        return params
    return urllib.parse.urlencode(params, doseq=True)


def merge_query(address: str, query: str) -> str:
    """Append ``query`` to the query string already present in ``address``."""
    parts = urllib.parse.urlsplit(address)
    merged = f"{parts.query}&{query}" if parts.query else query
    return urllib.parse.urlunsplit(parts._replace(query=merged))


class Loader:
    """Perform a single blocking HTTP request.

    Example:
        response = Loader('https://example.com/api', 'POST',
                          RequestOptions(post_params={'q': 'x'}), pause=0).load()
        if response is not None:
            data = response.to_array()
    """

    def __init__(
        self,
        address: str,
        method: str = 'GET',
        options: Optional[RequestOptions] = None,
        pause: int = DEFAULT_PAUSE_MICROS,
        transport_factory: TransportFactory = HTTP1Transport,
    ) -> None:
        """Initialize a loader.

        Args:
            address: Target URL
            method: HTTP method, one of ``HTTP_METHODS`` (case-sensitive)
            options: Headers, cookies, params and transport overrides
            pause: Blocking pause after a successful request, in microseconds
            transport_factory: Callable building a transport from settings

        Raises:
            ValueError: If the address is empty or the method is unknown
        """
        if not address:
            raise ValueError("address must not be empty")
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method!r}")

        self.address = address
        self.method = method
        self.options = options if options is not None else RequestOptions()
        self.pause = pause
        self._transport_factory = transport_factory
        self.logger = get_logger()

    def build_transport_settings(self) -> Dict[str, Any]:
        """Build the merged transport settings for one request.

        Caller transport overrides win over everything computed here.
        """
        options = self.options
        address = self.address
        if options.get_params:
            address = merge_query(address, encode_params(options.get_params))

        headers = dict(options.headers)
        settings: Dict[str, Any] = {
            **DEFAULT_TRANSPORT_SETTINGS,
            OPT_URL: address,
            OPT_METHOD: self.method,
        }

        if self.method == 'POST' and options.post_params:
            body = encode_params(options.post_params)
            settings[OPT_POST_FIELDS] = body
            headers['Content-Length'] = str(len(body.encode('utf-8')))

        if options.cookies:
            headers['Cookie'] = cookie_build_query(options.cookies)

        settings[OPT_HTTP_HEADER] = format_headers(DEFAULT_HEADERS, headers)
        settings.update(options.transport)
        return settings

    def load(self) -> Optional[LoaderResponse]:
        """Send the request.

        Returns:
            The response, or None if the transport could not be acquired or
            the exchange failed at the transport level
        """
        settings = self.build_transport_settings()

        result = asyncio.run(self._fetch(settings))
        if result is None:
            return None

        info, raw = result
        headers, body = separate_response_headers(
            raw, info.get('header_size', 0), bool(settings.get(OPT_HEADER))
        )
        text = clean_response(body).decode('utf-8', errors='replace')

        self._pause()

        return LoaderResponse(text, info['status_code'], headers)

    async def _fetch(self, settings: Dict[str, Any]) -> Optional[Tuple[Dict[str, Any], bytes]]:
        try:
            transport = self._transport_factory(settings)
        except TRANSPORT_ERRORS as e:
            self.logger.warning(f"Could not acquire transport: {e}")
            return None

        async with transport:
            try:
                return await transport.perform()
            except TRANSPORT_ERRORS as e:
                self.logger.warning(f"Request to {settings.get(OPT_URL)} failed: {e}")
                return None

    def _pause(self) -> None:
        if self.pause > 0:
            self.logger.debug(f"Pausing {self.pause} microseconds")
            time.sleep(self.pause / 1_000_000)
