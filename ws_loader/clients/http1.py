"""
HTTP/1.1 transport implementation.

This module provides the transport the loader runs its requests on: raw TCP
and TLS connections over asyncio streams, manual construction of the request
line, headers and body, response framing, and redirect following.
"""

import asyncio
import re
import time
import urllib.parse
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ws_loader.clients.base import (
    BaseTransport,
    KNOWN_OPTIONS,
    OPT_CONNECT_TIMEOUT,
    OPT_FOLLOW_LOCATION,
    OPT_HEADER,
    OPT_HTTP_HEADER,
    OPT_MAX_REDIRECTS,
    OPT_METHOD,
    OPT_POST_FIELDS,
    OPT_SSL_VERIFY_HOST,
    OPT_SSL_VERIFY_PEER,
    OPT_TIMEOUT,
    OPT_URL,
)
from ws_loader.utils import tls
from ws_loader.utils.logging import get_logger, log_request, log_response

REDIRECT_CODES = frozenset({301, 302, 303, 307, 308})
STATUS_LINE = re.compile(rb'HTTP/1\.[01] (\d{3})(?: ([^\r\n]*))?\r?\n')


class HTTP1Transport(BaseTransport):
    """HTTP/1.1 transport for one request.

    Features:
    - Raw TCP & TLS sockets using asyncio streams
    - Manual construction of request lines, headers, and bodies
    - Chunked, Content-Length and close-delimited response bodies
    - Redirect following with every header block kept in the raw output
    """

    def __init__(self, settings: Mapping[str, Any]) -> None:
        """Initialize a new HTTP/1.1 transport.

        Args:
            settings: Merged transport settings for this exchange
        """
        super().__init__(settings)
        self.logger = get_logger()

        for key in self.settings:
            if key not in KNOWN_OPTIONS:
                self.logger.debug(f"Ignoring unknown transport setting: {key}")

        self.ssl_context = tls.get_http1_ssl_context(
            verify_peer=bool(self.option(OPT_SSL_VERIFY_PEER)),
            verify_host=bool(self.option(OPT_SSL_VERIFY_HOST)),
        )

    async def connect(self, host: str, port: int, use_tls: bool) -> None:
        """Establish a connection to the given server."""
        if self._connected:
            return

        try:
            self.logger.debug(f"Connecting to {host}:{port} ({'HTTPS' if use_tls else 'HTTP'})")
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(host, port, ssl=self.ssl_context if use_tls else None),
                timeout=self.option(OPT_CONNECT_TIMEOUT),
            )
            self._connected = True
            self.logger.debug("Connection established")

            if use_tls and self._writer.get_extra_info('ssl_object'):
                protocol = tls.get_negotiated_protocol(self._writer.get_extra_info('ssl_object'))
                if protocol:
                    self.logger.debug(f"Negotiated protocol: {protocol}")

        except asyncio.TimeoutError:
            raise TimeoutError(f"Connection to {host}:{port} timed out")
        except OSError as e:
            raise ConnectionError(f"Failed to connect to {host}:{port}: {e}")

    async def close(self) -> None:
        """Close the connection to the server."""
        if not self._connected or not self._writer:
            return

        try:
            self.logger.debug("Closing connection")
            self._writer.close()
            await self._writer.wait_closed()
        except OSError as e:
            self.logger.debug(f"Error closing connection: {e}")
        finally:
            self._connected = False
            self._reader = None
            self._writer = None

    async def send_raw(self, data: bytes) -> None:
        """Send raw bytes over the connection."""
        if not self._connected or not self._writer:
            raise ConnectionError("Not connected")

        try:
            self.logger.debug(f"Sending {len(data)} bytes")
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            self._connected = False
            raise ConnectionError(f"Error sending data: {e}")

    async def perform(self) -> Tuple[Dict[str, Any], bytes]:
        """Run the exchange, bounded by the ``timeout`` setting."""
        timeout = self.option(OPT_TIMEOUT)
        try:
            return await asyncio.wait_for(
                self._perform(),
                timeout=timeout if timeout and timeout > 0 else None,
            )
        except asyncio.TimeoutError:
            raise TimeoutError(f"Request timed out after {timeout} seconds")

    async def _perform(self) -> Tuple[Dict[str, Any], bytes]:
        url = self.option(OPT_URL)
        if not url:
            raise ValueError("No URL set")
        method = self.option(OPT_METHOD) or 'GET'
        body = _encode_body(self.option(OPT_POST_FIELDS))
        headers = self._header_pairs(self.option(OPT_HTTP_HEADER) or [])
        follow = bool(self.option(OPT_FOLLOW_LOCATION))
        max_redirects = int(self.option(OPT_MAX_REDIRECTS))

        header_blocks: List[bytes] = []
        redirect_count = 0
        start_time = time.time()

        while True:
            host, port, use_tls, netloc, target = _split_url(url)
            request_headers = _with_connection_headers(headers, netloc, body)
            log_request(self.logger, method, url, [f"{n}: {v}" for n, v in request_headers], body)

            await self.connect(host, port, use_tls)
            try:
                await self.send_raw(self._build_request(method, target, request_headers, body))
                status_code, blocks, response_headers = await self._read_response_head()
                header_blocks.extend(blocks)

                location = _header_value(response_headers, 'location')
                redirect = follow and status_code in REDIRECT_CODES and bool(location)
                response_body = b'' if redirect else await self._read_body(
                    method, status_code, response_headers
                )
            finally:
                await self.close()

            if not redirect:
                break

            # A negative limit follows redirects without bound
            if 0 <= max_redirects <= redirect_count:
                raise ConnectionError(f"Maximum ({max_redirects}) redirects followed")
            redirect_count += 1
            url = urllib.parse.urljoin(url, location)
            self.logger.debug(f"Following {status_code} redirect to {url}")

            if status_code == 303 and method != 'HEAD':
                method = 'GET'
                body = None
                headers = [(n, v) for n, v in headers if n.lower() != 'content-length']

        response_time = time.time() - start_time
        log_response(self.logger, status_code, response_headers, response_body, response_time)

        info = {
            'status_code': status_code,
            'header_size': sum(len(block) for block in header_blocks),
            'url': url,
            'redirect_count': redirect_count,
            'response_time': response_time,
        }
        raw = response_body
        if self.option(OPT_HEADER):
            raw = b''.join(header_blocks) + response_body
        return info, raw

    def _header_pairs(self, lines: List[str]) -> List[Tuple[str, str]]:
        pairs = []
        for line in lines:
            name, sep, value = line.partition(':')
            if not sep:
                self.logger.debug(f"Skipping header line without colon: {line!r}")
                continue
            pairs.append((name.strip(), value.strip()))
        return pairs

    def _build_request(
        self,
        method: str,
        target: str,
        headers: List[Tuple[str, str]],
        body: Optional[bytes] = None,
    ) -> bytes:
        """Build a raw HTTP/1.1 request.

        Args:
            method: HTTP method (GET, POST, etc.)
            target: Request target (path and query)
            headers: List of (name, value) header tuples
            body: Request body as bytes

        Returns:
            Raw HTTP/1.1 request as bytes
        """
        request_parts = [f"{method} {target} HTTP/1.1\r\n"]
        for name, value in headers:
            request_parts.append(f"{name}: {value}\r\n")
        request_parts.append("\r\n")

        request_bytes = "".join(request_parts).encode("utf-8")
        if body:
            request_bytes += body
        return request_bytes

    async def _read_response_head(self) -> Tuple[int, List[bytes], List[Tuple[str, str]]]:
        """Read header blocks up to the final (non-1xx) response.

        Returns:
            Tuple of (status_code, raw header blocks, final headers)
        """
        blocks = []
        while True:
            header_data = await self._read_headers()
            status_match = STATUS_LINE.match(header_data)
            if not status_match:
                raise ValueError("Invalid HTTP response")

            status_code = int(status_match.group(1))
            blocks.append(header_data)
            if 100 <= status_code < 200 and status_code != 101:
                continue

            headers = []
            for line in re.split(rb'\r?\n', header_data[status_match.end():]):
                name, sep, value = line.partition(b':')
                if not sep:
                    continue
                headers.append((
                    name.decode('utf-8', errors='replace').strip(),
                    value.decode('utf-8', errors='replace').strip(),
                ))
            return status_code, blocks, headers

    async def _read_headers(self) -> bytes:
        """Read one header block from the connection, terminator included.

        The block ends at the first empty line, terminated by CRLF or bare LF.
        """
        if not self._connected or not self._reader:
            raise ConnectionError("Not connected")

        header_data = bytearray()
        line = bytearray()

        while True:
            try:
                line.extend(await self._reader.readuntil(b'\n'))
            except asyncio.IncompleteReadError as e:
                header_data.extend(line + e.partial)
                break
            except asyncio.LimitOverrunError as e:
                line.extend(await self._reader.readexactly(e.consumed))
                continue

            header_data.extend(line)
            # Skip blank lines before the status line of a block
            if line in (b'\r\n', b'\n') and len(header_data) > len(line):
                break
            if line in (b'\r\n', b'\n'):
                header_data.clear()
            line.clear()

        if not header_data:
            raise ConnectionError("Connection closed before a response was received")

        return bytes(header_data)

    async def _read_body(
        self,
        method: str,
        status_code: int,
        headers: List[Tuple[str, str]],
    ) -> bytes:
        if method == 'HEAD' or status_code in (204, 304) or 100 <= status_code < 200:
            return b''

        transfer_encoding = _header_value(headers, 'transfer-encoding') or ''
        content_length = _header_value(headers, 'content-length')

        if 'chunked' in transfer_encoding.lower():
            return await self._read_chunked_body()
        if content_length is not None:
            try:
                length = int(content_length)
            except ValueError:
                raise ValueError(f"Invalid Content-Length: {content_length}")
            return await self._read_content_length_body(length)
        return await self._read_until_close()

    async def _read_content_length_body(self, content_length: int) -> bytes:
        """Read a body with a known Content-Length."""
        if content_length <= 0:
            return b''

        try:
            return await self._reader.readexactly(content_length)
        except asyncio.IncompleteReadError as e:
            raise ConnectionError(
                f"Connection closed after {len(e.partial)} of {content_length} body bytes"
            )

    async def _read_chunked_body(self) -> bytes:
        """Read and decode a chunked-encoded body."""
        body = bytearray()

        try:
            while True:
                chunk_size_line = await self._reader.readuntil(b'\r\n')
                chunk_size_hex = chunk_size_line.split(b';')[0].strip()
                try:
                    chunk_size = int(chunk_size_hex, 16)
                except ValueError:
                    raise ValueError(f"Invalid chunk size: {chunk_size_hex!r}")

                if chunk_size == 0:
                    # Skip trailers up to the terminating empty line
                    while (await self._reader.readuntil(b'\r\n')) != b'\r\n':
                        pass
                    break

                body.extend(await self._reader.readexactly(chunk_size))
                await self._reader.readexactly(2)
        except asyncio.IncompleteReadError:
            raise ConnectionError("Connection closed inside a chunked body")

        return bytes(body)

    async def _read_until_close(self) -> bytes:
        """Read body data until the connection closes."""
        body = bytearray()
        while True:
            chunk = await self._reader.read(8192)
            if not chunk:
                break
            body.extend(chunk)
        return bytes(body)


def _encode_body(post_fields: Any) -> Optional[bytes]:
    if post_fields is None or post_fields == '':
        return None
    if isinstance(post_fields, bytes):
        return post_fields
    if isinstance(post_fields, str):
        return post_fields.encode('utf-8')
    return urllib.parse.urlencode(post_fields, doseq=True).encode('utf-8')


def _split_url(url: str) -> Tuple[str, int, bool, str, str]:
    """Return (host, port, use_tls, netloc, request target) for a URL."""
    parsed = urllib.parse.urlsplit(url)
    scheme = parsed.scheme.lower()
    if scheme not in ('http', 'https'):
        raise ValueError(f"Unsupported URL scheme: {scheme or '(none)'}")
    if not parsed.hostname:
        raise ValueError(f"URL has no host: {url}")

    use_tls = scheme == 'https'
    port = parsed.port or (443 if use_tls else 80)
    netloc = parsed.netloc.rpartition('@')[2]
    target = parsed.path or '/'
    if parsed.query:
        target = f"{target}?{parsed.query}"
    return parsed.hostname, port, use_tls, netloc, target


def _with_connection_headers(
    headers: List[Tuple[str, str]],
    netloc: str,
    body: Optional[bytes],
) -> List[Tuple[str, str]]:
    names = {name.lower() for name, _ in headers}
    result = list(headers)
    if 'host' not in names:
        result.insert(0, ('Host', netloc))
    if 'connection' not in names:
        result.append(('Connection', 'close'))
    if body and 'content-length' not in names:
        result.append(('Content-Length', str(len(body))))
    return result


def _header_value(headers: List[Tuple[str, str]], name: str) -> Optional[str]:
    for header_name, value in headers:
        if header_name.lower() == name:
            return value
    return None
