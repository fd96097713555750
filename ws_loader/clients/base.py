"""
Base transport interface.

This module defines the transport setting keys, their defaults, and the
abstract base class that every transport must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Tuple
import asyncio

# Transport setting keys
OPT_URL = 'url'
OPT_METHOD = 'method'
OPT_HTTP_HEADER = 'http_header'
OPT_POST_FIELDS = 'post_fields'
OPT_FOLLOW_LOCATION = 'follow_location'
OPT_TIMEOUT = 'timeout'
OPT_CONNECT_TIMEOUT = 'connect_timeout'
OPT_MAX_REDIRECTS = 'max_redirects'
OPT_HEADER = 'header'
OPT_SSL_VERIFY_HOST = 'ssl_verify_host'
OPT_SSL_VERIFY_PEER = 'ssl_verify_peer'

KNOWN_OPTIONS = frozenset({
    OPT_URL, OPT_METHOD, OPT_HTTP_HEADER, OPT_POST_FIELDS, OPT_FOLLOW_LOCATION,
    OPT_TIMEOUT, OPT_CONNECT_TIMEOUT, OPT_MAX_REDIRECTS, OPT_HEADER,
    OPT_SSL_VERIFY_HOST, OPT_SSL_VERIFY_PEER,
})

DEFAULT_TRANSPORT_SETTINGS: Dict[str, Any] = {
    OPT_FOLLOW_LOCATION: True,
    OPT_TIMEOUT: 60,
    OPT_CONNECT_TIMEOUT: 10,
    OPT_MAX_REDIRECTS: 30,
    OPT_HEADER: True,
    OPT_SSL_VERIFY_HOST: True,
    OPT_SSL_VERIFY_PEER: True,
}


class BaseTransport(ABC):
    """Abstract base class for transports.

    A transport is acquired for exactly one exchange and released through
    ``async with``; ``close`` runs on every exit path.
    """

    def __init__(self, settings: Mapping[str, Any]) -> None:
        """Initialize a new transport.

        Args:
            settings: Merged transport settings for this exchange
        """
        self.settings: Dict[str, Any] = {**DEFAULT_TRANSPORT_SETTINGS, **settings}
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._connected = False

    async def __aenter__(self) -> "BaseTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def option(self, key: str, default: Any = None) -> Any:
        """Return a transport setting or ``default`` when unset."""
        return self.settings.get(key, default)

    @property
    def is_connected(self) -> bool:
        """Return whether the transport currently holds a connection."""
        return self._connected

    @abstractmethod
    async def connect(self, host: str, port: int, use_tls: bool) -> None:
        """Establish a connection to the given server."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connection."""
        pass

    @abstractmethod
    async def perform(self) -> Tuple[Dict[str, Any], bytes]:
        """Run the exchange described by the settings.

        Returns:
            Tuple of (info, raw) where info holds status_code, header_size,
            url, redirect_count and response_time, and raw is every received
            header block followed by the final body

        Raises:
            ConnectionError: If the connection fails
            TimeoutError: If the exchange exceeds the configured timeout
            ValueError: If the URL or the response is malformed
        """
        pass
