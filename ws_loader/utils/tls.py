"""
TLS utilities for the transport.

This module provides helper functions for setting up TLS connections
according to the host/peer verification settings of a request.
"""

import ssl
from typing import Optional


def create_ssl_context(
    alpn_protocols: Optional[list[str]] = None,
    verify_peer: bool = True,
    verify_host: bool = True,
) -> ssl.SSLContext:
    """Create an SSL context for HTTP connections.

    Args:
        alpn_protocols: List of ALPN protocols to advertise (e.g., ['http/1.1'])
        verify_peer: Whether to verify the server certificate chain
        verify_host: Whether to check the certificate against the hostname

    Returns:
        Configured SSL context
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)

    # Hostname checks need a verified chain, so peer=False turns both off
    if not verify_peer:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    elif not verify_host:
        context.check_hostname = False

    if alpn_protocols:
        context.set_alpn_protocols(alpn_protocols)

    return context


def get_http1_ssl_context(verify_peer: bool = True, verify_host: bool = True) -> ssl.SSLContext:
    """Get an SSL context configured for HTTP/1.1."""
    return create_ssl_context(
        alpn_protocols=['http/1.1'],
        verify_peer=verify_peer,
        verify_host=verify_host,
    )


def get_negotiated_protocol(ssl_object: ssl.SSLObject) -> Optional[str]:
    """Get the negotiated ALPN protocol from an SSL object.

    Args:
        ssl_object: SSL object from an established connection

    Returns:
        Negotiated protocol or None if not available
    """
    try:
        return ssl_object.selected_alpn_protocol()
    except AttributeError:
        return None
