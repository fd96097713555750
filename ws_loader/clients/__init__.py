"""
Transports for ws-loader.

This package contains the transport interface and the HTTP/1.1 transport that
performs the network exchange for a loader request.
"""
