"""
ws-loader: a minimal single-request HTTP client.
"""

from ws_loader.core.loader import Loader
from ws_loader.core.options import RequestOptions
from ws_loader.core.response import LoaderResponse

__version__ = "0.1.0"

__all__ = ['Loader', 'LoaderResponse', 'RequestOptions']
