"""
Response model returned by the loader.
"""

import copy
import json
from typing import Any, Dict, List, Union

from ws_loader.utils.headers import ResponseHeaders


class LoaderResponse:
    """Immutable result of a single request.

    Holds the sanitized body text, the status code and the parsed headers.
    """

    __slots__ = ('_body', '_status_code', '_headers')

    def __init__(self, body: str, status_code: int, headers: ResponseHeaders) -> None:
        object.__setattr__(self, '_body', body)
        object.__setattr__(self, '_status_code', status_code)
        object.__setattr__(self, '_headers', copy.deepcopy(headers))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __str__(self) -> str:
        return self._body

    def __repr__(self) -> str:
        return f"<LoaderResponse status={self._status_code} body={len(self._body)} chars>"

    @property
    def body(self) -> str:
        return self._body

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def headers(self) -> ResponseHeaders:
        return copy.deepcopy(self._headers)

    def to_string(self) -> str:
        """Get raw response as string data."""
        return self._body

    def to_array(self) -> Union[Dict[str, Any], List[Any]]:
        """Attempt to decode the body as JSON.

        Returns:
            The decoded object or list, or an empty dict if the body is not
            JSON or decodes to a scalar
        """
        try:
            decoded = json.loads(self._body)
        except (ValueError, RecursionError):
            return {}
        return decoded if isinstance(decoded, (dict, list)) else {}

    def get_response_headers(self) -> ResponseHeaders:
        return self.headers

    def get_response_status_code(self) -> int:
        return self._status_code
