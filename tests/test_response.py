from __future__ import annotations

import pytest

from ws_loader.core.response import LoaderResponse


def test_string_accessors() -> None:
    response = LoaderResponse("hello", 200, {})
    assert str(response) == "hello"
    assert response.to_string() == "hello"
    assert response.get_response_status_code() == 200


def test_to_array_decodes_objects_and_lists() -> None:
    assert LoaderResponse('{"a": [1, 2]}', 200, {}).to_array() == {"a": [1, 2]}
    assert LoaderResponse("[1, 2]", 200, {}).to_array() == [1, 2]


@pytest.mark.parametrize("body", ["not json", "", "42", '"text"', "null", "{broken"])
def test_to_array_returns_empty_mapping_for_non_structured_bodies(body: str) -> None:
    assert LoaderResponse(body, 200, {}).to_array() == {}


def test_headers_cannot_be_mutated_through_accessors() -> None:
    headers = {"X-A": "1", "Set-Cookie": {"id": "42"}}
    response = LoaderResponse("", 204, headers)
    headers["X-A"] = "changed"

    returned = response.get_response_headers()
    returned["Set-Cookie"]["id"] = "0"

    assert response.get_response_headers() == {"X-A": "1", "Set-Cookie": {"id": "42"}}
    assert response.headers == response.get_response_headers()


def test_response_is_immutable() -> None:
    response = LoaderResponse("body", 200, {})
    with pytest.raises(AttributeError):
        response.status_code = 500
    with pytest.raises(AttributeError):
        response._body = "other"
    assert response.body == "body"


@pytest.mark.parametrize("body", [
    "[" * 100000 + "]" * 100000,
    '{"a":' * 100000 + "1" + "}" * 100000,
    "\udcff\udcfe",
])
def test_to_array_never_raises_on_hostile_bodies(body: str) -> None:
    assert LoaderResponse(body, 200, {}).to_array() == {}
