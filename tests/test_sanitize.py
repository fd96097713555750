from __future__ import annotations

from ws_loader.utils.sanitize import UTF8_BOM, clean_response, separate_response_headers


def test_clean_response_removes_every_control_byte() -> None:
    cleaned = clean_response(bytes(range(128)))
    assert cleaned == bytes(range(32, 127))


def test_clean_response_keeps_clean_body() -> None:
    body = '{"name": "value", "emoji": "✓"}'.encode("utf-8")
    assert clean_response(body) == body


def test_leading_bom_is_stripped_once() -> None:
    assert clean_response(UTF8_BOM + b"text") == b"text"
    assert clean_response(UTF8_BOM + UTF8_BOM + b"text") == UTF8_BOM + b"text"


def test_bom_elsewhere_is_kept() -> None:
    body = b"text" + UTF8_BOM + b"more"
    assert clean_response(body) == body


def test_bom_exposed_by_control_stripping_is_removed() -> None:
    assert clean_response(b"\r\n" + UTF8_BOM + b"text") == b"text"


def test_separate_response_headers() -> None:
    head = b"HTTP/1.1 200 OK\r\nX-A: b\r\n\r\n"
    headers, body = separate_response_headers(head + b"  body \r\n", len(head))
    assert headers == {"X-A": "b"}
    assert body == b"body"


def test_separate_without_header_capture_returns_raw_body() -> None:
    raw = b"  raw body\n"
    assert separate_response_headers(raw, 10, capture_headers=False) == ({}, raw)
