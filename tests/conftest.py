from __future__ import annotations

import json
import socket
import sys
import threading
import time
import urllib.parse
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest


def pytest_configure() -> None:
    project_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(project_root))


class _Handler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def log_message(self, format, *args) -> None:  # noqa: A002
        pass

    def _send(self, status: int, body: bytes, headers: list[tuple[str, str]] | None = None) -> None:
        self.send_response(status)
        for name, value in headers or []:
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _route(self) -> None:
        parsed = urllib.parse.urlsplit(self.path)
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""

        if parsed.path == "/echo":
            payload = {
                "method": self.command,
                "path": parsed.path,
                "query": parsed.query,
                "headers": dict(self.headers.items()),
                "body": body.decode("utf-8"),
            }
            self._send(200, json.dumps(payload).encode("utf-8"), [("Content-Type", "application/json")])
        elif parsed.path == "/cookies":
            self._send(200, b"ok", [
                ("Set-Cookie", "id=42; Path=/"),
                ("Set-Cookie", "session=abc; HttpOnly"),
            ])
        elif parsed.path == "/redirect":
            self._send(302, b"", [("Location", "/echo?from=redirect")])
        elif parsed.path == "/see-other":
            self._send(303, b"", [("Location", "/echo")])
        elif parsed.path == "/loop":
            self._send(302, b"", [("Location", "/loop")])
        elif parsed.path == "/missing":
            self._send(404, b"missing")
        elif parsed.path == "/dirty":
            self._send(200, b"\xef\xbb\xbfhello\x01 wor\x7fld\r\n")
        elif parsed.path == "/chunked":
            self.send_response(200)
            self.send_header("Transfer-Encoding", "chunked")
            self.end_headers()
            for part in (b"Hello, ", b"chunked ", b"world"):
                self.wfile.write(b"%x\r\n%s\r\n" % (len(part), part))
            self.wfile.write(b"0\r\n\r\n")
        elif parsed.path == "/until-close":
            self.send_response(200)
            self.send_header("Connection", "close")
            self.end_headers()
            self.wfile.write(b"streamed until close")
            self.close_connection = True
        elif parsed.path.startswith("/hops/"):
            remaining = int(parsed.path.rsplit("/", 1)[1])
            location = f"/hops/{remaining - 1}" if remaining > 0 else "/echo?from=hops"
            self._send(302, b"", [("Location", location)])
        elif parsed.path == "/bare-lf":
            self.wfile.write(b"HTTP/1.1 200 OK\nContent-Length: 5\nX-Line-Ending: lf\n\nhello")
            self.close_connection = True
        elif parsed.path == "/slow":
            time.sleep(1.0)
            self._send(200, b"late")
        else:
            self._send(404, b"")

    do_GET = _route
    do_POST = _route
    do_PUT = _route
    do_DELETE = _route
    do_HEAD = _route


@pytest.fixture
def server_url():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()


@pytest.fixture
def closed_port_url():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"http://127.0.0.1:{port}/"
