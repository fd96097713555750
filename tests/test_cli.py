from __future__ import annotations

import pytest
from click.testing import CliRunner

from ws_loader.cli import main as cli_main
from ws_loader.clients.base import OPT_FOLLOW_LOCATION, OPT_SSL_VERIFY_HOST, OPT_SSL_VERIFY_PEER, OPT_TIMEOUT
from ws_loader.core.response import LoaderResponse


class RecordingLoader:
    calls: list = []
    response: LoaderResponse | None = None

    def __init__(self, address, method="GET", options=None, pause=0) -> None:
        RecordingLoader.calls.append((address, method, options, pause))

    def load(self):
        return RecordingLoader.response


@pytest.fixture
def recording_loader(monkeypatch):
    RecordingLoader.calls = []
    RecordingLoader.response = LoaderResponse('{"ok": true}', 201, {"Set-Cookie": {"id": "42"}, "X-A": "1"})
    monkeypatch.setattr(cli_main, "Loader", RecordingLoader)
    return RecordingLoader


def test_request_passes_options_to_loader(recording_loader) -> None:
    result = CliRunner().invoke(cli_main.cli, [
        "request", "http://x.test/api",
        "-m", "POST",
        "-H", "X-Token: abc",
        "-b", "id=42",
        "-d", "a=1",
        "-q", "page=2",
        "--insecure",
        "--no-follow",
        "-t", "5",
        "-v",
    ])

    assert result.exit_code == 0, result.output
    address, method, options, pause = recording_loader.calls[0]
    assert (address, method, pause) == ("http://x.test/api", "POST", 0)
    assert options.headers == {"X-Token": "abc"}
    assert options.cookies == {"id": "42"}
    assert options.post_params == "a=1"
    assert options.get_params == "page=2"
    assert options.transport == {
        OPT_TIMEOUT: 5,
        OPT_FOLLOW_LOCATION: False,
        OPT_SSL_VERIFY_PEER: False,
        OPT_SSL_VERIFY_HOST: False,
    }
    assert "Status: 201" in result.output
    assert "id=42" in result.output
    assert '{"ok": true}' in result.output


def test_request_json_output(recording_loader) -> None:
    result = CliRunner().invoke(cli_main.cli, ["request", "http://x.test/", "--json"])
    assert result.exit_code == 0, result.output
    assert '"ok": true' in result.output


def test_request_writes_output_file(recording_loader, tmp_path) -> None:
    target = tmp_path / "body.json"
    result = CliRunner().invoke(cli_main.cli, ["request", "http://x.test/", "-o", str(target)])
    assert result.exit_code == 0, result.output
    assert target.read_text(encoding="utf-8") == '{"ok": true}'


def test_request_without_response_exits_non_zero(recording_loader) -> None:
    recording_loader.response = None
    result = CliRunner().invoke(cli_main.cli, ["request", "http://x.test/"])
    assert result.exit_code == 1
    assert "No response" in result.output


def test_invalid_header_is_rejected(recording_loader) -> None:
    result = CliRunner().invoke(cli_main.cli, ["request", "http://x.test/", "-H", "no-colon"])
    assert result.exit_code == 1
    assert "Invalid header format" in result.output
    assert recording_loader.calls == []
