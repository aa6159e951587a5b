# tests/test_cli.py

import json

import httpx
import pytest
from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in ("STUDIO_BRIDGE_COOKIE_HEADER", "STUDIO_BRIDGE_COOKIES_FILE", "STUDIO_BRIDGE_SESSION_VARIABLES"):
        monkeypatch.delenv(name, raising=False)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_convert_writes_payload_file(tmp_path):
    source = write_json(
        tmp_path / "prompt.json",
        {"runSettings": {"model": "models/gemini-2.0-flash"}, "chunkedPrompt": {"chunks": [{"role": "user", "text": "Hi"}]}},
    )
    output = tmp_path / "out" / "payload.json"

    result = runner.invoke(app, ["convert", str(source), "--name", "Demo", "--output", str(output)])

    assert result.exit_code == 0
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload[0][4][0] == "Demo"
    assert payload[0][3][2] == "models/gemini-2.0-flash"
    assert payload[0][13][0][0][0] == "Hi"


def test_convert_rejects_unrecognized_document(tmp_path):
    source = write_json(tmp_path / "other.json", {"hello": "world"})
    result = runner.invoke(app, ["convert", str(source)])
    assert result.exit_code == 1


def test_convert_rejects_malformed_document(tmp_path):
    source = write_json(tmp_path / "bad.json", {"generationConfig": {"responseSchema": {"type": "object"}}})
    result = runner.invoke(app, ["convert", str(source)])
    assert result.exit_code == 1


def test_convert_rejects_invalid_json(tmp_path):
    source = tmp_path / "broken.json"
    source.write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, ["convert", str(source)])
    assert result.exit_code != 0


def test_auth_header_without_secrets_fails():
    result = runner.invoke(app, ["auth-header"])
    assert result.exit_code == 1


def test_auth_header_from_cookie_header(monkeypatch):
    monkeypatch.setenv("STUDIO_BRIDGE_COOKIE_HEADER", "SAPISID=abc; __Secure-1PAPISID=def")
    result = runner.invoke(app, ["auth-header"])
    assert result.exit_code == 0
    assert "SAPISIDHASH " in result.stdout
    assert "SAPISID1PHASH " in result.stdout


def unreachable_client(settings=None, **kwargs):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_status_with_unreachable_page_exits_cleanly(monkeypatch):
    monkeypatch.setattr("adapters.script_scanner.build_async_client", unreachable_client)
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 1
    assert not isinstance(result.exception, httpx.HTTPError)


def test_import_with_unreachable_page_exits_cleanly(tmp_path, monkeypatch):
    monkeypatch.setattr("adapters.script_scanner.build_async_client", unreachable_client)
    monkeypatch.setenv("STUDIO_BRIDGE_COOKIE_HEADER", "SAPISID=abc")
    source = write_json(tmp_path / "prompt.json", {"generationConfig": {}})

    result = runner.invoke(app, ["import", str(source)])

    assert result.exit_code == 1
    assert not isinstance(result.exception, httpx.HTTPError)


@pytest.mark.parametrize("command", [["status"], ["auth-header"]])
def test_missing_cookies_file_exits_cleanly(tmp_path, monkeypatch, command):
    monkeypatch.setenv("STUDIO_BRIDGE_COOKIES_FILE", str(tmp_path / "missing-cookies.txt"))
    result = runner.invoke(app, command)
    assert result.exit_code == 1
    assert not isinstance(result.exception, OSError)
