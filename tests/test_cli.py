import json
import logging

import pytest

import revolut
from revolut.cli import main

from conftest import token_response


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    logger = logging.getLogger("revolut")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def default_client(monkeypatch, session):
    client = revolut.Client(session=session)
    monkeypatch.setattr(revolut.Client, "_instance", client)
    return client


def test_authorize_url(capsys):
    assert main(["authorize-url", "--state", "abc"]) == 0

    out = capsys.readouterr().out.strip()
    assert out.startswith("https://sandbox-business.revolut.com/app-confirm?")
    assert "state=abc" in out


def test_exchange_prints_tokens(capsys, stub, default_client):
    stub.add("POST", "auth/token", json_body=token_response("cli_token", refresh_token="cli_refresh"))

    assert main(["exchange", "the-code"]) == 0

    captured = capsys.readouterr()
    # stdout is exactly the auth JSON; log lines go to stderr
    printed = json.loads(captured.out)
    assert "Issued Revolut authorization_code token" in captured.err
    assert printed["access_token"] == "cli_token"
    assert printed["refresh_token"] == "cli_refresh"
    assert stub.form()["code"] == "the-code"


def test_refresh_uses_auth_json(capsys, monkeypatch, stub, default_client):
    monkeypatch.setenv("REVOLUT_AUTH_JSON", json.dumps({"access_token": "old", "refresh_token": "stored"}))
    revolut.reset()
    monkeypatch.setattr(revolut.Client, "_instance", default_client)
    stub.add("POST", "auth/token", json_body=token_response("fresh"))

    assert main(["refresh"]) == 0

    assert json.loads(capsys.readouterr().out)["access_token"] == "fresh"
    assert stub.form()["refresh_token"] == "stored"


def test_errors_are_reported(capsys):
    assert main(["refresh"]) == 1

    assert "No Revolut refresh token" in capsys.readouterr().err


def test_env_file_is_loaded(capsys, tmp_path, monkeypatch):
    monkeypatch.delenv("REVOLUT_CLIENT_ID")
    (tmp_path / ".env").write_text("REVOLUT_CLIENT_ID=from_dotenv\nREVOLUT_ENVIRONMENT=production\n")

    assert main(["authorize-url"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("https://business.revolut.com/app-confirm?")
    assert "client_id=from_dotenv" in out


def test_json_logging(capsys):
    main(["--log-format", "json", "authorize-url"])
    logging.getLogger("revolut.test").info("hello", extra={"endpoint": "/accounts"})

    captured = capsys.readouterr()
    assert captured.out.startswith("https://")
    line = captured.err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["message"] == "hello"
    assert record["service"] == "revolut-cli"
    assert record["endpoint"] == "/accounts"
