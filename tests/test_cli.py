"""CLI commands against the stub server."""

import json

import httpx
import pytest
from click.testing import CliRunner

from snowflake_rest import AsyncSnowflakeClient
from snowflake_rest.cli import main as cli_main
from snowflake_rest.transport.request_builder import CLOSE_SESSION_PATH, QUERY_PATH

from conftest import column, failure, make_settings, query_ok


@pytest.fixture
def cli(server, monkeypatch):
    def factory():
        return AsyncSnowflakeClient(
            make_settings(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(server.handler)),
        )

    monkeypatch.setattr(cli_main, "_get_client", factory)
    return CliRunner()


def test_query_json(cli, server):
    server.queue(QUERY_PATH, query_ok([column("ID", "fixed"), column("NAME", "text")], [["1", "a"], ["2", None]]))

    result = cli.invoke(cli_main.main, ["query", "select id, name from t", "--json"])

    assert result.exit_code == 0, result.output
    out = json.loads(result.output)
    assert out["columns"] == ["ID", "NAME"]
    assert out["rows"] == [["1", "a"], ["2", None]]
    assert len(server.calls(CLOSE_SESSION_PATH)) == 1


def test_query_passes_params(cli, server):
    result = cli.invoke(cli_main.main, ["query", "select ?", "-p", "x", "--json"])

    assert result.exit_code == 0, result.output
    body = server.body(server.calls(QUERY_PATH)[0])
    assert body["bindings"] == {"1": {"type": "TEXT", "value": "x"}}


def test_scalar(cli, server):
    server.queue(QUERY_PATH, query_ok([column("N", "fixed")], [["42"]]))
    result = cli.invoke(cli_main.main, ["scalar", "select 42"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "42"


def test_execute(cli, server):
    server.queue(QUERY_PATH, query_ok([column("number of rows updated", "fixed")], [["3"]], statementTypeId=0x3200))
    result = cli.invoke(cli_main.main, ["execute", "update t set x = 1"])
    assert result.exit_code == 0, result.output
    assert "3 rows affected" in result.output


def test_server_error_exits_nonzero(cli, server):
    server.queue(QUERY_PATH, failure("SQL compilation error", "001003"))
    result = cli.invoke(cli_main.main, ["scalar", "selec 1"])
    assert result.exit_code == 1
    assert "SQL compilation error" in result.output


def test_configure_never_stores_password(tmp_path, monkeypatch):
    config_file = tmp_path / "config.json"
    monkeypatch.setattr(cli_main, "CONFIG_FILE", config_file)

    result = CliRunner().invoke(cli_main.main, ["configure", "--account", "acme", "--user", "etl", "--warehouse", "WH"])

    assert result.exit_code == 0, result.output
    saved = json.loads(config_file.read_text())
    assert saved == {"account": "acme", "user": "etl", "warehouse": "WH"}


def test_configure_custom_endpoint(tmp_path, monkeypatch):
    config_file = tmp_path / "config.json"
    monkeypatch.setattr(cli_main, "CONFIG_FILE", config_file)

    result = CliRunner().invoke(cli_main.main, [
        "configure", "--account", "acme", "--user", "etl",
        "--host", "localhost", "--protocol", "http", "--port", "8080",
    ])

    assert result.exit_code == 0, result.output
    cfg = json.loads(config_file.read_text())
    assert cfg["port"] == 8080
    settings = cli_main._settings_from_config(cfg, "pw")
    assert settings.url_info.base_url == "http://localhost:8080"


def test_settings_from_config():
    settings = cli_main._settings_from_config(
        {"account": "acme", "user": "etl", "host": "localhost", "port": 8080, "protocol": "http", "schema": "RAW"},
        "pw",
    )
    assert settings.url_info.base_url == "http://localhost:8080"
    assert settings.session_info.schema_name == "RAW"
    assert settings.auth_info.password == "pw"
