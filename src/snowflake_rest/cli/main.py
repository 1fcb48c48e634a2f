"""
snowflake-rest CLI — `sfrest` command.

Commands:
  sfrest configure          Store account, user and session defaults
  sfrest query <sql>        Run a query and print the rows
  sfrest scalar <sql>       Print the first cell of the result
  sfrest execute <sql>      Run a statement and print the rows affected
  sfrest cancel <id>        Cancel a running statement by request id
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install snowflake-rest[cli]")

from snowflake_rest.client import AsyncSnowflakeClient
from snowflake_rest.settings import AuthInfo, ClientSettings, SessionInfo, UrlInfo

console = Console()
CONFIG_FILE = Path.home() / ".snowflake-rest" / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _settings_from_config(cfg: dict, password: str) -> ClientSettings:
    url_info: Optional[UrlInfo] = None
    if cfg.get("host"):
        url_info = UrlInfo(host=cfg["host"], protocol=cfg.get("protocol", "https"), port=int(cfg.get("port", 443)))
    return ClientSettings(
        auth_info=AuthInfo(user=cfg["user"], password=password, account=cfg["account"], region=cfg.get("region")),
        session_info=SessionInfo(
            role=cfg.get("role"),
            database=cfg.get("database"),
            schema_name=cfg.get("schema"),
            warehouse=cfg.get("warehouse"),
        ),
        url_info=url_info,
    )


def _get_client() -> AsyncSnowflakeClient:
    cfg = _load_config()
    if not cfg.get("account") or not cfg.get("user"):
        console.print("[red]Not configured. Run `sfrest configure` first.[/red]")
        raise SystemExit(1)
    password = os.environ.get("SNOWFLAKE_PASSWORD") or click.prompt("Password", hide_input=True)
    return AsyncSnowflakeClient(_settings_from_config(cfg, password))


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
def main():
    """snowflake-rest CLI: run SQL against Snowflake over its REST API."""


@main.command("configure")
@click.option("--account", prompt=True, help="Account identifier")
@click.option("--user", prompt=True, help="Login name")
@click.option("--region", default=None, help="Region, e.g. us-east-1")
@click.option("--host", default=None, help="Override the derived host name")
@click.option("--protocol", type=click.Choice(["https", "http"]), default=None, help="Protocol for --host")
@click.option("--port", type=int, default=None, help="Port for --host")
@click.option("--role", default=None)
@click.option("--database", default=None)
@click.option("--schema", default=None)
@click.option("--warehouse", default=None)
def configure(account, user, region, host, protocol, port, role, database, schema, warehouse):
    """Save connection defaults. The password is never stored."""
    cfg = _load_config()
    updates = {"account": account, "user": user, "region": region, "host": host, "protocol": protocol, "port": port,
               "role": role, "database": database, "schema": schema, "warehouse": warehouse}
    cfg.update({key: value for key, value in updates.items() if value is not None})
    _save_config(cfg)
    console.print(f"[green]Configuration saved to {CONFIG_FILE}[/green]")


# Register subcommands from separate modules
from snowflake_rest.cli.query import query_cmd, scalar_cmd, execute_cmd, cancel_cmd

main.add_command(query_cmd)
main.add_command(scalar_cmd)
main.add_command(execute_cmd)
main.add_command(cancel_cmd)


if __name__ == "__main__":
    main()
