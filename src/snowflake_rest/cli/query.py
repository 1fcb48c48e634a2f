"""CLI: sfrest query|scalar|execute|cancel"""

import json

import click
from rich.console import Console
from rich.table import Table

from snowflake_rest.errors import SnowflakeClientError

console = Console()


def _get_client():
    from snowflake_rest.cli.main import _get_client
    return _get_client()


def _run(coro):
    from snowflake_rest.cli.main import _run
    return _run(coro)


def _params(values: tuple[str, ...]):
    return list(values) or None


async def _with_client(action):
    client = _get_client()
    try:
        return await action(client)
    except SnowflakeClientError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    finally:
        await client.aclose()


@click.command("query")
@click.argument("sql")
@click.option("-p", "--param", "params", multiple=True, help="Positional bind value (text)")
@click.option("--describe-only", is_flag=True, help="Return column information only")
@click.option("--json-output", "--json", is_flag=True)
def query_cmd(sql, params, describe_only, json_output):
    """Run a query and print its rows."""

    async def _query(client):
        with console.status("Running query..."):
            data = await client.query_raw_response(sql, _params(params), describe_only=describe_only)
        if json_output:
            click.echo(json.dumps({
                "queryId": data.query_id,
                "columns": data.column_names,
                "rows": data.rowset or [],
            }, indent=2))
            return
        table = Table(title=f"{data.returned or len(data.rowset or [])} rows (query {data.query_id})")
        for column in data.rowtype:
            table.add_column(column.name, style="bold" if not column.nullable else None)
        for row in data.rowset or []:
            table.add_row(*("NULL" if cell is None else cell for cell in row))
        console.print(table)
        if data.has_chunks:
            console.print("[yellow]Result has additional chunks that are not downloaded.[/yellow]")

    _run(_with_client(_query))


@click.command("scalar")
@click.argument("sql")
@click.option("-p", "--param", "params", multiple=True)
def scalar_cmd(sql, params):
    """Print the first cell of the result."""

    async def _scalar(client):
        value = await client.execute_scalar(sql, _params(params))
        click.echo("" if value is None else value)

    _run(_with_client(_scalar))


@click.command("execute")
@click.argument("sql")
@click.option("-p", "--param", "params", multiple=True)
def execute_cmd(sql, params):
    """Run a statement and print the number of rows affected."""

    async def _execute(client):
        with console.status("Executing..."):
            count = await client.execute(sql, _params(params))
        console.print(f"[green]{count} rows affected.[/green]")

    _run(_with_client(_execute))


@click.command("cancel")
@click.argument("request_id")
def cancel_cmd(request_id):
    """Cancel the statement submitted with REQUEST_ID."""

    async def _cancel(client):
        await client.cancel_query(request_id)
        console.print(f"[green]Cancel requested for {request_id}.[/green]")

    _run(_with_client(_cancel))
