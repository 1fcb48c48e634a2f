"""
Integration tests against a real Snowflake account.

Requires environment variables:
  SNOWFLAKE_ACCOUNT, SNOWFLAKE_USER, SNOWFLAKE_PASSWORD
  SNOWFLAKE_REGION, SNOWFLAKE_WAREHOUSE, SNOWFLAKE_ROLE  (optional)

Run: SNOWFLAKE_INTEGRATION=1 pytest tests/integration/ -v
"""

import os
from datetime import date

import pytest

from snowflake_rest import AsyncSnowflakeClient, ClientSettings, OperationFailed, RecordShape, ValueKind

SKIP = not os.environ.get("SNOWFLAKE_INTEGRATION")

pytestmark = pytest.mark.skipif(SKIP, reason="SNOWFLAKE_INTEGRATION not set")


def make_client() -> AsyncSnowflakeClient:
    return AsyncSnowflakeClient(ClientSettings.from_env())


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_login_renew_close(self):
        client = make_client()
        first = await client.init_new_session()
        assert first.session_token
        renewed = await client.renew_session()
        assert renewed.session_token != first.session_token
        await client.close_session()
        assert client.session is None
        await client.aclose()


class TestQueries:
    @pytest.mark.asyncio
    async def test_scalar_and_bindings(self):
        async with make_client() as client:
            assert await client.execute_scalar("select 1 + ?", [41]) == "42"

    @pytest.mark.asyncio
    async def test_typed_rows(self):
        shape = RecordShape({"n": ValueKind.INTEGER, "d": ValueKind.DATE, "s": ValueKind.TEXT})
        async with make_client() as client:
            rows = await client.query("select 7 as n, to_date('2021-01-01') as d, 'x' as s", shape=shape)
        assert rows == [{"n": 7, "d": date(2021, 1, 1), "s": "x"}]

    @pytest.mark.asyncio
    async def test_execute_counts_rows(self):
        async with make_client() as client:
            await client.execute("create temporary table sfrest_it (id int)")
            assert await client.execute("insert into sfrest_it values (1), (2), (3)") == 3
            assert await client.execute("delete from sfrest_it where id > ?", [1]) == 2

    @pytest.mark.asyncio
    async def test_compilation_error(self):
        async with make_client() as client:
            with pytest.raises(OperationFailed):
                await client.query("select * from table_that_does_not_exist_sfrest")
