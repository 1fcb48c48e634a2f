"""
AsyncSnowflakeClient / SnowflakeClient — main client classes.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from snowflake_rest.auth import Authenticator
from snowflake_rest.binder import build_parameter_bindings
from snowflake_rest.errors import ConfigurationError, RenewalFailed, SessionNotInitialized, SnowflakeClientError
from snowflake_rest.executor import RequestExecutor
from snowflake_rest.mapper import Shape, affected_rows, extract_scalar, map_response
from snowflake_rest.models.query import QueryExecResponseData
from snowflake_rest.models.session import Session, SessionSlot
from snowflake_rest.settings import AuthInfo, ClientSettings, MapperOptions, SessionInfo, UrlInfo
from snowflake_rest.transport.http import HttpClient
from snowflake_rest.transport.request_builder import RequestBuilder

logger = logging.getLogger(__name__)


class AsyncSnowflakeClient:
    """Async Snowflake REST client (primary).

    Holds at most one session. The first query logs in on demand; an
    expired session token is renewed and the request resent once.
    Not safe to share across threads or event loops.
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        user: Optional[str] = None,
        password: Optional[str] = None,
        account: Optional[str] = None,
        region: Optional[str] = None,
        session_info: Optional[SessionInfo] = None,
        url_info: Optional[UrlInfo] = None,
        mapper_options: Optional[MapperOptions] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if settings is None:
            settings = ClientSettings(
                auth_info=AuthInfo(user=user or "", password=password or "", account=account or "", region=region),
                session_info=session_info or SessionInfo(),
                url_info=url_info,
                mapper_options=mapper_options or MapperOptions(),
            )
        elif any(v is not None for v in (user, password, account, region, session_info, url_info, mapper_options)):
            raise ConfigurationError("Pass either a ClientSettings object or individual settings, not both.")
        settings.validate_settings()

        self._settings = settings
        self.http = HttpClient(client=http_client)
        self._requests = RequestBuilder(settings.url_info, self.http)  # type: ignore[arg-type]
        self._auth = Authenticator(self.http, self._requests)
        self._slot = SessionSlot()
        self._executor = RequestExecutor(self.http, self._slot, login=self._login, renew=self._auth.renew)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def session(self) -> Optional[Session]:
        """Current session, or None when not logged in."""
        return self._slot.session

    def set_http_client(self, client: httpx.AsyncClient) -> None:
        """Override the internal httpx client (custom TLS, proxies, tests)."""
        self.http.set_http_client(client)

    async def _login(self) -> Session:
        return await self._auth.login(self._settings.auth_info, self._settings.session_info)

    async def init_new_session(self) -> Session:
        """Log in and replace any current session."""
        async with self._slot.lock:
            session = await self._login()
            self._slot.replace(session)
            return session

    async def renew_session(self) -> Session:
        """Renew the current session with its master token."""
        async with self._slot.lock:
            if self._slot.session is None:
                raise SessionNotInitialized()
            try:
                session = await self._auth.renew(self._slot.session)
            except RenewalFailed:
                self._slot.clear()
                raise
            self._slot.replace(session)
            return session

    async def close_session(self) -> None:
        """Close the current session. The local session is dropped even if the server reports failure."""
        async with self._slot.lock:
            session = self._slot.session
            if session is None:
                raise SessionNotInitialized()
            self._slot.clear()
            await self._auth.close(session)

    async def query_raw_response(
        self,
        sql: str,
        params: Any = None,
        describe_only: bool = False,
        request_id: Optional[str] = None,
    ) -> QueryExecResponseData:
        """Execute SQL and return columns, rows and query information as sent by the server."""
        bindings = build_parameter_bindings(params)
        logger.debug("executing query with %d bindings, request id %s", len(bindings), request_id)
        return await self._executor.execute(
            lambda session: self._requests.build_query_request(session, sql, bindings, describe_only, request_id),
            QueryExecResponseData,
            "Query execution",
        )

    async def query(
        self,
        sql: str,
        params: Any = None,
        shape: Optional[Shape] = None,
        *,
        mapper_options: Optional[MapperOptions] = None,
        request_id: Optional[str] = None,
    ) -> list[Any]:
        """Execute a query and map every row to `shape` (dicts of typed values by default)."""
        data = await self.query_raw_response(sql, params, request_id=request_id)
        return map_response(data, shape, mapper_options or self._settings.mapper_options)

    async def execute_scalar(self, sql: str, params: Any = None) -> Optional[str]:
        """First cell of the first row as a string, or None when there are no rows."""
        data = await self.query_raw_response(sql, params)
        return extract_scalar(data)

    async def execute(self, sql: str, params: Any = None) -> int:
        """Execute a statement and return the number of rows affected."""
        data = await self.query_raw_response(sql, params)
        return affected_rows(data)

    async def cancel_query(self, request_id: str) -> None:
        """Ask the server to stop the statement submitted with `request_id`."""
        await self._executor.execute(
            lambda session: self._requests.build_cancel_query_request(session, request_id),
            None,
            "Cancelling query",
        )

    async def aclose(self) -> None:
        """Close the session if one is active, then the transport."""
        try:
            if self._slot.is_active:
                await self.close_session()
        finally:
            await self.http.close()

    async def __aenter__(self) -> "AsyncSnowflakeClient":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            await self.aclose()
            return
        # The error raised in the body takes precedence over a failed close.
        try:
            await self.aclose()
        except (SnowflakeClientError, httpx.HTTPError) as close_error:
            logger.warning("Closing the client after %s failed: %s", exc_type.__name__, close_error)


class SnowflakeClient:
    """Sync wrapper around AsyncSnowflakeClient. Runs the event loop internally."""

    def __init__(self, *args: Any, **kwargs: Any):
        self._async = AsyncSnowflakeClient(*args, **kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def session(self) -> Optional[Session]:
        return self._async.session

    @property
    def settings(self) -> ClientSettings:
        return self._async.settings

    def set_http_client(self, client: httpx.AsyncClient) -> None:
        self._async.set_http_client(client)

    def init_new_session(self) -> Session:
        return self._run(self._async.init_new_session())

    def renew_session(self) -> Session:
        return self._run(self._async.renew_session())

    def close_session(self) -> None:
        self._run(self._async.close_session())

    def query_raw_response(self, sql: str, params: Any = None, describe_only: bool = False,
                           request_id: Optional[str] = None) -> QueryExecResponseData:
        return self._run(self._async.query_raw_response(sql, params, describe_only, request_id))

    def query(self, sql: str, params: Any = None, shape: Optional[Shape] = None, **kwargs: Any) -> list[Any]:
        return self._run(self._async.query(sql, params, shape, **kwargs))

    def execute_scalar(self, sql: str, params: Any = None) -> Optional[str]:
        return self._run(self._async.execute_scalar(sql, params))

    def execute(self, sql: str, params: Any = None) -> int:
        return self._run(self._async.execute(sql, params))

    def cancel_query(self, request_id: str) -> None:
        self._run(self._async.cancel_query(request_id))

    def close(self) -> None:
        try:
            self._run(self._async.aclose())
        finally:
            self._loop.close()

    def __enter__(self) -> "SnowflakeClient":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            self.close()
            return
        try:
            self.close()
        except (SnowflakeClientError, httpx.HTTPError) as close_error:
            logger.warning("Closing the client after %s failed: %s", exc_type.__name__, close_error)
