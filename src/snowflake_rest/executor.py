"""
Authenticated request execution with a single renewal retry.

A request is described by a builder, `build(session) -> httpx.Request`, rather
than a built request: the retry after a renewal calls the builder again with
the new session. Only `SESSION_EXPIRED_CODE` triggers the retry, and only
once per call.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from snowflake_rest.errors import OperationFailed, RenewalFailed, SessionNotInitialized
from snowflake_rest.models.envelope import DataT, ResponseEnvelope
from snowflake_rest.models.session import Session, SessionSlot
from snowflake_rest.transport.http import HttpClient

logger = logging.getLogger(__name__)

SESSION_EXPIRED_CODE = 390112

RequestBuild = Callable[[Session], httpx.Request]


class RequestExecutor:
    def __init__(
        self,
        http: HttpClient,
        slot: SessionSlot,
        login: Callable[[], Awaitable[Session]],
        renew: Callable[[Session], Awaitable[Session]],
    ):
        self._http = http
        self._slot = slot
        self._login = login
        self._renew = renew

    async def _current_request(self, build: RequestBuild) -> tuple[Session, httpx.Request]:
        async with self._slot.lock:
            session = self._slot.session
            if session is None:
                logger.debug("no active session, logging in")
                session = await self._login()
                self._slot.replace(session)
            return session, build(session)

    async def _renewed_request(self, expired: Session, build: RequestBuild) -> httpx.Request:
        async with self._slot.lock:
            current = self._slot.session
            if current is None:
                raise SessionNotInitialized("Session was closed while the request was in flight.")
            # Another caller may already have renewed the expired session.
            if current is expired:
                try:
                    current = await self._renew(current)
                except RenewalFailed:
                    self._slot.clear()
                    raise
                self._slot.replace(current)
            return build(current)

    async def send(self, build: RequestBuild, operation: str) -> ResponseEnvelope:
        """Send the request built by `build`, renewing and resending once on session expiry."""
        session, request = await self._current_request(build)
        response = ResponseEnvelope.model_validate(await self._http.send(request))

        if response.code == SESSION_EXPIRED_CODE:
            logger.info("%s: session token expired, renewing and retrying once", operation)
            request = await self._renewed_request(session, build)
            response = ResponseEnvelope.model_validate(await self._http.send(request))
            if not response.success:
                logger.warning("%s failed after session renewal (code %s)", operation, response.code)

        if not response.success:
            raise OperationFailed(operation, response.message, response.code)
        return response

    async def execute(
        self, build: RequestBuild, response_model: Optional[type[DataT]], operation: str,
    ) -> Any:
        """Typed `data` of a successful response; raw `data` when no model is given."""
        response = await self.send(build, operation)
        if response_model is None:
            return response.data
        return response.payload(response_model)
