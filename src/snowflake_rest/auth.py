"""
Session lifecycle: login, token renewal and close.

Stateless; the client owns the session these calls produce.
"""

import logging
from typing import Optional

from snowflake_rest.errors import AuthenticationFailed, OperationFailed, RenewalFailed, SessionNotInitialized
from snowflake_rest.models.envelope import ResponseEnvelope
from snowflake_rest.models.login import LoginResponseData, RenewSessionResponseData
from snowflake_rest.models.session import Session
from snowflake_rest.settings import AuthInfo, SessionInfo
from snowflake_rest.transport.http import HttpClient
from snowflake_rest.transport.request_builder import RequestBuilder

logger = logging.getLogger(__name__)


def mask_token(token: Optional[str]) -> str:
    return "****" if token else "None"


class Authenticator:
    def __init__(self, http: HttpClient, requests: RequestBuilder):
        self._http = http
        self._requests = requests

    async def login(self, auth_info: AuthInfo, session_info: SessionInfo) -> Session:
        """Authenticate with user and password and open a new session."""
        logger.debug("logging in user %s to account %s", auth_info.user, auth_info.account)
        raw = await self._http.send(self._requests.build_login_request(auth_info, session_info))
        response = ResponseEnvelope.model_validate(raw)
        if not response.success:
            raise AuthenticationFailed(response.message, response.code)
        session = Session.from_login(response.payload(LoginResponseData))
        logger.info("session %s established (%s)", session.session_id, session)
        return session

    async def renew(self, session: Optional[Session]) -> Session:
        """Exchange the master token for a new session token."""
        if session is None:
            raise SessionNotInitialized()
        logger.debug("renewing session %s, master token: %s", session.session_id, mask_token(session.master_token))
        raw = await self._http.send(self._requests.build_renew_session_request(session))
        response = ResponseEnvelope.model_validate(raw)
        if not response.success:
            raise RenewalFailed(response.message, response.code)
        renewed = session.renewed(response.payload(RenewSessionResponseData))
        logger.info("session %s renewed", renewed.session_id)
        return renewed

    async def close(self, session: Session) -> None:
        raw = await self._http.send(self._requests.build_close_session_request(session))
        response = ResponseEnvelope.model_validate(raw)
        if not response.success:
            raise OperationFailed("Closing session", response.message, response.code)
        logger.info("session %s closed", session.session_id)
