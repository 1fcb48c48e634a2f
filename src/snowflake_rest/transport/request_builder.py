"""
Builds the HTTP requests for login, renewal, query, cancel and close.

Every call returns a new request with a fresh request id, so a retry always
goes through the builder again instead of resending a spent request.
"""

import platform
import uuid
from typing import Any, Optional

import httpx

from snowflake_rest.binder import ParamBinding
from snowflake_rest.models.session import Session
from snowflake_rest.settings import AuthInfo, SessionInfo, UrlInfo
from snowflake_rest.transport.http import HttpClient

CLIENT_APP_ID = "snowflake-rest"
CLIENT_APP_VERSION = "0.1.0"

LOGIN_PATH = "/session/v1/login-request"
TOKEN_REQUEST_PATH = "/session/token-request"
QUERY_PATH = "/queries/v1/query-request"
CANCEL_QUERY_PATH = "/queries/v1/abort-request"
CLOSE_SESSION_PATH = "/session/logout-request"

QUERY_WAREHOUSE = "warehouse"
QUERY_DB = "databaseName"
QUERY_SCHEMA = "schemaName"
QUERY_ROLE = "roleName"
QUERY_REQUEST_ID = "requestId"
QUERY_REQUEST_GUID = "request_guid"
QUERY_SESSION_DELETE = "delete"

ACCEPT_SNOWFLAKE = "application/snowflake"
REQUEST_TYPE_RENEW = "RENEW"


def client_environment() -> dict[str, str]:
    return {
        "APPLICATION": CLIENT_APP_ID,
        "OS": platform.system(),
        "OS_VERSION": platform.platform(),
        "PYTHON_VERSION": platform.python_version(),
        "PYTHON_RUNTIME": platform.python_implementation(),
    }


def user_agent() -> str:
    return (
        f"{CLIENT_APP_ID}/{CLIENT_APP_VERSION} ({platform.system()} {platform.release()}) "
        f"{platform.python_implementation()}/{platform.python_version()}"
    )


def _new_request_id() -> str:
    return str(uuid.uuid4())


class RequestBuilder:
    def __init__(self, url_info: UrlInfo, http: HttpClient):
        self._url_info = url_info
        self._http = http
        self._user_agent = user_agent()

    def build_url(self, path: str) -> str:
        return f"{self._url_info.base_url}{path}"

    def _headers(self, token: Optional[str] = None) -> dict[str, str]:
        headers = {
            "Accept": ACCEPT_SNOWFLAKE,
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
        }
        if token is not None:
            headers["Authorization"] = f'Snowflake Token="{token}"'
        return headers

    def _post(
        self,
        path: str,
        params: dict[str, Optional[str]],
        body: Optional[dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> httpx.Request:
        # Empty query values are dropped, the server rejects them.
        clean = {key: value for key, value in params.items() if value}
        return self._http.build_request("POST", self.build_url(path), params=clean, body=body, headers=self._headers(token))

    def build_login_request(self, auth_info: AuthInfo, session_info: SessionInfo) -> httpx.Request:
        params = {
            QUERY_WAREHOUSE: session_info.warehouse,
            QUERY_DB: session_info.database,
            QUERY_SCHEMA: session_info.schema_name,
            QUERY_ROLE: session_info.role,
            QUERY_REQUEST_ID: _new_request_id(),
        }
        body = {"data": {
            "LOGIN_NAME": auth_info.user,
            "PASSWORD": auth_info.password,
            "ACCOUNT_NAME": auth_info.account,
            "CLIENT_APP_ID": CLIENT_APP_ID,
            "CLIENT_APP_VERSION": CLIENT_APP_VERSION,
            "CLIENT_ENVIRONMENT": client_environment(),
        }}
        return self._post(LOGIN_PATH, params, body)

    def build_renew_session_request(self, session: Session) -> httpx.Request:
        params = {QUERY_REQUEST_ID: _new_request_id(), QUERY_REQUEST_GUID: _new_request_id()}
        body = {"oldSessionToken": session.session_token, "requestType": REQUEST_TYPE_RENEW}
        return self._post(TOKEN_REQUEST_PATH, params, body, token=session.master_token)

    def build_query_request(
        self,
        session: Session,
        sql: str,
        bindings: dict[str, ParamBinding],
        describe_only: bool = False,
        request_id: Optional[str] = None,
    ) -> httpx.Request:
        params = {QUERY_REQUEST_ID: request_id or _new_request_id()}
        body: dict[str, Any] = {"sqlText": sql, "describeOnly": describe_only}
        if bindings:
            body["bindings"] = {key: binding.model_dump() for key, binding in bindings.items()}
        return self._post(QUERY_PATH, params, body, token=session.session_token)

    def build_cancel_query_request(self, session: Session, request_id: str) -> httpx.Request:
        params = {QUERY_REQUEST_ID: _new_request_id(), QUERY_REQUEST_GUID: _new_request_id()}
        return self._post(CANCEL_QUERY_PATH, params, {"requestId": request_id}, token=session.session_token)

    def build_close_session_request(self, session: Session) -> httpx.Request:
        params = {QUERY_SESSION_DELETE: "true", QUERY_REQUEST_ID: _new_request_id()}
        return self._post(CLOSE_SESSION_PATH, params, token=session.session_token)
