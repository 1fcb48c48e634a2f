"""Shared fixtures: an in-process stub of the Snowflake REST endpoints."""

import json
from collections import defaultdict
from typing import Any, Optional

import httpx
import pytest

from snowflake_rest import AsyncSnowflakeClient, ClientSettings, AuthInfo, SessionInfo
from snowflake_rest.transport.request_builder import (
    CANCEL_QUERY_PATH,
    CLOSE_SESSION_PATH,
    LOGIN_PATH,
    QUERY_PATH,
    TOKEN_REQUEST_PATH,
)


def login_ok(token: str = "session-1", master: str = "master-1") -> dict[str, Any]:
    return {
        "success": True,
        "message": None,
        "code": None,
        "data": {
            "token": token,
            "masterToken": master,
            "validityInSeconds": 3600,
            "masterValidityInSeconds": 14400,
            "displayUserName": "TESTER",
            "serverVersion": "8.40.0",
            "sessionId": 1001,
            "sessionInfo": {
                "databaseName": "ANALYTICS",
                "schemaName": "PUBLIC",
                "warehouseName": "COMPUTE_WH",
                "roleName": "SYSADMIN",
            },
        },
    }


def renew_ok(token: str = "session-2", master: str = "master-2") -> dict[str, Any]:
    return {
        "success": True,
        "message": None,
        "code": None,
        "data": {
            "sessionToken": token,
            "validityInSecondsST": 3600,
            "masterToken": master,
            "validityInSecondsMT": 14400,
            "sessionId": 1002,
        },
    }


def failure(message: str, code: str) -> dict[str, Any]:
    return {"success": False, "message": message, "code": code, "data": None}


def expired() -> dict[str, Any]:
    return failure("Session token has expired.", "390112")


def ok(data: Any = None) -> dict[str, Any]:
    return {"success": True, "message": None, "code": None, "data": data}


def column(name: str, type_: str, scale: Optional[int] = 0, nullable: bool = True) -> dict[str, Any]:
    return {"name": name, "type": type_, "scale": scale, "precision": 38, "nullable": nullable}


def query_ok(rowtype: list[dict[str, Any]], rowset: Optional[list[list[Optional[str]]]], **extra: Any) -> dict[str, Any]:
    data = {"rowtype": rowtype, "rowset": rowset, "queryId": "01b2-0000", "total": len(rowset or [])}
    data.update(extra)
    return ok(data)


class StubServer:
    """Answers each endpoint from a queue of payloads, falling back to a default."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queued: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.defaults: dict[str, dict[str, Any]] = {
            LOGIN_PATH: login_ok(),
            TOKEN_REQUEST_PATH: renew_ok(),
            CLOSE_SESSION_PATH: ok(),
            CANCEL_QUERY_PATH: ok(),
            QUERY_PATH: query_ok([column("1", "fixed")], [["1"]]),
        }

    def queue(self, path: str, *payloads: dict[str, Any]) -> None:
        self._queued[path].extend(payloads)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        payload = self._queued[path].pop(0) if self._queued[path] else self.defaults.get(path)
        if payload is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, json=payload)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None

    @staticmethod
    def token(request: httpx.Request) -> str:
        return request.headers["Authorization"]


def make_settings() -> ClientSettings:
    return ClientSettings(
        auth_info=AuthInfo(user="tester", password="secret", account="xy12345", region="eu-central-1"),
        session_info=SessionInfo(role="SYSADMIN", database="ANALYTICS", schema_name="PUBLIC", warehouse="COMPUTE_WH"),
    )


@pytest.fixture
def server() -> StubServer:
    return StubServer()


@pytest.fixture
def client(server: StubServer) -> AsyncSnowflakeClient:
    return AsyncSnowflakeClient(
        make_settings(),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(server.handler)),
    )
