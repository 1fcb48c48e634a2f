"""
Session value and the client-owned slot that holds it.
"""

import asyncio
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from snowflake_rest.models.login import LoginResponseData, RenewSessionResponseData


class Session(BaseModel):
    """One authenticated server-side session. Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True)

    session_token: str = Field(min_length=1, repr=False)
    master_token: str = Field(min_length=1, repr=False)
    validity_in_seconds: int = 0
    master_validity_in_seconds: int = 0
    session_id: Optional[int] = None
    display_user_name: Optional[str] = None
    server_version: Optional[str] = None
    first_login: bool = False
    id_token: Optional[str] = Field(None, repr=False)
    id_token_validity_in_seconds: int = 0
    health_check_interval: int = 0
    new_client_for_upgrade: Optional[str] = None
    database_name: Optional[str] = None
    schema_name: Optional[str] = None
    warehouse_name: Optional[str] = None
    role_name: Optional[str] = None

    @classmethod
    def from_login(cls, data: LoginResponseData) -> "Session":
        return cls(
            session_token=data.token,
            master_token=data.master_token,
            validity_in_seconds=data.validity_in_seconds,
            master_validity_in_seconds=data.master_validity_in_seconds,
            session_id=data.session_id,
            display_user_name=data.display_user_name,
            server_version=data.server_version,
            first_login=data.first_login,
            id_token=data.id_token,
            id_token_validity_in_seconds=data.id_token_validity_in_seconds,
            health_check_interval=data.health_check_interval,
            new_client_for_upgrade=data.new_client_for_upgrade,
            database_name=data.session_info.database_name,
            schema_name=data.session_info.schema_name,
            warehouse_name=data.session_info.warehouse_name,
            role_name=data.session_info.role_name,
        )

    def renewed(self, data: RenewSessionResponseData) -> "Session":
        """New session carrying this one's attributes and the renewed tokens."""
        update = {
            "session_token": data.session_token,
            "master_token": data.master_token or self.master_token,
            "validity_in_seconds": data.validity_in_seconds_st,
            "master_validity_in_seconds": data.validity_in_seconds_mt,
            "session_id": data.session_id if data.session_id is not None else self.session_id,
        }
        return Session.model_validate({**self.model_dump(), **update})

    def __str__(self) -> str:
        return f"User: {self.display_user_name}; Role: {self.role_name}; Warehouse: {self.warehouse_name}"


class SessionSlot:
    """The single session held by a client.

    `lock` must be held while reading the session to build a request and
    while replacing or clearing it.
    """

    def __init__(self) -> None:
        self._session: Optional[Session] = None
        self._lock: Optional[asyncio.Lock] = None

    @property
    def lock(self) -> asyncio.Lock:
        # Created lazily so the slot can be built outside a running loop.
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def replace(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None
