"""
Login and token-renewal payloads.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginSessionInfo(_CamelModel):
    database_name: Optional[str] = None
    schema_name: Optional[str] = None
    warehouse_name: Optional[str] = None
    role_name: Optional[str] = None


class LoginResponseData(_CamelModel):
    token: str
    master_token: str
    validity_in_seconds: int = 0
    master_validity_in_seconds: int = 0
    display_user_name: Optional[str] = None
    server_version: Optional[str] = None
    first_login: bool = False
    rem_me_token: Optional[str] = None
    rem_me_validity_in_seconds: int = 0
    health_check_interval: int = 0
    new_client_for_upgrade: Optional[str] = None
    session_id: Optional[int] = None
    id_token: Optional[str] = None
    id_token_validity_in_seconds: int = 0
    session_info: LoginSessionInfo = LoginSessionInfo()
    parameters: list[dict[str, Any]] = []


class RenewSessionResponseData(_CamelModel):
    session_token: str
    validity_in_seconds_st: int = Field(0, alias="validityInSecondsST")
    master_token: Optional[str] = None
    validity_in_seconds_mt: int = Field(0, alias="validityInSecondsMT")
    session_id: Optional[int] = None
