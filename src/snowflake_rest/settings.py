"""
Client configuration: credentials, session defaults, endpoint and mapping options.
"""

import os
import re
from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel

from snowflake_rest.errors import ConfigurationError

DEFAULT_DOMAIN = "snowflakecomputing.com"
DEFAULT_REGION = "us-west-2"

_HOST_RE = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9\-_.]*[A-Za-z0-9])?$")


class AuthInfo(BaseModel):
    user: str
    password: str
    account: str
    region: Optional[str] = None


class SessionInfo(BaseModel):
    role: Optional[str] = None
    schema_name: Optional[str] = None
    database: Optional[str] = None
    warehouse: Optional[str] = None


class UrlInfo(BaseModel):
    host: str
    protocol: str = "https"
    port: int = 443

    @classmethod
    def for_account(cls, account: str, region: Optional[str] = None) -> "UrlInfo":
        """Default endpoint for an account; us-west-2 has no region segment."""
        if not region or region.lower() == DEFAULT_REGION:
            return cls(host=f"{account}.{DEFAULT_DOMAIN}")
        return cls(host=f"{account}.{region}.{DEFAULT_DOMAIN}")

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"


class MapperOptions(BaseModel):
    """Options for turning row sets into typed values. Passed per call, never global."""

    case_sensitive: bool = False
    # FIXED columns with scale > 0 become Decimal; float when disabled.
    scaled_fixed_as_decimal: bool = True


class ClientSettings(BaseModel):
    auth_info: AuthInfo
    session_info: SessionInfo = SessionInfo()
    url_info: Optional[UrlInfo] = None
    mapper_options: MapperOptions = MapperOptions()

    def model_post_init(self, __context: object) -> None:
        if self.url_info is None and self.auth_info.account:
            self.url_info = UrlInfo.for_account(self.auth_info.account, self.auth_info.region)

    def validate_settings(self) -> None:
        if not self.auth_info.user:
            raise ConfigurationError("User name is either empty or null.")
        if not self.auth_info.password:
            raise ConfigurationError("User password is either empty or null.")
        if not self.auth_info.account:
            raise ConfigurationError("Snowflake account is either empty or null.")

        url = self.url_info
        if url is None or not url.host:
            raise ConfigurationError("URL Host cannot be empty.")
        if url.protocol not in ("https", "http"):
            raise ConfigurationError("URL Protocol should be either http or https.")
        if not _HOST_RE.match(url.host):
            raise ConfigurationError(f"URL Host is malformed: {url.host!r}")
        if not 0 < url.port < 65536:
            raise ConfigurationError(f"URL Port is out of range: {url.port}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientSettings":
        """Build settings from SNOWFLAKE_* environment variables."""
        env = os.environ if environ is None else environ
        auth_info = AuthInfo(
            user=env.get("SNOWFLAKE_USER", ""),
            password=env.get("SNOWFLAKE_PASSWORD", ""),
            account=env.get("SNOWFLAKE_ACCOUNT", ""),
            region=env.get("SNOWFLAKE_REGION") or None,
        )
        session_info = SessionInfo(
            role=env.get("SNOWFLAKE_ROLE") or None,
            schema_name=env.get("SNOWFLAKE_SCHEMA") or None,
            database=env.get("SNOWFLAKE_DATABASE") or None,
            warehouse=env.get("SNOWFLAKE_WAREHOUSE") or None,
        )
        url_info = None
        if env.get("SNOWFLAKE_HOST"):
            try:
                port = int(env.get("SNOWFLAKE_PORT", "443"))
            except ValueError:
                raise ConfigurationError(f"SNOWFLAKE_PORT is not a number: {env.get('SNOWFLAKE_PORT')!r}")
            url_info = UrlInfo(
                host=env["SNOWFLAKE_HOST"],
                protocol=env.get("SNOWFLAKE_PROTOCOL", "https"),
                port=port,
            )
        return cls(auth_info=auth_info, session_info=session_info, url_info=url_info)
