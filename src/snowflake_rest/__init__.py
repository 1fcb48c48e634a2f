"""
snowflake-rest: async client for the Snowflake REST SQL endpoints.

Login, transparent session renewal, parameter binding and typed row mapping
over httpx.
"""

from snowflake_rest.client import AsyncSnowflakeClient, SnowflakeClient
from snowflake_rest.binder import ParamBinding, build_parameter_bindings
from snowflake_rest.mapper import FieldSpec, RecordShape, ScalarShape, ValueKind
from snowflake_rest.models.query import ColumnMetadata, QueryExecResponseData
from snowflake_rest.models.session import Session
from snowflake_rest.settings import AuthInfo, ClientSettings, MapperOptions, SessionInfo, UrlInfo
from snowflake_rest.errors import (
    SnowflakeClientError,
    ConfigurationError,
    TransportError,
    AuthenticationFailed,
    RenewalFailed,
    SessionNotInitialized,
    OperationFailed,
    MappingError,
    BindingError,
    UnsupportedFeature,
)

__version__ = "0.1.0"
__all__ = [
    "AsyncSnowflakeClient",
    "SnowflakeClient",
    "ParamBinding",
    "build_parameter_bindings",
    "FieldSpec",
    "RecordShape",
    "ScalarShape",
    "ValueKind",
    "ColumnMetadata",
    "QueryExecResponseData",
    "Session",
    "AuthInfo",
    "ClientSettings",
    "MapperOptions",
    "SessionInfo",
    "UrlInfo",
    "SnowflakeClientError",
    "ConfigurationError",
    "TransportError",
    "AuthenticationFailed",
    "RenewalFailed",
    "SessionNotInitialized",
    "OperationFailed",
    "MappingError",
    "BindingError",
    "UnsupportedFeature",
]
