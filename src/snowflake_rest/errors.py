"""
snowflake-rest error types.

Server-reported failures carry the numeric code from the response envelope;
local failures carry a short string code.
"""

from typing import Any, Optional, Union

Code = Union[int, str, None]


class SnowflakeClientError(Exception):
    def __init__(self, code: Code, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class ConfigurationError(SnowflakeClientError):
    def __init__(self, message: str):
        super().__init__("configuration_error", message)


class TransportError(SnowflakeClientError):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class AuthenticationFailed(SnowflakeClientError):
    def __init__(self, message: Optional[str], code: Code = None):
        super().__init__(code, f"Authentication failed. Message: {message}")


class RenewalFailed(SnowflakeClientError):
    def __init__(self, message: Optional[str], code: Code = None):
        super().__init__(code, f"Renew session failed. Message: {message}")


class SessionNotInitialized(SnowflakeClientError):
    def __init__(self, message: str = "Session is not initialized yet."):
        super().__init__("session_not_initialized", message)


class OperationFailed(SnowflakeClientError):
    """A query, cancel or close request that the server reported as failed."""

    def __init__(self, operation: str, message: Optional[str], code: Code = None):
        super().__init__(code, f"{operation} failed. Message: {message}", {"operation": operation})
        self.operation = operation


class MappingError(SnowflakeClientError):
    def __init__(self, field: str, reason: str):
        super().__init__("mapping_error", f"Cannot map field {field!r}: {reason}", {"field": field})
        self.field = field
        self.reason = reason


class BindingError(SnowflakeClientError):
    def __init__(self, index: int, reason: str):
        super().__init__("binding_error", f"Cannot bind parameter {index}: {reason}", {"index": index})
        self.index = index
        self.reason = reason


class UnsupportedFeature(SnowflakeClientError):
    def __init__(self, feature: str):
        super().__init__("unsupported_feature", f"Not supported: {feature}", {"feature": feature})
        self.feature = feature
