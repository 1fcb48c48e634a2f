"""Basic unit tests for the snowflake-rest package."""

from snowflake_rest import (
    AsyncSnowflakeClient,
    SnowflakeClient,
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
    __version__,
)
from snowflake_rest.executor import SESSION_EXPIRED_CODE


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert AsyncSnowflakeClient is not None
    assert SnowflakeClient is not None


def test_error_hierarchy():
    for cls in (ConfigurationError, TransportError, AuthenticationFailed, RenewalFailed,
                SessionNotInitialized, OperationFailed, MappingError, BindingError, UnsupportedFeature):
        assert issubclass(cls, SnowflakeClientError)


def test_error_attributes():
    err = SnowflakeClientError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    failed = OperationFailed("Query execution", "SQL compilation error", 1003)
    assert failed.code == 1003
    assert failed.operation == "Query execution"
    assert "SQL compilation error" in str(failed)

    mapping = MappingError("amount", "null value")
    assert mapping.field == "amount"
    assert mapping.details == {"field": "amount"}

    binding = BindingError(2, "no SQL type")
    assert binding.index == 2

    unsupported = UnsupportedFeature("chunked results")
    assert unsupported.feature == "chunked results"


def test_session_expired_code():
    assert SESSION_EXPIRED_CODE == 390112
