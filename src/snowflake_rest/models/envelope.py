"""
Response envelope shared by every endpoint: {success, message, code, data}.
"""

from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError, field_validator

from snowflake_rest.errors import TransportError

DataT = TypeVar("DataT", bound=BaseModel)


class ResponseEnvelope(BaseModel):
    success: bool = False
    message: Optional[str] = None
    # The server sends codes as strings ("390112"); normalised to int.
    code: Optional[int] = None
    data: Optional[Any] = None

    @field_validator("code", mode="before")
    @classmethod
    def numeric_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return int(value) if value.isdigit() else None
        return value

    def payload(self, model: type[DataT]) -> DataT:
        """`data` validated as `model`. Only meaningful for successful responses."""
        try:
            return model.model_validate(self.data or {})
        except ValidationError as e:
            raise TransportError("invalid_response", f"Unexpected {model.__name__} payload: {e}")
