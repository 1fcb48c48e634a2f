"""
Parameter binding: turns caller parameters into the server's typed bindings.

Bindings are keyed by 1-based position ("1", "2", ...) and carry a SQL type
tag plus the value encoded as a string.
"""

import binascii
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel

from snowflake_rest.errors import BindingError

EPOCH = datetime(1970, 1, 1)
EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)
EPOCH_DATE = date(1970, 1, 1)

# Offsets travel as minutes east of UTC shifted by one day.
TZ_OFFSET_SHIFT = 1440


class ParamBinding(BaseModel):
    type: str
    value: Optional[str] = None


def _delta_to_nanoseconds(delta: timedelta) -> int:
    return (delta.days * 86400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000


def _bind_datetime(value: datetime) -> ParamBinding:
    if value.tzinfo is None or value.utcoffset() is None:
        return ParamBinding(type="TIMESTAMP_NTZ", value=str(_delta_to_nanoseconds(value - EPOCH)))
    offset = value.utcoffset()
    offset_minutes = int(offset.total_seconds() // 60)
    nanos = _delta_to_nanoseconds(value - EPOCH_UTC)
    return ParamBinding(type="TIMESTAMP_TZ", value=f"{nanos} {offset_minutes + TZ_OFFSET_SHIFT}")


def _bind_date(value: date) -> ParamBinding:
    millis = (value - EPOCH_DATE).days * 86_400_000
    return ParamBinding(type="DATE", value=str(millis))


def _bind_time(index: int, value: time) -> ParamBinding:
    if value.tzinfo is not None:
        raise BindingError(index, "time values with tzinfo are not supported")
    seconds = value.hour * 3600 + value.minute * 60 + value.second
    return ParamBinding(type="TIME", value=str(seconds * 1_000_000_000 + value.microsecond * 1000))


def _bind_timedelta(value: timedelta) -> ParamBinding:
    return ParamBinding(type="TIME", value=str(_delta_to_nanoseconds(value)))


def bind_value(index: int, value: Any) -> ParamBinding:
    """Binding for a single value; `index` is only used for error reporting."""
    if value is None:
        return ParamBinding(type="ANY", value=None)
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return ParamBinding(type="BOOLEAN", value="true" if value else "false")
    if isinstance(value, (int, Decimal)):
        return ParamBinding(type="FIXED", value=str(value))
    if isinstance(value, float):
        return ParamBinding(type="REAL", value=repr(value))
    if isinstance(value, str):
        return ParamBinding(type="TEXT", value=value)
    if isinstance(value, (bytes, bytearray)):
        return ParamBinding(type="BINARY", value=binascii.hexlify(value).decode("ascii"))
    # datetime before date: datetime is a date subclass.
    if isinstance(value, datetime):
        return _bind_datetime(value)
    if isinstance(value, date):
        return _bind_date(value)
    if isinstance(value, time):
        return _bind_time(index, value)
    if isinstance(value, timedelta):
        return _bind_timedelta(value)
    raise BindingError(index, f"no SQL type for values of type {type(value).__name__}")


def _positional_values(params: Any) -> list[Any]:
    if isinstance(params, BaseModel):
        return list(params.model_dump().values())
    if isinstance(params, Mapping):
        return list(params.values())
    if isinstance(params, (list, tuple)):
        return list(params)
    return [params]


def build_parameter_bindings(params: Any = None) -> dict[str, ParamBinding]:
    """Bindings for `params`: a sequence, a mapping, a pydantic model or a single value."""
    if params is None:
        return {}
    bindings: dict[str, ParamBinding] = {}
    for index, value in enumerate(_positional_values(params), start=1):
        if isinstance(value, (list, tuple, set, dict)):
            raise BindingError(index, "collection values are not supported")
        bindings[str(index)] = bind_value(index, value)
    return bindings
