"""
Response mapping: turns column metadata plus string-encoded rows into typed values.

Callers describe the result they want with a shape (`RecordShape` or
`ScalarShape`); each field declares the `ValueKind` it expects and the value
is coerced from the column's SQL type. Coercion never inspects the target
type at runtime: it is a function of (SQL type, cell string, expected kind).
"""

import json
import logging
import types
import typing
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ValidationError

from snowflake_rest.errors import MappingError, UnsupportedFeature
from snowflake_rest.models.query import ColumnMetadata, QueryExecResponseData
from snowflake_rest.settings import MapperOptions

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)
EPOCH_DATE = date(1970, 1, 1)

TRUE_TOKENS = frozenset({"1", "TRUE", "T", "YES", "Y", "ON"})
FALSE_TOKENS = frozenset({"0", "FALSE", "F", "NO", "N", "OFF"})

NUMERIC_TYPES = frozenset({"FIXED", "REAL", "TEXT"})
TIMESTAMP_TYPES = frozenset({"TIMESTAMP", "TIMESTAMP_NTZ", "TIMESTAMP_LTZ", "TIMESTAMP_TZ"})

# Statement type ids: DML statements occupy 0x3000-0x3FFF.
DML_STATEMENT_MIN = 0x3000
DML_STATEMENT_MAX = 0x3FFF


class ValueKind(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    DATE = "date"
    TIME = "time"
    JSON = "json"


class FieldSpec(BaseModel):
    name: str
    kind: ValueKind
    nullable: bool = False
    default: Any = None


class RecordShape:
    """One record per row, built by `factory(**values)`."""

    def __init__(
        self,
        fields: Union[Sequence[FieldSpec], Mapping[str, ValueKind]],
        factory: Callable[..., Any] = dict,
        positional: bool = False,
    ):
        if isinstance(fields, Mapping):
            fields = [FieldSpec(name=name, kind=kind) for name, kind in fields.items()]
        self.fields: list[FieldSpec] = list(fields)
        self.factory = factory
        self.positional = positional

    @classmethod
    def from_model(cls, model: type[BaseModel], positional: bool = False) -> "RecordShape":
        """Shape for a pydantic model; optional or defaulted fields are nullable."""
        fields = []
        for name, info in model.model_fields.items():
            kind, optional = _kind_for_annotation(name, info.annotation)
            fields.append(FieldSpec(
                name=info.alias or name,
                kind=kind,
                nullable=optional or not info.is_required(),
                default=None if info.is_required() else info.get_default(call_default_factory=True),
            ))
        return cls(fields, factory=lambda **values: model.model_validate(values),
                   positional=positional)


class ScalarShape:
    """The first column of every row as a single value."""

    def __init__(self, kind: ValueKind = ValueKind.TEXT, nullable: bool = True):
        self.kind = kind
        self.nullable = nullable


Shape = Union[RecordShape, ScalarShape]

_ANNOTATION_KINDS: dict[Any, ValueKind] = {
    bool: ValueKind.BOOLEAN,
    int: ValueKind.INTEGER,
    float: ValueKind.FLOAT,
    Decimal: ValueKind.DECIMAL,
    str: ValueKind.TEXT,
    datetime: ValueKind.TIMESTAMP,
    date: ValueKind.DATE,
    time: ValueKind.TIME,
    dict: ValueKind.JSON,
    list: ValueKind.JSON,
    Any: ValueKind.JSON,
}


def _kind_for_annotation(name: str, annotation: Any) -> tuple[ValueKind, bool]:
    optional = False
    origin = typing.get_origin(annotation)
    if origin is Union or origin is getattr(types, "UnionType", None):
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        optional = len(args) < len(typing.get_args(annotation))
        if len(args) != 1:
            raise MappingError(name, f"unsupported annotation {annotation!r}")
        annotation = args[0]
        origin = typing.get_origin(annotation)
    if origin in (dict, list):
        annotation = origin
    try:
        return _ANNOTATION_KINDS[annotation], optional
    except (KeyError, TypeError):
        raise MappingError(name, f"unsupported annotation {annotation!r}")


def _scale(column: ColumnMetadata) -> int:
    return column.scale or 0


def _epoch_parts(value: str, scale: int) -> tuple[int, int]:
    """Split an epoch string into whole units and microseconds, keeping `scale` digits."""
    number = Decimal(value)
    whole = int(number.to_integral_value(rounding=ROUND_FLOOR))
    micros = int(((number - whole) * 1_000_000).to_integral_value(rounding=ROUND_FLOOR))
    if scale < 6:
        step = 10 ** (6 - scale)
        micros -= micros % step
    return whole, micros


def _parse_timestamp(column: ColumnMetadata, value: str) -> datetime:
    sql_type = column.sql_type
    if sql_type == "TIMESTAMP_TZ":
        epoch, _, tz = value.partition(" ")
        seconds, micros = _epoch_parts(epoch, _scale(column))
        utc = EPOCH + timedelta(seconds=seconds, microseconds=micros)
        tzinfo = timezone(timedelta(minutes=int(tz) - 1440)) if tz else timezone.utc
        return utc.replace(tzinfo=timezone.utc).astimezone(tzinfo)
    seconds, micros = _epoch_parts(value, _scale(column))
    naive = EPOCH + timedelta(seconds=seconds, microseconds=micros)
    if sql_type == "TIMESTAMP_NTZ":
        return naive
    # LTZ is rendered in UTC; the client does not track the session time zone.
    return naive.replace(tzinfo=timezone.utc)


def _to_integer(column: ColumnMetadata, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        number = Decimal(value)
        if number != number.to_integral_value():
            raise ValueError(f"{value!r} is not integral")
        return int(number)


def _to_boolean(column: ColumnMetadata, value: str) -> bool:
    token = value.strip().upper()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise ValueError(f"{value!r} is not a boolean token")


def _to_timestamp(column: ColumnMetadata, value: str) -> datetime:
    sql_type = column.sql_type
    if sql_type in TIMESTAMP_TYPES:
        return _parse_timestamp(column, value)
    if sql_type == "DATE":
        return datetime.combine(EPOCH_DATE + timedelta(days=int(value)), time())
    return datetime.fromisoformat(value)


def _to_date(column: ColumnMetadata, value: str) -> date:
    sql_type = column.sql_type
    if sql_type == "DATE":
        return EPOCH_DATE + timedelta(days=int(value))
    if sql_type in TIMESTAMP_TYPES:
        return _parse_timestamp(column, value).date()
    return date.fromisoformat(value)


def _to_time(column: ColumnMetadata, value: str) -> time:
    if column.sql_type == "TIME":
        seconds, micros = _epoch_parts(value, _scale(column))
        return (EPOCH + timedelta(seconds=seconds, microseconds=micros)).time()
    return time.fromisoformat(value)


# kind -> (accepted SQL types or None for any, converter)
_COERCIONS: dict[ValueKind, tuple[Optional[frozenset[str]], Callable[[ColumnMetadata, str], Any]]] = {
    ValueKind.TEXT: (None, lambda column, value: value),
    ValueKind.INTEGER: (NUMERIC_TYPES, _to_integer),
    ValueKind.FLOAT: (NUMERIC_TYPES, lambda column, value: float(value)),
    ValueKind.DECIMAL: (NUMERIC_TYPES, lambda column, value: Decimal(value)),
    ValueKind.BOOLEAN: (frozenset({"BOOLEAN", "TEXT", "FIXED"}), _to_boolean),
    ValueKind.TIMESTAMP: (TIMESTAMP_TYPES | {"DATE", "TEXT"}, _to_timestamp),
    ValueKind.DATE: (TIMESTAMP_TYPES | {"DATE", "TEXT"}, _to_date),
    ValueKind.TIME: (frozenset({"TIME", "TEXT"}), _to_time),
    ValueKind.JSON: (None, lambda column, value: json.loads(value)),
}


def coerce_value(
    column: ColumnMetadata,
    cell: Optional[str],
    kind: ValueKind,
    nullable: bool = False,
    field: Optional[str] = None,
) -> Any:
    """Coerce one cell of `column` to `kind`. Raises MappingError on mismatch."""
    field = field or column.name
    if cell is None:
        if nullable:
            return None
        raise MappingError(field, "null value for a non-nullable field")
    accepted, convert = _COERCIONS[kind]
    if accepted is not None and column.sql_type not in accepted:
        raise MappingError(field, f"cannot convert SQL type {column.sql_type} to {kind.value}")
    try:
        return convert(column, cell)
    except (ValueError, ArithmeticError, InvalidOperation, OverflowError) as e:
        raise MappingError(field, f"cannot convert {cell!r} to {kind.value}: {e}")


def default_shape(rowtype: Sequence[ColumnMetadata], options: Optional[MapperOptions] = None) -> RecordShape:
    """Dict per row, keyed by column name, holding the typed value of each column."""
    options = options or MapperOptions()
    fields = [FieldSpec(name=column.name, kind=_natural_kind(column, options), nullable=True) for column in rowtype]
    return RecordShape(fields)


def _natural_kind(column: ColumnMetadata, options: MapperOptions) -> ValueKind:
    sql_type = column.sql_type
    if sql_type == "FIXED":
        if _scale(column) == 0:
            return ValueKind.INTEGER
        return ValueKind.DECIMAL if options.scaled_fixed_as_decimal else ValueKind.FLOAT
    if sql_type == "REAL":
        return ValueKind.FLOAT
    if sql_type == "BOOLEAN":
        return ValueKind.BOOLEAN
    if sql_type in TIMESTAMP_TYPES:
        return ValueKind.TIMESTAMP
    if sql_type == "DATE":
        return ValueKind.DATE
    if sql_type == "TIME":
        return ValueKind.TIME
    if sql_type in ("VARIANT", "OBJECT", "ARRAY"):
        return ValueKind.JSON
    return ValueKind.TEXT


def _column_index(rowtype: Sequence[ColumnMetadata], case_sensitive: bool) -> dict[str, int]:
    index: dict[str, int] = {}
    for position, column in enumerate(rowtype):
        key = column.name if case_sensitive else column.name.casefold()
        index.setdefault(key, position)
    return index


def _resolve_fields(
    rowtype: Sequence[ColumnMetadata], shape: RecordShape, options: MapperOptions,
) -> list[tuple[FieldSpec, Optional[int]]]:
    """Pair each field with its column position, or None for a missing nullable field."""
    resolved: list[tuple[FieldSpec, Optional[int]]] = []
    index = _column_index(rowtype, options.case_sensitive)
    for position, spec in enumerate(shape.fields):
        if shape.positional:
            column = position if position < len(rowtype) else None
        else:
            column = index.get(spec.name if options.case_sensitive else spec.name.casefold())
        if column is None and not spec.nullable:
            raise MappingError(spec.name, "no matching column in result")
        resolved.append((spec, column))
    return resolved


def map_rows(
    rowtype: Sequence[ColumnMetadata],
    rowset: Sequence[Sequence[Optional[str]]],
    shape: Optional[Shape] = None,
    options: Optional[MapperOptions] = None,
) -> list[Any]:
    """One value per row, in row order."""
    options = options or MapperOptions()
    shape = shape or default_shape(rowtype, options)
    width = len(rowtype)
    for number, row in enumerate(rowset):
        if len(row) != width:
            raise MappingError(f"<row {number}>", f"row has {len(row)} cells, expected {width}")

    if isinstance(shape, ScalarShape):
        if not rowtype:
            raise MappingError("<scalar>", "result has no columns")
        column = rowtype[0]
        return [coerce_value(column, row[0], shape.kind, shape.nullable) for row in rowset]

    resolved = _resolve_fields(rowtype, shape, options)
    results = []
    for row in rowset:
        values: dict[str, Any] = {}
        for spec, position in resolved:
            if position is None or (row[position] is None and spec.nullable):
                values[spec.name] = spec.default
                continue
            values[spec.name] = coerce_value(rowtype[position], row[position], spec.kind, spec.nullable, spec.name)
        try:
            results.append(shape.factory(**values))
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or "<record>"
            raise MappingError(field, error["msg"])
    return results


def map_response(
    data: QueryExecResponseData,
    shape: Optional[Shape] = None,
    options: Optional[MapperOptions] = None,
) -> list[Any]:
    if data.has_chunks:
        raise UnsupportedFeature("chunked results")
    if not data.rowset:
        return []
    return map_rows(data.rowtype, data.rowset, shape, options)


def extract_scalar(data: QueryExecResponseData) -> Optional[str]:
    """First cell of the first row as returned by the server, or None."""
    if not data.rowset or not data.rowset[0]:
        return None
    return data.rowset[0][0]


def affected_rows(data: QueryExecResponseData) -> int:
    """Rows affected by a DML statement; 0 when the statement reports none."""
    if not data.rowset or not data.rowset[0]:
        return 0
    statement_type = data.statement_type_id
    if statement_type is not None and not DML_STATEMENT_MIN <= statement_type <= DML_STATEMENT_MAX:
        logger.debug("statement type %#x has no row count", statement_type)
        return 0
    total = 0
    for position, cell in enumerate(data.rowset[0]):
        name = data.rowtype[position].name if position < len(data.rowtype) else f"<column {position}>"
        if cell is None:
            continue
        try:
            total += int(cell)
        except ValueError:
            raise MappingError(name, f"row count {cell!r} is not an integer")
    return total
