"""
Query execution payloads: column metadata, row sets and chunk pointers.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ColumnMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    type: str
    nullable: bool = True
    scale: Optional[int] = None
    precision: Optional[int] = None
    length: Optional[int] = None
    byte_length: Optional[int] = None
    database: Optional[str] = None
    schema_name: Optional[str] = Field(None, alias="schema")
    table: Optional[str] = None

    @property
    def sql_type(self) -> str:
        return self.type.upper()


class ChunkInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    row_count: int = 0
    uncompressed_size: int = 0
    compressed_size: Optional[int] = None


class QueryExecResponseData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    parameters: list[dict[str, Any]] = []
    rowtype: list[ColumnMetadata] = Field(default_factory=list, alias="rowtype")
    rowset: Optional[list[list[Optional[str]]]] = Field(None, alias="rowset")
    total: Optional[int] = None
    returned: Optional[int] = None
    query_id: Optional[str] = None
    sql_state: Optional[str] = None
    database_provider: Optional[str] = None
    final_database_name: Optional[str] = None
    final_schema_name: Optional[str] = None
    final_warehouse_name: Optional[str] = None
    final_role_name: Optional[str] = None
    number_of_binds: int = 0
    statement_type_id: Optional[int] = None
    version: Optional[int] = None
    query_result_format: Optional[str] = None
    chunks: Optional[list[ChunkInfo]] = None
    chunk_headers: Optional[dict[str, str]] = None
    qrmk: Optional[str] = None
    get_result_url: Optional[str] = None
    progress_desc: Optional[str] = None
    query_aborts_after_secs: Optional[int] = None
    send_result_time: Optional[int] = None

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.rowtype]

    @property
    def has_chunks(self) -> bool:
        return bool(self.chunks)
