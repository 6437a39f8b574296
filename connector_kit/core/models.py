"""Data model shared by connectors, the config compiler and test sessions"""

from typing import Dict, Any, Optional, List
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class ConnectionType(str, Enum):
    """Direction of data flow for a compiled connection"""
    SOURCE = "source"
    SINK = "sink"


class FormatKind(str, Enum):
    """Serialization formats the engine knows how to decode"""
    JSON = "json"
    AVRO = "avro"
    PARQUET = "parquet"
    RAW_STRING = "raw_string"


class BadDataPolicy(str, Enum):
    FAIL = "fail"
    DROP = "drop"


class ConnectorDescriptor(BaseModel):
    """
    Static description of one connector type.

    Built once per connector type and never mutated. `table_config` (and
    `connection_config` when the connector has connection-level settings) hold
    the JSON schema text that user configuration is validated against.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str = ""
    description: str = ""
    enabled: bool = True
    source: bool = False
    sink: bool = False
    testing: bool = False
    hidden: bool = False
    custom_schemas: bool = False
    connection_config: Optional[str] = None
    table_config: str = "{}"


class EmptyConfig(BaseModel):
    """Profile for connectors without connection-level settings"""
    model_config = ConfigDict(frozen=True, extra="forbid")


class Format(BaseModel):
    """Resolved data format for a connection"""
    model_config = ConfigDict(frozen=True)

    kind: FormatKind
    options: Dict[str, Any] = Field(default_factory=dict)


class SchemaField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    nullable: bool = False


class ConnectionSchema(BaseModel):
    """Data-format contract negotiated for a connection"""
    model_config = ConfigDict(frozen=True)

    format: Optional[Format] = None
    bad_data: Optional[BadDataPolicy] = None
    framing: Optional[Dict[str, Any]] = None
    struct_name: Optional[str] = None
    fields: List[SchemaField] = Field(default_factory=list)
    definition: Optional[str] = None
    inferred: Optional[bool] = None


class RateLimit(BaseModel):
    model_config = ConfigDict(frozen=True)

    messages_per_second: int = Field(..., gt=0)


class OperatorConfig(BaseModel):
    """
    Engine-facing configuration bundle.

    `connection` and `table` hold the serialized profile and table; validating
    them back into the connector's models must reproduce the original values.
    """
    connection: Dict[str, Any]
    table: Dict[str, Any]
    rate_limit: Optional[RateLimit] = None
    format: Optional[Format] = None


class Connection(BaseModel):
    """Durable result of a successful compilation"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, serialize_by_alias=True)

    id: Optional[int] = None
    name: str
    connection_type: ConnectionType
    connection_schema: ConnectionSchema = Field(..., alias="schema")
    operator: str
    config: str
    description: str

    def operator_config(self) -> OperatorConfig:
        """Decode the serialized operator config"""
        return OperatorConfig.model_validate_json(self.config)


class TestSourceMessage(BaseModel):
    """One status event emitted by a connectivity test"""
    # Not a pytest test class.
    __test__ = False

    model_config = ConfigDict(frozen=True)

    error: bool
    done: bool
    message: str

    @classmethod
    def info(cls, message: str) -> "TestSourceMessage":
        return cls(error=False, done=False, message=message)

    @classmethod
    def fail(cls, message: str) -> "TestSourceMessage":
        return cls(error=True, done=True, message=message)

    @classmethod
    def success(cls, message: str) -> "TestSourceMessage":
        return cls(error=False, done=True, message=message)

    def to_json(self) -> str:
        return self.model_dump_json()
