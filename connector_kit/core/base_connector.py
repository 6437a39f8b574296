"""Base connector interface for all connector types"""

from abc import ABC, abstractmethod
from typing import Any, Dict, MutableMapping, Optional, Type, Union
from pathlib import Path
import asyncio
import structlog
from pydantic import BaseModel
from ..common.exceptions import CompileError
from .event_sink import EventSink
from .models import (
    Connection,
    ConnectionSchema,
    ConnectionType,
    ConnectorDescriptor,
    EmptyConfig,
    TestSourceMessage,
)
from .config_compiler import build_model
from .test_session import spawn

logger = structlog.get_logger(__name__)

RawConfig = Union[Dict[str, Any], str, bytes]


def load_schema_text(path: Union[str, Path]) -> str:
    """Read a connector's JSON schema file shipped next to its module"""
    return Path(path).read_text(encoding="utf-8")


class BaseConnector(ABC):
    """
    Base class for all connector types.

    A connector is a descriptor value plus variant behavior: how to classify, compile
    and test one profile/table pair. Subclasses set `profile_model`/`table_model` to
    the pydantic models their configuration decodes into.
    """

    profile_model: Type[BaseModel] = EmptyConfig
    table_model: Type[BaseModel] = EmptyConfig

    def __init__(self):
        self.logger = logger.bind(connector=self.name)

    @property
    def name(self) -> str:
        """Connector id"""
        return self.descriptor().id

    @abstractmethod
    def descriptor(self) -> ConnectorDescriptor:
        """Static metadata; must have no side effects"""
        pass

    @abstractmethod
    def connection_kind(self, profile: BaseModel, table: BaseModel) -> ConnectionType:
        """Classify a configured instance as a source or a sink"""
        pass

    @abstractmethod
    def from_config(
        self,
        id: Optional[int],
        name: str,
        profile: BaseModel,
        table: BaseModel,
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        """
        Compile typed configuration into a Connection.

        Raises:
            CompileError: If the configuration cannot be compiled. No Connection is
                produced in that case.
        """
        pass

    @abstractmethod
    def from_options(
        self,
        name: str,
        options: MutableMapping[str, str],
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        """
        Compile an untyped option map into a Connection.

        Keys that are read are removed from `options`, so whatever is left afterwards
        was not recognized by this connector.

        Raises:
            CompileError: On missing required options or invalid configuration.
        """
        pass

    @abstractmethod
    def run_connectivity_test(
        self,
        name: str,
        profile: BaseModel,
        table: BaseModel,
        schema: Optional[ConnectionSchema],
        sink: EventSink,
    ) -> asyncio.Task:
        """
        Start a connectivity test and return immediately.

        Progress and the outcome are streamed into `sink`; nothing is raised to the
        caller. Must be called from inside a running event loop.
        """
        pass

    def parse_profile(self, value: RawConfig) -> BaseModel:
        """Validate raw connection-level config and build the profile model"""
        return build_model(self.profile_model, value, self.descriptor().connection_config, what="profile")

    def parse_table(self, value: RawConfig) -> BaseModel:
        """Validate raw table config against the descriptor schema and build the table model"""
        return build_model(self.table_model, value, self.descriptor().table_config, what="table")

    def compile_connection(
        self,
        id: Optional[int],
        name: str,
        profile: RawConfig,
        table: RawConfig,
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        """Untyped counterpart of `from_config`"""
        return self.from_config(id, name, self.parse_profile(profile), self.parse_table(table), schema)

    def test_connection(
        self,
        name: str,
        profile: RawConfig,
        table: RawConfig,
        schema: Optional[ConnectionSchema],
        sink: EventSink,
    ) -> asyncio.Task:
        """
        Untyped counterpart of `run_connectivity_test`.

        Invalid configuration is reported as a single terminal error event rather than
        raised, so the test surface behaves the same for every kind of failure.
        """
        try:
            typed_profile = self.parse_profile(profile)
            typed_table = self.parse_table(table)
        except CompileError as e:
            self.logger.info("Connectivity test rejected invalid configuration", error=str(e))
            return spawn(_report_invalid(sink, str(e)), name=f"test:{self.name}:{name}")
        return self.run_connectivity_test(name, typed_profile, typed_table, schema, sink)

    def get_metadata(self) -> Dict[str, Any]:
        """Get connector metadata"""
        descriptor = self.descriptor()
        return {
            "connector_id": descriptor.id,
            "connector_name": descriptor.name,
            "source": descriptor.source,
            "sink": descriptor.sink,
            "testing": descriptor.testing,
        }


async def _report_invalid(sink: EventSink, message: str) -> None:
    try:
        await sink.send(TestSourceMessage.fail(message))
        await sink.close()
    except Exception as e:
        logger.warning("Failed to report invalid configuration", error=str(e))
