"""Blackhole sink connector: accepts and discards everything"""

from typing import MutableMapping, Optional
import asyncio
import json
import structlog
from connector_kit.core.base_connector import BaseConnector
from connector_kit.core.config_compiler import build_connection, build_operator_config
from connector_kit.core.event_sink import EventSink
from connector_kit.core.models import (
    Connection,
    ConnectionSchema,
    ConnectionType,
    ConnectorDescriptor,
    EmptyConfig,
    TestSourceMessage,
)
from connector_kit.core.test_session import spawn

logger = structlog.get_logger(__name__)

OPERATOR = "connectors::blackhole::BlackholeSinkFunc"

TABLE_SCHEMA = json.dumps({
    "type": "object",
    "title": "BlackholeTable",
    "properties": {},
    "additionalProperties": False,
})

DESCRIPTOR = ConnectorDescriptor(
    id="blackhole",
    name="Blackhole",
    description="No-op sink that swallows all data",
    enabled=True,
    source=False,
    sink=True,
    testing=False,
    hidden=False,
    custom_schemas=False,
    connection_config=None,
    table_config=TABLE_SCHEMA,
)


async def _always_valid(sink: EventSink) -> None:
    try:
        await sink.send(TestSourceMessage.success("Successfully validated connection"))
        await sink.close()
    except Exception as e:
        logger.warning("Failed to deliver blackhole test result", error=str(e))


class BlackholeConnector(BaseConnector):
    """Sink with no configuration; useful for benchmarking and dry runs"""

    def descriptor(self) -> ConnectorDescriptor:
        return DESCRIPTOR

    def connection_kind(self, profile: EmptyConfig, table: EmptyConfig) -> ConnectionType:
        return ConnectionType.SINK

    def run_connectivity_test(
        self,
        name: str,
        profile: EmptyConfig,
        table: EmptyConfig,
        schema: Optional[ConnectionSchema],
        sink: EventSink,
    ) -> asyncio.Task:
        return spawn(_always_valid(sink), name=f"test:{self.name}:{name}")

    def from_config(
        self,
        id: Optional[int],
        name: str,
        profile: EmptyConfig,
        table: EmptyConfig,
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        schema = schema or ConnectionSchema()
        config = build_operator_config(profile, table, format=schema.format)

        return build_connection(
            id=id,
            name=name,
            connection_type=ConnectionType.SINK,
            schema=schema,
            operator=OPERATOR,
            config=config,
            description="Blackhole",
        )

    def from_options(
        self,
        name: str,
        options: MutableMapping[str, str],
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        return self.from_config(None, name, EmptyConfig(), EmptyConfig(), schema)
