"""Websocket source connector implementation"""

from typing import MutableMapping, Optional
from pathlib import Path
import asyncio
import aiohttp
from pydantic import BaseModel, ConfigDict
from connector_kit.common.config import settings
from connector_kit.core.base_connector import BaseConnector, load_schema_text
from connector_kit.core.config_compiler import (
    build_connection,
    build_operator_config,
    pop_opt,
    pull_opt,
    require_schema,
)
from connector_kit.core.event_sink import EventSink
from connector_kit.core.models import (
    Connection,
    ConnectionSchema,
    ConnectionType,
    ConnectorDescriptor,
    EmptyConfig,
)
from connector_kit.core.test_session import (
    ConnectionProbe,
    ConnectionTestSession,
    InboundKind,
    InboundMessage,
    spawn,
)

TABLE_SCHEMA = load_schema_text(Path(__file__).parent / "schemas" / "websocket" / "table.json")

ICON = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    '<path d="M4 12h16M12 4v16" stroke="currentColor" fill="none"/></svg>'
)

OPERATOR = "connectors::websocket::WebsocketSourceFunc"

DESCRIPTOR = ConnectorDescriptor(
    id="websocket",
    name="Websocket",
    icon=ICON,
    description="Connect to a Websocket server",
    enabled=True,
    source=True,
    sink=False,
    testing=True,
    hidden=False,
    custom_schemas=True,
    connection_config=None,
    table_config=TABLE_SCHEMA,
)


class WebsocketTable(BaseModel):
    """Per-table settings; field names mirror schemas/websocket/table.json"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    endpoint: str
    subscription_message: Optional[str] = None


class WebsocketProbe(ConnectionProbe):
    """aiohttp websocket client used by connectivity tests"""

    label = "websocket"

    def __init__(self, endpoint: str, connect_timeout: Optional[float] = None):
        self.endpoint = endpoint
        self.connect_timeout = connect_timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

    async def connect(self) -> None:
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=None, connect=self.connect_timeout)
        )
        # The connect timeout only covers the TCP dial; bound the upgrade handshake too
        self._ws = await asyncio.wait_for(self._session.ws_connect(self.endpoint), self.connect_timeout)

    async def send(self, payload: str) -> None:
        await self._ws.send_str(payload)

    async def receive(self) -> InboundMessage:
        msg = await self._ws.receive()
        if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
            return InboundMessage(InboundKind.DATA)
        if msg.type == aiohttp.WSMsgType.ERROR:
            return InboundMessage(InboundKind.ERROR, repr(self._ws.exception() or msg.data))
        # CLOSE, CLOSING, CLOSED
        return InboundMessage(InboundKind.CLOSED, str(msg.extra or ""))

    async def close(self) -> None:
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._session is not None and not self._session.closed:
            await self._session.close()


class WebsocketConnector(BaseConnector):
    """Source connector that reads messages from a websocket server"""

    profile_model = EmptyConfig
    table_model = WebsocketTable

    def __init__(self, wait_timeout: Optional[float] = None):
        super().__init__()
        self.wait_timeout = wait_timeout

    def descriptor(self) -> ConnectorDescriptor:
        return DESCRIPTOR

    def connection_kind(self, profile: EmptyConfig, table: WebsocketTable) -> ConnectionType:
        return ConnectionType.SOURCE

    def run_connectivity_test(
        self,
        name: str,
        profile: EmptyConfig,
        table: WebsocketTable,
        schema: Optional[ConnectionSchema],
        sink: EventSink,
    ) -> asyncio.Task:
        wait_timeout = self.wait_timeout if self.wait_timeout is not None else settings.test_wait_timeout_seconds
        session = ConnectionTestSession(
            WebsocketProbe(table.endpoint, connect_timeout=wait_timeout),
            sink,
            subscription_message=table.subscription_message,
            wait_timeout=wait_timeout,
            name=name,
        )
        self.logger.info("Starting websocket connectivity test", name=name, endpoint=table.endpoint)
        return spawn(session.run(), name=f"test:{self.name}:{name}")

    def from_config(
        self,
        id: Optional[int],
        name: str,
        profile: EmptyConfig,
        table: WebsocketTable,
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        description = f"WebsocketSource<{table.endpoint}>"
        schema, format = require_schema(schema, "WebSocket")

        config = build_operator_config(profile, table, format=format)

        return build_connection(
            id=id,
            name=name,
            connection_type=self.connection_kind(profile, table),
            schema=schema,
            operator=OPERATOR,
            config=config,
            description=description,
        )

    def from_options(
        self,
        name: str,
        options: MutableMapping[str, str],
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        endpoint = pull_opt("endpoint", options)
        subscription_message = pop_opt("subscription_message", options)
        require_schema(schema, "WebSocket")

        table = {"endpoint": endpoint}
        if subscription_message is not None:
            table["subscription_message"] = subscription_message

        return self.from_config(None, name, EmptyConfig(), self.parse_table(table), schema)
