"""Process startup for hosts that embed the connector kit"""

from typing import Dict, MutableMapping, Optional
from .common.config import settings
from .common.logging import configure_logging, get_logger
from .core.connector_registry import ConnectorRegistry, build_registry
from .core.event_sink import QueueEventSink
from .core.models import Connection, ConnectionSchema

logger = get_logger(__name__)


class ConnectorService:
    """
    Facade a host (HTTP API, CLI, ...) talks to.

    Owns the read-only registry and routes compile and test requests to the connector
    named by id.
    """

    def __init__(self, registry: Optional[ConnectorRegistry] = None):
        self.registry = registry or build_registry()
        self.logger = logger

    def compile_options(
        self,
        connector_id: str,
        name: str,
        options: MutableMapping[str, str],
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        """
        Compile a raw option map; unread keys are left in `options`.

        Raises:
            ConnectorNotFoundError: Unknown connector id.
            CompileError: Invalid or incomplete configuration.
        """
        connector = self.registry.get(connector_id)
        connection = connector.from_options(name, options, schema)
        if options:
            self.logger.warning("Unrecognized connector options", connector=connector_id, options=sorted(options))
        self.logger.info("Connection compiled", connector=connector_id, name=name, operator=connection.operator)
        return connection

    def compile_config(
        self,
        connector_id: str,
        id: Optional[int],
        name: str,
        profile: Dict,
        table: Dict,
        schema: Optional[ConnectionSchema] = None,
    ) -> Connection:
        """Compile JSON profile/table values for the given connector"""
        return self.registry.get(connector_id).compile_connection(id, name, profile, table, schema)

    def start_test(
        self,
        connector_id: str,
        name: str,
        profile: Dict,
        table: Dict,
        schema: Optional[ConnectionSchema] = None,
    ) -> QueueEventSink:
        """
        Start a connectivity test and return the sink its events arrive on.

        Must be called from inside a running event loop.

        Raises:
            ConnectorNotFoundError: Unknown connector id.
        """
        connector = self.registry.get(connector_id)
        sink = QueueEventSink(maxsize=settings.test_event_buffer)
        connector.test_connection(name, profile, table, schema, sink)
        return sink


def startup() -> ConnectorService:
    """Configure logging and build the registry from settings"""
    configure_logging(debug=settings.debug, json_logs=settings.log_json)
    service = ConnectorService()
    logger.info(
        "Connector kit started",
        app=settings.app_name,
        version=settings.app_version,
        connectors=service.registry.ids(),
    )
    return service
