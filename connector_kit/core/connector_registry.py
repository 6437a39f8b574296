"""Connector registry: read-only lookup of connector implementations by id"""

from types import MappingProxyType
from typing import Iterable, Iterator, List, Optional
import importlib
import inspect
import structlog
from .base_connector import BaseConnector
from .models import ConnectorDescriptor
from ..common.config import settings
from ..common.exceptions import ConnectorError, ConnectorNotFoundError

logger = structlog.get_logger(__name__)


class ConnectorRegistry:
    """
    Immutable mapping from connector id to connector implementation.

    Populated once from an explicit list at construction; there is no way to register
    afterwards, so concurrent reads need no locking.
    """

    def __init__(self, connectors: Iterable[BaseConnector]):
        """
        Build the registry

        Args:
            connectors: Connector instances, one per connector type

        Raises:
            ConnectorError: If an entry is not a BaseConnector or two entries share an id
        """
        entries = {}
        for connector in connectors:
            if not isinstance(connector, BaseConnector):
                raise ConnectorError(f"Connector must extend BaseConnector: {connector!r}")
            connector_id = connector.descriptor().id
            if connector_id in entries:
                raise ConnectorError(f"Duplicate connector id: {connector_id}")
            entries[connector_id] = connector
        self._connectors = MappingProxyType(entries)
        self.logger = logger
        self.logger.info("Connector registry initialized", connectors=sorted(entries))

    @classmethod
    def from_modules(cls, module_paths: Iterable[str]) -> "ConnectorRegistry":
        """
        Build a registry from every BaseConnector subclass defined in the given modules

        Args:
            module_paths: Python module paths (e.g., 'connectors.websocket_connector')
        """
        connectors = []
        for module_path in module_paths:
            try:
                module = importlib.import_module(module_path)
            except ImportError as e:
                logger.error("Failed to load connectors from module", module=module_path, error=str(e))
                raise ConnectorError(f"Failed to load connectors from {module_path}: {e}") from e
            for _, obj in inspect.getmembers(module, inspect.isclass):
                if (issubclass(obj, BaseConnector) and
                        obj is not BaseConnector and
                        not inspect.isabstract(obj) and
                        obj.__module__ == module.__name__):
                    connectors.append(obj())
                    logger.info("Connector loaded from module", module=module_path, connector=obj.__name__)
        return cls(connectors)

    def get(self, connector_id: str) -> BaseConnector:
        """
        Get a connector by id

        Raises:
            ConnectorNotFoundError: If no connector has that id
        """
        try:
            return self._connectors[connector_id]
        except KeyError:
            raise ConnectorNotFoundError(connector_id) from None

    def find(self, connector_id: str) -> Optional[BaseConnector]:
        """Get a connector by id or None"""
        return self._connectors.get(connector_id)

    def ids(self) -> List[str]:
        """List all registered connector ids"""
        return sorted(self._connectors)

    def descriptors(self, include_hidden: bool = False) -> List[ConnectorDescriptor]:
        """Descriptors of all enabled connectors, hidden ones only on request"""
        descriptors = [c.descriptor() for c in self._connectors.values()]
        return sorted(
            (d for d in descriptors if d.enabled and (include_hidden or not d.hidden)),
            key=lambda d: d.id,
        )

    def __contains__(self, connector_id: object) -> bool:
        return connector_id in self._connectors

    def __iter__(self) -> Iterator[BaseConnector]:
        return iter(self._connectors[k] for k in self.ids())

    def __len__(self) -> int:
        return len(self._connectors)


def build_registry(module_paths: Optional[Iterable[str]] = None) -> ConnectorRegistry:
    """Build the process registry from the configured connector modules"""
    return ConnectorRegistry.from_modules(module_paths if module_paths is not None else settings.connector_modules)
