"""Custom exceptions for the connector kit"""


class ConnectorKitError(Exception):
    """
    Base exception for all connector kit errors.

    This serves as the root exception class for the package to catch all internal errors.
    """
    pass


class ConnectorError(ConnectorKitError):
    """
    Error in connector operations.

    Raised when a connector is misdeclared or the registry is used incorrectly.
    """
    pass


class ConnectorNotFoundError(ConnectorError):
    """Raised when no connector is registered under the requested id."""

    def __init__(self, connector_id: str):
        self.connector_id = connector_id
        super().__init__(f"Connector not found: {connector_id}")


class CompileError(ConnectorKitError):
    """
    Configuration compilation failure.

    Raised synchronously by `from_config`/`from_options`. A compile error always means
    no Connection was produced.
    """
    pass


class MissingOption(CompileError):
    """A required key was absent from the raw options map."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"required option '{key}' not set")


class MissingSchema(CompileError):
    """The connector needs a ConnectionSchema and none was given."""
    pass


class MissingFormat(CompileError):
    """The ConnectionSchema was given without a format."""
    pass


class SchemaValidationError(CompileError):
    """
    Profile or table configuration does not match the connector's JSON schema.

    Attributes:
        errors: Human-readable messages, one per violation.
    """

    def __init__(self, message: str, errors=None):
        self.errors = list(errors or [])
        super().__init__(message)


class ConnectionTestError(ConnectorKitError):
    """
    Failure inside a connectivity test session.

    Never escapes the session: the message becomes the text of the terminal error event.
    """
    pass


class ConnectFailure(ConnectionTestError):
    """The underlying transport could not be established."""
    pass


class SendFailure(ConnectionTestError):
    """The handshake/subscription payload could not be delivered."""
    pass


class ReceiveFailure(ConnectionTestError):
    """The transport reported an error while waiting for data."""
    pass


class SessionTimeout(ConnectionTestError):
    """No inbound message arrived within the wait budget."""
    pass


class Disconnected(ConnectionTestError):
    """The transport closed before any data arrived."""
    pass
