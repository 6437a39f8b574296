"""Pure translation from user configuration to engine-facing Connection records"""

from typing import Any, Dict, MutableMapping, Optional, Tuple, Type, TypeVar, Union
import json
import jsonschema
import structlog
from pydantic import BaseModel, ValidationError
from ..common.exceptions import (
    MissingOption,
    MissingSchema,
    MissingFormat,
    SchemaValidationError,
)
from .models import (
    Connection,
    ConnectionSchema,
    ConnectionType,
    Format,
    OperatorConfig,
    RateLimit,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def pull_opt(key: str, options: MutableMapping[str, str]) -> str:
    """Remove and return a required option, raising MissingOption if absent"""
    try:
        return options.pop(key)
    except KeyError:
        raise MissingOption(key) from None


def pop_opt(key: str, options: MutableMapping[str, str]) -> Optional[str]:
    """Remove and return an optional option"""
    return options.pop(key, None)


def require_schema(schema: Optional[ConnectionSchema], connector_label: str) -> Tuple[ConnectionSchema, Format]:
    """
    Check that a schema with a format was supplied.

    Raises:
        MissingSchema: If schema is None.
        MissingFormat: If the schema has no format.
    """
    if schema is None:
        raise MissingSchema(f"no schema defined for {connector_label} connection")
    if schema.format is None:
        raise MissingFormat(f"'format' must be set for {connector_label} connection")
    return schema, schema.format


def validate_against_schema(value: Any, schema_text: str, what: str = "table") -> Dict[str, Any]:
    """
    Validate a raw configuration value against a connector's JSON schema text.

    Args:
        value: A dict or JSON text.
        schema_text: JSON Schema document, the source of truth for field names and
            required-ness.
        what: "table" or "profile", used in error messages.

    Returns:
        The decoded configuration dict.

    Raises:
        SchemaValidationError: If the value is not valid JSON or violates the schema.
    """
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise SchemaValidationError(f"invalid {what} config: {e}", [str(e)]) from e

    schema = json.loads(schema_text)
    validator = jsonschema.Draft7Validator(schema, format_checker=jsonschema.FormatChecker())
    errors = sorted(validator.iter_errors(value), key=lambda err: list(err.absolute_path))
    if errors:
        messages = [_describe(err) for err in errors]
        logger.info("Configuration rejected by schema", what=what, errors=messages)
        raise SchemaValidationError(f"invalid {what} config: {'; '.join(messages)}", messages)
    return value


def _describe(error: jsonschema.ValidationError) -> str:
    path = ".".join(str(p) for p in error.absolute_path)
    return f"{path}: {error.message}" if path else error.message


def build_model(model: Type[ModelT], value: Union[Dict[str, Any], str, bytes], schema_text: Optional[str] = None, what: str = "table") -> ModelT:
    """Schema-validate a raw value (when a schema is given) and build the typed model"""
    if schema_text is not None:
        value = validate_against_schema(value, schema_text, what)
    elif isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise SchemaValidationError(f"invalid {what} config: {e}", [str(e)]) from e
    try:
        return model.model_validate(value)
    except ValidationError as e:
        messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise SchemaValidationError(f"invalid {what} config: {'; '.join(messages)}", messages) from e


def serialize_config(value: BaseModel) -> Dict[str, Any]:
    """Wire representation of a profile or table"""
    return value.model_dump(mode="json", exclude_none=True)


def build_operator_config(
    profile: BaseModel,
    table: BaseModel,
    format: Optional[Format] = None,
    rate_limit: Optional[RateLimit] = None,
) -> OperatorConfig:
    return OperatorConfig(
        connection=serialize_config(profile),
        table=serialize_config(table),
        rate_limit=rate_limit,
        format=format,
    )


def build_connection(
    id: Optional[int],
    name: str,
    connection_type: ConnectionType,
    schema: ConnectionSchema,
    operator: str,
    config: OperatorConfig,
    description: str,
) -> Connection:
    """Assemble the durable Connection record around a compiled operator config"""
    connection = Connection(
        id=id,
        name=name,
        connection_type=connection_type,
        schema=schema,
        operator=operator,
        config=config.model_dump_json(),
        description=description,
    )
    logger.debug("Connection compiled", name=name, operator=operator, connection_type=connection_type.value)
    return connection
