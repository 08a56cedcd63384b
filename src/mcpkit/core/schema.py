"""Schema descriptors — declare capability inputs and validate arguments.

Descriptors are built with the :class:`T` factory::

    input = {
        "operation": T.string(required=True, enum=["add", "subtract"]),
        "a": T.number(required=True, description="First operand"),
    }

:func:`build_input_schema` turns such a mapping into the JSON Schema object
advertised by ``tools/list``; :func:`validate_arguments` checks call
arguments against it (via :mod:`jsonschema`) and fills declared defaults.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from jsonschema import Draft202012Validator
from pydantic import BaseModel, ConfigDict

from mcpkit.core.errors import ArgumentValidationError


class SchemaType(str, Enum):
    """JSON Schema primitive types supported for capability inputs."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class SchemaDescriptor(BaseModel):
    """Declarative description of one input parameter."""

    model_config = ConfigDict(frozen=True)

    type: SchemaType
    required: bool = False
    description: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    enum: tuple[Any, ...] | None = None
    minimum: float | None = None
    maximum: float | None = None
    default: Any = None
    items: SchemaDescriptor | None = None

    def to_json_schema(self) -> dict[str, Any]:
        """Return the JSON Schema fragment for this parameter."""
        schema: dict[str, Any] = {"type": self.type.value}
        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.max_length is not None:
            schema["maxLength"] = self.max_length
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        if self.default is not None:
            schema["default"] = self.default
        if self.items is not None:
            schema["items"] = self.items.to_json_schema()
        return schema


InputSchema = Mapping[str, SchemaDescriptor]


class T:
    """Factory namespace for :class:`SchemaDescriptor` values."""

    @staticmethod
    def string(
        *,
        required: bool = False,
        description: str | None = None,
        min_length: int | None = None,
        max_length: int | None = None,
        enum: Sequence[str] | None = None,
        default: str | None = None,
    ) -> SchemaDescriptor:
        return SchemaDescriptor(
            type=SchemaType.STRING,
            required=required,
            description=description,
            min_length=min_length,
            max_length=max_length,
            enum=tuple(enum) if enum is not None else None,
            default=default,
        )

    @staticmethod
    def number(
        *,
        required: bool = False,
        description: str | None = None,
        min: float | None = None,
        max: float | None = None,
        default: float | None = None,
    ) -> SchemaDescriptor:
        return SchemaDescriptor(
            type=SchemaType.NUMBER,
            required=required,
            description=description,
            minimum=min,
            maximum=max,
            default=default,
        )

    @staticmethod
    def integer(
        *,
        required: bool = False,
        description: str | None = None,
        min: int | None = None,
        max: int | None = None,
        default: int | None = None,
    ) -> SchemaDescriptor:
        return SchemaDescriptor(
            type=SchemaType.INTEGER,
            required=required,
            description=description,
            minimum=min,
            maximum=max,
            default=default,
        )

    @staticmethod
    def boolean(
        *,
        required: bool = False,
        description: str | None = None,
        default: bool | None = None,
    ) -> SchemaDescriptor:
        return SchemaDescriptor(
            type=SchemaType.BOOLEAN,
            required=required,
            description=description,
            default=default,
        )

    @staticmethod
    def array(
        items: SchemaDescriptor | None = None,
        *,
        required: bool = False,
        description: str | None = None,
    ) -> SchemaDescriptor:
        return SchemaDescriptor(
            type=SchemaType.ARRAY,
            required=required,
            description=description,
            items=items,
        )

    @staticmethod
    def object(*, required: bool = False, description: str | None = None) -> SchemaDescriptor:
        return SchemaDescriptor(type=SchemaType.OBJECT, required=required, description=description)


def build_input_schema(input: InputSchema | None) -> dict[str, Any]:
    """Translate a descriptor mapping into a JSON Schema object.

    Property order follows the mapping; ``required`` is omitted when empty.
    """
    properties: dict[str, Any] = {}
    required: list[str] = []
    for name, descriptor in (input or {}).items():
        properties[name] = descriptor.to_json_schema()
        if descriptor.required:
            required.append(name)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def validate_arguments(input: InputSchema | None, arguments: Mapping[str, Any]) -> dict[str, Any]:
    """Validate *arguments* against *input* and return them with defaults filled.

    Violations are reported for the first offending field in declaration
    order.

    Raises:
        ArgumentValidationError: If a required field is missing or a value
            breaks its declared type or constraints.
    """
    declared = dict(input or {})
    validator = Draft202012Validator(build_input_schema(declared))
    errors = list(validator.iter_errors(dict(arguments)))
    if errors:
        order = {name: index for index, name in enumerate(declared)}
        first = min(errors, key=lambda e: order.get(_error_field(e, arguments) or "", len(order)))
        raise ArgumentValidationError(_error_field(first, arguments), first.message)

    validated = dict(arguments)
    for name, descriptor in declared.items():
        if name not in validated and descriptor.default is not None:
            validated[name] = descriptor.default
    return validated


def _error_field(error: Any, arguments: Mapping[str, Any]) -> str | None:
    """Name the argument a :class:`jsonschema.ValidationError` is about."""
    if error.path:
        return str(error.path[0])
    if error.validator == "required":
        missing = [name for name in error.validator_value if name not in arguments]
        return missing[0] if missing else None
    return None
