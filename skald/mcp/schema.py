"""
Skald Argument Schemas
----------------------
Tool input schemas as a small tagged union of dataclasses, built from plain
``Argument`` declarations and rendered to JSON Schema for ``tools/list``.

Validation walks the tree and collects every violation instead of stopping at
the first one, so a client sees all of its mistakes in a single reply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union


@dataclass(frozen=True)
class StringSchema:
    description: Optional[str] = None
    type_name = "string"


@dataclass(frozen=True)
class IntegerSchema:
    description: Optional[str] = None
    type_name = "integer"


@dataclass(frozen=True)
class NumberSchema:
    description: Optional[str] = None
    type_name = "number"


@dataclass(frozen=True)
class BooleanSchema:
    description: Optional[str] = None
    type_name = "boolean"


@dataclass(frozen=True)
class ArraySchema:
    items: "Schema"
    description: Optional[str] = None
    type_name = "array"


@dataclass(frozen=True)
class ObjectSchema:
    properties: Dict[str, "Schema"] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    description: Optional[str] = None
    type_name = "object"


Schema = Union[StringSchema, IntegerSchema, NumberSchema, BooleanSchema, ArraySchema, ObjectSchema]

_PRIMITIVES = {
    str: StringSchema,
    int: IntegerSchema,
    float: NumberSchema,
    bool: BooleanSchema,
}


@dataclass
class Argument:
    """
    Declaration of one tool argument.

    ``type`` is a Python type (str, int, float, bool, list). Nested objects are
    declared with ``properties`` and no type; arrays of objects use
    ``type=list`` together with ``properties``; arrays of primitives use
    ``type=list, items=<type>``.
    """

    name: str
    type: Optional[type] = None
    required: bool = False
    description: str = ""
    items: Optional[type] = None
    properties: Optional[Sequence["Argument"]] = None


def _primitive_schema(py_type: Any, description: Optional[str] = None) -> Schema:
    schema_cls = _PRIMITIVES.get(py_type)
    if schema_cls is None:
        raise ValueError(f"Unsupported type: {getattr(py_type, '__name__', py_type)!r}")
    return schema_cls(description=description)


def build_schema(arguments: Sequence[Argument], description: Optional[str] = None) -> ObjectSchema:
    """Build the object schema for a list of argument declarations."""
    properties: Dict[str, Schema] = {}
    required: List[str] = []

    for argument in arguments:
        if argument.type is list:
            if argument.properties is not None:
                items = build_schema(argument.properties)
            elif argument.items is not None:
                items = _primitive_schema(argument.items)
            else:
                raise ValueError(
                    f"Argument '{argument.name}': must provide items or properties for array type"
                )
            properties[argument.name] = ArraySchema(items=items, description=argument.description)
        elif argument.properties is not None:
            if argument.type is not None:
                raise ValueError(
                    f"Argument '{argument.name}': type not allowed with nested properties"
                )
            properties[argument.name] = build_schema(argument.properties, description=argument.description)
        else:
            if argument.type is None:
                raise ValueError(f"Argument '{argument.name}': type required for simple arguments")
            properties[argument.name] = _primitive_schema(argument.type, argument.description)

        if argument.required:
            required.append(argument.name)

    return ObjectSchema(properties=properties, required=required, description=description)


def to_json_schema(schema: Schema) -> Dict[str, Any]:
    """Render a schema tree as a JSON Schema dict."""
    rendered: Dict[str, Any] = {"type": schema.type_name}
    if isinstance(schema, ObjectSchema):
        rendered["properties"] = {name: to_json_schema(sub) for name, sub in schema.properties.items()}
        rendered["required"] = list(schema.required)
    elif isinstance(schema, ArraySchema):
        rendered["items"] = to_json_schema(schema.items)
    if schema.description is not None:
        rendered["description"] = schema.description
    return rendered


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _matches_primitive(schema: Schema, value: Any) -> bool:
    # bool is a subclass of int; it never satisfies a numeric schema
    if isinstance(schema, StringSchema):
        return isinstance(value, str)
    if isinstance(schema, BooleanSchema):
        return isinstance(value, bool)
    if isinstance(schema, IntegerSchema):
        return isinstance(value, int) and not isinstance(value, bool)
    if isinstance(schema, NumberSchema):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return False


def validate(schema: Schema, value: Any, path: str = "") -> List[str]:
    """Return every violation of ``schema`` by ``value``, tagged with its path."""
    errors: List[str] = []

    if isinstance(schema, ObjectSchema):
        if not isinstance(value, dict):
            if not path:
                errors.append("Arguments must be an object")
            else:
                errors.append(f"Expected object for {path}, got {json_type_name(value)}")
            return errors
        for key in schema.required:
            if key not in value:
                if not path:
                    errors.append(f"Missing required param :{key}")
                else:
                    errors.append(f"Missing required param {path}.{key}")
        for key, subschema in schema.properties.items():
            if key in value:
                sub_path = key if not path else f"{path}.{key}"
                errors.extend(validate(subschema, value[key], sub_path))
        return errors

    if isinstance(schema, ArraySchema):
        if not isinstance(value, list):
            errors.append(f"Expected array for {path}, got {json_type_name(value)}")
            return errors
        for index, item in enumerate(value):
            errors.extend(validate(schema.items, item, f"{path}[{index}]"))
        return errors

    if not _matches_primitive(schema, value):
        errors.append(f"Expected {schema.type_name} for {path}, got {json_type_name(value)}")
    return errors
