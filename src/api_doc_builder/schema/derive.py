"""Schema derivation from explicit type descriptors.

A descriptor lists a type's fields (name, type, optionality) by hand or from a
code-generation step. Records become object definitions, sum types become
allOf composites of their variants, and string literal sets become enums.
Derivation never fails; problems surface when the groups are aggregated.
"""

import re
from collections.abc import Iterator, Mapping
from typing import Union

from loguru import logger

from api_doc_builder.schema.model import (
    ArrayOf,
    FrozenModel,
    Primitive,
    Property,
    Ref,
    SchemaDefinition,
    SchemaNode,
)

# alias -> (type, format)
PRIMITIVES: dict[str, tuple[str, str | None]] = {
    "string": ("string", None),
    "int": ("integer", "int32"),
    "int32": ("integer", "int32"),
    "integer": ("integer", None),
    "long": ("integer", "int64"),
    "int64": ("integer", "int64"),
    "float": ("number", "float"),
    "double": ("number", "double"),
    "number": ("number", None),
    "bool": ("boolean", None),
    "boolean": ("boolean", None),
    "date": ("string", "date"),
    "datetime": ("string", "date-time"),
    "date-time": ("string", "date-time"),
    "uuid": ("string", "uuid"),
    "byte": ("string", "byte"),
    "binary": ("string", "binary"),
    "password": ("string", "password"),
    "file": ("file", None),
}

_LIST_TYPE = re.compile(r"^list\[(.+)\]$")


def parse_type(expr: str) -> SchemaNode:
    """Turn a type expression like ``int64``, ``list[Pet]`` or ``Pet[]`` into a node.

    Anything that is not a known primitive alias is a reference by name.
    """
    expr = expr.strip()
    match = _LIST_TYPE.match(expr)
    if match:
        return ArrayOf(items=parse_type(match.group(1)))
    if expr.endswith("[]"):
        return ArrayOf(items=parse_type(expr[:-2]))
    if expr in PRIMITIVES:
        type_, format_ = PRIMITIVES[expr]
        return Primitive(type=type_, format=format_)
    return Ref(name=expr)


class FieldDescriptor(FrozenModel):
    """One field of a record: a schema node or a type expression string."""

    name: str
    type: Union[SchemaNode, str]
    required: bool = True
    description: str | None = None

    def node(self) -> SchemaNode:
        if isinstance(self.type, str):
            return parse_type(self.type)
        return self.type


class RecordDescriptor(FrozenModel):
    name: str
    fields: tuple[FieldDescriptor, ...] = ()
    description: str | None = None


class SumDescriptor(FrozenModel):
    """A closed set of record variants."""

    name: str
    variants: tuple[RecordDescriptor, ...]
    description: str | None = None


class EnumDescriptor(FrozenModel):
    name: str
    values: tuple[str, ...]
    description: str | None = None


TypeDescriptor = Union[RecordDescriptor, SumDescriptor, EnumDescriptor]


def derive_schema(descriptor: TypeDescriptor) -> SchemaDefinition:
    """Derive the named definition for a descriptor.

    Sum types are encoded as an allOf composite whose members reference each
    variant; the variants themselves are derived separately (see
    ``derive_variants``). Swagger 2.0 has no discriminated unions, so the
    exhaustiveness of the sum is not carried over.
    """
    if isinstance(descriptor, RecordDescriptor):
        return SchemaDefinition(
            name=descriptor.name,
            kind="object",
            properties=tuple(
                Property(
                    name=field.name,
                    type=field.node(),
                    required=field.required,
                    description=field.description,
                )
                for field in descriptor.fields
            ),
            description=descriptor.description,
        )
    if isinstance(descriptor, SumDescriptor):
        return SchemaDefinition(
            name=descriptor.name,
            kind="composite",
            members=tuple(Ref(name=variant.name) for variant in descriptor.variants),
            description=descriptor.description,
        )
    return derive_enum(descriptor.name, descriptor.values, descriptor.description)


def derive_variants(descriptor: TypeDescriptor) -> tuple[SchemaDefinition, ...]:
    """Derive the definitions a composite's members point to."""
    if isinstance(descriptor, SumDescriptor):
        return tuple(derive_schema(variant) for variant in descriptor.variants)
    return ()


def derive_enum(name: str, values: tuple[str, ...] | list[str], description: str | None = None) -> SchemaDefinition:
    return SchemaDefinition(name=name, kind="enum", values=tuple(values), description=description)


class SchemaRegistry(Mapping[str, SchemaDefinition]):
    """Explicit name -> definition registry passed around by the caller.

    Registration order is kept, so ``definitions()`` can feed a path group
    directly. Registering a name again replaces the earlier definition.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, SchemaDefinition] = {}

    def register(self, descriptor: TypeDescriptor) -> SchemaDefinition:
        """Derive and store a descriptor's definition, plus sum-type variants."""
        definition = derive_schema(descriptor)
        self.add(definition)
        for variant in derive_variants(descriptor):
            self.add(variant)
        return definition

    def add(self, definition: SchemaDefinition) -> SchemaDefinition:
        existing = self._definitions.get(definition.name)
        if existing is not None and existing != definition:
            logger.warning("Replacing registered schema {}", definition.name)
        self._definitions[definition.name] = definition
        return definition

    def ref(self, name: str) -> Ref:
        return Ref(name=name)

    def definitions(self) -> tuple[SchemaDefinition, ...]:
        return tuple(self._definitions.values())

    def __getitem__(self, name: str) -> SchemaDefinition:
        return self._definitions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)
