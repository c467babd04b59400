"""Schema model: named definitions and the nodes that describe their shape.

Definitions reference each other by name only. ``Ref`` nodes are never
dereferenced eagerly; they are resolved against a name -> definition lookup
when a document is aggregated.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Annotated, Literal, TypeVar, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from api_doc_builder.errors import CyclicSchemaError


class FrozenModel(BaseModel):
    """Immutable base for every documentation value."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


K = TypeVar("K")
V = TypeVar("V")


def read_only(mapping: Mapping[K, V]) -> Mapping[K, V]:
    """Wrap a mapping field so the frozen model holding it stays immutable."""
    return MappingProxyType(dict(mapping))


ReadOnlyMapping = Annotated[Mapping[K, V], AfterValidator(read_only)]


class Primitive(FrozenModel):
    """A scalar JSON type, optionally narrowed by a Swagger format."""

    node: Literal["primitive"] = "primitive"
    type: str  # string / integer / number / boolean / file
    format: str | None = None

    def references(self) -> Iterator[str]:
        return iter(())


class ArrayOf(FrozenModel):
    node: Literal["array"] = "array"
    items: "SchemaNode"

    def references(self) -> Iterator[str]:
        yield from self.items.references()


class Ref(FrozenModel):
    """A by-name pointer to a definition owned elsewhere."""

    node: Literal["ref"] = "ref"
    name: str

    def references(self) -> Iterator[str]:
        yield self.name


class Inline(FrozenModel):
    node: Literal["inline"] = "inline"
    definition: "SchemaDefinition"

    def references(self) -> Iterator[str]:
        yield from self.definition.references()


SchemaNode = Annotated[Union[Primitive, ArrayOf, Ref, Inline], Field(discriminator="node")]


class Property(FrozenModel):
    """A single field of an object definition."""

    name: str
    type: SchemaNode
    required: bool = True
    description: str | None = None


class SchemaDefinition(FrozenModel):
    """A named, reusable shape: an object, a string enum or an allOf composite."""

    name: str
    kind: Literal["object", "enum", "composite"]
    properties: tuple[Property, ...] = ()
    values: tuple[str, ...] = ()
    members: tuple[Ref, ...] = ()
    description: str | None = None

    def references(self) -> Iterator[str]:
        """Yield every name this definition refers to directly, in order."""
        for prop in self.properties:
            yield from prop.type.references()
        for member in self.members:
            yield member.name

    def related_definitions(
        self, definitions: Mapping[str, "SchemaDefinition"]
    ) -> tuple["SchemaDefinition", ...]:
        """Return every definition reachable through refs, excluding this one.

        The result is deduplicated and ordered depth-first by first sighting.
        Names missing from ``definitions`` are skipped. Raises
        ``CyclicSchemaError`` when the reference graph loops back on itself.
        """
        seen: dict[str, SchemaDefinition] = {}
        self._collect_related(definitions, (self.name,), seen)
        return tuple(seen.values())

    def _collect_related(
        self,
        definitions: Mapping[str, "SchemaDefinition"],
        path: tuple[str, ...],
        seen: dict[str, "SchemaDefinition"],
    ) -> None:
        for name in self.references():
            if name in path:
                raise CyclicSchemaError(list(path[path.index(name):]))
            if name in seen:
                continue
            related = definitions.get(name)
            if related is None:
                continue
            seen[name] = related
            related._collect_related(definitions, path + (name,), seen)


ArrayOf.model_rebuild()
Inline.model_rebuild()
Property.model_rebuild()
SchemaDefinition.model_rebuild()


def primitive(type: str, format: str | None = None) -> Primitive:
    return Primitive(type=type, format=format)


def array_of(items: SchemaNode) -> ArrayOf:
    return ArrayOf(items=items)


def ref(name: str) -> Ref:
    return Ref(name=name)


def inline(definition: SchemaDefinition) -> Inline:
    return Inline(definition=definition)
