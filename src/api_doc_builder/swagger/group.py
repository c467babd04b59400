"""Path groups: the unit in which API documentation is authored."""

from api_doc_builder.schema.model import FrozenModel, SchemaDefinition
from api_doc_builder.swagger.dsl import Path


class PathGroup(FrozenModel):
    """A named bundle of paths and the schema definitions it contributes.

    Nothing is checked here. A group may reference definitions that live in
    another group; references are resolved when groups are aggregated.
    """

    name: str
    definitions: tuple[SchemaDefinition, ...] = ()
    paths: tuple[Path, ...] = ()
