"""Swagger 2.0 DSL: operations, parameters, responses, paths and documents.

Every builder returns a new value. Construction never fails on semantic
problems such as a status code bound twice; those are reported when path
groups are aggregated.
"""

from types import MappingProxyType
from typing import Literal

from pydantic import Field, model_validator

from api_doc_builder.schema.model import FrozenModel, ReadOnlyMapping, SchemaDefinition, SchemaNode, read_only

HTTP_VERBS = ("get", "put", "post", "delete", "options", "head", "patch")

Verb = Literal["get", "put", "post", "delete", "options", "head", "patch"]

Location = Literal["path", "query", "header", "body"]


class Parameter(FrozenModel):
    """A single operation parameter. Path parameters are always required."""

    name: str
    location: Location
    description: str | None = None
    param_type: str = "string"  # non-body parameters only
    format: str | None = None
    required: bool = False
    schema_: SchemaNode | None = Field(default=None, alias="schema")  # body parameters only

    @model_validator(mode="before")
    @classmethod
    def _path_params_are_required(cls, data):
        if isinstance(data, dict) and data.get("location") == "path":
            data = {**data, "required": True}
        return data


class Response(FrozenModel):
    description: str
    schema_: SchemaNode | None = Field(default=None, alias="schema")


class Operation(FrozenModel):
    """One HTTP operation.

    ``responses`` is an ordered list of ``(status, Response)`` entries rather
    than a dict so that a status code bound twice survives until aggregation.
    """

    summary: str | None = None
    description: str | None = None
    operation_id: str | None = None
    parameters: tuple[Parameter, ...] = ()
    responses: tuple[tuple[str, Response], ...] = ()
    tags: frozenset[str] = frozenset()

    def with_params(self, *params: Parameter) -> "Operation":
        """Replace the parameters; nothing is merged."""
        return self.model_copy(update={"parameters": tuple(params)})

    def responding(self, default: Response, *entries: tuple[int | str, Response]) -> "Operation":
        """Replace the responses with ``entries`` plus a ``default`` entry."""
        responses = tuple((str(code), response) for code, response in entries)
        return self.model_copy(update={"responses": responses + (("default", default),)})

    def tagged(self, *tags: str) -> "Operation":
        return self.model_copy(update={"tags": self.tags | frozenset(tags)})

    def response_map(self) -> dict[str, Response]:
        """Status code -> response; a repeated code keeps its last entry."""
        return dict(self.responses)


class Path(FrozenModel):
    """A URL template with the operations bound to its verbs."""

    template: str
    operations: ReadOnlyMapping[str, Operation] = Field(default_factory=lambda: MappingProxyType({}))

    def bind(self, verb: Verb, operation: Operation) -> "Path":
        """Bind ``operation`` to ``verb``, replacing any earlier binding."""
        return self.model_copy(update={"operations": read_only({**self.operations, verb: operation})})

    def get(self, operation: Operation) -> "Path":
        return self.bind("get", operation)

    def put(self, operation: Operation) -> "Path":
        return self.bind("put", operation)

    def post(self, operation: Operation) -> "Path":
        return self.bind("post", operation)

    def delete(self, operation: Operation) -> "Path":
        return self.bind("delete", operation)

    def options(self, operation: Operation) -> "Path":
        return self.bind("options", operation)

    def head(self, operation: Operation) -> "Path":
        return self.bind("head", operation)

    def patch(self, operation: Operation) -> "Path":
        return self.bind("patch", operation)


class Info(FrozenModel):
    title: str
    version: str
    description: str | None = None
    terms_of_service: str | None = None


class ApiDocument(FrozenModel):
    """A fully aggregated, validated API description."""

    info: Info
    definitions: ReadOnlyMapping[str, SchemaDefinition] = Field(default_factory=lambda: MappingProxyType({}))
    paths: tuple[Path, ...] = ()
    host: str | None = None
    base_path: str | None = None
    schemes: tuple[str, ...] = ()


def path_param(name: str, param_type: str = "string", format: str | None = None, description: str | None = None) -> Parameter:
    return Parameter(name=name, location="path", param_type=param_type, format=format, description=description)


def query_param(
    name: str,
    param_type: str = "string",
    format: str | None = None,
    description: str | None = None,
    required: bool = False,
) -> Parameter:
    return Parameter(
        name=name, location="query", param_type=param_type, format=format, description=description, required=required
    )


def header_param(name: str, description: str | None = None, required: bool = False) -> Parameter:
    return Parameter(name=name, location="header", description=description, required=required)


def body_param(schema: SchemaNode, name: str = "body", description: str | None = None, required: bool = True) -> Parameter:
    return Parameter(name=name, location="body", schema=schema, description=description, required=required)
