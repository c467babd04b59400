"""Path group file parser.

Reads a YAML or JSON file describing one path group. Object and sum-type
definitions go through the derivation interface, so a file reads like a set
of type descriptors plus Swagger-style paths:

    name: pets
    definitions:
      - name: Pet
        properties:
          - {name: id, type: int64}
          - {name: tags, type: "list[string]", required: false}
      - {name: Color, kind: enum, values: [red, green]}
    paths:
      /pets/{id}:
        get:
          parameters:
            - {name: id, in: path, type: int64}
          responses:
            - {status: 200, description: A pet, schema: Pet}
            - {status: default, description: Error, schema: Error}

Responses may be a list so that a status code repeated by mistake survives
until aggregation reports it.
"""

from pathlib import Path as FilePath

import yaml
from loguru import logger

from api_doc_builder.errors import GroupLoadError
from api_doc_builder.schema.derive import (
    EnumDescriptor,
    FieldDescriptor,
    RecordDescriptor,
    SumDescriptor,
    TypeDescriptor,
    derive_schema,
    derive_variants,
    parse_type,
)
from api_doc_builder.schema.model import Inline, Primitive, Ref, SchemaDefinition, SchemaNode
from api_doc_builder.swagger.dsl import HTTP_VERBS, Operation, Parameter, Path, Response
from api_doc_builder.swagger.group import PathGroup


def parse_group_file(file_path: FilePath) -> PathGroup:
    """Parse a path group file; the group is named after the file unless it says otherwise."""
    try:
        doc = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise GroupLoadError(f"{file_path}: not valid UTF-8 ({e.reason})") from e
    except yaml.YAMLError as e:
        raise GroupLoadError(f"{file_path}: {e}") from e
    if not isinstance(doc, dict):
        raise GroupLoadError(f"{file_path}: expected a mapping at the top level")

    try:
        return parse_group(doc, default_name=file_path.stem)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise GroupLoadError(f"{file_path}: invalid path group ({e!r})") from e


def parse_group(doc: dict, default_name: str = "default") -> PathGroup:
    definitions: list[SchemaDefinition] = []
    for item in doc.get("definitions") or []:
        definitions.extend(_parse_definition(item))

    paths = []
    for template, methods in (doc.get("paths") or {}).items():
        path = Path(template=template)
        for method, operation in methods.items():
            verb = method.lower()
            if verb not in HTTP_VERBS:
                logger.warning("Skipping unsupported method {} on {}", method, template)
                continue
            path = path.bind(verb, _parse_operation(operation or {}))
        paths.append(path)

    return PathGroup(name=doc.get("name", default_name), definitions=tuple(definitions), paths=tuple(paths))


def _parse_definition(item: dict) -> list[SchemaDefinition]:
    if item.get("kind") == "composite":
        # members are defined elsewhere, possibly in another group
        return [
            SchemaDefinition(
                name=item["name"],
                kind="composite",
                members=tuple(Ref(name=member) for member in item["members"]),
                description=item.get("description"),
            )
        ]
    descriptor = _parse_descriptor(item)
    return [derive_schema(descriptor), *derive_variants(descriptor)]


def _parse_descriptor(item: dict) -> TypeDescriptor:
    kind = item.get("kind", "object")
    if kind in ("object", "record"):
        return RecordDescriptor(
            name=item["name"],
            fields=tuple(_parse_field(field) for field in item.get("properties") or []),
            description=item.get("description"),
        )
    if kind == "enum":
        return EnumDescriptor(name=item["name"], values=tuple(item["values"]), description=item.get("description"))
    if kind == "sum":
        return SumDescriptor(
            name=item["name"],
            variants=tuple(_parse_descriptor({**variant, "kind": "object"}) for variant in item["variants"]),
            description=item.get("description"),
        )
    raise ValueError(f"unknown definition kind {kind!r}")


def _parse_field(field: dict) -> FieldDescriptor:
    return FieldDescriptor(
        name=field["name"],
        type=_parse_schema(field.get("type", "string"), field["name"]),
        required=field.get("required", True),
        description=field.get("description"),
    )


def _parse_schema(value: str | dict, name: str) -> SchemaNode:
    """A type expression, or a mapping describing an inline definition."""
    if isinstance(value, dict):
        return Inline(definition=derive_schema(_parse_descriptor({"name": name, **value})))
    return parse_type(str(value))


def _parse_operation(data: dict) -> Operation:
    responses = data.get("responses") or []
    if isinstance(responses, dict):
        responses = [{"status": status, **(resp or {})} for status, resp in responses.items()]

    return Operation(
        summary=data.get("summary"),
        description=data.get("description"),
        operation_id=data.get("operationId"),
        parameters=tuple(_parse_parameter(p) for p in data.get("parameters") or []),
        responses=tuple((str(r["status"]), _parse_response(r)) for r in responses),
        tags=frozenset(data.get("tags") or []),
    )


def _parse_parameter(p: dict) -> Parameter:
    location = p.get("in", "query")
    if location == "body":
        return Parameter(
            name=p.get("name", "body"),
            location=location,
            description=p.get("description"),
            required=p.get("required", True),
            schema=_parse_schema(p["schema"], p.get("name", "body")),
        )

    node = parse_type(p.get("type", "string"))
    if isinstance(node, Primitive):
        param_type, fmt = node.type, p.get("format", node.format)
    else:
        logger.warning("Parameter {} has non-primitive type {!r}; documenting it as a string", p["name"], p["type"])
        param_type, fmt = "string", p.get("format")
    return Parameter(
        name=p["name"],
        location=location,
        description=p.get("description"),
        param_type=param_type,
        format=fmt,
        required=p.get("required", False),
    )


def _parse_response(r: dict) -> Response:
    schema = r.get("schema")
    return Response(
        description=r.get("description", ""),
        schema=_parse_schema(schema, f"Response{r['status']}") if schema is not None else None,
    )
