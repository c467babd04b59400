"""Swagger 2.0 export of an aggregated API document.

``to_swagger`` builds the plain JSON-compatible structure; ``dump_json`` and
``dump_yaml`` render it as text.
"""

import json

import yaml

from api_doc_builder.schema.model import ArrayOf, Inline, Property, Ref, SchemaDefinition, SchemaNode
from api_doc_builder.swagger.dsl import ApiDocument, Info, Operation, Parameter, Response

SWAGGER_VERSION = "2.0"
DEFINITIONS_PREFIX = "#/definitions/"


def to_swagger(document: ApiDocument) -> dict:
    """Convert a document to a Swagger 2.0 dict.

    Paths sharing a template are merged under one key, one entry per verb.
    """
    result: dict = {"swagger": SWAGGER_VERSION, "info": info_to_swagger(document.info)}
    if document.host:
        result["host"] = document.host
    if document.base_path:
        result["basePath"] = document.base_path
    if document.schemes:
        result["schemes"] = list(document.schemes)

    paths: dict[str, dict] = {}
    for path in document.paths:
        operations = paths.setdefault(path.template, {})
        for verb, operation in path.operations.items():
            operations[verb] = operation_to_swagger(operation)
    result["paths"] = paths
    result["definitions"] = {
        name: definition_to_swagger(definition) for name, definition in document.definitions.items()
    }
    return result


def dump_json(document: ApiDocument, indent: int = 2) -> str:
    return json.dumps(to_swagger(document), indent=indent, ensure_ascii=False)


def dump_yaml(document: ApiDocument) -> str:
    return yaml.safe_dump(to_swagger(document), sort_keys=False, allow_unicode=True)


def info_to_swagger(info: Info) -> dict:
    result = {"title": info.title, "version": info.version}
    if info.description:
        result["description"] = info.description
    if info.terms_of_service:
        result["termsOfService"] = info.terms_of_service
    return result


def node_to_swagger(node: SchemaNode) -> dict:
    if isinstance(node, Ref):
        return {"$ref": DEFINITIONS_PREFIX + node.name}
    if isinstance(node, ArrayOf):
        return {"type": "array", "items": node_to_swagger(node.items)}
    if isinstance(node, Inline):
        return definition_to_swagger(node.definition)
    result = {"type": node.type}
    if node.format:
        result["format"] = node.format
    return result


def definition_to_swagger(definition: SchemaDefinition) -> dict:
    if definition.kind == "enum":
        result: dict = {"type": "string", "enum": list(definition.values)}
    elif definition.kind == "composite":
        # Swagger 2.0 has no oneOf, so sum types become allOf over their variants
        result = {"allOf": [node_to_swagger(member) for member in definition.members]}
    else:
        result = {
            "type": "object",
            "properties": {prop.name: _property_to_swagger(prop) for prop in definition.properties},
        }
        required = [prop.name for prop in definition.properties if prop.required]
        if required:
            result["required"] = required
    if definition.description:
        result["description"] = definition.description
    return result


def parameter_to_swagger(param: Parameter) -> dict:
    # always true for path parameters, including ones built with model_copy
    required = param.required or param.location == "path"
    result: dict = {"name": param.name, "in": param.location, "required": required}
    if param.description:
        result["description"] = param.description
    if param.location == "body":
        if param.schema_ is not None:
            result["schema"] = node_to_swagger(param.schema_)
        return result
    result["type"] = param.param_type
    if param.format:
        result["format"] = param.format
    return result


def response_to_swagger(response: Response) -> dict:
    result: dict = {"description": response.description}
    if response.schema_ is not None:
        result["schema"] = node_to_swagger(response.schema_)
    return result


def operation_to_swagger(operation: Operation) -> dict:
    result: dict = {}
    if operation.tags:
        result["tags"] = sorted(operation.tags)
    if operation.summary:
        result["summary"] = operation.summary
    if operation.description:
        result["description"] = operation.description
    if operation.operation_id:
        result["operationId"] = operation.operation_id
    if operation.parameters:
        result["parameters"] = [parameter_to_swagger(param) for param in operation.parameters]
    result["responses"] = {code: response_to_swagger(response) for code, response in operation.responses}
    return result


def _property_to_swagger(prop: Property) -> dict:
    result = node_to_swagger(prop.type)
    # siblings of $ref are ignored by Swagger 2.0 tooling
    if prop.description and not isinstance(prop.type, Ref):
        result["description"] = prop.description
    return result
