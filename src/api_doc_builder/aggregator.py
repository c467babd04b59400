"""Aggregates independently authored path groups into one API document.

Groups cannot see each other's definitions while they are written, so this is
the only place where the combined documentation can be checked. Every check
runs on every pass and all errors are returned together; an invalid
aggregation produces no document at all.
"""

from collections import Counter
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass

from loguru import logger

from api_doc_builder.errors import (
    AggregationError,
    AggregationFailed,
    CyclicSchemaError,
    DuplicateDefinitionError,
    DuplicateOperationError,
    DuplicateStatusCodeError,
    MissingDefinitionError,
)
from api_doc_builder.schema.model import SchemaDefinition, SchemaNode
from api_doc_builder.swagger.dsl import ApiDocument, Info, Path
from api_doc_builder.swagger.group import PathGroup


@dataclass(frozen=True)
class AggregationResult:
    """Either a validated document or every error found while building it."""

    document: ApiDocument | None = None
    errors: tuple[AggregationError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> ApiDocument:
        """Return the document, or raise ``AggregationFailed`` with all errors."""
        if self.errors or self.document is None:
            raise AggregationFailed(self.errors)
        return self.document


def aggregate(
    info: Info,
    groups: Sequence[PathGroup],
    host: str | None = None,
    base_path: str | None = None,
    schemes: Sequence[str] = (),
) -> AggregationResult:
    """Merge path groups into one document and validate every reference."""
    paths = tuple(path for group in groups for path in group.paths)
    definitions, errors = collect_definitions(groups)
    errors.extend(check_operations(groups))
    errors.extend(check_status_codes(paths))
    errors.extend(check_references(paths, definitions))
    errors.extend(check_cycles(definitions))

    if errors:
        logger.debug("Aggregation of {} group(s) failed with {} error(s)", len(groups), len(errors))
        return AggregationResult(errors=tuple(errors))

    logger.debug(
        "Aggregated {} path(s) and {} definition(s) from {} group(s), {} referenced",
        len(paths),
        len(definitions),
        len(groups),
        len(referenced_names(paths, definitions)),
    )
    document = ApiDocument(
        info=info,
        definitions=definitions,
        paths=paths,
        host=host,
        base_path=base_path,
        schemes=tuple(schemes),
    )
    return AggregationResult(document=document)


def collect_definitions(
    groups: Sequence[PathGroup],
) -> tuple[dict[str, SchemaDefinition], list[AggregationError]]:
    """Merge definitions by name, keeping the first of each.

    Re-declaring an identical definition is tolerated. A name declared with
    differing content yields one error listing every group that declares it.
    """
    definitions: dict[str, SchemaDefinition] = {}
    sites: dict[str, list[str]] = {}
    conflicting: list[str] = []

    for group in groups:
        for definition in group.definitions:
            existing = definitions.get(definition.name)
            if existing is None:
                definitions[definition.name] = definition
                sites[definition.name] = [group.name]
                continue
            sites[definition.name].append(group.name)
            if existing == definition:
                logger.debug("Tolerating identical re-declaration of {} in {}", definition.name, group.name)
            elif definition.name not in conflicting:
                conflicting.append(definition.name)

    errors: list[AggregationError] = [
        DuplicateDefinitionError(name, list(dict.fromkeys(sites[name]))) for name in conflicting
    ]
    return definitions, errors


def check_operations(groups: Sequence[PathGroup]) -> list[DuplicateOperationError]:
    """Report template + verb pairs bound by more than one path."""
    sites: dict[tuple[str, str], list[str]] = {}
    for group in groups:
        for path in group.paths:
            for verb in path.operations:
                sites.setdefault((path.template, verb), []).append(group.name)
    return [
        DuplicateOperationError(template, verb, group_names)
        for (template, verb), group_names in sites.items()
        if len(group_names) > 1
    ]


def check_status_codes(paths: Sequence[Path]) -> list[DuplicateStatusCodeError]:
    errors = []
    for path in paths:
        for verb, operation in path.operations.items():
            counts = Counter(code for code, _ in operation.responses)
            for code, count in counts.items():
                if count > 1:
                    errors.append(DuplicateStatusCodeError(_operation_site(verb, path), code))
    return errors


def check_references(
    paths: Sequence[Path], definitions: Mapping[str, SchemaDefinition]
) -> list[MissingDefinitionError]:
    """Report one error per reference site naming an undefined schema."""
    errors = []
    reported: set[tuple[str, str]] = set()
    for site, node in reference_sites(paths, definitions):
        for name in node.references():
            if name in definitions or (site, name) in reported:
                continue
            reported.add((site, name))
            errors.append(MissingDefinitionError(name, site))
    return errors


def check_cycles(definitions: Mapping[str, SchemaDefinition]) -> list[CyclicSchemaError]:
    """Report every elementary reference cycle once.

    Each cycle is found from its earliest definition (in ``definitions``
    order) by a walk restricted to that definition and the ones after it, so
    rotations of one cycle are never reported twice. A name shared by two
    cycles does not hide the second one.
    """
    order = {name: index for index, name in enumerate(definitions)}
    errors = []
    for start in definitions:
        _walk_cycles(definitions, order, start, [start], errors)
    return errors


def _walk_cycles(
    definitions: Mapping[str, SchemaDefinition],
    order: dict[str, int],
    start: str,
    stack: list[str],
    errors: list[CyclicSchemaError],
) -> None:
    followed: set[str] = set()
    for name in definitions[stack[-1]].references():
        if name not in definitions or name in followed or order[name] < order[start]:
            continue
        followed.add(name)
        if name == start:
            errors.append(CyclicSchemaError(list(stack)))
        elif name not in stack:
            stack.append(name)
            _walk_cycles(definitions, order, start, stack, errors)
            stack.pop()


def reference_sites(
    paths: Sequence[Path], definitions: Mapping[str, SchemaDefinition]
) -> Iterator[tuple[str, SchemaNode]]:
    """Yield ``(site, node)`` for every schema node that may hold a reference.

    Covers body parameter schemas, response schemas and every property or
    composite member of the collected definitions.
    """
    for path in paths:
        for verb, operation in path.operations.items():
            site = _operation_site(verb, path)
            for param in operation.parameters:
                if param.schema_ is not None:
                    yield f"{site} parameter {param.name}", param.schema_
            for code, response in operation.responses:
                if response.schema_ is not None:
                    yield f"{site} response {code}", response.schema_

    for definition in definitions.values():
        for prop in definition.properties:
            yield f"definition {definition.name} property {prop.name}", prop.type
        for member in definition.members:
            yield f"definition {definition.name} member {member.name}", member


def referenced_names(paths: Sequence[Path], definitions: Mapping[str, SchemaDefinition]) -> set[str]:
    return {name for _, node in reference_sites(paths, definitions) for name in node.references()}


def _operation_site(verb: str, path: Path) -> str:
    return f"{verb.upper()} {path.template}"
