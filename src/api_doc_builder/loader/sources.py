"""Loading path groups from files or Python modules."""

import importlib
from pathlib import Path

from loguru import logger

from api_doc_builder.errors import GroupLoadError
from api_doc_builder.loader.detect import detect_source
from api_doc_builder.loader.group_file import parse_group_file
from api_doc_builder.swagger.group import PathGroup


def load_group(source: str) -> PathGroup:
    """Load one path group from a group file or a ``module:attribute`` reference."""
    kind = detect_source(source)
    logger.debug("Loading path group from {} ({})", source, kind)

    if kind == "module":
        return _import_group(source)

    file_path = Path(source)
    if not file_path.is_file():
        raise GroupLoadError(f"Path group file not found: {source}")
    return parse_group_file(file_path)


def load_groups(sources: list[str] | tuple[str, ...]) -> list[PathGroup]:
    return [load_group(source) for source in sources]


def _import_group(source: str) -> PathGroup:
    module_name, _, attribute = source.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise GroupLoadError(f"Cannot import {module_name}: {e}") from e

    group = getattr(module, attribute, None)
    if callable(group) and not isinstance(group, PathGroup):
        group = group()
    if not isinstance(group, PathGroup):
        raise GroupLoadError(f"{source} is not a PathGroup")
    return group
