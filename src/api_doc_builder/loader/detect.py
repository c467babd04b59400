"""Auto-detect where a path group comes from."""

from pathlib import Path

GROUP_FILE_SUFFIXES = (".yaml", ".yml", ".json")


def detect_source(source: str) -> str:
    """Detect the kind of a path group source.

    Returns: 'file' for a YAML/JSON group file, 'module' for a
    ``package.module:attribute`` reference to a ``PathGroup`` in Python code.
    """
    path = Path(source)
    if path.suffix.lower() in GROUP_FILE_SUFFIXES or path.exists():
        return "file"

    module_name, sep, attribute = source.partition(":")
    if sep and module_name and attribute:
        return "module"

    return "file"
