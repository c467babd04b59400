"""Errors reported while aggregating path groups into one API document.

Aggregation never stops at the first problem: every error found in a pass is
collected as a value and returned together, so all of them subclass a common
base and render a readable message.
"""


class AggregationError(Exception):
    """Base class for problems found while aggregating path groups."""


class DuplicateDefinitionError(AggregationError):
    """The same schema name is defined with differing content."""

    def __init__(self, name: str, sites: list[str]) -> None:
        self.name = name
        self.sites = sites

    def __str__(self) -> str:
        return f"Schema `{self.name}` is defined differently in: {', '.join(self.sites)}"


class MissingDefinitionError(AggregationError):
    """A reference points at a schema name that no group defines."""

    def __init__(self, name: str, site: str) -> None:
        self.name = name
        self.site = site

    def __str__(self) -> str:
        return f"Missing definition `{self.name}` referenced at {self.site}"


class CyclicSchemaError(AggregationError):
    """Schema definitions reference each other in a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle

    def __str__(self) -> str:
        if len(self.cycle) == 1:
            return f"Schema `{self.cycle[0]}` references itself"
        cycle_str = " -> ".join(self.cycle + [self.cycle[0]])
        return f"Schemas reference each other in a cycle: {cycle_str}"


class DuplicateStatusCodeError(AggregationError):
    """An operation declares the same response status code more than once."""

    def __init__(self, operation: str, code: str) -> None:
        self.operation = operation
        self.code = code

    def __str__(self) -> str:
        return f"{self.operation} declares response {self.code} more than once"


class DuplicateOperationError(AggregationError):
    """The same template and verb are bound by more than one path."""

    def __init__(self, template: str, verb: str, sites: list[str]) -> None:
        self.template = template
        self.verb = verb
        self.sites = sites

    def __str__(self) -> str:
        return f"{self.verb.upper()} {self.template} is defined more than once in: {', '.join(self.sites)}"


class AggregationFailed(Exception):
    """Raised by ``AggregationResult.unwrap`` with every error of the pass."""

    def __init__(self, errors: tuple[AggregationError, ...]) -> None:
        self.errors = errors
        super().__init__(f"{len(errors)} error(s) while aggregating path groups")


class GroupLoadError(Exception):
    """A path group source could not be loaded."""
