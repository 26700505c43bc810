"""Exception hierarchy for Collections Explorer.

Only failures that cross a component boundary are modeled as exceptions.
Failed type resolution is not one of them: it is an expected outcome and is
returned as ``Unresolved`` by the resolver.
"""


class CollectionsExplorerError(Exception):
    """Base class for all errors raised by Collections Explorer."""


class InputIOError(CollectionsExplorerError):
    """A root directory, manifest or source file could not be read.

    Aborts processing of the current input root only.
    """

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class ExtractionFailure(CollectionsExplorerError):
    """Building a record from an already matched node failed.

    Raised inside a visitor and caught by the traversal, which drops the
    record and moves on to the next node.
    """

    def __init__(self, node_type: str, line: int, col: int, cause: Exception):
        self.node_type = node_type
        self.line = line
        self.col = col
        self.cause = cause
        super().__init__(f"Failed to extract {node_type} at {line}:{col}: {cause}")


class FilterFrozenError(CollectionsExplorerError):
    """The type filter was modified after processing started."""
