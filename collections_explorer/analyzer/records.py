"""Record shapes produced by the extraction visitors, one per analysis kind.

Field order is the column order of the exported CSV files.
"""
from dataclasses import dataclass, field, fields
from typing import List, Tuple

from collections_explorer.analyzer.ast_utils import NO_INFO


@dataclass
class ImportRecord:
    """An import declaration (`import java.util.List;`)."""
    class_name: str
    package_name: str
    imported_simple_name: str  # 'List', or '*' for on-demand imports
    imported_qualifier: str  # 'java.util'
    line: int = NO_INFO
    col: int = NO_INFO


@dataclass
class VariableDeclRecord:
    """One declarator of a field or local variable declaration."""
    class_name: str
    declared_type: str  # Source text of the type, e.g. 'Map<String, Integer>'
    variable_name: str
    line: int = NO_INFO
    col: int = NO_INFO


@dataclass
class ObjectCreationRecord:
    """An instantiation expression (`new ArrayList<String>(10)`)."""
    class_name: str
    object_type: str  # Simple name: 'ArrayList'
    full_object_type: str  # Qualified through the file's imports when possible
    argument_types: List[str] = field(default_factory=list)
    arguments: List[str] = field(default_factory=list)
    line: int = NO_INFO
    col: int = NO_INFO


@dataclass
class StreamChainRecord:
    """A fluent call chain containing a stream-producing call."""
    class_name: str
    package_name: str
    full_text_of_expression: str
    stream_operations: List[str] = field(default_factory=list)  # From the stream call outwards
    source_type: str = ''
    line: int = NO_INFO
    col: int = NO_INFO


def column_names(record_type) -> Tuple[str, ...]:
    """CSV header for a record class."""
    return tuple(f.name for f in fields(record_type))


def list_columns(record_type) -> Tuple[str, ...]:
    """Names of the list-valued columns of a record class."""
    return tuple(f.name for f in fields(record_type) if f.default_factory is list)
