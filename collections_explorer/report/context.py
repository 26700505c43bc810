"""Per-run aggregation of extraction results, one report per analysis kind."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional

import structlog

from collections_explorer.analyzer.ast_utils import iter_preorder
from collections_explorer.analyzer.filter import TypeFilter
from collections_explorer.analyzer.parser import JavaParser, SourceFile
from collections_explorer.analyzer.resolver import TypeResolver
from collections_explorer.analyzer.visitors import (
    ImportVisitor,
    ObjectCreationVisitor,
    StreamChainVisitor,
    VariableDeclarationVisitor,
)
from collections_explorer.errors import ExtractionFailure


logger = structlog.get_logger()


class AnalysisKind(Enum):
    """The four extraction strategies, each with its visitor and report file."""

    IMPORT = ('IMPORT-DECLARATIONS', ImportVisitor, 'import_declaration.csv')
    VARIABLE_DECLARATION = ('VARIABLE-DECLARATIONS', VariableDeclarationVisitor, 'variable_declaration.csv')
    OBJECT_CREATION = ('OBJECT-CREATIONS', ObjectCreationVisitor, 'object_creation.csv')
    STREAM_USAGE = ('STREAM-API-USAGE', StreamChainVisitor, 'stream_api_usage.csv')

    def __init__(self, label: str, visitor_class: type, output_file: str):
        self.label = label
        self.visitor_class = visitor_class
        self.output_file = output_file

    @property
    def record_type(self) -> type:
        return self.visitor_class.record_type


class SealedResultError(RuntimeError):
    """A record was added to a PerFileResult after its traversal finished."""


@dataclass
class PerFileResult:
    """Records one file contributed to one analysis kind, in traversal order."""
    path: str
    entries: List = field(default_factory=list)
    sealed: bool = False

    def add(self, record) -> None:
        if self.sealed:
            raise SealedResultError(f"Result for {self.path} is already complete")
        self.entries.append(record)

    def seal(self) -> 'PerFileResult':
        self.sealed = True
        return self

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class Report:
    """Append-only list of per-file results for one analysis kind.

    Results are never merged or deduplicated: a file reached through two
    overlapping roots contributes twice.
    """
    kind: AnalysisKind
    results: List[PerFileResult] = field(default_factory=list)

    def add(self, result: PerFileResult) -> None:
        self.results.append(result)

    def records(self) -> Iterator:
        """All records, file by file, in processing order."""
        for result in self.results:
            yield from result.entries

    @property
    def record_count(self) -> int:
        return sum(len(result) for result in self.results)


ResolverFactory = Callable[[SourceFile], TypeResolver]


class ReportContext:
    """Owns the kind -> report mapping and drives per-file extraction."""

    def __init__(self, reports: Dict[AnalysisKind, Report], type_filter: TypeFilter):
        self.reports = reports
        self.filter = type_filter
        self.files_processed = 0
        self.files_skipped = 0
        self.extraction_failures = 0

    @classmethod
    def for_kinds(cls, kinds: Iterable[AnalysisKind], type_filter: Optional[TypeFilter] = None) -> 'ReportContext':
        """Build a context for the requested kinds, in AnalysisKind order.

        An empty selection gives a context with no reports.
        """
        requested = set(kinds)
        reports = {kind: Report(kind) for kind in AnalysisKind if kind in requested}
        type_filter = type_filter if type_filter is not None else TypeFilter()
        return cls(reports, type_filter.freeze())

    @property
    def kinds(self) -> List[AnalysisKind]:
        return list(self.reports)

    def inspect(self, source_file: SourceFile, resolver: TypeResolver) -> None:
        """Run every configured kind over one file and append the results.

        Visitors are created fresh for each file so per-file state (such as
        the object-creation import map) never reaches the next file. A node
        whose extraction fails is logged and skipped.
        """
        if not self.reports:
            return

        visitors = []
        for kind, report in self.reports.items():
            visitor = kind.visitor_class(self.filter, source_file, resolver)
            visitors.append((visitor, PerFileResult(source_file.path), report))

        for node in iter_preorder(source_file.root):
            for visitor, result, _ in visitors:
                try:
                    visitor.visit(node, result)
                except ExtractionFailure as e:
                    self.extraction_failures += 1
                    logger.warning(
                        "extraction_failed",
                        path=source_file.path,
                        node=e.node_type,
                        line=e.line,
                        col=e.col,
                        error=str(e.cause),
                    )

        for _, result, report in visitors:
            report.add(result.seal())
        self.files_processed += 1

    def process(self, paths: Iterable[str | Path], parser: JavaParser,
                resolver_factory: ResolverFactory,
                on_file: Optional[Callable[[str], None]] = None) -> None:
        """Parse and inspect files one at a time, skipping unreadable ones.

        Args:
            paths: Source files in processing order
            parser: Parser producing SourceFile objects
            resolver_factory: Builds the type resolver for a parsed file
            on_file: Optional callback invoked after each path (progress display)
        """
        for path in paths:
            source_file = parser.parse_file(path)
            if source_file is None:
                self.files_skipped += 1
                logger.warning("file_skipped", path=str(path), reason="unreadable")
            else:
                if source_file.has_errors:
                    logger.debug("syntax_errors_recovered", path=source_file.path)
                self.inspect(source_file, resolver_factory(source_file))
            if on_file is not None:
                on_file(str(path))

    def counts(self) -> Dict[AnalysisKind, int]:
        return {kind: report.record_count for kind, report in self.reports.items()}
