"""Shared fixtures: a tree-sitter Java parser and helpers to run one visitor."""
import pytest

from collections_explorer.analyzer.ast_utils import iter_preorder
from collections_explorer.analyzer.filter import TypeFilter
from collections_explorer.analyzer.parser import JavaParser
from collections_explorer.analyzer.resolver import DeclarationTypeResolver
from collections_explorer.report.context import PerFileResult


@pytest.fixture(scope='session')
def java_parser():
    return JavaParser()


@pytest.fixture
def parse(java_parser):
    """Parse a Java snippet into a SourceFile."""
    def _parse(code: str, path: str = 'Sample.java'):
        return java_parser.parse_source(code, path)
    return _parse


@pytest.fixture
def run_visitor(parse):
    """Run one visitor class over a snippet and return its records."""
    def _run(visitor_class, code: str, names=()):
        source_file = parse(code)
        visitor = visitor_class(TypeFilter(names).freeze(), source_file,
                                DeclarationTypeResolver(source_file))
        result = PerFileResult(source_file.path)
        for node in iter_preorder(source_file.root):
            visitor.visit(node, result)
        return result.entries
    return _run
