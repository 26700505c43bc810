"""Extraction visitors, one per analysis kind.

The traversal (driven by the report context) walks each file once in
pre-order and hands every node to every visitor. A visitor reacts only to
the node kinds it declares; the set of kinds is closed:

    import      import_declaration
    variable    local_variable_declaration, field_declaration,
                constant_declaration (interface fields)
    creation    object_creation_expression
    call        method_invocation

Traversal always continues into children, so an instantiation nested in
the arguments of another matched instantiation is visited as well.
"""
from typing import Dict, FrozenSet

from tree_sitter import Node

from collections_explorer.errors import ExtractionFailure
from collections_explorer.analyzer.ast_utils import (
    argument_nodes,
    enclosing_class_name,
    node_text,
    package_name,
    position,
    primary_type_name,
    simple_type_name,
    type_argument_nodes,
)
from collections_explorer.analyzer.filter import TypeFilter
from collections_explorer.analyzer.parser import SourceFile
from collections_explorer.analyzer.records import (
    ImportRecord,
    ObjectCreationRecord,
    StreamChainRecord,
    VariableDeclRecord,
)
from collections_explorer.analyzer.resolver import TypeResolver
from collections_explorer.analyzer.stream_chain import reconstruct


NODE_KINDS: Dict[str, str] = {
    'import_declaration': 'import',
    'local_variable_declaration': 'variable',
    'field_declaration': 'variable',
    'constant_declaration': 'variable',
    'object_creation_expression': 'creation',
    'method_invocation': 'call',
}


class ExtractionVisitor:
    """Base visitor. Subclasses set ``kinds`` and implement ``visit_<kind>``.

    A visitor is created per file and may keep per-file state.
    """

    kinds: FrozenSet[str] = frozenset()
    record_type = None

    def __init__(self, type_filter: TypeFilter, source_file: SourceFile, resolver: TypeResolver):
        self.filter = type_filter
        self.source_file = source_file
        self.resolver = resolver

    def visit(self, node: Node, result) -> None:
        """Dispatch a node to the matching visit method.

        Raises:
            ExtractionFailure: If building a record from a matched node fails
        """
        kind = NODE_KINDS.get(node.type)
        if kind not in self.kinds:
            return

        try:
            getattr(self, f"visit_{kind}")(node, result)
        except Exception as e:
            line, col = position(node, self.source_file.source)
            raise ExtractionFailure(node.type, line, col, e) from e

    def position(self, node: Node):
        return position(node, self.source_file.source)


def _import_parts(node: Node):
    """(simple name, qualifier) of an import declaration.

    ``import java.util.List;`` gives ('List', 'java.util') and
    ``import java.util.*;`` gives ('*', 'java.util').
    """
    name_node = next(
        (c for c in node.named_children if c.type in ('identifier', 'scoped_identifier')),
        None,
    )
    if name_node is None:
        return '', ''

    if any(c.type == 'asterisk' for c in node.children):
        return '*', node_text(name_node)
    if name_node.type == 'scoped_identifier':
        return (node_text(name_node.child_by_field_name('name')),
                node_text(name_node.child_by_field_name('scope')))
    return node_text(name_node), ''


class ImportVisitor(ExtractionVisitor):
    """Records import declarations whose imported simple name passes the filter."""

    kinds = frozenset({'import'})
    record_type = ImportRecord

    def visit_import(self, node: Node, result) -> None:
        simple_name, qualifier = _import_parts(node)
        if not simple_name or not self.filter.matches(simple_name):
            return

        line, col = self.position(node)
        result.add(ImportRecord(
            class_name=primary_type_name(node),
            package_name=package_name(node),
            imported_simple_name=simple_name,
            imported_qualifier=qualifier,
            line=line,
            col=col,
        ))


class VariableDeclarationVisitor(ExtractionVisitor):
    """Records field and local variable declarators by declared type."""

    kinds = frozenset({'variable'})
    record_type = VariableDeclRecord

    def visit_variable(self, node: Node, result) -> None:
        type_node = node.child_by_field_name('type')
        if not self.filter.matches(simple_type_name(type_node)):
            return

        class_name = enclosing_class_name(node)
        declared_type = node_text(type_node)
        for declarator in node.children_by_field_name('declarator'):
            line, col = self.position(declarator)
            result.add(VariableDeclRecord(
                class_name=class_name,
                declared_type=declared_type,
                variable_name=node_text(declarator.child_by_field_name('name')),
                line=line,
                col=col,
            ))


class ObjectCreationVisitor(ExtractionVisitor):
    """Records instantiations, qualifying their type through the file's imports.

    The import map is filled as import declarations are visited, which in
    Java always precede the type declarations of the file.
    """

    kinds = frozenset({'import', 'creation'})
    record_type = ObjectCreationRecord

    def __init__(self, type_filter: TypeFilter, source_file: SourceFile, resolver: TypeResolver):
        super().__init__(type_filter, source_file, resolver)
        self.imports_declared: Dict[str, str] = {}

    def visit_import(self, node: Node, result) -> None:
        simple_name, qualifier = _import_parts(node)
        if simple_name and simple_name != '*' and qualifier:
            self.imports_declared[simple_name] = qualifier

    def visit_creation(self, node: Node, result) -> None:
        type_node = node.child_by_field_name('type')
        object_type = simple_type_name(type_node)
        if not self.filter.matches(object_type):
            return

        line, col = self.position(node)
        result.add(ObjectCreationRecord(
            class_name=enclosing_class_name(node),
            object_type=object_type,
            full_object_type=self._full_object_type(object_type),
            argument_types=[node_text(t) for t in type_argument_nodes(type_node)],
            arguments=[node_text(a) for a in argument_nodes(node.child_by_field_name('arguments'))],
            line=line,
            col=col,
        ))

    def _full_object_type(self, object_type: str) -> str:
        qualifier = self.imports_declared.get(object_type)
        if qualifier is None:
            return object_type
        return f"{qualifier}.{object_type}"


class StreamChainVisitor(ExtractionVisitor):
    """Records fluent call chains that contain a stream-producing call.

    Only outer call expressions are reconstructed: a call that is the
    receiver of another call is a link of that call's chain. Calls nested in
    arguments or lambda bodies are outer calls of their own.

    Every anchored chain is recorded; the type filter does not apply here.
    """

    kinds = frozenset({'call'})
    record_type = StreamChainRecord

    def visit_call(self, node: Node, result) -> None:
        if _is_receiver(node):
            return

        record = reconstruct(node, self.source_file.source, self.resolver)
        if record is not None:
            result.add(record)


def _is_receiver(call: Node) -> bool:
    parent = call.parent
    if parent is None or parent.type != 'method_invocation':
        return False
    receiver = parent.child_by_field_name('object')
    return receiver is not None and receiver.id == call.id
