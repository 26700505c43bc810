"""Position, ancestry and naming helpers over tree-sitter Java nodes."""
from typing import Iterator, List, Optional, Tuple

from tree_sitter import Node


NO_INFO = -1

CLASS_DECLARATION_TYPES = frozenset({
    'class_declaration',
    'interface_declaration',
    'enum_declaration',
    'record_declaration',
    'annotation_type_declaration',
})


def node_text(node: Optional[Node]) -> str:
    """Source text of a node, or '' for a missing node."""
    if node is None:
        return ''
    return node.text.decode('utf-8', errors='replace')


def position(node: Optional[Node], source: bytes) -> Tuple[int, int]:
    """1-based (line, column) of a node's start.

    tree-sitter columns are byte offsets; the column reported here counts
    characters so that non-ASCII text earlier on the line doesn't shift it.

    Returns:
        (line, col), or (NO_INFO, NO_INFO) when the node is missing
    """
    if node is None:
        return NO_INFO, NO_INFO

    row, byte_col = node.start_point
    line_start = node.start_byte - byte_col
    prefix = source[line_start:node.start_byte].decode('utf-8', errors='replace')
    return row + 1, len(prefix) + 1


def iter_preorder(node: Node) -> Iterator[Node]:
    """Iteratively yield a node and all its descendants in source order.

    Args:
        node: Root node to start traversal

    Yields:
        Nodes in pre-order
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        # Reverse so the leftmost child is popped first
        stack.extend(reversed(current.children))


def find_all(node: Node, node_type: str) -> List[Node]:
    """All nodes of a type reachable from node (node included), in pre-order."""
    return [n for n in iter_preorder(node) if n.type == node_type]


def find_ancestor(node: Node, node_types) -> Optional[Node]:
    """Closest proper ancestor whose type is in node_types."""
    if isinstance(node_types, str):
        node_types = {node_types}
    current = node.parent
    while current is not None:
        if current.type in node_types:
            return current
        current = current.parent
    return None


def declaration_name(node: Node) -> str:
    return node_text(node.child_by_field_name('name'))


def enclosing_class_name(node: Node) -> str:
    """Name of the closest enclosing type declaration, or ''."""
    declaration = find_ancestor(node, CLASS_DECLARATION_TYPES)
    if declaration is None:
        return ''
    return declaration_name(declaration)


def compilation_unit(node: Node) -> Node:
    while node.parent is not None:
        node = node.parent
    return node


def package_name(node: Node) -> str:
    """Package declared by the file containing node, or '' for the default package."""
    for child in compilation_unit(node).named_children:
        if child.type == 'package_declaration':
            for part in child.named_children:
                if part.type in ('identifier', 'scoped_identifier'):
                    return node_text(part)
    return ''


def primary_type_name(node: Node) -> str:
    """Name of the first top-level type declared in the file, or ''."""
    for child in compilation_unit(node).named_children:
        if child.type in CLASS_DECLARATION_TYPES:
            return declaration_name(child)
    return ''


def simple_type_name(type_node: Optional[Node]) -> str:
    """Simple name of a type node.

    Strips type arguments, array dimensions, annotations and qualification:
    ``java.util.List<String>[]`` becomes ``List``.
    """
    if type_node is None:
        return ''

    kind = type_node.type
    if kind == 'generic_type':
        return simple_type_name(type_node.named_children[0])
    if kind == 'array_type':
        return simple_type_name(type_node.child_by_field_name('element'))
    if kind == 'annotated_type':
        return simple_type_name(type_node.named_children[-1])
    if kind == 'scoped_type_identifier':
        identifiers = [c for c in type_node.named_children if c.type == 'type_identifier']
        if identifiers:
            return node_text(identifiers[-1])
    return node_text(type_node)


def type_argument_nodes(type_node: Optional[Node]) -> List[Node]:
    """Type argument nodes of a generic type; [] for raw types and diamonds."""
    if type_node is None or type_node.type != 'generic_type':
        return []
    for child in type_node.named_children:
        if child.type == 'type_arguments':
            return [arg for arg in child.named_children if not arg.is_extra]
    return []


def argument_nodes(argument_list: Optional[Node]) -> List[Node]:
    """Expressions of an argument list, without comments."""
    if argument_list is None:
        return []
    return [arg for arg in argument_list.named_children if not arg.is_extra]

