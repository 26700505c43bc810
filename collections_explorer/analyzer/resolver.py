"""
Best-effort static type resolution for Java expressions.

This is not a type checker. It answers two questions well enough to classify
fluent call chains: "what type does this expression have?" and "what does
this call return?". It knows about declarations in the current file
(locals, parameters, fields, methods), the file's imports, a catalog of
common JDK types and, optionally, the classes of a jar archive.

Resolution is expected to fail often. Failures are returned as
``Unresolved`` values, never raised, and every caller handles both arms.
"""
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Set, Union

from tree_sitter import Node

from collections_explorer.errors import InputIOError
from collections_explorer.analyzer.ast_utils import (
    CLASS_DECLARATION_TYPES,
    declaration_name,
    find_ancestor,
    node_text,
)
from collections_explorer.analyzer.parser import SourceFile


STREAM_NAMESPACE = 'java.util.stream'


@dataclass(frozen=True)
class Resolved:
    """A successfully resolved type, e.g. ``java.util.List<java.lang.String>``."""
    description: str

    @property
    def ok(self) -> bool:
        return True

    @property
    def raw(self) -> str:
        """Description without type arguments."""
        return self.description.split('<', 1)[0]


@dataclass(frozen=True)
class Unresolved:
    """Resolution failed; reason is for debug logging only."""
    reason: str

    @property
    def ok(self) -> bool:
        return False


Resolution = Union[Resolved, Unresolved]


class TypeResolver(Protocol):
    """Fallible static-type resolution over one file's syntax tree."""

    def resolve_return_type(self, call: Node) -> Resolution:
        ...

    def resolve_expression_type(self, expression: Node) -> Resolution:
        ...


# =============================================================================
# Class index
# =============================================================================

JDK_PACKAGES = {
    'java.lang': [
        'Boolean', 'Byte', 'Character', 'CharSequence', 'Class', 'Comparable',
        'Double', 'Enum', 'Exception', 'Float', 'Integer', 'Iterable', 'Long',
        'Math', 'Number', 'Object', 'Runnable', 'RuntimeException', 'Short',
        'String', 'StringBuilder', 'System', 'Thread', 'Void',
    ],
    'java.util': [
        'ArrayDeque', 'ArrayList', 'Arrays', 'Collection', 'Collections',
        'Deque', 'EnumMap', 'EnumSet', 'HashMap', 'HashSet', 'Hashtable',
        'Iterator', 'LinkedHashMap', 'LinkedHashSet', 'LinkedList', 'List',
        'Map', 'NavigableMap', 'NavigableSet', 'Objects', 'Optional',
        'PriorityQueue', 'Queue', 'Set', 'SortedMap', 'SortedSet', 'Stack',
        'TreeMap', 'TreeSet', 'Vector',
    ],
    'java.util.concurrent': [
        'ConcurrentHashMap', 'ConcurrentLinkedQueue', 'CopyOnWriteArrayList',
    ],
    'java.util.stream': [
        'Collector', 'Collectors', 'DoubleStream', 'IntStream', 'LongStream',
        'Stream', 'StreamSupport',
    ],
}

PRIMITIVE_TYPES = frozenset({
    'boolean', 'byte', 'char', 'double', 'float', 'int', 'long', 'short', 'void',
})


class ClassIndex:
    """Known qualified class names, grouped by package."""

    def __init__(self):
        self._qualified: Set[str] = set()

    @classmethod
    def with_jdk_defaults(cls) -> 'ClassIndex':
        index = cls()
        for package, names in JDK_PACKAGES.items():
            for name in names:
                index.add(f"{package}.{name}")
        return index

    def add(self, qualified_name: str) -> None:
        self._qualified.add(qualified_name)

    def contains(self, qualified_name: str) -> bool:
        return qualified_name in self._qualified

    def in_package(self, package: str, simple_name: str) -> Optional[str]:
        candidate = f"{package}.{simple_name}"
        return candidate if self.contains(candidate) else None

    def add_jar(self, jar_path: str | Path) -> int:
        """Index the top-level classes of a jar archive.

        Args:
            jar_path: Path to a .jar (zip) file

        Returns:
            Number of classes added

        Raises:
            InputIOError: If the archive is missing or not a zip file
        """
        try:
            with zipfile.ZipFile(jar_path) as archive:
                entries = archive.namelist()
        except (OSError, zipfile.BadZipFile) as e:
            raise InputIOError(jar_path, str(e)) from e

        added = 0
        for entry in entries:
            if not entry.endswith('.class') or '$' in entry:
                continue
            if entry.endswith(('module-info.class', 'package-info.class')):
                continue
            self.add(entry[:-len('.class')].replace('/', '.'))
            added += 1
        return added

    def __len__(self) -> int:
        return len(self._qualified)


# =============================================================================
# JDK method return types
# =============================================================================

# $0 and $1 stand for the receiver's first and second type arguments,
# SAME for the receiver's own type.
_COLLECTION_METHODS = {
    'stream': 'java.util.stream.Stream<$0>',
    'parallelStream': 'java.util.stream.Stream<$0>',
    'iterator': 'java.util.Iterator<$0>',
    'get': '$0',
    'getFirst': '$0',
    'peek': '$0',
    'poll': '$0',
    'size': 'int',
    'isEmpty': 'boolean',
    'contains': 'boolean',
    'add': 'boolean',
    'subList': 'SAME',
}

_MAP_METHODS = {
    'values': 'java.util.Collection<$1>',
    'keySet': 'java.util.Set<$0>',
    'entrySet': 'java.util.Set<java.util.Map.Entry<$0, $1>>',
    'get': '$1',
    'getOrDefault': '$1',
    'put': '$1',
    'remove': '$1',
    'size': 'int',
    'isEmpty': 'boolean',
    'containsKey': 'boolean',
    'containsValue': 'boolean',
}

_STREAM_METHODS = {
    'filter': 'SAME',
    'distinct': 'SAME',
    'sorted': 'SAME',
    'peek': 'SAME',
    'limit': 'SAME',
    'skip': 'SAME',
    'parallel': 'SAME',
    'sequential': 'SAME',
    'unordered': 'SAME',
    'onClose': 'SAME',
    'takeWhile': 'SAME',
    'dropWhile': 'SAME',
    'map': 'java.util.stream.Stream',
    'flatMap': 'java.util.stream.Stream',
    'mapToObj': 'java.util.stream.Stream',
    'boxed': 'java.util.stream.Stream',
    'mapToInt': 'java.util.stream.IntStream',
    'mapToLong': 'java.util.stream.LongStream',
    'mapToDouble': 'java.util.stream.DoubleStream',
    'count': 'long',
    'anyMatch': 'boolean',
    'allMatch': 'boolean',
    'noneMatch': 'boolean',
    'findFirst': 'java.util.Optional<$0>',
    'findAny': 'java.util.Optional<$0>',
    'forEach': 'void',
    'forEachOrdered': 'void',
    'iterator': 'java.util.Iterator<$0>',
}

_STRING_METHODS = {
    'chars': 'java.util.stream.IntStream',
    'codePoints': 'java.util.stream.IntStream',
    'lines': 'java.util.stream.Stream<java.lang.String>',
    'length': 'int',
    'indexOf': 'int',
    'isEmpty': 'boolean',
    'equals': 'boolean',
    'contains': 'boolean',
    'startsWith': 'boolean',
    'endsWith': 'boolean',
    'trim': 'java.lang.String',
    'strip': 'java.lang.String',
    'substring': 'java.lang.String',
    'toLowerCase': 'java.lang.String',
    'toUpperCase': 'java.lang.String',
    'replace': 'java.lang.String',
    'split': 'java.lang.String[]',
}

_OPTIONAL_METHODS = {
    'stream': 'java.util.stream.Stream<$0>',
    'get': '$0',
    'orElse': '$0',
    'orElseThrow': '$0',
    'isPresent': 'boolean',
    'isEmpty': 'boolean',
    'filter': 'SAME',
    'map': 'java.util.Optional',
}

_STATIC_METHODS = {
    ('java.util.Arrays', 'stream'): 'java.util.stream.Stream',
    ('java.util.Arrays', 'asList'): 'java.util.List',
    ('java.util.List', 'of'): 'java.util.List',
    ('java.util.Set', 'of'): 'java.util.Set',
    ('java.util.Map', 'of'): 'java.util.Map',
    ('java.util.Optional', 'of'): 'java.util.Optional',
    ('java.util.Optional', 'ofNullable'): 'java.util.Optional',
    ('java.util.Optional', 'empty'): 'java.util.Optional',
    ('java.util.stream.Stream', 'of'): 'java.util.stream.Stream',
    ('java.util.stream.Stream', 'empty'): 'java.util.stream.Stream',
    ('java.util.stream.Stream', 'iterate'): 'java.util.stream.Stream',
    ('java.util.stream.Stream', 'generate'): 'java.util.stream.Stream',
    ('java.util.stream.Stream', 'concat'): 'java.util.stream.Stream',
    ('java.util.stream.IntStream', 'range'): 'java.util.stream.IntStream',
    ('java.util.stream.IntStream', 'rangeClosed'): 'java.util.stream.IntStream',
    ('java.util.stream.IntStream', 'of'): 'java.util.stream.IntStream',
    ('java.util.stream.LongStream', 'range'): 'java.util.stream.LongStream',
    ('java.util.stream.LongStream', 'rangeClosed'): 'java.util.stream.LongStream',
    ('java.util.stream.StreamSupport', 'stream'): 'java.util.stream.Stream',
    ('java.lang.String', 'valueOf'): 'java.lang.String',
    ('java.lang.String', 'join'): 'java.lang.String',
    ('java.lang.String', 'format'): 'java.lang.String',
    ('java.lang.Integer', 'parseInt'): 'int',
    ('java.lang.Integer', 'valueOf'): 'java.lang.Integer',
}

_COLLECTION_TYPES = frozenset(
    f"java.util.{name}" for name in (
        'ArrayDeque', 'ArrayList', 'Collection', 'Deque', 'EnumSet', 'HashSet',
        'LinkedHashSet', 'LinkedList', 'List', 'NavigableSet', 'PriorityQueue',
        'Queue', 'Set', 'SortedSet', 'Stack', 'TreeSet', 'Vector',
    )
) | {
    'java.util.concurrent.ConcurrentLinkedQueue',
    'java.util.concurrent.CopyOnWriteArrayList',
}

_MAP_TYPES = frozenset(
    f"java.util.{name}" for name in (
        'EnumMap', 'HashMap', 'Hashtable', 'LinkedHashMap', 'Map',
        'NavigableMap', 'SortedMap', 'TreeMap',
    )
) | {'java.util.concurrent.ConcurrentHashMap'}

_LITERAL_TYPES = {
    'string_literal': 'java.lang.String',
    'text_block': 'java.lang.String',
    'character_literal': 'char',
    'true': 'boolean',
    'false': 'boolean',
    'decimal_integer_literal': 'int',
    'hex_integer_literal': 'int',
    'octal_integer_literal': 'int',
    'binary_integer_literal': 'int',
    'decimal_floating_point_literal': 'double',
}

_METHOD_SCOPES = frozenset({
    'method_declaration', 'constructor_declaration', 'compact_constructor_declaration',
})

_MEMBER_DECLARATIONS = frozenset({'field_declaration', 'constant_declaration'})

_MEMBER_SCOPES = frozenset({'class_body', 'enum_body_declarations', 'interface_body'})


def split_type_arguments(description: str) -> List[str]:
    """Top-level type arguments of a description.

    ``java.util.Map<java.lang.String, java.util.List<java.lang.Integer>>``
    gives ``['java.lang.String', 'java.util.List<java.lang.Integer>']``.
    """
    start = description.find('<')
    if start < 0 or not description.endswith('>'):
        return []

    args, depth, current = [], 0, []
    for char in description[start + 1:-1]:
        if char == ',' and depth == 0:
            args.append(''.join(current).strip())
            current = []
            continue
        if char == '<':
            depth += 1
        elif char == '>':
            depth -= 1
        current.append(char)
    if current:
        args.append(''.join(current).strip())
    return [a for a in args if a]


def _instantiate(template: str, receiver: Resolved) -> Resolution:
    """Fill a return-type template from the receiver's type arguments."""
    if template == 'SAME':
        return receiver

    args = split_type_arguments(receiver.description)
    if template in ('$0', '$1'):
        index = int(template[1])
        if index < len(args):
            return Resolved(args[index])
        return Resolved('java.lang.Object')

    if '$' not in template:
        return Resolved(template)
    needed = max(int(template[i + 1]) for i, c in enumerate(template) if c == '$')
    if needed >= len(args):
        # Raw receiver: the result is raw as well
        return Resolved(template.split('<', 1)[0])
    for i, arg in enumerate(args):
        template = template.replace(f"${i}", arg)
    return Resolved(template)


# =============================================================================
# Declaration-based resolver
# =============================================================================

class DeclarationTypeResolver:
    """Resolve types from declarations visible in a single file.

    Create one per file: the import table and declared types are read from
    the file's own compilation unit.
    """

    def __init__(self, source_file: SourceFile, class_index: Optional[ClassIndex] = None):
        self.source_file = source_file
        self.class_index = class_index if class_index is not None else ClassIndex.with_jdk_defaults()
        self.package = ''
        self.single_imports: Dict[str, str] = {}
        self.wildcard_packages: List[str] = []
        self.declared_types: Dict[str, Node] = {}
        self._read_compilation_unit(source_file.root)

    def _read_compilation_unit(self, root: Node) -> None:
        for child in root.named_children:
            if child.type == 'package_declaration':
                for part in child.named_children:
                    if part.type in ('identifier', 'scoped_identifier'):
                        self.package = node_text(part)
            elif child.type == 'import_declaration':
                self._read_import(child)

        for node in _walk_declarations(root):
            name = declaration_name(node)
            if name and name not in self.declared_types:
                self.declared_types[name] = node

    def _read_import(self, node: Node) -> None:
        children = [c.type for c in node.children]
        if 'static' in children:
            return
        name_node = next(
            (c for c in node.named_children if c.type in ('identifier', 'scoped_identifier')),
            None,
        )
        if name_node is None:
            return
        name = node_text(name_node)
        if 'asterisk' in children:
            self.wildcard_packages.append(name)
        else:
            self.single_imports[name.rsplit('.', 1)[-1]] = name

    # -------------------------------------------------------------------------
    # Types
    # -------------------------------------------------------------------------

    def qualify(self, simple_name: str) -> Optional[str]:
        """Qualified name for a simple type name, or None if unknown."""
        if simple_name in PRIMITIVE_TYPES:
            return simple_name
        if simple_name in self.single_imports:
            return self.single_imports[simple_name]
        if simple_name in self.declared_types:
            return f"{self.package}.{simple_name}" if self.package else simple_name

        lang = self.class_index.in_package('java.lang', simple_name)
        if lang:
            return lang
        for package in self.wildcard_packages:
            qualified = self.class_index.in_package(package, simple_name)
            if qualified:
                return qualified
        if self.package:
            return self.class_index.in_package(self.package, simple_name)
        return None

    def describe_type(self, type_node: Optional[Node]) -> Resolution:
        """Canonical description of a type node."""
        if type_node is None:
            return Unresolved("missing type")

        kind = type_node.type
        text = node_text(type_node)

        if kind in ('integral_type', 'floating_point_type', 'boolean_type', 'void_type'):
            return Resolved(text)
        if kind == 'annotated_type':
            return self.describe_type(type_node.named_children[-1])
        if kind == 'array_type':
            element = self.describe_type(type_node.child_by_field_name('element'))
            if not element.ok:
                return element
            dimensions = node_text(type_node.child_by_field_name('dimensions')).replace(' ', '')
            return Resolved(element.description + dimensions)
        if kind == 'type_identifier':
            if text == 'var':
                return Unresolved("inferred local variable type")
            qualified = self.qualify(text)
            return Resolved(qualified) if qualified else Unresolved(f"unknown type {text}")
        if kind == 'scoped_type_identifier':
            head, _, rest = text.partition('.')
            if head[:1].islower():
                return Resolved(text)
            qualified = self.qualify(head)
            if qualified is None:
                return Unresolved(f"unknown type {head}")
            return Resolved(f"{qualified}.{rest}")
        if kind == 'generic_type':
            base = self.describe_type(type_node.named_children[0])
            if not base.ok:
                return base
            arguments = []
            for child in type_node.named_children[1:]:
                if child.type != 'type_arguments':
                    continue
                for arg in child.named_children:
                    if arg.is_extra:
                        continue
                    if arg.type == 'wildcard':
                        arguments.append(node_text(arg))
                        continue
                    described = self.describe_type(arg)
                    if not described.ok:
                        return described
                    arguments.append(described.description)
            if not arguments:
                return base
            return Resolved(f"{base.description}<{', '.join(arguments)}>")

        return Unresolved(f"unsupported type node {kind}")

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def resolve_expression_type(self, expression: Node) -> Resolution:
        kind = expression.type

        if kind in _LITERAL_TYPES:
            return Resolved(_LITERAL_TYPES[kind])
        if kind == 'parenthesized_expression':
            inner = [c for c in expression.named_children if not c.is_extra]
            if not inner:
                return Unresolved("empty parentheses")
            return self.resolve_expression_type(inner[0])
        if kind == 'cast_expression':
            return self.describe_type(expression.child_by_field_name('type'))
        if kind == 'object_creation_expression':
            return self.describe_type(expression.child_by_field_name('type'))
        if kind == 'method_invocation':
            return self.resolve_return_type(expression)
        if kind == 'this':
            declaration = find_ancestor(expression, CLASS_DECLARATION_TYPES)
            if declaration is None:
                return Unresolved("'this' outside a type declaration")
            return self._describe_declaration(declaration)
        if kind == 'identifier':
            return self._resolve_variable(expression, node_text(expression))
        if kind == 'field_access':
            target = expression.child_by_field_name('object')
            if target is not None and target.type == 'this':
                return self._resolve_field(expression, node_text(expression.child_by_field_name('field')))
            return Unresolved(f"field access {node_text(expression)}")
        if kind == 'array_access':
            array = self.resolve_expression_type(expression.child_by_field_name('array'))
            if not array.ok:
                return array
            if not array.description.endswith('[]'):
                return Unresolved(f"not an array: {array.description}")
            return Resolved(array.description[:-2])

        return Unresolved(f"unsupported expression {kind}")

    def _describe_declaration(self, declaration: Node) -> Resolution:
        qualified = self.qualify(declaration_name(declaration))
        if qualified is None:
            return Unresolved("anonymous or unknown declaration")
        return Resolved(qualified)

    def _resolve_variable(self, use: Node, name: str) -> Resolution:
        """Resolve a simple name by walking outwards through enclosing scopes."""
        scope = use.parent
        while scope is not None:
            found = self._declared_in_scope(scope, name, use)
            if found is not None:
                return found
            scope = scope.parent
        return Unresolved(f"no declaration for {name}")

    def _resolve_field(self, use: Node, name: str) -> Resolution:
        declaration = find_ancestor(use, CLASS_DECLARATION_TYPES)
        while declaration is not None:
            body = declaration.child_by_field_name('body')
            if body is not None:
                found = self._declared_in_scope(body, name, use)
                if found is not None:
                    return found
            declaration = find_ancestor(declaration, CLASS_DECLARATION_TYPES)
        return Unresolved(f"no field {name}")

    def _declared_in_scope(self, scope: Node, name: str, use: Node) -> Optional[Resolution]:
        """Resolution for name if scope itself declares it, else None."""
        kind = scope.type

        if kind in _METHOD_SCOPES or kind == 'lambda_expression':
            parameters = scope.child_by_field_name('parameters')
            if parameters is None:
                return None
            if parameters.type == 'identifier':
                # x -> ...
                if node_text(parameters) == name:
                    return Unresolved(f"untyped lambda parameter {name}")
                return None
            for parameter in parameters.named_children:
                if parameter.type == 'identifier' and node_text(parameter) == name:
                    return Unresolved(f"untyped lambda parameter {name}")
                if parameter.type == 'formal_parameter' and _declarator_name(parameter) == name:
                    return self.describe_type(parameter.child_by_field_name('type'))
            return None

        if kind == 'enhanced_for_statement':
            if node_text(scope.child_by_field_name('name')) == name:
                type_node = scope.child_by_field_name('type')
                if node_text(type_node) == 'var':
                    return Unresolved(f"inferred loop variable {name}")
                return self.describe_type(type_node)
            return None

        if kind == 'catch_clause':
            for child in scope.named_children:
                if child.type == 'catch_formal_parameter' and _declarator_name(child) == name:
                    catch_type = next((c for c in child.named_children if c.type == 'catch_type'), None)
                    if catch_type is not None and catch_type.named_children:
                        return self.describe_type(catch_type.named_children[0])
            return None

        if kind == 'resource_specification':
            for resource in scope.named_children:
                if resource.type == 'resource' and node_text(resource.child_by_field_name('name')) == name:
                    return self._declared_type(resource.child_by_field_name('type'),
                                               resource.child_by_field_name('value'), use)
            return None

        for child in scope.named_children:
            if child.type == 'local_variable_declaration':
                if child.start_byte > use.start_byte:
                    continue
            elif child.type not in _MEMBER_DECLARATIONS or scope.type not in _MEMBER_SCOPES:
                continue
            for declarator in child.children_by_field_name('declarator'):
                if node_text(declarator.child_by_field_name('name')) == name:
                    return self._declared_type(child.child_by_field_name('type'),
                                               declarator.child_by_field_name('value'), use)

        if kind == 'for_statement':
            for init in scope.children_by_field_name('init'):
                if init.type != 'local_variable_declaration':
                    continue
                for declarator in init.children_by_field_name('declarator'):
                    if node_text(declarator.child_by_field_name('name')) == name:
                        return self._declared_type(init.child_by_field_name('type'),
                                                   declarator.child_by_field_name('value'), use)
        return None

    def _declared_type(self, type_node: Optional[Node], initializer: Optional[Node], use: Node) -> Resolution:
        if node_text(type_node) == 'var':
            if initializer is None:
                return Unresolved("var without initializer")
            if initializer.start_byte <= use.start_byte < initializer.end_byte:
                return Unresolved("var used in its own initializer")
            return self.resolve_expression_type(initializer)
        return self.describe_type(type_node)

    # -------------------------------------------------------------------------
    # Calls
    # -------------------------------------------------------------------------

    def resolve_return_type(self, call: Node) -> Resolution:
        name = node_text(call.child_by_field_name('name'))
        receiver = call.child_by_field_name('object')

        if receiver is None or receiver.type == 'this':
            declaration = find_ancestor(call, CLASS_DECLARATION_TYPES)
            return self._declared_method_return(declaration, name)

        if receiver.type in ('identifier', 'scoped_identifier', 'field_access'):
            static = self._static_return(receiver, name)
            if static is not None:
                return static

        receiver_type = self.resolve_expression_type(receiver)
        if not receiver_type.ok:
            return receiver_type
        return self._instance_return(receiver_type, name)

    def _static_return(self, receiver: Node, name: str) -> Optional[Resolution]:
        """Return type of ``Type.method(...)``, or None if receiver isn't a type."""
        text = node_text(receiver)
        if receiver.type == 'identifier':
            if not text[:1].isupper():
                return None
            variable = self._resolve_variable(receiver, text)
            if variable.ok:
                return None
            qualified = self.qualify(text)
        else:
            head = text.split('.', 1)[0]
            tail = text.rsplit('.', 1)[-1]
            if head in ('this', 'super') or not head[:1].islower() or not tail[:1].isupper():
                return None
            qualified = text
        if qualified is None:
            return None

        template = _STATIC_METHODS.get((qualified, name))
        if template is not None:
            return Resolved(template)
        if qualified == 'java.util.stream.Collectors':
            return Resolved('java.util.stream.Collector')
        simple = qualified.rsplit('.', 1)[-1]
        if simple in self.declared_types and qualified == self.qualify(simple):
            return self._declared_method_return(self.declared_types[simple], name)
        return Unresolved(f"unknown static method {qualified}.{name}")

    def _instance_return(self, receiver: Resolved, name: str) -> Resolution:
        raw = receiver.raw
        if raw in _COLLECTION_TYPES:
            table = _COLLECTION_METHODS
        elif raw in _MAP_TYPES:
            table = _MAP_METHODS
        elif raw.startswith(STREAM_NAMESPACE + '.') and raw.endswith('Stream'):
            table = _STREAM_METHODS
        elif raw == 'java.lang.String':
            table = _STRING_METHODS
        elif raw == 'java.util.Optional':
            table = _OPTIONAL_METHODS
        else:
            simple = raw.rsplit('.', 1)[-1]
            declaration = self.declared_types.get(simple)
            if declaration is not None and self.qualify(simple) == raw:
                return self._declared_method_return(declaration, name)
            return Unresolved(f"no method table for {raw}")

        template = table.get(name)
        if template is None:
            return Unresolved(f"unknown method {raw}.{name}")
        return _instantiate(template, receiver)

    def _declared_method_return(self, declaration: Optional[Node], name: str) -> Resolution:
        """Return type of a method declared in this file's type declaration."""
        while declaration is not None:
            body = declaration.child_by_field_name('body')
            if body is not None:
                for member in body.named_children:
                    if member.type == 'method_declaration' and declaration_name(member) == name:
                        return self.describe_type(member.child_by_field_name('type'))
            declaration = find_ancestor(declaration, CLASS_DECLARATION_TYPES)
        return Unresolved(f"method {name} not declared in this file")


def _declarator_name(node: Node) -> str:
    return node_text(node.child_by_field_name('name'))


def _walk_declarations(root: Node):
    stack = [root]
    while stack:
        current = stack.pop()
        if current.type in CLASS_DECLARATION_TYPES:
            yield current
        stack.extend(reversed(current.named_children))
