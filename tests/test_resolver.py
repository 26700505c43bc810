"""Tests for declaration-based type resolution and the class index."""
import zipfile

import pytest

from collections_explorer.analyzer.ast_utils import find_all
from collections_explorer.analyzer.resolver import (
    ClassIndex,
    DeclarationTypeResolver,
    Resolved,
    Unresolved,
    split_type_arguments,
)
from collections_explorer.errors import InputIOError


SOURCE = """package demo;

import java.util.List;
import java.util.Map;
import com.acme.*;

public class Catalog {
    private Map<String, List<Integer>> index;
    private String[] labels;

    int[] sizes(List<String> names) {
        var copy = names;
        copy.isEmpty();
        for (String label : labels) {
            label.trim();
        }
        return null;
    }
}
"""


@pytest.fixture
def source_file(parse):
    return parse(SOURCE)


@pytest.fixture
def resolver(source_file):
    return DeclarationTypeResolver(source_file)


def _call(source_file, text):
    return next(c for c in find_all(source_file.root, 'method_invocation') if c.text.decode() == text)


def _identifier(source_file, name, occurrence=-1):
    matches = [n for n in find_all(source_file.root, 'identifier') if n.text.decode() == name]
    return matches[occurrence]


class TestQualify:

    def test_file_state(self, resolver):
        assert resolver.package == 'demo'
        assert resolver.single_imports == {'List': 'java.util.List', 'Map': 'java.util.Map'}
        assert resolver.wildcard_packages == ['com.acme']
        assert 'Catalog' in resolver.declared_types

    @pytest.mark.parametrize('simple, expected', [
        ('List', 'java.util.List'),
        ('String', 'java.lang.String'),
        ('Catalog', 'demo.Catalog'),
        ('int', 'int'),
        ('Widget', None),
    ])
    def test_qualify(self, resolver, simple, expected):
        assert resolver.qualify(simple) == expected

    def test_wildcard_uses_class_index(self, parse):
        index = ClassIndex.with_jdk_defaults()
        index.add('com.acme.Widget')
        resolver = DeclarationTypeResolver(parse(SOURCE), index)
        assert resolver.qualify('Widget') == 'com.acme.Widget'


class TestExpressionTypes:

    def test_field_with_nested_type_arguments(self, source_file, resolver):
        field = find_all(source_file.root, 'field_declaration')[0]
        assert resolver.describe_type(field.child_by_field_name('type')) == Resolved(
            'java.util.Map<java.lang.String, java.util.List<java.lang.Integer>>'
        )

    def test_parameter(self, source_file, resolver):
        assert resolver.resolve_expression_type(_identifier(source_file, 'names')) == Resolved(
            'java.util.List<java.lang.String>'
        )

    def test_var_uses_initializer(self, source_file, resolver):
        assert resolver.resolve_return_type(_call(source_file, 'copy.isEmpty()')) == Resolved('boolean')

    def test_enhanced_for_variable(self, source_file, resolver):
        assert resolver.resolve_return_type(_call(source_file, 'label.trim()')) == Resolved('java.lang.String')

    def test_unknown_name_is_unresolved(self, parse):
        source_file = parse("class A { void f() { ghost.stream(); } }")
        resolution = DeclarationTypeResolver(source_file).resolve_return_type(
            find_all(source_file.root, 'method_invocation')[0]
        )
        assert isinstance(resolution, Unresolved)
        assert not resolution.ok


class TestReturnTypes:

    @pytest.mark.parametrize('statement, call, expected', [
        ('java.util.List<String> xs = null; xs.stream();', 'xs.stream()', 'java.util.stream.Stream<java.lang.String>'),
        ('java.util.Map<String, Integer> m = null; m.keySet();', 'm.keySet()', 'java.util.Set<java.lang.String>'),
        ('"abc".chars();', '"abc".chars()', 'java.util.stream.IntStream'),
        ('java.util.Arrays.asList(1, 2);', 'java.util.Arrays.asList(1, 2)', 'java.util.List'),
    ])
    def test_jdk_methods(self, parse, statement, call, expected):
        source_file = parse(f"class A {{ void f() {{ {statement} }} }}")
        resolution = DeclarationTypeResolver(source_file).resolve_return_type(_call(source_file, call))
        assert resolution == Resolved(expected)

    def test_method_declared_in_file(self, parse):
        source_file = parse(
            "import java.util.List;\n"
            "class A { List<String> names() { return null; } void f() { names(); this.names(); } }"
        )
        resolver = DeclarationTypeResolver(source_file)
        assert resolver.resolve_return_type(_call(source_file, 'names()')) == Resolved('java.util.List<java.lang.String>')
        assert resolver.resolve_return_type(_call(source_file, 'this.names()')).ok

    def test_raw_receiver(self, parse):
        source_file = parse("import java.util.List;\nclass A { List xs; void f() { xs.stream(); } }")
        resolution = DeclarationTypeResolver(source_file).resolve_return_type(_call(source_file, 'xs.stream()'))
        assert resolution == Resolved('java.util.stream.Stream')


class TestSplitTypeArguments:

    @pytest.mark.parametrize('description, expected', [
        ('java.util.List<java.lang.String>', ['java.lang.String']),
        ('java.util.Map<K, java.util.List<V>>', ['K', 'java.util.List<V>']),
        ('java.util.List', []),
    ])
    def test_split(self, description, expected):
        assert split_type_arguments(description) == expected

    def test_raw_strips_arguments(self):
        assert Resolved('java.util.Map<K, V>').raw == 'java.util.Map'


class TestClassIndex:

    def test_jdk_defaults(self):
        index = ClassIndex.with_jdk_defaults()
        assert index.contains('java.util.ArrayList')
        assert index.in_package('java.util.stream', 'Collectors') == 'java.util.stream.Collectors'
        assert index.in_package('java.util', 'Widget') is None

    def test_add_jar(self, tmp_path):
        jar = tmp_path / 'lib.jar'
        with zipfile.ZipFile(jar, 'w') as archive:
            archive.writestr('com/acme/Widget.class', b'')
            archive.writestr('com/acme/Widget$Part.class', b'')
            archive.writestr('com/acme/package-info.class', b'')
            archive.writestr('META-INF/MANIFEST.MF', b'')

        index = ClassIndex()
        assert index.add_jar(jar) == 1
        assert index.contains('com.acme.Widget')
        assert len(index) == 1

    def test_unreadable_jar(self, tmp_path):
        broken = tmp_path / 'broken.jar'
        broken.write_text('not a zip')
        with pytest.raises(InputIOError):
            ClassIndex().add_jar(broken)
        with pytest.raises(InputIOError):
            ClassIndex().add_jar(tmp_path / 'missing.jar')


class TestDeclarationEdgeCases:

    def test_interface_constant(self, parse):
        source_file = parse(
            "import java.util.List;\n"
            "interface Registry {\n"
            "    List<String> NAMES = null;\n"
            "    default long count() { return NAMES.stream().count(); }\n"
            "}\n"
        )
        resolution = DeclarationTypeResolver(source_file).resolve_return_type(
            _call(source_file, 'NAMES.stream()')
        )
        assert resolution == Resolved('java.util.stream.Stream<java.lang.String>')

    def test_var_in_its_own_initializer(self, parse):
        source_file = parse("class A { void f() { var x = x.foo(); } }")
        resolution = DeclarationTypeResolver(source_file).resolve_return_type(_call(source_file, 'x.foo()'))

        assert isinstance(resolution, Unresolved)
        assert 'own initializer' in resolution.reason
