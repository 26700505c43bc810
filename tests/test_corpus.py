"""Tests for source discovery: directory traversal and manifest files."""
import pytest

from collections_explorer.corpus import collect_java_files, read_manifest
from collections_explorer.errors import InputIOError


@pytest.fixture
def project(tmp_path):
    """A small source tree with a `build` package and tool metadata."""
    (tmp_path / 'src' / 'main' / 'java' / 'demo').mkdir(parents=True)
    (tmp_path / 'src' / 'main' / 'java' / 'demo' / 'B.java').write_text('class B {}')
    (tmp_path / 'src' / 'main' / 'java' / 'demo' / 'A.java').write_text('class A {}')
    (tmp_path / 'src' / 'main' / 'java' / 'demo' / 'notes.txt').write_text('not java')
    (tmp_path / 'src' / 'main' / 'java' / 'demo' / 'build').mkdir()
    (tmp_path / 'src' / 'main' / 'java' / 'demo' / 'build' / 'Builder.java').write_text('class Builder {}')
    (tmp_path / '.git').mkdir()
    (tmp_path / '.git' / 'Stray.java').write_text('class Stray {}')
    (tmp_path / 'target' / 'generated').mkdir(parents=True)
    (tmp_path / 'target' / 'generated' / 'Gen.java').write_text('class Gen {}')
    (tmp_path / 'legacy').mkdir()
    (tmp_path / 'legacy' / 'Old.java').write_text('class Old {}')
    return tmp_path


class TestCollectJavaFiles:

    def test_finds_sources_sorted(self, project):
        files = collect_java_files(project)
        assert [f.name for f in files] == ['Old.java', 'A.java', 'B.java', 'Builder.java', 'Gen.java']

    def test_build_and_target_are_ordinary_directories(self, project):
        names = [f.name for f in collect_java_files(project)]
        assert 'Builder.java' in names
        assert 'Gen.java' in names

    def test_tool_metadata_is_ignored(self, project):
        assert 'Stray.java' not in [f.name for f in collect_java_files(project)]

    def test_extra_ignored_directories(self, project):
        files = collect_java_files(project, extra_ignored=['legacy', 'target'])
        assert [f.name for f in files] == ['A.java', 'B.java', 'Builder.java']

    def test_extension_is_case_insensitive(self, tmp_path):
        (tmp_path / 'Legacy.JAVA').write_text('class Legacy {}')
        assert [f.name for f in collect_java_files(tmp_path)] == ['Legacy.JAVA']

    def test_single_file_root(self, project):
        source = project / 'legacy' / 'Old.java'
        assert collect_java_files(source) == [source]
        assert collect_java_files(project / 'src' / 'main' / 'java' / 'demo' / 'notes.txt') == []

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(InputIOError) as excinfo:
            collect_java_files(tmp_path / 'nope')
        assert excinfo.value.path == tmp_path / 'nope'


class TestReadManifest:

    def test_lists_paths_in_order(self, project):
        manifest = project / 'files.txt'
        manifest.write_text(
            "# sources to scan\n"
            "src/main/java/demo/B.java\n"
            "\n"
            f"{project / 'legacy' / 'Old.java'}\n"
            "   src/main/java/demo/A.java   \n"
        )

        assert read_manifest(manifest) == [
            project / 'src' / 'main' / 'java' / 'demo' / 'B.java',
            project / 'legacy' / 'Old.java',
            project / 'src' / 'main' / 'java' / 'demo' / 'A.java',
        ]

    def test_missing_entries_are_kept(self, tmp_path):
        manifest = tmp_path / 'files.txt'
        manifest.write_text('Missing.java\n')
        assert read_manifest(manifest) == [tmp_path / 'Missing.java']

    def test_missing_manifest_raises(self, tmp_path):
        with pytest.raises(InputIOError):
            read_manifest(tmp_path / 'files.txt')
