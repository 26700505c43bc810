"""Discovery of the Java source files to analyze."""
from pathlib import Path
from typing import Iterable, List

from collections_explorer.analyzer.parser import JavaParser
from collections_explorer.errors import InputIOError


# Tool metadata directories; their names are not legal Java package names
IGNORED_DIRS = {
    '.git', '.hg', '.svn',
    '.gradle', '.idea', '.mvn',
}


def collect_java_files(root: str | Path, extra_ignored: Iterable[str] = ()) -> List[Path]:
    """All .java files under root, sorted for a deterministic processing order.

    Args:
        root: Directory to scan, or a single .java file
        extra_ignored: Additional directory names to skip

    Returns:
        Sorted list of source file paths

    Raises:
        InputIOError: If root does not exist
    """
    root = Path(root)
    if root.is_file():
        return [root] if JavaParser.accepts(root) else []
    if not root.is_dir():
        raise InputIOError(root, "no such file or directory")

    ignored = IGNORED_DIRS | set(extra_ignored)
    files = []
    for file_path in root.rglob('*'):
        if not JavaParser.accepts(file_path):
            continue
        relative_parts = file_path.relative_to(root).parts[:-1]
        if any(part in ignored for part in relative_parts):
            continue
        if file_path.is_file():
            files.append(file_path)
    return sorted(files)


def read_manifest(manifest_path: str | Path) -> List[Path]:
    """Source paths listed in a manifest file, one per line.

    Blank lines and lines starting with '#' are skipped. Relative paths are
    taken relative to the manifest's directory. Listed paths are not checked
    here; a missing file is reported when it is parsed.

    Raises:
        InputIOError: If the manifest can't be read
    """
    manifest_path = Path(manifest_path)
    try:
        lines = manifest_path.read_text(encoding='utf-8-sig').splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise InputIOError(manifest_path, str(e)) from e

    paths = []
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith('#'):
            continue
        path = Path(entry)
        if not path.is_absolute():
            path = manifest_path.parent / path
        paths.append(path)
    return paths
