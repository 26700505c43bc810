"""Tree-sitter parser for Java sources."""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tree_sitter import Language, Parser, Tree, Node
import tree_sitter_java as tsjava


JAVA_EXTENSION = '.java'


@dataclass
class SourceFile:
    """A parsed Java compilation unit."""
    path: str
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        """True when tree-sitter had to recover from syntax errors."""
        return self.tree.root_node.has_error


class JavaParser:
    """Java parser using the tree-sitter v0.22+ API."""

    def __init__(self):
        self.language = Language(tsjava.language())
        self.parser = Parser(self.language)

    def parse_source(self, source_code: bytes | str, file_path: str | Path = '<memory>') -> SourceFile:
        """Parse source text.

        tree-sitter always produces a tree; syntax errors become ERROR nodes
        and the surrounding code is still traversable.

        Args:
            source_code: Java source as bytes or str
            file_path: Path recorded on the result

        Returns:
            SourceFile bundling path, bytes and tree
        """
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')
        return SourceFile(str(file_path), source_code, self.parser.parse(source_code))

    def parse_file(self, file_path: str | Path) -> Optional[SourceFile]:
        """Parse a file from disk.

        Args:
            file_path: Path to a Java source file

        Returns:
            SourceFile, or None if the file is missing or unreadable
        """
        file_path = Path(file_path)

        if not file_path.is_file():
            return None

        try:
            with open(file_path, 'rb') as f:
                source_code = f.read()
        except OSError:
            return None

        return self.parse_source(source_code, file_path)

    @staticmethod
    def accepts(file_path: str | Path) -> bool:
        """Check whether a path has the Java source extension."""
        return Path(file_path).suffix.lower() == JAVA_EXTENSION
