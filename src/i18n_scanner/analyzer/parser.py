"""Tree-sitter parser for Ruby source."""
from pathlib import Path
from typing import Optional

from tree_sitter import Language, Node, Parser, Tree
import tree_sitter_ruby as tsruby

from .errors import SourceSyntaxError


class RubyParser:
    """Ruby parser using the tree-sitter v0.22+ API."""

    SUPPORTED_EXTENSIONS = {'.rb', '.rake', '.ru', '.builder', '.jbuilder'}

    def __init__(self):
        self.language = Language(tsruby.language())
        self.parser = Parser(self.language)

    def parse_source(self, source: str | bytes, path: Optional[str] = None) -> Tree:
        """Parse Ruby source text.

        Args:
            source: Source text (str is encoded as UTF-8)
            path: File path, used only for error messages

        Returns:
            Parsed Tree object

        Raises:
            SourceSyntaxError: If the text does not parse cleanly
        """
        if isinstance(source, str):
            source = source.encode('utf-8')
        tree = self.parser.parse(source)
        ensure_parsed(tree, path)
        return tree

    @classmethod
    def handles(cls, file_path: str | Path) -> bool:
        return Path(file_path).suffix.lower() in cls.SUPPORTED_EXTENSIONS


def ensure_parsed(tree: Tree, path: Optional[str] = None) -> None:
    """Raise SourceSyntaxError if the tree contains ERROR or MISSING nodes."""
    root = tree.root_node
    if not root.has_error:
        return
    bad = _first_error_node(root)
    line = (bad.start_point[0] + 1) if bad is not None else None
    if bad is not None and bad.is_missing:
        message = f"syntax error, missing '{bad.type}'"
    else:
        message = "syntax error"
    raise SourceSyntaxError(message, path=path, line=line)


def _first_error_node(node: Node) -> Optional[Node]:
    """Depth-first search for the first ERROR/MISSING node in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_error or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None
