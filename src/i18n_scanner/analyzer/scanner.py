"""Scanner entry points.

    occurrences = scan("app/controllers/events_controller.rb", source)

A scan is a pure function of (path, text, config): parse, index, resolve,
then merge magic-comment occurrences (first) with resolver occurrences.
Fatal errors (SourceSyntaxError, CyclicCallError) propagate to the caller.
"""
from pathlib import Path
from typing import List, Optional

from tree_sitter import Tree

from i18n_scanner.config import ScanConfig
from i18n_scanner.utils.logger import get_logger
from .indexer import ClassIndexer
from .magic_comments import MagicCommentScanner
from .models import Occurrence, SourceUnit
from .parser import RubyParser, ensure_parsed
from .resolver import resolver_for

log = get_logger(__name__)


def scan(path: str | Path, text: str, config: Optional[ScanConfig] = None) -> List[Occurrence]:
    """Scan one file's source text.

    Args:
        path: File path reported on every occurrence
        text: Ruby source
        config: Scan options; defaults to convention-aware

    Returns:
        Occurrences in output order

    Raises:
        SourceSyntaxError: If the text does not parse
        CyclicCallError: If a controller's call graph has a cycle
    """
    parser = RubyParser()
    tree = parser.parse_source(text, str(path))
    return _scan_unit(SourceUnit(str(path), text), tree, config or ScanConfig(), parser)


def scan_tree(path: str | Path, tree: Tree, config: Optional[ScanConfig] = None,
              text: Optional[str] = None) -> List[Occurrence]:
    """Scan an already-parsed tree.

    The source text is recovered from the tree when not given.
    """
    ensure_parsed(tree, str(path))
    if text is None:
        text = _tree_text(tree)
    return _scan_unit(SourceUnit(str(path), text), tree, config or ScanConfig(), RubyParser())


def scan_file(path: str | Path, config: Optional[ScanConfig] = None) -> List[Occurrence]:
    """Parse a file from disk and scan it.

    Raises:
        OSError: If the file cannot be read
        SourceSyntaxError: If the file does not parse
        CyclicCallError: If a controller's call graph has a cycle
    """
    source = Path(path).read_bytes()
    parser = RubyParser()
    tree = parser.parse_source(source, str(path))
    text = source.decode('utf-8', errors='replace')
    return _scan_unit(SourceUnit(str(path), text), tree, config or ScanConfig(), parser)


def _scan_unit(unit: SourceUnit, tree: Tree, config: ScanConfig,
               parser: RubyParser) -> List[Occurrence]:
    log.debug("scan.start", path=unit.path, mode=config.mode.value)

    index = ClassIndexer(config, unit).index(tree)
    resolved = resolver_for(config, unit.path).resolve(index)
    annotated = MagicCommentScanner(config, parser).scan(unit)

    occurrences = annotated + resolved
    log.debug("scan.finish", path=unit.path, occurrences=len(occurrences),
              call_sites=len(index.call_sites), contexts=len(index.contexts))
    return occurrences


def _tree_text(tree: Tree) -> str:
    root = tree.root_node
    if root.text is None:
        raise ValueError("tree carries no source text; pass text= explicitly")
    # The root node starts at its first token; restore the leading offset
    row, column = root.start_point
    return '\n' * row + ' ' * column + root.text.decode('utf-8', errors='replace')
