"""Magic comment preprocessor.

    # i18n-tasks-use t('some.dynamic.key')
    send("#{prefix}_key")

Annotations declare key usages the tree cannot see. Each one is attributed
to the next non-blank, non-comment line; annotations trailing the end of the
file attach to the last code line seen.
"""
import re
from typing import List, NamedTuple, Optional, Tuple

from i18n_scanner.config import ScanConfig
from i18n_scanner.utils.logger import get_logger
from .extractor import CallExtractor, default_argument
from .models import Occurrence, SourceUnit
from .parser import RubyParser
from .resolver import absolute_key

log = get_logger(__name__)


class _Annotation(NamedTuple):
    key: str
    raw_key: str
    default_arg: Optional[str]
    line_num: int


class MagicCommentScanner:
    """Line-oriented scan for annotation-declared keys."""

    def __init__(self, config: ScanConfig, parser: Optional[RubyParser] = None):
        self.config = config
        self.parser = parser or RubyParser()
        self.extractor = CallExtractor(config)
        self.pattern = re.compile(
            r'^#+\s*' + re.escape(config.magic_comment_marker) + r'(?:\s+(?P<expr>\S.*))?$'
        )

    def scan(self, unit: SourceUnit) -> List[Occurrence]:
        occurrences: List[Occurrence] = []
        pending: List[_Annotation] = []
        last_code: Optional[Tuple[int, str, int]] = None

        for line_num, line in enumerate(unit.lines, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.startswith('#'):
                match = self.pattern.match(stripped)
                if match and match.group('expr'):
                    pending.extend(self._annotations(match.group('expr'), unit.path, line_num))
                continue

            last_code = (line_num, stripped, _column(line))
            occurrences.extend(self._attach(pending, unit, *last_code))
            pending = []

        for annotation in pending:
            if last_code is not None:
                occurrences.extend(self._attach([annotation], unit, *last_code))
            else:
                line = unit.lines[annotation.line_num - 1]
                occurrences.extend(self._attach([annotation], unit, annotation.line_num,
                                                line.strip(), _column(line)))
        return occurrences

    def _annotations(self, expression: str, path: str, line_num: int) -> List[_Annotation]:
        """Parse the annotated expression and pull literal keys out of its translation calls."""
        tree = self.parser.parser.parse(expression.encode('utf-8'))
        if tree.root_node.has_error:
            log.debug("magic_comment.unparsable", path=path, line=line_num)
            return []

        found = []
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type == 'call':
                parts = self.extractor.translation_arguments(node)
                if parts is not None:
                    annotation = self._annotation(parts, line_num)
                    if annotation is not None:
                        found.append(annotation)
                    else:
                        log.debug("magic_comment.dropped", path=path, line=line_num)
            stack.extend(reversed(node.named_children))
        return found

    def _annotation(self, parts, line_num: int) -> Optional[_Annotation]:
        key = parts.key
        if key is None or not key.text or key.text.startswith('.'):
            return None
        if key.interpolated and self.config.strict:
            return None
        resolved = absolute_key(key.text, parts.options)
        if not resolved:
            return None
        return _Annotation(resolved, key.text, default_argument(parts.options), line_num)

    @staticmethod
    def _attach(annotations: List[_Annotation], unit: SourceUnit, line_num: int,
                line_text: str, line_pos: int) -> List[Occurrence]:
        return [
            Occurrence(
                resolved_key=annotation.key,
                raw_key=annotation.raw_key,
                path=unit.path,
                line_num=line_num,
                line_text=line_text,
                line_pos=line_pos,
                default_arg=annotation.default_arg,
            )
            for annotation in annotations
        ]


def _column(line: str) -> int:
    return len(line) - len(line.lstrip()) + 1
