"""Static reading of Ruby literal nodes."""
from typing import NamedTuple, Optional

from tree_sitter import Node

from .models import IntegerLiteral, Literal, LiteralList, NonLiteral, OptionValue

STRING_TYPES = ('string', 'delimited_symbol', 'bare_string', 'bare_symbol')
# `%w[]` and `%i[]` parse as string_array / symbol_array
ARRAY_TYPES = ('array', 'string_array', 'symbol_array')

_ESCAPES = {'n': '\n', 't': '\t', 's': ' ', '0': '\0'}


class StringValue(NamedTuple):
    """Text of a string-like literal; `interpolated` marks `#{...}` segments."""
    text: str
    interpolated: bool


def node_text(node: Node) -> str:
    return node.text.decode('utf-8', errors='replace')


def node_line(node: Node) -> int:
    """1-based line of a node's first byte."""
    return node.start_point[0] + 1


def string_value(node: Optional[Node]) -> Optional[StringValue]:
    """Read a string or symbol literal.

    Interpolated strings keep their `#{...}` markup verbatim. Returns None for
    anything that is not a string/symbol literal.
    """
    if node is None:
        return None
    if node.type == 'simple_symbol':
        return StringValue(node_text(node)[1:], False)
    if node.type == 'hash_key_symbol':
        return StringValue(node_text(node), False)
    if node.type in STRING_TYPES:
        parts = []
        interpolated = False
        for child in node.named_children:
            if child.type == 'escape_sequence':
                parts.append(_unescape(node_text(child)))
            elif child.type == 'interpolation':
                interpolated = True
                parts.append(node_text(child))
            else:
                parts.append(node_text(child))
        if not node.named_children and node.type in ('bare_string', 'bare_symbol'):
            parts.append(node_text(node))
        return StringValue(''.join(parts), interpolated)
    if node.type == 'chained_string':
        pieces = [string_value(child) for child in node.named_children]
        if any(piece is None for piece in pieces):
            return None
        return StringValue(''.join(piece.text for piece in pieces),
                           any(piece.interpolated for piece in pieces))
    return None


def read_value(node: Optional[Node]) -> Optional[OptionValue]:
    """Classify an option value node. `nil` reads as None (option absent)."""
    if node is None or node.type == 'nil':
        return None
    if node.type == 'integer':
        try:
            return IntegerLiteral(int(node_text(node).replace('_', ''), 0))
        except ValueError:
            return NonLiteral(node_text(node))
    if node.type in ARRAY_TYPES:
        values = []
        for element in node.named_children:
            value = string_value(element)
            if value is None or value.interpolated:
                return NonLiteral(node_text(node))
            values.append(value.text)
        return LiteralList(tuple(values))
    value = string_value(node)
    if value is None or value.interpolated:
        return NonLiteral(node_text(node))
    return Literal(value.text)


def literal_strings(value: Optional[OptionValue]) -> Optional[list]:
    """Flatten a Literal/LiteralList into a list of names; None if not static."""
    if isinstance(value, Literal):
        return [value.value]
    if isinstance(value, LiteralList):
        return list(value.values)
    return None


def _unescape(sequence: str) -> str:
    if len(sequence) == 2 and sequence[0] == '\\':
        return _ESCAPES.get(sequence[1], sequence[1])
    return sequence
